"""Conversions: scan a source playlist, then recreate it on the other platform in the background."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from relistify.api.cookies import resolve_session
from relistify.api.state import AppState, get_state
from relistify.core.conversion_job import ConversionJob, InvalidTransition, JobState
from relistify.core.errors import AuthError
from relistify.core.url_parser import parse_playlist_url

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateConversionBody(BaseModel):
    url: str


def _job_or_404(state: AppState, job_id: str) -> ConversionJob:
    job = state.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Conversion not found")
    return job


@router.get("")
def list_conversions(state: AppState = Depends(get_state)):
    return [job.snapshot() for job in state.list_jobs()]


@router.post("")
def create_conversion(
    body: CreateConversionBody,
    request: Request,
    response: Response,
    state: AppState = Depends(get_state),
):
    """Parse the link and read the source playlist. Returns the job in READY state."""
    parsed = parse_playlist_url(body.url)
    if parsed is None:
        raise HTTPException(
            status_code=400,
            detail="Unrecognized playlist URL. Paste a Spotify or YouTube Music playlist link.",
        )
    job = state.create_job()
    job.start_scan(parsed)
    try:
        session = resolve_session(request, response, parsed.platform, state)
        client = state.client_for(parsed.platform, session)
        playlist = client.fetch_playlist(parsed.playlist_id)
    except Exception as e:
        job.fail(e)
        raise
    job.scan_succeeded(playlist)
    logger.info(
        "Scanned %s playlist %s: %d tracks (job %s)",
        parsed.platform.value, parsed.playlist_id, len(playlist.tracks), job.job_id,
    )
    return job.snapshot()


@router.post("/{job_id}/start", status_code=202)
def start_conversion(
    job_id: str,
    request: Request,
    response: Response,
    state: AppState = Depends(get_state),
):
    """Start writing the scanned playlist to the other platform. Poll GET /{job_id} for progress."""
    job = _job_or_404(state, job_id)
    if job.state is not JobState.READY:
        raise HTTPException(status_code=409, detail=f"Conversion is {job.state.value}, not ready")
    destination = job.destination
    session = resolve_session(request, response, destination, state)
    client = state.client_for(destination, session)
    if not client.is_authenticated():
        raise AuthError(f"Not authenticated with {destination.display_name}. Please log in first.")
    try:
        job.start_converting()
    except InvalidTransition:
        raise HTTPException(status_code=409, detail=f"Conversion is {job.state.value}, not ready")
    state.start_worker(job, client)
    return job.snapshot()


@router.get("/{job_id}")
def get_conversion(job_id: str, state: AppState = Depends(get_state)):
    """Current state, progress and (when done) result of a conversion."""
    return _job_or_404(state, job_id).snapshot()
