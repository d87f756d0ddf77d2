"""Shared application state (injected into routes): platform clients and in-memory conversion jobs."""
import logging
import threading
from typing import Callable, Dict, List, Optional

from relistify import config
from relistify.core.conversion_job import ConversionJob
from relistify.core.platform import PlatformClient
from relistify.core.spotify_client import SpotifyPlatformClient
from relistify.core.youtube_client import YouTubePlatformClient
from relistify.models.playlist import Platform
from relistify.models.session import AuthSession

logger = logging.getLogger(__name__)

_CLIENTS = {
    Platform.SPOTIFY: SpotifyPlatformClient,
    Platform.YOUTUBE: YouTubePlatformClient,
}


def run_conversion(
    job: ConversionJob,
    client: PlatformClient,
    on_done: Optional[Callable[[ConversionJob], None]] = None,
) -> None:
    """Worker body: populate the destination and record the outcome on the job."""
    try:
        result = client.create_and_populate_playlist(job.playlist, on_progress=job.report_progress)
    except Exception as e:
        logger.warning("Conversion %s failed: %s", job.job_id, e)
        job.fail(e)
    else:
        job.finish(result)
    finally:
        if on_done is not None:
            on_done(job)


class AppState:
    def __init__(self) -> None:
        self._jobs: Dict[str, ConversionJob] = {}
        self._workers: Dict[str, threading.Thread] = {}
        self._lock = threading.Lock()

    def client_for(self, platform: Platform, session: Optional[AuthSession] = None) -> PlatformClient:
        """Build a client for platform; raises ConfigurationError if its credentials are missing."""
        return _CLIENTS[platform](session)

    def create_job(self) -> ConversionJob:
        job = ConversionJob()
        with self._lock:
            self._prune_finished()
            self._jobs[job.job_id] = job
        return job

    def _prune_finished(self, keep: Optional[str] = None) -> None:
        # caller holds _lock; dicts keep creation order so the oldest go first
        finished = [job_id for job_id, job in self._jobs.items() if job.finished and job_id != keep]
        excess = len(finished) - config.MAX_FINISHED_JOBS
        for job_id in finished[:max(0, excess)]:
            del self._jobs[job_id]

    def _worker_done(self, job: ConversionJob) -> None:
        with self._lock:
            self._workers.pop(job.job_id, None)
            self._prune_finished(keep=job.job_id)

    def get_job(self, job_id: str) -> Optional[ConversionJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> List[ConversionJob]:
        with self._lock:
            return list(self._jobs.values())

    def start_worker(self, job: ConversionJob, client: PlatformClient) -> threading.Thread:
        """Run the conversion in a daemon thread; the job must already be CONVERTING."""
        worker = threading.Thread(
            target=run_conversion,
            args=(job, client, self._worker_done),
            name=f"conversion-{job.job_id}",
            daemon=True,
        )
        with self._lock:
            self._workers[job.job_id] = worker
        worker.start()
        logger.info("Conversion %s started (%s)", job.job_id, client.platform.value)
        return worker

    def wait_for(self, job_id: str, timeout: Optional[float] = None) -> None:
        with self._lock:
            worker = self._workers.get(job_id)
        if worker is not None:
            worker.join(timeout=timeout)


_state = AppState()


def get_state() -> AppState:
    return _state
