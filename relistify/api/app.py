"""FastAPI app, CORS, error handling, and route registration."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from relistify import config

# Configure logging in the worker process (so converter INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(levelname)s: %(name)s: %(message)s",
)

from relistify.api.state import AppState, get_state
from relistify.core.errors import RelistifyError
from relistify.models.playlist import Platform

# Import routes after state to avoid circular imports
from relistify.api.routes import auth, conversions, playlists

__all__ = ["app", "AppState", "get_state"]

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Relistify API",
    description="Recreate a Spotify playlist on YouTube Music and vice versa",
)
# Token cookies travel with credentialed requests, so origins must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.RELISTIFY_WEB_ORIGIN] if config.RELISTIFY_WEB_ORIGIN else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RelistifyError)
async def relistify_error_handler(request: Request, exc: RelistifyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/api/health")
def health():
    return {"ok": True}


app.include_router(auth.build_router(Platform.SPOTIFY), prefix="/api/spotify", tags=["spotify"])
app.include_router(auth.build_router(Platform.YOUTUBE), prefix="/api/youtube", tags=["youtube"])
app.include_router(playlists.router, prefix="/api/playlists", tags=["playlists"])
app.include_router(conversions.router, prefix="/api/conversions", tags=["conversions"])
