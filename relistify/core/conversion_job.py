"""One user-visible conversion: IDLE -> SCANNING -> READY -> CONVERTING -> DONE | FAILED.

The state field is the single source of truth; progress and result are
recorded only through the transition methods, and snapshot() is a pure
projection of them.
"""
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from relistify.core.errors import RelistifyError
from relistify.models.playlist import ConversionResult, ParsedUrl, Platform, PlaylistData


class JobState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    READY = "ready"
    CONVERTING = "converting"
    DONE = "done"
    FAILED = "failed"


_ALLOWED = {
    JobState.IDLE: {JobState.SCANNING},
    JobState.SCANNING: {JobState.READY, JobState.FAILED},
    JobState.READY: {JobState.CONVERTING},
    JobState.CONVERTING: {JobState.DONE, JobState.FAILED},
    JobState.DONE: set(),
    JobState.FAILED: set(),
}


class InvalidTransition(Exception):
    def __init__(self, current: JobState, target: JobState) -> None:
        super().__init__(f"Cannot go from {current.value} to {target.value}")
        self.current = current
        self.target = target


class ConversionJob:
    def __init__(self, job_id: Optional[str] = None) -> None:
        self.job_id = job_id or str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc).isoformat()
        self._lock = threading.Lock()
        self._state = JobState.IDLE
        self._source: Optional[ParsedUrl] = None
        self._playlist: Optional[PlaylistData] = None
        self._current = 0
        self._total = 0
        self._track_title = ""
        self._result: Optional[ConversionResult] = None
        self._error: Optional[dict] = None

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def finished(self) -> bool:
        return not _ALLOWED[self._state]

    @property
    def playlist(self) -> Optional[PlaylistData]:
        return self._playlist

    @property
    def destination(self) -> Optional[Platform]:
        return self._source.platform.other if self._source else None

    def _move(self, target: JobState) -> None:
        if target not in _ALLOWED[self._state]:
            raise InvalidTransition(self._state, target)
        self._state = target

    def start_scan(self, source: ParsedUrl) -> None:
        with self._lock:
            self._move(JobState.SCANNING)
            self._source = source

    def scan_succeeded(self, playlist: PlaylistData) -> None:
        with self._lock:
            self._move(JobState.READY)
            self._playlist = playlist
            self._total = len(playlist.tracks)

    def start_converting(self) -> None:
        with self._lock:
            self._move(JobState.CONVERTING)
            self._current = 0
            self._track_title = ""

    def report_progress(self, current: int, total: int, track_title: str) -> None:
        """Progress callback handed to the converter."""
        with self._lock:
            if self._state is not JobState.CONVERTING:
                raise InvalidTransition(self._state, JobState.CONVERTING)
            self._current = current
            self._total = total
            self._track_title = track_title

    def finish(self, result: ConversionResult) -> None:
        with self._lock:
            self._move(JobState.DONE)
            self._result = result

    def fail(self, error: Exception) -> None:
        with self._lock:
            self._move(JobState.FAILED)
            if isinstance(error, RelistifyError):
                self._error = error.to_dict()
            else:
                self._error = {"error": "internal_error", "detail": str(error) or type(error).__name__}

    def snapshot(self) -> dict:
        with self._lock:
            percent = int(self._current * 100 / self._total) if self._total else 0
            if self._state is JobState.DONE:
                percent = 100
            return {
                "job_id": self.job_id,
                "created_at": self.created_at,
                "state": self._state.value,
                "source": self._source.to_dict() if self._source else None,
                "destination": self.destination.value if self.destination else None,
                "playlist": self._playlist.to_dict() if self._playlist else None,
                "progress": {
                    "current": self._current,
                    "total": self._total,
                    "track_title": self._track_title,
                    "percent": percent,
                },
                "result": self._result.to_dict() if self._result else None,
                "error": self._error,
            }
