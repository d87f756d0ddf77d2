"""Cross-platform track matching and playlist population.

One run walks Created -> PopulatingTracks -> AddingBatches -> Completed.
Only failing to resolve the user or create the playlist aborts the run; a
track that cannot be found (or whose search errors) becomes a recorded miss,
and a batch that cannot be added moves its tracks to the failed list.
"""
import logging
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from relistify import config
from relistify.core.normalize import build_description, playlist_name
from relistify.models.playlist import ConversionResult, PlaylistData, Track

if TYPE_CHECKING:
    from relistify.core.platform import PlatformClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def _batches(items: List[tuple], size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class _Pacer:
    """Sleeps a fixed delay before every call except the first."""

    def __init__(self, delay: float, sleep: Callable[[float], None]) -> None:
        self._delay = delay
        self._sleep = sleep
        self._called = False

    def wait(self) -> None:
        if self._called and self._delay > 0:
            self._sleep(self._delay)
        self._called = True


def match_track(destination: "PlatformClient", track: Track, pacer: _Pacer) -> Optional[str]:
    """Scoped search first, one relaxed retry on a miss. Errors count as a miss."""
    for relaxed in (False, True):
        pacer.wait()
        try:
            found = destination.search_track(track, relaxed=relaxed)
        except Exception as e:
            logger.warning("Search failed for %r (relaxed=%s): %s", track.label, relaxed, e)
            found = None
        if found:
            return found
    return None


def convert_playlist(
    destination: "PlatformClient",
    playlist: PlaylistData,
    on_progress: Optional[ProgressCallback] = None,
    *,
    search_delay: Optional[float] = None,
    batch_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ConversionResult:
    """Create a playlist on destination and fill it with the best match for each source track."""
    search_delay = config.SEARCH_DELAY_SEC if search_delay is None else search_delay
    batch_delay = config.BATCH_DELAY_SEC if batch_delay is None else batch_delay
    platform_name = destination.platform.display_name

    user_id = destination.current_user_id()
    name = playlist_name(playlist.title, playlist.source_platform)
    description = build_description(
        playlist.description,
        playlist.original_url,
        playlist.source_platform,
        max_length=destination.max_description_length,
        separator=destination.description_separator,
    )
    playlist_id = destination.create_playlist(user_id, name, description)
    logger.info("Created %s playlist %s (%r)", platform_name, playlist_id, name)

    total = len(playlist.tracks)
    # (source index, track, destination id) and (source index, label)
    matched: List[Tuple[int, Track, str]] = []
    failed: List[Tuple[int, str]] = []
    search_pacer = _Pacer(search_delay, sleep)

    logger.info("Matching %d tracks on %s", total, platform_name)
    for index, track in enumerate(playlist.tracks):
        found = match_track(destination, track, search_pacer)
        if found:
            matched.append((index, track, found))
        else:
            logger.debug("No match for %r", track.label)
            failed.append((index, track.label))
        if on_progress is not None:
            on_progress(index + 1, total, track.title)

    added = 0
    batch_pacer = _Pacer(batch_delay, sleep)
    if matched:
        logger.info(
            "Adding %d tracks to %s in batches of %d",
            len(matched), playlist_id, destination.batch_size,
        )
    for batch in _batches(matched, destination.batch_size):
        batch_pacer.wait()
        try:
            destination.add_items(playlist_id, [item_id for _, _, item_id in batch])
        except Exception as e:
            logger.warning("Failed to add batch of %d tracks to %s: %s", len(batch), playlist_id, e)
            failed.extend((index, track.label) for index, track, _ in batch)
            continue
        added += len(batch)

    logger.info(
        "Conversion complete: %d added, %d failed (%s playlist %s)",
        added, len(failed), platform_name, playlist_id,
    )
    return ConversionResult(
        destination_playlist_id=playlist_id,
        destination_playlist_url=destination.playlist_url(playlist_id),
        added_count=added,
        failed_tracks=[label for _, label in sorted(failed)],
    )
