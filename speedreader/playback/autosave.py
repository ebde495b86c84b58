"""Coalescing of playback position notifications into periodic saves."""

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PositionAutosaver:
    """Position listener that persists at most once per interval.

    Register it with ``PlaybackController.on_position_change``. The latest
    position is always kept; ``flush`` writes it out, and should be called
    when a reading session ends.

    Args:
        save: Persists a word position, e.g. ``DocumentStore.update_progress``
            bound to a document id.
        interval_seconds: Minimum time between saves.
        enabled: When False, only ``flush`` saves.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        save: Callable[[int], None],
        interval_seconds: float = 30.0,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._save = save
        self._interval = interval_seconds
        self._enabled = enabled
        self._clock = clock
        self._last_saved_at = clock()
        self._pending: int | None = None

    def __call__(self, position: int) -> None:
        self._pending = position
        if self._enabled and self._clock() - self._last_saved_at >= self._interval:
            self.flush()

    @property
    def pending(self) -> int | None:
        return self._pending

    def flush(self) -> None:
        if self._pending is None:
            return
        position, self._pending = self._pending, None
        self._last_saved_at = self._clock()
        logger.debug("Saving reading position %d", position)
        self._save(position)
