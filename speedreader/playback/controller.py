"""RSVP playback state machine.

The controller owns the reading cursor while a session is active. It
advances on a single-slot timer: at most one tick is ever scheduled, and
every state-changing operation cancels the pending tick before acting.
"""

import logging
import math
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from speedreader.config import PlaybackConfig
from speedreader.models.document import progress_percent
from speedreader.playback.engine import RSVPWord, calculate_delay, process_word

logger = logging.getLogger(__name__)

PositionListener = Callable[[int], None]
CompletionListener = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with ``call_later``; an asyncio event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class PlaybackStatus(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"  # paused on the final word


class PlaybackState(BaseModel):
    """Read-only snapshot of a controller."""

    model_config = ConfigDict(frozen=True)

    position: int
    status: PlaybackStatus
    wpm: int
    word_count: int

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.PLAYING

    @property
    def is_completed(self) -> bool:
        return self.status is PlaybackStatus.COMPLETED


class PlaybackController:
    """Advances a cursor through a token sequence at a timed rate.

    Transitions: ``Stopped -> Playing <-> Paused``, with ``Completed``
    entered when the cursor lands on the last token. Every cursor change
    notifies position listeners; persistence throttling is the listener's
    concern.

    Args:
        words: Tokenized document.
        scheduler: Timer source; ``call_later`` takes seconds.
        wpm: Initial reading rate, clamped to the configured range.
        punctuation_pause: Extra milliseconds after sentence punctuation.
        position: Starting cursor, e.g. a saved reading position.
        config: PlaybackConfig with rate bounds and skip sizes.
    """

    def __init__(
        self,
        words: Sequence[str],
        scheduler: Scheduler,
        wpm: int = 300,
        punctuation_pause: float = 150,
        position: int = 0,
        config: PlaybackConfig | None = None,
    ) -> None:
        self._words = list(words)
        self._scheduler = scheduler
        self._config = config or PlaybackConfig()
        self._punctuation_pause = punctuation_pause
        self._wpm = self._clamp_rate(self._validate_rate(wpm))
        self._position = self._clamp_position(position)
        self._status = PlaybackStatus.STOPPED
        self._handle: TimerHandle | None = None
        self._position_listeners: list[PositionListener] = []
        self._completion_listeners: list[CompletionListener] = []

    # ── Observation ─────────────────────────────────────────────────────────

    @property
    def position(self) -> int:
        return self._position

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def wpm(self) -> int:
        return self._wpm

    @property
    def word_count(self) -> int:
        return len(self._words)

    @property
    def last_index(self) -> int:
        return len(self._words) - 1

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            position=self._position,
            status=self._status,
            wpm=self._wpm,
            word_count=len(self._words),
        )

    @property
    def progress(self) -> int:
        """Reading progress as a rounded percentage."""
        return progress_percent(self._position, len(self._words))

    @property
    def time_remaining_seconds(self) -> float:
        """Estimate at the current rate, ignoring punctuation pauses."""
        remaining = max(len(self._words) - self._position - 1, 0)
        return remaining * 60 / self._wpm

    def current_word(self) -> RSVPWord:
        if not self._words:
            return process_word("")
        return process_word(self._words[self._position])

    def on_position_change(self, callback: PositionListener) -> None:
        self._position_listeners.append(callback)

    def on_completed(self, callback: CompletionListener) -> None:
        self._completion_listeners.append(callback)

    # ── Operations ──────────────────────────────────────────────────────────

    def play(self) -> None:
        """Start or resume playback.

        A no-op when already playing, when completed (use ``restart``), or
        when there is nothing to read.
        """
        if not self._words or self._status in (
            PlaybackStatus.PLAYING,
            PlaybackStatus.COMPLETED,
        ):
            return
        if self._position >= self.last_index:
            self._complete()
            return
        self._status = PlaybackStatus.PLAYING
        self._schedule_next()

    def pause(self) -> None:
        if self._status is not PlaybackStatus.PLAYING:
            return
        self._cancel_pending()
        self._status = PlaybackStatus.PAUSED

    def toggle(self) -> None:
        if self._status is PlaybackStatus.PLAYING:
            self.pause()
        else:
            self.play()

    def tick(self) -> None:
        """Advance one word. Normally fired by the scheduler."""
        self._cancel_pending()
        if not self._words or self._position >= self.last_index:
            return
        self._position += 1
        self._notify_position()
        if self._position >= self.last_index:
            self._complete()
        elif self._status is PlaybackStatus.PLAYING:
            self._schedule_next()

    def seek(self, delta: int) -> None:
        """Move the cursor by ``delta`` words, clamped to the document.

        Playing/paused state is kept. While playing, the pending tick is
        replaced by one timed for the new word.
        """
        if not self._words:
            return
        was_playing = self._status is PlaybackStatus.PLAYING
        self._cancel_pending()
        self._position = self._clamp_position(self._position + delta)
        if self._status is PlaybackStatus.COMPLETED and self._position < self.last_index:
            self._status = PlaybackStatus.PAUSED
        self._notify_position()

        if was_playing:
            if self._position >= self.last_index:
                self._complete()
            else:
                self._schedule_next()

    def skip_forward(self) -> None:
        self.seek(self._config.skip_words)

    def skip_backward(self) -> None:
        self.seek(-self._config.skip_words)

    def restart(self) -> None:
        """Return to the first word, paused."""
        self._cancel_pending()
        self._position = 0
        self._status = PlaybackStatus.PAUSED
        self._notify_position()

    def set_rate(self, wpm: int) -> None:
        """Change the reading rate for ticks scheduled from now on.

        Raises:
            ValueError: If ``wpm`` is not a positive number; the previous
                rate stays in effect.
        """
        self._wpm = self._clamp_rate(self._validate_rate(wpm))
        logger.debug("Playback rate set to %d wpm", self._wpm)

    def faster(self) -> None:
        self.set_rate(self._wpm + self._config.wpm_step)

    def slower(self) -> None:
        self.set_rate(self._wpm - self._config.wpm_step)

    def set_punctuation_pause(self, milliseconds: float) -> None:
        if milliseconds < 0:
            raise ValueError(f"Punctuation pause must be non-negative, got {milliseconds}")
        self._punctuation_pause = milliseconds

    def close(self) -> None:
        """Stop playback and flush the final position to listeners."""
        self._cancel_pending()
        if self._status is PlaybackStatus.PLAYING:
            self._status = PlaybackStatus.PAUSED
        self._notify_position()

    # ── Internals ───────────────────────────────────────────────────────────

    def _schedule_next(self) -> None:
        delay_ms = calculate_delay(
            self._words[self._position], self._wpm, self._punctuation_pause
        )
        self._handle = self._scheduler.call_later(delay_ms / 1000, self.tick)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _complete(self) -> None:
        self._cancel_pending()
        self._status = PlaybackStatus.COMPLETED
        logger.debug("Playback completed at word %d", self._position)
        for listener in list(self._completion_listeners):
            listener()

    def _notify_position(self) -> None:
        for listener in list(self._position_listeners):
            listener(self._position)

    def _clamp_position(self, position: int) -> int:
        if not self._words:
            return 0
        return max(0, min(position, len(self._words) - 1))

    def _validate_rate(self, wpm: int) -> int:
        if (
            isinstance(wpm, bool)
            or not isinstance(wpm, (int, float))
            or not math.isfinite(wpm)
            or wpm <= 0
        ):
            raise ValueError(f"Reading rate must be a positive number, got {wpm!r}")
        return int(wpm)

    def _clamp_rate(self, wpm: int) -> int:
        return max(self._config.min_wpm, min(wpm, self._config.max_wpm))
