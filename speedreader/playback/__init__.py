"""RSVP playback: word timing and the playback state machine."""

from speedreader.playback.controller import (
    PlaybackController,
    PlaybackState,
    PlaybackStatus,
)
from speedreader.playback.engine import (
    RSVPWord,
    calculate_delay,
    orp_index,
    process_word,
    tokenize,
)

__all__ = [
    "PlaybackController",
    "PlaybackState",
    "PlaybackStatus",
    "RSVPWord",
    "calculate_delay",
    "orp_index",
    "process_word",
    "tokenize",
]
