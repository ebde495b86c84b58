"""Heuristic text recovery from undecoded binary payloads.

This is not a format decoder. It keeps long runs of printable ASCII and
drops everything else, so record headers and compressed data vanish while
uncompressed prose survives.
"""

import re

from speedreader.errors import UnrecoverableBinaryFormat

_WHITESPACE_PATTERN = re.compile(r"\s+")
_NON_PRINTABLE_PATTERN = re.compile(r"[^\x20-\x7E\n]")


def _run_pattern(min_run_length: int) -> re.Pattern[bytes]:
    # Printable ASCII plus tab, LF, CR; runs must be strictly longer than the minimum
    return re.compile(rb"[\t\n\r\x20-\x7e]{%d,}" % (min_run_length + 1))


def salvage_text(data: bytes, min_run_length: int) -> str:
    """Collect printable runs longer than ``min_run_length`` bytes.

    Kept runs are joined with a single space, then whitespace is collapsed
    and anything outside printable ASCII (plus newline) is dropped.
    """
    runs = [m.group().decode("ascii") for m in _run_pattern(min_run_length).finditer(data)]
    text = _WHITESPACE_PATTERN.sub(" ", " ".join(runs))
    return _NON_PRINTABLE_PATTERN.sub("", text).strip()


def salvage_or_fail(
    data: bytes, min_run_length: int, min_output_length: int, hint: str
) -> str:
    """Salvage text, rejecting results shorter than ``min_output_length``.

    Raises:
        UnrecoverableBinaryFormat: If too little text was recovered.
    """
    text = salvage_text(data, min_run_length)
    if len(text) < min_output_length:
        raise UnrecoverableBinaryFormat(
            "Could not extract readable text from this file.", hint=hint
        )
    return text
