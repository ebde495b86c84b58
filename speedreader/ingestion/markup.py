"""Rule-driven markup stripping for HTML, XML payloads, RTF and FB2.

A single routine removes markup from a raw text blob. Each format supplies
a ``MarkupRules`` table; no format has its own parser.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

Replacement = str | Callable[[re.Match[str]], str]

ENTITIES: dict[str, str] = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
}

_ENTITY_PATTERN = re.compile("|".join(re.escape(name) for name in ENTITIES))
_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_FLAGS = re.IGNORECASE | re.DOTALL


@dataclass(frozen=True)
class MarkupRules:
    """Per-format stripping rules.

    Attributes:
        remove_blocks: Element names removed together with their bodies.
        substitutions: Ordered (pattern, replacement) pairs applied before
            generic tag stripping, e.g. paragraph tags to newlines.
        tag_replacement: What any remaining ``<...>`` tag becomes, or None
            to leave angle brackets alone.
        decode_entities: Whether to decode the fixed entity table.
    """

    remove_blocks: tuple[str, ...] = ()
    substitutions: tuple[tuple[str, Replacement], ...] = ()
    tag_replacement: str | None = " "
    decode_entities: bool = True


def _block_pattern(tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(rf"<{name}\b[^>]*/>|<{name}\b[^>]*>.*?</{name}\s*>", _FLAGS)


def _decode_entities(text: str) -> str:
    # Single pass so "&amp;lt;" decodes to "&lt;", not "<"
    return _ENTITY_PATTERN.sub(lambda m: ENTITIES[m.group(0)], text)


def strip_markup(raw: str, rules: MarkupRules) -> str:
    """Remove markup from ``raw`` according to ``rules``.

    Whitespace runs in the result, including any newlines introduced by
    substitutions, are collapsed to single spaces and the result is trimmed.
    """
    text = raw
    for tag in rules.remove_blocks:
        text = _block_pattern(tag).sub("", text)

    for pattern, replacement in rules.substitutions:
        text = re.sub(pattern, replacement, text, flags=_FLAGS)

    if rules.tag_replacement is not None:
        text = _TAG_PATTERN.sub(rules.tag_replacement, text)

    if rules.decode_entities:
        text = _decode_entities(text)

    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def _rtf_hex_escape(match: re.Match[str]) -> str:
    return bytes([int(match.group(1), 16)]).decode("cp1252", errors="replace")


HTML_RULES = MarkupRules(
    remove_blocks=("script", "style"),
    substitutions=((r"<!--.*?-->", ""),),
)

# XHTML bodies inside EPUB containers
XHTML_RULES = HTML_RULES

DOCX_RULES = MarkupRules(
    substitutions=(
        (r"<w:p(?:\s[^>]*)?/?>", "\n"),
        (r"<w:br\b[^>]*>", "\n"),
        (r"<w:cr\b[^>]*>", "\n"),
        (r"<w:tab\b[^>]*>", " "),
    ),
    tag_replacement="",
)

ODT_RULES = MarkupRules(
    substitutions=(
        (r"<text:p(?:\s[^>]*)?/?>", "\n"),
        (r"<text:h(?:\s[^>]*)?/?>", "\n"),
        (r"<text:line-break\b[^>]*>", "\n"),
        (r"<text:tab\b[^>]*>", " "),
        (r"<text:s\b[^>]*>", " "),
    ),
    tag_replacement="",
)

RTF_RULES = MarkupRules(
    substitutions=(
        (r"\\'([0-9a-f]{2})", _rtf_hex_escape),
        (r"\\par\b\s?", "\n"),
        (r"\\line\b\s?", "\n"),
        (r"\\[a-z]+-?\d*\s?", ""),
        (r"\\[^a-z]", ""),
        (r"[{}]", ""),
    ),
    tag_replacement=None,
    decode_entities=False,
)

FB2_RULES = MarkupRules(
    remove_blocks=("binary", "description"),
    substitutions=(
        (r"<p(?:\s[^>]*)?>", "\n"),
        (r"<empty-line\s*/>", "\n\n"),
    ),
    tag_replacement="",
)
