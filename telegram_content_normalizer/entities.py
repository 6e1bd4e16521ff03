"""Decode formatted text into plain and annotated segments.

Entity offsets and lengths are UTF-16 code units, so the text is sliced in
that unit as well; characters outside the BMP count as two.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Optional

from .models import (
    EntityKind,
    FormattedText,
    Markup,
    PlainText,
    Segment,
    TextEntity,
    parse_entity_kind,
)

logger = logging.getLogger(__name__)

# decodeURI leaves escapes of these characters untouched.
_RESERVED = frozenset(";/?:@&=+$,#")
_ESCAPE_RUN = re.compile(r"(?:%[0-9A-Fa-f]{2})+")
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class UriDecodeError(ValueError):
    """Raised when a URI contains malformed escapes or invalid UTF-8."""


def decode_uri(value: str) -> str:
    if _MALFORMED_ESCAPE.search(value):
        raise UriDecodeError(f"malformed percent escape in {value!r}")
    return _ESCAPE_RUN.sub(_decode_escape_run, value)


def _decode_escape_run(match: re.Match) -> str:
    run = match.group(0)
    escapes = [run[i : i + 3] for i in range(0, len(run), 3)]
    try:
        decoded = bytes(int(escape[1:], 16) for escape in escapes).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UriDecodeError(f"invalid UTF-8 sequence {run!r}") from exc

    parts: List[str] = []
    position = 0
    for char in decoded:
        width = len(char.encode("utf-8"))
        if width == 1 and char in _RESERVED:
            parts.append(escapes[position])
        else:
            parts.append(char)
        position += width
    return "".join(parts)


class _Utf16Text:
    __slots__ = ("_units",)

    def __init__(self, text: str) -> None:
        self._units = text.encode("utf-16-le", "surrogatepass")

    def __len__(self) -> int:
        return len(self._units) // 2

    def clamp(self, start: int, end: Optional[int] = None) -> tuple[int, int]:
        size = len(self)
        if end is None:
            end = size
        if start < 0:
            start = 0
        if start > size - 1:
            start = size - 1
        if end < start:
            end = start
        if end > size:
            end = size
        return start, end

    def slice(self, start: int, end: int) -> str:
        return self._units[start * 2 : end * 2].decode("utf-16-le", "surrogatepass")


def _with_scheme(url: str) -> str:
    return url if url.startswith("http") else f"http://{url}"


def _display_url(text: str) -> str:
    try:
        return decode_uri(text)
    except UriDecodeError as exc:
        logger.warning("Could not decode url %r: %s", text, exc)
        return text


def render_entity(entity: TextEntity, text: str) -> Segment:
    """Turn one entity slice into a segment according to its kind."""
    kind = parse_entity_kind(entity.kind)

    if kind is EntityKind.URL:
        url = _with_scheme(text)
        return Markup(kind, text, _display_url(text), url, {"url": url})

    if kind is EntityKind.TEXT_URL:
        url = _with_scheme(entity.url or "")
        return Markup(kind, text, text, url, {"url": url})

    if kind in (EntityKind.BOLD, EntityKind.ITALIC, EntityKind.CODE, EntityKind.PRE):
        return Markup(kind, text, text)

    if kind is EntityKind.MENTION:
        return Markup(kind, text, text, f"#/im?p={text}", {"username": text})

    if kind is EntityKind.MENTION_NAME:
        return Markup(
            kind,
            text,
            text,
            f"#/im?p=u{entity.user_id}",
            {"user_id": entity.user_id},
        )

    if kind is EntityKind.HASHTAG:
        hashtag = text[1:] if text.startswith("#") else text
        return Markup(
            kind,
            text,
            text,
            f"tg://search_hashtag?hashtag={hashtag}",
            {"hashtag": hashtag},
        )

    if kind is EntityKind.EMAIL_ADDRESS:
        return Markup(kind, text, text, f"mailto:{text}", {"email": text})

    if kind is EntityKind.BOT_COMMAND:
        command = text[1:] if text.startswith("/") else text
        return Markup(
            kind,
            text,
            text,
            f"tg://bot_command?command={command}&bot=",
            {"command": command, "bot": ""},
        )

    return PlainText(text)


def decode_formatted_text(formatted: Any) -> Optional[List[Segment]]:
    """Split formatted text into segments.

    Entities are walked in the order given. The cursor advances by the number
    of code units actually emitted for each gap and entity, not to the
    entity's declared end, so unsorted or overlapping entity lists are sliced
    relative to what has been consumed so far.

    Returns ``None`` for anything that is not a formatted text with content.
    """
    if not isinstance(formatted, FormattedText):
        formatted = FormattedText.from_dict(formatted)
    if formatted is None or not isinstance(formatted.text, str) or not formatted.text:
        return None

    source = _Utf16Text(formatted.text)
    segments: List[Segment] = []
    index = 0

    for entity in formatted.entities:
        gap_start, gap_end = source.clamp(index, entity.offset)
        if gap_end > gap_start:
            segments.append(PlainText(source.slice(gap_start, gap_end)))

        start, end = source.clamp(entity.offset, entity.offset + entity.length)
        entity_text = source.slice(start, end)
        segment = render_entity(entity, entity_text)
        if isinstance(segment, Markup) or segment.text:
            segments.append(segment)

        index += (gap_end - gap_start) + (end - start)

    if index < len(source):
        segments.append(PlainText(source.slice(index, len(source))))

    return segments


def segments_to_text(segments: Optional[Iterable[Segment]]) -> str:
    """Visible text of a segment sequence, ignoring markup."""
    if not segments:
        return ""
    return "".join(segment.text for segment in segments)
