"""Accessors over message records used by list and bubble views.

All lookups are passed in explicitly; every accessor returns ``None``,
``False`` or an empty list when the message or the referenced record is
missing.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Union

from dateutil.tz import gettz

from .config import MapTileConfig
from .entities import decode_formatted_text
from .lookups import ChatLookup, UserLookup
from .models import (
    ContentKind,
    Location,
    MessageEnvelope,
    PlainText,
    Segment,
    WebPage,
)

FORWARDED_FROM_USER = "messageForwardedFromUser"
FORWARDED_POST = "messageForwardedPost"


def get_title(
    message: Optional[MessageEnvelope],
    users: UserLookup,
    chats: ChatLookup,
) -> Optional[str]:
    if message is None:
        return None

    if message.sender_user_id:
        user = users.get(message.sender_user_id)
        return user.full_name if user else None

    if message.chat_id:
        chat = chats.get(message.chat_id)
        return chat.title if chat else None

    return None


def get_text(message: Optional[MessageEnvelope]) -> Optional[List[Segment]]:
    """Decoded body of a text message, or a line break plus the caption."""
    if message is None:
        return None

    content = message.content
    if content is None:
        return []

    if content.kind == ContentKind.TEXT and content.text and content.text.text:
        return decode_formatted_text(content.text) or []

    segments: List[Segment] = []
    if content.caption and content.caption.text:
        segments.append(PlainText("\n"))
        segments.extend(decode_formatted_text(content.caption) or [])
    return segments


def get_web_page(message: Optional[MessageEnvelope]) -> Optional[WebPage]:
    if message is None or message.content is None:
        return None
    return message.content.web_page


def get_reply(message: Optional[MessageEnvelope]) -> Optional[int]:
    if message is None or not message.reply_to_message_id:
        return None
    return message.reply_to_message_id


def get_sender_user_id(message: Optional[MessageEnvelope]) -> Optional[int]:
    if message is None:
        return None
    return message.sender_user_id


def get_forward(
    message: Optional[MessageEnvelope],
    users: UserLookup,
    chats: ChatLookup,
) -> Optional[str]:
    if message is None or message.forward_info is None:
        return None

    forward_info = message.forward_info
    if forward_info.kind == FORWARDED_FROM_USER and forward_info.sender_user_id is not None:
        user = users.get(forward_info.sender_user_id)
        if user:
            return user.full_name
    elif forward_info.kind == FORWARDED_POST and forward_info.chat_id is not None:
        chat = chats.get(forward_info.chat_id)
        if chat:
            return chat.title

    return None


def get_unread(message: Optional[MessageEnvelope], chats: ChatLookup) -> bool:
    """Outgoing messages stay unread until the peer's read marker passes them."""
    if message is None or not message.chat_id or not message.is_outgoing:
        return False

    chat = chats.get(message.chat_id)
    if chat is None:
        return False

    return chat.last_read_outbox_message_id < message.message_id


def _localized_date(message: Optional[MessageEnvelope], timezone_name: str) -> Optional[datetime]:
    if message is None or not message.date:
        return None
    tzinfo = gettz(timezone_name) or timezone.utc
    return datetime.fromtimestamp(message.date, tz=tzinfo)


def get_date(message: Optional[MessageEnvelope], timezone_name: str = "UTC") -> Optional[str]:
    localized = _localized_date(message, timezone_name)
    if localized is None:
        return None
    return f"{localized.hour}:{localized.minute:02d}"


def get_date_hint(message: Optional[MessageEnvelope], timezone_name: str = "UTC") -> Optional[str]:
    localized = _localized_date(message, timezone_name)
    if localized is None:
        return None
    return (
        f"{localized.hour}:{localized.minute:02d}:{localized.second:02d} "
        f"{localized.day}.{localized.month:02d}.{localized.year}"
    )


def _format_number(value: Union[int, float]) -> str:
    """Shortest round-trip form of a number, laid out like JavaScript prints it.

    Integral values drop the fraction, magnitudes in [1e-6, 1e21) are written
    positionally and anything else uses an exponent (``1e-7``, ``1.5e+21``).
    """
    value = float(value)
    if value != value:
        return "NaN"
    if value in (float("inf"), float("-inf")):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digit_tuple)
    prefix = "-" if sign else ""
    k = len(digits)
    n = k + exponent

    if k <= n <= 21:
        return prefix + digits + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + digits

    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    return f"{prefix}{mantissa}e{n - 1:+d}"


def get_location_id(
    location: Optional[Location],
    tiles: Optional[MapTileConfig] = None,
) -> Optional[str]:
    """Cache key of the static map tile shown for a location."""
    if location is None:
        return None

    tiles = tiles or MapTileConfig()
    return (
        f"loc={_format_number(location.latitude)},{_format_number(location.longitude)}"
        f"&size={tiles.width},{tiles.height}&scale={tiles.scale}&zoom={tiles.zoom}"
    )


def get_venue_id(
    location: Optional[Location],
    tiles: Optional[MapTileConfig] = None,
) -> Optional[str]:
    return get_location_id(location, tiles)
