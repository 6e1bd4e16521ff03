from __future__ import annotations

from typing import List, Optional, Protocol, Sequence, TypeVar

from .lookups import MessageLookup
from .models import ContentKind, MessageContent


class HasMessageId(Protocol):
    """Anything carrying a message id, e.g. ``MessageEnvelope``."""

    message_id: int


M = TypeVar("M", bound=HasMessageId)


def filter_history(
    result_messages: Sequence[M],
    history_messages: Sequence[HasMessageId],
) -> Sequence[M]:
    """Drop fetched messages that are already part of the held history.

    Returns ``result_messages`` itself when either side is empty, otherwise a
    new list keeping the original order of the survivors.
    """
    if not result_messages or not history_messages:
        return result_messages

    known_ids = {message.message_id for message in history_messages}
    survivors: List[M] = [
        message for message in result_messages if message.message_id not in known_ids
    ]
    return survivors


def is_media_content(content: Optional[MessageContent]) -> bool:
    if content is None:
        return False
    return content.kind == ContentKind.PHOTO


def _lookup_content(
    lookup: MessageLookup, chat_id: int, message_id: int
) -> Optional[MessageContent]:
    message = lookup.get(chat_id, message_id)
    if message is None:
        return None
    return message.content


def is_video_message(lookup: MessageLookup, chat_id: int, message_id: int) -> bool:
    content = _lookup_content(lookup, chat_id, message_id)
    if content is None:
        return False

    if content.kind == ContentKind.VIDEO:
        return True
    if content.kind == ContentKind.TEXT:
        return content.web_page is not None and content.web_page.has_video
    return False


def is_animation_message(lookup: MessageLookup, chat_id: int, message_id: int) -> bool:
    content = _lookup_content(lookup, chat_id, message_id)
    if content is None:
        return False

    if content.kind == ContentKind.ANIMATION:
        return True
    if content.kind == ContentKind.TEXT:
        return content.web_page is not None and content.web_page.has_animation
    return False


def is_content_opened(lookup: MessageLookup, chat_id: int, message_id: int) -> bool:
    """Whether the recipient has consumed the content.

    Only voice and video notes track this; missing messages count as opened.
    """
    content = _lookup_content(lookup, chat_id, message_id)
    if content is None:
        return True

    if content.kind == ContentKind.VOICE_NOTE:
        return content.is_listened
    if content.kind == ContentKind.VIDEO_NOTE:
        return content.is_viewed
    return True
