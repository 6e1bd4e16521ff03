from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .localization import identity
from .models import ContentKind, MessageContent, MessageEnvelope

Localize = Callable[[str], str]
ServiceMessageFormatter = Callable[[MessageEnvelope], str]

ATTACHMENT_KEYS: Mapping[ContentKind, str] = {
    ContentKind.ANIMATION: "AttachGif",
    ContentKind.AUDIO: "AttachAudio",
    ContentKind.CALL: "Call",
    ContentKind.CONTACT: "AttachContact",
    ContentKind.DOCUMENT: "AttachDocument",
    ContentKind.EXPIRED_PHOTO: "AttachPhoto",
    ContentKind.EXPIRED_VIDEO: "AttachVideo",
    ContentKind.GAME: "AttachGame",
    ContentKind.LOCATION: "AttachLocation",
    ContentKind.PHOTO: "AttachPhoto",
    ContentKind.STICKER: "AttachSticker",
    ContentKind.VENUE: "AttachLocation",
    ContentKind.VIDEO: "AttachVideo",
    ContentKind.VIDEO_NOTE: "AttachRound",
    ContentKind.VOICE_NOTE: "AttachAudio",
}

SERVICE_KINDS = frozenset(
    {
        ContentKind.BASIC_GROUP_CHAT_CREATE,
        ContentKind.CHAT_ADD_MEMBERS,
        ContentKind.CHAT_CHANGE_PHOTO,
        ContentKind.CHAT_CHANGE_TITLE,
        ContentKind.CHAT_DELETE_MEMBER,
        ContentKind.CHAT_DELETE_PHOTO,
        ContentKind.CHAT_JOIN_BY_LINK,
        ContentKind.CHAT_SET_TTL,
        ContentKind.CHAT_UPGRADE_FROM,
        ContentKind.CHAT_UPGRADE_TO,
        ContentKind.CONTACT_REGISTERED,
        ContentKind.CUSTOM_SERVICE_ACTION,
        ContentKind.GAME_SCORE,
        ContentKind.INVOICE,
        ContentKind.PASSPORT_DATA_RECEIVED,
        ContentKind.PASSPORT_DATA_SENT,
        ContentKind.PAYMENT_SUCCESSFUL,
        ContentKind.PAYMENT_SUCCESSFUL_BOT,
        ContentKind.PIN_MESSAGE,
        ContentKind.SCREENSHOT_TAKEN,
        ContentKind.SUPERGROUP_CHAT_CREATE,
        ContentKind.UNSUPPORTED,
        ContentKind.WEBSITE_CONNECTED,
    }
)


def caption_suffix(content: MessageContent) -> str:
    caption = content.caption_text
    return f", {caption}" if caption else ""


def bracket_service_formatter(message: MessageEnvelope) -> str:
    """Stand-in formatter that names the service event by its tag."""
    kind = message.content.kind if message.content else ""
    kind = kind.value if isinstance(kind, ContentKind) else kind
    return f"[{kind}]"


def summarize_content(
    content: Optional[MessageContent],
    *,
    ttl: int = 0,
    localize: Localize = identity,
    service_formatter: ServiceMessageFormatter = bracket_service_formatter,
    message: Optional[MessageEnvelope] = None,
) -> Optional[str]:
    """One-line description of a message payload, e.g. for chat list previews.

    Self-destructing content (``ttl > 0``) and service events are handed to
    ``service_formatter`` whatever their kind. The formatter receives the whole
    ``message`` so it can name the sender or the chat; bare content is wrapped
    in an envelope without ids.
    """
    if content is None:
        return None

    if message is None or message.content is not content:
        message = MessageEnvelope(message_id=0, content=content, ttl=ttl)

    if ttl > 0:
        return service_formatter(message)

    kind = content.kind
    if kind == ContentKind.TEXT:
        text = content.text.text if content.text else ""
        return text + caption_suffix(content)

    key = ATTACHMENT_KEYS.get(kind)
    if key is not None:
        return localize(key) + caption_suffix(content)

    if kind in SERVICE_KINDS:
        return service_formatter(message)

    return localize("UnsupportedAttachment")


@dataclass(slots=True)
class MessageSummarizer:
    localize: Localize = identity
    service_formatter: ServiceMessageFormatter = bracket_service_formatter

    def summarize(
        self,
        content: Optional[MessageContent],
        ttl: int = 0,
        message: Optional[MessageEnvelope] = None,
    ) -> Optional[str]:
        return summarize_content(
            content,
            ttl=ttl,
            localize=self.localize,
            service_formatter=self.service_formatter,
            message=message,
        )

    def summarize_message(self, message: Optional[MessageEnvelope]) -> Optional[str]:
        if message is None:
            return None
        return self.summarize(message.content, ttl=message.ttl, message=message)
