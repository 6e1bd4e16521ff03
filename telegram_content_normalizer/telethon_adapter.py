"""Map Telethon message objects onto the normalized model.

Entities and service actions are matched on their Telethon classes; media is
inspected through message attributes, so anything shaped like a Telethon
message (including test doubles) can be converted.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

from telethon.tl import types

from .message_info import FORWARDED_FROM_USER, FORWARDED_POST
from .models import (
    ContentKind,
    EntityKind,
    ForwardInfo,
    FormattedText,
    Location,
    MessageContent,
    MessageEnvelope,
    TextEntity,
    WebPage,
)
from .summary import MessageSummarizer

ENTITY_KINDS = {
    types.MessageEntityUrl: EntityKind.URL,
    types.MessageEntityTextUrl: EntityKind.TEXT_URL,
    types.MessageEntityBold: EntityKind.BOLD,
    types.MessageEntityItalic: EntityKind.ITALIC,
    types.MessageEntityCode: EntityKind.CODE,
    types.MessageEntityPre: EntityKind.PRE,
    types.MessageEntityMention: EntityKind.MENTION,
    types.MessageEntityMentionName: EntityKind.MENTION_NAME,
    types.MessageEntityHashtag: EntityKind.HASHTAG,
    types.MessageEntityEmail: EntityKind.EMAIL_ADDRESS,
    types.MessageEntityBotCommand: EntityKind.BOT_COMMAND,
}

ACTION_KINDS = {
    types.MessageActionChatCreate: ContentKind.BASIC_GROUP_CHAT_CREATE,
    types.MessageActionChatAddUser: ContentKind.CHAT_ADD_MEMBERS,
    types.MessageActionChatEditPhoto: ContentKind.CHAT_CHANGE_PHOTO,
    types.MessageActionChatEditTitle: ContentKind.CHAT_CHANGE_TITLE,
    types.MessageActionChatDeleteUser: ContentKind.CHAT_DELETE_MEMBER,
    types.MessageActionChatDeletePhoto: ContentKind.CHAT_DELETE_PHOTO,
    types.MessageActionChatJoinedByLink: ContentKind.CHAT_JOIN_BY_LINK,
    types.MessageActionSetMessagesTTL: ContentKind.CHAT_SET_TTL,
    types.MessageActionChannelMigrateFrom: ContentKind.CHAT_UPGRADE_FROM,
    types.MessageActionChatMigrateTo: ContentKind.CHAT_UPGRADE_TO,
    types.MessageActionContactSignUp: ContentKind.CONTACT_REGISTERED,
    types.MessageActionCustomAction: ContentKind.CUSTOM_SERVICE_ACTION,
    types.MessageActionGameScore: ContentKind.GAME_SCORE,
    types.MessageActionSecureValuesSent: ContentKind.PASSPORT_DATA_SENT,
    types.MessageActionSecureValuesSentMe: ContentKind.PASSPORT_DATA_RECEIVED,
    types.MessageActionPaymentSent: ContentKind.PAYMENT_SUCCESSFUL,
    types.MessageActionPaymentSentMe: ContentKind.PAYMENT_SUCCESSFUL_BOT,
    types.MessageActionPinMessage: ContentKind.PIN_MESSAGE,
    types.MessageActionScreenshotTaken: ContentKind.SCREENSHOT_TAKEN,
    types.MessageActionChannelCreate: ContentKind.SUPERGROUP_CHAT_CREATE,
    types.MessageActionBotAllowed: ContentKind.WEBSITE_CONNECTED,
    types.MessageActionPhoneCall: ContentKind.CALL,
}

# Checked in order: voice and round videos are documents too, venues carry geo.
_MEDIA_ATTRIBUTES = (
    ("voice", ContentKind.VOICE_NOTE),
    ("video_note", ContentKind.VIDEO_NOTE),
    ("gif", ContentKind.ANIMATION),
    ("sticker", ContentKind.STICKER),
    ("video", ContentKind.VIDEO),
    ("audio", ContentKind.AUDIO),
    ("photo", ContentKind.PHOTO),
    ("game", ContentKind.GAME),
    ("invoice", ContentKind.INVOICE),
    ("venue", ContentKind.VENUE),
    ("geo", ContentKind.LOCATION),
    ("contact", ContentKind.CONTACT),
    ("document", ContentKind.DOCUMENT),
)


def entity_from_telethon(entity: Any) -> TextEntity:
    entity_type = type(entity)
    return TextEntity(
        offset=getattr(entity, "offset", 0),
        length=getattr(entity, "length", 0),
        kind=ENTITY_KINDS.get(entity_type, entity_type.__name__),
        url=getattr(entity, "url", None),
        user_id=getattr(entity, "user_id", None),
    )


def formatted_text_from_telethon(
    text: Optional[str], entities: Optional[Iterable[Any]]
) -> FormattedText:
    return FormattedText(
        text=text or "",
        entities=tuple(entity_from_telethon(entity) for entity in entities or ()),
    )


def content_kind_from_telethon(message: Any) -> ContentKind:
    """Infer the content kind from the attributes Telethon exposes."""
    action = getattr(message, "action", None)
    if action is not None:
        return ACTION_KINDS.get(type(action), ContentKind.UNSUPPORTED)

    # Link previews expose their photo or document through the media
    # properties, but the message itself is still text.
    if isinstance(getattr(message, "media", None), types.MessageMediaWebPage):
        return ContentKind.TEXT

    for attribute, kind in _MEDIA_ATTRIBUTES:
        if getattr(message, attribute, None):
            return kind

    if getattr(message, "media", None) is not None and not getattr(message, "web_preview", None):
        return ContentKind.UNSUPPORTED

    return ContentKind.TEXT


def _location(message: Any) -> Optional[Location]:
    geo = getattr(message, "geo", None)
    if geo is None:
        geo = getattr(getattr(message, "venue", None), "geo", None)
    if geo is None:
        return None
    return Location(latitude=getattr(geo, "lat", 0), longitude=getattr(geo, "long", 0))


def _web_page(message: Any) -> Optional[WebPage]:
    preview = getattr(message, "web_preview", None)
    if preview is None:
        return None
    page_type = getattr(preview, "type", None) or ""
    return WebPage(
        url=getattr(preview, "url", None) or "",
        has_video=page_type == "video",
        has_animation=page_type == "gif",
    )


def content_from_telethon(message: Any) -> MessageContent:
    kind = content_kind_from_telethon(message)
    formatted = formatted_text_from_telethon(
        getattr(message, "message", None), getattr(message, "entities", None)
    )
    # Telethon keeps media captions in the message text.
    is_text = kind is ContentKind.TEXT
    consumed = not getattr(message, "media_unread", False)
    return MessageContent(
        kind=kind,
        text=formatted if is_text else None,
        caption=None if is_text or not formatted.text else formatted,
        location=_location(message),
        web_page=_web_page(message),
        is_listened=consumed if kind is ContentKind.VOICE_NOTE else False,
        is_viewed=consumed if kind is ContentKind.VIDEO_NOTE else False,
    )


def _forward_info(message: Any) -> Optional[ForwardInfo]:
    forward = getattr(message, "fwd_from", None)
    if forward is None:
        return None
    peer = getattr(forward, "from_id", None)
    user_id = getattr(peer, "user_id", None)
    if user_id is not None:
        return ForwardInfo(kind=FORWARDED_FROM_USER, sender_user_id=user_id)
    channel_id = getattr(peer, "channel_id", None)
    if channel_id is not None:
        return ForwardInfo(kind=FORWARDED_POST, chat_id=channel_id)
    return None


def _timestamp(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    return int(value.timestamp())


def envelope_from_telethon(message: Any) -> MessageEnvelope:
    media = getattr(message, "media", None)
    return MessageEnvelope(
        message_id=getattr(message, "id"),
        chat_id=getattr(message, "chat_id", None),
        content=content_from_telethon(message),
        date=_timestamp(getattr(message, "date", None)),
        sender_user_id=getattr(message, "sender_id", None),
        reply_to_message_id=getattr(message, "reply_to_msg_id", None),
        forward_info=_forward_info(message),
        ttl=getattr(media, "ttl_seconds", None) or 0,
        is_outgoing=bool(getattr(message, "out", False)),
    )


@dataclass(slots=True)
class MessagePreview:
    envelope: MessageEnvelope
    summary: Optional[str]


async def collect_previews(
    client: Any,
    chat_identifier: Any,
    summarizer: MessageSummarizer,
    *,
    limit: int = 20,
) -> List[MessagePreview]:
    """Fetch the latest messages of a chat and summarize each, oldest first."""
    entity = await client.get_entity(chat_identifier)

    previews: List[MessagePreview] = []
    async for message in client.iter_messages(entity, limit=limit):
        envelope = envelope_from_telethon(message)
        previews.append(MessagePreview(envelope, summarizer.summarize_message(envelope)))

    previews.sort(key=lambda item: (item.envelope.date, item.envelope.message_id))
    return previews
