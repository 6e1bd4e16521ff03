from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union


class EntityKind(str, Enum):
    URL = "textEntityTypeUrl"
    TEXT_URL = "textEntityTypeTextUrl"
    BOLD = "textEntityTypeBold"
    ITALIC = "textEntityTypeItalic"
    CODE = "textEntityTypeCode"
    PRE = "textEntityTypePre"
    MENTION = "textEntityTypeMention"
    MENTION_NAME = "textEntityTypeMentionName"
    HASHTAG = "textEntityTypeHashtag"
    EMAIL_ADDRESS = "textEntityTypeEmailAddress"
    BOT_COMMAND = "textEntityTypeBotCommand"


class ContentKind(str, Enum):
    TEXT = "messageText"
    PHOTO = "messagePhoto"
    VIDEO = "messageVideo"
    ANIMATION = "messageAnimation"
    DOCUMENT = "messageDocument"
    STICKER = "messageSticker"
    LOCATION = "messageLocation"
    VENUE = "messageVenue"
    CONTACT = "messageContact"
    GAME = "messageGame"
    CALL = "messageCall"
    AUDIO = "messageAudio"
    VOICE_NOTE = "messageVoiceNote"
    VIDEO_NOTE = "messageVideoNote"
    EXPIRED_PHOTO = "messageExpiredPhoto"
    EXPIRED_VIDEO = "messageExpiredVideo"

    # Service events, rendered by the service message formatter.
    BASIC_GROUP_CHAT_CREATE = "messageBasicGroupChatCreate"
    CHAT_ADD_MEMBERS = "messageChatAddMembers"
    CHAT_CHANGE_PHOTO = "messageChatChangePhoto"
    CHAT_CHANGE_TITLE = "messageChatChangeTitle"
    CHAT_DELETE_MEMBER = "messageChatDeleteMember"
    CHAT_DELETE_PHOTO = "messageChatDeletePhoto"
    CHAT_JOIN_BY_LINK = "messageChatJoinByLink"
    CHAT_SET_TTL = "messageChatSetTtl"
    CHAT_UPGRADE_FROM = "messageChatUpgradeFrom"
    CHAT_UPGRADE_TO = "messageChatUpgradeTo"
    CONTACT_REGISTERED = "messageContactRegistered"
    CUSTOM_SERVICE_ACTION = "messageCustomServiceAction"
    GAME_SCORE = "messageGameScore"
    INVOICE = "messageInvoice"
    PASSPORT_DATA_RECEIVED = "messagePassportDataReceived"
    PASSPORT_DATA_SENT = "messagePassportDataSent"
    PAYMENT_SUCCESSFUL = "messagePaymentSuccessful"
    PAYMENT_SUCCESSFUL_BOT = "messagePaymentSuccessfulBot"
    PIN_MESSAGE = "messagePinMessage"
    SCREENSHOT_TAKEN = "messageScreenshotTaken"
    SUPERGROUP_CHAT_CREATE = "messageSupergroupChatCreate"
    UNSUPPORTED = "messageUnsupported"
    WEBSITE_CONNECTED = "messageWebsiteConnected"


def parse_entity_kind(value: str) -> EntityKind | str:
    """Return the known entity kind for a wire tag, or the tag itself."""
    try:
        return EntityKind(value)
    except ValueError:
        return value


def parse_content_kind(value: str) -> ContentKind | str:
    try:
        return ContentKind(value)
    except ValueError:
        return value


def _type_tag(payload: Any) -> Optional[str]:
    if not isinstance(payload, Mapping):
        return None
    tag = payload.get("@type")
    return tag if isinstance(tag, str) else None


def _as_int(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True, slots=True)
class TextEntity:
    """One annotation over a text: UTF-16 offset, length and kind."""

    offset: int
    length: int
    kind: EntityKind | str
    url: str | None = None
    user_id: int | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TextEntity":
        entity_type = payload.get("type")
        if not isinstance(entity_type, Mapping):
            entity_type = {}
        url = entity_type.get("url")
        user_id = entity_type.get("user_id")
        return cls(
            offset=_as_int(payload.get("offset")),
            length=_as_int(payload.get("length")),
            kind=parse_entity_kind(_type_tag(entity_type) or ""),
            url=url if isinstance(url, str) else None,
            user_id=user_id if _as_int(user_id) else None,
        )


@dataclass(frozen=True, slots=True)
class FormattedText:
    text: str
    entities: Sequence[TextEntity] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["FormattedText"]:
        if _type_tag(payload) != "formattedText":
            return None
        text = payload.get("text") or ""
        if not isinstance(text, str):
            return None
        items = payload.get("entities")
        if not isinstance(items, (list, tuple)):
            items = ()
        entities = tuple(
            TextEntity.from_dict(item) for item in items if isinstance(item, Mapping)
        )
        return cls(text=text, entities=entities)


@dataclass(frozen=True, slots=True)
class PlainText:
    text: str


@dataclass(frozen=True, slots=True)
class Markup:
    """Annotated slice of text.

    ``text`` is the slice as it appears in the source, ``display`` is what a
    presentation layer should show and ``target`` is the link reference for
    navigable kinds (``None`` for pure style markers such as bold).
    """

    kind: EntityKind
    text: str
    display: str
    target: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


Segment = Union[PlainText, Markup]


@dataclass(frozen=True, slots=True)
class Location:
    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["Location"]:
        if not isinstance(payload, Mapping):
            return None
        return cls(
            latitude=_as_float(payload.get("latitude")),
            longitude=_as_float(payload.get("longitude")),
        )


@dataclass(frozen=True, slots=True)
class WebPage:
    url: str = ""
    has_video: bool = False
    has_animation: bool = False

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["WebPage"]:
        if not isinstance(payload, Mapping):
            return None
        return cls(
            url=payload.get("url") or "",
            has_video=bool(payload.get("video")),
            has_animation=bool(payload.get("animation")),
        )


@dataclass(frozen=True, slots=True)
class MessageContent:
    """Tagged message payload.

    ``kind`` keeps unknown wire tags as plain strings so that callers can
    still dispatch on them; ``payload`` holds the untouched wire object.
    """

    kind: ContentKind | str
    text: FormattedText | None = None
    caption: FormattedText | None = None
    location: Location | None = None
    web_page: WebPage | None = None
    is_listened: bool = False
    is_viewed: bool = False
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def caption_text(self) -> str:
        if self.caption is None:
            return ""
        return self.caption.text

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["MessageContent"]:
        tag = _type_tag(payload)
        if tag is None:
            return None
        venue = payload.get("venue")
        location = payload.get("location")
        if location is None and isinstance(venue, Mapping):
            location = venue.get("location")
        return cls(
            kind=parse_content_kind(tag),
            text=FormattedText.from_dict(payload.get("text")),
            caption=FormattedText.from_dict(payload.get("caption")),
            location=Location.from_dict(location),
            web_page=WebPage.from_dict(payload.get("web_page")),
            is_listened=bool(payload.get("is_listened", False)),
            is_viewed=bool(payload.get("is_viewed", False)),
            payload=payload,
        )


@dataclass(frozen=True, slots=True)
class ForwardInfo:
    kind: str
    sender_user_id: int | None = None
    chat_id: int | None = None

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["ForwardInfo"]:
        tag = _type_tag(payload)
        if tag is None:
            return None
        return cls(
            kind=tag,
            sender_user_id=payload.get("sender_user_id"),
            chat_id=payload.get("chat_id"),
        )


@dataclass(frozen=True, slots=True)
class MessageEnvelope:
    """Read-only view of a message record as handed over by the store."""

    message_id: int
    chat_id: int | None = None
    content: MessageContent | None = None
    date: int = 0
    sender_user_id: int | None = None
    reply_to_message_id: int | None = None
    forward_info: ForwardInfo | None = None
    ttl: int = 0
    is_outgoing: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MessageEnvelope":
        return cls(
            message_id=payload.get("id", 0),
            chat_id=payload.get("chat_id"),
            content=MessageContent.from_dict(payload.get("content")),
            date=payload.get("date") or 0,
            sender_user_id=payload.get("sender_user_id"),
            reply_to_message_id=payload.get("reply_to_message_id") or None,
            forward_info=ForwardInfo.from_dict(payload.get("forward_info")),
            ttl=payload.get("ttl") or 0,
            is_outgoing=bool(payload.get("is_outgoing", False)),
        )


@dataclass(frozen=True, slots=True)
class User:
    user_id: int
    first_name: str = ""
    last_name: str = ""
    username: str = ""

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.username or str(self.user_id)


@dataclass(frozen=True, slots=True)
class Chat:
    chat_id: int
    title: str = ""
    last_read_outbox_message_id: int = 0
