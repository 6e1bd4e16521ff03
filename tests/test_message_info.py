import pytest

from telegram_content_normalizer.config import MapTileConfig
from telegram_content_normalizer.lookups import ChatStore, UserStore
from telegram_content_normalizer.message_info import (
    FORWARDED_FROM_USER,
    FORWARDED_POST,
    get_date,
    get_date_hint,
    get_forward,
    get_location_id,
    get_reply,
    get_sender_user_id,
    get_text,
    get_title,
    get_unread,
    get_venue_id,
    get_web_page,
)
from telegram_content_normalizer.models import (
    Chat,
    ContentKind,
    EntityKind,
    FormattedText,
    ForwardInfo,
    Location,
    Markup,
    MessageContent,
    MessageEnvelope,
    PlainText,
    TextEntity,
    User,
    WebPage,
)


@pytest.fixture
def users():
    store = UserStore()
    store.add(User(user_id=12345, first_name="Alice", last_name="Example"))
    return store


@pytest.fixture
def chats():
    store = ChatStore()
    store.add(Chat(chat_id=-100, title="Weekend Plans", last_read_outbox_message_id=20))
    return store


def test_title_prefers_sender(users, chats):
    message = MessageEnvelope(message_id=1, chat_id=-100, sender_user_id=12345)
    assert get_title(message, users, chats) == "Alice Example"


def test_title_falls_back_to_chat(users, chats):
    message = MessageEnvelope(message_id=1, chat_id=-100, sender_user_id=0)
    assert get_title(message, users, chats) == "Weekend Plans"


def test_title_missing(users, chats):
    assert get_title(None, users, chats) is None
    assert get_title(MessageEnvelope(message_id=1, sender_user_id=999), users, chats) is None


def test_text_decodes_message_text():
    content = MessageContent(
        kind=ContentKind.TEXT,
        text=FormattedText("hi *there*", (TextEntity(3, 7, EntityKind.BOLD),)),
    )
    segments = get_text(MessageEnvelope(message_id=1, content=content))
    assert segments == [PlainText("hi "), Markup(EntityKind.BOLD, "*there*", "*there*")]


def test_text_uses_caption_after_line_break():
    content = MessageContent(kind=ContentKind.PHOTO, caption=FormattedText("sunset"))
    segments = get_text(MessageEnvelope(message_id=1, content=content))
    assert segments == [PlainText("\n"), PlainText("sunset")]


def test_text_empty_without_text_or_caption():
    content = MessageContent(kind=ContentKind.STICKER)
    assert get_text(MessageEnvelope(message_id=1, content=content)) == []
    assert get_text(None) is None


def test_simple_accessors():
    page = WebPage(url="https://telegram.org")
    message = MessageEnvelope(
        message_id=5,
        sender_user_id=12345,
        reply_to_message_id=3,
        content=MessageContent(kind=ContentKind.TEXT, web_page=page),
    )
    assert get_web_page(message) == page
    assert get_reply(message) == 3
    assert get_sender_user_id(message) == 12345
    assert get_reply(MessageEnvelope(message_id=6)) is None


def test_forward_from_user_and_post(users, chats):
    from_user = MessageEnvelope(
        message_id=1,
        forward_info=ForwardInfo(kind=FORWARDED_FROM_USER, sender_user_id=12345),
    )
    from_post = MessageEnvelope(
        message_id=2,
        forward_info=ForwardInfo(kind=FORWARDED_POST, chat_id=-100),
    )
    unknown = MessageEnvelope(
        message_id=3,
        forward_info=ForwardInfo(kind="messageForwardedFromUser", sender_user_id=1),
    )

    assert get_forward(from_user, users, chats) == "Alice Example"
    assert get_forward(from_post, users, chats) == "Weekend Plans"
    assert get_forward(unknown, users, chats) is None
    assert get_forward(MessageEnvelope(message_id=4), users, chats) is None


def test_unread_only_for_outgoing_after_read_marker(chats):
    newer = MessageEnvelope(message_id=21, chat_id=-100, is_outgoing=True)
    older = MessageEnvelope(message_id=19, chat_id=-100, is_outgoing=True)
    incoming = MessageEnvelope(message_id=30, chat_id=-100, is_outgoing=False)
    unknown_chat = MessageEnvelope(message_id=30, chat_id=-5, is_outgoing=True)

    assert get_unread(newer, chats) is True
    assert get_unread(older, chats) is False
    assert get_unread(incoming, chats) is False
    assert get_unread(unknown_chat, chats) is False


def test_dates_are_formatted_in_timezone():
    message = MessageEnvelope(message_id=1, date=1700000000)
    assert get_date(message) == "22:13"
    assert get_date_hint(message) == "22:13:20 14.11.2023"
    assert get_date(message, "Europe/Vienna") == "23:13"
    assert get_date(MessageEnvelope(message_id=2)) is None


def test_location_id_format():
    key = get_location_id(Location(latitude=55.75, longitude=37.62))
    assert key == "loc=55.75,37.62&size=300,100&scale=2&zoom=15"


def test_location_id_uses_tile_config_and_integral_coordinates():
    tiles = MapTileConfig(width=640, height=320, scale=1, zoom=12)
    key = get_venue_id(Location(latitude=10.0, longitude=-20.0), tiles)
    assert key == "loc=10,-20&size=640,320&scale=1&zoom=12"
    assert get_location_id(None) is None


@pytest.mark.parametrize(
    "latitude,longitude,expected",
    [
        (1e-7, 2.5, "loc=1e-7,2.5"),
        (0.000001, -0.0, "loc=0.000001,0"),
        (1e21, 123456789.125, "loc=1e+21,123456789.125"),
        (-1.5e-10, 100, "loc=-1.5e-10,100"),
    ],
)
def test_location_id_prints_numbers_like_the_web_client(latitude, longitude, expected):
    key = get_location_id(Location(latitude=latitude, longitude=longitude))
    assert key == f"{expected}&size=300,100&scale=2&zoom=15"


def test_location_id_from_wire_string_coordinates():
    content = MessageContent.from_dict(
        {
            "@type": "messageLocation",
            "location": {"latitude": "55.75", "longitude": "37.62"},
        }
    )
    key = get_location_id(content.location)
    assert key == "loc=55.75,37.62&size=300,100&scale=2&zoom=15"
