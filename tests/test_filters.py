import pytest

from telegram_content_normalizer.filters import (
    filter_history,
    is_animation_message,
    is_content_opened,
    is_media_content,
    is_video_message,
)
from telegram_content_normalizer.lookups import MessageStore
from telegram_content_normalizer.models import (
    ContentKind,
    MessageContent,
    MessageEnvelope,
    WebPage,
)


def build_message(message_id: int, kind=ContentKind.TEXT, **content_fields) -> MessageEnvelope:
    return MessageEnvelope(
        message_id=message_id,
        chat_id=100,
        content=MessageContent(kind=kind, **content_fields),
    )


@pytest.fixture
def store():
    store = MessageStore()
    store.extend(
        [
            build_message(1, ContentKind.VIDEO),
            build_message(2, ContentKind.TEXT, web_page=WebPage(has_video=True)),
            build_message(3, ContentKind.ANIMATION),
            build_message(4, ContentKind.TEXT, web_page=WebPage(has_animation=True)),
            build_message(5, ContentKind.VOICE_NOTE, is_listened=False),
            build_message(6, ContentKind.VIDEO_NOTE, is_viewed=True),
            build_message(7, ContentKind.TEXT),
        ]
    )
    return store


def test_filter_history_drops_known_ids_and_keeps_order():
    result = [build_message(i) for i in (5, 3, 9, 1, 7)]
    history = [build_message(i) for i in (1, 3)]

    filtered = filter_history(result, history)

    assert [message.message_id for message in filtered] == [5, 9, 7]
    assert [message.message_id for message in history] == [1, 3]


def test_filter_history_is_idempotent():
    result = [build_message(i) for i in (4, 2, 8)]
    history = [build_message(2)]

    once = filter_history(result, history)
    twice = filter_history(once, history)

    assert list(once) == list(twice)


def test_filter_history_noop_on_empty_sides():
    result = [build_message(1), build_message(2)]
    assert filter_history(result, []) is result

    empty: list = []
    assert filter_history(empty, result) is empty


def test_is_media_content_only_for_photos():
    assert is_media_content(MessageContent(kind=ContentKind.PHOTO)) is True
    assert is_media_content(MessageContent(kind=ContentKind.VIDEO)) is False
    assert is_media_content(None) is False


def test_video_detection(store):
    assert is_video_message(store, 100, 1) is True
    assert is_video_message(store, 100, 2) is True
    assert is_video_message(store, 100, 7) is False
    assert is_video_message(store, 100, 404) is False


def test_animation_detection(store):
    assert is_animation_message(store, 100, 3) is True
    assert is_animation_message(store, 100, 4) is True
    assert is_animation_message(store, 100, 1) is False


def test_content_opened(store):
    assert is_content_opened(store, 100, 5) is False
    assert is_content_opened(store, 100, 6) is True
    assert is_content_opened(store, 100, 7) is True
    assert is_content_opened(store, 100, 404) is True
