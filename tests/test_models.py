from telegram_content_normalizer.models import (
    ContentKind,
    EntityKind,
    FormattedText,
    MessageContent,
    MessageEnvelope,
    TextEntity,
    User,
)


def test_text_entity_from_wire():
    entity = TextEntity.from_dict(
        {
            "@type": "textEntity",
            "offset": 3,
            "length": 4,
            "type": {"@type": "textEntityTypeTextUrl", "url": "telegram.org"},
        }
    )
    assert entity == TextEntity(3, 4, EntityKind.TEXT_URL, url="telegram.org")


def test_unknown_entity_tag_is_kept():
    entity = TextEntity.from_dict({"offset": 0, "length": 1, "type": {"@type": "textEntityTypeSpoiler"}})
    assert entity.kind == "textEntityTypeSpoiler"


def test_formatted_text_requires_type_tag():
    assert FormattedText.from_dict({"text": "no tag"}) is None
    assert FormattedText.from_dict("plain") is None
    parsed = FormattedText.from_dict({"@type": "formattedText", "text": "hi"})
    assert parsed == FormattedText(text="hi")


def test_message_envelope_from_wire():
    message = MessageEnvelope.from_dict(
        {
            "@type": "message",
            "id": 7,
            "chat_id": -100,
            "sender_user_id": 12345,
            "date": 1700000000,
            "ttl": 0,
            "is_outgoing": True,
            "reply_to_message_id": 0,
            "forward_info": {"@type": "messageForwardedPost", "chat_id": -200},
            "content": {
                "@type": "messageVenue",
                "venue": {"location": {"latitude": 1.5, "longitude": 2.5}},
            },
        }
    )

    assert message.message_id == 7
    assert message.reply_to_message_id is None
    assert message.forward_info.chat_id == -200
    assert message.content.kind is ContentKind.VENUE
    assert message.content.location.latitude == 1.5


def test_unknown_content_kind_is_kept():
    content = MessageContent.from_dict({"@type": "messagePoll"})
    assert content.kind == "messagePoll"
    assert MessageContent.from_dict(None) is None


def test_user_full_name_fallbacks():
    assert User(user_id=1, first_name="Alice", last_name="Example").full_name == "Alice Example"
    assert User(user_id=2, username="bob").full_name == "bob"
    assert User(user_id=3).full_name == "3"


def test_text_entity_from_wire_tolerates_bad_fields():
    entity = TextEntity.from_dict(
        {
            "offset": "2",
            "length": True,
            "type": {"@type": "textEntityTypeTextUrl", "url": 42},
        }
    )
    assert entity == TextEntity(0, 0, EntityKind.TEXT_URL, url=None)


def test_formatted_text_rejects_non_string_text():
    assert FormattedText.from_dict({"@type": "formattedText", "text": 123}) is None
    assert FormattedText.from_dict({"@type": "formattedText"}) == FormattedText(text="")


def test_location_coordinates_are_coerced_to_float():
    content = MessageContent.from_dict(
        {
            "@type": "messageLocation",
            "location": {"latitude": "55.75", "longitude": None},
        }
    )
    assert content.location.latitude == 55.75
    assert content.location.longitude == 0.0
