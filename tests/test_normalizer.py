from __future__ import annotations

from core.models import (
    Audio,
    ChatTitleChanged,
    Contact,
    Document,
    FileRef,
    InboundMessage,
    Location,
    MessageKind,
    Photo,
    PhotoSize,
    Sticker,
    Text,
    Unhandled,
    UserRecord,
    Venue,
    Video,
    VideoNote,
    Voice,
)
from core.normalizer import build_title_update, normalize

USER = UserRecord(id=42, is_bot=False, first_name="Ada", last_name=None, username="ada", language_code="en")


def _message(payload) -> InboundMessage:
    return InboundMessage(message_id=7, chat_id=-100, user=USER, payload=payload)


def test_text_envelope_payload_shape() -> None:
    envelope = normalize(_message(Text(text="/echo hello world")))
    assert envelope is not None
    assert envelope.to_payload() == {
        "chat_id": -100,
        "user": {
            "id": 42,
            "is_bot": False,
            "first_name": "Ada",
            "last_name": None,
            "username": "ada",
            "language_code": "en",
        },
        "message": {"type": 0, "content": {"text": "/echo hello world"}},
    }


def test_photo_forwards_first_resolution_and_empty_caption() -> None:
    small = PhotoSize(file_id="AgAD", width=90, height=60, file_size=1200)
    large = PhotoSize(file_id="AgAD", width=1280, height=853, file_size=98000)
    envelope = normalize(_message(Photo(sizes=(small, large))))
    assert envelope is not None
    assert envelope.type == MessageKind.PHOTO
    payload = envelope.to_payload()
    assert payload["message"]["type"] == 5
    assert payload["message"]["content"] == {
        "photo": {"file_id": "AgAD", "width": 90, "height": 60, "file_size": 1200},
        "caption": "",
    }


def test_photo_without_sizes_is_not_forwarded() -> None:
    assert normalize(_message(Photo(sizes=()))) is None


def test_file_descriptors_omit_missing_fields() -> None:
    envelope = normalize(_message(Document(file=FileRef(file_id="BQAD"), file_name="a.pdf", caption="report")))
    assert envelope is not None
    assert envelope.content == {"document": {"file_id": "BQAD"}, "file_name": "a.pdf", "caption": "report"}


def test_type_codes_per_kind() -> None:
    file = FileRef(file_id="x", file_size=10, mime_type="application/octet-stream")
    location = Location(latitude=52.52, longitude=13.4)
    cases = [
        (Text(text="hi"), 0),
        (Audio(file=file, duration=3, performer="P", title="T"), 1),
        (Document(file=file), 2),
        (Photo(sizes=(PhotoSize(file_id="p", width=1, height=1),)), 5),
        (Sticker(file=file, width=512, height=512, emoji="x"), 6),
        (Video(file=file, width=640, height=480, duration=9), 7),
        (Voice(file=file, duration=4), 8),
        (VideoNote(file=file, length=240, duration=5), 9),
        (Contact(phone_number="+100", first_name="Bob"), 10),
        (location, 11),
        (Venue(location=location, title="Cafe", address="Main st 1"), 12),
    ]
    for payload, code in cases:
        envelope = normalize(_message(payload))
        assert envelope is not None, payload
        assert envelope.to_payload()["message"]["type"] == code


def test_venue_and_contact_content() -> None:
    venue = normalize(
        _message(
            Venue(
                location=Location(latitude=1.5, longitude=2.5),
                title="Cafe",
                address="Main st 1",
                provider="foursquare",
                venue_id="4b1",
            )
        )
    )
    assert venue.content == {
        "location": {"latitude": 1.5, "longitude": 2.5},
        "title": "Cafe",
        "address": "Main st 1",
        "provider": "foursquare",
        "venue_id": "4b1",
    }

    contact = normalize(_message(Contact(phone_number="+100", first_name="Bob", user_id=9)))
    assert contact.content == {"phone_number": "+100", "first_name": "Bob", "last_name": None, "user_id": 9}


def test_captions_default_to_empty_string() -> None:
    file = FileRef(file_id="x")
    for payload in (Audio(file=file), Video(file=file), Voice(file=file), Document(file=file)):
        assert normalize(_message(payload)).content["caption"] == ""


def test_unsupported_kinds_have_no_envelope() -> None:
    assert normalize(_message(Unhandled(kind="animation"))) is None
    assert normalize(_message(ChatTitleChanged(title="New"))) is None


def test_normalize_is_idempotent() -> None:
    message = _message(Voice(file=FileRef(file_id="v", file_size=3), duration=2, caption="hey"))
    assert normalize(message) == normalize(message)


def test_title_update_record() -> None:
    record = build_title_update(_message(ChatTitleChanged(title="Renamed")))
    assert record is not None
    assert record.to_payload() == {"chat_id": -100, "user": USER.to_dict(), "title": "Renamed"}
    assert build_title_update(_message(Text(text="hi"))) is None
