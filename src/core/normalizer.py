"""Message normalization (core domain).

Each supported payload type has one function that returns a typed content
record. ``normalize`` looks the payload up in a registry and wraps the record
in an Envelope, so field names stay in one place per kind.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, Optional, TypedDict

from core.models import (
    Audio,
    ChatTitleChanged,
    Contact,
    Document,
    Envelope,
    FileRef,
    InboundMessage,
    Location,
    MessageKind,
    Photo,
    PhotoSize,
    Sticker,
    Text,
    TitleUpdate,
    Venue,
    Video,
    VideoNote,
    Voice,
)

LOGGER = logging.getLogger(__name__)


class TextContent(TypedDict):
    text: str


class AudioContent(TypedDict):
    audio: dict[str, Any]
    duration: Optional[int]
    performer: Optional[str]
    title: Optional[str]
    caption: str


class DocumentContent(TypedDict):
    document: dict[str, Any]
    file_name: Optional[str]
    caption: str


class PhotoContent(TypedDict):
    photo: dict[str, Any]
    caption: str


class StickerContent(TypedDict):
    sticker: dict[str, Any]
    width: Optional[int]
    height: Optional[int]
    emoji: Optional[str]


class VideoContent(TypedDict):
    video: dict[str, Any]
    width: Optional[int]
    height: Optional[int]
    duration: Optional[int]
    caption: str


class VoiceContent(TypedDict):
    voice: dict[str, Any]
    duration: Optional[int]
    caption: str


class VideoNoteContent(TypedDict):
    video_note: dict[str, Any]
    length: Optional[int]
    duration: Optional[int]


class ContactContent(TypedDict):
    phone_number: str
    first_name: str
    last_name: Optional[str]
    user_id: Optional[int]


class LocationContent(TypedDict):
    latitude: float
    longitude: float


class VenueContent(TypedDict):
    location: LocationContent
    title: str
    address: str
    provider: Optional[str]
    venue_id: Optional[str]


def _descriptor(file: FileRef | PhotoSize) -> dict[str, Any]:
    # Optional attributes are left out rather than sent as null.
    return {key: value for key, value in asdict(file).items() if value is not None}


def _caption(caption: Optional[str]) -> str:
    return caption or ""


def _text(payload: Text) -> TextContent:
    return {"text": payload.text}


def _audio(payload: Audio) -> AudioContent:
    return {
        "audio": _descriptor(payload.file),
        "duration": payload.duration,
        "performer": payload.performer,
        "title": payload.title,
        "caption": _caption(payload.caption),
    }


def _document(payload: Document) -> DocumentContent:
    return {
        "document": _descriptor(payload.file),
        "file_name": payload.file_name,
        "caption": _caption(payload.caption),
    }


def _photo(payload: Photo) -> Optional[PhotoContent]:
    if not payload.sizes:
        return None
    return {"photo": _descriptor(payload.sizes[0]), "caption": _caption(payload.caption)}


def _sticker(payload: Sticker) -> StickerContent:
    return {
        "sticker": _descriptor(payload.file),
        "width": payload.width,
        "height": payload.height,
        "emoji": payload.emoji,
    }


def _video(payload: Video) -> VideoContent:
    return {
        "video": _descriptor(payload.file),
        "width": payload.width,
        "height": payload.height,
        "duration": payload.duration,
        "caption": _caption(payload.caption),
    }


def _voice(payload: Voice) -> VoiceContent:
    return {
        "voice": _descriptor(payload.file),
        "duration": payload.duration,
        "caption": _caption(payload.caption),
    }


def _video_note(payload: VideoNote) -> VideoNoteContent:
    return {
        "video_note": _descriptor(payload.file),
        "length": payload.length,
        "duration": payload.duration,
    }


def _contact(payload: Contact) -> ContactContent:
    return {
        "phone_number": payload.phone_number,
        "first_name": payload.first_name,
        "last_name": payload.last_name,
        "user_id": payload.user_id,
    }


def _location(payload: Location) -> LocationContent:
    return {"latitude": payload.latitude, "longitude": payload.longitude}


def _venue(payload: Venue) -> VenueContent:
    return {
        "location": _location(payload.location),
        "title": payload.title,
        "address": payload.address,
        "provider": payload.provider,
        "venue_id": payload.venue_id,
    }


_NORMALIZERS: dict[type, tuple[MessageKind, Callable[[Any], Optional[dict]]]] = {
    Text: (MessageKind.TEXT, _text),
    Audio: (MessageKind.AUDIO, _audio),
    Document: (MessageKind.DOCUMENT, _document),
    Photo: (MessageKind.PHOTO, _photo),
    Sticker: (MessageKind.STICKER, _sticker),
    Video: (MessageKind.VIDEO, _video),
    Voice: (MessageKind.VOICE, _voice),
    VideoNote: (MessageKind.VIDEO_NOTE, _video_note),
    Contact: (MessageKind.CONTACT, _contact),
    Location: (MessageKind.LOCATION, _location),
    Venue: (MessageKind.VENUE, _venue),
}


def normalize(message: InboundMessage) -> Optional[Envelope]:
    """Build the Envelope forwarded to the backend, or None when unsupported."""

    entry = _NORMALIZERS.get(type(message.payload))
    if entry is None:
        return None
    kind, build = entry
    content = build(message.payload)
    if content is None:
        LOGGER.debug("Nothing to forward for %s in chat %s", kind.name, message.chat_id)
        return None
    return Envelope(chat_id=message.chat_id, user=message.user, type=kind, content=content)


def build_title_update(message: InboundMessage) -> Optional[TitleUpdate]:
    """Return the title-update record for chat title changes only."""

    if not isinstance(message.payload, ChatTitleChanged):
        return None
    return TitleUpdate(chat_id=message.chat_id, user=message.user, title=message.payload.title)
