"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types. An inbound message carries one
payload variant per message kind; the set of variants is closed and the
normalizer keeps a registry keyed by variant type.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, Mapping, Optional, Tuple, Union


class MessageKind(IntEnum):
    """Integer type codes shared with the backend."""

    TEXT = 0
    AUDIO = 1
    DOCUMENT = 2
    # 3 and 4 are reserved for animations.
    PHOTO = 5
    STICKER = 6
    VIDEO = 7
    VOICE = 8
    VIDEO_NOTE = 9
    CONTACT = 10
    LOCATION = 11
    VENUE = 12


@dataclass(frozen=True)
class UserRecord:
    """Snapshot of the sender at event time."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileRef:
    file_id: Optional[str]
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class PhotoSize:
    file_id: Optional[str]
    width: Optional[int]
    height: Optional[int]
    file_size: Optional[int] = None
    # Telegram's size letter ("m", "x", "y"...), distinguishes resolutions of one photo.
    size_type: Optional[str] = None


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Audio:
    file: FileRef
    duration: Optional[int] = None
    performer: Optional[str] = None
    title: Optional[str] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class Document:
    file: FileRef
    file_name: Optional[str] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class Photo:
    sizes: Tuple[PhotoSize, ...]
    caption: Optional[str] = None


@dataclass(frozen=True)
class Sticker:
    file: FileRef
    width: Optional[int] = None
    height: Optional[int] = None
    emoji: Optional[str] = None


@dataclass(frozen=True)
class Video:
    file: FileRef
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class Voice:
    file: FileRef
    duration: Optional[int] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class VideoNote:
    file: FileRef
    length: Optional[int] = None
    duration: Optional[int] = None


@dataclass(frozen=True)
class Contact:
    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    user_id: Optional[int] = None


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Venue:
    location: Location
    title: str
    address: str
    provider: Optional[str] = None
    venue_id: Optional[str] = None


@dataclass(frozen=True)
class ChatTitleChanged:
    title: str


@dataclass(frozen=True)
class Unhandled:
    """Anything the relay does not forward (animations, polls, dice...)."""

    kind: str


Payload = Union[
    Text,
    Audio,
    Document,
    Photo,
    Sticker,
    Video,
    Voice,
    VideoNote,
    Contact,
    Location,
    Venue,
    ChatTitleChanged,
    Unhandled,
]


@dataclass(frozen=True)
class InboundMessage:
    """One update from the chat platform, borrowed for a single dispatch."""

    message_id: int
    chat_id: int
    user: UserRecord
    payload: Payload


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    arguments: str


@dataclass(frozen=True)
class Envelope:
    """Canonical record forwarded to the backend for message content."""

    chat_id: int
    user: UserRecord
    type: MessageKind
    content: Mapping[str, Any]

    def to_payload(self) -> dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "user": self.user.to_dict(),
            "message": {
                "type": int(self.type),
                "content": dict(self.content),
            },
        }


@dataclass(frozen=True)
class TitleUpdate:
    chat_id: int
    user: UserRecord
    title: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "user": self.user.to_dict(),
            "title": self.title,
        }
