"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Any, Optional

from telethon import utils
from telethon.tl import types

from core.models import (
    Audio,
    ChatTitleChanged,
    Contact,
    Document,
    FileRef,
    InboundMessage,
    Location,
    Payload,
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


def user_record(sender: Any, fallback_id: Optional[int]) -> UserRecord:
    """Snapshot a Telethon sender; channels and unknown senders get a bare record."""

    if not isinstance(sender, types.User):
        title = getattr(sender, "title", None) or ""
        sender_id = getattr(sender, "id", None) or fallback_id or 0
        return UserRecord(id=sender_id, is_bot=False, first_name=title)
    return UserRecord(
        id=sender.id,
        is_bot=bool(sender.bot),
        first_name=sender.first_name or "",
        last_name=sender.last_name,
        username=sender.username,
        language_code=getattr(sender, "lang_code", None),
    )


def _attribute(document: types.Document, kind: type) -> Any:
    for attribute in document.attributes or []:
        if isinstance(attribute, kind):
            return attribute
    return None


def _bot_file_id(media: Any) -> Optional[str]:
    """Bot API style file id, falling back to the raw MTProto id."""

    try:
        file_id = utils.pack_bot_file_id(media)
    except AttributeError:
        # Photo sizes from recent layers no longer carry a file location.
        file_id = None
    if file_id:
        return file_id
    media_id = getattr(media, "id", None)
    return str(media_id) if media_id is not None else None


def _file_ref(document: types.Document) -> FileRef:
    return FileRef(
        file_id=_bot_file_id(document),
        file_size=getattr(document, "size", None),
        mime_type=getattr(document, "mime_type", None),
    )


# Stripped, path and empty sizes are inline previews, not downloadable resolutions.
_RESOLUTION_TYPES = (types.PhotoSize, types.PhotoCachedSize, types.PhotoSizeProgressive)


def _photo_size(photo: types.Photo, size: Any) -> PhotoSize:
    if isinstance(size, types.PhotoSizeProgressive):
        # Progressive sizes list their byte offsets; the last one is the full size.
        file_size = max(size.sizes) if size.sizes else None
    elif isinstance(size, types.PhotoCachedSize):
        file_size = len(size.bytes)
    else:
        file_size = size.size
    return PhotoSize(
        file_id=_bot_file_id(photo),
        width=size.w,
        height=size.h,
        file_size=file_size,
        size_type=size.type,
    )


def _photo_sizes(photo: types.Photo) -> tuple[PhotoSize, ...]:
    return tuple(_photo_size(photo, size) for size in photo.sizes or [] if isinstance(size, _RESOLUTION_TYPES))


def _geo_location(geo: Any) -> Optional[Location]:
    if not isinstance(geo, types.GeoPoint):
        return None
    return Location(latitude=geo.lat, longitude=geo.long)


def _caption(message: Any) -> Optional[str]:
    return message.raw_text or None


def _payload_from_message(message: Any) -> Payload:
    media = message.media
    # Link previews expose their photo/document through the same properties.
    if media is None or isinstance(media, types.MessageMediaWebPage):
        if message.raw_text:
            return Text(text=message.raw_text)
        return Unhandled(kind="empty")

    # Order matters: a GIF also carries a video attribute, a venue also has a geo point.
    if message.gif is not None:
        return Unhandled(kind="animation")

    if message.sticker is not None:
        sticker = message.sticker
        size = _attribute(sticker, types.DocumentAttributeImageSize) or _attribute(sticker, types.DocumentAttributeVideo)
        emoji = getattr(_attribute(sticker, types.DocumentAttributeSticker), "alt", None)
        return Sticker(
            file=_file_ref(sticker),
            width=getattr(size, "w", None),
            height=getattr(size, "h", None),
            emoji=emoji or None,
        )

    if message.voice is not None:
        audio = _attribute(message.voice, types.DocumentAttributeAudio)
        return Voice(
            file=_file_ref(message.voice),
            duration=getattr(audio, "duration", None),
            caption=_caption(message),
        )

    if message.video_note is not None:
        video = _attribute(message.video_note, types.DocumentAttributeVideo)
        return VideoNote(
            file=_file_ref(message.video_note),
            length=getattr(video, "w", None),
            duration=getattr(video, "duration", None),
        )

    if message.video is not None:
        video = _attribute(message.video, types.DocumentAttributeVideo)
        return Video(
            file=_file_ref(message.video),
            width=getattr(video, "w", None),
            height=getattr(video, "h", None),
            duration=getattr(video, "duration", None),
            caption=_caption(message),
        )

    if message.audio is not None:
        audio = _attribute(message.audio, types.DocumentAttributeAudio)
        return Audio(
            file=_file_ref(message.audio),
            duration=getattr(audio, "duration", None),
            performer=getattr(audio, "performer", None),
            title=getattr(audio, "title", None),
            caption=_caption(message),
        )

    if message.photo is not None:
        photo = message.photo
        sizes = _photo_sizes(photo)
        return Photo(sizes=sizes, caption=_caption(message))

    if message.document is not None:
        document = message.document
        file_name = getattr(_attribute(document, types.DocumentAttributeFilename), "file_name", None)
        return Document(file=_file_ref(document), file_name=file_name, caption=_caption(message))

    if message.contact is not None:
        contact = message.contact
        return Contact(
            phone_number=contact.phone_number,
            first_name=contact.first_name,
            last_name=contact.last_name or None,
            user_id=contact.user_id or None,
        )

    if message.venue is not None:
        venue = message.venue
        location = _geo_location(venue.geo)
        if location is None:
            return Unhandled(kind=type(venue.geo).__name__)
        return Venue(
            location=location,
            title=venue.title,
            address=venue.address,
            provider=venue.provider or None,
            venue_id=venue.venue_id or None,
        )

    if message.geo is not None:
        return _geo_location(message.geo) or Unhandled(kind=type(message.geo).__name__)

    return Unhandled(kind=type(media).__name__)


async def build_inbound_message(message: Any) -> InboundMessage:
    """Build a core InboundMessage from a Telethon Message."""

    sender = await message.get_sender()
    return InboundMessage(
        message_id=message.id,
        chat_id=message.chat_id,
        user=user_record(sender, message.sender_id),
        payload=_payload_from_message(message),
    )


async def build_title_change(event: Any) -> InboundMessage:
    """Build a core InboundMessage from a Telethon ChatAction title change."""

    user = await event.get_user()
    action_message = event.action_message
    return InboundMessage(
        message_id=action_message.id if action_message is not None else 0,
        chat_id=event.chat_id,
        user=user_record(user, event.user_id),
        payload=ChatTitleChanged(title=event.new_title),
    )
