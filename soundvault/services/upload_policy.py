"""Validation of uploaded media payloads and track metadata."""
import os
from dataclasses import dataclass
from typing import Optional

from ..constants import (
    ALBUM_MAX_LENGTH,
    ALLOWED_AUDIO_EXTENSIONS,
    ALLOWED_AUDIO_TYPES,
    ALLOWED_IMAGE_EXTENSIONS,
    ALLOWED_IMAGE_TYPES,
    ARTIST_MAX_LENGTH,
    GENRES,
    TITLE_MAX_LENGTH,
)
from ..core.config import app_settings
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class MediaPayload:
    """An uploaded file held in memory."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename or "")[1].lower()


@dataclass(frozen=True)
class TrackMetadata:
    """Track fields as submitted; see :func:`validate_track_metadata`."""

    title: Optional[str]
    artist: Optional[str]
    genre: Optional[str]
    album: Optional[str] = None


@dataclass(frozen=True)
class TrackChanges:
    """Partial metadata update; None means "leave unchanged"."""

    title: Optional[str] = None
    artist: Optional[str] = None
    genre: Optional[str] = None
    album: Optional[str] = None
    album_provided: bool = False


def _format_mb(size: int) -> str:
    return f"{size / 1024 / 1024:g}MB"


def _validate_payload(
    payload: MediaPayload,
    kind: str,
    extensions,
    content_types,
    max_size: int,
) -> None:
    if payload.extension not in extensions:
        raise ValidationError(
            f"Invalid {kind} format. Allowed formats: {', '.join(extensions)}",
            details={"field": kind, "extension": payload.extension},
        )
    if payload.content_type not in content_types:
        raise ValidationError(
            f"Invalid {kind} MIME type. File appears to be: {payload.content_type}",
            details={"field": kind, "content_type": payload.content_type},
        )
    if payload.size > max_size:
        raise ValidationError(
            f"{kind.capitalize()} file too large. Maximum size: {_format_mb(max_size)}",
            details={"field": kind, "size": payload.size},
        )
    if payload.size == 0:
        raise ValidationError(f"{kind.capitalize()} file is empty", details={"field": kind})


def validate_audio_payload(payload: Optional[MediaPayload], max_size: Optional[int] = None) -> MediaPayload:
    """Reject a missing or unacceptable audio payload."""
    if payload is None:
        raise ValidationError("Audio file is required", details={"field": "audio"})
    _validate_payload(
        payload,
        "audio",
        ALLOWED_AUDIO_EXTENSIONS,
        ALLOWED_AUDIO_TYPES,
        max_size if max_size is not None else app_settings.max_audio_size,
    )
    return payload


def validate_image_payload(payload: Optional[MediaPayload], max_size: Optional[int] = None) -> Optional[MediaPayload]:
    """Images are optional; when present they must pass the image policy."""
    if payload is None:
        return None
    _validate_payload(
        payload,
        "image",
        ALLOWED_IMAGE_EXTENSIONS,
        ALLOWED_IMAGE_TYPES,
        max_size if max_size is not None else app_settings.max_image_size,
    )
    return payload


def _clean(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


def _check_text(field: str, label: str, value: Optional[str], max_length: int, required: bool) -> Optional[str]:
    value = _clean(value)
    if value is None:
        if required:
            raise ValidationError(f"{label} is required", details={"field": field})
        return None
    if not value:
        message = f"{label} is required" if required else f"{label} cannot be empty"
        raise ValidationError(message, details={"field": field})
    if len(value) > max_length:
        raise ValidationError(
            f"{label} cannot exceed {max_length} characters",
            details={"field": field},
        )
    return value


def _check_genre(genre: Optional[str], required: bool) -> Optional[str]:
    genre = _clean(genre)
    if not genre:
        if required:
            raise ValidationError("Genre is required", details={"field": "genre"})
        return None
    if genre not in GENRES:
        raise ValidationError("Invalid genre selected", details={"field": "genre", "genre": genre})
    return genre


def _check_album(album: Optional[str]) -> Optional[str]:
    album = _clean(album)
    if album and len(album) > ALBUM_MAX_LENGTH:
        raise ValidationError(
            f"Album name cannot exceed {ALBUM_MAX_LENGTH} characters",
            details={"field": "album"},
        )
    return album or None


def validate_track_metadata(
    title: Optional[str],
    artist: Optional[str],
    genre: Optional[str],
    album: Optional[str] = None,
) -> TrackMetadata:
    """Validate metadata for a new track, failing on the first bad field."""
    return TrackMetadata(
        title=_check_text("title", "Song title", title, TITLE_MAX_LENGTH, required=True),
        artist=_check_text("artist", "Artist name", artist, ARTIST_MAX_LENGTH, required=True),
        album=_check_album(album),
        genre=_check_genre(genre, required=True),
    )


def validate_track_changes(
    title: Optional[str] = None,
    artist: Optional[str] = None,
    genre: Optional[str] = None,
    album: Optional[str] = None,
) -> TrackChanges:
    """Validate a partial update. An explicit empty album clears it."""
    return TrackChanges(
        title=_check_text("title", "Title", title, TITLE_MAX_LENGTH, required=False),
        artist=_check_text("artist", "Artist name", artist, ARTIST_MAX_LENGTH, required=False),
        album=_check_album(album),
        album_provided=album is not None,
        genre=_check_genre(genre, required=False),
    )
