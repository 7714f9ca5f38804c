"""Unit tests for media and metadata validation."""
import pytest

from soundvault.core.exceptions import ValidationError
from soundvault.services.upload_policy import (
    MediaPayload,
    validate_audio_payload,
    validate_image_payload,
    validate_track_changes,
    validate_track_metadata,
)


def audio(filename="song.mp3", content_type="audio/mpeg", data=b"abc"):
    return MediaPayload(filename=filename, content_type=content_type, data=data)


def test_payload_extension_is_lowercased():
    assert audio("LOUD.MP3").extension == ".mp3"
    assert audio("noext").extension == ""
    assert audio(data=b"12345").size == 5


@pytest.mark.parametrize(
    "filename, content_type",
    [("a.mp3", "audio/mpeg"), ("a.wav", "audio/wav"), ("a.ogg", "audio/ogg"), ("a.m4a", "audio/x-m4a")],
)
def test_accepts_allowed_audio(filename, content_type):
    payload = audio(filename, content_type)
    assert validate_audio_payload(payload) is payload


def test_audio_is_required():
    with pytest.raises(ValidationError, match="Audio file is required"):
        validate_audio_payload(None)


def test_rejects_audio_extension():
    with pytest.raises(ValidationError, match="Invalid audio format"):
        validate_audio_payload(audio("notes.txt", "audio/mpeg"))


def test_rejects_audio_content_type():
    with pytest.raises(ValidationError, match="Invalid audio MIME type"):
        validate_audio_payload(audio("song.mp3", "text/plain"))


def test_rejects_oversized_audio():
    with pytest.raises(ValidationError, match="Audio file too large"):
        validate_audio_payload(audio(data=b"x" * 11), max_size=10)
    assert validate_audio_payload(audio(data=b"x" * 10), max_size=10)


def test_rejects_empty_audio():
    with pytest.raises(ValidationError, match="Audio file is empty"):
        validate_audio_payload(audio(data=b""))


def test_image_is_optional():
    assert validate_image_payload(None) is None


def test_image_checks():
    png = MediaPayload("cover.png", "image/png", b"png")
    assert validate_image_payload(png) is png
    with pytest.raises(ValidationError, match="Invalid image format"):
        validate_image_payload(MediaPayload("cover.gif", "image/png", b"gif"))
    with pytest.raises(ValidationError, match="Image file too large"):
        validate_image_payload(MediaPayload("cover.jpg", "image/jpeg", b"x" * 3), max_size=2)


def test_metadata_is_trimmed():
    metadata = validate_track_metadata("  Title ", " Artist ", "Jazz", "  ")
    assert metadata.title == "Title"
    assert metadata.artist == "Artist"
    assert metadata.album is None


def test_metadata_names_first_failing_field():
    with pytest.raises(ValidationError) as exc:
        validate_track_metadata(None, None, "Opera")
    assert exc.value.details["field"] == "title"

    with pytest.raises(ValidationError) as exc:
        validate_track_metadata("Title", "Artist", "Opera")
    assert exc.value.details["field"] == "genre"


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"title": "x" * 201}, "title"),
        ({"artist": "x" * 101}, "artist"),
        ({"album": "x" * 201}, "album"),
    ],
)
def test_metadata_length_limits(kwargs, field):
    values = {"title": "Title", "artist": "Artist", "genre": "Pop", "album": None, **kwargs}
    with pytest.raises(ValidationError) as exc:
        validate_track_metadata(**values)
    assert exc.value.details["field"] == field


def test_changes_leave_unset_fields_alone():
    changes = validate_track_changes(title="New")
    assert changes.title == "New"
    assert changes.artist is None
    assert changes.genre is None
    assert changes.album_provided is False


def test_changes_empty_album_clears_it():
    changes = validate_track_changes(album="")
    assert changes.album_provided is True
    assert changes.album is None


def test_changes_reject_blank_title_and_bad_genre():
    with pytest.raises(ValidationError, match="Title cannot be empty"):
        validate_track_changes(title="  ")
    with pytest.raises(ValidationError, match="Invalid genre selected"):
        validate_track_changes(genre="Opera")
