"""Service-level tests for ingestion failure modes and play counting."""
import pytest
from sqlalchemy import func, select

from soundvault.core.exceptions import NotFoundError, ValidationError
from soundvault.models import Account, BlobFile, BlobNamespace, Role, Track, Visibility
from soundvault.repositories import TrackRepository
from soundvault.services.access_service import MediaAccessService
from soundvault.services.admin_service import AdminManagementService
from soundvault.services.ingestion_service import MediaIngestionService
from soundvault.services.upload_policy import MediaPayload, TrackChanges, TrackMetadata, validate_track_metadata

from .conftest import MP3_BYTES, PNG_BYTES, read_blob

METADATA = validate_track_metadata("Title", "Artist", "Pop")


def mp3():
    return MediaPayload("a.mp3", "audio/mpeg", MP3_BYTES)


def png():
    return MediaPayload("c.png", "image/png", PNG_BYTES)


async def _account(db_session, username="dave", role=Role.USER) -> Account:
    account = Account(username=username, email=f"{username}@example.com", password_hash="x", role=role)
    db_session.add(account)
    await db_session.commit()
    return account


async def _blob_count(db_session) -> int:
    return await db_session.scalar(select(func.count()).select_from(BlobFile))


async def test_ingest_stores_blobs_then_track(db_session, blob_store):
    account = await _account(db_session)

    track = await MediaIngestionService(db_session, blob_store).ingest(
        account, mp3(), png(), METADATA, Visibility.PERSONAL
    )

    assert track.owner_id == account.id
    assert track.visibility == Visibility.PERSONAL
    assert await read_blob(blob_store, BlobNamespace.SONGS, track.audio_blob_id) == MP3_BYTES
    assert await read_blob(blob_store, BlobNamespace.IMAGES, track.cover_blob_id) == PNG_BYTES


async def test_invalid_payload_stores_nothing(db_session, blob_store):
    account = await _account(db_session)
    service = MediaIngestionService(db_session, blob_store)

    with pytest.raises(ValidationError):
        await service.ingest(account, MediaPayload("a.txt", "text/plain", b"x"), None, METADATA, Visibility.PERSONAL)

    assert await _blob_count(db_session) == 0


async def test_track_write_failure_orphans_blobs(db_session, blob_store, monkeypatch):
    account = await _account(db_session)

    async def failing_create(self, track):
        raise RuntimeError("catalog unavailable")

    monkeypatch.setattr(TrackRepository, "create", failing_create)

    with pytest.raises(RuntimeError):
        await MediaIngestionService(db_session, blob_store).ingest(
            account, mp3(), png(), METADATA, Visibility.PERSONAL
        )

    # No compensation: both blobs stay behind without a track
    assert await _blob_count(db_session) == 2
    assert await db_session.scalar(select(func.count()).select_from(Track)) == 0


async def test_cover_failure_orphans_audio(db_session, blob_store, monkeypatch):
    account = await _account(db_session)
    original_upload = blob_store.upload

    async def upload(namespace, **kwargs):
        if namespace == BlobNamespace.IMAGES:
            raise RuntimeError("store unavailable")
        return await original_upload(namespace, **kwargs)

    monkeypatch.setattr(blob_store, "upload", upload)

    with pytest.raises(RuntimeError):
        await MediaIngestionService(db_session, blob_store).ingest(
            account, mp3(), png(), METADATA, Visibility.PERSONAL
        )

    assert await _blob_count(db_session) == 1
    assert await db_session.scalar(select(func.count()).select_from(Track)) == 0


async def test_delete_tolerates_missing_blob(db_session, blob_store):
    account = await _account(db_session)
    service = MediaIngestionService(db_session, blob_store)
    track = await service.ingest(account, mp3(), None, METADATA, Visibility.PERSONAL)
    await blob_store.delete(BlobNamespace.SONGS, track.audio_blob_id)

    await service.delete(track)

    assert await TrackRepository(db_session).get(track.id) is None


async def test_update_keeps_album_unless_provided(db_session, blob_store):
    account = await _account(db_session)
    service = MediaIngestionService(db_session, blob_store)
    metadata = validate_track_metadata("Title", "Artist", "Pop", "Album")
    track = await service.ingest(account, mp3(), None, metadata, Visibility.PERSONAL)

    track = await service.update(account, track, TrackChanges(title="Renamed"))
    assert (track.title, track.album) == ("Renamed", "Album")

    track = await service.update(account, track, TrackChanges(album=None, album_provided=True))
    assert track.album is None


async def test_play_count_failure_does_not_block_stream(db_session, blob_store, monkeypatch):
    account = await _account(db_session)
    track = await MediaIngestionService(db_session, blob_store).ingest(
        account, mp3(), None, METADATA, Visibility.PERSONAL
    )

    async def failing_increment(self, track_id):
        raise RuntimeError("write conflict")

    monkeypatch.setattr(TrackRepository, "increment_plays", failing_increment)

    stream = await MediaAccessService(db_session, blob_store).stream_audio(account, track.audio_blob_id)
    body = b"".join([chunk async for chunk in stream.chunks])

    assert body == MP3_BYTES
    assert stream.content_length == len(MP3_BYTES)


async def test_aborted_stream_closes_blob_read(db_session, blob_store):
    account = await _account(db_session)
    track = await MediaIngestionService(db_session, blob_store).ingest(
        account, mp3(), None, METADATA, Visibility.PERSONAL
    )

    stream = await MediaAccessService(db_session, blob_store).stream_audio(account, track.audio_blob_id)
    await stream.chunks.__anext__()
    await stream.chunks.aclose()

    with pytest.raises(StopAsyncIteration):
        await stream.chunks.__anext__()


async def test_stream_blob_missing_is_not_found(db_session, blob_store):
    account = await _account(db_session)
    track = await MediaIngestionService(db_session, blob_store).ingest(
        account, mp3(), png(), METADATA, Visibility.PERSONAL
    )
    await blob_store.delete(BlobNamespace.IMAGES, track.cover_blob_id)

    with pytest.raises(NotFoundError):
        await MediaAccessService(db_session, blob_store).stream_image(account, track.cover_blob_id)


async def test_delete_user_cascade_returns_count(db_session, blob_store):
    user = await _account(db_session, "erin")
    admin = await _account(db_session, "boss", role=Role.ADMIN)
    ingestion = MediaIngestionService(db_session, blob_store)
    await ingestion.ingest(user, mp3(), png(), METADATA, Visibility.PERSONAL)
    await ingestion.ingest(user, mp3(), None, METADATA, Visibility.PERSONAL)
    await ingestion.ingest(admin, mp3(), None, METADATA, Visibility.GLOBAL)

    deleted = await AdminManagementService(db_session, blob_store).delete_user(user.id)

    assert deleted == 2
    assert await _blob_count(db_session) == 1
    assert await db_session.scalar(select(func.count()).select_from(Account)) == 1


async def test_ingest_validates_metadata_before_storing(db_session, blob_store):
    account = await _account(db_session)
    service = MediaIngestionService(db_session, blob_store)

    with pytest.raises(ValidationError) as exc:
        await service.ingest(
            account, mp3(), png(), TrackMetadata(title="  ", artist="Artist", genre="Pop"), Visibility.PERSONAL
        )
    assert exc.value.details["field"] == "title"

    with pytest.raises(ValidationError) as exc:
        await service.ingest(
            account, mp3(), None, TrackMetadata(title="Title", artist="Artist", genre="Opera"), Visibility.PERSONAL
        )
    assert exc.value.details["field"] == "genre"

    assert await _blob_count(db_session) == 0


async def test_ingest_stores_trimmed_metadata(db_session, blob_store):
    account = await _account(db_session)

    track = await MediaIngestionService(db_session, blob_store).ingest(
        account,
        mp3(),
        None,
        TrackMetadata(title=" Naima ", artist=" John Coltrane ", genre="Jazz", album="  "),
        Visibility.PERSONAL,
    )

    assert (track.title, track.artist, track.album) == ("Naima", "John Coltrane", None)
