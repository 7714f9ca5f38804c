"""Tests for audio and cover streaming."""
from uuid import UUID

from sqlalchemy import update

from soundvault.models import BlobFile, BlobNamespace

from .conftest import API, MP3_BYTES, PNG_BYTES, upload_song


async def test_stream_requires_session(client, user_headers):
    song = (await upload_song(client, user_headers)).json()["song"]
    response = await client.get(song["audioStreamUrl"])
    assert response.status_code == 401


async def test_non_owner_cannot_stream_personal_track(client, user_headers, other_headers):
    song = (await upload_song(client, user_headers, cover=("c.png", PNG_BYTES, "image/png"))).json()["song"]

    audio = await client.get(song["audioStreamUrl"], headers=other_headers)
    assert audio.status_code == 403
    image = await client.get(song["coverImageUrl"], headers=other_headers)
    assert image.status_code == 403

    detail = await client.get(f"{API}/songs/{song['id']}", headers=user_headers)
    assert detail.json()["song"]["plays"] == 0


async def test_each_stream_counts_one_play(client, user_headers):
    song = (await upload_song(client, user_headers)).json()["song"]

    for _ in range(3):
        response = await client.get(song["audioStreamUrl"], headers=user_headers)
        assert response.status_code == 200
        assert response.content == MP3_BYTES

    detail = await client.get(f"{API}/songs/{song['id']}", headers=user_headers)
    assert detail.json()["song"]["plays"] == 3


async def test_image_stream_does_not_count_play(client, user_headers):
    song = (await upload_song(client, user_headers, cover=("c.png", PNG_BYTES, "image/png"))).json()["song"]

    await client.get(song["coverImageUrl"], headers=user_headers)

    detail = await client.get(f"{API}/songs/{song['id']}", headers=user_headers)
    assert detail.json()["song"]["plays"] == 0


async def test_audio_headers(client, user_headers):
    song = (await upload_song(client, user_headers)).json()["song"]

    response = await client.get(song["audioStreamUrl"], headers={**user_headers, "Range": "bytes=0-10"})

    # Range requests are not honored
    assert response.status_code == 200
    assert response.headers["accept-ranges"] == "bytes"
    assert response.headers["content-length"] == str(len(MP3_BYTES))
    assert response.content == MP3_BYTES


async def test_missing_content_type_defaults(client, user_headers, db_session):
    song = (await upload_song(client, user_headers, cover=("c.png", PNG_BYTES, "image/png"))).json()["song"]
    await db_session.execute(update(BlobFile).values(content_type=None))
    await db_session.commit()

    audio = await client.get(song["audioStreamUrl"], headers=user_headers)
    assert audio.headers["content-type"] == "audio/mpeg"
    image = await client.get(song["coverImageUrl"], headers=user_headers)
    assert image.headers["content-type"] == "image/jpeg"


async def test_unknown_blob_not_found(client, user_headers):
    response = await client.get(
        f"{API}/songs/stream/audio/00000000-0000-0000-0000-000000000000",
        headers=user_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Audio file not found"

    response = await client.get(
        f"{API}/songs/stream/image/00000000-0000-0000-0000-000000000000",
        headers=user_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Image not found"


async def test_missing_blob_behind_track_is_not_found(client, user_headers, blob_store):
    song = (await upload_song(client, user_headers)).json()["song"]

    await blob_store.delete(BlobNamespace.SONGS, UUID(song["audioFileId"]))

    response = await client.get(song["audioStreamUrl"], headers=user_headers)
    assert response.status_code == 404


async def test_global_track_streams_for_any_user(client, admin_headers, other_headers):
    song = (await upload_song(client, admin_headers, path="/admin/songs/upload")).json()["song"]

    response = await client.get(song["audioStreamUrl"], headers=other_headers)

    assert response.status_code == 200
    assert response.content == MP3_BYTES
