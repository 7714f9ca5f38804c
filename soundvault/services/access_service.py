"""Media access: visibility checks and byte streaming for audio and covers."""
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from ..constants import DEFAULT_AUDIO_CONTENT_TYPE, DEFAULT_IMAGE_CONTENT_TYPE
from ..core.exceptions import ForbiddenError, NotFoundError
from ..core.logging import get_logger
from ..metrics import playback_started_total, streaming_bytes_sent_total, streaming_connections_active
from ..models import Account, BlobNamespace, Track
from ..repositories import TrackRepository
from ..storage import BlobStore

logger = get_logger(__name__)


@dataclass
class MediaStream:
    """Headers plus a lazily-read body."""

    content_type: str
    content_length: int
    chunks: AsyncIterator[bytes]
    headers: Dict[str, str] = field(default_factory=dict)


class MediaAccessService:
    """Resolve blobs to tracks, enforce visibility and open byte streams."""

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store
        self.tracks = TrackRepository(db)

    @staticmethod
    def _check_access(actor: Account, track: Track) -> None:
        if not track.is_visible_to(actor.id):
            logger.warning("stream_access_denied", track_id=str(track.id), actor_id=str(actor.id))
            raise ForbiddenError("Access denied")

    async def stream_audio(self, actor: Account, audio_blob_id: UUID) -> MediaStream:
        """Open the audio blob of a visible track and count one play.

        The play counter is persisted before any bytes are sent. A failure to
        persist it is logged and does not block the stream.
        """
        track = await self.tracks.get_by_audio_blob(audio_blob_id)
        if track is None:
            raise NotFoundError("Audio file not found", details={"blob_id": str(audio_blob_id)})
        self._check_access(actor, track)
        track_id, actor_id = track.id, actor.id

        try:
            plays = await self.tracks.increment_plays(track_id)
            set_committed_value(track, "plays", plays)
        except Exception as e:
            await self.db.rollback()
            logger.warning("play_count_increment_failed", track_id=str(track_id), error=str(e))

        blob = await self.blob_store.find(BlobNamespace.SONGS, audio_blob_id)
        if blob is None:
            logger.error("track_blob_missing", track_id=str(track_id), blob_id=str(audio_blob_id))
            raise NotFoundError("Audio file not found", details={"blob_id": str(audio_blob_id)})

        chunks = await self.blob_store.open_download_stream(BlobNamespace.SONGS, audio_blob_id)
        playback_started_total.inc()
        logger.info("audio_stream_started", track_id=str(track_id), actor_id=str(actor_id), length=blob.length)

        return MediaStream(
            content_type=blob.content_type or DEFAULT_AUDIO_CONTENT_TYPE,
            content_length=blob.length,
            chunks=_metered(chunks, BlobNamespace.SONGS, str(track_id)),
            headers={"Accept-Ranges": "bytes"},
        )

    async def stream_image(self, actor: Account, image_blob_id: UUID) -> MediaStream:
        """Open the cover blob of a visible track."""
        track = await self.tracks.get_by_cover_blob(image_blob_id)
        if track is None:
            raise NotFoundError("Image not found", details={"blob_id": str(image_blob_id)})
        self._check_access(actor, track)

        blob = await self.blob_store.find(BlobNamespace.IMAGES, image_blob_id)
        if blob is None:
            logger.error("track_blob_missing", track_id=str(track.id), blob_id=str(image_blob_id))
            raise NotFoundError("Image not found", details={"blob_id": str(image_blob_id)})

        chunks = await self.blob_store.open_download_stream(BlobNamespace.IMAGES, image_blob_id)
        return MediaStream(
            content_type=blob.content_type or DEFAULT_IMAGE_CONTENT_TYPE,
            content_length=blob.length,
            chunks=_metered(chunks, BlobNamespace.IMAGES, str(track.id)),
        )


async def _metered(chunks: AsyncIterator[bytes], namespace: BlobNamespace, track_id: str) -> AsyncIterator[bytes]:
    """Pass chunks through while tracking connections and bytes sent."""
    streaming_connections_active.labels(namespace=namespace.value).inc()
    sent = 0
    completed = False
    try:
        async for chunk in chunks:
            sent += len(chunk)
            streaming_bytes_sent_total.labels(namespace=namespace.value).inc(len(chunk))
            yield chunk
        completed = True
    finally:
        streaming_connections_active.labels(namespace=namespace.value).dec()
        if completed:
            logger.info("stream_completed", namespace=namespace.value, track_id=track_id, bytes_sent=sent)
        else:
            # Closing the source iterator ends the blob read
            await chunks.aclose()
            logger.info("stream_aborted", namespace=namespace.value, track_id=track_id, bytes_sent=sent)
