"""Media ingestion: store uploaded blobs, then record the track.

Blob writes and the catalog write are separate transactions. If a later
step fails, blobs stored by earlier steps stay orphaned; the failure is
logged and re-raised without compensation.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..metrics import blob_uploads_total, tracks_deleted_total, tracks_ingested_total
from ..models import Account, BlobNamespace, Track, Visibility
from ..repositories import TrackRepository
from ..storage import BlobStore
from .upload_policy import (
    MediaPayload,
    TrackChanges,
    TrackMetadata,
    validate_audio_payload,
    validate_image_payload,
    validate_track_metadata,
)

logger = get_logger(__name__)


class MediaIngestionService:
    """Create, update and delete tracks together with their blobs."""

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store
        self.tracks = TrackRepository(db)

    async def _store(
        self,
        namespace: BlobNamespace,
        payload: MediaPayload,
        actor: Account,
        visibility: Visibility,
    ):
        blob = await self.blob_store.upload(
            namespace,
            filename=payload.filename,
            data=payload.data,
            content_type=payload.content_type,
            uploaded_by=str(actor.id),
            is_global=visibility == Visibility.GLOBAL,
        )
        blob_uploads_total.labels(namespace=namespace.value).inc()
        return blob

    async def ingest(
        self,
        actor: Account,
        audio: Optional[MediaPayload],
        image: Optional[MediaPayload],
        metadata: TrackMetadata,
        visibility: Visibility,
    ) -> Track:
        """
        Store the audio blob, then the optional cover blob, then the track.

        Args:
            actor: Uploading account, recorded as owner
            audio: Required audio payload
            image: Optional cover image payload
            metadata: Title, artist, album and genre; validated here before any payload
            visibility: Personal for the user path, global for the admin path

        Returns:
            The created track
        """
        metadata = validate_track_metadata(metadata.title, metadata.artist, metadata.genre, metadata.album)
        audio = validate_audio_payload(audio)
        image = validate_image_payload(image)

        audio_blob = await self._store(BlobNamespace.SONGS, audio, actor, visibility)

        cover_blob = None
        if image is not None:
            try:
                cover_blob = await self._store(BlobNamespace.IMAGES, image, actor, visibility)
            except Exception as e:
                logger.error(
                    "ingestion_failed_blob_orphaned",
                    step="cover_upload",
                    audio_blob_id=str(audio_blob.id),
                    error=str(e),
                )
                raise

        track = Track(
            title=metadata.title,
            artist=metadata.artist,
            album=metadata.album,
            genre=metadata.genre,
            audio_blob_id=audio_blob.id,
            audio_filename=audio.filename,
            cover_blob_id=cover_blob.id if cover_blob else None,
            cover_filename=image.filename if image else None,
            owner_id=actor.id,
            owner=actor,
            visibility=visibility,
        )
        try:
            track = await self.tracks.create(track)
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "ingestion_failed_blob_orphaned",
                step="track_create",
                audio_blob_id=str(audio_blob.id),
                cover_blob_id=str(cover_blob.id) if cover_blob else None,
                error=str(e),
            )
            raise

        tracks_ingested_total.labels(visibility=visibility.value).inc()
        logger.info(
            "track_ingested",
            track_id=str(track.id),
            owner_id=str(actor.id),
            visibility=visibility.value,
            audio_bytes=audio.size,
            has_cover=cover_blob is not None,
        )
        return track

    async def update(
        self,
        actor: Account,
        track: Track,
        changes: TrackChanges,
        image: Optional[MediaPayload] = None,
    ) -> Track:
        """Apply metadata changes and optionally replace the cover image.

        The old cover blob is deleted before the new one is stored.
        """
        image = validate_image_payload(image)

        if changes.title:
            track.title = changes.title
        if changes.artist:
            track.artist = changes.artist
        if changes.album_provided:
            track.album = changes.album
        if changes.genre:
            track.genre = changes.genre

        if image is not None:
            if track.cover_blob_id is not None:
                await self._delete_blob(BlobNamespace.IMAGES, track.cover_blob_id, track)
            cover_blob = await self._store(BlobNamespace.IMAGES, image, actor, track.visibility)
            track.cover_blob_id = cover_blob.id
            track.cover_filename = image.filename

        track = await self.tracks.save(track)
        logger.info("track_updated", track_id=str(track.id), actor_id=str(actor.id), cover_replaced=image is not None)
        return track

    async def delete(self, track: Track) -> None:
        """Delete the audio blob, the cover blob if any, then the track."""
        await self._delete_blob(BlobNamespace.SONGS, track.audio_blob_id, track)
        if track.cover_blob_id is not None:
            await self._delete_blob(BlobNamespace.IMAGES, track.cover_blob_id, track)
        await self.tracks.delete(track.id)
        tracks_deleted_total.labels(visibility=track.visibility.value).inc()

    async def _delete_blob(self, namespace: BlobNamespace, blob_id, track: Track) -> None:
        try:
            await self.blob_store.delete(namespace, blob_id)
        except NotFoundError:
            # Already gone; the document can still be removed
            logger.warning(
                "blob_missing_on_delete",
                namespace=namespace.value,
                blob_id=str(blob_id),
                track_id=str(track.id),
            )
