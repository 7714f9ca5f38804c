"""Administration of default (global) tracks and user accounts."""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..models import Account, Role, Track, Visibility
from ..repositories import AccountRepository, TrackRepository
from ..storage import BlobStore
from .catalog_service import CatalogQueryService
from .ingestion_service import MediaIngestionService
from .pagination import Page, PageRequest
from .upload_policy import MediaPayload, TrackChanges, TrackMetadata

logger = get_logger(__name__)


class AdminManagementService:
    """Admin-only operations. Callers must already hold the admin capability."""

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store
        self.tracks = TrackRepository(db)
        self.accounts = AccountRepository(db)
        self.ingestion = MediaIngestionService(db, blob_store)
        self.catalog = CatalogQueryService(db)

    async def ingest_default(
        self,
        actor: Account,
        audio: Optional[MediaPayload],
        image: Optional[MediaPayload],
        metadata: TrackMetadata,
    ) -> Track:
        """Ingest a track that every account can see."""
        return await self.ingestion.ingest(actor, audio, image, metadata, Visibility.GLOBAL)

    async def list_default(self, page: PageRequest) -> Page:
        return await self.catalog.list_global(page)

    async def _get_default(self, track_id: UUID) -> Track:
        track = await self.tracks.get(track_id)
        if track is None:
            raise NotFoundError("Song not found", details={"track_id": str(track_id)})
        if not track.is_global:
            raise ValidationError("This is not a default song", details={"track_id": str(track_id)})
        return track

    async def update_default(
        self,
        actor: Account,
        track_id: UUID,
        changes: TrackChanges,
        image: Optional[MediaPayload] = None,
    ) -> Track:
        track = await self._get_default(track_id)
        return await self.ingestion.update(actor, track, changes, image)

    async def delete_default(self, track_id: UUID) -> None:
        track = await self._get_default(track_id)
        await self.ingestion.delete(track)

    async def list_users(self, role: Optional[str], page: PageRequest) -> Page:
        """List accounts newest first, each with its personal track count."""
        role_filter: Optional[Role] = None
        if role:
            try:
                role_filter = Role(role)
            except ValueError:
                raise ValidationError("Invalid role", details={"field": "role", "role": role}) from None

        total = await self.accounts.count(role_filter)
        accounts = await self.accounts.find_many(role_filter, offset=page.offset, limit=page.limit)

        entries: List[Dict[str, Any]] = []
        for account in accounts:
            entries.append({
                "account": account,
                "songs_count": await self.tracks.count_personal_by_owner(account.id),
            })
        return Page(items=entries, total=total, request=page)

    async def delete_user(self, target_id: UUID) -> int:
        """
        Delete a non-admin account and its personal tracks.

        Each track's audio blob, cover blob and document are removed in turn,
        then the account. There is no rollback: a failure midway leaves the
        tracks processed so far deleted.

        Returns:
            Number of tracks deleted
        """
        account = await self.accounts.get(target_id)
        if account is None:
            raise NotFoundError("User not found", details={"account_id": str(target_id)})
        if account.role == Role.ADMIN:
            logger.warning("admin_delete_refused", account_id=str(target_id))
            raise ForbiddenError("Cannot delete admin users")

        tracks = await self.tracks.list_personal_by_owner(target_id)
        for track in tracks:
            await self.ingestion.delete(track)

        await self.accounts.delete(target_id)
        logger.info("user_deleted", account_id=str(target_id), tracks_deleted=len(tracks))
        return len(tracks)
