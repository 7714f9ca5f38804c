"""Catalog repository for track metadata documents."""
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import Track, Visibility

logger = get_logger(__name__)


def visible_to(account_id: UUID) -> Any:
    """Filter clause: global tracks plus the account's own tracks."""
    return or_(Track.visibility == Visibility.GLOBAL, Track.owner_id == account_id)


class TrackRepository:
    """Persistence for :class:`Track` rows. Every write commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, track: Track) -> Track:
        self.db.add(track)
        await self.db.commit()
        logger.info("track_created", track_id=str(track.id), visibility=track.visibility.value)
        return track

    async def get(self, track_id: UUID) -> Optional[Track]:
        result = await self.db.execute(select(Track).where(Track.id == track_id))
        return result.scalar_one_or_none()

    async def get_by_audio_blob(self, blob_id: UUID) -> Optional[Track]:
        result = await self.db.execute(select(Track).where(Track.audio_blob_id == blob_id))
        return result.scalar_one_or_none()

    async def get_by_cover_blob(self, blob_id: UUID) -> Optional[Track]:
        result = await self.db.execute(select(Track).where(Track.cover_blob_id == blob_id))
        return result.scalar_one_or_none()

    async def save(self, track: Track) -> Track:
        await self.db.commit()
        await self.db.refresh(track)
        return track

    async def delete(self, track_id: UUID) -> None:
        await self.db.execute(delete(Track).where(Track.id == track_id))
        await self.db.commit()
        logger.info("track_deleted", track_id=str(track_id))

    async def increment_plays(self, track_id: UUID) -> int:
        """Atomically add one play and return the new counter."""
        await self.db.execute(
            update(Track)
            .where(Track.id == track_id)
            .values(plays=Track.plays + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        result = await self.db.execute(select(Track.plays).where(Track.id == track_id))
        return result.scalar_one()

    async def count(self, *criteria: Any) -> int:
        result = await self.db.execute(select(func.count()).select_from(Track).where(*criteria))
        return result.scalar_one()

    async def find_many(
        self,
        *criteria: Any,
        order_by: Sequence[Any] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Track]:
        query = select(Track).where(*criteria).order_by(*order_by).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_personal_by_owner(self, owner_id: UUID) -> List[Track]:
        return await self.find_many(
            Track.owner_id == owner_id,
            Track.visibility == Visibility.PERSONAL,
            order_by=(Track.created_at, Track.id),
        )

    async def count_personal_by_owner(self, owner_id: UUID) -> int:
        return await self.count(Track.owner_id == owner_id, Track.visibility == Visibility.PERSONAL)
