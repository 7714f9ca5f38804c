"""Catalog queries: visibility-scoped listing, search and lookup."""
import time
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from ..constants import GENRES, SORT_FIELDS, SORT_ORDERS
from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..metrics import search_duration_seconds, search_queries_total
from ..models import Account, Track, Visibility
from ..repositories import TrackRepository, visible_to
from .pagination import Page, PageRequest

logger = get_logger(__name__)

SORT_COLUMNS = {
    "createdAt": Track.created_at,
    "plays": Track.plays,
    "title": Track.title,
    "artist": Track.artist,
}

NEWEST_FIRST = (Track.created_at.desc(), Track.id.desc())


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def text_match(query: str) -> Any:
    """Match any whitespace-separated term against title, artist or album."""
    clauses = []
    for term in query.split():
        pattern = f"%{_escape_like(term)}%"
        clauses.extend([
            Track.title.ilike(pattern, escape="\\"),
            Track.artist.ilike(pattern, escape="\\"),
            Track.album.ilike(pattern, escape="\\"),
        ])
    return or_(*clauses)


def sort_clause(sort_by: str, order: str) -> Tuple[Any, Any]:
    """Requested column first, id second, so pages never overlap."""
    column = SORT_COLUMNS[sort_by]
    if order == "asc":
        return column.asc(), Track.id.asc()
    return column.desc(), Track.id.desc()


class CatalogQueryService:
    """Read-only access to the track catalog."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tracks = TrackRepository(db)

    async def _page(self, criteria: List[Any], order_by, page: PageRequest) -> Page:
        total = await self.tracks.count(*criteria)
        items = await self.tracks.find_many(*criteria, order_by=order_by, offset=page.offset, limit=page.limit)
        return Page(items=items, total=total, request=page)

    async def list_all(self, actor: Account, page: PageRequest) -> Page:
        """Global tracks plus the actor's own, newest first."""
        result = await self._page([visible_to(actor.id)], NEWEST_FIRST, page)
        logger.info("tracks_listed", actor_id=str(actor.id), total=result.total, page=page.page)
        return result

    async def list_mine(self, actor: Account, page: PageRequest) -> Page:
        result = await self._page([Track.owner_id == actor.id], NEWEST_FIRST, page)
        logger.info("own_tracks_listed", actor_id=str(actor.id), total=result.total, page=page.page)
        return result

    async def list_global(self, page: PageRequest) -> Page:
        return await self._page([Track.visibility == Visibility.GLOBAL], NEWEST_FIRST, page)

    async def search(
        self,
        actor: Account,
        query: Optional[str] = None,
        genre: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
        page: Optional[PageRequest] = None,
    ) -> Page:
        """
        Search visible tracks.

        Args:
            actor: Requesting account; scopes results to global + own tracks
            query: Free text matched against title, artist and album
            genre: Exact genre filter
            sort_by: One of createdAt, plays, title, artist
            order: asc or desc
            page: Page request

        Returns:
            A page of matching tracks
        """
        start_time = time.time()
        sort_by = sort_by or "createdAt"
        order = order or "desc"
        page = page or PageRequest()

        if query is not None and not query.strip():
            raise ValidationError("Search query cannot be empty", details={"field": "q"})
        if genre is not None and genre not in GENRES:
            raise ValidationError("Invalid genre", details={"field": "genre"})
        if sort_by not in SORT_FIELDS:
            raise ValidationError("Invalid sort field", details={"field": "sortBy"})
        if order not in SORT_ORDERS:
            raise ValidationError("Order must be asc or desc", details={"field": "order"})

        criteria = [visible_to(actor.id)]
        if query:
            criteria.append(text_match(query.strip()))
        if genre:
            criteria.append(Track.genre == genre)

        result = await self._page(criteria, sort_clause(sort_by, order), page)

        duration = time.time() - start_time
        search_queries_total.labels(has_text=str(bool(query)), has_genre=str(bool(genre))).inc()
        search_duration_seconds.observe(duration)
        logger.info(
            "search_completed",
            query=query,
            genre=genre,
            sort_by=sort_by,
            order=order,
            total=result.total,
            duration_seconds=duration,
        )
        return result

    async def get_by_id(self, actor: Account, track_id: UUID) -> Track:
        track = await self.tracks.get(track_id)
        if track is None:
            logger.warning("track_not_found", track_id=str(track_id))
            raise NotFoundError("Song not found", details={"track_id": str(track_id)})
        if not track.is_visible_to(actor.id):
            raise ForbiddenError("Access denied")
        return track
