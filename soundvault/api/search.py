"""Search API endpoints."""
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.dependencies import get_current_account
from ..core.logging import get_logger
from ..metrics import http_requests_total
from ..models import Account
from ..services.catalog_service import CatalogQueryService
from ..services.pagination import PageRequest
from .deps import get_catalog_service
from .schemas import TrackPage

logger = get_logger(__name__)

router = APIRouter(prefix="/songs/search", tags=["search"])


@router.get("", response_model=TrackPage)
async def search_songs(
    q: Optional[str] = Query(None, description="Free text matched against title, artist and album"),
    genre: Optional[str] = Query(None, description="Exact genre"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="createdAt, plays, title or artist"),
    order: Optional[str] = Query(None, description="asc or desc"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    account: Account = Depends(get_current_account),
    catalog: CatalogQueryService = Depends(get_catalog_service),
) -> TrackPage:
    """
    Search tracks visible to the caller.

    Filters combine; with none given this is the full visible listing in
    the requested order.
    """
    start_time = time.time()
    logger.info("search_request", query=q, genre=genre, sort_by=sort_by, order=order)

    try:
        result = await catalog.search(
            account,
            query=q,
            genre=genre,
            sort_by=sort_by,
            order=order,
            page=PageRequest.from_query(page, limit),
        )
    except Exception:
        http_requests_total.labels(method="GET", endpoint="/songs/search", status="error").inc()
        raise

    http_requests_total.labels(method="GET", endpoint="/songs/search", status="success").inc()
    logger.debug("search_request_completed", duration_seconds=time.time() - start_time)
    return TrackPage.from_page(result)
