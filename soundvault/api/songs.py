"""Personal track API endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ..auth.dependencies import get_current_account
from ..constants import GENRES
from ..core.config import app_settings
from ..core.exceptions import ForbiddenError, NotFoundError
from ..core.logging import get_logger
from ..models import Account, Track, Visibility
from ..services.catalog_service import CatalogQueryService
from ..services.ingestion_service import MediaIngestionService
from ..services.pagination import PageRequest
from ..services.upload_policy import TrackMetadata, validate_track_changes
from .deps import get_catalog_service, get_ingestion_service, read_upload
from .schemas import GenresResponse, MessageResponse, TrackEnvelope, TrackPage, TrackResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/songs", tags=["songs"])


@router.get("/genres", response_model=GenresResponse)
async def list_genres() -> GenresResponse:
    """The fixed genre list. No session required."""
    return GenresResponse(genres=list(GENRES))


@router.get("", response_model=TrackPage)
async def list_songs(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Items per page (max 100)"),
    account: Account = Depends(get_current_account),
    catalog: CatalogQueryService = Depends(get_catalog_service),
) -> TrackPage:
    """Global tracks plus the caller's own, newest first."""
    result = await catalog.list_all(account, PageRequest.from_query(page, limit))
    return TrackPage.from_page(result)


@router.get("/my-songs", response_model=TrackPage)
async def list_my_songs(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    account: Account = Depends(get_current_account),
    catalog: CatalogQueryService = Depends(get_catalog_service),
) -> TrackPage:
    result = await catalog.list_mine(account, PageRequest.from_query(page, limit))
    return TrackPage.from_page(result)


@router.post("/upload", response_model=TrackEnvelope, status_code=status.HTTP_201_CREATED)
async def upload_song(
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    album: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None, alias="audioFile"),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    account: Account = Depends(get_current_account),
    ingestion: MediaIngestionService = Depends(get_ingestion_service),
) -> TrackEnvelope:
    """Upload a personal track: audio file plus optional cover image."""
    metadata = TrackMetadata(title=title, artist=artist, genre=genre, album=album)
    track = await ingestion.ingest(
        account,
        await read_upload(audio, app_settings.max_audio_size),
        await read_upload(cover_image, app_settings.max_image_size),
        metadata,
        Visibility.PERSONAL,
    )
    return TrackEnvelope(message="Song uploaded successfully", song=TrackResponse.from_track(track))


@router.get("/{track_id}", response_model=TrackEnvelope)
async def get_song(
    track_id: UUID,
    account: Account = Depends(get_current_account),
    catalog: CatalogQueryService = Depends(get_catalog_service),
) -> TrackEnvelope:
    track = await catalog.get_by_id(account, track_id)
    return TrackEnvelope(song=TrackResponse.from_track(track))


async def _get_owned_track(ingestion: MediaIngestionService, account: Account, track_id: UUID, action: str) -> Track:
    track = await ingestion.tracks.get(track_id)
    if track is None:
        raise NotFoundError("Song not found", details={"track_id": str(track_id)})
    if track.owner_id != account.id:
        logger.warning("track_ownership_denied", track_id=str(track_id), account_id=str(account.id), action=action)
        raise ForbiddenError(f"You can only {action} your own songs")
    return track


@router.put("/{track_id}", response_model=TrackEnvelope)
async def update_song(
    track_id: UUID,
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    album: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    account: Account = Depends(get_current_account),
    ingestion: MediaIngestionService = Depends(get_ingestion_service),
) -> TrackEnvelope:
    """Update metadata of an owned track and optionally replace its cover."""
    track = await _get_owned_track(ingestion, account, track_id, "update")
    changes = validate_track_changes(title, artist, genre, album)
    track = await ingestion.update(
        account,
        track,
        changes,
        await read_upload(cover_image, app_settings.max_image_size),
    )
    return TrackEnvelope(message="Song updated successfully", song=TrackResponse.from_track(track))


@router.delete("/{track_id}", response_model=MessageResponse)
async def delete_song(
    track_id: UUID,
    account: Account = Depends(get_current_account),
    ingestion: MediaIngestionService = Depends(get_ingestion_service),
) -> MessageResponse:
    track = await _get_owned_track(ingestion, account, track_id, "delete")
    await ingestion.delete(track)
    logger.info("song_deleted", track_id=str(track_id), account_id=str(account.id))
    return MessageResponse(message="Song deleted successfully")
