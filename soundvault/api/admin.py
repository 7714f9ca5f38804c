"""Admin API endpoints: default (global) tracks and user accounts."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ..auth.dependencies import require_capability
from ..auth.permissions import Capability
from ..core.config import app_settings
from ..core.logging import get_logger
from ..models import Account
from ..services.admin_service import AdminManagementService
from ..services.pagination import PageRequest
from ..services.upload_policy import TrackMetadata, validate_track_changes
from .deps import get_admin_service, read_upload
from .schemas import (
    MessageResponse,
    PaginationInfo,
    TrackEnvelope,
    TrackPage,
    TrackResponse,
    UserPage,
    UserSummary,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

manage_songs = require_capability(Capability.MANAGE_DEFAULT_SONGS)
manage_users = require_capability(Capability.MANAGE_USERS)


@router.post("/songs/upload", response_model=TrackEnvelope, status_code=status.HTTP_201_CREATED)
async def upload_default_song(
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    album: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None, alias="audioFile"),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    admin: Account = Depends(manage_songs),
    service: AdminManagementService = Depends(get_admin_service),
) -> TrackEnvelope:
    """Upload a default track visible to every account."""
    metadata = TrackMetadata(title=title, artist=artist, genre=genre, album=album)
    track = await service.ingest_default(
        admin,
        await read_upload(audio, app_settings.max_audio_size),
        await read_upload(cover_image, app_settings.max_image_size),
        metadata,
    )
    return TrackEnvelope(message="Default song uploaded successfully", song=TrackResponse.from_track(track))


@router.get("/songs", response_model=TrackPage)
async def list_default_songs(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    admin: Account = Depends(manage_songs),
    service: AdminManagementService = Depends(get_admin_service),
) -> TrackPage:
    result = await service.list_default(PageRequest.from_query(page, limit))
    return TrackPage.from_page(result)


@router.put("/songs/{track_id}", response_model=TrackEnvelope)
async def update_default_song(
    track_id: UUID,
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    album: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    admin: Account = Depends(manage_songs),
    service: AdminManagementService = Depends(get_admin_service),
) -> TrackEnvelope:
    changes = validate_track_changes(title, artist, genre, album)
    track = await service.update_default(
        admin,
        track_id,
        changes,
        await read_upload(cover_image, app_settings.max_image_size),
    )
    return TrackEnvelope(message="Song updated successfully", song=TrackResponse.from_track(track))


@router.delete("/songs/{track_id}", response_model=MessageResponse)
async def delete_default_song(
    track_id: UUID,
    admin: Account = Depends(manage_songs),
    service: AdminManagementService = Depends(get_admin_service),
) -> MessageResponse:
    await service.delete_default(track_id)
    logger.info("default_song_deleted", track_id=str(track_id), admin_id=str(admin.id))
    return MessageResponse(message="Song deleted successfully")


@router.get("/users", response_model=UserPage)
async def list_users(
    role: Optional[str] = Query(None, description="Filter by role: user or admin"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    admin: Account = Depends(manage_users),
    service: AdminManagementService = Depends(get_admin_service),
) -> UserPage:
    """Accounts newest first, each with its personal track count."""
    result = await service.list_users(role, PageRequest.from_query(page, limit))
    users = []
    for entry in result.items:
        account = entry["account"]
        users.append(UserSummary(
            id=account.id,
            username=account.username,
            email=account.email,
            role=account.role.value,
            created_at=account.created_at,
            songs_count=entry["songs_count"],
        ))
    return UserPage(data=users, pagination=PaginationInfo.from_page(result))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    admin: Account = Depends(manage_users),
    service: AdminManagementService = Depends(get_admin_service),
) -> MessageResponse:
    """Delete a user account and every personal track it owns."""
    deleted = await service.delete_user(user_id)
    logger.info("user_removed_by_admin", user_id=str(user_id), admin_id=str(admin.id), tracks_deleted=deleted)
    return MessageResponse(message=f"User and {deleted} associated songs deleted successfully")
