"""Request and response models."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models import Account, Track
from ..services.pagination import Page


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UploaderResponse(CamelModel):
    id: UUID
    username: str


class TrackResponse(CamelModel):
    """Track response model with derived stream URLs."""

    id: UUID
    title: str = Field(..., description="Track title")
    artist: str = Field(..., description="Artist name")
    album: Optional[str] = Field(None, description="Album name")
    genre: str = Field(..., description="Genre from the fixed genre list")
    duration: int = Field(0, ge=0, description="Duration in seconds")
    audio_file_id: UUID
    audio_filename: str
    cover_image_id: Optional[UUID] = None
    cover_image_filename: Optional[str] = None
    audio_stream_url: str
    cover_image_url: Optional[str] = None
    uploaded_by: Optional[UploaderResponse] = None
    visibility: str
    is_default: bool
    plays: int = Field(0, ge=0)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_track(cls, track: Track) -> "TrackResponse":
        return cls(
            id=track.id,
            title=track.title,
            artist=track.artist,
            album=track.album,
            genre=track.genre,
            duration=track.duration or 0,
            audio_file_id=track.audio_blob_id,
            audio_filename=track.audio_filename,
            cover_image_id=track.cover_blob_id,
            cover_image_filename=track.cover_filename,
            audio_stream_url=track.audio_stream_url,
            cover_image_url=track.cover_image_url,
            uploaded_by=UploaderResponse(id=track.owner.id, username=track.owner.username) if track.owner else None,
            visibility=track.visibility.value,
            is_default=track.is_global,
            plays=track.plays or 0,
            created_at=track.created_at,
            updated_at=track.updated_at,
        )


class AccountResponse(CamelModel):
    """Public account fields. The password hash is never included."""

    id: UUID
    username: str
    email: str
    role: str
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            role=account.role.value,
            created_at=account.created_at,
        )


class UserSummary(AccountResponse):
    songs_count: int = 0


class PaginationInfo(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    limit: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_page(cls, page: Page) -> "PaginationInfo":
        return cls(
            current_page=page.request.page,
            total_pages=page.total_pages,
            total_items=page.total,
            limit=page.request.limit,
            has_next_page=page.has_next,
            has_prev_page=page.has_prev,
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class TrackEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    song: TrackResponse


class TrackPage(BaseModel):
    success: bool = True
    data: List[TrackResponse]
    pagination: PaginationInfo

    @classmethod
    def from_page(cls, page: Page) -> "TrackPage":
        return cls(
            data=[TrackResponse.from_track(track) for track in page.items],
            pagination=PaginationInfo.from_page(page),
        )


class AccountEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: AccountResponse


class UserPage(BaseModel):
    success: bool = True
    data: List[UserSummary]
    pagination: PaginationInfo


class GenresResponse(BaseModel):
    success: bool = True
    genres: List[str]


class SignupRequest(BaseModel):
    username: str = Field(..., description="3-30 letters, digits or underscores")
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
