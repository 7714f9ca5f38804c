"""Track model: metadata for one song and its stored blobs."""
import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..core.config import app_settings
from .base import Base, UUIDMixin, TimestampMixin


class Visibility(str, enum.Enum):
    """Who may see a track."""
    PERSONAL = "personal"  # owner only
    GLOBAL = "global"  # admin-curated, every authenticated account


class Track(Base, UUIDMixin, TimestampMixin):
    """Track model referencing an audio blob and an optional cover blob."""

    __tablename__ = "tracks"

    title = Column(String(200), nullable=False, index=True)
    artist = Column(String(100), nullable=False, index=True)
    album = Column(String(200), nullable=True)
    genre = Column(String(50), nullable=False, index=True)
    duration = Column(Integer, nullable=False, default=0)

    audio_blob_id = Column(Uuid, nullable=False, unique=True, index=True)
    audio_filename = Column(String(512), nullable=False)
    cover_blob_id = Column(Uuid, nullable=True, unique=True, index=True)
    cover_filename = Column(String(512), nullable=True)

    owner_id = Column(Uuid, ForeignKey("accounts.id"), nullable=False, index=True)
    visibility = Column(
        SQLEnum(Visibility, values_callable=lambda values: [v.value for v in values], native_enum=False),
        nullable=False,
        default=Visibility.PERSONAL,
        index=True,
    )
    plays = Column(Integer, nullable=False, default=0, index=True)

    owner = relationship("Account", lazy="joined")

    @property
    def is_global(self) -> bool:
        return self.visibility == Visibility.GLOBAL

    @property
    def audio_stream_url(self) -> str:
        return f"{app_settings.api_prefix}/songs/stream/audio/{self.audio_blob_id}"

    @property
    def cover_image_url(self):
        if self.cover_blob_id is None:
            return None
        return f"{app_settings.api_prefix}/songs/stream/image/{self.cover_blob_id}"

    def is_visible_to(self, account_id) -> bool:
        return self.is_global or self.owner_id == account_id

    def __repr__(self) -> str:
        return f"<Track(id={self.id}, title='{self.title}', owner_id={self.owner_id}, visibility='{self.visibility}')>"
