"""Chunked binary storage tables."""
import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
    Uuid,
    Enum as SQLEnum,
)

from .base import Base, utcnow


class BlobNamespace(str, enum.Enum):
    """Independent blob namespaces."""
    SONGS = "songs"
    IMAGES = "images"


class BlobFile(Base):
    """Descriptor of one stored binary."""

    __tablename__ = "blob_files"

    id = Column(Uuid, primary_key=True)
    namespace = Column(
        SQLEnum(BlobNamespace, values_callable=lambda values: [v.value for v in values], native_enum=False),
        nullable=False,
        index=True,
    )
    filename = Column(String(512), nullable=False)
    content_type = Column(String(100), nullable=True)
    length = Column(Integer, nullable=False, default=0)
    chunk_size = Column(Integer, nullable=False)
    upload_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    original_name = Column(String(512), nullable=True)
    uploaded_by = Column(String(64), nullable=True)
    is_global = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<BlobFile(id={self.id}, namespace='{self.namespace}', length={self.length})>"


class BlobChunk(Base):
    """One fixed-size slice of a blob's bytes."""

    __tablename__ = "blob_chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(Uuid, ForeignKey("blob_files.id", ondelete="CASCADE"), nullable=False, index=True)
    n = Column(Integer, nullable=False)
    data = Column(LargeBinary, nullable=False)

    __table_args__ = (
        UniqueConstraint("file_id", "n", name="uq_blob_chunks_file_n"),
    )
