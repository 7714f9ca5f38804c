"""Shared route dependencies."""
from typing import Optional

from fastapi import Depends, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..services.admin_service import AdminManagementService
from ..services.access_service import MediaAccessService
from ..services.catalog_service import CatalogQueryService
from ..services.ingestion_service import MediaIngestionService
from ..services.upload_policy import MediaPayload
from ..storage import BlobStore


def get_blob_store(request: Request) -> BlobStore:
    """The process-wide blob store built at startup."""
    return request.app.state.blob_store


def get_ingestion_service(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> MediaIngestionService:
    return MediaIngestionService(db, blob_store)


def get_access_service(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> MediaAccessService:
    return MediaAccessService(db, blob_store)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogQueryService:
    return CatalogQueryService(db)


def get_admin_service(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> AdminManagementService:
    return AdminManagementService(db, blob_store)


async def read_upload(upload: Optional[UploadFile], max_size: int) -> Optional[MediaPayload]:
    """Read an uploaded file into a payload.

    At most ``max_size + 1`` bytes are read, enough for the size check to
    reject oversized files without buffering them whole.
    """
    if upload is None or not upload.filename:
        return None
    data = await upload.read(max_size + 1)
    return MediaPayload(filename=upload.filename, content_type=upload.content_type, data=data)
