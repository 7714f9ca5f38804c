"""Chunked blob store with independent namespaces.

Binary payloads are split into fixed-size chunks and stored next to a
descriptor row. Every operation runs in its own session and commits on its
own, so blob writes are never part of a catalog transaction.
"""
import asyncio
import uuid
from typing import AsyncIterator, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..models import BlobChunk, BlobFile, BlobNamespace
from ..models.base import utcnow

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 255 * 1024


class BlobStore:
    """Store client shared by all services for the lifetime of the process."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._session_factory = session_factory
        self.chunk_size = chunk_size

    async def upload(
        self,
        namespace: BlobNamespace,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        uploaded_by: Optional[str] = None,
        is_global: bool = False,
    ) -> BlobFile:
        """Store ``data`` under a freshly generated identifier.

        Args:
            namespace: Target namespace (songs or images)
            filename: Original client filename
            data: Full payload
            content_type: Declared MIME type, recorded for streaming
            uploaded_by: Account id of the uploader
            is_global: Marks blobs uploaded through the admin path

        Returns:
            The committed blob descriptor
        """
        blob = BlobFile(
            id=uuid.uuid4(),
            namespace=namespace,
            filename=filename,
            content_type=content_type,
            length=len(data),
            chunk_size=self.chunk_size,
            upload_date=utcnow(),
            original_name=filename,
            uploaded_by=uploaded_by,
            is_global=is_global,
        )

        async with self._session_factory() as session:
            session.add(blob)
            # Descriptor row must exist before its chunks
            await session.flush()
            for n, offset in enumerate(range(0, len(data), self.chunk_size)):
                session.add(BlobChunk(file_id=blob.id, n=n, data=data[offset:offset + self.chunk_size]))
            await session.commit()

        logger.info(
            "blob_uploaded",
            namespace=namespace.value,
            blob_id=str(blob.id),
            length=blob.length,
            content_type=content_type,
        )
        return blob

    async def find(self, namespace: BlobNamespace, blob_id: UUID) -> Optional[BlobFile]:
        """Get a blob descriptor, or None if it is not in ``namespace``."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(BlobFile).where(BlobFile.id == blob_id, BlobFile.namespace == namespace)
            )
            return result.scalar_one_or_none()

    async def open_download_stream(self, namespace: BlobNamespace, blob_id: UUID) -> AsyncIterator[bytes]:
        """Yield the blob's bytes chunk by chunk.

        Chunks are fetched lazily, so a consumer that stops iterating (for
        example because the client disconnected) stops the reads too.
        """
        blob = await self.find(namespace, blob_id)
        if blob is None:
            raise NotFoundError(
                message="File not found",
                details={"namespace": namespace.value, "blob_id": str(blob_id)},
            )
        return self._iter_chunks(blob)

    async def _iter_chunks(self, blob: BlobFile) -> AsyncIterator[bytes]:
        expected_chunks = -(-blob.length // blob.chunk_size)
        sent = 0
        try:
            async with self._session_factory() as session:
                for n in range(expected_chunks):
                    result = await session.execute(
                        select(BlobChunk.data).where(BlobChunk.file_id == blob.id, BlobChunk.n == n)
                    )
                    data = result.scalar_one_or_none()
                    if data is None:
                        logger.error("blob_chunk_missing", blob_id=str(blob.id), chunk=n)
                        return
                    sent += len(data)
                    yield data
        except (GeneratorExit, asyncio.CancelledError):
            logger.info("blob_read_aborted", blob_id=str(blob.id), bytes_sent=sent, length=blob.length)
            raise

    async def delete(self, namespace: BlobNamespace, blob_id: UUID) -> None:
        """Delete a blob and its chunks.

        Raises:
            NotFoundError: if no such blob exists in ``namespace``
        """
        async with self._session_factory() as session:
            result = await session.execute(
                select(BlobFile.id).where(BlobFile.id == blob_id, BlobFile.namespace == namespace)
            )
            if result.scalar_one_or_none() is None:
                raise NotFoundError(
                    message="File not found",
                    details={"namespace": namespace.value, "blob_id": str(blob_id)},
                )
            await session.execute(delete(BlobChunk).where(BlobChunk.file_id == blob_id))
            await session.execute(delete(BlobFile).where(BlobFile.id == blob_id))
            await session.commit()

        logger.info("blob_deleted", namespace=namespace.value, blob_id=str(blob_id))
