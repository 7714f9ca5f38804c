"""Audio and cover image streaming endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..auth.dependencies import get_current_account
from ..metrics import http_requests_total
from ..models import Account
from ..services.access_service import MediaAccessService, MediaStream
from .deps import get_access_service

router = APIRouter(prefix="/songs/stream", tags=["streaming"])


def _to_response(stream: MediaStream) -> StreamingResponse:
    headers = {"Content-Length": str(stream.content_length), **stream.headers}
    return StreamingResponse(stream.chunks, media_type=stream.content_type, headers=headers)


@router.get("/audio/{blob_id}")
async def stream_audio(
    blob_id: UUID,
    account: Account = Depends(get_current_account),
    access: MediaAccessService = Depends(get_access_service),
) -> StreamingResponse:
    """
    Stream a track's audio and count one play.

    Range headers are not honored; the full file is always sent with 200.
    """
    stream = await access.stream_audio(account, blob_id)
    http_requests_total.labels(method="GET", endpoint="/songs/stream/audio", status=200).inc()
    return _to_response(stream)


@router.get("/image/{blob_id}")
async def stream_image(
    blob_id: UUID,
    account: Account = Depends(get_current_account),
    access: MediaAccessService = Depends(get_access_service),
) -> StreamingResponse:
    """Stream a track's cover image."""
    stream = await access.stream_image(account, blob_id)
    http_requests_total.labels(method="GET", endpoint="/songs/stream/image", status=200).inc()
    return _to_response(stream)
