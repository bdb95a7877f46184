"""Attachment upload routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from reformmap.api.deps import get_actor, get_registry_service
from reformmap.api.schemas.uploads import UploadResponse
from reformmap.core.blob_uploader import DEFAULT_CONTENT_TYPE, DEFAULT_FILENAME, Attachment
from reformmap.core.registry_service import RegistryService
from reformmap.errors import AuthorizationError, UploadError

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])


@router.post("", response_model=UploadResponse)
async def upload_attachment(
    request: Request,
    filename: str = Query(default=DEFAULT_FILENAME),
    actor: str | None = Depends(get_actor),
    service: RegistryService = Depends(get_registry_service),
) -> UploadResponse:
    attachment = Attachment(
        filename=filename,
        content=await request.body(),
        content_type=request.headers.get("content-type", DEFAULT_CONTENT_TYPE),
    )
    try:
        url = await service.upload(actor, attachment)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.reason) from exc
    except UploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.reason
        ) from exc
    return UploadResponse(url=url)
