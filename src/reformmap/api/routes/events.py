"""Reform event routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from reformmap.api.deps import get_actor, get_registry_service
from reformmap.api.schemas.events import ColorsResponse, SaveEventRequest, SaveEventResponse
from reformmap.core.color_projector import fill_color_expression
from reformmap.core.registry_service import RegistryService, SubmitEventInput
from reformmap.errors import AuthorizationError, StorageError, UploadError, ValidationError
from reformmap.models.events import MAX_YEAR, MIN_YEAR, ReformEvent

router = APIRouter(prefix="/api/v1/events", tags=["events"])


def _storage_failure(exc: StorageError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.reason)


@router.get("", response_model=list[ReformEvent])
async def list_events(
    year: int | None = Query(default=None, ge=MIN_YEAR, le=MAX_YEAR),
    country_code: str | None = Query(default=None, alias="countryCode"),
    service: RegistryService = Depends(get_registry_service),
) -> list[ReformEvent]:
    if year is None and country_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="year is required when countryCode is given",
        )
    try:
        if year is None:
            return await service.query_all()
        return await service.query(year, country_code or None)
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@router.post("", response_model=SaveEventResponse)
async def save_event(
    request: SaveEventRequest,
    actor: str | None = Depends(get_actor),
    service: RegistryService = Depends(get_registry_service),
) -> SaveEventResponse:
    try:
        await service.submit(
            actor,
            SubmitEventInput(
                country_code=request.country_code,
                year=request.year,
                type=request.type,
                title=request.title,
                desc=request.desc,
                file_url=request.file_url,
            ),
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason) from exc
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.reason) from exc
    except UploadError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.reason) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return SaveEventResponse(ok=True)


@router.get("/colors", response_model=ColorsResponse)
async def event_colors(
    year: int = Query(ge=MIN_YEAR, le=MAX_YEAR),
    service: RegistryService = Depends(get_registry_service),
) -> ColorsResponse:
    try:
        colors = await service.colors(year)
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return ColorsResponse(
        year=year,
        colors=colors,
        expression=fill_color_expression(colors, service.default_color),
    )
