"""FastAPI app entrypoint."""

from __future__ import annotations

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from reformmap.api.deps import get_registry_service, get_settings
from reformmap.api.routes.auth import router as auth_router
from reformmap.api.routes.events import router as events_router
from reformmap.api.routes.uploads import router as uploads_router
from reformmap.api.schemas.events import PaletteResponse
from reformmap.config import Settings
from reformmap.core.registry_service import RegistryService
from reformmap.logging_config import configure_logging


_REQUEST_PARTS = {"body", "query", "path", "header"}


async def request_validation_failed(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as 400 with a readable reason."""
    problems = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in _REQUEST_PARTS]
        name = ".".join(location) or "body"
        problems.append(f"{name}: {error.get('msg', 'invalid')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request: " + "; ".join(problems)},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = get_settings()
    configure_logging(settings.environment, settings.log_level)

    app = FastAPI(title="Currency Reform Map API", version="0.1.0")
    app.dependency_overrides[get_settings] = lambda: settings
    app.add_exception_handler(RequestValidationError, request_validation_failed)
    app.include_router(auth_router)
    app.include_router(events_router)
    app.include_router(uploads_router)

    if settings.blob_backend == "local" and settings.public_base_url.startswith("/"):
        app.mount(
            settings.public_base_url,
            StaticFiles(directory=settings.upload_dir, check_dir=False),
            name="files",
        )

    @app.get("/api/v1/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/v1/palette", response_model=PaletteResponse, tags=["system"])
    async def palette(
        service: RegistryService = Depends(get_registry_service),
    ) -> PaletteResponse:
        return PaletteResponse(palette=service.palette, default_color=service.default_color)

    return app


app = create_app()


def run() -> None:
    uvicorn.run("reformmap.api.app:app", host="0.0.0.0", port=8000, reload=False)
