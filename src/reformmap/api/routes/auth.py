"""Admin session routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from reformmap.api.deps import get_authenticator
from reformmap.api.schemas.auth import SessionRequest, SessionResponse
from reformmap.core.auth import AdminAuthenticator
from reformmap.errors import AuthorizationError

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/session", response_model=SessionResponse)
async def create_session(
    request: SessionRequest,
    authenticator: AdminAuthenticator = Depends(get_authenticator),
) -> SessionResponse:
    try:
        token = authenticator.login(request.email, request.password)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.reason) from exc
    return SessionResponse(token=token)
