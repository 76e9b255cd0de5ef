"""
Authentication dependencies for FastAPI.
"""
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ValidationError

from socialauth.config import settings
from socialauth.services.provider_gateway import ProviderGateway
from socialauth.services.session_issuer import SessionIssuer


# Bearer is optional; the session cookie is the primary carrier
security = HTTPBearer(auto_error=False)


class SessionPayload(BaseModel):
    """Session token payload model."""
    sub: str      # user_id
    provider: str
    persistent: bool


@lru_cache
def get_gateway() -> ProviderGateway:
    """Provider registry built once from settings."""
    return ProviderGateway.from_settings(settings)


def get_session_issuer() -> SessionIssuer:
    return SessionIssuer(settings)


async def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> SessionPayload:
    """
    Dependency that requires a valid session.

    Reads the session cookie, falling back to an Authorization header.
    Raises 401 if missing or invalid.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials

    payload = issuer.verify(token) if token else None

    try:
        if payload is not None:
            return SessionPayload(**payload)
    except ValidationError:
        pass

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired session",
        headers={"WWW-Authenticate": "Bearer"},
    )
