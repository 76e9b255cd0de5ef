"""
Authentication routes for social login.

Provider failures send the user back to the provider entry point so they can
retry. Only storage and session failures surface, as a generic 500.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.config import settings
from socialauth.database import get_db
from socialauth.dependencies.auth import (
    SessionPayload,
    get_current_session,
    get_gateway,
    get_session_issuer,
)
from socialauth.errors import (
    IdentityPersistenceError,
    ProviderAuthError,
    SessionStoreError,
    UnknownProviderError,
)
from socialauth.logging_config import get_logger
from socialauth.sentry_config import capture_exception
from socialauth.services.identity_resolver import IdentityResolver
from socialauth.services.provider_gateway import ProviderGateway
from socialauth.services.session_issuer import SessionIssuer
from socialauth.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/providers")
async def list_providers(gateway: ProviderGateway = Depends(get_gateway)):
    """
    Login links for every configured provider.
    """
    return {
        "providers": [
            {"name": name, "login_url": f"/auth/{name}"}
            for name in gateway.names()
        ]
    }


@router.get("/me")
async def get_me(
    current: SessionPayload = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """
    Get current user info.
    """
    user = await UserService(db).get_by_id(current.sub)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "provider": user.provider_name.value,
    }


@router.post("/logout")
async def logout():
    """
    Logout endpoint. Drops the session cookie.
    """
    response = RedirectResponse(url=settings.POST_LOGIN_REDIRECT, status_code=303)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@router.get("/{provider}")
async def begin_login(
    provider: str,
    request: Request,
    gateway: ProviderGateway = Depends(get_gateway),
):
    """
    Redirect user to the provider consent screen.
    """
    try:
        instruction = await gateway.begin_auth(provider, request.session)
    except UnknownProviderError:
        raise HTTPException(status_code=404, detail="Unknown provider")

    return RedirectResponse(url=instruction.url, status_code=302)


@router.get("/{provider}/callback")
async def login_callback(
    provider: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    gateway: ProviderGateway = Depends(get_gateway),
    issuer: SessionIssuer = Depends(get_session_issuer),
):
    """
    Handle the provider callback (server-side flow).

    1. Verifies the callback and fetches the profile
    2. Finds or creates the local user
    3. Issues a persistent session cookie
    4. Redirects to the post-login destination
    """
    log = get_logger(provider=provider)

    try:
        profile = await gateway.complete_auth(
            provider, request.query_params, request.session
        )
    except UnknownProviderError:
        raise HTTPException(status_code=404, detail="Unknown provider")
    except ProviderAuthError as e:
        log.warning("login_retry", reason=e.reason)
        return RedirectResponse(url=f"/auth/{provider}", status_code=302)

    try:
        user = await IdentityResolver(db).resolve(profile)
        # No password to fall back on, so social sessions are always long-lived
        session = issuer.issue(user, persistent=True)
    except (IdentityPersistenceError, SessionStoreError) as e:
        log.error("login_internal_error", error_type=type(e).__name__)
        capture_exception(e)
        raise HTTPException(status_code=500, detail="Authentication failed")

    response = RedirectResponse(url=issuer.post_login_destination(), status_code=302)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=session.max_age
    )
    return response
