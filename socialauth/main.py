"""
SocialAuth - provider-agnostic OAuth social login

FastAPI application entry point.
"""
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from socialauth.config import settings
from socialauth.logging_config import configure_logging
from socialauth.sentry_config import configure_sentry
from socialauth.middleware.logging import LoggingMiddleware
from socialauth.routes.auth import router as auth_router

# Initialize logging first
configure_logging()

# Initialize Sentry (if SENTRY_DSN is set)
configure_sentry()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Social login: resolves OAuth callbacks to local users and issues sessions",
)

app.add_middleware(LoggingMiddleware)

# Holds OAuth state between /auth/{provider} and its callback
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.JWT_SECRET_KEY,
    same_site="lax",
    https_only=settings.SESSION_COOKIE_SECURE,
)

app.include_router(auth_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {"status": "healthy"}
