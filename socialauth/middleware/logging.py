"""
Logging middleware for request/response logging.

Logs all HTTP requests with timing and context.
"""
import time
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests with timing.

    Binds the routed provider so request logs line up with login events.
    Query strings are left out: OAuth callbacks carry codes and state.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            self._logger(request).error(
                "request_failed",
                status_code=500,
                duration_ms=_elapsed_ms(start_time),
                error=str(e)
            )
            raise

        self._logger(request).info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(start_time)
        )

        return response

    @staticmethod
    def _logger(request: Request):
        # path_params are filled in by the router once call_next has run
        return logger.bind(
            route=request.url.path,
            method=request.method,
            provider=request.path_params.get("provider"),
        )


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)
