"""
Request logging middleware.
Logs method, path, status, caller and latency for every /api request.
"""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .security import decode_access_token

logger = logging.getLogger(__name__)

API_PATH_PREFIX = "/api"


def caller_id(request: Request) -> str:
    """User id from the bearer token, without touching the database."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        payload = decode_access_token(auth_header[7:])
        if payload:
            return payload.get("sub", "anonymous")
    return "anonymous"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith(API_PATH_PREFIX):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "%s %s -> %d (user=%s, %.1f ms)",
            request.method, path, response.status_code, caller_id(request), elapsed_ms,
        )
        return response
