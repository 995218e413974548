import logging
import re
import time

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

_SKIP_PATHS = {
    "/v1/health",
    "/v1/openapi.json",
    "/v1/docs",
    "/v1/redoc",
}
_PDF_RE = re.compile(r"^/v1/proposals/[^/]+\.pdf$")

_EVENTS = {
    ("GET", "/v1/proposals/presets"): "presets_list",
    ("POST", "/v1/proposals/preset"): "preset_sync",
    ("POST", "/v1/proposals/financials"): "financials_build",
    ("POST", "/v1/proposals/cashflows"): "cashflows_build",
    ("POST", "/v1/proposals/projections"): "projections_build",
    ("POST", "/v1/irr"): "irr_solve",
}


def _resolve_event_name(method: str, path: str) -> str | None:
    if method == "POST" and _PDF_RE.match(path):
        return "pdf_export"
    return _EVENTS.get((method, path))


def _should_log(path: str) -> bool:
    if not path.startswith("/v1/"):
        return False
    return path not in _SKIP_PATHS


class UsageEventMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if not _should_log(path):
            return await call_next(request)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                "usage event=%s method=%s path=%s status=%d duration_ms=%d",
                _resolve_event_name(request.method, path) or "other",
                request.method,
                path,
                status_code,
                duration_ms,
            )


def add_usage_event_middleware(app: FastAPI) -> None:
    app.add_middleware(UsageEventMiddleware)
