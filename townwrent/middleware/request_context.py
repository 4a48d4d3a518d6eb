"""
Per-request bookkeeping: a short request id, the body size limit and an
access log line.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from townwrent.services.error_handler import api_error_response
from townwrent.utils.exceptions import BadRequestError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def declared_body_size(request: Request) -> int:
    """
    Raises:
        BadRequestError: If Content-Length is not a number
    """
    raw = request.headers.get("content-length")
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise BadRequestError("Invalid content-length header")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Listing uploads carry up to five photos, so the size cap is checked
    against the declared length before the body is read.
    """

    def __init__(self, app: ASGIApp, max_request_size: int, access_log: bool = True):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.access_log = access_log

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()

        try:
            size = declared_body_size(request)
            if size > self.max_request_size:
                raise BadRequestError(
                    f"Request size {size} bytes exceeds maximum allowed size {self.max_request_size} bytes"
                )
        except BadRequestError as exc:
            response = api_error_response(exc, request)
        else:
            response = await call_next(request)

        if self.access_log:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"[{request.state.request_id}] {elapsed_ms:.1f}ms"
            )

        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
