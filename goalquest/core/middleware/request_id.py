import logging
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from goalquest.core.logging import LOGGER_NAME, bind_request_id, latency_bucket_ms, reset_request_id

MAX_REQUEST_ID_LENGTH = 128


def resolve_request_id(incoming) -> str:
    """Reuse a caller-supplied id when it is usable, otherwise mint one."""
    candidate = (incoming or "").strip()
    if candidate and len(candidate) <= MAX_REQUEST_ID_LENGTH and candidate.isprintable():
        return candidate
    return str(uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlate every request with an id, echo it back, and log the outcome."""

    def __init__(self, app, header_name: str = "x-request-id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        rid = resolve_request_id(request.headers.get(self.header_name))
        request.state.request_id = rid

        token = bind_request_id(rid)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)

        response.headers[self.header_name] = rid
        status = response.status_code
        logging.getLogger(LOGGER_NAME).log(
            logging.WARNING if status >= 500 else logging.INFO,
            "request.complete",
            extra={
                "request_id": rid,
                "path": request.url.path,
                "method": request.method,
                "status": status,
                "latency_bucket": latency_bucket_ms((time.perf_counter() - started) * 1000),
            },
        )
        return response
