# salon_booking/core/middleware.py
"""Custom middleware for request handling"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


async def correlation_id_middleware(request: Request, call_next):
    """Tag each request with the caller's correlation id, or a fresh one"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """Log each request with its outcome and timing.

    Slot conflicts (409) log at WARNING so contention on a stylist's calendar
    is visible without DEBUG logging.
    """
    started = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "-")
    target = f"{request.method} {request.url.path}"

    logger.debug(f"-> {target}", extra={"correlation_id": correlation_id})

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    level = logging.WARNING if response.status_code == 409 else logging.INFO
    logger.log(
        level,
        f"<- {target} {response.status_code} in {elapsed_ms:.1f}ms",
        extra={"correlation_id": correlation_id},
    )

    return response
