import logging
import secrets
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Request-Id"


def add_request_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def correlation_and_logging(request: Request, call_next):
        request_id = request.headers.get(CORRELATION_ID_HEADER) or secrets.token_hex(6)
        request.state.request_id = request_id

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[CORRELATION_ID_HEADER] = request_id
            return response
        finally:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %s %s %d %.2fms",
                request.client.host if request.client else "-",
                request_id,
                request.method,
                request.url.path,
                status_code,
                latency_ms,
            )
