# bonsai_gateway/middleware_logging.py
import logging
import time
import uuid
from typing import Callable
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("bonsai.request")

REQUEST_ID_HEADER = "x-request-id"


def configure_logging(level: str = "INFO") -> None:
    # Root logger is configured once per process; basicConfig ignores repeats
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One log line per proxied call; echoes (or mints) an x-request-id."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        start = time.perf_counter()
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "rid=%s client=%s method=%s path=%s status=500 duration_ms=%.2f UNHANDLED",
                request_id, client, request.method, request.url.path,
                (time.perf_counter() - start) * 1000.0,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "rid=%s client=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id, client, request.method, request.url.path,
            response.status_code, (time.perf_counter() - start) * 1000.0,
        )
        return response


def register_request_logging(app: FastAPI):
    app.add_middleware(RequestLogMiddleware)
