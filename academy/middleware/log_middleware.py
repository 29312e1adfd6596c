import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from academy.core.logger import logger


class LogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        logger.info(
            "%s %s -> %s (%.4fs)",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
