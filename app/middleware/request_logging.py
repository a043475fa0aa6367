# Access log: one line per request, tagged with the caller from the identity header
import logging
import time

from fastapi import Request

from app.config import USER_ID_HEADER

logger = logging.getLogger("access")


async def request_logging_middleware(request: Request, call_next):
    start_time = time.perf_counter()

    response = await call_next(request)

    process_time = (time.perf_counter() - start_time) * 1000

    # unauthenticated requests log "-"; the header is not validated here
    logger.info(
        "",
        extra={
            "client_addr": request.client.host if request.client else "unknown",
            "user_id": (request.headers.get(USER_ID_HEADER) or "").strip() or "-",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time, 2),
        },
    )

    return response
