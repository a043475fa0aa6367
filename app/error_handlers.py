# Error kind → HTTP response. Body is always {"kind": ..., "message": ...}

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.crud.errors import ActivityError

logger = logging.getLogger(__name__)

HTTP_STATUS_TO_KIND = {
    400: "ValidationError",
    401: "Unauthenticated",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    409: "Conflict",
    500: "InternalError",
}


async def activity_error_handler(request: Request, exc: ActivityError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # pydantic messages: "body.capacity: Input should be less than or equal to 50"
    details = "; ".join(
        "{}: {}".format(".".join(str(p) for p in err.get("loc", ())), err.get("msg", "invalid"))
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"kind": "ValidationError", "message": details or "Invalid request data"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": HTTP_STATUS_TO_KIND.get(exc.status_code, "Error"), "message": str(exc.detail)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"kind": "InternalError", "message": "Something went wrong. Please try again."},
    )
