"""Exception handlers mapping failures to JSON error bodies.

- ``HTTPException`` -> ``{"message": detail, "status": code}``
- request validation errors -> 400 with the same shape
- anything else -> 500 ``{"error": "Something went wrong"}``; details are
  logged, never returned.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

GENERIC_ERROR = "Something went wrong"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"message": message, "status": status_code}, status_code=status_code)


async def _http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(problems) or "invalid request")


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error in {} {}", request.method, request.url.path)
    return JSONResponse({"error": GENERIC_ERROR}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
