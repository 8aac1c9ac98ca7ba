"""
Response envelope for failures.

    404/403/401  {"success": false, "message": ...}
    422          {"success": false, "errors": {field: [messages]}}
    500          {"success": false, "message": ..., "error": <exception text>}
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Locations FastAPI prefixes onto every validation error
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def field_errors(errors: list[dict]) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATIONS and len(loc) > 1:
            loc = loc[1:]
        field = ".".join(loc) or "body"
        out.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return out


def validation_error(errors: dict[str, str], location: str = "body") -> RequestValidationError:
    """Build a 422 for checks that need the database (e.g. "user exists")."""
    return RequestValidationError([
        {"loc": (location, *field.split(".")), "msg": msg, "type": "value_error"}
        for field, msg in errors.items()
    ])


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": jsonable_encoder(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"success": False, "errors": field_errors(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("500 on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal Server Error", "error": str(exc)},
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Credentials": "true"
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
