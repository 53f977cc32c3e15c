import psycopg
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.exceptions import AppError
from app.logging.logger import Log


def error_response(status_code: int, error: str, details: object = None) -> JSONResponse:
    content: dict[str, object] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    log = Log.warning if exc.status_code < 500 else Log.error
    log(f"{request.method} {request.url.path} -> {exc.status_code}: {exc}")
    return error_response(exc.status_code, str(exc), exc.details)


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    Log.warning(f"{request.method} {request.url.path} -> 400: invalid request")
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return error_response(400, "Invalid request", details)


async def handle_database_error(request: Request, exc: psycopg.Error) -> JSONResponse:
    Log.error(f"{request.method} {request.url.path} -> 500: database error: {exc}")
    return error_response(500, "Backend failure")


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    Log.exception(f"{request.method} {request.url.path} -> 500: {exc}")
    return error_response(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(psycopg.Error, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected)
