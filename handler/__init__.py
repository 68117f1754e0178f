import logging
from fastapi import Request, responses, exceptions
from starlette.exceptions import HTTPException as StarletteHTTPException
from config.setting import settings
from error import ContactError, MalformedInput, MethodNotAllowed

logger = logging.getLogger(__name__)


def _envelope(status_code: int, message: str, debug: dict = None):
    content = {"success": False, "message": message}
    if debug is not None and settings.EXPOSE_DEBUG:
        content["debug"] = debug
    return responses.JSONResponse(status_code=status_code, content=content)


def contact_error_handler(
    request: Request, exec: ContactError
) -> responses.JSONResponse:
    """Contact error handler

    Turns any error of the contact pipeline into
    the single JSON response the client receives
    """
    return _envelope(exec.status_code, exec.msg, exec.debug)


def validation_error_handler(
    request: Request, exec: exceptions.RequestValidationError
) -> responses.JSONResponse:
    """Validation Error Handler"""
    return contact_error_handler(request, MalformedInput())


def http_exception_handler(
    request: Request, exec: StarletteHTTPException
) -> responses.JSONResponse:
    """Handler for http exceptions raised by routing"""
    if exec.status_code == 405:
        return contact_error_handler(request, MethodNotAllowed())
    return _envelope(exec.status_code, str(exec.detail))


def unexpected_error_handler(
    request: Request, exec: Exception
) -> responses.JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}: {exec!r}")
    return _envelope(500, ContactError().msg)
