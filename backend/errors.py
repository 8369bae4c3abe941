# backend/errors.py
import logging

from fastapi.responses import JSONResponse


class ServiceError(Exception):
    status_code = 500


class NotFoundError(ServiceError):
    status_code = 404


class InvalidInputError(ServiceError):
    status_code = 400


class InvalidStateError(ServiceError):
    status_code = 400


def error_response(exc, log=None, message="Internal server error"):
    """Turn an exception raised inside a route handler into the JSON envelope."""
    if isinstance(exc, ServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc)},
        )
    (log or logging.getLogger(__name__)).exception(message)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": message, "error": str(exc)},
    )
