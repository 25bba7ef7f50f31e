"""
Typed API errors and the exception handlers that render them.

Services raise ApiError subclasses; the handlers installed on the NinjaAPI
turn those, ninja's own errors and anything unexpected into the uniform
failure envelope, so no exception reaches the transport layer.
"""
import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import HttpRequest
from ninja import NinjaAPI
from ninja.errors import AuthenticationError, HttpError, ValidationError

from .responses import ResponseFlags, ResponseMessages, action_failed

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status = ResponseFlags.ACTION_FAILED
    default_message = ResponseMessages.ACTION_FAILED

    def __init__(self, msg: Optional[str] = None):
        self.msg = msg or self.default_message
        super().__init__(self.msg)


class ParameterMissing(ApiError):
    status = ResponseFlags.PARAMETER_MISSING
    default_message = ResponseMessages.PARAMETER_MISSING


class BadRequest(ApiError):
    status = ResponseFlags.BAD_REQUEST
    default_message = ResponseMessages.BAD_REQUEST


class Unauthorized(ApiError):
    status = ResponseFlags.UNAUTHORIZED
    default_message = ResponseMessages.AUTHENTICATION_FAILED


class Forbidden(ApiError):
    status = ResponseFlags.FORBIDDEN
    default_message = "Access denied for this role."


class NotFound(ApiError):
    status = ResponseFlags.NOT_FOUND
    default_message = ResponseMessages.NOT_FOUND


class Conflict(ApiError):
    status = ResponseFlags.CONFLICT
    default_message = ResponseMessages.ALREADY_EXISTS


class ActionFailed(ApiError):
    pass


def _describe_validation_errors(errors: list) -> str:
    parts = []
    for error in errors:
        loc = [str(item) for item in error.get('loc', ()) if item not in ('body', 'query', 'path', 'form', 'payload')]
        field = '.'.join(loc)
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get('msg')))
    return ", ".join(parts) or ResponseMessages.PARAMETER_MISSING


def register_exception_handlers(api: NinjaAPI) -> None:
    """Install the uniform failure rendering on a NinjaAPI instance."""

    def render(request: HttpRequest, status: int, msg: str):
        return api.create_response(request, action_failed(status, msg), status=status)

    @api.exception_handler(ApiError)
    def on_api_error(request: HttpRequest, exc: ApiError):
        return render(request, exc.status, exc.msg)

    @api.exception_handler(ValidationError)
    def on_request_validation(request: HttpRequest, exc: ValidationError):
        return render(request, ResponseFlags.PARAMETER_MISSING, _describe_validation_errors(exc.errors))

    @api.exception_handler(AuthenticationError)
    def on_authentication(request: HttpRequest, exc: AuthenticationError):
        return render(request, ResponseFlags.UNAUTHORIZED, "Permission denied. Token is missing.")

    @api.exception_handler(HttpError)
    def on_http_error(request: HttpRequest, exc: HttpError):
        return render(request, exc.status_code, str(exc))

    @api.exception_handler(DjangoValidationError)
    def on_model_validation(request: HttpRequest, exc: DjangoValidationError):
        return render(request, ResponseFlags.BAD_REQUEST, "; ".join(exc.messages))

    @api.exception_handler(Exception)
    def on_unexpected(request: HttpRequest, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}: {exc}")
        return render(request, ResponseFlags.ACTION_FAILED, ResponseMessages.ACTION_FAILED)
