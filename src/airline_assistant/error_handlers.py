"""
Error handling for the airline assistant HTTP API
"""

from typing import Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
import structlog

from .types import CompletionError, ConfigurationError

logger = structlog.get_logger()


class ErrorCode:
    """Standard error codes for the airline assistant"""

    # Client errors (4xx)
    MESSAGES_REQUIRED = "MESSAGES_REQUIRED"
    QUESTION_REQUIRED = "QUESTION_REQUIRED"

    # Upstream completion errors
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_API_KEY = "INVALID_API_KEY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    COMPLETION_FAILED = "COMPLETION_FAILED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorHandler:
    """Centralized error message formatting"""

    @staticmethod
    def create_error_response(message: str) -> dict:
        return {"error": message}

    @staticmethod
    def get_user_friendly_message(error_code: str, original_message: str = None) -> str:
        """Get user-friendly error messages"""

        user_messages = {
            ErrorCode.MESSAGES_REQUIRED: "Messages array is required",
            ErrorCode.QUESTION_REQUIRED: "Question is required",
            ErrorCode.RATE_LIMITED: (
                "Rate limit exceeded. You have exceeded your OpenAI API quota. Please check your billing "
                "and plan details at https://platform.openai.com/account/billing"
            ),
            ErrorCode.INVALID_API_KEY: "Invalid API key. Please check your API key in the .env file.",
            ErrorCode.SERVICE_UNAVAILABLE: "OpenAI service is temporarily unavailable. Please try again later.",
            ErrorCode.INTERNAL_ERROR: "Error communicating with OpenAI API. Please try again later.",
        }

        if error_code in user_messages:
            return user_messages[error_code]
        return original_message or user_messages[ErrorCode.INTERNAL_ERROR]


class ExceptionMapper:
    """Map exceptions to HTTP status codes and user-facing messages"""

    @staticmethod
    def to_response(exception: Exception) -> Tuple[int, str]:
        if isinstance(exception, CompletionError):
            message = ErrorHandler.get_user_friendly_message(exception.error_code, str(exception))
            return exception.status_code, message

        if isinstance(exception, ConfigurationError):
            return 500, str(exception)

        return 500, ErrorHandler.get_user_friendly_message(ErrorCode.INTERNAL_ERROR)

    @staticmethod
    def to_key_check_response(exception: Exception) -> Tuple[int, str]:
        """Status and message for a failed API key check"""
        if isinstance(exception, CompletionError):
            if exception.error_code == ErrorCode.INVALID_API_KEY:
                return 401, "Invalid API key. Please check your API key."
            if exception.error_code == ErrorCode.RATE_LIMITED:
                return 429, "Rate limit exceeded. Please try again later."

        return 500, str(exception) or "API key test failed"


def error_response(exception: Exception) -> JSONResponse:
    """JSON error payload for an exception raised while answering"""
    status_code, message = ExceptionMapper.to_response(exception)
    return JSONResponse(status_code=status_code, content=ErrorHandler.create_error_response(message))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions"""

    logger.error(
        "Unhandled exception",
        error=str(exc),
        exception_type=type(exc).__name__,
        url=str(request.url),
        method=request.method,
        exc_info=exc,
    )
    return error_response(exc)


async def validation_exception_handler(request: Request, exc) -> JSONResponse:
    """Handler for request validation exceptions"""

    logger.warning(
        "Request validation failed",
        error=str(exc),
        url=str(request.url),
    )

    if request.url.path.endswith("/evaluate"):
        error_code = ErrorCode.QUESTION_REQUIRED
    else:
        error_code = ErrorCode.MESSAGES_REQUIRED

    return JSONResponse(
        status_code=400,
        content=ErrorHandler.create_error_response(ErrorHandler.get_user_friendly_message(error_code)),
    )
