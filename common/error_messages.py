"""
User-friendly error messages and status codes.

This module provides centralized error message definitions for the gateway.
Exceptions in common.exceptions carry one of these codes; the handlers in
app.py turn them into JSON bodies.
"""
from typing import Tuple
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Authentication Errors (401)
    MISSING_API_KEY = "MISSING_API_KEY"
    INVALID_API_KEY = "INVALID_API_KEY"

    # Validation Errors (400)
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_PARAMETER = "INVALID_PARAMETER"

    # Not Found Errors (404)
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"

    # External API Errors
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"

    # Generation Errors (500)
    NO_CONTENT_GENERATED = "NO_CONTENT_GENERATED"
    VIDEO_GENERATION_FAILED = "VIDEO_GENERATION_FAILED"

    # Configuration Errors (500)
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES = {
    ErrorCode.MISSING_API_KEY: "An API key is required. Send it as a Bearer token, X-API-Key header or api_key query parameter.",
    ErrorCode.INVALID_API_KEY: "The API key provided is not valid.",

    ErrorCode.MISSING_FIELD: "Required information is missing. Please check your input and try again.",
    ErrorCode.INVALID_FORMAT: "The format of your input is incorrect. Please check and try again.",
    ErrorCode.INVALID_PARAMETER: "One or more parameters are invalid. Please review your request and try again.",

    ErrorCode.MODEL_NOT_FOUND: "The requested model does not exist.",
    ErrorCode.TASK_NOT_FOUND: "The requested video task could not be found.",

    ErrorCode.UPSTREAM_ERROR: "The generation provider returned an error.",
    ErrorCode.UPSTREAM_TIMEOUT: "The generation provider is taking too long to respond.",
    ErrorCode.UPSTREAM_UNREACHABLE: "The generation provider could not be reached.",

    ErrorCode.NO_CONTENT_GENERATED: "The provider responded but no image was generated.",
    ErrorCode.VIDEO_GENERATION_FAILED: "Video generation failed. Please try again or adjust your parameters.",

    ErrorCode.CONFIGURATION_ERROR: "There's a configuration problem with the service. Please contact support.",

    ErrorCode.UNKNOWN_ERROR: "Something unexpected happened. Please try again.",
}


ERROR_STATUS_CODES = {
    ErrorCode.MISSING_API_KEY: 401,
    ErrorCode.INVALID_API_KEY: 401,

    ErrorCode.MISSING_FIELD: 400,
    ErrorCode.INVALID_FORMAT: 400,
    ErrorCode.INVALID_PARAMETER: 400,

    ErrorCode.MODEL_NOT_FOUND: 404,
    ErrorCode.TASK_NOT_FOUND: 404,

    ErrorCode.UPSTREAM_ERROR: 500,
    ErrorCode.UPSTREAM_TIMEOUT: 504,
    ErrorCode.UPSTREAM_UNREACHABLE: 500,

    ErrorCode.NO_CONTENT_GENERATED: 500,
    ErrorCode.VIDEO_GENERATION_FAILED: 500,

    ErrorCode.CONFIGURATION_ERROR: 500,

    ErrorCode.UNKNOWN_ERROR: 500,
}


def get_error_response(error_code: ErrorCode) -> Tuple[str, int]:
    """
    Get user-friendly error message and HTTP status code.

    Args:
        error_code: The error code enum

    Returns:
        Tuple of (error_message, status_code)
    """
    message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)

    return message, status_code
