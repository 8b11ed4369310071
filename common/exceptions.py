"""Gateway exception hierarchy.

Every error the gateway reports on purpose is a GatewayError carrying an
ErrorCode, an HTTP status and the OpenAI-style error type used on /v1 routes.
"""
from typing import Any, Dict, Optional

from common.error_messages import ErrorCode, get_error_response


class GatewayError(Exception):
    """Base class for errors rendered as structured JSON responses."""

    error_type = "api_error"
    default_code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
        param: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.extra = dict(extra or {})
        self.code = code or self.default_code
        friendly, default_status = get_error_response(self.code)
        self.friendly_message = friendly
        self.status_code = status_code or default_status
        self.param = param


class InvalidRequest(GatewayError):
    """Missing or malformed client input (400)."""

    error_type = "invalid_request_error"
    default_code = ErrorCode.INVALID_PARAMETER


class AuthenticationError(GatewayError):
    """Missing or wrong API key (401)."""

    error_type = "authentication_error"
    default_code = ErrorCode.INVALID_API_KEY


class NotFoundError(GatewayError):
    error_type = "not_found_error"
    default_code = ErrorCode.MODEL_NOT_FOUND


class UpstreamHTTPError(GatewayError):
    """Provider failed at the HTTP level. Status is the provider's, or 500."""

    error_type = "upstream_error"
    default_code = ErrorCode.UPSTREAM_ERROR

    def __init__(self, message: str, upstream_status: Optional[int] = None, provider: Optional[str] = None, **kwargs):
        if upstream_status is not None and upstream_status >= 400 and "status_code" not in kwargs:
            kwargs["status_code"] = upstream_status
        super().__init__(message, **kwargs)
        self.upstream_status = upstream_status
        self.provider = provider


class UpstreamAssetMissing(GatewayError):
    """Provider answered 2xx but returned nothing usable."""

    error_type = "upstream_error"
    default_code = ErrorCode.NO_CONTENT_GENERATED


class ConfigurationError(GatewayError):
    error_type = "server_error"
    default_code = ErrorCode.CONFIGURATION_ERROR


class InternalError(GatewayError):
    error_type = "server_error"
    default_code = ErrorCode.UNKNOWN_ERROR
