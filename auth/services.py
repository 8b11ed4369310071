"""API key checks - a single shared secret compared in constant time."""
import hmac
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader, APIKeyQuery, HTTPAuthorizationCredentials, HTTPBearer

from config import Config
from common.error_messages import ErrorCode
from common.exceptions import AuthenticationError, ConfigurationError
from utils.logger import get_logger

logger = get_logger("auth.services")

bearer_scheme = HTTPBearer(auto_error=False)
header_scheme = APIKeyHeader(name="X-API-Key", auto_error=False)
query_scheme = APIKeyQuery(name="api_key", auto_error=False)


def pick_api_key(
    bearer: Optional[HTTPAuthorizationCredentials],
    header_key: Optional[str],
    query_key: Optional[str],
) -> Optional[str]:
    """Caller key in precedence order: Bearer token, X-API-Key header, api_key query."""
    if bearer and bearer.credentials:
        return bearer.credentials
    return header_key or query_key or None


def is_valid_api_key(candidate: Optional[str]) -> bool:
    """Compare a caller key with the configured secret."""
    if not Config.API_KEY or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), Config.API_KEY.encode("utf-8"))


def verify_api_key(candidate: Optional[str]) -> bool:
    """
    Check a caller key against configuration.

    Returns:
        False when auth is disabled (no secret configured), True when the key matches

    Raises:
        ConfigurationError: AUTH_REQUIRED is set but no API_KEY is configured
        AuthenticationError: key missing or wrong
    """
    if not Config.auth_enabled():
        return False
    if not Config.API_KEY:
        logger.error("AUTH_REQUIRED is set but API_KEY is empty; rejecting request")
        raise ConfigurationError("API key authentication is required but no key is configured")
    if not candidate:
        raise AuthenticationError("API key required", code=ErrorCode.MISSING_API_KEY)
    if not is_valid_api_key(candidate):
        logger.warning("Rejected request with invalid API key")
        raise AuthenticationError("Invalid API key", code=ErrorCode.INVALID_API_KEY)
    return True


def require_api_key(
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    header_key: Optional[str] = Depends(header_scheme),
    query_key: Optional[str] = Depends(query_scheme),
) -> Optional[str]:
    """Router dependency guarding generation endpoints."""
    candidate = pick_api_key(bearer, header_key, query_key)
    verify_api_key(candidate)
    return candidate
