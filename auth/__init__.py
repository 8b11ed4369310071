"""API key authentication module."""
from auth.models import VerifyKeyRequest, VerifyKeyResponse
from auth.services import (
    is_valid_api_key,
    pick_api_key,
    require_api_key,
    verify_api_key
)

__all__ = [
    "VerifyKeyRequest",
    "VerifyKeyResponse",
    "is_valid_api_key",
    "pick_api_key",
    "require_api_key",
    "verify_api_key"
]
