"""API key verification route."""
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.security import HTTPAuthorizationCredentials

from auth.models import VerifyKeyRequest, VerifyKeyResponse
from auth.services import bearer_scheme, header_scheme, query_scheme, pick_api_key, verify_api_key
from utils.logger import get_logger

logger = get_logger("auth.routes")
router = APIRouter(tags=["auth"])


@router.post("/api/verify-key", response_model=VerifyKeyResponse)
def verify_key(
    req: Optional[VerifyKeyRequest] = Body(None),
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    header_key: Optional[str] = Depends(header_scheme),
    query_key: Optional[str] = Depends(query_scheme),
):
    """
    Check a caller-supplied key.

    Accepts the key in the JSON body ({api_key}) or any of the usual
    places (Bearer token, X-API-Key header, api_key query parameter).
    Responds 401 when the key does not match.
    """
    candidate = (req.api_key if req else None) or pick_api_key(bearer, header_key, query_key)
    if not verify_api_key(candidate):
        return VerifyKeyResponse(valid=True, auth_enabled=False, message="Authentication is disabled on this server")
    logger.info("API key verified")
    return VerifyKeyResponse(valid=True, auth_enabled=True, message="API key is valid")
