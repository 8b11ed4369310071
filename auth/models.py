"""API key Pydantic models."""
from typing import Optional
from pydantic import BaseModel, Field


class VerifyKeyRequest(BaseModel):
    api_key: Optional[str] = Field(None, description="Key to check; headers are used when omitted")


class VerifyKeyResponse(BaseModel):
    success: bool = True
    valid: bool
    auth_enabled: bool
    message: str
