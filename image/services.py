"""Image generation services - primary Gemini call with Pollinations fallback."""
import base64
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
from urllib.parse import quote, urlencode

import httpx

from config import Config
from common.error_messages import ErrorCode
from common.exceptions import GatewayError, InvalidRequest, UpstreamAssetMissing, UpstreamHTTPError
from image.models import CustomImageResponse, GenerationRequest
from image.request_builder import ProviderRequest, build
from image.response_adapter import AssetRef, FileAsset, extract_asset
from utils.logger import get_logger

logger = get_logger("image.services")

PRIMARY_PROVIDER = "appmedo"
FALLBACK_PROVIDER = "pollinations"
FALLBACK_NOTE = "Using fallback API"


@dataclass(frozen=True)
class Primary:
    asset: AssetRef
    provider: str
    model: str
    warnings: List[str] = field(default_factory=list)
    note: Optional[str] = None
    path: str = "primary"


@dataclass(frozen=True)
class Fallback:
    asset: AssetRef
    provider: str
    model: str
    warnings: List[str] = field(default_factory=list)
    note: Optional[str] = FALLBACK_NOTE
    path: str = "fallback"


@dataclass(frozen=True)
class Failed:
    error: GatewayError
    path: str = "failed"


GenerationOutcome = Union[Primary, Fallback, Failed]


class PrimaryFailure(Exception):
    """Why the primary provider produced no usable asset."""

    def __init__(
        self,
        reason: str,
        asset_missing: bool = False,
        upstream_status: Optional[int] = None,
        timed_out: bool = False,
    ):
        super().__init__(reason)
        self.reason = reason
        self.asset_missing = asset_missing
        self.upstream_status = upstream_status
        self.timed_out = timed_out


def _primary_headers() -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": Config.UPSTREAM_USER_AGENT,
    }
    if Config.GEMINI_API_KEY:
        headers["x-goog-api-key"] = Config.GEMINI_API_KEY
    return headers


def call_primary(provider_request: ProviderRequest, client: httpx.Client) -> AssetRef:
    """
    POST the built request to the Gemini-compatible endpoint.

    Raises:
        PrimaryFailure: on transport errors, timeouts, non-2xx status,
                        unparsable JSON, or a 2xx body without an asset
    """
    logger.info(f"Calling primary provider ({provider_request.wire_format} wire format): {provider_request.endpoint}")
    try:
        response = client.post(provider_request.endpoint, json=provider_request.body, headers=_primary_headers())
    except httpx.TimeoutException as e:
        raise PrimaryFailure(f"primary provider timed out: {e}", timed_out=True)
    except httpx.HTTPError as e:
        raise PrimaryFailure(f"primary provider unreachable: {e}")

    if not response.is_success:
        raise PrimaryFailure(f"primary provider returned HTTP {response.status_code}", upstream_status=response.status_code)

    try:
        payload = response.json()
    except ValueError:
        raise PrimaryFailure("primary provider returned a non-JSON body", asset_missing=True)

    asset = extract_asset(payload)
    if asset is None:
        raise PrimaryFailure("primary provider returned no image data", asset_missing=True)
    logger.info(f"Primary provider returned a {asset.kind} asset")
    return asset


def pollinations_url(prompt: str, width: int, height: int, seed: Optional[int] = None) -> str:
    """Pollinations is driven entirely by the URL: prompt in the path, options in the query."""
    query = {
        "width": width,
        "height": height,
        "model": Config.POLLINATIONS_MODEL,
        "nologo": "true",
    }
    if seed is not None:
        query["seed"] = seed
    return f"{Config.POLLINATIONS_BASE_URL.rstrip('/')}/{quote(prompt, safe='')}?{urlencode(query)}"


def call_pollinations(
    prompt: str,
    width: int,
    height: int,
    client: httpx.Client,
    seed: Optional[int] = None,
) -> FileAsset:
    """
    Build the Pollinations URL and, when POLLINATIONS_VERIFY is on, fetch it.

    A verified fetch exposes the image bytes as base64 so b64_json responses
    work for fallback results too.

    Raises:
        UpstreamHTTPError: if the fetch fails or returns non-2xx
    """
    url = pollinations_url(prompt, width, height, seed)
    if not Config.POLLINATIONS_VERIFY:
        return FileAsset(uri=url)

    logger.info(f"Fetching fallback image from Pollinations: {url}")
    try:
        response = client.get(url)
    except httpx.TimeoutException as e:
        raise UpstreamHTTPError(f"Pollinations timed out: {e}", code=ErrorCode.UPSTREAM_TIMEOUT, provider=FALLBACK_PROVIDER)
    except httpx.HTTPError as e:
        raise UpstreamHTTPError(f"Pollinations unreachable: {e}", code=ErrorCode.UPSTREAM_UNREACHABLE, provider=FALLBACK_PROVIDER)

    if not response.is_success:
        raise UpstreamHTTPError(
            f"Pollinations returned HTTP {response.status_code}",
            upstream_status=response.status_code,
            provider=FALLBACK_PROVIDER,
        )

    mime_type = response.headers.get("content-type", "").split(";")[0].strip()
    data = None
    if mime_type.startswith("image/") and response.content:
        data = base64.b64encode(response.content).decode("ascii")
    logger.info(f"Pollinations returned {len(response.content)} bytes ({mime_type or 'unknown type'})")
    return FileAsset(uri=url, mime_type=mime_type or None, data=data)


def fallback_model_name() -> str:
    return f"pollinations-{Config.POLLINATIONS_MODEL}"


def generate_image(request: GenerationRequest, client: httpx.Client) -> GenerationOutcome:
    """
    Run the primary -> fallback pipeline for one normalized request.

    Returns:
        Primary(asset) when the primary provider produced an image,
        Fallback(asset) when Pollinations answered instead,
        Failed(error) when no provider produced an image
    """
    provider_request = build(request)
    try:
        asset = call_primary(provider_request, client)
        return Primary(asset=asset, provider=PRIMARY_PROVIDER, model=request.model.id)
    except PrimaryFailure as failure:
        primary_failure = failure
        logger.warning(f"Primary image generation failed: {failure.reason}")

    if not Config.FALLBACK_ENABLED:
        return Failed(error=_primary_error(primary_failure))

    try:
        asset = call_pollinations(request.prompt, request.width, request.height, client, seed=request.seed)
    except UpstreamHTTPError as e:
        logger.error(f"Fallback image generation failed: {e.message}")
        if primary_failure.asset_missing:
            return Failed(error=UpstreamAssetMissing(f"{primary_failure.reason}; fallback failed: {e.message}"))
        return Failed(error=e)

    return Fallback(
        asset=asset,
        provider=FALLBACK_PROVIDER,
        model=fallback_model_name(),
        warnings=[f"Primary provider failed ({primary_failure.reason}); result produced by fallback provider"],
    )


def _primary_error(failure: PrimaryFailure) -> GatewayError:
    if failure.asset_missing:
        return UpstreamAssetMissing(failure.reason)
    if failure.timed_out:
        return UpstreamHTTPError(failure.reason, code=ErrorCode.UPSTREAM_TIMEOUT, provider=PRIMARY_PROVIDER)
    return UpstreamHTTPError(failure.reason, upstream_status=failure.upstream_status, provider=PRIMARY_PROVIDER)


def generate_pollinations_image(
    prompt: Optional[str],
    width: Optional[int],
    height: Optional[int],
    client: httpx.Client,
    seed: Optional[int] = None,
) -> CustomImageResponse:
    """Direct Pollinations generation, bypassing the primary provider."""
    prompt = (prompt or "").strip()
    if not prompt:
        raise InvalidRequest("prompt required", code=ErrorCode.MISSING_FIELD, param="prompt")
    width = width or 1024
    height = height or 1024
    if width <= 0 or height <= 0:
        raise InvalidRequest("width and height must be positive integers", param="width" if width <= 0 else "height")

    asset = call_pollinations(prompt, width, height, client, seed=seed)
    return CustomImageResponse(
        success=True,
        image_url=asset.url,
        prompt=prompt,
        model=fallback_model_name(),
        width=width,
        height=height,
        provider=FALLBACK_PROVIDER,
    )
