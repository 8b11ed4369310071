"""Image generation routes - custom envelope and OpenAI-compatible API."""
import httpx
from fastapi import APIRouter, Depends

from auth.services import require_api_key
from common.http_client import get_http_client
from image.models import (
    CustomImageResponse,
    ImageGenerateRequest,
    OpenAIImageRequest,
    OpenAIImageResponse,
    PollinationsImageRequest,
)
from image.normalizer import normalize
from image.response_adapter import to_envelope
from image.services import Failed, generate_image, generate_pollinations_image
from utils.logger import get_logger

logger = get_logger("image")
router = APIRouter(tags=["image"], dependencies=[Depends(require_api_key)])


def _run(params: dict, envelope: str, client: httpx.Client):
    """Normalize, generate, adapt. Validation errors raise before any upstream call."""
    request, warnings = normalize(params)
    logger.info(
        f"Image request: model={request.model.id} size={request.size} n={request.n} "
        f"wire={'structured' if request.use_official_wire_format else 'legacy'} prompt={request.prompt[:50]!r}"
    )
    for warning in warnings:
        logger.info(f"Normalization warning: {warning}")

    outcome = generate_image(request, client)
    if isinstance(outcome, Failed):
        logger.error(f"Image generation failed: {outcome.error.message}")
        raise outcome.error

    logger.info(f"Image generated via {outcome.path} path (provider={outcome.provider})")
    return to_envelope(
        outcome.asset,
        request,
        envelope,
        provider=outcome.provider,
        model=outcome.model,
        warnings=warnings + outcome.warnings,
        note=outcome.note,
    )


@router.post("/api/image/generate", response_model=CustomImageResponse, response_model_exclude_none=True)
def generate(req: ImageGenerateRequest, client: httpx.Client = Depends(get_http_client)):
    """
    Generate an image, falling back to Pollinations when the primary fails.

    Accepts:
      { prompt, width?, height?, model?, quality?, style?, seed?,
        negative_prompt?, temperature?, top_p?, top_k?, use_official_format? }
    """
    return _run(req.to_params(), "custom", client)


@router.post("/api/image/pollinations", response_model=CustomImageResponse, response_model_exclude_none=True)
def generate_with_pollinations(req: PollinationsImageRequest, client: httpx.Client = Depends(get_http_client)):
    """Generate an image with Pollinations only."""
    return generate_pollinations_image(req.prompt, req.width, req.height, client, seed=req.seed)


@router.post("/v1/images/generations", response_model=OpenAIImageResponse, response_model_exclude_none=True)
def openai_generations(req: OpenAIImageRequest, client: httpx.Client = Depends(get_http_client)):
    """
    OpenAI-compatible image generation.

    Accepts:
      { prompt, n?, size?, response_format?, model?, quality?, style?,
        seed?, negative_prompt?, use_official_format? }
    """
    return _run(req.to_params(), "openai", client)
