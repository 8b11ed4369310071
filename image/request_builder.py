"""Translate a normalized GenerationRequest into an upstream request body.

Two wire shapes exist. The legacy shape describes size, style and quality in
the prompt text; the structured shape puts size in the official imageConfig
block and keeps style and quality as prompt hints. build() picks
one from request.use_official_wire_format and never touches the network.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from image.models import GenerationRequest, ImageQuality
from image.sizes import size_tokens

WIRE_LEGACY = "legacy"
WIRE_STRUCTURED = "structured"

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_ONLY_HIGH"
RESPONSE_MODALITIES = ["TEXT", "IMAGE"]


@dataclass(frozen=True)
class LegacyRequest:
    endpoint: str
    body: Dict[str, Any] = field(default_factory=dict)
    wire_format: str = WIRE_LEGACY


@dataclass(frozen=True)
class StructuredRequest:
    endpoint: str
    body: Dict[str, Any] = field(default_factory=dict)
    wire_format: str = WIRE_STRUCTURED


ProviderRequest = Union[LegacyRequest, StructuredRequest]


def _hints(request: GenerationRequest) -> str:
    """Style and quality hints appended to the prompt in both wire shapes."""
    text = ""
    if request.style is not None:
        text += f" Style: {request.style.value}."
    if request.quality == ImageQuality.HD:
        text += " Quality: high definition, highly detailed."
    return text


def legacy_prompt_text(request: GenerationRequest) -> str:
    """Prompt with size, style and quality hints spelled out."""
    aspect_ratio, _ = size_tokens(request.size)
    text = f"Generate an image: {request.prompt}. Image size: {request.size} (aspect ratio {aspect_ratio})."
    return text + _hints(request)


def structured_prompt_text(request: GenerationRequest) -> str:
    """Size travels in imageConfig; style and quality have no field there."""
    hints = _hints(request)
    if not hints:
        return request.prompt
    return f"{request.prompt.rstrip('.')}.{hints}"


def _generation_config(request: GenerationRequest) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "temperature": request.temperature,
        "topK": request.top_k,
        "topP": request.top_p,
        "maxOutputTokens": request.max_output_tokens,
    }
    if request.seed is not None:
        config["seed"] = request.seed
    return config


def _contents(request: GenerationRequest, prompt_text: str) -> List[Dict[str, Any]]:
    parts = [{"text": prompt_text}]
    if request.negative_prompt:
        parts.append({"text": f"Negative prompt (avoid these elements): {request.negative_prompt}"})
    return [{"role": "user", "parts": parts}]


def build_legacy(request: GenerationRequest) -> LegacyRequest:
    body = {
        "contents": _contents(request, legacy_prompt_text(request)),
        "generationConfig": _generation_config(request),
    }
    return LegacyRequest(endpoint=request.model.api_endpoint, body=body)


def build_structured(request: GenerationRequest) -> StructuredRequest:
    aspect_ratio, image_size = size_tokens(request.size)
    generation_config = _generation_config(request)
    generation_config["responseModalities"] = list(RESPONSE_MODALITIES)
    generation_config["imageConfig"] = {"aspectRatio": aspect_ratio, "imageSize": image_size}
    body = {
        "contents": _contents(request, structured_prompt_text(request)),
        "generationConfig": generation_config,
        "safetySettings": [
            {"category": category, "threshold": SAFETY_THRESHOLD} for category in SAFETY_CATEGORIES
        ],
    }
    return StructuredRequest(endpoint=request.model.api_endpoint, body=body)


def build(request: GenerationRequest) -> ProviderRequest:
    if request.use_official_wire_format:
        return build_structured(request)
    return build_legacy(request)
