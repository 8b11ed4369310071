"""Image generation module."""
from image.models import GenerationRequest, ImageGenerateRequest, OpenAIImageRequest
from image.normalizer import normalize
from image.registry import MODEL_REGISTRY, ModelDescriptor
from image.request_builder import LegacyRequest, StructuredRequest, build
from image.response_adapter import extract_asset, to_envelope
from image.services import Primary, Fallback, Failed, generate_image

__all__ = [
    "GenerationRequest",
    "ImageGenerateRequest",
    "OpenAIImageRequest",
    "normalize",
    "MODEL_REGISTRY",
    "ModelDescriptor",
    "LegacyRequest",
    "StructuredRequest",
    "build",
    "extract_asset",
    "to_envelope",
    "Primary",
    "Fallback",
    "Failed",
    "generate_image"
]
