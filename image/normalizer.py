"""Parameter normalization for image generation.

normalize() turns raw client parameters into a GenerationRequest whose every
field is within range for the resolved model. It never performs I/O and only
raises for a missing prompt; everything else is clamped or defaulted with a
warning string the caller attaches to the response.
"""
import math
from typing import Any, Dict, List, Optional, Tuple

from config import Config
from common.exceptions import InvalidRequest
from common.error_messages import ErrorCode
from image.models import GenerationRequest, ImageQuality, ImageStyle, ResponseFormat
from image.registry import MODEL_REGISTRY, ModelDescriptor, ModelRegistry
from image.sizes import canonical_size, size_from_dimensions

TEMPERATURE_RANGE = (0.0, 2.0)
TOP_P_RANGE = (0.0, 1.0)
TOP_K_RANGE = (1, 100)
MAX_OUTPUT_TOKENS_RANGE = (1, 8192)
SEED_RANGE = (0, 2 ** 31 - 1)


def _as_number(value: Any) -> Optional[float]:
    """Numeric value of ints, floats and numeric strings; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _clamp_float(value: Any, default: float, bounds: Tuple[float, float]) -> float:
    number = _as_number(value)
    if number is None:
        number = default
    return float(_clamp(number, *bounds))


def _clamp_int(value: Any, default: int, bounds: Tuple[int, int]) -> int:
    number = _as_number(value)
    if number is None:
        number = default
    if math.isinf(number):
        return bounds[1] if number > 0 else bounds[0]
    return int(_clamp(math.floor(number), *bounds))


def _enum_value(enum_cls, value: Any, field: str, warnings: List[str]):
    if value is None or value == "":
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        warnings.append(f"Unsupported {field} '{value}' ignored; expected one of: {allowed}")
        return None


def resolve_model(identifier: Any, registry: ModelRegistry = MODEL_REGISTRY) -> Tuple[ModelDescriptor, List[str]]:
    """Resolve a model id/alias, substituting the default for unknown names."""
    if identifier is None or str(identifier).strip() == "":
        return registry.get_default(), []
    model = registry.resolve(str(identifier))
    if model is not None:
        return model, []
    default = registry.get_default()
    return default, [f"Model '{identifier}' not found; using default model '{default.id}'"]


def _normalize_size(params: Dict[str, Any], model: ModelDescriptor, warnings: List[str]) -> str:
    caps = model.capabilities
    requested = params.get("size")
    if requested is None or requested == "":
        requested = size_from_dimensions(params.get("width"), params.get("height"))
        if requested is None and (params.get("width") is not None or params.get("height") is not None):
            requested = f"{params.get('width')}x{params.get('height')}"
    if requested is None:
        return caps.default_size

    size = canonical_size(requested)
    if size in caps.supported_sizes:
        return size
    warnings.append(
        f"Size '{requested}' is not supported by model '{model.id}'; using '{caps.default_size}' instead"
    )
    return caps.default_size


def _normalize_seed(value: Any, model: ModelDescriptor, warnings: List[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    number = _as_number(value)
    if number is None:
        warnings.append(f"Seed '{value}' is not a number and was ignored")
        return None
    if not model.capabilities.supports_seed:
        warnings.append(f"Model '{model.id}' does not support seeds; seed ignored")
        return None
    if math.isinf(number):
        return SEED_RANGE[1] if number > 0 else SEED_RANGE[0]
    return int(_clamp(math.floor(number), *SEED_RANGE))


def normalize(
    raw_params: Dict[str, Any],
    registry: ModelRegistry = MODEL_REGISTRY,
) -> Tuple[GenerationRequest, List[str]]:
    """
    Validate and clamp raw generation parameters.

    Args:
        raw_params: Client parameters (prompt, model, n, size or width/height,
                    quality, style, seed, temperature, top_p, top_k,
                    max_output_tokens, negative_prompt, response_format,
                    use_official_format)
        registry: Model registry used to resolve ``model``

    Returns:
        (GenerationRequest, warnings)

    Raises:
        InvalidRequest: if the prompt is missing or blank
    """
    params = dict(raw_params or {})
    prompt = params.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidRequest("prompt required", code=ErrorCode.MISSING_FIELD, param="prompt")
    prompt = prompt.strip()

    model, warnings = resolve_model(params.get("model"), registry)
    caps = model.capabilities
    defaults = model.defaults

    n = _clamp_int(params.get("n"), 1, (1, caps.max_images))
    size = _normalize_size(params, model, warnings)

    temperature = _clamp_float(params.get("temperature"), defaults.temperature, TEMPERATURE_RANGE)
    top_p = _clamp_float(params.get("top_p"), defaults.top_p, TOP_P_RANGE)
    top_k = _clamp_int(params.get("top_k"), defaults.top_k, TOP_K_RANGE)
    max_output_tokens = _clamp_int(params.get("max_output_tokens"), defaults.max_output_tokens, MAX_OUTPUT_TOKENS_RANGE)

    seed = _normalize_seed(params.get("seed"), model, warnings)

    quality = _enum_value(ImageQuality, params.get("quality"), "quality", warnings) or ImageQuality.STANDARD
    if quality == ImageQuality.HD and not caps.supports_quality:
        warnings.append(f"Model '{model.id}' does not support quality settings; using 'standard'")
        quality = ImageQuality.STANDARD
    if quality == ImageQuality.HD:
        temperature = float(_clamp(max(temperature, Config.HD_TEMPERATURE_FLOOR), *TEMPERATURE_RANGE))

    style = _enum_value(ImageStyle, params.get("style"), "style", warnings)
    if style is not None and not caps.supports_style:
        warnings.append(f"Model '{model.id}' does not support styles; style '{style.value}' ignored")
        style = None

    negative_prompt = params.get("negative_prompt")
    negative_prompt = negative_prompt.strip() if isinstance(negative_prompt, str) and negative_prompt.strip() else None
    if negative_prompt and not caps.supports_negative_prompt:
        warnings.append(f"Model '{model.id}' does not support negative prompts; negative prompt ignored")
        negative_prompt = None

    response_format = _enum_value(ResponseFormat, params.get("response_format"), "response_format", warnings) or ResponseFormat.URL

    use_official = params.get("use_official_format")
    if use_official is None:
        use_official = Config.USE_OFFICIAL_WIRE_FORMAT

    request = GenerationRequest(
        prompt=prompt,
        model=model,
        n=n,
        size=size,
        quality=quality,
        style=style,
        seed=seed,
        temperature=temperature,
        top_p=top_p,
        top_k=top_k,
        max_output_tokens=max_output_tokens,
        negative_prompt=negative_prompt,
        response_format=response_format,
        use_official_wire_format=bool(use_official),
    )
    return request, warnings
