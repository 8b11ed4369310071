"""Tests for image parameter normalization."""
import pytest

from common.error_messages import ErrorCode
from common.exceptions import InvalidRequest
from config import Config
from image.models import ImageQuality, ImageStyle, ResponseFormat
from image.normalizer import normalize, resolve_model
from image.registry import MODEL_REGISTRY

DEFAULT_MODEL = MODEL_REGISTRY.get_default()


def test_red_fox_uses_defaults():
    request, warnings = normalize({"prompt": "a red fox", "size": "1024x1024"})
    assert warnings == []
    assert request.model.id == DEFAULT_MODEL.id
    assert request.size == "1024x1024"
    assert request.n == 1
    assert request.quality == ImageQuality.STANDARD
    assert request.response_format == ResponseFormat.URL
    assert request.use_official_wire_format is False


@pytest.mark.parametrize("prompt", ["", "   ", None, 42])
def test_missing_prompt_raises(prompt):
    with pytest.raises(InvalidRequest) as exc_info:
        normalize({"prompt": prompt})
    assert exc_info.value.code == ErrorCode.MISSING_FIELD
    assert exc_info.value.status_code == 400
    assert exc_info.value.param == "prompt"


def test_prompt_is_trimmed():
    request, _ = normalize({"prompt": "  a lighthouse  "})
    assert request.prompt == "a lighthouse"


@pytest.mark.parametrize("model_id", [m.id for m in MODEL_REGISTRY.list_models()])
def test_supported_sizes_pass_through(model_id):
    model = MODEL_REGISTRY.resolve(model_id)
    for size in model.capabilities.supported_sizes:
        request, warnings = normalize({"prompt": "p", "model": model_id, "size": size})
        assert request.size == size
        assert warnings == []


@pytest.mark.parametrize("size", ["333x333", "8192x8192", "huge", "1024x1536"])
def test_unsupported_size_falls_back_with_one_warning(size):
    model_id = "gemini-2.0-flash-preview-image-generation"
    request, warnings = normalize({"prompt": "p", "model": model_id, "size": size})
    assert request.size == "1024x1024"
    assert len(warnings) == 1
    assert f"'{size}'" in warnings[0]


def test_size_from_width_and_height():
    request, warnings = normalize({"prompt": "p", "width": 768, "height": 1024})
    assert request.size == "768x1024"
    assert (request.width, request.height) == (768, 1024)
    assert warnings == []


def test_unsupported_width_and_height_warn():
    request, warnings = normalize({"prompt": "p", "width": 100, "height": 100})
    assert request.size == "1024x1024"
    assert warnings == [
        f"Size '100x100' is not supported by model '{DEFAULT_MODEL.id}'; using '1024x1024' instead"
    ]


@pytest.mark.parametrize("requested, expected", [
    (50, 10), (0, 1), (-3, 1), (3, 3), ("4", 4), ("lots", 1), (2.7, 2),
])
def test_n_is_clamped_to_model_max(requested, expected):
    request, _ = normalize({"prompt": "p", "model": "gemini-2.5-flash-image", "n": requested})
    assert request.n == expected


def test_n_respects_each_model():
    request, _ = normalize({"prompt": "p", "n": 50})
    assert request.n == DEFAULT_MODEL.capabilities.max_images


@pytest.mark.parametrize("seed, expected", [
    (-5, 0),
    (99999999999, 2147483647),
    (1234, 1234),
    ("77", 77),
    (12.9, 12),
])
def test_seed_is_clamped(seed, expected):
    request, warnings = normalize({"prompt": "p", "seed": seed})
    assert request.seed == expected
    assert warnings == []


def test_non_numeric_seed_dropped_with_warning():
    request, warnings = normalize({"prompt": "p", "seed": "abc"})
    assert request.seed is None
    assert len(warnings) == 1


def test_seed_dropped_for_model_without_seed_support():
    request, warnings = normalize({"prompt": "p", "model": "gemini-2.0-flash-preview-image-generation", "seed": 7})
    assert request.seed is None
    assert "does not support seeds" in warnings[0]


def test_unknown_model_falls_back_to_default():
    request, warnings = normalize({"prompt": "p", "model": "midjourney-v6"})
    assert request.model.id == DEFAULT_MODEL.id
    assert warnings == [f"Model 'midjourney-v6' not found; using default model '{DEFAULT_MODEL.id}'"]


def test_resolve_model_without_identifier():
    model, warnings = resolve_model(None)
    assert model.id == DEFAULT_MODEL.id
    assert warnings == []


def test_alias_resolves_without_warning():
    request, warnings = normalize({"prompt": "p", "model": "dall-e-3"})
    assert request.model.id == "gemini-3-pro-image-preview"
    assert warnings == []


def test_sampling_parameters_are_clamped():
    request, _ = normalize({"prompt": "p", "temperature": 9, "top_p": -1, "top_k": 1000, "max_output_tokens": 0})
    assert request.temperature == 2.0
    assert request.top_p == 0.0
    assert request.top_k == 100
    assert request.max_output_tokens == 1


def test_sampling_defaults_come_from_model():
    request, _ = normalize({"prompt": "p", "model": "gemini-2.5-flash-image"})
    assert request.temperature == 1.0
    assert request.max_output_tokens == 8192


def test_hd_raises_temperature_floor():
    request, warnings = normalize({"prompt": "p", "quality": "hd", "temperature": 0.2})
    assert request.quality == ImageQuality.HD
    assert request.temperature == Config.HD_TEMPERATURE_FLOOR
    assert warnings == []


def test_hd_ignored_for_model_without_quality():
    request, warnings = normalize({"prompt": "p", "model": "gemini-2.5-flash-image", "quality": "hd"})
    assert request.quality == ImageQuality.STANDARD
    assert len(warnings) == 1


def test_invalid_style_warns():
    request, warnings = normalize({"prompt": "p", "style": "cubist"})
    assert request.style is None
    assert "cubist" in warnings[0]


def test_style_kept_when_supported():
    request, warnings = normalize({"prompt": "p", "style": "Vivid"})
    assert request.style == ImageStyle.VIVID
    assert warnings == []


def test_negative_prompt_dropped_when_unsupported():
    request, warnings = normalize({
        "prompt": "p",
        "model": "gemini-2.0-flash-preview-image-generation",
        "negative_prompt": "blurry",
    })
    assert request.negative_prompt is None
    assert len(warnings) == 1


def test_wire_format_follows_config(monkeypatch):
    monkeypatch.setattr(Config, "USE_OFFICIAL_WIRE_FORMAT", True)
    request, _ = normalize({"prompt": "p"})
    assert request.use_official_wire_format is True
    request, _ = normalize({"prompt": "p", "use_official_format": False})
    assert request.use_official_wire_format is False


@pytest.mark.parametrize("raw", [
    {"prompt": "a red fox", "size": "1024x1024"},
    {"prompt": "city at night", "model": "nano-banana", "n": 50, "size": "999x999", "seed": -5},
    {"prompt": "portrait", "quality": "hd", "style": "natural", "negative_prompt": "blur", "temperature": 0.1},
    {"prompt": "icon", "response_format": "b64_json", "top_k": 0, "use_official_format": True},
])
def test_normalize_is_idempotent(raw):
    first, _ = normalize(raw)
    second, warnings = normalize(first.to_params())
    assert second == first
    assert warnings == []


def test_hd_floor_never_leaves_temperature_range(monkeypatch):
    monkeypatch.setattr(Config, "HD_TEMPERATURE_FLOOR", 5.0)
    request, _ = normalize({"prompt": "p", "quality": "hd"})
    assert request.temperature == 2.0
