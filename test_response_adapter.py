"""Tests for asset extraction and response envelopes."""
import pytest

from image.models import CustomImageResponse, OpenAIImageResponse
from image.normalizer import normalize
from image.response_adapter import (
    FileAsset,
    InlineAsset,
    MarkdownAsset,
    extract_asset,
    to_envelope,
    to_openai_envelope,
)

from conftest import PNG_B64, gemini_image_body


@pytest.mark.parametrize("upstream", [
    {},
    {"candidates": []},
    {"candidates": None},
    {"candidates": [{}]},
    {"candidates": [{"content": {"parts": "not-a-list"}}]},
    {"candidates": [{"content": {"parts": [{"text": "I cannot draw that."}]}}]},
    {"promptFeedback": {"blockReason": "SAFETY"}},
    [],
    None,
    "oops",
])
def test_no_asset_returns_none(upstream):
    assert extract_asset(upstream) is None


def test_inline_asset():
    asset = extract_asset(gemini_image_body())
    assert isinstance(asset, InlineAsset)
    assert asset.mime_type == "image/png"
    assert asset.url == f"data:image/png;base64,{PNG_B64}"
    assert asset.b64_json == PNG_B64


def test_inline_asset_snake_case_keys():
    upstream = {"candidates": [{"content": {"parts": [
        {"inline_data": {"mime_type": "image/jpeg", "data": "abcd"}},
    ]}}]}
    asset = extract_asset(upstream)
    assert isinstance(asset, InlineAsset)
    assert asset.url == "data:image/jpeg;base64,abcd"


def test_file_asset():
    upstream = {"candidates": [{"content": {"parts": [
        {"fileData": {"mimeType": "image/png", "fileUri": "https://cdn.example.com/img.png"}},
    ]}}]}
    asset = extract_asset(upstream)
    assert isinstance(asset, FileAsset)
    assert asset.url == "https://cdn.example.com/img.png"
    assert asset.b64_json is None


def test_markdown_asset():
    text = f"Here you go:\n![fox](data:image/webp;base64,{PNG_B64})"
    upstream = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    asset = extract_asset(upstream)
    assert isinstance(asset, MarkdownAsset)
    assert asset.mime_type == "image/webp"
    assert asset.data == PNG_B64
    assert asset.caption == "Here you go:"


def test_first_part_with_an_asset_wins():
    upstream = {"candidates": [{"content": {"parts": [
        {"text": "caption only"},
        {"fileData": {"fileUri": "https://cdn.example.com/first.png"}},
        {"inlineData": {"mimeType": "image/png", "data": PNG_B64}},
    ]}}]}
    asset = extract_asset(upstream)
    assert isinstance(asset, FileAsset)
    assert asset.caption == "caption only"


def test_inline_beats_file_within_a_part():
    upstream = {"candidates": [{"content": {"parts": [{
        "fileData": {"fileUri": "https://cdn.example.com/x.png"},
        "inlineData": {"mimeType": "image/png", "data": PNG_B64},
    }]}}]}
    assert isinstance(extract_asset(upstream), InlineAsset)


def test_custom_envelope():
    request, _ = normalize({"prompt": "a red fox", "size": "1024x768"})
    asset = extract_asset(gemini_image_body())
    response = to_envelope(asset, request, "custom", provider="appmedo", model=request.model.id, warnings=["w"])
    assert isinstance(response, CustomImageResponse)
    assert response.success is True
    assert response.image_url == asset.url
    assert (response.width, response.height) == (1024, 768)
    assert response.provider == "appmedo"
    assert response.warnings == ["w"]
    assert response.note is None


def test_openai_envelope_url():
    request, _ = normalize({"prompt": "a red fox"})
    asset = extract_asset(gemini_image_body())
    response = to_envelope(asset, request, "openai", provider="appmedo", model=request.model.id)
    assert isinstance(response, OpenAIImageResponse)
    assert len(response.data) == 1
    assert response.data[0].url == asset.url
    assert response.data[0].b64_json is None
    assert response.data[0].revised_prompt == "a red fox"
    assert response.warnings == []


def test_openai_envelope_b64():
    request, _ = normalize({"prompt": "a red fox", "response_format": "b64_json"})
    response = to_openai_envelope(extract_asset(gemini_image_body()), request, model=request.model.id)
    assert response.data[0].b64_json == PNG_B64
    assert response.data[0].url is None


def test_openai_envelope_b64_unavailable_uses_url():
    request, _ = normalize({"prompt": "a red fox", "response_format": "b64_json"})
    asset = FileAsset(uri="https://cdn.example.com/img.png")
    response = to_openai_envelope(asset, request, model=request.model.id)
    assert response.data[0].url == "https://cdn.example.com/img.png"
    assert len(response.warnings) == 1


def test_openai_envelope_repeats_single_asset_with_warning():
    request, _ = normalize({"prompt": "a red fox", "n": 3})
    response = to_openai_envelope(extract_asset(gemini_image_body()), request, model=request.model.id)
    assert len(response.data) == 3
    assert len({datum.url for datum in response.data}) == 1
    assert response.warnings == ["Provider returned a single image; it is repeated 3 times to satisfy n=3"]
