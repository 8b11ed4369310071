"""Asset extraction from upstream responses and caller-facing envelopes.

Upstream JSON is untrusted: any of candidates / content / parts may be
missing or of the wrong type. An asset can arrive as inline base64, as a file
URI, or as a base64 data URI inside Markdown image syntax in a text part.
"""
import re
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional, Sequence, Union

from image.models import (
    AdaptedResponse,
    CustomImageResponse,
    GenerationRequest,
    OpenAIImageDatum,
    OpenAIImageResponse,
    ResponseFormat,
)

DEFAULT_MIME_TYPE = "image/png"

MARKDOWN_IMAGE = re.compile(
    r"!\[[^\]]*\]\(\s*data:(?P<mime>image/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+?)\s*\)"
)


@dataclass(frozen=True)
class InlineAsset:
    mime_type: str
    data: str
    caption: str = ""
    kind: str = "inline"

    @property
    def url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @property
    def b64_json(self) -> Optional[str]:
        return self.data


@dataclass(frozen=True)
class FileAsset:
    uri: str
    mime_type: Optional[str] = None
    data: Optional[str] = None
    caption: str = ""
    kind: str = "file"

    @property
    def url(self) -> str:
        return self.uri

    @property
    def b64_json(self) -> Optional[str]:
        return self.data


@dataclass(frozen=True)
class MarkdownAsset:
    mime_type: str
    data: str
    caption: str = ""
    kind: str = "markdown"

    @property
    def url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @property
    def b64_json(self) -> Optional[str]:
        return self.data


AssetRef = Union[InlineAsset, FileAsset, MarkdownAsset]


def _field(obj: Any, *names: str) -> Any:
    """First present key among camelCase / snake_case spellings."""
    if not isinstance(obj, dict):
        return None
    for name in names:
        if name in obj:
            return obj[name]
    return None


def _parts(upstream: Any) -> List[Any]:
    candidates = _field(upstream, "candidates")
    if not isinstance(candidates, list) or not candidates:
        return []
    content = _field(candidates[0], "content")
    parts = _field(content, "parts")
    return parts if isinstance(parts, list) else []


def try_inline(part: Any) -> Optional[AssetRef]:
    inline = _field(part, "inlineData", "inline_data")
    data = _field(inline, "data")
    if not isinstance(data, str) or not data:
        return None
    mime_type = _field(inline, "mimeType", "mime_type") or DEFAULT_MIME_TYPE
    return InlineAsset(mime_type=mime_type, data=data)


def try_file(part: Any) -> Optional[AssetRef]:
    file_data = _field(part, "fileData", "file_data")
    uri = _field(file_data, "fileUri", "file_uri")
    if not isinstance(uri, str) or not uri:
        return None
    return FileAsset(uri=uri, mime_type=_field(file_data, "mimeType", "mime_type"))


def try_markdown(part: Any) -> Optional[AssetRef]:
    text = _field(part, "text")
    if not isinstance(text, str):
        return None
    match = MARKDOWN_IMAGE.search(text)
    if match is None:
        return None
    data = re.sub(r"\s+", "", match.group("data"))
    return MarkdownAsset(mime_type=match.group("mime"), data=data)


# Priority order within a part
EXTRACTORS: Sequence[Callable[[Any], Optional[AssetRef]]] = (try_inline, try_file, try_markdown)


def _caption(parts: List[Any]) -> str:
    texts = []
    for part in parts:
        text = _field(part, "text")
        if isinstance(text, str):
            text = MARKDOWN_IMAGE.sub("", text).strip()
            if text:
                texts.append(text)
    return "\n".join(texts)


def extract_asset(upstream: Any) -> Optional[AssetRef]:
    """First asset found in candidates[0].content.parts, or None."""
    parts = _parts(upstream)
    for part in parts:
        for extractor in EXTRACTORS:
            asset = extractor(part)
            if asset is not None:
                caption = _caption(parts)
                if caption:
                    asset = replace(asset, caption=caption)
                return asset
    return None


def to_custom_envelope(
    asset: AssetRef,
    request: GenerationRequest,
    provider: str,
    model: str,
    warnings: Optional[List[str]] = None,
    note: Optional[str] = None,
) -> CustomImageResponse:
    return CustomImageResponse(
        success=True,
        image_url=asset.url,
        prompt=request.prompt,
        model=model,
        width=request.width,
        height=request.height,
        provider=provider,
        note=note,
        warnings=list(warnings or []),
    )


def to_openai_envelope(
    asset: AssetRef,
    request: GenerationRequest,
    model: str,
    provider: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> OpenAIImageResponse:
    """
    OpenAI images envelope.

    Upstream produces at most one asset per call, so for n > 1 the same asset
    is repeated n times and a warning says so.
    """
    warnings = list(warnings or [])
    if request.response_format == ResponseFormat.B64_JSON and asset.b64_json:
        datum = OpenAIImageDatum(b64_json=asset.b64_json, revised_prompt=request.prompt)
    else:
        if request.response_format == ResponseFormat.B64_JSON:
            warnings.append("Provider returned only an image URL; b64_json is not available for this result")
        datum = OpenAIImageDatum(url=asset.url, revised_prompt=request.prompt)

    if request.n > 1:
        warnings.append(
            f"Provider returned a single image; it is repeated {request.n} times to satisfy n={request.n}"
        )

    return OpenAIImageResponse(
        created=int(time.time()),
        data=[datum.model_copy() for _ in range(request.n)],
        model=model,
        provider=provider,
        warnings=warnings,
    )


def to_envelope(
    asset: AssetRef,
    request: GenerationRequest,
    envelope: str,
    provider: str,
    model: str,
    warnings: Optional[List[str]] = None,
    note: Optional[str] = None,
) -> AdaptedResponse:
    """Dispatch on envelope name: "custom" or "openai"."""
    if envelope == "openai":
        return to_openai_envelope(asset, request, model=model, provider=provider, warnings=warnings)
    return to_custom_envelope(asset, request, provider=provider, model=model, warnings=warnings, note=note)
