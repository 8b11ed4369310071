"""Image generation Pydantic models."""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from image.registry import ModelDescriptor
from image.sizes import parse_size


class ImageQuality(str, Enum):
    STANDARD = "standard"
    HD = "hd"


class ImageStyle(str, Enum):
    NATURAL = "natural"
    VIVID = "vivid"


class ResponseFormat(str, Enum):
    URL = "url"
    B64_JSON = "b64_json"


class GenerationRequest(BaseModel):
    """A normalized image request. Only the normalizer should build these."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    prompt: str
    model: ModelDescriptor
    n: int = 1
    size: str
    quality: ImageQuality = ImageQuality.STANDARD
    style: Optional[ImageStyle] = None
    seed: Optional[int] = None
    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int
    negative_prompt: Optional[str] = None
    response_format: ResponseFormat = ResponseFormat.URL
    use_official_wire_format: bool = False

    @property
    def width(self) -> int:
        return parse_size(self.size)[0]

    @property
    def height(self) -> int:
        return parse_size(self.size)[1]

    def to_params(self) -> Dict[str, Any]:
        """Render back to raw client parameters."""
        return {
            "prompt": self.prompt,
            "model": self.model.id,
            "n": self.n,
            "size": self.size,
            "quality": self.quality.value,
            "style": self.style.value if self.style else None,
            "seed": self.seed,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "top_k": self.top_k,
            "max_output_tokens": self.max_output_tokens,
            "negative_prompt": self.negative_prompt,
            "response_format": self.response_format.value,
            "use_official_format": self.use_official_wire_format,
        }


# ---------- Inbound bodies ----------
# Fields stay loosely typed; the normalizer owns validation and clamping.

class ImageGenerateRequest(BaseModel):
    """Body of POST /api/image/generate."""
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    prompt: Optional[str] = Field("", description="Image description")
    width: Optional[Any] = Field(1024, description="Image width in pixels")
    height: Optional[Any] = Field(1024, description="Image height in pixels")
    model: Optional[str] = Field(None, description="Model id or alias")
    quality: Optional[str] = None
    style: Optional[str] = None
    seed: Optional[Any] = None
    negative_prompt: Optional[str] = None
    temperature: Optional[Any] = None
    top_p: Optional[Any] = None
    top_k: Optional[Any] = None
    use_official_format: Optional[bool] = None

    def to_params(self) -> Dict[str, Any]:
        params = self.model_dump(exclude={"width", "height"}, exclude_none=True)
        params["width"] = self.width or 1024
        params["height"] = self.height or 1024
        return params


class PollinationsImageRequest(BaseModel):
    """Body of POST /api/image/pollinations."""
    prompt: Optional[str] = ""
    width: Optional[int] = 1024
    height: Optional[int] = 1024
    seed: Optional[int] = None


class OpenAIImageRequest(BaseModel):
    """Body of POST /v1/images/generations."""
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    prompt: Optional[str] = ""
    model: Optional[str] = None
    n: Optional[Any] = 1
    size: Optional[str] = None
    response_format: Optional[str] = ResponseFormat.URL.value
    quality: Optional[str] = None
    style: Optional[str] = None
    seed: Optional[Any] = None
    negative_prompt: Optional[str] = None
    use_official_format: Optional[bool] = None

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------- Outbound envelopes ----------

class CustomImageResponse(BaseModel):
    success: bool = True
    image_url: str
    prompt: str
    model: str
    width: int
    height: int
    provider: str
    note: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class OpenAIImageDatum(BaseModel):
    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None


class OpenAIImageResponse(BaseModel):
    created: int
    data: List[OpenAIImageDatum]
    model: str
    provider: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


AdaptedResponse = Union[CustomImageResponse, OpenAIImageResponse]
