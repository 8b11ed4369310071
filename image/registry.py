"""Static catalog of upstream image models.

The registry is built once at import time from MODEL_DEFINITIONS and never
mutated afterwards. Ids and aliases share one lookup map.
"""
from typing import Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from config import Config
from image.sizes import SIZE_TABLE
from utils.logger import get_logger

logger = get_logger("image.registry")

# Unix timestamp reported as "created" in model listings
REGISTRY_CREATED = 1735689600


class ModelCapabilities(BaseModel):
    """What a model accepts."""
    model_config = ConfigDict(frozen=True)

    supports_image_gen: bool = True
    supported_sizes: FrozenSet[str]
    default_size: str = "1024x1024"
    max_images: int = Field(10, ge=1)
    supports_seed: bool = False
    supports_style: bool = False
    supports_quality: bool = False
    supports_negative_prompt: bool = False


class ModelDefaults(BaseModel):
    """Sampling defaults sent upstream when the caller gives none."""
    model_config = ConfigDict(frozen=True)

    temperature: float = 0.9
    top_p: float = 0.95
    top_k: int = 40
    max_output_tokens: int = 2048


class ModelDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str
    aliases: FrozenSet[str] = frozenset()
    owned_by: str = "google"
    api_endpoint: str
    capabilities: ModelCapabilities
    defaults: ModelDefaults = ModelDefaults()

    def to_openai(self) -> Dict[str, object]:
        """OpenAI /v1/models entry."""
        return {
            "id": self.id,
            "object": "model",
            "created": REGISTRY_CREATED,
            "owned_by": self.owned_by,
            "aliases": sorted(self.aliases),
            "capabilities": {
                "image_generation": self.capabilities.supports_image_gen,
                "sizes": sorted(self.capabilities.supported_sizes),
                "default_size": self.capabilities.default_size,
                "max_images": self.capabilities.max_images,
                "seed": self.capabilities.supports_seed,
                "style": self.capabilities.supports_style,
                "quality": self.capabilities.supports_quality,
                "negative_prompt": self.capabilities.supports_negative_prompt,
            },
        }


class ModelRegistry:
    """Read-only model table with ids and aliases indexed into one map."""

    def __init__(self, models: List[ModelDescriptor], default_model_id: str):
        self._models: Tuple[ModelDescriptor, ...] = tuple(models)
        index: Dict[str, ModelDescriptor] = {}
        for model in self._models:
            _check_descriptor(model)
            for key in (model.id, *sorted(model.aliases)):
                if key in index:
                    raise ValueError(f"Model identifier '{key}' is declared twice (by '{index[key].id}' and '{model.id}')")
                index[key] = model
        self._index = index

        default = index.get(default_model_id)
        if default is None:
            raise ValueError(f"Default model '{default_model_id}' is not in the registry")
        self._default = default

    def resolve(self, identifier: Optional[str]) -> Optional[ModelDescriptor]:
        """Look up a model by exact id or alias; None when unknown."""
        if not identifier:
            return None
        return self._index.get(str(identifier).strip())

    def get_default(self) -> ModelDescriptor:
        return self._default

    def list_models(self) -> List[ModelDescriptor]:
        return list(self._models)

    def __contains__(self, identifier: str) -> bool:
        return self.resolve(identifier) is not None

    def __len__(self) -> int:
        return len(self._models)


def _check_descriptor(model: ModelDescriptor) -> None:
    caps = model.capabilities
    if caps.default_size not in caps.supported_sizes:
        raise ValueError(f"Model '{model.id}': default size {caps.default_size} is not a supported size")
    unknown = sorted(size for size in caps.supported_sizes if size not in SIZE_TABLE)
    if unknown:
        raise ValueError(f"Model '{model.id}': sizes without wire tokens: {', '.join(unknown)}")


_SQUARE_SIZES = frozenset({"512x512", "768x768", "1024x1024"})
_UI_SIZES = frozenset({
    "512x512", "512x768", "512x1024",
    "768x512", "768x768", "768x1024",
    "1024x512", "1024x768", "1024x1024",
})
_OPENAI_SIZES = frozenset({"1024x1536", "1536x1024", "1024x1792", "1792x1024"})


MODEL_DEFINITIONS = [
    {
        "id": "gemini-3-pro-image-preview",
        "aliases": {"gemini-3-pro-image", "nano-banana-pro", "dall-e-3"},
        "capabilities": {
            "supported_sizes": _UI_SIZES | _OPENAI_SIZES | {"2048x2048", "4096x4096"},
            "default_size": "1024x1024",
            "max_images": 4,
            "supports_seed": True,
            "supports_style": True,
            "supports_quality": True,
            "supports_negative_prompt": True,
        },
    },
    {
        "id": "gemini-2.5-flash-image",
        "aliases": {"gemini-2.5-flash-image-preview", "nano-banana", "dall-e-2"},
        "capabilities": {
            "supported_sizes": _UI_SIZES | _OPENAI_SIZES | {"256x256"},
            "default_size": "1024x1024",
            "max_images": 10,
            "supports_seed": True,
            "supports_style": True,
            "supports_quality": False,
            "supports_negative_prompt": True,
        },
        "defaults": {"temperature": 1.0, "top_p": 0.95, "top_k": 40, "max_output_tokens": 8192},
    },
    {
        "id": "gemini-2.0-flash-preview-image-generation",
        "aliases": {"gemini-2.0-flash-exp-image-generation"},
        "capabilities": {
            "supported_sizes": _SQUARE_SIZES,
            "default_size": "1024x1024",
            "max_images": 1,
        },
    },
]


def build_registry(definitions=None, default_model_id: Optional[str] = None) -> ModelRegistry:
    """Materialize descriptors, pointing each at the configured Gemini base URL."""
    models = []
    for entry in definitions or MODEL_DEFINITIONS:
        models.append(ModelDescriptor(
            id=entry["id"],
            aliases=frozenset(entry.get("aliases", ())),
            owned_by=entry.get("owned_by", "google"),
            api_endpoint=entry.get("api_endpoint") or Config.gemini_endpoint(entry["id"]),
            capabilities=ModelCapabilities(**entry["capabilities"]),
            defaults=ModelDefaults(**entry.get("defaults", {})),
        ))
    return ModelRegistry(models, default_model_id or Config.DEFAULT_IMAGE_MODEL)


MODEL_REGISTRY = build_registry()
logger.info(f"Model registry loaded: {len(MODEL_REGISTRY)} models, default '{MODEL_REGISTRY.get_default().id}'")
