"""
Configuration module - loads all settings from environment variables.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
try:
    load_dotenv()
except Exception as e:
    print(f"Warning: Failed to load .env file: {e}")
    print("Continuing with environment variables or defaults...")


class Config:
    """Gateway configuration loaded from environment variables."""

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Safely parse integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid integer for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Safely parse float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid float for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Safely parse boolean environment variable."""
        try:
            value = os.getenv(key, str(default)).lower()
            return value in ("true", "1", "yes", "on")
        except Exception as e:
            print(f"Warning: Invalid boolean for {key}, using default {default}: {e}")
            return default

    # Shared-secret API key (empty disables auth)
    API_KEY: str = os.getenv("API_KEY", "")
    AUTH_REQUIRED: bool = _get_bool.__func__("AUTH_REQUIRED", False)

    # Gemini-compatible image endpoint
    GEMINI_API_BASE: str = os.getenv(
        "GEMINI_API_BASE",
        "https://api-integrations.appmedo.com/app-7r29gu4xs001/api-Xa6JZ58oPMEa/v1beta/models",
    )
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    DEFAULT_IMAGE_MODEL: str = os.getenv("DEFAULT_IMAGE_MODEL", "gemini-3-pro-image-preview")
    USE_OFFICIAL_WIRE_FORMAT: bool = _get_bool.__func__("USE_OFFICIAL_WIRE_FORMAT", False)
    HD_TEMPERATURE_FLOOR: float = _get_float.__func__("HD_TEMPERATURE_FLOOR", 1.0)

    # Medeo text-to-video endpoint
    MEDEO_API_BASE: str = os.getenv(
        "MEDEO_API_BASE",
        "https://api-integrations.appmedo.com/app-7r29gu4xs001/api-6LeB8Qe4rWGY/v1/videos",
    )
    VIDEO_TEXT_MAX_LENGTH: int = _get_int.__func__("VIDEO_TEXT_MAX_LENGTH", 500)

    # Pollinations fallback
    POLLINATIONS_BASE_URL: str = os.getenv("POLLINATIONS_BASE_URL", "https://image.pollinations.ai/prompt")
    POLLINATIONS_MODEL: str = os.getenv("POLLINATIONS_MODEL", "flux")
    POLLINATIONS_VERIFY: bool = _get_bool.__func__("POLLINATIONS_VERIFY", True)
    FALLBACK_ENABLED: bool = _get_bool.__func__("FALLBACK_ENABLED", True)

    # Outbound HTTP
    UPSTREAM_TIMEOUT_SECONDS: float = _get_float.__func__("UPSTREAM_TIMEOUT_SECONDS", 60.0)
    UPSTREAM_USER_AGENT: str = os.getenv("UPSTREAM_USER_AGENT", "Mozilla/5.0")

    # Errors
    EXPOSE_INTERNAL_ERRORS: bool = _get_bool.__func__("EXPOSE_INTERNAL_ERRORS", True)

    # Server
    VERSION: str = "2.1.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _get_int.__func__("PORT", 8000)

    @classmethod
    def validate(cls) -> None:
        """Validate configuration consistency."""
        if cls.AUTH_REQUIRED and not cls.API_KEY:
            raise ValueError("API_KEY environment variable is required when AUTH_REQUIRED is set")
        if cls.UPSTREAM_TIMEOUT_SECONDS <= 0:
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be positive")
        if not 0 <= cls.HD_TEMPERATURE_FLOOR <= 2:
            raise ValueError("HD_TEMPERATURE_FLOOR must be within [0, 2]")

    @classmethod
    def auth_enabled(cls) -> bool:
        """Auth is enforced whenever a secret is configured or explicitly required."""
        return bool(cls.API_KEY) or cls.AUTH_REQUIRED

    @classmethod
    def gemini_endpoint(cls, model_id: str) -> str:
        """Build the generateContent URL for a model."""
        return f"{cls.GEMINI_API_BASE.rstrip('/')}/{model_id}:generateContent"
