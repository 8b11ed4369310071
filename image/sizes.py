"""Image size tokens shared by the registry and the request builder."""
from typing import Dict, Optional, Tuple

# "WxH" -> (aspectRatio, imageSize) as understood by the structured wire format
SIZE_TABLE: Dict[str, Tuple[str, str]] = {
    "256x256": ("1:1", "1K"),
    "512x512": ("1:1", "1K"),
    "512x768": ("2:3", "1K"),
    "512x1024": ("9:16", "1K"),
    "768x512": ("3:2", "1K"),
    "768x768": ("1:1", "1K"),
    "768x1024": ("3:4", "1K"),
    "1024x512": ("16:9", "1K"),
    "1024x768": ("4:3", "1K"),
    "1024x1024": ("1:1", "1K"),
    "1024x1536": ("2:3", "2K"),
    "1536x1024": ("3:2", "2K"),
    "1024x1792": ("9:16", "2K"),
    "1792x1024": ("16:9", "2K"),
    "2048x2048": ("1:1", "2K"),
    "4096x4096": ("1:1", "4K"),
}


def canonical_size(value) -> Optional[str]:
    """Normalize "1024 X 1024"-style input to "1024x1024"; None if not WxH."""
    if value is None:
        return None
    text = str(value).strip().lower().replace(" ", "")
    parts = text.split("x")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return None
    width, height = (int(part) for part in parts)
    if width <= 0 or height <= 0:
        return None
    return f"{width}x{height}"


def size_from_dimensions(width, height) -> Optional[str]:
    if width is None or height is None:
        return None
    return canonical_size(f"{width}x{height}")


def parse_size(size: str) -> Tuple[int, int]:
    width, height = size.lower().split("x")
    return int(width), int(height)


def size_tokens(size: str) -> Tuple[str, str]:
    """Return (aspectRatio, imageSize) for a supported size."""
    return SIZE_TABLE[size]
