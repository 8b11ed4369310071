"""Video generation Pydantic models."""
from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class AspectRatio(str, Enum):
    """Video aspect ratios accepted by the text-to-video provider."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"


class Text2VideoRequest(BaseModel):
    """Request model for text-to-video submission."""
    text: Optional[str] = Field("", description="Video description (max 500 characters)")
    duration: Optional[Any] = Field(None, description="Duration in seconds (5-15, default 10)")
    aspect_ratio: Optional[str] = Field(None, description="16:9, 9:16 or 1:1 (default 16:9)")
    style: Optional[str] = Field(None, description="Provider style preset (default 'default')")


class Text2VideoResponse(BaseModel):
    """Response model for text-to-video submission."""
    success: bool = True
    task_id: str = Field(..., description="Provider task id used for status polling")
    status: str = Field("processing", description="Task status reported by the provider")
    video_url: Optional[str] = Field(None, description="Video URL when already available")
    estimated_time: int = Field(60, description="Estimated seconds until completion")
    warnings: List[str] = Field(default_factory=list)


class VideoStatusResponse(BaseModel):
    """Response model for task status lookups."""
    success: bool = True
    task_id: str
    status: str = "unknown"
    progress: float = 0
    video_url: Optional[str] = None
