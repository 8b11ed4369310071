"""Video generation module."""
from videos.models import Text2VideoRequest, Text2VideoResponse, VideoStatusResponse
from videos.services import submit_text2video, get_video_status

__all__ = [
    "Text2VideoRequest",
    "Text2VideoResponse",
    "VideoStatusResponse",
    "submit_text2video",
    "get_video_status"
]
