"""Video generation routes."""
import httpx
from fastapi import APIRouter, Depends, Path

from auth.services import require_api_key
from common.http_client import get_http_client
from videos.models import Text2VideoRequest, Text2VideoResponse, VideoStatusResponse
from videos.services import get_video_status, submit_text2video
from utils.logger import get_logger

logger = get_logger("videos")
router = APIRouter(prefix="/api/text2video", tags=["videos"], dependencies=[Depends(require_api_key)])


@router.post("", response_model=Text2VideoResponse)
def text2video(req: Text2VideoRequest, client: httpx.Client = Depends(get_http_client)):
    """
    Submit a text-to-video task.

    Accepts:
      { text, duration?, aspect_ratio?, style? }
    """
    return submit_text2video(req, client)


@router.get("/status/{task_id}", response_model=VideoStatusResponse)
def text2video_status(task_id: str = Path(...), client: httpx.Client = Depends(get_http_client)):
    """Look up a task's status at the provider."""
    logger.info(f"Status lookup for video task {task_id}")
    return get_video_status(task_id, client)
