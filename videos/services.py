"""Video generation services - Medeo text-to-video proxy."""
import math
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote
from uuid import uuid4

import httpx

from config import Config
from common.error_messages import ErrorCode
from common.exceptions import InvalidRequest, NotFoundError, UpstreamHTTPError
from utils.logger import get_logger
from videos.models import AspectRatio, Text2VideoRequest, Text2VideoResponse, VideoStatusResponse

logger = get_logger("videos.services")

VIDEO_PROVIDER = "medeo"
DEFAULT_DURATION = 10
DURATION_RANGE = (5, 15)
DEFAULT_STYLE = "default"
DEFAULT_ESTIMATED_TIME = 60


def generate_task_id() -> str:
    """Local task id used when the provider does not return one."""
    return f"task_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


def normalize_video_params(req: Text2VideoRequest) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate a text-to-video request into the provider payload.

    Raises:
        InvalidRequest: text missing/too long or aspect ratio unsupported
    """
    warnings: List[str] = []
    text = (req.text or "").strip()
    if not text:
        raise InvalidRequest("Text is required", code=ErrorCode.MISSING_FIELD, param="text")
    if len(text) > Config.VIDEO_TEXT_MAX_LENGTH:
        raise InvalidRequest(
            f"Text too long ({len(text)} characters, maximum {Config.VIDEO_TEXT_MAX_LENGTH})",
            param="text",
        )

    duration = DEFAULT_DURATION
    if req.duration is not None and req.duration != "":
        try:
            if isinstance(req.duration, bool):
                raise ValueError("boolean duration")
            requested = float(req.duration)
        except (TypeError, ValueError):
            raise InvalidRequest(f"duration must be a number, got {req.duration!r}", param="duration")
        if math.isnan(requested) or math.isinf(requested):
            raise InvalidRequest(f"duration must be a number, got {req.duration!r}", param="duration")
        duration = int(max(DURATION_RANGE[0], min(DURATION_RANGE[1], math.floor(requested))))
        if duration != requested:
            warnings.append(f"Duration {req.duration} adjusted to {duration} seconds")

    aspect_ratio = req.aspect_ratio or AspectRatio.LANDSCAPE.value
    try:
        aspect_ratio = AspectRatio(aspect_ratio).value
    except ValueError:
        allowed = ", ".join(ratio.value for ratio in AspectRatio)
        raise InvalidRequest(f"Unsupported aspect_ratio '{aspect_ratio}'; expected one of: {allowed}", param="aspect_ratio")

    payload = {
        "prompt": text,
        "duration": duration,
        "aspect_ratio": aspect_ratio,
        "style": (req.style or DEFAULT_STYLE).strip() or DEFAULT_STYLE,
    }
    return payload, warnings


def _upstream_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        raise UpstreamHTTPError("Video provider returned a non-JSON body", code=ErrorCode.VIDEO_GENERATION_FAILED, provider=VIDEO_PROVIDER)
    if not isinstance(payload, dict):
        raise UpstreamHTTPError("Video provider returned an unexpected body", code=ErrorCode.VIDEO_GENERATION_FAILED, provider=VIDEO_PROVIDER)
    return payload


def _transport_error(e: httpx.HTTPError) -> UpstreamHTTPError:
    if isinstance(e, httpx.TimeoutException):
        return UpstreamHTTPError(f"Video provider timed out: {e}", code=ErrorCode.UPSTREAM_TIMEOUT, provider=VIDEO_PROVIDER)
    return UpstreamHTTPError(f"Video provider unreachable: {e}", code=ErrorCode.UPSTREAM_UNREACHABLE, provider=VIDEO_PROVIDER)


def _upstream_number(value: Any) -> Optional[float]:
    """Numeric provider field; accepts numeric strings and "50%". None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _upstream_text(value: Any, default: Optional[str]) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return default
    return str(value).strip() or default


def submit_text2video(req: Text2VideoRequest, client: httpx.Client) -> Text2VideoResponse:
    """
    Submit a text-to-video task. There is no fallback provider for video.

    Raises:
        InvalidRequest: before any network call, for bad input
        UpstreamHTTPError: provider unreachable or non-2xx (provider status propagated)
    """
    payload, warnings = normalize_video_params(req)
    url = f"{Config.MEDEO_API_BASE.rstrip('/')}/text2video"
    logger.info(f"Submitting text2video task: duration={payload['duration']} aspect_ratio={payload['aspect_ratio']} style={payload['style']}")

    try:
        response = client.post(url, json=payload, headers={"Content-Type": "application/json", "User-Agent": Config.UPSTREAM_USER_AGENT})
    except httpx.HTTPError as e:
        logger.error(f"Video provider request failed: {e}")
        raise _transport_error(e)

    if not response.is_success:
        logger.error(f"Video provider returned HTTP {response.status_code}")
        raise UpstreamHTTPError(
            f"API request failed with status {response.status_code}",
            upstream_status=response.status_code,
            code=ErrorCode.VIDEO_GENERATION_FAILED,
            provider=VIDEO_PROVIDER,
        )

    result = _upstream_json(response)
    # The task already exists upstream, so odd field types must not lose its id
    task_id = (
        _upstream_text(result.get("task_id"), None)
        or _upstream_text(result.get("id"), None)
        or generate_task_id()
    )
    estimated_time = _upstream_number(result.get("estimated_time"))
    logger.info(f"Video task accepted: {task_id}")
    return Text2VideoResponse(
        success=True,
        task_id=task_id,
        status=_upstream_text(result.get("status"), "processing"),
        video_url=_upstream_text(result.get("video_url"), None),
        estimated_time=int(estimated_time) if estimated_time and estimated_time > 0 else DEFAULT_ESTIMATED_TIME,
        warnings=warnings,
    )


def get_video_status(task_id: Optional[str], client: httpx.Client) -> VideoStatusResponse:
    """
    Pass-through status lookup against the provider.

    Raises:
        InvalidRequest: empty task id
        NotFoundError: provider answered 404
        UpstreamHTTPError: any other provider failure
    """
    task_id = (task_id or "").strip()
    if not task_id:
        raise InvalidRequest("Task ID required", code=ErrorCode.MISSING_FIELD, param="task_id")

    url = f"{Config.MEDEO_API_BASE.rstrip('/')}/status/{quote(task_id, safe='')}"
    try:
        response = client.get(url, headers={"User-Agent": Config.UPSTREAM_USER_AGENT})
    except httpx.HTTPError as e:
        logger.error(f"Video status request failed for {task_id}: {e}")
        raise _transport_error(e)

    if response.status_code == 404:
        raise NotFoundError(
            f"Task {task_id} not found",
            code=ErrorCode.TASK_NOT_FOUND,
            param="task_id",
            extra={"task_id": task_id, "status": "not_found"},
        )
    if not response.is_success:
        raise UpstreamHTTPError(
            f"Status check failed with status {response.status_code}",
            upstream_status=response.status_code,
            provider=VIDEO_PROVIDER,
        )

    result = _upstream_json(response)
    return VideoStatusResponse(
        success=True,
        task_id=task_id,
        status=_upstream_text(result.get("status"), "unknown"),
        progress=_upstream_number(result.get("progress")) or 0,
        video_url=_upstream_text(result.get("video_url"), None),
    )
