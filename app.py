"""
FastAPI gateway for generative-media providers.

Features:
- Image generation through a Gemini-compatible endpoint with Pollinations fallback
- OpenAI-compatible image generation and model listing
- Text-to-video submission and status proxying to the Medeo API
- Optional shared-secret API key
- Permissive CORS on every response
"""
import time
import json
from datetime import datetime, timezone
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from config import Config
from auth.routes import router as auth_router
from image.routes import router as image_router
from image.model_routes import router as models_router
from image.registry import MODEL_REGISTRY
from videos.routes import router as videos_router
from common.error_messages import ErrorCode
from common.exceptions import GatewayError, InternalError, InvalidRequest
from utils.logger import get_logger

logger = get_logger("main")

# Sensitive fields that should be masked in logs
SENSITIVE_FIELDS = {
    'api_key', 'x-api-key', 'authorization', 'token', 'secret', 'b64_json'
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-API-Key",
}
PREFLIGHT_MAX_AGE = "86400"
LOG_BODY_LIMIT = 2000


def mask_sensitive_data(data: Any, mask_value: str = "***MASKED***") -> Any:
    """
    Recursively mask sensitive fields in data structures.

    Args:
        data: Data to mask (dict, list, or JSON string)
        mask_value: Value to replace sensitive data with

    Returns:
        Data with sensitive fields masked
    """
    if isinstance(data, dict):
        return {
            key: mask_value if key.lower() in SENSITIVE_FIELDS else mask_sensitive_data(value, mask_value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive_data(item, mask_value) for item in data]
    if isinstance(data, str):
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, ValueError):
            return data
        if isinstance(parsed, (dict, list)):
            return json.dumps(mask_sensitive_data(parsed, mask_value))
    return data


def _truncate(text: str) -> str:
    if len(text) > LOG_BODY_LIMIT:
        return text[:LOG_BODY_LIMIT] + "... [truncated]"
    return text


def is_openai_route(request: Request) -> bool:
    return request.url.path.startswith("/v1/")


def error_response(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a GatewayError in the shape the route family expects."""
    if is_openai_route(request):
        content: Dict[str, Any] = {
            "error": {
                "message": exc.message,
                "type": exc.error_type,
                "param": exc.param,
                "code": exc.code.value,
            }
        }
    else:
        content = {
            "success": False,
            "error": exc.message,
            "message": exc.friendly_message,
            "code": exc.code.value,
        }
        content.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=content, headers=CORS_HEADERS)


# Validate configuration on startup
try:
    Config.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    logger.error("Please set required environment variables in .env file")

if not Config.auth_enabled():
    logger.warning("API_KEY is not set: authentication is disabled and every endpoint is public")

app = FastAPI(
    title="Generative Media Gateway",
    description="Image and video generation gateway with model registry, provider fallback and OpenAI-compatible endpoints.",
    version=Config.VERSION
)


@app.exception_handler(GatewayError)
async def gateway_exception_handler(request: Request, exc: GatewayError):
    """Handle errors raised on purpose by routes and services."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code.value} - {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.code.value} - {exc.message}")
    return error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies as InvalidRequest (400) instead of 422."""
    errors = exc.errors()
    param = None
    message = "Invalid request body"
    if errors:
        first = errors[0]
        loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        param = ".".join(loc) or None
        message = f"{param}: {first.get('msg')}" if param else str(first.get("msg"))
    return error_response(request, InvalidRequest(message, code=ErrorCode.INVALID_FORMAT, param=param))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions globally."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    message = str(exc) if Config.EXPOSE_INTERNAL_ERRORS and str(exc) else "Internal server error"
    return error_response(request, InternalError(message))


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing and masked, truncated bodies."""
    start_time = time.time()
    full_url = str(request.url)

    request_body = None
    if request.method == "POST":
        body_bytes = await request.body()
        if body_bytes:
            request_body = _truncate(mask_sensitive_data(body_bytes.decode("utf-8", errors="replace")))

    log_msg = f"→ {request.method} {full_url} - Client: {request.client.host if request.client else 'unknown'}"
    if request_body:
        log_msg += f"\n  Request Body: {request_body}"
    logger.info(log_msg)

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"← {request.method} {full_url} - Error: {str(e)} - Time: {process_time:.2f}ms")
        raise

    response_body_bytes = b""
    async for chunk in response.body_iterator:
        response_body_bytes += chunk
    response_body = None
    if response_body_bytes:
        response_body = _truncate(mask_sensitive_data(response_body_bytes.decode("utf-8", errors="replace")))

    process_time = (time.time() - start_time) * 1000
    log_msg = f"← {request.method} {full_url} - Status: {response.status_code} - Time: {process_time:.2f}ms"
    if response_body:
        log_msg += f"\n  Response Body: {response_body}"
    logger.info(log_msg)

    return Response(
        content=response_body_bytes,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type
    )


# Browser requests carrying an Origin header get their CORS headers here
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    max_age=int(PREFLIGHT_MAX_AGE),
)


# Outermost: CORSMiddleware answers preflight with 200 and skips requests
# without an Origin header, so bare OPTIONS and header-less responses are handled here
@app.middleware("http")
async def cors(request: Request, call_next):
    """Answer every OPTIONS with 204 and fill in CORS headers CORSMiddleware left out."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers={**CORS_HEADERS, "Access-Control-Max-Age": PREFLIGHT_MAX_AGE})
    response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


app.include_router(auth_router)
logger.info("Auth router included")

app.include_router(image_router)
logger.info("Image router included")

app.include_router(models_router)
logger.info("Models router included")

app.include_router(videos_router)
logger.info("Videos router included")


@app.on_event("startup")
async def startup_event():
    """Log startup event."""
    logger.info("=" * 80)
    logger.info(f"Generative media gateway v{Config.VERSION} starting up")
    logger.info(f"Default image model: {MODEL_REGISTRY.get_default().id}")
    logger.info(f"Wire format: {'structured' if Config.USE_OFFICIAL_WIRE_FORMAT else 'legacy'}")
    logger.info(f"Fallback: {'enabled' if Config.FALLBACK_ENABLED else 'disabled'}")
    logger.info(f"Host: {Config.HOST}:{Config.PORT}")
    logger.info("=" * 80)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown event."""
    logger.info("=" * 80)
    logger.info("Generative media gateway shutting down")
    logger.info("=" * 80)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "image_generation": MODEL_REGISTRY.get_default().id,
            "image_fallback": f"pollinations-{Config.POLLINATIONS_MODEL}",
            "video_generation": "medeo-text2video",
        },
    }


@app.get("/api/info")
def info():
    """Service catalog."""
    return {
        "name": "Generative Media Gateway",
        "version": Config.VERSION,
        "auth_enabled": Config.auth_enabled(),
        "services": {
            "image": {
                "endpoint": "/api/image/generate",
                "model": MODEL_REGISTRY.get_default().id,
                "provider": "appmedo",
                "fallback": "pollinations",
            },
            "openai": {
                "images": "/v1/images/generations",
                "models": "/v1/models",
                "available_models": [model.id for model in MODEL_REGISTRY.list_models()],
            },
            "video": {
                "endpoint": "/api/text2video",
                "status": "/api/text2video/status/{task_id}",
                "model": "medeo-text2video",
                "provider": "appmedo",
            },
        },
    }


if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True,
        log_level="info"
    )
