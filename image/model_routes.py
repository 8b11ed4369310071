"""OpenAI-compatible model listing backed by the static registry."""
from fastapi import APIRouter, Depends, Path

from auth.services import require_api_key
from common.error_messages import ErrorCode
from common.exceptions import NotFoundError
from image.registry import MODEL_REGISTRY

router = APIRouter(prefix="/v1/models", tags=["models"], dependencies=[Depends(require_api_key)])


@router.get("")
def list_models():
    """List registered image models."""
    return {
        "object": "list",
        "data": [model.to_openai() for model in MODEL_REGISTRY.list_models()],
    }


@router.get("/{model_id}")
def get_model(model_id: str = Path(...)):
    """Model detail by id or alias. Unknown ids are a 404, not a substitution."""
    model = MODEL_REGISTRY.resolve(model_id)
    if model is None:
        raise NotFoundError(f"The model '{model_id}' does not exist", code=ErrorCode.MODEL_NOT_FOUND, param="model")
    return model.to_openai()
