from fastapi import APIRouter, Depends

from xrd_ingestor.api.deps import get_transformer
from xrd_ingestor.core.transformers import XRDTransformer

router = APIRouter(prefix="/api/v1/config", tags=["config"])


@router.get("/validate")
def validate_config(transformer: XRDTransformer = Depends(get_transformer)):
    errors = transformer.validate_config()
    return {"valid": not errors, "errors": errors}


@router.get("")
def show_config(transformer: XRDTransformer = Depends(get_transformer)):
    return transformer.config.model_dump(by_alias=True)
