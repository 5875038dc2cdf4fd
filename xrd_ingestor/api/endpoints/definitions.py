from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from starlette.responses import PlainTextResponse

from xrd_ingestor.api.deps import get_transformer
from xrd_ingestor.core.definitions import ResourceDefinition, load_definitions_yaml, load_document
from xrd_ingestor.core.errors import DefinitionError
from xrd_ingestor.core.observability.metrics import record_transformation
from xrd_ingestor.core.transformers import ApiEntity, OutputMode, Template, XRDTransformer, to_yaml_documents

log = logging.getLogger("xrd_ingestor.api")

router = APIRouter(prefix="/api/v1/definitions", tags=["definitions"])


class DefinitionsPayload(BaseModel):
    """Definitions as decoded documents, as YAML text, or both."""

    model_config = ConfigDict(populate_by_name=True)

    definitions: List[Dict[str, Any]] = Field(default_factory=list)
    yaml_text: Optional[str] = Field(default=None, alias="yaml")
    cluster_name: Optional[str] = Field(default=None, alias="clusterName")

    def load(self) -> List[ResourceDefinition]:
        out = [
            definition
            for definition in (load_document(d, cluster_name=self.cluster_name) for d in self.definitions)
            if definition is not None
        ]
        if self.yaml_text:
            out += load_definitions_yaml(self.yaml_text, cluster_name=self.cluster_name)
        if not out:
            raise DefinitionError("Request carries no definitions")
        return out


@router.post("/transform")
def transform(
    payload: DefinitionsPayload,
    mode: OutputMode = Query(OutputMode.ALL),
    output_format: str = Query("json", alias="format", pattern="^(json|yaml)$"),
    transformer: XRDTransformer = Depends(get_transformer),
):
    entities = []
    for definition in payload.load():
        produced = transformer.transform(definition, mode)
        record_transformation(
            "generated" if produced else "skipped",
            templates=sum(1 for e in produced if isinstance(e, Template)),
            api_entities=sum(1 for e in produced if isinstance(e, ApiEntity)),
        )
        entities += produced

    log.info("transform mode=%s entities=%d", mode.value, len(entities))

    if output_format == "yaml":
        return PlainTextResponse(to_yaml_documents(entities), media_type="application/yaml")
    return {"count": len(entities), "entities": [e.to_dict() for e in entities]}


@router.post("/preview")
def preview(payload: DefinitionsPayload, transformer: XRDTransformer = Depends(get_transformer)):
    return {"previews": [transformer.preview(d) for d in payload.load()]}


@router.post("/can-transform")
def can_transform(payload: DefinitionsPayload, transformer: XRDTransformer = Depends(get_transformer)):
    results = []
    for definition in payload.load():
        check = transformer.can_transform(definition)
        results.append({"name": definition.name, **check.to_dict()})
    return {"results": results}
