from .base import (
    ARGOCD_STEP_ID,
    FETCH_STEP_ID,
    FLUX_STEP_ID,
    GENERATE_MANIFEST_STEP_ID,
    PUBLISH_STEP_ID,
    REGISTER_STEP_ID,
    StepGenerator,
)
from .claims import ClaimStepGenerator
from .direct import DirectStepGenerator

CREATE_STEP_IDS = (ClaimStepGenerator.create_step_id, DirectStepGenerator.create_step_id)

__all__ = [
    "ARGOCD_STEP_ID",
    "CREATE_STEP_IDS",
    "FETCH_STEP_ID",
    "FLUX_STEP_ID",
    "GENERATE_MANIFEST_STEP_ID",
    "PUBLISH_STEP_ID",
    "REGISTER_STEP_ID",
    "ClaimStepGenerator",
    "DirectStepGenerator",
    "StepGenerator",
]
