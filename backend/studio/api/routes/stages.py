"""Stage catalogue: GET /api/stages/ lists the pipeline with its progress bands."""

from fastapi import APIRouter

from studio.domain.stages import PIPELINE_ORDER, STAGE_CONFIG, get_stage_display_name
from studio.schemas.progress import StageInfo

router = APIRouter()


@router.get("/", response_model=list[StageInfo])
async def list_stages() -> list[StageInfo]:
    return [
        StageInfo(
            stage=stage,
            display_name=get_stage_display_name(stage),
            base_progress=STAGE_CONFIG[stage].base_progress,
            stage_weight=STAGE_CONFIG[stage].stage_weight,
        )
        for stage in PIPELINE_ORDER
    ]
