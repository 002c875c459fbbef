"""REST API routes for transcript evaluation and the target-level preference."""

import functools

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from opic_evaluator.assessment.rule_based import OpicEvaluator
from opic_evaluator.config import get_rubric, get_settings
from opic_evaluator.models.assessment import EvaluationResult
from opic_evaluator.models.level import LEVEL_OPTIONS, Level, LevelOption
from opic_evaluator.storage.target_level import (
    clear_target_level,
    load_target_level,
    save_target_level,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class EvaluateRequest(BaseModel):
    transcript: str = Field(max_length=20000)
    target_level: str | None = None


class TargetLevelBody(BaseModel):
    level: str


@functools.lru_cache
def get_evaluator() -> OpicEvaluator:
    """Evaluator built from the configured rubric."""
    settings = get_settings()
    return OpicEvaluator(
        rubric=get_rubric(),
        collapse_novice_bands=settings.collapse_novice_bands,
    )


def validate_level(value: str) -> Level:
    level = Level.parse(value)
    if level is None:
        raise HTTPException(status_code=400, detail=f"Unknown level: {value}")
    return level


@router.post("/evaluate")
async def evaluate(request: EvaluateRequest) -> EvaluationResult:
    """Evaluate a transcript; the target level is only echoed back for display."""
    if request.target_level is not None:
        target_level = validate_level(request.target_level)
    else:
        target_level = load_target_level()
    result = get_evaluator().evaluate(request.transcript, target_level=target_level)
    logger.info(
        "evaluation_served",
        level=result.level.value,
        word_count=result.word_count,
    )
    return result


@router.get("/levels")
async def list_levels() -> list[LevelOption]:
    """List selectable levels from lowest to highest."""
    return LEVEL_OPTIONS


@router.get("/target-level")
async def get_target_level() -> dict:
    level = load_target_level()
    return {"level": level.value if level else None}


@router.put("/target-level")
async def put_target_level(body: TargetLevelBody) -> dict:
    level = validate_level(body.level)
    save_target_level(level)
    return {"level": level.value}


@router.delete("/target-level")
async def delete_target_level() -> dict:
    clear_target_level()
    return {"level": None}


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
