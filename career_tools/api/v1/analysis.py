from typing import Any

from fastapi import APIRouter, Depends, Request

from career_tools.core.rate_limit import rate_limit
from career_tools.core.security import require_user
from career_tools.pipeline.orchestrator import AnalysisOrchestrator
from career_tools.schemas.common import ApiEnvelope
from career_tools.schemas.requests import (
    AnalysisRequest,
    CareerPathRequest,
    ResumeCritiqueRequest,
    SalaryRequest,
    SkillsFeedbackRequest,
)

router = APIRouter()


async def _run(request: Request, payload: AnalysisRequest, user_id: str) -> dict[str, Any]:
    orchestrator: AnalysisOrchestrator = request.app.state.orchestrator
    outcome = await orchestrator.run(payload, user_id=user_id)
    return ApiEnvelope(success=True, data=outcome.to_wire(), used_fallback=outcome.used_fallback).to_wire()


@router.post("/analysis/salary", summary="Estimate a salary range for a role")
@rate_limit()
async def salary(request: Request, payload: SalaryRequest, user_id: str = Depends(require_user)):
    return await _run(request, payload, user_id)


@router.post("/analysis/career-path", summary="Plan the steps from the current role to a target role")
@rate_limit()
async def career_path(request: Request, payload: CareerPathRequest, user_id: str = Depends(require_user)):
    return await _run(request, payload, user_id)


@router.post("/analysis/resume", summary="Critique a resume")
@rate_limit()
async def resume(request: Request, payload: ResumeCritiqueRequest, user_id: str = Depends(require_user)):
    return await _run(request, payload, user_id)


@router.post("/analysis/skills-feedback", summary="Grade a skills assessment and write feedback")
@rate_limit()
async def skills_feedback(request: Request, payload: SkillsFeedbackRequest, user_id: str = Depends(require_user)):
    return await _run(request, payload, user_id)
