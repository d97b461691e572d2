import json
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ValidationError

from career_tools.core.errors import RequestValidationFailed
from career_tools.core.rate_limit import rate_limit
from career_tools.core.security import require_user
from career_tools.interview.session import InterviewSessionMachine
from career_tools.schemas.common import ApiEnvelope
from career_tools.schemas.interview import AnalyzeAnswerBody, CompleteSessionBody
from career_tools.schemas.requests import InterviewQuestionsRequest

router = APIRouter()

ACTIONS = ("generate-questions", "analyze-answer", "complete-session")

BodyT = TypeVar("BodyT", bound=BaseModel)


def _sessions(request: Request) -> InterviewSessionMachine:
    return request.app.state.sessions


async def _parse_body(request: Request, model: type[BodyT]) -> BodyT:
    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestValidationFailed("Request body must be valid JSON", invalid_content="body") from exc
    if not isinstance(raw, dict):
        raise RequestValidationFailed("Request body must be a JSON object", invalid_content="body")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise RequestValidationFailed(
            f"Invalid fields: {', '.join(fields)}",
            invalid_range=fields,
        ) from exc


@router.post("/interview", summary="Interview practice actions")
@rate_limit()
async def interview(
    request: Request,
    action: str = Query(default=""),
    user_id: str = Depends(require_user),
):
    sessions = _sessions(request)

    if action == "generate-questions":
        payload = await _parse_body(request, InterviewQuestionsRequest)
        session, outcome = await sessions.create_session(payload, user_id=user_id)
        data: dict[str, Any] = {**outcome.to_wire(), "sessionId": session.id}
        return ApiEnvelope(success=True, data=data, used_fallback=outcome.used_fallback).to_wire()

    if action == "analyze-answer":
        body = await _parse_body(request, AnalyzeAnswerBody)
        result = await sessions.submit_answer(body, user_id=user_id)
        data = {
            **result.analysis.to_wire(),
            "sessionId": result.session.id,
            "questionIndex": body.question_index,
            "sessionStatus": result.session.status,
        }
        if result.summary is not None:
            data["summary"] = result.summary.to_wire()
        return ApiEnvelope(success=True, data=data, used_fallback=result.analysis.used_fallback).to_wire()

    if action == "complete-session":
        body = await _parse_body(request, CompleteSessionBody)
        summary = await sessions.complete_session(body.session_id, user_id=user_id)
        return ApiEnvelope(success=True, data=summary.to_wire()).to_wire()

    raise RequestValidationFailed(
        f"Invalid action specified; expected one of: {', '.join(ACTIONS)}",
        invalid_content="action",
    )


@router.get("/interview/sessions/{session_id}", summary="Read back an interview session")
@rate_limit()
async def get_session(request: Request, session_id: str, user_id: str = Depends(require_user)):
    session = _sessions(request).get_session(session_id, user_id=user_id)
    return ApiEnvelope(success=True, data=session.to_wire()).to_wire()
