"""Turn raw model text into a typed analysis result.

Parsing happens in two steps. ``extract_payload`` finds and decodes the JSON
embedded in the completion and checks the required top-level keys for the
kind. ``build_result`` then constructs the pydantic result model from that
untrusted payload; nothing the model returns is used before it has passed
through the result model's own validation.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

from pydantic import ValidationError

from career_tools.core.errors import MalformedOutput, SchemaViolation
from career_tools.pipeline.grading import grade_assessment
from career_tools.schemas.common import AnalysisKind
from career_tools.schemas.requests import AnalysisRequest
from career_tools.schemas.results import (
    AnalysisResult,
    AnswerScoreResult,
    CareerPathResult,
    InterviewQuestionsResult,
    ResumeCritiqueResult,
    SalaryResult,
    SkillsFeedbackResult,
)

REQUIRED_KEYS: dict[AnalysisKind, tuple[str, ...]] = {
    AnalysisKind.SALARY: ("medianSalary", "salaryRange", "percentiles"),
    AnalysisKind.CAREER_PATH: ("timeline", "steps", "recommendations"),
    AnalysisKind.RESUME_CRITIQUE: ("overall_score", "strengths", "improvements", "sections", "detailed_feedback"),
    AnalysisKind.SKILLS_FEEDBACK: ("strengths", "improvements", "recommendations", "summary"),
    AnalysisKind.INTERVIEW_QUESTIONS: ("question", "category", "difficulty"),
    AnalysisKind.INTERVIEW_ANSWER_SCORE: ("score", "feedback", "strengths", "improvements"),
}

LIST_SHAPED = {AnalysisKind.INTERVIEW_QUESTIONS}

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*")
_decoder = json.JSONDecoder()


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def find_json(text: str, opener: str) -> Any:
    """Decode the first balanced JSON value starting with ``opener``.

    Every occurrence of the opener is tried in order, so stray braces in the
    surrounding prose do not hide a later well-formed value.
    """
    start = text.find(opener)
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find(opener, start + 1)
            continue
        return value
    raise MalformedOutput(f"No JSON {'array' if opener == '[' else 'object'} found in model output")


def extract_payload(raw: str, kind: AnalysisKind) -> Any:
    text = strip_code_fences(raw)
    required = REQUIRED_KEYS[kind]

    if kind in LIST_SHAPED:
        payload = find_json(text, "[")
        if not isinstance(payload, list) or not payload:
            raise MalformedOutput("Expected a non-empty JSON array")
        missing: set[str] = set()
        for item in payload:
            if not isinstance(item, dict):
                raise SchemaViolation("Array items must be JSON objects", missing_keys=list(required))
            missing.update(key for key in required if key not in item)
        if missing:
            raise SchemaViolation(
                f"Model output items missing keys: {', '.join(sorted(missing))}",
                missing_keys=sorted(missing),
            )
        return payload

    payload = find_json(text, "{")
    if not isinstance(payload, dict):
        raise MalformedOutput("Expected a JSON object")
    missing_keys = [key for key in required if key not in payload]
    if missing_keys:
        raise SchemaViolation(
            f"Model output missing keys: {', '.join(missing_keys)}",
            missing_keys=missing_keys,
        )
    return payload


def _questions(payload: list[dict[str, Any]], request: AnalysisRequest) -> InterviewQuestionsResult:
    limit = getattr(request, "number_of_questions", len(payload))
    items = [{**item, "id": index} for index, item in enumerate(payload[:limit], start=1)]
    return InterviewQuestionsResult.model_validate({"questions": items})


def _skills(payload: dict[str, Any], request: AnalysisRequest) -> SkillsFeedbackResult:
    grade = grade_assessment(request)  # type: ignore[arg-type]
    return SkillsFeedbackResult.model_validate(
        {
            **payload,
            "score": grade.score,
            "level": grade.level,
            "correctAnswers": grade.correct_answers,
            "totalQuestions": grade.total_questions,
        }
    )


_CONSTRUCTORS: dict[AnalysisKind, Callable[[Any, AnalysisRequest], AnalysisResult]] = {
    AnalysisKind.SALARY: lambda payload, _: SalaryResult.model_validate(payload),
    AnalysisKind.CAREER_PATH: lambda payload, _: CareerPathResult.model_validate(payload),
    AnalysisKind.RESUME_CRITIQUE: lambda payload, _: ResumeCritiqueResult.model_validate(payload),
    AnalysisKind.SKILLS_FEEDBACK: _skills,
    AnalysisKind.INTERVIEW_QUESTIONS: _questions,
    AnalysisKind.INTERVIEW_ANSWER_SCORE: lambda payload, _: AnswerScoreResult.model_validate(payload),
}


def build_result(payload: Any, request: AnalysisRequest) -> AnalysisResult:
    try:
        return _CONSTRUCTORS[request.kind](payload, request)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors() if err.get("loc")})
        raise SchemaViolation(
            f"Model output failed validation: {exc.error_count()} error(s)",
            missing_keys=fields,
        ) from exc


def parse_response(raw: str, request: AnalysisRequest) -> AnalysisResult:
    return build_result(extract_payload(raw, request.kind), request)
