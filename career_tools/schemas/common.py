from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AnalysisKind(str, Enum):
    SALARY = "salary"
    CAREER_PATH = "career_path"
    RESUME_CRITIQUE = "resume_critique"
    SKILLS_FEEDBACK = "skills_feedback"
    INTERVIEW_QUESTIONS = "interview_questions"
    INTERVIEW_ANSWER_SCORE = "interview_answer_score"


class CamelModel(BaseModel):
    """Wire models use camelCase keys, Python code uses snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ApiEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: Any | None = None
    used_fallback: bool | None = Field(default=None, alias="usedFallback")
    error: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
