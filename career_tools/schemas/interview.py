from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from career_tools.schemas.common import CamelModel
from career_tools.schemas.results import InterviewQuestion

SessionStatus = Literal["in_progress", "completed"]


class RecordedAnswer(CamelModel):
    question_index: int = Field(ge=0)
    transcript: str
    score: int = Field(ge=0, le=100)
    feedback: str
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    used_fallback: bool = False
    answered_at: datetime


class InterviewSession(CamelModel):
    id: str
    user_id: str
    role: str
    interview_type: str
    difficulty: str = "intermediate"
    questions: list[InterviewQuestion] = Field(default_factory=list)
    answers: list[RecordedAnswer] = Field(default_factory=list)
    status: SessionStatus = "in_progress"
    overall_score: int | None = None
    feedback: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    created_at: datetime
    completed_at: datetime | None = None

    def answer_for(self, question_index: int) -> RecordedAnswer | None:
        for answer in self.answers:
            if answer.question_index == question_index:
                return answer
        return None


class SessionSummary(CamelModel):
    session_id: str
    overall_score: int = Field(ge=0, le=100)
    answered_questions: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    feedback: list[str]
    strengths: list[str]
    improvements: list[str]


class _ActionBody(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class AnalyzeAnswerBody(_ActionBody):
    session_id: str = Field(default="", max_length=200)
    question_index: int | None = None
    transcript: str = Field(default="", max_length=20000)


class CompleteSessionBody(_ActionBody):
    session_id: str = Field(default="", max_length=200)
