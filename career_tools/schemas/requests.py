from __future__ import annotations

from typing import ClassVar, Union

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from career_tools.schemas.common import AnalysisKind, CamelModel


class AnalysisRequestBase(CamelModel):
    """Common base for every analysis request variant.

    ``kind`` tags the variant. ``required_fields`` lists the attributes that
    must be non-empty after trimming; ``non_negative_fields`` the integer
    attributes that must not be negative. Both are enforced by the request
    validator rather than by pydantic so that an incomplete body produces a
    single aggregated validation error.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    kind: ClassVar[AnalysisKind]
    required_fields: ClassVar[tuple[str, ...]] = ()
    non_negative_fields: ClassVar[tuple[str, ...]] = ()

    user_id: str = Field(default="", max_length=200)


class SalaryRequest(AnalysisRequestBase):
    kind: ClassVar[AnalysisKind] = AnalysisKind.SALARY
    required_fields: ClassVar[tuple[str, ...]] = ("job_title", "location", "years_experience", "industry")
    non_negative_fields: ClassVar[tuple[str, ...]] = ("years_experience",)

    job_title: str = Field(default="", max_length=200)
    location: str = Field(default="", max_length=200)
    years_experience: int | None = None
    industry: str = Field(default="", max_length=200)
    education: str | None = Field(default=None, max_length=200)
    company_size: str | None = Field(default=None, max_length=100)
    skills: str | None = Field(default=None, max_length=2000)


class CareerPathRequest(AnalysisRequestBase):
    kind: ClassVar[AnalysisKind] = AnalysisKind.CAREER_PATH
    required_fields: ClassVar[tuple[str, ...]] = ("current_role", "target_role")
    non_negative_fields: ClassVar[tuple[str, ...]] = ("years_experience",)

    current_role: str = Field(default="", max_length=200)
    target_role: str = Field(default="", max_length=200)
    years_experience: int | None = None
    industry: str | None = Field(default=None, max_length=200)
    location: str | None = Field(default=None, max_length=200)
    current_skills: list[str] = Field(default_factory=list, max_length=50)
    career_interests: list[str] = Field(default_factory=list, max_length=50)


class ResumeCritiqueRequest(AnalysisRequestBase):
    kind: ClassVar[AnalysisKind] = AnalysisKind.RESUME_CRITIQUE
    required_fields: ClassVar[tuple[str, ...]] = ("resume_text",)

    resume_text: str = Field(default="", max_length=50000)
    target_role: str | None = Field(default=None, max_length=200)


class AssessmentAnswer(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    question: str = Field(default="", max_length=2000)
    answer: str = Field(default="", max_length=5000)
    is_correct: bool | None = None
    difficulty: str = Field(default="intermediate", max_length=40)
    points: int = Field(default=1, ge=1, le=100)


class SkillsFeedbackRequest(AnalysisRequestBase):
    kind: ClassVar[AnalysisKind] = AnalysisKind.SKILLS_FEEDBACK
    required_fields: ClassVar[tuple[str, ...]] = ("category", "answers")
    non_negative_fields: ClassVar[tuple[str, ...]] = ("time_taken_seconds",)

    category: str = Field(default="", max_length=200)
    answers: list[AssessmentAnswer] = Field(default_factory=list, max_length=200)
    time_taken_seconds: int | None = None


class InterviewQuestionsRequest(AnalysisRequestBase):
    kind: ClassVar[AnalysisKind] = AnalysisKind.INTERVIEW_QUESTIONS
    required_fields: ClassVar[tuple[str, ...]] = ("role", "interview_type")
    non_negative_fields: ClassVar[tuple[str, ...]] = ("number_of_questions",)

    role: str = Field(default="", max_length=200)
    interview_type: str = Field(default="", max_length=100)
    difficulty: str = Field(default="intermediate", max_length=40)
    number_of_questions: int = 5


class InterviewAnswerScoreRequest(AnalysisRequestBase):
    kind: ClassVar[AnalysisKind] = AnalysisKind.INTERVIEW_ANSWER_SCORE
    required_fields: ClassVar[tuple[str, ...]] = ("question",)
    non_negative_fields: ClassVar[tuple[str, ...]] = ("question_index",)

    session_id: str = Field(default="", max_length=200)
    question_index: int = 0
    question: str = Field(default="", max_length=2000)
    category: str = Field(default="General", max_length=100)
    transcript: str = Field(default="", max_length=20000)
    role: str = Field(default="", max_length=200)
    interview_type: str = Field(default="", max_length=100)


AnalysisRequest = Union[
    SalaryRequest,
    CareerPathRequest,
    ResumeCritiqueRequest,
    SkillsFeedbackRequest,
    InterviewQuestionsRequest,
    InterviewAnswerScoreRequest,
]
