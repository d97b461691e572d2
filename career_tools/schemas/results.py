from __future__ import annotations

from typing import Union

from pydantic import BaseModel, Field, model_validator

from career_tools.schemas.common import CamelModel


class SalaryRange(CamelModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)


class Percentiles(CamelModel):
    p25: int = Field(ge=0)
    p50: int = Field(ge=0)
    p75: int = Field(ge=0)


def _check_ordering(salary_range: SalaryRange, percentiles: Percentiles, median: int) -> None:
    ordered = [salary_range.min, percentiles.p25, percentiles.p50, percentiles.p75, salary_range.max]
    if ordered != sorted(ordered):
        raise ValueError(f"salary figures out of order: min/p25/p50/p75/max = {ordered}")
    if not salary_range.min <= median <= salary_range.max:
        raise ValueError(f"median {median} outside range {salary_range.min}-{salary_range.max}")


class SalaryFactor(CamelModel):
    name: str
    impact: str
    value: str


class SalaryTrends(CamelModel):
    growth: str
    demand: str
    outlook: str


class SalaryResult(CamelModel):
    median_salary: int = Field(ge=0)
    salary_range: SalaryRange
    percentiles: Percentiles
    factors: list[SalaryFactor] = Field(default_factory=list)
    trends: SalaryTrends
    insights: str

    @model_validator(mode="after")
    def _ordering(self) -> "SalaryResult":
        _check_ordering(self.salary_range, self.percentiles, self.median_salary)
        return self


class SalaryBand(CamelModel):
    salary_range: SalaryRange
    percentiles: Percentiles

    @model_validator(mode="after")
    def _ordering(self) -> "SalaryBand":
        _check_ordering(self.salary_range, self.percentiles, self.percentiles.p50)
        return self


class CareerStep(CamelModel):
    title: str
    timeframe: str
    requirements: list[str]
    skills: list[str]
    salary: str
    completed: bool = False


class CareerPathResult(CamelModel):
    timeline: str
    steps: list[CareerStep] = Field(min_length=1)
    recommendations: list[str]
    salary_outlook: SalaryBand | None = None

    @model_validator(mode="after")
    def _reset_progress(self) -> "CareerPathResult":
        for step in self.steps:
            step.completed = False
        return self


class ResumeSection(BaseModel):
    section_name: str
    score: int = Field(ge=0, le=100)
    feedback: str
    suggestions: list[str]


class DetailedFeedback(BaseModel):
    format: str
    content: str
    keywords: str
    experience: str
    skills: str


class ResumeCritiqueResult(BaseModel):
    """Resume critique keeps snake_case keys on the wire."""

    overall_score: int = Field(ge=0, le=100)
    strengths: list[str]
    improvements: list[str]
    sections: list[ResumeSection] = Field(min_length=3)
    detailed_feedback: DetailedFeedback

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")


class SkillsFeedbackResult(CamelModel):
    score: int = Field(ge=0, le=100)
    level: str
    correct_answers: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    strengths: list[str]
    improvements: list[str]
    recommendations: list[str]
    summary: str


class InterviewQuestion(CamelModel):
    id: int = Field(ge=1)
    question: str = Field(min_length=1)
    category: str
    difficulty: str


class InterviewQuestionsResult(CamelModel):
    questions: list[InterviewQuestion] = Field(min_length=1)


class AnswerScoreResult(CamelModel):
    score: int = Field(ge=0, le=100)
    feedback: str
    strengths: list[str]
    improvements: list[str]


AnalysisResult = Union[
    SalaryResult,
    CareerPathResult,
    ResumeCritiqueResult,
    SkillsFeedbackResult,
    InterviewQuestionsResult,
    AnswerScoreResult,
]
