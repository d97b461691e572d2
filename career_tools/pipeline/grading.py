from __future__ import annotations

from dataclasses import dataclass

from career_tools.core.fallback_tables import get_fallback_value
from career_tools.schemas.requests import SkillsFeedbackRequest


@dataclass(frozen=True)
class AssessmentGrade:
    score: int
    level: str
    correct_answers: int
    total_questions: int


def level_for(score: int) -> str:
    if score >= 80:
        return "Expert"
    if score >= 60:
        return "Intermediate"
    return "Beginner"


def is_substantive(text: str) -> bool:
    min_chars = int(get_fallback_value("interview.answer_score.min_chars", 10))
    return len((text or "").strip()) >= min_chars


def length_score(text: str) -> int:
    """Score free text by length alone: 0 for near-empty text, else words*2 clamped to 40-75."""
    if not is_substantive(text):
        return 0
    per_word = int(get_fallback_value("interview.answer_score.points_per_word", 2))
    floor = int(get_fallback_value("interview.answer_score.floor", 40))
    ceiling = int(get_fallback_value("interview.answer_score.ceiling", 75))
    words = len(text.split())
    return min(max(words * per_word, floor), ceiling)


def grade_assessment(request: SkillsFeedbackRequest) -> AssessmentGrade:
    total_points = 0
    earned = 0.0
    correct = 0
    for answer in request.answers:
        total_points += answer.points
        if answer.is_correct is None:
            earned += answer.points * length_score(answer.answer) / 100
        elif answer.is_correct:
            earned += answer.points
            correct += 1

    score = round(earned / total_points * 100) if total_points else 0
    score = max(0, min(100, score))
    return AssessmentGrade(
        score=score,
        level=level_for(score),
        correct_answers=correct,
        total_questions=len(request.answers),
    )
