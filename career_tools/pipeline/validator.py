from __future__ import annotations

import re

from pydantic.alias_generators import to_camel

from career_tools.core.config import settings
from career_tools.core.errors import RequestValidationFailed
from career_tools.schemas.requests import (
    AnalysisRequest,
    InterviewQuestionsRequest,
    ResumeCritiqueRequest,
    SkillsFeedbackRequest,
)

MIN_RESUME_WORDS = 20

NON_RESUME_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"invoice|receipt|payment due|total amount|invoice number", re.I), "invoice"),
    (re.compile(r"chapter \d+|table of contents|bibliography|preface", re.I), "book/document"),
    (re.compile(r"lorem ipsum|placeholder text|dummy text", re.I), "placeholder"),
    (re.compile(r"purchase order|shipping address|order number|tracking number", re.I), "order"),
    (re.compile(r"terms and conditions|whereas|party of the first part", re.I), "legal document"),
    (re.compile(r"prescription|diagnosis|medical record", re.I), "medical document"),
    (re.compile(r"meeting notes|minutes of the meeting|attendees", re.I), "meeting notes"),
    (re.compile(r"balance sheet|income statement|cash flow statement", re.I), "financial statement"),
)

_EXPERIENCE_RE = re.compile(r"(work\s+)?experience|employment(\s+history)?|professional\s+background", re.I)
_EDUCATION_RE = re.compile(r"education(al\s+background)?|academic|qualifications", re.I)
_SKILLS_RE = re.compile(r"skills|competencies|expertise|proficiencies", re.I)
_EMAIL_RE = re.compile(r"@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE_RE = re.compile(r"(\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}|\+?\d{10,}")
_LINKEDIN_RE = re.compile(r"linkedin", re.I)


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def screen_resume_text(text: str) -> str | None:
    """Return a rejection reason when ``text`` does not look like a resume."""
    words = text.split()
    if len(words) < MIN_RESUME_WORDS:
        return f"Resume text is too short ({len(words)} words); paste the complete resume."

    for pattern, doc_type in NON_RESUME_PATTERNS:
        if pattern.search(text):
            return f"The submitted text appears to be a {doc_type}, not a resume."

    core_sections = sum(
        1 for pattern in (_EXPERIENCE_RE, _EDUCATION_RE, _SKILLS_RE) if pattern.search(text)
    )
    if core_sections < 2:
        return "Resume must include at least two of: Work Experience, Education, Skills."

    if not (_EMAIL_RE.search(text) or _PHONE_RE.search(text) or _LINKEDIN_RE.search(text)):
        return "Resume is missing contact information (email, phone, or LinkedIn)."
    return None


def validate_request(request: AnalysisRequest) -> AnalysisRequest:
    missing = [to_camel(name) for name in request.required_fields if _is_blank(getattr(request, name, None))]
    if missing:
        raise RequestValidationFailed(
            f"Missing required fields: {', '.join(missing)}",
            missing_fields=missing,
        )

    invalid: list[str] = []
    for name in request.non_negative_fields:
        value = getattr(request, name, None)
        if value is not None and value < 0:
            invalid.append(to_camel(name))

    if isinstance(request, InterviewQuestionsRequest):
        if not 1 <= request.number_of_questions <= settings.interview_max_questions:
            invalid.append("numberOfQuestions")

    if isinstance(request, SkillsFeedbackRequest):
        if any(_is_blank(answer.question) for answer in request.answers):
            invalid.append("answers")

    if invalid:
        raise RequestValidationFailed(
            f"Fields out of range: {', '.join(sorted(set(invalid)))}",
            invalid_range=sorted(set(invalid)),
        )

    if isinstance(request, ResumeCritiqueRequest):
        reason = screen_resume_text(request.resume_text)
        if reason:
            raise RequestValidationFailed(reason, invalid_content=reason)

    return request
