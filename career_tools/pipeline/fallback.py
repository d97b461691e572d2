"""Deterministic results used when the model call or its output fails.

Every function here is a pure function of the request and the cached tables
in ``config/fallback.yaml``: no I/O beyond the first table load, no clock, no
randomness. Each returns the same result model the parser builds from a
successful model response.
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from typing import Any, Callable

from career_tools.core.fallback_tables import get_fallback_value
from career_tools.pipeline.grading import grade_assessment, is_substantive, length_score
from career_tools.schemas.common import AnalysisKind
from career_tools.schemas.requests import (
    AnalysisRequest,
    CareerPathRequest,
    InterviewAnswerScoreRequest,
    InterviewQuestionsRequest,
    ResumeCritiqueRequest,
    SalaryRequest,
    SkillsFeedbackRequest,
)
from career_tools.schemas.results import (
    AnalysisResult,
    AnswerScoreResult,
    CareerPathResult,
    CareerStep,
    DetailedFeedback,
    InterviewQuestion,
    InterviewQuestionsResult,
    Percentiles,
    ResumeCritiqueResult,
    ResumeSection,
    SalaryBand,
    SalaryFactor,
    SalaryRange,
    SalaryResult,
    SalaryTrends,
    SkillsFeedbackResult,
)


@dataclass(frozen=True)
class SalaryEstimate:
    min: int
    p25: int
    median: int
    p75: int
    max: int
    experience_multiplier: float
    location_multiplier: float
    industry_multiplier: float
    education_multiplier: float

    def band(self) -> SalaryBand:
        return SalaryBand(
            salary_range=SalaryRange(min=self.min, max=self.max),
            percentiles=Percentiles(p25=self.p25, p50=self.median, p75=self.p75),
        )


def _role_range(job_title: str) -> tuple[int, int]:
    title = (job_title or "").lower()
    for entry in get_fallback_value("salary.role_ranges", []):
        if entry["key"] in title:
            return int(entry["min"]), int(entry["max"])
    default = get_fallback_value("salary.default_range", {"min": 45000, "max": 100000})
    return int(default["min"]), int(default["max"])


def _experience_multiplier(years: int) -> float:
    per_year = float(get_fallback_value("salary.experience.per_year", 0.04))
    cap = int(get_fallback_value("salary.experience.cap_years", 15))
    return 1 + min(max(years, 0), cap) * per_year


def _location_multiplier(location: str) -> float:
    loc = (location or "").strip().lower()
    if not loc or "remote" in loc:
        return float(get_fallback_value("salary.location.remote", 1.0))
    markers = get_fallback_value("salary.location.high_cost_markers", [])
    if any(marker in loc for marker in markers):
        return float(get_fallback_value("salary.location.high_cost", 1.2))
    return float(get_fallback_value("salary.location.default", 1.1))


def _table_multiplier(table: dict[str, Any], value: str | None) -> float:
    text = (value or "").strip().lower()
    if text:
        for key, multiplier in table.items():
            if key != "default" and key in text:
                return float(multiplier)
    return float(table.get("default", 1.0))


def estimate_salary(
    job_title: str,
    location: str,
    years_experience: int,
    industry: str | None,
    education: str | None,
) -> SalaryEstimate:
    base_min, base_max = _role_range(job_title)
    experience = _experience_multiplier(years_experience)
    location_mult = _location_multiplier(location)
    industry_mult = _table_multiplier(get_fallback_value("salary.industry", {}), industry)
    education_mult = _table_multiplier(get_fallback_value("salary.education", {}), education)
    multiplier = experience * location_mult * industry_mult * education_mult

    low = round(base_min * multiplier)
    high = max(round(base_max * multiplier), low)
    median = round((low + high) / 2)
    p25 = round(low * float(get_fallback_value("salary.percentile_spread.p25_over_min", 1.1)))
    p75 = round(high * float(get_fallback_value("salary.percentile_spread.p75_under_max", 0.9)))
    return SalaryEstimate(
        min=low,
        p25=min(max(p25, low), median),
        median=median,
        p75=max(min(p75, high), median),
        max=high,
        experience_multiplier=experience,
        location_multiplier=location_mult,
        industry_multiplier=industry_mult,
        education_multiplier=education_mult,
    )


def _impact(multiplier: float) -> str:
    pct = round((multiplier - 1) * 100)
    if pct == 0:
        return "Base"
    return f"+{pct}%" if pct > 0 else f"{pct}%"


def _money(amount: int) -> str:
    return f"${amount:,}"


def salary_fallback(request: SalaryRequest) -> SalaryResult:
    years = request.years_experience or 0
    estimate = estimate_salary(request.job_title, request.location, years, request.industry, request.education)
    factors = [
        SalaryFactor(name="Experience Level", impact=_impact(estimate.experience_multiplier), value=f"{years} years"),
        SalaryFactor(name="Location", impact=_impact(estimate.location_multiplier), value=request.location),
        SalaryFactor(name="Industry", impact=_impact(estimate.industry_multiplier), value=request.industry),
        SalaryFactor(
            name="Education",
            impact=_impact(estimate.education_multiplier),
            value=request.education or "Not specified",
        ),
    ]
    if request.company_size:
        factors.append(SalaryFactor(name="Company Size", impact="Varies", value=request.company_size))
    if request.skills:
        factors.append(SalaryFactor(name="Key Skills", impact="Varies", value=request.skills))

    trends = get_fallback_value("salary.trends", {})
    band = estimate.band()
    return SalaryResult(
        median_salary=estimate.median,
        salary_range=band.salary_range,
        percentiles=band.percentiles,
        factors=factors,
        trends=SalaryTrends(
            growth=trends.get("growth", "+5-7%"),
            demand=trends.get("demand", "Moderate"),
            outlook=trends.get("outlook", "Stable"),
        ),
        insights=(
            f"Based on {years} years of experience as a {request.job_title} in {request.industry}, "
            f"a typical offer in {request.location} falls between {_money(estimate.p25)} and "
            f"{_money(estimate.p75)}. Highlight your specialized skills during negotiations and "
            "research company-specific compensation packages before accepting an offer."
        ),
    )


def career_path_fallback(request: CareerPathRequest) -> CareerPathResult:
    years = request.years_experience
    junior_max = int(get_fallback_value("career_path.junior_max_years", 3))
    if years is None or years <= junior_max:
        timeline = get_fallback_value("career_path.junior_timeline", "18-24 months")
    else:
        timeline = get_fallback_value("career_path.senior_timeline", "12-18 months")

    estimate = estimate_salary(request.target_role, request.location or "", years or 0, request.industry, None)
    scales = [float(s) for s in get_fallback_value("career_path.step_scales", [0.8, 0.95, 1.1])]
    salaries = [
        f"{_money(round(estimate.p25 * scale))} - {_money(round(estimate.p75 * scale))}" for scale in scales
    ]
    target = request.target_role

    steps = [
        CareerStep(
            title="Foundation & Skill Development",
            timeframe="0-6 months",
            requirements=[
                f"Master core competencies required for {target}",
                "Complete relevant certifications or courses",
                "Build portfolio projects demonstrating new skills",
                f"Network with professionals working as {target}",
            ],
            skills=list(request.current_skills[:3]) + ["Problem Solving", "Communication"],
            salary=salaries[0],
        ),
        CareerStep(
            title="Intermediate Growth",
            timeframe="6-12 months",
            requirements=[
                f"Take on projects that move you from {request.current_role} towards {target}",
                "Seek mentorship from senior professionals",
                "Develop leadership and collaboration skills",
                "Contribute to team initiatives and improvements",
            ],
            skills=["Leadership", "Project Management", "Technical Expertise"],
            salary=salaries[1 % len(salaries)],
        ),
        CareerStep(
            title="Advanced Preparation",
            timeframe=f"12-{timeline.split('-')[-1]}",
            requirements=[
                f"Demonstrate proficiency in {target} responsibilities",
                "Lead significant projects or initiatives",
                "Build cross-functional relationships",
                "Pursue advanced certifications if applicable",
            ],
            skills=["Strategic Thinking", "Advanced Technical Skills", "Team Leadership"],
            salary=salaries[2 % len(salaries)],
        ),
    ]

    recommendations = [
        f"Focus on developing skills specific to {target}",
        "Build a strong professional network in your target field",
        "Seek opportunities to demonstrate leadership potential",
        "Keep learning through courses, workshops, and conferences",
        "Document your achievements and build a compelling portfolio",
    ]
    if request.career_interests:
        recommendations.append(
            f"Look for projects that combine {target} work with your interest in {request.career_interests[0]}"
        )

    return CareerPathResult(
        timeline=timeline,
        steps=steps,
        recommendations=recommendations,
        salary_outlook=estimate.band(),
    )


_ACTION_VERBS_RE = re.compile(
    r"\b(managed|led|developed|designed|implemented|created|improved|increased|reduced|achieved)\b", re.I
)
_QUANTIFIED_RE = re.compile(r"\d+%|\$\d+|increased by|reduced by|improved by", re.I)
_BULLET_RE = re.compile(r"[•·\-\*]\s")
_DATE_RANGE_RE = re.compile(r"20\d{2}\s*[-–—]\s*(20\d{2}|present|current)", re.I)
_JOB_TITLE_RE = re.compile(
    r"\b(intern|analyst|developer|engineer|manager|coordinator|specialist|consultant|director|senior|lead)\b", re.I
)
_EMAIL_RE = re.compile(r"@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


@dataclass(frozen=True)
class ResumeSignals:
    experience: bool
    education: bool
    skills: bool
    contact: bool
    summary: bool
    action_verbs: bool
    quantified: bool
    bullets: int
    date_ranges: int
    job_titles: bool
    words: int
    numbers: int

    @classmethod
    def from_text(cls, text: str) -> "ResumeSignals":
        return cls(
            experience=bool(re.search(r"\b(work\s+)?experience|employment(\s+history)?", text, re.I)),
            education=bool(re.search(r"education(al\s+background)?|academic", text, re.I)),
            skills=bool(re.search(r"skills|competencies|expertise", text, re.I)),
            contact=bool(_EMAIL_RE.search(text)),
            summary=bool(re.search(r"summary|objective|profile", text, re.I)),
            action_verbs=bool(_ACTION_VERBS_RE.search(text)),
            quantified=bool(_QUANTIFIED_RE.search(text)),
            bullets=len(_BULLET_RE.findall(text)),
            date_ranges=len(_DATE_RANGE_RE.findall(text)),
            job_titles=bool(_JOB_TITLE_RE.search(text)),
            words=len(text.split()),
            numbers=len(re.findall(r"\d+", text)),
        )

    def score(self) -> int:
        score = 30
        score += 12 if self.experience else 0
        score += 10 if self.education else 0
        score += 8 if self.skills else 0
        score += 8 if self.action_verbs else 0
        score += 10 if self.quantified else 0
        score += 5 if self.bullets > 5 else 0
        score += 2 if self.date_ranges >= 2 else 0
        score += 5 if self.contact else 0
        score += 5 if self.summary else 0
        score += 5 if self.job_titles else 0
        score += 5 if self.words > 300 else 0
        score += 3 if self.words > 500 else 0
        score += 2 if self.numbers > 10 else 0
        # A heuristic critique never reports an excellent resume.
        return min(70, max(30, score))


def _resume_strengths(signals: ResumeSignals) -> list[str]:
    strengths = []
    if signals.experience:
        strengths.append("Professional experience section is present with relevant work history")
    if signals.education:
        strengths.append("Educational background is clearly documented")
    if signals.skills:
        strengths.append("Skills section helps demonstrate technical and professional capabilities")
    if signals.quantified:
        strengths.append("Resume includes quantifiable achievements and measurable results")

    filler = [
        "Resume has a clear structure with identifiable sections",
        "Contact information appears to be included",
        "Content is formatted in a readable manner",
        "Resume demonstrates professional presentation",
    ]
    for item in filler:
        if len(strengths) >= 4:
            break
        strengths.append(item)
    return strengths[:4]


def _resume_sections(score: int, signals: ResumeSignals) -> list[ResumeSection]:
    def clamp(value: int) -> int:
        return max(0, min(100, value))

    return [
        ResumeSection(
            section_name="Format & Design",
            score=clamp(min(85, score + 10)),
            feedback="Resume structure is readable but could benefit from more consistent formatting and visual hierarchy.",
            suggestions=[
                "Use bullet points consistently throughout each role",
                "Keep spacing between sections consistent",
            ],
        ),
        ResumeSection(
            section_name="Professional Summary",
            score=clamp(max(40, score - 15) if not signals.summary else score),
            feedback=(
                "Summary is present; make sure it leads with your strongest, most relevant achievements."
                if signals.summary
                else "A strong professional summary is missing or needs enhancement to capture attention immediately."
            ),
            suggestions=[
                "Add a 2-3 sentence summary with years of experience and a headline achievement",
                "Focus on your biggest achievements and unique value proposition",
            ],
        ),
        ResumeSection(
            section_name="Work Experience",
            score=clamp(score + 5 if signals.experience else max(30, score - 20)),
            feedback=(
                "Experience section exists but needs stronger action verbs and quantified results"
                if signals.experience
                else "Work experience section needs significant expansion with specific achievements"
            ),
            suggestions=[
                "Describe achievements with the STAR method (Situation, Task, Action, Result)",
                "Start each bullet with a strong verb: Spearheaded, Architected, Optimized, Delivered",
            ],
        ),
        ResumeSection(
            section_name="Skills & Keywords",
            score=clamp(score if signals.skills else max(35, score - 15)),
            feedback="Skills section needs better ATS optimization with industry-relevant keywords and proper categorization.",
            suggestions=[
                "Group skills into technical skills, tools, and professional skills",
                "Remove assumed skills (e.g. 'Microsoft Office') and add emerging technologies in your field",
            ],
        ),
        ResumeSection(
            section_name="Education",
            score=clamp(score + 15 if signals.education else max(40, score - 10)),
            feedback=(
                "Education section is present - ensure it includes all relevant details"
                if signals.education
                else "Education section needs complete information including degree, institution, and dates"
            ),
            suggestions=[
                "Include degree type, major, institution name, and graduation year",
                "Add relevant coursework, honors, or certifications",
            ],
        ),
    ]


def resume_fallback(request: ResumeCritiqueRequest) -> ResumeCritiqueResult:
    signals = ResumeSignals.from_text(request.resume_text)
    score = signals.score()
    keyword_advice = "Include industry-specific keywords to improve ATS (Applicant Tracking System) compatibility"
    if request.target_role:
        keyword_advice = f"Mirror the keywords used in {request.target_role} job postings to improve ATS compatibility"
    return ResumeCritiqueResult(
        overall_score=score,
        strengths=_resume_strengths(signals),
        improvements=[
            "Add more quantified achievements with specific metrics (e.g. 'Increased sales by 35%')",
            keyword_advice,
            "Use strong action verbs at the start of each bullet point (Led, Developed, Implemented, Delivered)",
            "Add a compelling professional summary highlighting your top achievements and years of experience",
        ],
        sections=_resume_sections(score, signals),
        detailed_feedback=DetailedFeedback(
            format="Use one font throughout, keep margins between 0.75 and 1 inch, and give every section a clear header.",
            content="Strengthen bullet points with outcomes: say what changed because of your work, not only what you did.",
            keywords="Add high-value keywords from your target job descriptions alongside the technical skills for your industry.",
            experience="Quantify achievements with numbers, percentages, or timeframes wherever possible.",
            skills="Organize skills into clear categories and drop generic entries that every applicant lists.",
        ),
    )


def skills_fallback(request: SkillsFeedbackRequest) -> SkillsFeedbackResult:
    grade = grade_assessment(request)
    category = request.category
    score = grade.score
    wrong = [a for a in request.answers if a.is_correct is False]

    strengths: list[str] = []
    if score >= 80:
        strengths += [
            f"Excellent performance in {category} with {score}% accuracy",
            "Strong grasp of fundamental concepts",
            "Consistently accurate across different difficulty levels",
        ]
    elif score >= 60:
        strengths += [f"Solid understanding of {category} fundamentals", "Good performance on core concepts"]
        if grade.correct_answers:
            strengths.append(f"Successfully answered {grade.correct_answers} questions correctly")
    else:
        strengths += [f"Shows potential in {category}", "Demonstrates willingness to learn and improve"]
        if grade.correct_answers:
            strengths.append("Correctly identified some key concepts")

    improvements: list[str] = []
    difficulties = {a.difficulty.lower() for a in wrong}
    if "expert" in difficulties or "hard" in difficulties:
        improvements.append("Focus on advanced concepts and expert-level topics")
    if "intermediate" in difficulties or "medium" in difficulties:
        improvements.append("Strengthen understanding of intermediate-level concepts")
    if "beginner" in difficulties or "easy" in difficulties:
        improvements.append("Review fundamental concepts and basic principles")
    improvements.append(f"Practice more questions in the {category} category")
    improvements.append("Review incorrect answers and understand the reasoning")

    if score < 60:
        recommendations = [
            f"Take foundational courses in {category} to build core knowledge",
            "Practice with beginner-level questions before moving to advanced topics",
        ]
    elif score < 80:
        recommendations = [
            f"Take intermediate-level courses to strengthen your {category} skills",
            "Work on practical projects to apply your knowledge",
        ]
    else:
        recommendations = [f"Consider advanced certifications in {category}", "Mentor others to reinforce your expertise"]
    recommendations += [
        "Retake the assessment in 2-4 weeks to track improvement",
        f"Join professional communities focused on {category}",
    ]

    if score >= 80:
        summary = (
            f"Excellent work! You've demonstrated strong mastery of {category} with a {score}% score. "
            f"You're at an {grade.level} level and ready for advanced challenges."
        )
    elif score >= 60:
        summary = (
            f"Good performance! You've shown solid understanding of {category} with a {score}% score. "
            "Focus on the areas where you struggled to reach expert level."
        )
    else:
        summary = (
            f"You're building a foundation in {category} with a {score}% score. "
            "Review the fundamentals and practice regularly to improve your skills."
        )

    return SkillsFeedbackResult(
        score=score,
        level=grade.level,
        correct_answers=grade.correct_answers,
        total_questions=grade.total_questions,
        strengths=strengths[:3],
        improvements=improvements[:3],
        recommendations=recommendations[:4],
        summary=summary,
    )


def interview_questions_fallback(request: InterviewQuestionsRequest) -> InterviewQuestionsResult:
    banks: dict[str, list[dict[str, str]]] = get_fallback_value("interview.question_banks", {})
    interview_type = request.interview_type.strip().lower()
    primary = banks.get(interview_type) or banks.get("default", [])

    pool: list[dict[str, str]] = []
    seen: set[str] = set()
    for entry in itertools.chain(primary, *(banks[name] for name in sorted(banks))):
        if entry["question"] not in seen:
            seen.add(entry["question"])
            pool.append(entry)

    selected = itertools.islice(itertools.cycle(pool), request.number_of_questions)
    return InterviewQuestionsResult(
        questions=[
            InterviewQuestion(
                id=index,
                question=entry["question"].format(role=request.role),
                category=entry["category"],
                difficulty=entry["difficulty"],
            )
            for index, entry in enumerate(selected, start=1)
        ]
    )


def answer_score_fallback(request: InterviewAnswerScoreRequest) -> AnswerScoreResult:
    role = request.role or "target"
    category = request.category or "interview"
    if not is_substantive(request.transcript):
        return AnswerScoreResult(
            score=0,
            feedback="No meaningful response detected. Please provide a more detailed answer.",
            strengths=[],
            improvements=[
                f"Give a complete answer to the {category} question, framed around the {role} role",
                "Speak clearly and keep the microphone close while answering",
            ],
        )

    words = len(request.transcript.split())
    strengths = [f"Attempted the {category} question with an answer for the {role} role"]
    if words >= 60:
        strengths.append("Gave a detailed response with supporting context")
    return AnswerScoreResult(
        score=length_score(request.transcript),
        feedback=(
            "Your answer was recorded. Try to provide more specific examples and details "
            f"that show how your experience fits the {role} role."
        ),
        strengths=strengths,
        improvements=[
            f"Provide more specific examples relevant to the {role} role",
            "Structure the answer with the STAR method (Situation, Task, Action, Result)",
        ],
    )


_FALLBACKS: dict[AnalysisKind, Callable[[Any], AnalysisResult]] = {
    AnalysisKind.SALARY: salary_fallback,
    AnalysisKind.CAREER_PATH: career_path_fallback,
    AnalysisKind.RESUME_CRITIQUE: resume_fallback,
    AnalysisKind.SKILLS_FEEDBACK: skills_fallback,
    AnalysisKind.INTERVIEW_QUESTIONS: interview_questions_fallback,
    AnalysisKind.INTERVIEW_ANSWER_SCORE: answer_score_fallback,
}


def synthesize_fallback(request: AnalysisRequest) -> AnalysisResult:
    return _FALLBACKS[request.kind](request)
