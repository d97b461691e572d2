from __future__ import annotations

import re
from typing import Callable

from career_tools.ai.types import CompletionOptions, PromptPair
from career_tools.pipeline.grading import grade_assessment
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

NOT_SPECIFIED = "Not specified"
RESUME_PROMPT_CHARS = 1200
JSON_ONLY = "Always respond with valid JSON only, no markdown, no prose before or after the JSON."


def _value(value: object) -> str:
    if value is None:
        return NOT_SPECIFIED
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if str(item).strip()]
        return ", ".join(items) if items else NOT_SPECIFIED
    text = str(value).strip()
    return text or NOT_SPECIFIED


SALARY_SYSTEM = f"""You are an expert salary analyst and compensation consultant. Provide realistic salary estimates based on market data. {JSON_ONLY}

Format your response as JSON with this exact structure:
{{
  "medianSalary": 85000,
  "salaryRange": {{"min": 70000, "max": 110000}},
  "percentiles": {{"p25": 75000, "p50": 85000, "p75": 95000}},
  "factors": [{{"name": "Factor name", "impact": "+X%", "value": "Description"}}],
  "trends": {{"growth": "+X%", "demand": "High/Medium/Low", "outlook": "Growing/Stable/Declining"}},
  "insights": "2-3 sentences of personalized career advice and salary negotiation tips"
}}

Requirements:
- All amounts are whole numbers in USD
- min <= p25 <= p50 <= p75 <= max, and medianSalary equals p50
- Consider location cost of living adjustments
- Factor in experience level appropriately
- Include 4-6 relevant salary factors
- Be conservative with estimates if unsure"""


CAREER_PATH_SYSTEM = f"""You are an expert career advisor and analyst. Generate detailed, realistic career paths based on user input. {JSON_ONLY}

Format your response as JSON with this exact structure:
{{
  "timeline": "X-Y months",
  "steps": [
    {{
      "title": "Phase Name",
      "timeframe": "X-Y months",
      "requirements": ["requirement 1", "requirement 2", "requirement 3"],
      "skills": ["skill 1", "skill 2", "skill 3"],
      "salary": "$XX,000 - $YY,000",
      "completed": false
    }}
  ],
  "recommendations": ["recommendation 1", "recommendation 2", "recommendation 3"],
  "salaryOutlook": {{
    "salaryRange": {{"min": 70000, "max": 110000}},
    "percentiles": {{"p25": 75000, "p50": 85000, "p75": 95000}}
  }}
}}

Requirements:
- Provide 3-4 realistic career steps
- Include specific, actionable requirements for each step
- Give 5-7 personalized, actionable recommendations
- salaryOutlook describes the target role; min <= p25 <= p50 <= p75 <= max
- Base timeline on experience level and role transition difficulty"""


RESUME_SYSTEM = f"""You are a professional resume analyzer. {JSON_ONLY}

Your response must be a valid JSON object with this exact structure:
{{
  "overall_score": 75,
  "strengths": ["strength1", "strength2", "strength3", "strength4"],
  "improvements": ["improvement1", "improvement2", "improvement3", "improvement4"],
  "sections": [
    {{"section_name": "Format & Design", "score": 80, "feedback": "specific feedback text", "suggestions": ["suggestion1", "suggestion2"]}},
    {{"section_name": "Professional Summary", "score": 70, "feedback": "specific feedback text", "suggestions": ["suggestion1", "suggestion2"]}},
    {{"section_name": "Work Experience", "score": 75, "feedback": "specific feedback text", "suggestions": ["suggestion1", "suggestion2"]}},
    {{"section_name": "Skills & Keywords", "score": 72, "feedback": "specific feedback text", "suggestions": ["suggestion1", "suggestion2"]}},
    {{"section_name": "Education", "score": 85, "feedback": "specific feedback text", "suggestions": ["suggestion1", "suggestion2"]}}
  ],
  "detailed_feedback": {{
    "format": "specific advice on formatting",
    "content": "specific advice on content quality",
    "keywords": "specific advice on keywords and ATS optimization",
    "experience": "specific advice on experience section",
    "skills": "specific advice on skills section"
  }}
}}

Provide specific, actionable feedback. Scores are whole numbers from 0 to 100."""


SKILLS_SYSTEM = f"""You are a professional skills assessment advisor. Provide specific, actionable feedback based on test performance. {JSON_ONLY}

Format your response as JSON with this exact structure:
{{
  "strengths": ["strength1", "strength2", "strength3"],
  "improvements": ["improvement1", "improvement2", "improvement3"],
  "recommendations": ["recommendation1", "recommendation2", "recommendation3", "recommendation4"],
  "summary": "A brief 2-3 sentence personalized summary of their performance"
}}"""


INTERVIEW_QUESTIONS_SYSTEM = """You are an expert interview coach. Respond ONLY with a JSON array, no other text.

Each element must have this exact structure:
{"id": 1, "question": "Question text here", "category": "Category name", "difficulty": "easy/medium/hard"}"""


ANSWER_SCORE_SYSTEM = f"""You are an expert interview coach and evaluator. Provide professional, constructive feedback. {JSON_ONLY}

Format your response as JSON with this exact structure:
{{
  "score": 75,
  "feedback": "Overall assessment of the answer in 2-3 sentences",
  "strengths": ["Strength 1", "Strength 2"],
  "improvements": ["Improvement 1", "Improvement 2"]
}}

Score scale (whole number 0-100):
- 0-40: Poor (lacks clarity, relevance, or substance)
- 41-60: Fair (basic answer but needs improvement)
- 61-80: Good (solid answer with good examples)
- 81-100: Excellent (exceptional answer with great details)"""


def truncate_resume(text: str, max_chars: int = RESUME_PROMPT_CHARS) -> str:
    """Shorten resume text for the prompt while keeping its key sections."""
    if len(text) <= max_chars:
        return text

    patterns = (
        r"(summary|objective|profile)[\s\S]{0,300}",
        r"(experience|work|employment)[\s\S]{0,400}",
        r"(education|academic)[\s\S]{0,200}",
        r"(skills|competencies|expertise)[\s\S]{0,200}",
    )
    parts = []
    for pattern in patterns:
        match = re.search(pattern, text, re.I)
        if match:
            parts.append(match.group(0))
    combined = " ".join(parts)

    if len(combined) > max_chars:
        combined = combined[:max_chars]
    elif len(combined) < max_chars * 0.5:
        combined = text[:max_chars]
    return combined.strip()


def build_salary_prompt(request: SalaryRequest) -> PromptPair:
    user = f"""Analyze and provide a comprehensive salary estimate for the following position:

Job Details:
- Job Title: {_value(request.job_title)}
- Location: {_value(request.location)}
- Years of Experience: {request.years_experience} years
- Education: {_value(request.education)}
- Industry: {_value(request.industry)}
- Company Size: {_value(request.company_size)}
- Key Skills: {_value(request.skills)}

Provide:
1. Realistic median salary for this exact role and location
2. Salary range (min to max) based on experience and qualifications
3. Percentile breakdown (25th, 50th, 75th)
4. 4-6 key factors affecting this salary
5. Market trends (growth rate, job demand, future outlook)
6. Personalized insights for salary negotiation and career growth

Respond ONLY with valid JSON in the format specified in your system prompt."""
    return PromptPair(SALARY_SYSTEM, user, CompletionOptions(temperature=0.5, max_tokens=1500))


def build_career_path_prompt(request: CareerPathRequest) -> PromptPair:
    years = NOT_SPECIFIED if request.years_experience is None else f"{request.years_experience} years"
    user = f"""Analyze this career transition and create a detailed career path:

Current Situation:
- Current Role: {_value(request.current_role)}
- Years of Experience: {years}
- Target Role: {_value(request.target_role)}
- Industry: {_value(request.industry)}
- Location: {_value(request.location)}
- Current Skills: {_value(request.current_skills)}
- Career Interests: {_value(request.career_interests)}

Create a realistic, step-by-step career path from {request.current_role} to {request.target_role}.
Include:
1. Estimated total timeline
2. 3-4 progressive career steps with specific timeframes
3. Requirements and actions for each step
4. Key skills to develop at each stage
5. Expected salary ranges for each level and a salary outlook for the target role
6. Personalized recommendations based on their skills and interests

Respond ONLY with valid JSON in the format specified in your system prompt."""
    return PromptPair(CAREER_PATH_SYSTEM, user, CompletionOptions(temperature=0.7, max_tokens=2000))


def build_resume_prompt(request: ResumeCritiqueRequest) -> PromptPair:
    user = f"""Target Role: {_value(request.target_role)}

Resume to analyze:

{truncate_resume(request.resume_text)}"""
    return PromptPair(RESUME_SYSTEM, user, CompletionOptions(temperature=0.3, max_tokens=2000))


def build_skills_prompt(request: SkillsFeedbackRequest, score: int, level: str) -> PromptPair:
    graded = [a for a in request.answers if a.is_correct is not None]
    wrong = [a for a in graded if a.is_correct is False]
    correct = len(graded) - len(wrong)
    minutes = NOT_SPECIFIED if request.time_taken_seconds is None else f"{round(request.time_taken_seconds / 60)} minutes"
    wrong_lines = "\n".join(f"{i}. {a.question} ({a.difficulty} level)" for i, a in enumerate(wrong, start=1))
    open_lines = "\n".join(
        f"{i}. {a.question}\n   Answer: {_value(a.answer)}"
        for i, a in enumerate((a for a in request.answers if a.is_correct is None), start=1)
    )
    user = f"""Analyze this assessment result and provide personalized feedback.

Assessment Details:
- Category: {_value(request.category)}
- Score: {score}%
- Level: {level}
- Total Questions: {len(request.answers)}
- Correct: {correct}
- Time Taken: {minutes}

Questions Answered Incorrectly:
{wrong_lines or "None"}

Open-ended Answers:
{open_lines or "None"}

Be specific and actionable. Reference the actual questions they got wrong if relevant."""
    return PromptPair(SKILLS_SYSTEM, user, CompletionOptions(temperature=0.4, max_tokens=1000))


def build_interview_questions_prompt(request: InterviewQuestionsRequest) -> PromptPair:
    user = f"""Generate {request.number_of_questions} realistic {_value(request.interview_type)} interview questions for a {_value(request.role)} position.

Difficulty level: {_value(request.difficulty)}

Requirements:
- Start with 1-2 easier warm-up questions
- Progress to more challenging questions
- Include a mix of behavioral and role-specific questions
- For technical roles, include technical problem-solving questions
- For leadership roles, include situational leadership questions

Respond ONLY with the JSON array, no other text."""
    return PromptPair(INTERVIEW_QUESTIONS_SYSTEM, user, CompletionOptions(temperature=0.7, max_tokens=2000))


def build_answer_score_prompt(request: InterviewAnswerScoreRequest) -> PromptPair:
    user = f"""Analyze this interview answer and provide detailed evaluation.

Interview Context:
- Role: {_value(request.role)}
- Interview Type: {_value(request.interview_type)}
- Question Category: {_value(request.category)}
- Question: "{request.question}"
- Candidate's Answer: "{request.transcript}"

Evaluation Criteria:
- Relevance and clarity of answer
- Specific examples and details provided
- Communication skills and structure
- Technical accuracy (if applicable)

Provide constructive, professional feedback. Be encouraging but honest."""
    return PromptPair(ANSWER_SCORE_SYSTEM, user, CompletionOptions(temperature=0.7, max_tokens=2000))


_BUILDERS: dict[AnalysisKind, Callable[..., PromptPair]] = {
    AnalysisKind.SALARY: build_salary_prompt,
    AnalysisKind.CAREER_PATH: build_career_path_prompt,
    AnalysisKind.RESUME_CRITIQUE: build_resume_prompt,
    AnalysisKind.INTERVIEW_QUESTIONS: build_interview_questions_prompt,
    AnalysisKind.INTERVIEW_ANSWER_SCORE: build_answer_score_prompt,
}


def build_prompt(request: AnalysisRequest) -> PromptPair:
    if isinstance(request, SkillsFeedbackRequest):
        grade = grade_assessment(request)
        return build_skills_prompt(request, grade.score, grade.level)
    return _BUILDERS[request.kind](request)
