import unittest
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_tools.core.errors import RequestValidationFailed
from career_tools.pipeline.validator import screen_resume_text, validate_request
from career_tools.schemas.requests import (
    CareerPathRequest,
    InterviewAnswerScoreRequest,
    InterviewQuestionsRequest,
    ResumeCritiqueRequest,
    SalaryRequest,
    SkillsFeedbackRequest,
)

SAMPLE_RESUME = (
    "Jane Smith\n"
    "Email: jane.smith@example.com | Phone: +1 555 123 4567\n"
    "Summary\n"
    "Backend engineer with 6 years of experience building APIs for SaaS products.\n"
    "Work Experience\n"
    "Senior Engineer, Acme Corp 2019 - present\n"
    "- Led migration of billing services and reduced latency by 40%\n"
    "- Developed internal tooling used by 30 engineers\n"
    "Education\n"
    "B.Sc. Computer Science, State University 2014 - 2018\n"
    "Skills\n"
    "Python, FastAPI, PostgreSQL, Docker, AWS\n"
)


class RequestValidatorTests(unittest.TestCase):
    def test_valid_salary_request_is_returned_unchanged(self):
        request = SalaryRequest(
            job_title="Software Engineer",
            location="Remote",
            years_experience=5,
            industry="Technology (General)",
        )
        self.assertIs(validate_request(request), request)

    def test_missing_fields_are_reported_in_camel_case(self):
        request = SalaryRequest.model_validate({"jobTitle": "   ", "location": "Berlin"})
        with self.assertRaises(RequestValidationFailed) as ctx:
            validate_request(request)
        self.assertEqual(ctx.exception.missing_fields, ["jobTitle", "yearsExperience", "industry"])
        self.assertEqual(ctx.exception.status_code, 400)

    def test_zero_years_is_present_not_missing(self):
        request = SalaryRequest(job_title="Designer", location="Remote", years_experience=0, industry="Retail")
        validate_request(request)

    def test_negative_years_is_out_of_range(self):
        request = CareerPathRequest(current_role="Analyst", target_role="Manager", years_experience=-1)
        with self.assertRaises(RequestValidationFailed) as ctx:
            validate_request(request)
        self.assertEqual(ctx.exception.invalid_range, ["yearsExperience"])

    def test_question_count_bounds(self):
        for count in (0, 11):
            request = InterviewQuestionsRequest(role="Engineer", interview_type="technical", number_of_questions=count)
            with self.assertRaises(RequestValidationFailed) as ctx:
                validate_request(request)
            self.assertIn("numberOfQuestions", ctx.exception.invalid_range)
        validate_request(InterviewQuestionsRequest(role="Engineer", interview_type="technical", number_of_questions=10))

    def test_skills_request_needs_answers(self):
        request = SkillsFeedbackRequest(category="Python", answers=[])
        with self.assertRaises(RequestValidationFailed) as ctx:
            validate_request(request)
        self.assertEqual(ctx.exception.missing_fields, ["answers"])

    def test_skills_answer_without_question_is_rejected(self):
        request = SkillsFeedbackRequest.model_validate(
            {"category": "Python", "answers": [{"question": " ", "answer": "x", "isCorrect": True}]}
        )
        with self.assertRaises(RequestValidationFailed) as ctx:
            validate_request(request)
        self.assertEqual(ctx.exception.invalid_range, ["answers"])

    def test_empty_transcript_is_allowed(self):
        request = InterviewAnswerScoreRequest(question="Tell me about yourself.", transcript="")
        validate_request(request)

    def test_resume_passes_screening(self):
        self.assertIsNone(screen_resume_text(SAMPLE_RESUME))
        validate_request(ResumeCritiqueRequest(resume_text=SAMPLE_RESUME))

    def test_resume_screening_rejections(self):
        self.assertIn("too short", screen_resume_text("Jane Smith engineer"))
        invoice = SAMPLE_RESUME + "\nInvoice number 4411, payment due in 30 days."
        self.assertIn("invoice", screen_resume_text(invoice))
        no_contact = SAMPLE_RESUME.replace("Email: jane.smith@example.com | Phone: +1 555 123 4567\n", "")
        self.assertIn("contact", screen_resume_text(no_contact))

    def test_resume_content_failure_carries_reason(self):
        request = ResumeCritiqueRequest(resume_text="lorem ipsum " * 20)
        with self.assertRaises(RequestValidationFailed) as ctx:
            validate_request(request)
        self.assertIn("placeholder", ctx.exception.invalid_content)


if __name__ == "__main__":
    unittest.main()
