import unittest
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_tools.pipeline.fallback import (
    ResumeSignals,
    career_path_fallback,
    estimate_salary,
    synthesize_fallback,
)
from career_tools.schemas.requests import (
    AssessmentAnswer,
    CareerPathRequest,
    InterviewAnswerScoreRequest,
    InterviewQuestionsRequest,
    ResumeCritiqueRequest,
    SalaryRequest,
    SkillsFeedbackRequest,
)
from career_tools.schemas.results import (
    AnswerScoreResult,
    CareerPathResult,
    InterviewQuestionsResult,
    ResumeCritiqueResult,
    SalaryResult,
    SkillsFeedbackResult,
)

SAMPLE_RESUME = (
    "Jane Smith\n"
    "jane.smith@example.com\n"
    "Work Experience\n"
    "Senior Engineer, Acme Corp 2019 - present\n"
    "- Led migration of billing services and reduced latency by 40%\n"
    "- Developed internal tooling used by 30 engineers\n"
    "Education\n"
    "B.Sc. Computer Science, State University 2014 - 2018\n"
    "Skills\n"
    "Python, FastAPI, PostgreSQL, Docker, AWS\n"
)


def _ordered(salary_range, percentiles, median):
    return salary_range.min <= percentiles.p25 <= median <= percentiles.p75 <= salary_range.max


class SalaryFallbackTests(unittest.TestCase):
    def test_remote_software_engineer_with_five_years(self):
        request = SalaryRequest(
            job_title="Software Engineer",
            location="Remote",
            years_experience=5,
            industry="Technology (General)",
        )
        result = synthesize_fallback(request)
        self.assertIsInstance(result, SalaryResult)
        # 70k-150k base, 1.2 for five years, 1.08 for technology, remote 1.0
        self.assertAlmostEqual(result.salary_range.min, 90720, delta=1)
        self.assertAlmostEqual(result.salary_range.max, 194400, delta=1)
        self.assertAlmostEqual(result.median_salary, 142560, delta=1)
        self.assertTrue(_ordered(result.salary_range, result.percentiles, result.median_salary))
        self.assertEqual(result.percentiles.p50, result.median_salary)

    def test_ordering_holds_for_every_location_and_experience(self):
        locations = ["Remote", "San Francisco, CA", "Austin, TX", "London", ""]
        titles = ["Software Engineer", "Barista", "Data Analyst", "VP of Sales Manager"]
        for title in titles:
            for location in locations:
                for years in range(0, 21):
                    est = estimate_salary(title, location, years, "Non-profit", "PhD")
                    with self.subTest(title=title, location=location, years=years):
                        self.assertTrue(est.min <= est.p25 <= est.median <= est.p75 <= est.max)

    def test_experience_multiplier_is_capped(self):
        at_cap = estimate_salary("Designer", "Remote", 15, None, None)
        beyond = estimate_salary("Designer", "Remote", 40, None, None)
        self.assertEqual(at_cap, beyond)

    def test_high_cost_location_pays_more(self):
        remote = estimate_salary("Data Scientist", "Remote", 4, "Finance", None)
        sf = estimate_salary("Data Scientist", "San Francisco, CA", 4, "Finance", None)
        other = estimate_salary("Data Scientist", "Columbus, OH", 4, "Finance", None)
        self.assertLess(remote.median, other.median)
        self.assertLess(other.median, sf.median)

    def test_deterministic(self):
        request = SalaryRequest(
            job_title="Product Manager",
            location="Seattle",
            years_experience=7,
            industry="Healthcare",
            education="Master's Degree",
            company_size="Enterprise",
            skills="Roadmapping",
        )
        first = synthesize_fallback(request)
        self.assertEqual(first, synthesize_fallback(request))
        names = [factor.name for factor in first.factors]
        self.assertIn("Company Size", names)
        self.assertIn("Key Skills", names)
        self.assertIn("Product Manager", first.insights)


class CareerPathFallbackTests(unittest.TestCase):
    def test_junior_timeline_and_target_role_mentions(self):
        request = CareerPathRequest(
            current_role="QA Tester",
            target_role="Software Engineer",
            years_experience=2,
            current_skills=["Selenium", "Python", "SQL", "Jira"],
        )
        result = synthesize_fallback(request)
        self.assertIsInstance(result, CareerPathResult)
        self.assertEqual(result.timeline, "18-24 months")
        self.assertEqual(len(result.steps), 3)
        self.assertTrue(all(not step.completed for step in result.steps))
        self.assertIn("Software Engineer", result.steps[0].requirements[0])
        self.assertEqual(result.steps[0].skills[:3], ["Selenium", "Python", "SQL"])
        outlook = result.salary_outlook
        self.assertIsNotNone(outlook)
        self.assertTrue(_ordered(outlook.salary_range, outlook.percentiles, outlook.percentiles.p50))

    def test_senior_and_unknown_experience_timelines(self):
        senior = CareerPathRequest(current_role="Engineer", target_role="Engineering Manager", years_experience=8)
        unknown = CareerPathRequest(current_role="Engineer", target_role="Engineering Manager")
        self.assertEqual(synthesize_fallback(senior).timeline, "12-18 months")
        self.assertEqual(synthesize_fallback(unknown).timeline, "18-24 months")

    def test_outlook_ordering_holds_for_every_location_and_experience(self):
        locations = ["Remote", "San Francisco, CA", "Austin, TX", "London", ""]
        titles = ["Software Engineer", "Barista", "Data Analyst", "VP of Sales Manager"]
        for title in titles:
            for location in locations:
                for years in range(0, 21):
                    request = CareerPathRequest(
                        current_role="Associate",
                        target_role=title,
                        years_experience=years,
                        location=location,
                        industry="Non-profit",
                    )
                    outlook = career_path_fallback(request).salary_outlook
                    with self.subTest(title=title, location=location, years=years):
                        self.assertTrue(
                            _ordered(outlook.salary_range, outlook.percentiles, outlook.percentiles.p50)
                        )


class ResumeFallbackTests(unittest.TestCase):
    def test_score_is_bounded_and_sections_present(self):
        result = synthesize_fallback(ResumeCritiqueRequest(resume_text=SAMPLE_RESUME, target_role="Staff Engineer"))
        self.assertIsInstance(result, ResumeCritiqueResult)
        self.assertGreaterEqual(result.overall_score, 30)
        self.assertLessEqual(result.overall_score, 70)
        self.assertEqual(len(result.sections), 5)
        self.assertEqual(len(result.strengths), 4)
        self.assertTrue(any("Staff Engineer" in item for item in result.improvements))

    def test_signals_detect_sections(self):
        signals = ResumeSignals.from_text(SAMPLE_RESUME)
        self.assertTrue(signals.experience)
        self.assertTrue(signals.education)
        self.assertTrue(signals.skills)
        self.assertTrue(signals.quantified)
        self.assertTrue(signals.contact)


class SkillsFallbackTests(unittest.TestCase):
    def test_bands_name_the_category(self):
        answers = [AssessmentAnswer(question=f"Q{i}", answer="x", is_correct=i < 4) for i in range(5)]
        result = synthesize_fallback(SkillsFeedbackRequest(category="Kubernetes", answers=answers))
        self.assertIsInstance(result, SkillsFeedbackResult)
        self.assertEqual(result.score, 80)
        self.assertEqual(result.level, "Expert")
        self.assertIn("Kubernetes", result.strengths[0])
        self.assertIn("Kubernetes", result.summary)
        self.assertLessEqual(len(result.recommendations), 4)

    def test_low_score_recommends_foundations(self):
        answers = [
            AssessmentAnswer(question="Q1", answer="x", is_correct=False, difficulty="beginner"),
            AssessmentAnswer(question="Q2", answer="y", is_correct=False, difficulty="expert"),
        ]
        result = synthesize_fallback(SkillsFeedbackRequest(category="Excel", answers=answers))
        self.assertEqual(result.score, 0)
        self.assertEqual(result.level, "Beginner")
        self.assertIn("foundational courses in Excel", result.recommendations[0])
        self.assertIn("advanced concepts", result.improvements[0])


class InterviewFallbackTests(unittest.TestCase):
    def test_questions_follow_type_bank_and_count(self):
        request = InterviewQuestionsRequest(role="Backend Engineer", interview_type="Technical", number_of_questions=3)
        result = synthesize_fallback(request)
        self.assertIsInstance(result, InterviewQuestionsResult)
        self.assertEqual([q.id for q in result.questions], [1, 2, 3])
        self.assertIn("Backend Engineer", result.questions[0].question)
        self.assertEqual(result.questions[1].category, "Problem Solving")

    def test_more_questions_than_one_bank_holds(self):
        request = InterviewQuestionsRequest(role="Nurse", interview_type="case study", number_of_questions=10)
        result = synthesize_fallback(request)
        self.assertEqual(len(result.questions), 10)
        texts = [q.question for q in result.questions]
        self.assertEqual(len(texts), len(set(texts)))
        self.assertEqual(texts[0], "Tell me about yourself.")

    def test_short_answer_scores_zero_with_role_specific_advice(self):
        request = InterviewAnswerScoreRequest(
            question="Why this role?", transcript="  um  ", role="Data Engineer", category="Motivation"
        )
        result = synthesize_fallback(request)
        self.assertIsInstance(result, AnswerScoreResult)
        self.assertEqual(result.score, 0)
        self.assertTrue(any("Data Engineer" in item for item in result.improvements))

    def test_answer_length_heuristic_is_clamped(self):
        short = InterviewAnswerScoreRequest(question="Q", transcript="I like building things", role="Engineer")
        long = InterviewAnswerScoreRequest(question="Q", transcript="word " * 200, role="Engineer")
        medium = InterviewAnswerScoreRequest(question="Q", transcript="word " * 25, role="Engineer")
        self.assertEqual(synthesize_fallback(short).score, 40)
        self.assertEqual(synthesize_fallback(long).score, 75)
        self.assertEqual(synthesize_fallback(medium).score, 50)


if __name__ == "__main__":
    unittest.main()
