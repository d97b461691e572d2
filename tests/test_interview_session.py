import asyncio
import json
import sqlite3
import tempfile
import unittest
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_tools.core.errors import (
    InvalidQuestionIndex,
    PersistenceError,
    RequestValidationFailed,
    SessionCompleted,
    SessionNotFound,
    UpstreamUnavailable,
)
from career_tools.interview.session import InterviewSessionMachine
from career_tools.pipeline.orchestrator import AnalysisOrchestrator
from career_tools.schemas.interview import AnalyzeAnswerBody
from career_tools.schemas.requests import InterviewQuestionsRequest
from career_tools.storage.db import SQLiteStore

QUESTIONS = [
    {"id": 1, "question": "Tell me about yourself.", "category": "Introduction", "difficulty": "easy"},
    {"id": 2, "question": "Describe a hard bug.", "category": "Problem Solving", "difficulty": "medium"},
    {"id": 3, "question": "Design a URL shortener.", "category": "Architecture", "difficulty": "hard"},
]

LONG_ANSWER = "I led a small team that rebuilt our deployment pipeline and cut release time in half."


def _score_reply(score, strength, improvement):
    return json.dumps(
        {
            "score": score,
            "feedback": f"Scored {score}.",
            "strengths": [strength, "Clear communication"],
            "improvements": [improvement],
        }
    )


class ScriptedClient:
    """Returns queued replies in order; raises UpstreamUnavailable when the queue is empty."""

    model = "scripted-model"

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = 0

    async def complete(self, prompt, *, timeout_s):
        self.calls += 1
        await asyncio.sleep(0)
        if not self.replies:
            raise UpstreamUnavailable("no more replies")
        return self.replies.pop(0)


class InterviewSessionMachineTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self.tmp.name) / "sessions.db"
        self.store = SQLiteStore(self.db_path)
        self.store.init_db()

    def tearDown(self):
        self.tmp.cleanup()

    def _machine(self, replies):
        self.client = ScriptedClient(replies)
        return InterviewSessionMachine(AnalysisOrchestrator(self.client, self.store), self.store)

    def _analysis_rows(self):
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM analyses").fetchone()[0]

    async def _create(self, machine, user_id="user-1"):
        request = InterviewQuestionsRequest(role="Backend Engineer", interview_type="technical", number_of_questions=3)
        session, _ = await machine.create_session(request, user_id=user_id)
        return session

    async def test_create_session_uses_model_questions(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        self.assertEqual(session.status, "in_progress")
        self.assertEqual([q.question for q in session.questions], [q["question"] for q in QUESTIONS])
        self.assertEqual(self.store.get(session.id), session)

    async def test_create_session_falls_back_to_question_bank(self):
        machine = self._machine([])
        session = await self._create(machine)
        self.assertEqual(len(session.questions), 3)
        self.assertIn("Backend Engineer", session.questions[0].question)

    async def test_short_answer_scores_low_without_model_call(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        calls_before = self.client.calls

        outcome = await machine.submit_answer(
            AnalyzeAnswerBody(session_id=session.id, question_index=0, transcript="uh"), user_id="user-1"
        )
        self.assertEqual(self.client.calls, calls_before)
        self.assertTrue(outcome.analysis.used_fallback)
        result = outcome.analysis.result
        self.assertEqual(result.score, 0)
        self.assertIsInstance(result.feedback, str)
        self.assertIsInstance(result.strengths, list)
        self.assertTrue(result.improvements)
        self.assertEqual(outcome.session.answer_for(0).score, 0)

    async def test_mean_of_recorded_answers_only(self):
        machine = self._machine(
            [
                json.dumps(QUESTIONS),
                _score_reply(80, "Good structure", "Add metrics"),
                _score_reply(40, "Honest", "Add metrics"),
            ]
        )
        session = await self._create(machine)
        await machine.submit_answer(
            AnalyzeAnswerBody(session_id=session.id, question_index=0, transcript=LONG_ANSWER), user_id="user-1"
        )
        await machine.submit_answer(
            AnalyzeAnswerBody(session_id=session.id, question_index=2, transcript=LONG_ANSWER), user_id="user-1"
        )

        summary = await machine.complete_session(session.id, user_id="user-1")
        self.assertEqual(summary.overall_score, 60)
        self.assertEqual((summary.answered_questions, summary.total_questions), (2, 3))
        self.assertEqual(summary.strengths, ["Good structure", "Clear communication", "Honest"])
        self.assertEqual(summary.improvements, ["Add metrics"])
        self.assertEqual(summary.feedback[1], "Good performance with room for improvement.")

        stored = self.store.get(session.id)
        self.assertEqual(stored.status, "completed")
        self.assertEqual(stored.overall_score, 60)
        self.assertIsNotNone(stored.completed_at)

    async def test_zero_answers_complete_with_zero(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        summary = await machine.complete_session(session.id, user_id="user-1")
        self.assertEqual(summary.overall_score, 0)
        self.assertEqual(summary.strengths, [])
        self.assertEqual(summary.improvements, [])

    async def test_invalid_index_writes_nothing(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        rows_before = self._analysis_rows()
        for index in (3, -1):
            with self.assertRaises(InvalidQuestionIndex):
                await machine.submit_answer(
                    AnalyzeAnswerBody(session_id=session.id, question_index=index, transcript=LONG_ANSWER),
                    user_id="user-1",
                )
        self.assertEqual(self._analysis_rows(), rows_before)
        self.assertEqual(self.store.get(session.id).answers, [])

    async def test_resubmission_overwrites_the_answer(self):
        machine = self._machine(
            [json.dumps(QUESTIONS), _score_reply(30, "Tried", "More detail"), _score_reply(90, "Great", "None")]
        )
        session = await self._create(machine)
        for _ in range(2):
            outcome = await machine.submit_answer(
                AnalyzeAnswerBody(session_id=session.id, question_index=1, transcript=LONG_ANSWER), user_id="user-1"
            )
        self.assertEqual(len(outcome.session.answers), 1)
        self.assertEqual(outcome.session.answer_for(1).score, 90)

    async def test_last_answer_completes_the_session(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        outcome = None
        for index in range(3):
            outcome = await machine.submit_answer(
                AnalyzeAnswerBody(session_id=session.id, question_index=index, transcript=LONG_ANSWER),
                user_id="user-1",
            )
        self.assertEqual(outcome.session.status, "completed")
        self.assertIsNotNone(outcome.summary)
        with self.assertRaises(SessionCompleted):
            await machine.submit_answer(
                AnalyzeAnswerBody(session_id=session.id, question_index=0, transcript=LONG_ANSWER), user_id="user-1"
            )
        again = await machine.complete_session(session.id, user_id="user-1")
        self.assertEqual(again.overall_score, outcome.summary.overall_score)

    async def test_concurrent_answers_are_all_recorded(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        await asyncio.gather(
            machine.submit_answer(
                AnalyzeAnswerBody(session_id=session.id, question_index=0, transcript=LONG_ANSWER), user_id="user-1"
            ),
            machine.submit_answer(
                AnalyzeAnswerBody(session_id=session.id, question_index=1, transcript=LONG_ANSWER), user_id="user-1"
            ),
        )
        stored = self.store.get(session.id)
        self.assertEqual([a.question_index for a in stored.answers], [0, 1])

    async def test_sessions_are_private_to_their_owner(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        with self.assertRaises(SessionNotFound):
            machine.get_session(session.id, user_id="someone-else")
        with self.assertRaises(SessionNotFound):
            await machine.complete_session("missing", user_id="user-1")

    async def test_session_id_is_required(self):
        machine = self._machine([])
        with self.assertRaises(RequestValidationFailed):
            await machine.submit_answer(AnalyzeAnswerBody(question_index=0, transcript="x"), user_id="user-1")

    async def test_question_index_is_required(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        session = await self._create(machine)
        with self.assertRaises(RequestValidationFailed) as ctx:
            await machine.submit_answer(AnalyzeAnswerBody(session_id=session.id, transcript=LONG_ANSWER), user_id="user-1")
        self.assertEqual(ctx.exception.missing_fields, ["questionIndex"])
        self.assertEqual(self.store.get(session.id).answers, [])

    async def test_unknown_sessions_leave_no_locks_behind(self):
        machine = self._machine([json.dumps(QUESTIONS)])
        for index in range(50):
            with self.assertRaises(SessionNotFound):
                await machine.submit_answer(
                    AnalyzeAnswerBody(session_id=f"missing-{index}", question_index=0, transcript=LONG_ANSWER),
                    user_id="user-1",
                )
        self.assertEqual(machine._locks, {})

        session = await self._create(machine)
        with self.assertRaises(SessionNotFound):
            await machine.complete_session(session.id, user_id="someone-else")
        await machine.submit_answer(
            AnalyzeAnswerBody(session_id=session.id, question_index=0, transcript="uh"), user_id="user-1"
        )
        self.assertEqual(machine._locks, {})
        self.assertEqual(machine._lock_users, {})

    async def test_failed_session_write_leaves_no_analysis_row(self):
        class SessionlessStore(SQLiteStore):
            def create_session(self, session):
                raise PersistenceError("disk full")

        store = SessionlessStore(self.db_path)
        machine = InterviewSessionMachine(AnalysisOrchestrator(ScriptedClient([json.dumps(QUESTIONS)]), store), store)
        with self.assertRaises(PersistenceError):
            await self._create(machine)
        self.assertEqual(self._analysis_rows(), 0)


if __name__ == "__main__":
    unittest.main()
