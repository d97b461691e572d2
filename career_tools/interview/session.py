from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from career_tools.core.errors import (
    InvalidQuestionIndex,
    PersistenceError,
    RequestValidationFailed,
    SessionCompleted,
    SessionNotFound,
)
from career_tools.pipeline.orchestrator import AnalysisOrchestrator, AnalysisOutcome
from career_tools.schemas.interview import (
    AnalyzeAnswerBody,
    InterviewSession,
    RecordedAnswer,
    SessionSummary,
)
from career_tools.schemas.requests import InterviewAnswerScoreRequest, InterviewQuestionsRequest
from career_tools.storage.db import SQLiteStore

logger = logging.getLogger(__name__)

SUMMARY_LIST_CAP = 5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _dedupe(items: list[str], cap: int = SUMMARY_LIST_CAP) -> list[str]:
    seen: list[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen[:cap]


def summarize_session(session: InterviewSession) -> SessionSummary:
    """Aggregate recorded answers; unanswered questions do not count towards the mean."""
    scores = [answer.score for answer in session.answers]
    overall = round(sum(scores) / len(scores)) if scores else 0

    if overall >= 80:
        verdict = "Excellent performance overall!"
    elif overall >= 60:
        verdict = "Good performance with room for improvement."
    else:
        verdict = "Consider practicing more to improve your interview skills."

    return SessionSummary(
        session_id=session.id,
        overall_score=overall,
        answered_questions=len(session.answers),
        total_questions=len(session.questions),
        feedback=[
            f"You completed the {session.interview_type} interview for {session.role} role.",
            verdict,
            f"Average score: {overall}/100",
        ],
        strengths=_dedupe([s for answer in session.answers for s in answer.strengths]),
        improvements=_dedupe([i for answer in session.answers for i in answer.improvements]),
    )


@dataclass
class AnswerOutcome:
    analysis: AnalysisOutcome
    session: InterviewSession
    summary: Optional[SessionSummary] = None


class InterviewSessionMachine:
    """Interview practice sessions layered on the analysis orchestrator.

    Transitions for one session id run under that session's lock so that two
    concurrent answer submissions cannot overwrite each other's entry in the
    answer list. A lock lives only while some caller holds or waits on it.
    """

    def __init__(self, orchestrator: AnalysisOrchestrator, store: SQLiteStore):
        self._orchestrator = orchestrator
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                del self._locks[session_id]

    def get_session(self, session_id: str, *, user_id: str) -> InterviewSession:
        session = self._store.get(session_id) if session_id else None
        # Another user's session is reported exactly like a missing one.
        if session is None or session.user_id != user_id:
            raise SessionNotFound(f"Interview session '{session_id}' not found")
        return session

    async def create_session(
        self, request: InterviewQuestionsRequest, *, user_id: str
    ) -> tuple[InterviewSession, AnalysisOutcome]:
        outcome = await self._orchestrator.run(request, user_id=user_id)
        session = InterviewSession(
            id=uuid.uuid4().hex,
            user_id=user_id,
            role=request.role,
            interview_type=request.interview_type,
            difficulty=request.difficulty,
            questions=outcome.result.questions,
            created_at=_utc_now(),
        )
        try:
            self._store.create_session(session)
        except PersistenceError:
            self._store.delete_analysis(outcome.record_id)
            raise
        logger.info(
            "interview_session_created id=%s questions=%s used_fallback=%s",
            session.id,
            len(session.questions),
            outcome.used_fallback,
        )
        return session, outcome

    async def submit_answer(self, body: AnalyzeAnswerBody, *, user_id: str) -> AnswerOutcome:
        missing = []
        if not body.session_id:
            missing.append("sessionId")
        if body.question_index is None:
            missing.append("questionIndex")
        if missing:
            raise RequestValidationFailed(
                f"Missing required fields: {', '.join(missing)}", missing_fields=missing
            )

        self.get_session(body.session_id, user_id=user_id)
        async with self._session_lock(body.session_id):
            session = self.get_session(body.session_id, user_id=user_id)
            if session.status == "completed":
                raise SessionCompleted(f"Interview session '{session.id}' is already completed")
            if not 0 <= body.question_index < len(session.questions):
                raise InvalidQuestionIndex(
                    f"Question index {body.question_index} is out of range for "
                    f"{len(session.questions)} questions"
                )

            question = session.questions[body.question_index]
            request = InterviewAnswerScoreRequest(
                session_id=session.id,
                question_index=body.question_index,
                question=question.question,
                category=question.category,
                transcript=body.transcript,
                role=session.role,
                interview_type=session.interview_type,
            )
            outcome = await self._orchestrator.run(request, user_id=user_id)

            recorded = RecordedAnswer(
                question_index=body.question_index,
                transcript=body.transcript,
                score=outcome.result.score,
                feedback=outcome.result.feedback,
                strengths=outcome.result.strengths,
                improvements=outcome.result.improvements,
                used_fallback=outcome.used_fallback,
                answered_at=outcome.created_at,
            )
            answers = [a for a in session.answers if a.question_index != body.question_index]
            answers.append(recorded)
            answers.sort(key=lambda a: a.question_index)
            session = self._store.update(session.id, {"answers": answers})

            summary = None
            if len(session.answers) == len(session.questions):
                session, summary = self._complete(session)
            return AnswerOutcome(analysis=outcome, session=session, summary=summary)

    async def complete_session(self, session_id: str, *, user_id: str) -> SessionSummary:
        if not session_id:
            raise RequestValidationFailed("Missing required fields: sessionId", missing_fields=["sessionId"])

        self.get_session(session_id, user_id=user_id)
        async with self._session_lock(session_id):
            session = self.get_session(session_id, user_id=user_id)
            if session.status == "completed":
                return summarize_session(session)
            _, summary = self._complete(session)
            return summary

    def _complete(self, session: InterviewSession) -> tuple[InterviewSession, SessionSummary]:
        summary = summarize_session(session)
        session = self._store.update(
            session.id,
            {
                "status": "completed",
                "overall_score": summary.overall_score,
                "feedback": summary.feedback,
                "strengths": summary.strengths,
                "improvements": summary.improvements,
                "completed_at": _utc_now(),
            },
        )
        logger.info(
            "interview_session_completed id=%s overall_score=%s answered=%s/%s",
            session.id,
            summary.overall_score,
            summary.answered_questions,
            summary.total_questions,
        )
        return session, summary
