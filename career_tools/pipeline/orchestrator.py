from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Protocol

from pydantic import BaseModel

from career_tools.ai.types import ModelClient
from career_tools.core.errors import OutputError, UpstreamFailure, UpstreamTimeout
from career_tools.pipeline.fallback import synthesize_fallback
from career_tools.pipeline.grading import is_substantive
from career_tools.pipeline.parser import parse_response
from career_tools.pipeline.prompts import build_prompt
from career_tools.pipeline.validator import validate_request
from career_tools.schemas.common import AnalysisKind
from career_tools.schemas.requests import AnalysisRequest, InterviewAnswerScoreRequest
from career_tools.schemas.results import AnalysisResult

logger = logging.getLogger(__name__)

SKIPPED_SHORT_INPUT = "skipped_short_input"


class PipelineState(str, Enum):
    VALIDATING = "validating"
    PROMPTING = "prompting"
    CALLING = "calling"
    PARSING = "parsing"
    SUCCEEDED = "succeeded"
    FALLING_BACK = "falling_back"
    PERSISTED = "persisted"


class AnalysisStore(Protocol):
    def insert(
        self,
        kind: AnalysisKind,
        request: BaseModel,
        result: BaseModel,
        *,
        user_id: str,
        used_fallback: bool,
        error_code: Optional[str] = None,
        model: Optional[str] = None,
        latency_ms: Optional[int] = None,
    ) -> tuple[str, datetime]: ...


@dataclass
class AnalysisOutcome:
    record_id: str
    kind: AnalysisKind
    result: AnalysisResult
    used_fallback: bool
    created_at: datetime
    error_code: Optional[str] = None
    states: list[PipelineState] = field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.record_id,
            "kind": self.kind.value,
            "usedFallback": self.used_fallback,
            "createdAt": self.created_at.isoformat(),
            **self.result.to_wire(),
        }


def should_skip_model(request: AnalysisRequest) -> bool:
    """Requests whose outcome the model cannot improve go straight to the fallback."""
    if isinstance(request, InterviewAnswerScoreRequest):
        return not is_substantive(request.transcript)
    return False


class AnalysisOrchestrator:
    """Runs one analysis: validate, prompt, call, parse or fall back, persist.

    Upstream and output failures never leave this class; they are logged and
    replaced by the deterministic fallback. Validation and persistence errors
    propagate to the caller.
    """

    def __init__(self, client: ModelClient, store: AnalysisStore, *, timeout_s: float = 20.0):
        self._client = client
        self._store = store
        self._timeout_s = timeout_s

    async def _call_model(self, request: AnalysisRequest) -> str:
        prompt = build_prompt(request)
        try:
            return await asyncio.wait_for(
                self._client.complete(prompt, timeout_s=self._timeout_s),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeout(f"Model call exceeded {self._timeout_s:.1f}s") from exc

    async def run(self, request: AnalysisRequest, *, user_id: str) -> AnalysisOutcome:
        states = [PipelineState.VALIDATING]
        request = validate_request(request.model_copy(update={"user_id": user_id}))
        kind = request.kind

        states.append(PipelineState.PROMPTING)
        started = time.perf_counter()
        result: Optional[AnalysisResult] = None
        error_code: Optional[str] = None

        if should_skip_model(request):
            error_code = SKIPPED_SHORT_INPUT
            logger.info("analysis_model_skipped kind=%s reason=short_input", kind.value)
        else:
            states.append(PipelineState.CALLING)
            try:
                raw = await self._call_model(request)
                states.append(PipelineState.PARSING)
                result = parse_response(raw, request)
                states.append(PipelineState.SUCCEEDED)
            except (UpstreamFailure, OutputError) as exc:
                error_code = exc.code
                logger.warning(
                    "analysis_fallback kind=%s code=%s error=%s", kind.value, exc.code, exc
                )

        if result is None:
            states.append(PipelineState.FALLING_BACK)
            result = synthesize_fallback(request)

        used_fallback = PipelineState.FALLING_BACK in states
        latency_ms = int((time.perf_counter() - started) * 1000)
        record_id, created_at = self._store.insert(
            kind,
            request,
            result,
            user_id=user_id,
            used_fallback=used_fallback,
            error_code=error_code,
            model=getattr(self._client, "model", None),
            latency_ms=latency_ms,
        )
        states.append(PipelineState.PERSISTED)
        logger.info(
            "analysis_completed kind=%s id=%s used_fallback=%s latency_ms=%s",
            kind.value,
            record_id,
            used_fallback,
            latency_ms,
        )
        return AnalysisOutcome(
            record_id=record_id,
            kind=kind,
            result=result,
            used_fallback=used_fallback,
            created_at=created_at,
            error_code=error_code,
            states=states,
        )
