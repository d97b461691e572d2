from __future__ import annotations

from fastapi import status


class AnalysisError(RuntimeError):
    """Base class for every pipeline failure.

    ``code`` is a stable machine-readable identifier, ``status_code`` the HTTP
    status used when the error is surfaced to the caller. Errors that the
    orchestrator absorbs into a fallback never reach the HTTP layer.
    """

    code = "analysis_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class RequestValidationFailed(AnalysisError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        missing_fields: list[str] | None = None,
        invalid_range: list[str] | None = None,
        invalid_content: str | None = None,
    ):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])
        self.invalid_range = list(invalid_range or [])
        self.invalid_content = invalid_content


class AuthenticationFailed(AnalysisError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamFailure(AnalysisError):
    code = "upstream_failure"
    status_code = status.HTTP_502_BAD_GATEWAY


class UpstreamUnavailable(UpstreamFailure):
    code = "upstream_unavailable"


class UpstreamTimeout(UpstreamFailure):
    code = "upstream_timeout"


class UpstreamError(UpstreamFailure):
    code = "upstream_error"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.upstream_status = status_code


class OutputError(AnalysisError):
    code = "output_error"
    status_code = status.HTTP_502_BAD_GATEWAY


class MalformedOutput(OutputError):
    code = "malformed_output"


class SchemaViolation(OutputError):
    code = "schema_violation"

    def __init__(self, message: str, *, missing_keys: list[str] | None = None):
        super().__init__(message)
        self.missing_keys = list(missing_keys or [])


class PersistenceError(AnalysisError):
    code = "persistence_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InvalidQuestionIndex(AnalysisError):
    code = "invalid_question_index"
    status_code = status.HTTP_400_BAD_REQUEST


class SessionNotFound(AnalysisError):
    code = "session_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class SessionCompleted(AnalysisError):
    code = "session_completed"
    status_code = status.HTTP_409_CONFLICT
