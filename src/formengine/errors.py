from __future__ import annotations


class FormEngineError(Exception):
    """Base class for every error raised by formengine."""


class SchemaError(FormEngineError):
    """A form configuration failed structural checks."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "Invalid form configuration")
        self.errors = errors


class SubmissionInProgressError(FormEngineError):
    """handle_submit was called while another submission was in flight."""


class SubmissionError(FormEngineError):
    """The submission backend did not accept a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RateLimitedError(SubmissionError):
    pass


class RejectedError(SubmissionError):
    pass


class TransportError(SubmissionError):
    pass
