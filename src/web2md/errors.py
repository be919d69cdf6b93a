from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_URL = "INVALID_URL"
    INVALID_INPUT = "INVALID_INPUT"
    FETCH_FAILED = "FETCH_FAILED"


class Web2MdError(Exception):
    """Raised by tool handlers for all expected failure conditions.

    Caught by server.py and serialised into the MCP error response.
    Never catch this inside business logic; let it propagate to the
    MCP layer so the agent receives a structured error with a suggestion.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class FetchError(Exception):
    """A single fetch path (rendered or direct) failed.

    Internal to the fetcher: the fallback state machine consumes these and
    raises a ``Web2MdError`` once every path is exhausted.
    """

    def __init__(self, method: str, url: str, reason: str) -> None:
        super().__init__(f"{method} fetch of {url} failed: {reason}")
        self.method = method
        self.url = url
        self.reason = reason
