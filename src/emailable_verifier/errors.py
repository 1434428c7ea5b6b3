"""Custom exceptions for the Emailable client."""

from __future__ import annotations


class EmailableError(Exception):
    """Base exception for this project."""


class ConfigError(EmailableError):
    """Raised when runtime configuration is invalid."""


class BatchSizeError(EmailableError):
    """Raised when a batch carries more addresses than the API accepts."""


class DecodeError(EmailableError):
    """Raised when a response body does not match the expected schema."""


class UpstreamError(EmailableError):
    """Raised when the API answers with a non-success status code."""

    retryable = False

    def __init__(self, status_code: int, body: str = "", message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"invalid status code: {status_code}")


class UpstreamBusyError(UpstreamError):
    """The API is still processing the verification (HTTP 249); send it again later."""

    retryable = True

    def __init__(self, body: str = "") -> None:
        super().__init__(
            249,
            body,
            "your request is taking longer than normal. please send your request again",
        )
