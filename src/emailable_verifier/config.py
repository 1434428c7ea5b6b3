"""Runtime configuration model."""

from __future__ import annotations

from dataclasses import dataclass

from .validation import validate_runtime_constraints

DEFAULT_BASE_URL = "https://api.emailable.com/v1"
DEFAULT_USER_AGENT = "emailable-verifier/1.0"
DEFAULT_REQUEST_TIMEOUT = 40.0
DEFAULT_CHUNK_SIZE = 999


@dataclass(frozen=True)
class ClientConfig:
    """Validated configuration used to build an Emailable client."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    show_progress: bool = True

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key='***', base_url={self.base_url!r}, "
            f"request_timeout={self.request_timeout!r}, chunk_size={self.chunk_size!r})"
        )

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            api_key=self.api_key,
            base_url=self.base_url,
            request_timeout=self.request_timeout,
            chunk_size=self.chunk_size,
        )
