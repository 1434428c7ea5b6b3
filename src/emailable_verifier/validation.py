"""Validation and runtime guardrails."""

from __future__ import annotations

from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

from .errors import ConfigError

MIN_VERIFY_TIMEOUT = 5
MAX_VERIFY_TIMEOUT = 30
MAX_BATCH_SIZE = 1000
REPLACEMENT_CHARACTER = "\ufffd"


def clamp_timeout(timeout: int) -> int:
    """Force a verification timeout into the range the API accepts."""
    if timeout < MIN_VERIFY_TIMEOUT:
        return MIN_VERIFY_TIMEOUT
    if timeout > MAX_VERIFY_TIMEOUT:
        return MAX_VERIFY_TIMEOUT
    return timeout


def is_valid_address(value: str) -> bool:
    """Return True when value is a syntactically valid mail address.

    Only the syntax is checked; no DNS lookups are made. Quoted local parts,
    bracketed IP domains and dotless or ``.test`` domains are accepted.
    email-validator still rejects reserved names such as ``localhost`` and
    ``.local``. Lines holding U+FFFD come from undecodable input and are rejected.
    """
    if not value or REPLACEMENT_CHARACTER in value:
        return False
    try:
        validate_email(
            value,
            check_deliverability=False,
            allow_quoted_local=True,
            allow_domain_literal=True,
            globally_deliverable=False,
            test_environment=True,
        )
    except EmailNotValidError:
        return False
    return True


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a hostname."""
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def validate_runtime_constraints(
    *,
    api_key: str,
    base_url: str,
    request_timeout: float,
    chunk_size: int,
) -> None:
    """Validate client configuration and raise ConfigError on invalid values."""
    if not api_key:
        raise ConfigError("Provide --api-key or set EMAILABLE_API_KEY.")
    if not is_supported_url(base_url):
        raise ConfigError(f"--base-url must be an absolute http(s) URL, got {base_url!r}.")
    if request_timeout <= 0:
        raise ConfigError("--request-timeout must be > 0.")
    if not 1 <= chunk_size <= MAX_BATCH_SIZE:
        raise ConfigError(f"--chunk-size must be between 1 and {MAX_BATCH_SIZE}.")
