"""Wire records and protocols for the Emailable API."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Protocol

from .errors import DecodeError
from .validation import MIN_VERIFY_TIMEOUT, clamp_timeout

JsonDict = dict[str, Any]


class SimulateValue(str, Enum):
    """Responses a test key can ask the API to simulate."""

    GENERIC_ERROR = "generic_error"
    INSUFFICIENT_CREDITS_ERROR = "insufficient_credits_error"
    PAYMENT_ERROR = "payment_error"
    CARD_ERROR = "card_error"


def _expect_object(payload: Any, name: str) -> JsonDict:
    if not isinstance(payload, dict):
        raise DecodeError(f"{name} payload must be a JSON object, got {type(payload).__name__}")
    return payload


def _opt_str(data: JsonDict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _bool(data: JsonDict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


def _int(data: JsonDict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _float(data: JsonDict, key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _simulate(data: JsonDict, key: str) -> SimulateValue | None:
    value = _opt_str(data, key)
    if not value:
        return None
    try:
        return SimulateValue(value)
    except ValueError as exc:
        raise DecodeError(f"unknown simulate value {value!r}") from exc


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class VerifyRequest:
    """Parameters of a single-address verification."""

    email: str
    smtp: bool = False
    accept_all: bool = False
    timeout: int = MIN_VERIFY_TIMEOUT
    api_key: str | None = field(default=None, repr=False)

    def to_params(self, api_key: str) -> dict[str, str]:
        """Build the query string; the timeout is clamped here, never rejected."""
        params = {
            "email": self.email,
            "smtp": _flag(self.smtp),
            "timeout": str(clamp_timeout(self.timeout)),
            "api_key": api_key,
        }
        if self.accept_all:
            params["accept_all"] = "true"
        return params


@dataclass(frozen=True)
class VerifyResponse:
    """Verdict for one address, as returned by /verify or inside a batch status."""

    accept_all: bool = False
    did_you_mean: str | None = None
    disposable: bool = False
    domain: str | None = None
    duration: float = 0.0
    email: str | None = None
    first_name: str | None = None
    free: bool = False
    full_name: str | None = None
    gender: str | None = None
    last_name: str | None = None
    mx_record: str | None = None
    reason: str | None = None
    role: bool = False
    score: int = 0
    smtp_provider: str | None = None
    state: str | None = None
    tag: str | None = None
    user: str | None = None

    @classmethod
    def from_dict(cls, payload: Any) -> VerifyResponse:
        data = _expect_object(payload, "verify")
        return cls(
            accept_all=_bool(data, "accept_all"),
            did_you_mean=_opt_str(data, "did_you_mean"),
            disposable=_bool(data, "disposable"),
            domain=_opt_str(data, "domain"),
            duration=_float(data, "duration"),
            email=_opt_str(data, "email"),
            first_name=_opt_str(data, "first_name"),
            free=_bool(data, "free"),
            full_name=_opt_str(data, "full_name"),
            gender=_opt_str(data, "gender"),
            last_name=_opt_str(data, "last_name"),
            mx_record=_opt_str(data, "mx_record"),
            reason=_opt_str(data, "reason"),
            role=_bool(data, "role"),
            score=_int(data, "score"),
            smtp_provider=_opt_str(data, "smtp_provider"),
            state=_opt_str(data, "state"),
            tag=_opt_str(data, "tag"),
            user=_opt_str(data, "user"),
        )

    def to_dict(self) -> JsonDict:
        return asdict(self)


@dataclass(frozen=True)
class BatchRequest:
    """Addresses submitted together for asynchronous verification."""

    emails: tuple[str, ...]
    url: str | None = None
    retries: bool = False
    simulate: SimulateValue | None = None
    api_key: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "emails", tuple(self.emails))
        if self.simulate is not None:
            object.__setattr__(self, "simulate", SimulateValue(self.simulate))

    def to_dict(self) -> JsonDict:
        """Serialize to the POST /batch body; unset optional keys are left out."""
        payload: JsonDict = {"emails": list(self.emails), "retries": self.retries}
        if self.url:
            payload["url"] = self.url
        if self.simulate is not None:
            payload["simulate"] = self.simulate.value
        if self.api_key:
            payload["api_key"] = self.api_key
        return payload

    @classmethod
    def from_dict(cls, payload: Any) -> BatchRequest:
        data = _expect_object(payload, "batch request")
        emails = data.get("emails")
        if emails is None:
            emails = []
        if not isinstance(emails, list) or not all(isinstance(item, str) for item in emails):
            raise DecodeError("field 'emails' must be a list of strings")
        return cls(
            emails=tuple(emails),
            url=_opt_str(data, "url"),
            retries=_bool(data, "retries"),
            simulate=_simulate(data, "simulate"),
            api_key=_opt_str(data, "api_key"),
        )


@dataclass(frozen=True)
class BatchResponse:
    """Acknowledgment of a submitted batch."""

    message: str = ""
    id: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> BatchResponse:
        data = _expect_object(payload, "batch")
        return cls(message=_opt_str(data, "message") or "", id=_opt_str(data, "id") or "")

    def to_dict(self) -> JsonDict:
        return asdict(self)


@dataclass(frozen=True)
class BatchStatusRequest:
    """Poll for the progress and results of a batch."""

    id: str
    partial: bool = False
    simulate: SimulateValue | None = None
    api_key: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.simulate is not None:
            object.__setattr__(self, "simulate", SimulateValue(self.simulate))

    def to_params(self, api_key: str) -> dict[str, str]:
        params = {"api_key": api_key, "id": self.id}
        if self.partial:
            params["partial"] = "true"
        if self.simulate is not None:
            params["simulate"] = self.simulate.value
        return params


@dataclass(frozen=True)
class ReasonCounts:
    """Per-reason tallies of a batch."""

    accepted_email: int = 0
    invalid_domain: int = 0
    invalid_email: int = 0
    invalid_smtp: int = 0
    low_deliverability: int = 0
    low_quality: int = 0
    no_connect: int = 0
    rejected_email: int = 0
    timeout: int = 0
    unavailable_smtp: int = 0
    unexpected_error: int = 0

    @classmethod
    def from_dict(cls, payload: Any) -> ReasonCounts:
        if payload is None:
            return cls()
        data = _expect_object(payload, "reason_counts")
        return cls(**{item.name: _int(data, item.name) for item in fields(cls)})


@dataclass(frozen=True)
class TotalCounts:
    """Per-state tallies of a batch."""

    deliverable: int = 0
    processed: int = 0
    risky: int = 0
    total: int = 0
    undeliverable: int = 0
    unknown: int = 0

    @classmethod
    def from_dict(cls, payload: Any) -> TotalCounts:
        if payload is None:
            return cls()
        data = _expect_object(payload, "total_counts")
        return cls(**{item.name: _int(data, item.name) for item in fields(cls)})


@dataclass(frozen=True)
class BatchStatusResponse:
    """Progress of a batch and, once available, its per-address results."""

    message: str = ""
    processed: int = 0
    total: int = 0
    emails: tuple[VerifyResponse, ...] = ()
    id: str = ""
    reason_counts: ReasonCounts = field(default_factory=ReasonCounts)
    total_counts: TotalCounts = field(default_factory=TotalCounts)

    @property
    def is_complete(self) -> bool:
        return bool(self.emails) or (self.total > 0 and self.processed >= self.total)

    @classmethod
    def from_dict(cls, payload: Any) -> BatchStatusResponse:
        data = _expect_object(payload, "batch status")
        raw_emails = data.get("emails")
        if raw_emails is None:
            raw_emails = []
        if not isinstance(raw_emails, list):
            raise DecodeError("field 'emails' must be a list")
        return cls(
            message=_opt_str(data, "message") or "",
            processed=_int(data, "processed"),
            total=_int(data, "total"),
            emails=tuple(VerifyResponse.from_dict(item) for item in raw_emails),
            id=_opt_str(data, "id") or "",
            reason_counts=ReasonCounts.from_dict(data.get("reason_counts")),
            total_counts=TotalCounts.from_dict(data.get("total_counts")),
        )

    def to_dict(self) -> JsonDict:
        return asdict(self)


class EmailableClientProtocol(Protocol):
    """Contract the batching helper needs from a client."""

    def new_batch_request(self, emails: Sequence[str]) -> BatchRequest:
        """Return a batch request populated with defaults."""

    def batch_verify(self, request: BatchRequest) -> BatchResponse:
        """Submit one batch."""
