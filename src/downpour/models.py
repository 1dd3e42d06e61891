from dataclasses import dataclass, field
from typing import Any
from collections.abc import Callable

from .classifier import default_success
from .errors import ConfigError

# Success predicate: (status, body) -> passed?
SuccessPredicate = Callable[[int, str], bool]

# Metrics callback: callable accepting stats dict
MetricsCallback = Callable[[dict[str, Any]], None]

FAILED_STATUS = -1

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")

_FORBIDDEN_HEADER_CHARS = ("\r", "\n", "\0")


def _checked_headers(headers: dict[str, str] | None, label: str) -> dict[str, str]:
    checked = dict(headers or {})
    for name, value in checked.items():
        if not isinstance(name, str) or not isinstance(value, str):
            raise ConfigError(f"{label} must map strings to strings, got {name!r}: {value!r}")
        if any(c in name or c in value for c in _FORBIDDEN_HEADER_CHARS):
            raise ConfigError(f"{label} entry {name!r} contains CR, LF or NUL")
    return checked


@dataclass(frozen=True)
class EndpointConfig:
    base_url: str
    concurrency: int = 10
    timeout_s: float = 30
    max_retries: int = 3
    default_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.base_url, str):
            raise ConfigError(f"base_url must be a string, got {self.base_url!r}")
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ConfigError(f"concurrency must be an integer, got {self.concurrency!r}")
        if self.concurrency < 1:
            raise ConfigError(f"concurrency must be >= 1, got {self.concurrency}")
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ConfigError(f"max_retries must be an integer, got {self.max_retries!r}")
        if self.max_retries < 0:
            raise ConfigError(f"max_retries must be >= 0, got {self.max_retries}")
        if (
            isinstance(self.timeout_s, bool)
            or not isinstance(self.timeout_s, (int, float))
            or self.timeout_s <= 0
        ):
            raise ConfigError(f"timeout_s must be positive, got {self.timeout_s!r}")
        # private copy so later edits to the caller's dict can't leak in
        object.__setattr__(
            self, "default_headers", _checked_headers(self.default_headers, "default_headers")
        )


@dataclass(frozen=True)
class RequestTemplate:
    endpoint: str = ""
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    success_criteria: SuccessPredicate = default_success

    def __post_init__(self):
        if self.endpoint is None:
            raise ConfigError("endpoint must not be None (use '' for the base URL)")
        if not callable(self.success_criteria):
            raise ConfigError("success_criteria must be callable")
        object.__setattr__(self, "method", self.method or "GET")
        object.__setattr__(self, "headers", _checked_headers(self.headers, "headers"))
        object.__setattr__(self, "body", self.body or "")


@dataclass(frozen=True)
class PreparedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None
    timeout_s: float

    @property
    def body_text(self) -> str:
        return self.body.decode("utf-8") if self.body else ""


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str
    headers: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class AttemptOutcome:
    status: int
    body: str
    response_headers: dict[str, list[str]]
    elapsed_ms: float
    retry_count: int
    request_method: str
    request_url: str
    request_headers: dict[str, str]
    request_body: str
    success: bool
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.error is None

    @property
    def failed_terminally(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "body": self.body,
            "response_headers": self.response_headers,
            "elapsed_ms": self.elapsed_ms,
            "retry_count": self.retry_count,
            "request_method": self.request_method,
            "request_url": self.request_url,
            "request_headers": self.request_headers,
            "request_body": self.request_body,
            "success": self.success,
            "error": self.error,
        }


@dataclass(frozen=True)
class Stats:
    total: int
    success: int
    failed: int
    mean: float
    std: float
    min: float
    max: float
    p50: float
    p90: float
    p95: float
    p99: float
    success_rate: float
    error_rate: float
    status_counts: dict[int, int]
    retry_counts: dict[int, int]
