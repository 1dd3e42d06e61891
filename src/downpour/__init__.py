__all__ = [
    "RequestDownpour",
    "RetryController",
    "EndpointConfig",
    "RequestTemplate",
    "AttemptOutcome",
    "Stats",
    "AiohttpTransport",
    "build_request",
    "compute_stats",
    "default_success",
    "expect",
    "render_report",
    "ConfigError",
    "EmptyResultsError",
    "TransportError",
]


from .builder import build_request
from .classifier import default_success, expect
from .core import RequestDownpour
from .errors import ConfigError, EmptyResultsError, TransportError
from .metrics import compute_stats
from .models import AttemptOutcome, EndpointConfig, RequestTemplate, Stats
from .rendering import render_report
from .retry import RetryController
from .transport import AiohttpTransport
