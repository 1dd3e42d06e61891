import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


def default_success(status: int, body: str) -> bool:
    return 200 <= status < 300


def classify(predicate: Callable[[int, str], bool], status: int, body: str) -> bool:
    """Run the caller's success predicate over one completed exchange.

    A predicate that raises is treated as a failed check, not a crashed lane.
    """
    try:
        return bool(predicate(status, body))
    except Exception as e:
        logger.warning(f"Success predicate raised for status={status}: {e!r}")
        return False


def expect(
    statuses: list[int] | None = None, body_contains: str | None = None
) -> Callable[[int, str], bool]:
    """Build a predicate from an allowed status set and/or a required body substring."""
    if not statuses and body_contains is None:
        return default_success

    allowed = frozenset(statuses or ())

    def predicate(status: int, body: str) -> bool:
        if allowed and status not in allowed:
            return False
        if not allowed and not default_success(status, body):
            return False
        if body_contains is not None and body_contains not in body:
            return False
        return True

    return predicate
