import logging
import time

logger = logging.getLogger(__name__)

# ────────────────────────────────
# Time Helpers
# ────────────────────────────────


def now() -> float:
    return time.perf_counter()


def elapsed_ms(start: float) -> float:
    return (now() - start) * 1000.0


# ────────────────────────────────
# Header Parsing
# ────────────────────────────────


def parse_header(raw: str) -> tuple[str, str]:
    """Split a curl-style ``"Name: value"`` header into its parts."""
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Invalid header {raw!r}, expected 'Name: value'")
    return name, value.strip()


def parse_headers(raw_headers: list[str] | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in raw_headers or []:
        name, value = parse_header(raw)
        if name in headers:
            logger.debug(f"Header {name} given twice, keeping the last value")
        headers[name] = value
    return headers
