from collections.abc import Sequence

from .models import AttemptOutcome, Stats


def _pct(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0


def _section(title: str) -> list[str]:
    return ["", title, "=" * len(title)]


def render_summary(stats: Stats) -> str:
    lines = _section("Test Results Summary")
    lines.append(f"Total Requests: {stats.total}")
    lines.append(
        f"Successful Requests: {stats.success} ({_pct(stats.success, stats.total):.2f}%)"
    )
    lines.append(f"Failed Requests: {stats.failed} ({_pct(stats.failed, stats.total):.2f}%)")

    lines += _section("Response Time Statistics")
    lines.append(f"Average Response Time: {stats.mean:.2f}ms")
    lines.append(f"Minimum Response Time: {stats.min:.2f}ms")
    lines.append(f"Maximum Response Time: {stats.max:.2f}ms")
    lines.append(f"Standard Deviation: {stats.std:.2f}ms")
    lines.append(f"50th Percentile: {stats.p50:.2f}ms")
    lines.append(f"90th Percentile: {stats.p90:.2f}ms")
    lines.append(f"95th Percentile: {stats.p95:.2f}ms")
    lines.append(f"99th Percentile: {stats.p99:.2f}ms")
    return "\n".join(lines)


def render_status_distribution(stats: Stats) -> str:
    lines = _section("Status Code Distribution")
    for code, count in stats.status_counts.items():
        label = "Transport failure" if code < 0 else f"Status {code}"
        lines.append(f"{label}: {count} requests ({_pct(count, stats.total):.2f}%)")
    return "\n".join(lines)


def render_retry_distribution(stats: Stats) -> str:
    lines = _section("Retry Distribution")
    for retries, count in stats.retry_counts.items():
        lines.append(f"{retries} retries: {count} requests ({_pct(count, stats.total):.2f}%)")
    return "\n".join(lines)


def render_details(outcomes: Sequence[AttemptOutcome]) -> str:
    lines = _section("Detailed Results")
    for i, o in enumerate(outcomes, start=1):
        lines.append("")
        lines.append(f"Request #{i}:")
        lines.append(f"URL: {o.request_url}")
        lines.append(f"Method: {o.request_method}")
        lines.append(f"Status Code: {o.status}")
        lines.append(f"Response Time: {o.elapsed_ms:.2f}ms")
        lines.append(f"Retry Count: {o.retry_count}")
        lines.append(f"Success: {o.success}")
        lines.append("Request Headers:")
        for k, v in o.request_headers.items():
            lines.append(f"  {k}: {v}")
        if o.request_body:
            lines.append(f"Request Body: {o.request_body}")
        lines.append("Response Headers:")
        for k, values in o.response_headers.items():
            lines.append(f"  {k}: {', '.join(values)}")
        lines.append(f"Response Body: {o.body}")
    return "\n".join(lines)


def render_latency_histogram(latencies_ms: Sequence[float], bins: int = 20) -> str:
    if not latencies_ms:
        return "No latency data."
    lo, hi = min(latencies_ms), max(latencies_ms)
    if hi <= lo:
        return f"Histogram: single value {lo:.2f}ms"

    width = 40
    counts = [0] * bins
    for x in latencies_ms:
        j = int((x - lo) / (hi - lo) * bins)
        if j == bins:
            j -= 1
        counts[j] += 1

    peak = max(counts)
    lines = []
    for i, c in enumerate(counts):
        left = lo + (hi - lo) * (i / bins)
        right = lo + (hi - lo) * ((i + 1) / bins)
        bar = "#" * max(1, int((c / peak) * width)) if c else ""
        lines.append(f"{left:8.2f}ms - {right:8.2f}ms | {bar} ({c})")
    return "Latency Histogram\n" + "\n".join(lines)


def render_report(
    stats: Stats,
    outcomes: Sequence[AttemptOutcome],
    details: bool = True,
    histogram_bins: int = 20,
) -> str:
    parts = [
        render_summary(stats),
        render_status_distribution(stats),
        render_retry_distribution(stats),
        "",
        render_latency_histogram([o.elapsed_ms for o in outcomes], histogram_bins),
    ]
    if details:
        parts.append(render_details(outcomes))
    return "\n".join(parts)
