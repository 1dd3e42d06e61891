import math
import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import asdict

from .errors import EmptyResultsError
from .models import AttemptOutcome, MetricsCallback, Stats

logger = logging.getLogger(__name__)


def percentile(sorted_times: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: element at floor(n * p), clamped to the last index."""
    n = len(sorted_times)
    if n == 0:
        raise EmptyResultsError("percentile of an empty sequence is undefined")
    return sorted_times[max(0, min(n - 1, math.floor(n * p)))]


def compute_stats(
    outcomes: Sequence[AttemptOutcome],
    metrics_callback: MetricsCallback | None = None,
) -> Stats:
    total = len(outcomes)
    if not total:
        raise EmptyResultsError("cannot compute statistics over zero outcomes")

    success = sum(1 for o in outcomes if o.success)
    failed = total - success
    logger.debug(f"Computing stats: total={total}, success={success}, failed={failed}")

    sl = sorted(o.elapsed_ms for o in outcomes)
    mean = sum(sl) / total
    variance = sum((x - mean) ** 2 for x in sl) / total
    std = math.sqrt(variance)

    stats = Stats(
        total=total,
        success=success,
        failed=failed,
        mean=mean,
        std=std,
        min=sl[0],
        max=sl[-1],
        p50=percentile(sl, 0.50),
        p90=percentile(sl, 0.90),
        p95=percentile(sl, 0.95),
        p99=percentile(sl, 0.99),
        success_rate=success / total,
        error_rate=failed / total,
        status_counts=dict(sorted(Counter(o.status for o in outcomes).items())),
        retry_counts=dict(sorted(Counter(o.retry_count for o in outcomes).items())),
    )

    if metrics_callback:
        metrics_callback(asdict(stats))

    logger.info(
        f"Stats computed: success={success}, failed={failed}, "
        f"mean={mean:.1f}ms, p95={stats.p95:.1f}ms, error_rate={stats.error_rate * 100:.1f}%"
    )

    return stats
