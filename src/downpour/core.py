import asyncio
import logging
from contextlib import AsyncExitStack

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .builder import resolve_method
from .metrics import compute_stats
from .models import AttemptOutcome, EndpointConfig, MetricsCallback, RequestTemplate, Stats
from .retry import RetryController
from .transport import AiohttpTransport, Transport
from .utils import now

logger = logging.getLogger(__name__)


class RequestDownpour:
    """Fires ``config.concurrency`` identical requests at once and collects one
    outcome per lane.

    Each run gets its own worker pool (a queue plus exactly ``concurrency``
    worker tasks) and, unless a transport was injected, its own HTTP session.
    Nothing outlives ``run()``.
    """

    def __init__(
        self,
        config: EndpointConfig,
        transport: Transport | None = None,
        use_progress_bar: bool = True,
        metrics_callback: MetricsCallback | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.use_progress_bar = use_progress_bar
        self.metrics_callback = metrics_callback

        logger.info(
            f"Initialized Downpour for {config.base_url}, "
            f"concurrency={config.concurrency}, max_retries={config.max_retries}, "
            f"timeout={config.timeout_s}s"
        )

    # ────────────────────────────────
    # Main Runner
    # ────────────────────────────────

    async def run(self, template: RequestTemplate) -> list[AttemptOutcome]:
        lanes = self.config.concurrency
        logger.info(f"Starting {lanes} x {resolve_method(template.method)} {template.endpoint or '/'}")

        async with AsyncExitStack() as stack:
            transport = self.transport
            if transport is None:
                transport = await stack.enter_async_context(
                    AiohttpTransport(connection_limit=lanes)
                )
            controller = RetryController(transport, self.config)

            q: asyncio.Queue[int] = asyncio.Queue()
            for lane in range(lanes):
                q.put_nowait(lane)
            results: list[AttemptOutcome | None] = [None] * lanes

            progress = None
            task_id = None
            if self.use_progress_bar:
                progress = stack.enter_context(
                    Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        BarColumn(),
                        MofNCompleteColumn(),
                        TimeElapsedColumn(),
                    )
                )
                task_id = progress.add_task("[cyan]Pouring...", total=lanes)

            async def worker(worker_id: int):
                while True:
                    try:
                        lane = q.get_nowait()
                    except asyncio.QueueEmpty:
                        break
                    try:
                        results[lane] = await controller.execute(template, lane)
                        if progress and task_id is not None:
                            progress.advance(task_id)
                    finally:
                        q.task_done()
                logger.debug(f"Worker {worker_id} stopped")

            t0 = now()
            await asyncio.gather(*(worker(i) for i in range(lanes)))
            logger.info(f"All {lanes} lanes finished in {now() - t0:.2f}s")

        missing = [lane for lane, r in enumerate(results) if r is None]
        if missing:
            raise RuntimeError(f"lanes {missing} finished without an outcome")
        return results

    async def run_with_stats(
        self, template: RequestTemplate
    ) -> tuple[list[AttemptOutcome], Stats]:
        outcomes = await self.run(template)
        stats = compute_stats(outcomes, self.metrics_callback)
        logger.info(
            f"Run completed: {stats.success} succeeded, {stats.failed} failed, "
            f"error_rate={stats.error_rate * 100:.2f}%"
        )
        return outcomes, stats
