import uuid
import asyncio
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timedelta

from downpour.builder import resolve_method
from downpour.core import RequestDownpour
from downpour.models import EndpointConfig, RequestTemplate
from downpour.transport import Transport

logger = logging.getLogger(__name__)

RUN_TTL = timedelta(hours=24)


class RunStatus(BaseModel):
    id: str
    status: str  # "pending", "running", "completed", "failed"
    base_url: str
    endpoint: str
    method: str
    concurrency: int
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    stats: Optional[Dict[str, Any]] = None
    outcomes: List[Dict[str, Any]] = []
    error: Optional[str] = None


class JobManager:
    """Keeps probe runs in memory and executes them as background tasks."""

    def __init__(self, transport: Optional[Transport] = None):
        self.transport = transport
        self.runs: Dict[str, RunStatus] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    def create_run(self, config: EndpointConfig, template: RequestTemplate) -> str:
        run_id = str(uuid.uuid4())
        self.runs[run_id] = RunStatus(
            id=run_id,
            status="pending",
            base_url=config.base_url,
            endpoint=template.endpoint,
            method=resolve_method(template.method),
            concurrency=config.concurrency,
        )

        # Start run in background
        self._tasks[run_id] = asyncio.create_task(self._run(run_id, config, template))
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
        return run_id

    async def _run(self, run_id: str, config: EndpointConfig, template: RequestTemplate):
        run = self.runs[run_id]
        run.status = "running"
        try:
            downpour = RequestDownpour(config, transport=self.transport, use_progress_bar=False)
            outcomes, stats = await downpour.run_with_stats(template)
            run.stats = asdict(stats)
            run.outcomes = [o.to_dict() for o in outcomes]
            run.status = "completed"
        except Exception as e:
            logger.error(f"Run {run_id} failed: {e}")
            run.status = "failed"
            run.error = str(e)
        finally:
            run.completed_at = datetime.now()
            self._tasks.pop(run_id, None)

    async def wait(self, run_id: str) -> Optional[RunStatus]:
        task = self._tasks.get(run_id)
        if task is not None:
            await asyncio.shield(task)
        return self.get_run(run_id)

    def get_run(self, run_id: str) -> Optional[RunStatus]:
        return self.runs.get(run_id)

    def list_runs(self) -> List[RunStatus]:
        return sorted(self.runs.values(), key=lambda x: x.created_at, reverse=True)

    def delete_run(self, run_id: str):
        task = self._tasks.pop(run_id, None)
        if task is not None:
            task.cancel()
        self.runs.pop(run_id, None)

    def evict_older_than(self, cutoff: datetime) -> List[str]:
        stale = [run_id for run_id, run in self.runs.items() if run.created_at < cutoff]
        for run_id in stale:
            logger.info(f"Cleaning up old run: {run_id}")
            self.delete_run(run_id)
        return stale

    async def _cleanup_loop(self):
        """Periodically forget old runs."""
        while True:
            await asyncio.sleep(3600)  # Check every hour
            self.evict_older_than(datetime.now() - RUN_TTL)
