import asyncio
from collections import defaultdict

import pytest

from downpour.errors import TransportError
from downpour.models import PreparedRequest, TransportResponse


class FakeTransport:
    """Scripted transport.

    Each lane runs in its own worker task, so attempts are counted per task:
    the first ``fail_first`` attempts of every lane raise TransportError and
    later ones answer with ``status``/``body``.
    """

    def __init__(
        self,
        status: int = 200,
        body: str = "ok",
        headers: dict[str, list[str]] | None = None,
        fail_first: int = 0,
        always_fail: bool = False,
        delay: float = 0.0,
    ):
        self.status = status
        self.body = body
        self.headers = headers or {}
        self.fail_first = fail_first
        self.always_fail = always_fail
        self.delay = delay
        self.requests: list[PreparedRequest] = []
        self.attempts_by_task: dict[int, int] = defaultdict(int)
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, request: PreparedRequest) -> TransportResponse:
        self.requests.append(request)
        key = id(asyncio.current_task())
        self.attempts_by_task[key] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if self.always_fail or self.attempts_by_task[key] <= self.fail_first:
            raise TransportError("connection refused")
        return TransportResponse(status=self.status, body=self.body, headers=self.headers)


@pytest.fixture
def fake_transport():
    return FakeTransport()
