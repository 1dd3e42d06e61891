import asyncio
import logging
from typing import Protocol

import aiohttp

from .errors import TransportError
from .models import PreparedRequest, TransportResponse

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, request: PreparedRequest) -> TransportResponse:
        """Send one request; raise TransportError if no response came back."""
        ...


def _collect_headers(raw) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for k, v in raw.items():
        headers.setdefault(k, []).append(v)
    return headers


class AiohttpTransport:
    """Transport backed by a single aiohttp session, shared by every lane of a run."""

    def __init__(self, connection_limit: int = 0, session: aiohttp.ClientSession | None = None):
        self.connection_limit = connection_limit
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AiohttpTransport":
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=self.connection_limit)
            self._session = aiohttp.ClientSession(connector=connector)
            logger.debug(f"Opened HTTP session (connection limit={self.connection_limit})")
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            logger.debug("Closed HTTP session")
        self._session = None

    async def send(self, request: PreparedRequest) -> TransportResponse:
        if self._session is None:
            raise RuntimeError("AiohttpTransport used outside 'async with'")
        timeout = aiohttp.ClientTimeout(total=request.timeout_s)
        try:
            async with self._session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=timeout,
            ) as resp:
                body = await resp.text(errors="replace")
                logger.debug(
                    f"{request.method} {request.url}: status={resp.status}, size={len(body)} chars"
                )
                return TransportResponse(
                    status=resp.status, body=body, headers=_collect_headers(resp.headers)
                )
        except asyncio.TimeoutError:
            logger.warning(f"Timeout after {request.timeout_s}s for {request.method} {request.url}")
            raise TransportError(f"request timed out after {request.timeout_s}s") from None
        except aiohttp.ClientError as e:
            logger.warning(f"Connection error for {request.method} {request.url}: {e}")
            raise TransportError(str(e) or type(e).__name__) from e
