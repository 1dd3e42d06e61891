import logging

from .builder import build_request
from .classifier import classify
from .errors import TransportError
from .models import (
    FAILED_STATUS,
    AttemptOutcome,
    EndpointConfig,
    PreparedRequest,
    RequestTemplate,
    TransportResponse,
)
from .transport import Transport
from .utils import now, elapsed_ms

logger = logging.getLogger(__name__)


class RetryController:
    """Drives one logical request through its attempts.

    Only failures to get a response are retried; an unexpected exception from
    the transport counts as one. Any HTTP response, whatever the status, ends
    the loop and is handed to the success predicate.
    """

    def __init__(self, transport: Transport, config: EndpointConfig):
        self.transport = transport
        self.config = config

    async def execute(self, template: RequestTemplate, lane: int = 0) -> AttemptOutcome:
        started = now()
        attempt = 0
        while True:
            request = build_request(template, self.config)
            logger.debug(f"[L{lane:02d}] Attempt {attempt + 1} {request.method} {request.url}")
            try:
                response = await self.transport.send(request)
            except TransportError as e:
                error = e
            except Exception as e:
                logger.error(f"[L{lane:02d}] Unexpected error sending {request.url}: {e!r}")
                error = TransportError(f"{type(e).__name__}: {e}")
            else:
                error = None

            if error is not None:
                if attempt < self.config.max_retries:
                    attempt += 1
                    logger.debug(f"[L{lane:02d}] Transport error ({error.cause}), retrying immediately")
                    continue
                outcome = self._failed(request, error, elapsed_ms(started), attempt)
                logger.warning(
                    f"[L{lane:02d}] Failed {request.url} after {attempt + 1} attempts: {error.cause}"
                )
                return outcome

            outcome = self._completed(
                template, request, response, elapsed_ms(started), attempt
            )
            logger.debug(
                f"[L{lane:02d}] Done status={outcome.status} success={outcome.success} "
                f"({outcome.elapsed_ms:.1f}ms, retries={attempt})"
            )
            return outcome

    @staticmethod
    def _completed(
        template: RequestTemplate,
        request: PreparedRequest,
        response: TransportResponse,
        elapsed: float,
        retry_count: int,
    ) -> AttemptOutcome:
        return AttemptOutcome(
            status=response.status,
            body=response.body,
            response_headers=response.headers,
            elapsed_ms=elapsed,
            retry_count=retry_count,
            request_method=request.method,
            request_url=request.url,
            request_headers=request.headers,
            request_body=request.body_text,
            success=classify(template.success_criteria, response.status, response.body),
        )

    @staticmethod
    def _failed(
        request: PreparedRequest, error: TransportError, elapsed: float, retry_count: int
    ) -> AttemptOutcome:
        return AttemptOutcome(
            status=FAILED_STATUS,
            body=f"Error: {error.cause}",
            response_headers={},
            elapsed_ms=elapsed,
            retry_count=retry_count,
            request_method=request.method,
            request_url=request.url,
            request_headers=request.headers,
            request_body=request.body_text,
            success=False,
            error=error.cause,
        )
