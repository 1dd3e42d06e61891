"""
Quick sanity probe: ten concurrent POSTs against a local task API.
Run: uv run examples/probe_endpoint.py
"""
import asyncio
import os

from downpour import EndpointConfig, RequestDownpour, RequestTemplate, render_report

BASE_URL = os.getenv("PROBE_BASE_URL", "http://localhost:8080")


async def main():
    config = EndpointConfig(
        base_url=BASE_URL,
        concurrency=10,
        timeout_s=float(os.getenv("HTTP_REQUEST_TIMEOUT_S", "30")),
        max_retries=3,
        default_headers={"Content-Type": "application/json"},
    )
    template = RequestTemplate(
        endpoint="/tasks",
        method="POST",
        headers={"X-Custom-Header": "custom-value"},
        body='{"taskId": "string", "description": "Concurrent API Test", "severity": 1, '
        '"assignee": "string", "storyPoint": 1}',
        success_criteria=lambda status, body: status == 201 and '"success":true' in body,
    )

    d = RequestDownpour(config)
    outcomes, stats = await d.run_with_stats(template)
    print(render_report(stats, outcomes))


if __name__ == "__main__":
    asyncio.run(main())
