from downpour.metrics import compute_stats
from downpour.models import FAILED_STATUS, AttemptOutcome
from downpour.rendering import (
    render_details,
    render_latency_histogram,
    render_report,
    render_retry_distribution,
    render_status_distribution,
    render_summary,
)


def make_outcomes():
    return [
        AttemptOutcome(
            status=201,
            body='{"success":true}',
            response_headers={"Set-Cookie": ["a=1", "b=2"]},
            elapsed_ms=12.5,
            retry_count=0,
            request_method="POST",
            request_url="http://svc/tasks",
            request_headers={"Content-Type": "application/json"},
            request_body='{"name": "x"}',
            success=True,
        ),
        AttemptOutcome(
            status=FAILED_STATUS,
            body="Error: connection refused",
            response_headers={},
            elapsed_ms=37.5,
            retry_count=3,
            request_method="GET",
            request_url="http://svc/tasks",
            request_headers={},
            request_body="",
            success=False,
            error="connection refused",
        ),
    ]


def test_histogram_empty():
    assert "No latency data" in render_latency_histogram([])


def test_histogram_single_value():
    assert "single value" in render_latency_histogram([5.0, 5.0])


def test_histogram_counts_every_sample():
    text = render_latency_histogram([1.0, 2.0, 3.0, 10.0], bins=3)
    assert text.startswith("Latency Histogram")
    assert "(3)" in text
    assert "(1)" in text


def test_summary_totals_and_percentages():
    stats = compute_stats(make_outcomes())
    text = render_summary(stats)
    assert "Total Requests: 2" in text
    assert "Successful Requests: 1 (50.00%)" in text
    assert "Failed Requests: 1 (50.00%)" in text
    assert "Average Response Time: 25.00ms" in text
    assert "99th Percentile: 37.50ms" in text


def test_distributions():
    stats = compute_stats(make_outcomes())
    assert "Transport failure: 1 requests (50.00%)" in render_status_distribution(stats)
    assert "Status 201: 1 requests (50.00%)" in render_status_distribution(stats)
    assert "3 retries: 1 requests (50.00%)" in render_retry_distribution(stats)


def test_details_dump():
    text = render_details(make_outcomes())
    assert "Request #1:" in text
    assert "Request #2:" in text
    assert "Request Body: {\"name\": \"x\"}" in text
    assert "  Set-Cookie: a=1, b=2" in text
    assert "Response Body: Error: connection refused" in text
    # empty request bodies are left out
    assert text.count("Request Body:") == 1


def test_report_without_details():
    outcomes = make_outcomes()
    stats = compute_stats(outcomes)
    assert "Detailed Results" in render_report(stats, outcomes)
    assert "Detailed Results" not in render_report(stats, outcomes, details=False)
