#!/usr/bin/env python3
# cli.py: command-line front end for Downpour

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from downpour.classifier import expect
from downpour.core import RequestDownpour
from downpour.errors import ConfigError
from downpour.logging_config import setup_logging
from downpour.models import EndpointConfig, RequestTemplate, SUPPORTED_METHODS
from downpour.rendering import render_report
from downpour.utils import parse_headers


def parse_args(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="🌧️ Downpour: fire a burst of concurrent requests at one endpoint and measure it",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("base_url", help="Base URL, e.g. http://localhost:8080")

    # Request
    parser.add_argument(
        "-e",
        "--endpoint",
        default="",
        help="Path appended verbatim to the base URL",
    )
    parser.add_argument(
        "-X",
        "--method",
        default="GET",
        help=f"HTTP method ({'/'.join(SUPPORTED_METHODS)}; anything else is sent as GET)",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Per-request header, overrides a default header of the same name",
    )
    parser.add_argument(
        "--default-header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Default header sent with every request",
    )
    body = parser.add_mutually_exclusive_group()
    body.add_argument("-d", "--body", default="", help="Request body (POST/PUT/PATCH)")
    body.add_argument("--body-file", default=None, help="Read the request body from a file")

    # Load & retries
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=10,
        help="Number of requests fired at once",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-attempt timeout in seconds",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=3,
        help="Retries per request on transport errors (HTTP errors are never retried)",
    )

    # Success criteria
    parser.add_argument(
        "--expect-status",
        type=int,
        action="append",
        default=[],
        help="Status code counted as success (repeatable); default is any 2xx",
    )
    parser.add_argument(
        "--expect-body",
        default=None,
        help="Substring the response body must contain to count as success",
    )

    # Output
    parser.add_argument(
        "--no-details",
        action="store_true",
        help="Skip the per-request dump",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print stats and outcomes as JSON instead of the text report",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )

    # Logging & Debugging
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., downpour.log)",
    )

    return parser.parse_args(argv)


def build_inputs(args) -> tuple[EndpointConfig, RequestTemplate]:
    try:
        default_headers = parse_headers(args.default_header)
        headers = parse_headers(args.header)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    body = args.body
    if args.body_file:
        with open(args.body_file, encoding="utf-8") as f:
            body = f.read()

    config = EndpointConfig(
        base_url=args.base_url,
        concurrency=args.concurrency,
        timeout_s=args.timeout,
        max_retries=args.retries,
        default_headers=default_headers,
    )
    template = RequestTemplate(
        endpoint=args.endpoint,
        method=args.method,
        headers=headers,
        body=body,
        success_criteria=expect(args.expect_status, args.expect_body),
    )
    return config, template


async def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    setup_logging(
        level=log_level,
        log_file=args.log_file,
        stream=sys.stderr if args.json else None,
    )

    try:
        config, template = build_inputs(args)
    except (ConfigError, OSError) as e:
        logging.error(f"Invalid configuration: {e}")
        return 2

    downpour = RequestDownpour(
        config,
        use_progress_bar=not (args.no_progress or args.json),
    )
    outcomes, stats = await downpour.run_with_stats(template)

    if args.json:
        print(
            json.dumps(
                {"stats": asdict(stats), "outcomes": [o.to_dict() for o in outcomes]},
                indent=2,
            )
        )
    else:
        print(render_report(stats, outcomes, details=not args.no_details))

    return 0 if stats.failed == 0 else 1


def main():
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
