#!/usr/bin/env python3
"""
HTTP Fanout command line

Sends a single verbose request when --requests is 1 or less, otherwise fans
out --requests concurrent requests, optionally capped with --per-second.
"""

import argparse
import sys
from typing import List, Optional

import requests
from dotenv import load_dotenv
from requests.adapters import HTTPAdapter

from http_fanout.config import RequestTemplate, RunConfig, load_headers_from_env
from http_fanout.console import RESET, SINGLE_REQUEST_LABEL, YELLOW, error, info, warn
from http_fanout.dispatcher import run_dispatch
from http_fanout.errors import FanoutError
from http_fanout.report import calculate_statistics, export_results, print_summary
from http_fanout.single_shot import run_single

DEFAULT_POOL_SIZE = 10
MAX_POOL_SIZE = 100


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="http-fanout",
        description="Make configurable HTTP requests, one at a time or many concurrently",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --url https://api.example.com/items --method POST --header "Content-Type: application/json" --body '{"name":"new item"}'
  %(prog)s --url https://api.example.com/items --requests 100 --per-second 10
  %(prog)s --url https://api.example.com/items --requests 500 --max-in-flight 50 --output results.json
        """
    )

    parser.add_argument("--url", required=True,
                        help="The URL for the HTTP request (required)")
    parser.add_argument("--method", default="GET",
                        help="The HTTP method to use, e.g. GET, POST, PUT, DELETE (default: GET)")
    parser.add_argument("--body", default="",
                        help="The request body for POST, PUT or PATCH requests")
    parser.add_argument("--requests", type=int, default=1,
                        help="The total number of requests to send (default: 1)")
    parser.add_argument("--per-second", type=int, default=0,
                        help="The maximum number of requests per second, 0 = no limit (default: 0)")
    parser.add_argument("--header", action="append", dest="headers", default=[],
                        help="A request header in 'Key: Value' format. Can be used multiple times")
    parser.add_argument("--timeout", type=float, default=30,
                        help="Per-request timeout in seconds, 0 = no timeout (default: 30)")
    parser.add_argument("--max-in-flight", type=int, default=0,
                        help="Maximum requests running at once, 0 = no limit (default: 0)")
    parser.add_argument("--output", help="Export concurrent run results to a JSON file")

    return parser


def build_config(args: argparse.Namespace) -> RunConfig:
    """Turn parsed flags plus environment headers into a RunConfig."""
    headers = load_headers_from_env() + list(args.headers)
    template = RequestTemplate.build(args.method, args.url, args.body, headers)
    return RunConfig(
        template=template,
        requests=args.requests,
        per_second=args.per_second,
        timeout=args.timeout if args.timeout > 0 else None,
        max_in_flight=args.max_in_flight,
        output=args.output,
    )


def build_session(config: RunConfig) -> requests.Session:
    """Create the session shared by every request of the run."""
    session = requests.Session()
    pool_size = config.max_in_flight or min(max(config.requests, DEFAULT_POOL_SIZE), MAX_POOL_SIZE)
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def run(config: RunConfig) -> int:
    """Execute a configured run and return the process exit code."""
    with build_session(config) as session:
        if config.single_shot:
            for flag, value in (("--per-second", config.per_second),
                                ("--max-in-flight", config.max_in_flight),
                                ("--output", config.output)):
                if value:
                    warn(f"{flag} is ignored when sending a single request")
            try:
                run_single(session, config.template, timeout=config.timeout)
            except FanoutError as e:
                error(str(e), label=SINGLE_REQUEST_LABEL)
                return 1
            return 0

        dispatch = run_dispatch(
            session,
            config.template,
            total=config.requests,
            per_second=config.per_second,
            timeout=config.timeout,
            max_in_flight=config.max_in_flight,
        )

    stats = calculate_statistics(dispatch)
    print_summary(stats)

    if config.output:
        try:
            export_results(dispatch, stats, config.output)
        except OSError as e:
            error(f"Could not write {config.output}: {e}")
            return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.url.strip():
        parser.error("the following arguments are required: --url")

    if args.per_second < 0:
        error("--per-second must be 0 or greater")
        return 1
    if args.max_in_flight < 0:
        error("--max-in-flight must be 0 or greater")
        return 1

    config = build_config(args)

    try:
        return run(config)
    except KeyboardInterrupt:
        info(f"\n{YELLOW}Run interrupted by user{RESET}")
        return 0


if __name__ == "__main__":
    sys.exit(main())
