"""Verbose single-request mode: prints the full request and response."""

from typing import Iterable, Optional, Tuple

import requests

from http_fanout.config import RequestTemplate
from http_fanout.console import RESET, SINGLE_REQUEST_LABEL, info
from http_fanout.errors import BodyDrainError
from http_fanout.executor import build_request, send_request, status_color, status_line
from http_fanout.headers import apply_headers

OUT = "-->"
IN = "<--"


def _header_pairs(headers) -> Iterable[Tuple[str, str]]:
    """Yield every (key, value) pair, repeated keys once per value."""
    # urllib3's HTTPHeaderDict keeps repeated headers apart; requests joins them
    if hasattr(headers, "iteritems"):
        return headers.iteritems()
    return headers.items()


def read_body(response: requests.Response) -> str:
    """Read the full response body as text."""
    try:
        return response.text
    except requests.exceptions.RequestException as e:
        raise BodyDrainError(f"Failed to read response body: {e}") from e
    finally:
        response.close()


def run_single(session: requests.Session, template: RequestTemplate,
               timeout: Optional[float] = None) -> requests.Response:
    """
    Send one request synchronously, echoing both directions to stdout.

    Args:
        session: Session to send through
        template: Request to send
        timeout: Request timeout in seconds (None = no timeout)

    Returns:
        The response, with its body already read

    Raises:
        RequestBuildError: If the request cannot be built
        TransportError: If the request cannot be sent
        BodyDrainError: If the response body cannot be read
    """
    headers = apply_headers(template.headers, SINGLE_REQUEST_LABEL)
    prepared = build_request(session, template, SINGLE_REQUEST_LABEL, headers=headers)

    info(f"{OUT} {prepared.method} {prepared.url}")
    for key, value in headers.items():
        info(f"{OUT} {key}: {value}")
    if template.body:
        info(f"{OUT} Body: {template.body}")
    info(OUT)

    response = send_request(session, prepared, timeout)

    info(f"{IN} {status_color(response.status_code)}{status_line(response)}{RESET}")
    raw_headers = getattr(response.raw, "headers", None) or response.headers
    for key, value in _header_pairs(raw_headers):
        info(f"{IN} {key}: {value}")
    info(IN)

    info(read_body(response))
    return response
