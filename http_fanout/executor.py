"""
Request executor

Builds, sends and drains one HTTP request from a template. The helpers raise
the typed errors from http_fanout.errors; execute_request turns them into an
ExecutionResult so a failing request never raises into the dispatcher.
"""

import time
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import requests
from requests.structures import CaseInsensitiveDict

from http_fanout.config import RequestTemplate
from http_fanout.console import GREEN, RED, RESET, YELLOW, error, info, request_label
from http_fanout.errors import BodyDrainError, FanoutError, RequestBuildError, TransportError
from http_fanout.headers import apply_headers

DRAIN_CHUNK_SIZE = 8192


@dataclass
class ExecutionResult:
    """Outcome of one request in a run."""

    index: int
    status_code: Optional[int] = None
    status_line: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    drain_error: Optional[str] = None
    elapsed_ms: float = -1

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None

    def to_dict(self) -> Dict:
        return asdict(self)


def status_line(response: requests.Response) -> str:
    """Status code and reason phrase, e.g. '200 OK'."""
    return f"{response.status_code} {response.reason or ''}".strip()


def status_color(code: int) -> str:
    if 200 <= code < 300:
        return GREEN
    if 300 <= code < 400:
        return YELLOW
    return RED


def build_request(session: requests.Session, template: RequestTemplate, label: str,
                  headers: Optional[CaseInsensitiveDict] = None) -> requests.PreparedRequest:
    """
    Prepare the template for sending through the session.

    Args:
        session: Shared session, its default headers are merged in
        template: Request to build
        label: Prefix for header warnings
        headers: Already applied template headers (parsed here when None)

    Returns:
        The prepared request

    Raises:
        RequestBuildError: If requests rejects the method, URL, headers or body
    """
    if headers is None:
        headers = apply_headers(template.headers, label)
    data = template.body.encode("utf-8") if template.body else None
    request = requests.Request(template.method.upper(), template.url, headers=headers, data=data)
    try:
        return session.prepare_request(request)
    except (requests.exceptions.RequestException, ValueError) as e:
        raise RequestBuildError(f"Failed to create request: {e}") from e


def send_request(session: requests.Session, prepared: requests.PreparedRequest,
                 timeout: Optional[float] = None, stream: bool = True) -> requests.Response:
    """Send a prepared request, raising TransportError on any network failure."""
    try:
        return session.send(prepared, timeout=timeout or None, stream=stream)
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Failed to send request: {e}") from e
    except ValueError as e:
        # http.client validates the method and header bytes only at send time
        raise RequestBuildError(f"Failed to create request: {e}") from e


def drain_response(response: requests.Response) -> int:
    """
    Read and discard the whole body so the connection can be released.

    Returns:
        Number of bytes discarded

    Raises:
        BodyDrainError: If reading the body fails
    """
    size = 0
    try:
        for chunk in response.iter_content(DRAIN_CHUNK_SIZE):
            size += len(chunk)
    except requests.exceptions.RequestException as e:
        raise BodyDrainError(f"Failed to read response body: {e}") from e
    finally:
        response.close()
    return size


def execute_request(session: requests.Session, template: RequestTemplate, index: int,
                    timeout: Optional[float] = None) -> ExecutionResult:
    """
    Perform one round trip for the given ordinal and report it.

    The status line is printed as soon as it arrives. Build and transport
    failures are printed to stderr and recorded on the result; nothing is
    raised to the caller.
    """
    label = request_label(index)
    result = ExecutionResult(index=index)
    start = time.perf_counter()

    try:
        prepared = build_request(session, template, label)
        response = send_request(session, prepared, timeout)
    except FanoutError as e:
        result.error = str(e)
        result.error_kind = type(e).__name__
        result.elapsed_ms = (time.perf_counter() - start) * 1000
        error(str(e), label=label)
        return result

    result.status_code = response.status_code
    result.status_line = status_line(response)
    info(f"{label} Status: {status_color(response.status_code)}{result.status_line}{RESET}")

    try:
        drain_response(response)
    except BodyDrainError as e:
        result.drain_error = str(e)
        error(str(e), label=label)

    result.elapsed_ms = (time.perf_counter() - start) * 1000
    return result
