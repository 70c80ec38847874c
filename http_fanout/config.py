"""Run configuration built once at startup and passed to the runners."""

import json
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from http_fanout.console import warn


@dataclass(frozen=True)
class RequestTemplate:
    """
    Immutable description of the request every execution replays.

    Attributes:
        method: HTTP method, stored uppercased
        url: Target URL
        body: Raw request body, None when there is no body
        headers: Raw "Key: Value" entries in command-line order
    """

    method: str
    url: str
    body: Optional[str] = None
    headers: Tuple[str, ...] = ()

    @classmethod
    def build(cls, method: str, url: str, body: Optional[str] = None,
              headers: Optional[Sequence[str]] = None) -> "RequestTemplate":
        """Normalize raw flag values: uppercase method, empty body means no body."""
        return cls(
            method=method.upper(),
            url=url,
            body=body or None,
            headers=tuple(headers or ()),
        )


@dataclass(frozen=True)
class RunConfig:
    """Everything a run needs, parsed from flags and environment."""

    template: RequestTemplate
    requests: int = 1
    per_second: int = 0
    timeout: Optional[float] = 30
    max_in_flight: int = 0
    output: Optional[str] = None

    @property
    def single_shot(self) -> bool:
        return self.requests <= 1


def load_headers_from_env() -> List[str]:
    """
    Load custom headers from environment variables.

    API_KEY becomes X-API-Key, BEARER_TOKEN becomes an Authorization header and
    CUSTOM_HEADERS may hold a JSON object of extra headers.

    Returns:
        Raw "Key: Value" entries, to be placed before command-line headers
    """
    headers = []

    api_key = os.getenv("API_KEY")
    bearer_token = os.getenv("BEARER_TOKEN")

    if api_key:
        headers.append(f"X-API-Key: {api_key}")
    if bearer_token:
        headers.append(f"Authorization: Bearer {bearer_token}")

    custom = os.getenv("CUSTOM_HEADERS")
    if custom:
        try:
            parsed = json.loads(custom)
        except json.JSONDecodeError:
            warn("CUSTOM_HEADERS is not valid JSON")
        else:
            if isinstance(parsed, dict):
                headers.extend(f"{key}: {value}" for key, value in parsed.items())
            else:
                warn("CUSTOM_HEADERS must be a JSON object")

    return headers
