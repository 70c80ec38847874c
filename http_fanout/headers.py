"""Parsing of raw 'Key: Value' header entries."""

from typing import Iterable, Tuple

from requests.structures import CaseInsensitiveDict

from http_fanout.console import warn
from http_fanout.errors import MalformedHeaderError


def parse_header(raw: str) -> Tuple[str, str]:
    """
    Split a raw header entry at its first colon.

    Args:
        raw: Header entry, e.g. "Content-Type: application/json"

    Returns:
        Tuple of (key, value) with surrounding whitespace trimmed

    Raises:
        MalformedHeaderError: If there is no colon or the key is empty
    """
    key, sep, value = raw.partition(":")
    key = key.strip()
    if not sep or not key:
        raise MalformedHeaderError(f"Ignoring invalid header format: {raw!r}. Expected 'Key: Value'.")
    return key, value.strip()


def apply_headers(raw_headers: Iterable[str], label: str) -> CaseInsensitiveDict:
    """
    Parse every entry independently, warning about and skipping bad ones.

    Later entries overwrite earlier ones with the same key (case-insensitive).
    """
    headers = CaseInsensitiveDict()
    for raw in raw_headers:
        try:
            key, value = parse_header(raw)
        except MalformedHeaderError as e:
            warn(str(e), label=label)
            continue
        headers[key] = value
    return headers
