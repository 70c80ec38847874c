"""Colored console output shared by every component."""

import sys
from typing import Optional

# ANSI color codes
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
BOLD = "\033[1m"
RESET = "\033[0m"

SINGLE_REQUEST_LABEL = "[single request]"


def request_label(index: int) -> str:
    """Label used to attribute output to one request of a run."""
    return f"[Request {index}]"


def _prefixed(label: Optional[str], text: str) -> str:
    return f"{label} {text}" if label else text


def info(message: str) -> None:
    """Print a progress/result line to stdout."""
    print(message, flush=True)


def warn(message: str, label: Optional[str] = None) -> None:
    """Print a warning line to stderr."""
    print(f"{YELLOW}{_prefixed(label, 'Warning: ' + message)}{RESET}", file=sys.stderr, flush=True)


def error(message: str, label: Optional[str] = None) -> None:
    """Print an error line to stderr."""
    print(f"{RED}{_prefixed(label, 'Error: ' + message)}{RESET}", file=sys.stderr, flush=True)
