"""
Dispatch coordinator

Issues N executions of a request template in order 1..N, pacing launches with
a RateGate and running each one on its own worker thread. An outstanding-work
barrier tracks launched executions until every one of them has completed.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Set

import requests

from http_fanout.config import RequestTemplate
from http_fanout.console import BOLD, RESET, error, info, request_label
from http_fanout.executor import ExecutionResult, execute_request
from http_fanout.rate_gate import RateGate

Executor = Callable[[requests.Session, RequestTemplate, int, Optional[float]], ExecutionResult]


class WorkBarrier:
    """Counts launched executions and collects their results until all are done."""

    def __init__(self):
        self._count = 0
        self._results: List[ExecutionResult] = []
        self._claimed: Set[int] = set()
        self._cond = threading.Condition()

    @property
    def outstanding(self) -> int:
        with self._cond:
            return self._count

    def add(self) -> None:
        """Register one execution; must be called before it is launched."""
        with self._cond:
            self._count += 1

    def claim(self, index: int) -> bool:
        """
        Reserve the right to report an ordinal.

        Only the first caller for a given index gets True; whoever holds the
        claim must call done() exactly once.
        """
        with self._cond:
            if index in self._claimed:
                return False
            self._claimed.add(index)
            return True

    def done(self, result: ExecutionResult) -> None:
        """Record a finished execution and release its slot."""
        with self._cond:
            if self._count <= 0:
                raise RuntimeError("WorkBarrier.done() called more times than add()")
            self._results.append(result)
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def wait(self) -> List[ExecutionResult]:
        """Block until every registered execution has called done()."""
        with self._cond:
            self._cond.wait_for(lambda: self._count == 0)
            return list(self._results)


@dataclass
class DispatchRun:
    """One concurrent N-request campaign."""

    url: str
    total: int
    per_second: int = 0
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    start_time: float = field(default_factory=time.perf_counter)
    end_time: Optional[float] = None
    results: List[ExecutionResult] = field(default_factory=list)

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded


def run_dispatch(
    session: requests.Session,
    template: RequestTemplate,
    total: int,
    per_second: int = 0,
    timeout: Optional[float] = None,
    max_in_flight: int = 0,
    executor: Executor = execute_request,
    gate: Optional[RateGate] = None
) -> DispatchRun:
    """
    Run `total` executions of the template to completion.

    Args:
        session: Shared session used by every execution
        template: Request to replay
        total: Number of executions to launch
        per_second: Launch rate cap (0 = unlimited)
        timeout: Per-request timeout in seconds (None = no timeout)
        max_in_flight: Cap on executions running at once (0 = no cap)
        executor: Callable performing one execution
        gate: Rate gate to use instead of one built from per_second

    Returns:
        The finished DispatchRun with one result per execution
    """
    if total < 0:
        raise ValueError("total must be >= 0")

    gate = gate or RateGate(per_second)
    barrier = WorkBarrier()
    slots = threading.BoundedSemaphore(max_in_flight) if max_in_flight > 0 else None
    pool = ThreadPoolExecutor(max_workers=max_in_flight or max(1, total), thread_name_prefix="request")

    def task(index: int) -> None:
        if not barrier.claim(index):
            # Already reported as a launch failure
            return
        result = ExecutionResult(index=index, error="Request did not complete", error_kind="Incomplete")
        try:
            result = executor(session, template, index, timeout)
        except Exception as e:
            result = ExecutionResult(index=index, error=f"Unexpected error: {e}", error_kind=type(e).__name__)
            error(result.error, label=request_label(index))
        finally:
            barrier.done(result)
            if slots is not None:
                slots.release()

    info(f"{BOLD}Sending {total} requests to {template.url}...{RESET}")
    run = DispatchRun(url=template.url, total=total, per_second=per_second)

    try:
        for index in range(1, total + 1):
            gate.acquire()
            if slots is not None:
                slots.acquire()
            barrier.add()
            try:
                pool.submit(task, index)
            except RuntimeError as e:
                # submit() may have queued the task before failing to start a
                # worker thread; the claim decides which side reports it
                if barrier.claim(index):
                    failed = ExecutionResult(index=index, error=f"Failed to launch request: {e}",
                                             error_kind="LaunchError")
                    error(failed.error, label=request_label(index))
                    barrier.done(failed)
                    if slots is not None:
                        slots.release()

        results = barrier.wait()
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    run.end_time = time.perf_counter()
    run.results = sorted(results, key=lambda r: r.index)

    info(f"\nFinished {total} requests in {run.elapsed:.3f}s")
    return run
