import threading
import time

import pytest

from http_fanout.rate_gate import RateGate


class FakeClock:
    """Clock whose sleep() just advances time."""

    def __init__(self):
        self.now = 100.0
        self.lock = threading.Lock()

    def time(self):
        with self.lock:
            return self.now

    def sleep(self, seconds):
        with self.lock:
            self.now += seconds


def test_unlimited_gate_never_blocks():
    gate = RateGate(0)

    start = time.perf_counter()
    for _ in range(1000):
        gate.acquire()
    elapsed = time.perf_counter() - start

    # 1000 permits at even 10000/s would need ~0.1s
    assert elapsed < 0.1


def test_first_permit_is_immediate():
    clock = FakeClock()
    gate = RateGate(2, clock=clock.time, sleep=clock.sleep)

    gate.acquire()

    assert clock.now == 100.0


def test_permits_are_spaced_by_interval():
    clock = FakeClock()
    gate = RateGate(10, clock=clock.time, sleep=clock.sleep)

    times = []
    for _ in range(5):
        gate.acquire()
        times.append(clock.now)

    gaps = [b - a for a, b in zip(times, times[1:])]
    assert gaps == pytest.approx([0.1] * 4)


def test_late_caller_does_not_bank_permits():
    clock = FakeClock()
    gate = RateGate(10, clock=clock.time, sleep=clock.sleep)

    gate.acquire()
    clock.now += 5  # caller was busy for many intervals
    gate.acquire()
    after_late = clock.now
    gate.acquire()

    assert after_late == pytest.approx(105.0)
    assert clock.now - after_late == pytest.approx(0.1)


def test_real_time_minimum_duration():
    gate = RateGate(20)
    n = 5

    start = time.perf_counter()
    for _ in range(n):
        gate.acquire()
    elapsed = time.perf_counter() - start

    assert elapsed >= (n - 1) / 20 - 0.01


def test_concurrent_acquirers_get_distinct_slots():
    gate = RateGate(50)
    stamps = []
    lock = threading.Lock()

    def grab():
        gate.acquire()
        with lock:
            stamps.append(time.perf_counter())

    threads = [threading.Thread(target=grab) for _ in range(6)]
    start = time.perf_counter()
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(stamps) == 6
    assert max(stamps) - start >= 5 / 50 - 0.01


def test_negative_rate_rejected():
    with pytest.raises(ValueError):
        RateGate(-1)
