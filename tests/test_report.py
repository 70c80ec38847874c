import json

import pytest

from http_fanout.dispatcher import DispatchRun
from http_fanout.executor import ExecutionResult
from http_fanout.report import calculate_statistics, export_results, print_summary


def make_run():
    run = DispatchRun(url="http://example.com/", total=4, per_second=10)
    run.end_time = run.start_time + 2.0
    run.results = [
        ExecutionResult(index=1, status_code=200, status_line="200 OK", elapsed_ms=10.0),
        ExecutionResult(index=2, status_code=200, status_line="200 OK", elapsed_ms=30.0),
        ExecutionResult(index=3, status_code=500, status_line="500 Internal Server Error", elapsed_ms=20.0),
        ExecutionResult(index=4, error="Failed to send request: refused", error_kind="TransportError", elapsed_ms=1.0),
    ]
    return run


def test_calculate_statistics():
    stats = calculate_statistics(make_run())

    assert stats["total_requests"] == 4
    assert stats["successful"] == 3
    assert stats["failed"] == 1
    assert stats["success_rate"] == 75
    assert stats["qps"] == pytest.approx(2)
    assert stats["status_codes"] == {"200": 2, "500": 1}
    assert stats["errors"] == {"TransportError": 1}
    assert stats["latency_ms"]["min"] == 10.0
    assert stats["latency_ms"]["max"] == 30.0
    assert stats["latency_ms"]["median"] == 20.0


def test_calculate_statistics_empty_run():
    run = DispatchRun(url="http://example.com/", total=0)
    run.end_time = run.start_time

    stats = calculate_statistics(run)

    assert stats["successful"] == 0
    assert stats["success_rate"] == 0
    assert stats["qps"] == 0
    assert stats["latency_ms"] is None


def test_print_summary(capsys):
    print_summary(calculate_statistics(make_run()))

    out = capsys.readouterr().out
    assert "Status codes: 200: 2, 500: 1" in out
    assert "TransportError: 1" in out
    assert "Latency: min 10.0ms" in out


def test_export_results(tmp_path):
    run = make_run()
    path = tmp_path / "out.json"

    export_results(run, calculate_statistics(run), str(path))

    data = json.loads(path.read_text())
    assert data["url"] == "http://example.com/"
    assert data["summary"]["failed"] == 1
    assert len(data["requests"]) == 4
    assert data["requests"][3]["error_kind"] == "TransportError"
