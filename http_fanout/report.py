"""Aggregate statistics, summary output and JSON export for a dispatch run."""

import json
import statistics
from datetime import datetime
from typing import Dict, List

from http_fanout.console import BOLD, CYAN, GREEN, RED, RESET, YELLOW, info
from http_fanout.dispatcher import DispatchRun


def calculate_statistics(run: DispatchRun) -> Dict:
    """
    Calculate statistics from a finished run.

    Args:
        run: Finished dispatch run

    Returns:
        Dictionary with counts, status code distribution and latency summary
    """
    results = run.results
    successful = [r for r in results if r.ok]
    duration = run.elapsed

    stats = {
        "total_requests": run.total,
        "completed": len(results),
        "successful": len(successful),
        "failed": len(results) - len(successful),
        "success_rate": len(successful) / len(results) * 100 if results else 0,
        "duration_seconds": duration,
        "per_second_target": run.per_second,
        "qps": len(results) / duration if duration > 0 else 0,
        "status_codes": {},
        "errors": {},
        "latency_ms": None
    }

    for r in results:
        if r.status_code is not None:
            code = str(r.status_code)
            stats["status_codes"][code] = stats["status_codes"].get(code, 0) + 1
        if r.error_kind:
            stats["errors"][r.error_kind] = stats["errors"].get(r.error_kind, 0) + 1

    values = [r.elapsed_ms for r in successful if r.elapsed_ms >= 0]
    if values:
        sorted_values = sorted(values)
        stats["latency_ms"] = {
            "min": min(values),
            "max": max(values),
            "avg": statistics.mean(values),
            "median": statistics.median(values),
            "p90": sorted_values[int(len(values) * 0.9)] if len(values) >= 10 else max(values),
            "p95": sorted_values[int(len(values) * 0.95)] if len(values) >= 20 else max(values),
        }

    return stats


def print_summary(stats: Dict) -> None:
    """Print the tally line, status codes and latency summary."""
    failed = stats["failed"]
    rate = stats["success_rate"]
    rate_color = GREEN if rate >= 99 else YELLOW if rate >= 95 else RED

    info(f"{BOLD}Total:{RESET} {stats['completed']} | "
         f"{BOLD}OK:{RESET} {GREEN}{stats['successful']}{RESET} | "
         f"{BOLD}Failed:{RESET} {RED if failed else ''}{failed}{RESET if failed else ''} | "
         f"{BOLD}Rate:{RESET} {rate_color}{rate:.1f}%{RESET} | "
         f"{BOLD}RPS:{RESET} {CYAN}{stats['qps']:.1f}{RESET}")

    if stats["status_codes"]:
        codes = ", ".join(f"{code}: {count}" for code, count in sorted(stats["status_codes"].items()))
        info(f"Status codes: {codes}")

    if stats["errors"]:
        errors = ", ".join(f"{kind}: {count}" for kind, count in sorted(stats["errors"].items(), key=lambda x: -x[1]))
        info(f"Errors: {RED}{errors}{RESET}")

    m = stats["latency_ms"]
    if m:
        info(f"Latency: min {m['min']:.1f}ms | avg {m['avg']:.1f}ms | median {m['median']:.1f}ms | "
             f"p95 {m['p95']:.1f}ms | max {m['max']:.1f}ms")


def export_results(run: DispatchRun, stats: Dict, filepath: str) -> None:
    """Export the run summary and every per-request result to a JSON file."""
    requests: List[Dict] = [r.to_dict() for r in run.results]
    output = {
        "timestamp": datetime.now().isoformat(),
        "started_at": run.started_at,
        "url": run.url,
        "summary": stats,
        "requests": requests
    }

    with open(filepath, "w") as f:
        json.dump(output, f, indent=2, default=str)

    info(f"{GREEN}Results exported to: {filepath}{RESET}")
