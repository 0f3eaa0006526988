from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, Tuple


_lock = threading.Lock()
_count: Dict[Tuple[str, str, int], int] = defaultdict(int)
_buckets = [
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
]
_hist_count: Dict[Tuple[str, str], int] = defaultdict(int)
_hist_sum: Dict[Tuple[str, str], float] = defaultdict(float)
_hist_buckets: Dict[Tuple[str, str, float], int] = defaultdict(int)
# outcome -> runs ("computed", "no_period", "invalid_range")
_coverage_runs: Dict[str, int] = defaultdict(int)
# status -> employees classified
_coverage_statuses: Dict[str, int] = defaultdict(int)


def observe_request(handler: str, method: str, status: int, duration_s: float) -> None:
    key = (handler, method.upper(), int(status))
    hkey = (handler, method.upper())
    with _lock:
        _count[key] += 1
        _hist_count[hkey] += 1
        _hist_sum[hkey] += float(duration_s)
        placed = False
        for le in _buckets:
            if duration_s <= le:
                _hist_buckets[(handler, method.upper(), le)] += 1
                placed = True
                break
        if not placed:
            # +Inf bucket
            _hist_buckets[(handler, method.upper(), float("inf"))] += 1


def observe_coverage_run(outcome: str, status_counts: Dict[str, int] | None = None) -> None:
    with _lock:
        _coverage_runs[str(outcome)] += 1
        for status, n in (status_counts or {}).items():
            _coverage_statuses[str(status)] += int(n)


def reset_metrics() -> None:
    """Testing helper."""
    with _lock:
        for store in (_count, _hist_count, _hist_sum, _hist_buckets, _coverage_runs, _coverage_statuses):
            store.clear()


def _esc(v: str) -> str:
    return v.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def export_prometheus() -> str:
    lines = []
    lines.append("# HELP portal_request_total Total HTTP requests")
    lines.append("# TYPE portal_request_total counter")
    with _lock:
        for (handler, method, status), val in sorted(_count.items()):
            lines.append(
                f'portal_request_total{{handler="{_esc(handler)}",method="{_esc(method)}",status="{int(status)}"}} {int(val)}'
            )

        lines.append("# HELP portal_request_duration_seconds Request duration histogram")
        lines.append("# TYPE portal_request_duration_seconds histogram")
        for handler, method in sorted(_hist_count.keys()):
            cumulative = 0
            for le in _buckets:
                cumulative += _hist_buckets.get((handler, method, le), 0)
                lines.append(
                    f'portal_request_duration_seconds_bucket{{handler="{_esc(handler)}",method="{_esc(method)}",le="{le}"}} {int(cumulative)}'
                )
            cumulative += _hist_buckets.get((handler, method, float("inf")), 0)
            lines.append(
                f'portal_request_duration_seconds_bucket{{handler="{_esc(handler)}",method="{_esc(method)}",le="+Inf"}} {int(cumulative)}'
            )
            lines.append(
                f'portal_request_duration_seconds_sum{{handler="{_esc(handler)}",method="{_esc(method)}"}} {float(_hist_sum.get((handler, method), 0.0))}'
            )
            lines.append(
                f'portal_request_duration_seconds_count{{handler="{_esc(handler)}",method="{_esc(method)}"}} {int(_hist_count.get((handler, method), 0))}'
            )

        lines.append("# HELP portal_coverage_runs_total Pay-period coverage computations by outcome")
        lines.append("# TYPE portal_coverage_runs_total counter")
        for outcome, val in sorted(_coverage_runs.items()):
            lines.append(f'portal_coverage_runs_total{{outcome="{_esc(outcome)}"}} {int(val)}')

        lines.append("# HELP portal_coverage_employees_total Employees classified by pay status")
        lines.append("# TYPE portal_coverage_employees_total counter")
        for status, val in sorted(_coverage_statuses.items()):
            lines.append(f'portal_coverage_employees_total{{status="{_esc(status)}"}} {int(val)}')
    return "\n".join(lines) + "\n"
