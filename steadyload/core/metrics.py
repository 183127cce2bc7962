from __future__ import annotations

import threading

from prometheus_client import Counter, Histogram, start_http_server

slots_completed = Counter(
    "steadyload_slots_total", "Scenario slots completed", ["scenario"]
)
slot_overruns = Counter(
    "steadyload_slot_overruns_total", "Scenarios that overran their slot", ["scenario"]
)
slot_work_seconds = Histogram(
    "steadyload_slot_work_seconds",
    "Seconds of scenario work inside a slot, tab creation included",
    ["scenario"],
    buckets=(1, 2, 5, 10, 20, 30, 60, 120, 300, 600),
)
runs = Counter(
    "steadyload_runs_total", "Measurement runs by outcome", ["outcome"]
)

_METRICS_SERVER_STARTED = False
_METRICS_LOCK = threading.Lock()


def ensure_metrics_server(port: int) -> None:
    """Start the Prometheus metrics HTTP server once per process."""
    global _METRICS_SERVER_STARTED

    if _METRICS_SERVER_STARTED:
        return

    with _METRICS_LOCK:
        if _METRICS_SERVER_STARTED:
            return
        try:
            start_http_server(port)
        except OSError:
            # Port already taken; keep recording without HTTP export.
            pass
        _METRICS_SERVER_STARTED = True
