# httpload/metrics.py
import threading
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# seconds; wide enough for slow endpoints since there is no request timeout of our own
LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class RequestOutcome(NamedTuple):
    url: str
    status_code: int  # 0 = transport failure
    elapsed_ns: int
    message: str
    started_at: datetime


class MetricsSnapshot(NamedTuple):
    request_count: int
    status_code_counts: Dict[int, int]
    response_times: List[int]
    response_times_by_code: Dict[int, List[int]]
    start_time: datetime
    end_time: Optional[datetime]


class TestMetrics:
    """
    Aggregated results of one run. record() may be called from any number of
    tasks or threads at once; every outcome is applied as a whole under the lock.
    """
    __test__ = False

    def __init__(self):
        self._lock = threading.Lock()
        self.request_count = 0
        self.status_code_counts: Dict[int, int] = {}
        self.response_times: List[int] = []
        self.response_times_by_code: Dict[int, List[int]] = {}
        self.start_time = datetime.now()
        self.end_time: Optional[datetime] = None

        # per-run registry so repeated runs in one process never collide
        self.registry = CollectorRegistry()
        self._requests_c = Counter("httpload_requests_total", "Requests completed", ["status"],
                                   registry=self.registry)
        self._latency_h = Histogram("httpload_response_seconds", "Response time seconds",
                                    buckets=LATENCY_BUCKETS, registry=self.registry)

    def record(self, outcome: RequestOutcome):
        code = outcome.status_code
        with self._lock:
            self.request_count += 1
            self.status_code_counts[code] = self.status_code_counts.get(code, 0) + 1
            self.response_times.append(outcome.elapsed_ns)
            self.response_times_by_code.setdefault(code, []).append(outcome.elapsed_ns)
            self._requests_c.labels(status=str(code)).inc()
            self._latency_h.observe(outcome.elapsed_ns / 1e9)

    def finish(self):
        with self._lock:
            self.end_time = datetime.now()

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                request_count=self.request_count,
                status_code_counts=dict(self.status_code_counts),
                response_times=list(self.response_times),
                response_times_by_code={k: list(v) for k, v in self.response_times_by_code.items()},
                start_time=self.start_time,
                end_time=self.end_time,
            )

    def exposition(self) -> bytes:
        """Prometheus text format of the run's counters."""
        return generate_latest(self.registry)
