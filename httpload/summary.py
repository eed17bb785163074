# httpload/summary.py
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional

from httpload import settings

NS_PER_MS = 1_000_000


class Summary(NamedTuple):
    start_time: datetime
    end_time: datetime
    total_requests: int
    status_code_counts: Dict[int, int]
    average_ns: Optional[int]
    shortest_ns: Optional[int]
    longest_ns: Optional[int]
    average_by_code_ns: Dict[int, int]

    @property
    def duration_s(self) -> float:
        return (self.end_time - self.start_time).total_seconds()


def compute_summary(metrics) -> Summary:
    """
    Statistics over a finished run. Averages use integer nanosecond division;
    average, shortest and longest are None when nothing was recorded.
    """
    snap = metrics.snapshot()
    times = snap.response_times
    end_time = snap.end_time or datetime.now()

    average = shortest = longest = None
    if times:
        average = sum(times) // len(times)
        shortest = min(times)
        longest = max(times)

    by_code = {code: sum(ts) // len(ts) for code, ts in snap.response_times_by_code.items() if ts}
    return Summary(snap.start_time, end_time, snap.request_count, snap.status_code_counts,
                   average, shortest, longest, by_code)


def _ms(ns: Optional[int]) -> str:
    return "- ms" if ns is None else f"{ns // NS_PER_MS}ms"


def render_summary(summary: Summary, config) -> List[str]:
    lines = [
        "",
        settings.SUMMARY_HEADER,
        f"URL Pattern: {config.url}",
        f"Method: {config.method}",
        f"Repeats: {config.repeats}",
        f"Concurrency: {config.concurrency}",
        f"Delay: {config.delay}ms",
        "",
        f"Test Start: {summary.start_time:%Y-%m-%d %H:%M:%S}",
        f"Test End: {summary.end_time:%Y-%m-%d %H:%M:%S}",
        f"Test Duration: {summary.duration_s:.2f} seconds",
        f"Total Requests: {summary.total_requests}",
        "",
        "Response Status Codes:",
    ]
    lines += [f"- {code}: {count}" for code, count in sorted(summary.status_code_counts.items())]
    lines += [
        "",
        "Response Time (ms):",
        f"- Average: {_ms(summary.average_ns)}",
        f"- Shortest: {_ms(summary.shortest_ns)}",
        f"- Longest: {_ms(summary.longest_ns)}",
        "",
        "Average Response Time by Status Code (ms):",
    ]
    lines += [f"- {code}: {_ms(avg)}" for code, avg in sorted(summary.average_by_code_ns.items())]
    return lines


def write_summary(metrics, config, sink):
    for line in render_summary(compute_summary(metrics), config):
        sink.append_line(line)
