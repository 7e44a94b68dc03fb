from __future__ import annotations

import threading
from collections import defaultdict

HISTOGRAM_BUCKETS_MS: tuple[float, ...] = (5, 10, 25, 50, 100, 250, 500, 1000, 2000, 5000)


def _sanitize_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', "'")


def _bucket_boundaries() -> tuple[float, ...]:
    return HISTOGRAM_BUCKETS_MS + (float("inf"),)


def _le(bucket: float) -> str:
    return "+Inf" if bucket == float("inf") else f"{int(bucket)}"


class MetricsRegistry:
    """Process-local counters rendered in the Prometheus text format."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._http_totals: dict[tuple[str, str, int], int] = defaultdict(int)
        self._http_sum_ms: dict[str, float] = defaultdict(float)
        self._http_count: dict[str, int] = defaultdict(int)
        self._http_buckets: dict[str, dict[float, int]] = defaultdict(lambda: defaultdict(int))
        self._decisions: dict[tuple[str, str], int] = defaultdict(int)

    def observe_http(self, path: str, method: str, status: int, duration_ms: float) -> None:
        with self._lock:
            self._http_totals[(path, method.upper(), status)] += 1
            self._http_sum_ms[method.upper()] += duration_ms
            self._http_count[method.upper()] += 1
            for bucket in _bucket_boundaries():
                if duration_ms <= bucket:
                    self._http_buckets[method.upper()][bucket] += 1

    def observe_decision(self, kind: str, outcome: str) -> None:
        with self._lock:
            self._decisions[(kind, outcome)] += 1

    def decision_count(self, kind: str, outcome: str) -> int:
        with self._lock:
            return self._decisions.get((kind, outcome), 0)

    def reset(self) -> None:
        with self._lock:
            self._http_totals.clear()
            self._http_sum_ms.clear()
            self._http_count.clear()
            self._http_buckets.clear()
            self._decisions.clear()

    def render_prometheus(self) -> str:
        lines: list[str] = [
            "# HELP td_http_request_total Total HTTP requests by path/method/status",
            "# TYPE td_http_request_total counter",
        ]
        with self._lock:
            for (path, method, status), count in sorted(self._http_totals.items()):
                lines.append(
                    "td_http_request_total"
                    f'{{path="{_sanitize_label(path)}",method="{method}",status="{status}"}} {count}'
                )

            lines.extend(
                [
                    "# HELP td_http_request_duration_ms HTTP request latency by method",
                    "# TYPE td_http_request_duration_ms histogram",
                ]
            )
            for method, sum_ms in sorted(self._http_sum_ms.items()):
                for bucket in _bucket_boundaries():
                    count = self._http_buckets[method].get(bucket, 0)
                    lines.append(f'td_http_request_duration_ms_bucket{{method="{method}",le="{_le(bucket)}"}} {count}')
                lines.append(f'td_http_request_duration_ms_count{{method="{method}"}} {self._http_count[method]}')
                lines.append(f'td_http_request_duration_ms_sum{{method="{method}"}} {sum_ms:.6f}')

            lines.extend(
                [
                    "# HELP td_decision_total Authorization and scheduling verdicts by kind/outcome",
                    "# TYPE td_decision_total counter",
                ]
            )
            if not self._decisions:
                lines.append('td_decision_total{kind="none",outcome="none"} 0')
            for (kind, outcome), count in sorted(self._decisions.items()):
                lines.append(
                    f'td_decision_total{{kind="{_sanitize_label(kind)}",outcome="{_sanitize_label(outcome)}"}} {count}'
                )

        return "\n".join(lines) + "\n"


METRICS = MetricsRegistry()
