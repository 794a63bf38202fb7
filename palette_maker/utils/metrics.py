"""
Palette Maker Metrics Collection
In-process metrics collection for monitoring extraction performance.
"""
import time
from collections import defaultdict, Counter
from contextlib import contextmanager
from typing import Any, Dict, List, Optional
from threading import Lock


class MetricsCollector:
    """Simple in-process metrics collector."""

    def __init__(self):
        """Initialize metrics collector."""
        self._lock = Lock()
        self._counters: Dict[str, int] = Counter()
        self._timings: Dict[str, List[float]] = defaultdict(list)
        self._pixel_counts: List[int] = []
        self._start_time = time.time()

    def increment_request_count(self):
        """Increment total request counter."""
        with self._lock:
            self._counters["palette_requests_total"] += 1

    def increment_fallback_count(self):
        """Increment counter of requests answered with the default palette."""
        with self._lock:
            self._counters["palette_fallback_total"] += 1

    def increment_failure_count(self, error_type: str):
        """Increment failure counter by error type."""
        with self._lock:
            self._counters[f"palette_failed_total_{error_type}"] += 1

    def record_timing(self, operation: str, duration_ms: float):
        """Record timing for an operation."""
        with self._lock:
            self._timings[f"{operation}_duration_ms"].append(duration_ms)

    def record_pixel_count(self, count: int):
        """Record number of valid pixels fed to clustering."""
        with self._lock:
            self._pixel_counts.append(count)

    @contextmanager
    def timed(self, operation: str):
        """Time the enclosed block and record it under ``operation``."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_timing(operation, (time.perf_counter() - start) * 1000)

    def get_counters(self) -> Dict[str, int]:
        """Get current counter values."""
        with self._lock:
            return dict(self._counters)

    def get_timing_stats(self) -> Dict[str, Dict[str, float]]:
        """Get timing statistics."""
        with self._lock:
            return {
                operation: self._summarize(timings)
                for operation, timings in self._timings.items()
                if timings
            }

    def get_pixel_count_stats(self) -> Dict[str, float]:
        """Get valid pixel count statistics."""
        with self._lock:
            if not self._pixel_counts:
                return {}
            return self._summarize([float(c) for c in self._pixel_counts])

    def get_uptime_seconds(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """Get complete metrics summary."""
        return {
            "uptime_seconds": self.get_uptime_seconds(),
            "counters": self.get_counters(),
            "timing_stats": self.get_timing_stats(),
            "pixel_count_stats": self.get_pixel_count_stats()
        }

    def reset(self):
        """Reset all metrics (for testing)."""
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._pixel_counts.clear()
            self._start_time = time.time()

    @classmethod
    def _summarize(cls, values: List[float]) -> Dict[str, float]:
        return {
            "count": len(values),
            "mean": sum(values) / len(values),
            "min": min(values),
            "max": max(values),
            "p50": cls._percentile(values, 50),
            "p95": cls._percentile(values, 95)
        }

    @staticmethod
    def _percentile(data: List[float], percentile: int) -> float:
        """Calculate percentile of data."""
        if not data:
            return 0.0

        sorted_data = sorted(data)
        k = (len(sorted_data) - 1) * percentile / 100
        f = int(k)
        c = k - f

        if f + 1 < len(sorted_data):
            return sorted_data[f] + c * (sorted_data[f + 1] - sorted_data[f])
        else:
            return sorted_data[f]


# Global metrics instance
_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _metrics
    if _metrics is not None:
        _metrics.reset()
