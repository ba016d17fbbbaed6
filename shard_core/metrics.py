import statistics
import threading
import time
from collections import deque
from typing import Dict


class QueryMetrics:
    """Collects rolling statistics for the coordinator."""

    def __init__(self, window: int = 200):
        self._lock = threading.Lock()
        self._durations = deque(maxlen=window)
        self._completed = 0
        self._saves = 0
        self._rows_returned = 0
        self._degraded = 0
        self._start = time.time()

    def record_query(self, duration_ms: float, rows: int, offline_shards: int) -> None:
        with self._lock:
            self._completed += 1
            self._durations.append(duration_ms)
            self._rows_returned += rows
            if offline_shards:
                self._degraded += 1

    def record_save(self) -> None:
        with self._lock:
            self._saves += 1

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            avg = statistics.fmean(self._durations) if self._durations else 0.0
            uptime = time.time() - self._start
            rate = (self._completed / uptime) if uptime else 0.0
            return {
                "avg_ms": avg,
                "completed": self._completed,
                "uptime": uptime,
                "throughput": rate,
                "saves": self._saves,
                "rows_returned": self._rows_returned,
                "degraded_queries": self._degraded,
            }
