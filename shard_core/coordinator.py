import threading
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .config import ClusterSettings, validate_topology
from .faults import FaultInjector
from .merge import PageAssembly, WindowDiscovery, merge
from .metrics import QueryMetrics
from .ordering import Comparator, RecordFilter, Transform, with_tiebreak
from .placement import RandomSource, ReplicaPlacement, SeededRandomSource
from .records import Record
from .shard import Shard
from .windows import QuerySession, ResultWindow

T = TypeVar("T")


class Coordinator:
    """
    Owns every shard of the cluster.
    Replicates writes and answers paginated queries with a two-phase merge:
    phase 1 ranks each shard's candidates to find which of them belong to
    the page, phase 2 fetches only those and assembles the page.
    """

    def __init__(
        self,
        shard_count: int,
        replication_factor: int,
        random_source: Optional[RandomSource] = None,
        unique_field: Optional[str] = None,
        max_workers: int = 1,
        name: str = "Coordinator",
    ):
        validate_topology(shard_count, replication_factor)
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.name = name
        self.replication_factor = replication_factor
        self.unique_field = unique_field
        self._log_buffer = deque(maxlen=50)  # Store last 50 log lines
        self._log_lock = threading.Lock()
        self._shards = tuple(Shard(f"Shard-Nr{index}") for index in range(shard_count))
        self._random = random_source or SeededRandomSource()
        self._placement = ReplicaPlacement(self._shards, replication_factor, self._random)
        self._faults = FaultInjector(self._shards, self._random, log=self._log)
        self._metrics = QueryMetrics()
        self._executor: Optional[ThreadPoolExecutor] = None
        if max_workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix=name
            )

        self._log(
            f"[{self.name}] initialized: shards={shard_count}, "
            f"replication_factor={replication_factor}, workers={max_workers}"
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClusterSettings,
        random_source: Optional[RandomSource] = None,
    ) -> "Coordinator":
        return cls(
            settings.shard_count,
            settings.replication_factor,
            random_source=random_source or SeededRandomSource(settings.seed),
            unique_field=settings.unique_field,
            max_workers=settings.max_workers,
        )

    @property
    def shards(self) -> Sequence[Shard]:
        return self._shards

    @property
    def faults(self) -> FaultInjector:
        return self._faults

    def save(self, record: Record) -> None:
        targets = self._placement.targets()
        self._fan_out(lambda shard: shard.save(record), targets)
        self._metrics.record_save()

    def save_all(self, records: Iterable[Record]) -> int:
        count = 0
        for record in records:
            self.save(record)
            count += 1
        return count

    def set_shard_online(self, shard_id: str, online: bool) -> bool:
        return self._faults.set_online(shard_id, online)

    def kill_shards(self, count: int = 1) -> List[str]:
        return self._faults.kill(count)

    def kill_one_shard(self) -> str:
        return self._faults.kill_one()

    def query(
        self,
        page: int,
        page_size: int,
        record_filter: RecordFilter,
        order: Comparator,
        transform: Transform,
    ) -> List[Record]:
        """Return page ``page`` of the filtered, ordered record set.

        Records whose replicas are all offline are missing from the result;
        that is the only way the page can differ from a single-store query.
        """
        if page < 0:
            raise ValueError(f"page must be >= 0, got {page}")
        if page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {page_size}")

        start = time.time()
        order = with_tiebreak(order, self.unique_field)
        skip_total = page * page_size
        upto = (page + 1) * page_size

        sessions = self._fan_out(
            lambda shard: shard.open_session(record_filter, order, upto),
            self._shards,
        )
        offline = [session.shard_id for session in sessions if not session.online]
        windows = self._discover_windows(sessions, order, skip_total, upto)
        rows = self._assemble_page(sessions, windows, order, page_size)
        result = [transform(record) for record in rows]

        duration_ms = (time.time() - start) * 1000
        self._metrics.record_query(duration_ms, len(result), len(offline))
        window_summary = ", ".join(
            f"{session.shard_id}={window.skip}/{window.keep}"
            for session, window in zip(sessions, windows)
            if window.span
        )
        self._log(
            f"[{self.name}] query page={page} size={page_size}: {len(result)} rows, "
            f"{duration_ms:.1f}ms, windows={{{window_summary}}}, offline={offline or 'none'}"
        )
        return result

    def _discover_windows(
        self,
        sessions: Sequence[QuerySession],
        order: Comparator,
        start: int,
        stop: int,
    ) -> List[ResultWindow]:
        queues = [session.queue() for session in sessions]
        return merge(queues, order, WindowDiscovery(len(queues), start, stop))

    def _assemble_page(
        self,
        sessions: Sequence[QuerySession],
        windows: Sequence[ResultWindow],
        order: Comparator,
        page_size: int,
    ) -> List[Record]:
        pairs = list(zip(sessions, windows))
        slices = self._fan_out(lambda pair: pair[0].window(pair[1]), pairs)
        queues = [deque(rows) for rows in slices]
        return merge(queues, order, PageAssembly(page_size))

    def _fan_out(self, call: Callable[..., T], items: Sequence) -> List[T]:
        """Apply ``call`` to every item, in parallel when a worker pool exists."""
        if self._executor is None or len(items) <= 1:
            return [call(item) for item in items]
        return list(self._executor.map(call, items))

    def _log(self, message: str) -> None:
        print(message, flush=True)
        with self._log_lock:
            self._log_buffer.append(message)

    def recent_logs(self, max_lines: int = 10) -> List[str]:
        with self._log_lock:
            return list(self._log_buffer)[-max_lines:]

    def status(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "shard_count": len(self._shards),
            "replication_factor": self.replication_factor,
            "shards": [shard.snapshot() for shard in self._shards],
            "faults": self._faults.snapshot(),
            "metrics": self._metrics.snapshot(),
            "recent_logs": self.recent_logs(),
        }

    def close(self) -> None:
        """Shut down the fan-out worker pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "Coordinator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
