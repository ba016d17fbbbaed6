import threading
from typing import Dict, List, Optional

from .errors import WindowRangeError
from .ordering import Comparator, RecordFilter, Transform, sort_key
from .records import Record
from .windows import QuerySession, ResultWindow


class Shard:
    """Local append-only record store with its own query executor."""

    def __init__(self, shard_id: str, online: bool = True):
        self.shard_id = shard_id
        self.online = online
        self._lock = threading.Lock()
        self._records: List[Record] = []
        self._last_result: List[Record] = []
        self._last_transform: Optional[Transform] = None

    @property
    def records_loaded(self) -> int:
        with self._lock:
            return len(self._records)

    def save(self, record: Record) -> None:
        with self._lock:
            self._records.append(record)

    def contains(self, record: Record) -> bool:
        with self._lock:
            return record in self._records

    def open_session(self, record_filter: RecordFilter, order: Comparator, limit: int) -> QuerySession:
        """Run filter, sort and limit, returning the output as a session handle."""
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if not self.online:
            return QuerySession(self.shard_id, [], online=False)

        with self._lock:
            snapshot = list(self._records)
        matches = [record for record in snapshot if record_filter(record)]
        matches.sort(key=sort_key(order))
        return QuerySession(self.shard_id, matches[:limit])

    def query(
        self,
        record_filter: RecordFilter,
        order: Comparator,
        transform: Transform,
        limit: int,
    ) -> List[Record]:
        """Query the shard and remember the untransformed output for :meth:`get_window`.

        An offline shard returns nothing and leaves the previous output alone.
        """
        session = self.open_session(record_filter, order, limit)
        if not session.online:
            return []
        self._last_result = list(session.records)
        self._last_transform = transform
        return [transform(record) for record in self._last_result]

    def get_window(self, window: ResultWindow) -> List[Record]:
        end = window.skip + window.keep
        if end > len(self._last_result):
            raise WindowRangeError(self.shard_id, window.skip, window.keep, len(self._last_result))
        rows = self._last_result[window.skip:end]
        if self._last_transform is None:
            return list(rows)
        return [self._last_transform(record) for record in rows]

    def snapshot(self) -> Dict[str, object]:
        return {
            "id": self.shard_id,
            "online": self.online,
            "records": self.records_loaded,
        }

    def __repr__(self) -> str:
        return f"Shard({self.shard_id}, online={self.online})"
