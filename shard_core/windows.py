from collections import deque
from typing import Deque, Iterable, List

from .errors import WindowRangeError
from .records import Record


class ResultWindow:
    """Skip ``skip`` records of a shard's query output, then keep ``keep``."""

    __slots__ = ("_skip", "_keep")

    def __init__(self):
        self._skip = 0
        self._keep = 0

    @property
    def skip(self) -> int:
        return self._skip

    @property
    def keep(self) -> int:
        return self._keep

    @property
    def span(self) -> int:
        return self._skip + self._keep

    def inc_skip(self) -> int:
        self._skip += 1
        return self._skip

    def inc_keep(self) -> int:
        self._keep += 1
        return self._keep

    def __repr__(self) -> str:
        return f"ResultWindow(skip={self._skip}, keep={self._keep})"


class QuerySession:
    """Phase-1 output of one shard for one query round.

    Holds the filtered, sorted, limited records before any transform is
    applied, so the phase-2 window is cut from exactly what phase 1 ranked.
    """

    def __init__(self, shard_id: str, records: Iterable[Record], online: bool = True):
        self.shard_id = shard_id
        self.records = tuple(records)
        self.online = online

    def __len__(self) -> int:
        return len(self.records)

    def queue(self) -> Deque[Record]:
        return deque(self.records)

    def window(self, window: ResultWindow) -> List[Record]:
        end = window.skip + window.keep
        if end > len(self.records):
            raise WindowRangeError(self.shard_id, window.skip, window.keep, len(self.records))
        return list(self.records[window.skip:end])

    def __repr__(self) -> str:
        return f"QuerySession(shard={self.shard_id}, records={len(self.records)}, online={self.online})"
