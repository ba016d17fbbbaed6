"""K-way merge over independently sorted shard outputs."""

from abc import ABC, abstractmethod
from typing import Deque, List, Optional, Sequence

from .ordering import Comparator
from .records import Record
from .windows import ResultWindow


class MergeStrategy(ABC):
    """Per-step bookkeeping plugged into :func:`merge`."""

    @abstractmethod
    def done(self) -> bool:
        """Return True once the merge can stop."""
        pass

    @abstractmethod
    def update(self, element: Record, matched: Sequence[int]) -> None:
        """Account for one merge step.

        ``matched`` holds the index of every queue whose head compared equal
        to ``element``; all of them are advanced after this call.
        """
        pass

    @property
    @abstractmethod
    def result(self):
        pass


class WindowDiscovery(MergeStrategy):
    """Phase 1: work out how much of each queue falls before and inside the page."""

    def __init__(self, queue_count: int, start: int, stop: int):
        self.start = start
        self.stop = stop
        self.rank = 0
        self._windows = [ResultWindow() for _ in range(queue_count)]

    def done(self) -> bool:
        return self.rank >= self.stop

    def update(self, element: Record, matched: Sequence[int]) -> None:
        self.rank += 1
        for index in matched:
            if self.rank <= self.start:
                self._windows[index].inc_skip()
            else:
                self._windows[index].inc_keep()

    @property
    def result(self) -> List[ResultWindow]:
        return self._windows


class PageAssembly(MergeStrategy):
    """Phase 2: collect the page itself."""

    def __init__(self, limit: int):
        self.limit = limit
        self._page: List[Record] = []

    def done(self) -> bool:
        return len(self._page) >= self.limit

    def update(self, element: Record, matched: Sequence[int]) -> None:
        self._page.append(element)

    @property
    def result(self) -> List[Record]:
        return self._page


def _next_in_order(queues: Sequence[Deque[Record]], comparator: Comparator) -> Optional[Record]:
    best: Optional[Record] = None
    for queue in queues:
        if not queue:
            continue
        head = queue[0]
        if best is None or comparator(head, best) < 0:
            best = head
    return best


def merge(queues: Sequence[Deque[Record]], comparator: Comparator, strategy: MergeStrategy):
    """Drain ``queues`` in comparator order until ``strategy`` is done.

    Queues whose heads compare equal advance together and count as a single
    step, which is how replicas of one record collapse into one element.
    The queues are consumed in place.
    """
    while not strategy.done():
        element = _next_in_order(queues, comparator)
        if element is None:
            break
        matched = [
            index for index, queue in enumerate(queues)
            if queue and comparator(queue[0], element) == 0
        ]
        strategy.update(element, matched)
        for index in matched:
            queues[index].popleft()
    return strategy.result
