"""Random selection used for replica placement and fault injection."""

import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(ABC):
    """Source of random picks; swap in a deterministic one for tests."""

    @abstractmethod
    def sample(self, items: Sequence[T], k: int) -> List[T]:
        """Return ``k`` distinct items."""
        pass

    @abstractmethod
    def choice(self, items: Sequence[T]) -> T:
        """Return one item."""
        pass


class SeededRandomSource(RandomSource):
    """``random.Random`` backed source, reproducible when seeded."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        return self._rng.sample(list(items), k)

    def choice(self, items: Sequence[T]) -> T:
        return self._rng.choice(list(items))

    def shuffled(self, items: Sequence[T]) -> List[T]:
        values = list(items)
        self._rng.shuffle(values)
        return values


class ReplicaPlacement:
    """Chooses the shards a saved record is copied to."""

    def __init__(self, shards: Sequence, replication_factor: int, random_source: RandomSource):
        self._shards = list(shards)
        self._replication_factor = replication_factor
        self._random = random_source

    @property
    def replication_factor(self) -> int:
        return self._replication_factor

    def targets(self) -> List:
        # Offline shards are eligible targets.
        targets = self._random.sample(self._shards, self._replication_factor)
        if len({id(shard) for shard in targets}) != self._replication_factor:
            raise RuntimeError(
                f"random source returned {len(targets)} picks with duplicates, "
                f"expected {self._replication_factor} distinct shards"
            )
        return targets
