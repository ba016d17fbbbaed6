"""Administrative shard health toggles used for fault-injection runs."""

import threading
from typing import Callable, Dict, List, Optional, Sequence

from .placement import RandomSource
from .shard import Shard


class FaultInjector:
    """Flips shard online flags between query rounds and tracks what is down."""

    def __init__(
        self,
        shards: Sequence[Shard],
        random_source: RandomSource,
        log: Optional[Callable[[str], None]] = None,
    ):
        self._shards: Dict[str, Shard] = {shard.shard_id: shard for shard in shards}
        self._random = random_source
        self._log = log or (lambda message: print(message, flush=True))
        self._lock = threading.Lock()
        self._transitions = 0

    def _shard(self, shard_id: str) -> Shard:
        if shard_id not in self._shards:
            raise KeyError(f"Shard '{shard_id}' is not part of the cluster.")
        return self._shards[shard_id]

    def set_online(self, shard_id: str, online: bool) -> bool:
        """Set one shard's flag; returns True when it actually changed."""
        shard = self._shard(shard_id)
        with self._lock:
            if shard.online == online:
                return False
            shard.online = online
            self._transitions += 1
        state = "online" if online else "offline"
        self._log(f"[FaultInjector] {shard_id} is now {state}")
        return True

    def restore_all(self) -> None:
        for shard_id in self._shards:
            self.set_online(shard_id, True)

    def kill(self, count: int = 1) -> List[str]:
        """Bring every shard back, then take ``count`` random shards offline."""
        if count < 0 or count > len(self._shards):
            raise ValueError(f"count must be between 0 and {len(self._shards)}, got {count}")
        self.restore_all()
        victims = self._random.sample(list(self._shards), count)
        for shard_id in victims:
            self.set_online(shard_id, False)
        return victims

    def kill_one(self) -> str:
        """Bring every shard back, then take a single random shard offline."""
        self.restore_all()
        victim = self._random.choice(list(self._shards))
        self.set_online(victim, False)
        return victim

    def offline_ids(self) -> List[str]:
        return [shard_id for shard_id, shard in self._shards.items() if not shard.online]

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            transitions = self._transitions
        return {
            "offline": self.offline_ids(),
            "online": [shard_id for shard_id, shard in self._shards.items() if shard.online],
            "transitions": transitions,
        }
