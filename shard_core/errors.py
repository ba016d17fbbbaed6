"""Exceptions raised by the sharded store."""


class ShardCoreError(Exception):
    """Base class for store errors."""


class ConfigurationError(ShardCoreError, ValueError):
    """Invalid cluster topology or configuration payload."""


class WindowRangeError(ShardCoreError, IndexError):
    """A window fetch ran past the query output it was computed against.

    Raised when phase 2 runs without a matching phase 1, or with a different
    filter, order or limit. The query round cannot continue.
    """

    def __init__(self, shard_id: str, skip: int, keep: int, available: int):
        self.shard_id = shard_id
        self.skip = skip
        self.keep = keep
        self.available = available
        super().__init__(
            f"{shard_id}: window skip={skip} keep={keep} exceeds {available} cached records"
        )


class FieldTypeError(ShardCoreError, TypeError):
    """A record field does not hold the kind of value the caller asked for."""
