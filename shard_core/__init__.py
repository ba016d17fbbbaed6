"""Simulated sharded, replicated record store with two-phase paginated queries."""

from .config import ClusterSettings, ClusterConfig, validate_topology
from .coordinator import Coordinator
from .errors import ShardCoreError, ConfigurationError, WindowRangeError, FieldTypeError
from .faults import FaultInjector
from .merge import MergeStrategy, WindowDiscovery, PageAssembly, merge
from .metrics import QueryMetrics
from .ordering import field_order, chain, order_by, with_tiebreak, sort_key
from .placement import RandomSource, SeededRandomSource, ReplicaPlacement
from .records import FieldKind, Record, projection, identity
from .reporting import format_status, print_status
from .shard import Shard
from .sources import ColumnSpec, CsvRecordSource, PEOPLE_COLUMNS
from .windows import ResultWindow, QuerySession

__all__ = [
    "ClusterSettings",
    "ClusterConfig",
    "validate_topology",
    "Coordinator",
    "ShardCoreError",
    "ConfigurationError",
    "WindowRangeError",
    "FieldTypeError",
    "FaultInjector",
    "MergeStrategy",
    "WindowDiscovery",
    "PageAssembly",
    "merge",
    "QueryMetrics",
    "field_order",
    "chain",
    "order_by",
    "with_tiebreak",
    "sort_key",
    "RandomSource",
    "SeededRandomSource",
    "ReplicaPlacement",
    "FieldKind",
    "Record",
    "projection",
    "identity",
    "format_status",
    "print_status",
    "Shard",
    "ColumnSpec",
    "CsvRecordSource",
    "PEOPLE_COLUMNS",
    "ResultWindow",
    "QuerySession",
]
