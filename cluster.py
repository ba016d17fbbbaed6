import argparse
import os
import sys
from typing import List, Optional

# Ensure local imports resolve when executed from scripts directory.
sys.path.append(os.path.dirname(__file__))

from shard_core import (
    ClusterConfig,
    ClusterSettings,
    Coordinator,
    CsvRecordSource,
    Record,
    SeededRandomSource,
    order_by,
    print_status,
    projection,
    sort_key,
    with_tiebreak,
)

DEFAULT_CONFIG = os.path.join(os.path.dirname(__file__), "config", "cluster.json")


def reachable_records(coordinator: Coordinator, records: List[Record]) -> List[Record]:
    """Records with at least one replica on an online shard."""
    online = [shard for shard in coordinator.shards if shard.online]
    return [record for record in records if any(shard.contains(record) for shard in online)]


def expected_page(records, record_filter, order, transform, page, page_size, unique_field):
    order = with_tiebreak(order, unique_field)
    matches = sorted((r for r in records if record_filter(r)), key=sort_key(order))
    return [transform(r) for r in matches[page * page_size:(page + 1) * page_size]]


def older_non_male(record: Record) -> bool:
    return record.get_int("age") > 30 and record.get("gender") != "MALE"


def everything(record: Record) -> bool:
    return True


def execute_query(coordinator, records, record_filter, order, transform, page, page_size) -> bool:
    coordinator.kill_one_shard()
    print_status(coordinator)

    result = coordinator.query(page, page_size, record_filter, order, transform)
    expected = expected_page(
        reachable_records(coordinator, records),
        record_filter,
        order,
        transform,
        page,
        page_size,
        coordinator.unique_field,
    )

    print("Result from shards")
    for row in result:
        print(dict(row))
    print("Expected result")
    for row in expected:
        print(dict(row))

    if result != expected:
        print(f"[Cluster] MISMATCH on page {page} (size {page_size})", flush=True)
        return False
    return True


def run(settings: ClusterSettings, data_file: str) -> int:
    source = CsvRecordSource(data_file)
    records = source.load()
    random_source = SeededRandomSource(settings.seed)

    with Coordinator.from_settings(settings, random_source=random_source) as coordinator:
        coordinator.save_all(random_source.shuffled(records))

        ok = execute_query(
            coordinator,
            records,
            older_non_male,
            order_by("-age", "id"),
            projection("id", "age"),
            page=5,
            page_size=13,
        )
        ok = execute_query(
            coordinator,
            records,
            everything,
            order_by("id"),
            projection("id"),
            page=3,
            page_size=settings.page_size,
        ) and ok

        print_status(coordinator, with_metrics=True)
    return 0 if ok else 1


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the sharded store demo queries.")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help="Path to JSON cluster configuration.",
    )
    parser.add_argument("--data", default=None, help="CSV record file (overrides config).")
    parser.add_argument("--shards", type=int, default=None, help="Shard count (overrides config).")
    parser.add_argument(
        "--replication",
        type=int,
        default=None,
        help="Replication factor (overrides config).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides config).")
    parser.add_argument("--workers", type=int, default=None, help="Fan-out worker threads.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = ClusterConfig(args.config)
    settings = config.settings.with_overrides(
        shard_count=args.shards,
        replication_factor=args.replication,
        seed=args.seed,
        max_workers=args.workers,
    )
    data_file = args.data or config.data_file
    if not data_file:
        print("No record file given (use --data or set data_file in the config).")
        return 2
    return run(settings, data_file)


if __name__ == "__main__":
    sys.exit(main())
