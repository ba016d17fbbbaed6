from typing import Dict, List


def format_status(status: Dict[str, object]) -> List[str]:
    lines = [
        f"Shard count: {status['shard_count']}, "
        f"replication factor: {status['replication_factor']}"
    ]
    for shard in status["shards"]:
        lines.append(
            f"Shard: {shard['id']}, online: {str(shard['online']).lower()}, "
            f"record count: {shard['records']}"
        )
    return lines


def format_metrics(status: Dict[str, object]) -> List[str]:
    metrics = status["metrics"]
    return [
        f" queries={metrics['completed']} degraded={metrics['degraded_queries']} "
        f"avg_ms={metrics['avg_ms']:.2f}",
        f" saves={metrics['saves']} rows_returned={metrics['rows_returned']}",
    ]


def print_status(coordinator, with_metrics: bool = False) -> None:
    status = coordinator.status()
    for line in format_status(status):
        print(line)
    if with_metrics:
        for line in format_metrics(status):
            print(line)
