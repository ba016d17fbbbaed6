import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigurationError


def validate_topology(shard_count: int, replication_factor: int) -> None:
    if replication_factor < 1:
        raise ConfigurationError(
            f"replication factor must be at least 1, got {replication_factor}"
        )
    if shard_count < replication_factor:
        raise ConfigurationError(
            f"shard count ({shard_count}) must be >= replication factor ({replication_factor})"
        )


@dataclass(frozen=True)
class ClusterSettings:
    """Immutable description of a simulated cluster."""

    shard_count: int
    replication_factor: int
    unique_field: Optional[str] = "id"
    max_workers: int = 1
    seed: Optional[int] = None
    page_size: int = 10

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ClusterSettings":
        """Create settings from a dictionary, using defaults for optional keys."""
        if not data:
            raise ConfigurationError("Cluster configuration is empty.")
        try:
            settings = cls(
                shard_count=int(data["shard_count"]),
                replication_factor=int(data["replication_factor"]),
                unique_field=data.get("unique_field", "id"),
                max_workers=int(data.get("max_workers", 1)),
                seed=int(data["seed"]) if data.get("seed") is not None else None,
                page_size=int(data.get("page_size", 10)),
            )
        except KeyError as exc:
            missing = exc.args[0]
            raise ConfigurationError(f"Cluster configuration missing required field '{missing}'.") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid cluster configuration: {exc}") from exc
        settings.validate()
        return settings

    def validate(self) -> None:
        validate_topology(self.shard_count, self.replication_factor)
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.page_size < 1:
            raise ConfigurationError(f"page_size must be at least 1, got {self.page_size}")

    def with_overrides(self, **overrides) -> "ClusterSettings":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        settings = replace(self, **changes)
        settings.validate()
        return settings


class ClusterConfig:
    """Config facade that hides JSON parsing."""

    def __init__(self, config_path: str):
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with path.open("r", encoding="utf-8") as stream:
            try:
                payload = json.load(stream)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Config file {config_path} is not valid JSON: {exc}") from exc

        if not isinstance(payload, dict) or "cluster" not in payload:
            raise ConfigurationError("Configuration must include a 'cluster' section.")

        self.path = path
        self._settings = ClusterSettings.from_dict(payload["cluster"])
        self._data_file = payload.get("data_file")

    @property
    def settings(self) -> ClusterSettings:
        return self._settings

    @property
    def data_file(self) -> Optional[str]:
        """Record file named by the config, resolved against the config's directory."""
        if not self._data_file:
            return None
        return str((self.path.parent / self._data_file).resolve())
