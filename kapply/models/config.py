"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class InventoryConfig:
    """Grouping object (inventory record) configuration."""

    label: str = "cli-utils.sigs.k8s.io/inventory-id"
    namespace: str = "default"


@dataclass
class StatusConfig:
    """Status reader configuration."""

    max_concurrency: int = 8
    read_timeout_seconds: int = 30
    max_depth: int = 2


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class KApplyConfig:
    """Top-level kapply configuration."""

    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    log: LogConfig = field(default_factory=LogConfig)
