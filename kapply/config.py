"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kapply.models.config import InventoryConfig, KApplyConfig, LogConfig, StatusConfig

# Qualified label key: optional DNS-subdomain prefix, then a name segment.
_LABEL_KEY = re.compile(r"^([a-z0-9]([-a-z0-9.]*[a-z0-9])?/)?[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KAPPLY_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in ("json", "console"):
        raise ValueError(f"Invalid log format: {value}. Must be json or console")
    return value.lower()


def _validate_label_key(value: str) -> str:
    if not _LABEL_KEY.match(value):
        raise ValueError(f"Invalid inventory label key: {value}")
    return value


def load_config() -> KApplyConfig:
    """Load configuration from KAPPLY_* environment variables."""
    return KApplyConfig(
        inventory=InventoryConfig(
            label=_validate_label_key(_env("INVENTORY_LABEL", "cli-utils.sigs.k8s.io/inventory-id")),
            namespace=_env("INVENTORY_NAMESPACE", "default"),
        ),
        status=StatusConfig(
            max_concurrency=_env_int("STATUS_MAX_CONCURRENCY", 8, min_val=1, max_val=64),
            read_timeout_seconds=_env_int("STATUS_READ_TIMEOUT", 30, min_val=1, max_val=300),
            max_depth=_env_int("STATUS_MAX_DEPTH", 2, min_val=0, max_val=5),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
