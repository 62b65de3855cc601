"""Core data structures for kapply."""

from kapply.models.config import KApplyConfig
from kapply.models.identity import ObjectIdentity
from kapply.models.inventory import Inventory, difference, union
from kapply.models.status import (
    ActuationStatus,
    InventoryEntry,
    ResourceStatus,
    is_sorted_by_identity,
    render_actuation_status,
    sort_by_identity,
)

__all__ = [
    "ActuationStatus",
    "Inventory",
    "InventoryEntry",
    "KApplyConfig",
    "ObjectIdentity",
    "ResourceStatus",
    "difference",
    "is_sorted_by_identity",
    "render_actuation_status",
    "sort_by_identity",
    "union",
]
