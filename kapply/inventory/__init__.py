"""Inventory persistence and pruning.

Submodules:
    grouping -- GroupingRecord codec, grouping object discovery and naming.
    prune    -- Prune set calculation over past grouping records.
"""

from kapply.inventory.grouping import (
    DEFAULT_INVENTORY_LABEL,
    GroupingRecord,
    add_inventory_to_grouping_object,
    extract_inventory,
    find_grouping_object,
    grouping_object_name,
    is_grouping_object,
    to_identity,
    union_past_inventories,
)
from kapply.inventory.prune import PruneOptions, PrunePlan, calc_prune_set, read_past_grouping_records

__all__ = [
    "DEFAULT_INVENTORY_LABEL",
    "GroupingRecord",
    "PruneOptions",
    "PrunePlan",
    "add_inventory_to_grouping_object",
    "calc_prune_set",
    "extract_inventory",
    "find_grouping_object",
    "grouping_object_name",
    "is_grouping_object",
    "read_past_grouping_records",
    "to_identity",
    "union_past_inventories",
]
