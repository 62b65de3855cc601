"""Status aggregation for inventory objects and the resources they generate.

Submodules:
    selector -- Label selector extraction and query-string rendering.
    reader   -- StatusReader: lookup_resource and status_for_generated_resources.
    tree     -- ResourceTreeReader / InventoryStatusReader over GENERATED_RESOURCE_RULES.
"""

from kapply.kstatus.reader import StatusReader
from kapply.kstatus.selector import label_selector_to_string, selector_from_object
from kapply.kstatus.tree import (
    GENERATED_RESOURCE_RULES,
    GeneratedResourceRule,
    InventoryStatusReader,
    ResourceTreeReader,
    build_inventory_status_reader,
)

__all__ = [
    "GENERATED_RESOURCE_RULES",
    "GeneratedResourceRule",
    "InventoryStatusReader",
    "ResourceTreeReader",
    "StatusReader",
    "build_inventory_status_reader",
    "label_selector_to_string",
    "selector_from_object",
]
