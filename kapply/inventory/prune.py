"""Prune set calculation.

The prune set is every identity recorded by a past grouping object that the
current apply no longer declares::

    prune_set = union(past inventories) - current inventory

Any past record that cannot be decoded aborts the calculation: undercounting
history could leave orphans, and guessing could delete live objects.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from kapply.client.interfaces import ClusterReader, RESTMapper
from kapply.errors import InvalidObjectError
from kapply.inventory.grouping import DEFAULT_INVENTORY_LABEL, GroupingRecord, union_past_inventories
from kapply.models.identity import ObjectIdentity
from kapply.models.inventory import Inventory
from kapply.models.status import InventoryEntry
from kapply.observability.logging import get_logger
from kapply.observability.metrics import prune_set_size

_log = get_logger("inventory.prune")


def calc_prune_set(
    past_records: Sequence[GroupingRecord],
    current: GroupingRecord | Inventory | None,
) -> Inventory:
    """Identities recorded in *past_records* but absent from *current*.

    Raises:
        InvalidObjectError: *current* is None.
        InventoryDecodeError: *current* or any past record is malformed.
    """
    if current is None:
        raise InvalidObjectError("current grouping object is absent")
    current_inventory = current if isinstance(current, Inventory) else current.inventory()
    past_inventory = union_past_inventories(past_records)
    pruned = past_inventory.difference(current_inventory)

    prune_set_size.observe(len(pruned))
    _log.info(
        "prune_set_computed",
        past_records=len(past_records),
        past=len(past_inventory),
        current=len(current_inventory),
        prune=len(pruned),
    )
    return pruned


@dataclass
class PrunePlan:
    """What the delete executor should remove, in order.

    ``objects`` first, then the superseded ``grouping_records`` once every
    object they track is gone.
    """

    objects: list[InventoryEntry] = field(default_factory=list)
    grouping_records: list[ObjectIdentity] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.objects and not self.grouping_records


class PruneOptions:
    """Prune calculation bound to the grouping object of the current apply."""

    def __init__(self, current_grouping_object: GroupingRecord | None = None) -> None:
        self.current_grouping_object = current_grouping_object

    def calc_prune_set(self, past_records: Sequence[GroupingRecord]) -> Inventory:
        return calc_prune_set(past_records, self.current_grouping_object)

    def plan(self, past_records: Sequence[GroupingRecord]) -> PrunePlan:
        """Prune set plus the past grouping objects superseded by the current one.

        Raises:
            InvalidObjectError: the current grouping object, or a past one,
                has no identity.
            InventoryDecodeError: any record is malformed.
        """
        current = self.current_grouping_object
        if current is None:
            raise InvalidObjectError("current grouping object is absent")
        pruned = calc_prune_set(past_records, current)
        current_identity = current.identity
        superseded = {r.identity for r in past_records} - {current_identity}
        return PrunePlan(
            objects=[InventoryEntry(identity=i) for i in pruned],
            grouping_records=sorted(superseded),
        )


async def read_past_grouping_records(
    reader: ClusterReader,
    mapper: RESTMapper,
    namespace: str,
    inventory_id: str,
    label: str = DEFAULT_INVENTORY_LABEL,
) -> list[GroupingRecord]:
    """List every grouping object stored for *inventory_id* in *namespace*.

    Read and resolution errors propagate unchanged; no retry happens here.
    """
    mapping = mapper.resolve("", "ConfigMap")
    objs = await reader.list(mapping, namespace, f"{label}={inventory_id}")
    records = [GroupingRecord(obj=obj) for obj in objs]
    _log.debug("past_grouping_records_read", namespace=namespace, inventory_id=inventory_id, count=len(records))
    return records
