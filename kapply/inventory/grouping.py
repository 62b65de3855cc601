"""Grouping objects: the persisted record of one apply's inventory.

A grouping object is a ConfigMap carrying the inventory label. Its ``data``
map holds one key per managed object, the identity encoded as
``group_kind_namespace_name``; the value is that object's actuation status
("" is Pending). The API server drops empty maps, so a grouping object with
no ``data`` key is a valid record with zero entries.
"""

from __future__ import annotations

import copy
import hashlib
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from kapply.errors import GroupingObjectError, InvalidObjectError, InventoryDecodeError
from kapply.models.identity import ObjectIdentity
from kapply.models.inventory import Inventory, union
from kapply.models.status import ActuationStatus, InventoryEntry
from kapply.observability.logging import get_logger
from kapply.observability.metrics import grouping_decode_errors_total

_log = get_logger("inventory.grouping")

DEFAULT_INVENTORY_LABEL = "cli-utils.sigs.k8s.io/inventory-id"
INVENTORY_HASH_ANNOTATION = "kapply.io/inventory-hash"

_UNKNOWN_RECORD = "<unknown>"


def to_identity(obj: Mapping[str, Any] | None) -> ObjectIdentity:
    """Identity of a resource description.

    Raises:
        InvalidObjectError: the description is absent, carries no resource
            object, or the object has no kind or name.
    """
    if obj is None:
        raise InvalidObjectError("object description is absent")
    if not isinstance(obj, Mapping) or not obj:
        raise InvalidObjectError("description carries no resource object", source=obj)
    try:
        return ObjectIdentity.from_object(obj)
    except ValueError as exc:
        raise InvalidObjectError(str(exc), source=obj) from exc


def _labels(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    metadata = obj.get("metadata")
    if not isinstance(metadata, Mapping):
        return {}
    labels = metadata.get("labels")
    return labels if isinstance(labels, Mapping) else {}


def is_grouping_object(obj: Any, label: str = DEFAULT_INVENTORY_LABEL) -> bool:
    return isinstance(obj, Mapping) and label in _labels(obj)


def find_grouping_object(objs: Iterable[Any], label: str = DEFAULT_INVENTORY_LABEL) -> Mapping[str, Any]:
    """Return the single grouping object among the objects of one apply.

    Raises:
        GroupingObjectError: zero or more than one grouping object.
    """
    found = [obj for obj in objs if is_grouping_object(obj, label)]
    if len(found) != 1:
        raise GroupingObjectError(len(found))
    return found[0]


def inventory_hash(inventory: Inventory) -> str:
    """First 8 hex digits of a SHA-256 over the sorted encoded identities."""
    digest = hashlib.sha256()
    for identity in inventory:
        digest.update(identity.encode().encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()[:8]


def grouping_object_name(base: str, inventory: Inventory) -> str:
    return f"{base}-{inventory_hash(inventory)}"


def encode_entries(entries: Iterable[InventoryEntry]) -> dict[str, str]:
    """Encode entries as a grouping object ``data`` map, sorted by identity."""
    ordered = sorted(entries, key=lambda e: e.identity)
    return {
        e.identity.encode(): "" if e.status is ActuationStatus.PENDING else str(e.status) for e in ordered
    }


@dataclass(frozen=True)
class GroupingRecord:
    """One grouping object as read back from the cluster or the current apply.

    Decoding is lazy: constructing a record never fails, ``entries()`` and
    ``inventory()`` raise InventoryDecodeError on a malformed payload.
    """

    obj: Any

    @classmethod
    def from_entries(
        cls,
        grouping: Mapping[str, Any],
        entries: Iterable[InventoryEntry],
        suffix_name: bool = True,
    ) -> GroupingRecord:
        """Build a new record from a grouping object template and inventory entries.

        With *suffix_name* the record's name gets the inventory hash appended
        so that each distinct inventory is stored in its own object.

        Raises:
            InvalidObjectError: an entry's identity cannot be encoded, so the
                record could never be read back.
        """
        entries = list(entries)
        inventory = Inventory(e.identity for e in entries)
        try:
            data = encode_entries(entries)
        except ValueError as exc:
            raise InvalidObjectError(str(exc)) from exc
        obj = copy.deepcopy(dict(grouping))
        metadata = dict(obj.get("metadata") or {})
        annotations = dict(metadata.get("annotations") or {})
        annotations[INVENTORY_HASH_ANNOTATION] = inventory_hash(inventory)
        metadata["annotations"] = annotations
        if suffix_name:
            metadata["name"] = grouping_object_name(str(metadata.get("name", "")), inventory)
        obj["metadata"] = metadata
        obj["data"] = data
        return cls(obj=obj)

    @property
    def name(self) -> str:
        if isinstance(self.obj, Mapping):
            metadata = self.obj.get("metadata")
            if isinstance(metadata, Mapping) and metadata.get("name"):
                return str(metadata["name"])
        return _UNKNOWN_RECORD

    @property
    def identity(self) -> ObjectIdentity:
        return to_identity(self.obj)

    def inventory_id(self, label: str = DEFAULT_INVENTORY_LABEL) -> str:
        if not isinstance(self.obj, Mapping):
            return ""
        return str(_labels(self.obj).get(label, ""))

    def entries(self) -> list[InventoryEntry]:
        """Decode the payload into entries, in payload order, first occurrence wins."""
        if not isinstance(self.obj, Mapping) or not self.obj:
            raise self._decode_error("record carries no object")
        data = self.obj.get("data")
        if data is None:
            return []
        if not isinstance(data, Mapping):
            raise self._decode_error(f"data must be a mapping, got {type(data).__name__}")

        entries: list[InventoryEntry] = []
        seen: set[ObjectIdentity] = set()
        for key, value in data.items():
            if not isinstance(key, str):
                raise self._decode_error("entry key is not a string", entry=repr(key))
            try:
                identity = ObjectIdentity.decode(key)
                status = ActuationStatus.parse(value if value is not None else "")
            except (TypeError, ValueError) as exc:
                raise self._decode_error(str(exc), entry=key) from exc
            if identity in seen:
                continue
            seen.add(identity)
            entries.append(InventoryEntry(identity=identity, status=status))
        return entries

    def inventory(self) -> Inventory:
        return Inventory(e.identity for e in self.entries())

    def to_object(self) -> dict[str, Any]:
        if not isinstance(self.obj, Mapping):
            raise InvalidObjectError("description carries no resource object", source=self.obj)
        return copy.deepcopy(dict(self.obj))

    def _decode_error(self, reason: str, entry: str | None = None) -> InventoryDecodeError:
        grouping_decode_errors_total.inc()
        _log.warning("grouping_record_decode_failed", record=self.name, reason=reason, entry=entry)
        return InventoryDecodeError(self.name, reason, entry=entry)


def extract_inventory(record: GroupingRecord) -> Inventory:
    """Decode one grouping record into an Inventory (zero entries is valid)."""
    return record.inventory()


def union_past_inventories(records: Sequence[GroupingRecord]) -> Inventory:
    """Union the inventories of every record.

    All-or-nothing: the first record that fails to decode aborts the union
    and its InventoryDecodeError (naming the record) propagates.
    """
    return union(*(extract_inventory(r) for r in records))


def add_inventory_to_grouping_object(
    objs: Sequence[Mapping[str, Any]],
    label: str = DEFAULT_INVENTORY_LABEL,
) -> GroupingRecord:
    """Record every non-grouping object of an apply in its grouping object.

    Returns a new record; the input objects are not modified. Every entry
    starts out Pending.

    Raises:
        GroupingObjectError: *objs* holds zero or several grouping objects.
        InvalidObjectError: an object has no kind or name, or a field of its
            identity contains the "_" separator.
    """
    grouping = find_grouping_object(objs, label)
    entries = [InventoryEntry(identity=to_identity(obj)) for obj in objs if obj is not grouping]
    record = GroupingRecord.from_entries(grouping, entries)
    _log.debug("grouping_object_built", record=record.name, entries=len(entries))
    return record
