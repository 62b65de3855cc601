"""Exception hierarchy for kapply.

KApplyError
├── InputError             -- the caller handed us something we cannot use
│   ├── InvalidObjectError     absent object description / no underlying object
│   ├── InventoryDecodeError   grouping record payload cannot be decoded
│   ├── NoSelectorError        label selector missing or malformed
│   └── GroupingObjectError    zero or several grouping objects in one apply
├── NoMatchError           -- group/kind unknown to the REST mapper (permanent)
├── NotFoundError          -- object does not exist in the cluster
└── ReadError              -- any other get/list failure (transient, not retried)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kapply.models.identity import ObjectIdentity


class KApplyError(Exception):
    """Base class for every error raised by kapply."""


class InputError(KApplyError):
    """Invalid input; fatal to the current invocation."""


class InvalidObjectError(InputError):
    """An object description is absent or carries no resource object."""

    def __init__(self, reason: str, source: object = None) -> None:
        super().__init__(f"invalid object: {reason}")
        self.reason = reason
        self.source = source


class InventoryDecodeError(InputError):
    """A grouping record could not be decoded into an Inventory."""

    def __init__(self, record: str, reason: str, entry: str | None = None) -> None:
        detail = f"cannot decode grouping record {record!r}: {reason}"
        if entry is not None:
            detail += f" (entry {entry!r})"
        super().__init__(detail)
        self.record = record
        self.reason = reason
        self.entry = entry


class NoSelectorError(InputError):
    """No usable label selector at the requested field path."""

    def __init__(self, path: tuple[str, ...], owner: str = "", reason: str = "") -> None:
        dotted = ".".join(path)
        detail = f"no selector found at {dotted!r}"
        if owner:
            detail += f" in {owner}"
        if reason:
            detail += f": {reason}"
        super().__init__(detail)
        self.path = path
        self.owner = owner
        self.reason = reason


class GroupingObjectError(InputError):
    """The objects of one apply do not contain exactly one grouping object."""

    def __init__(self, count: int) -> None:
        super().__init__(f"expected exactly one grouping object, found {count}")
        self.count = count


class NoMatchError(KApplyError):
    """The REST mapper has no resource for a group/kind."""

    def __init__(self, group: str, kind: str) -> None:
        gk = f"{kind}.{group}" if group else kind
        super().__init__(f'no matches for kind "{kind}" in group "{group}" ({gk})')
        self.group = group
        self.kind = kind


class NotFoundError(KApplyError):
    """The object was not found in the cluster."""

    def __init__(self, identity: ObjectIdentity) -> None:
        super().__init__(f"{identity} not found")
        self.identity = identity


class ReadError(KApplyError):
    """A get or list call against the cluster failed."""

    def __init__(self, operation: str, target: str, cause: BaseException | str) -> None:
        super().__init__(f"{operation} {target} failed: {cause}")
        self.operation = operation
        self.target = target
        self.cause = cause
