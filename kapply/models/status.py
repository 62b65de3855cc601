"""Actuation status and resource status data structures."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from kapply.errors import NotFoundError
from kapply.models.identity import ObjectIdentity


class ActuationStatus(IntEnum):
    """Outcome of the last actuation attempt for one inventory entry.

    PENDING is the only initial state; the other three are terminal.
    Transitions are owned by the apply executor, not by this package.
    """

    PENDING = 0
    SUCCEEDED = 1
    SKIPPED = 2
    FAILED = 3

    def __str__(self) -> str:
        return _ACTUATION_STATUS_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> ActuationStatus:
        """Parse the rendered form. An empty string is PENDING.

        Raises:
            ValueError: not one of the four rendered names.
        """
        if value == "":
            return cls.PENDING
        for status, name in _ACTUATION_STATUS_NAMES.items():
            if name == value:
                return status
        raise ValueError(f"unknown actuation status {value!r}")


_ACTUATION_STATUS_NAMES: dict[ActuationStatus, str] = {
    ActuationStatus.PENDING: "Pending",
    ActuationStatus.SUCCEEDED: "Succeeded",
    ActuationStatus.SKIPPED: "Skipped",
    ActuationStatus.FAILED: "Failed",
}


def render_actuation_status(value: int) -> str:
    """Render any integer tag; values outside the enum render as ``ActuationStatus(<n>)``."""
    try:
        return str(ActuationStatus(value))
    except ValueError:
        return f"ActuationStatus({value})"


@dataclass(frozen=True)
class InventoryEntry:
    """An identity together with its actuation status.

    The status is metadata: two entries for the same identity refer to the
    same object regardless of status.
    """

    identity: ObjectIdentity
    status: ActuationStatus = ActuationStatus.PENDING


@dataclass(frozen=True)
class ResourceStatus:
    """Status of one resource as reported by a status computation.

    ``status`` is whatever the injected status computation returned; kapply
    never inspects it. ``generated`` holds the statuses of resources this one
    generates, already sorted by identity.
    """

    identity: ObjectIdentity
    status: Any = None
    message: str = ""
    resource: dict[str, Any] | None = field(default=None, compare=False, repr=False)
    generated: tuple[ResourceStatus, ...] = ()
    error: Exception | None = field(default=None, compare=False)

    @property
    def found(self) -> bool:
        return not isinstance(self.error, NotFoundError)


def sort_by_identity(statuses: Iterable[ResourceStatus]) -> list[ResourceStatus]:
    return sorted(statuses, key=lambda s: s.identity)


def is_sorted_by_identity(statuses: Sequence[ResourceStatus]) -> bool:
    return all(statuses[i].identity <= statuses[i + 1].identity for i in range(len(statuses) - 1))
