"""Object identity: the (group, kind, namespace, name) key for a cluster resource."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

FIELD_SEPARATOR = "_"

_CORE_GROUP_ALIASES = frozenset({"", "core"})


def group_from_api_version(api_version: str) -> str:
    """Return the API group of an ``apiVersion`` string ("apps/v1" -> "apps", "v1" -> "")."""
    group, sep, _version = api_version.partition("/")
    return group if sep else ""


@dataclass(frozen=True, order=True)
class ObjectIdentity:
    """Identifies one cluster resource.

    All four fields are normalized on construction, so equality, hashing
    and ordering always compare normalized values:

    - group: ``None``/"core" become "", lower-cased
    - namespace: ``None`` becomes "" (cluster-scoped)
    - every field is stripped of surrounding whitespace

    Ordering is lexicographic over (group, kind, namespace, name).
    """

    group: str
    kind: str
    namespace: str
    name: str

    def __post_init__(self) -> None:
        group = (self.group or "").strip().lower()
        if group in _CORE_GROUP_ALIASES:
            group = ""
        object.__setattr__(self, "group", group)
        object.__setattr__(self, "kind", (self.kind or "").strip())
        object.__setattr__(self, "namespace", (self.namespace or "").strip())
        object.__setattr__(self, "name", (self.name or "").strip())

    @property
    def group_kind(self) -> tuple[str, str]:
        return (self.group, self.kind)

    def encode(self) -> str:
        """Encode as ``group_kind_namespace_name`` for grouping record payloads.

        Raises:
            ValueError: a field contains the separator, so ``decode`` could
                not recover it.
        """
        fields = (self.group, self.kind, self.namespace, self.name)
        if any(FIELD_SEPARATOR in f for f in fields):
            raise ValueError(f"{self} cannot be encoded: a field contains {FIELD_SEPARATOR!r}")
        return FIELD_SEPARATOR.join(fields)

    @classmethod
    def decode(cls, value: str) -> ObjectIdentity:
        """Parse the ``group_kind_namespace_name`` form.

        Raises:
            ValueError: wrong field count, or an empty kind or name.
        """
        fields = value.split(FIELD_SEPARATOR)
        if len(fields) != 4:
            raise ValueError(f"expected 4 fields separated by {FIELD_SEPARATOR!r}, got {len(fields)}")
        group, kind, namespace, name = fields
        if not kind.strip() or not name.strip():
            raise ValueError("kind and name must not be empty")
        return cls(group=group, kind=kind, namespace=namespace, name=name)

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> ObjectIdentity:
        """Build the identity of a raw Kubernetes object dict.

        Raises:
            ValueError: kind or metadata.name is missing.
        """
        metadata = obj.get("metadata") or {}
        kind = str(obj.get("kind") or "")
        name = str(metadata.get("name") or "") if isinstance(metadata, Mapping) else ""
        if not kind or not name:
            raise ValueError("object has no kind or metadata.name")
        return cls(
            group=group_from_api_version(str(obj.get("apiVersion") or "")),
            kind=kind,
            namespace=str(metadata.get("namespace") or ""),
            name=name,
        )

    def __str__(self) -> str:
        gk = f"{self.kind}.{self.group}" if self.group else self.kind
        if self.namespace:
            return f"{gk} {self.namespace}/{self.name}"
        return f"{gk} {self.name}"
