"""Collaborator contracts consumed by kapply.

Production implementations live in this package (``KubernetesClusterReader``,
``DiscoveryRESTMapper``); tests supply their own. Anything with matching
methods satisfies a contract, no base class required.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from kapply.models.status import ResourceStatus


@dataclass(frozen=True)
class ResourceMapping:
    """A group/kind resolved to a concrete API resource."""

    group: str
    version: str
    kind: str
    resource: str  # plural, lower-case: "deployments"
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def path(self, namespace: str = "", name: str = "") -> str:
        """REST path for the collection, or for one object when *name* is given."""
        base = f"/apis/{self.group}/{self.version}" if self.group else f"/api/{self.version}"
        if self.namespaced and namespace:
            base += f"/namespaces/{namespace}"
        base += f"/{self.resource}"
        if name:
            base += f"/{name}"
        return base


class RESTMapper(Protocol):
    def resolve(self, group: str, kind: str) -> ResourceMapping:
        """Resolve a group/kind; raises NoMatchError when it is unknown."""
        ...


class ClusterReader(Protocol):
    async def get(self, mapping: ResourceMapping, namespace: str, name: str) -> dict[str, Any]:
        """Fetch one object; raises NotFoundError or ReadError."""
        ...

    async def list(self, mapping: ResourceMapping, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        """List objects matching *label_selector*, in no particular order; raises ReadError."""
        ...


class StatusComputer(Protocol):
    async def compute_status(self, resource: dict[str, Any]) -> ResourceStatus:
        """Compute the status of a single resource."""
        ...
