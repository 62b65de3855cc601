"""REST mappers: resolve a group/kind to an API resource."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kapply.client.interfaces import ResourceMapping
from kapply.client.kube import get_json
from kapply.errors import NoMatchError, ReadError
from kapply.observability.logging import get_logger

_log = get_logger("client.mapper")

# Built-in kinds every cluster serves.
DEFAULT_MAPPINGS: tuple[ResourceMapping, ...] = (
    ResourceMapping("", "v1", "Pod", "pods"),
    ResourceMapping("", "v1", "ConfigMap", "configmaps"),
    ResourceMapping("", "v1", "Secret", "secrets"),
    ResourceMapping("", "v1", "Service", "services"),
    ResourceMapping("", "v1", "ServiceAccount", "serviceaccounts"),
    ResourceMapping("", "v1", "PersistentVolumeClaim", "persistentvolumeclaims"),
    ResourceMapping("", "v1", "PersistentVolume", "persistentvolumes", namespaced=False),
    ResourceMapping("", "v1", "Namespace", "namespaces", namespaced=False),
    ResourceMapping("", "v1", "Node", "nodes", namespaced=False),
    ResourceMapping("apps", "v1", "Deployment", "deployments"),
    ResourceMapping("apps", "v1", "ReplicaSet", "replicasets"),
    ResourceMapping("apps", "v1", "StatefulSet", "statefulsets"),
    ResourceMapping("apps", "v1", "DaemonSet", "daemonsets"),
    ResourceMapping("batch", "v1", "Job", "jobs"),
    ResourceMapping("batch", "v1", "CronJob", "cronjobs"),
)


class StaticRESTMapper:
    """REST mapper over a fixed set of mappings."""

    def __init__(self, mappings: Iterable[ResourceMapping] = ()) -> None:
        self._by_group_kind: dict[tuple[str, str], ResourceMapping] = {}
        for m in mappings:
            # first mapping registered for a group/kind wins (preferred version)
            self._by_group_kind.setdefault((m.group.lower(), m.kind), m)

    @classmethod
    def with_defaults(cls, extra: Iterable[ResourceMapping] = ()) -> StaticRESTMapper:
        return cls([*extra, *DEFAULT_MAPPINGS])

    def resolve(self, group: str, kind: str) -> ResourceMapping:
        mapping = self._by_group_kind.get(((group or "").lower(), kind))
        if mapping is None:
            raise NoMatchError(group, kind)
        return mapping

    def __len__(self) -> int:
        return len(self._by_group_kind)


class DiscoveryRESTMapper(StaticRESTMapper):
    """REST mapper populated from the API server's discovery endpoints.

    Discovery happens once, in ``discover``; resolution afterwards is a
    dictionary lookup. Only each group's preferred version is mapped.
    """

    @classmethod
    async def discover(cls, api_client: Any, timeout_seconds: float = 30) -> DiscoveryRESTMapper:
        """Query ``/api`` and ``/apis`` and build a mapper.

        Raises:
            ReadError: any discovery request fails.
        """
        mappings: list[ResourceMapping] = []

        core = await _discovery_get(api_client, "/api", timeout_seconds)
        for version in core.get("versions", [])[:1]:
            resources = await _discovery_get(api_client, f"/api/{version}", timeout_seconds)
            mappings.extend(_mappings_from_resource_list("", version, resources))

        groups = await _discovery_get(api_client, "/apis", timeout_seconds)
        for group in groups.get("groups", []):
            name = group.get("name", "")
            preferred = (group.get("preferredVersion") or {}).get("version")
            if not preferred:
                versions = group.get("versions") or []
                if not versions:
                    continue
                preferred = versions[0].get("version", "")
            resources = await _discovery_get(api_client, f"/apis/{name}/{preferred}", timeout_seconds)
            mappings.extend(_mappings_from_resource_list(name, preferred, resources))

        mapper = cls(mappings)
        _log.info("rest_mapper_discovered", group_kinds=len(mapper))
        return mapper


def _mappings_from_resource_list(group: str, version: str, resource_list: dict[str, Any]) -> list[ResourceMapping]:
    out = []
    for res in resource_list.get("resources", []):
        plural = res.get("name", "")
        if not plural or "/" in plural:  # subresources such as pods/log
            continue
        out.append(
            ResourceMapping(
                group=group,
                version=version,
                kind=res.get("kind", ""),
                resource=plural,
                namespaced=bool(res.get("namespaced", True)),
            )
        )
    return out


async def _discovery_get(api_client: Any, path: str, timeout_seconds: float) -> dict[str, Any]:
    try:
        return await get_json(api_client, path, timeout_seconds=timeout_seconds)
    except ApiException as exc:
        raise ReadError("discover", path, f"{exc.status} {exc.reason}") from exc
