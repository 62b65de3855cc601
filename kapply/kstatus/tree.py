"""Status of inventory objects together with the resources they generate.

A Deployment generates ReplicaSets, which generate Pods. ``ResourceTreeReader``
follows GENERATED_RESOURCE_RULES from an object down to ``max_depth`` levels
of generated resources and nests their statuses under the parent's.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from kapply.client.interfaces import StatusComputer
from kapply.errors import NotFoundError
from kapply.inventory.grouping import to_identity
from kapply.kstatus.reader import StatusReader
from kapply.models.config import StatusConfig
from kapply.models.identity import ObjectIdentity
from kapply.models.status import ResourceStatus
from kapply.observability.logging import get_logger

_log = get_logger("kstatus.tree")


@dataclass(frozen=True)
class GeneratedResourceRule:
    """Resources of ``child`` kind generated by a parent, found via ``selector_path``."""

    child: tuple[str, str]
    selector_path: tuple[str, ...] = ("spec", "selector")


_POD = ("", "Pod")

GENERATED_RESOURCE_RULES: dict[tuple[str, str], GeneratedResourceRule] = {
    ("apps", "Deployment"): GeneratedResourceRule(child=("apps", "ReplicaSet")),
    ("apps", "ReplicaSet"): GeneratedResourceRule(child=_POD),
    ("apps", "StatefulSet"): GeneratedResourceRule(child=_POD),
    ("apps", "DaemonSet"): GeneratedResourceRule(child=_POD),
    ("batch", "Job"): GeneratedResourceRule(child=_POD),
}


class _GeneratedStatusComputer:
    """Computes a generated resource's status, recursing one level deeper."""

    def __init__(self, tree: ResourceTreeReader, depth: int) -> None:
        self._tree = tree
        self._depth = depth

    async def compute_status(self, resource: dict[str, Any]) -> ResourceStatus:
        return await self._tree.read_object(resource, depth=self._depth)


class ResourceTreeReader:
    def __init__(
        self,
        status_reader: StatusReader,
        status_computer: StatusComputer,
        rules: Mapping[tuple[str, str], GeneratedResourceRule] | None = None,
        max_depth: int = 2,
    ) -> None:
        self.status_reader = status_reader
        self.status_computer = status_computer
        self.rules = GENERATED_RESOURCE_RULES if rules is None else rules
        self.max_depth = max_depth

    async def read(self, identity: ObjectIdentity) -> ResourceStatus:
        """Look up *identity* and read its status tree.

        Raises whatever ``StatusReader.lookup_resource`` and
        ``status_for_generated_resources`` raise.
        """
        resource = await self.status_reader.lookup_resource(identity)
        return await self.read_object(resource)

    async def read_object(self, resource: dict[str, Any], depth: int = 0) -> ResourceStatus:
        identity = to_identity(resource)
        status = await self.status_computer.compute_status(resource)
        status = replace(status, identity=identity, resource=resource)

        rule = self.rules.get(identity.group_kind)
        if rule is None or depth >= self.max_depth:
            return status

        generated = await self.status_reader.status_for_generated_resources(
            resource,
            rule.child,
            rule.selector_path,
            _GeneratedStatusComputer(self, depth + 1),
        )
        return replace(status, generated=tuple(generated))


class InventoryStatusReader:
    """Reads the status tree of every identity in an inventory.

    Up to ``max_concurrency`` objects are read at once. An object that no
    longer exists is reported as a not-found ResourceStatus; any other
    error cancels the remaining reads and propagates.
    """

    def __init__(self, tree_reader: ResourceTreeReader, max_concurrency: int = 8) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.tree_reader = tree_reader
        self.max_concurrency = max_concurrency

    async def read(self, identities: Iterable[ObjectIdentity]) -> list[ResourceStatus]:
        """Statuses for *identities* (an Inventory or any iterable), sorted by identity."""
        ordered = sorted(set(identities))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _one(identity: ObjectIdentity) -> ResourceStatus:
            async with semaphore:
                try:
                    return await self.tree_reader.read(identity)
                except NotFoundError as exc:
                    return ResourceStatus(identity=identity, message=str(exc), error=exc)

        tasks = [asyncio.ensure_future(_one(identity)) for identity in ordered]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # no read outlives the call
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        missing = sum(1 for r in results if not r.found)
        _log.info("inventory_status_read", objects=len(results), not_found=missing)
        return list(results)


async def build_inventory_status_reader(
    api_client: Any,
    status_computer: StatusComputer,
    config: StatusConfig | None = None,
) -> InventoryStatusReader:
    """Wire discovery, cluster reader and tree reader for a live cluster."""
    from kapply.client.kube import KubernetesClusterReader
    from kapply.client.mapper import DiscoveryRESTMapper

    config = config or StatusConfig()
    mapper = await DiscoveryRESTMapper.discover(api_client, timeout_seconds=config.read_timeout_seconds)
    reader = KubernetesClusterReader(api_client, timeout_seconds=config.read_timeout_seconds)
    tree = ResourceTreeReader(
        StatusReader(reader, mapper),
        status_computer,
        max_depth=config.max_depth,
    )
    return InventoryStatusReader(tree, max_concurrency=config.max_concurrency)
