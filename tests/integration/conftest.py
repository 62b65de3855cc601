"""Shared fixtures for kapply integration tests.

Provides an in-memory cluster that satisfies the ClusterReader contract and
is populated with a realistic Deployment -> ReplicaSet -> Pod hierarchy, so
integration tests can exercise full pipelines without a real cluster.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any

import pytest

from kapply.client.interfaces import ResourceMapping
from kapply.client.mapper import StaticRESTMapper
from kapply.errors import NotFoundError
from kapply.kstatus.reader import StatusReader
from kapply.models.identity import ObjectIdentity
from kapply.models.status import ResourceStatus

NAMESPACE = "shop"

# ---------------------------------------------------------------------------
# In-memory cluster
# ---------------------------------------------------------------------------


def _matches(labels: dict[str, str], selector: str) -> bool:
    """Equality-only selector matching (``a=b,c=d``), enough for matchLabels."""
    for requirement in selector.split(","):
        key, _, value = requirement.partition("=")
        if labels.get(key) != value:
            return False
    return True


class FakeCluster:
    """ClusterReader over a dict of objects keyed by identity."""

    def __init__(self) -> None:
        self.objects: dict[ObjectIdentity, dict[str, Any]] = {}
        self.get_calls = 0
        self.list_calls = 0

    def add(self, obj: dict[str, Any]) -> dict[str, Any]:
        self.objects[ObjectIdentity.from_object(obj)] = copy.deepcopy(obj)
        return obj

    def delete(self, identity: ObjectIdentity) -> None:
        self.objects.pop(identity, None)

    async def get(self, mapping: ResourceMapping, namespace: str, name: str) -> dict[str, Any]:
        self.get_calls += 1
        identity = ObjectIdentity(mapping.group, mapping.kind, namespace, name)
        if identity not in self.objects:
            raise NotFoundError(identity)
        return copy.deepcopy(self.objects[identity])

    async def list(self, mapping: ResourceMapping, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        self.list_calls += 1
        found = []
        # reversed so results never come back in sorted order
        for identity, obj in reversed(sorted(self.objects.items())):
            if identity.group_kind != (mapping.group, mapping.kind):
                continue
            if namespace and identity.namespace != namespace:
                continue
            if _matches(obj["metadata"].get("labels", {}), label_selector):
                found.append(copy.deepcopy(obj))
        return found


class SlowCluster(FakeCluster):
    """Tracks how many gets are in flight at once."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.peak = 0

    async def get(self, mapping: ResourceMapping, namespace: str, name: str) -> dict[str, Any]:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            return await super().get(mapping, namespace, name)
        finally:
            self.in_flight -= 1


class PhaseStatusComputer:
    """Reports ``status.phase`` when present, else "Current"."""

    def __init__(self) -> None:
        self.calls = 0

    async def compute_status(self, resource: dict[str, Any]) -> ResourceStatus:
        self.calls += 1
        phase = (resource.get("status") or {}).get("phase", "Current")
        return ResourceStatus(identity=ObjectIdentity.from_object(resource), status=phase)


# ---------------------------------------------------------------------------
# Object factories
# ---------------------------------------------------------------------------


def make_deployment(name: str, app: str, namespace: str = NAMESPACE) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "namespace": namespace, "labels": {"app": app}},
        "spec": {"replicas": 2, "selector": {"matchLabels": {"app": app}}},
    }


def make_replicaset(name: str, app: str, namespace: str = NAMESPACE) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "ReplicaSet",
        "metadata": {"name": name, "namespace": namespace, "labels": {"app": app}},
        "spec": {"selector": {"matchLabels": {"app": app, "rs": name}}},
    }


def make_pod(name: str, app: str, rs: str, phase: str = "Running", namespace: str = NAMESPACE) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": name, "namespace": namespace, "labels": {"app": app, "rs": rs}},
        "status": {"phase": phase},
    }


def make_configmap(name: str, namespace: str = NAMESPACE) -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": name, "namespace": namespace}}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cluster() -> FakeCluster:
    """Cluster with a 'web' Deployment owning one ReplicaSet and three Pods."""
    c = FakeCluster()
    c.add(make_deployment("web", app="web"))
    c.add(make_replicaset("web-7d9f", app="web"))
    c.add(make_pod("web-7d9f-c", app="web", rs="web-7d9f"))
    c.add(make_pod("web-7d9f-a", app="web", rs="web-7d9f", phase="Pending"))
    c.add(make_pod("web-7d9f-b", app="web", rs="web-7d9f"))
    # a pod of another app must not be picked up by web's selectors
    c.add(make_pod("api-1", app="api", rs="api-1"))
    c.add(make_configmap("web-config"))
    return c


@pytest.fixture
def slow_cluster() -> SlowCluster:
    """Cluster holding ten ConfigMaps ``cm-0`` .. ``cm-9`` behind a slow get."""
    c = SlowCluster()
    for i in range(10):
        c.add(make_configmap(f"cm-{i}"))
    return c


@pytest.fixture
def mapper() -> StaticRESTMapper:
    return StaticRESTMapper.with_defaults()


@pytest.fixture
def status_reader(cluster: FakeCluster, mapper: StaticRESTMapper) -> StatusReader:
    return StatusReader(cluster, mapper)


@pytest.fixture
def computer() -> PhaseStatusComputer:
    return PhaseStatusComputer()
