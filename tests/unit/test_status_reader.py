"""Tests for StatusReader.lookup_resource and status_for_generated_resources.

Collaborators are small fakes: a cluster reader returning canned results or
errors, a StaticRESTMapper that only knows the kinds under test, and a
status computer that reports every resource as "Current".
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from kapply.client.interfaces import ResourceMapping
from kapply.client.mapper import StaticRESTMapper
from kapply.errors import InvalidObjectError, NoMatchError, NoSelectorError, NotFoundError, ReadError
from kapply.kstatus.reader import StatusReader
from kapply.models.identity import ObjectIdentity
from kapply.models.status import ResourceStatus, is_sorted_by_identity

_DEPLOYMENT = ResourceMapping("apps", "v1", "Deployment", "deployments")
_REPLICASET = ResourceMapping("apps", "v1", "ReplicaSet", "replicasets")
_RS_GK = ("apps", "ReplicaSet")

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class _FakeClusterReader:
    def __init__(
        self,
        get_err: BaseException | None = None,
        list_objects: list[dict[str, Any]] | None = None,
        list_err: BaseException | None = None,
    ) -> None:
        self.get_err = get_err
        self.list_objects = list_objects or []
        self.list_err = list_err
        self.list_calls: list[tuple[ResourceMapping, str, str]] = []

    async def get(self, mapping: ResourceMapping, namespace: str, name: str) -> dict[str, Any]:
        if self.get_err is not None:
            raise self.get_err
        return {
            "apiVersion": mapping.api_version,
            "kind": mapping.kind,
            "metadata": {"name": name, "namespace": namespace},
        }

    async def list(self, mapping: ResourceMapping, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        self.list_calls.append((mapping, namespace, label_selector))
        if self.list_err is not None:
            raise self.list_err
        return list(self.list_objects)


class _FakeStatusComputer:
    def __init__(self) -> None:
        self.seen: list[str] = []

    async def compute_status(self, resource: dict[str, Any]) -> ResourceStatus:
        self.seen.append(resource["metadata"]["name"])
        return ResourceStatus(identity=ObjectIdentity.from_object(resource), status="Current")


def _rs(name: str, namespace: str = "default") -> dict[str, Any]:
    return {"apiVersion": "apps/v1", "kind": "ReplicaSet", "metadata": {"name": name, "namespace": namespace}}


def _deployment(selector: dict[str, Any] | None = None, namespace: str | None = None) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": "Foo"}
    if namespace is not None:
        metadata["namespace"] = namespace
    spec: dict[str, Any] = {"replicas": 1}
    if selector is not None:
        spec["selector"] = selector
    return {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": metadata, "spec": spec}


_NGINX = {"matchLabels": {"app": "nginx"}}

_DEPLOYMENT_ID = ObjectIdentity("apps", "Deployment", "Bar", "Foo")


# ---------------------------------------------------------------------------
# lookup_resource
# ---------------------------------------------------------------------------


class TestLookupResource:
    async def test_unknown_group_kind(self) -> None:
        reader = StatusReader(_FakeClusterReader(), StaticRESTMapper([_DEPLOYMENT]))
        with pytest.raises(NoMatchError) as exc_info:
            await reader.lookup_resource(ObjectIdentity("custom.io", "Custom", "default", "Bar"))
        assert exc_info.value.group == "custom.io"
        assert exc_info.value.kind == "Custom"

    async def test_resource_does_not_exist(self) -> None:
        reader = StatusReader(_FakeClusterReader(get_err=NotFoundError(_DEPLOYMENT_ID)), StaticRESTMapper([_DEPLOYMENT]))
        with pytest.raises(NotFoundError) as exc_info:
            await reader.lookup_resource(_DEPLOYMENT_ID)
        assert exc_info.value.identity == _DEPLOYMENT_ID
        assert not isinstance(exc_info.value, ReadError)

    async def test_getting_resource_fails(self) -> None:
        fake = _FakeClusterReader(get_err=RuntimeError("this is a test"))
        reader = StatusReader(fake, StaticRESTMapper([_DEPLOYMENT]))
        with pytest.raises(ReadError, match="this is a test") as exc_info:
            await reader.lookup_resource(_DEPLOYMENT_ID)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_read_error_passes_through_unchanged(self) -> None:
        err = ReadError("get", "x", "500 Internal Server Error")
        reader = StatusReader(_FakeClusterReader(get_err=err), StaticRESTMapper([_DEPLOYMENT]))
        with pytest.raises(ReadError) as exc_info:
            await reader.lookup_resource(_DEPLOYMENT_ID)
        assert exc_info.value is err

    async def test_timeout_becomes_read_error(self) -> None:
        reader = StatusReader(_FakeClusterReader(get_err=TimeoutError()), StaticRESTMapper([_DEPLOYMENT]))
        with pytest.raises(ReadError):
            await reader.lookup_resource(_DEPLOYMENT_ID)

    async def test_cancellation_is_not_masked(self) -> None:
        reader = StatusReader(_FakeClusterReader(get_err=asyncio.CancelledError()), StaticRESTMapper([_DEPLOYMENT]))
        with pytest.raises(asyncio.CancelledError):
            await reader.lookup_resource(_DEPLOYMENT_ID)

    async def test_getting_resource_succeeds(self) -> None:
        reader = StatusReader(_FakeClusterReader(), StaticRESTMapper([_DEPLOYMENT]))
        obj = await reader.lookup_resource(_DEPLOYMENT_ID)
        assert obj["apiVersion"] == "apps/v1"
        assert obj["kind"] == "Deployment"


# ---------------------------------------------------------------------------
# status_for_generated_resources
# ---------------------------------------------------------------------------


class TestStatusForGeneratedResources:
    async def test_invalid_selector(self) -> None:
        reader = StatusReader(_FakeClusterReader(), StaticRESTMapper([_REPLICASET]))
        with pytest.raises(NoSelectorError, match="no selector found"):
            await reader.status_for_generated_resources(_deployment(), _RS_GK, ["spec", "selector"], _FakeStatusComputer())

    async def test_invalid_group_kind(self) -> None:
        fake = _FakeClusterReader()
        reader = StatusReader(fake, StaticRESTMapper([_REPLICASET]))
        with pytest.raises(NoMatchError, match="no matches for kind"):
            await reader.status_for_generated_resources(
                _deployment(_NGINX), ("custom.io", "Custom"), "spec.selector", _FakeStatusComputer()
            )
        assert fake.list_calls == []

    async def test_error_listing_replicasets(self) -> None:
        fake = _FakeClusterReader(list_err=RuntimeError("this is a test"))
        reader = StatusReader(fake, StaticRESTMapper([_REPLICASET]))
        with pytest.raises(ReadError, match="this is a test"):
            await reader.status_for_generated_resources(_deployment(_NGINX), _RS_GK, "spec.selector", _FakeStatusComputer())

    async def test_successfully_lists_generated_resources(self) -> None:
        fake = _FakeClusterReader(list_objects=[_rs("Foo-12345")])
        reader = StatusReader(fake, StaticRESTMapper([_REPLICASET]))
        statuses = await reader.status_for_generated_resources(
            _deployment(_NGINX), _RS_GK, "spec.selector", _FakeStatusComputer()
        )
        assert len(statuses) == 1
        assert is_sorted_by_identity(statuses)
        assert statuses[0].status == "Current"

    async def test_empty_listing_is_empty_result(self) -> None:
        reader = StatusReader(_FakeClusterReader(), StaticRESTMapper([_REPLICASET]))
        statuses = await reader.status_for_generated_resources(
            _deployment(_NGINX), _RS_GK, "spec.selector", _FakeStatusComputer()
        )
        assert statuses == []

    async def test_result_sorted_regardless_of_listing_order(self) -> None:
        listed = [_rs("web-c"), _rs("web-a", namespace="b-ns"), _rs("web-b"), _rs("web-a")]
        computer = _FakeStatusComputer()
        reader = StatusReader(_FakeClusterReader(list_objects=listed), StaticRESTMapper([_REPLICASET]))
        statuses = await reader.status_for_generated_resources(_deployment(_NGINX), _RS_GK, "spec.selector", computer)

        assert is_sorted_by_identity(statuses)
        assert [(s.identity.namespace, s.identity.name) for s in statuses] == [
            ("b-ns", "web-a"),
            ("default", "web-a"),
            ("default", "web-b"),
            ("default", "web-c"),
        ]
        assert sorted(computer.seen) == ["web-a", "web-a", "web-b", "web-c"]

    async def test_listing_scoped_to_parent_namespace_with_selector(self) -> None:
        fake = _FakeClusterReader()
        reader = StatusReader(fake, StaticRESTMapper([_REPLICASET]))
        await reader.status_for_generated_resources(
            _deployment({"matchLabels": {"app": "nginx", "tier": "web"}}, namespace="prod"),
            _RS_GK,
            "spec.selector",
            _FakeStatusComputer(),
        )
        assert fake.list_calls == [(_REPLICASET, "prod", "app=nginx,tier=web")]

    async def test_computer_identity_is_replaced_by_listed_identity(self) -> None:
        class _Sloppy:
            async def compute_status(self, resource: dict[str, Any]) -> ResourceStatus:
                return ResourceStatus(identity=ObjectIdentity("", "Pod", "x", "wrong"), status="Current")

        reader = StatusReader(_FakeClusterReader(list_objects=[_rs("b"), _rs("a")]), StaticRESTMapper([_REPLICASET]))
        statuses = await reader.status_for_generated_resources(_deployment(_NGINX), _RS_GK, "spec.selector", _Sloppy())
        assert [s.identity.name for s in statuses] == ["a", "b"]

    async def test_listed_object_without_name_is_invalid(self) -> None:
        nameless = {"apiVersion": "apps/v1", "kind": "ReplicaSet", "metadata": {}}
        reader = StatusReader(_FakeClusterReader(list_objects=[nameless]), StaticRESTMapper([_REPLICASET]))
        with pytest.raises(InvalidObjectError):
            await reader.status_for_generated_resources(_deployment(_NGINX), _RS_GK, "spec.selector", _FakeStatusComputer())
