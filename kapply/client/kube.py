"""Cluster access through kubernetes-asyncio.

Objects are read as plain dicts through ``ApiClient.call_api`` so that any
kind the REST mapper knows about can be fetched, typed models or not.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from kubernetes_asyncio.client import ApiClient  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kapply.client.interfaces import ResourceMapping
from kapply.errors import NotFoundError, ReadError
from kapply.models.identity import ObjectIdentity
from kapply.observability.logging import get_logger

_log = get_logger("client.kube")

_LIST_PAGE_SIZE = 500


async def load_api_client() -> ApiClient:
    """ApiClient configured from the in-cluster service account, falling back to kubeconfig."""
    import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]

    try:
        # load_incluster_config() is synchronous in kubernetes-asyncio
        k8s_config.load_incluster_config()
        _log.info("k8s client configured from in-cluster service account")
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config()
        _log.info("k8s client configured from kubeconfig")
    return ApiClient()


async def get_json(
    api_client: Any,
    path: str,
    query_params: list[tuple[str, str]] | None = None,
    timeout_seconds: float = 30,
) -> dict[str, Any]:
    """GET *path* and return the decoded JSON body.

    Raises:
        ApiException: non-2xx response (callers classify it).
        ReadError: timeout or transport failure.
    """
    try:
        result = await asyncio.wait_for(
            api_client.call_api(
                path,
                "GET",
                query_params=query_params or [],
                header_params={"Accept": "application/json"},
                auth_settings=["BearerToken"],
                _return_http_data_only=True,
                response_types_map={200: "object"},
            ),
            timeout=timeout_seconds,
        )
    except TimeoutError as exc:
        raise ReadError("GET", path, f"timed out after {timeout_seconds}s") from exc
    except aiohttp.ClientError as exc:
        raise ReadError("GET", path, exc) from exc
    return result if isinstance(result, dict) else {}


class KubernetesClusterReader:
    """ClusterReader backed by a kubernetes-asyncio ApiClient."""

    def __init__(self, api_client: Any, timeout_seconds: float = 30) -> None:
        self._api = api_client
        self._timeout = timeout_seconds

    async def get(self, mapping: ResourceMapping, namespace: str, name: str) -> dict[str, Any]:
        identity = ObjectIdentity(mapping.group, mapping.kind, namespace, name)
        path = mapping.path(namespace, name)
        try:
            return await get_json(self._api, path, timeout_seconds=self._timeout)
        except ApiException as exc:
            if exc.status == 404:
                raise NotFoundError(identity) from exc
            raise ReadError("get", str(identity), f"{exc.status} {exc.reason}") from exc

    async def list(self, mapping: ResourceMapping, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        path = mapping.path(namespace)
        target = f"{mapping.resource} in {namespace or '<cluster>'} matching {label_selector!r}"
        items: list[dict[str, Any]] = []
        token = ""
        while True:
            params = [("labelSelector", label_selector), ("limit", str(_LIST_PAGE_SIZE))]
            if token:
                params.append(("continue", token))
            try:
                page = await get_json(self._api, path, query_params=params, timeout_seconds=self._timeout)
            except ApiException as exc:
                raise ReadError("list", target, f"{exc.status} {exc.reason}") from exc
            for item in page.get("items") or []:
                # list responses omit apiVersion/kind on their items
                item.setdefault("apiVersion", mapping.api_version)
                item.setdefault("kind", mapping.kind)
                items.append(item)
            token = (page.get("metadata") or {}).get("continue") or ""
            if not token:
                break
        _log.debug("listed", resource=mapping.resource, namespace=namespace, selector=label_selector, count=len(items))
        return items
