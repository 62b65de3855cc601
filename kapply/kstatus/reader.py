"""Status reader: object lookup and generated-resource status aggregation.

Failure policy:
    NoMatchError     -- kind unknown to the REST mapper; permanent, never retried.
    NotFoundError    -- lookup target does not exist; kept distinct from ReadError.
    ReadError        -- every other get/list failure, including collaborator
                        timeouts and errors of unknown type (wrapped, cause kept).
    NoSelectorError  -- parent has no usable selector at the requested path.

asyncio.CancelledError is never caught.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from kapply.client.interfaces import ClusterReader, RESTMapper, StatusComputer
from kapply.errors import KApplyError, NoMatchError, NotFoundError, ReadError
from kapply.inventory.grouping import to_identity
from kapply.kstatus.selector import parse_field_path, selector_from_object
from kapply.models.identity import ObjectIdentity
from kapply.models.status import ResourceStatus, sort_by_identity
from kapply.observability.logging import get_logger
from kapply.observability.metrics import generated_resources_listed_total, status_reads_total

_log = get_logger("kstatus.reader")


class StatusReader:
    """Reads objects and the resources they generate through injected collaborators.

    Holds no per-call state; one instance may serve concurrent calls.
    """

    def __init__(self, reader: ClusterReader, mapper: RESTMapper) -> None:
        self.reader = reader
        self.mapper = mapper

    async def lookup_resource(self, identity: ObjectIdentity) -> dict[str, Any]:
        """Fetch the object named by *identity*.

        Raises:
            NoMatchError: the group/kind is unknown.
            NotFoundError: the object does not exist.
            ReadError: any other read failure.
        """
        try:
            mapping = self.mapper.resolve(identity.group, identity.kind)
        except NoMatchError:
            status_reads_total.labels(outcome="no_match").inc()
            _log.warning("lookup_no_match", identity=str(identity))
            raise

        try:
            obj = await self.reader.get(mapping, identity.namespace, identity.name)
        except NotFoundError:
            status_reads_total.labels(outcome="not_found").inc()
            _log.debug("lookup_not_found", identity=str(identity))
            raise
        except KApplyError:
            status_reads_total.labels(outcome="error").inc()
            raise
        except Exception as exc:
            status_reads_total.labels(outcome="error").inc()
            _log.warning("lookup_failed", identity=str(identity), error=str(exc))
            raise ReadError("get", str(identity), exc) from exc

        status_reads_total.labels(outcome="ok").inc()
        return obj

    async def status_for_generated_resources(
        self,
        parent: Mapping[str, Any],
        group_kind: tuple[str, str],
        selector_path: str | Sequence[str],
        status_computer: StatusComputer,
    ) -> list[ResourceStatus]:
        """Statuses of every *group_kind* resource selected by *parent*'s selector.

        The selector is read from *selector_path* (``"spec.selector"``), the
        listing is scoped to the parent's namespace, and each listed resource
        is handed to *status_computer*. The result is sorted by identity.

        Raises:
            NoSelectorError: no usable selector at *selector_path*.
            NoMatchError: *group_kind* is unknown.
            ReadError: the listing failed.
        """
        path = parse_field_path(selector_path)
        selector = selector_from_object(parent, path)
        group, kind = group_kind
        mapping = self.mapper.resolve(group, kind)

        metadata = parent.get("metadata") or {}
        namespace = str(metadata.get("namespace") or "") if mapping.namespaced else ""
        try:
            children = await self.reader.list(mapping, namespace, selector)
        except KApplyError:
            raise
        except Exception as exc:
            raise ReadError("list", f"{mapping.resource} matching {selector!r}", exc) from exc

        generated_resources_listed_total.labels(kind=kind).inc(len(children))
        statuses: list[ResourceStatus] = []
        for child in children:
            identity = to_identity(child)
            status = await status_computer.compute_status(child)
            if status.identity != identity:
                status = replace(status, identity=identity)
            statuses.append(status)

        ordered = sort_by_identity(statuses)
        _log.debug(
            "generated_resources_read",
            parent=str(metadata.get("name", "")),
            kind=kind,
            namespace=namespace,
            selector=selector,
            count=len(ordered),
        )
        return ordered
