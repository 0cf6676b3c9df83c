"""Typed access to ZFS snapshots.

The namespace moved from ``zfs.snapshot`` to ``pool.snapshot`` in 25.10; every
operation resolves through :data:`~nasctl.core.version.SNAPSHOT_NAMESPACE`.
Snapshot identifiers have the form ``dataset@name``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nasctl.core.params import OMIT_ZERO, Param, encode_params
from nasctl.core.resource import Filter, Resource, bind
from nasctl.core.version import SNAPSHOT_NAMESPACE, Version
from nasctl.core.wire import field, has_refs, prop_parsed, prop_value, text
from nasctl.transports.base import Caller


@dataclass(frozen=True)
class Snapshot:
    id: str
    dataset: str
    snapshot_name: str
    createtxg: str
    used: int
    referenced: int
    has_hold: bool


@dataclass(frozen=True)
class CreateSnapshotOpts:
    dataset: str
    name: str
    recursive: bool = False


_CREATE_PARAMS = (
    Param("dataset"),
    Param("name"),
    Param("recursive", rule=OMIT_ZERO),
)


def snapshot_id(dataset: str, name: str) -> str:
    return f"{dataset}@{name}"


def create_snapshot_params(opts: CreateSnapshotOpts) -> dict[str, Any]:
    return encode_params(opts, _CREATE_PARAMS)


def snapshot_from_response(doc: dict[str, Any]) -> Snapshot:
    props = field(doc, "properties", None)
    userrefs = field(props, "userrefs", None)
    return Snapshot(
        id=doc["id"],
        dataset=text(doc, "dataset"),
        snapshot_name=text(doc, "snapshot_name"),
        createtxg=prop_value(props, "createtxg"),
        used=prop_parsed(props, "used"),
        referenced=prop_parsed(props, "referenced"),
        has_hold=has_refs(field(userrefs, "parsed", None)),
    )


class SnapshotService:
    BINDINGS = bind(
        SNAPSHOT_NAMESPACE,
        create="create",
        get="query",
        list="query",
        query="query",
        delete="delete",
        hold="hold",
        release="release",
        rollback="rollback",
        clone="clone",
    )

    def __init__(self, caller: Caller, version: Version) -> None:
        self._snapshots: Resource[Snapshot] = Resource(
            caller,
            version,
            gate=SNAPSHOT_NAMESPACE,
            schema="Snapshot",
            decode=snapshot_from_response,
        )

    def create(self, opts: CreateSnapshotOpts) -> Snapshot | None:
        return self._snapshots.create(
            create_snapshot_params(opts), ident=snapshot_id(opts.dataset, opts.name)
        )

    def get(self, snapshot: str) -> Snapshot | None:
        return self._snapshots.get(snapshot)

    def list(self) -> list[Snapshot]:
        return self._snapshots.list()

    def query(self, filters: list[Filter] | None = None) -> list[Snapshot]:
        """Return snapshots matching query *filters* (``[[field, op, value], ...]``).

        ``None`` or an empty list behaves like :meth:`list`.
        """
        return self._snapshots.query(filters)

    def delete(self, snapshot: str) -> None:
        self._snapshots.delete(snapshot)

    def hold(self, snapshot: str) -> None:
        self._snapshots.invoke("hold", snapshot)

    def release(self, snapshot: str) -> None:
        self._snapshots.invoke("release", snapshot)

    def rollback(self, snapshot: str) -> None:
        self._snapshots.invoke("rollback", snapshot)

    def clone(self, snapshot: str, dataset_dst: str) -> None:
        self._snapshots.invoke("clone", {"snapshot": snapshot, "dataset_dst": dataset_dst})
