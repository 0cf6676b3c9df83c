"""Typed access to filesystem datasets, zvols and pools.

Filesystems and zvols share the ``pool.dataset.*`` namespace; the create
discriminant (``type``) is fixed by the create method used, and reads only
accept rows of the matching type.

Update options use :data:`~nasctl.core.params.UNSET` for three-state fields:
leaving ``quota`` unset keeps the current quota, ``quota=0`` clears it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nasctl.core.params import OMIT_ZERO, OPTIONAL, UNSET, Param, Unset, encode_params
from nasctl.core.resource import Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import field, number, prop_parsed, prop_value, text
from nasctl.transports.base import Caller

DATASET_NAMESPACE = Fixed("pool.dataset")
POOL_NAMESPACE = Fixed("pool")

TYPE_FILESYSTEM = "FILESYSTEM"
TYPE_VOLUME = "VOLUME"


@dataclass(frozen=True)
class Dataset:
    id: str
    name: str
    pool: str
    mountpoint: str
    comments: str
    compression: str
    quota: int
    refquota: int
    atime: str


@dataclass(frozen=True)
class CreateDatasetOpts:
    name: str
    comments: str = ""
    compression: str = ""
    quota: int = 0
    refquota: int = 0
    atime: str = ""


@dataclass(frozen=True)
class UpdateDatasetOpts:
    compression: str = ""  # empty = unchanged
    quota: int | Unset = UNSET
    refquota: int | Unset = UNSET
    atime: str = ""  # empty = unchanged
    comments: str | Unset = UNSET


@dataclass(frozen=True)
class Zvol:
    id: str
    name: str
    pool: str
    comments: str
    compression: str
    volsize: int
    volblocksize: str
    sparse: bool


@dataclass(frozen=True)
class CreateZvolOpts:
    name: str
    volsize: int
    volblocksize: str = ""
    sparse: bool = False
    force_size: bool = False
    compression: str = ""
    comments: str = ""


@dataclass(frozen=True)
class UpdateZvolOpts:
    volsize: int | Unset = UNSET
    force_size: bool = False  # only sent when true
    compression: str = ""
    comments: str | Unset = UNSET


@dataclass(frozen=True)
class Pool:
    id: int
    name: str
    path: str
    status: str
    size: int
    allocated: int
    free: int


_CREATE_DATASET_PARAMS = (
    Param("name"),
    Param("comments", rule=OMIT_ZERO),
    Param("compression", rule=OMIT_ZERO),
    Param("quota", rule=OMIT_ZERO),
    Param("refquota", rule=OMIT_ZERO),
    Param("atime", rule=OMIT_ZERO),
)
_UPDATE_DATASET_PARAMS = (
    Param("compression", rule=OMIT_ZERO),
    Param("quota", rule=OPTIONAL),
    Param("refquota", rule=OPTIONAL),
    Param("atime", rule=OMIT_ZERO),
    Param("comments", rule=OPTIONAL),
)
_CREATE_ZVOL_PARAMS = (
    Param("name"),
    Param("volsize"),
    Param("volblocksize", rule=OMIT_ZERO),
    Param("sparse", rule=OMIT_ZERO),
    Param("force_size", rule=OMIT_ZERO),
    Param("compression", rule=OMIT_ZERO),
    Param("comments", rule=OMIT_ZERO),
)
_UPDATE_ZVOL_PARAMS = (
    Param("volsize", rule=OPTIONAL),
    Param("force_size", rule=OMIT_ZERO),
    Param("compression", rule=OMIT_ZERO),
    Param("comments", rule=OPTIONAL),
)


def create_dataset_params(opts: CreateDatasetOpts) -> dict[str, Any]:
    return encode_params(opts, _CREATE_DATASET_PARAMS, fixed={"type": TYPE_FILESYSTEM})


def update_dataset_params(opts: UpdateDatasetOpts) -> dict[str, Any]:
    return encode_params(opts, _UPDATE_DATASET_PARAMS)


def create_zvol_params(opts: CreateZvolOpts) -> dict[str, Any]:
    return encode_params(opts, _CREATE_ZVOL_PARAMS, fixed={"type": TYPE_VOLUME})


def update_zvol_params(opts: UpdateZvolOpts) -> dict[str, Any]:
    return encode_params(opts, _UPDATE_ZVOL_PARAMS)


def dataset_from_response(doc: dict[str, Any]) -> Dataset:
    return Dataset(
        id=doc["id"],
        name=text(doc, "name"),
        pool=text(doc, "pool"),
        mountpoint=text(doc, "mountpoint"),
        comments=prop_value(doc, "comments"),
        compression=prop_value(doc, "compression"),
        quota=prop_parsed(doc, "quota"),
        refquota=prop_parsed(doc, "refquota"),
        atime=prop_value(doc, "atime"),
    )


def zvol_from_response(doc: dict[str, Any]) -> Zvol:
    return Zvol(
        id=doc["id"],
        name=text(doc, "name"),
        pool=text(doc, "pool"),
        comments=prop_value(doc, "comments"),
        compression=prop_value(doc, "compression"),
        volsize=prop_parsed(doc, "volsize"),
        volblocksize=prop_value(doc, "volblocksize"),
        sparse=prop_value(doc, "sparse") == "true",
    )


def pool_from_response(doc: dict[str, Any]) -> Pool:
    return Pool(
        id=doc["id"],
        name=text(doc, "name"),
        path=text(doc, "path"),
        status=text(doc, "status"),
        size=number(doc, "size"),
        allocated=number(doc, "allocated"),
        free=number(doc, "free"),
    )


def _of_type(kind: str):
    def accept(doc: dict[str, Any]) -> bool:
        # rows without a type are kept
        return field(doc, "type", kind) == kind

    return accept


class DatasetService:
    BINDINGS = bind(
        DATASET_NAMESPACE,
        create_dataset="create",
        get_dataset="query",
        list_datasets="query",
        update_dataset="update",
        delete_dataset="delete",
        create_zvol="create",
        get_zvol="query",
        list_zvols="query",
        update_zvol="update",
        delete_zvol="delete",
    ) + bind(POOL_NAMESPACE, list_pools="query")

    def __init__(self, caller: Caller, version: Version) -> None:
        self._datasets: Resource[Dataset] = Resource(
            caller,
            version,
            gate=DATASET_NAMESPACE,
            schema="Dataset",
            decode=dataset_from_response,
            missing_query_is_empty=True,
            accept=_of_type(TYPE_FILESYSTEM),
        )
        self._zvols: Resource[Zvol] = Resource(
            caller,
            version,
            gate=DATASET_NAMESPACE,
            schema="Dataset",
            decode=zvol_from_response,
            missing_query_is_empty=True,
            accept=_of_type(TYPE_VOLUME),
        )
        self._pools: Resource[Pool] = Resource(
            caller,
            version,
            gate=POOL_NAMESPACE,
            schema="Pool",
            decode=pool_from_response,
        )

    def create_dataset(self, opts: CreateDatasetOpts) -> Dataset | None:
        return self._datasets.create(create_dataset_params(opts))

    def get_dataset(self, dataset_id: str) -> Dataset | None:
        return self._datasets.get(dataset_id)

    def list_datasets(self) -> list[Dataset]:
        """Return filesystem datasets only; zvols are listed by :meth:`list_zvols`."""
        return self._datasets.list()

    def update_dataset(self, dataset_id: str, opts: UpdateDatasetOpts) -> Dataset | None:
        return self._datasets.update(dataset_id, update_dataset_params(opts))

    def delete_dataset(self, dataset_id: str, recursive: bool = False) -> None:
        """Delete a dataset; ``recursive`` also removes its children."""
        self._datasets.delete(dataset_id, {"recursive": True} if recursive else None)

    def create_zvol(self, opts: CreateZvolOpts) -> Zvol | None:
        return self._zvols.create(create_zvol_params(opts))

    def get_zvol(self, zvol_id: str) -> Zvol | None:
        return self._zvols.get(zvol_id)

    def list_zvols(self) -> list[Zvol]:
        return self._zvols.list()

    def update_zvol(self, zvol_id: str, opts: UpdateZvolOpts) -> Zvol | None:
        return self._zvols.update(zvol_id, update_zvol_params(opts))

    def delete_zvol(self, zvol_id: str) -> None:
        self._zvols.delete(zvol_id)

    def list_pools(self) -> list[Pool]:
        return self._pools.list()
