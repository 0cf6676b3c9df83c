"""Typed access to containers (``virt.instance.*``) and the ``virt.global`` config.

Instance mutations run as appliance jobs, so :class:`VirtService` needs an
:class:`~nasctl.transports.base.AsyncCaller`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from nasctl.core.params import OMIT_ZERO, OPTIONAL, UNSET, Param, Unset, encode_params
from nasctl.core.resource import LOOKUP_INSTANCE, Filter, Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import field, flag, items, number, text
from nasctl.transports.base import AsyncCaller

VIRT_GLOBAL_NAMESPACE = Fixed("virt.global")
VIRT_INSTANCE_NAMESPACE = Fixed("virt.instance")

DEVICE_DISK = "DISK"
DEVICE_NIC = "NIC"
DEVICE_PROXY = "PROXY"

_JOBS = ("create", "update", "delete", "start", "stop", "device_add", "device_delete")


@dataclass(frozen=True)
class VirtGlobalConfig:
    bridge: str
    v4_network: str
    v6_network: str
    pool: str
    dataset: str
    storage_pools: tuple[str, ...]
    state: str


@dataclass(frozen=True)
class UpdateVirtGlobalConfigOpts:
    """Only fields that are set are sent; ``""`` clears a value."""

    bridge: str | Unset = UNSET
    v4_network: str | Unset = UNSET
    v6_network: str | Unset = UNSET
    pool: str | Unset = UNSET


@dataclass(frozen=True)
class VirtAlias:
    type: str
    address: str
    netmask: int


@dataclass(frozen=True)
class VirtImage:
    architecture: str
    description: str
    os: str
    release: str
    variant: str


@dataclass(frozen=True)
class VirtInstance:
    id: str
    name: str
    type: str
    status: str
    cpu: str
    memory: int
    autostart: bool
    environment: Mapping[str, str]
    aliases: tuple[VirtAlias, ...]
    image: VirtImage
    storage_pool: str


@dataclass(frozen=True)
class VirtDeviceOpts:
    """Device to attach. Which fields are sent depends on ``dev_type``.

    ``DISK`` uses ``source``/``destination``, ``NIC`` uses
    ``network``/``nic_type``/``parent`` and ``PROXY`` uses the
    ``source_*``/``dest_*`` port mapping.
    """

    dev_type: str
    name: str = ""
    readonly: bool = False
    source: str = ""
    destination: str = ""
    network: str = ""
    nic_type: str = ""
    parent: str = ""
    source_proto: str = ""
    source_port: int = 0
    dest_proto: str = ""
    dest_port: int = 0


@dataclass(frozen=True)
class VirtDevice:
    dev_type: str
    name: str
    description: str
    readonly: bool
    source: str
    destination: str
    network: str
    nic_type: str
    parent: str
    source_proto: str
    source_port: int
    dest_proto: str
    dest_port: int


@dataclass(frozen=True)
class CreateVirtInstanceOpts:
    name: str
    instance_type: str = "CONTAINER"
    image: str = ""
    cpu: str = ""
    memory: int = 0
    autostart: bool = False
    environment: Mapping[str, str] | None = None
    devices: tuple[VirtDeviceOpts, ...] = ()
    storage_pool: str = ""


@dataclass(frozen=True)
class UpdateVirtInstanceOpts:
    autostart: bool | Unset = UNSET
    environment: Mapping[str, str] | Unset = UNSET


_GLOBAL_PARAMS = (
    Param("bridge", rule=OPTIONAL),
    Param("v4_network", rule=OPTIONAL),
    Param("v6_network", rule=OPTIONAL),
    Param("pool", rule=OPTIONAL),
)

_DEVICE_COMMON = (
    Param("dev_type"),
    Param("readonly"),
    Param("name", rule=OMIT_ZERO),
)
_DEVICE_PARAMS = {
    DEVICE_DISK: (Param("source"), Param("destination")),
    DEVICE_NIC: (
        Param("network", rule=OMIT_ZERO),
        Param("nic_type", rule=OMIT_ZERO),
        Param("parent", rule=OMIT_ZERO),
    ),
    DEVICE_PROXY: (
        Param("source_proto"),
        Param("source_port"),
        Param("dest_proto"),
        Param("dest_port"),
    ),
}

_CREATE_PARAMS = (
    Param("name"),
    Param("instance_type"),
    Param("image"),
    Param("cpu"),
    Param("memory"),
    Param("autostart"),
    Param("environment", transform=lambda env: dict(env or {})),
    Param("storage_pool", rule=OMIT_ZERO),
)
_UPDATE_PARAMS = (
    Param("autostart", rule=OPTIONAL),
    Param("environment", rule=OPTIONAL),
)


def update_global_config_params(opts: UpdateVirtGlobalConfigOpts) -> dict[str, Any]:
    return encode_params(opts, _GLOBAL_PARAMS)


def virt_device_params(opts: VirtDeviceOpts) -> dict[str, Any]:
    spec = _DEVICE_COMMON + _DEVICE_PARAMS.get(opts.dev_type, ())
    return encode_params(opts, spec)


def create_instance_params(opts: CreateVirtInstanceOpts) -> dict[str, Any]:
    params = encode_params(opts, _CREATE_PARAMS)
    if opts.devices:
        params["devices"] = [virt_device_params(device) for device in opts.devices]
    return params


def update_instance_params(opts: UpdateVirtInstanceOpts) -> dict[str, Any]:
    return encode_params(opts, _UPDATE_PARAMS)


def global_config_from_response(doc: dict[str, Any]) -> VirtGlobalConfig:
    return VirtGlobalConfig(
        bridge=text(doc, "bridge"),
        v4_network=text(doc, "v4_network"),
        v6_network=text(doc, "v6_network"),
        pool=text(doc, "pool"),
        dataset=text(doc, "dataset"),
        storage_pools=tuple(items(doc, "storage_pools")),
        state=text(doc, "state"),
    )


def virt_alias_from_response(doc: dict[str, Any]) -> VirtAlias:
    return VirtAlias(
        type=text(doc, "type"),
        address=text(doc, "address"),
        netmask=number(doc, "netmask"),
    )


def instance_from_response(doc: dict[str, Any]) -> VirtInstance:
    image = field(doc, "image", None)
    return VirtInstance(
        id=doc["id"],
        name=text(doc, "name"),
        type=text(doc, "type"),
        status=text(doc, "status"),
        cpu=text(doc, "cpu"),
        memory=number(doc, "memory"),
        autostart=flag(doc, "autostart"),
        environment=dict(field(doc, "environment", {})),
        aliases=tuple(virt_alias_from_response(a) for a in items(doc, "aliases")),
        image=VirtImage(
            architecture=text(image, "architecture"),
            description=text(image, "description"),
            os=text(image, "os"),
            release=text(image, "release"),
            variant=text(image, "variant"),
        ),
        storage_pool=text(doc, "storage_pool"),
    )


def virt_device_from_response(doc: dict[str, Any]) -> VirtDevice:
    return VirtDevice(
        dev_type=doc["dev_type"],
        name=text(doc, "name"),
        description=text(doc, "description"),
        readonly=flag(doc, "readonly"),
        source=text(doc, "source"),
        destination=text(doc, "destination"),
        network=text(doc, "network"),
        nic_type=text(doc, "nic_type"),
        parent=text(doc, "parent"),
        source_proto=text(doc, "source_proto"),
        source_port=number(doc, "source_port"),
        dest_proto=text(doc, "dest_proto"),
        dest_port=number(doc, "dest_port"),
    )


class VirtService:
    BINDINGS = bind(
        VIRT_GLOBAL_NAMESPACE,
        get_global_config="config",
        update_global_config="update",
    ) + bind(
        VIRT_INSTANCE_NAMESPACE,
        create_instance="create",
        get_instance="get_instance",
        update_instance="update",
        delete_instance="delete",
        start_instance="start",
        stop_instance="stop",
        list_instances="query",
        list_devices="device_list",
        add_device="device_add",
        delete_device="device_delete",
    )

    def __init__(self, caller: AsyncCaller, version: Version) -> None:
        self._global: Resource[VirtGlobalConfig] = Resource(
            caller,
            version,
            gate=VIRT_GLOBAL_NAMESPACE,
            schema="VirtGlobalConfig",
            decode=global_config_from_response,
        )
        self._instances: Resource[VirtInstance] = Resource(
            caller,
            version,
            gate=VIRT_INSTANCE_NAMESPACE,
            schema="VirtInstance",
            decode=instance_from_response,
            lookup=LOOKUP_INSTANCE,
            jobs=_JOBS,
            positional_filters=True,
        )
        self._devices: Resource[VirtDevice] = Resource(
            caller,
            version,
            gate=VIRT_INSTANCE_NAMESPACE,
            schema="VirtDevice",
            decode=virt_device_from_response,
            jobs=_JOBS,
        )

    def get_global_config(self) -> VirtGlobalConfig:
        return self._global.fetch("config")

    def update_global_config(self, opts: UpdateVirtGlobalConfigOpts) -> VirtGlobalConfig:
        self._global.invoke("update", update_global_config_params(opts))
        return self.get_global_config()

    def create_instance(self, opts: CreateVirtInstanceOpts) -> VirtInstance | None:
        return self._instances.create(create_instance_params(opts), ident=opts.name)

    def get_instance(self, name: str) -> VirtInstance | None:
        return self._instances.get(name)

    def update_instance(self, name: str, opts: UpdateVirtInstanceOpts) -> VirtInstance | None:
        return self._instances.update(name, update_instance_params(opts))

    def delete_instance(self, name: str) -> None:
        self._instances.delete(name)

    def start_instance(self, name: str) -> None:
        self._instances.invoke("start", name)

    def stop_instance(self, name: str, timeout: int = 0) -> None:
        """Stop an instance; a positive ``timeout`` (seconds) is passed through."""
        stop_args: dict[str, Any] = {}
        if timeout > 0:
            stop_args["timeout"] = timeout
        self._instances.invoke("stop", [name, stop_args])

    def list_instances(self, filters: list[Filter] | None = None) -> list[VirtInstance]:
        return self._instances.query(filters)

    def list_devices(self, name: str) -> list[VirtDevice]:
        return self._devices.fetch_all("device_list", name)

    def add_device(self, name: str, opts: VirtDeviceOpts) -> None:
        self._devices.invoke("device_add", [name, virt_device_params(opts)])

    def delete_device(self, name: str, device_name: str) -> None:
        self._devices.invoke("device_delete", [name, device_name])
