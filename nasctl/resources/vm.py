"""Typed access to virtual machines (``vm.*``) and their devices (``vm.device.*``).

Device attributes are modelled as one dataclass per device type; the same
classes describe a device to create and the attributes read back from the
appliance. ``vm.stop`` runs as an appliance job, so :class:`VMService` needs
an :class:`~nasctl.transports.base.AsyncCaller`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Union

from nasctl.core.params import OMIT_ZERO, OPTIONAL, UNSET, Param, Unset, encode_params
from nasctl.core.resource import LOOKUP_INSTANCE, Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import field, flag, number, text
from nasctl.transports.base import AsyncCaller

VM_NAMESPACE = Fixed("vm")
VM_DEVICE_NAMESPACE = Fixed("vm.device")


@dataclass(frozen=True)
class VM:
    id: int
    name: str
    description: str
    vcpus: int
    cores: int
    threads: int
    memory: int
    min_memory: int | None
    autostart: bool
    time: str
    bootloader: str
    bootloader_ovmf: str
    cpu_mode: str
    cpu_model: str
    shutdown_timeout: int
    command_line_args: str
    state: str


@dataclass(frozen=True)
class CreateVMOpts:
    name: str
    description: str = ""
    vcpus: int = 1
    cores: int = 1
    threads: int = 1
    memory: int = 512
    min_memory: int | None = None
    autostart: bool = False
    time: str = "LOCAL"
    bootloader: str = "UEFI"
    bootloader_ovmf: str = ""
    cpu_mode: str = "CUSTOM"
    cpu_model: str = ""
    shutdown_timeout: int = 90
    command_line_args: str = ""


UpdateVMOpts = CreateVMOpts


@dataclass(frozen=True)
class StopVMOpts:
    force: bool = False
    force_after_timeout: bool = False


@dataclass(frozen=True)
class DiskDevice:
    DTYPE: ClassVar[str] = "DISK"
    PARAMS: ClassVar[tuple[Param, ...]] = (
        Param("path", rule=OMIT_ZERO),
        Param("type", rule=OMIT_ZERO),
        Param("physical_sectorsize", rule=OMIT_ZERO),
        Param("logical_sectorsize", rule=OMIT_ZERO),
    )

    path: str = ""
    type: str = ""
    physical_sectorsize: int | None = None
    logical_sectorsize: int | None = None


@dataclass(frozen=True)
class RawDevice:
    DTYPE: ClassVar[str] = "RAW"
    PARAMS: ClassVar[tuple[Param, ...]] = (
        Param("path", rule=OMIT_ZERO),
        Param("type", rule=OMIT_ZERO),
        Param("boot"),
        Param("size", rule=OMIT_ZERO),
        Param("physical_sectorsize", rule=OMIT_ZERO),
        Param("logical_sectorsize", rule=OMIT_ZERO),
    )

    path: str = ""
    type: str = ""
    boot: bool = False
    size: int | None = None
    physical_sectorsize: int | None = None
    logical_sectorsize: int | None = None


@dataclass(frozen=True)
class CDROMDevice:
    DTYPE: ClassVar[str] = "CDROM"
    PARAMS: ClassVar[tuple[Param, ...]] = (Param("path", rule=OMIT_ZERO),)

    path: str = ""


@dataclass(frozen=True)
class NICDevice:
    DTYPE: ClassVar[str] = "NIC"
    PARAMS: ClassVar[tuple[Param, ...]] = (
        Param("type", rule=OMIT_ZERO),
        Param("nic_attach", rule=OMIT_ZERO),
        Param("mac", rule=OMIT_ZERO),
        Param("trust_guest_rx_filters"),
    )

    type: str = ""
    nic_attach: str = ""
    mac: str = ""
    trust_guest_rx_filters: bool = False


@dataclass(frozen=True)
class DisplayDevice:
    DTYPE: ClassVar[str] = "DISPLAY"
    PARAMS: ClassVar[tuple[Param, ...]] = (
        Param("type", rule=OMIT_ZERO),
        Param("port", rule=OMIT_ZERO),
        Param("bind", rule=OMIT_ZERO),
        Param("password", rule=OMIT_ZERO),
        Param("web"),
        Param("resolution", rule=OMIT_ZERO),
        Param("wait"),
    )

    type: str = ""
    port: int | None = None
    bind: str = ""
    password: str = ""
    web: bool = False
    resolution: str = ""
    wait: bool = False


@dataclass(frozen=True)
class PCIDevice:
    DTYPE: ClassVar[str] = "PCI"
    PARAMS: ClassVar[tuple[Param, ...]] = (Param("pptdev", rule=OMIT_ZERO),)

    pptdev: str = ""


@dataclass(frozen=True)
class USBDevice:
    DTYPE: ClassVar[str] = "USB"
    PARAMS: ClassVar[tuple[Param, ...]] = (
        Param("controller_type", rule=OMIT_ZERO),
        Param("device", rule=OMIT_ZERO),
        Param("usb_speed", rule=OMIT_ZERO),
    )

    controller_type: str = ""
    device: str | None = None
    usb_speed: str = ""


DeviceAttributes = Union[
    DiskDevice, RawDevice, CDROMDevice, NICDevice, DisplayDevice, PCIDevice, USBDevice
]

DEVICE_TYPES: dict[str, type] = {
    cls.DTYPE: cls
    for cls in (DiskDevice, RawDevice, CDROMDevice, NICDevice, DisplayDevice, PCIDevice, USBDevice)
}


@dataclass(frozen=True)
class VMDevice:
    id: int
    vm: int
    order: int
    dtype: str
    attributes: DeviceAttributes | None


@dataclass(frozen=True)
class CreateVMDeviceOpts:
    vm: int
    attributes: DeviceAttributes
    order: int | Unset = UNSET


UpdateVMDeviceOpts = CreateVMDeviceOpts


_VM_PARAMS = (
    Param("name"),
    Param("description"),
    Param("vcpus"),
    Param("cores"),
    Param("threads"),
    Param("memory"),
    Param("autostart"),
    Param("time"),
    Param("bootloader"),
    Param("bootloader_ovmf"),
    Param("cpu_mode"),
    Param("shutdown_timeout"),
    Param("command_line_args"),
    Param("min_memory", rule=OMIT_ZERO),
    Param("cpu_model", rule=OMIT_ZERO),
)
_STOP_PARAMS = (Param("force"), Param("force_after_timeout"))
_DEVICE_PARAMS = (
    Param("vm"),
    Param("order", rule=OPTIONAL),
)


def vm_params(opts: CreateVMOpts) -> dict[str, Any]:
    return encode_params(opts, _VM_PARAMS)


def stop_vm_params(opts: StopVMOpts) -> dict[str, Any]:
    return encode_params(opts, _STOP_PARAMS)


def device_attributes_params(attributes: DeviceAttributes) -> dict[str, Any]:
    return encode_params(attributes, attributes.PARAMS, fixed={"dtype": attributes.DTYPE})


def vm_device_params(opts: CreateVMDeviceOpts) -> dict[str, Any]:
    params = encode_params(opts, _DEVICE_PARAMS)
    params["attributes"] = device_attributes_params(opts.attributes)
    return params


def vm_from_response(doc: dict[str, Any]) -> VM:
    return VM(
        id=doc["id"],
        name=text(doc, "name"),
        description=text(doc, "description"),
        vcpus=number(doc, "vcpus"),
        cores=number(doc, "cores"),
        threads=number(doc, "threads"),
        memory=number(doc, "memory"),
        min_memory=field(doc, "min_memory", None),
        autostart=flag(doc, "autostart"),
        time=text(doc, "time"),
        bootloader=text(doc, "bootloader"),
        bootloader_ovmf=text(doc, "bootloader_ovmf"),
        cpu_mode=text(doc, "cpu_mode"),
        cpu_model=text(doc, "cpu_model"),
        shutdown_timeout=number(doc, "shutdown_timeout"),
        command_line_args=text(doc, "command_line_args"),
        state=text(field(doc, "status", None), "state"),
    )


def _attribute(attrs: dict[str, Any], name: str, default: Any) -> Any:
    value = field(attrs, name, default)
    if default is not None and not isinstance(value, type(default)):
        return default
    return value


def device_attributes_from_response(attrs: dict[str, Any]) -> DeviceAttributes | None:
    """Build the attribute dataclass matching ``attrs["dtype"]``.

    Unknown device types decode to ``None``. Absent integer attributes stay
    ``None`` so they can be told apart from an explicit ``0``.
    """
    cls = DEVICE_TYPES.get(text(attrs, "dtype"))
    if cls is None:
        return None
    values = {}
    for declared in fields(cls):
        values[declared.name] = _attribute(attrs, declared.name, declared.default)
    return cls(**values)


def vm_device_from_response(doc: dict[str, Any]) -> VMDevice:
    attrs = field(doc, "attributes", {})
    return VMDevice(
        id=doc["id"],
        vm=number(doc, "vm"),
        order=number(doc, "order"),
        dtype=text(attrs, "dtype"),
        attributes=device_attributes_from_response(attrs),
    )


class VMService:
    BINDINGS = bind(
        VM_NAMESPACE,
        create_vm="create",
        get_vm="get_instance",
        list_vms="query",
        update_vm="update",
        delete_vm="delete",
        start_vm="start",
        stop_vm="stop",
    ) + bind(
        VM_DEVICE_NAMESPACE,
        list_devices="query",
        get_device="query",
        create_device="create",
        update_device="update",
        delete_device="delete",
    )

    def __init__(self, caller: AsyncCaller, version: Version) -> None:
        self._vms: Resource[VM] = Resource(
            caller,
            version,
            gate=VM_NAMESPACE,
            schema="VM",
            decode=vm_from_response,
            lookup=LOOKUP_INSTANCE,
            jobs=("stop",),
        )
        self._devices: Resource[VMDevice] = Resource(
            caller,
            version,
            gate=VM_DEVICE_NAMESPACE,
            schema="VMDevice",
            decode=vm_device_from_response,
            positional_filters=True,
        )

    def create_vm(self, opts: CreateVMOpts) -> VM | None:
        return self._vms.create(vm_params(opts))

    def get_vm(self, vm_id: int) -> VM | None:
        return self._vms.get(vm_id)

    def list_vms(self) -> list[VM]:
        return self._vms.list()

    def update_vm(self, vm_id: int, opts: UpdateVMOpts) -> VM | None:
        return self._vms.update(vm_id, vm_params(opts))

    def delete_vm(self, vm_id: int) -> None:
        self._vms.delete(vm_id)

    def start_vm(self, vm_id: int) -> None:
        self._vms.invoke("start", vm_id)

    def stop_vm(self, vm_id: int, opts: StopVMOpts | None = None) -> None:
        self._vms.invoke("stop", [vm_id, stop_vm_params(opts or StopVMOpts())])

    def list_devices(self, vm_id: int) -> list[VMDevice]:
        return self._devices.query([["vm", "=", vm_id]])

    def get_device(self, device_id: int) -> VMDevice | None:
        return self._devices.get(device_id)

    def create_device(self, opts: CreateVMDeviceOpts) -> VMDevice | None:
        return self._devices.create(vm_device_params(opts))

    def update_device(self, device_id: int, opts: UpdateVMDeviceOpts) -> VMDevice | None:
        return self._devices.update(device_id, vm_device_params(opts))

    def delete_device(self, device_id: int) -> None:
        self._devices.delete(device_id)
