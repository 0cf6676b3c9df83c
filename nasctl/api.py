"""Stable public API for building tooling on top of nasctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import logging

from nasctl.core.errors import (
    CatalogLoadError,
    CatalogValidationError,
    DecodeError,
    NasctlError,
    TransportError,
    UnsupportedOperationError,
    VersionParseError,
    is_not_found,
)
from nasctl.core.params import UNSET, Unset
from nasctl.core.version import Version, resolve_snapshot_method
from nasctl.resources.cron import CronJob, CronService, CreateCronJobOpts, Schedule, UpdateCronJobOpts
from nasctl.resources.dataset import (
    CreateDatasetOpts,
    CreateZvolOpts,
    Dataset,
    DatasetService,
    Pool,
    UpdateDatasetOpts,
    UpdateZvolOpts,
    Zvol,
)
from nasctl.resources.group import CreateGroupOpts, Group, GroupService, UpdateGroupOpts
from nasctl.resources.interface import InterfaceAlias, InterfaceService, InterfaceState, NetworkInterface
from nasctl.resources.snapshot import CreateSnapshotOpts, Snapshot, SnapshotService
from nasctl.resources.system import SystemInfo, SystemService
from nasctl.resources.user import CreateUserOpts, UpdateUserOpts, User, UserService
from nasctl.resources.virt import (
    CreateVirtInstanceOpts,
    UpdateVirtGlobalConfigOpts,
    UpdateVirtInstanceOpts,
    VirtDevice,
    VirtDeviceOpts,
    VirtGlobalConfig,
    VirtInstance,
    VirtService,
)
from nasctl.resources.vm import (
    VM,
    CreateVMDeviceOpts,
    CreateVMOpts,
    StopVMOpts,
    UpdateVMDeviceOpts,
    UpdateVMOpts,
    VMDevice,
    VMService,
)
from nasctl.transports.base import AsyncCaller, Caller
from nasctl.transports.unsupported import UnsupportedCaller

LOGGER = logging.getLogger(__name__)

__all__ = [
    "NasctlError",
    "CatalogLoadError",
    "CatalogValidationError",
    "DecodeError",
    "TransportError",
    "UnsupportedOperationError",
    "VersionParseError",
    "is_not_found",
    "UNSET",
    "Unset",
    "Version",
    "resolve_snapshot_method",
    "Caller",
    "AsyncCaller",
    "UnsupportedCaller",
    "CronJob",
    "CreateCronJobOpts",
    "UpdateCronJobOpts",
    "Schedule",
    "Dataset",
    "CreateDatasetOpts",
    "UpdateDatasetOpts",
    "Zvol",
    "CreateZvolOpts",
    "UpdateZvolOpts",
    "Pool",
    "Group",
    "CreateGroupOpts",
    "UpdateGroupOpts",
    "NetworkInterface",
    "InterfaceState",
    "InterfaceAlias",
    "Snapshot",
    "CreateSnapshotOpts",
    "SystemInfo",
    "User",
    "CreateUserOpts",
    "UpdateUserOpts",
    "VirtGlobalConfig",
    "UpdateVirtGlobalConfigOpts",
    "VirtInstance",
    "CreateVirtInstanceOpts",
    "UpdateVirtInstanceOpts",
    "VirtDevice",
    "VirtDeviceOpts",
    "VM",
    "CreateVMOpts",
    "UpdateVMOpts",
    "StopVMOpts",
    "VMDevice",
    "CreateVMDeviceOpts",
    "UpdateVMDeviceOpts",
    "SERVICES",
    "Client",
]

SERVICES: dict[str, type] = {
    "CronService": CronService,
    "DatasetService": DatasetService,
    "GroupService": GroupService,
    "InterfaceService": InterfaceService,
    "SnapshotService": SnapshotService,
    "SystemService": SystemService,
    "UserService": UserService,
    "VirtService": VirtService,
    "VMService": VMService,
}


class Client:
    """Public client exposing one typed service per appliance namespace.

    ``caller`` performs the remote calls; without one every service call
    raises :class:`UnsupportedOperationError`. When ``version`` is omitted it
    is detected once through ``system.version``, so constructing a client with
    neither a caller nor a version raises that error immediately. Services are
    stateless and
    safe to share between threads as long as the caller is.
    """

    def __init__(self, caller: Caller | None = None, *, version: Version | None = None) -> None:
        self._caller = caller or UnsupportedCaller()
        if version is None:
            version = SystemService(self._caller).detect_version()
            LOGGER.debug("Detected appliance version %s", version)
        self._version = version

        self.users = UserService(self._caller, version)
        self.groups = GroupService(self._caller, version)
        self.datasets = DatasetService(self._caller, version)
        self.snapshots = SnapshotService(self._caller, version)
        self.interfaces = InterfaceService(self._caller, version)
        self.cron = CronService(self._caller, version)
        self.system = SystemService(self._caller, version)
        self.virt = VirtService(self._caller, version)
        self.vms = VMService(self._caller, version)

    @property
    def version(self) -> Version:
        return self._version

    @property
    def caller(self) -> Caller:
        return self._caller
