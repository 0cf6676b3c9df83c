from __future__ import annotations

import pytest

from fakes import FakeAsyncCaller, FakeCaller, RemoteError
from nasctl.core.errors import UnsupportedOperationError
from nasctl.resources.virt import (
    DEVICE_DISK,
    DEVICE_NIC,
    DEVICE_PROXY,
    CreateVirtInstanceOpts,
    UpdateVirtGlobalConfigOpts,
    UpdateVirtInstanceOpts,
    VirtDeviceOpts,
    VirtService,
    create_instance_params,
    update_global_config_params,
    update_instance_params,
    virt_device_params,
)

INSTANCE_DOC = {
    "id": "web",
    "name": "web",
    "type": "CONTAINER",
    "status": "RUNNING",
    "cpu": "2",
    "memory": 1073741824,
    "autostart": True,
    "environment": {"TZ": "UTC"},
    "aliases": [{"type": "INET", "address": "10.0.0.5", "netmask": 24}],
    "image": {"architecture": "amd64", "os": "Debian", "release": "bookworm", "variant": "default"},
    "storage_pool": "tank",
}


def test_create_instance_params_defaults() -> None:
    assert create_instance_params(CreateVirtInstanceOpts(name="web", image="debian/bookworm")) == {
        "name": "web",
        "instance_type": "CONTAINER",
        "image": "debian/bookworm",
        "cpu": "",
        "memory": 0,
        "autostart": False,
        "environment": {},
    }


def test_create_instance_params_with_devices_and_pool() -> None:
    params = create_instance_params(
        CreateVirtInstanceOpts(
            name="web",
            environment={"TZ": "UTC"},
            storage_pool="fast",
            devices=(VirtDeviceOpts(dev_type=DEVICE_DISK, source="/mnt/tank/web", destination="/srv"),),
        )
    )
    assert params["environment"] == {"TZ": "UTC"}
    assert params["storage_pool"] == "fast"
    assert params["devices"] == [
        {"dev_type": "DISK", "readonly": False, "source": "/mnt/tank/web", "destination": "/srv"}
    ]


def test_device_params_per_type() -> None:
    assert virt_device_params(VirtDeviceOpts(dev_type=DEVICE_NIC, name="eth0", network="br0")) == {
        "dev_type": "NIC",
        "readonly": False,
        "name": "eth0",
        "network": "br0",
    }
    assert virt_device_params(VirtDeviceOpts(dev_type=DEVICE_PROXY, source_proto="TCP", source_port=8080)) == {
        "dev_type": "PROXY",
        "readonly": False,
        "source_proto": "TCP",
        "source_port": 8080,
        "dest_proto": "",
        "dest_port": 0,
    }


def test_three_state_updates() -> None:
    assert update_instance_params(UpdateVirtInstanceOpts()) == {}
    assert update_instance_params(UpdateVirtInstanceOpts(autostart=False)) == {"autostart": False}
    assert update_global_config_params(UpdateVirtGlobalConfigOpts(v6_network="")) == {"v6_network": ""}


def test_create_instance_runs_as_job_then_fetches_by_name(v2504) -> None:
    caller = FakeAsyncCaller({"virt.instance.create": INSTANCE_DOC, "virt.instance.get_instance": INSTANCE_DOC})
    instance = VirtService(caller, v2504).create_instance(CreateVirtInstanceOpts(name="web"))

    assert caller.jobs == ["virt.instance.create"]
    assert caller.calls[1] == ("virt.instance.get_instance", "web")
    assert instance.environment == {"TZ": "UTC"}
    assert instance.aliases[0].address == "10.0.0.5"
    assert instance.image.os == "Debian"
    assert instance.image.description == ""


def test_missing_instance_is_none(v2504) -> None:
    caller = FakeAsyncCaller({"virt.instance.get_instance": RemoteError("Instance web does not exist")})
    assert VirtService(caller, v2504).get_instance("web") is None


def test_job_operations_need_a_waiting_caller(v2504) -> None:
    caller = FakeCaller({"virt.instance.start": None})
    with pytest.raises(UnsupportedOperationError):
        VirtService(caller, v2504).start_instance("web")
    assert caller.calls == []


def test_lifecycle_verbs(v2504) -> None:
    caller = FakeAsyncCaller(
        {
            "virt.instance.update": INSTANCE_DOC,
            "virt.instance.get_instance": INSTANCE_DOC,
            "virt.instance.start": True,
            "virt.instance.stop": True,
            "virt.instance.delete": True,
        }
    )
    service = VirtService(caller, v2504)
    service.update_instance("web", UpdateVirtInstanceOpts(autostart=False))
    service.start_instance("web")
    service.stop_instance("web")
    service.stop_instance("web", timeout=30)
    service.delete_instance("web")

    assert caller.calls == [
        ("virt.instance.update", ["web", {"autostart": False}]),
        ("virt.instance.get_instance", "web"),
        ("virt.instance.start", "web"),
        ("virt.instance.stop", ["web", {}]),
        ("virt.instance.stop", ["web", {"timeout": 30}]),
        ("virt.instance.delete", "web"),
    ]
    assert "virt.instance.get_instance" not in caller.jobs


def test_list_instances_passes_filters_positionally(v2504) -> None:
    caller = FakeAsyncCaller({"virt.instance.query": [INSTANCE_DOC]})
    service = VirtService(caller, v2504)
    service.list_instances()
    service.list_instances([["status", "=", "RUNNING"]])
    assert caller.calls == [
        ("virt.instance.query", None),
        ("virt.instance.query", [[["status", "=", "RUNNING"]]]),
    ]


def test_devices(v2504) -> None:
    caller = FakeAsyncCaller(
        {
            "virt.instance.device_list": [
                {"dev_type": "DISK", "name": "data", "source": "/mnt/tank/web", "destination": "/srv"},
                {"dev_type": "PROXY", "name": "http", "source_port": 8080, "dest_port": 80},
            ],
            "virt.instance.device_add": True,
            "virt.instance.device_delete": True,
        }
    )
    service = VirtService(caller, v2504)
    disk, proxy = service.list_devices("web")
    service.add_device("web", VirtDeviceOpts(dev_type=DEVICE_NIC, network="br0"))
    service.delete_device("web", "data")

    assert disk.destination == "/srv"
    assert (proxy.source_port, proxy.dest_port, proxy.readonly) == (8080, 80, False)
    assert caller.calls[0] == ("virt.instance.device_list", "web")
    assert caller.calls[1] == (
        "virt.instance.device_add",
        ["web", {"dev_type": "NIC", "readonly": False, "network": "br0"}],
    )
    assert caller.calls[2] == ("virt.instance.device_delete", ["web", "data"])
    assert caller.jobs == ["virt.instance.device_add", "virt.instance.device_delete"]


def test_global_config(v2504) -> None:
    config = {"bridge": None, "v4_network": "10.0.0.0/24", "pool": "tank", "storage_pools": ["tank"], "state": "INITIALIZED"}
    caller = FakeAsyncCaller({"virt.global.config": config, "virt.global.update": config})
    service = VirtService(caller, v2504)
    updated = service.update_global_config(UpdateVirtGlobalConfigOpts(pool="tank"))

    assert caller.calls[0] == ("virt.global.update", {"pool": "tank"})
    assert caller.jobs == []
    assert updated.bridge == ""
    assert updated.storage_pools == ("tank",)
    assert updated.state == "INITIALIZED"
