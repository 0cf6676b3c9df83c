from __future__ import annotations

import pytest

from fakes import FakeCaller
from nasctl.core.errors import DecodeError, VersionParseError
from nasctl.core.version import Version
from nasctl.resources.system import SystemService


def test_get_info() -> None:
    caller = FakeCaller(
        {
            "system.info": {
                "model": "AMD Ryzen 5 5600G",
                "cores": 12,
                "physical_cores": 6,
                "hostname": "nas",
                "uptime": "3 days, 2:01:00",
                "uptime_seconds": 266460.5,
                "loadavg": [0.5, 0.25],
                "ecc_memory": False,
            }
        }
    )
    info = SystemService(caller).get_info()
    assert info.hostname == "nas"
    assert info.physical_cores == 6
    assert info.uptime_seconds == 266460.5
    assert info.loadavg == (0.5, 0.25, 0.0)


def test_detect_version() -> None:
    caller = FakeCaller({"system.version": "TrueNAS-SCALE-25.10.0"})
    service = SystemService(caller)
    assert service.get_version() == "TrueNAS-SCALE-25.10.0"
    assert service.detect_version() == Version(25, 10)
    assert caller.calls == [("system.version", None), ("system.version", None)]


def test_unparseable_version() -> None:
    caller = FakeCaller({"system.version": "TrueNAS-SCALE-MASTER"})
    with pytest.raises(VersionParseError):
        SystemService(caller).detect_version()


def test_version_must_be_a_string() -> None:
    caller = FakeCaller({"system.version": {"version": "25.10"}})
    with pytest.raises(DecodeError) as info:
        SystemService(caller).get_version()
    assert info.value.step == "system.version"
