"""System information and appliance version detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nasctl.core.resource import Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import decode, flag, items, number, text
from nasctl.transports.base import Caller

SYSTEM_NAMESPACE = Fixed("system")

# Placeholder version used only while the real one is being detected.
_BOOTSTRAP_VERSION = Version(0, 0)


@dataclass(frozen=True)
class SystemInfo:
    model: str
    cores: int
    physical_cores: int
    hostname: str
    uptime: str
    uptime_seconds: float
    loadavg: tuple[float, float, float]
    ecc_memory: bool


def system_info_from_response(doc: dict[str, Any]) -> SystemInfo:
    loadavg = [float(v) for v in items(doc, "loadavg")]
    loadavg += [0.0] * (3 - len(loadavg))
    return SystemInfo(
        model=text(doc, "model"),
        cores=number(doc, "cores"),
        physical_cores=number(doc, "physical_cores"),
        hostname=text(doc, "hostname"),
        uptime=text(doc, "uptime"),
        uptime_seconds=float(number(doc, "uptime_seconds")),
        loadavg=(loadavg[0], loadavg[1], loadavg[2]),
        ecc_memory=flag(doc, "ecc_memory"),
    )


class SystemService:
    BINDINGS = bind(
        SYSTEM_NAMESPACE,
        get_info="info",
        get_version="version",
        detect_version="version",
    )

    def __init__(self, caller: Caller, version: Version = _BOOTSTRAP_VERSION) -> None:
        self._system: Resource[SystemInfo] = Resource(
            caller,
            version,
            gate=SYSTEM_NAMESPACE,
            schema="SystemInfo",
            decode=system_info_from_response,
        )

    def get_info(self) -> SystemInfo:
        return self._system.fetch("info")

    def get_version(self) -> str:
        """Return the raw version string, e.g. ``TrueNAS-SCALE-25.04.1``."""
        raw = self._system.call("version")
        return decode(raw, "VersionString", self._system.method("version"))

    def detect_version(self) -> Version:
        return Version.parse(self.get_version())
