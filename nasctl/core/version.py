"""Appliance version handling and version-gated method names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from nasctl.core.errors import VersionParseError

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


@dataclass(frozen=True, order=True)
class Version:
    major: int
    minor: int

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse strings such as ``TrueNAS-SCALE-24.10.2`` or ``25.10``."""
        match = _VERSION_RE.search(text or "")
        if not match:
            raise VersionParseError(f"Could not parse appliance version from '{text}'")
        return cls(major=int(match.group(1)), minor=int(match.group(2)))

    def at_least(self, major: int, minor: int) -> bool:
        return self.major > major or (self.major == major and self.minor >= minor)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor:02d}"


class NamespaceGate(Protocol):
    prefixes: tuple[str, ...]

    def __call__(self, version: Version) -> str:
        """Return the namespace prefix to use against *version*."""


@dataclass(frozen=True)
class Fixed:
    """Namespace whose name is the same on every supported version."""

    prefix: str

    @property
    def prefixes(self) -> tuple[str, ...]:
        return (self.prefix,)

    def __call__(self, version: Version) -> str:
        return self.prefix


@dataclass(frozen=True)
class Threshold:
    """Namespace renamed from ``legacy`` to ``current`` at ``major.minor``."""

    legacy: str
    current: str
    major: int
    minor: int

    @property
    def prefixes(self) -> tuple[str, ...]:
        return (self.legacy, self.current)

    def __call__(self, version: Version) -> str:
        return self.current if version.at_least(self.major, self.minor) else self.legacy


def resolve_method(gate: NamespaceGate, version: Version, operation: str) -> str:
    return f"{gate(version)}.{operation}"


SNAPSHOT_NAMESPACE = Threshold("zfs.snapshot", "pool.snapshot", 25, 10)


def resolve_snapshot_method(version: Version, operation: str) -> str:
    """Pre-25.10 appliances expose ``zfs.snapshot.*``, newer ones ``pool.snapshot.*``."""
    return resolve_method(SNAPSHOT_NAMESPACE, version, operation)
