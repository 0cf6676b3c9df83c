"""Method catalog data models used by the loader, feature matrix and CLI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MethodDef:
    name: str
    description: str
    job: bool
    filterable: bool
    item_method: bool

    @property
    def namespace(self) -> str:
        return namespace(self.name)


@dataclass(frozen=True)
class Catalog:
    version: str
    methods: dict[str, MethodDef]

    def namespaces(self) -> dict[str, tuple[str, ...]]:
        """Group method names by namespace, both sorted."""
        grouped: dict[str, list[str]] = {}
        for name in self.methods:
            grouped.setdefault(namespace(name), []).append(name)
        return {ns: tuple(sorted(grouped[ns])) for ns in sorted(grouped)}


def namespace(method: str) -> str:
    """``app.registry.create`` -> ``app.registry``; ``system.info`` -> ``system``."""
    head, sep, _ = method.rpartition(".")
    return head if sep else method
