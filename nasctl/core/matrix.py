"""Feature matrix: which catalog methods the typed services implement.

Every service class declares ``BINDINGS`` (see :func:`nasctl.core.resource.bind`).
Bindings are resolved against a catalog's version and compared with the
catalog, grouped by namespace. Renamed namespaces count for every prefix they
have carried, so ``zfs.snapshot.create`` and ``pool.snapshot.create`` are both
covered by the same method.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from nasctl.core.model import Catalog, namespace
from nasctl.core.version import Version

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundMethod:
    service: str
    attr: str
    method: str


@dataclass(frozen=True)
class MethodRow:
    method: str
    implemented_by: tuple[str, ...]

    @property
    def implemented(self) -> bool:
        return bool(self.implemented_by)


@dataclass(frozen=True)
class NamespaceCoverage:
    namespace: str
    service: str
    rows: tuple[MethodRow, ...]

    @property
    def implemented(self) -> int:
        return sum(1 for row in self.rows if row.implemented)


@dataclass(frozen=True)
class FeatureMatrix:
    version: str
    total: int
    implemented: int
    covered: tuple[NamespaceCoverage, ...]
    uncovered: tuple[tuple[str, int], ...]
    not_in_catalog: tuple[BoundMethod, ...]

    def services(self) -> dict[str, tuple[NamespaceCoverage, ...]]:
        grouped: dict[str, list[NamespaceCoverage]] = {}
        for coverage in self.covered:
            grouped.setdefault(coverage.service, []).append(coverage)
        return {svc: tuple(grouped[svc]) for svc in sorted(grouped)}


def pct(n: int, total: int) -> float:
    if total == 0:
        return 0.0
    return n / total * 100


def bound_methods(services: Mapping[str, type], version: Version) -> tuple[list[BoundMethod], list[BoundMethod]]:
    """Return ``(resolved, aliases)`` bindings for *version*.

    ``resolved`` holds the method each binding calls against *version*;
    ``aliases`` adds the same operation under every other prefix its
    namespace has used.
    """
    resolved: list[BoundMethod] = []
    aliases: list[BoundMethod] = []
    for service_name in sorted(services):
        for binding in getattr(services[service_name], "BINDINGS", ()):
            current = binding.method(version)
            resolved.append(BoundMethod(service_name, binding.attr, current))
            for prefix in binding.gate.prefixes:
                alias = f"{prefix}.{binding.operation}"
                if alias != current:
                    aliases.append(BoundMethod(service_name, binding.attr, alias))
    return resolved, aliases


def build_matrix(catalog: Catalog, services: Mapping[str, type]) -> FeatureMatrix:
    resolved, aliases = bound_methods(services, Version.parse(catalog.version))

    implemented_by: dict[str, list[str]] = {}
    owner: dict[str, str] = {}
    for bound in resolved + aliases:
        names = implemented_by.setdefault(bound.method, [])
        if bound.attr not in names:
            names.append(bound.attr)
        owner.setdefault(namespace(bound.method), bound.service)

    by_namespace = catalog.namespaces()
    covered: list[NamespaceCoverage] = []
    uncovered: list[tuple[str, int]] = []
    for ns, methods in by_namespace.items():
        if ns not in owner:
            uncovered.append((ns, len(methods)))
            continue
        rows = tuple(
            MethodRow(method=m, implemented_by=tuple(implemented_by.get(m, ()))) for m in methods
        )
        covered.append(NamespaceCoverage(namespace=ns, service=owner[ns], rows=rows))

    seen: set[tuple[str, str, str]] = set()
    missing: list[BoundMethod] = []
    for bound in resolved:
        key = (bound.service, bound.attr, bound.method)
        if bound.method in catalog.methods or key in seen:
            continue
        seen.add(key)
        missing.append(bound)
    missing.sort(key=lambda b: (b.service, b.method))
    if missing:
        LOGGER.debug("%d bound methods are not in the %s catalog", len(missing), catalog.version)

    return FeatureMatrix(
        version=catalog.version,
        total=len(catalog.methods),
        implemented=sum(1 for m in catalog.methods if m in implemented_by),
        covered=tuple(covered),
        uncovered=tuple(uncovered),
        not_in_catalog=tuple(missing),
    )


def render_markdown(matrix: FeatureMatrix) -> str:
    lines = [
        "# TrueNAS API Feature Matrix",
        "",
        f"TrueNAS version: {matrix.version}",
        "",
        f"Total API methods: {matrix.total} | Implemented: {matrix.implemented} "
        f"({pct(matrix.implemented, matrix.total):.1f}%)",
        "",
        "## Covered Namespaces",
        "",
        "| Service | Namespaces | API Methods | Implemented |",
        "|---------|------------|:-----------:|:-----------:|",
    ]
    services = matrix.services()
    for svc, coverages in services.items():
        api_count = sum(len(c.rows) for c in coverages)
        impl_count = sum(c.implemented for c in coverages)
        names = ", ".join(c.namespace for c in coverages)
        lines.append(
            f"| {svc} | {names} | {api_count} | {impl_count} ({pct(impl_count, api_count):.0f}%) |"
        )
    lines.append("")

    for svc, coverages in services.items():
        for coverage in coverages:
            lines.append(f"### {svc}: `{coverage.namespace}` ({len(coverage.rows)} methods)")
            lines.append("")
            lines.append("| API Method | Implemented | Python Method |")
            lines.append("|------------|:-----------:|---------------|")
            for row in coverage.rows:
                mark = "✓" if row.implemented else ""
                lines.append(f"| {row.method} | {mark} | {', '.join(row.implemented_by)} |")
            lines.append("")

    if matrix.uncovered:
        count = sum(n for _, n in matrix.uncovered)
        lines.append(
            f"## Uncovered Namespaces ({len(matrix.uncovered)} namespaces, {count} methods)"
        )
        lines.append("")
        lines.append("| Namespace | Methods |")
        lines.append("|-----------|--------:|")
        for ns, n in matrix.uncovered:
            lines.append(f"| {ns} | {n} |")
        lines.append("")

    if matrix.not_in_catalog:
        lines.append(f"## Methods Not in Catalog ({len(matrix.not_in_catalog)} methods)")
        lines.append("")
        lines.append(f"These methods are bound but absent from the {matrix.version} catalog.")
        lines.append("")
        lines.append("| Service | Python Method | API Method |")
        lines.append("|---------|---------------|------------|")
        for bound in matrix.not_in_catalog:
            lines.append(f"| {bound.service} | {bound.attr} | {bound.method} |")
        lines.append("")

    return "\n".join(lines)
