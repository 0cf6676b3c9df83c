from __future__ import annotations

from nasctl.api import SERVICES
from nasctl.core.catalog import load_catalog
from nasctl.core.matrix import BoundMethod, bound_methods, build_matrix, pct, render_markdown
from nasctl.core.model import Catalog, MethodDef
from nasctl.core.resource import bind
from nasctl.core.version import Fixed, Version


def _coverage(matrix, namespace):
    return next(c for c in matrix.covered if c.namespace == namespace)


def _method(name: str) -> MethodDef:
    return MethodDef(name=name, description="", job=False, filterable=False, item_method=False)


def test_snapshot_coverage_follows_the_renamed_namespace() -> None:
    older = build_matrix(load_catalog("25.04"), SERVICES)
    newer = build_matrix(load_catalog("25.10"), SERVICES)

    old_rows = {row.method: row for row in _coverage(older, "zfs.snapshot").rows}
    new_rows = {row.method: row for row in _coverage(newer, "pool.snapshot").rows}
    assert old_rows["zfs.snapshot.create"].implemented_by == ("create",)
    assert new_rows["pool.snapshot.create"].implemented_by == ("create",)
    assert not new_rows["pool.snapshot.rename"].implemented
    assert _coverage(newer, "pool.snapshot").service == "SnapshotService"


def test_uncovered_namespaces() -> None:
    matrix = build_matrix(load_catalog("25.10"), SERVICES)
    assert matrix.uncovered == (("app", 5), ("cloudsync", 4), ("docker", 3))
    assert matrix.not_in_catalog == ()
    assert matrix.total == 100


def test_query_methods_list_every_binding() -> None:
    matrix = build_matrix(load_catalog("25.10"), SERVICES)
    rows = {row.method: row for row in _coverage(matrix, "user").rows}
    assert rows["user.query"].implemented_by == ("get_by_username", "get_by_uid", "list")
    assert not rows["user.shell_choices"].implemented


def test_bound_methods_report_aliases() -> None:
    resolved, aliases = bound_methods({"SnapshotService": SERVICES["SnapshotService"]}, Version(25, 10))
    assert BoundMethod("SnapshotService", "hold", "pool.snapshot.hold") in resolved
    assert BoundMethod("SnapshotService", "hold", "zfs.snapshot.hold") in aliases
    assert all(bound.method.startswith("pool.snapshot.") for bound in resolved)


def test_bound_methods_missing_from_catalog() -> None:
    class WidgetService:
        BINDINGS = bind(Fixed("widget"), spin="spin", stop="stop")

    catalog = Catalog(version="25.10", methods={"widget.spin": _method("widget.spin")})
    matrix = build_matrix(catalog, {"WidgetService": WidgetService})

    assert matrix.implemented == 1
    assert matrix.not_in_catalog == (BoundMethod("WidgetService", "stop", "widget.stop"),)
    text = render_markdown(matrix)
    assert "## Methods Not in Catalog (1 methods)" in text
    assert "| WidgetService | stop | widget.stop |" in text


def test_render_markdown() -> None:
    matrix = build_matrix(load_catalog("25.10"), SERVICES)
    text = render_markdown(matrix)

    assert text.startswith("# TrueNAS API Feature Matrix")
    assert "TrueNAS version: 25.10" in text
    assert f"Total API methods: 100 | Implemented: {matrix.implemented}" in text
    assert "## Covered Namespaces" in text
    assert "### SnapshotService: `pool.snapshot` (9 methods)" in text
    assert "| pool.snapshot.create | ✓ | create |" in text
    assert "| pool.snapshot.rename |  |  |" in text
    assert "## Uncovered Namespaces (3 namespaces, 12 methods)" in text
    assert "| docker | 3 |" in text
    assert "Methods Not in Catalog" not in text


def test_pct() -> None:
    assert pct(0, 0) == 0.0
    assert pct(1, 4) == 25.0
