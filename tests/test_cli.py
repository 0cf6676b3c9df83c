from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from nasctl import cli

runner = CliRunner()


def test_versions_command():
    result = runner.invoke(cli.app, ["versions"])
    assert result.exit_code == 0
    assert "25.04: 99 methods" in result.stdout
    assert "25.10: 100 methods" in result.stdout


def test_methods_command_filters_namespace():
    result = runner.invoke(cli.app, ["methods", "--version", "25.04", "--namespace", "vm"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert "vm.stop [job]" in lines
    assert "vm.start" in lines
    assert all(not line.startswith("vm.device.") for line in lines)


def test_methods_command_defaults_to_latest():
    result = runner.invoke(cli.app, ["methods", "--namespace", "pool.snapshot"])
    assert result.exit_code == 0
    assert "pool.snapshot.rename" in result.stdout


def test_resolve_command_follows_version():
    result = runner.invoke(cli.app, ["resolve", "zfs.snapshot", "create", "--version", "25.10"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "pool.snapshot.create"

    result = runner.invoke(cli.app, ["resolve", "pool.snapshot", "create", "--version", "TrueNAS-SCALE-25.04.1"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "zfs.snapshot.create"


def test_resolve_command_warns_when_method_is_not_cataloged():
    result = runner.invoke(cli.app, ["resolve", "zfs.snapshot", "rename", "--version", "25.04"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "zfs.snapshot.rename"
    assert "Warning: zfs.snapshot.rename is not in the 25.04 catalog" in result.stderr


def test_resolve_unknown_namespace_is_clean():
    result = runner.invoke(cli.app, ["resolve", "app", "query", "--version", "25.10"])
    assert result.exit_code == 1
    assert "Error: Unknown namespace 'app'" in result.stderr
    assert "Traceback" not in result.stderr


def test_resolve_bad_version_is_clean():
    result = runner.invoke(cli.app, ["resolve", "user", "query", "--version", "nightly"])
    assert result.exit_code == 1
    assert "Error: Could not parse appliance version from 'nightly'" in result.stderr


def test_matrix_command_prints_markdown():
    result = runner.invoke(cli.app, ["matrix", "--version", "25.04"])
    assert result.exit_code == 0
    assert "TrueNAS version: 25.04" in result.stdout
    assert "`zfs.snapshot`" in result.stdout


def test_matrix_command_writes_file(tmp_path: Path):
    output = tmp_path / "FEATURES.md"
    result = runner.invoke(cli.app, ["-v", "matrix", "-o", str(output)])
    assert result.exit_code == 0
    assert f"Wrote {output}" in result.stdout
    assert output.read_text(encoding="utf-8").startswith("# TrueNAS API Feature Matrix")


def test_matrix_command_unknown_version_is_clean():
    result = runner.invoke(cli.app, ["matrix", "--version", "24.10"])
    assert result.exit_code == 1
    assert "Error: No method catalog for version 24.10" in result.stderr


def test_catalog_override_warning_is_printed(isolated_xdg: Path):
    path = isolated_xdg / "cfg" / "nasctl" / "catalogs" / "override.yaml"
    path.parent.mkdir(parents=True)
    path.write_text('version: "25.10"\nmethods:\n  system.version: {}\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["versions"])
    assert result.exit_code == 0
    assert "25.10: 1 methods" in result.stdout
    assert "Warning: User catalog '25.10' overrides packaged catalog" in result.stderr


def test_invalid_user_catalog_is_clean(isolated_xdg: Path):
    path = isolated_xdg / "cfg" / "nasctl" / "catalogs" / "bad.yaml"
    path.parent.mkdir(parents=True)
    path.write_text('version: "25.10"\nmethods: {}\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["versions"])
    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr
