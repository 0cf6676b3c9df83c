"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from nasctl.api import SERVICES
from nasctl.core.catalog import LoadedCatalogs, load_catalog, load_catalogs, versions
from nasctl.core.errors import NasctlError
from nasctl.core.matrix import build_matrix, render_markdown
from nasctl.core.model import namespace as method_namespace
from nasctl.core.version import NamespaceGate, Version, resolve_method

app = typer.Typer(help="TrueNAS management plane method catalogs and typed service coverage")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


def _load() -> LoadedCatalogs:
    loaded = load_catalogs()
    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return loaded


def _gates() -> dict[str, NamespaceGate]:
    gates: dict[str, NamespaceGate] = {}
    for service in SERVICES.values():
        for binding in service.BINDINGS:
            for prefix in binding.gate.prefixes:
                gates.setdefault(prefix, binding.gate)
    return gates


@app.command("versions")
def list_versions() -> None:
    """List appliance versions with a method catalog."""
    try:
        loaded = _load()
        available = versions(loaded)
        if not available:
            typer.echo("No catalogs loaded")
            raise typer.Exit(code=1)
        for version in available:
            typer.echo(f"{version}: {len(loaded.catalogs[version].methods)} methods")
    except NasctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("methods")
def list_methods(
    version: str | None = typer.Option(None, "--version", help="Appliance version (default: latest)"),
    namespace: str | None = typer.Option(None, "--namespace", help="Only methods in this namespace"),
) -> None:
    """List catalog methods, flagging jobs."""
    try:
        catalog = load_catalog(version, _load())
        for name, method in sorted(catalog.methods.items()):
            if namespace is not None and method_namespace(name) != namespace:
                continue
            suffix = " [job]" if method.job else ""
            typer.echo(f"{name}{suffix}")
    except NasctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("resolve")
def resolve(
    namespace: str,
    operation: str,
    version: str = typer.Option(..., "--version", help="Appliance version, e.g. 25.04 or TrueNAS-SCALE-25.10.0"),
) -> None:
    """Print the wire method a typed service calls for NAMESPACE.OPERATION."""
    try:
        gate = _gates().get(namespace)
        if gate is None:
            typer.echo(f"Error: Unknown namespace '{namespace}'", err=True)
            raise typer.Exit(code=1)
        parsed = Version.parse(version)
        method = resolve_method(gate, parsed, operation)
        typer.echo(method)
        loaded = _load()
        if str(parsed) in loaded.catalogs and method not in loaded.catalogs[str(parsed)].methods:
            typer.echo(f"Warning: {method} is not in the {parsed} catalog", err=True)
    except NasctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("matrix")
def matrix(
    version: str | None = typer.Option(None, "--version", help="Appliance version (default: latest)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write markdown to this file"),
) -> None:
    """Generate a markdown feature matrix of implemented vs catalog methods."""
    try:
        catalog = load_catalog(version, _load())
        text = render_markdown(build_matrix(catalog, SERVICES))
        if output is None:
            typer.echo(text)
            return
        try:
            output.write_text(text + "\n", encoding="utf-8")
        except OSError as exc:
            typer.echo(f"Error: Could not write {output}: {exc}", err=True)
            raise typer.Exit(code=1) from None
        typer.echo(f"Wrote {output}")
    except NasctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
