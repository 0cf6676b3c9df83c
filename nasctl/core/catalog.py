"""Loading and validation of YAML method catalogs.

A catalog lists the wire methods one appliance release exposes. Catalogs ship
inside ``nasctl.catalogs``; files in ``$XDG_CONFIG_HOME/nasctl/catalogs`` or
``$XDG_DATA_HOME/nasctl/catalogs`` add releases or replace packaged ones.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from nasctl.core.errors import CatalogLoadError, CatalogValidationError, VersionParseError
from nasctl.core.model import Catalog, MethodDef, namespace
from nasctl.core.version import Version

LOGGER = logging.getLogger(__name__)

__all__ = [
    "LoadedCatalogs",
    "UniqueKeyLoader",
    "latest_version",
    "load_catalog",
    "load_catalogs",
    "namespace",
    "versions",
]


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise CatalogValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedCatalogs:
    catalogs: dict[str, Catalog]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("nasctl.schemas").joinpath("catalog.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _catalog_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "nasctl/catalogs", xdg_data / "nasctl/catalogs"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Could not read catalog file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise CatalogValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise CatalogValidationError(f"Catalog file {path} must contain a mapping at root")
    return loaded


def _normalize_bool(value: Any, *, context: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise CatalogValidationError(f"{context} must be boolean true/false")


def _build_catalog(doc: dict[str, Any], source: Path | Traversable) -> Catalog:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise CatalogValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    version = str(Version.parse(doc["version"]))
    methods: dict[str, MethodDef] = {}
    for name, spec in doc["methods"].items():
        spec = spec or {}
        methods[name] = MethodDef(
            name=name,
            description=spec.get("description") or "",
            job=_normalize_bool(spec.get("job", False), context=f"{version}.{name}.job"),
            filterable=_normalize_bool(
                spec.get("filterable", False), context=f"{version}.{name}.filterable"
            ),
            item_method=_normalize_bool(
                spec.get("item_method", False), context=f"{version}.{name}.item_method"
            ),
        )
    return Catalog(version=version, methods=methods)


def _iter_packaged_catalog_paths() -> list[Traversable]:
    catalog_root = resources.files("nasctl.catalogs")
    return [item for item in catalog_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_catalog_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _catalog_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_catalogs() -> LoadedCatalogs:
    catalogs: dict[str, Catalog] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_catalog_paths(), key=lambda p: p.name):
        catalog = _build_catalog(_read_yaml(path), path)
        if catalog.version in catalogs:
            raise CatalogValidationError(
                f"Packaged catalog {path} duplicates version {catalog.version}"
            )
        catalogs[catalog.version] = catalog

    for path in _iter_user_catalog_paths():
        catalog = _build_catalog(_read_yaml(path), path)
        if catalog.version in catalogs:
            warning = f"User catalog '{catalog.version}' overrides packaged catalog"
            LOGGER.warning(warning)
            warnings.append(warning)
        catalogs[catalog.version] = catalog

    return LoadedCatalogs(catalogs=catalogs, warnings=tuple(warnings))


def versions(loaded: LoadedCatalogs | None = None) -> list[str]:
    """Catalog versions in release order (``25.04`` before ``25.10``)."""
    loaded = loaded or load_catalogs()
    return sorted(loaded.catalogs, key=Version.parse)


def latest_version(loaded: LoadedCatalogs | None = None) -> str:
    available = versions(loaded)
    if not available:
        raise CatalogLoadError("No method catalogs available")
    return available[-1]


def load_catalog(version: str | None = None, loaded: LoadedCatalogs | None = None) -> Catalog:
    """Return the catalog for *version*, or the latest one when omitted.

    ``version`` may be a full appliance string such as ``TrueNAS-SCALE-25.04.2``.
    """
    loaded = loaded or load_catalogs()
    if version is None:
        return loaded.catalogs[latest_version(loaded)]
    try:
        key = str(Version.parse(version))
    except VersionParseError as exc:
        raise CatalogLoadError(str(exc)) from exc
    if key not in loaded.catalogs:
        known = ", ".join(versions(loaded)) or "none"
        raise CatalogLoadError(f"No method catalog for version {key} (available: {known})")
    return loaded.catalogs[key]
