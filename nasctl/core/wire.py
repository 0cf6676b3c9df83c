"""Decoding helpers shared by every resource.

Responses arrive as raw JSON. They are parsed, validated against the packaged
wire schemas and then handed to a resource-specific ``*_from_response``
function that uses the unwrapping helpers below.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import ValidationError, validators

from nasctl.core.errors import DecodeError

_SCHEMA_FILE = "responses.schema.json"


@lru_cache(maxsize=1)
def _schema_document() -> dict[str, Any]:
    schema_text = resources.files("nasctl.schemas").joinpath(_SCHEMA_FILE).read_text(
        encoding="utf-8"
    )
    return json.loads(schema_text)


@lru_cache(maxsize=None)
def _validator(name: str, many: bool) -> Any:
    document = _schema_document()
    if name not in document["$defs"]:
        raise KeyError(f"No wire schema named '{name}'")
    ref: dict[str, Any] = {"$ref": f"#/$defs/{name}"}
    schema: dict[str, Any] = {
        "$schema": document["$schema"],
        "$defs": document["$defs"],
    }
    if many:
        schema.update({"type": "array", "items": ref})
    else:
        schema.update(ref)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def load_json(raw: bytes | str | None, step: str) -> Any:
    if raw is None:
        raise DecodeError(step, "empty response")
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise DecodeError(step, str(exc)) from exc


def validate(doc: Any, schema: str, step: str, *, many: bool = False) -> Any:
    try:
        _validator(schema, many).validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.absolute_path)
        where = f" ({path})" if path else ""
        raise DecodeError(step, f"{exc.message}{where}") from exc
    return doc


def decode(raw: bytes | str | None, schema: str, step: str, *, many: bool = False) -> Any:
    """Parse and validate *raw*; returns plain JSON data."""
    return validate(load_json(raw, step), schema, step, many=many)


def field(doc: dict[str, Any] | None, key: str, default: Any) -> Any:
    """Return ``doc[key]`` with null or missing collapsed to *default*."""
    if not doc:
        return default
    value = doc.get(key)
    return default if value is None else value


def text(doc: dict[str, Any] | None, key: str) -> str:
    return field(doc, key, "")


def number(doc: dict[str, Any] | None, key: str) -> int:
    return field(doc, key, 0)


def flag(doc: dict[str, Any] | None, key: str) -> bool:
    return field(doc, key, False)


def items(doc: dict[str, Any] | None, key: str) -> list[Any]:
    return list(field(doc, key, []))


def prop_value(doc: dict[str, Any] | None, key: str) -> str:
    """Textual form of a wrapped property (``{"value": ...}``)."""
    return text(field(doc, key, None), "value")


def prop_parsed(doc: dict[str, Any] | None, key: str) -> int:
    """Numeric form of a wrapped property (``{"parsed": ..., "value": ...}``)."""
    return number(field(doc, key, None), "parsed")


def has_refs(raw: str | None) -> bool:
    """Count-like property check: non-empty and not the literal ``"0"``."""
    return raw is not None and raw != "" and raw != "0"
