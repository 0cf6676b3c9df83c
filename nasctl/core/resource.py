"""Generic create/get/list/update/delete sequencing shared by all services.

A ``Resource`` is configured once per wire namespace with the namespace gate,
the lookup strategy, the wire schema and a decode function. Resource services
add the typed options and their encoding on top.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass
from typing import Any, Final, Generic, TypeVar

from nasctl.core.errors import DecodeError, UnsupportedOperationError, is_not_found
from nasctl.core.version import NamespaceGate, Version, resolve_method
from nasctl.core.wire import decode as decode_wire
from nasctl.transports.base import Caller, RawResponse

T = TypeVar("T")

LOOKUP_INSTANCE: Final = "get_instance"
LOOKUP_QUERY: Final = "query"

LOGGER = logging.getLogger(__name__)

Filter = Sequence[Any]


@dataclass(frozen=True)
class Binding:
    """Maps a public service method onto the wire operation it invokes."""

    attr: str
    gate: NamespaceGate
    operation: str

    def method(self, version: Version) -> str:
        return resolve_method(self.gate, version, self.operation)


def bind(gate: NamespaceGate, **operations: str) -> tuple[Binding, ...]:
    return tuple(Binding(attr=attr, gate=gate, operation=op) for attr, op in operations.items())


def id_from(key: str = "id") -> Callable[[Any], Any]:
    def extract(doc: Any) -> Any:
        return doc[key]

    return extract


def bare_id(doc: Any) -> Any:
    return doc


class Resource(Generic[T]):
    def __init__(
        self,
        caller: Caller,
        version: Version,
        *,
        gate: NamespaceGate,
        schema: str,
        decode: Callable[[dict[str, Any]], T],
        lookup: str = LOOKUP_QUERY,
        id_field: str = "id",
        created_id: Callable[[Any], Any] = id_from("id"),
        created_schema: str = "CreatedId",
        jobs: Collection[str] = (),
        positional_filters: bool = False,
        missing_query_is_empty: bool = False,
        accept: Callable[[dict[str, Any]], bool] | None = None,
    ) -> None:
        """Configure the sequencing for one wire namespace.

        ``lookup`` selects how ``get`` reads a single resource: a direct
        ``get_instance`` call (a not-found error becomes ``None``) or a
        ``query`` filtered on ``id_field`` (zero rows become ``None``).
        Operations in ``jobs`` go through ``call_and_wait``.
        ``positional_filters`` wraps query filters in an argument list for
        methods that take them as their first positional argument.
        ``missing_query_is_empty`` lets a filtered query that fails with a
        not-found error count as zero rows. ``accept`` drops rows of another
        kind sharing the namespace.
        """
        if lookup not in (LOOKUP_INSTANCE, LOOKUP_QUERY):
            raise ValueError(f"Unknown lookup strategy '{lookup}'")
        self.caller = caller
        self.version = version
        self.gate = gate
        self.schema = schema
        self.lookup = lookup
        self.id_field = id_field
        self.jobs = frozenset(jobs)
        self.positional_filters = positional_filters
        self.missing_query_is_empty = missing_query_is_empty
        self._decode = decode
        self._created_id = created_id
        self._created_schema = created_schema
        self._accept = accept

    def method(self, operation: str) -> str:
        return resolve_method(self.gate, self.version, operation)

    def call(self, operation: str, params: Any = None) -> RawResponse:
        method = self.method(operation)
        if operation in self.jobs:
            call_and_wait = getattr(self.caller, "call_and_wait", None)
            if call_and_wait is None:
                raise UnsupportedOperationError(
                    f"'{method}' runs as an appliance job; the configured caller cannot wait for jobs."
                )
            LOGGER.debug("Running job %s", method)
            return call_and_wait(method, params)
        LOGGER.debug("Calling %s", method)
        return self.caller.call(method, params)

    def decode_one(self, raw: RawResponse, operation: str) -> T:
        step = self.method(operation)
        doc = decode_wire(raw, self.schema, step)
        return self._convert(doc, step)

    def _convert(self, doc: dict[str, Any], step: str) -> T:
        try:
            return self._decode(doc)
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(step, f"could not convert {self.schema}: {exc}") from exc

    def create(self, params: Any, *, ident: Any = None) -> T | None:
        """Create, then re-read the resource by identifier.

        ``ident`` is used when the identifier is known up front; otherwise it
        is taken from the creation response.
        """
        raw = self.call("create", params)
        if ident is None:
            step = self.method("create")
            created = decode_wire(raw, self._created_schema, step)
            try:
                ident = self._created_id(created)
            except (KeyError, TypeError) as exc:
                raise DecodeError(step, f"missing identifier: {exc}") from exc
        return self.get(ident)

    def fetch(self, operation: str, params: Any = None, *, missing_is_absent: bool = False) -> T | None:
        try:
            raw = self.call(operation, params)
        except Exception as exc:
            if missing_is_absent and is_not_found(exc):
                LOGGER.debug("%s reported missing resource: %s", self.method(operation), exc)
                return None
            raise
        return self.decode_one(raw, operation)

    def get(self, ident: Any) -> T | None:
        if self.lookup == LOOKUP_INSTANCE:
            return self.fetch("get_instance", ident, missing_is_absent=True)
        return self.query_one([[self.id_field, "=", ident]])

    def query_one(self, filters: Sequence[Filter]) -> T | None:
        rows = self.query(filters)
        if not rows:
            return None
        return rows[0]

    def query(self, filters: Sequence[Filter] | None = None) -> list[T]:
        params: Any = None
        if filters:
            params = [list(f) for f in filters]
            if self.positional_filters:
                params = [params]
        try:
            raw = self.call("query", params)
        except Exception as exc:
            if filters and self.missing_query_is_empty and is_not_found(exc):
                LOGGER.debug("%s reported missing resource: %s", self.method("query"), exc)
                return []
            raise
        return self.decode_many(raw, "query")

    def decode_many(self, raw: RawResponse, operation: str) -> list[T]:
        step = self.method(operation)
        docs = decode_wire(raw, self.schema, step, many=True)
        if self._accept is not None:
            docs = [doc for doc in docs if self._accept(doc)]
        return [self._convert(doc, step) for doc in docs]

    def fetch_all(self, operation: str, params: Any = None) -> list[T]:
        """Call a list-returning operation other than ``query``."""
        return self.decode_many(self.call(operation, params), operation)

    def list(self) -> list[T]:
        return self.query(None)

    def update(self, ident: Any, params: Any) -> T | None:
        self.call("update", [ident, params])
        return self.get(ident)

    def delete(self, ident: Any, options: dict[str, Any] | None = None) -> None:
        params = ident if options is None else [ident, options]
        self.call("delete", params)

    def invoke(self, operation: str, params: Any = None) -> None:
        self.call(operation, params)
