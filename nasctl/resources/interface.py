"""Read-only access to network interfaces (``interface.query``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nasctl.core.resource import Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import field, items, number, text
from nasctl.transports.base import Caller

INTERFACE_NAMESPACE = Fixed("interface")

TYPE_PHYSICAL = "PHYSICAL"
TYPE_BRIDGE = "BRIDGE"
TYPE_LINK_AGGREGATION = "LINK_AGGREGATION"
TYPE_VLAN = "VLAN"

LINK_STATE_UP = "LINK_STATE_UP"
LINK_STATE_DOWN = "LINK_STATE_DOWN"

ALIAS_INET = "INET"
ALIAS_INET6 = "INET6"


@dataclass(frozen=True)
class InterfaceState:
    name: str
    link_state: str
    active_media_type: str
    active_media_subtype: str


@dataclass(frozen=True)
class InterfaceAlias:
    type: str
    address: str
    netmask: int


@dataclass(frozen=True)
class NetworkInterface:
    id: str
    name: str
    type: str
    description: str
    mtu: int
    state: InterfaceState
    aliases: tuple[InterfaceAlias, ...]

    @property
    def link_up(self) -> bool:
        return self.state.link_state == LINK_STATE_UP


def alias_from_response(doc: dict[str, Any]) -> InterfaceAlias:
    return InterfaceAlias(
        type=text(doc, "type"),
        address=text(doc, "address"),
        netmask=number(doc, "netmask"),
    )


def interface_from_response(doc: dict[str, Any]) -> NetworkInterface:
    state = field(doc, "state", None)
    return NetworkInterface(
        id=doc["id"],
        name=text(doc, "name"),
        type=text(doc, "type"),
        description=text(doc, "description"),
        mtu=number(doc, "mtu"),
        state=InterfaceState(
            name=text(state, "name"),
            link_state=text(state, "link_state"),
            active_media_type=text(state, "active_media_type"),
            active_media_subtype=text(state, "active_media_subtype"),
        ),
        aliases=tuple(alias_from_response(a) for a in items(doc, "aliases")),
    )


class InterfaceService:
    BINDINGS = bind(INTERFACE_NAMESPACE, list="query", get="query")

    def __init__(self, caller: Caller, version: Version) -> None:
        self._interfaces: Resource[NetworkInterface] = Resource(
            caller,
            version,
            gate=INTERFACE_NAMESPACE,
            schema="Interface",
            decode=interface_from_response,
        )

    def list(self) -> list[NetworkInterface]:
        return self._interfaces.list()

    def get(self, interface_id: str) -> NetworkInterface | None:
        return self._interfaces.get(interface_id)
