"""Typed access to the ``group.*`` namespace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nasctl.core.params import OMIT_ZERO, Param, encode_params
from nasctl.core.resource import LOOKUP_INSTANCE, Resource, bare_id, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import flag, items, number, text
from nasctl.transports.base import Caller

GROUP_NAMESPACE = Fixed("group")


@dataclass(frozen=True)
class Group:
    id: int
    gid: int
    name: str
    builtin: bool
    smb: bool
    sudo_commands: tuple[str, ...]
    sudo_commands_nopasswd: tuple[str, ...]
    users: tuple[int, ...]
    local: bool
    immutable: bool


@dataclass(frozen=True)
class CreateGroupOpts:
    name: str
    gid: int = 0  # 0 = auto-assign
    smb: bool = False
    sudo_commands: tuple[str, ...] | None = None
    sudo_commands_nopasswd: tuple[str, ...] | None = None


@dataclass(frozen=True)
class UpdateGroupOpts:
    name: str
    smb: bool = False
    sudo_commands: tuple[str, ...] | None = None
    sudo_commands_nopasswd: tuple[str, ...] | None = None


_UPDATE_PARAMS = (
    Param("name"),
    Param("smb"),
    Param("sudo_commands", rule=OMIT_ZERO),
    Param("sudo_commands_nopasswd", rule=OMIT_ZERO),
)
_CREATE_PARAMS = _UPDATE_PARAMS + (Param("gid", rule=OMIT_ZERO),)


def create_group_params(opts: CreateGroupOpts) -> dict[str, Any]:
    return encode_params(opts, _CREATE_PARAMS)


def update_group_params(opts: UpdateGroupOpts) -> dict[str, Any]:
    return encode_params(opts, _UPDATE_PARAMS)


def group_from_response(doc: dict[str, Any]) -> Group:
    return Group(
        id=doc["id"],
        gid=number(doc, "gid"),
        name=text(doc, "group"),
        builtin=flag(doc, "builtin"),
        smb=flag(doc, "smb"),
        sudo_commands=tuple(items(doc, "sudo_commands")),
        sudo_commands_nopasswd=tuple(items(doc, "sudo_commands_nopasswd")),
        users=tuple(items(doc, "users")),
        local=flag(doc, "local"),
        immutable=flag(doc, "immutable"),
    )


class GroupService:
    BINDINGS = bind(
        GROUP_NAMESPACE,
        create="create",
        get="get_instance",
        get_by_name="query",
        get_by_gid="query",
        list="query",
        update="update",
        delete="delete",
    )

    def __init__(self, caller: Caller, version: Version) -> None:
        # group.create answers with the bare numeric id.
        self._groups: Resource[Group] = Resource(
            caller,
            version,
            gate=GROUP_NAMESPACE,
            schema="Group",
            decode=group_from_response,
            lookup=LOOKUP_INSTANCE,
            created_id=bare_id,
            created_schema="BareId",
        )

    def create(self, opts: CreateGroupOpts) -> Group | None:
        return self._groups.create(create_group_params(opts))

    def get(self, group_id: int) -> Group | None:
        return self._groups.get(group_id)

    def get_by_name(self, name: str) -> Group | None:
        return self._groups.query_one([["group", "=", name]])

    def get_by_gid(self, gid: int) -> Group | None:
        return self._groups.query_one([["gid", "=", gid]])

    def list(self) -> list[Group]:
        return self._groups.list()

    def update(self, group_id: int, opts: UpdateGroupOpts) -> Group | None:
        return self._groups.update(group_id, update_group_params(opts))

    def delete(self, group_id: int) -> None:
        """Delete a group; member users are kept."""
        self._groups.delete(group_id, {"delete_users": False})
