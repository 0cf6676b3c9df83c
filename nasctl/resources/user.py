"""Typed access to the ``user.*`` namespace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nasctl.core.params import OMIT_ZERO, Param, encode_params
from nasctl.core.resource import LOOKUP_INSTANCE, Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import field, flag, items, number, text
from nasctl.transports.base import Caller

USER_NAMESPACE = Fixed("user")


@dataclass(frozen=True)
class User:
    id: int
    uid: int
    username: str
    full_name: str
    email: str
    home: str
    shell: str
    home_mode: str
    group_id: int
    groups: tuple[int, ...]
    smb: bool
    password_disabled: bool
    ssh_password_enabled: bool
    sshpubkey: str
    locked: bool
    sudo_commands: tuple[str, ...]
    sudo_commands_nopasswd: tuple[str, ...]
    builtin: bool
    local: bool
    immutable: bool


@dataclass(frozen=True)
class CreateUserOpts:
    username: str
    full_name: str = ""
    email: str = ""
    uid: int = 0
    password: str = ""
    password_disabled: bool = False
    group: int = 0
    group_create: bool = False
    groups: tuple[int, ...] | None = None
    home: str = ""
    home_create: bool = False
    home_mode: str = ""
    shell: str = ""
    smb: bool = False
    ssh_password_enabled: bool = False
    sshpubkey: str = ""
    locked: bool = False
    sudo_commands: tuple[str, ...] | None = None
    sudo_commands_nopasswd: tuple[str, ...] | None = None


@dataclass(frozen=True)
class UpdateUserOpts:
    """Update options. UID, group creation and home creation are fixed at creation."""

    username: str
    full_name: str = ""
    email: str = ""
    password: str = ""
    password_disabled: bool = False
    group: int = 0
    groups: tuple[int, ...] | None = None
    home: str = ""
    home_mode: str = ""
    shell: str = ""
    smb: bool = False
    ssh_password_enabled: bool = False
    sshpubkey: str = ""
    locked: bool = False
    sudo_commands: tuple[str, ...] | None = None
    sudo_commands_nopasswd: tuple[str, ...] | None = None


_SHARED_PARAMS = (
    Param("username"),
    Param("full_name"),
    Param("email"),
    Param("password_disabled"),
    Param("home"),
    Param("home_mode"),
    Param("shell"),
    Param("smb"),
    Param("ssh_password_enabled"),
    Param("locked"),
    Param("password", rule=OMIT_ZERO),
    Param("group", rule=OMIT_ZERO),
    Param("groups", rule=OMIT_ZERO),
    Param("sshpubkey", rule=OMIT_ZERO),
    Param("sudo_commands", rule=OMIT_ZERO),
    Param("sudo_commands_nopasswd", rule=OMIT_ZERO),
)

_CREATE_PARAMS = _SHARED_PARAMS + (
    Param("group_create"),
    Param("uid", rule=OMIT_ZERO),
    Param("home_create", rule=OMIT_ZERO),
)


def create_user_params(opts: CreateUserOpts) -> dict[str, Any]:
    return encode_params(opts, _CREATE_PARAMS)


def update_user_params(opts: UpdateUserOpts) -> dict[str, Any]:
    return encode_params(opts, _SHARED_PARAMS)


def user_from_response(doc: dict[str, Any]) -> User:
    return User(
        id=doc["id"],
        uid=number(doc, "uid"),
        username=text(doc, "username"),
        full_name=text(doc, "full_name"),
        email=text(doc, "email"),
        home=text(doc, "home"),
        shell=text(doc, "shell"),
        home_mode=text(doc, "home_mode"),
        group_id=number(field(doc, "group", None), "id"),
        groups=tuple(items(doc, "groups")),
        smb=flag(doc, "smb"),
        password_disabled=flag(doc, "password_disabled"),
        ssh_password_enabled=flag(doc, "ssh_password_enabled"),
        sshpubkey=text(doc, "sshpubkey"),
        locked=flag(doc, "locked"),
        sudo_commands=tuple(items(doc, "sudo_commands")),
        sudo_commands_nopasswd=tuple(items(doc, "sudo_commands_nopasswd")),
        builtin=flag(doc, "builtin"),
        local=flag(doc, "local"),
        immutable=flag(doc, "immutable"),
    )


class UserService:
    BINDINGS = bind(
        USER_NAMESPACE,
        create="create",
        get="get_instance",
        get_by_username="query",
        get_by_uid="query",
        list="query",
        update="update",
        delete="delete",
    )

    def __init__(self, caller: Caller, version: Version) -> None:
        self._users: Resource[User] = Resource(
            caller,
            version,
            gate=USER_NAMESPACE,
            schema="User",
            decode=user_from_response,
            lookup=LOOKUP_INSTANCE,
        )

    def create(self, opts: CreateUserOpts) -> User | None:
        return self._users.create(create_user_params(opts))

    def get(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        return self._users.query_one([["username", "=", username]])

    def get_by_uid(self, uid: int) -> User | None:
        return self._users.query_one([["uid", "=", uid]])

    def list(self) -> list[User]:
        return self._users.list()

    def update(self, user_id: int, opts: UpdateUserOpts) -> User | None:
        return self._users.update(user_id, update_user_params(opts))

    def delete(self, user_id: int) -> None:
        """Delete a user together with its primary group."""
        self._users.delete(user_id, {"delete_group": True})
