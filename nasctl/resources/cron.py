"""Typed access to the ``cronjob.*`` namespace.

The appliance's ``stdout``/``stderr`` flags mean "suppress output". Jobs use
``capture_stdout``/``capture_stderr`` instead (true = capture); both
directions negate, so the pair round-trips.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import Any

from nasctl.core.params import Param, encode_params, negate
from nasctl.core.resource import Resource, bind
from nasctl.core.version import Fixed, Version
from nasctl.core.wire import field, flag, text
from nasctl.transports.base import Caller

CRON_NAMESPACE = Fixed("cronjob")


@dataclass(frozen=True)
class Schedule:
    minute: str = "00"
    hour: str = "*"
    dom: str = "*"
    month: str = "*"
    dow: str = "*"


@dataclass(frozen=True)
class CronJob:
    id: int
    user: str
    command: str
    description: str
    enabled: bool
    capture_stdout: bool
    capture_stderr: bool
    schedule: Schedule


@dataclass(frozen=True)
class CreateCronJobOpts:
    user: str
    command: str
    description: str = ""
    enabled: bool = True
    capture_stdout: bool = False
    capture_stderr: bool = False
    schedule: Schedule = dataclass_field(default_factory=Schedule)


# Every field is sent on update as well.
UpdateCronJobOpts = CreateCronJobOpts


def _schedule_params(schedule: Schedule) -> dict[str, str]:
    return {
        "minute": schedule.minute,
        "hour": schedule.hour,
        "dom": schedule.dom,
        "month": schedule.month,
        "dow": schedule.dow,
    }


_PARAMS = (
    Param("user"),
    Param("command"),
    Param("description"),
    Param("enabled"),
    Param("stdout", attr="capture_stdout", transform=negate),
    Param("stderr", attr="capture_stderr", transform=negate),
    Param("schedule", transform=_schedule_params),
)


def cron_job_params(opts: CreateCronJobOpts) -> dict[str, Any]:
    return encode_params(opts, _PARAMS)


def cron_job_from_response(doc: dict[str, Any]) -> CronJob:
    schedule = field(doc, "schedule", None)
    return CronJob(
        id=doc["id"],
        user=text(doc, "user"),
        command=text(doc, "command"),
        description=text(doc, "description"),
        enabled=flag(doc, "enabled"),
        capture_stdout=not flag(doc, "stdout"),
        capture_stderr=not flag(doc, "stderr"),
        schedule=Schedule(
            minute=text(schedule, "minute"),
            hour=text(schedule, "hour"),
            dom=text(schedule, "dom"),
            month=text(schedule, "month"),
            dow=text(schedule, "dow"),
        ),
    )


class CronService:
    BINDINGS = bind(
        CRON_NAMESPACE,
        create="create",
        get="query",
        list="query",
        update="update",
        delete="delete",
    )

    def __init__(self, caller: Caller, version: Version) -> None:
        self._jobs: Resource[CronJob] = Resource(
            caller,
            version,
            gate=CRON_NAMESPACE,
            schema="CronJob",
            decode=cron_job_from_response,
        )

    def create(self, opts: CreateCronJobOpts) -> CronJob | None:
        return self._jobs.create(cron_job_params(opts))

    def get(self, job_id: int) -> CronJob | None:
        return self._jobs.get(job_id)

    def list(self) -> list[CronJob]:
        return self._jobs.list()

    def update(self, job_id: int, opts: UpdateCronJobOpts) -> CronJob | None:
        return self._jobs.update(job_id, cron_job_params(opts))

    def delete(self, job_id: int) -> None:
        self._jobs.delete(job_id)
