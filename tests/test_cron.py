from __future__ import annotations

from fakes import FakeCaller
from nasctl.resources.cron import CreateCronJobOpts, CronService, Schedule, cron_job_params

JOB_DOC = {
    "id": 5,
    "user": "root",
    "command": "/usr/local/bin/backup.sh",
    "description": "nightly backup",
    "enabled": True,
    "stdout": False,
    "stderr": True,
    "schedule": {"minute": "30", "hour": "2", "dom": "*", "month": "*", "dow": "*"},
}


def test_output_flags_are_inverted_on_decode(v2504) -> None:
    caller = FakeCaller({"cronjob.query": [JOB_DOC]})
    job = CronService(caller, v2504).get(5)

    assert job.capture_stdout is True
    assert job.capture_stderr is False
    assert job.schedule == Schedule(minute="30", hour="2")
    assert caller.calls == [("cronjob.query", [["id", "=", 5]])]


def test_output_flags_are_inverted_on_encode() -> None:
    params = cron_job_params(
        CreateCronJobOpts(user="root", command="true", capture_stdout=True, capture_stderr=False)
    )
    assert params == {
        "user": "root",
        "command": "true",
        "description": "",
        "enabled": True,
        "stdout": False,
        "stderr": True,
        "schedule": {"minute": "00", "hour": "*", "dom": "*", "month": "*", "dow": "*"},
    }


def test_decoded_job_encodes_back_to_the_same_flags(v2504) -> None:
    caller = FakeCaller({"cronjob.query": [JOB_DOC]})
    job = CronService(caller, v2504).get(5)
    params = cron_job_params(
        CreateCronJobOpts(
            user=job.user,
            command=job.command,
            capture_stdout=job.capture_stdout,
            capture_stderr=job.capture_stderr,
            schedule=job.schedule,
        )
    )
    assert (params["stdout"], params["stderr"]) == (JOB_DOC["stdout"], JOB_DOC["stderr"])


def test_missing_flags_mean_captured(v2504) -> None:
    caller = FakeCaller({"cronjob.query": [{"id": 6, "schedule": None}]})
    (job,) = CronService(caller, v2504).list()
    assert job.capture_stdout is True
    assert job.capture_stderr is True
    assert job.schedule == Schedule(minute="", hour="", dom="", month="", dow="")


def test_null_fields_decode_as_zero_values(v2504) -> None:
    doc = dict(JOB_DOC, description=None, enabled=None, stdout=None, schedule=dict(JOB_DOC["schedule"], hour=None))
    caller = FakeCaller({"cronjob.query": [doc]})
    job = CronService(caller, v2504).get(5)

    assert job.description == ""
    assert job.enabled is False
    assert job.capture_stdout is True
    assert job.schedule.hour == ""


def test_create_update_delete(v2504) -> None:
    caller = FakeCaller(
        {
            "cronjob.create": {"id": 5},
            "cronjob.update": {"id": 5},
            "cronjob.query": [JOB_DOC],
            "cronjob.delete": True,
        }
    )
    service = CronService(caller, v2504)
    created = service.create(CreateCronJobOpts(user="root", command="/usr/local/bin/backup.sh"))
    service.update(5, CreateCronJobOpts(user="root", command="/usr/local/bin/backup.sh", enabled=False))
    service.delete(5)

    assert created.id == 5
    assert caller.methods == [
        "cronjob.create",
        "cronjob.query",
        "cronjob.update",
        "cronjob.query",
        "cronjob.delete",
    ]
    assert caller.calls[2][1][1]["enabled"] is False
    assert caller.calls[-1] == ("cronjob.delete", 5)
