"""Caller interfaces.

Services depend only on the capability they need: ``Caller`` for plain
request/response methods, ``AsyncCaller`` when some methods run as appliance
jobs that must be awaited.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

RawResponse = bytes | str | None


@runtime_checkable
class Caller(Protocol):
    def call(self, method: str, params: Any = None) -> RawResponse:
        """Invoke *method* with *params* and return the raw JSON response.

        Failures are raised; a missing resource must keep ``does not exist``
        or ``[ENOENT]`` in the exception message.
        """


@runtime_checkable
class AsyncCaller(Caller, Protocol):
    def call_and_wait(self, method: str, params: Any = None) -> RawResponse:
        """Invoke a job-based *method* and return its result once finished."""
