from __future__ import annotations

import json
from typing import Any


class FakeCaller:
    """Records calls and answers from a ``method -> response`` table.

    A response may be plain JSON data, raw ``bytes``, an exception to raise,
    a list of those consumed in order (wrap it in :class:`Replies`) or a
    callable taking the params.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, Any]] = []

    def call(self, method: str, params: Any = None) -> bytes | None:
        self.calls.append((method, params))
        return self._respond(method, params)

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def _respond(self, method: str, params: Any) -> bytes | None:
        if method not in self.responses:
            raise AssertionError(f"unexpected call to {method}")
        response = self.responses[method]
        if isinstance(response, Replies):
            response = response.next()
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)
        if response is None or isinstance(response, bytes):
            return response
        return json.dumps(response).encode("utf-8")


class FakeAsyncCaller(FakeCaller):
    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        super().__init__(responses)
        self.jobs: list[str] = []

    def call_and_wait(self, method: str, params: Any = None) -> bytes | None:
        self.jobs.append(method)
        self.calls.append((method, params))
        return self._respond(method, params)


class Replies:
    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)

    def next(self) -> Any:
        if not self._responses:
            raise AssertionError("response sequence exhausted")
        return self._responses.pop(0)


class RemoteError(Exception):
    """Stand-in for a transport error carrying the appliance message."""
