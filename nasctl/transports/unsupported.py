"""Fallback caller used when no transport is configured."""

from __future__ import annotations

from typing import Any

from nasctl.core.errors import UnsupportedOperationError


class UnsupportedCaller:
    def call(self, method: str, params: Any = None) -> bytes | None:
        raise UnsupportedOperationError(
            f"No transport configured; cannot call '{method}'."
        )

    def call_and_wait(self, method: str, params: Any = None) -> bytes | None:
        raise UnsupportedOperationError(
            f"No transport configured; cannot run job '{method}'."
        )
