from __future__ import annotations

from pathlib import Path

import pytest

from nasctl.core.version import Version


@pytest.fixture
def v2504() -> Version:
    return Version(25, 4)


@pytest.fixture
def v2510() -> Version:
    return Version(25, 10)


@pytest.fixture(autouse=True)
def isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path
