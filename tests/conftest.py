from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable Teams project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def clean_app_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove bot credentials from the process environment for the test."""
    for name in ("MICROSOFT_APP_ID", "MICROSOFT_APP_PASSWORD", "OTHER_BOT_ID"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
