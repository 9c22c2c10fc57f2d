# tests/conftest.py
import os

import pytest

from common.run_context import RunContext
from provisioner.config_models import AppSettings, LockSettings, RetrySettings


@pytest.fixture(autouse=True)
def _clean_academy_env(monkeypatch):
    """Keep ACADEMY_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("ACADEMY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def home_dir(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def app_settings(home_dir):
    return AppSettings(
        home_dir=home_dir,
        use_color=False,
        retry=RetrySettings(max_attempts=3, delay=0),
        lock=LockSettings(timeout=5, poll_interval=1),
    )


@pytest.fixture
def run_context(app_settings):
    context = RunContext.create(app_settings, console=False)
    yield context
    context.close()
