import logging
import subprocess
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from common.command_utils import (
    command_exists,
    command_succeeds,
    get_symbols,
    log_status,
    run_command,
    run_elevated_command,
)
from provisioner.config_models import SYMBOLS_DEFAULT, AppSettings


@pytest.fixture
def mock_logger():
    """Fixture to create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


def test_get_symbols_defaults_without_settings():
    assert get_symbols(None) == SYMBOLS_DEFAULT


def test_get_symbols_from_settings():
    settings = AppSettings(symbols={"success": "OK"})
    assert get_symbols(settings) == {"success": "OK"}


@pytest.mark.parametrize(
    "level,method",
    [
        ("debug", "debug"),
        ("info", "info"),
        ("success", "info"),
        ("warning", "warning"),
        ("error", "error"),
        ("critical", "critical"),
        ("unknown", "info"),
    ],
)
def test_log_status_dispatches_by_level(mock_logger, level, method):
    log_status("message", level, mock_logger)
    getattr(mock_logger, method).assert_called_once_with("message", exc_info=False)


def test_run_command_success(mocker: MockerFixture, mock_logger):
    """A successful list command is run without a shell and its result returned."""
    mock_run = mocker.patch("common.command_utils.subprocess.run")
    mock_run.return_value = subprocess.CompletedProcess(
        args=["echo", "hi"], returncode=0, stdout="hi\n", stderr=""
    )

    result = run_command(
        ["echo", "hi"], None, capture_output=True, current_logger=mock_logger
    )

    assert result.returncode == 0
    kwargs = mock_run.call_args.kwargs
    assert kwargs["shell"] is False
    assert kwargs["capture_output"] is True
    assert kwargs["env"] is None


def test_run_command_merges_env(mocker: MockerFixture, mock_logger, monkeypatch):
    monkeypatch.setenv("EXISTING_VAR", "1")
    mock_run = mocker.patch("common.command_utils.subprocess.run")
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)

    run_command(["true"], None, env={"HOMEBREW_NO_ANALYTICS": "1"}, current_logger=mock_logger)

    env = mock_run.call_args.kwargs["env"]
    assert env["HOMEBREW_NO_ANALYTICS"] == "1"
    assert env["EXISTING_VAR"] == "1"


def test_run_command_failure_logs_and_raises(mocker: MockerFixture, mock_logger):
    mocker.patch(
        "common.command_utils.subprocess.run",
        side_effect=subprocess.CalledProcessError(2, ["false"], stderr="boom"),
    )

    with pytest.raises(subprocess.CalledProcessError):
        run_command(["false"], None, current_logger=mock_logger)

    assert mock_logger.error.call_count == 2


def test_run_command_missing_executable_raises(mocker: MockerFixture, mock_logger):
    error = FileNotFoundError(2, "No such file", "nonexistent")
    mocker.patch("common.command_utils.subprocess.run", side_effect=error)

    with pytest.raises(FileNotFoundError):
        run_command(["nonexistent"], None, current_logger=mock_logger)
    mock_logger.error.assert_called_once()


def test_run_command_string_without_shell_is_split(mocker: MockerFixture, mock_logger):
    mock_run = mocker.patch("common.command_utils.subprocess.run")
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)

    run_command("brew list git", None, current_logger=mock_logger)

    assert mock_run.call_args.args[0] == ["brew", "list", "git"]
    mock_logger.warning.assert_called_once()


def test_run_elevated_command_prefixes_sudo(mocker: MockerFixture):
    mocker.patch("common.command_utils.os.geteuid", return_value=1000)
    mock_run_command = mocker.patch("common.command_utils.run_command")

    run_elevated_command(["chown", "-R", "student", "/opt/homebrew"], None)

    assert mock_run_command.call_args.args[0] == [
        "sudo",
        "chown",
        "-R",
        "student",
        "/opt/homebrew",
    ]


def test_run_elevated_command_as_root_has_no_prefix(mocker: MockerFixture):
    mocker.patch("common.command_utils.os.geteuid", return_value=0)
    mock_run_command = mocker.patch("common.command_utils.run_command")

    run_elevated_command(["softwareupdate", "-l"], None)

    assert mock_run_command.call_args.args[0] == ["softwareupdate", "-l"]


class TestCommandSucceeds:
    def test_zero_exit_is_success(self, mocker: MockerFixture):
        mocker.patch(
            "common.command_utils.run_command",
            return_value=subprocess.CompletedProcess(args=[], returncode=0),
        )
        assert command_succeeds(["brew", "list", "git"], None) is True

    def test_nonzero_exit_is_failure(self, mocker: MockerFixture):
        mocker.patch(
            "common.command_utils.run_command",
            return_value=subprocess.CompletedProcess(args=[], returncode=1),
        )
        assert command_succeeds(["brew", "list", "git"], None) is False

    def test_missing_executable_is_failure(self, mocker: MockerFixture):
        mocker.patch(
            "common.command_utils.run_command", side_effect=FileNotFoundError("brew")
        )
        assert command_succeeds(["brew", "list", "git"], None) is False

    def test_unrunnable_executable_is_failure(self, mocker: MockerFixture):
        mocker.patch(
            "common.command_utils.run_command",
            side_effect=PermissionError(13, "Permission denied", "/venv/bin/python"),
        )
        assert command_succeeds(["/venv/bin/python", "-c", "import numpy"], None) is False

    def test_timeout_is_failure(self, mocker: MockerFixture):
        mocker.patch(
            "common.command_utils.run_command",
            side_effect=subprocess.TimeoutExpired(["softwareupdate"], 1),
        )
        assert command_succeeds(["softwareupdate", "-l"], None, timeout=1) is False


def test_command_exists(mocker: MockerFixture):
    mock_which = mocker.patch("common.command_utils.shutil.which")
    mock_which.return_value = "/usr/bin/git"
    assert command_exists("git") is True
    mock_which.return_value = None
    assert command_exists("git") is False
