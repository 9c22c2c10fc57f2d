import os
import subprocess
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from configure import system_prep
from configure.system_prep import (
    check_system_requirements,
    command_line_tools_label,
    ensure_rosetta,
    fix_permissions,
    install_homebrew,
    install_xcode_cli,
)
from provisioner.batch_runner import FatalStageError

MODULE = "configure.system_prep"

SOFTWAREUPDATE_LISTING = """\
Software Update Tool

Finding available software
Software Update found the following new or updated software:
* Label: Command Line Tools for Xcode-15.1
\tTitle: Command Line Tools for Xcode, Version: 15.1, Size: 735M, Recommended: YES,
* Label: Command Line Tools for Xcode-15.3
\tTitle: Command Line Tools for Xcode, Version: 15.3, Size: 751M, Recommended: YES,
"""


@pytest.fixture(autouse=True)
def _marker_in_tmp(mocker: MockerFixture, tmp_path):
    mocker.patch(f"{MODULE}.XCODE_IN_PROGRESS_MARKER", tmp_path / "xcode-in-progress")


def test_command_line_tools_label_picks_last():
    assert command_line_tools_label(SOFTWAREUPDATE_LISTING) == "Command Line Tools for Xcode-15.3"
    assert command_line_tools_label("No new software available.\n") is None


def test_fix_permissions_creates_user_dirs(mocker: MockerFixture, run_context, home_dir):
    owned = mocker.patch(f"{MODULE}.ensure_owned_by_current_user", return_value=False)

    assert fix_permissions(run_context) is True

    version = run_context.app_settings.python_version
    assert (home_dir / ".local" / "bin").is_dir()
    assert (home_dir / ".local" / "lib" / f"python{version}" / "site-packages").is_dir()
    repaired = [call.args[0] for call in owned.call_args_list]
    assert home_dir / ".npm" in repaired


def test_low_disk_space_clears_caches(mocker: MockerFixture, run_context, home_dir):
    mocker.patch(f"{MODULE}.get_macos_version", return_value="14.4")
    mocker.patch(f"{MODULE}.command_exists", return_value=False)
    cache = home_dir / ".cache" / "pip"
    cache.mkdir(parents=True)
    (cache / "wheel.whl").write_text("")

    assert check_system_requirements(run_context, free_space_gb=3.5) is True

    assert (home_dir / ".cache").is_dir()
    assert not cache.exists()


def test_enough_disk_space_leaves_caches(mocker: MockerFixture, run_context, home_dir):
    mocker.patch(f"{MODULE}.get_macos_version", return_value="14.4")
    (home_dir / ".cache" / "pip").mkdir(parents=True)

    check_system_requirements(run_context, free_space_gb=120.0)

    assert (home_dir / ".cache" / "pip").is_dir()


def test_rosetta_not_needed_on_intel(mocker: MockerFixture, run_context):
    mocker.patch(f"{MODULE}.is_apple_silicon", return_value=False)
    succeeds = mocker.patch(f"{MODULE}.command_succeeds")

    assert ensure_rosetta(run_context) is True
    succeeds.assert_not_called()


def test_rosetta_install_failure(mocker: MockerFixture, run_context):
    mocker.patch(f"{MODULE}.is_apple_silicon", return_value=True)
    mocker.patch(f"{MODULE}.command_succeeds", return_value=False)
    mocker.patch(
        f"{MODULE}.run_elevated_command",
        side_effect=subprocess.CalledProcessError(1, ["softwareupdate"]),
    )

    assert ensure_rosetta(run_context) is False


def test_xcode_already_installed(mocker: MockerFixture, run_context):
    mocker.patch(f"{MODULE}.command_succeeds", return_value=True)
    elevated = mocker.patch(f"{MODULE}.run_elevated_command")

    assert install_xcode_cli(run_context) is True
    assert elevated.call_args.args[0] == ["xcodebuild", "-license", "accept"]


def test_xcode_via_softwareupdate(mocker: MockerFixture, run_context):
    installed = iter([False, True])
    mocker.patch(
        f"{MODULE}.command_succeeds",
        side_effect=lambda command, *a, **kw: next(installed) if command == ["xcode-select", "-p"] else True,
    )
    mocker.patch(f"{MODULE}.run_command").return_value.stdout = SOFTWAREUPDATE_LISTING
    elevated = mocker.patch(f"{MODULE}.run_elevated_command")

    assert install_xcode_cli(run_context) is True
    assert elevated.call_args_list[0].args[0] == [
        "softwareupdate",
        "-i",
        "Command Line Tools for Xcode-15.3",
        "--verbose",
        "--agree-to-license",
    ]
    assert not system_prep.XCODE_IN_PROGRESS_MARKER.exists()


def test_xcode_select_polling_gives_up(mocker: MockerFixture, run_context):
    now = [0.0]

    def sleep(seconds):
        now[0] += seconds

    succeeds = mocker.patch(f"{MODULE}.command_succeeds", return_value=False)
    mocker.patch(f"{MODULE}.run_command").return_value.stdout = ""

    assert install_xcode_cli(run_context, sleep=sleep, clock=lambda: now[0]) is False
    assert now[0] == 300
    assert ["xcode-select", "--install"] in [c.args[0] for c in succeeds.call_args_list]


@pytest.fixture
def brew_env(mocker: MockerFixture, monkeypatch):
    mocker.patch.dict(os.environ)
    monkeypatch.setenv("PATH", "/usr/bin")
    monkeypatch.setenv("GIT_ASKPASS", "/usr/local/bin/askpass")
    return mocker.patch(f"{MODULE}.HomebrewBackend")


def test_existing_homebrew_is_updated(mocker: MockerFixture, run_context, home_dir, brew_env):
    prefix = home_dir / "homebrew"
    mocker.patch(f"{MODULE}.command_exists", return_value=True)
    succeeds = mocker.patch(f"{MODULE}.command_succeeds", return_value=True)
    mocker.patch(f"{MODULE}.find_brew_prefix", return_value=prefix)
    brew_env.return_value.tap.return_value = True

    assert install_homebrew(run_context) is True

    commands = [call.args[0] for call in succeeds.call_args_list]
    assert ["brew", "update", "--force", "--quiet"] in commands
    assert os.environ["PATH"].split(os.pathsep)[0] == str(prefix / "bin")
    assert "GIT_ASKPASS" not in os.environ
    assert os.environ["HOMEBREW_NO_ANALYTICS"] == "1"
    assert "brew shellenv" in (home_dir / ".zprofile").read_text()
    assert brew_env.return_value.tap.call_count == 2


def test_unusable_homebrew_is_fatal(mocker: MockerFixture, run_context, brew_env):
    mocker.patch(f"{MODULE}.command_exists", return_value=True)
    mocker.patch(f"{MODULE}.command_succeeds", return_value=False)
    mocker.patch(f"{MODULE}.find_brew_prefix", return_value=None)

    with pytest.raises(FatalStageError):
        install_homebrew(run_context)


def test_failed_homebrew_download_is_fatal(mocker: MockerFixture, run_context, brew_env):
    mocker.patch(f"{MODULE}.command_exists", return_value=False)
    mocker.patch(
        f"{MODULE}.run_command",
        side_effect=subprocess.CalledProcessError(22, ["curl"]),
    )

    with pytest.raises(FatalStageError, match="installation failed"):
        install_homebrew(run_context)
    assert not (run_context.temp_dir / "brew-install.sh").exists()


def test_find_brew_prefix(mocker: MockerFixture, tmp_path):
    prefix = tmp_path / "brew"
    (prefix / "bin").mkdir(parents=True)
    (prefix / "bin" / "brew").write_text("")
    mocker.patch(
        "provisioner.config.HOMEBREW_PREFIXES", (tmp_path / "none", prefix)
    )

    assert system_prep.find_brew_prefix() == prefix
    assert isinstance(system_prep.find_brew_prefix(), Path)
