import subprocess

import pytest
from pytest_mock import MockerFixture

from installer.backends import HomebrewBackend, PipBackend, VSCodeExtensionBackend
from installer.models import InstallOptions, ItemKind


@pytest.fixture
def mock_succeeds(mocker: MockerFixture):
    return mocker.patch("installer.backends.command_succeeds", return_value=True)


def _commands(mock):
    return [c.args[0] for c in mock.call_args_list]


class TestHomebrewBackend:
    def test_formula_exists_probe(self, app_settings, mock_succeeds):
        backend = HomebrewBackend(app_settings)

        assert backend.exists("git", ItemKind.COMMAND_PACKAGE) is True
        assert _commands(mock_succeeds) == [["brew", "list", "git"]]
        assert mock_succeeds.call_args.kwargs["env"]["HOMEBREW_NO_AUTO_UPDATE"] == "1"

    def test_cask_exists_probe(self, app_settings, mock_succeeds):
        HomebrewBackend(app_settings).exists("slack", ItemKind.GUI_APPLICATION)
        assert _commands(mock_succeeds) == [["brew", "list", "--cask", "slack"]]

    def test_formula_install(self, app_settings, mock_succeeds):
        HomebrewBackend(app_settings).install("wget", ItemKind.COMMAND_PACKAGE, InstallOptions())
        assert _commands(mock_succeeds) == [["brew", "install", "wget", "--quiet"]]

    def test_cask_install_and_forced_reinstall(self, app_settings, mock_succeeds):
        backend = HomebrewBackend(app_settings)
        backend.install("zoom", ItemKind.GUI_APPLICATION, InstallOptions())
        backend.install("zoom", ItemKind.GUI_APPLICATION, InstallOptions(force=True))

        assert _commands(mock_succeeds) == [
            ["brew", "install", "--cask", "zoom", "--no-quarantine"],
            ["brew", "reinstall", "--cask", "zoom", "--force"],
        ]

    def test_failed_install_reports_false(self, app_settings, mock_succeeds):
        mock_succeeds.return_value = False
        assert (
            HomebrewBackend(app_settings).install("gcc", ItemKind.COMMAND_PACKAGE, InstallOptions())
            is False
        )

    def test_between_attempts_unlinks_formulae_only(self, app_settings, mock_succeeds):
        backend = HomebrewBackend(app_settings)
        backend.between_attempts("gcc", ItemKind.COMMAND_PACKAGE)
        backend.between_attempts("slack", ItemKind.GUI_APPLICATION)

        assert _commands(mock_succeeds) == [
            ["brew", "unlink", "gcc"],
            ["brew", "cleanup", "gcc"],
        ]

    def test_rejects_other_kinds(self, app_settings, mock_succeeds):
        with pytest.raises(ValueError):
            HomebrewBackend(app_settings).exists("numpy", ItemKind.LANGUAGE_PACKAGE)

    def test_tap_and_purge(self, app_settings, mock_succeeds):
        backend = HomebrewBackend(app_settings)
        backend.tap("mongodb/brew")
        backend.purge_cache()
        assert _commands(mock_succeeds) == [
            ["brew", "tap", "mongodb/brew"],
            ["brew", "cleanup", "--prune=all"],
        ]


class TestPipBackend:
    def test_exists_imports_module(self, app_settings, mock_succeeds, tmp_path):
        python = tmp_path / "venv" / "bin" / "python"
        PipBackend(app_settings, python).exists("sklearn", ItemKind.LANGUAGE_PACKAGE)
        assert _commands(mock_succeeds) == [[str(python), "-c", "import sklearn"]]

    def test_install_flags(self, app_settings, mock_succeeds):
        backend = PipBackend(app_settings, "/venv/bin/python")
        backend.install("torch", ItemKind.LANGUAGE_PACKAGE, InstallOptions(no_cache=True))
        backend.install("auto-sklearn", ItemKind.LANGUAGE_PACKAGE, InstallOptions(no_deps=True))

        assert _commands(mock_succeeds) == [
            ["/venv/bin/python", "-m", "pip", "install", "torch", "--no-cache-dir"],
            ["/venv/bin/python", "-m", "pip", "install", "auto-sklearn", "--no-deps"],
        ]

    def test_upgrade_tooling_and_purge(self, app_settings, mock_succeeds):
        backend = PipBackend(app_settings, "/venv/bin/python")
        backend.upgrade_tooling()
        backend.purge_cache()
        assert _commands(mock_succeeds) == [
            ["/venv/bin/python", "-m", "pip", "install", "--upgrade", "pip", "setuptools", "wheel"],
            ["/venv/bin/python", "-m", "pip", "cache", "purge"],
        ]


class TestVSCodeExtensionBackend:
    def test_exists_is_case_insensitive(self, mocker: MockerFixture, app_settings):
        mocker.patch(
            "installer.backends.run_command",
            return_value=subprocess.CompletedProcess(
                args=[], returncode=0, stdout="ms-python.python\ngithub.copilot\n"
            ),
        )
        backend = VSCodeExtensionBackend(app_settings)

        assert backend.exists("GitHub.copilot", ItemKind.EDITOR_EXTENSION) is True
        assert backend.exists("ms-toolsai.jupyter", ItemKind.EDITOR_EXTENSION) is False

    def test_missing_cli_means_nothing_installed(self, mocker: MockerFixture, app_settings):
        mocker.patch("installer.backends.run_command", side_effect=FileNotFoundError("code"))
        assert VSCodeExtensionBackend(app_settings).installed_extensions() == frozenset()

    def test_install_with_force(self, app_settings, mock_succeeds):
        VSCodeExtensionBackend(app_settings).install(
            "ms-python.python", ItemKind.EDITOR_EXTENSION, InstallOptions(force=True)
        )
        assert _commands(mock_succeeds) == [
            ["code", "--install-extension", "ms-python.python", "--force"]
        ]
