import pytest
from pytest_mock import MockerFixture

from installer.models import ItemKind
from provisioner.batch_runner import ActionStage, PackageStage
from provisioner.stages import build_stages, default_backends


@pytest.fixture
def installer(mocker: MockerFixture):
    return mocker.MagicMock()


def _names(stages):
    return [stage.name for stage in stages]


def test_stage_order(run_context, installer):
    stages = build_stages(run_context, installer=installer, architecture="arm64")

    assert _names(stages) == [
        "Permission repair",
        "System requirements",
        "Rosetta 2",
        "Xcode Command Line Tools",
        "Homebrew",
        "Permission repair (post-toolchain)",
        "Homebrew packages",
        "GUI applications",
        "Python environment",
        "Python packages",
        "Jupyter extensions",
        "Jupyter configuration",
        "Activation script",
        "Jupyter PATH check",
        "Academy workspace",
        "VS Code extensions",
        "System configuration",
        "Desktop shortcut",
    ]


def test_only_toolchain_stages_are_fatal(run_context, installer):
    stages = build_stages(run_context, installer=installer, architecture="arm64")
    fatal = [s.name for s in stages if isinstance(s, ActionStage) and s.fatal]
    assert fatal == ["Homebrew", "Python environment"]


def test_package_stages_share_the_installer(run_context, installer):
    stages = build_stages(run_context, installer=installer, architecture="arm64")
    package_stages = [s for s in stages if isinstance(s, PackageStage)]

    assert len(package_stages) == 5
    assert all(s.installer is installer for s in package_stages)


def test_python_packages_filtered_by_architecture(run_context, installer):
    def python_packages(architecture):
        stages = build_stages(run_context, installer=installer, architecture=architecture)
        stage = next(s for s in stages if s.name == "Python packages")
        return [item.name for item in stage.items]

    assert "tensorflow-metal" in python_packages("arm64")
    assert "tensorflow-metal" not in python_packages("x86_64")
    assert "tensorflow" in python_packages("x86_64")


def test_vscode_stage_needs_code_cli(mocker: MockerFixture, run_context, installer):
    stages = build_stages(run_context, installer=installer, architecture="arm64")
    stage = next(s for s in stages if s.name == "VS Code extensions")
    exists = mocker.patch("provisioner.stages.command_exists", return_value=False)

    assert stage.precondition() is False
    exists.assert_called_once_with("code")
    assert all(item.kind is ItemKind.EDITOR_EXTENSION for item in stage.items)


def test_homebrew_stage_uses_settings_versions(run_context, installer):
    stages = build_stages(run_context, installer=installer, architecture="arm64")
    stage = next(s for s in stages if s.name == "Homebrew packages")
    names = [item.name for item in stage.items]

    assert f"python@{run_context.app_settings.python_version}" in names
    assert f"node@{run_context.app_settings.node_version}" in names


def test_default_backends_cover_every_kind(run_context):
    backends = default_backends(run_context)

    assert set(backends) == set(ItemKind)
    assert backends[ItemKind.COMMAND_PACKAGE] is backends[ItemKind.GUI_APPLICATION]
