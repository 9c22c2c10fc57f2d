from pytest_mock import MockerFixture

from common.run_context import PROVISIONING_CATEGORY, VALIDATION_CATEGORY
from provisioner.validator import (
    CheckKind,
    ValidationCheck,
    Validator,
    default_checks,
    directory_check,
    import_check,
)


def test_counts_passed_and_total(run_context):
    checks = [
        ValidationCheck("python3", CheckKind.COMMAND, lambda: True),
        ValidationCheck("docker", CheckKind.COMMAND, lambda: False),
        ValidationCheck("numpy", CheckKind.IMPORTABLE, lambda: True),
    ]

    passed, total = Validator(run_context, checks).validate()

    assert (passed, total) == (2, 3)
    assert run_context.failures_in(VALIDATION_CATEGORY) == 1
    assert run_context.failures_in(PROVISIONING_CATEGORY) == 0


def test_probe_exception_is_a_failed_check(run_context):
    def broken():
        raise OSError("no python")

    result = Validator(
        run_context, [ValidationCheck("jupyter", CheckKind.IMPORTABLE, broken)]
    ).validate()

    assert result.passed == 0
    assert result.failed == 1
    assert result.checks[0].passed is False


def test_all_passed(run_context):
    result = Validator(
        run_context, [ValidationCheck("git", CheckKind.COMMAND, lambda: True)]
    ).validate()
    assert result.all_passed is True
    assert run_context.failure_counter == 0


def test_directory_check(tmp_path):
    assert directory_check("workspace", tmp_path).probe() is True
    assert directory_check("workspace", tmp_path / "absent").probe() is False


def test_import_check_needs_interpreter(mocker: MockerFixture, tmp_path):
    mock_succeeds = mocker.patch("provisioner.validator.command_succeeds", return_value=True)

    assert import_check("numpy", tmp_path / "missing-python").probe() is False
    mock_succeeds.assert_not_called()

    python = tmp_path / "python"
    python.write_text("")
    assert import_check("numpy", python).probe() is True
    assert mock_succeeds.call_args.args[0] == [str(python), "-c", "import numpy"]


def test_default_checks_cover_commands_directories_and_packages(app_settings):
    checks = default_checks(app_settings)
    kinds = [c.kind for c in checks]

    assert kinds.count(CheckKind.COMMAND) == 7
    assert kinds.count(CheckKind.DIRECTORY) == 2
    assert kinds.count(CheckKind.IMPORTABLE) == 4
    assert [c.name for c in checks if c.kind is CheckKind.IMPORTABLE] == [
        "numpy",
        "pandas",
        "sklearn",
        "jupyter",
    ]
