import datetime
import logging

from common.run_context import PROVISIONING_CATEGORY, VALIDATION_CATEGORY, RunContext


def _flush(context):
    for logger in (context.logger, context._error_logger):
        for handler in logger.handlers:
            handler.flush()


def test_create_uses_timestamped_log_names(app_settings):
    context = RunContext.create(
        app_settings, console=False, now=datetime.datetime(2024, 9, 1, 8, 30, 5)
    )
    try:
        log_dir = app_settings.paths.log_dir
        assert context.log_file == log_dir / "deployment-20240901-083005.log"
        assert context.error_log == log_dir / "errors-20240901-083005.log"
        assert context.temp_dir == app_settings.paths.temp_dir
    finally:
        context.close()


def test_record_appends_to_session_log(run_context):
    run_context.record("info", "Checking system requirements...")
    run_context.success("Homebrew ready")
    _flush(run_context)

    content = run_context.log_file.read_text(encoding="utf-8")
    assert "Checking system requirements..." in content
    assert "✅ " in content
    assert "Homebrew ready" in content


def test_record_error_counts_and_writes_error_log(run_context):
    run_context.record_error("Failed to install package wget (non-critical)")
    _flush(run_context)

    assert run_context.failure_counter == 1
    assert "wget" in run_context.error_log.read_text(encoding="utf-8")
    assert "wget" in run_context.log_file.read_text(encoding="utf-8")


def test_failure_counter_never_decreases(run_context):
    """Interleaved records of every level only ever raise the counter."""
    seen = [run_context.failure_counter]
    for i in range(5):
        run_context.info(f"step {i}")
        run_context.warning(f"slow {i}")
        run_context.record_error(f"failure {i}")
        seen.append(run_context.failure_counter)

    assert seen == sorted(seen)
    assert seen[-1] == 5


def test_failures_by_category(run_context):
    run_context.record_error("brew install failed")
    run_context.record_error("docker ✗", category=VALIDATION_CATEGORY)
    run_context.record_error("code ✗", category=VALIDATION_CATEGORY)

    assert run_context.failures_in(PROVISIONING_CATEGORY) == 1
    assert run_context.failures_in(VALIDATION_CATEGORY) == 2
    assert run_context.failures_in("unknown") == 0
    assert run_context.failure_counter == 3


def test_unwritable_log_never_aborts(tmp_path, app_settings, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    context = RunContext(
        app_settings,
        log_file=blocker / "run.log",
        error_log=blocker / "errors.log",
        temp_dir=tmp_path / "tmp",
        console=False,
    )
    try:
        context.record("info", "still running")
        context.record_error("still counted")
        assert context.failure_counter == 1
        assert "Could not open log file" in capsys.readouterr().err
    finally:
        context.close()


def test_contexts_do_not_share_loggers(app_settings):
    first = RunContext.create(app_settings, console=False)
    second = RunContext.create(app_settings, console=False)
    try:
        assert first.logger is not second.logger
        first.record_error("only in the first run")
        assert second.failure_counter == 0
    finally:
        first.close()
        second.close()


def test_console_handler_level(app_settings):
    context = RunContext.create(app_settings, console=True)
    try:
        console = context._console_handler
        assert console.level == logging.INFO
        context.set_console_level(logging.DEBUG)
        assert console.level == logging.DEBUG
    finally:
        context.close()


def test_close_detaches_handlers(app_settings):
    with RunContext.create(app_settings, console=False) as context:
        assert context.logger.handlers
    assert context.logger.handlers == []


def test_elapsed_seconds(run_context):
    run_context.start_time = 100.0
    assert run_context.elapsed_seconds(now=175.5) == 75.5
    assert run_context.elapsed_seconds(now=50.0) == 0.0
