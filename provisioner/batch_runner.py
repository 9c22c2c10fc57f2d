# provisioner/batch_runner.py
# -*- coding: utf-8 -*-
"""
Runs the ordered list of provisioning stages.

Stages execute strictly in order because later ones depend on the side
effects of earlier ones (a toolchain before the packages built with it, an
interpreter before its virtual environment). Items within a package stage
are independent: one item's failure never skips the next. Only a
FatalStageError ends the batch early.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from common.run_context import RunContext
from installer.models import InstallItem, InstallOutcome, StepResult
from installer.package_installer import PackageInstaller

module_logger = logging.getLogger(__name__)


class FatalStageError(Exception):
    """A stage found the machine unusable for every later stage."""


@dataclass
class Stage:
    name: str


@dataclass
class ActionStage(Stage):
    """
    A one-off configuration action.

    The action receives the run context. Returning False (or raising an
    ordinary exception) is a nonfatal failure, unless ``fatal`` is set, in
    which case it aborts the batch.
    """

    action: Callable[[RunContext], Optional[bool]] = None
    fatal: bool = False


@dataclass
class PackageStage(Stage):
    """A homogeneous list of InstallItems, processed one by one."""

    items: Sequence[InstallItem] = ()
    installer: Optional[PackageInstaller] = None
    # Evaluated when the stage starts; False skips the whole stage.
    precondition: Optional[Callable[[], bool]] = None
    skip_message: str = ""


@dataclass
class StageOutcome:
    name: str
    attempted: int = 0
    installed: int = 0
    failed: int = 0
    skipped: bool = False
    outcomes: List[InstallOutcome] = field(default_factory=list)


@dataclass
class BatchResult:
    stages: List[StageOutcome] = field(default_factory=list)
    aborted: bool = False
    fatal_error: Optional[str] = None

    @property
    def attempted_total(self) -> int:
        return sum(stage.attempted for stage in self.stages)

    @property
    def installed_total(self) -> int:
        return sum(stage.installed for stage in self.stages)

    @property
    def failed_total(self) -> int:
        return sum(stage.failed for stage in self.stages)


class BatchRunner:
    """Executes stages in order and aggregates per-item outcomes."""

    def __init__(self, context: RunContext):
        self.context = context
        self.result = BatchResult()

    def _run_action(self, stage: ActionStage) -> StageOutcome:
        outcome = StageOutcome(stage.name)
        try:
            result = stage.action(self.context)
        except FatalStageError:
            raise
        except Exception as e:
            if stage.fatal:
                raise FatalStageError(f"{stage.name}: {e}") from e
            module_logger.debug(f"Stage '{stage.name}' raised", exc_info=True)
            self.context.record_error(f"{stage.name} failed: {e}")
            outcome.failed = 1
            return outcome

        if result is False:
            if stage.fatal:
                raise FatalStageError(f"{stage.name} did not complete")
            self.context.record_error(f"{stage.name} did not complete")
            outcome.failed = 1
        return outcome

    def _run_packages(self, stage: PackageStage) -> StageOutcome:
        outcome = StageOutcome(stage.name)
        if stage.precondition is not None and not stage.precondition():
            self.context.warning(
                stage.skip_message or f"Skipping {stage.name}: prerequisites missing"
            )
            outcome.skipped = True
            return outcome

        total = len(stage.items)
        symbol = self.context.symbols.get("package", "📦")
        for current, item in enumerate(stage.items, start=1):
            self.context.info(f"{symbol} [{current}/{total}] Installing {item.name}...")
            try:
                item_outcome = stage.installer.install_outcome(item)
            except Exception as e:
                module_logger.debug(f"Installing '{item.name}' raised", exc_info=True)
                self.context.record_error(f"Failed to install {item.name} (non-critical): {e}")
                item_outcome = InstallOutcome(item, StepResult.FAILED_NONFATAL)
            outcome.outcomes.append(item_outcome)
            outcome.attempted += 1
            if item_outcome.result.succeeded:
                outcome.installed += 1
            else:
                outcome.failed += 1

        self.context.info(f"Installed {outcome.installed}/{outcome.attempted} {stage.name}")
        return outcome

    def run(self, stage_list: Sequence[Stage]) -> BatchResult:
        """
        Executes `stage_list` in order.

        Returns:
            BatchResult with per-stage counts. ``aborted`` is set when a
            fatal stage ended the batch; the fatal error is recorded on the
            context but not raised.
        """
        stages = list(stage_list)
        self.result = BatchResult()
        step_symbol = self.context.symbols.get("step", "➡️")
        self.context.record("info", "Provisioning started.")

        for index, stage in enumerate(stages, start=1):
            self.context.info(f"--- {step_symbol} Stage {index}: {stage.name} ---")
            try:
                if isinstance(stage, PackageStage):
                    outcome = self._run_packages(stage)
                elif isinstance(stage, ActionStage):
                    outcome = self._run_action(stage)
                else:
                    raise TypeError(f"Unknown stage type: {type(stage).__name__}")
            except FatalStageError as e:
                message = str(e)
                self.context.record_error(f"Fatal: {message}. Halting provisioning.")
                self.context.fatal_error = message
                self.result.stages.append(StageOutcome(stage.name, failed=1))
                self.result.aborted = True
                self.result.fatal_error = message
                return self.result
            self.result.stages.append(outcome)

        self.context.record("info", "Provisioning stages finished.")
        return self.result
