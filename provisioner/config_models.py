# provisioner/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines the structured settings for the provisioner,
including defaults, type annotations, and descriptions.
It utilizes Pydantic for data validation and settings management.
"""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from provisioner import config as static_config

# --- Default Static Values (can be overridden by config file/env/cli) ---
LOG_PREFIX_DEFAULT: str = "[ACADEMY]"

MAX_ATTEMPTS_DEFAULT: int = 3
RETRY_DELAY_DEFAULT: float = 5.0

LOCK_TIMEOUT_DEFAULT: float = 60.0
LOCK_POLL_INTERVAL_DEFAULT: float = 5.0

MINOR_THRESHOLD_DEFAULT: int = 5
MAJOR_THRESHOLD_DEFAULT: int = 10

KEEPALIVE_INTERVAL_DEFAULT: float = 60.0

VALIDATION_COMMANDS_DEFAULT: List[str] = [
    "python3",
    "pip3",
    "git",
    "brew",
    "docker",
    "code",
    "jupyter",
]
CRITICAL_PACKAGES_DEFAULT: List[str] = ["numpy", "pandas", "sklearn", "jupyter"]

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}


class RetrySettings(BaseSettings):
    """Bounded retry applied to every external action."""

    model_config = SettingsConfigDict(env_prefix="ACADEMY_RETRY_", extra="ignore")

    max_attempts: int = Field(
        default=MAX_ATTEMPTS_DEFAULT,
        ge=1,
        description="Maximum number of attempts per external action.",
    )
    delay: float = Field(
        default=RETRY_DELAY_DEFAULT,
        ge=0,
        description="Seconds to sleep between attempts.",
    )


class LockSettings(BaseSettings):
    """Single-instance lock behaviour."""

    model_config = SettingsConfigDict(env_prefix="ACADEMY_LOCK_", extra="ignore")

    timeout: float = Field(
        default=LOCK_TIMEOUT_DEFAULT,
        ge=0,
        description="Seconds to wait for another run before reclaiming its lock.",
    )
    poll_interval: float = Field(
        default=LOCK_POLL_INTERVAL_DEFAULT,
        gt=0,
        description="Seconds between checks of an existing lock marker.",
    )


class ReportSettings(BaseSettings):
    """Severity thresholds for the completion report."""

    model_config = SettingsConfigDict(env_prefix="ACADEMY_REPORT_", extra="ignore")

    minor_threshold: int = Field(
        default=MINOR_THRESHOLD_DEFAULT,
        ge=1,
        description="Below this many failures the run is a success with warnings.",
    )
    major_threshold: int = Field(
        default=MAJOR_THRESHOLD_DEFAULT,
        ge=1,
        description="At or above this many failures the run is reported as failed and exits 1.",
    )

    @model_validator(mode="after")
    def _check_order(self) -> "ReportSettings":
        if self.major_threshold < self.minor_threshold:
            raise ValueError(
                "major_threshold must be greater than or equal to minor_threshold"
            )
        return self


class ResolvedPaths(BaseModel):
    """Absolute filesystem locations derived from the home directory."""

    log_dir: Path
    temp_dir: Path
    lock_file: Path
    academy_dir: Path
    venv_dir: Path
    activate_script: Path


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_prefix="ACADEMY_", extra="ignore")

    academy_name: str = Field(
        default=static_config.ACADEMY_NAME_DEFAULT,
        description="Display name used in banners, README and the report.",
    )
    script_version: str = Field(
        default=static_config.SCRIPT_VERSION,
        description="Version string written to the log and report.",
    )
    python_version: str = Field(
        default=static_config.PYTHON_VERSION_DEFAULT,
        description="Homebrew Python formula version (python@X.Y).",
    )
    node_version: str = Field(
        default=static_config.NODE_VERSION_DEFAULT,
        description="Homebrew Node.js formula version (node@X).",
    )
    log_prefix: str = Field(
        default=LOG_PREFIX_DEFAULT,
        description="Prefix for log messages from the provisioner.",
    )

    home_dir: Path = Field(
        default_factory=Path.home,
        description="Home directory of the student account being provisioned.",
    )
    log_dir: Optional[Path] = Field(default=None, description="Run and error log directory.")
    temp_dir: Optional[Path] = Field(default=None, description="Scratch directory, removed at exit.")
    academy_dir: Optional[Path] = Field(default=None, description="Student workspace directory.")
    venv_dir: Optional[Path] = Field(default=None, description="Academy virtual environment.")

    keepalive_interval: float = Field(
        default=KEEPALIVE_INTERVAL_DEFAULT,
        gt=0,
        description="Seconds between sudo credential refreshes.",
    )
    use_color: bool = Field(default=True, description="Colour console status lines.")
    assume_yes: bool = Field(
        default=False, description="Skip the confirmation prompt before starting."
    )

    validation_commands: List[str] = Field(
        default_factory=lambda: list(VALIDATION_COMMANDS_DEFAULT),
        description="Commands that must be on PATH after provisioning.",
    )
    critical_packages: List[str] = Field(
        default_factory=lambda: list(CRITICAL_PACKAGES_DEFAULT),
        description="Modules that must import inside the virtual environment.",
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    lock: LockSettings = Field(default_factory=LockSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)

    # Static symbols, could also be loaded from a separate static config if preferred
    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))

    @property
    def paths(self) -> ResolvedPaths:
        """Filesystem locations with unset entries derived from home_dir."""
        home = Path(self.home_dir).expanduser()
        temp_dir = self.temp_dir or home / static_config.TEMP_DIR_NAME
        return ResolvedPaths(
            log_dir=self.log_dir or home / static_config.LOG_DIR_NAME,
            temp_dir=temp_dir,
            lock_file=temp_dir / static_config.LOCK_FILE_NAME,
            academy_dir=self.academy_dir or home / static_config.ACADEMY_DIR_NAME,
            venv_dir=self.venv_dir or home / static_config.VENV_DIR_NAME,
            activate_script=home / static_config.ACTIVATE_SCRIPT_NAME,
        )
