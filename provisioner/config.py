# provisioner/config.py
"""
Static constants for the AI Academy workstation provisioner.

Values here are not expected to change between runs. Anything a student,
instructor or lab administrator may want to tune lives in
provisioner/config_models.py instead.
"""

from pathlib import Path

# Represents the version of the provisioning logic.
SCRIPT_VERSION: str = "3.1.0-AI-Complete"

ACADEMY_NAME_DEFAULT: str = "AI Academy Azerbaijan"
PYTHON_VERSION_DEFAULT: str = "3.11"
NODE_VERSION_DEFAULT: str = "20"

# --- Directory names, relative to the user's home directory ---
LOG_DIR_NAME: str = ".ai-academy-deployment"
TEMP_DIR_NAME: str = ".ai-academy-temp"
ACADEMY_DIR_NAME: str = "AI-Academy"
VENV_DIR_NAME: str = "ai-academy-env"
ACTIVATE_SCRIPT_NAME: str = "activate-academy.sh"

LOCK_FILE_NAME: str = "deployment.lock"
LOG_FILE_PATTERN: str = "deployment-{stamp}.log"
ERROR_LOG_FILE_PATTERN: str = "errors-{stamp}.log"
LOG_STAMP_FORMAT: str = "%Y%m%d-%H%M%S"

# Workspace subdirectories created under the academy directory.
WORKSPACE_SUBDIRS: tuple = (
    "datasets",
    "notebooks",
    "projects",
    "models",
    "scripts",
    "docs",
)

# Jupyter kernel registered inside the virtual environment.
KERNEL_NAME: str = "ai-academy"
KERNEL_DISPLAY_NAME: str = "AI Academy"

# Below this many GB free, caches are cleared before installing.
LOW_DISK_SPACE_GB: float = 20.0

# Upper bound for the interactive Xcode CLI tools installer.
XCODE_INSTALL_WAIT_SECONDS: int = 300
XCODE_INSTALL_POLL_SECONDS: int = 10

HOMEBREW_INSTALL_SCRIPT_URL: str = (
    "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
)
HOMEBREW_PREFIXES: tuple = (Path("/opt/homebrew"), Path("/usr/local"))
HOMEBREW_ENVIRONMENT: dict = {
    "HOMEBREW_NO_AUTO_UPDATE": "1",
    "HOMEBREW_NO_INSTALL_CLEANUP": "1",
    "HOMEBREW_NO_ANALYTICS": "1",
}

# Profiles that receive the `brew shellenv` line.
LOGIN_PROFILES: tuple = (".zprofile", ".bash_profile", ".profile")

# Marker strings used to keep shell-profile edits idempotent.
ALIAS_MARKER: str = "alias academy"
BREW_SHELLENV_MARKER: str = "brew shellenv"

CONFIG_FILE_DEFAULT: str = "academy.yaml"
