# configure/workspace.py
# -*- coding: utf-8 -*-
"""
Student workspace scaffolding under ~/AI-Academy.
"""

import logging
from pathlib import Path

from common.file_utils import write_text_file
from common.run_context import RunContext
from configure.templates import academy_variables, render
from provisioner import config as static_config

module_logger = logging.getLogger(__name__)

WELCOME_NOTEBOOK = Path("notebooks") / "00-welcome.ipynb"


def create_workspace(context: RunContext) -> bool:
    """
    Create the workspace directories, README.md and the welcome notebook.

    Existing files are rewritten so the README always reflects the current
    settings; the student's own files in the subdirectories are untouched.
    """
    app_settings = context.app_settings
    academy_dir = app_settings.paths.academy_dir
    variables = academy_variables(app_settings)
    context.info("Setting up AI Academy resources...")

    for subdir in static_config.WORKSPACE_SUBDIRS:
        (academy_dir / subdir).mkdir(parents=True, exist_ok=True)

    write_text_file(
        academy_dir / "README.md",
        render("readme", variables),
        app_settings=app_settings,
        current_logger=context.logger,
    )
    write_text_file(
        academy_dir / WELCOME_NOTEBOOK,
        render("welcome_notebook", variables),
        app_settings=app_settings,
        current_logger=context.logger,
    )

    context.success("Academy resources created")
    return True
