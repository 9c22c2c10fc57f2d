# provisioner/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the provisioner.

Handles loading settings from Pydantic model defaults, environment
variables, a YAML file, and command-line arguments, applying a specific
order of precedence:
1. Pydantic Model Defaults
2. Environment Variables (ACADEMY_*, loaded by BaseSettings)
3. YAML Configuration File
4. Command-Line Arguments
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from provisioner import config as static_config

from .config_models import AppSettings

module_logger = logging.getLogger(__name__)


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates a dictionary `source` with values from another
    dictionary `overrides`. Nested dictionaries are merged key by key;
    any other value replaces the one in `source`. `None` never overwrites
    an existing value.

    Parameters:
        source: The dictionary to be updated. Modified in place.
        overrides: The dictionary containing values to update or add.

    Returns:
        The updated `source` dictionary.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def _read_yaml_overrides(
    yaml_config_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI args."
        )
        return {}
    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data and isinstance(yaml_data, dict):
        logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
        return yaml_data
    if yaml_data is not None:
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
    return {}


def load_app_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Loads application settings with the precedence described in the
    module docstring.

    Args:
        cli_args: Parsed command-line arguments (from argparse).
        config_file_path: Path to the YAML configuration file. Falls back to
            ``cli_args.config`` and then to ``academy.yaml`` in the working
            directory.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of AppSettings with the fully resolved configuration.

    Raises:
        pydantic.ValidationError: If the merged values do not validate.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # Model defaults < environment variables.
    settings_after_env_and_defaults = AppSettings()
    current_values_dict = settings_after_env_and_defaults.model_dump(
        exclude_defaults=False
    )

    if config_file_path is None and cli_args is not None:
        config_file_path = getattr(cli_args, "config", None)
    yaml_config_path = Path(
        config_file_path or static_config.CONFIG_FILE_DEFAULT
    ).expanduser()
    current_values_dict = _deep_update(
        current_values_dict, _read_yaml_overrides(yaml_config_path, logger_to_use)
    )

    if cli_args is not None:
        cli_overrides: Dict[str, Any] = {}
        if getattr(cli_args, "yes", False):
            cli_overrides["assume_yes"] = True
        if getattr(cli_args, "no_color", False):
            cli_overrides["use_color"] = False
        if getattr(cli_args, "home", None):
            cli_overrides["home_dir"] = cli_args.home
        current_values_dict = _deep_update(current_values_dict, cli_overrides)

    try:
        return AppSettings(**current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Invalid configuration: {e}")
        raise
