"""
Workflow configuration loader for branch automation.

Reads the workflow config document (workflow.config.json by default) and
validates the ``branchSystem`` section into a BranchSystemConfig.
YAML documents (.yaml/.yml) are accepted as well.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from . import config
from .branch_policy import BranchSystemConfig


class ConfigLoadError(Exception):
    """Raised when the workflow configuration is missing, unreadable or malformed."""
    pass


YAML_SUFFIXES = (".yaml", ".yml")


def load_workflow_config(path: Union[str, Path] = config.WORKFLOW_CONFIG_FILE) -> Dict[str, Any]:
    """
    Load the workflow configuration document.

    Args:
        path: Path to the config file (JSON, or YAML by extension)

    Returns:
        Parsed top-level mapping

    Raises:
        ConfigLoadError: If the file is missing, empty, unreadable, not
            valid JSON/YAML, or its top level is not a mapping
    """
    config_path = Path(path)

    if not config_path.is_file():
        raise ConfigLoadError(f"Configuration file not found at path: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Failed to read config file {config_path}: {e}")

    if not content.strip():
        raise ConfigLoadError(f"Configuration file is empty: {config_path}")

    try:
        if config_path.suffix.lower() in YAML_SUFFIXES:
            document = yaml.safe_load(content)
        else:
            document = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Failed to parse config file {config_path}: {e}")

    if not isinstance(document, dict):
        raise ConfigLoadError(
            f"Invalid configuration in {config_path}: top level must be a mapping"
        )

    return document


def parse_branch_system(document: Dict[str, Any]) -> BranchSystemConfig:
    """
    Validate the ``branchSystem`` section and build a BranchSystemConfig.

    Expected shape:
        {"branchSystem": {"main": {"accepts": ["release", "hotfix"]}}}

    Raises:
        ConfigLoadError: If the section is missing or any entry is malformed
    """
    branch_system = document.get(config.BRANCH_SYSTEM_KEY)
    if not isinstance(branch_system, dict):
        raise ConfigLoadError(
            "Invalid configuration: missing or malformed branch system configuration"
        )

    for target, entry in branch_system.items():
        if not isinstance(target, str) or not target.strip():
            raise ConfigLoadError(
                f"Invalid configuration: target branch names must be non-empty strings, got {target!r}"
            )
        if not isinstance(entry, dict):
            raise ConfigLoadError(
                f'Invalid configuration: entry for "{target}" must be a mapping'
            )

        accepts = entry.get(config.ACCEPTS_KEY)
        if not isinstance(accepts, list):
            raise ConfigLoadError(
                f'Invalid configuration: accepted branch types for "{target}" should be an array'
            )
        if not accepts:
            raise ConfigLoadError(
                f'Invalid configuration: accepted branch types for "{target}" must not be empty'
            )
        if not all(isinstance(t, str) and t for t in accepts):
            raise ConfigLoadError(
                f'Invalid configuration: accepted branch types for "{target}" must be non-empty strings'
            )

    return BranchSystemConfig.from_dict(branch_system)


def load_branch_system(path: Union[str, Path] = config.WORKFLOW_CONFIG_FILE) -> BranchSystemConfig:
    """Load the config file and return its validated branch system."""
    return parse_branch_system(load_workflow_config(path))
