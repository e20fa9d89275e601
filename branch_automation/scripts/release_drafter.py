#!/usr/bin/env python3
"""
Release-Drafter config generator.

Writes one Release-Drafter configuration file per entry of the
``drafterSettings`` section of the workflow config. Each entry looks like:

    "minor": {
        "file-name": "release-drafter-minor.yml",
        "name-template": "v$NEXT_MINOR_VERSION",
        "tag-template": "$NEXT_MINOR_VERSION",
        "categories": [{"title": "Features", "branchTypes": ["feature"]}]
    }

Usage:
    python -m branch_automation.scripts.release_drafter --config workflow.config.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from . import config
from .template_loader import render_template
from .workflow_config import ConfigLoadError, load_workflow_config

logger = logging.getLogger(__name__)


class DrafterConfigError(Exception):
    """Raised when a drafter settings entry is incomplete."""
    pass


REQUIRED_KEYS = ("file-name", "name-template", "tag-template", "categories")


def _single_quoted(value: str) -> str:
    # YAML single-quoted scalars escape ' by doubling it
    return str(value).replace("'", "''")


def build_drafter_context(settings: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate one drafter settings entry and build its template context.

    Raises:
        DrafterConfigError: If required keys are missing or malformed
    """
    missing = [key for key in REQUIRED_KEYS if key not in settings]
    if missing:
        raise DrafterConfigError(f"Drafter settings missing keys: {', '.join(missing)}")

    file_name = settings["file-name"]
    if not isinstance(file_name, str) or not file_name.strip():
        raise DrafterConfigError(
            f"Drafter settings 'file-name' must be a non-empty string: {file_name!r}"
        )

    categories = settings["categories"]
    if not isinstance(categories, list):
        raise DrafterConfigError("Drafter settings 'categories' must be a list")

    category_context = []
    for category in categories:
        if not isinstance(category, dict) or "title" not in category:
            raise DrafterConfigError(f"Drafter category must have a title: {category!r}")
        category_context.append({
            # JSON strings and arrays are valid YAML flow scalars
            "title": json.dumps(category["title"], ensure_ascii=False),
            "labels": json.dumps(category.get("branchTypes", []), ensure_ascii=False),
        })

    return {
        "name_template": _single_quoted(settings["name-template"]),
        "tag_template": _single_quoted(settings["tag-template"]),
        "categories": category_context,
    }


def render_drafter_config(settings: Dict[str, Any]) -> str:
    """Render the Release-Drafter YAML for one settings entry."""
    return render_template("release_drafter", build_drafter_context(settings))


def generate_drafter_configs(
    drafter_settings: Dict[str, Dict[str, Any]],
    output_dir: Union[str, Path] = config.DRAFTER_OUTPUT_DIR
) -> List[Path]:
    """
    Write a Release-Drafter config file for each drafter settings entry.

    A failure to write one file is logged and does not stop the others.

    Args:
        drafter_settings: The ``drafterSettings`` mapping (type -> settings)
        output_dir: Directory for the generated files (created if missing)

    Returns:
        Paths of the files written

    Raises:
        DrafterConfigError: If an entry is incomplete
    """
    target_dir = Path(output_dir)
    if not target_dir.exists():
        target_dir.mkdir(parents=True)
        logger.info(f"Created directory: {target_dir}")

    written = []
    for drafter_type, settings in drafter_settings.items():
        if not isinstance(settings, dict):
            raise DrafterConfigError(f"Drafter settings for '{drafter_type}' must be a mapping")

        content = render_drafter_config(settings)
        file_path = target_dir / settings["file-name"]
        logger.info(f"Writing file to: {file_path}")

        try:
            file_path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Error writing file {file_path}: {e}")
            continue

        logger.info(f"Generated {settings['file-name']}")
        written.append(file_path)

    return written


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate Release-Drafter configuration files")
    parser.add_argument("--config", default=config.WORKFLOW_CONFIG_FILE,
                        help="Path to the workflow configuration file")
    parser.add_argument("--output-dir", default=config.DRAFTER_OUTPUT_DIR,
                        help="Directory to write the generated files to")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        document = load_workflow_config(args.config)
    except ConfigLoadError as e:
        print(f"::error::Failed to load config from {args.config}: {e}", file=sys.stderr)
        return 1

    drafter_settings = document.get(config.DRAFTER_SETTINGS_KEY)
    if not isinstance(drafter_settings, dict) or not drafter_settings:
        print("::error::No drafter settings found in config.", file=sys.stderr)
        return 1

    try:
        generate_drafter_configs(drafter_settings, args.output_dir)
    except DrafterConfigError as e:
        print(f"::error::{e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
