"""
Simple template loader for generated files.

Provides a lightweight utility for loading and rendering Mustache
templates for files written into the repository, such as the
Release-Drafter configs. Separate from BotResponder (which handles PR
comments with markers).
"""

from pathlib import Path
from typing import Any, Dict

import pystache

TEMPLATES_ROOT = Path(__file__).parent.parent / "templates"


def render_template(
    template_name: str,
    context: Dict[str, Any],
    template_dir: str = "release_drafter"
) -> str:
    """Render a Mustache template from the templates directory.

    Args:
        template_name: Name of the template file (without .mustache extension)
        context: Dictionary of template variables
        template_dir: Subdirectory under templates/ (default: "release_drafter")

    Returns:
        Rendered template content

    Raises:
        FileNotFoundError: If template file does not exist
    """
    template_path = TEMPLATES_ROOT / template_dir / f"{template_name}.mustache"

    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")

    renderer = pystache.Renderer(
        missing_tags='ignore',  # Optional fields may be absent
        escape=lambda x: x,     # Don't HTML-escape (YAML/markdown context)
    )

    template_content = template_path.read_text(encoding="utf-8")
    return renderer.render(template_content, context)
