"""
Bot responder for branch automation.

This module provides template-based message rendering for the comments
the branch gate posts on pull requests.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional

import pystache

from . import config


class BotResponderError(Exception):
    """Base exception for bot responder errors."""
    pass


class TemplateNotFoundError(BotResponderError):
    """Raised when a template file is not found."""
    pass


class BotResponder:
    """
    Renders bot messages from Mustache templates.

    Templates are stored in the templates/bot_messages directory and
    use Mustache syntax for variable interpolation and conditionals.

    Example usage:
        responder = BotResponder()
        message = responder.render("branch_valid", {
            "source_branch": "feature/login",
            "target_branch": "develop",
            "labels": ["feature"],
        })
    """

    # Default template directory relative to this file
    DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "bot_messages"

    # Marker format for identifying bot comments
    MARKER_FORMAT = "<!-- branch-bot:{marker} -->"

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize the bot responder.

        Args:
            template_dir: Optional custom template directory.
                         Defaults to templates/bot_messages relative to this module.
        """
        self.template_dir = template_dir or self.DEFAULT_TEMPLATE_DIR
        self.renderer = pystache.Renderer(
            missing_tags='strict',  # Raise error on missing variables
            escape=lambda x: x,     # Don't HTML-escape (we're rendering markdown)
        )

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a bot message template with the given context.

        Args:
            template_name: Name of the template file (without .md extension)
            context: Dictionary of variables to interpolate into the template

        Returns:
            Rendered message content

        Raises:
            TemplateNotFoundError: If the template file doesn't exist
            pystache.context.KeyNotFoundError: If required variables are missing
        """
        template_path = self.template_dir / f"{template_name}.md"

        if not template_path.exists():
            raise TemplateNotFoundError(
                f"Template not found: {template_name} "
                f"(looked in {self.template_dir})"
            )

        template_content = template_path.read_text(encoding="utf-8")
        content = self.renderer.render(template_content, context)
        # Collapse 3+ consecutive newlines to max one blank line.
        # Handles Mustache conditional artifacts (false sections leave empty lines).
        content = re.sub(r'\n{3,}', '\n\n', content)
        return content.strip()

    def render_with_marker(
        self,
        template_name: str,
        context: Dict[str, Any],
        marker: str = config.MARKER_NAME
    ) -> str:
        """
        Render a template with an HTML comment marker for identification.

        Args:
            template_name: Name of the template file (without .md extension)
            context: Dictionary of variables to interpolate
            marker: Marker name (e.g., "branch-check")

        Returns:
            Rendered message with marker prepended
        """
        content = self.render(template_name, context)
        return f"{self.MARKER_FORMAT.format(marker=marker)}\n{content}"
