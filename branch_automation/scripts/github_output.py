"""
Step output helper for GitHub Actions.

Values computed by one step are handed to later steps through the
$GITHUB_OUTPUT file instead of process environment variables.
"""

import os
import uuid
from typing import Any, Dict, Optional


def format_output_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def write_outputs(values: Dict[str, Any], path: Optional[str] = None) -> bool:
    """
    Append step outputs to the GitHub output file.

    Args:
        values: Output names and values (bools become "true"/"false",
                lists are comma-joined)
        path: Output file (defaults to $GITHUB_OUTPUT)

    Returns:
        True if outputs were written, False when no output file is configured
    """
    gh_output = path or os.environ.get("GITHUB_OUTPUT")
    if not gh_output:
        return False

    with open(gh_output, "a") as f:
        for name, value in values.items():
            text = format_output_value(value)
            if "\n" in text:
                # Use distinct delimiter to handle multiline values
                delimiter = f"EOF-{uuid.uuid4()}"
                f.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")
            else:
                f.write(f"{name}={text}\n")
    return True
