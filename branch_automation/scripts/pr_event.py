"""
GitHub event payload reader for branch automation.

Workflows run with GITHUB_EVENT_PATH pointing at the JSON payload of the
triggering event. This module extracts the fields the scripts need from
pull_request and push payloads.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union


class EventError(Exception):
    """Raised when the event payload is missing or lacks required fields."""
    pass


# "Merge pull request #42 from octo-org/release/2.3.0"
MERGE_MESSAGE_PATTERN = re.compile(r"Merge pull request #\d+ from (\S+)")


@dataclass
class PullRequestEvent:
    """The pull request fields used by the branch gate."""
    number: int
    target_branch: str
    source_branch: str
    repository: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PullRequestEvent":
        """
        Build from a pull_request event payload.

        Raises:
            EventError: If the payload has no pull_request or lacks
                the number, base.ref or head.ref fields
        """
        pr = payload.get("pull_request")
        if not isinstance(pr, dict):
            raise EventError("Event payload has no pull_request object")

        number = pr.get("number", payload.get("number"))
        if not isinstance(number, int):
            raise EventError("Pull request number is undefined in the event payload")

        target_branch = (pr.get("base") or {}).get("ref")
        if not target_branch:
            raise EventError("Target branch is undefined in the pull request context")

        source_branch = (pr.get("head") or {}).get("ref")
        if not source_branch:
            raise EventError("Source branch is undefined in the pull request context")

        repository = (payload.get("repository") or {}).get("full_name", "")

        return cls(
            number=number,
            target_branch=target_branch,
            source_branch=source_branch,
            repository=repository,
        )


def load_event(path: Union[str, Path, None]) -> Dict[str, Any]:
    """
    Read and parse the event payload file.

    Args:
        path: Path to the payload (usually $GITHUB_EVENT_PATH)

    Raises:
        EventError: If the path is unset, missing or not valid JSON
    """
    if not path:
        raise EventError("GITHUB_EVENT_PATH is not set")

    event_path = Path(path)
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise EventError(f"Event payload not found: {event_path}")
    except (OSError, json.JSONDecodeError) as e:
        raise EventError(f"Failed to read event payload {event_path}: {e}")

    if not isinstance(payload, dict):
        raise EventError(f"Event payload is not a JSON object: {event_path}")
    return payload


def head_commit_message(payload: Dict[str, Any]) -> str:
    """
    Return the head commit message of a push event.

    Raises:
        EventError: If head_commit or its message is missing
    """
    head_commit = payload.get("head_commit") or {}
    message = head_commit.get("message")
    if not message:
        raise EventError("head_commit or message not found in event data")
    return message


def merged_branch_from_commit_message(message: str) -> Optional[str]:
    """
    Extract the merged source branch from a GitHub merge commit message.

    The "from" part is "<owner>/<branch>"; the owner segment is dropped.

    Examples:
        >>> merged_branch_from_commit_message("Merge pull request #7 from acme/hotfix/1.0.1")
        'hotfix/1.0.1'
        >>> merged_branch_from_commit_message("Fix typo") is None
        True
    """
    match = MERGE_MESSAGE_PATTERN.search(message or "")
    if not match:
        return None

    _owner, separator, branch = match.group(1).partition("/")
    if not separator or not branch:
        return None
    return branch
