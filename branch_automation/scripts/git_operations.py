"""
Git operations helper for branch automation.

Local git commands used by the release steps, run in the workflow
checkout through subprocess.
"""

import os
import subprocess
from typing import Optional


class GitOperationsError(Exception):
    """Base exception for git operations errors."""
    pass


class TagError(GitOperationsError):
    """Raised when tag creation fails."""
    pass


class PushError(GitOperationsError):
    """Raised when push operations fail."""
    pass


class GitOperations:
    """Local git operations in an existing checkout."""

    def __init__(self, work_dir: Optional[str] = None, remote: str = "origin"):
        """
        Initialize git operations.

        Args:
            work_dir: Checkout directory (defaults to the current directory)
            remote: Remote to push to
        """
        self.work_dir = work_dir
        self.remote = remote

    def _run_git(self, args: list, check: bool = True) -> str:
        """
        Run a git command and return output.

        Raises:
            GitOperationsError: If command fails and check=True
        """
        cmd = ["git"] + args

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
                cwd=self.work_dir,
                env=os.environ.copy(),
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            raise GitOperationsError(f"git {' '.join(args)} failed: {e.stderr}")

    def create_tag(self, tag: str, ref: str = "HEAD") -> None:
        """
        Create a lightweight tag.

        Raises:
            TagError: If the tag already exists or git fails
        """
        try:
            self._run_git(["tag", tag, ref])
        except GitOperationsError as e:
            raise TagError(f"Failed to create tag {tag}: {e}")

    def push_tag(self, tag: str) -> None:
        """
        Push a tag to the remote.

        Raises:
            PushError: If push fails
        """
        try:
            self._run_git(["push", self.remote, tag])
        except GitOperationsError as e:
            raise PushError(f"Failed to push tag {tag}: {e}")

    def create_and_push_tag(self, tag: str, ref: str = "HEAD") -> None:
        self.create_tag(tag, ref)
        self.push_tag(tag)
