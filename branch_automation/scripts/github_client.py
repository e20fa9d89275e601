"""
GitHub API client wrapper for branch automation.

This module provides a thin wrapper around the GitHub operations needed
by the branch gate and release scripts. It uses the `gh` CLI for
authentication and API access.
"""

import json
import os
import subprocess
from typing import Any, Dict, List, Optional


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""
    pass


class GitHubClient:
    """
    GitHub API client for pull request and release operations.

    Uses the `gh` CLI for authentication and API access.
    All methods are repository-scoped.
    """

    def __init__(self, repo: str, token: Optional[str] = None):
        """
        Initialize the GitHub client.

        Args:
            repo: Repository in format "owner/name"
            token: Optional GitHub token (passed to gh as GH_TOKEN)
        """
        self.repo = repo
        self.token = token

    def _run_gh(self, args: List[str], check: bool = True) -> str:
        """
        Run a gh CLI command and return output.

        Args:
            args: Command arguments (without 'gh')
            check: Whether to raise on non-zero exit code

        Returns:
            Command output as string

        Raises:
            GitHubClientError: If command fails and check=True
        """
        cmd = ["gh"] + args
        if self.token:
            # Extend environment with GH_TOKEN, don't replace it
            env = {**os.environ, "GH_TOKEN": self.token}
        else:
            env = None

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
                env=env
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitHubClientError(f"gh command failed: {e.stderr}")
        except FileNotFoundError:
            raise GitHubClientError("gh command failed: gh CLI is not installed")

    # -------------------------------------------------------------------------
    # Pull request operations
    # -------------------------------------------------------------------------

    def add_labels(self, issue_number: int, labels: List[str]) -> None:
        """
        Add labels to a pull request (PRs share the issues label API).

        Args:
            issue_number: The PR number
            labels: List of label names to add

        Raises:
            GitHubClientError: If operation fails
        """
        if not labels:
            return

        # POST to labels endpoint using array syntax for gh api
        args = [
            "api",
            f"repos/{self.repo}/issues/{issue_number}/labels",
            "-X", "POST"
        ]
        for label in labels:
            args.extend(["-f", f"labels[]={label}"])
        self._run_gh(args)

    def create_comment(self, issue_number: int, body: str) -> Dict[str, Any]:
        """
        Post a comment on a pull request.

        Args:
            issue_number: The PR number
            body: Comment body (markdown)

        Returns:
            Dict with the comment 'id' and 'html_url'

        Raises:
            GitHubClientError: If posting fails
        """
        output = self._run_gh([
            "api",
            f"repos/{self.repo}/issues/{issue_number}/comments",
            "-X", "POST",
            "-f", f"body={body}"
        ])
        try:
            comment = json.loads(output)
        except json.JSONDecodeError as e:
            raise GitHubClientError(f"Failed to parse comment response: {e}")
        return {
            "id": comment.get("id"),
            "html_url": comment.get("html_url", "")
        }

    def close_pull_request(self, pr_number: int) -> Dict[str, Any]:
        """
        Close a pull request without merging.

        Args:
            pr_number: The PR number

        Returns:
            Dict with 'number' and 'state'

        Raises:
            GitHubClientError: If the update fails
        """
        output = self._run_gh([
            "api",
            f"repos/{self.repo}/pulls/{pr_number}",
            "-X", "PATCH",
            "-f", "state=closed"
        ])
        try:
            pr = json.loads(output)
        except json.JSONDecodeError as e:
            raise GitHubClientError(f"Failed to parse pull request response: {e}")
        return {
            "number": pr.get("number", pr_number),
            "state": pr.get("state", "")
        }

    # -------------------------------------------------------------------------
    # Release operations
    # -------------------------------------------------------------------------

    def get_latest_release_tag(self) -> Optional[str]:
        """
        Get the tag name of the most recent release.

        Returns:
            Tag name, or None if the repository has no releases

        Raises:
            GitHubClientError: If the gh command fails
        """
        output = self._run_gh([
            "release", "list",
            "--repo", self.repo,
            "--limit", "1",
            "--json", "tagName",
            "--jq", ".[0].tagName"
        ])
        tag = output.strip()
        # jq prints "null" for an empty list
        if not tag or tag == "null":
            return None
        return tag

    def edit_release(
        self,
        tag: str,
        new_tag: Optional[str] = None,
        title: Optional[str] = None,
        draft: Optional[bool] = None
    ) -> None:
        """
        Edit a release identified by its current tag.

        Args:
            tag: Current tag of the release (e.g., "_DRAFT_")
            new_tag: Tag to move the release to
            title: New release title
            draft: Set draft status (False to publish)

        Raises:
            GitHubClientError: If the edit fails
        """
        args = ["release", "edit", tag, "--repo", self.repo]

        if new_tag is not None:
            args.extend(["--tag", new_tag])
        if title is not None:
            args.extend(["--title", title])
        if draft is not None:
            args.append(f"--draft={str(draft).lower()}")

        self._run_gh(args)
