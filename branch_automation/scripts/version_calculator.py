#!/usr/bin/env python3
"""
Version calculator for branch automation.

This module finds the latest release tag (creating the initial tag on a
repository without releases) and calculates the next tag from the type of
the merged branch:
- release/* bumps the minor version and resets the patch
- hotfix/* bumps the patch version

Usage:
    python -m branch_automation.scripts.version_calculator latest-tag
    python -m branch_automation.scripts.version_calculator next-tag --latest-tag 1.2.3 --branch-type hotfix
"""

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import config
from .git_operations import GitOperations, GitOperationsError
from .github_client import GitHubClient, GitHubClientError
from .github_output import write_outputs

logger = logging.getLogger(__name__)


class VersionError(Exception):
    """Raised when a tag cannot be parsed or incremented."""
    pass


# Pattern to parse a release tag: 1.2.3 or v1.2.3
VERSION_PATTERN = re.compile(r'^v?(\d+)\.(\d+)\.(\d+)$')


def parse_version(tag: str) -> Tuple[int, int, int]:
    """
    Parse a MAJOR.MINOR.PATCH tag.

    Raises:
        VersionError: If the tag is not in the expected format
    """
    match = VERSION_PATTERN.match((tag or "").strip())
    if not match:
        raise VersionError(f"latest tag '{tag}' is not in the expected MAJOR.MINOR.PATCH format")
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def increment_version(latest_tag: str, branch_type: str) -> str:
    """
    Calculate the next tag for a merged branch type.

    Examples:
        >>> increment_version("1.4.2", "release")
        '1.5.0'
        >>> increment_version("1.4.2", "hotfix")
        '1.4.3'

    Raises:
        VersionError: If the tag is malformed or the branch type does not
            produce a release
    """
    major, minor, patch = parse_version(latest_tag)

    if branch_type == "release":
        minor += 1
        patch = 0
    elif branch_type == "hotfix":
        patch += 1
    else:
        raise VersionError(f"Unknown branch type: {branch_type}")

    return f"{major}.{minor}.{patch}"


@dataclass
class TagInfo:
    """Latest release tag and whether it was just created."""
    latest_tag: str
    initial_version: bool


class VersionCalculator:
    """
    Calculate release tags based on release history.

    Example:
        - No releases yet: 1.0.0 is tagged and pushed
        - Latest 1.0.0, release branch merged: 1.1.0
        - Latest 1.1.0, hotfix branch merged: 1.1.1
    """

    def __init__(
        self,
        github_client: GitHubClient,
        git: Optional[GitOperations] = None,
        initial_version: str = config.INITIAL_VERSION
    ):
        """
        Initialize the version calculator.

        Args:
            github_client: GitHubClient instance for repository operations
            git: GitOperations used to create the initial tag
            initial_version: Tag created when the repository has no releases
        """
        self.gh = github_client
        self.git = git or GitOperations()
        self.initial_version = initial_version

    def get_or_create_tag(self) -> TagInfo:
        """
        Return the latest release tag, creating the initial tag if none exists.

        Raises:
            GitHubClientError: If releases cannot be listed
            GitOperationsError: If the initial tag cannot be created or pushed
        """
        logger.info("Fetching latest tag...")
        latest_tag = self.gh.get_latest_release_tag()

        if latest_tag:
            logger.info(f"Latest tag is: {latest_tag}")
            return TagInfo(latest_tag=latest_tag, initial_version=False)

        logger.info(f"No tags found. Setting initial version to {self.initial_version}")
        self.git.create_and_push_tag(self.initial_version)
        logger.info("Initial tag created.")
        return TagInfo(latest_tag=self.initial_version, initial_version=True)

    def calculate_next_tag(self, branch_type: str) -> str:
        """Return the tag following the latest release for a merged branch type."""
        tag_info = self.get_or_create_tag()
        new_tag = increment_version(tag_info.latest_tag, branch_type)
        logger.info(f"New tag calculated: {new_tag}")
        return new_tag


def main(argv: Optional[List[str]] = None) -> int:
    repo_parser = argparse.ArgumentParser(add_help=False)
    repo_parser.add_argument("--repo", default=os.environ.get("GITHUB_REPOSITORY", ""),
                             help="Repository in owner/name form")

    parser = argparse.ArgumentParser(description="Release tag calculation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("latest-tag", parents=[repo_parser],
                          help="Get the latest release tag, creating the initial one if needed")

    next_parser = subparsers.add_parser("next-tag", parents=[repo_parser],
                                        help="Calculate the next release tag")
    next_parser.add_argument("--latest-tag", required=True)
    next_parser.add_argument("--branch-type", required=True)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "next-tag":
        try:
            new_tag = increment_version(args.latest_tag, args.branch_type)
        except VersionError as e:
            print(f"::error::Error incrementing version: {e}", file=sys.stderr)
            return 1
        logger.info(f"New tag calculated: {new_tag}")
        write_outputs({"new_tag": new_tag})
        return 0

    if not args.repo:
        print("::error::Repository is not known (pass --repo or set GITHUB_REPOSITORY)", file=sys.stderr)
        return 1

    token = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
    calculator = VersionCalculator(GitHubClient(args.repo, token))
    try:
        tag_info = calculator.get_or_create_tag()
    except (GitHubClientError, GitOperationsError) as e:
        print(f"::error::Error retrieving or creating tag: {e}", file=sys.stderr)
        return 1

    write_outputs({"latest_tag": tag_info.latest_tag, "initial_version": tag_info.initial_version})
    return 0


if __name__ == "__main__":
    sys.exit(main())
