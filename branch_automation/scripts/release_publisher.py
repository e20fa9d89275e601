#!/usr/bin/env python3
"""Release publisher module for publishing draft releases.

Release-Drafter keeps the upcoming release as a draft under a placeholder
tag. Publishing moves the draft to the calculated tag and clears the
draft flag.

Usage:
    python -m branch_automation.scripts.release_publisher --tag 1.5.0
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional

from . import config
from .github_client import GitHubClient, GitHubClientError

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Result of a publish operation."""
    success: bool
    tag: Optional[str] = None
    title: Optional[str] = None
    error_message: Optional[str] = None


class ReleasePublisher:
    """Publishes draft releases to GitHub."""

    TITLE_FORMAT = "Release v{tag}"

    def __init__(self, gh: GitHubClient):
        """Initialize with GitHub client.

        Args:
            gh: Configured GitHubClient instance
        """
        self.gh = gh

    def publish(self, new_tag: str, draft_tag: str = config.DRAFT_RELEASE_TAG) -> PublishResult:
        """Publish the draft release under its final tag.

        Args:
            new_tag: Tag to publish the release as (e.g., "1.5.0")
            draft_tag: Placeholder tag of the draft release

        Returns:
            PublishResult with success status and details
        """
        if not new_tag:
            return PublishResult(success=False, error_message="No tag given for the release")

        title = self.TITLE_FORMAT.format(tag=new_tag)
        logger.info(f"Publishing new release {new_tag}...")

        try:
            self.gh.edit_release(draft_tag, new_tag=new_tag, title=title, draft=False)
        except GitHubClientError as e:
            logger.error(f"Error publishing release: {e}")
            return PublishResult(
                success=False,
                tag=new_tag,
                error_message=f"Failed to publish release: {e}"
            )

        logger.info(f"Release published: {new_tag}")
        return PublishResult(success=True, tag=new_tag, title=title)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Publish the draft release")
    parser.add_argument("--tag", required=True, help="Tag to publish the release as")
    parser.add_argument("--draft-tag", default=config.DRAFT_RELEASE_TAG,
                        help="Placeholder tag of the draft release")
    parser.add_argument("--repo", default=os.environ.get("GITHUB_REPOSITORY", ""),
                        help="Repository in owner/name form")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    token = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
    result = ReleasePublisher(GitHubClient(args.repo, token)).publish(args.tag, args.draft_tag)
    if not result.success:
        print(f"::error::{result.error_message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
