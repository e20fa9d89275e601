#!/usr/bin/env python3
"""
Resolve the type of the branch merged by a push to the release branch.

After a release/* or hotfix/* PR is merged, the push event's head commit
message names the merged branch. Its type selects both the version bump
and the Release-Drafter config used for the draft release.

Usage:
    python -m branch_automation.scripts.branch_type_resolver [--event PATH]
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from . import config
from .branch_policy import InvalidBranchName, extract_branch_type
from .github_output import write_outputs
from .pr_event import EventError, head_commit_message, load_event, merged_branch_from_commit_message

logger = logging.getLogger(__name__)


class BranchTypeError(Exception):
    """Raised when the merged branch cannot be mapped to a release type."""
    pass


@dataclass
class MergedBranch:
    """The merged branch and the release settings derived from it."""
    branch: str
    branch_type: str
    drafter_config_file: str


def resolve_merged_branch(
    commit_message: str,
    drafter_configs: Optional[Dict[str, str]] = None
) -> MergedBranch:
    """
    Classify the branch merged by a merge commit.

    Args:
        commit_message: Head commit message of the push event
        drafter_configs: Branch type to Release-Drafter config file
                         (defaults to config.RELEASE_DRAFTER_CONFIGS)

    Returns:
        MergedBranch for release-producing branch types

    Raises:
        BranchTypeError: If no branch name is found or its type does not
            produce a release
    """
    if drafter_configs is None:
        drafter_configs = config.RELEASE_DRAFTER_CONFIGS

    branch = merged_branch_from_commit_message(commit_message)
    if not branch:
        raise BranchTypeError("No match found in the commit message for a branch name")

    try:
        branch_type = extract_branch_type(branch)
    except InvalidBranchName as e:
        raise BranchTypeError(str(e))

    config_file = drafter_configs.get(branch_type)
    if not config_file:
        raise BranchTypeError(
            f"Branch '{branch}' does not match expected patterns "
            f"({', '.join(sorted(drafter_configs))})"
        )

    return MergedBranch(branch=branch, branch_type=branch_type, drafter_config_file=config_file)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Determine the type of the merged branch")
    parser.add_argument("--event", default=os.environ.get("GITHUB_EVENT_PATH"),
                        help="Path to the push event payload")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        message = head_commit_message(load_event(args.event))
        merged = resolve_merged_branch(message)
    except (EventError, BranchTypeError) as e:
        print(f"::error::Error determining branch type: {e}", file=sys.stderr)
        return 1

    logger.info(f"Branch name extracted: {merged.branch}")
    logger.info(f"Branch type determined: {merged.branch_type}")
    write_outputs({"branch_type": merged.branch_type, "config_file": merged.drafter_config_file})
    return 0


if __name__ == "__main__":
    sys.exit(main())
