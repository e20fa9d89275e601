#!/usr/bin/env python3
"""
Pull request branch gate.

Evaluates the PR's source branch against the branch policy of its target
branch, labels the PR, posts a single comment describing the outcome and
optionally closes PRs from branches the target does not accept.

Usage:
    python -m branch_automation.scripts.pr_gate --config workflow.config.json [--close-invalid]
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import config
from .bot_responder import BotResponder
from .branch_policy import (
    BranchNameMode,
    BranchPolicyEngine,
    BranchSystemConfig,
    Decision,
    InvalidBranchName,
    lookup_policy,
)
from .github_client import GitHubClient, GitHubClientError
from .github_output import write_outputs
from .pr_event import EventError, PullRequestEvent, load_event
from .workflow_config import ConfigLoadError, load_branch_system

logger = logging.getLogger(__name__)


@dataclass
class GateResult:
    """Result of applying a decision to a pull request."""
    success: bool
    exit_code: int
    comment_url: Optional[str] = None
    closed: bool = False
    error_message: Optional[str] = None


class PullRequestGate:
    """Applies branch policy decisions to pull requests.

    For every decision the gate:
    1. Adds the decision's labels to the PR
    2. Closes the PR if it is invalid and closing is enabled
    3. Posts exactly one comment describing the outcome

    If labeling or closing fails, the one comment is the error comment.
    """

    TEMPLATE_VALID = "branch_valid"
    TEMPLATE_NOT_ACCEPTED = "branch_not_accepted"
    TEMPLATE_UNKNOWN_TARGET = "unknown_target_branch"
    TEMPLATE_ERROR = "branch_check_error"

    def __init__(self, gh: GitHubClient, responder: Optional[BotResponder] = None):
        """Initialize with GitHub client.

        Args:
            gh: Configured GitHubClient instance
            responder: BotResponder for comment templates
        """
        self.gh = gh
        self.responder = responder or BotResponder()

    def template_for(self, decision: Decision) -> str:
        if decision.valid:
            return self.TEMPLATE_VALID
        if decision.unknown_target:
            return self.TEMPLATE_UNKNOWN_TARGET
        return self.TEMPLATE_NOT_ACCEPTED

    def build_context(
        self,
        decision: Decision,
        branch_config: Optional[BranchSystemConfig] = None,
        closed: bool = False
    ) -> Dict[str, Any]:
        """Build the template context for a decision comment."""
        accepted_types: List[str] = []
        configured_targets: List[str] = []
        if branch_config is not None:
            policy = lookup_policy(branch_config, decision.target_branch)
            if policy is not None:
                accepted_types = list(policy.accepts)
            configured_targets = sorted(branch_config.targets())

        return {
            "source_branch": decision.source_branch,
            "target_branch": decision.target_branch,
            "branch_type": decision.branch_type,
            "labels": list(decision.labels),
            "accepted_types": accepted_types,
            "has_accepted_types": bool(accepted_types),
            "configured_targets": configured_targets,
            "has_configured_targets": bool(configured_targets),
            "closed": closed,
        }

    def apply(
        self,
        pr_number: int,
        decision: Decision,
        branch_config: Optional[BranchSystemConfig] = None,
        close_invalid: bool = False
    ) -> GateResult:
        """Label, optionally close, and comment on a pull request.

        Args:
            pr_number: Pull request number
            decision: Decision from BranchPolicyEngine.evaluate()
            branch_config: Config used for the decision (for comment details)
            close_invalid: Close the PR when the decision is invalid

        Returns:
            GateResult; exit_code is 0 only for a valid decision that was
            applied without errors
        """
        closed = False
        try:
            self.gh.add_labels(pr_number, list(decision.labels))
            logger.info(f"Labels added to PR #{pr_number}: {', '.join(decision.labels)}")

            if not decision.valid and close_invalid:
                self.gh.close_pull_request(pr_number)
                closed = True
                logger.info(f"Closed PR #{pr_number}")
        except GitHubClientError as e:
            logger.error(f"Failed to update PR #{pr_number}: {e}")
            self.report_error(
                pr_number,
                f"Failed to apply the branch check result "
                f"({decision.reason or 'valid'}): {e}",
                workflow_run_url()
            )
            return GateResult(
                success=False,
                exit_code=1,
                closed=closed,
                error_message=f"GitHub API error: {e}"
            )

        try:
            body = self.responder.render_with_marker(
                self.template_for(decision),
                self.build_context(decision, branch_config, closed)
            )
            comment = self.gh.create_comment(pr_number, body)
            logger.info(f"Posted comment on PR #{pr_number}")
        except GitHubClientError as e:
            logger.error(f"Failed to comment on PR #{pr_number}: {e}")
            return GateResult(
                success=False,
                exit_code=1,
                closed=closed,
                error_message=f"GitHub API error: {e}"
            )

        return GateResult(
            success=True,
            exit_code=0 if decision.valid else 1,
            comment_url=comment.get("html_url"),
            closed=closed
        )

    def report_error(
        self,
        pr_number: int,
        error_message: str,
        workflow_run_url: str = ""
    ) -> bool:
        """Post a diagnostic comment for a structural error.

        Returns:
            True if the comment was posted
        """
        body = self.responder.render_with_marker(self.TEMPLATE_ERROR, {
            "error_message": error_message,
            "workflow_run_url": workflow_run_url,
        })
        try:
            self.gh.create_comment(pr_number, body)
            return True
        except GitHubClientError as e:
            logger.error(f"Failed to post error comment on PR #{pr_number}: {e}")
            return False


def workflow_run_url() -> str:
    run_id = os.environ.get("GITHUB_RUN_ID")
    if not run_id:
        return ""
    server = os.environ.get("GITHUB_SERVER_URL", "https://github.com")
    return f"{server}/{os.environ.get('GITHUB_REPOSITORY', '')}/actions/runs/{run_id}"


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate and label a pull request by branch type")
    parser.add_argument("--config", default=config.WORKFLOW_CONFIG_FILE,
                        help="Path to the workflow configuration file")
    parser.add_argument("--event", default=os.environ.get("GITHUB_EVENT_PATH"),
                        help="Path to the pull_request event payload")
    parser.add_argument("--repo", default=None, help="Repository in owner/name form")
    parser.add_argument("--lenient", action="store_true",
                        help="Treat a source branch without '/' as its own type")
    parser.add_argument("--close-invalid", action="store_true",
                        help="Close pull requests whose branch is not accepted")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        event = PullRequestEvent.from_payload(load_event(args.event))
    except EventError as e:
        print(f"::error::{e}", file=sys.stderr)
        return 1

    repo = args.repo or event.repository or os.environ.get("GITHUB_REPOSITORY", "")
    if not repo:
        print("::error::Repository is not known (pass --repo or set GITHUB_REPOSITORY)", file=sys.stderr)
        return 1

    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    gate = PullRequestGate(GitHubClient(repo, token))
    mode = BranchNameMode.LENIENT if args.lenient else BranchNameMode.STRICT

    try:
        branch_config = load_branch_system(args.config)
        decision = BranchPolicyEngine(branch_config, mode).evaluate(
            event.target_branch, event.source_branch
        )
    except (ConfigLoadError, InvalidBranchName) as e:
        print(f"::error::{e}", file=sys.stderr)
        gate.report_error(event.number, str(e), workflow_run_url())
        write_outputs({"valid": False, "branch_type": "", "labels": [], "reason": "error"})
        return 1

    if decision.valid:
        logger.info(
            f"The PR source branch '{event.source_branch}' is valid "
            f"for the target branch '{event.target_branch}'"
        )
    else:
        logger.warning(
            f"Invalid source branch '{event.source_branch}' for target "
            f"branch '{event.target_branch}': {decision.reason}"
        )

    result = gate.apply(event.number, decision, branch_config, close_invalid=args.close_invalid)
    write_outputs({
        "valid": decision.valid,
        "branch_type": decision.branch_type,
        "labels": list(decision.labels),
        "reason": decision.reason or "",
    })
    if result.error_message:
        print(f"::error::{result.error_message}", file=sys.stderr)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
