"""
Unit tests for the pull request branch gate.

These tests verify that each decision results in one comment and the
decision's labels, that invalid PRs are closed only when requested, and
that the CLI maps outcomes and structural errors to exit codes.
"""

import json

import pytest
from unittest.mock import Mock, patch

from branch_automation.scripts.branch_policy import BranchSystemConfig, evaluate
from branch_automation.scripts.github_client import GitHubClientError
from branch_automation.scripts.pr_gate import GateResult, PullRequestGate, main


@pytest.fixture
def branch_config():
    return BranchSystemConfig.from_dict({
        "main": {"accepts": ["release", "hotfix"]},
        "develop": {"accepts": ["feature", "bugfix"]},
    })


@pytest.fixture
def mock_github_client():
    """Create a mock GitHubClient with default behavior."""
    client = Mock()
    client.repo = "octo-org/app"
    client.create_comment.return_value = {
        "id": 1,
        "html_url": "https://github.com/octo-org/app/pull/17#issuecomment-1"
    }
    client.close_pull_request.return_value = {"number": 17, "state": "closed"}
    return client


@pytest.fixture
def gate(mock_github_client):
    """Create a PullRequestGate with mocked client and real templates."""
    return PullRequestGate(mock_github_client)


class TestApply:
    """Tests for PullRequestGate.apply."""

    def test_valid_decision(self, gate, mock_github_client, branch_config):
        """Valid PR: type label, one success comment, exit 0."""
        decision = evaluate("main", "release/2.3.0", branch_config)

        result = gate.apply(17, decision, branch_config)

        assert result == GateResult(
            success=True,
            exit_code=0,
            comment_url="https://github.com/octo-org/app/pull/17#issuecomment-1",
            closed=False,
        )
        mock_github_client.add_labels.assert_called_once_with(17, ["release"])
        mock_github_client.create_comment.assert_called_once()
        body = mock_github_client.create_comment.call_args[0][1]
        assert body.startswith("<!-- branch-bot:branch-check -->")
        assert "This PR is valid" in body
        assert "`release/2.3.0`" in body
        mock_github_client.close_pull_request.assert_not_called()

    def test_not_accepted_decision(self, gate, mock_github_client, branch_config):
        """Not accepted PR: invalid-branch label, one comment, exit 1."""
        decision = evaluate("main", "feature/login", branch_config)

        result = gate.apply(17, decision, branch_config)

        assert result.success is True
        assert result.exit_code == 1
        mock_github_client.add_labels.assert_called_once_with(17, ["invalid-branch"])
        body = mock_github_client.create_comment.call_args[0][1]
        assert "cannot be merged into `main`" in body
        assert "`release` `hotfix`" in body
        assert "has been closed" not in body
        mock_github_client.close_pull_request.assert_not_called()

    def test_not_accepted_closes_when_requested(self, gate, mock_github_client, branch_config):
        """close_invalid closes the PR before commenting."""
        decision = evaluate("main", "feature/login", branch_config)

        result = gate.apply(17, decision, branch_config, close_invalid=True)

        assert result.closed is True
        mock_github_client.close_pull_request.assert_called_once_with(17)
        body = mock_github_client.create_comment.call_args[0][1]
        assert "has been closed" in body

    def test_valid_never_closed(self, gate, mock_github_client, branch_config):
        """close_invalid does not affect valid PRs."""
        decision = evaluate("develop", "feature/login", branch_config)

        result = gate.apply(17, decision, branch_config, close_invalid=True)

        assert result.closed is False
        mock_github_client.close_pull_request.assert_not_called()

    def test_unknown_target_decision(self, gate, mock_github_client, branch_config):
        """Unknown target: dedicated label and comment listing targets."""
        decision = evaluate("staging", "release/2.3.0", branch_config)

        result = gate.apply(17, decision, branch_config)

        assert result.exit_code == 1
        mock_github_client.add_labels.assert_called_once_with(17, ["unknown-target-branch"])
        mock_github_client.create_comment.assert_called_once()
        body = mock_github_client.create_comment.call_args[0][1]
        assert "No branch policy is configured for `staging`" in body
        assert "`develop` `main`" in body

    def test_without_branch_config(self, gate, mock_github_client, branch_config):
        """Comment renders without the optional policy details."""
        decision = evaluate("main", "feature/login", branch_config)

        gate.apply(17, decision)

        body = mock_github_client.create_comment.call_args[0][1]
        assert "Accepted branch types" not in body

    def test_label_failure_posts_error_comment(self, gate, mock_github_client, branch_config):
        """A labeling failure still leaves exactly one (error) comment, exit 1."""
        mock_github_client.add_labels.side_effect = GitHubClientError("HTTP 403")
        decision = evaluate("main", "feature/login", branch_config)

        result = gate.apply(17, decision, branch_config)

        assert result.success is False
        assert result.exit_code == 1
        assert "HTTP 403" in result.error_message
        mock_github_client.create_comment.assert_called_once()
        body = mock_github_client.create_comment.call_args[0][1]
        assert "Branch check failed" in body
        assert "HTTP 403" in body

    def test_close_failure_posts_error_comment(self, gate, mock_github_client, branch_config):
        """A closing failure still leaves exactly one comment."""
        mock_github_client.close_pull_request.side_effect = GitHubClientError("HTTP 422")
        decision = evaluate("main", "feature/login", branch_config)

        result = gate.apply(17, decision, branch_config, close_invalid=True)

        assert result.exit_code == 1
        assert result.closed is False
        mock_github_client.create_comment.assert_called_once()
        assert "HTTP 422" in mock_github_client.create_comment.call_args[0][1]

    def test_valid_label_failure_exit_one(self, gate, mock_github_client, branch_config):
        """A valid decision that cannot be labeled still exits 1."""
        mock_github_client.add_labels.side_effect = GitHubClientError("boom")
        decision = evaluate("main", "release/2.3.0", branch_config)

        result = gate.apply(17, decision, branch_config)

        assert result.exit_code == 1
        assert mock_github_client.create_comment.call_count == 1

    def test_comment_failure(self, gate, mock_github_client, branch_config):
        """A failed decision comment gives an unsuccessful result."""
        mock_github_client.create_comment.side_effect = GitHubClientError("HTTP 500")
        decision = evaluate("main", "release/2.3.0", branch_config)

        result = gate.apply(17, decision, branch_config)

        assert result.success is False
        assert result.exit_code == 1
        assert "HTTP 500" in result.error_message


class TestReportError:
    """Tests for PullRequestGate.report_error."""

    def test_posts_error_comment(self, gate, mock_github_client):
        """Structural errors get one diagnostic comment."""
        assert gate.report_error(17, "Configuration file not found", "https://run") is True

        body = mock_github_client.create_comment.call_args[0][1]
        assert "Branch check failed" in body
        assert "Configuration file not found" in body
        assert "[workflow run](https://run)" in body
        mock_github_client.add_labels.assert_not_called()

    def test_error_comment_failure_not_raised(self, gate, mock_github_client):
        """Failing to post the error comment is logged, not raised."""
        mock_github_client.create_comment.side_effect = GitHubClientError("boom")
        assert gate.report_error(17, "bad branch") is False


class TestMain:
    """Tests for the pr_gate CLI."""

    @pytest.fixture
    def workspace(self, tmp_path, monkeypatch):
        """Event payload, config file and GITHUB_OUTPUT in a temp dir."""
        config_path = tmp_path / "workflow.config.json"
        config_path.write_text(json.dumps({
            "branchSystem": {"main": {"accepts": ["release", "hotfix"]}}
        }))
        output_path = tmp_path / "github_output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_path))
        monkeypatch.setenv("GITHUB_TOKEN", "token")
        monkeypatch.delenv("GITHUB_RUN_ID", raising=False)

        def write_event(head, base="main"):
            event_path = tmp_path / "event.json"
            event_path.write_text(json.dumps({
                "pull_request": {"number": 5, "base": {"ref": base}, "head": {"ref": head}},
                "repository": {"full_name": "octo-org/app"},
            }))
            return str(event_path)

        return {
            "config": str(config_path),
            "output": output_path,
            "write_event": write_event,
            "tmp_path": tmp_path,
        }

    @patch("branch_automation.scripts.pr_gate.GitHubClient")
    def test_valid_exit_zero(self, mock_client_cls, workspace):
        """Valid branch exits 0 and writes outputs."""
        mock_client_cls.return_value.create_comment.return_value = {"html_url": ""}
        event = workspace["write_event"]("release/2.3.0")

        exit_code = main(["--config", workspace["config"], "--event", event])

        assert exit_code == 0
        mock_client_cls.assert_called_once_with("octo-org/app", "token")
        outputs = workspace["output"].read_text()
        assert "valid=true" in outputs
        assert "branch_type=release" in outputs
        assert "labels=release" in outputs

    @patch("branch_automation.scripts.pr_gate.GitHubClient")
    def test_not_accepted_exit_one(self, mock_client_cls, workspace):
        """Invalid branch exits 1 after labelling."""
        mock_client_cls.return_value.create_comment.return_value = {"html_url": ""}
        event = workspace["write_event"]("feature/login")

        exit_code = main(["--config", workspace["config"], "--event", event, "--close-invalid"])

        assert exit_code == 1
        client = mock_client_cls.return_value
        client.add_labels.assert_called_once_with(5, ["invalid-branch"])
        client.close_pull_request.assert_called_once_with(5)
        assert "reason=not-accepted" in workspace["output"].read_text()

    @patch("branch_automation.scripts.pr_gate.GitHubClient")
    def test_strict_no_slash_reports_error(self, mock_client_cls, workspace):
        """Malformed source branch posts an error comment and exits 1."""
        event = workspace["write_event"]("hotfix")

        exit_code = main(["--config", workspace["config"], "--event", event])

        assert exit_code == 1
        client = mock_client_cls.return_value
        client.add_labels.assert_not_called()
        client.create_comment.assert_called_once()
        assert "type/branch-name" in client.create_comment.call_args[0][1]

    @patch("branch_automation.scripts.pr_gate.GitHubClient")
    def test_lenient_no_slash_evaluated(self, mock_client_cls, workspace):
        """--lenient evaluates 'hotfix' as its own type."""
        mock_client_cls.return_value.create_comment.return_value = {"html_url": ""}
        event = workspace["write_event"]("hotfix")

        exit_code = main(["--config", workspace["config"], "--event", event, "--lenient"])

        assert exit_code == 0
        mock_client_cls.return_value.add_labels.assert_called_once_with(5, ["hotfix"])

    @patch("branch_automation.scripts.pr_gate.GitHubClient")
    def test_config_load_error(self, mock_client_cls, workspace):
        """Missing config posts an error comment and exits 1."""
        event = workspace["write_event"]("release/2.3.0")
        missing = str(workspace["tmp_path"] / "missing.json")

        exit_code = main(["--config", missing, "--event", event])

        assert exit_code == 1
        client = mock_client_cls.return_value
        client.create_comment.assert_called_once()
        assert "not found" in client.create_comment.call_args[0][1]
        assert "valid=false" in workspace["output"].read_text()

    @patch("branch_automation.scripts.pr_gate.GitHubClient")
    def test_missing_event(self, mock_client_cls, workspace):
        """Without an event payload nothing can be commented."""
        exit_code = main(["--config", workspace["config"], "--event", ""])

        assert exit_code == 1
        mock_client_cls.assert_not_called()
