"""
Branch policy engine for pull request validation and labeling.

This module decides whether a source branch may be merged into a target
branch, based on the branch type (the prefix before the first "/") and the
per-target allow-list from the workflow configuration. It is pure: loading
configuration, reading the PR event and acting on the result belong to the
callers in pr_gate.py.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from . import config


class InvalidBranchName(Exception):
    """Raised when a branch name is empty, not a string or malformed."""
    pass


class BranchNameMode(Enum):
    """
    How to treat a source branch without a "/" separator.

    STRICT rejects it with InvalidBranchName.
    LENIENT treats the whole name as its branch type.
    """
    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True)
class BranchTypePolicy:
    """Branch types accepted by one target branch."""
    accepts: Tuple[str, ...]

    def allows(self, branch_type: str) -> bool:
        """Exact, case-sensitive membership test."""
        return branch_type in self.accepts


@dataclass(frozen=True)
class BranchSystemConfig:
    """
    Mapping of target branch name to its BranchTypePolicy.

    Built once per invocation by workflow_config.parse_branch_system()
    and never mutated afterwards.
    """
    policies: Mapping[str, BranchTypePolicy]

    @classmethod
    def from_dict(cls, branch_system: Mapping[str, Any]) -> "BranchSystemConfig":
        """
        Build from an already validated ``branchSystem`` mapping.

        Example:
            BranchSystemConfig.from_dict({"main": {"accepts": ["release"]}})
        """
        return cls(policies=MappingProxyType({
            target: BranchTypePolicy(accepts=tuple(entry[config.ACCEPTS_KEY]))
            for target, entry in branch_system.items()
        }))

    def targets(self) -> Tuple[str, ...]:
        return tuple(self.policies)


@dataclass(frozen=True)
class Decision:
    """
    Outcome of evaluating a source branch against a target branch.

    Attributes:
        valid: True when the branch type is accepted by the target
        reason: None when valid, otherwise "unknown-target-branch"
                or "not-accepted"
        labels: Labels to apply to the PR (never empty)
        target_branch: Branch the PR merges into
        source_branch: Branch containing the changes
        branch_type: Prefix extracted from source_branch
    """
    valid: bool
    reason: Optional[str]
    labels: Tuple[str, ...]
    target_branch: str
    source_branch: str
    branch_type: str

    @classmethod
    def accepted(cls, target_branch: str, source_branch: str, branch_type: str) -> "Decision":
        return cls(
            valid=True,
            reason=None,
            labels=(branch_type,),
            target_branch=target_branch,
            source_branch=source_branch,
            branch_type=branch_type,
        )

    @classmethod
    def rejected(
        cls,
        reason: str,
        label: str,
        target_branch: str,
        source_branch: str,
        branch_type: str
    ) -> "Decision":
        return cls(
            valid=False,
            reason=reason,
            labels=(label,),
            target_branch=target_branch,
            source_branch=source_branch,
            branch_type=branch_type,
        )

    @property
    def unknown_target(self) -> bool:
        return self.reason == config.REASON_UNKNOWN_TARGET

    @property
    def not_accepted(self) -> bool:
        return self.reason == config.REASON_NOT_ACCEPTED


def _require_branch_name(name: object, role: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidBranchName(
            f"Invalid {role} branch name: branch name must be a non-empty string"
        )
    return name


def extract_branch_type(
    source_branch: str,
    mode: BranchNameMode = BranchNameMode.STRICT
) -> str:
    """
    Extract the branch type from a source branch name.

    Args:
        source_branch: Branch name (e.g., "feature/login")
        mode: How to treat names without a "/" separator

    Returns:
        The segment before the first "/" (e.g., "feature"), or the whole
        name in lenient mode when there is no separator

    Raises:
        InvalidBranchName: If the name is empty or not a string, starts
            with "/", or has no separator in strict mode

    Examples:
        >>> extract_branch_type("release/2.3.0")
        'release'
        >>> extract_branch_type("hotfix", BranchNameMode.LENIENT)
        'hotfix'
    """
    name = _require_branch_name(source_branch, "source")

    branch_type, separator, _rest = name.partition("/")
    if not separator:
        if mode is BranchNameMode.LENIENT:
            return name
        raise InvalidBranchName(
            f'Invalid branch format: "{name}" does not follow the '
            f'expected "type/branch-name" format'
        )
    if not branch_type:
        raise InvalidBranchName(
            f'Invalid branch format: "{name}" has an empty branch type'
        )
    return branch_type


def lookup_policy(
    branch_config: BranchSystemConfig,
    target_branch: str
) -> Optional[BranchTypePolicy]:
    """Return the policy for target_branch, or None when it is not configured."""
    return branch_config.policies.get(target_branch)


def evaluate(
    target_branch: str,
    source_branch: str,
    branch_config: BranchSystemConfig,
    mode: BranchNameMode = BranchNameMode.STRICT
) -> Decision:
    """
    Decide whether source_branch may be merged into target_branch.

    Outcomes:
        - target not configured: invalid, label "unknown-target-branch"
        - branch type accepted: valid, label is the branch type
        - branch type not accepted: invalid, label "invalid-branch"

    Raises:
        InvalidBranchName: If either branch name is malformed
    """
    branch_type = extract_branch_type(source_branch, mode)
    target_branch = _require_branch_name(target_branch, "target")

    policy = lookup_policy(branch_config, target_branch)
    if policy is None:
        return Decision.rejected(
            config.REASON_UNKNOWN_TARGET,
            config.LABEL_UNKNOWN_TARGET,
            target_branch,
            source_branch,
            branch_type,
        )

    if policy.allows(branch_type):
        return Decision.accepted(target_branch, source_branch, branch_type)

    return Decision.rejected(
        config.REASON_NOT_ACCEPTED,
        config.LABEL_INVALID_BRANCH,
        target_branch,
        source_branch,
        branch_type,
    )


class BranchPolicyEngine:
    """
    Evaluates branch pairs against one loaded BranchSystemConfig.

    Example usage:
        engine = BranchPolicyEngine(load_branch_system("workflow.config.json"))
        decision = engine.evaluate("main", "release/2.3.0")
        decision.valid   # True
        decision.labels  # ("release",)
    """

    def __init__(
        self,
        branch_config: BranchSystemConfig,
        mode: BranchNameMode = BranchNameMode.STRICT
    ):
        """
        Initialize the engine.

        Args:
            branch_config: Loaded branch system configuration
            mode: Handling of source branches without a "/" separator
        """
        self.branch_config = branch_config
        self.mode = mode

    def extract_branch_type(self, source_branch: str) -> str:
        return extract_branch_type(source_branch, self.mode)

    def lookup_policy(self, target_branch: str) -> Optional[BranchTypePolicy]:
        return lookup_policy(self.branch_config, target_branch)

    def evaluate(self, target_branch: str, source_branch: str) -> Decision:
        return evaluate(target_branch, source_branch, self.branch_config, self.mode)
