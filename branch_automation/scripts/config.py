"""
Central configuration for branch automation scripts.
"""

# File paths
WORKFLOW_CONFIG_FILE = "workflow.config.json"
DRAFTER_OUTPUT_DIR = ".github"

# Config document keys
BRANCH_SYSTEM_KEY = "branchSystem"
ACCEPTS_KEY = "accepts"
DRAFTER_SETTINGS_KEY = "drafterSettings"

# Decision reasons
REASON_UNKNOWN_TARGET = "unknown-target-branch"
REASON_NOT_ACCEPTED = "not-accepted"

# Labels
LABEL_INVALID_BRANCH = "invalid-branch"
LABEL_UNKNOWN_TARGET = "unknown-target-branch"

# Bot comment marker
MARKER_NAME = "branch-check"

# Merged branch type -> Release-Drafter config file
RELEASE_DRAFTER_CONFIGS = {
    "release": "release-drafter-minor.yml",
    "hotfix": "release-drafter-patch.yml",
}

# Releases
INITIAL_VERSION = "1.0.0"
DRAFT_RELEASE_TAG = "_DRAFT_"
