"""Application-level constants for daolictl."""

# ============================================================================
# Application identity
# ============================================================================

APP_NAME = "daolictl"
APP_VERSION = "0.3.0"

# ============================================================================
# Command resolution
# ============================================================================

# Capability names are "Cmd" + the title-cased command tokens, e.g. CmdPolicyList.
COMMAND_PREFIX = "Cmd"
HELP_COMMAND = "help"
HELP_FLAG = "--help"

# ============================================================================
# Environment variables
# ============================================================================

ENV_HOST = "DAOLICTL_HOST"
ENV_TIMEOUT = "DAOLICTL_TIMEOUT"
ENV_RETRY_ATTEMPTS = "DAOLICTL_RETRY_ATTEMPTS"

# ============================================================================
# API defaults
# ============================================================================

DEFAULT_HOST = "http://127.0.0.1:8080"
DEFAULT_TIMEOUT_SEC = 30
DEFAULT_RETRY_ATTEMPTS = 3

HTTP_CONNECT_TIMEOUT_SEC = 10.0
HTTP_WRITE_TIMEOUT_SEC = 15.0
HTTP_POOL_TIMEOUT_SEC = 5.0

RETRY_BACKOFF_INITIAL_SEC = 1.0
RETRY_BACKOFF_MAX_SEC = 30.0

POLICIES_PATH = "/v1/policies"
USER_AGENT = f"{APP_NAME}/{APP_VERSION}"
