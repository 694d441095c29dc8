"""
Deployer Constants

Centralized constants for defaults, checkout names and exit codes.
"""

from deployer.exceptions import ErrorKind

# Default flag values
DEFAULT_BRANCH = "dev"
DEFAULT_DOCKER_ACCOUNT = "discoenv"
DEFAULT_DOCKER_TAG = "dev"

# Checkout directories (relative to the working root)
INTERNAL_CHECKOUT_DIR = "internal-deployer-checkout"
EXTERNAL_CHECKOUT_DIR = "external-deployer-checkout"

# Subdirectories merged from the internal checkout into the external one
DEFAULT_MERGE_DIRS = ("group_vars", "inventories")

# External tools
GIT_BINARY = "git"
ANSIBLE_PLAYBOOK_BINARY = "ansible-playbook"
ANSIBLE_BINARY = "ansible"

# Ansible privilege escalation: passed as --sudo or --become
DEFAULT_ESCALATION = "sudo"
ESCALATION_METHODS = ("sudo", "become")

# Environment variable prefix for option values (DEPLOYER_PULL_TAG, ...)
ENV_PREFIX = "DEPLOYER"
DEFAULT_ENV_FILE = ".env"

# Log Configuration
DEFAULT_LOG_DIR = "logs"
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"

# Exit codes
EXIT_UNEXPECTED = 1
EXIT_INTERRUPTED = 130

EXIT_CODES = {
    ErrorKind.CONFIG_INVALID: 2,
    ErrorKind.TOOL_NOT_FOUND: 3,
    ErrorKind.DIRECTORY_CLEANUP_FAILED: 4,
    ErrorKind.CLONE_FAILED: 10,
    ErrorKind.CHECKOUT_FAILED: 11,
    ErrorKind.PULL_FAILED: 12,
    ErrorKind.COPY_FAILED: 13,
    ErrorKind.PULL_PHASE_FAILED: 20,
    ErrorKind.CONFIGURE_PHASE_FAILED: 21,
    ErrorKind.SERVICE_PHASE_FAILED: 22,
    ErrorKind.RESTART_PHASE_FAILED: 23,
    ErrorKind.ADHOC_COMMAND_FAILED: 30,
}
