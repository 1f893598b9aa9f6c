"""
Project constants definitions
"""

# ============================================================
# Project Configuration
# ============================================================

CONFIG_FILENAME = "bridge.toml"
DEFAULT_ENV_FILE = ".env"

DEFAULT_EXCLUDES = [".git", "target", "node_modules", "__pycache__"]

# macOS artifacts that break remote builds
AUTO_EXCLUDES = [".DS_Store", "._*"]

# ============================================================
# Default Values
# ============================================================

DEFAULT_RECONNECT_TIMEOUT = 90
DEFAULT_LOCK_TIMEOUT = 600
DEFAULT_LOCK_NAME = "default"

# ============================================================
# Polling Intervals (seconds)
# ============================================================

LOCK_POLL_INTERVAL = 2
RECONNECT_POLL_INTERVAL = 5

# ============================================================
# SSH
# ============================================================

SSH_CONFIG_PATH = "~/.ssh/config"
SSH_CONNECT_TIMEOUT = 5

# Keepalives make ssh notice a dead link in ~15s instead of the TCP timeout
SSH_KEEPALIVE_OPTIONS = ["-o", "ServerAliveInterval=5", "-o", "ServerAliveCountMax=3"]

# ============================================================
# Locks
# ============================================================

LOCK_FILE_PREFIX = "bridge"
POSIX_LOCK_DIR = "/tmp"

# ============================================================
# Exit Status
# ============================================================

# ssh exits 255 on its own errors; remote commands must not use it
EXIT_CONNECTION_FAILURE = 255
EXIT_SUBSTITUTION_ERROR = 65  # EX_DATAERR
EXIT_TRANSFER_ERROR = 74  # EX_IOERR
EXIT_LOCK_TIMEOUT = 75  # EX_TEMPFAIL
EXIT_CONFIG_ERROR = 78  # EX_CONFIG
EXIT_INTERRUPTED = 130
