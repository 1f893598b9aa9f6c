"""
Configuration loader: find bridge.toml by walking up from the working directory
"""
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from ...core.constants import CONFIG_FILENAME
from ...core.exceptions import ConfigError
from ...core.logging import get_logger
from ...domain.project import ProjectProfile
from .project_parser import parse_project

logger = get_logger(__name__)


CONFIG_TEMPLATE = '''default_host = "dev-server"

[hosts.dev-server]
hostname = "dev-server"        # SSH alias (from ~/.ssh/config) or IP
path = "/home/user/projects/myproject"
# shell = "bash"               # bash (default), powershell, or cmd
# sync_method = "rsync"        # tar (default) or rsync (incremental, deletes removed files)
# wrapper = "source ~/.profile && {}"  # Optional: wrap all commands
# strict_env = true            # Fail on missing ${VAR} references (default: true)
# env_files = [".env.prod"]    # Additional env files to load after .env
# reconnect_command = "get-crash-dump.sh"  # Run after SSH reconnects from unexpected disconnect
# reconnect_timeout = 90       # Seconds to wait for reconnection (default: 90)
# lock = true                  # Acquire exclusive lock before running commands
# lock = "kernel"              # Named lock (only blocks commands with same lock name)
# lock_timeout = 600           # Seconds to wait for lock (default: 600)

# Windows example with environment loading:
# [hosts.windows-pc]
# hostname = "192.168.1.100"
# path = "C:/Users/name/dev/myproject"
# shell = "powershell"
# wrapper = "net use \\\\\\\\server\\\\share /user:${DOMAIN_USER} ${DOMAIN_PASS:-}; {}"

# Conda environment example:
# [hosts.ml-server]
# hostname = "ml-box"
# path = "/home/user/ml-project"
# wrapper = "source ~/miniconda3/bin/activate ml && {}"

[sync]
exclude = [".git", "target", "node_modules", "__pycache__"]
'''


def generate_template() -> str:
    """Commented starter bridge.toml"""
    return CONFIG_TEMPLATE


def write_template(directory: Path) -> Path:
    """
    Write the starter bridge.toml into directory.

    Raises:
        ConfigError: If the file already exists or cannot be written
    """
    config_path = directory / CONFIG_FILENAME
    if config_path.exists():
        raise ConfigError(
            f"{CONFIG_FILENAME} already exists in this directory. "
            "Delete it first if you want to reinitialize."
        )
    try:
        config_path.write_text(generate_template(), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to write {config_path}: {e}") from e
    return config_path


class ConfigLoader:
    """Locate, read and parse bridge.toml"""

    def __init__(self, filename: str = CONFIG_FILENAME):
        self.filename = filename

    def find_config_file(self, start: Optional[Path] = None) -> Path:
        """
        Walk up from start (default: cwd) to the filesystem root.

        Raises:
            ConfigError: If no directory on the way holds the config file
        """
        current = (start or Path.cwd()).resolve()
        for directory in (current, *current.parents):
            candidate = directory / self.filename
            if candidate.is_file():
                return candidate
        raise ConfigError(
            f"No {self.filename} found in current directory or any parent. "
            "Run 'bridge init' to create one."
        )

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file"""
        try:
            return tomllib.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    def load_file(self, path: Path) -> ProjectProfile:
        """Parse one config file; its directory becomes the project root"""
        data = self.load_toml(path)
        try:
            project = parse_project(data, root=path.parent)
        except ConfigError as e:
            raise ConfigError(f"{path}: {e}") from None
        logger.debug(f"Config loaded from: {path}")
        return project

    def load(self, start: Optional[Path] = None) -> ProjectProfile:
        """Find and load the project configuration"""
        return self.load_file(self.find_config_file(start))
