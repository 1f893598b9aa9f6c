"""
Layered environment used for ${VAR} substitution
"""
import os
import re
from collections import ChainMap
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from dotenv import dotenv_values

from ...core.constants import DEFAULT_ENV_FILE
from ...core.exceptions import ConfigError
from ...core.logging import get_logger

logger = get_logger(__name__)

ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_env_key(key: str) -> bool:
    """Check if a string is a valid environment variable name"""
    return bool(ENV_KEY_RE.match(key))


def parse_env_file(path: Path) -> Dict[str, str]:
    """
    Parse a single .env file.

    Supported syntax (via python-dotenv, without interpolation):
    KEY=value, KEY="quoted", KEY='single quoted', `export KEY=value`,
    `#` comments and blank lines. Lines without '=' are skipped.

    Raises:
        ConfigError: If a key is not a valid variable name
    """
    values = dotenv_values(path, interpolate=False, encoding="utf-8")
    result: Dict[str, str] = {}
    for key, value in values.items():
        if not is_valid_env_key(key):
            raise ConfigError(f"Invalid environment variable name '{key}' in {path}")
        if value is None:
            continue
        result[key] = value
    return result


class EnvironmentContext(Mapping[str, str]):
    """
    Read-only layered mapping.

    Layers are ordered highest precedence first: the process environment,
    then the configured env files (later files shadow earlier ones), then
    the base .env file.
    """

    def __init__(self, *layers: Mapping[str, str]):
        self._layers = [dict(layer) for layer in layers]
        self._chain = ChainMap(*self._layers)

    @classmethod
    def load(
        cls,
        project_root: Path,
        env_files: Sequence[str] = (),
        environ: Optional[Mapping[str, str]] = None,
    ) -> "EnvironmentContext":
        """
        Build the context for one invocation.

        Args:
            project_root: Directory env file names are relative to
            env_files: Additional env files, in configured order
            environ: Process environment (defaults to os.environ)

        Raises:
            ConfigError: If a configured env file is missing or invalid
        """
        file_layers: List[Dict[str, str]] = []

        base_path = project_root / DEFAULT_ENV_FILE
        if base_path.is_file():
            file_layers.append(parse_env_file(base_path))
            logger.debug(f"Loaded {base_path}")

        for name in env_files:
            path = project_root / name
            if not path.is_file():
                raise ConfigError(
                    f"Environment file not found: {path}. "
                    "Remove it from env_files or create the file."
                )
            file_layers.append(parse_env_file(path))
            logger.debug(f"Loaded {path}")

        process = dict(os.environ if environ is None else environ)
        # ChainMap looks up left to right: highest precedence first
        return cls(process, *reversed(file_layers))

    @property
    def file_variables(self) -> Dict[str, str]:
        """Variables contributed by env files only"""
        merged: Dict[str, str] = {}
        for layer in reversed(self._layers[1:]):
            merged.update(layer)
        return merged

    def flatten(self) -> Dict[str, str]:
        """Single mapping where higher layers shadow lower ones"""
        return dict(self._chain)

    def __getitem__(self, key: str) -> str:
        return self._chain[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._chain)

    def __len__(self) -> int:
        return len(self._chain)
