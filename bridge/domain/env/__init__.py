"""
Environment domain module
"""
from .context import EnvironmentContext, parse_env_file, is_valid_env_key
from .substitution import substitute

__all__ = [
    "EnvironmentContext",
    "parse_env_file",
    "is_valid_env_key",
    "substitute",
]
