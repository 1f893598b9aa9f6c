"""
Configuration adapters
"""
from .loader import ConfigLoader, generate_template, write_template
from .project_parser import parse_host, parse_project

__all__ = [
    "ConfigLoader",
    "generate_template",
    "write_template",
    "parse_host",
    "parse_project",
]
