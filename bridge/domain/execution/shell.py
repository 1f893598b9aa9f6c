"""
Command wrapper and shell adapters

A host's final command is built in three steps: substitute ${VAR} in the
command and the wrapper, put the command into the wrapper's `{}`
placeholders, then prefix a shell-specific `cd` into the host path.
"""
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

from ..env import substitute
from ..project.models import HostProfile, Shell

WRAPPER_PLACEHOLDER = "{}"


def apply_wrapper(command: str, wrapper: Optional[str]) -> str:
    """
    Replace every `{}` in wrapper with command.

    Wrappers without a placeholder are used as they are; no wrapper means
    the command itself.
    """
    if wrapper is None:
        return command
    return wrapper.replace(WRAPPER_PLACEHOLDER, command)


class ShellAdapter(ABC):
    """Quoting and directory handling for one remote shell"""

    shell: Shell

    @abstractmethod
    def adapt(self, path: str, command: str) -> str:
        """Return command prefixed so it runs inside path"""

    @abstractmethod
    def mkdir(self, path: str) -> str:
        """Return a command creating path (and parents), succeeding if it exists"""

    def extract_archive(self, path: str) -> str:
        """Command unpacking a gzip tar from stdin into path"""
        return self.adapt(path, "tar -xzf -")

    @property
    def interactive_shell(self) -> str:
        """Program started by `bridge ssh`"""
        return self.shell.value


class BashAdapter(ShellAdapter):
    shell = Shell.BASH

    @staticmethod
    def quote_path(path: str) -> str:
        # Variables like $HOME expand; command substitution stays literal
        escaped = path.replace("\\", "\\\\").replace('"', '\\"')
        escaped = escaped.replace("`", "\\`").replace("$(", "\\$(")
        return '"' + escaped + '"'

    def adapt(self, path: str, command: str) -> str:
        return f"cd {self.quote_path(path)} && {command}"

    def mkdir(self, path: str) -> str:
        return f"mkdir -p {self.quote_path(path)}"


class PowerShellAdapter(ShellAdapter):
    shell = Shell.POWERSHELL

    @staticmethod
    def quote_path(path: str) -> str:
        return "'" + path.replace("'", "''") + "'"

    @staticmethod
    def _invoke(script: str) -> str:
        return 'powershell -Command "' + script.replace('"', '\\"') + '"'

    def adapt(self, path: str, command: str) -> str:
        return self._invoke(f"cd {self.quote_path(path)}; {command}")

    def mkdir(self, path: str) -> str:
        return self._invoke(
            f"New-Item -ItemType Directory -Force -Path {self.quote_path(path)} | Out-Null"
        )


class CmdAdapter(ShellAdapter):
    shell = Shell.CMD

    @staticmethod
    def quote_path(path: str) -> str:
        # '"' cannot appear in a Windows path
        return '"' + path.replace("/", "\\").replace('"', "") + '"'

    def adapt(self, path: str, command: str) -> str:
        return f"cd /d {self.quote_path(path)} && {command}"

    def mkdir(self, path: str) -> str:
        return f"mkdir {self.quote_path(path)} 2>nul || echo."


_ADAPTERS: Dict[Shell, ShellAdapter] = {
    Shell.BASH: BashAdapter(),
    Shell.POWERSHELL: PowerShellAdapter(),
    Shell.CMD: CmdAdapter(),
}


def get_adapter(shell: Shell) -> ShellAdapter:
    """Adapter for a shell kind"""
    return _ADAPTERS[Shell(shell)]


def build_remote_command(
    host: HostProfile,
    command: str,
    context: Mapping[str, str],
) -> str:
    """
    Build the final string handed to the remote-execution transport.

    Processing order:
    1. Substitute environment variables in command
    2. Substitute environment variables in wrapper (if present)
    3. Apply wrapper template (command replaces {} placeholders)
    4. Prefix with shell-specific cd to the host path

    Raises:
        SubstitutionError: If a required variable is missing under strict_env
    """
    command = substitute(command, context, strict=host.strict_env, source="command")
    wrapper = None
    if host.wrapper is not None:
        wrapper = substitute(host.wrapper, context, strict=host.strict_env, source="wrapper")
    wrapped = apply_wrapper(command, wrapper)
    return get_adapter(host.shell).adapt(host.path, wrapped)
