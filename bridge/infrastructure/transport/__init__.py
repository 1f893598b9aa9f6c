"""
Subprocess transports
"""
from .ssh import SshTransport
from .files import SubprocessFileTransport

__all__ = ["SshTransport", "SubprocessFileTransport"]
