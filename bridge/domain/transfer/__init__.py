"""
Transfer domain module
"""
from .service import TransferService, TransferRequest, is_verbatim_remote_path

__all__ = ["TransferService", "TransferRequest", "is_verbatim_remote_path"]
