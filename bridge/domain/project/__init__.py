"""
Project domain module
"""
from .models import Shell, SyncMethod, LockSetting, HostProfile, ProjectProfile

__all__ = ["Shell", "SyncMethod", "LockSetting", "HostProfile", "ProjectProfile"]
