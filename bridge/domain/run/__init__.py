"""
Run domain module
"""
from .models import RunOptions, ResolvedRun
from .service import RunService

__all__ = ["RunOptions", "ResolvedRun", "RunService"]
