"""
Sync domain module
"""
from .models import FileEntry, SyncPlan, TransferSummary
from .matcher import ExcludeMatcher, collect_entries, effective_excludes
from .strategies import SyncStrategy, FullCopyStrategy, IncrementalStrategy, select_strategy
from .service import SyncService

__all__ = [
    "FileEntry",
    "SyncPlan",
    "TransferSummary",
    "ExcludeMatcher",
    "collect_entries",
    "effective_excludes",
    "SyncStrategy",
    "FullCopyStrategy",
    "IncrementalStrategy",
    "select_strategy",
    "SyncService",
]
