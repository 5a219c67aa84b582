"""
Sync pipeline: merging, per-source orchestration and the daemon loop.
"""

from .daemon import SyncDaemon
from .engine import SourceSync, SourceSyncResult, SyncEngine, SyncPhase
from .merge import MergeResult, collections_equal, merge_by_identity, merge_source

__all__ = [
    'SyncDaemon',
    'SourceSync',
    'SourceSyncResult',
    'SyncEngine',
    'SyncPhase',
    'MergeResult',
    'collections_equal',
    'merge_by_identity',
    'merge_source',
]
