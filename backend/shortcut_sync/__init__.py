"""
Shortcut Sync Module

Keeps container shortcuts in step with the Docker engine.

Architecture:
- match_containers: pure container <-> shortcut pairing
- ShortcutSynchronizer: one reconciliation pass (the only writer)
- IconMigrator: re-resolves icons of existing shortcuts
"""

from shortcut_sync.errors import StorageWriteFailure
from shortcut_sync.matcher import MatchPair, MatchResult, MatchStrategy, AmbiguousMatch, match_containers
from shortcut_sync.synchronizer import ShortcutSynchronizer, SyncResult
from shortcut_sync.icon_migration import IconMigrator, IconMigrationCheck, IconMigrationResult

__all__ = [
    'StorageWriteFailure',
    'MatchPair',
    'MatchResult',
    'MatchStrategy',
    'AmbiguousMatch',
    'match_containers',
    'ShortcutSynchronizer',
    'SyncResult',
    'IconMigrator',
    'IconMigrationCheck',
    'IconMigrationResult',
]
