"""
Services package for the ranking aggregation engine.

Every service takes a ranking store, the weapon catalog and an optional
name lookup.
"""

from .base import BaseService, gather_all
from .leaderboard import LeaderboardService
from .player_records import PlayerRecordsService
from .popularity import PopularityService
from .roster import GroupRosterResolver
from .snapshot import SnapshotService
from .trend import TrendService

__all__ = [
    'BaseService',
    'gather_all',
    'GroupRosterResolver',
    'LeaderboardService',
    'PlayerRecordsService',
    'PopularityService',
    'SnapshotService',
    'TrendService',
]
