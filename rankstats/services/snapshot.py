"""
Snapshot aggregation service.

Builds the composite "latest leaderboards" view in one structured fan-out:
top x records per ranked rule, top rosters per (group type, rule) and the
highest-ever weapon record table. The record table only changes when a new
x period lands, so it is memoized per period key.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

from rankstats.config import Config
from rankstats.constants import RuleConstants
from rankstats.data_models.leaderboard import LeaderboardSnapshot, WeaponRecordRow
from rankstats.database.models import GroupType, RankingType
from rankstats.services.base import BaseService, gather_all
from rankstats.services.leaderboard import LeaderboardService
from rankstats.utils.logger import setup_logger
from rankstats.utils.periods import period_key

logger = setup_logger(__name__)

SNAPSHOT_GROUP_TYPES = (GroupType.TEAM, GroupType.PAIR)


class SnapshotService(BaseService):
    """Composite leaderboard snapshot with a per-period record table memo."""

    def __init__(
        self,
        store,
        catalog,
        names=None,
        leaderboards: Optional[LeaderboardService] = None,
        cache_max_size: Optional[int] = None,
    ):
        super().__init__(store, catalog, names)
        self.leaderboards = leaderboards or LeaderboardService(store, catalog, names)
        self._cache: Dict[str, List[WeaponRecordRow]] = {}
        self._cache_lock = asyncio.Lock()
        self._cache_max_size = cache_max_size or Config.SNAPSHOT_CACHE_MAX_SIZE

    async def build_snapshot(self) -> LeaderboardSnapshot:
        """
        Build the composite snapshot.

        All sub-queries run concurrently. If any of them fails the others are
        cancelled, the original exception propagates and nothing is cached.

        Returns:
            LeaderboardSnapshot with rules in canonical order and group types
            ordered team then pair
        """
        logger.debug("Building leaderboard snapshot")
        rule_ids = RuleConstants.RANKED_RULE_IDS
        group_keys = [
            (group_type, rule_id)
            for group_type in SNAPSHOT_GROUP_TYPES
            for rule_id in rule_ids
        ]

        results = await gather_all(
            [self.leaderboards.rule_top_records(rule_id) for rule_id in rule_ids]
            + [
                self.leaderboards.group_top_rosters(rule_id, group_type)
                for group_type, rule_id in group_keys
            ]
            + [self.weapon_records()]
        )

        x_results = results[:len(rule_ids)]
        group_results = results[len(rule_ids):-1]
        key, weapon_records = results[-1]

        x_rankings = {rule_id: entries for rule_id, entries in zip(rule_ids, x_results)}
        league_rankings = {group_type.key: {} for group_type in SNAPSHOT_GROUP_TYPES}
        for (group_type, rule_id), rosters in zip(group_keys, group_results):
            league_rankings[group_type.key][rule_id] = rosters

        logger.debug(f"Snapshot built for period {key}")
        return LeaderboardSnapshot(
            period_key=key,
            x_rankings=x_rankings,
            league_rankings=league_rankings,
            weapon_records=weapon_records,
        )

    async def weapon_records(self) -> Tuple[Optional[str], List[WeaponRecordRow]]:
        """
        Highest-ever weapon record table for the latest x period.

        Computed at most once per period key; concurrent callers wait on the
        lock and reuse the stored table. A store without x records has no
        period key and the table is computed without being stored.
        """
        latest = await self.store.latest_start_time(RankingType.X)
        if latest is None:
            logger.debug("No x rankings stored, computing record table without caching")
            return None, await self.leaderboards.weapon_record_table()

        key = period_key(latest)
        async with self._cache_lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for weapon record table {key}")
                return key, cached

            logger.debug(f"Cache miss for weapon record table {key}, calculating fresh")
            table = await self.leaderboards.weapon_record_table()
            self._cache[key] = table
            if len(self._cache) > self._cache_max_size:
                self._cleanup_cache()
            return key, table

    def _cleanup_cache(self):
        # Period keys sort chronologically
        for key in sorted(self._cache)[:len(self._cache) - self._cache_max_size]:
            logger.debug(f"Evicting weapon record table {key}")
            del self._cache[key]

    def clear_cache(self):
        """Drop every memoized record table."""
        logger.info("Clearing weapon record table cache")
        self._cache.clear()

    @property
    def cached_periods(self) -> List[str]:
        return sorted(self._cache)
