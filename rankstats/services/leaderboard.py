"""
Leaderboard service for weapon, rule and period leaderboards.

Expands weapons through their equivalence class, fetches matching records
from the ranking store and ranks them in process. Grouped (team/pair)
leaderboards are deduplicated per group placement and carry resolved rosters.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from rankstats.config import Config
from rankstats.constants import RankingConstants, RuleConstants
from rankstats.data_models.leaderboard import (
    GroupRoster, LeaderboardEntry, WeaponLeaderboard, WeaponRecordRow
)
from rankstats.data_models.ranking import RankingRecord, ScopeFilter
from rankstats.database.models import GroupType, RankingType
from rankstats.services.base import BaseService
from rankstats.services.roster import GroupRosterResolver
from rankstats.utils.ranking import RankingUtility
from rankstats.utils.ranking_exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class LeaderboardService(BaseService):
    """Top-K selection over ranking records."""

    def __init__(self, store, catalog, names=None, roster_resolver: Optional[GroupRosterResolver] = None):
        super().__init__(store, catalog, names)
        self.rosters = roster_resolver or GroupRosterResolver(store, catalog, names)

    @staticmethod
    def _limit(limit: Optional[int], rule_id: Optional[int]) -> int:
        if limit is None:
            if rule_id:
                return Config.LEADERBOARD_RECORD_COUNT
            # All rules share one longer list
            return RankingConstants.ALL_RULES_RECORD_COUNT
        return RankingUtility.validate_limit(limit)

    @staticmethod
    def _group_limit(limit: Optional[int]) -> int:
        if limit is None:
            return Config.LEADERBOARD_RECORD_COUNT
        return RankingUtility.validate_limit(limit)

    async def _to_entries(self, records: List[RankingRecord], ranked: bool = True) -> List[LeaderboardEntry]:
        names = await self.resolve_names(record.player_id for record in records)
        return [
            LeaderboardEntry(
                position=position if ranked else 1,
                rank=record.rank,
                player_id=record.player_id,
                weapon_id=record.weapon_id,
                rating=record.rating,
                start_time=record.start_time,
                rule_id=record.rule_id,
                player_name=names.get(record.player_id),
            )
            for position, record in enumerate(records, start=1)
        ]

    async def _to_entry_map(self, records: Dict) -> Dict:
        # Each entry is the best of its own slot, so every position is 1
        keys = list(records)
        entries = await self._to_entries([records[key] for key in keys], ranked=False)
        return dict(zip(keys, entries))

    async def _top_groups(self, records: Iterable[RankingRecord], limit: int) -> List[GroupRoster]:
        ranked = RankingUtility.sort_groups(RankingUtility.dedupe_group_entries(records))
        return await self.rosters.resolve_records(ranked[:limit])

    def _expand_all(self, weapon_ids: Iterable[int]) -> frozenset:
        expanded = set()
        for weapon_id in weapon_ids:
            expanded |= self.catalog.index.expand(weapon_id)
        return frozenset(expanded)

    # Single weapon

    async def top_weapon_records(
        self,
        rule_id: Optional[int],
        weapon_id: int,
        limit: Optional[int] = None,
        ranking_type: RankingType = RankingType.X,
    ) -> List[LeaderboardEntry]:
        """
        Top individual records of a weapon's equivalence class.

        Sorted by (rating desc, player_id asc). A missing rule means every rule.
        """
        return (await self.weapon_leaderboard(rule_id, weapon_id, limit, ranking_type)).entries

    async def weapon_leaderboard(
        self,
        rule_id: Optional[int],
        weapon_id: int,
        limit: Optional[int] = None,
        ranking_type: RankingType = RankingType.X,
    ) -> WeaponLeaderboard:
        """Top individual records of a weapon plus the number of matching records."""
        limit = self._limit(limit, rule_id)
        scope = ScopeFilter.build(
            ranking_type,
            rule_id=rule_id,
            weapon_ids=self.catalog.index.expand(weapon_id),
        )
        records = await self.fetch(scope)
        top = RankingUtility.sort_individual(records)[:limit]
        return WeaponLeaderboard(
            weapon_id=weapon_id,
            rule_id=scope.rule_id,
            entries=await self._to_entries(top),
            total_count=len(records),
        )

    async def count_weapon_records(
        self,
        rule_id: Optional[int],
        weapon_id: int,
        ranking_type: RankingType = RankingType.X,
    ) -> int:
        scope = ScopeFilter.build(
            ranking_type,
            rule_id=rule_id,
            weapon_ids=self.catalog.index.expand(weapon_id),
        )
        return len(await self.fetch(scope))

    async def top_weapon_groups(
        self,
        rule_id: Optional[int],
        group_type: GroupType,
        weapon_id: int,
        limit: Optional[int] = None,
    ) -> List[GroupRoster]:
        """
        Top team/pair placements in which a member used the weapon's class.

        Rows describing the same (group_id, rating, start_time) count once.
        """
        limit = self._group_limit(limit)
        scope = ScopeFilter.build(
            RankingType.LEAGUE,
            rule_id=rule_id,
            group_type=group_type,
            weapon_ids=self.catalog.index.expand(weapon_id),
        )
        return await self._top_groups(await self.fetch(scope), limit)

    # Weapon sets

    async def top_weapon_set_records(
        self,
        rule_id: Optional[int],
        weapon_ids: Iterable[int],
        limit: Optional[int] = None,
        ranking_type: RankingType = RankingType.X,
    ) -> List[LeaderboardEntry]:
        """Top individual records over the union of several equivalence classes."""
        weapon_ids = list(weapon_ids)
        if not weapon_ids:
            raise InvalidArgumentError('weapon_ids', "at least one weapon id is required")
        limit = self._limit(limit, rule_id)
        scope = ScopeFilter.build(ranking_type, rule_id=rule_id, weapon_ids=self._expand_all(weapon_ids))
        top = RankingUtility.sort_individual(await self.fetch(scope))[:limit]
        return await self._to_entries(top)

    async def top_weapon_set_groups(
        self,
        rule_id: Optional[int],
        group_type: GroupType,
        weapon_ids: Iterable[int],
        limit: Optional[int] = None,
    ) -> List[GroupRoster]:
        """
        Top team/pair placements whose composition matches a weapon multiset.

        A group matches when all of its members' weapons, canonicalized and sorted,
        equal the canonicalized and sorted request.
        """
        weapon_ids = list(weapon_ids)
        if not weapon_ids:
            raise InvalidArgumentError('weapon_ids', "at least one weapon id is required")
        limit = self._group_limit(limit)
        index = self.catalog.index
        target = index.canonicalize(weapon_ids)

        scope = ScopeFilter.build(
            RankingType.LEAGUE,
            rule_id=rule_id,
            group_type=group_type,
            weapon_ids=self._expand_all(weapon_ids),
        )
        # The weapon filter only selects candidate groups; compositions are
        # compared on the full rosters, including members on other weapons
        candidates = RankingUtility.sort_groups(
            RankingUtility.dedupe_group_entries(await self.fetch(scope))
        )
        rosters = await self.rosters.resolve_records(candidates)

        matching = [roster for roster in rosters if index.canonicalize(roster.weapon_ids) == target]
        logger.debug(f"{len(matching)} of {len(rosters)} groups match composition {target}")
        return matching[:limit]

    # Per-weapon bests

    async def top_players_for_period(
        self,
        rule_id: int,
        period: datetime,
        weapon_ids: Iterable[int],
    ) -> Dict[int, LeaderboardEntry]:
        """
        Best record of each exact weapon id (no reskin expansion) in one period.

        Ties are broken by player_id ascending. Weapons without records are absent.
        """
        weapon_ids = list(dict.fromkeys(weapon_ids))
        if not weapon_ids:
            return {}
        scope = ScopeFilter.build(RankingType.X, rule_id=rule_id, period=period, weapon_ids=weapon_ids)
        best = RankingUtility.best_record_by(await self.fetch(scope), key=lambda record: record.weapon_id)
        return await self._to_entry_map({
            weapon_id: best[weapon_id] for weapon_id in weapon_ids if weapon_id in best
        })

    def _rule_slots(self, best: Dict[int, LeaderboardEntry]) -> Dict[int, Optional[LeaderboardEntry]]:
        return {rule_id: best.get(rule_id) for rule_id in RuleConstants.RANKED_RULE_IDS}

    async def weapon_top_records(self, weapon_id: int) -> WeaponRecordRow:
        """Highest-ever record of a weapon's class for every ranked rule."""
        canonical_id = self.catalog.index.canonical_of(weapon_id)
        scope = ScopeFilter.build(RankingType.X, weapon_ids=self.catalog.index.members_of(canonical_id))
        records = [
            record for record in await self.fetch(scope)
            if record.rule_id in RuleConstants.RANKED_RULE_IDS
        ]
        best = RankingUtility.best_record_by(records, key=lambda record: record.rule_id)
        entries = await self._to_entry_map(best)
        return WeaponRecordRow(weapon_id=canonical_id, top_records=self._rule_slots(entries))

    async def weapon_record_table(self) -> List[WeaponRecordRow]:
        """
        Highest-ever record per (ranked rule, canonical weapon) over all periods.

        Every canonical weapon of the catalog gets a row, ordered by weapon id;
        rules never observed for a weapon hold None.
        """
        index = self.catalog.index
        records = [
            record for record in await self.fetch(ScopeFilter(ranking_type=RankingType.X))
            if record.rule_id in RuleConstants.RANKED_RULE_IDS
        ]
        best = RankingUtility.best_record_by(
            records, key=lambda record: (index.canonical_of(record.weapon_id), record.rule_id)
        )
        entries = await self._to_entry_map(best)

        by_weapon: Dict[int, Dict[int, LeaderboardEntry]] = {}
        for (canonical_id, rule_id), entry in entries.items():
            by_weapon.setdefault(canonical_id, {})[rule_id] = entry

        weapon_ids = sorted(set(self.catalog.canonical_weapon_ids()) | set(by_weapon))
        return [
            WeaponRecordRow(weapon_id=weapon_id, top_records=self._rule_slots(by_weapon.get(weapon_id, {})))
            for weapon_id in weapon_ids
        ]

    # Rule leaderboards

    async def rule_top_records(
        self,
        rule_id: int,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """Top individual x records of a rule across all periods."""
        limit = self._group_limit(limit)
        scope = ScopeFilter.build(RankingType.X, rule_id=rule_id)
        top = RankingUtility.sort_individual(await self.fetch(scope))[:limit]
        return await self._to_entries(top)

    async def group_top_rosters(
        self,
        rule_id: int,
        group_type: GroupType,
        limit: Optional[int] = None,
    ) -> List[GroupRoster]:
        """Top deduplicated team/pair placements of a rule with rosters."""
        limit = self._group_limit(limit)
        scope = ScopeFilter.build(RankingType.LEAGUE, rule_id=rule_id, group_type=group_type)
        return await self._top_groups(await self.fetch(scope), limit)

    # Period rankings

    async def period_ranking(self, rule_id: int, period: datetime) -> List[LeaderboardEntry]:
        """Monthly x ranking of a rule ordered by (rank asc, player_id asc)."""
        scope = ScopeFilter.build(RankingType.X, rule_id=rule_id, period=period)
        records = sorted(await self.fetch(scope), key=lambda record: (record.rank, record.player_id))
        return await self._to_entries(records)

    async def league_ranking(self, start_time: datetime, group_type: GroupType) -> List[GroupRoster]:
        """All group placements of one league slot ordered by rank."""
        scope = ScopeFilter.build(RankingType.LEAGUE, period=start_time, group_type=group_type)
        unique = RankingUtility.dedupe_group_entries(await self.fetch(scope))
        ranked = sorted(unique, key=lambda record: record.rank)
        return await self.rosters.resolve_records(ranked)

    async def festival_ranking(self, region: str, event_id: int) -> List[LeaderboardEntry]:
        """Festival ranking of one region ordered by (rank asc, player_id asc)."""
        scope = ScopeFilter.build(RankingType.SPLATFEST, region=region, event_id=event_id)
        records = sorted(await self.fetch(scope), key=lambda record: (record.rank, record.player_id))
        return await self._to_entries(records)
