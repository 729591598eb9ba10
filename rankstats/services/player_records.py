"""
Player ranking history and known names.
"""

import logging
from datetime import datetime
from typing import List, Optional

from rankstats.data_models.player import PlayerRankingHistory, PlayerRankingRecord
from rankstats.data_models.ranking import KnownName, RankingRecord, ScopeFilter
from rankstats.database.models import RankingType
from rankstats.services.base import BaseService, gather_all
from rankstats.services.roster import GroupRosterResolver

logger = logging.getLogger(__name__)


def _newest_first(records: List[RankingRecord]) -> List[RankingRecord]:
    return sorted(records, key=lambda record: record.start_time or datetime.min, reverse=True)


class PlayerRecordsService(BaseService):
    """Per-player views over the ranking store."""

    def __init__(self, store, catalog, names=None, roster_resolver: Optional[GroupRosterResolver] = None):
        super().__init__(store, catalog, names)
        self.rosters = roster_resolver or GroupRosterResolver(store, catalog, names)

    async def ranking_history(self, ranking_type, player_id: str) -> PlayerRankingHistory:
        """
        Every record of a player for one ranking type, newest first.

        x records are ordered by (start_time desc, rule_id asc). League
        records carry the other members of their group; the teammates tuple
        is empty when the rest of the group is missing from the store.
        """
        scope = ScopeFilter.build(ranking_type, player_id=player_id)
        records = await self.fetch(scope)

        if scope.ranking_type is RankingType.X:
            records = sorted(records, key=lambda record: record.rule_id or 0)
        records = _newest_first(records)

        if scope.ranking_type is RankingType.LEAGUE:
            entries = await gather_all([self._with_teammates(record) for record in records])
        else:
            entries = [PlayerRankingRecord(record=record) for record in records]

        return PlayerRankingHistory(player_id=player_id, ranking_type=scope.ranking_type, records=entries)

    async def _with_teammates(self, record: RankingRecord) -> PlayerRankingRecord:
        roster = await self.rosters.resolve(record.group_id, record.start_time, representative=record)
        if roster is None:
            return PlayerRankingRecord(record=record)
        teammates = tuple(member for member in roster.members if member.player_id != record.player_id)
        if not teammates:
            logger.debug(f"No teammates stored for {record.player_id} in group {record.group_id}")
        return PlayerRankingRecord(record=record, teammates=teammates)

    async def known_names(self, player_id: str) -> List[KnownName]:
        """Every name a player has used, most recent first."""
        if self.names is None:
            return []
        return await self.names.known_names(player_id)
