"""
Group roster resolution for team and pair placements.

A roster is assembled from every record sharing a (group_id, start_time) key.
Member names are best-effort and partial rosters are valid results.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from rankstats.data_models.leaderboard import GroupRoster, RosterMember
from rankstats.data_models.ranking import RankingRecord, ScopeFilter
from rankstats.database.models import RankingType
from rankstats.services.base import BaseService, gather_all

logger = logging.getLogger(__name__)


class GroupRosterResolver(BaseService):
    """Resolves group keys into rosters with player names."""

    async def resolve(
        self,
        group_id: str,
        start_time: datetime,
        representative: Optional[RankingRecord] = None,
    ) -> Optional[GroupRoster]:
        """
        Resolve one group key.

        Args:
            group_id: Opaque group identifier
            start_time: Start time of the placement
            representative: Ranked record standing for the group; its rating
                and rank are reported on the roster when given

        Returns:
            The roster, or None when no record matches the key
        """
        records = await self.fetch(ScopeFilter(
            ranking_type=RankingType.LEAGUE,
            group_id=group_id,
            period=start_time,
        ))
        if not records:
            logger.debug(f"No records for group {group_id} at {start_time}")
            return None

        # One row per player; duplicate rows for the same player collapse
        member_records = {}
        for record in records:
            member_records.setdefault(record.player_id, record)
        ordered = sorted(member_records.values(), key=lambda record: record.player_id)

        names = await self.resolve_names(record.player_id for record in ordered)
        members = tuple(
            RosterMember(
                player_id=record.player_id,
                weapon_id=record.weapon_id,
                player_name=names.get(record.player_id),
            )
            for record in ordered
        )

        head = representative or ordered[0]
        if head.group_type is not None and len(members) < head.group_type.members:
            logger.debug(
                f"Group {group_id} at {start_time} has {len(members)} of "
                f"{head.group_type.members} members"
            )

        return GroupRoster(
            group_id=group_id,
            start_time=start_time,
            rating=head.rating,
            members=members,
            rank=head.rank,
            group_type=head.group_type,
            rule_id=head.rule_id,
        )

    async def resolve_many(
        self,
        keys: Sequence[Tuple[str, datetime]],
    ) -> List[Optional[GroupRoster]]:
        """Resolve several group keys concurrently, preserving input order."""
        return await gather_all([self.resolve(group_id, start_time) for group_id, start_time in keys])

    async def resolve_records(self, records: Sequence[RankingRecord]) -> List[GroupRoster]:
        """
        Resolve the rosters of ranked group records, preserving their order.

        Keys that vanished between the ranking fetch and the roster fetch are dropped.
        """
        rosters = await gather_all([
            self.resolve(record.group_id, record.start_time, representative=record)
            for record in records
        ])
        return [roster for roster in rosters if roster is not None]
