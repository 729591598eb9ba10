"""
In-memory Ranking Store Client.

Implements the same filter contract as SqlRankingStore over plain Python
lists, so the aggregation services can run against fixture data without a
database.
"""

import asyncio
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from rankstats.data_models.ranking import KnownName, RankingRecord, ScopeFilter
from rankstats.database.models import RankingType


class InMemoryRankingStore:
    """RankingStore over an immutable list of records."""

    def __init__(self, records: Iterable[RankingRecord] = ()):
        self._records = tuple(records)
        self.fetch_count = 0

    async def fetch(self, scope: ScopeFilter) -> List[RankingRecord]:
        scope.validate()
        self.fetch_count += 1
        # Suspension point, like a real I/O round trip
        await asyncio.sleep(0)
        return [record for record in self._records if scope.matches(record)]

    async def latest_start_time(self, ranking_type: RankingType) -> Optional[datetime]:
        await asyncio.sleep(0)
        times = [
            record.start_time for record in self._records
            if record.ranking_type is ranking_type and record.start_time is not None
        ]
        return max(times) if times else None

    async def has_records_for_period(self, ranking_type: RankingType, period: datetime) -> bool:
        await asyncio.sleep(0)
        return any(
            record.ranking_type is ranking_type and record.start_time == period
            for record in self._records
        )


class InMemoryNameLookup:
    """NameLookup over a list of known names."""

    def __init__(self, names: Iterable[KnownName] = ()):
        self._names: Dict[str, List[KnownName]] = {}
        for known in names:
            self._names.setdefault(known.player_id, []).append(known)
        for entries in self._names.values():
            entries.sort(key=lambda known: known.player_name)
            entries.sort(key=lambda known: known.last_used, reverse=True)

    @classmethod
    def from_mapping(cls, names: Dict[str, str]) -> "InMemoryNameLookup":
        """One current name per player."""
        stamp = datetime(1970, 1, 1)
        return cls(KnownName(player_id, name, stamp) for player_id, name in names.items())

    async def latest_name(self, player_id: str) -> Optional[str]:
        await asyncio.sleep(0)
        entries = self._names.get(player_id)
        return entries[0].player_name if entries else None

    async def known_names(self, player_id: str) -> List[KnownName]:
        await asyncio.sleep(0)
        return list(self._names.get(player_id, ()))
