"""
Ranking Store Client

The narrow read interface the aggregation engine uses to reach persisted
ranking records and player names. Implementations only filter; every
grouping, ranking and window computation happens in the services.

Failures are wrapped into UpstreamUnavailableError and propagated. There is
no retry at this layer or above it.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional, Protocol

from sqlalchemy import select, func, exists
from sqlalchemy.exc import SQLAlchemyError

from rankstats.data_models.ranking import KnownName, RankingRecord, ScopeFilter
from rankstats.database.models import GroupType, PlayerKnownName, RankingRecordRow, RankingType
from rankstats.utils.logger import setup_logger
from rankstats.utils.ranking_exceptions import UpstreamUnavailableError

logger = setup_logger(__name__)


class RankingStore(Protocol):
    """Filtered access to ranking records."""

    async def fetch(self, scope: ScopeFilter) -> List[RankingRecord]:
        """Records matching every set field of scope, in no guaranteed order."""
        ...

    async def latest_start_time(self, ranking_type: RankingType) -> Optional[datetime]:
        ...

    async def has_records_for_period(self, ranking_type: RankingType, period: datetime) -> bool:
        ...


class NameLookup(Protocol):
    """Best-effort player display names."""

    async def latest_name(self, player_id: str) -> Optional[str]:
        ...

    async def known_names(self, player_id: str) -> List[KnownName]:
        ...


@asynccontextmanager
async def upstream_call(operation: str):
    """Translate storage failures into UpstreamUnavailableError."""
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Upstream failure during {operation}: {e}", exc_info=True)
        raise UpstreamUnavailableError(operation, str(e)) from e


def _to_record(row: RankingRecordRow) -> RankingRecord:
    return RankingRecord(
        player_id=row.player_id,
        weapon_id=row.weapon_id,
        rating=float(row.rating),
        rank=row.rank,
        start_time=row.start_time,
        rule_id=row.rule_id,
        ranking_type=RankingType(row.ranking_type),
        group_id=row.group_id,
        group_type=GroupType(row.group_type) if row.group_type else None,
        region=row.region,
        event_id=row.event_id,
    )


class SqlRankingStore:
    """RankingStore backed by the ranking_records table."""

    def __init__(self, session_factory):
        """
        Args:
            session_factory: Async session factory from Database class
        """
        self.session_factory = session_factory

    @staticmethod
    def _build_query(scope: ScopeFilter):
        query = select(RankingRecordRow).where(
            RankingRecordRow.ranking_type == scope.ranking_type.value
        )
        if scope.rule_id is not None:
            query = query.where(RankingRecordRow.rule_id == scope.rule_id)
        if scope.weapon_ids is not None:
            query = query.where(RankingRecordRow.weapon_id.in_(sorted(scope.weapon_ids)))
        if scope.period is not None:
            query = query.where(RankingRecordRow.start_time == scope.period)
        if scope.start is not None:
            query = query.where(
                RankingRecordRow.start_time >= scope.start,
                RankingRecordRow.start_time < scope.end,
            )
        if scope.group_type is not None:
            query = query.where(RankingRecordRow.group_type == scope.group_type.value)
        if scope.region is not None:
            query = query.where(RankingRecordRow.region == scope.region)
        if scope.event_id is not None:
            query = query.where(RankingRecordRow.event_id == scope.event_id)
        if scope.group_id is not None:
            query = query.where(RankingRecordRow.group_id == scope.group_id)
        if scope.player_id is not None:
            query = query.where(RankingRecordRow.player_id == scope.player_id)
        # Ingestion order
        return query.order_by(RankingRecordRow.id)

    async def fetch(self, scope: ScopeFilter) -> List[RankingRecord]:
        scope.validate()
        async with upstream_call('fetch'):
            async with self.session_factory() as session:
                result = await session.execute(self._build_query(scope))
                rows = result.scalars().all()
        logger.debug(f"Fetched {len(rows)} {scope.ranking_type.value} records")
        return [_to_record(row) for row in rows]

    async def latest_start_time(self, ranking_type: RankingType) -> Optional[datetime]:
        async with upstream_call('latest_start_time'):
            async with self.session_factory() as session:
                return await session.scalar(
                    select(func.max(RankingRecordRow.start_time))
                    .where(RankingRecordRow.ranking_type == ranking_type.value)
                )

    async def has_records_for_period(self, ranking_type: RankingType, period: datetime) -> bool:
        async with upstream_call('has_records_for_period'):
            async with self.session_factory() as session:
                found = await session.scalar(
                    select(exists().where(
                        RankingRecordRow.ranking_type == ranking_type.value,
                        RankingRecordRow.start_time == period,
                    ))
                )
        return bool(found)


class SqlNameLookup:
    """NameLookup backed by the player_known_names table."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def latest_name(self, player_id: str) -> Optional[str]:
        async with upstream_call('latest_name'):
            async with self.session_factory() as session:
                return await session.scalar(
                    select(PlayerKnownName.player_name)
                    .where(PlayerKnownName.player_id == player_id)
                    .order_by(PlayerKnownName.last_used.desc(), PlayerKnownName.player_name.asc())
                    .limit(1)
                )

    async def known_names(self, player_id: str) -> List[KnownName]:
        async with upstream_call('known_names'):
            async with self.session_factory() as session:
                result = await session.execute(
                    select(PlayerKnownName)
                    .where(PlayerKnownName.player_id == player_id)
                    .order_by(PlayerKnownName.last_used.desc(), PlayerKnownName.player_name.asc())
                )
                rows = result.scalars().all()
        return [
            KnownName(player_id=row.player_id, player_name=row.player_name, last_used=row.last_used)
            for row in rows
        ]
