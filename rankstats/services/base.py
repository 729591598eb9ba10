"""
Base service class for the ranking aggregation engine.

Provides access to the ranking store, the name lookup and the static weapon
catalog, plus structured fan-out over concurrent sub-queries.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional

from rankstats.data_models.ranking import RankingRecord, ScopeFilter
from rankstats.database.store import NameLookup, RankingStore
from rankstats.operations.weapon_index import WeaponCatalog

logger = logging.getLogger(__name__)


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    exc = group.exceptions[0]
    while isinstance(exc, BaseExceptionGroup):
        exc = exc.exceptions[0]
    return exc


async def gather_all(awaitables: List[Awaitable[Any]]) -> List[Any]:
    """
    Run awaitables concurrently in a task group and return results in input order.

    The first failure cancels the remaining tasks and is re-raised as-is
    rather than wrapped in an exception group.
    """
    tasks = []
    try:
        async with asyncio.TaskGroup() as tg:
            for awaitable in awaitables:
                tasks.append(tg.create_task(awaitable))
    except BaseExceptionGroup as group:
        raise _first_leaf(group) from None
    return [task.result() for task in tasks]


class BaseService:
    """Base class for all aggregation services."""

    def __init__(self, store: RankingStore, catalog: WeaponCatalog, names: Optional[NameLookup] = None):
        """
        Initialize base service with its collaborators.

        Args:
            store: Ranking store client used for every record fetch
            catalog: Static weapon catalog (shared, read-only)
            names: Optional name lookup; without it every name is absent
        """
        self.store = store
        self.catalog = catalog
        self.names = names

    async def fetch(self, scope: ScopeFilter) -> List[RankingRecord]:
        """Fetch records for a scope. Failures propagate untouched."""
        records = await self.store.fetch(scope)
        logger.debug(f"{type(self).__name__} fetched {len(records)} records for {scope}")
        return records

    async def resolve_names(self, player_ids: Iterable[str]) -> Dict[str, Optional[str]]:
        """Latest known name per player; players without a name map to None."""
        unique_ids = list(dict.fromkeys(player_ids))
        if self.names is None or not unique_ids:
            return {player_id: None for player_id in unique_ids}
        resolved = await gather_all([self.names.latest_name(player_id) for player_id in unique_ids])
        return dict(zip(unique_ids, resolved))
