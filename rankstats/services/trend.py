"""
Weapon usage trends between two periods.

Counts every known classification value in both periods, including values
nobody used, and pairs the counts and ranks of the two periods.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from rankstats.data_models.popularity import TrendEntry
from rankstats.data_models.ranking import ScopeFilter
from rankstats.database.models import ClassificationDimension
from rankstats.services.base import gather_all
from rankstats.services.popularity import PopularityService
from rankstats.utils.periods import parse_month
from rankstats.utils.ranking import RankingUtility
from rankstats.utils.ranking_exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class TrendService(PopularityService):
    """Month-over-month usage deltas."""

    def _universe_counts(self, counts: Dict[int, int], universe) -> Dict[int, int]:
        # Zero-fill the universe; values outside it are not reported
        outside = set(counts) - set(universe)
        if outside:
            logger.debug(f"Ignoring {len(outside)} classification values outside the catalog")
        return {value: counts.get(value, 0) for value in universe}

    async def weapon_trend(
        self,
        ranking_type,
        dimension,
        previous_period: datetime,
        current_period: datetime,
        rule_id: Optional[int] = None,
    ) -> List[TrendEntry]:
        """
        Pair per-value counts and ranks of two periods.

        Ranks are competition ranks (equal counts share a rank), so unused
        values share the lowest tier. Entries are ordered by
        (current_count desc, value asc).

        Raises:
            InvalidArgumentError: Unknown dimension or previous_period >= current_period
        """
        dimension = ClassificationDimension.parse(dimension)
        if previous_period is None or current_period is None or not previous_period < current_period:
            raise InvalidArgumentError('period', "previous period must be strictly before current period")

        previous_scope = ScopeFilter.build(ranking_type, rule_id=rule_id, period=previous_period)
        current_scope = ScopeFilter.build(ranking_type, rule_id=rule_id, period=current_period)
        previous_records, current_records = await gather_all([
            self.fetch(previous_scope),
            self.fetch(current_scope),
        ])

        universe = self.catalog.universe(dimension)
        previous_counts = self._universe_counts(
            self.count_by_classification(previous_records, dimension), universe
        )
        current_counts = self._universe_counts(
            self.count_by_classification(current_records, dimension), universe
        )
        previous_ranks = RankingUtility.competition_ranks(previous_counts)
        current_ranks = RankingUtility.competition_ranks(current_counts)

        entries = [
            TrendEntry(
                classification_value=value,
                previous_count=previous_counts[value],
                previous_rank=previous_ranks[value],
                current_count=current_counts[value],
                current_rank=current_ranks[value],
            )
            for value in universe
        ]
        entries.sort(key=lambda entry: (-entry.current_count, entry.classification_value))
        return entries

    async def monthly_trend(
        self,
        ranking_type,
        dimension,
        previous_month: str,
        current_month: str,
        rule_id: Optional[int] = None,
    ) -> List[TrendEntry]:
        """weapon_trend for two 'YYYY-MM' months."""
        return await self.weapon_trend(
            ranking_type,
            dimension,
            parse_month(previous_month),
            parse_month(current_month),
            rule_id=rule_id,
        )
