"""
Weapon popularity aggregation.

Counts ranking records per classification value (canonical weapon, main
reference, sub weapon or special weapon) and reports each value's rank and
share of the total.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from rankstats.data_models.popularity import PopularityBucket
from rankstats.data_models.ranking import RankingRecord, ScopeFilter
from rankstats.database.models import ClassificationDimension
from rankstats.services.base import BaseService
from rankstats.utils.periods import month_range
from rankstats.utils.ranking import RankingUtility
from rankstats.utils.ranking_exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class PopularityService(BaseService):
    """Popularity distributions over classification dimensions."""

    def count_by_classification(
        self,
        records: Iterable[RankingRecord],
        dimension: ClassificationDimension,
    ) -> Dict[int, int]:
        """Occurrences per classification value; unclassifiable records are skipped."""
        counts = Counter()
        skipped = 0
        for record in records:
            value = self.catalog.classification_value(record.weapon_id, dimension)
            if value is None:
                skipped += 1
                continue
            counts[value] += 1
        if skipped:
            logger.debug(f"Skipped {skipped} records with weapons missing from the catalog")
        return dict(counts)

    @staticmethod
    def build_buckets(counts: Dict[int, int]) -> List[PopularityBucket]:
        """
        Rank classification values by count.

        Order is (count desc, value asc) and rank is the 1-based position in
        that order. An empty or all-zero count map yields no buckets.
        """
        total = sum(counts.values())
        if total == 0:
            return []
        ordered = sorted(counts.items(), key=RankingUtility.count_sort_key)
        return [
            PopularityBucket(
                classification_value=value,
                count=count,
                rank=rank,
                percentage=100 * count / total,
            )
            for rank, (value, count) in enumerate(ordered, start=1)
        ]

    async def weapon_popularity(
        self,
        ranking_type,
        dimension,
        period: Optional[datetime] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        rule_id: Optional[int] = None,
        region: Optional[str] = None,
        event_id: Optional[int] = None,
    ) -> List[PopularityBucket]:
        """
        Popularity distribution for one scope.

        The scope is a fixed period, a [start, end) range or a festival
        (region + event_id); a rule of 0 or None means every rule.

        Raises:
            InvalidArgumentError: Unknown dimension or malformed scope
        """
        dimension = ClassificationDimension.parse(dimension)
        scope = ScopeFilter.build(
            ranking_type,
            rule_id=rule_id,
            period=period,
            start=start,
            end=end,
            region=region,
            event_id=event_id,
        )
        if scope.period is None and scope.start is None and scope.event_id is None:
            raise InvalidArgumentError('scope', "a period, a time range or a festival is required")

        records = await self.fetch(scope)
        return self.build_buckets(self.count_by_classification(records, dimension))

    async def monthly_popularity(
        self,
        ranking_type,
        dimension,
        year: int,
        month: int,
        rule_id: Optional[int] = None,
    ) -> List[PopularityBucket]:
        """Popularity distribution over one calendar month."""
        start, end = month_range(year, month)
        return await self.weapon_popularity(ranking_type, dimension, start=start, end=end, rule_id=rule_id)
