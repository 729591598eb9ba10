"""
Shared ranking utilities for the leaderboard, popularity and trend services.

All ordering is computed in process over records fetched from the ranking
store, so every service ranks with the same tie-break rules.
"""

from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple, TypeVar

from rankstats.data_models.ranking import RankingRecord
from rankstats.utils.ranking_exceptions import InvalidArgumentError

K = TypeVar('K', bound=Hashable)


class RankingUtility:
    """Shared ranking logic for consistent ordering across services."""

    @staticmethod
    def individual_sort_key(record: RankingRecord) -> Tuple[float, str]:
        """(rating desc, player_id asc)"""
        return (-record.rating, record.player_id)

    @staticmethod
    def sort_individual(records: Iterable[RankingRecord]) -> List[RankingRecord]:
        return sorted(records, key=RankingUtility.individual_sort_key)

    @staticmethod
    def dedupe_group_entries(records: Iterable[RankingRecord]) -> List[RankingRecord]:
        """
        Keep one record per (group_id, rating, start_time).

        Several member rows describe the same group placement; the first one
        seen stands for the group and input order is otherwise preserved.
        """
        seen = set()
        unique = []
        for record in records:
            key = (record.group_id, record.rating, record.start_time)
            if key in seen:
                continue
            seen.add(key)
            unique.append(record)
        return unique

    @staticmethod
    def sort_groups(records: Iterable[RankingRecord]) -> List[RankingRecord]:
        """Rating desc; ties keep their insertion order (sorted is stable)."""
        return sorted(records, key=lambda record: -record.rating)

    @staticmethod
    def best_record_by(
        records: Iterable[RankingRecord],
        key: Callable[[RankingRecord], K],
    ) -> Dict[K, RankingRecord]:
        """Highest-rating record per key, ties broken by player_id ascending."""
        best: Dict[K, RankingRecord] = {}
        for record in records:
            group = key(record)
            current = best.get(group)
            if current is None or (
                RankingUtility.individual_sort_key(record) < RankingUtility.individual_sort_key(current)
            ):
                best[group] = record
        return best

    @staticmethod
    def count_sort_key(item: Tuple[int, int]) -> Tuple[int, int]:
        """(count desc, classification value asc) for (value, count) pairs."""
        value, count = item
        return (-count, value)

    @staticmethod
    def competition_ranks(counts: Dict[int, int]) -> Dict[int, int]:
        """
        1 + number of values with a strictly higher count.

        Equal counts share a rank and the following rank is skipped.
        """
        ranks = {}
        previous_count: Optional[int] = None
        current_rank = 0
        for position, (value, count) in enumerate(
            sorted(counts.items(), key=RankingUtility.count_sort_key), start=1
        ):
            if count != previous_count:
                current_rank = position
                previous_count = count
            ranks[value] = current_rank
        return ranks

    @staticmethod
    def validate_limit(limit: int) -> int:
        """Validate a top-K size."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidArgumentError('limit', "must be a positive integer")
        return limit
