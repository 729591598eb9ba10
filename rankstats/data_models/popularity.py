from dataclasses import dataclass


@dataclass(frozen=True)
class PopularityBucket:
    """Usage count of one classification value within a scope."""
    classification_value: int
    count: int
    rank: int
    percentage: float


@dataclass(frozen=True)
class TrendEntry:
    """Usage of one classification value in two periods."""
    classification_value: int
    previous_count: int
    previous_rank: int
    current_count: int
    current_rank: int

    @property
    def count_delta(self) -> int:
        return self.current_count - self.previous_count

    @property
    def rank_delta(self) -> int:
        """Positive when the value climbed."""
        return self.previous_rank - self.current_rank
