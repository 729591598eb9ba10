"""
Player data models.

Provides immutable data transfer objects for a player's ranking history and
the weapon catalog listing.
"""

from dataclasses import dataclass
from typing import List, Tuple

from rankstats.data_models.leaderboard import RosterMember
from rankstats.data_models.ranking import RankingRecord
from rankstats.database.models import RankingType


@dataclass(frozen=True)
class PlayerRankingRecord:
    """A player's own record plus the other members of its group, if any."""
    record: RankingRecord
    teammates: Tuple[RosterMember, ...] = ()


@dataclass(frozen=True)
class PlayerRankingHistory:
    """All records of one player for one ranking type, newest first."""
    player_id: str
    ranking_type: RankingType
    records: List[PlayerRankingRecord]


@dataclass(frozen=True)
class WeaponListing:
    """Catalog entry for a canonical weapon."""
    weapon_id: int
    is_variant: bool
    weapon_class: str
