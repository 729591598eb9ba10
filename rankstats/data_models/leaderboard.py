"""
Leaderboard data models.

Provides immutable data transfer objects for leaderboard entries, group
rosters, per-weapon record tables and the composite snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from rankstats.database.models import GroupType


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single individual leaderboard row."""
    position: int  # 1-based position in this leaderboard
    rank: int  # placement stored on the ranking record
    player_id: str
    weapon_id: int
    rating: float
    start_time: Optional[datetime]
    rule_id: Optional[int]
    player_name: Optional[str] = None


@dataclass(frozen=True)
class RosterMember:
    """One member of a team or pair entry."""
    player_id: str
    weapon_id: int
    player_name: Optional[str] = None


@dataclass(frozen=True)
class GroupRoster:
    """A team/pair placement with its resolved members."""
    group_id: str
    start_time: datetime
    rating: float
    members: Tuple[RosterMember, ...]
    rank: Optional[int] = None
    group_type: Optional[GroupType] = None
    rule_id: Optional[int] = None

    @property
    def weapon_ids(self) -> List[int]:
        return sorted(member.weapon_id for member in self.members)


@dataclass(frozen=True)
class WeaponLeaderboard:
    """Top records of one weapon's equivalence class."""
    weapon_id: int
    rule_id: Optional[int]
    entries: List[LeaderboardEntry]
    total_count: int


@dataclass(frozen=True)
class WeaponRecordRow:
    """Highest-ever record per ranked rule for one canonical weapon."""
    weapon_id: int
    # Keyed by every ranked rule id in canonical order; None when unobserved
    top_records: Dict[int, Optional[LeaderboardEntry]]


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """Composite view of the latest leaderboards."""
    period_key: Optional[str]
    x_rankings: Dict[int, List[LeaderboardEntry]] = field(default_factory=dict)
    league_rankings: Dict[str, Dict[int, List[GroupRoster]]] = field(default_factory=dict)
    weapon_records: List[WeaponRecordRow] = field(default_factory=list)
