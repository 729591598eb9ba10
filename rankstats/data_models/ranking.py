"""
Ranking record data models.

Provides immutable data transfer objects for raw ranking records, the scope
filter accepted by the ranking store, and weapon reference attributes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Iterable, Optional, Tuple

from rankstats.constants import RegionConstants, RuleConstants
from rankstats.database.models import GroupType, RankingType
from rankstats.utils.ranking_exceptions import InvalidArgumentError


@dataclass(frozen=True)
class RankingRecord:
    """One competitive placement as supplied by the ranking store."""
    player_id: str
    weapon_id: int
    rating: float
    rank: int
    start_time: Optional[datetime]
    rule_id: Optional[int] = None
    ranking_type: RankingType = RankingType.X
    group_id: Optional[str] = None
    group_type: Optional[GroupType] = None
    region: Optional[str] = None
    event_id: Optional[int] = None

    @property
    def group_key(self) -> Tuple[Optional[str], Optional[datetime]]:
        return (self.group_id, self.start_time)


@dataclass(frozen=True)
class WeaponAttributes:
    """Static reference attributes of a weapon."""
    weapon_id: int
    sub_weapon_id: int
    special_weapon_id: int
    main_reference: int
    reskin_of: Optional[int] = None


@dataclass(frozen=True)
class KnownName:
    """A name a player has been observed with."""
    player_id: str
    player_name: str
    last_used: datetime


@dataclass(frozen=True)
class ScopeFilter:
    """
    Filter accepted by RankingStore.fetch.

    Every field except ranking_type is optional and an unset field means
    "no constraint". A record matches only if it satisfies all set fields.
    """
    ranking_type: RankingType
    rule_id: Optional[int] = None
    weapon_ids: Optional[FrozenSet[int]] = None
    period: Optional[datetime] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    group_type: Optional[GroupType] = None
    region: Optional[str] = None
    event_id: Optional[int] = None
    group_id: Optional[str] = None
    player_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        ranking_type,
        rule_id: Optional[int] = None,
        weapon_ids: Optional[Iterable[int]] = None,
        period: Optional[datetime] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        group_type=None,
        region: Optional[str] = None,
        event_id: Optional[int] = None,
        group_id: Optional[str] = None,
        player_id: Optional[str] = None,
    ) -> "ScopeFilter":
        """Normalize loosely typed arguments into a validated scope."""
        scope = cls(
            ranking_type=RankingType.parse(ranking_type),
            rule_id=RuleConstants.normalize_rule_id(rule_id),
            weapon_ids=frozenset(weapon_ids) if weapon_ids is not None else None,
            period=period,
            start=start,
            end=end,
            group_type=GroupType.parse(group_type) if group_type is not None else None,
            region=region,
            event_id=event_id,
            group_id=group_id,
            player_id=player_id,
        )
        scope.validate()
        return scope

    def validate(self):
        """Raise InvalidArgumentError if the scope is malformed."""
        if not isinstance(self.ranking_type, RankingType):
            raise InvalidArgumentError('ranking_type', f"unknown ranking type {self.ranking_type!r}")
        if self.period is not None and (self.start is not None or self.end is not None):
            raise InvalidArgumentError('scope', "period and time range are mutually exclusive")
        if (self.start is None) != (self.end is None):
            raise InvalidArgumentError('scope', "time range needs both start and end")
        if self.start is not None and self.start >= self.end:
            raise InvalidArgumentError('scope', "time range start must be before end")
        if (self.region is None) != (self.event_id is None):
            raise InvalidArgumentError('scope', "region and event_id must be given together")
        if self.region is not None and self.region not in RegionConstants.REGIONS:
            raise InvalidArgumentError('region', f"unknown region {self.region!r}")
        if self.weapon_ids is not None and not self.weapon_ids:
            raise InvalidArgumentError('weapon_ids', "weapon id set must not be empty")

    def matches(self, record: RankingRecord) -> bool:
        """Check a record against every set field of this scope."""
        if record.ranking_type is not self.ranking_type:
            return False
        if self.rule_id is not None and record.rule_id != self.rule_id:
            return False
        if self.weapon_ids is not None and record.weapon_id not in self.weapon_ids:
            return False
        if self.period is not None and record.start_time != self.period:
            return False
        if self.start is not None:
            if record.start_time is None or not (self.start <= record.start_time < self.end):
                return False
        if self.group_type is not None and record.group_type is not self.group_type:
            return False
        if self.region is not None and record.region != self.region:
            return False
        if self.event_id is not None and record.event_id != self.event_id:
            return False
        if self.group_id is not None and record.group_id != self.group_id:
            return False
        if self.player_id is not None and record.player_id != self.player_id:
            return False
        return True
