"""
Shared builders for the ranking aggregation tests.

Async code is driven with asyncio.run inside plain test functions.
"""

import os

# Keep test runs from writing dated log files
os.environ.setdefault('LOG_TO_FILE', 'False')

from datetime import datetime

import pytest

from rankstats.data_models.ranking import KnownName, RankingRecord, WeaponAttributes
from rankstats.database.memory_store import InMemoryNameLookup, InMemoryRankingStore
from rankstats.database.models import GroupType, RankingType
from rankstats.operations.weapon_index import WeaponCatalog

APRIL = datetime(2024, 4, 1)
MAY = datetime(2024, 5, 1)
JUNE = datetime(2024, 6, 1)


def weapon(weapon_id, sub=1, special=2, main=None, reskin_of=None) -> WeaponAttributes:
    return WeaponAttributes(
        weapon_id=weapon_id,
        sub_weapon_id=sub,
        special_weapon_id=special,
        main_reference=weapon_id if main is None else main,
        reskin_of=reskin_of,
    )


def x_record(player_id, weapon_id, rating, rule_id=1, start_time=MAY, rank=1) -> RankingRecord:
    return RankingRecord(
        player_id=player_id,
        weapon_id=weapon_id,
        rating=rating,
        rank=rank,
        start_time=start_time,
        rule_id=rule_id,
        ranking_type=RankingType.X,
    )


def league_record(
    player_id,
    weapon_id,
    rating,
    group_id,
    group_type=GroupType.TEAM,
    rule_id=1,
    start_time=MAY,
    rank=1,
) -> RankingRecord:
    return RankingRecord(
        player_id=player_id,
        weapon_id=weapon_id,
        rating=rating,
        rank=rank,
        start_time=start_time,
        rule_id=rule_id,
        ranking_type=RankingType.LEAGUE,
        group_id=group_id,
        group_type=group_type,
    )


def festival_record(player_id, weapon_id, rating, region='na', event_id=1, rank=1, start_time=MAY) -> RankingRecord:
    return RankingRecord(
        player_id=player_id,
        weapon_id=weapon_id,
        rating=rating,
        rank=rank,
        start_time=start_time,
        ranking_type=RankingType.SPLATFEST,
        region=region,
        event_id=event_id,
    )


def names_for(*pairs) -> InMemoryNameLookup:
    """Name lookup from (player_id, name) pairs."""
    return InMemoryNameLookup.from_mapping(dict(pairs))


class FailingStore(InMemoryRankingStore):
    """Store whose fetch fails for scopes accepted by a predicate."""

    def __init__(self, records, fail_when, error):
        super().__init__(records)
        self.fail_when = fail_when
        self.error = error

    async def fetch(self, scope):
        if self.fail_when(scope):
            raise self.error
        return await super().fetch(scope)


@pytest.fixture
def catalog():
    """
    Catalog with one reskin pair (10 <- 45), one main variant (11 of 10),
    one charger with a reskin (2010 <- 2015) and two standalone weapons.
    """
    return WeaponCatalog([
        weapon(10, sub=1, special=2),
        weapon(11, sub=3, special=4, main=10),
        weapon(40, sub=3, special=5),
        weapon(45, sub=1, special=2, main=10, reskin_of=10),
        weapon(2010, sub=6, special=7),
        weapon(2015, sub=6, special=7, main=2010, reskin_of=2010),
        weapon(4010, sub=1, special=5),
    ])


@pytest.fixture
def known_names():
    return InMemoryNameLookup([
        KnownName('p1', 'Alpha', datetime(2024, 1, 1)),
        KnownName('p1', 'OldAlpha', datetime(2023, 1, 1)),
        KnownName('p2', 'Bravo', datetime(2024, 1, 1)),
        KnownName('p3', 'Charlie', datetime(2024, 1, 1)),
    ])
