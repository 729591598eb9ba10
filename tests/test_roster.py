"""
Tests for group roster resolution.
"""

import asyncio

from conftest import APRIL, MAY, league_record, names_for
from rankstats.database.memory_store import InMemoryRankingStore
from rankstats.database.models import GroupType
from rankstats.services.roster import GroupRosterResolver


def _resolver(catalog, records, names=None):
    return GroupRosterResolver(InMemoryRankingStore(records), catalog, names)


def test_partial_roster_is_valid(catalog):
    records = [
        league_record('p3', 40, 2500, 'g1'),
        league_record('p1', 10, 2500, 'g1'),
        league_record('p2', 45, 2500, 'g1'),
    ]

    roster = asyncio.run(_resolver(catalog, records).resolve('g1', MAY))

    assert roster is not None
    assert [member.player_id for member in roster.members] == ['p1', 'p2', 'p3']
    assert roster.group_type is GroupType.TEAM
    assert roster.rating == 2500


def test_unknown_key_returns_none(catalog):
    records = [league_record('p1', 10, 2500, 'g1', start_time=APRIL)]
    resolver = _resolver(catalog, records)

    assert asyncio.run(resolver.resolve('g2', APRIL)) is None
    assert asyncio.run(resolver.resolve('g1', MAY)) is None


def test_duplicate_member_rows_collapse(catalog):
    records = [
        league_record('p1', 10, 2500, 'g1', group_type=GroupType.PAIR),
        league_record('p1', 10, 2500, 'g1', group_type=GroupType.PAIR),
        league_record('p2', 40, 2500, 'g1', group_type=GroupType.PAIR),
    ]

    roster = asyncio.run(_resolver(catalog, records).resolve('g1', MAY))

    assert [member.player_id for member in roster.members] == ['p1', 'p2']


def test_missing_names_are_none(catalog):
    records = [league_record('p1', 10, 2500, 'g1'), league_record('p2', 40, 2500, 'g1')]
    resolver = _resolver(catalog, records, names_for(('p1', 'Alpha')))

    roster = asyncio.run(resolver.resolve('g1', MAY))

    assert [(member.player_id, member.player_name) for member in roster.members] == [
        ('p1', 'Alpha'),
        ('p2', None),
    ]


def test_latest_name_wins(catalog, known_names):
    records = [league_record('p1', 10, 2500, 'g1')]

    roster = asyncio.run(_resolver(catalog, records, known_names).resolve('g1', MAY))

    assert roster.members[0].player_name == 'Alpha'


def test_resolve_many_preserves_order(catalog):
    records = [
        league_record('p1', 10, 2500, 'g1'),
        league_record('p2', 40, 2400, 'g2'),
    ]

    rosters = asyncio.run(_resolver(catalog, records).resolve_many([('g2', MAY), ('gx', MAY), ('g1', MAY)]))

    assert [roster.group_id if roster else None for roster in rosters] == ['g2', None, 'g1']
