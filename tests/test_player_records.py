"""
Tests for player ranking history and known names.
"""

import asyncio

from conftest import APRIL, JUNE, MAY, festival_record, league_record, names_for, x_record
from rankstats.database.memory_store import InMemoryRankingStore
from rankstats.database.models import RankingType
from rankstats.services.player_records import PlayerRecordsService


def _service(catalog, records, names=None):
    return PlayerRecordsService(InMemoryRankingStore(records), catalog, names)


def test_x_history_order(catalog):
    records = [
        x_record('p1', 10, 2500, rule_id=3, start_time=MAY),
        x_record('p1', 10, 2400, rule_id=1, start_time=APRIL),
        x_record('p1', 40, 2600, rule_id=1, start_time=MAY),
        x_record('p2', 40, 2900, rule_id=1, start_time=JUNE),
    ]

    history = asyncio.run(_service(catalog, records).ranking_history('x', 'p1'))

    assert history.ranking_type is RankingType.X
    assert [(entry.record.start_time, entry.record.rule_id) for entry in history.records] == [
        (MAY, 1),
        (MAY, 3),
        (APRIL, 1),
    ]
    assert all(entry.teammates == () for entry in history.records)


def test_festival_history(catalog):
    records = [
        festival_record('p1', 10, 2500, event_id=1, start_time=APRIL),
        festival_record('p1', 10, 2600, event_id=2, region='eu', start_time=JUNE),
    ]

    history = asyncio.run(_service(catalog, records).ranking_history(RankingType.SPLATFEST, 'p1'))

    assert [entry.record.event_id for entry in history.records] == [2, 1]


def test_league_history_carries_teammates(catalog):
    records = [
        league_record('p1', 10, 2500, 'g1', start_time=APRIL),
        league_record('p2', 40, 2500, 'g1', start_time=APRIL),
        league_record('p3', 45, 2500, 'g1', start_time=APRIL),
        league_record('p1', 10, 2700, 'g2', start_time=MAY),
    ]
    service = _service(catalog, records, names_for(('p2', 'Bravo')))

    history = asyncio.run(service.ranking_history(RankingType.LEAGUE, 'p1'))

    assert [entry.record.group_id for entry in history.records] == ['g2', 'g1']
    assert history.records[0].teammates == ()
    assert [(m.player_id, m.player_name) for m in history.records[1].teammates] == [
        ('p2', 'Bravo'),
        ('p3', None),
    ]


def test_unknown_player_has_empty_history(catalog):
    history = asyncio.run(_service(catalog, []).ranking_history('x', 'nobody'))
    assert history.records == []


def test_known_names_most_recent_first(catalog, known_names):
    names = asyncio.run(_service(catalog, [], known_names).known_names('p1'))
    assert [known.player_name for known in names] == ['Alpha', 'OldAlpha']


def test_known_names_without_lookup(catalog):
    assert asyncio.run(_service(catalog, []).known_names('p1')) == []
