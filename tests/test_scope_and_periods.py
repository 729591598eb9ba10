"""
Tests for scope validation, period helpers, ranking helpers and configuration.
"""

from datetime import datetime

import pytest

from conftest import APRIL, JUNE, MAY, league_record, x_record
from rankstats.config import Config
from rankstats.constants import RuleConstants
from rankstats.data_models.ranking import ScopeFilter
from rankstats.database.models import ClassificationDimension, GroupType, RankingType
from rankstats.utils.periods import month_range, next_month_start, parse_month, period_key
from rankstats.utils.ranking import RankingUtility
from rankstats.utils.ranking_exceptions import InvalidArgumentError, RankingException


class TestScopeFilter:

    def test_zero_rule_means_no_filter(self):
        scope = ScopeFilter.build('x', rule_id=0)
        assert scope.rule_id is None
        assert scope.matches(x_record('p1', 10, 2000, rule_id=3))

    @pytest.mark.parametrize('kwargs', [
        {'period': MAY, 'start': APRIL, 'end': JUNE},
        {'start': APRIL},
        {'end': JUNE},
        {'start': JUNE, 'end': APRIL},
        {'start': MAY, 'end': MAY},
        {'region': 'na'},
        {'event_id': 3},
        {'region': 'kr', 'event_id': 3},
        {'weapon_ids': []},
        {'rule_id': 7},
        {'group_type': 'trio'},
    ])
    def test_malformed_scopes(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            ScopeFilter.build(RankingType.X, **kwargs)

    def test_unknown_ranking_type(self):
        with pytest.raises(InvalidArgumentError):
            ScopeFilter.build('arena')

    def test_range_is_half_open(self):
        scope = ScopeFilter.build(RankingType.X, start=APRIL, end=MAY)
        assert scope.matches(x_record('p1', 10, 2000, start_time=APRIL))
        assert not scope.matches(x_record('p1', 10, 2000, start_time=MAY))

    def test_all_fields_must_match(self):
        scope = ScopeFilter.build(
            RankingType.LEAGUE, rule_id=1, group_type='T', weapon_ids=[10], period=MAY, group_id='g1'
        )
        assert scope.matches(league_record('p1', 10, 2000, 'g1'))
        assert not scope.matches(league_record('p1', 10, 2000, 'g2'))
        assert not scope.matches(league_record('p1', 10, 2000, 'g1', group_type=GroupType.PAIR))
        assert not scope.matches(x_record('p1', 10, 2000))


class TestPeriods:

    def test_parse_month(self):
        assert parse_month('2024-05') == MAY
        assert parse_month(' 2024-5 ') == MAY

    @pytest.mark.parametrize('value', ['2024/05', '2024-00', '2024-13', 'May 2024', '', None])
    def test_parse_month_rejects(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_month(value)

    def test_month_range_wraps_year(self):
        assert month_range(2023, 12) == (datetime(2023, 12, 1), datetime(2024, 1, 1))
        assert next_month_start(MAY) == JUNE

    def test_period_key(self):
        assert period_key(datetime(2024, 5, 17, 8, 0)) == '2024-05'


class TestRankingUtility:

    def test_competition_ranks(self):
        ranks = RankingUtility.competition_ranks({1: 5, 2: 8, 3: 5, 4: 0})
        assert ranks == {2: 1, 1: 2, 3: 2, 4: 4}

    def test_dedupe_keeps_first_occurrence(self):
        first = league_record('p1', 10, 2500, 'g1')
        records = [first, league_record('p2', 40, 2500, 'g1'), league_record('p3', 40, 2400, 'g1')]
        assert RankingUtility.dedupe_group_entries(records) == [first, records[2]]


class TestConstantsAndConfig:

    def test_rule_lookup(self):
        assert RuleConstants.find_rule_id('clam_blitz') == 4
        assert RuleConstants.find_rule_key(2) == 'tower_control'
        with pytest.raises(InvalidArgumentError):
            RuleConstants.find_rule_id('turf_war')

    def test_dimension_parsing(self):
        assert ClassificationDimension.parse('sub') is ClassificationDimension.SUB
        assert ClassificationDimension.parse('mains') is ClassificationDimension.MAIN

    def test_invalid_argument_carries_user_message(self):
        error = InvalidArgumentError('limit', 'must be a positive integer')
        assert isinstance(error, RankingException)
        assert error.argument == 'limit'
        assert 'limit' in error.user_message

    def test_async_database_url(self, monkeypatch):
        monkeypatch.setattr(Config, 'DATABASE_URL', 'sqlite:///stats.db')
        assert Config.get_async_database_url() == 'sqlite+aiosqlite:///stats.db'

    def test_async_database_url_for_explicit_url(self, monkeypatch):
        monkeypatch.setattr(Config, 'DATABASE_URL', 'sqlite:///stats.db')
        assert Config.get_async_database_url('sqlite:///other.db') == 'sqlite+aiosqlite:///other.db'
        assert Config.get_async_database_url('postgresql+asyncpg://db/stats') == 'postgresql+asyncpg://db/stats'

    def test_validate_rejects_bad_sizes(self, monkeypatch):
        monkeypatch.setattr(Config, 'SNAPSHOT_CACHE_MAX_SIZE', 0)
        with pytest.raises(ValueError):
            Config.validate()
