"""
Engine-wide constants for the ranking aggregation engine.

This module contains the static catalogs and magic numbers used throughout
the codebase: ranked rules, festival regions, weapon class id ranges and
leaderboard sizes.
"""

from typing import Optional

from rankstats.utils.ranking_exceptions import InvalidArgumentError


class RankingConstants:
    """Constants related to leaderboard sizes."""

    # Records per weapon leaderboard when no rule filter is given.
    # The per-rule size is Config.LEADERBOARD_RECORD_COUNT.
    ALL_RULES_RECORD_COUNT = 30


class RuleConstants:
    """Ranked rule catalog in canonical order."""

    RANKED_RULES = (
        {'id': 1, 'key': 'splat_zones'},
        {'id': 2, 'key': 'tower_control'},
        {'id': 3, 'key': 'rainmaker'},
        {'id': 4, 'key': 'clam_blitz'},
    )
    RANKED_RULE_IDS = tuple(rule['id'] for rule in RANKED_RULES)

    @classmethod
    def find_rule_id(cls, key: str) -> int:
        for rule in cls.RANKED_RULES:
            if rule['key'] == key:
                return rule['id']
        raise InvalidArgumentError('rule', f"unknown rule key {key!r}")

    @classmethod
    def find_rule_key(cls, rule_id: int) -> str:
        for rule in cls.RANKED_RULES:
            if rule['id'] == rule_id:
                return rule['key']
        raise InvalidArgumentError('rule', f"unknown rule id {rule_id!r}")

    @classmethod
    def normalize_rule_id(cls, rule_id: Optional[int]) -> Optional[int]:
        """0 and None both mean 'no rule filter'."""
        if not rule_id:
            return None
        if rule_id not in cls.RANKED_RULE_IDS:
            raise InvalidArgumentError('rule', f"unknown rule id {rule_id!r}")
        return rule_id


class RegionConstants:
    """Festival regions."""

    REGIONS = ('na', 'eu', 'jp')


class WeaponClassConstants:
    """Weapon classes keyed by the lower bound of their id range."""

    # Lower bounds in ascending order; an id belongs to the last class whose
    # bound it reaches.
    WEAPON_CLASSES = (
        (0, 'shooter'),
        (200, 'blaster'),
        (1000, 'roller'),
        (1100, 'brush'),
        (2000, 'charger'),
        (3000, 'slosher'),
        (4000, 'splatling'),
        (5000, 'maneuver'),
        (6000, 'brella'),
    )

    @classmethod
    def class_of(cls, weapon_id: int) -> str:
        weapon_class = cls.WEAPON_CLASSES[0][1]
        for lower_bound, key in cls.WEAPON_CLASSES:
            if weapon_id >= lower_bound:
                weapon_class = key
        return weapon_class


class CacheConstants:
    """Constants for caching behavior."""

    # Period key format for memoized snapshot tables
    PERIOD_KEY_FORMAT = '%Y-%m'
