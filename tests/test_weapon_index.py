"""
Tests for the weapon equivalence index and the weapon catalog.
"""

import json

import pytest

from rankstats.config import Config
from rankstats.database.models import ClassificationDimension
from rankstats.operations.weapon_index import WeaponCatalog, WeaponEquivalenceIndex


class TestWeaponEquivalenceIndex:

    def test_reskin_maps_to_original(self):
        index = WeaponEquivalenceIndex({10: None, 4010: 10})
        assert index.canonical_of(4010) == 10
        assert index.canonical_of(10) == 10
        assert index.members_of(10) == {10, 4010}
        assert index.expand(4010) == {10, 4010}
        assert index.reskins_of(10) == {4010}

    def test_unknown_id_is_singleton_class(self):
        index = WeaponEquivalenceIndex({10: None})
        assert index.canonical_of(999) == 999
        assert index.members_of(999) == {999}
        assert index.expand(999) == {999}
        assert index.reskins_of(999) == frozenset()

    def test_chain_resolves_to_root(self):
        index = WeaponEquivalenceIndex({1: None, 2: 1, 3: 2})
        assert {index.canonical_of(weapon_id) for weapon_id in (1, 2, 3)} == {1}
        assert index.members_of(1) == {1, 2, 3}

    def test_cycle_resolves_to_smallest_id(self):
        index = WeaponEquivalenceIndex({5: 7, 7: 5})
        assert index.canonical_of(5) == 5
        assert index.canonical_of(7) == 5

    def test_canonicalization_is_idempotent(self):
        index = WeaponEquivalenceIndex({1: None, 2: 1, 3: 2, 8: None, 9: 8})
        for weapon_id in (1, 2, 3, 8, 9, 100):
            canonical_id = index.canonical_of(weapon_id)
            assert index.canonical_of(canonical_id) == canonical_id
            assert weapon_id in index.members_of(canonical_id)

    def test_canonicalize_composition(self):
        index = WeaponEquivalenceIndex({10: None, 45: 10, 40: None})
        assert index.canonicalize([45, 40, 10, 45]) == [10, 10, 10, 40]


class TestWeaponCatalog:

    def test_classification_values(self, catalog):
        assert catalog.classification_value(45, ClassificationDimension.WEAPON) == 10
        assert catalog.classification_value(11, ClassificationDimension.MAIN) == 10
        assert catalog.classification_value(40, ClassificationDimension.SUB) == 3
        assert catalog.classification_value(40, ClassificationDimension.SPECIAL) == 5

    def test_unknown_weapon_classification(self, catalog):
        assert catalog.classification_value(999, ClassificationDimension.WEAPON) == 999
        assert catalog.classification_value(999, ClassificationDimension.MAIN) is None
        assert catalog.classification_value(999, ClassificationDimension.SUB) is None

    def test_universes(self, catalog):
        assert catalog.universe(ClassificationDimension.WEAPON) == (10, 11, 40, 2010, 4010)
        assert catalog.universe(ClassificationDimension.MAIN) == (10, 40, 2010, 4010)
        assert catalog.universe(ClassificationDimension.SUB) == (1, 3, 6)
        assert catalog.universe(ClassificationDimension.SPECIAL) == (2, 4, 5, 7)

    def test_declared_reference_lists_override_fallback(self, catalog):
        declared = WeaponCatalog(
            [catalog.attributes(10)], sub_weapon_ids=[0, 1, 2], special_weapon_ids=[9, 2]
        )
        assert declared.universe(ClassificationDimension.SUB) == (0, 1, 2)
        assert declared.universe(ClassificationDimension.SPECIAL) == (2, 9)

    def test_weapon_listing_skips_reskins(self, catalog):
        listing = catalog.weapon_listing()
        assert [entry.weapon_id for entry in listing] == [10, 11, 40, 2010, 4010]
        by_id = {entry.weapon_id: entry for entry in listing}
        assert by_id[11].is_variant
        assert not by_id[10].is_variant
        assert by_id[40].weapon_class == 'shooter'
        assert by_id[2010].weapon_class == 'charger'
        assert by_id[4010].weapon_class == 'splatling'

    def test_load_json(self, tmp_path):
        path = tmp_path / 'weapon-table.json'
        path.write_text(json.dumps({
            'weapons': [
                {'weapon_id': 10, 'sub_weapon_id': 1, 'special_weapon_id': 2,
                 'main_reference': 10, 'reskin_of': None},
                {'weapon_id': 4010, 'sub_weapon_id': 1, 'special_weapon_id': 2,
                 'main_reference': 10, 'reskin_of': 10},
            ],
            'subs': [1],
            'specials': [2],
        }), encoding='utf-8')

        loaded = WeaponCatalog.load_json(path)

        assert 4010 in loaded
        assert loaded.index.canonical_of(4010) == 10
        assert loaded.canonical_weapon_ids() == (10,)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            WeaponCatalog.load_json(tmp_path / 'missing.json')

    def test_load_json_default_path(self, tmp_path, monkeypatch):
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps({'weapons': [
            {'weapon_id': 40, 'sub_weapon_id': 3, 'special_weapon_id': 5},
        ]}), encoding='utf-8')
        monkeypatch.setattr(Config, 'WEAPON_TABLE_PATH', str(path))

        loaded = WeaponCatalog.load_json()

        assert loaded.attributes(40).main_reference == 40
        assert loaded.universe(ClassificationDimension.SUB) == (3,)
