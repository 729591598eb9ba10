"""
Weapon Equivalence Index and Weapon Catalog

Collapses cosmetic weapon variants (reskins) into equivalence classes and maps
weapons onto the classification dimensions used by popularity and trend
aggregation. Both structures are built once from the static weapon catalog
and are read-only afterwards, so they can be shared by every concurrent query.
"""

import json
import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from rankstats.config import Config
from rankstats.constants import WeaponClassConstants
from rankstats.data_models.player import WeaponListing
from rankstats.data_models.ranking import WeaponAttributes
from rankstats.database.models import ClassificationDimension

logger = logging.getLogger(__name__)


class WeaponEquivalenceIndex:
    """Maps every weapon id to its canonical id and its class members."""

    def __init__(self, reskin_of: Dict[int, Optional[int]]):
        """
        Build the index in a single pass over the catalog.

        Args:
            reskin_of: weapon id -> id it is a reskin of (None for originals)
        """
        self._canonical: Dict[int, int] = {}
        for weapon_id in reskin_of:
            self._canonical[weapon_id] = self._resolve_root(weapon_id, reskin_of)

        members: Dict[int, set] = {}
        for weapon_id, canonical_id in self._canonical.items():
            members.setdefault(canonical_id, {canonical_id}).add(weapon_id)
        self._members: Dict[int, FrozenSet[int]] = {
            canonical_id: frozenset(ids) for canonical_id, ids in members.items()
        }

    @staticmethod
    def _resolve_root(weapon_id: int, reskin_of: Dict[int, Optional[int]]) -> int:
        # Follow reskin chains to the original; a cycle resolves to its smallest id
        seen = []
        current = weapon_id
        while current is not None and current not in seen:
            seen.append(current)
            current = reskin_of.get(current)
        if current is not None:
            return min(seen[seen.index(current):])
        return seen[-1]

    def canonical_of(self, weapon_id: int) -> int:
        """Canonical id of a weapon; unknown ids are their own canonical id."""
        return self._canonical.get(weapon_id, weapon_id)

    def members_of(self, canonical_id: int) -> FrozenSet[int]:
        """All ids sharing a canonical id, including the canonical id itself."""
        return self._members.get(canonical_id, frozenset((canonical_id,)))

    def expand(self, weapon_id: int) -> FrozenSet[int]:
        return self.members_of(self.canonical_of(weapon_id))

    def reskins_of(self, weapon_id: int) -> FrozenSet[int]:
        """Members of a weapon's class other than the canonical id."""
        canonical_id = self.canonical_of(weapon_id)
        return self.members_of(canonical_id) - {canonical_id}

    def canonical_ids(self) -> List[int]:
        return sorted(self._members)

    def canonicalize(self, weapon_ids: Iterable[int]) -> List[int]:
        """Sorted canonical composition of a weapon multiset."""
        return sorted(self.canonical_of(weapon_id) for weapon_id in weapon_ids)


class WeaponCatalog:
    """Static weapon attribute table with its equivalence index."""

    def __init__(
        self,
        weapons: Iterable[WeaponAttributes],
        sub_weapon_ids: Optional[Iterable[int]] = None,
        special_weapon_ids: Optional[Iterable[int]] = None,
    ):
        self._weapons: Dict[int, WeaponAttributes] = {w.weapon_id: w for w in weapons}
        self.index = WeaponEquivalenceIndex(
            {weapon_id: w.reskin_of for weapon_id, w in self._weapons.items()}
        )

        # Fall back to the ids actually assigned to weapons
        if sub_weapon_ids is None:
            sub_weapon_ids = (w.sub_weapon_id for w in self._weapons.values())
        if special_weapon_ids is None:
            special_weapon_ids = (w.special_weapon_id for w in self._weapons.values())

        self._universes: Dict[ClassificationDimension, Tuple[int, ...]] = {
            ClassificationDimension.WEAPON: tuple(sorted(
                {self.index.canonical_of(weapon_id) for weapon_id in self._weapons}
            )),
            ClassificationDimension.MAIN: tuple(sorted(
                {w.main_reference for w in self._weapons.values()}
            )),
            ClassificationDimension.SUB: tuple(sorted(set(sub_weapon_ids))),
            ClassificationDimension.SPECIAL: tuple(sorted(set(special_weapon_ids))),
        }
        logger.debug(
            f"Weapon catalog built: {len(self._weapons)} weapons, "
            f"{len(self._universes[ClassificationDimension.WEAPON])} equivalence classes"
        )

    @classmethod
    def from_dict(cls, data: dict) -> "WeaponCatalog":
        """
        Build a catalog from its JSON representation.

        Expected shape::

            {"weapons": [{"weapon_id": 10, "sub_weapon_id": 1,
                          "special_weapon_id": 2, "main_reference": 10,
                          "reskin_of": null}, ...],
             "subs": [0, 1, ...], "specials": [0, 1, ...]}
        """
        weapons = [
            WeaponAttributes(
                weapon_id=int(row['weapon_id']),
                sub_weapon_id=int(row['sub_weapon_id']),
                special_weapon_id=int(row['special_weapon_id']),
                main_reference=int(row.get('main_reference', row['weapon_id'])),
                reskin_of=int(row['reskin_of']) if row.get('reskin_of') is not None else None,
            )
            for row in data.get('weapons', [])
        ]
        subs = data.get('subs')
        specials = data.get('specials')
        return cls(
            weapons,
            sub_weapon_ids=[int(i) for i in subs] if subs is not None else None,
            special_weapon_ids=[int(i) for i in specials] if specials is not None else None,
        )

    @classmethod
    def load_json(cls, path=None) -> "WeaponCatalog":
        """Load the catalog from a JSON file (default Config.WEAPON_TABLE_PATH)."""
        path = path or Config.WEAPON_TABLE_PATH
        with Path(path).open(encoding='utf-8') as f:
            data = json.load(f)
        catalog = cls.from_dict(data)
        logger.info(f"Loaded weapon catalog from {path}")
        return catalog

    def __contains__(self, weapon_id: int) -> bool:
        return weapon_id in self._weapons

    def attributes(self, weapon_id: int) -> Optional[WeaponAttributes]:
        return self._weapons.get(weapon_id)

    def classification_value(self, weapon_id: int, dimension: ClassificationDimension) -> Optional[int]:
        """
        Map a weapon onto a classification dimension.

        Returns None for main/sub/special when the weapon has no attributes entry.
        """
        if dimension is ClassificationDimension.WEAPON:
            return self.index.canonical_of(weapon_id)

        attributes = self._weapons.get(weapon_id)
        if attributes is None:
            return None
        if dimension is ClassificationDimension.MAIN:
            return attributes.main_reference
        if dimension is ClassificationDimension.SUB:
            return attributes.sub_weapon_id
        return attributes.special_weapon_id

    def universe(self, dimension: ClassificationDimension) -> Tuple[int, ...]:
        """Every known value of a classification dimension, ascending."""
        return self._universes[dimension]

    def canonical_weapon_ids(self) -> Tuple[int, ...]:
        return self._universes[ClassificationDimension.WEAPON]

    def weapon_listing(self) -> List[WeaponListing]:
        """Canonical weapons with their variant flag and weapon class."""
        listing = []
        for weapon_id in sorted(self._weapons):
            attributes = self._weapons[weapon_id]
            if attributes.reskin_of is not None:
                continue
            listing.append(WeaponListing(
                weapon_id=weapon_id,
                is_variant=attributes.main_reference != weapon_id,
                weapon_class=WeaponClassConstants.class_of(weapon_id),
            ))
        return listing
