from sqlalchemy import (
    Column, Integer, String, DateTime, Float, ForeignKey, Index, PrimaryKeyConstraint
)
from sqlalchemy.orm import declarative_base
from enum import Enum

from rankstats.utils.ranking_exceptions import InvalidArgumentError

Base = declarative_base()

class RankingType(Enum):
    X = "x"
    LEAGUE = "league"
    SPLATFEST = "splatfest"

    @classmethod
    def parse(cls, value) -> "RankingType":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError('ranking_type', f"unknown ranking type {value!r}")

class GroupType(Enum):
    TEAM = "T"
    PAIR = "P"

    @property
    def key(self) -> str:
        return self.name.lower()

    @property
    def members(self) -> int:
        return 4 if self is GroupType.TEAM else 2

    @classmethod
    def parse(cls, value) -> "GroupType":
        if isinstance(value, cls):
            return value
        for group_type in cls:
            if value in (group_type.value, group_type.key):
                return group_type
        raise InvalidArgumentError('group_type', f"unknown group type {value!r}")

class ClassificationDimension(Enum):
    WEAPON = "weapons"
    MAIN = "mains"
    SUB = "subs"
    SPECIAL = "specials"

    @classmethod
    def parse(cls, value) -> "ClassificationDimension":
        if isinstance(value, cls):
            return value
        for dimension in cls:
            # Accept both 'subs' and 'sub'
            if value in (dimension.value, dimension.value[:-1]):
                return dimension
        raise InvalidArgumentError('classification', f"unknown classification dimension {value!r}")

class Weapon(Base):
    __tablename__ = 'weapons'

    weapon_id = Column(Integer, primary_key=True, autoincrement=False)
    sub_weapon_id = Column(Integer, ForeignKey('sub_weapons.sub_weapon_id'), nullable=False)
    special_weapon_id = Column(Integer, ForeignKey('special_weapons.special_weapon_id'), nullable=False)
    main_reference = Column(Integer, nullable=False)
    reskin_of = Column(Integer, ForeignKey('weapons.weapon_id'), nullable=True)

    def __repr__(self):
        return f"<Weapon(weapon_id={self.weapon_id}, reskin_of={self.reskin_of})>"

class SubWeapon(Base):
    __tablename__ = 'sub_weapons'

    sub_weapon_id = Column(Integer, primary_key=True, autoincrement=False)
    key = Column(String(50), nullable=False, unique=True)

class SpecialWeapon(Base):
    __tablename__ = 'special_weapons'

    special_weapon_id = Column(Integer, primary_key=True, autoincrement=False)
    key = Column(String(50), nullable=False, unique=True)

class RankingRecordRow(Base):
    """One ingested placement. Rows are append-only."""
    __tablename__ = 'ranking_records'

    id = Column(Integer, primary_key=True)
    ranking_type = Column(String(16), nullable=False)
    player_id = Column(String(16), nullable=False, index=True)
    weapon_id = Column(Integer, nullable=False, index=True)
    rating = Column(Float, nullable=False)
    rank = Column(Integer, nullable=False)
    start_time = Column(DateTime, nullable=True)
    rule_id = Column(Integer, nullable=True)

    # League only
    group_id = Column(String(64), nullable=True)
    group_type = Column(String(1), nullable=True)

    # Festival only
    region = Column(String(2), nullable=True)
    event_id = Column(Integer, nullable=True)

    __table_args__ = (
        Index('ix_ranking_records_type_time_rule', 'ranking_type', 'start_time', 'rule_id'),
        Index('ix_ranking_records_group', 'group_id', 'start_time'),
        Index('ix_ranking_records_festival', 'region', 'event_id'),
    )

    def __repr__(self):
        return f"<RankingRecordRow(type='{self.ranking_type}', player_id='{self.player_id}', rating={self.rating})>"

class PlayerKnownName(Base):
    __tablename__ = 'player_known_names'

    player_id = Column(String(16), nullable=False, index=True)
    player_name = Column(String(100), nullable=False)
    last_used = Column(DateTime, nullable=False)

    __table_args__ = (PrimaryKeyConstraint('player_id', 'player_name'),)
