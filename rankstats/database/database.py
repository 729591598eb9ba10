from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select
from contextlib import asynccontextmanager

from rankstats.config import Config
from rankstats.data_models.ranking import WeaponAttributes
from rankstats.database.models import Base, Weapon, SubWeapon, SpecialWeapon
from rankstats.operations.weapon_index import WeaponCatalog
from rankstats.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")
        Config.validate()

        database_url = Config.get_async_database_url(self.database_url)

        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
            pool_pre_ping=True,
        )

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @property
    def session_factory(self):
        if self.async_session is None:
            raise RuntimeError("Database.initialize() must be awaited first")
        return self.async_session

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for reference-data loads.

        All operations within the context are committed together on success,
        or rolled back together on failure.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def load_weapon_catalog(self) -> WeaponCatalog:
        """Build the static weapon catalog from the reference tables."""
        async with self.get_session() as session:
            weapons = (await session.execute(
                select(Weapon).order_by(Weapon.weapon_id)
            )).scalars().all()
            sub_ids = (await session.execute(
                select(SubWeapon.sub_weapon_id).order_by(SubWeapon.sub_weapon_id)
            )).scalars().all()
            special_ids = (await session.execute(
                select(SpecialWeapon.special_weapon_id).order_by(SpecialWeapon.special_weapon_id)
            )).scalars().all()

        catalog = WeaponCatalog(
            [
                WeaponAttributes(
                    weapon_id=w.weapon_id,
                    sub_weapon_id=w.sub_weapon_id,
                    special_weapon_id=w.special_weapon_id,
                    main_reference=w.main_reference,
                    reskin_of=w.reskin_of,
                )
                for w in weapons
            ],
            # Empty reference tables fall back to the ids assigned to weapons
            sub_weapon_ids=sub_ids or None,
            special_weapon_ids=special_ids or None,
        )
        self.logger.info(f"Loaded weapon catalog with {len(weapons)} weapons")
        return catalog

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
