import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Ranking engine configuration settings"""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///rankstats.db')

    # Static reference data
    WEAPON_TABLE_PATH = os.getenv('WEAPON_TABLE_PATH', 'cache/weapon-table.json')

    # Logging settings
    DEBUG = _env_flag('DEBUG', 'False')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_TO_FILE = _env_flag('LOG_TO_FILE', 'True')

    # Aggregation settings
    LEADERBOARD_RECORD_COUNT = int(os.getenv('LEADERBOARD_RECORD_COUNT', 10))
    SNAPSHOT_CACHE_MAX_SIZE = int(os.getenv('SNAPSHOT_CACHE_MAX_SIZE', 24))

    @classmethod
    def get_async_database_url(cls, database_url: str = None) -> str:
        """Get the database URL with the async sqlite driver substituted"""
        database_url = database_url or cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if cls.LEADERBOARD_RECORD_COUNT <= 0:
            raise ValueError("LEADERBOARD_RECORD_COUNT must be a positive integer")
        if cls.SNAPSHOT_CACHE_MAX_SIZE <= 0:
            raise ValueError("SNAPSHOT_CACHE_MAX_SIZE must be a positive integer")
