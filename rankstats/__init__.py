"""
Ranking aggregation engine for competitive ranking records.

Turns raw placement records into weapon leaderboards, popularity
distributions, usage trends and composite leaderboard snapshots.
"""

__version__ = '0.1.0'
