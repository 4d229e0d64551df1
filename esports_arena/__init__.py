"""
Esports Arena API - tournament, team, leaderboard and wallet management.
"""
__version__ = "1.0.0"
