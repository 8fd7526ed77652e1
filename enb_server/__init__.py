"""
ENB Mini App - API Server Package

Backend for the ENB token-mining mini app: wallet accounts, invitation-code
activation, daily claim rewards and leaderboards over SQLite storage.
"""

__version__ = "1.0.0"

__all__ = [
    "account",
    "auth",
    "claims",
    "config",
    "errors",
    "invitation",
    "leaderboard",
    "rewards",
    "server",
    "storage",
]
