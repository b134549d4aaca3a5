# src/xpforge/schemas/leaderboard.py

"""Leaderboard and aggregate statistics schemas."""

from pydantic import BaseModel, ConfigDict, Field

from xpforge.rank import RankTier


class LeaderboardEntry(BaseModel):
    """Single entry in the XP leaderboard.

    Attributes:
        position: Position in leaderboard (1-indexed)
        user_id: The user's identity
        username: Display name
        total_xp: The user's XP total
        tier: Tier derived from total_xp
    """

    position: int = Field(..., ge=1, description="Position in leaderboard (1-indexed)")
    user_id: str
    username: str
    total_xp: int = Field(..., ge=0)
    tier: RankTier

    model_config = ConfigDict(from_attributes=True)


class RankStats(BaseModel):
    """Platform-wide rank statistics.

    Attributes:
        total_users_per_tier: User count for every tier, zero included
        top_users: Highest-XP users
        last_24h_xp_gained: XP awarded across all users in the last 24 hours
    """

    total_users_per_tier: dict[str, int]
    top_users: list[LeaderboardEntry] = Field(default_factory=list)
    last_24h_xp_gained: int = Field(0, ge=0)
