# src/xpforge/schemas/rank.py

"""Pydantic schemas for rank snapshots, the ledger and XP awards."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from xpforge.rank import RankActivity, RankTier
from xpforge.utils.datetime_utils import ensure_utc


class ReferenceType(str, Enum):
    """Kinds of object an award can point back to."""

    LOBBY = "lobby"
    TOURNAMENT = "tournament"
    MATCH = "match"


# ===============================================
# == Catalog Schemas
# ===============================================


class RankConfigRead(BaseModel):
    """A tier of the catalog. max_xp is null for the terminal tier."""

    tier: RankTier
    name: str
    tag: str
    description: str
    color: str
    min_xp: int
    max_xp: int | None
    perks: list[str]

    model_config = ConfigDict(from_attributes=True)


class XpRewardRuleRead(BaseModel):
    """A reward rule. daily_limit is null for uncapped activities."""

    activity: RankActivity
    base_xp: int
    description: str
    daily_limit: int | None = None
    multiplier_condition: str | None = None

    model_config = ConfigDict(from_attributes=True)


# ===============================================
# == Ledger Schemas
# ===============================================


class RankActivityLogRead(BaseModel):
    """A single ledger entry."""

    id: str
    user_id: str
    # Stored as a plain code; kept a str so historic codes still serialize
    activity: str
    xp_gained: int = Field(..., gt=0)
    description: str
    timestamp: datetime
    reference_id: str | None = None
    reference_type: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


# ===============================================
# == Snapshot Schema
# ===============================================


class UserRankData(BaseModel):
    """The derived rank view of a user.

    Attributes:
        current_tier: Tier containing total_xp
        next_tier: Tier above current_tier, null at the terminal tier
        total_xp: The user's XP total
        current_tier_xp: XP earned since entering current_tier
        xp_to_next_tier: XP still needed for next_tier (0 at terminal tier)
        progress_percentage: 0-100 through current_tier (100 at terminal tier)
        is_max_rank: Whether current_tier is terminal
        activity_history: Most recent ledger entries, newest first
        updated_at: Last time the user's total changed
    """

    user_id: str
    current_tier: RankTier
    next_tier: RankTier | None
    total_xp: int = Field(..., ge=0)
    current_tier_xp: int = Field(..., ge=0)
    xp_to_next_tier: int = Field(..., ge=0)
    progress_percentage: int = Field(..., ge=0, le=100)
    is_max_rank: bool
    activity_history: list[RankActivityLogRead] = Field(default_factory=list)
    updated_at: datetime


# ===============================================
# == Award Schemas
# ===============================================


class XpAwardRequest(BaseModel):
    """Payload a collaborator sends to award XP.

    The activity is taken as a plain string so unknown codes reach the
    engine and are rejected there as UnknownActivityError.
    """

    activity: str = Field(..., min_length=1, max_length=64)
    reference_id: str | None = Field(
        default=None,
        max_length=128,
        description="Idempotency key: retries with the same reference are "
        "deduplicated",
    )
    reference_type: ReferenceType | None = None


class XpAwardResponse(BaseModel):
    """Result of an award request."""

    xp_gained: int
    new_total: int
    tier_changed: bool
    new_tier: RankTier | None = None
    entry_id: str
    duplicate: bool = False

    model_config = ConfigDict(from_attributes=True)


class DailyLimitStatusRead(BaseModel):
    """Remaining awards today; remaining/limit are null when uncapped."""

    activity: RankActivity
    can_earn: bool
    used: int
    remaining: int | None = None
    limit: int | None = None
    xp_per_award: int

    model_config = ConfigDict(from_attributes=True)


class RankRequirementStatus(BaseModel):
    """Whether a user is at or above a required tier."""

    user_id: str
    current_tier: RankTier
    required_tier: RankTier
    meets_requirement: bool
