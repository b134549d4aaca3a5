# src/xpforge/rank/tiers.py

"""The tier catalog: ordered rank bands and their XP boundaries.

Each tier owns the half-open interval ``[min_xp, max_xp)``. The intervals are
contiguous and start at zero, so every non-negative XP total maps to exactly
one tier. ``master`` is terminal and unbounded (``max_xp is None``).
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import Enum


class RankTier(str, Enum):
    """Rank tiers, declared in ascending order."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"
    MASTERY = "mastery"
    MASTER = "master"


@dataclass(frozen=True)
class RankConfig:
    """Static configuration of a single tier.

    Attributes:
        tier: The tier this config describes
        name: Display name
        tag: Three-letter display tag
        description: Short display blurb
        color: Primary badge colour (hex)
        min_xp: Inclusive lower XP bound
        max_xp: Exclusive upper XP bound, None for the terminal tier
        perks: Display-only list of unlocked perks, in order
    """

    tier: RankTier
    name: str
    tag: str
    description: str
    color: str
    min_xp: int
    max_xp: int | None
    perks: tuple[str, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.max_xp is None


RANK_ORDER: tuple[RankTier, ...] = tuple(RankTier)

RANK_CONFIGS: dict[RankTier, RankConfig] = {
    RankTier.BRONZE: RankConfig(
        tier=RankTier.BRONZE,
        name="Bronze",
        tag="BRZ",
        description="For those just starting out",
        color="#CD7F32",
        min_xp=0,
        max_xp=500,
        perks=("Basic profile badge", "Lobby creation"),
    ),
    RankTier.SILVER: RankConfig(
        tier=RankTier.SILVER,
        name="Silver",
        tag="SLV",
        description="Starting to gain experience",
        color="#C0C0C0",
        min_xp=500,
        max_xp=1500,
        perks=("Silver profile badge", "Custom lobby filter", "Profile customization"),
    ),
    RankTier.GOLD: RankConfig(
        tier=RankTier.GOLD,
        name="Gold",
        tag="GLD",
        description="Players who have proven their skills",
        color="#FFD700",
        min_xp=1500,
        max_xp=3500,
        perks=(
            "Gold profile badge",
            "Priority lobby matching",
            "Access to special tournaments",
            "Profile animations",
        ),
    ),
    RankTier.PLATINUM: RankConfig(
        tier=RankTier.PLATINUM,
        name="Platinum",
        tag="PLT",
        description="Among the elite players",
        color="#00CED1",
        min_xp=3500,
        max_xp=7000,
        perks=(
            "Platinum profile badge",
            "Private lobby creation",
            "Tournament priority",
            "Beta feature access",
            "Exclusive Discord role",
        ),
    ),
    RankTier.DIAMOND: RankConfig(
        tier=RankTier.DIAMOND,
        name="Diamond",
        tag="DIA",
        description="Shining talents",
        color="#00BFFF",
        min_xp=7000,
        max_xp=12000,
        perks=(
            "Diamond profile badge",
            "VIP lobby creation",
            "Tournament organization",
            "Invitations to special events",
            "Sponsorship opportunities",
            "Special profile effects",
        ),
    ),
    RankTier.MASTERY: RankConfig(
        tier=RankTier.MASTERY,
        name="Mastery",
        tag="MST",
        description="Those who have mastered the craft",
        color="#9400D3",
        min_xp=12000,
        max_xp=20000,
        perks=(
            "Mastery profile badge",
            "Mentor program",
            "Tournament refereeing",
            "Community event creation",
            "Exclusive merchandise",
            "Animated profile frame",
            "Monthly prize draw",
        ),
    ),
    RankTier.MASTER: RankConfig(
        tier=RankTier.MASTER,
        name="Master",
        tag="MAS",
        description="Joined the ranks of legends",
        color="#FF4500",
        min_xp=20000,
        max_xp=None,
        perks=(
            "Master profile badge",
            "All previous perks",
            "Master-only ranking",
            "Platform advisory",
            "Exclusive tournament prize pools",
            "Annual Master event",
            "Legendary profile effects",
            "Unlimited lobby creation",
        ),
    ),
}


def _validate_catalog() -> list[int]:
    """Check the catalog partitions the XP line and return sorted lower bounds.

    Raises:
        RuntimeError: If a tier is missing, out of order, or the bands leave
            a gap or overlap
    """
    missing = [tier for tier in RANK_ORDER if tier not in RANK_CONFIGS]
    if missing:
        raise RuntimeError(f"Tier catalog is missing configs for {missing}")

    configs = [RANK_CONFIGS[tier] for tier in RANK_ORDER]
    if configs[0].min_xp != 0:
        raise RuntimeError("The lowest tier must start at 0 XP")

    for current, following in zip(configs, configs[1:]):
        if current.max_xp != following.min_xp:
            raise RuntimeError(
                f"Tier {current.tier.value} ends at {current.max_xp} but "
                f"{following.tier.value} starts at {following.min_xp}"
            )
        if current.min_xp >= following.min_xp:
            raise RuntimeError(f"Tier {following.tier.value} is out of order")

    if not configs[-1].is_terminal:
        raise RuntimeError("Only the last tier may be unbounded, and it must be")

    return [config.min_xp for config in configs]


_LOWER_BOUNDS = _validate_catalog()


def config_for(tier: RankTier | str) -> RankConfig:
    """Return the config of a tier. An unknown value raises ValueError."""
    return RANK_CONFIGS[RankTier(tier)]


def all_configs() -> list[RankConfig]:
    """Return every tier config, lowest tier first."""
    return [RANK_CONFIGS[tier] for tier in RANK_ORDER]


def tier_for_xp(total_xp: int) -> RankTier:
    """Return the tier whose ``[min_xp, max_xp)`` interval contains ``total_xp``.

    A total sitting exactly on a boundary belongs to the higher tier.

    Raises:
        ValueError: If total_xp is negative
    """
    if total_xp < 0:
        raise ValueError(f"XP total cannot be negative, got {total_xp}")
    index = bisect.bisect_right(_LOWER_BOUNDS, total_xp) - 1
    return RANK_ORDER[index]


def next_tier(tier: RankTier | str) -> RankTier | None:
    """Return the tier above ``tier``, or None for the terminal tier."""
    index = RANK_ORDER.index(RankTier(tier))
    if index == len(RANK_ORDER) - 1:
        return None
    return RANK_ORDER[index + 1]


def compare_ranks(first: RankTier | str, second: RankTier | str) -> int:
    """Negative if ``first`` ranks below ``second``, zero if equal, else positive."""
    return RANK_ORDER.index(RankTier(first)) - RANK_ORDER.index(RankTier(second))


def meets_rank_requirement(user_tier: RankTier | str, required: RankTier | str) -> bool:
    """True if ``user_tier`` is at or above ``required``."""
    return compare_ranks(user_tier, required) >= 0
