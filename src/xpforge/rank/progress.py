# src/xpforge/rank/progress.py

"""Pure progress calculations over the tier catalog."""

from __future__ import annotations

from dataclasses import dataclass

from .tiers import RankTier, config_for, next_tier, tier_for_xp


@dataclass(frozen=True)
class RankProgress:
    """Everything derivable from a single XP total."""

    total_xp: int
    current_tier: RankTier
    next_tier: RankTier | None
    current_tier_xp: int
    xp_to_next_tier: int
    progress_percentage: int

    @property
    def is_max_rank(self) -> bool:
        return self.next_tier is None


def current_tier_xp(total_xp: int, tier: RankTier | str) -> int:
    """XP earned since entering ``tier``."""
    return total_xp - config_for(tier).min_xp


def progress_percentage(total_xp: int, tier: RankTier | str) -> int:
    """Percentage (0-100) of the way through ``tier``.

    The terminal tier always reports 100. Halves round up, and the result is
    clamped so a total outside the tier's band still yields a valid value.
    """
    config = config_for(tier)
    if config.max_xp is None:
        return 100

    span = config.max_xp - config.min_xp
    earned = total_xp - config.min_xp
    # round(100 * earned / span) with halves rounded up, in integers
    percentage = (200 * earned + span) // (2 * span)
    return max(0, min(100, percentage))


def xp_to_next_tier(total_xp: int, tier: RankTier | str) -> int:
    """XP still needed to reach the tier above ``tier``; 0 at the terminal tier."""
    upcoming = next_tier(tier)
    if upcoming is None:
        return 0
    return max(0, config_for(upcoming).min_xp - total_xp)


def compute_progress(total_xp: int) -> RankProgress:
    """Derive the tier and progress figures for an XP total."""
    tier = tier_for_xp(total_xp)
    return RankProgress(
        total_xp=total_xp,
        current_tier=tier,
        next_tier=next_tier(tier),
        current_tier_xp=current_tier_xp(total_xp, tier),
        xp_to_next_tier=xp_to_next_tier(total_xp, tier),
        progress_percentage=progress_percentage(total_xp, tier),
    )
