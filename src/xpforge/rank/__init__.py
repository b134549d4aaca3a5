# src/xpforge/rank/__init__.py

"""Static rank catalogs and the pure calculations built on them."""

from .progress import (
    RankProgress,
    compute_progress,
    current_tier_xp,
    progress_percentage,
    xp_to_next_tier,
)
from .rewards import (
    XP_REWARD_RULES,
    RankActivity,
    XpRewardRule,
    all_rules,
    rule_for,
    xp_for_activity,
)
from .tiers import (
    RANK_CONFIGS,
    RANK_ORDER,
    RankConfig,
    RankTier,
    all_configs,
    compare_ranks,
    config_for,
    meets_rank_requirement,
    next_tier,
    tier_for_xp,
)

__all__ = [
    # Tiers
    "RANK_CONFIGS",
    "RANK_ORDER",
    "RankConfig",
    "RankTier",
    "all_configs",
    "compare_ranks",
    "config_for",
    "meets_rank_requirement",
    "next_tier",
    "tier_for_xp",
    # Rewards
    "XP_REWARD_RULES",
    "RankActivity",
    "XpRewardRule",
    "all_rules",
    "rule_for",
    "xp_for_activity",
    # Progress
    "RankProgress",
    "compute_progress",
    "current_tier_xp",
    "progress_percentage",
    "xp_to_next_tier",
]
