# tests/test_progress.py

"""Unit tests for the progress calculator."""

import pytest
from xpforge.rank import (
    RankTier,
    all_configs,
    compute_progress,
    config_for,
    current_tier_xp,
    progress_percentage,
    xp_to_next_tier,
)


def test_new_user_progress():
    """A user with no XP sits at the very start of Bronze."""
    progress = compute_progress(0)

    assert progress.current_tier == RankTier.BRONZE
    assert progress.next_tier == RankTier.SILVER
    assert progress.progress_percentage == 0
    assert progress.xp_to_next_tier == 500
    assert progress.current_tier_xp == 0
    assert not progress.is_max_rank


def test_mid_tier_progress():
    # Gold spans 1500..3500, so 2500 is halfway
    progress = compute_progress(2500)

    assert progress.current_tier == RankTier.GOLD
    assert progress.current_tier_xp == 1000
    assert progress.xp_to_next_tier == 1000
    assert progress.progress_percentage == 50


@pytest.mark.parametrize("total_xp", [20000, 20001, 55555, 1_000_000])
def test_terminal_tier_is_always_full(total_xp: int):
    assert progress_percentage(total_xp, RankTier.MASTER) == 100
    assert xp_to_next_tier(total_xp, RankTier.MASTER) == 0
    assert compute_progress(total_xp).is_max_rank


@pytest.mark.parametrize(
    "tier", [c.tier for c in all_configs() if c.max_xp is not None]
)
def test_progress_is_monotonic_within_a_tier(tier: RankTier):
    config = config_for(tier)
    assert config.max_xp is not None
    previous = -1
    for total_xp in range(config.min_xp, config.max_xp):
        percentage = progress_percentage(total_xp, tier)
        assert 0 <= percentage <= 100
        assert percentage >= previous
        previous = percentage


def test_halves_round_up():
    # Bronze spans 500 XP: 2.5 XP is half a percent
    assert progress_percentage(2, RankTier.BRONZE) == 0
    assert progress_percentage(3, RankTier.BRONZE) == 1
    # 497.5 of 500 rounds to 100 only from 498 on
    assert progress_percentage(497, RankTier.BRONZE) == 99
    assert progress_percentage(498, RankTier.BRONZE) == 100
    # Silver spans 1000 XP: 5 XP in is exactly 0.5%
    assert progress_percentage(505, RankTier.SILVER) == 1


def test_percentage_is_clamped_outside_the_band():
    assert progress_percentage(0, RankTier.GOLD) == 0
    assert progress_percentage(9000, RankTier.GOLD) == 100


def test_xp_to_next_tier_never_negative():
    assert xp_to_next_tier(499, RankTier.BRONZE) == 1
    assert xp_to_next_tier(700, RankTier.BRONZE) == 0


def test_current_tier_xp():
    assert current_tier_xp(549, RankTier.SILVER) == 49
