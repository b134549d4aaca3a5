# src/xpforge/rank/rewards.py

"""The reward rule table: XP granted per activity code."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from xpforge.exceptions import UnknownActivityError


class RankActivity(str, Enum):
    """Activity codes collaborators may award XP for."""

    CREATE_LOBBY = "create_lobby"
    JOIN_LOBBY = "join_lobby"
    JOIN_TOURNAMENT = "join_tournament"
    COMPLETE_MATCH = "complete_match"
    WIN_MATCH = "win_match"
    # Streak and first-match detection happen in the caller; the engine only
    # sees the resolved code.
    FIRST_BLOOD = "first_blood"
    WIN_STREAK = "win_streak"
    TOURNAMENT_TOP_3 = "tournament_top_3"
    TOURNAMENT_WINNER = "tournament_winner"


@dataclass(frozen=True)
class XpRewardRule:
    """How much XP an activity grants and how often per day.

    Attributes:
        activity: The activity code
        base_xp: XP granted per award (always positive)
        description: Ledger description for entries of this activity
        daily_limit: Max awards per user per calendar day, None for uncapped
        multiplier_condition: Free-text note on when the caller triggers it
    """

    activity: RankActivity
    base_xp: int
    description: str
    daily_limit: int | None = None
    multiplier_condition: str | None = None


XP_REWARD_RULES: dict[RankActivity, XpRewardRule] = {
    RankActivity.CREATE_LOBBY: XpRewardRule(
        activity=RankActivity.CREATE_LOBBY,
        base_xp=25,
        description="Created a lobby",
        daily_limit=5,
    ),
    RankActivity.JOIN_LOBBY: XpRewardRule(
        activity=RankActivity.JOIN_LOBBY,
        base_xp=15,
        description="Joined a lobby",
        daily_limit=10,
    ),
    RankActivity.JOIN_TOURNAMENT: XpRewardRule(
        activity=RankActivity.JOIN_TOURNAMENT,
        base_xp=50,
        description="Joined a tournament",
        daily_limit=3,
    ),
    RankActivity.COMPLETE_MATCH: XpRewardRule(
        activity=RankActivity.COMPLETE_MATCH,
        base_xp=30,
        description="Completed a match",
        daily_limit=20,
    ),
    RankActivity.WIN_MATCH: XpRewardRule(
        activity=RankActivity.WIN_MATCH,
        base_xp=50,
        description="Won a match",
        daily_limit=20,
    ),
    RankActivity.FIRST_BLOOD: XpRewardRule(
        activity=RankActivity.FIRST_BLOOD,
        base_xp=100,
        description="First match of the day bonus",
        daily_limit=1,
    ),
    RankActivity.WIN_STREAK: XpRewardRule(
        activity=RankActivity.WIN_STREAK,
        base_xp=25,
        description="Win streak bonus",
        multiplier_condition="Every 3 consecutive wins",
    ),
    RankActivity.TOURNAMENT_TOP_3: XpRewardRule(
        activity=RankActivity.TOURNAMENT_TOP_3,
        base_xp=150,
        description="Finished a tournament in the top 3",
    ),
    RankActivity.TOURNAMENT_WINNER: XpRewardRule(
        activity=RankActivity.TOURNAMENT_WINNER,
        base_xp=300,
        description="Won a tournament",
    ),
}


def _validate_rules() -> None:
    missing = [activity for activity in RankActivity if activity not in XP_REWARD_RULES]
    if missing:
        raise RuntimeError(f"Reward table is missing rules for {missing}")
    for activity, rule in XP_REWARD_RULES.items():
        if rule.activity is not activity:
            raise RuntimeError(f"Rule registered under {activity.value} is mislabelled")
        if rule.base_xp <= 0:
            raise RuntimeError(f"Rule {activity.value} must grant positive XP")
        if rule.daily_limit is not None and rule.daily_limit < 1:
            raise RuntimeError(f"Rule {activity.value} has a non-positive daily limit")


_validate_rules()


def rule_for(activity: RankActivity | str) -> XpRewardRule:
    """Return the reward rule for an activity code.

    Raises:
        UnknownActivityError: If the code is not registered
    """
    try:
        return XP_REWARD_RULES[RankActivity(activity)]
    except ValueError:
        raise UnknownActivityError(str(activity)) from None


def xp_for_activity(activity: RankActivity | str) -> int:
    """Return the XP a single award of ``activity`` grants."""
    return rule_for(activity).base_xp


def all_rules() -> list[XpRewardRule]:
    """Return every reward rule in declaration order."""
    return [XP_REWARD_RULES[activity] for activity in RankActivity]
