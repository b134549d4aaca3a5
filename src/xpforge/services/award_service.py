# src/xpforge/services/award_service.py

"""Business logic for awarding XP."""

from __future__ import annotations

import asyncio
import logging
import re
import weakref
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from xpforge.config import get_rank_timezone
from xpforge.db import models
from xpforge.exceptions import (
    DailyLimitExceededError,
    InvalidUserError,
    StorageUnavailableError,
    UserNotFoundError,
    XPForgeError,
)
from xpforge.rank import (
    RankActivity,
    RankTier,
    rule_for,
    tier_for_xp,
    xp_for_activity,
)
from xpforge.services import ledger
from xpforge.utils.datetime_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

# User identities handed over by the auth collaborator
USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass(frozen=True)
class AwardResult:
    """Outcome of a committed (or deduplicated) award.

    Attributes:
        xp_gained: XP the award granted
        new_total: The user's XP total after the award
        tier_changed: Whether the award moved the user into another tier
        new_tier: The tier entered, only set when tier_changed is True
        entry_id: Ledger entry recording the award
        duplicate: True when a retry matched an earlier award and nothing
            new was written
    """

    xp_gained: int
    new_total: int
    tier_changed: bool
    new_tier: RankTier | None
    entry_id: str
    duplicate: bool = False


@dataclass(frozen=True)
class DailyLimitStatus:
    """How many awards of an activity a user has left today."""

    activity: RankActivity
    can_earn: bool
    used: int
    remaining: int | None
    limit: int | None
    xp_per_award: int


class UserLockRegistry:
    """Hands out one asyncio.Lock per user id.

    Locks are held weakly, so a user's lock disappears once no award for
    that user is in flight.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock


_user_locks = UserLockRegistry()


def validate_user_id(user_id: str | None) -> str:
    """Reject absent or malformed user ids.

    Raises:
        InvalidUserError: If user_id is missing or does not match
            USER_ID_PATTERN
    """
    if not user_id:
        raise InvalidUserError(user_id, "user id is required")
    if not isinstance(user_id, str) or not USER_ID_PATTERN.match(user_id):
        raise InvalidUserError(user_id, "user id is malformed")
    return user_id


async def _current_total(db: AsyncSession, user_id: str) -> int:
    query = select(models.User.total_xp).where(models.User.id == user_id)
    return (await db.execute(query)).scalar_one()


def _duplicate_result(
    entry: models.RankActivityLog, current_total: int
) -> AwardResult:
    return AwardResult(
        xp_gained=entry.xp_gained,
        new_total=current_total,
        tier_changed=False,
        new_tier=None,
        entry_id=entry.id,
        duplicate=True,
    )


async def award_xp(
    db: AsyncSession,
    user_id: str,
    activity: RankActivity | str,
    reference_id: str | None = None,
    reference_type: str | None = None,
    now: datetime | None = None,
) -> AwardResult:
    """
    Awards XP to a user for one occurrence of an activity.

    The request moves through these gates:
    1. Validating: the activity must have a reward rule and the user must
       have a rank account
    2. CapChecking: capped activities are refused once today's count reaches
       the rule's daily limit (the award is dropped, not deferred)
    3. Mutating: the user's total is raised by the rule's base XP
    4. Committed: the new total and the ledger entry are committed together

    Steps 2-4 run while holding the user's lock and a row lock on the user,
    so concurrent awards for one user can neither overshoot a cap nor lose
    each other's XP. When a reference_id is given, a previous award for the
    same (user, activity, reference) is returned instead of awarding twice.

    Raises:
        UnknownActivityError: If the activity code has no reward rule
        InvalidUserError: If the user id is malformed or unregistered
        DailyLimitExceededError: If today's cap is already reached
        StorageUnavailableError: If the ledger or total could not be written
    """
    rule = rule_for(activity)
    validate_user_id(user_id)
    as_of = ensure_utc(now) if now is not None else utcnow()
    activity_code = rule.activity.value

    async with _user_locks.lock_for(user_id):
        try:
            user = await models.User.get_for_update(db, user_id)
            if user is None:
                raise InvalidUserError(user_id, "no rank account exists")

            if reference_id is not None:
                existing = await ledger.find_by_reference(
                    db, user_id, activity_code, reference_id
                )
                if existing is not None:
                    result = _duplicate_result(existing, user.total_xp)
                    await db.rollback()
                    logger.info(
                        "Duplicate award ignored",
                        extra={
                            "user_id": user_id,
                            "activity": activity_code,
                            "reference_id": reference_id,
                            "entry_id": result.entry_id,
                        },
                    )
                    return result

            if rule.daily_limit is not None:
                used = await ledger.count_today(
                    db, user_id, activity_code, as_of, get_rank_timezone()
                )
                if used >= rule.daily_limit:
                    raise DailyLimitExceededError(
                        user_id, activity_code, rule.daily_limit
                    )

            old_total = user.total_xp
            new_total = old_total + rule.base_xp
            old_tier = tier_for_xp(old_total)
            new_tier = tier_for_xp(new_total)

            user.total_xp = new_total
            user.version += 1
            entry = await ledger.append(
                db,
                models.RankActivityLog(
                    user_id=user_id,
                    activity=activity_code,
                    xp_gained=rule.base_xp,
                    description=rule.description,
                    timestamp=as_of,
                    reference_id=reference_id,
                    reference_type=reference_type,
                ),
            )
            entry_id = entry.id
            await db.commit()

        except XPForgeError:
            # Rejections are logged once, where they are mapped to a response
            await db.rollback()
            raise

        except IntegrityError as e:
            await db.rollback()
            # A concurrent writer outside this process may have recorded the
            # same reference first
            if reference_id is not None:
                existing = await ledger.find_by_reference(
                    db, user_id, activity_code, reference_id
                )
                if existing is not None:
                    result = _duplicate_result(
                        existing, await _current_total(db, user_id)
                    )
                    await db.rollback()
                    return result
            logger.error(
                "Award failed on constraint violation",
                extra={"user_id": user_id, "activity": activity_code},
                exc_info=True,
            )
            raise StorageUnavailableError(user_id, activity_code, str(e)) from e

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Award failed to persist",
                extra={"user_id": user_id, "activity": activity_code},
                exc_info=True,
            )
            raise StorageUnavailableError(user_id, activity_code, str(e)) from e

    tier_changed = old_tier != new_tier
    logger.info(
        "XP awarded",
        extra={
            "user_id": user_id,
            "activity": activity_code,
            "xp_gained": rule.base_xp,
            "new_total": new_total,
            "entry_id": entry_id,
        },
    )
    if tier_changed:
        logger.info(
            "Tier changed",
            extra={
                "user_id": user_id,
                "old_tier": old_tier.value,
                "new_tier": new_tier.value,
            },
        )

    return AwardResult(
        xp_gained=rule.base_xp,
        new_total=new_total,
        tier_changed=tier_changed,
        new_tier=new_tier if tier_changed else None,
        entry_id=entry_id,
    )


async def check_daily_limit(
    db: AsyncSession,
    user_id: str,
    activity: RankActivity | str,
    now: datetime | None = None,
) -> DailyLimitStatus:
    """
    Reports how many awards of ``activity`` the user has left today.

    This is an advisory read; award_xp re-checks the cap under the user's
    lock, so a positive answer here is not a reservation.

    Raises:
        UnknownActivityError: If the activity code has no reward rule
        UserNotFoundError: If the user has no rank account
    """
    rule = rule_for(activity)
    user = await db.get(models.User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)

    as_of = ensure_utc(now) if now is not None else utcnow()
    used = await ledger.count_today(
        db, user_id, rule.activity.value, as_of, get_rank_timezone()
    )

    xp_per_award = xp_for_activity(rule.activity)

    if rule.daily_limit is None:
        return DailyLimitStatus(
            activity=rule.activity,
            can_earn=True,
            used=used,
            remaining=None,
            limit=None,
            xp_per_award=xp_per_award,
        )

    remaining = max(0, rule.daily_limit - used)
    return DailyLimitStatus(
        activity=rule.activity,
        can_earn=remaining > 0,
        used=used,
        remaining=remaining,
        limit=rule.daily_limit,
        xp_per_award=xp_per_award,
    )
