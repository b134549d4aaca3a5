# src/xpforge/api/users.py

"""API endpoints for user rank accounts, snapshots and XP awards."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from xpforge import config
from xpforge.db.models import User
from xpforge.db.session import get_db
from xpforge.rank import RankTier
from xpforge.schemas import rank as rank_schema
from xpforge.schemas import user as user_schema
from xpforge.services import award_service, ledger, rank_service

# - prefix="/users": All routes here will be prefixed with /users
# - tags=["Users"]: Groups these endpoints under "Users" in the API docs
router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/",
    response_model=user_schema.UserRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    user_in: user_schema.UserCreate, db: AsyncSession = Depends(get_db)
) -> User:
    """
    Open a rank account for a user identity.

    - **id**: The identity issued by the auth system.
    - **username**: Unique display name for leaderboards.

    Raises:
        409 Conflict: If the id or username is already registered.
    """
    new_user = User(**user_in.model_dump())

    try:
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User '{user_in.id}' or username '{user_in.username}' "
            "already exists",
        )

    return new_user


@router.get("/{user_id}", response_model=user_schema.UserRead)
async def read_user(user_id: str, db: AsyncSession = Depends(get_db)) -> User:
    """
    Retrieve a single rank account by user id.
    """
    return await rank_service.get_user(db, user_id)


@router.get("/{user_id}/rank", response_model=rank_schema.UserRankData)
async def read_user_rank(
    user_id: str,
    history_limit: int = Query(
        config.RANK_HISTORY_LIMIT, ge=0, le=100, description="Ledger entries to attach"
    ),
    db: AsyncSession = Depends(get_db),
) -> rank_schema.UserRankData:
    """
    Get the user's current tier, progress and most recent XP activity.
    """
    return await rank_service.snapshot(db, user_id, history_limit=history_limit)


@router.get(
    "/{user_id}/rank/activity",
    response_model=list[rank_schema.RankActivityLogRead],
)
async def read_user_activity(
    user_id: str,
    limit: int = Query(20, ge=1, le=100, description="Max records to return"),
    skip: int = Query(0, ge=0, description="Records to skip"),
    db: AsyncSession = Depends(get_db),
) -> list:
    """
    Get the user's XP ledger, most recent first.

    - **limit**: Maximum number of entries to return (1-100)
    - **skip**: Number of entries to skip (for paging further back)
    """
    await rank_service.get_user(db, user_id)
    return await ledger.recent(db, user_id, limit=limit, skip=skip)


@router.post(
    "/{user_id}/rank/xp",
    response_model=rank_schema.XpAwardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def award_user_xp(
    user_id: str,
    award_in: rank_schema.XpAwardRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> award_service.AwardResult:
    """
    Award XP to a user for an activity.

    Pass a **reference_id** (the match, lobby or tournament id) so retries
    after a timeout are deduplicated instead of awarding twice. A
    deduplicated request answers 200 with `duplicate: true`.

    Raises:
        422: If the activity is unknown or the user id is invalid
        429: If the activity's daily limit is already reached
        503: If the award could not be stored (safe to retry)
    """
    result = await award_service.award_xp(
        db,
        user_id=user_id,
        activity=award_in.activity,
        reference_id=award_in.reference_id,
        reference_type=award_in.reference_type.value
        if award_in.reference_type
        else None,
    )
    if result.duplicate:
        response.status_code = status.HTTP_200_OK
    return result


@router.get(
    "/{user_id}/rank/limits/{activity}",
    response_model=rank_schema.DailyLimitStatusRead,
)
async def read_daily_limit(
    user_id: str, activity: str, db: AsyncSession = Depends(get_db)
) -> award_service.DailyLimitStatus:
    """
    Check how many awards of an activity the user has left today.
    """
    return await award_service.check_daily_limit(db, user_id, activity)


@router.get(
    "/{user_id}/rank/requirements/{required_tier}",
    response_model=rank_schema.RankRequirementStatus,
)
async def read_rank_requirement(
    user_id: str, required_tier: RankTier, db: AsyncSession = Depends(get_db)
) -> rank_schema.RankRequirementStatus:
    """
    Check whether the user's tier is at or above **required_tier**, e.g. for
    a tournament that only admits Gold and higher.
    """
    return await rank_service.check_rank_requirement(db, user_id, required_tier)
