# src/xpforge/services/reconciliation.py

"""Offline audit of the ledger against stored XP totals.

For every user, the sum of ledger xp_gained must equal users.total_xp. A
difference means an award was lost or duplicated. The audit only reports:
repairing either side needs a deliberate, audited correction.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from xpforge.config import configure_logging
from xpforge.db import models
from xpforge.db import session as db_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationMismatch:
    """A user whose stored total disagrees with the ledger."""

    user_id: str
    total_xp: int
    ledger_xp: int

    @property
    def difference(self) -> int:
        """Stored total minus ledger sum."""
        return self.total_xp - self.ledger_xp


async def find_mismatches(db: AsyncSession) -> list[ReconciliationMismatch]:
    """Compare every user's total_xp against their ledger sum.

    Each mismatch is logged at ERROR; matching users are not reported.
    """
    ledger_sums = (
        select(
            models.RankActivityLog.user_id.label("user_id"),
            func.sum(models.RankActivityLog.xp_gained).label("ledger_xp"),
        )
        .group_by(models.RankActivityLog.user_id)
        .subquery()
    )
    ledger_xp = func.coalesce(ledger_sums.c.ledger_xp, 0)
    query = (
        select(models.User.id, models.User.total_xp, ledger_xp)
        .outerjoin(ledger_sums, ledger_sums.c.user_id == models.User.id)
        .where(models.User.total_xp != ledger_xp)
        .order_by(models.User.id)
    )
    rows = (await db.execute(query)).all()

    mismatches = [
        ReconciliationMismatch(user_id=user_id, total_xp=total, ledger_xp=int(summed))
        for user_id, total, summed in rows
    ]
    for mismatch in mismatches:
        logger.error(
            "Reconciliation mismatch for user %s: total_xp=%d ledger=%d",
            mismatch.user_id,
            mismatch.total_xp,
            mismatch.ledger_xp,
            extra={
                "user_id": mismatch.user_id,
                "total_xp": mismatch.total_xp,
                "ledger_xp": mismatch.ledger_xp,
                "difference": mismatch.difference,
            },
        )

    logger.info("Reconciliation finished", extra={"mismatches": len(mismatches)})
    return mismatches


async def _run() -> int:
    """Audit the configured database and return the process exit status."""
    try:
        async with db_session.AsyncSessionLocal() as session:
            mismatches = await find_mismatches(session)
    finally:
        await db_session.engine.dispose()
    return 1 if mismatches else 0


def main() -> None:
    """Console entry point: exits 1 when any mismatch is found."""
    configure_logging()
    sys.exit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
