"""Expiry Sweep - periodic job closing stale invitations and never-agreed guarantees.

Invariants:
    - pending invitations past expires_at -> expired
    - draft guarantees past expires_at -> cancelled; accepted ones stay disputable
    - Idempotent: a second run over the same clock changes nothing
    - Rows are locked with SKIP LOCKED so the sweep never waits on a live request

Design Decisions:
    - run_periodically is started by the FastAPI lifespan when
      expiry_sweep_interval_seconds > 0; otherwise an external scheduler may call
      sweep_expired through `python -m garante.services.expiry_sweep`
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from garante.core.clock import utc_now
from garante.core.domain_types import InvitationStatus
from garante.core.expiry import SWEEPABLE_GUARANTEE_STATUSES, apply_expire
from garante.core.invitation_transitions import apply_expire as expire_invitation
from garante.infrastructure.database import commit
from garante.models.business_invitation import BusinessInvitation
from garante.models.guarantee import Guarantee

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    invitations_expired: int
    guarantees_cancelled: int


async def sweep_expired(
    db: AsyncSession, now: datetime | None = None,
) -> SweepResult:
    now = now or utc_now()

    invitations = (await db.execute(
        select(BusinessInvitation)
        .where(
            BusinessInvitation.status == InvitationStatus.PENDING.value,
            BusinessInvitation.expires_at < now,
        )
        .with_for_update(skip_locked=True),
    )).scalars().all()
    invitations_expired = sum(1 for inv in invitations if expire_invitation(inv, now))

    guarantees = (await db.execute(
        select(Guarantee)
        .where(
            Guarantee.status.in_([s.value for s in SWEEPABLE_GUARANTEE_STATUSES]),
            Guarantee.expires_at.is_not(None),
            Guarantee.expires_at < now,
        )
        .with_for_update(skip_locked=True),
    )).scalars().all()
    guarantees_cancelled = sum(1 for g in guarantees if apply_expire(g, now))

    await commit(db)
    result = SweepResult(invitations_expired, guarantees_cancelled)
    if invitations_expired or guarantees_cancelled:
        logger.info(
            f"Expiry sweep: {invitations_expired} invitation(s) expired, "
            f"{guarantees_cancelled} guarantee(s) cancelled",
        )
    return result


async def run_periodically(
    session_factory: async_sessionmaker[AsyncSession], interval_seconds: int,
) -> None:
    """Run sweep_expired every interval until cancelled."""
    while True:
        try:
            async with session_factory() as db:
                await sweep_expired(db)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Expiry sweep failed: {e}", exc_info=True)
        await asyncio.sleep(interval_seconds)


async def _main() -> None:
    from garante.config import get_settings
    from garante.db.session import create_session_factory
    from garante.infrastructure.observability import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    factory = create_session_factory(settings.database_url)
    async with factory() as db:
        result = await sweep_expired(db)
    print(
        f"invitations_expired={result.invitations_expired} "
        f"guarantees_cancelled={result.guarantees_cancelled}",
    )


if __name__ == "__main__":
    asyncio.run(_main())
