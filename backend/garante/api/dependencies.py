"""Request Dependencies - resolves the authenticated caller once per request.

Invariants:
    - Identity arrives in the X-User-Id header, set by the upstream auth layer
    - Missing, malformed or unknown ids fail UNAUTHENTICATED (401)
    - Role is read from users.role and turned into a Caller with global capabilities
"""

from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from garante.core.access_guard import Caller
from garante.core.errors import UnauthenticatedError
from garante.infrastructure.database import get_db
from garante.models.user import User


async def get_caller(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Caller:
    if not x_user_id:
        raise UnauthenticatedError()
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise UnauthenticatedError()
    user = await db.get(User, user_id)
    if user is None:
        raise UnauthenticatedError()
    return Caller.from_role(user.id, user.role)
