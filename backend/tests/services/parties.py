"""Helpers turning seeded users into callers and request headers."""

from garante.core.access_guard import Caller
from garante.models.user import User


def caller_for(user: User) -> Caller:
    return Caller.from_role(user.id, user.role)


def auth(user: User) -> dict[str, str]:
    """Identity header the upstream auth layer would set."""
    return {"X-User-Id": str(user.id)}
