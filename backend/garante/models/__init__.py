"""ORM Models - SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Guarantee is the aggregate root; disputes, verdicts and restitutions hang off it

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all or
      alembic autogenerate runs
"""

from garante.models.user import User  # noqa: F401
from garante.models.business import Business, BusinessMember  # noqa: F401
from garante.models.business_invitation import BusinessInvitation  # noqa: F401
from garante.models.guarantee import Guarantee  # noqa: F401
from garante.models.dispute import Dispute  # noqa: F401
from garante.models.verdict import Verdict  # noqa: F401
from garante.models.restitution import Restitution  # noqa: F401
