"""Detail Edit Lock - tests for profile and business edit eligibility."""

from garante.core.enforce_edit_lock import check_business_edit, check_profile_edit
from garante.core.errors import ForbiddenError, UnauthorizedError

from tests.core.stand_ins import ADMIN, BUYER, SELLER, SELLER_ID


def test_profile_editable_without_disputes():
    assert check_profile_edit(SELLER, SELLER_ID, 0) is None


def test_profile_locked_by_active_dispute():
    error = check_profile_edit(SELLER, SELLER_ID, 1)
    assert isinstance(error, ForbiddenError)
    assert "unresolved disputes" in error.message


def test_profile_of_someone_else():
    assert isinstance(check_profile_edit(BUYER, SELLER_ID, 0), UnauthorizedError)
    assert check_profile_edit(ADMIN, SELLER_ID, 0) is None


def test_business_edit():
    assert check_business_edit(SELLER, SELLER_ID, 0) is None
    assert isinstance(check_business_edit(SELLER, SELLER_ID, 2), ForbiddenError)
    assert isinstance(check_business_edit(BUYER, SELLER_ID, 0), UnauthorizedError)
