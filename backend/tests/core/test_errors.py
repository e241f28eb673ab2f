"""Error Hierarchy - tests for codes, HTTP statuses and the response envelope.

Tests cover:
    - each error class maps to its code and HTTP status
    - to_response() shape, including entity context
    - subclass relationships the handlers rely on
"""

import pytest

from garante.core.errors import (
    AlreadyConsentedError, AlreadyExistsError, AlreadyResolvedError,
    ConcurrencyError, ConsentRequiredError, DatabaseError,
    DisputeAlreadyActiveError, ErrorContext, ExpiredError, ForbiddenError,
    GaranteError, InputValidationError, InvalidTransitionError,
    NotYetResolvableError, ResourceNotFoundError, UnauthenticatedError,
    UnauthorizedError,
)


@pytest.mark.parametrize("error, code, status", [
    (UnauthenticatedError(), "UNAUTHENTICATED", 401),
    (UnauthorizedError("no"), "UNAUTHORIZED", 403),
    (ForbiddenError("no"), "FORBIDDEN", 403),
    (InvalidTransitionError("Guarantee", "draft", "active"), "INVALID_TRANSITION", 409),
    (AlreadyExistsError("dup"), "ALREADY_EXISTS", 409),
    (DisputeAlreadyActiveError(), "DISPUTE_ALREADY_ACTIVE", 409),
    (AlreadyResolvedError(), "ALREADY_RESOLVED", 409),
    (AlreadyConsentedError("seller"), "ALREADY_CONSENTED", 409),
    (ExpiredError("Guarantee"), "EXPIRED", 422),
    (NotYetResolvableError(2, 3), "NOT_YET_RESOLVABLE", 422),
    (ConsentRequiredError(), "CONSENT_REQUIRED", 422),
    (InputValidationError("bad", "price"), "VALIDATION_ERROR", 400),
    (ResourceNotFoundError("Guarantee", "x"), "RESOURCE_NOT_FOUND", 404),
    (DatabaseError("boom", "commit"), "DATABASE_ERROR", 503),
    (ConcurrencyError("raced"), "CONCURRENCY_CONFLICT", 409),
])
def test_code_and_status(error, code, status):
    assert isinstance(error, GaranteError)
    assert error.code == code
    assert error.http_status == status


def test_to_response_envelope():
    error = AlreadyResolvedError(ErrorContext(user_id="u1", dispute_id="d1"))
    body = error.to_response()["error"]
    assert body["code"] == "ALREADY_RESOLVED"
    assert body["category"] == "conflict"
    assert body["context"]["dispute_id"] == "d1"
    assert body["context"]["user_id"] == "u1"
    assert body["context"]["guarantee_id"] is None
    assert "timestamp" in body


def test_messages_carry_details():
    assert "'draft' to 'active'" in InvalidTransitionError("Guarantee", "draft", "active").message
    assert "2/3" in NotYetResolvableError(2, 3).message
    assert "seller" in AlreadyConsentedError("seller").message


def test_dispute_already_active_is_an_already_exists():
    assert isinstance(DisputeAlreadyActiveError(), AlreadyExistsError)
