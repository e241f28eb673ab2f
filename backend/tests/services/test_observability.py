"""JSONFormatter - entity ids and Decimal-bearing extras render as JSON."""

import json
import logging
from decimal import Decimal

from garante.infrastructure.observability import JSONFormatter


def _record(msg, **extra):
    record = logging.LogRecord("garante.test", logging.INFO, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


def test_extra_entity_fields_included():
    out = json.loads(JSONFormatter().format(_record(
        "Dispute resolved", dispute_id="d-1", decision="refund", trust_delta=-50,
    )))
    assert out["message"] == "Dispute resolved"
    assert out["dispute_id"] == "d-1"
    assert out["trust_delta"] == -50
    assert "guarantee_id" not in out


def test_non_json_values_stringified():
    out = json.loads(JSONFormatter().format(_record("x", business_id=Decimal("1.50"))))
    assert out["business_id"] == "1.50"


def test_unknown_extras_dropped():
    out = json.loads(JSONFormatter().format(_record("x", session_token="secret")))
    assert "session_token" not in out
