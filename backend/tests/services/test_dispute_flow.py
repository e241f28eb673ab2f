"""Dispute Flow - open, defend, resolve and restitution across the HTTP surface.

Invariants:
    - Resolve persists dispute, verdict, restitution and trust score together
    - A second resolve fails ALREADY_RESOLVED and the trust score moves once
    - Restitution completion restores the penalty and completes the guarantee

Tests cover:
    - full refund: penalty 50, restitution of the full price, restored on completion
    - partial refund: penalty 20, restitution of the awarded amount
    - no refund: no penalty, no restitution, guarantee completed at resolve time
    - one active dispute per guarantee, defense rules, visibility
"""

from decimal import Decimal
from uuid import uuid4

from sqlalchemy import func, select

from garante.models.restitution import Restitution
from garante.models.verdict import Verdict

from tests.services.parties import auth


async def _active_guarantee(client, seller, buyer, business, price="100000.00"):
    res = await client.post("/api/v1/guarantees", json={
        "business_id": str(business.id),
        "buyer_id": str(buyer.id),
        "service_description": "Solar panel installation",
        "price": price,
    }, headers=auth(seller))
    g = res.json()
    await client.post(f"/api/v1/guarantees/{g['id']}/accept", headers=auth(buyer))
    await client.post(f"/api/v1/guarantees/{g['id']}/consent", headers=auth(seller))
    res = await client.post(f"/api/v1/guarantees/{g['id']}/consent", headers=auth(buyer))
    assert res.json()["status"] == "active"
    return res.json()


async def _open(client, buyer, guarantee_id):
    res = await client.post("/api/v1/disputes", json={
        "guarantee_id": guarantee_id,
        "reason": "Panels not installed",
        "description": "Crew never showed up after the deposit",
        "evidence": {"messages": ["wa-1.png", "wa-2.png"]},
    }, headers=auth(buyer))
    assert res.status_code == 201, res.text
    return res.json()


async def _defend(client, seller, dispute_id):
    res = await client.post(f"/api/v1/disputes/{dispute_id}/defense", json={
        "defense": {"schedule": "visit-log.pdf"},
        "defense_description": "Buyer was not home on the scheduled dates",
    }, headers=auth(seller))
    assert res.status_code == 200, res.text
    return res.json()


async def _resolve(client, arbitrator, dispute_id, decision, refund_amount=None):
    body = {"decision": decision, "notes": "Reviewed both submissions"}
    if refund_amount is not None:
        body["refund_amount"] = refund_amount
    return await client.post(
        f"/api/v1/disputes/{dispute_id}/resolve", json=body, headers=auth(arbitrator),
    )


async def _disputed(client, seller, buyer, business):
    g = await _active_guarantee(client, seller, buyer, business)
    dispute = await _open(client, buyer, g["id"])
    await _defend(client, seller, dispute["id"])
    return g, dispute


# ─── Open / defense ──────────────────────────────────────────────

async def test_open_moves_guarantee_to_disputed(client, seller, buyer, business):
    g = await _active_guarantee(client, seller, buyer, business)
    dispute = await _open(client, buyer, g["id"])
    assert dispute["status"] == "pending"
    assert dispute["initiated_by"] == str(buyer.id)
    res = await client.get(f"/api/v1/guarantees/{g['id']}", headers=auth(seller))
    assert res.json()["status"] == "disputed"
    assert [d["id"] for d in res.json()["disputes"]] == [dispute["id"]]


async def test_second_dispute_rejected(client, seller, buyer, business):
    g = await _active_guarantee(client, seller, buyer, business)
    await _open(client, buyer, g["id"])
    res = await client.post("/api/v1/disputes", json={
        "guarantee_id": g["id"], "reason": "again",
        "description": "again", "evidence": {"a": 1},
    }, headers=auth(buyer))
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DISPUTE_ALREADY_ACTIVE"


async def test_seller_cannot_open(client, seller, buyer, business):
    g = await _active_guarantee(client, seller, buyer, business)
    res = await client.post("/api/v1/disputes", json={
        "guarantee_id": g["id"], "reason": "r", "description": "d", "evidence": {"a": 1},
    }, headers=auth(seller))
    assert res.status_code == 403


async def test_defense_moves_to_in_review(client, seller, buyer, business):
    g = await _active_guarantee(client, seller, buyer, business)
    dispute = await _open(client, buyer, g["id"])
    defended = await _defend(client, seller, dispute["id"])
    assert defended["status"] == "in_review"
    assert defended["defense"] == {"schedule": "visit-log.pdf"}


async def test_buyer_cannot_defend_own_dispute(client, seller, buyer, business):
    g = await _active_guarantee(client, seller, buyer, business)
    dispute = await _open(client, buyer, g["id"])
    res = await client.post(f"/api/v1/disputes/{dispute['id']}/defense", json={
        "defense": {"a": 1}, "defense_description": "mine",
    }, headers=auth(buyer))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_resolve_undefended_dispute_too_early(client, seller, buyer, arbitrator, business):
    g = await _active_guarantee(client, seller, buyer, business)
    dispute = await _open(client, buyer, g["id"])
    res = await _resolve(client, arbitrator, dispute["id"], "refund")
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "NOT_YET_RESOLVABLE"


async def test_party_cannot_resolve(client, seller, buyer, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    res = await _resolve(client, buyer, dispute["id"], "refund")
    assert res.status_code == 403


async def test_partial_refund_needs_amount(client, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    res = await _resolve(client, arbitrator, dispute["id"], "partial_refund")
    assert res.status_code == 400
    res = await _resolve(client, arbitrator, dispute["id"], "partial_refund", "100000.01")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    res = await _resolve(client, arbitrator, dispute["id"], "partial_refund", "0")
    assert res.status_code == 400


async def test_full_refund_ignores_stray_amount(client, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    res = await _resolve(client, arbitrator, dispute["id"], "refund", "0")
    assert res.status_code == 200, res.text
    assert Decimal(res.json()["restitution"]["amount"]) == Decimal("100000")


# ─── Full refund ─────────────────────────────────────────────────

async def test_full_refund_round_trip(client, test_db, seller, buyer, arbitrator, business):
    g, dispute = await _disputed(client, seller, buyer, business)

    res = await _resolve(client, arbitrator, dispute["id"], "refund")
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["dispute"]["status"] == "resolved"
    assert body["verdict"]["winner_id"] == str(buyer.id)
    assert body["verdict"]["decision"] == "refund"
    assert body["verdict"]["evidence_reviewed"]["defense"] == {"schedule": "visit-log.pdf"}
    restitution = body["restitution"]
    assert restitution["status"] == "pending"
    assert Decimal(restitution["amount"]) == Decimal("100000")
    await test_db.refresh(seller)
    assert seller.trust_score == 50

    res = await client.post(
        f"/api/v1/restitutions/{restitution['id']}/process",
        json={"proof_of_payment": "PIX E2E 8812"}, headers=auth(seller),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "processed"

    res = await client.post(
        f"/api/v1/restitutions/{restitution['id']}/complete", headers=auth(buyer),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "completed"
    assert res.json()["completed_by"] == str(buyer.id)

    await test_db.refresh(seller)
    assert seller.trust_score == 100
    res = await client.get(f"/api/v1/guarantees/{g['id']}", headers=auth(buyer))
    assert res.json()["status"] == "completed"


async def test_resolve_is_idempotent(client, test_db, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    first = await _resolve(client, arbitrator, dispute["id"], "refund")
    assert first.status_code == 200
    second = await _resolve(client, arbitrator, dispute["id"], "refund")
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "ALREADY_RESOLVED"

    await test_db.refresh(seller)
    assert seller.trust_score == 50
    verdicts = await test_db.scalar(select(func.count()).select_from(Verdict))
    restitutions = await test_db.scalar(select(func.count()).select_from(Restitution))
    assert (verdicts, restitutions) == (1, 1)


async def test_seller_cannot_complete_restitution(client, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    restitution = (await _resolve(client, arbitrator, dispute["id"], "refund")).json()["restitution"]
    await client.post(
        f"/api/v1/restitutions/{restitution['id']}/process",
        json={"proof_of_payment": "PIX"}, headers=auth(seller),
    )
    res = await client.post(
        f"/api/v1/restitutions/{restitution['id']}/complete", headers=auth(seller),
    )
    assert res.status_code == 403


async def test_complete_before_process(client, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    restitution = (await _resolve(client, arbitrator, dispute["id"], "refund")).json()["restitution"]
    res = await client.post(
        f"/api/v1/restitutions/{restitution['id']}/complete", headers=auth(buyer),
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_TRANSITION"


# ─── Partial refund ──────────────────────────────────────────────

async def test_partial_refund_round_trip(client, test_db, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    res = await _resolve(client, arbitrator, dispute["id"], "partial_refund", "30000.00")
    assert res.status_code == 200, res.text
    body = res.json()
    assert Decimal(body["verdict"]["refund_amount"]) == Decimal("30000")
    assert Decimal(body["restitution"]["amount"]) == Decimal("30000")
    await test_db.refresh(seller)
    assert seller.trust_score == 80

    restitution_id = body["restitution"]["id"]
    await client.post(
        f"/api/v1/restitutions/{restitution_id}/process",
        json={"proof_of_payment": "TED 0042"}, headers=auth(seller),
    )
    res = await client.post(
        f"/api/v1/restitutions/{restitution_id}/complete", headers=auth(arbitrator),
    )
    assert res.status_code == 200
    await test_db.refresh(seller)
    assert seller.trust_score == 100


# ─── No refund ───────────────────────────────────────────────────

async def test_no_refund_completes_guarantee(client, test_db, seller, buyer, arbitrator, business):
    g, dispute = await _disputed(client, seller, buyer, business)
    res = await _resolve(client, arbitrator, dispute["id"], "no_refund")
    assert res.status_code == 200
    body = res.json()
    assert body["verdict"]["winner_id"] == str(seller.id)
    assert body["restitution"] is None

    await test_db.refresh(seller)
    assert seller.trust_score == 100
    restitutions = await test_db.scalar(select(func.count()).select_from(Restitution))
    assert restitutions == 0
    res = await client.get(f"/api/v1/guarantees/{g['id']}", headers=auth(buyer))
    assert res.json()["status"] == "completed"


# ─── Reads ───────────────────────────────────────────────────────

async def test_dispute_detail_after_resolve(client, seller, buyer, arbitrator, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    await _resolve(client, arbitrator, dispute["id"], "refund")
    res = await client.get(f"/api/v1/disputes/{dispute['id']}", headers=auth(seller))
    assert res.status_code == 200
    body = res.json()
    assert body["dispute"]["status"] == "resolved"
    assert body["verdict"]["decision"] == "refund"
    assert body["restitution"]["status"] == "pending"


async def test_outsider_cannot_view_dispute(client, seller, buyer, outsider, business):
    _, dispute = await _disputed(client, seller, buyer, business)
    res = await client.get(f"/api/v1/disputes/{dispute['id']}", headers=auth(outsider))
    assert res.status_code == 403


async def test_arbitrator_queue_lists_unresolved(client, seller, buyer, arbitrator, business):
    _, first = await _disputed(client, seller, buyer, business)
    _, second = await _disputed(client, seller, buyer, business)
    await _resolve(client, arbitrator, first["id"], "no_refund")

    res = await client.get("/api/v1/disputes", headers=auth(arbitrator))
    assert [d["id"] for d in res.json()["disputes"]] == [second["id"]]
    res = await client.get("/api/v1/disputes", headers=auth(buyer))
    assert len(res.json()["disputes"]) == 2


async def test_missing_restitution(client, buyer):
    res = await client.get(f"/api/v1/restitutions/{uuid4()}", headers=auth(buyer))
    assert res.status_code == 404
