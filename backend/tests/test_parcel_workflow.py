"""
Integration tests for the parcel workflow.

Tests creation, listing, payment marking, rider assignment, delivery status
updates and deletion.
"""

import pytest
from unittest.mock import AsyncMock
from sqlalchemy import select, func

from backend.app.core.config import settings
from backend.app.core.exceptions import InvalidIdentifierError
from backend.app.models.enums import RiderWorkStatus
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import DeliveryStatus, can_transition
from backend.app.models.payment_record import PaymentRecord
from backend.app.models.rider import Rider
from backend.app.schemas.parcel import MarkPaidRequest
from backend.app.services import parcel_workflow

UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"


def payment_body(parcel_id, **overrides):
    body = {
        "parcelId": parcel_id,
        "email": "shipper@test.com",
        "amount": 150,
        "transactionId": "pi_123",
        "paymentMethod": "card",
    }
    body.update(overrides)
    return body


def assign_body(rider_id, **overrides):
    body = {
        "riderId": rider_id,
        "riderName": "Rider One",
        "riderEmail": "rider1@test.com",
        "delivery_status": "rider_assign",
    }
    body.update(overrides)
    return body


async def count_payments(db_session, parcel_id):
    return (await db_session.execute(
        select(func.count(PaymentRecord.id)).where(PaymentRecord.parcel_id == parcel_id)
    )).scalar()


# Create / list

@pytest.mark.asyncio
async def test_create_parcel_defaults(client, user_headers):
    response = await client.post("/parcels", json={
        "title": "Shoes",
        "created_by": "shipper@test.com",
        "receiver_region": "Chattogram",
        "receiver_contact": "01811111111"
    })

    assert response.status_code == 200
    parcel_id = response.json()["insertedId"]

    listed = await client.get("/parcels", params={"parcelId": parcel_id}, headers=user_headers)
    [parcel] = listed.json()
    assert parcel["payment_status"] == "unpaid"
    assert parcel["delivery_status"] == "pending"
    assert parcel["details"] == {"receiver_contact": "01811111111"}


@pytest.mark.asyncio
async def test_create_parcel_accepts_empty_body(client):
    response = await client.post("/parcels", json={})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_list_by_creator_newest_first(client, user_headers):
    ids = []
    for title in ("first", "second", "third"):
        response = await client.post("/parcels", json={"title": title, "created_by": "shipper@test.com"})
        ids.append(response.json()["insertedId"])
    await client.post("/parcels", json={"title": "other", "created_by": "other@test.com"})

    response = await client.get("/parcels", params={"userEmail": "shipper@test.com"}, headers=user_headers)

    assert response.status_code == 200
    parcels = response.json()
    assert [p["id"] for p in parcels] == list(reversed(ids))
    assert all(p["created_by"] == "shipper@test.com" for p in parcels)


@pytest.mark.asyncio
async def test_list_with_malformed_parcel_id(client, user_headers):
    response = await client.get("/parcels", params={"parcelId": "abc"}, headers=user_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_by_status(client, parcel):
    await client.post("/parcels", json={"title": "unpaid one"})
    await client.patch("/parcels", json=payment_body(parcel))

    response = await client.get("/parcels/byStatus", params={"payment_status": "paid", "delivery_status": "pending"})

    assert [p["id"] for p in response.json()] == [parcel]


# Mark paid

@pytest.mark.asyncio
async def test_mark_paid_records_payment(client, parcel, db_session):
    response = await client.patch("/parcels", json=payment_body(parcel))

    assert response.status_code == 200
    record_id = response.json()["insertedId"]

    stored = (await db_session.execute(select(Parcel).where(Parcel.id == parcel))).scalar_one()
    assert stored.payment_status.value == "paid"
    assert stored.payment_time is not None

    record = (await db_session.execute(select(PaymentRecord).where(PaymentRecord.id == record_id))).scalar_one()
    assert record.parcel_id == parcel
    assert record.user_email == "shipper@test.com"
    assert record.amount == 150
    assert record.transaction_id == "pi_123"
    assert record.payment_method == "card"


@pytest.mark.asyncio
async def test_mark_paid_is_one_way(client, parcel, db_session):
    """A second payment is rejected and leaves exactly one record."""
    first = await client.patch("/parcels", json=payment_body(parcel))
    second = await client.patch("/parcels", json=payment_body(parcel, transactionId="pi_456"))

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["message"] == "Parcel is already marked as paid."
    assert await count_payments(db_session, parcel) == 1


@pytest.mark.asyncio
async def test_mark_paid_malformed_id(client):
    response = await client.patch("/parcels", json=payment_body("12345"))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid parcel ID format."


@pytest.mark.asyncio
async def test_mark_paid_missing_id(client, parcel, db_session):
    body = payment_body(parcel)
    del body["parcelId"]

    response = await client.patch("/parcels", json=body)

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INVALID_ID"
    assert await count_payments(db_session, parcel) == 0


@pytest.mark.asyncio
async def test_mark_paid_unknown_parcel(client, db_session):
    response = await client.patch("/parcels", json=payment_body(UNKNOWN_ID))

    assert response.status_code == 404
    assert await count_payments(db_session, UNKNOWN_ID) == 0


@pytest.mark.asyncio
async def test_malformed_id_never_reaches_store():
    db = AsyncMock()

    with pytest.raises(InvalidIdentifierError):
        await parcel_workflow.mark_paid(db, MarkPaidRequest(parcelId="zzz"))
    with pytest.raises(InvalidIdentifierError):
        await parcel_workflow.delete_parcel(db, "zzz")
    with pytest.raises(InvalidIdentifierError):
        await parcel_workflow.get_rider_assignments(db, "zzz")

    db.execute.assert_not_awaited()
    db.commit.assert_not_awaited()


# Assign rider

@pytest.mark.asyncio
async def test_assign_rider_updates_parcel(client, parcel, rider, db_session):
    response = await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))

    assert response.status_code == 200
    assert response.json()["parcel"]["modifiedCount"] == 1

    stored = (await db_session.execute(select(Parcel).where(Parcel.id == parcel))).scalar_one()
    assert stored.delivery_status == DeliveryStatus.RIDER_ASSIGN
    assert stored.assigned_rider_id == rider
    assert stored.assigned_rider_name == "Rider One"
    assert stored.assign_rider_email == "rider1@test.com"


@pytest.mark.asyncio
async def test_assign_rider_marks_rider_busy(client, parcel, rider, db_session):
    response = await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))

    assert response.json()["rider"] == {
        "acknowledged": True, "matchedCount": 1, "modifiedCount": 1, "upsertedId": None
    }
    stored = (await db_session.execute(select(Rider).where(Rider.id == rider))).scalar_one()
    assert stored.work_status == RiderWorkStatus.IN_DELIVERY


@pytest.mark.asyncio
async def test_assign_unknown_rider_writes_nothing(client, parcel, db_session):
    response = await client.patch(f"/parcels/{parcel}/assign", json=assign_body(UNKNOWN_ID))

    assert response.status_code == 404
    stored = (await db_session.execute(select(Parcel).where(Parcel.id == parcel))).scalar_one()
    assert stored.delivery_status == DeliveryStatus.PENDING
    assert stored.assigned_rider_id is None


@pytest.mark.asyncio
async def test_assign_malformed_ids(client, parcel, rider):
    bad_parcel = await client.patch("/parcels/nope/assign", json=assign_body(rider))
    bad_rider = await client.patch(f"/parcels/{parcel}/assign", json=assign_body("nope"))

    assert bad_parcel.status_code == 400
    assert bad_rider.status_code == 400


@pytest.mark.asyncio
async def test_assign_missing_rider_id(client, parcel, rider, db_session):
    body = assign_body(rider)
    del body["riderId"]

    response = await client.patch(f"/parcels/{parcel}/assign", json=body)

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INVALID_ID"
    stored = (await db_session.execute(select(Parcel).where(Parcel.id == parcel))).scalar_one()
    assert stored.assigned_rider_id is None


# Rider assignments

@pytest.mark.asyncio
async def test_rider_assignments(client, parcel, rider):
    await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))

    response = await client.get(f"/parcels/rider/{rider}/assigned")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [parcel]


@pytest.mark.asyncio
async def test_rider_assignments_empty_is_not_found(client, rider):
    response = await client.get(f"/parcels/rider/{rider}/assigned")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delivered_parcels_drop_out_of_assignments(client, parcel, rider, db_session):
    await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))
    await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "in_transit"})
    in_transit = await client.get(f"/parcels/rider/{rider}/assigned")
    await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "delivered"})
    delivered = await client.get(f"/parcels/rider/{rider}/assigned")

    assert in_transit.status_code == 200
    assert delivered.status_code == 404

    stored = (await db_session.execute(select(Rider).where(Rider.id == rider))).scalar_one()
    assert stored.work_status == RiderWorkStatus.IDLE


async def rider_work_status(db_session, rider_id):
    db_session.expire_all()
    return (await db_session.execute(select(Rider.work_status).where(Rider.id == rider_id))).scalar_one()


@pytest.mark.asyncio
async def test_rider_stays_busy_while_other_parcels_are_active(client, parcel, rider, db_session):
    second = (await client.post("/parcels", json={"title": "Lamp", "created_by": "shipper@test.com"})).json()["insertedId"]
    await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))
    await client.patch(f"/parcels/{second}/assign", json=assign_body(rider))

    await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "delivered"})

    assert await rider_work_status(db_session, rider) == RiderWorkStatus.IN_DELIVERY
    remaining = await client.get(f"/parcels/rider/{rider}/assigned")
    assert [p["id"] for p in remaining.json()] == [second]

    await client.patch(f"/parcel/{second}/rider", json={"delivery_status": "delivered"})

    assert await rider_work_status(db_session, rider) == RiderWorkStatus.IDLE


@pytest.mark.asyncio
async def test_rider_release_honours_assigned_email(client, parcel, rider, db_session):
    other_rider = (await client.post("/riders", json={"name": "Rider Two", "email": "rider2@test.com"})).json()["insertedId"]
    misrouted = (await client.post("/parcels", json={"title": "Desk", "created_by": "shipper@test.com"})).json()["insertedId"]
    # Assigned to the second rider, but carrying the first rider's email
    await client.patch(f"/parcels/{misrouted}/assign", json=assign_body(other_rider, riderName="Rider Two"))
    await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider, riderEmail="alias@test.com"))

    await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "delivered"})

    listed = await client.get(f"/parcels/rider/{rider}/assigned")
    assert [p["id"] for p in listed.json()] == [misrouted]
    assert await rider_work_status(db_session, rider) == RiderWorkStatus.IN_DELIVERY

    await client.patch(f"/parcel/{misrouted}/rider", json={"delivery_status": "delivered"})

    assert await rider_work_status(db_session, rider) == RiderWorkStatus.IDLE
    assert await rider_work_status(db_session, other_rider) == RiderWorkStatus.IDLE


# Delivery status

@pytest.mark.asyncio
async def test_update_delivery_status_accepts_any_order_by_default(client, parcel, db_session):
    response = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "delivered"})
    back = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "pending"})

    assert response.status_code == 200
    assert back.status_code == 200
    stored = (await db_session.execute(select(Parcel).where(Parcel.id == parcel))).scalar_one()
    assert stored.delivery_status == DeliveryStatus.PENDING
    assert stored.updated_at is not None


@pytest.mark.asyncio
async def test_update_delivery_status_rejects_unknown_value(client, parcel):
    response = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "lost"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_enforced_transitions_reject_skips(client, parcel, monkeypatch):
    monkeypatch.setattr(settings, "enforce_delivery_transitions", True)

    skip = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "delivered"})

    assert skip.status_code == 400
    assert skip.json()["error_code"] == "ERR_INVALID_TRANSITION"


@pytest.mark.asyncio
async def test_enforced_transitions_allow_the_pipeline(client, parcel, rider, monkeypatch):
    monkeypatch.setattr(settings, "enforce_delivery_transitions", True)

    assigned = await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))
    transit = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "in_transit"})
    delivered = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "delivered"})

    assert [assigned.status_code, transit.status_code, delivered.status_code] == [200, 200, 200]


def test_transition_table():
    assert can_transition(DeliveryStatus.PENDING, DeliveryStatus.RIDER_ASSIGN)
    assert can_transition(DeliveryStatus.RIDER_ASSIGN, DeliveryStatus.PENDING)
    assert not can_transition(DeliveryStatus.PENDING, DeliveryStatus.IN_TRANSIT)
    assert not can_transition(DeliveryStatus.DELIVERED, DeliveryStatus.PENDING)


# Delete

@pytest.mark.asyncio
async def test_delete_paid_parcel(client, parcel, rider):
    """Deletion ignores payment and delivery state; later lookups 404."""
    await client.patch("/parcels", json=payment_body(parcel))
    await client.patch(f"/parcels/{parcel}/assign", json=assign_body(rider))

    response = await client.delete(f"/parcels/{parcel}")

    assert response.status_code == 200
    assert response.json() == {"acknowledged": True, "deletedCount": 1}

    pay_again = await client.patch("/parcels", json=payment_body(parcel))
    status_update = await client.patch(f"/parcel/{parcel}/rider", json={"delivery_status": "in_transit"})
    assert pay_again.status_code == 404
    assert status_update.status_code == 404


@pytest.mark.asyncio
async def test_delete_unknown_parcel(client):
    response = await client.delete(f"/parcels/{UNKNOWN_ID}")

    assert response.status_code == 200
    assert response.json()["deletedCount"] == 0


@pytest.mark.asyncio
async def test_delete_malformed_id(client):
    response = await client.delete("/parcels/not-a-uuid")

    assert response.status_code == 400
