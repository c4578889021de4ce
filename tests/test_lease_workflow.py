from helpers import API, count_rows, fetch_one, list_vehicle, sign_in
from leasehub.models.lease import Lease
from leasehub.models.payment import Payment
from leasehub.models.vehicle import Vehicle


async def _listed_vehicle(make_client, license="ABC123", lease_price=300):
    owner = make_client()
    await sign_in(owner, f"owner-{license.lower()}@example.com", name="Owner")
    response = await list_vehicle(owner, license=license, lease_price=lease_price)
    return owner, response.json()["vehicle"]


async def test_acquire_creates_lease_payment_and_marks_leased(make_client, database):
    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    user_a = await sign_in(lessee, "a@example.com", name="User A")

    response = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease", json={})
    assert response.status_code == 201
    body = response.json()
    assert body["paymentRecorded"] is True
    assert body["replayed"] is False
    assert body["lease"]["monthlyPayment"] == 300
    assert body["lease"]["status"] == "active"
    assert body["lease"]["userId"] == user_a["id"]
    assert body["payment"]["amount"] == 300
    assert body["payment"]["status"] == "succeeded"
    assert body["payment"]["paymentMethod"] == "Simulated Card"
    assert body["payment"]["transactionId"].startswith("SIM_TRANS_")
    assert body["vehicle"]["status"] == "leased"

    assert await count_rows(database, Lease, Lease.status == "active") == 1
    assert await count_rows(database, Payment, Payment.status == "succeeded") == 1
    stored = await fetch_one(database, Vehicle, Vehicle.license == "ABC123")
    assert stored.status == "leased"


async def test_second_lessee_gets_conflict(make_client, database):
    _, vehicle = await _listed_vehicle(make_client)
    user_a = make_client()
    await sign_in(user_a, "a@example.com")
    user_b = make_client()
    await sign_in(user_b, "b@example.com")

    assert (await user_a.post(f"{API}/vehicles/{vehicle['id']}/lease")).status_code == 201
    response = await user_b.post(f"{API}/vehicles/{vehicle['id']}/lease")
    assert response.status_code == 409
    assert response.json() == {"message": "Vehicle is not available for lease"}
    assert await count_rows(database, Lease) == 1


async def test_lease_term_follows_configuration(make_client):
    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    await sign_in(lessee, "term@example.com")

    lease = (await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease")).json()["lease"]
    from datetime import datetime

    start = datetime.fromisoformat(lease["startDate"])
    end = datetime.fromisoformat(lease["endDate"])
    assert (end - start).days == 365


async def test_owner_cannot_lease_own_vehicle(make_client, database):
    owner, vehicle = await _listed_vehicle(make_client)
    response = await owner.post(f"{API}/vehicles/{vehicle['id']}/lease")
    assert response.status_code == 403
    assert await count_rows(database, Lease) == 0


async def test_missing_vehicle_is_404(client):
    await sign_in(client, "nobody@example.com")
    response = await client.post(f"{API}/vehicles/00000000-0000-0000-0000-000000000002/lease")
    assert response.status_code == 404


async def test_vehicle_in_maintenance_is_not_leasable(make_client, database):
    owner, vehicle = await _listed_vehicle(make_client)
    await owner.patch(f"{API}/vehicles/{vehicle['id']}", json={"status": "maintenance"})

    lessee = make_client()
    await sign_in(lessee, "wait@example.com")
    response = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease")
    assert response.status_code == 409
    assert await count_rows(database, Lease) == 0


async def test_payment_failure_keeps_lease(make_client, database, monkeypatch):
    from leasehub.api.v1.leases import workflow

    async def declined(*args, **kwargs):
        raise RuntimeError("gateway timeout")

    monkeypatch.setattr(workflow, "simulate_charge", declined)

    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    await sign_in(lessee, "unpaid@example.com")

    response = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease")
    assert response.status_code == 201
    body = response.json()
    assert body["paymentRecorded"] is False
    assert body["payment"] is None
    assert body["vehicle"]["status"] == "leased"
    assert await count_rows(database, Lease, Lease.status == "active") == 1
    assert await count_rows(database, Payment) == 0


async def test_same_idempotency_key_replays(make_client, database):
    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    await sign_in(lessee, "twice@example.com")
    payload = {"idempotencyKey": "checkout-7f3a", "paymentMethod": "Visa **** 4242"}

    first = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease", json=payload)
    second = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease", json=payload)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["replayed"] is True
    assert second.json()["lease"]["id"] == first.json()["lease"]["id"]
    assert second.json()["payment"]["id"] == first.json()["payment"]["id"]
    assert second.json()["payment"]["paymentMethod"] == "Visa **** 4242"
    assert await count_rows(database, Lease) == 1
    assert await count_rows(database, Payment) == 1


async def test_double_submit_without_key_is_rejected(make_client, database):
    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    await sign_in(lessee, "eager@example.com")

    assert (await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease")).status_code == 201
    assert (await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease")).status_code == 409
    assert await count_rows(database, Lease) == 1


async def test_acquire_requires_session(make_client):
    _, vehicle = await _listed_vehicle(make_client)
    anonymous = make_client()
    response = await anonymous.post(f"{API}/vehicles/{vehicle['id']}/lease")
    assert response.status_code == 401


async def test_my_leases_and_payments(make_client):
    _, first = await _listed_vehicle(make_client, license="FIRST1")
    _, second = await _listed_vehicle(make_client, license="SECND2", lease_price=410)
    lessee = make_client()
    await sign_in(lessee, "collector@example.com")
    await lessee.post(f"{API}/vehicles/{first['id']}/lease")
    await lessee.post(f"{API}/vehicles/{second['id']}/lease")

    leases = (await lessee.get(f"{API}/users/me/leases")).json()
    assert [lease["vehicle"]["license"] for lease in leases] == ["SECND2", "FIRST1"]

    payments = (await lessee.get(f"{API}/users/me/payments")).json()
    assert sorted(p["amount"] for p in payments) == [300, 410]

    lease_id = leases[0]["id"]
    detail = await lessee.get(f"{API}/leases/{lease_id}")
    assert detail.status_code == 200
    assert detail.json()["vehicle"]["license"] == "SECND2"


async def test_vehicle_taken_between_read_and_reserve_is_conflict(make_client, database, monkeypatch):
    from sqlalchemy import update
    from sqlalchemy.ext.asyncio import AsyncSession

    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    await sign_in(lessee, "slow@example.com")

    original_get = AsyncSession.get

    async def get_then_lose_race(self, entity, ident, **kwargs):
        loaded = await original_get(self, entity, ident, **kwargs)
        if entity is Vehicle:
            # Another checkout commits while this request still holds the stale row
            async with database.engine.begin() as conn:
                await conn.execute(update(Vehicle).where(Vehicle.id == ident).values(status="leased"))
        return loaded

    monkeypatch.setattr(AsyncSession, "get", get_then_lose_race)

    response = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease")
    assert response.status_code == 409
    assert response.json() == {"message": "Vehicle is not available for lease"}
    assert await count_rows(database, Lease) == 0
    assert await count_rows(database, Payment) == 0


async def test_concurrent_request_with_same_key_is_replayed(make_client, database, monkeypatch):
    import uuid
    from datetime import datetime, timedelta

    from sqlalchemy import insert
    from sqlalchemy.ext.asyncio import AsyncSession

    from leasehub.api.v1.leases.workflow import idempotency_key_for

    _, vehicle = await _listed_vehicle(make_client)
    lessee = make_client()
    user = await sign_in(lessee, "racer@example.com")
    key = idempotency_key_for(uuid.UUID(user["id"]), uuid.UUID(vehicle["id"]), "checkout-race")
    rival_id = uuid.uuid4()

    original_flush = AsyncSession.flush
    rival_inserted = []

    async def flush_after_rival(self, objects=None):
        if not rival_inserted:
            rival_inserted.append(rival_id)
            now = datetime.utcnow()
            async with database.engine.begin() as conn:
                await conn.execute(
                    insert(Lease).values(
                        id=rival_id,
                        user_id=uuid.UUID(user["id"]),
                        vehicle_id=uuid.UUID(vehicle["id"]),
                        start_date=now,
                        end_date=now + timedelta(days=365),
                        monthly_payment=300,
                        status="active",
                        idempotency_key=key,
                    )
                )
        return await original_flush(self, objects)

    monkeypatch.setattr(AsyncSession, "flush", flush_after_rival)

    response = await lessee.post(f"{API}/vehicles/{vehicle['id']}/lease", json={"idempotencyKey": "checkout-race"})
    assert response.status_code == 200
    body = response.json()
    assert body["replayed"] is True
    assert body["lease"]["id"] == str(rival_id)
    assert await count_rows(database, Lease) == 1
