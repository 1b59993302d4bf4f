"""Tests for the background completion sweeper."""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.models.booking import Booking
from stayfinder.models.property import Property
from stayfinder.models.user import User
from stayfinder.services import sweeper


async def test_run_sweep_once_completes_finished_stays(
    db_session: AsyncSession, test_property: Property, guest_user: User
):
    booking = Booking(
        property_id=test_property.id,
        guest_id=guest_user.id,
        host_id=test_property.host_id,
        check_in=date.today() - timedelta(days=4),
        check_out=date.today(),
        num_guests=1,
        total_price=Decimal("4400"),
        status="confirmed",
        guest_name="Gus",
        guest_email="gus@example.com",
        guest_phone="555",
    )
    db_session.add(booking)
    await db_session.flush()

    # A second session on the test connection joins the outer transaction,
    # so the sweep's commit is rolled back with the test.
    def factory() -> AsyncSession:
        return AsyncSession(bind=db_session.bind, expire_on_commit=False)

    assert await sweeper.run_sweep_once(factory) == 1
    assert await sweeper.run_sweep_once(factory) == 0

    await db_session.refresh(booking)
    assert booking.status == "completed"


async def test_sweeper_survives_failures_and_stops_on_cancel(monkeypatch: pytest.MonkeyPatch):
    calls = 0

    async def flaky_sweep(_factory) -> int:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("database unavailable")
        return 2

    monkeypatch.setattr(sweeper, "run_sweep_once", flaky_sweep)

    task = asyncio.create_task(sweeper.completion_sweeper(lambda: None, interval_seconds=0.01))
    while calls < 3:
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert calls >= 3
