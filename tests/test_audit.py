import logging

from sqlalchemy import select

from conftest import auth_headers
from food_ordering.models import AuditLog
from food_ordering.services.audit import AuditLogger, RequestMeta

META = RequestMeta(user_id=None, ip_address="10.0.0.1", method="POST", endpoint="/orders/")


def _broken_session_factory():
    raise RuntimeError("database is down")


async def test_record_writes_entry(session_factory):
    audit = AuditLogger(session_factory)

    audit.failed(META, "Order Creation", "Order failed - User not found")
    await audit.drain()

    async with session_factory() as session:
        entry = (await session.execute(select(AuditLog))).scalars().one()
    assert entry.user_id is None
    assert entry.status == "failed"
    assert entry.ip_address == "10.0.0.1"
    assert entry.endpoint == "/orders/"


async def test_write_errors_are_only_logged(caplog):
    audit = AuditLogger(_broken_session_factory)

    with caplog.at_level(logging.ERROR, logger="food_ordering.services.audit"):
        task = audit.success(META, "Order Placed", "ok")
        await audit.drain()

    assert task.done() and task.exception() is None
    assert "Failed to write audit log entry" in caplog.text


def test_record_without_event_loop_is_dropped(session_factory):
    audit = AuditLogger(session_factory)

    assert audit.success(META, "Order Placed", "ok") is None


async def test_audit_failure_does_not_break_request(client, audit, customer, make_food):
    food = await make_food()
    audit.bind(_broken_session_factory)

    resp = await client.post(
        "/orders/", json={"selectedItems": [{"foodId": food.id}]}, headers=auth_headers(customer)
    )
    await audit.drain()

    assert resp.status_code == 201
