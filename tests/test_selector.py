# tests/test_selector.py

from __future__ import annotations

import pytest

from backend.delivery.models import DeliveryStatus
from backend.delivery.selector import select_due_deliveries


@pytest.mark.asyncio
async def test_selects_only_pending_and_due(store, make_delivery, now) -> None:
    due = make_delivery(due_in=-5)
    future = make_delivery(due_in=3600)
    already_sent = make_delivery(due_in=-60, status=DeliveryStatus.SENT)
    already_failed = make_delivery(due_in=-60, status=DeliveryStatus.FAILED)
    store.add(due, future, already_sent, already_failed)

    selected = await select_due_deliveries(store, now)

    assert [d.id for d in selected] == [due.id]


@pytest.mark.asyncio
async def test_orders_oldest_due_first(store, make_delivery, now) -> None:
    t3 = make_delivery(due_in=-1)
    t1 = make_delivery(due_in=-300)
    t2 = make_delivery(due_in=-60)
    store.add(t3, t1, t2)

    selected = await select_due_deliveries(store, now)

    assert [d.id for d in selected] == [t1.id, t2.id, t3.id]


@pytest.mark.asyncio
async def test_resorts_and_refilters_adapter_output(make_delivery, now) -> None:
    late = make_delivery(due_in=-1)
    early = make_delivery(due_in=-100)
    not_due = make_delivery(due_in=100)

    class UnorderedStore:
        async def list_pending(self, now, limit=None):
            return [late, not_due, early]

    selected = await select_due_deliveries(UnorderedStore(), now)

    assert [d.id for d in selected] == [early.id, late.id]


@pytest.mark.asyncio
async def test_nothing_due_returns_empty_without_writes_or_errors(store, make_delivery, now) -> None:
    from backend.utils.logging import get_log_buffer

    store.add(make_delivery(due_in=600))

    assert await select_due_deliveries(store, now) == []
    assert store.writes == []
    assert get_log_buffer().get_errors() == []


@pytest.mark.asyncio
async def test_limit_caps_batch(store, make_delivery, now) -> None:
    store.add(*(make_delivery(due_in=-i) for i in range(1, 6)))

    selected = await select_due_deliveries(store, now, limit=2)

    assert len(selected) == 2
