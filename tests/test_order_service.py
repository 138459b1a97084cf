import asyncio
from datetime import timedelta

import pytest

from wlogistics.core.config import Settings
from wlogistics.core.exceptions import OrderNotFoundError, OrderValidationError
from wlogistics.models import OrderStatus
from wlogistics.schemas import DriverAssign, OrderCreate
from wlogistics.seed import DEMO_ORDERS, seed_demo_orders
from wlogistics.services.orders import OrderService
from wlogistics.services.realtime import (
    ORDER_CREATED,
    ORDER_DELETED,
    ORDER_UPDATED,
    BaseSubscriber,
    TenantBroadcaster,
)
from wlogistics.store import InMemoryOrderStore


def wis_order(**overrides) -> OrderCreate:
    payload = {
        "tenantId": "t_wis",
        "customer": {"name": "Nguyễn Minh Châu", "phone": "0903 123 456"},
        "from": "Kho Tân Bình, HCM",
        "to": "Q.1, HCM",
        "items": [{"name": "Thùng sữa 24 hộp", "qty": 1}],
        "price": 45000,
    }
    payload.update(overrides)
    return OrderCreate.model_validate(payload)


class SilentClient(BaseSubscriber):
    """A connected listener that never accepts a frame."""

    @property
    def subscriber_id(self) -> str:
        return "silent"

    async def send(self, event, payload):
        await asyncio.sleep(3600)


class TestCreateOrder:
    """Tests for order creation."""

    @pytest.mark.asyncio
    async def test_create_sets_initial_state(self, service):
        order = await service.create_order(wis_order())

        assert order.status == OrderStatus.CREATED
        assert [e.status for e in order.timeline] == [OrderStatus.CREATED]
        assert order.driver is None
        assert order.code == "WL-10001"
        assert order.origin == "Kho Tân Bình, HCM"
        assert order.eta - order.created_at == timedelta(hours=4)

    @pytest.mark.asyncio
    async def test_integer_price_stays_integer(self, service):
        order = await service.create_order(wis_order())

        assert order.price == 45000
        assert isinstance(order.price, int)
        assert order.model_dump(by_alias=True)["price"] == 45000
        assert isinstance(order.model_dump(mode="json")["price"], int)

    @pytest.mark.asyncio
    async def test_silent_listener_does_not_block_create(self, store, drivers, test_settings):
        broadcaster = TenantBroadcaster(send_timeout=0.05)
        service = OrderService(store, broadcaster, drivers, test_settings)
        silent = SilentClient()
        broadcaster.subscribe(silent, "t_wis")

        order = await asyncio.wait_for(service.create_order(wis_order()), timeout=1)

        assert service.get_order(order.id) is order
        assert broadcaster.room_size("t_wis") == 0

    @pytest.mark.asyncio
    async def test_codes_increase_and_supplied_code_is_kept(self, service):
        first = await service.create_order(wis_order())
        custom = await service.create_order(wis_order(code="VIP-1"))
        second = await service.create_order(wis_order())

        assert (first.code, custom.code, second.code) == ("WL-10001", "VIP-1", "WL-10002")

    @pytest.mark.asyncio
    async def test_newest_order_is_listed_first(self, service):
        first = await service.create_order(wis_order())
        second = await service.create_order(wis_order())

        assert [o.id for o in service.list_orders()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_create_publishes_to_tenant_room(self, service, broadcaster, listener):
        broadcaster.subscribe(listener, "t_wis")

        order = await service.create_order(wis_order())

        assert listener.drain() == [(ORDER_CREATED, {"id": order.id})]
        assert broadcaster.events()[-1].room == "t_wis"

    @pytest.mark.asyncio
    async def test_tenant_scoping(self, service):
        order = await service.create_order(wis_order())

        assert order.id in [o.id for o in service.list_orders("t_wis")]
        assert order.id not in [o.id for o in service.list_orders("t_cafe")]

    @pytest.mark.asyncio
    async def test_create_without_tenant_is_accepted_and_unheard(self, service, broadcaster, listener):
        for tenant_id in ("t_wis", "t_cafe", "t_fnb"):
            broadcaster.subscribe(listener, tenant_id)

        order = await service.create_order(OrderCreate())

        assert order.tenant_id is None
        assert order.customer is None
        assert order.items == []
        assert listener.drain() == []
        assert broadcaster.events() == []

    @pytest.mark.asyncio
    async def test_strict_mode_rejects_incomplete_orders(self, broadcaster, drivers):
        strict = OrderService(
            InMemoryOrderStore(),
            broadcaster,
            drivers,
            Settings(strict_order_validation=True, seed_demo_orders=False),
        )

        with pytest.raises(OrderValidationError) as exc_info:
            await strict.create_order(OrderCreate.model_validate({"tenantId": "t_nope"}))

        assert len(exc_info.value.problems) == 3
        assert len(strict.store) == 0

        order = await strict.create_order(wis_order())
        assert order.tenant_id == "t_wis"


class TestAdvanceAndAssign:
    """Tests for lifecycle commands through the service."""

    @pytest.mark.asyncio
    async def test_advance_publishes_update(self, service, broadcaster, listener):
        order = await service.create_order(wis_order())
        broadcaster.subscribe(listener, "t_wis")

        updated = await service.advance_order(order.id)

        assert updated.status == OrderStatus.ASSIGNED
        assert listener.drain() == [(ORDER_UPDATED, {"id": order.id})]

    @pytest.mark.asyncio
    async def test_advance_mutates_stored_order(self, service):
        order = await service.create_order(wis_order())

        await service.advance_order(order.id)

        assert service.get_order(order.id).status == OrderStatus.ASSIGNED

    @pytest.mark.asyncio
    async def test_advance_stabilises_at_delivered(self, service):
        order = await service.create_order(wis_order())

        for _ in range(8):
            await service.advance_order(order.id)

        assert order.status == OrderStatus.DELIVERED
        assert len(order.timeline) == 6

    @pytest.mark.asyncio
    async def test_assign_uses_roster_driver(self, service):
        order = await service.create_order(wis_order())

        await service.assign_driver(order.id)

        assert order.driver.name == "Nguyen Van An"
        assert order.driver.plate == "59A-123.45"
        assert order.driver.id

    @pytest.mark.asyncio
    async def test_assign_uses_supplied_driver(self, service):
        order = await service.create_order(wis_order())

        await service.assign_driver(order.id, DriverAssign(name="Le Hoang Cuong", plate="59C-246.80"))

        assert order.driver.name == "Le Hoang Cuong"

    @pytest.mark.asyncio
    async def test_assign_twice_keeps_driver_but_rewinds(self, service):
        order = await service.create_order(wis_order())
        await service.assign_driver(order.id)
        first_driver = order.driver
        await service.advance_order(order.id)
        await service.advance_order(order.id)

        await service.assign_driver(order.id)

        assert order.driver == first_driver
        assert order.status == OrderStatus.ASSIGNED
        assert [e.status for e in order.timeline].count(OrderStatus.ASSIGNED) == 2

    @pytest.mark.asyncio
    async def test_reassign_does_not_consume_roster(self, service):
        first = await service.create_order(wis_order())
        second = await service.create_order(wis_order())

        await service.assign_driver(first.id)
        await service.assign_driver(first.id)
        await service.assign_driver(second.id)

        assert first.driver.name == "Nguyen Van An"
        assert second.driver.name == "Tran Thi Binh"

    @pytest.mark.asyncio
    async def test_assign_without_rewind(self, broadcaster, drivers):
        service = OrderService(
            InMemoryOrderStore(),
            broadcaster,
            drivers,
            Settings(allow_assign_rewind=False, seed_demo_orders=False),
        )
        order = await service.create_order(wis_order())
        for _ in range(3):
            await service.advance_order(order.id)

        await service.assign_driver(order.id)

        assert order.status == OrderStatus.IN_TRANSIT
        assert order.driver is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["advance_order", "assign_driver", "remove_order"])
    async def test_unknown_id_is_not_found(self, service, command):
        with pytest.raises(OrderNotFoundError):
            await getattr(service, command)("missing")


class TestRemoveAndQueries:
    """Tests for delete and the read helpers."""

    @pytest.mark.asyncio
    async def test_remove_then_list_and_remove_again(self, service, broadcaster, listener):
        order = await service.create_order(wis_order())
        broadcaster.subscribe(listener, "t_wis")

        await service.remove_order(order.id)

        assert order.id not in [o.id for o in service.list_orders()]
        assert listener.drain() == [(ORDER_DELETED, {"id": order.id})]
        with pytest.raises(OrderNotFoundError):
            await service.remove_order(order.id)

    @pytest.mark.asyncio
    async def test_track_is_case_insensitive(self, service):
        order = await service.create_order(wis_order())

        assert service.track("wl-10001") is order
        assert service.track("  WL-10001 ") is order
        with pytest.raises(OrderNotFoundError):
            service.track("")

    @pytest.mark.asyncio
    async def test_driver_filter(self, service):
        assigned = await service.create_order(wis_order())
        await service.create_order(wis_order())
        await service.assign_driver(assigned.id)

        assert [o.id for o in service.list_orders(driver="van an")] == [assigned.id]
        assert service.list_orders(driver="nobody") == []

    @pytest.mark.asyncio
    async def test_kpis(self, service):
        delivered = await service.create_order(wis_order())
        out = await service.create_order(wis_order())
        await service.create_order(wis_order(tenantId="t_cafe"))
        for _ in range(5):
            await service.advance_order(delivered.id)
        for _ in range(4):
            await service.advance_order(out.id)

        kpis = service.kpis("t_wis")

        assert (kpis.total, kpis.delivered, kpis.out_for_delivery, kpis.active) == (2, 1, 1, 1)

    @pytest.mark.asyncio
    async def test_seed_demo_orders(self, service):
        count = await seed_demo_orders(service)

        assert count == len(DEMO_ORDERS) == len(service.store)
        statuses = {o.tenant_id: o.status for o in service.list_orders() if o.tenant_id != "t_wis"}
        assert statuses == {"t_cafe": OrderStatus.OUT_FOR_DELIVERY, "t_fnb": OrderStatus.DELIVERED}
