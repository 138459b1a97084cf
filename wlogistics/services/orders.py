"""
Order Command Service

The request/response surface over the order store: list, create, advance,
assign and remove, plus the read helpers behind the customer, admin and
driver views. Every mutation publishes a minimal ``{"id": ...}`` event to
the order's tenant room; listeners re-fetch to see the new state.

Usage:
    service = OrderService(InMemoryOrderStore(), TenantBroadcaster(), DriverDirectory())
    order = await service.create_order(OrderCreate(tenant_id="t_wis"))
    await service.advance_order(order.id)

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import uuid
from datetime import timedelta
from typing import Optional

from wlogistics import lifecycle
from wlogistics.core.config import Settings, get_settings
from wlogistics.core.exceptions import OrderNotFoundError, OrderValidationError
from wlogistics.models import STATUS_FLOW, Order, OrderStatus, TimelineEntry, is_known_tenant
from wlogistics.schemas import DriverAssign, KpiSnapshot, OrderCreate
from wlogistics.services.drivers import DriverDirectory
from wlogistics.services.realtime import (
    ORDER_CREATED,
    ORDER_DELETED,
    ORDER_UPDATED,
    BaseBroadcaster,
)
from wlogistics.store import BaseOrderStore

logger = logging.getLogger(__name__)


class OrderService:
    """
    Commands and queries over one order store.

    Attributes:
        store: Owner of all order records
        broadcaster: Tenant-room publisher for change notifications
        drivers: Source of drivers for assignments without driver data
        settings: Lifecycle knobs (ETA offset, code format, rewind, strictness)
    """

    def __init__(
        self,
        store: BaseOrderStore,
        broadcaster: BaseBroadcaster,
        drivers: Optional[DriverDirectory] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.settings = settings or get_settings()
        self.drivers = drivers or DriverDirectory(self.settings.driver_roster_list)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_orders(
        self,
        tenant_id: Optional[str] = None,
        driver: Optional[str] = None,
    ) -> list[Order]:
        """
        List orders, newest first.

        Args:
            tenant_id: Only orders of this tenant (all when empty)
            driver: Only orders whose driver name contains this text,
                case-insensitively

        Returns:
            Matching orders in store order
        """
        orders = self.store.all()
        if tenant_id:
            orders = [o for o in orders if o.tenant_id == tenant_id]
        if driver is not None:
            needle = driver.strip().lower()
            orders = [o for o in orders if o.driver and needle in o.driver.name.lower()]
        return orders

    def get_order(self, order_id: str) -> Order:
        order = self.store.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def track(self, code: str) -> Order:
        """Find an order by its human-readable code, ignoring case."""
        wanted = (code or "").strip().upper()
        for order in self.store.all():
            if wanted and order.code.upper() == wanted:
                return order
        raise OrderNotFoundError(code)

    def kpis(self, tenant_id: Optional[str] = None) -> KpiSnapshot:
        orders = self.list_orders(tenant_id)
        return KpiSnapshot(
            tenant_id=tenant_id,
            total=len(orders),
            delivered=sum(1 for o in orders if o.is_delivered),
            out_for_delivery=sum(1 for o in orders if o.status == OrderStatus.OUT_FOR_DELIVERY),
            active=sum(1 for o in orders if not o.is_delivered),
        )

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create_order(self, data: Optional[OrderCreate] = None) -> Order:
        """
        Create an order in status Created and insert it at the front.

        Missing fields are stored as null unless strict validation is on.

        Raises:
            OrderValidationError: Strict mode and tenant or customer missing
        """
        data = data or OrderCreate()
        if self.settings.strict_order_validation:
            self._validate(data)

        now = lifecycle.utcnow()
        code = data.code or f"{self.settings.order_code_prefix}{self.store.next_code_number()}"
        order = Order(
            id=uuid.uuid4().hex,
            code=code,
            tenant_id=data.tenant_id,
            customer=data.customer,
            origin=data.origin,
            destination=data.destination,
            items=list(data.items or []),
            status=OrderStatus.CREATED,
            timeline=[TimelineEntry(status=OrderStatus.CREATED, at=now)],
            driver=None,
            price=data.price,
            created_at=now,
            eta=now + timedelta(hours=self.settings.eta_hours),
        )
        self.store.insert(order)
        logger.info(f"Order {order.code} created (tenant={order.tenant_id})")

        await self.broadcaster.publish(order.tenant_id, ORDER_CREATED, {"id": order.id})
        return order

    async def advance_order(self, order_id: str) -> Order:
        """
        Move an order one step along the status flow.

        Raises:
            OrderNotFoundError: No order with this id
        """
        order = self.get_order(order_id)
        previous = order.status
        lifecycle.advance(order)
        if order.status != previous:
            logger.info(f"Order {order.code}: {previous.value} -> {order.status.value}")

        await self.broadcaster.publish(order.tenant_id, ORDER_UPDATED, {"id": order.id})
        return order

    async def assign_driver(self, order_id: str, driver: Optional[DriverAssign] = None) -> Order:
        """
        Attach a driver (if none yet) and mark the order Assigned.

        Args:
            order_id: Order to assign
            driver: Explicit driver data; a roster driver is used otherwise

        Raises:
            OrderNotFoundError: No order with this id
        """
        order = self.get_order(order_id)
        # The roster only advances when a driver is actually attached
        candidate = order.driver or self.drivers.resolve(
            driver.name if driver else None,
            driver.plate if driver else None,
        )
        previous = order.status
        lifecycle.assign(order, candidate, allow_rewind=self.settings.allow_assign_rewind)

        if STATUS_FLOW.index(previous) > STATUS_FLOW.index(order.status):
            logger.warning(f"Order {order.code} rewound from {previous.value} to {order.status.value} on assign")
        logger.info(f"Order {order.code} assigned to {order.driver.name}")

        await self.broadcaster.publish(order.tenant_id, ORDER_UPDATED, {"id": order.id})
        return order

    async def remove_order(self, order_id: str) -> Order:
        """
        Delete an order.

        Raises:
            OrderNotFoundError: No order with this id
        """
        order = self.store.delete(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        logger.info(f"Order {order.code} deleted")

        await self.broadcaster.publish(order.tenant_id, ORDER_DELETED, {"id": order.id})
        return order

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _validate(data: OrderCreate) -> None:
        problems = []
        if not is_known_tenant(data.tenant_id):
            problems.append(f"unknown tenantId {data.tenant_id!r}")
        if not data.customer or not data.customer.name:
            problems.append("customer.name is required")
        if not data.customer or not data.customer.phone:
            problems.append("customer.phone is required")
        if problems:
            raise OrderValidationError(problems)
