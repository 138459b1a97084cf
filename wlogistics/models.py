"""
Domain Models for Order Tracking

The Order record lives in memory for the process lifetime, so the domain
models are plain Pydantic models rather than ORM rows. Field names are
snake_case in Python and camelCase on the wire (``tenantId``, ``createdAt``);
origin and destination travel as ``from`` and ``to``.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """Delivery status, declared in lifecycle order."""
    CREATED = "Created"
    ASSIGNED = "Assigned"
    PICKED_UP = "Picked Up"
    IN_TRANSIT = "In Transit"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"


# Position in this list is the lifecycle step.
STATUS_FLOW: list[OrderStatus] = list(OrderStatus)


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# TENANTS
# =============================================================================

class Tenant(CamelModel):
    """A customer organisation; orders and realtime rooms are scoped by it."""
    id: str
    name: str
    color: str


TENANTS: tuple[Tenant, ...] = (
    Tenant(id="t_wis", name="Wisdom Logistics (HQ)", color="#2563eb"),
    Tenant(id="t_cafe", name="Cafe Hòa Bình Co.", color="#059669"),
    Tenant(id="t_fnb", name="F&B Express VN", color="#d97706"),
)

KNOWN_TENANT_IDS: frozenset[str] = frozenset(t.id for t in TENANTS)


def is_known_tenant(tenant_id: Optional[str]) -> bool:
    return bool(tenant_id) and tenant_id in KNOWN_TENANT_IDS


# =============================================================================
# ORDER PARTS
# =============================================================================

class Customer(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None


class OrderItem(CamelModel):
    name: Optional[str] = None
    qty: Optional[int] = None


class TimelineEntry(CamelModel):
    """One status reached by an order."""
    status: OrderStatus
    at: datetime
    note: Optional[str] = None


class Driver(CamelModel):
    """Assigned driver; every field is required so a driver is never partial."""
    id: str
    name: str
    plate: str


# =============================================================================
# ORDER
# =============================================================================

class Order(CamelModel):
    """
    A delivery order as held by the order store.

    Attributes:
        id: Opaque unique identifier
        code: Human-readable code such as WL-10001 (not enforced unique)
        tenant_id: Owning tenant; None when the create request omitted it
        customer: Customer name and phone
        origin: Pickup location (``from`` on the wire)
        destination: Drop-off location (``to`` on the wire)
        items: Name and quantity pairs
        status: Current position in STATUS_FLOW
        timeline: Append-only history of statuses reached
        driver: Assigned driver or None
        price: Order price
        created_at: Creation timestamp
        eta: Estimated arrival, a fixed offset from created_at
    """
    id: str
    code: str
    tenant_id: Optional[str] = None
    customer: Optional[Customer] = None
    origin: Optional[str] = Field(default=None, alias="from")
    destination: Optional[str] = Field(default=None, alias="to")
    items: list[OrderItem] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.CREATED
    timeline: list[TimelineEntry] = Field(default_factory=list)
    driver: Optional[Driver] = None
    price: Optional[Union[int, float]] = None
    created_at: datetime
    eta: datetime

    @property
    def is_delivered(self) -> bool:
        return self.status == OrderStatus.DELIVERED
