"""
Order Lifecycle Engine

Moves an order along STATUS_FLOW one step at a time and records each
status reached on the order's timeline. Lookups and NotFound handling
belong to the caller; these functions only ever see an existing order.

Usage:
    from wlogistics.lifecycle import advance, assign

    advance(order)                  # Created -> Assigned
    assign(order, driver)           # attach driver, status back to Assigned

Author: Khalil_Bannouri
Version: 1.0.0
"""

from datetime import datetime, timezone
from typing import Optional

from wlogistics.models import STATUS_FLOW, Driver, Order, OrderStatus, TimelineEntry


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _record(order: Order, status: OrderStatus, at: datetime, note: Optional[str] = None) -> None:
    order.status = status
    order.timeline.append(TimelineEntry(status=status, at=at, note=note))


def advance(order: Order, now: Optional[datetime] = None) -> Order:
    """
    Advance an order to the next status.

    At the terminal status (Delivered) the order is returned untouched,
    so repeated calls settle there and the timeline stops growing.

    Args:
        order: Order to mutate in place
        now: Timestamp for the timeline entry (defaults to current UTC time)

    Returns:
        The same order object
    """
    index = STATUS_FLOW.index(order.status)
    if index >= len(STATUS_FLOW) - 1:
        return order

    _record(order, STATUS_FLOW[index + 1], now or utcnow())
    return order


def assign(
    order: Order,
    driver: Driver,
    now: Optional[datetime] = None,
    allow_rewind: bool = True,
) -> Order:
    """
    Attach a driver and mark the order Assigned.

    An order that already has a driver keeps it; ``driver`` is then ignored.
    With ``allow_rewind`` the status is set to Assigned and a timeline entry
    appended on every call, even when the order had moved past Assigned.
    Without it, only Created orders change status.

    Args:
        order: Order to mutate in place
        driver: Driver to attach if the order has none
        now: Timestamp for the timeline entry
        allow_rewind: Reset status to Assigned regardless of progress

    Returns:
        The same order object
    """
    if order.driver is None:
        order.driver = driver

    if not allow_rewind and order.status != OrderStatus.CREATED:
        return order

    _record(
        order,
        OrderStatus.ASSIGNED,
        now or utcnow(),
        note=f"Driver {order.driver.name} ({order.driver.plate}) assigned",
    )
    return order
