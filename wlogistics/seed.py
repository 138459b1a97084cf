"""
Demo seed data.

Fills a fresh store with a few orders per tenant at different points of the
lifecycle so every view has something to show right after startup.
"""

import logging

from wlogistics.schemas import OrderCreate
from wlogistics.services.orders import OrderService

logger = logging.getLogger(__name__)

# (create payload, number of advance steps, assign first)
DEMO_ORDERS: list[tuple[dict, int, bool]] = [
    (
        {
            "tenantId": "t_wis",
            "customer": {"name": "Nguyễn Minh Châu", "phone": "0903 123 456"},
            "from": "Kho Tân Bình, HCM",
            "to": "Q.1, HCM",
            "items": [{"name": "Thùng sữa 24 hộp", "qty": 2}],
            "price": 45000,
        },
        3,
        True,
    ),
    (
        {
            "tenantId": "t_wis",
            "customer": {"name": "Trần Quốc Huy", "phone": "0912 555 010"},
            "from": "Kho Thủ Đức, HCM",
            "to": "Q.7, HCM",
            "items": [{"name": "Nước suối 500ml", "qty": 4}],
            "price": 60000,
        },
        0,
        False,
    ),
    (
        {
            "tenantId": "t_cafe",
            "customer": {"name": "Lê Thảo Vy", "phone": "0988 246 810"},
            "from": "Xưởng rang Q.3, HCM",
            "to": "Bình Thạnh, HCM",
            "items": [{"name": "Cà phê hạt 1kg", "qty": 3}],
            "price": 120000,
        },
        4,
        True,
    ),
    (
        {
            "tenantId": "t_fnb",
            "customer": {"name": "Phạm Gia Bảo", "phone": "0977 135 790"},
            "from": "Bếp trung tâm Q.10, HCM",
            "to": "Phú Nhuận, HCM",
            "items": [{"name": "Suất cơm văn phòng", "qty": 10}],
            "price": 350000,
        },
        5,
        True,
    ),
]


async def seed_demo_orders(service: OrderService) -> int:
    """Create the demo orders; returns how many were added."""
    for payload, steps, assign_first in DEMO_ORDERS:
        order = await service.create_order(OrderCreate.model_validate(payload))
        if assign_first:
            await service.assign_driver(order.id)
            steps -= 1
        for _ in range(steps):
            await service.advance_order(order.id)

    logger.info(f"Seeded {len(DEMO_ORDERS)} demo orders")
    return len(DEMO_ORDERS)
