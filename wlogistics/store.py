"""
Order Store

Owns every order record. The service layer receives a store instance
instead of reaching for a module-level list, so each app (and each test)
can construct an isolated one.

Only the in-memory store ships; its contents vanish on restart.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from wlogistics.models import Order

logger = logging.getLogger(__name__)


class BaseOrderStore(ABC):
    """Persistence boundary for orders."""

    @abstractmethod
    def all(self) -> list[Order]:
        """Return every order, newest first."""
        pass

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    def insert(self, order: Order) -> Order:
        """Add an order at the front of the store."""
        pass

    @abstractmethod
    def delete(self, order_id: str) -> Optional[Order]:
        """Remove and return an order, or None when absent."""
        pass

    @abstractmethod
    def next_code_number(self) -> int:
        """Return the next number for a generated order code."""
        pass

    def __len__(self) -> int:
        return len(self.all())

    def __iter__(self) -> Iterator[Order]:
        return iter(self.all())


class InMemoryOrderStore(BaseOrderStore):
    """
    List-backed store.

    Orders are held by reference: the lifecycle engine mutates the stored
    object in place, so ``get`` followed by a mutation needs no write-back.

    Args:
        code_start: First number handed out by ``next_code_number``
    """

    def __init__(self, code_start: int = 10001):
        self._orders: list[Order] = []
        self._codes = itertools.count(code_start)

    def all(self) -> list[Order]:
        return list(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def insert(self, order: Order) -> Order:
        self._orders.insert(0, order)
        logger.debug(f"Stored order {order.id} ({len(self._orders)} total)")
        return order

    def delete(self, order_id: str) -> Optional[Order]:
        for index, order in enumerate(self._orders):
            if order.id == order_id:
                return self._orders.pop(index)
        return None

    def next_code_number(self) -> int:
        return next(self._codes)

    def __len__(self) -> int:
        return len(self._orders)
