"""
Driver Directory

Supplies a driver when an order is assigned without explicit driver data.
Drivers come round-robin from a configured roster; each assignment gets a
fresh driver id.
"""

import itertools
import logging
import uuid
from typing import Iterable, Optional

from wlogistics.models import Driver

logger = logging.getLogger(__name__)

DEFAULT_ROSTER: tuple[tuple[str, str], ...] = (("Demo Driver", "59A-000.00"),)


class DriverDirectory:
    """
    Round-robin source of drivers.

    Args:
        roster: (name, plate) pairs; the demo driver is used when empty
    """

    def __init__(self, roster: Iterable[tuple[str, str]] = ()):
        self.roster = tuple(roster) or DEFAULT_ROSTER
        self._cycle = itertools.cycle(self.roster)

    @staticmethod
    def make_driver(name: str, plate: str) -> Driver:
        return Driver(id=f"drv_{uuid.uuid4().hex[:10]}", name=name, plate=plate)

    def next_driver(self) -> Driver:
        name, plate = next(self._cycle)
        return self.make_driver(name, plate)

    def resolve(self, name: Optional[str] = None, plate: Optional[str] = None) -> Driver:
        """Use the caller's driver data when complete, else the next roster driver."""
        if name and plate:
            return self.make_driver(name, plate)
        driver = self.next_driver()
        logger.debug(f"Picked roster driver {driver.name} ({driver.plate})")
        return driver
