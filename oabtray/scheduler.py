"""Cancellable periodic task"""

import logging
import threading
from typing import Callable

logger = logging.getLogger('OABTray.scheduler')


class PeriodicTask:
    """Calls func every interval seconds until stopped.

    Waiting goes through a threading.Event so stop() interrupts the current
    wait immediately. Tests drive the task with tick() and never wait.
    """

    def __init__(self, interval: float, func: Callable[[], None], name: str = 'PeriodicTask'):
        self.interval = interval
        self.func = func
        self.name = name
        self.ticks = 0
        self._stop_event = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def tick(self) -> None:
        """Run func once; exceptions are logged so the loop keeps going"""
        self.ticks += 1
        try:
            self.func()
        except Exception as e:
            logger.exception(f"{self.name} tick failed: {e}")

    def wait(self, seconds: float) -> bool:
        """Sleep up to seconds; returns True if the task was stopped meanwhile"""
        return self._stop_event.wait(seconds)

    def run(self) -> None:
        """Block, ticking every interval, until stop() is called"""
        logger.debug(f"{self.name} running every {self.interval}s")
        while not self.wait(self.interval):
            self.tick()
        logger.debug(f"{self.name} stopped")

    def stop(self) -> None:
        self._stop_event.set()
