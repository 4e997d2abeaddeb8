"""Desktop notifications for big price moves"""

import logging
import time
from typing import Callable

from plyer import notification

logger = logging.getLogger('OABTray.notifier')


class NotificationManager:
    """Debounced plyer notifications"""

    def __init__(self, settings: dict, clock: Callable[[], float] = time.time):
        self.settings = settings
        self.clock = clock
        self.last_notification_time = None
        self.stats = {'total_attempts': 0, 'success': 0, 'failed': 0, 'debounced': 0}

    def notify(self, title: str, message: str, duration: int = 5) -> bool:
        """Send a notification unless disabled or still in the cooldown window"""
        if not self.settings.get('enable_notifications', True):
            return False

        self.stats['total_attempts'] += 1
        cooldown = self.settings.get('min_notification_interval', 300)
        now = self.clock()
        if self.last_notification_time is not None and now - self.last_notification_time < cooldown:
            logger.debug(f"Notification '{title}' debounced. Cooldown active.")
            self.stats['debounced'] += 1
            return False

        try:
            notification.notify(
                title=str(title).strip()[:100],
                message=str(message).strip()[:500],
                app_name="OAB Tray",
                timeout=duration,
            )
        except Exception as e:
            logger.warning(f"Notification failed: {e}")
            self.stats['failed'] += 1
            return False

        self.stats['success'] += 1
        self.last_notification_time = now
        logger.info(f"Notification sent: {title}")
        return True

    def log_stats(self) -> None:
        logger.info(
            "Notification stats: {total_attempts} attempts, {success} sent, "
            "{debounced} debounced, {failed} failed".format(**self.stats)
        )
