"""Price update loop: fetch, remember, display, celebrate"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from .animator import Animator
from .feed import PriceFeed, PriceFeedError
from .formatter import (CURRENCY_SYMBOL, format_error, format_price_string,
                        format_tooltip)
from .models import PriceSnapshot, TrackerState
from .notifier import NotificationManager
from .scheduler import PeriodicTask
from .store import PersistentStore

logger = logging.getLogger('OABTray.tracker')

UP_ANIMATION_TEXT = 'ALABADO!!!'
DOWN_ANIMATION_TEXT = 'PUTA MADRE!'


def get_animation_text(change_percent: float, sensitivity_factor: float, rule: str = 'sensitivity',
                       fixed_threshold: float = 5.0,
                       previous: Optional[PriceSnapshot] = None) -> Optional[str]:
    """Decide whether a reading deserves an animation and which one.

    sensitivity: |change| >= sensitivity factor
    fixed:       |change| >= fixed threshold
    delta:       |change - previous change| >= fixed threshold, only when
                 a previous reading exists
    """
    if rule == 'delta':
        if previous is None or previous.observed_at is None:
            return None
        move = change_percent - previous.change_percent
        threshold = fixed_threshold
    elif rule == 'fixed':
        move = change_percent
        threshold = fixed_threshold
    else:
        move = change_percent
        threshold = sensitivity_factor

    if move >= threshold:
        return UP_ANIMATION_TEXT
    if move <= -threshold:
        return DOWN_ANIMATION_TEXT
    return None


class PriceTracker:
    """Owns the tracker state and drives the periodic update"""

    def __init__(self, state: TrackerState, display, settings: dict,
                 feed: Optional[PriceFeed] = None,
                 store: Optional[PersistentStore] = None,
                 notifier: Optional[NotificationManager] = None,
                 animator: Optional[Animator] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.state = state
        self.display = display
        self.settings = settings
        self.feed = feed or PriceFeed(settings['api_provider'], timeout=settings['request_timeout'])
        self.store = store or PersistentStore()
        self.notifier = notifier
        self.clock = clock

        self.scheduler = PeriodicTask(settings['update_interval'], self.fetch_and_update_price,
                                      name='PriceUpdater')
        self.sleep = sleep or self.scheduler.wait
        self.animator = animator or Animator(display, self.redraw, settings)
        self.update_thread = None

    # Update loop

    def start(self) -> None:
        self.update_thread = threading.Thread(target=self.run, daemon=True, name='PriceUpdater')
        self.update_thread.start()
        logger.info("Price monitoring started")

    def run(self) -> None:
        """Warm up, fetch right away if the saved price is stale, then tick"""
        self.sleep(self.settings['warmup_delay'])
        if self.scheduler.stopped:
            return

        snapshot, _ = self.state.read()
        max_age = timedelta(seconds=self.settings['update_interval'])
        if snapshot.is_stale(max_age, now=self.clock()):
            self.scheduler.tick()
        else:
            logger.info("Saved price is fresh, waiting for the next tick")

        self.scheduler.run()

    def stop(self) -> None:
        self.scheduler.stop()
        self.animator.shutdown()
        if self.notifier:
            self.notifier.log_stats()

    def fetch_and_update_price(self) -> bool:
        """One update cycle; returns True when a new price was recorded"""
        try:
            price, change_percent = self.feed.fetch_price()
        except PriceFeedError as e:
            logger.warning(f"Error fetching price: {e}")
            self.display_error(e)
            return False

        previous, was_first = self.state.record_price(price, change_percent, self.clock())
        logger.info(f"Price updated: ${price:,.2f} ({change_percent:+.2f}%)")
        self.save_state()

        if was_first:
            self.show_initial_display()
            self.sleep(self.settings['initial_display_duration'])
            if self.scheduler.stopped:
                return True

        self.update_tray(previous)
        return True

    # Display

    def show_initial_display(self) -> None:
        """Full-detail line shown once, right after the first fetch"""
        snapshot, preferences = self.state.read()
        line = format_price_string(snapshot.price, snapshot.change_percent,
                                   preferences.sensitivity_factor, abbreviated=False)
        if self.animator.is_animating:
            return
        self.display.set_title(line)
        self.display.set_tooltip(format_tooltip(snapshot))

    def update_tray(self, previous: Optional[PriceSnapshot] = None) -> None:
        """Redraw and start an animation when the move is big enough"""
        self.refresh_display()

        snapshot, preferences = self.state.read()
        text = get_animation_text(
            snapshot.change_percent,
            preferences.sensitivity_factor,
            rule=self.settings['animation_trigger'],
            fixed_threshold=self.settings['fixed_threshold'],
            previous=previous,
        )
        if text and self.animator.trigger(text):
            self.send_alert(text, snapshot, preferences)

    def refresh_display(self) -> None:
        """Redraw unless an animation currently owns the title"""
        if self.animator.is_animating:
            logger.debug("Animation running, skipping redraw")
            return
        self.redraw()

    def redraw(self) -> None:
        snapshot, preferences = self.state.read()
        if snapshot.is_empty:
            title = CURRENCY_SYMBOL
        else:
            title = format_price_string(snapshot.price, snapshot.change_percent,
                                        preferences.sensitivity_factor,
                                        preferences.abbreviated_display)
        self.display.set_title(title)
        self.display.set_tooltip(format_tooltip(snapshot))

    def display_error(self, error: Exception) -> None:
        self.display.set_tooltip(str(error))
        if self.animator.is_animating:
            return
        self.display.set_title(format_error(self.settings['screen_width']))

    def send_alert(self, text: str, snapshot: PriceSnapshot, preferences) -> None:
        if not self.notifier:
            return
        line = format_price_string(snapshot.price, snapshot.change_percent,
                                   preferences.sensitivity_factor, abbreviated=False)
        self.notifier.notify(f"OAB Tray: {text}", line)

    # Preferences

    def set_sensitivity_factor(self, value) -> float:
        factor = self.state.set_sensitivity_factor(value)
        logger.info(f"Sensitivity factor set to {factor}")
        self.save_state()
        self.refresh_display()
        return factor

    def toggle_abbreviated_display(self) -> bool:
        enabled = self.state.toggle_abbreviated_display()
        logger.info(f"Price in millions {'enabled' if enabled else 'disabled'}")
        self.save_state()
        self.refresh_display()
        return enabled

    def save_state(self) -> bool:
        return self.store.save(self.state.to_record())
