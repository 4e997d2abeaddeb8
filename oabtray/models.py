"""Data structures shared by the tracker, store, animator and tray"""

import math
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional

from .config import DEFAULT_SENSITIVITY_FACTOR


def normalize_sensitivity(value) -> float:
    """Return a usable sensitivity factor; zero, negative or garbage gives the default"""
    try:
        factor = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SENSITIVITY_FACTOR
    if not math.isfinite(factor) or not factor > 0:
        return DEFAULT_SENSITIVITY_FACTOR
    return factor


@dataclass
class PriceSnapshot:
    """Most recent price reading"""
    price: float = 0.0
    change_percent: float = 0.0
    observed_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.observed_at is None and self.price == 0

    def is_stale(self, max_age: timedelta, now: Optional[datetime] = None) -> bool:
        if self.observed_at is None:
            return True
        now = now or datetime.now()
        return now - self.observed_at > max_age


@dataclass
class DisplayPreferences:
    sensitivity_factor: float = DEFAULT_SENSITIVITY_FACTOR
    abbreviated_display: bool = False

    def __post_init__(self):
        self.sensitivity_factor = normalize_sensitivity(self.sensitivity_factor)


@dataclass
class PersistedRecord:
    """On-disk union of the snapshot and the display preferences"""
    last_price: float = 0.0
    last_change_percent: float = 0.0
    last_update_time: Optional[datetime] = None
    sensitivity_factor: float = DEFAULT_SENSITIVITY_FACTOR
    abbreviated_display: bool = False

    def to_dict(self) -> dict:
        return {
            'last_price': self.last_price,
            'last_change_percent': self.last_change_percent,
            'last_update_time': self.last_update_time.isoformat() if self.last_update_time else None,
            'sensitivity_factor': self.sensitivity_factor,
            'abbreviated_display': self.abbreviated_display,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PersistedRecord':
        """Build a record from decoded JSON; raises on any shape mismatch"""
        if not isinstance(data, dict):
            raise TypeError("record is not an object")

        update_time = data['last_update_time']
        if update_time is not None:
            update_time = datetime.fromisoformat(update_time)
            if update_time.tzinfo is not None:
                raise TypeError("last_update_time carries a UTC offset")

        abbreviated = data['abbreviated_display']
        if not isinstance(abbreviated, bool):
            raise TypeError("abbreviated_display is not a boolean")

        last_price = float(data['last_price'])
        last_change_percent = float(data['last_change_percent'])
        if not (math.isfinite(last_price) and math.isfinite(last_change_percent)):
            raise ValueError("non-finite price in record")

        return cls(
            last_price=last_price,
            last_change_percent=last_change_percent,
            last_update_time=update_time,
            sensitivity_factor=normalize_sensitivity(data['sensitivity_factor']),
            abbreviated_display=abbreviated,
        )


@dataclass
class TrackerState:
    """Lock-guarded snapshot and preferences owned by the price tracker.

    Readers get copies taken under the lock, so they may see a slightly
    stale snapshot but never a half-written one.
    """
    snapshot: PriceSnapshot = field(default_factory=PriceSnapshot)
    preferences: DisplayPreferences = field(default_factory=DisplayPreferences)
    is_first_update: bool = True
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def from_record(cls, record: PersistedRecord) -> 'TrackerState':
        return cls(
            snapshot=PriceSnapshot(
                price=record.last_price,
                change_percent=record.last_change_percent,
                observed_at=record.last_update_time,
            ),
            preferences=DisplayPreferences(
                sensitivity_factor=record.sensitivity_factor,
                abbreviated_display=record.abbreviated_display,
            ),
        )

    def to_record(self) -> PersistedRecord:
        with self._lock:
            return PersistedRecord(
                last_price=self.snapshot.price,
                last_change_percent=self.snapshot.change_percent,
                last_update_time=self.snapshot.observed_at,
                sensitivity_factor=self.preferences.sensitivity_factor,
                abbreviated_display=self.preferences.abbreviated_display,
            )

    def read(self):
        """Return consistent copies of (snapshot, preferences)"""
        with self._lock:
            return replace(self.snapshot), replace(self.preferences)

    def record_price(self, price: float, change_percent: float,
                     observed_at: Optional[datetime] = None):
        """Store a new reading; returns (previous snapshot, was first update)"""
        observed_at = observed_at or datetime.now()
        with self._lock:
            previous = replace(self.snapshot)
            if previous.observed_at is not None and observed_at < previous.observed_at:
                observed_at = previous.observed_at
            self.snapshot.price = price
            self.snapshot.change_percent = change_percent
            self.snapshot.observed_at = observed_at
            was_first = self.is_first_update
            self.is_first_update = False
            return previous, was_first

    def set_sensitivity_factor(self, value) -> float:
        with self._lock:
            self.preferences.sensitivity_factor = normalize_sensitivity(value)
            return self.preferences.sensitivity_factor

    def toggle_abbreviated_display(self) -> bool:
        with self._lock:
            self.preferences.abbreviated_display = not self.preferences.abbreviated_display
            return self.preferences.abbreviated_display
