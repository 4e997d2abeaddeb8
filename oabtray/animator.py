"""Text animations that temporarily take over the tray title"""

import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, Optional

from .formatter import SCREEN_WIDTH, fit_to_width

logger = logging.getLogger('OABTray.animator')

BULL_GLYPH = '🐂'
REVEAL_HOLD_SECONDS = 1.0


def reveal_frames(text: str, width: int = SCREEN_WIDTH, rng: Optional[random.Random] = None) -> Iterator[str]:
    """Full text first, then blank one random remaining character per frame"""
    rng = rng or random.Random()
    chars = list(text)
    positions = list(range(len(chars)))
    yield fit_to_width(text, width)
    while positions:
        remove_pos = positions.pop(rng.randrange(len(positions)))
        chars[remove_pos] = ' '
        yield fit_to_width(''.join(chars), width)


def scroll_frames(text: str, width: int = SCREEN_WIDTH, rotations: int = 1) -> Iterator[str]:
    """Rotate text one character per frame for the given number of full turns"""
    loop = text.ljust(width) + ' '
    for _ in range(rotations):
        for i in range(len(loop)):
            yield (loop[i:] + loop[:i])[:width]


def bull_frames(width: int = SCREEN_WIDTH, steps: int = 10) -> Iterator[str]:
    """Sweep a single marker across the field"""
    for step in range(steps):
        yield fit_to_width(' ' * (step % width) + BULL_GLYPH, width)


class Animator:
    """Single-slot animation worker.

    trigger() hands the animation to a dedicated one-thread executor and
    returns immediately. Any trigger that arrives while an animation is
    running is dropped, never queued. When the effect ends the restore
    callback redraws the price from the latest snapshot.
    """

    def __init__(self, display, restore: Callable[[], None], settings: dict = None,
                 sleep: Callable[[float], None] = time.sleep,
                 rng: Optional[random.Random] = None):
        settings = settings or {}
        self.display = display
        self.restore = restore
        self.sleep = sleep
        self.rng = rng or random.Random()

        self.width = settings.get('screen_width', SCREEN_WIDTH)
        self.speed = settings.get('animation_speed', 0.1)
        self.effect = settings.get('animation_effect', 'reveal')
        self.rotations = settings.get('scroll_rotations', 1)
        self.bull_run = settings.get('bull_run', True)
        self.bull_duration = settings.get('bull_animation_duration', 1.0)
        self.bull_speed = settings.get('bull_animation_speed', 0.1)

        self._animating = False
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='Animator')

    @property
    def is_animating(self) -> bool:
        with self._lock:
            return self._animating

    def _acquire(self) -> bool:
        with self._lock:
            if self._animating:
                return False
            self._animating = True
            return True

    def _release(self) -> None:
        with self._lock:
            self._animating = False

    def trigger(self, text: str) -> bool:
        """Start an animation in the background; False if one is already running"""
        if not self._acquire():
            logger.debug(f"Animation already running, dropping '{text}'")
            return False
        try:
            self._executor.submit(self._run, text)
        except RuntimeError as e:
            logger.warning(f"Animation worker unavailable: {e}")
            self._release()
            return False
        return True

    def animate(self, text: str) -> bool:
        """Run an animation in the calling thread; False if one is already running"""
        if not self._acquire():
            logger.debug(f"Animation already running, dropping '{text}'")
            return False
        self._run(text)
        return True

    def _run(self, text: str) -> None:
        logger.info(f"Animating: {text.strip()}")
        try:
            if self.bull_run:
                self._play(bull_frames(self.width, self._bull_steps()), self.bull_speed)
            if self.effect == 'scroll':
                self._play(scroll_frames(text, self.width, self.rotations), self.speed)
            else:
                frames = reveal_frames(text, self.width, self.rng)
                self.display.set_title(next(frames))
                self.sleep(REVEAL_HOLD_SECONDS)
                self._play(frames, self.speed)
        except Exception as e:
            logger.error(f"Animation failed: {e}")
        finally:
            try:
                self.restore()
            except Exception as e:
                logger.error(f"Display restore after animation failed: {e}")
            finally:
                self._release()

    def _bull_steps(self) -> int:
        if self.bull_speed <= 0:
            return 0
        return int(round(self.bull_duration / self.bull_speed))

    def _play(self, frames: Iterator[str], delay: float) -> None:
        for frame in frames:
            self.display.set_title(frame)
            self.sleep(delay)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
