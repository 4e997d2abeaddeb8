"""Entry point: single-instance guard, wiring and shutdown"""

import argparse
import logging
import sys
import traceback

from filelock import FileLock, Timeout

from . import __version__
from .config import get_app_dir, get_lock_file_path, load_settings, setup_logging
from .models import TrackerState
from .notifier import NotificationManager
from .store import PersistentStore
from .tracker import PriceTracker

logger = logging.getLogger('OABTray.app')


def acquire_instance_lock(path=None) -> FileLock:
    """Take the advisory single-instance lock or raise filelock.Timeout"""
    lock_path = path or get_lock_file_path()
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(lock_path), timeout=0)
    lock.acquire()
    return lock


def build_tracker(settings: dict, display) -> PriceTracker:
    store = PersistentStore()
    state = TrackerState.from_record(store.load())
    snapshot, _ = state.read()
    if not snapshot.is_empty:
        logger.info(f"Loaded price from disk: ${snapshot.price:,.2f} ({snapshot.change_percent:+.2f}%)")
    return PriceTracker(
        state,
        display,
        settings,
        store=store,
        notifier=NotificationManager(settings),
    )


def run_app(settings: dict) -> int:
    from .tray import TrayDisplay

    display = TrayDisplay(__version__, settings['sensitivity_choices'])
    tracker = build_tracker(settings, display)
    display.setup(tracker)
    try:
        display.run()
    finally:
        tracker.stop()
        tracker.save_state()
        logger.info("Application shutdown complete")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog='oabtray', description='Bitcoin price in the system tray')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--version', action='version', version=f'OAB Tray v{__version__}')
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    try:
        lock = acquire_instance_lock()
    except Timeout:
        print("Another instance of the application is already running.")
        return 1
    except OSError as e:
        logger.error(f"Error acquiring lock: {e}")
        return 1

    try:
        logger.info(f"Starting OAB Tray v{__version__} (data in {get_app_dir()})")
        return run_app(load_settings())
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        return 0
    except Exception as e:
        logger.critical(f"Critical runtime error: {e}")
        logger.critical(traceback.format_exc())
        return 1
    finally:
        lock.release()


if __name__ == "__main__":
    sys.exit(main())
