"""Paths, default settings and logging setup"""

import copy
import json
import logging
import os
import sys
from pathlib import Path

APP_DIR_ENV = 'OABTRAY_HOME'

DATA_FILE = 'tracker_data.json'
SETTINGS_FILE = 'settings.json'
LOCK_FILE = 'oabtray.lock'
LOG_FILE = 'oabtray.log'

DEFAULT_SENSITIVITY_FACTOR = 0.5

ANIMATION_EFFECTS = ('reveal', 'scroll')
ANIMATION_TRIGGERS = ('sensitivity', 'fixed', 'delta')
API_PROVIDERS = ('binance', 'coingecko')

DEFAULT_SETTINGS = {
    'update_interval': 30,
    'warmup_delay': 1.0,
    'initial_display_duration': 5.0,
    'screen_width': 20,
    'animation_speed': 0.1,
    'animation_effect': 'reveal',
    'scroll_rotations': 1,
    'bull_run': True,
    'bull_animation_duration': 1.0,
    'bull_animation_speed': 0.1,
    'animation_trigger': 'sensitivity',
    'fixed_threshold': 5.0,
    'api_provider': 'binance',
    'request_timeout': 10,
    'enable_notifications': True,
    'min_notification_interval': 300,
    'sensitivity_choices': [0.5, 1.0, 2.5, 5.0],
}


def get_app_dir() -> Path:
    """Directory holding data, settings, lock and log files"""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / '.oabtray'


def get_data_file_path() -> Path:
    return get_app_dir() / DATA_FILE


def get_lock_file_path() -> Path:
    return get_app_dir() / LOCK_FILE


def setup_logging(debug: bool = False) -> logging.Logger:
    """Setup file and console logging for the application logger"""
    logger = logging.getLogger('OABTray')
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        log_dir = get_app_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not setup file logging: {e}")

    return logger


logger = logging.getLogger('OABTray.config')


def get_default_settings() -> dict:
    return copy.deepcopy(DEFAULT_SETTINGS)


def _validate(key: str, value, default):
    """Return a validated value for key, or raise ValueError/TypeError"""
    if key == 'update_interval':
        return max(10, int(value))
    if key == 'screen_width':
        return max(5, int(value))
    if key == 'scroll_rotations':
        return max(1, int(value))
    if key == 'animation_effect':
        if value not in ANIMATION_EFFECTS:
            raise ValueError(value)
        return value
    if key == 'animation_trigger':
        if value not in ANIMATION_TRIGGERS:
            raise ValueError(value)
        return value
    if key == 'api_provider':
        if value not in API_PROVIDERS:
            raise ValueError(value)
        return value
    if key == 'sensitivity_choices':
        choices = [float(v) for v in value if float(v) > 0]
        if not choices:
            raise ValueError(value)
        return choices
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError(value)
        return value
    if isinstance(default, (int, float)):
        number = type(default)(value)
        if number < 0:
            raise ValueError(value)
        return number
    return value


def merge_settings(default: dict, saved: dict) -> dict:
    """Merge saved settings into defaults, skipping unknown or invalid values"""
    for key, value in saved.items():
        if key not in default:
            logger.debug(f"Ignoring unknown setting: {key}")
            continue
        try:
            default[key] = _validate(key, value, default[key])
        except (ValueError, TypeError):
            logger.warning(f"Invalid setting value for {key}: {value!r}")
    return default


def load_settings(path: Path = None) -> dict:
    """Load settings.json over the defaults"""
    settings = get_default_settings()
    settings_path = path or get_app_dir() / SETTINGS_FILE

    if not settings_path.exists():
        logger.info("No existing settings found, using defaults")
        return settings

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            saved_settings = json.load(f)
        if not isinstance(saved_settings, dict):
            raise ValueError("settings root is not an object")
        merge_settings(settings, saved_settings)
        logger.info("Settings loaded successfully")
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Settings file corrupted, using defaults: {e}")
    except OSError as e:
        logger.warning(f"Could not load settings: {e}")

    return settings
