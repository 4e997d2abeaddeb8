"""Persistence of the last known price and display preferences"""

import json
import logging
from pathlib import Path
from typing import Optional

from .config import get_data_file_path
from .models import PersistedRecord

logger = logging.getLogger('OABTray.store')


class PersistentStore:
    """Whole-file JSON store for a single PersistedRecord.

    Reads never raise: a missing, truncated or incompatible file loads as
    the default record. Write failures are logged and the in-memory state
    stays authoritative.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_data_file_path()

    def load(self) -> PersistedRecord:
        """Load the record, falling back to defaults"""
        if not self.path.exists():
            logger.info("No saved price data found, starting fresh")
            return PersistedRecord()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                record = PersistedRecord.from_dict(json.load(f))
            logger.info(f"Loaded price data from {self.path}")
            return record
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Price data file corrupted, ignoring it: {e}")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Price data file incompatible, ignoring it: {e}")
        except OSError as e:
            logger.error(f"Error opening data file: {e}")
        return PersistedRecord()

    def save(self, record: PersistedRecord) -> bool:
        """Save with an atomic temp-file replace; returns False on failure"""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix('.tmp')
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f, indent=2)
            temp_path.replace(self.path)
            logger.debug("Price data saved")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving price data: {e}")
            return False
