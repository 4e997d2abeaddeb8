import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

# Mock the tray backend before run_app imports the tray module
sys.modules.setdefault('pystray', MagicMock())

from filelock import Timeout

from oabtray import app
from oabtray.config import APP_DIR_ENV


class TestApp(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.env_patcher = patch.dict(os.environ, {APP_DIR_ENV: self.tmp.name})
        self.env_patcher.start()

    def tearDown(self):
        self.env_patcher.stop()
        self.tmp.cleanup()

    def test_second_lock_fails(self):
        lock = app.acquire_instance_lock()
        try:
            with self.assertRaises(Timeout):
                app.acquire_instance_lock()
        finally:
            lock.release()

    @patch('oabtray.app.acquire_instance_lock', side_effect=Timeout('oabtray.lock'))
    @patch('oabtray.app.run_app')
    def test_main_exits_when_already_running(self, mock_run_app, mock_lock):
        with patch('builtins.print') as mock_print:
            self.assertEqual(app.main([]), 1)
        mock_print.assert_called_once_with("Another instance of the application is already running.")
        mock_run_app.assert_not_called()
        self.assertFalse((Path(self.tmp.name) / 'tracker_data.json').exists())

    @patch('oabtray.app.run_app', return_value=0)
    def test_main_runs_and_releases_lock(self, mock_run_app):
        self.assertEqual(app.main([]), 0)
        mock_run_app.assert_called_once()
        lock = app.acquire_instance_lock()
        lock.release()

    @patch('oabtray.tray.TrayDisplay')
    @patch('oabtray.app.build_tracker')
    def test_run_app_shuts_down_once(self, mock_build_tracker, mock_display_class):
        from oabtray.config import get_default_settings

        tracker = mock_build_tracker.return_value
        self.assertEqual(app.run_app(get_default_settings()), 0)
        mock_display_class.return_value.run.assert_called_once()
        tracker.stop.assert_called_once()
        tracker.save_state.assert_called_once()

    def test_build_tracker_loads_saved_state(self):
        from oabtray.config import get_default_settings
        from oabtray.models import PersistedRecord
        from oabtray.store import PersistentStore

        PersistentStore().save(PersistedRecord(last_price=42000.0, sensitivity_factor=1.0))
        tracker = app.build_tracker(get_default_settings(), display=object())

        snapshot, preferences = tracker.state.read()
        self.assertEqual(snapshot.price, 42000.0)
        self.assertEqual(preferences.sensitivity_factor, 1.0)
        tracker.stop()


if __name__ == '__main__':
    unittest.main()
