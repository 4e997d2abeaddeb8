import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from oabtray.config import (APP_DIR_ENV, get_app_dir, get_data_file_path, get_default_settings,
                            load_settings, merge_settings)


class TestSettings(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / 'settings.json'

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults_when_missing(self):
        self.assertEqual(load_settings(self.path), get_default_settings())

    def test_defaults_are_independent_copies(self):
        first = get_default_settings()
        first['sensitivity_choices'].append(99)
        self.assertNotIn(99, get_default_settings()['sensitivity_choices'])

    def test_merge_validates_values(self):
        settings = merge_settings(get_default_settings(), {
            'update_interval': 3,
            'animation_trigger': 'delta',
            'animation_effect': 'sparkle',
            'api_provider': 'coingecko',
            'bull_run': 'yes',
            'fixed_threshold': '2.5',
            'sensitivity_choices': [0, 1, 3],
            'unknown_key': True,
        })
        self.assertEqual(settings['update_interval'], 10)
        self.assertEqual(settings['animation_trigger'], 'delta')
        self.assertEqual(settings['animation_effect'], 'reveal')
        self.assertEqual(settings['api_provider'], 'coingecko')
        self.assertTrue(settings['bull_run'])
        self.assertEqual(settings['fixed_threshold'], 2.5)
        self.assertEqual(settings['sensitivity_choices'], [1.0, 3.0])
        self.assertNotIn('unknown_key', settings)

    def test_corrupt_file_uses_defaults(self):
        self.path.write_text('{not json', encoding='utf-8')
        self.assertEqual(load_settings(self.path), get_default_settings())

    def test_non_object_file_uses_defaults(self):
        self.path.write_text(json.dumps([1, 2, 3]), encoding='utf-8')
        self.assertEqual(load_settings(self.path), get_default_settings())

    def test_saved_values_loaded(self):
        self.path.write_text(json.dumps({'update_interval': 60, 'scroll_rotations': 3}), encoding='utf-8')
        settings = load_settings(self.path)
        self.assertEqual(settings['update_interval'], 60)
        self.assertEqual(settings['scroll_rotations'], 3)

    def test_app_dir_override(self):
        with patch.dict(os.environ, {APP_DIR_ENV: self.tmp.name}):
            self.assertEqual(get_app_dir(), Path(self.tmp.name))
            self.assertEqual(get_data_file_path(), Path(self.tmp.name) / 'tracker_data.json')


if __name__ == '__main__':
    unittest.main()
