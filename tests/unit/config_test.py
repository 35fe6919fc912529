from pathlib import Path
from unittest import TestCase

import platformdirs

from phrasecache.config import APP_NAME, CacheConfig, DEFAULT_MAX_SIZE


class TestCacheConfig(TestCase):
    def test_defaults(self):
        config = CacheConfig()

        self.assertEqual(Path(platformdirs.user_cache_dir(APP_NAME)), config.resolved_directory())
        self.assertEqual(100 * 1024 * 1024, config.resolved_max_size())

    def test_explicit_values(self):
        config = CacheConfig(directory=Path('/tmp/cache'), max_size=1024)

        self.assertEqual(Path('/tmp/cache/phrasecache'), config.resolved_directory())
        self.assertEqual(1024, config.resolved_max_size())

    def test_non_positive_size_selects_the_default(self):
        self.assertEqual(DEFAULT_MAX_SIZE, CacheConfig(max_size=0).resolved_max_size())
        self.assertEqual(DEFAULT_MAX_SIZE, CacheConfig(max_size=-5).resolved_max_size())
