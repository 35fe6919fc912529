from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import platformdirs


APP_NAME = 'phrasecache'
DEFAULT_MAX_SIZE = 100 * 1024 * 1024


@dataclass(frozen=True)
class CacheConfig:
    """
    Settings for an on-disk response cache.

    Instances are passed to whatever needs them. Several differently configured caches can coexist in one process.
    """

    directory: Optional[Path] = None
    """
    The directory that holds the cache. Entries live in an `APP_NAME` subdirectory of it, so the directory can be
    shared with other programs. Defaults to the platform's user cache directory for this package.
    """

    max_size: int = DEFAULT_MAX_SIZE
    """
    The size in bytes above which the whole cache is evicted. Non-positive values select the default.
    """

    directory_levels: int = 2
    """
    The number of nested subdirectories used to spread entries out.
    """

    def resolved_directory(self) -> Path:
        if self.directory is not None:
            return Path(self.directory) / APP_NAME
        return Path(platformdirs.user_cache_dir(APP_NAME))

    def resolved_max_size(self) -> int:
        if self.max_size <= 0:
            return DEFAULT_MAX_SIZE
        return self.max_size
