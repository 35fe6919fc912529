from abc import ABC, abstractmethod
import logging
import os
from pathlib import Path
import re
import tempfile
import threading
from typing import Dict, Iterator

from .util import clamp


logger = logging.getLogger(__name__)


class StoreError(Exception):
    """
    Raised when a content store cannot complete an operation.
    """


class EntryNotFound(StoreError):
    def __init__(self, key: str):
        super().__init__('No entry stored for key {}'.format(key))
        self.__key = key

    @property
    def key(self) -> str:
        return self.__key


class ContentStore(ABC):
    """
    An abstraction of durable key to bytes storage.

    A content store knows nothing about HTTP. It stores opaque blobs under opaque keys and can report how much space
    they use. Concurrent writers to the same key must never leave a partially written value behind.
    """

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """
        Store `data` under `key`, replacing any existing value.

        @throws StoreError
          If the value could not be written.
        """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """
        Read the value stored under `key`.

        @throws EntryNotFound
          If nothing is stored under `key`.
        @throws StoreError
          If the value could not be read.
        """

    @abstractmethod
    def total_size(self) -> int:
        """
        The number of bytes used by all stored values.

        @throws StoreError
          If the size could not be determined.
        """

    @abstractmethod
    def clear(self) -> None:
        """
        Delete every stored value.

        @throws StoreError
          If the store could not be emptied.
        """


class FileStore(ContentStore):
    _key_pattern = re.compile(r'^[0-9A-Za-z_-]+$')
    _temp_pattern = re.compile(r'^\.[0-9A-Za-z_]+\.tmp$')

    def __init__(self, directory: Path, directory_levels: int = 2) -> None:
        """
        Initialize the file store.

        Only files laid out the way `put()` writes them count as entries. Other files below `directory` are neither
        measured nor deleted.

        @param directory
          The path to the root directory of the store. It is created on the first write.
        @param directory_levels
          The number of subdirectory levels to use below the root. This will be clamped to be between 0 and 20.
        """
        self.__directory = Path(directory)
        self.__directory_levels = clamp(directory_levels, 0, 20)

    @property
    def directory(self) -> Path:
        return self.__directory

    def _get_path(self, key: str) -> Path:
        if not self._key_pattern.match(key):
            raise StoreError('Refusing to use {!r} as a file name'.format(key))
        # Every entry file lives exactly `levels` directories deep, so a file can never shadow a directory.
        if len(key) <= self.__directory_levels:
            raise StoreError('Key {!r} is too short for {} directory levels'.format(key, self.__directory_levels))
        levels = self.__directory_levels
        subdirectories = list(key[:levels]) + [key[levels:]]
        return self.__directory.joinpath(*subdirectories)

    def _is_level_directory(self, name: str) -> bool:
        return len(name) == 1 and self._key_pattern.match(name) is not None

    def _depth(self, path: str) -> int:
        return len(Path(path).parts) - len(self.__directory.parts)

    def put(self, key: str, data: bytes) -> None:
        path = self._get_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Readers must only ever see complete values, so write next to the destination and rename into place.
            fd, temp_name = tempfile.mkstemp(prefix='.', suffix='.tmp', dir=str(path.parent))
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(data)
                os.replace(temp_name, str(path))
            except BaseException:
                try:
                    os.unlink(temp_name)
                except OSError:
                    logger.warning('Could not remove temporary file {}'.format(temp_name))
                raise
        except OSError as e:
            raise StoreError('Could not write entry {}: {}'.format(key, e)) from e

    def get(self, key: str) -> bytes:
        path = self._get_path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise EntryNotFound(key) from e
        except OSError as e:
            raise StoreError('Could not read entry {}: {}'.format(key, e)) from e

    def _owned_files(self) -> Iterator[str]:
        """
        Yield the entry files and leftover temporary files of this store, all exactly `levels` directories deep.
        """
        def on_error(e: OSError):
            # A missing root just means nothing has been written yet.
            if not isinstance(e, FileNotFoundError):
                raise StoreError('Could not walk {}: {}'.format(self.__directory, e)) from e

        for root, directories, files in os.walk(str(self.__directory), onerror=on_error):
            if self._depth(root) < self.__directory_levels:
                directories[:] = [name for name in directories if self._is_level_directory(name)]
                continue
            directories[:] = []
            for name in files:
                if self._key_pattern.match(name) or self._temp_pattern.match(name):
                    yield os.path.join(root, name)

    def total_size(self) -> int:
        size = 0
        for path in self._owned_files():
            try:
                size += os.stat(path).st_size
            except FileNotFoundError:
                # Removed by a concurrent writer or clear() since the directory was listed.
                continue
            except OSError as e:
                raise StoreError('Could not stat {}: {}'.format(path, e)) from e
        return size

    def clear(self) -> None:
        logger.info('Deleting all entries under {}'.format(self.__directory))
        for path in list(self._owned_files()):
            try:
                os.unlink(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StoreError('Could not delete {}: {}'.format(path, e)) from e

        for root, _, _ in os.walk(str(self.__directory), topdown=False):
            if not 0 < self._depth(root) <= self.__directory_levels:
                continue
            if not self._is_level_directory(os.path.basename(root)):
                continue
            try:
                os.rmdir(root)
            except OSError:
                # Still holds foreign files, or a concurrent put() just wrote into it.
                logger.debug('Keeping non-empty directory {}'.format(root))


class MemoryStore(ContentStore):
    """
    A content store that keeps values in process memory. Nothing survives the process.
    """

    def __init__(self) -> None:
        self.__values: Dict[str, bytes] = {}
        self.__lock = threading.Lock()

    def put(self, key: str, data: bytes) -> None:
        with self.__lock:
            self.__values[key] = bytes(data)

    def get(self, key: str) -> bytes:
        with self.__lock:
            try:
                return self.__values[key]
            except KeyError:
                raise EntryNotFound(key) from None

    def total_size(self) -> int:
        with self.__lock:
            return sum(len(value) for value in self.__values.values())

    def clear(self) -> None:
        with self.__lock:
            self.__values.clear()

    def __len__(self) -> int:
        with self.__lock:
            return len(self.__values)
