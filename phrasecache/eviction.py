import logging

from .store import ContentStore


logger = logging.getLogger(__name__)


class SizeCeiling:
    """
    Empties a store once it grows beyond a fixed number of bytes.

    Eviction is all or nothing. There is no notion of which entries are worth keeping.
    """

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size

    def exceeded(self, store: ContentStore) -> bool:
        return store.total_size() > self.max_size

    def enforce(self, store: ContentStore) -> bool:
        """
        Clear `store` if it is over the ceiling.

        @return
          Whether the store was cleared.
        @throws StoreError
          If the size could not be determined or the store could not be cleared.
        """
        if not self.exceeded(store):
            return False
        logger.info('Cache exceeds {} bytes. Evicting all entries.'.format(self.max_size))
        store.clear()
        return True
