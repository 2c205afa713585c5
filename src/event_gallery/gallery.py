"""Gallery listing with newest-first ordering and stale-result protection."""

import logging
from collections.abc import Callable
from enum import Enum

from event_gallery.models import Photo
from event_gallery.storage_client import DEFAULT_LIST_LIMIT, StorageClient

logger = logging.getLogger(__name__)

GalleryListener = Callable[[tuple[Photo, ...]], None]


class GalleryView(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"


class GalleryStore:
    """Owns the gallery's photo sequence.

    Each refresh replaces the sequence as a whole. Refreshes are tagged with
    a generation number and only the most recently issued one may publish
    its result, so a slow listing can never overwrite a newer one.
    """

    def __init__(self, storage: StorageClient, page_size: int = DEFAULT_LIST_LIMIT) -> None:
        """Initialize gallery store.

        Args:
            storage: Storage client used for listing
            page_size: Maximum number of photos fetched per refresh
        """
        self.storage = storage
        self.page_size = page_size
        self._photos: tuple[Photo, ...] = ()
        self._loading = False
        self._generation = 0
        self._listeners: list[GalleryListener] = []

    @property
    def photos(self) -> tuple[Photo, ...]:
        """The current photo snapshot, newest first."""
        return self._photos

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_empty(self) -> bool:
        return not self._photos

    @property
    def view_state(self) -> GalleryView:
        if self._loading:
            return GalleryView.LOADING
        if not self._photos:
            return GalleryView.EMPTY
        return GalleryView.READY

    def add_listener(self, listener: GalleryListener) -> None:
        """Register a callback invoked after each snapshot replacement."""
        self._listeners.append(listener)

    def remove_listener(self, listener: GalleryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def refresh(self) -> tuple[Photo, ...]:
        """Reload the photo sequence from storage.

        A listing failure is logged and results in an empty gallery. If a
        newer refresh was issued while this one was outstanding, this
        result is discarded.

        Returns:
            The photo snapshot current after this call
        """
        self._generation += 1
        generation = self._generation
        self._loading = True

        try:
            objects = await self.storage.list_objects(limit=self.page_size)
            photos = tuple(
                Photo(name=obj.name, url=self.storage.public_url(obj.name))
                for obj in objects
            )
        except Exception as e:
            logger.error(f"Error loading photos: {e}")
            photos = ()
        finally:
            # Only the latest refresh owns the flag; also covers cancellation
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            logger.debug(
                f"Discarding stale gallery listing (generation {generation}, "
                f"latest {self._generation})"
            )
            return self._photos

        self._photos = photos
        logger.info(f"Gallery loaded with {len(photos)} photo(s)")

        for listener in list(self._listeners):
            try:
                listener(photos)
            except Exception as e:
                logger.error(f"Gallery listener failed: {e}", exc_info=True)

        return photos
