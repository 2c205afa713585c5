"""Full-screen photo viewer navigation."""

import logging
from collections.abc import Callable

from event_gallery.gallery import GalleryStore
from event_gallery.models import Photo

logger = logging.getLogger(__name__)

KeyListener = Callable[[str], bool]

# Key names as reported by browsers and by terminal key readers
KEY_ACTIONS = {
    "ArrowLeft": "previous",
    "left": "previous",
    "ArrowRight": "next",
    "right": "next",
    "Escape": "close",
    "escape": "close",
}


class KeyboardBus:
    """Dispatches global key presses to the currently subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[KeyListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: KeyListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: KeyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def dispatch(self, key: str) -> bool:
        """Deliver a key press to every listener.

        Returns:
            True if any listener handled the key
        """
        handled = False
        for listener in list(self._listeners):
            handled = listener(key) or handled
        return handled


class LightboxController:
    """Tracks which gallery photo, if any, is shown full-screen.

    The controller is either closed or open on an index into the gallery's
    current photo sequence. It never keeps its own copy of the photos: every
    read goes through the gallery, and a refresh that removes the open
    photo closes the lightbox.

    Arrow and escape keys are captured from the keyboard bus only while the
    controller is mounted and open.
    """

    def __init__(self, gallery: GalleryStore, keyboard: KeyboardBus | None = None) -> None:
        """Initialize lightbox controller.

        Args:
            gallery: Gallery whose photos are navigated
            keyboard: Bus delivering global key presses
        """
        self.gallery = gallery
        self.keyboard = keyboard if keyboard is not None else KeyboardBus()
        self._selected_index: int | None = None
        self._mounted = False
        self._capturing = False

    def __enter__(self) -> "LightboxController":
        self.mount()
        return self

    def __exit__(self, *args: object) -> None:
        self.unmount()

    @property
    def photos(self) -> tuple[Photo, ...]:
        return self.gallery.photos

    @property
    def selected_index(self) -> int | None:
        return self._current_index()

    @property
    def is_open(self) -> bool:
        return self._current_index() is not None

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def current_photo(self) -> Photo | None:
        index = self._current_index()
        if index is None:
            return None
        return self.photos[index]

    @property
    def counter(self) -> str:
        """Position of the open photo, e.g. "3 of 12"."""
        index = self._current_index()
        if index is None:
            return ""
        return f"{index + 1} of {len(self.photos)}"

    @property
    def show_previous(self) -> bool:
        index = self._current_index()
        return index is not None and index > 0

    @property
    def show_next(self) -> bool:
        index = self._current_index()
        return index is not None and index < len(self.photos) - 1

    def mount(self) -> None:
        """Attach to the gallery so photo-set changes are tracked."""
        if self._mounted:
            return
        self._mounted = True
        self.gallery.add_listener(self._on_photos_changed)
        self.sync()
        self._update_capture()

    def unmount(self) -> None:
        """Close the viewer and release the gallery and keyboard."""
        self._selected_index = None
        self._mounted = False
        self.gallery.remove_listener(self._on_photos_changed)
        self._update_capture()

    def select(self, index: int) -> None:
        """Open the photo at ``index``; out-of-range indices are ignored."""
        if not 0 <= index < len(self.photos):
            logger.debug(f"Ignoring selection of index {index} ({len(self.photos)} photos)")
            return
        self._selected_index = index
        self._update_capture()

    def next(self) -> None:
        if self.show_next:
            self._selected_index += 1

    def previous(self) -> None:
        if self.show_previous:
            self._selected_index -= 1

    def close(self) -> None:
        self._selected_index = None
        self._update_capture()

    def click_backdrop(self, on_image: bool = False) -> None:
        """Handle a pointer click on the overlay; clicks on the photo itself are ignored."""
        if not on_image:
            self.close()

    def handle_key(self, key: str) -> bool:
        """Apply a key press.

        Returns:
            True if the key is bound to a lightbox action
        """
        if not self.is_open:
            return False

        action = KEY_ACTIONS.get(key)
        if action == "previous":
            self.previous()
        elif action == "next":
            self.next()
        elif action == "close":
            self.close()
        else:
            return False
        return True

    def sync(self) -> None:
        """Close the viewer if the open index no longer exists."""
        if self._selected_index is not None and self._selected_index >= len(self.photos):
            logger.debug(
                f"Closing lightbox: index {self._selected_index} out of range "
                f"after refresh ({len(self.photos)} photos)"
            )
            self.close()

    def _current_index(self) -> int | None:
        # Unmounted controllers miss refresh notifications, so clamp on read
        self.sync()
        return self._selected_index

    def _on_photos_changed(self, photos: tuple[Photo, ...]) -> None:
        self.sync()

    def _update_capture(self) -> None:
        should_capture = self._mounted and self.is_open
        if should_capture and not self._capturing:
            self.keyboard.subscribe(self.handle_key)
            self._capturing = True
        elif not should_capture and self._capturing:
            self.keyboard.unsubscribe(self.handle_key)
            self._capturing = False
