"""Sequential batch uploader with progress reporting."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

from event_gallery.models import BatchPhase, UploadBatchState, UploadItem
from event_gallery.storage_client import StorageClient
from event_gallery.utils import generate_storage_name, guess_mime_type, is_image_type

logger = logging.getLogger(__name__)

# Seconds the final summary stays visible before the gallery refreshes
DEFAULT_DISPLAY_DELAY = 2.0

ProgressCallback = Callable[[UploadBatchState], None]
CompletionCallback = Callable[[], Awaitable[Any] | None]


class UploadPipeline:
    """Uploads batches of photos one file at a time.

    Only one batch runs at a time: a submission made while a batch is in
    flight is rejected until the pipeline is idle again.
    """

    def __init__(
        self,
        storage: StorageClient,
        on_progress: ProgressCallback | None = None,
        on_complete: CompletionCallback | None = None,
        display_delay: float = DEFAULT_DISPLAY_DELAY,
        dry_run: bool = False,
    ) -> None:
        """Initialize upload pipeline.

        Args:
            storage: Storage client used for uploads
            on_progress: Called with the batch state after every change
            on_complete: Called once a batch has finished and its summary
                has been displayed; may be a coroutine function
            display_delay: Seconds to keep the final summary before clearing it
            dry_run: If True, simulate uploads without making API calls
        """
        self.storage = storage
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.display_delay = display_delay
        self.dry_run = dry_run
        self.state = UploadBatchState()

    @property
    def busy(self) -> bool:
        return self.state.phase is not BatchPhase.IDLE

    async def submit(self, files: Sequence[Path]) -> list[UploadItem]:
        """Upload a batch of files.

        Non-image files are skipped and not counted. Each accepted file is
        attempted exactly once; failures are logged and do not stop the batch.

        Args:
            files: Files selected for upload

        Returns:
            The batch's upload items, or an empty list if nothing was submitted
        """
        if self.busy:
            logger.warning(
                f"Rejecting batch of {len(files)} file(s): an upload is already in progress"
            )
            return []

        items = self._prepare_items(files)
        if not items:
            if files:
                logger.warning("No image files in selection, nothing to upload")
            return []

        self.state.reset(len(items))
        self._publish()
        logger.info(f"Uploading {len(items)} photo(s)")

        try:
            for item in items:
                await self._upload_item(item)
                self.state.completed += 1
                self.state.message = (
                    f"Uploading {self.state.completed}/{self.state.total} photos..."
                )
                self._publish()

            self.state.phase = BatchPhase.DONE
            self.state.message = (
                f"Successfully uploaded {self.state.succeeded_count} photo(s)!"
            )
            self._publish()
            logger.info(
                f"Batch finished: {self.state.succeeded_count}/{self.state.total} uploaded"
            )

            await asyncio.sleep(self.display_delay)
            self.state.message = ""
            self._publish()
            await self._notify_complete()
        finally:
            self.state.phase = BatchPhase.IDLE

        return items

    def _prepare_items(self, files: Sequence[Path]) -> list[UploadItem]:
        items: list[UploadItem] = []
        for path in files:
            mime_type = guess_mime_type(path)
            if not is_image_type(mime_type):
                logger.debug(f"Skipping non-image file {path.name} ({mime_type})")
                continue
            items.append(
                UploadItem(
                    path=path,
                    original_filename=path.name,
                    mime_type=mime_type,
                    storage_name=generate_storage_name(path.name, mime_type),
                )
            )
        return items

    async def _upload_item(self, item: UploadItem) -> None:
        """Upload a single file, recording its outcome on the item."""
        if self.dry_run:
            logger.info(f"[DRY RUN] Would upload {item.original_filename} as {item.storage_name}")
            item.mark_succeeded()
            self.state.succeeded_count += 1
            return

        try:
            content = item.path.read_bytes()
            await self.storage.upload_object(item.storage_name, content, item.mime_type)
        except Exception as e:
            logger.error(f"Failed to upload {item.original_filename}: {e}")
            item.mark_failed(str(e))
            return

        logger.info(f"Successfully uploaded {item.original_filename}")
        item.mark_succeeded()
        self.state.succeeded_count += 1

    def _publish(self) -> None:
        if self.on_progress is not None:
            self.on_progress(self.state)

    async def _notify_complete(self) -> None:
        if self.on_complete is None:
            return
        try:
            result = self.on_complete()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Upload completion handler failed: {e}", exc_info=True)
