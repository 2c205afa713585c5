"""Event Gallery - Shared photo uploads and gallery for event guests."""

__version__ = "0.1.0"

from event_gallery.gallery import GalleryStore
from event_gallery.layout import LayoutHint, layout_hint
from event_gallery.lightbox import KeyboardBus, LightboxController
from event_gallery.models import Photo, UploadBatchState, UploadItem
from event_gallery.session import AccessGate, SessionContext
from event_gallery.storage_client import StorageClient
from event_gallery.uploader import UploadPipeline

__all__ = [
    "AccessGate",
    "GalleryStore",
    "KeyboardBus",
    "LayoutHint",
    "LightboxController",
    "Photo",
    "SessionContext",
    "StorageClient",
    "UploadBatchState",
    "UploadItem",
    "UploadPipeline",
    "layout_hint",
]
