"""Data models for the event photo gallery."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Photo:
    """A display-ready photo in the gallery."""

    name: str
    url: str

    def __post_init__(self) -> None:
        """Validate photo data."""
        if not self.name:
            raise ValueError("Photo name cannot be empty")
        if not self.url:
            raise ValueError("Photo must have a public URL")


@dataclass(frozen=True)
class StoredObject:
    """An entry of the storage bucket listing."""

    name: str
    created_at: datetime | None = None


class UploadOutcome(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BatchPhase(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    DONE = "done"


@dataclass
class UploadItem:
    """One accepted file of a submitted batch."""

    path: Path
    original_filename: str
    mime_type: str
    storage_name: str
    outcome: UploadOutcome = UploadOutcome.PENDING
    error_message: str | None = None

    def mark_succeeded(self) -> None:
        self.outcome = UploadOutcome.SUCCEEDED

    def mark_failed(self, error_message: str) -> None:
        self.outcome = UploadOutcome.FAILED
        self.error_message = error_message


@dataclass
class UploadBatchState:
    """Aggregate progress of the batch currently being uploaded."""

    total: int = 0
    completed: int = 0
    succeeded_count: int = 0
    phase: BatchPhase = BatchPhase.IDLE
    message: str = ""

    def reset(self, total: int) -> None:
        """Start tracking a new batch of ``total`` accepted files."""
        self.total = total
        self.completed = 0
        self.succeeded_count = 0
        self.phase = BatchPhase.UPLOADING
        self.message = f"Uploading 0/{total} photos..."

    @property
    def failed_count(self) -> int:
        return self.completed - self.succeeded_count
