"""Utility functions for the event photo gallery."""

import logging
import mimetypes
import secrets
import string
import time
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase

# 36**8 possible suffixes per nanosecond timestamp
SUFFIX_LENGTH = 8

# Not registered by mimetypes on every platform
mimetypes.add_type("image/heic", ".heic")
mimetypes.add_type("image/webp", ".webp")


def guess_mime_type(path: Path) -> str:
    """Guess the content type of a file from its name.

    Args:
        path: Path to the file

    Returns:
        The guessed MIME type, or "application/octet-stream"
    """
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"


def is_image_type(mime_type: str) -> bool:
    """Check if a content type is accepted for upload.

    Args:
        mime_type: MIME type of the file

    Returns:
        True for any image/* type
    """
    return mime_type.startswith("image/")


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def file_extension(filename: str, mime_type: str) -> str:
    """Get the extension used for a file's storage name (without the dot)."""
    suffix = Path(filename).suffix.lower().lstrip(".")
    if suffix:
        return suffix
    guessed = mimetypes.guess_extension(mime_type)
    if guessed:
        return guessed.lstrip(".")
    return "bin"


def generate_storage_name(filename: str, mime_type: str) -> str:
    """Derive a unique storage name for an uploaded file.

    The name has the form ``<timestamp>-<suffix>.<extension>`` where the
    timestamp is in nanoseconds and the suffix is random base-36 text.

    Args:
        filename: Original name of the file
        mime_type: Content type of the file

    Returns:
        Storage name for the object
    """
    return f"{time.time_ns()}-{random_suffix()}.{file_extension(filename, mime_type)}"


def scan_files(paths: Iterable[Path]) -> list[Path]:
    """Expand a selection of paths into the files to submit.

    Directories contribute their regular files (sorted, non-recursive);
    files are kept in the given order. Content filtering is left to the
    upload pipeline.

    Args:
        paths: Files and directories selected by the user

    Returns:
        List of file paths

    Raises:
        FileNotFoundError: If a path doesn't exist
    """
    files: list[Path] = []

    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Path does not exist: {path}")

        if path.is_dir():
            entries = [entry for entry in sorted(path.iterdir()) if entry.is_file()]
            if not entries:
                logger.warning(f"Skipping empty directory: {path}")
            files.extend(entries)
        else:
            files.append(path)

    logger.debug(f"Selected {len(files)} file(s)")
    return files
