"""Supabase Storage client using httpx for async HTTP calls."""

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from event_gallery.models import StoredObject

logger = logging.getLogger(__name__)

# Reference listing cap; larger buckets are truncated to the newest entries
DEFAULT_LIST_LIMIT = 1000

CACHE_CONTROL = "max-age=3600"


class StorageError(Exception):
    """Base exception for storage errors."""

    pass


class DuplicateObjectError(StorageError):
    """Exception raised when an upload would overwrite an existing object."""

    pass


class ServerError(StorageError):
    """Exception raised for 5xx server errors and network failures."""

    pass


class StorageClient:
    """Client for a Supabase Storage bucket using httpx."""

    def __init__(self, base_url: str, api_key: str, bucket: str) -> None:
        """Initialize storage client.

        Args:
            base_url: Project URL, e.g. "https://xyz.supabase.co"
            api_key: Project API key (anon or service role)
            bucket: Name of the bucket holding the photos
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self._client: httpx.AsyncClient | None = None

    @property
    def storage_url(self) -> str:
        """Get the base URL of the storage API."""
        return f"{self.base_url}/storage/v1"

    async def __aenter__(self) -> "StorageClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            timeout=30.0,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
        self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the httpx AsyncClient instance.

        Raises:
            RuntimeError: If client is used outside of async context manager
        """
        if self._client is None:
            raise RuntimeError("Client must be used within async context manager")
        return self._client

    async def list_objects(
        self, prefix: str = "", limit: int = DEFAULT_LIST_LIMIT
    ) -> list[StoredObject]:
        """List the bucket's objects, newest first.

        Args:
            prefix: Folder prefix to list
            limit: Maximum number of entries to return

        Returns:
            Stored objects in the order returned by the server

        Raises:
            StorageError: If the listing fails
            ServerError: If a server or network error occurs
        """
        url = f"{self.storage_url}/object/list/{self.bucket}"
        payload = {
            "prefix": prefix,
            "limit": limit,
            "offset": 0,
            "sortBy": {"column": "created_at", "order": "desc"},
        }

        try:
            response = await self.client.post(url, json=payload)
        except httpx.RequestError as e:
            logger.warning(f"Network error while listing bucket '{self.bucket}': {e}")
            raise ServerError(f"Network error: {e}") from e

        result = self._parse_json_response(response, f"listing bucket '{self.bucket}'")
        if response.status_code >= 400:
            self._handle_error_response(
                response.status_code, result, f"listing bucket '{self.bucket}'"
            )

        if not isinstance(result, list):
            raise StorageError(f"Unexpected listing payload: {str(result)[:200]}")

        objects: list[StoredObject] = []
        for entry in result:
            name = entry.get("name")
            # Folders have no id; placeholders keep empty folders alive
            if not name or entry.get("id") is None or name.startswith("."):
                logger.debug(f"Skipping non-photo entry: {name!r}")
                continue
            objects.append(
                StoredObject(name=name, created_at=_parse_timestamp(entry.get("created_at")))
            )

        logger.debug(f"Listed {len(objects)} object(s) in bucket '{self.bucket}'")
        return objects

    async def upload_object(self, name: str, content: bytes, content_type: str) -> str:
        """Upload a new object to the bucket.

        Existing objects are never overwritten.

        Args:
            name: Storage name of the object
            content: Raw file content
            content_type: MIME type sent with the upload

        Returns:
            Key of the stored object

        Raises:
            DuplicateObjectError: If an object with this name already exists
            StorageError: If the upload is rejected
            ServerError: If a server or network error occurs
        """
        url = f"{self.storage_url}/object/{self.bucket}/{quote(name)}"
        headers = {
            "content-type": content_type,
            "cache-control": CACHE_CONTROL,
            "x-upsert": "false",
        }

        try:
            response = await self.client.post(url, content=content, headers=headers)
        except httpx.RequestError as e:
            logger.warning(f"Network error while uploading {name}: {e}")
            raise ServerError(f"Network error: {e}") from e

        result = self._parse_json_response(response, f"uploading {name}")
        if response.status_code >= 400:
            self._handle_error_response(response.status_code, result, f"uploading {name}")

        key = f"{self.bucket}/{name}"
        if isinstance(result, dict):
            key = result.get("Key", key)
        logger.debug(f"Uploaded {name} to bucket '{self.bucket}' as {key}")
        return key

    def public_url(self, name: str) -> str:
        """Get the public URL of an object."""
        return f"{self.storage_url}/object/public/{self.bucket}/{quote(name)}"

    def _parse_json_response(self, response: httpx.Response, context: str) -> Any:
        """Parse JSON response, handling non-JSON responses gracefully.

        Raises:
            ServerError: If response is 5xx with non-JSON body
            StorageError: If response has invalid JSON for non-5xx status
        """
        try:
            return response.json()
        except ValueError:
            # Non-JSON response (e.g., gateway error page)
            if response.status_code >= 500:
                raise ServerError(
                    f"Server error {response.status_code}: {response.text[:200]}"
                )
            raise StorageError(
                f"Invalid storage response while {context}: {response.text[:200]}"
            )

    def _handle_error_response(
        self, status_code: int, result: Any, context: str
    ) -> None:
        """Handle error responses from the storage API.

        Raises:
            DuplicateObjectError: If the object already exists
            ServerError: If server error occurs
            StorageError: For other API errors
        """
        if not isinstance(result, dict):
            result = {}
        error = str(result.get("error", ""))
        message = result.get("message", error or f"HTTP {status_code}")
        reported_status = str(result.get("statusCode", status_code))

        if status_code == 409 or reported_status == "409" or error == "Duplicate":
            raise DuplicateObjectError(f"Object already exists while {context}: {message}")

        if status_code >= 500:
            raise ServerError(f"Storage server error while {context}: {message}")

        raise StorageError(f"Storage error while {context}: {message}")


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None
