"""
Remote store client for the shared document service

Talks to the key-value HTTP service one collection at a time, and keeps a
local durable shadow copy used when the service cannot be reached.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx


logger = logging.getLogger(__name__)

SHADOW_PREFIX = "evalmate_"


class RemoteStoreError(Exception):
    """The document service could not be reached or answered with an error"""


class RemoteStoreClient:
    """
    Async client for the document service

    fetch_* raise RemoteStoreError on transport errors and non-2xx statuses;
    put_collection and reset_all log the failure and return False.
    """

    def __init__(
        self,
        api_base: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_document(self) -> Dict[str, Any]:
        data = await self._get_json(f"{self.api_base}/data")
        if not isinstance(data, dict):
            raise RemoteStoreError("Document is not a JSON object")
        return data

    async def fetch_collection(self, name: str) -> Any:
        """
        Fetch one collection

        Returns:
            The JSON value, or None when the key is unknown to the service
        """
        try:
            return await self._get_json(f"{self.api_base}/data/{name}")
        except _NotFound:
            return None

    async def put_collection(self, name: str, value: Any) -> bool:
        try:
            r = await self._client.put(f"{self.api_base}/data/{name}", json=value)
            r.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Save error for '{name}': {e}")
            return False
        return True

    async def reset_all(self) -> bool:
        try:
            r = await self._client.post(f"{self.api_base}/reset")
            r.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Reset error: {e}")
            return False
        return True

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, url: str) -> Any:
        try:
            r = await self._client.get(url)
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"GET {url} failed: {e}") from e

        if r.status_code == 404:
            raise _NotFound(url)
        if not r.is_success:
            raise RemoteStoreError(f"GET {url} returned {r.status_code}")

        try:
            return r.json()
        except ValueError:
            # Malformed payload counts as not found
            logger.warning(f"Malformed JSON from {url}")
            raise _NotFound(url)


class _NotFound(RemoteStoreError):
    pass


class LocalShadowStore:
    """One JSON file per collection, named evalmate_<name>.json"""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{SHADOW_PREFIX}{name}.json"

    def load(self, name: str, default: Any = None) -> Any:
        path = self._path(name)
        try:
            if path.exists():
                with open(path, 'r', encoding='utf-8') as f:
                    return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable shadow copy {path}: {e}")
        return default

    def save(self, name: str, value: Any) -> None:
        path = self._path(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(value, f, ensure_ascii=False)
        except OSError as e:
            logger.warning(f"Could not write shadow copy {path}: {e}")

    def remove(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)
