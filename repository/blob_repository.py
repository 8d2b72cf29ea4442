# repository/blob_repository.py
import asyncio
from pathlib import Path
from typing import Dict, Optional
import httpx
from config.settings import settings
from util.constants import UploadPrefixes
from util.errors import BlobStorageError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


class BlobRepository:
    """
    Byte storage for uploaded bulletins and supporting documents.

    Flow:
    - With BLOB_BASE_URL set, objects are PUT to "<base>/<key>?<sas>" and the
      returned locator is that URL without the SAS query.
    - Without it, objects land under UPLOAD_DIR and the locator is
      "/uploads/<key>".
    - download() branches on locator shape, so rows written by either mode
      stay readable.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = settings.BLOB_BASE_URL,
        sas_token: Optional[str] = settings.BLOB_SAS_TOKEN,
        upload_dir: str = settings.UPLOAD_DIR,
        timeout: float = settings.BLOB_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._sas = (sas_token or "").lstrip("?")
        self._root = Path(upload_dir)
        self._timeout = timeout
        self._transport = transport

    @property
    def is_remote(self) -> bool:
        return bool(self._base_url)

    def _signed(self, url: str) -> str:
        if not self._sas or not url.startswith(self._base_url):
            return url
        return f"{url}?{self._sas}"

    def _local_path(self, key: str) -> Path:
        root = self._root.resolve()
        path = (root / key.lstrip("/")).resolve()
        if root != path and root not in path.parents:
            raise BlobStorageError(f"key escapes upload dir: {key}")
        return path

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    # ---------------- Upload ----------------

    async def upload(self, data: bytes, key: str, content_type: str) -> str:
        if self.is_remote:
            return await self._upload_remote(data, key, content_type)
        return await self._upload_local(data, key)

    async def _upload_remote(self, data: bytes, key: str, content_type: str) -> str:
        url = f"{self._base_url}/{key.lstrip('/')}"
        headers: Dict[str, str] = {
            "x-ms-blob-type": "BlockBlob",
            "content-type": content_type or "application/octet-stream",
        }
        try:
            with timed(logger, "blob.put", bytes=len(data)):
                async with self._client() as client:
                    r = await client.put(self._signed(url), content=data, headers=headers)
                    r.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("blob.put.error key=%s err=%s", key, type(e).__name__)
            raise BlobStorageError(key) from e
        return url

    async def _upload_local(self, data: bytes, key: str) -> str:
        path = self._local_path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error("blob.local.write.error key=%s", key)
            raise BlobStorageError(key) from e
        logger.info("blob.local.write key=%s bytes=%d", key, len(data))
        return UploadPrefixes.LOCAL + key.lstrip("/")

    # ---------------- Download ----------------

    async def download(self, locator: str) -> bytes:
        if not locator:
            raise BlobStorageError("empty locator")
        if locator.startswith(("http://", "https://")):
            return await self._download_remote(locator)
        return await self._download_local(locator)

    async def _download_remote(self, url: str) -> bytes:
        try:
            with timed(logger, "blob.get"):
                async with self._client() as client:
                    r = await client.get(self._signed(url))
                    r.raise_for_status()
                    return r.content
        except httpx.HTTPError as e:
            logger.error("blob.get.error err=%s", type(e).__name__)
            raise BlobStorageError(url) from e

    async def _download_local(self, locator: str) -> bytes:
        key = locator
        if key.startswith(UploadPrefixes.LOCAL):
            key = key[len(UploadPrefixes.LOCAL) :]
        path = self._local_path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.error("blob.local.read.error key=%s", key)
            raise BlobStorageError(locator) from e
