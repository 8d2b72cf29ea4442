"""
Tests for local and remote blob storage
"""
import asyncio
import httpx
import pytest
from repository.blob_repository import BlobRepository
from util.errors import BlobStorageError


class TestLocalBlobRepository:
    @pytest.fixture(autouse=True)
    def _repo(self, tmp_path):
        self.root = tmp_path
        self.repo = BlobRepository(base_url=None, upload_dir=str(tmp_path))

    def test_upload_returns_uploads_locator(self):
        locator = asyncio.run(self.repo.upload(b"%PDF", "bulletins/2024/a.pdf", "application/pdf"))

        assert locator == "/uploads/bulletins/2024/a.pdf"
        assert (self.root / "bulletins" / "2024" / "a.pdf").read_bytes() == b"%PDF"

    def test_download_round_trip(self):
        async def run():
            locator = await self.repo.upload(b"hello", "documents/x.txt", "text/plain")
            return await self.repo.download(locator)

        assert asyncio.run(run()) == b"hello"

    def test_missing_file(self):
        with pytest.raises(BlobStorageError):
            asyncio.run(self.repo.download("/uploads/nope.pdf"))

    def test_path_traversal_rejected(self):
        with pytest.raises(BlobStorageError):
            asyncio.run(self.repo.download("/uploads/../../etc/passwd"))


class TestRemoteBlobRepository:
    def setup_method(self):
        self.requests = []
        self.store = {}

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            path = request.url.path
            if request.method == "PUT":
                self.store[path] = request.content
                return httpx.Response(201)
            if path in self.store:
                return httpx.Response(200, content=self.store[path])
            return httpx.Response(404)

        self.repo = BlobRepository(
            base_url="https://acct.blob.test/advisor/",
            sas_token="?sv=1&sig=abc",
            transport=httpx.MockTransport(handler),
        )

    def test_upload_puts_block_blob_and_hides_sas(self):
        locator = asyncio.run(self.repo.upload(b"%PDF", "bulletins/2024/a.pdf", "application/pdf"))

        assert locator == "https://acct.blob.test/advisor/bulletins/2024/a.pdf"
        put = self.requests[0]
        assert put.method == "PUT"
        assert put.headers["x-ms-blob-type"] == "BlockBlob"
        assert put.url.params["sig"] == "abc"

    def test_download_by_uri(self):
        async def run():
            locator = await self.repo.upload(b"bytes", "documents/a.pdf", "application/pdf")
            return await self.repo.download(locator)

        assert asyncio.run(run()) == b"bytes"

    def test_http_error_is_wrapped(self):
        with pytest.raises(BlobStorageError):
            asyncio.run(self.repo.download("https://acct.blob.test/advisor/missing.pdf"))
