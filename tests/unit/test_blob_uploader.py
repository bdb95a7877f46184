from pathlib import Path

import httpx
import pytest

from reformmap.core.blob_uploader import (
    Attachment,
    HTTPBlobUploader,
    LocalBlobUploader,
    safe_filename,
)
from reformmap.errors import UploadError


def test_safe_filename_strips_directories() -> None:
    assert safe_filename("../../etc/passwd") == "passwd"
    assert safe_filename("C:\\docs\\decree.pdf") == "decree.pdf"
    assert safe_filename("") == "upload.bin"
    assert safe_filename(None) == "upload.bin"


@pytest.mark.asyncio
async def test_local_uploader_writes_file_and_returns_url(tmp_path: Path) -> None:
    uploader = LocalBlobUploader(tmp_path / "uploads", "/files/")

    url = await uploader.upload(Attachment(filename="new franc.pdf", content=b"%PDF"))

    assert url.startswith("/files/")
    assert url.endswith("/new%20franc.pdf")
    folder = url.split("/")[2]
    assert (tmp_path / "uploads" / folder / "new franc.pdf").read_bytes() == b"%PDF"


@pytest.mark.asyncio
async def test_local_uploader_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "uploads"
    blocker.write_text("not a directory", encoding="utf-8")
    uploader = LocalBlobUploader(blocker)

    with pytest.raises(UploadError):
        await uploader.upload(Attachment(filename="a.txt", content=b"a"))


@pytest.mark.asyncio
async def test_http_uploader_puts_bytes_with_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"url": "https://blob.example.com/decree-abc.pdf"})

    uploader = HTTPBlobUploader(
        "https://blob.example.com/",
        "token-1",
        transport=httpx.MockTransport(handler),
    )

    url = await uploader.upload(
        Attachment(filename="decree.pdf", content=b"%PDF", content_type="application/pdf")
    )

    assert url == "https://blob.example.com/decree-abc.pdf"
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/decree.pdf"
    assert seen[0].headers["authorization"] == "Bearer token-1"
    assert seen[0].headers["x-content-type"] == "application/pdf"
    assert seen[0].content == b"%PDF"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"pathname": "decree.pdf"}),
    ],
)
async def test_http_uploader_failures_raise_upload_error(response: httpx.Response) -> None:
    uploader = HTTPBlobUploader(
        "https://blob.example.com",
        "token-1",
        transport=httpx.MockTransport(lambda request: response),
    )

    with pytest.raises(UploadError):
        await uploader.upload(Attachment(filename="decree.pdf", content=b"%PDF"))


@pytest.mark.asyncio
async def test_http_uploader_network_error_raises_upload_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    uploader = HTTPBlobUploader(
        "https://blob.example.com", "token-1", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(UploadError):
        await uploader.upload(Attachment(filename="decree.pdf", content=b"%PDF"))


@pytest.mark.asyncio
async def test_http_uploader_requires_token() -> None:
    with pytest.raises(UploadError):
        await HTTPBlobUploader("https://blob.example.com", None).upload(
            Attachment(filename="decree.pdf", content=b"%PDF")
        )
