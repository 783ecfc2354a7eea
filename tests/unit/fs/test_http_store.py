"""Tests for gitbridge.fs.http."""

from __future__ import annotations

import base64
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from gitbridge.exceptions import SandboxError, SandboxPathNotFoundError
from gitbridge.fs import HttpFileStore


def make_store(status: int = 200, body: bytes = b"") -> HttpFileStore:
    store = HttpFileStore("http://sandbox:3001/", api_key="k3y")
    store._request = AsyncMock(return_value=(status, body))  # type: ignore[method-assign]
    return store


class TestHttpFileStore:
    """Tests for HttpFileStore."""

    def test_strips_trailing_slash_and_sets_api_key(self) -> None:
        store = HttpFileStore("http://sandbox:3001/", api_key="k3y")

        assert store.base_url == "http://sandbox:3001"
        assert store._headers()["X-API-Key"] == "k3y"

    def test_no_api_key_header_without_key(self) -> None:
        assert "X-API-Key" not in HttpFileStore("http://sandbox")._headers()

    @pytest.mark.asyncio
    async def test_read_file_bytes(self) -> None:
        store = make_store(body=b"\x00\x01")

        assert await store.read_file("a.bin") == b"\x00\x01"
        store._request.assert_awaited_once_with("GET", "/files", params={"path": "a.bin"})

    @pytest.mark.asyncio
    async def test_read_file_text(self) -> None:
        store = make_store(body="héllo".encode())

        assert await store.read_file("a.txt", encoding="utf-8") == "héllo"

    @pytest.mark.asyncio
    async def test_read_missing_raises_enoent(self) -> None:
        store = make_store(status=404, body=b'{"error": "File not found"}')

        with pytest.raises(SandboxPathNotFoundError) as exc_info:
            await store.read_file("missing.txt")

        assert exc_info.value.path == "missing.txt"

    @pytest.mark.asyncio
    async def test_server_error_carries_error_field(self) -> None:
        store = make_store(status=500, body=b'{"error": "disk full"}')

        with pytest.raises(SandboxError, match="Failed to write file: disk full"):
            await store.write_file("a.txt", "x")

    @pytest.mark.asyncio
    async def test_write_text_sent_as_is(self) -> None:
        store = make_store()

        await store.write_file("a.txt", "hello", encoding="utf8")

        store._request.assert_awaited_once_with(
            "POST",
            "/files",
            payload={"path": "a.txt", "content": "hello", "encoding": "utf8"},
        )

    @pytest.mark.asyncio
    async def test_write_bytes_base64_encoded(self) -> None:
        store = make_store()

        await store.write_file("a.bin", b"\xff\x00")

        payload = store._request.await_args.kwargs["payload"]
        assert payload["encoding"] == "base64"
        assert base64.b64decode(payload["content"]) == b"\xff\x00"

    @pytest.mark.asyncio
    async def test_mkdir_posts_directory(self) -> None:
        store = make_store()

        await store.mkdir("src/lib")

        store._request.assert_awaited_once_with(
            "POST", "/directories", payload={"path": "src/lib", "recursive": True}
        )

    @pytest.mark.asyncio
    async def test_mkdir_rejects_empty_path(self) -> None:
        with pytest.raises(ValueError):
            await make_store().mkdir("  ")

    @pytest.mark.asyncio
    async def test_readdir_parses_listing(self) -> None:
        listing = [
            {"name": "src", "isDirectory": True},
            {
                "name": "a.txt",
                "isDirectory": False,
                "size": 3,
                "modifiedTime": "2024-01-01T00:00:00Z",
            },
        ]
        store = make_store(body=json.dumps(listing).encode())

        entries = await store.readdir(".")

        assert [(e.name, e.is_dir, e.size) for e in entries] == [
            ("src", True, 0),
            ("a.txt", False, 3),
        ]
        assert entries[1].mtime_ms == 1704067200000.0

    @pytest.mark.asyncio
    async def test_readdir_on_file_raises_enotdir(self) -> None:
        store = make_store(body=b"plain file content")

        with pytest.raises(SandboxError) as exc_info:
            await store.readdir("a.txt")

        assert exc_info.value.code == "ENOTDIR"

    @pytest.mark.asyncio
    async def test_rm_sends_delete(self) -> None:
        store = make_store()

        await store.rm("a.txt")

        store._request.assert_awaited_once_with("DELETE", "/files", params={"path": "a.txt"})


def failing_session(error: BaseException) -> MagicMock:
    session = MagicMock()
    session.__aenter__.return_value = session
    session.__aexit__.return_value = False
    session.request.side_effect = error
    return session


class TestTransportFailures:
    """Tests for connection errors and timeouts raised by aiohttp."""

    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("connection refused"), TimeoutError()],
    )
    @pytest.mark.asyncio
    async def test_wrapped_in_sandbox_error(self, error: BaseException) -> None:
        store = HttpFileStore("http://sandbox:3001", api_key="k3y")

        with patch(
            "gitbridge.fs.http.aiohttp.ClientSession", return_value=failing_session(error)
        ):
            with pytest.raises(SandboxError) as exc_info:
                await store.read_file("src/a.txt")

        assert exc_info.value.code == "EIO"
        assert exc_info.value.path == "src/a.txt"
        assert exc_info.value.__cause__ is error
        assert not isinstance(exc_info.value, SandboxPathNotFoundError)
