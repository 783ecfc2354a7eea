"""Sandbox store backed by the project file server.

The file server exposes the sandbox's project directory over a small JSON
API authenticated with an ``X-API-Key`` header:

- ``GET /files?path=`` returns file content, or a JSON listing for directories
- ``POST /files`` writes ``{path, content, encoding}``
- ``POST /directories`` creates ``{path, recursive}``
- ``DELETE /files?path=`` removes a file or directory
"""

from __future__ import annotations

import base64
import json
from datetime import datetime
from typing import Any

import aiohttp

from gitbridge.exceptions import SandboxError, SandboxPathNotFoundError
from gitbridge.fs.types import DirEntry
from gitbridge.logging import get_logger

logger = get_logger(__name__)

__all__ = ["HttpFileStore"]

#: Default request timeout in seconds
DEFAULT_TIMEOUT: float = 30.0


def _parse_mtime(value: Any) -> float | None:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp() * 1000
        except ValueError:
            return None
    return None


class HttpFileStore:
    """:class:`~gitbridge.fs.types.SandboxFileSystem` talking to the file server.

    Args:
        base_url: File server root URL.
        api_key: Value sent in the ``X-API-Key`` header.
        timeout: Total request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, bytes]:
        """Send one request and return ``(status, body)``.

        Raises:
            SandboxError: With code ``EIO`` on connection failures and timeouts.
        """
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.request(
                    method,
                    f"{self.base_url}{endpoint}",
                    params=params,
                    json=payload,
                    headers=self._headers(),
                ) as resp,
            ):
                return resp.status, await resp.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            path = (params or payload or {}).get("path")
            logger.warning("file_server_unreachable", method=method, endpoint=endpoint)
            raise SandboxError(
                f"EIO: file server request failed, {method} {endpoint}: "
                f"{e or type(e).__name__}",
                code="EIO",
                path=path,
            ) from e

    @staticmethod
    def _raise_for_status(
        status: int, body: bytes, action: str, path: str, syscall: str
    ) -> None:
        if 200 <= status < 300:
            return
        if status == 404:
            raise SandboxPathNotFoundError(path, syscall)
        try:
            detail = json.loads(body).get("error") or f"HTTP {status}"
        except (ValueError, AttributeError):
            detail = body.decode("utf-8", errors="replace") or f"HTTP {status}"
        raise SandboxError(f"Failed to {action}: {detail}", path=path)

    async def read_file(self, path: str, encoding: str | None = None) -> bytes | str:
        status, body = await self._request("GET", "/files", params={"path": path})
        self._raise_for_status(status, body, "read file", path, "open")
        if encoding:
            return body.decode(encoding)
        return body

    async def write_file(
        self, path: str, data: bytes | str, encoding: str | None = None
    ) -> None:
        if isinstance(data, str):
            content = data
        else:
            content = base64.b64encode(data).decode("ascii")
            encoding = "base64"
        logger.debug("file_server_write", path=path, encoding=encoding)
        status, body = await self._request(
            "POST",
            "/files",
            payload={"path": path, "content": content, "encoding": encoding},
        )
        self._raise_for_status(status, body, "write file", path, "open")

    async def mkdir(self, path: str, recursive: bool = True) -> None:
        if not path or not path.strip():
            raise ValueError("Path parameter is required and must be a non-empty string")
        status, body = await self._request(
            "POST",
            "/directories",
            payload={"path": path, "recursive": recursive},
        )
        self._raise_for_status(status, body, "create directory", path, "mkdir")

    async def readdir(self, path: str) -> list[DirEntry]:
        status, body = await self._request("GET", "/files", params={"path": path})
        self._raise_for_status(status, body, "read directory", path, "scandir")
        try:
            listing = json.loads(body)
        except ValueError as e:
            raise SandboxError(
                f"ENOTDIR: not a directory, scandir '{path}'", code="ENOTDIR", path=path
            ) from e
        if not isinstance(listing, list):
            raise SandboxError(
                f"ENOTDIR: not a directory, scandir '{path}'", code="ENOTDIR", path=path
            )
        return [
            DirEntry(
                name=item["name"],
                is_dir=bool(item.get("isDirectory")),
                size=int(item.get("size") or 0),
                mtime_ms=_parse_mtime(item.get("modifiedTime")),
            )
            for item in listing
        ]

    async def rm(self, path: str, recursive: bool = False) -> None:
        status, body = await self._request("DELETE", "/files", params={"path": path})
        self._raise_for_status(status, body, "remove file", path, "rm")
