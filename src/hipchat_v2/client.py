"""Async HipChat v2 REST client for rooms, notifications and file sharing."""

from __future__ import annotations

import logging
import mimetypes
from datetime import timedelta
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from hipchat_v2 import environment
from hipchat_v2.errors import (
    ApiError,
    FileError,
    MimeResolutionError,
    TransportError,
)
from hipchat_v2.multipart import encode_related, file_part, metadata_part
from hipchat_v2.rooms import Room, RoomMapper, RoomMapping
from hipchat_v2.scheduler import RateLimitedScheduler

log = logging.getLogger(__name__)

GET_OK = 200
POST_OK = 204


def _quote(id_or_name: int | str) -> str:
    return quote(str(id_or_name), safe="")


def _decode(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class HipchatClient:
    """Authenticated client for the room endpoints of the HipChat v2 API.

    Use as an async context manager; the underlying connection pool is
    opened on entry and closed on exit.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.token = token
        self.base_url = (base_url or environment.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else environment.TIMEOUT
        self._http: httpx.AsyncClient | None = None

    async def __aenter__(self) -> HipchatClient:
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
        )
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    @property
    def _api(self) -> httpx.AsyncClient:
        assert self._http is not None, "Not connected, use `async with` first"
        return self._http

    async def _request(
        self, method: str, endpoint: str, expected: int, **kwargs: Any
    ) -> httpx.Response:
        try:
            resp = await self._api.request(method, f"/{endpoint}", **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"Could not reach {self.base_url}: {e}") from e
        if resp.status_code != expected:
            error = ApiError.from_body(resp.status_code, _decode(resp))
            log.debug("%s /%s failed: %s", method, endpoint, error)
            raise error
        return resp

    async def _get(self, endpoint: str, **params: Any) -> dict[str, Any]:
        resp = await self._request("GET", endpoint, GET_OK, params=params)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, "Invalid JSON response", resp.text) from e

    async def list_rooms(self) -> list[Room]:
        """List the rooms visible to the token (first page only)."""
        result = await self._get("room")
        return [Room.from_api(item) for item in result.get("items", [])]

    async def get_room(self, id_or_name: int | str) -> Room:
        """Fetch a room's details by API id or room name."""
        return Room.from_api(await self._get(f"room/{_quote(id_or_name)}"))

    async def post_html_message(self, id_or_name: int | str, html: str) -> None:
        """Send a room notification rendered as HTML.

        Attribute values inside the HTML must be double quoted, e.g.
        ``<a href="https://example.com">link</a>``.
        """
        await self._request(
            "POST",
            f"room/{_quote(id_or_name)}/notification",
            POST_OK,
            content=html.encode(),
            headers={"Content-Type": "text/html"},
        )

    async def share_file(
        self,
        id_or_name: int | str,
        file_path: str | Path,
        alias: str,
        message: str = "",
    ) -> None:
        """Share a local file to a room.

        Users see the file as ``alias`` plus the original extension. The
        MIME type comes from the extension, and an unknown extension fails
        before the file is read.
        """
        path = Path(file_path)
        extension = path.suffix
        mime_type = mimetypes.guess_type(f"file{extension}")[0] if extension else None
        if not mime_type:
            raise MimeResolutionError(extension)

        try:
            data = path.read_bytes()
        except OSError as e:
            raise FileError(str(path)) from e

        await self.share_file_bytes(
            id_or_name, data, f"{alias}{extension}", mime_type, message=message
        )

    async def share_file_bytes(
        self,
        id_or_name: int | str,
        data: bytes,
        filename: str,
        mime_type: str,
        message: str = "",
    ) -> None:
        content_type, body = encode_related(
            [metadata_part({"message": message}), file_part(data, filename, mime_type)]
        )
        log.info("Sharing %s (%d bytes) to room %s", filename, len(data), id_or_name)
        await self._request(
            "POST",
            f"room/{_quote(id_or_name)}/share/file",
            POST_OK,
            content=body,
            headers={"Content-Type": content_type},
        )

    async def create_room_mapping(
        self, interval: timedelta | None = None
    ) -> RoomMapping:
        """Map each visible room's XMPP jid to its API id.

        Lookups are spaced ``interval`` apart (HIPCHAT_MAPPING_INTERVAL by
        default), so this takes roughly that long per room. Raises
        PartialMappingError, with the partial mapping attached, when the
        last lookup to finish failed.
        """
        if interval is None:
            interval = environment.MAPPING_INTERVAL
        scheduler = RateLimitedScheduler(interval)
        result = await RoomMapper(self, scheduler).build()
        return result.unwrap()
