"""Rooms and the jabber-id to API-id room mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, cast

from hipchat_v2.errors import PartialMappingError
from hipchat_v2.scheduler import Operation, RateLimitedScheduler

log = logging.getLogger(__name__)

RoomMapping = dict[str, int | str]


@dataclass
class Room:
    """A HipChat room.

    ``api_id`` is what the REST API wants in its URLs; ``protocol_id`` is the
    room's XMPP jid, which is what inbound chat events carry. Rooms from the
    room listing have no jid, so their ``protocol_id`` is empty.
    """

    api_id: int | str
    protocol_id: str = ""
    name: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Room:
        return cls(
            api_id=data["id"],
            protocol_id=data.get("xmpp_jid", ""),
            name=data.get("name", ""),
        )


class RoomDirectory(Protocol):
    async def list_rooms(self) -> list[Room]: ...

    async def get_room(self, id_or_name: int | str) -> Room: ...


@dataclass
class MappingResult:
    """A room mapping, plus the error when the build ended on a failed lookup."""

    mapping: RoomMapping = field(default_factory=dict)
    error: PartialMappingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> RoomMapping:
        if self.error is not None:
            raise self.error
        return self.mapping


class RoomMapper:
    """Builds a jabber-id to API-id mapping for every room the token can see.

    Each room needs its own lookup to learn its jid, and the lookups are
    spaced out by the scheduler so a large room list doesn't burst the API.
    """

    def __init__(
        self,
        directory: RoomDirectory,
        scheduler: RateLimitedScheduler | None = None,
    ) -> None:
        self.directory = directory
        self.scheduler = scheduler or RateLimitedScheduler()

    async def build(self) -> MappingResult:
        """Look up every listed room and collect the mapping.

        A failure listing the rooms propagates. Failed lookups are skipped,
        and the result is only marked as failed when the lookup that
        finished last was one of them.
        """
        rooms = await self.directory.list_rooms()
        if not rooms:
            return MappingResult()

        log.info(
            "Mapping %d room(s), one lookup every %ss",
            len(rooms),
            self.scheduler.interval.total_seconds(),
        )

        lookups = [self._lookup(room.api_id) for room in rooms]
        mapping: RoomMapping = {}
        failed: list[int | str] = []
        completed = 0
        last_error: Exception | None = None

        async for completion in self.scheduler.completions(lookups):
            completed += 1
            last_error = completion.error
            api_id = rooms[completion.index].api_id
            if completion.error is not None:
                failed.append(api_id)
                log.warning("Failed to look up room %s: %s", api_id, completion.error)
            else:
                room = cast(Room, completion.value)
                if room.protocol_id:
                    mapping[room.protocol_id] = api_id
                else:
                    log.warning("Room %s has no xmpp_jid, leaving it unmapped", api_id)
            log.debug("Room lookups completed: %d/%d", completed, len(rooms))

        # Only the lookup that finished last decides how the result is framed
        if last_error is not None:
            error = PartialMappingError(mapping, failed)
            error.__cause__ = last_error
            return MappingResult(mapping, error)
        return MappingResult(mapping)

    def _lookup(self, api_id: int | str) -> Operation[Room]:
        async def lookup() -> Room:
            return await self.directory.get_room(api_id)

        return lookup
