"""Async client for the HipChat v2 room API."""

from hipchat_v2.client import HipchatClient
from hipchat_v2.errors import (
    ApiError,
    FileError,
    HipchatError,
    MimeResolutionError,
    PartialMappingError,
    TransportError,
)
from hipchat_v2.rooms import MappingResult, Room, RoomMapper, RoomMapping
from hipchat_v2.scheduler import RateLimitedScheduler

__all__ = [
    "ApiError",
    "FileError",
    "HipchatClient",
    "HipchatError",
    "MappingResult",
    "MimeResolutionError",
    "PartialMappingError",
    "RateLimitedScheduler",
    "Room",
    "RoomMapper",
    "RoomMapping",
    "TransportError",
    "create_client",
]


def create_client() -> HipchatClient:
    """Create a HipchatClient using the token in HIPCHAT_TOKEN."""
    from hipchat_v2 import environment

    return HipchatClient(environment.get_str("TOKEN"))
