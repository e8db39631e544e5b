"""Exceptions raised by the HipChat client and room mapper."""

from __future__ import annotations

from typing import Any


class HipchatError(Exception):
    """Base class for hipchat-v2 errors."""


class TransportError(HipchatError):
    """The API could not be reached."""


class ApiError(HipchatError):
    """The API answered with an unexpected status code."""

    def __init__(self, status_code: int, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body

    @classmethod
    def from_body(cls, status_code: int, body: Any) -> ApiError:
        """Build an error from a decoded response body, preferring its message.

        HipChat reports failures as ``{"error": {"code": ..., "message": ...}}``;
        anything else falls back to a generic ``HTTP <status>`` message.
        """
        message = f"HTTP {status_code}"
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                message = str(error["message"])
        return cls(status_code, message, body)


class FileError(HipchatError):
    """A local file could not be read for sharing."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File Read Error: could not read from file {path}")
        self.path = path


class MimeResolutionError(HipchatError):
    """No MIME type is known for a file extension."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"No mimeType found for extension: {extension!r}")
        self.extension = extension


class PartialMappingError(HipchatError):
    """A room mapping finished with at least one failed room lookup."""

    def __init__(self, mapping: dict[str, int | str], failed: list[int | str]) -> None:
        super().__init__(
            f"Failed to get all rooms, a partial map was returned "
            f"({len(failed)} lookup(s) failed)"
        )
        self.mapping = mapping
        self.failed = failed
