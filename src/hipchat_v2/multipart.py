"""multipart/related request bodies for HipChat file sharing."""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from typing import Any


@dataclass
class Part:
    name: str
    content_type: str
    body: bytes
    filename: str = ""

    def headers(self) -> bytes:
        disposition = f'attachment; name="{self.name}"'
        if self.filename:
            disposition += f'; filename="{self.filename}"'
        return (
            f"Content-Type: {self.content_type}\r\n"
            f"Content-Disposition: {disposition}\r\n\r\n"
        ).encode()


def metadata_part(metadata: dict[str, Any]) -> Part:
    return Part(
        name="metadata",
        content_type="application/json; charset=UTF-8",
        body=json.dumps(metadata).encode(),
    )


def file_part(data: bytes, filename: str, mime_type: str) -> Part:
    return Part(name="file", content_type=mime_type, body=data, filename=filename)


def encode_related(parts: list[Part], boundary: str = "") -> tuple[str, bytes]:
    """Encode parts as a multipart/related body.

    Returns the Content-Type header value (which carries the boundary) and
    the body bytes.
    """
    boundary = boundary or secrets.token_hex(16)
    delimiter = f"--{boundary}\r\n".encode()
    chunks: list[bytes] = []
    for part in parts:
        chunks += [delimiter, part.headers(), part.body, b"\r\n"]
    chunks.append(f"--{boundary}--\r\n".encode())
    return f"multipart/related; boundary={boundary}", b"".join(chunks)
