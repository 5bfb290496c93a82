"""Helpers for the byte-chunk streams returned by install and uninstall."""
from __future__ import annotations

from collections.abc import AsyncIterator


async def error_stream(exc: BaseException) -> AsyncIterator[bytes]:
    """A stream whose first and only element is *exc*."""
    raise exc
    yield b""  # pragma: no cover


async def collect(stream: AsyncIterator[bytes]) -> bytes:
    """Drain *stream* and return everything it produced."""
    chunks = [chunk async for chunk in stream]
    return b"".join(chunks)
