"""Helpers for reading uploaded file streams."""

import hashlib

from fastapi import UploadFile

from filament_insights.core.errors import FileTooLargeError


async def read_upload(
    upload_file: UploadFile,
    max_bytes: int,
    chunk_size: int = 1024 * 1024,
) -> tuple[bytes, str, int]:
    """Read an upload into memory, returning payload, SHA-256 and size.

    Reading stops with ``FileTooLargeError`` as soon as ``max_bytes`` is
    exceeded, so oversized uploads are never fully buffered.
    """
    hasher = hashlib.sha256()
    chunks: list[bytes] = []
    size_bytes = 0
    while True:
        chunk = await upload_file.read(chunk_size)
        if not chunk:
            break
        size_bytes += len(chunk)
        if size_bytes > max_bytes:
            raise FileTooLargeError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit")
        hasher.update(chunk)
        chunks.append(chunk)
    return b"".join(chunks), hasher.hexdigest(), size_bytes
