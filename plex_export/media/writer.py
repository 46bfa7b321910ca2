"""
Persists exported documents and streamed assets to the local filesystem.
"""

import logging
import os
from pathlib import Path
from typing import AsyncIterable

import aiofiles

log = logging.getLogger(__name__)


class ArtifactWriter:
    """
    Writes artifacts into directories that must already exist.

    The export mirrors the media server's own folders, so a missing parent
    directory means the target filesystem does not hold that media and the
    write fails with ``OSError`` instead of creating it.
    """

    async def write_document(self, destination_path: Path, body: bytes) -> None:
        """Overwrites ``destination_path`` with a document body, byte for byte."""
        async with aiofiles.open(destination_path, "wb") as f:
            await f.write(body)
        log.debug(f"Wrote document '{destination_path}'")

    async def write_stream(
        self, destination_path: Path, chunks: AsyncIterable[bytes]
    ) -> int:
        """
        Writes a byte stream to ``destination_path`` and returns its size.

        The data lands in a temporary sibling first and replaces the target only
        once the stream is complete, so a failed download never leaves a
        truncated file behind.
        """
        temp_path = destination_path.with_name(destination_path.name + ".part")
        bytes_written = 0
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in chunks:
                    await f.write(chunk)
                    bytes_written += len(chunk)
            os.replace(temp_path, destination_path)
        finally:
            if temp_path.exists():
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
        log.debug(f"Wrote asset '{destination_path.name}' ({bytes_written} bytes)")
        return bytes_written
