"""Filesystem access for testability."""

import os
from typing import BinaryIO

# Initial scratch buffer size; pseudo files with IRQ details are tiny.
READ_CHUNK_SIZE = 512


class Context:
    """
    Wraps filesystem access for testability.

    In production: reads the real /proc and /sys trees
    In tests: can be replaced with MockContext
    """

    def open_binary(self, path: str) -> BinaryIO:
        """Open a file for reading bytes."""
        return open(path, "rb")

    def list_dir(self, path: str) -> list[tuple[str, bool]]:
        """
        List directory entries.

        Args:
            path: Directory to list

        Returns:
            List of (name, is_directory) tuples in directory order

        Raises:
            OSError: If the directory cannot be listed
        """
        with os.scandir(path) as entries:
            return [(entry.name, entry.is_dir()) for entry in entries]

    def read_into(self, path: str, buffer: bytearray) -> int:
        """
        Read a whole file into a reusable buffer.

        The buffer grows as needed and is never shrunk, so callers can
        keep reusing it for further reads. Bytes beyond the returned
        count are stale.

        Args:
            path: File to read
            buffer: Scratch buffer owned by the caller

        Returns:
            Number of bytes read into the start of buffer

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(path, "rb", buffering=0) as f:
            size = 0
            while True:
                if size >= len(buffer):
                    buffer.extend(bytes(max(len(buffer), READ_CHUNK_SIZE)))
                with memoryview(buffer)[size:] as view:
                    n = f.readinto(view)
                if not n:
                    return size
                size += n
