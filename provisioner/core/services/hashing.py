"""
Content hashing — strings, files and whole directory trees.

``directory_hash`` is order-independent: file digests are sorted
before they are combined, so the same set of file contents hashes
identically whatever order the filesystem enumerates it in.
"""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def string_hash(value: str) -> str:
    """SHA-256 hex digest of the UTF-8 bytes of ``value``."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def file_hash(path: str | os.PathLike) -> str:
    """SHA-256 hex digest of a file, read in bounded chunks.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def walk_entries(root: str | os.PathLike) -> Iterator[os.DirEntry]:
    """Yield every entry under ``root``, depth first.

    Directory symlinks are yielded but not descended into. Unlike
    ``os.walk``, errors (missing root, unreadable directory) propagate.
    """
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        yield entry
        if entry.is_dir(follow_symlinks=False):
            yield from walk_entries(entry.path)


def directory_hash(path: str | os.PathLike) -> str:
    """Hash every regular file under ``path`` into a single digest.

    Symlinks and other non-regular entries are excluded.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        OSError: If any file cannot be read.
    """
    digests = [
        file_hash(entry.path)
        for entry in walk_entries(path)
        if entry.is_file(follow_symlinks=False)
    ]
    digests.sort()
    result = string_hash("".join(digests))
    logger.debug("Hashed %d files under %s: %s", len(digests), Path(path), result)
    return result
