"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/metadata.py
Resolves the (checksum, creation date) pair of a file.

The date comes from an external metadata source bounded by a per-file timeout.
A missing timestamp, a failure or a timeout all fall back to the filesystem
birth time, so a single slow or corrupt file never stalls the run.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Optional, Tuple

from chronofile.core.hasher import HasherImpl
from chronofile.core.interfaces import DateSource
from chronofile.core.date_sources import PillowExifDateSource

logger = logging.getLogger(__name__)

DEFAULT_METADATA_TIMEOUT = 5.0


def filesystem_birth_time(path: str) -> Optional[str]:
    """
    Birth time of a file as a local ISO-8601 string.
    Uses st_birthtime where the platform provides it, otherwise the older of
    ctime and mtime. Returns None if the file can't be stat'ed.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        logger.warning(f"Could not stat {path}: {e}")
        return None
    ts = getattr(st, "st_birthtime", None)
    if ts is None:
        ts = min(st.st_ctime, st.st_mtime)
    return datetime.fromtimestamp(ts).isoformat()


class MetadataResolverImpl:
    """
    Computes checksum and creation date of a file as two concurrent operations:
    the date source read runs in a dedicated pool while the file is hashed.
    """

    def __init__(
        self,
        hasher: Optional[HasherImpl] = None,
        date_source: Optional[DateSource] = None,
        use_filesystem_date: bool = False,
        timeout: float = DEFAULT_METADATA_TIMEOUT,
        workers: int = 8,
    ):
        self.hasher = hasher or HasherImpl()
        self.date_source = date_source or PillowExifDateSource()
        self.use_filesystem_date = use_filesystem_date
        self.timeout = timeout
        self._pool = None if use_filesystem_date else ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="date-source"
        )

    def checksum(self, path: str) -> Optional[str]:
        return self.hasher.compute_checksum(path)

    def resolve(self, path: str) -> Tuple[Optional[str], Optional[str]]:
        if self.use_filesystem_date:
            return self.checksum(path), filesystem_birth_time(path)

        started = time.monotonic()
        future = self._pool.submit(self.date_source.read, path)
        checksum = self.checksum(path)

        remaining = max(0.0, self.timeout - (time.monotonic() - started))
        embedded = None
        try:
            embedded = future.result(timeout=remaining)
        except FutureTimeoutError:
            future.cancel()
            logger.debug(f"Metadata read timed out after {self.timeout}s: {path}")
        except Exception as e:
            logger.debug(f"Metadata read failed for {path}: {e}")

        if embedded:
            return checksum, embedded
        return checksum, filesystem_birth_time(path)

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
