"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Recursive directory traversal with bounded parallelism.

Features:
- Directory reads and per-file metadata resolution share one bounded thread pool
- The calling thread drives the pool, so no task ever waits on another task
- Discovery counters are bumped as soon as an entry is classified
- An unreadable directory aborts the whole walk (no partial-subtree recovery)
- Results are sorted by path, independent of completion order
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_COMPLETED, Future
from typing import Callable, Dict, List, Optional, Tuple, Any

from chronofile.core.interfaces import MetadataResolver
from chronofile.core.models import FileOperation, RunCounters

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8

SourceCache = Dict[str, Dict[str, str]]
DestinationCache = Dict[str, str]


class TreeWalkerImpl:
    """
    Walks the source and destination trees.

    Attributes:
        resolver: Produces checksum/creation date for discovered files
        counters: Run counters updated during discovery
        workers: Maximum number of concurrent directory reads and file resolutions
    """

    def __init__(self, resolver: MetadataResolver, counters: RunCounters, workers: int = DEFAULT_WORKERS):
        self.resolver = resolver
        self.counters = counters
        self.workers = workers

    def walk_source(self, root_dir: str, cache: Optional[SourceCache] = None) -> List[FileOperation]:
        """
        Returns one FileOperation per file under root_dir, with checksum and
        creation date filled in (from the cache when the path is present there).
        """
        cache = cache or {}

        def handle(path: str) -> FileOperation:
            op = FileOperation.from_path(path)
            cached = cache.get(op.path)
            if cached is not None:
                op.check_sum = cached["checkSum"]
                op.creation_date = cached["creationDate"]
            else:
                try:
                    op.check_sum, op.creation_date = self.resolver.resolve(op.path)
                except Exception as e:
                    logger.warning(f"Could not resolve metadata of {op.path}: {e}")
            # cache hits count too, so progress reaches files_found
            self.counters.increment("files_hashed", "source")
            return op

        operations = self._walk(root_dir, handle, stage="source",
                                file_counter="files_found", folder_counter="folders_found")
        return sorted(operations, key=lambda op: op.path)

    def walk_destination(self, root_dir: str, cache: Optional[DestinationCache] = None) -> List[Tuple[str, Optional[str]]]:
        """
        Returns (path, checksum) for every file under root_dir.
        """
        cache = cache or {}

        def handle(path: str) -> Tuple[str, Optional[str]]:
            path = os.path.abspath(path)
            if path in cache:
                checksum = cache[path]
            else:
                try:
                    checksum = self.resolver.checksum(path)
                except Exception as e:
                    logger.warning(f"Could not hash {path}: {e}")
                    checksum = None
            return path, checksum

        entries = self._walk(root_dir, handle, stage="destination",
                             file_counter="dest_files_found", folder_counter=None)
        return sorted(entries, key=lambda entry: entry[0])

    def _walk(
        self,
        root_dir: str,
        handle_file: Callable[[str], Any],
        stage: str,
        file_counter: str,
        folder_counter: Optional[str],
    ) -> List[Any]:
        logger.debug(f"Walking {stage} tree: {root_dir}")
        start_time = time.time()

        results = []
        root_stat = os.stat(root_dir)
        seen_dirs = {(root_stat.st_dev, root_stat.st_ino)}
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix=f"walk-{stage}") as pool:
            pending: Dict[Future, bool] = {pool.submit(self._list_dir, root_dir): True}
            try:
                while pending:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        is_dir_listing = pending.pop(future)
                        if not is_dir_listing:
                            results.append(future.result())
                            continue

                        # OSError from an unreadable directory propagates here
                        files, dirs = future.result()
                        for dir_path, key in dirs:
                            if key in seen_dirs:
                                logger.debug(f"Skipping already visited directory: {dir_path}")
                                continue
                            seen_dirs.add(key)
                            if folder_counter:
                                self.counters.increment(folder_counter, stage)
                            pending[pool.submit(self._list_dir, dir_path)] = True
                        for file_path in files:
                            self.counters.increment(file_counter, stage)
                            pending[pool.submit(handle_file, file_path)] = False
            except BaseException:
                for future in pending:
                    future.cancel()
                raise

        logger.debug(f"{stage} walk finished in {time.time() - start_time:.2f}s, {len(results)} files")
        return results

    @staticmethod
    def _list_dir(dir_path: str) -> Tuple[List[str], List[Tuple[str, Tuple[int, int]]]]:
        """
        Read one directory and classify its entries.
        Returns (file paths, [(dir path, (st_dev, st_ino))]), both sorted by name.
        """
        files = []
        dirs = []
        with os.scandir(dir_path) as it:
            for entry in it:
                try:
                    if entry.is_file():
                        files.append(entry.path)
                    elif entry.is_dir():
                        st = entry.stat()
                        dirs.append((entry.path, (st.st_dev, st.st_ino)))
                    else:
                        logger.debug(f"Skipping non-regular entry: {entry.path}")
                except OSError as e:
                    logger.debug(f"Could not classify {entry.path}: {e}")
        files.sort()
        dirs.sort()
        return files, dirs
