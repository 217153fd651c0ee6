"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/organizer.py
Run orchestrator: snapshots -> destination pre-scan -> source scan ->
duplicate index -> snapshot save -> execution -> operations save.
"""

import logging
import os
import time
from typing import Dict, List, Optional

from chronofile.core.executor import OperationExecutor
from chronofile.core.interfaces import Confirm, MetadataResolver, PathResolver
from chronofile.core.models import (
    DuplicateIndex, FileOperation, OrganizerParams, RunCounters, RunReport,
)
from chronofile.core.sidecars import align_sidecars
from chronofile.core.walker import TreeWalkerImpl
from chronofile.services.action_handler import FileActionHandler
from chronofile.services.snapshot_service import InvalidSnapshotError, SnapshotService

logger = logging.getLogger(__name__)


def _decline(message: str) -> bool:
    return False


class Organizer:
    """
    Sequences one organizing run over the source and destination trees.

    All collaborators are injected so tests can replace any of them; the
    command layer builds the production set from OrganizerParams.

    Attributes:
        source_index: Checksum -> source paths, canonical member first
        destination_index: Checksum -> destination paths found by the pre-scan
    """

    def __init__(
        self,
        params: OrganizerParams,
        resolver: MetadataResolver,
        path_resolver: PathResolver,
        action_handler: FileActionHandler,
        counters: Optional[RunCounters] = None,
        snapshots: Optional[SnapshotService] = None,
        confirm: Optional[Confirm] = None,
    ):
        self.params = params
        self.resolver = resolver
        self.path_resolver = path_resolver
        self.action_handler = action_handler
        self.counters = counters or RunCounters()
        self.snapshots = snapshots or SnapshotService(params.output_dir)
        self.confirm = confirm or _decline

        self.walker = TreeWalkerImpl(resolver, self.counters, workers=params.workers)
        self.source_index = DuplicateIndex()
        self.destination_index = DuplicateIndex()
        self.artifacts: List[str] = []

    def run(self) -> RunReport:
        start_time = time.time()
        params = self.params
        logger.info(f"Organizing {params.source_dir} -> {params.destination_dir} "
                    f"(mode={params.mode.value}, dry_run={params.dry_run})")

        # (a) snapshots
        src_cache = self._load_source_snapshot()
        dest_cache = self._load_destination_snapshot()

        # (b) destination pre-scan
        fresh_dest = self.scan_destination(dest_cache)

        # (c) source scan
        operations = self.walker.walk_source(params.source_dir, src_cache)
        if params.follow_sidecars:
            aligned = align_sidecars(operations)
            if aligned:
                logger.debug(f"Aligned {aligned} sidecar file(s) with their images")
        self.build_source_index(operations)

        # (d) snapshots out
        if params.save_snapshots:
            self.artifacts.append(self.snapshots.save_source(SnapshotService.source_map(operations)))
            self.artifacts.append(self.snapshots.save_destination(fresh_dest))

        # (e) execution
        executor = OperationExecutor(
            path_resolver=self.path_resolver,
            action_handler=self.action_handler,
            counters=self.counters,
            destination_index=self.destination_index,
            mode=params.mode,
            delete_duplicates=params.delete_duplicates,
            delete_existing=params.delete_existing,
            track_copy_only=params.track_copy_only,
            copy_throttle=params.copy_throttle,
        )
        executor.execute(operations)

        # (f) operations out
        if params.save_operations:
            self.artifacts.append(self.snapshots.save_operations(operations))

        logger.info(f"Run finished in {time.time() - start_time:.2f}s, {len(operations)} files")
        return RunReport(operations=operations, counters=self.counters.snapshot(),
                         artifacts=list(self.artifacts))

    def scan_destination(self, cache: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Fill the destination index from the destination tree.
        Returns the freshly computed destination snapshot (path -> checksum).
        """
        fresh: Dict[str, str] = {}
        if not os.path.isdir(self.params.destination_dir):
            logger.debug(f"Destination does not exist yet: {self.params.destination_dir}")
            return fresh

        for path, checksum in self.walker.walk_destination(self.params.destination_dir, cache):
            if not checksum:
                continue
            fresh[path] = checksum
            self.destination_index.add(checksum, path)
        return fresh

    def build_source_index(self, operations: List[FileOperation]) -> None:
        """Index source checksums in list order; later members of a set count as duplicates."""
        for op in operations:
            if not op.check_sum:
                continue
            if self.source_index.add(op.check_sum, op.path):
                self.counters.increment("duplicates_found", "source")
                logger.debug(f"Duplicate of {self.source_index.canonical(op.check_sum)}: {op.path}")

    def _load_source_snapshot(self) -> Optional[Dict[str, Dict[str, str]]]:
        path = self.params.src_checksums_path
        if not path:
            return None
        return self.snapshots.load_source(path)

    def _load_destination_snapshot(self) -> Optional[Dict[str, str]]:
        path = self.params.dest_checksums_path
        if not path:
            return None
        try:
            return self.snapshots.load_destination(path)
        except InvalidSnapshotError as e:
            logger.warning(str(e))
            if self.confirm(f"{e}\nContinue without the destination snapshot (full re-scan)?"):
                return None
            raise
