"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/executor.py
Sequential execution pass: decides one outcome per planned file operation and
applies it through the action handler.

DECISION PRIORITY
-----------------
1. Missing checksum or creation date            -> SKIPPED
2. Checksum already placed earlier in this run  -> SKIPPED_DUPLICATE / DELETED_DUPLICATE
3. Checksum present in the destination tree     -> SKIPPED_EXISTING / DELETED_EXISTING
4. Path resolver returns None                   -> SKIPPED
5. Mode move / link / copy                      -> MOVED / LINKED / COPIED, or ERROR

Operations are processed strictly in list order. "First occurrence wins"
depends on a stable order, and running placements concurrently with the
duplicate lookups would race between checking a checksum and handling it.
"""

import logging
import time
from typing import Callable, List, Set

from chronofile.core.interfaces import PathResolver
from chronofile.core.models import (
    Action, DuplicateIndex, FileOperation, OperationMode, Outcome, RunCounters,
)
from chronofile.services.action_handler import FileActionHandler

logger = logging.getLogger(__name__)

NULL_METADATA_ERROR = "checksum or creation date is null"
NULL_PATH_ERROR = "new path is null or user chose skip"

STAGE = "execute"


class OperationExecutor:
    """
    Turns the ordered list of FileOperations into filesystem mutations.

    Attributes:
        completed: Checksums placed into the destination during this run
    """

    def __init__(
        self,
        path_resolver: PathResolver,
        action_handler: FileActionHandler,
        counters: RunCounters,
        destination_index: DuplicateIndex,
        mode: OperationMode = OperationMode.COPY,
        delete_duplicates: bool = False,
        delete_existing: bool = False,
        track_copy_only: bool = False,
        copy_throttle: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.path_resolver = path_resolver
        self.action_handler = action_handler
        self.counters = counters
        self.destination_index = destination_index
        self.mode = mode
        self.delete_duplicates = delete_duplicates
        self.delete_existing = delete_existing
        self.track_copy_only = track_copy_only
        self.copy_throttle = copy_throttle
        self._sleep = sleep
        self.completed: Set[str] = set()

    def execute(self, operations: List[FileOperation]) -> List[FileOperation]:
        logger.debug(f"Executing {len(operations)} operations (mode={self.mode.value})")
        for op in operations:
            outcome = self._decide(op)
            op.settle(outcome)
            self._record(op)
        return operations

    def _decide(self, op: FileOperation) -> Outcome:
        """Single decision point: every path through here yields exactly one Outcome."""
        if not op.check_sum or not op.creation_date:
            return Outcome(Action.SKIPPED, NULL_METADATA_ERROR)

        can_delete = self.mode == OperationMode.MOVE

        if op.check_sum in self.completed:
            if self.delete_duplicates and can_delete:
                return self._attempt(Action.DELETED_DUPLICATE, self.action_handler.delete, op.path)
            return Outcome(Action.SKIPPED_DUPLICATE)

        if op.check_sum in self.destination_index:
            self.counters.increment("files_skipped_already_exist", STAGE)
            if self.delete_existing and can_delete:
                return self._attempt(Action.DELETED_EXISTING, self.action_handler.delete, op.path)
            return Outcome(Action.SKIPPED_EXISTING)

        op.new_path = self.path_resolver.resolve(op.path, op.creation_date)
        if op.new_path is None:
            return Outcome(Action.SKIPPED, NULL_PATH_ERROR)

        if self.mode == OperationMode.MOVE:
            return self._attempt(Action.MOVED, self.action_handler.move, op.path, op.new_path)
        if self.mode == OperationMode.LINK:
            return self._attempt(Action.LINKED, self.action_handler.link, op.path, op.new_path)

        outcome = self._attempt(Action.COPIED, self.action_handler.copy, op.path, op.new_path)
        if outcome.action == Action.COPIED and self.copy_throttle and not self.action_handler.dry_run:
            self._sleep(self.copy_throttle)
        return outcome

    def _attempt(self, action: Action, primitive: Callable[..., None], *args: str) -> Outcome:
        """Run one primitive; any failure stays inside this file's boundary."""
        try:
            primitive(*args)
        except Exception as e:
            logger.debug(f"{action.value} failed for {args[0]}: {e}")
            return Outcome(Action.ERROR, str(e))
        return Outcome(action)

    def _record(self, op: FileOperation) -> None:
        if op.action == Action.ERROR:
            self.counters.increment("operations_error_count", STAGE)
            logger.warning(f"Failed to process {op.path}: {op.error}")
            return

        if op.action.places_file or op.action in (Action.DELETED_DUPLICATE, Action.DELETED_EXISTING):
            self.counters.increment("operations_done", STAGE)

        if op.action.places_file:
            self.path_resolver.claim(op.new_path)
            if op.action == Action.COPIED or not self.track_copy_only:
                self.completed.add(op.check_sum)

        logger.debug(f"{op.action.value}: {op.path} -> {op.new_path}")
