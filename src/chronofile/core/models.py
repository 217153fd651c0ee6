"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and run state for the date-based organizing engine.
"""

import os
import threading
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def is_nested(inner: str, outer: str) -> bool:
    """True if inner is a strict subdirectory of outer (both absolute)."""
    inner, outer = os.path.normcase(inner), os.path.normcase(outer)
    if inner == outer:
        return False
    try:
        return os.path.commonpath([inner, outer]) == outer
    except ValueError:
        # different drives
        return False


# =============================
# Enums
# =============================

class Action(str, Enum):
    """Closed set of terminal outcomes for a single file."""
    MOVED = "MOVED"
    COPIED = "COPIED"
    LINKED = "LINKED"
    DELETED = "DELETED"
    DELETED_DUPLICATE = "DELETED_DUPLICATE"
    DELETED_EXISTING = "DELETED_EXISTING"
    SKIPPED = "SKIPPED"
    SKIPPED_DUPLICATE = "SKIPPED_DUPLICATE"
    SKIPPED_EXISTING = "SKIPPED_EXISTING"
    ERROR = "ERROR"

    @property
    def places_file(self) -> bool:
        """True for actions that put the file's content into the destination tree."""
        return self in (Action.MOVED, Action.COPIED, Action.LINKED)


class OperationMode(Enum):
    """
    How a file reaches the destination tree.
    """
    COPY = "copy"
    MOVE = "move"
    LINK = "link"

    @property
    def display_name(self) -> str:
        """Human-readable name for console output."""
        mapping = {
            OperationMode.COPY: "Copy",
            OperationMode.MOVE: "Move",
            OperationMode.LINK: "Hard link",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class Outcome:
    """Single decision produced for a file by the executor."""
    action: Action
    error: Optional[str] = None


@dataclass
class FileOperation:
    """
    One planned operation per discovered source file.
    The action is write-once: it is applied through settle() exactly once.
    """
    folder_path: str
    path: str
    check_sum: Optional[str] = None
    creation_date: Optional[str] = None
    new_path: Optional[str] = None
    action: Optional[Action] = None
    error: Optional[str] = None

    @classmethod
    def from_path(cls, path: str) -> "FileOperation":
        path = os.path.abspath(path)
        return cls(folder_path=os.path.dirname(path), path=path)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def settle(self, outcome: Outcome) -> None:
        """Record the terminal outcome. Raises if an outcome was already recorded."""
        if self.action is not None:
            raise RuntimeError(
                f"Action for {self.path} already set to {self.action.value}"
            )
        self.action = outcome.action
        self.error = outcome.error

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = {
            "folderPath": self.folder_path,
            "path": self.path,
            "checkSum": self.check_sum,
            "creationDate": self.creation_date,
            "newPath": self.new_path,
            "action": self.action.value if self.action else None,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    def __repr__(self):
        return f"<FileOperation path={self.path}, action={self.action}>"


class DuplicateIndex:
    """
    Maps a checksum to the ordered list of paths sharing it.
    The first path inserted for a checksum is its canonical representative.
    """

    def __init__(self):
        self._paths: Dict[str, List[str]] = {}

    def add(self, checksum: str, path: str) -> bool:
        """
        Insert a path under its checksum.
        Returns True if the checksum was already known (i.e. the path is a duplicate).
        """
        paths = self._paths.get(checksum)
        if paths is None:
            self._paths[checksum] = [path]
            return False
        if path not in paths:
            paths.append(path)
        return True

    def canonical(self, checksum: str) -> Optional[str]:
        paths = self._paths.get(checksum)
        return paths[0] if paths else None

    def paths(self, checksum: str) -> List[str]:
        return list(self._paths.get(checksum, []))

    def duplicate_sets(self) -> Dict[str, List[str]]:
        """Checksums held by two or more paths."""
        return {h: list(p) for h, p in self._paths.items() if len(p) >= 2}

    def __contains__(self, checksum: object) -> bool:
        return checksum in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self):
        return f"<DuplicateIndex checksums={len(self._paths)}>"


# =============================
# Run counters
# =============================

@dataclass(frozen=True)
class CounterSnapshot:
    """Immutable view of the run counters."""
    files_found: int = 0
    folders_found: int = 0
    duplicates_found: int = 0
    dest_files_found: int = 0
    files_hashed: int = 0
    operations_done: int = 0
    operations_error_count: int = 0
    files_skipped_already_exist: int = 0


CounterListener = Callable[[str, CounterSnapshot], None]


class RunCounters:
    """
    Monotonic counters for one run.
    Written from the discovery worker threads, read by progress listeners
    through immutable snapshots.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # Serializes update + notify so listeners see snapshots in order
        self._notify_lock = threading.RLock()
        self._values: Dict[str, int] = asdict(CounterSnapshot())
        self._listeners: List[CounterListener] = []

    def add_listener(self, listener: CounterListener) -> None:
        """Adds a listener to receive a snapshot after every update."""
        self._listeners.append(listener)

    def increment(self, name: str, stage: str, amount: int = 1) -> None:
        if name not in self._values:
            raise KeyError(f"Unknown counter: {name}")
        with self._notify_lock:
            with self._lock:
                self._values[name] += amount
                snapshot = CounterSnapshot(**self._values)

            for listener in self._listeners:
                try:
                    listener(stage, snapshot)
                except Exception as e:
                    logger.warning(f"Error in progress listener: {e}")

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(**self._values)


# =============================
# Parameters
# =============================

@dataclass
class OrganizerParams:
    """Parameters for an organizing run with built-in validation."""
    source_dir: str
    destination_dir: str
    date_format: str = "YYYY/MM/DD"
    mode: OperationMode = OperationMode.COPY
    dry_run: bool = False
    interactive: bool = False
    delete_duplicates: bool = False
    delete_existing: bool = False
    use_filesystem_date: bool = False
    use_exiftool: bool = False
    workers: int = 8
    src_checksums_path: Optional[str] = None
    dest_checksums_path: Optional[str] = None
    save_snapshots: bool = False
    save_operations: bool = False
    output_dir: Optional[str] = None
    use_trash: bool = False
    follow_sidecars: bool = True
    track_copy_only: bool = False
    metadata_timeout: float = 5.0
    copy_throttle: float = 0.05

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.source_dir:
            raise ValueError("Source directory cannot be empty")
        if not self.destination_dir:
            raise ValueError("Destination directory cannot be empty")

        self.source_dir = os.path.abspath(self.source_dir)
        self.destination_dir = os.path.abspath(self.destination_dir)
        if self.source_dir == self.destination_dir:
            raise ValueError("Source and destination directories must differ")
        if is_nested(self.source_dir, self.destination_dir) or is_nested(self.destination_dir, self.source_dir):
            raise ValueError("Source and destination directories must not be inside each other")

        if not self.date_format or not self.date_format.strip():
            raise ValueError("Date format cannot be empty")
        if self.workers < 1:
            raise ValueError("Worker count must be at least 1")
        if self.metadata_timeout <= 0:
            raise ValueError("Metadata timeout must be positive")
        if self.copy_throttle < 0:
            raise ValueError("Copy throttle cannot be negative")
        if not isinstance(self.mode, OperationMode):
            self.mode = OperationMode(self.mode)


@dataclass
class RunReport:
    """Result of one organizer run."""
    operations: List[FileOperation]
    counters: CounterSnapshot
    artifacts: List[str] = field(default_factory=list)

    def count(self, action: Action) -> int:
        return sum(1 for op in self.operations if op.action == action)

    def summary(self) -> Dict[str, int]:
        """Per-action totals, only for actions that occurred."""
        totals: Dict[str, int] = {}
        for op in self.operations:
            key = op.action.value if op.action else "UNDECIDED"
            totals[key] = totals.get(key, 0) + 1
        return totals
