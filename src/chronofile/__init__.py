"""
chronofile: sorts files into a date-based folder tree.

Core features:
- Creation date from embedded EXIF data (via Pillow), falling back to the filesystem birth time
- Content-based duplicate detection (xxHash) inside the source and against the destination
- Copy, move or hard link, with dry run and optional deletion of duplicates
- Reusable JSON checksum snapshots for fast repeat runs
- CLI interface for headless/server usage
"""

# Get version
from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("chronofile")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API, only what users should import directly
from chronofile.commands import OrganizeCommand
from chronofile.core import (
    Action, OperationMode, OrganizerParams, FileOperation, RunReport, Organizer
)
from chronofile.services.snapshot_service import SnapshotService, InvalidSnapshotError
from chronofile.services.action_handler import FileActionHandler

__all__ = [
    "OrganizeCommand",
    "Action",
    "OperationMode",
    "OrganizerParams",
    "FileOperation",
    "RunReport",
    "Organizer",
    "SnapshotService",
    "InvalidSnapshotError",
    "FileActionHandler",
    "__version__",
]
