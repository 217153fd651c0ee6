from .action_handler import FileActionHandler
from .snapshot_service import SnapshotService, InvalidSnapshotError

__all__ = ["FileActionHandler", "SnapshotService", "InvalidSnapshotError"]
