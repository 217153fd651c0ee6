"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/snapshot_service.py
Loading, validation and saving of checksum snapshots and per-run artifacts.

Snapshot shapes:
    source      : {absolute_path: {"checkSum": str, "creationDate": str}}
    destination : {absolute_path: checksum_str}
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from chronofile.core.models import FileOperation
from chronofile.utils.date_utils import DateUtils

logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "chronofile"


class InvalidSnapshotError(ValueError):
    """A checksum snapshot file is unreadable or structurally invalid."""


class SnapshotService:
    """
    Reads and writes the JSON files that let a run reuse checksums computed
    by an earlier run.
    """

    def __init__(self, output_dir: Optional[str] = None):
        self.output_dir = Path(output_dir) if output_dir else Path.cwd()
        self.stamp = DateUtils.file_stamp()

    # ---------- loading ----------

    @staticmethod
    def _read_json(path: str) -> object:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidSnapshotError(f"Cannot read snapshot {path}: {e}") from e

    @classmethod
    def load_source(cls, path: str) -> Dict[str, Dict[str, str]]:
        """Load and validate a source snapshot. Raises InvalidSnapshotError."""
        data = cls._read_json(path)
        if not isinstance(data, dict):
            raise InvalidSnapshotError(f"Snapshot {path} must be a JSON object")

        for file_path, entry in data.items():
            if not isinstance(entry, dict):
                raise InvalidSnapshotError(f"Invalid entry for {file_path} in {path}: expected an object")
            check_sum = entry.get("checkSum")
            creation_date = entry.get("creationDate")
            if not isinstance(check_sum, str) or not check_sum:
                raise InvalidSnapshotError(f"Invalid checkSum for {file_path} in {path}")
            if not isinstance(creation_date, str):
                raise InvalidSnapshotError(f"Invalid creationDate for {file_path} in {path}")
            try:
                DateUtils.parse_iso(creation_date)
            except ValueError as e:
                raise InvalidSnapshotError(f"Invalid creationDate for {file_path} in {path}: {e}") from e

        logger.debug(f"Loaded source snapshot with {len(data)} entries: {path}")
        return data

    @classmethod
    def load_destination(cls, path: str) -> Dict[str, str]:
        """Load and validate a destination snapshot. Raises InvalidSnapshotError."""
        data = cls._read_json(path)
        if not isinstance(data, dict):
            raise InvalidSnapshotError(f"Snapshot {path} must be a JSON object")

        for file_path, check_sum in data.items():
            if not isinstance(check_sum, str) or not check_sum:
                raise InvalidSnapshotError(f"Invalid checksum for {file_path} in {path}")

        logger.debug(f"Loaded destination snapshot with {len(data)} entries: {path}")
        return data

    # ---------- building ----------

    @staticmethod
    def source_map(operations: Iterable[FileOperation]) -> Dict[str, Dict[str, str]]:
        """Fresh source snapshot; files without complete metadata are left out."""
        return {
            op.path: {"checkSum": op.check_sum, "creationDate": op.creation_date}
            for op in operations
            if op.check_sum and op.creation_date
        }

    # ---------- saving ----------

    def artifact_path(self, kind: str) -> Path:
        return self.output_dir / f"{ARTIFACT_PREFIX}-{kind}-{self.stamp}.json"

    def _write(self, kind: str, data: object) -> str:
        path = self.artifact_path(kind)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved {kind} to {path}")
        return str(path)

    def save_source(self, snapshot: Dict[str, Dict[str, str]]) -> str:
        return self._write("src-checksums", snapshot)

    def save_destination(self, snapshot: Dict[str, str]) -> str:
        return self._write("dest-checksums", snapshot)

    def save_operations(self, operations: List[FileOperation]) -> str:
        return self._write("operations", [op.to_dict() for op in operations])
