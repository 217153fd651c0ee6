"""
Shared fixtures for organizing engine tests.
Creates isolated source/destination trees and a fake date source so results
don't depend on EXIF parsing or filesystem timestamps.
"""
import pytest
from pathlib import Path
from typing import Dict, Optional

from chronofile.commands import OrganizeCommand
from chronofile.core.models import OrganizerParams


class FakeDateSource:
    """Returns a fixed ISO date per file name; unknown names have no embedded date."""

    def __init__(self, dates: Optional[Dict[str, str]] = None, default: Optional[str] = None):
        self.dates = dates or {}
        self.default = default
        self.calls = []

    def read(self, path: str) -> Optional[str]:
        self.calls.append(path)
        return self.dates.get(Path(path).name, self.default)


@pytest.fixture
def source_dir(tmp_path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path) -> Path:
    return tmp_path / "dest"


@pytest.fixture
def write_file():
    """write_file(path, content) creates parent folders and returns the path."""
    def _write(path: Path, content: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write


@pytest.fixture
def organize(source_dir, dest_dir, tmp_path):
    """
    organize(dates=None, default_date="2020-05-01T10:00:00", **params) runs a full
    organizing pass over source_dir -> dest_dir and returns the RunReport.
    """
    def _organize(dates=None, default_date="2020-05-01T10:00:00", prompt=None, confirm=None, **kwargs):
        kwargs.setdefault("copy_throttle", 0)
        kwargs.setdefault("output_dir", str(tmp_path / "artifacts"))
        params = OrganizerParams(source_dir=str(source_dir), destination_dir=str(dest_dir), **kwargs)
        return OrganizeCommand().execute(
            params,
            prompt=prompt,
            confirm=confirm,
            date_source=FakeDateSource(dates, default=default_date),
        )
    return _organize


def tree_files(root: Path) -> Dict[str, bytes]:
    """Relative path -> content for every file under root."""
    if not root.exists():
        return {}
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*")) if p.is_file()
    }
