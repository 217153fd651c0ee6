"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/action_handler.py
Mutating file primitives: move, copy, hard link and delete.
Every primitive is a no-op under dry run; errors propagate to the caller.
"""
import os
import shutil
import logging
from pathlib import Path
from send2trash import send2trash

logger = logging.getLogger(__name__)

LINK_TMP_SUFFIX = ".chronofile-linktmp"


class FileActionHandler:
    """
    Performs the filesystem side of each planned operation.
    Creates the destination directory before placing a file.
    """

    def __init__(self, dry_run: bool = False, use_trash: bool = False):
        self.dry_run = dry_run
        self.use_trash = use_trash

    def move(self, src: str, dst: str) -> None:
        if self.dry_run:
            return
        self._ensure_parent(dst)
        shutil.move(src, dst)

    def copy(self, src: str, dst: str) -> None:
        if self.dry_run:
            return
        self._ensure_parent(dst)
        shutil.copy2(src, dst)

    def link(self, src: str, dst: str) -> None:
        """Hard link dst to src. An existing dst is replaced atomically."""
        if self.dry_run:
            return
        self._ensure_parent(dst)
        if not os.path.lexists(dst):
            os.link(src, dst)
            return
        tmp = dst + LINK_TMP_SUFFIX
        os.link(src, tmp)
        try:
            os.replace(tmp, dst)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, src: str) -> None:
        if self.dry_run:
            return
        if self.use_trash:
            if not os.path.lexists(src):
                raise FileNotFoundError(f"File not found: {src}")
            try:
                send2trash(src)
            except Exception as e:
                raise RuntimeError(f"Failed to move to trash: {e}") from e
        else:
            os.remove(src)

    @staticmethod
    def _ensure_parent(dst: str) -> None:
        Path(dst).parent.mkdir(parents=True, exist_ok=True)
