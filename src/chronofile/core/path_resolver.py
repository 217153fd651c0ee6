"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/path_resolver.py
Computes the canonical destination of a file under the date-based layout
and resolves name collisions with files already in place.
"""

import logging
import os
from typing import Optional, Set

from chronofile.core.interfaces import Prompt
from chronofile.utils.date_utils import DateUtils

logger = logging.getLogger(__name__)

COLLISION_CHOICES = {
    "1": "skip", "skip": "skip", "s": "skip",
    "2": "rename", "rename": "rename", "r": "rename",
    "3": "replace", "replace": "replace",
}


def _no_prompt(question: str) -> str:
    raise RuntimeError("Interactive collision handling requires a prompt")


class PathResolverImpl:
    """
    Resolves destination paths: output_root / formatted date / basename.

    Collisions are checked against the real filesystem and against paths
    already claimed during this run (so a dry run assigns the same names a
    real run would).
    """

    def __init__(
        self,
        output_root: str,
        date_format: str = "YYYY/MM/DD",
        interactive: bool = False,
        dry_run: bool = False,
        prompt: Optional[Prompt] = None,
    ):
        self.output_root = os.path.abspath(output_root)
        self.date_format = date_format
        self.interactive = interactive
        self.dry_run = dry_run
        self.prompt = prompt or _no_prompt
        self._claimed: Set[str] = set()

    def resolve(self, source_path: str, creation_date: str) -> Optional[str]:
        try:
            moment = DateUtils.parse_iso(creation_date)
            formatted = DateUtils.sanitize_segment(DateUtils.format_tokens(moment, self.date_format))
        except ValueError as e:
            logger.error(f"Could not format creation date of {source_path}: {e}")
            return None

        target_dir = os.path.normpath(os.path.join(self.output_root, formatted))
        candidate = os.path.join(target_dir, os.path.basename(source_path))

        if not self._exists(candidate):
            return candidate

        if self.interactive and not self.dry_run:
            return self._ask_user(candidate, target_dir)

        return self.next_free_name(candidate)

    def claim(self, path: str) -> None:
        self._claimed.add(os.path.normpath(path))

    def next_free_name(self, candidate: str) -> str:
        """Lowest 'name-i.ext' (i >= 2) that does not exist next to candidate."""
        target_dir, file_name = os.path.split(candidate)
        stem, ext = os.path.splitext(file_name)
        i = 2
        while True:
            new_path = os.path.join(target_dir, f"{stem}-{i}{ext}")
            if not self._exists(new_path):
                return new_path
            i += 1

    def _exists(self, path: str) -> bool:
        return os.path.normpath(path) in self._claimed or os.path.lexists(path)

    def _ask_user(self, candidate: str, target_dir: str) -> Optional[str]:
        file_name = os.path.basename(candidate)
        question = (
            f"File {file_name} already exists in {target_dir}, what do you want to do?\n"
            "1. Skip file\n2. Rename file\n3. Replace file\n> "
        )

        choice = None
        while choice is None:
            choice = COLLISION_CHOICES.get(self.prompt(question).strip().lower())

        if choice == "skip":
            logger.debug(f"User chose to skip {file_name}")
            return None
        if choice == "replace":
            return candidate

        while True:
            new_name = self.prompt(f"New file name for {file_name}: ").strip()
            if not new_name:
                continue
            new_path = os.path.join(target_dir, new_name)
            if not self._exists(new_path):
                return new_path
