"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the organizing engine.
These protocols use Python's `typing.Protocol` for structural typing, so tests
and callers can plug in their own implementations (e.g. a fake date source).

Key Components:
---------------
- HashAlgorithm: Incremental hash function producing a hex digest.
- DateSource: External metadata source returning an embedded capture timestamp.
- MetadataResolver: Produces (checksum, creation date) for a file.
- PathResolver: Computes the destination path of a file and resolves collisions.
- Prompt / Confirm: Interactive questions answered by the UI layer.
"""

from typing import Protocol, Optional, Tuple, Callable


# ===== Interfaces =====

class HashState(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for incremental hash algorithms.

    Allows plugging in different hashing functions (xxHash, BLAKE2, MD5)
    without affecting the duplicate detection logic.
    """

    @staticmethod
    def new() -> HashState:
        """Returns a fresh incremental hash state."""
        ...


class DateSource(Protocol):
    """
    External metadata source.

    read() returns an ISO-8601 timestamp embedded in the file (e.g. EXIF
    CreateDate) or None. It may raise; callers treat failures as "no timestamp".
    """
    def read(self, path: str) -> Optional[str]: ...


class MetadataResolver(Protocol):
    def resolve(self, path: str) -> Tuple[Optional[str], Optional[str]]:
        """Returns (checksum, creation_date) for the file."""
        ...

    def checksum(self, path: str) -> Optional[str]:
        """Returns the content checksum of the file."""
        ...


class PathResolver(Protocol):
    def resolve(self, source_path: str, creation_date: str) -> Optional[str]:
        """
        Compute the destination path for a file.

        Returns:
            The destination path, or None when the file must not be placed this run.
        """
        ...

    def claim(self, path: str) -> None:
        """Mark a destination path as occupied for the rest of the run."""
        ...


# Answers a free-text question (blocking until answered).
Prompt = Callable[[str], str]

# Answers a yes/no question.
Confirm = Callable[[str], bool]
