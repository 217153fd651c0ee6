"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements full-content file hashing using pluggable hash algorithms.

The checksum is the equality test for file bytes: identical content gives an
identical checksum regardless of file name, location or modification time.
"""

import logging
from typing import Optional

import xxhash

from chronofile.core.interfaces import HashAlgorithm, HashState

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 1024 * 1024  # 1 MiB


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    """xxHash3 with a 128-bit digest (32 hex characters)."""
    @staticmethod
    def new() -> HashState:
        return xxhash.xxh3_128()


class HasherImpl:
    """
    Computes the checksum of a whole file (never sampled), streaming it in blocks.
    """

    def __init__(self, algorithm: HashAlgorithm = None, block_size: int = DEFAULT_BLOCK_SIZE):
        self.algorithm = algorithm or XXHashAlgorithmImpl()
        self.block_size = block_size

    def compute_checksum(self, path: str) -> Optional[str]:
        """
        Returns the hex digest of the file content, or None if the file can't be read.
        """
        state = self.algorithm.new()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.block_size):
                    state.update(chunk)
        except OSError as e:
            logger.warning(f"Error reading full content of {path}: {e}")
            return None
        return state.hexdigest()
