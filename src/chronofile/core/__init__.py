"""
Core organizing engine: walker, metadata resolver, path resolver, executor and orchestrator.

This package contains the foundation of chronofile:
- TreeWalkerImpl: concurrent directory traversal with bounded parallelism
- HasherImpl + XXHashAlgorithmImpl: xxh3-128 content checksums
- MetadataResolverImpl: checksum + creation date with a timed EXIF read
- PathResolverImpl: date-based destination paths and collision handling
- OperationExecutor: sequential decision and application of each file's action
- Organizer: run orchestrator
- Models: FileOperation, DuplicateIndex, counters and configuration objects

All components are pure Python with no UI dependencies, suitable for CLI and server usage.
"""

from .hasher import HasherImpl, XXHashAlgorithmImpl
from .date_sources import PillowExifDateSource, ExifToolDateSource
from .metadata import MetadataResolverImpl
from .walker import TreeWalkerImpl
from .path_resolver import PathResolverImpl
from .executor import OperationExecutor
from .organizer import Organizer
from .models import (
    Action, OperationMode, Outcome, FileOperation, DuplicateIndex,
    CounterSnapshot, RunCounters, OrganizerParams, RunReport)

__all__ = [
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "PillowExifDateSource",
    "ExifToolDateSource",
    "MetadataResolverImpl",
    "TreeWalkerImpl",
    "PathResolverImpl",
    "OperationExecutor",
    "Organizer",
    "Action",
    "OperationMode",
    "Outcome",
    "FileOperation",
    "DuplicateIndex",
    "CounterSnapshot",
    "RunCounters",
    "OrganizerParams",
    "RunReport",
]
