"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

commands.py
Unified command orchestrator for organizing runs.
Builds the production component set from OrganizerParams and runs it.
"""
import logging
from typing import Callable, Optional

from chronofile.core.date_sources import ExifToolDateSource, PillowExifDateSource
from chronofile.core.interfaces import Confirm, DateSource, Prompt
from chronofile.core.metadata import MetadataResolverImpl
from chronofile.core.models import CounterSnapshot, OrganizerParams, RunCounters, RunReport
from chronofile.core.organizer import Organizer
from chronofile.core.path_resolver import PathResolverImpl
from chronofile.services.action_handler import FileActionHandler
from chronofile.services.snapshot_service import SnapshotService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, Optional[int]], None]


def build_date_source(params: OrganizerParams) -> DateSource:
    """exiftool when requested and installed, Pillow otherwise."""
    if params.use_exiftool:
        if ExifToolDateSource.is_available():
            return ExifToolDateSource(timeout=params.metadata_timeout)
        logger.warning("exiftool not found in PATH, falling back to Pillow")
    return PillowExifDateSource()


def stage_progress(stage: str, snapshot: CounterSnapshot):
    """(current, total) shown for a stage."""
    if stage == "destination":
        return snapshot.dest_files_found, None
    if stage == "source":
        return snapshot.files_hashed, snapshot.files_found
    done = snapshot.operations_done + snapshot.operations_error_count
    return done, snapshot.files_found


class OrganizeCommand:
    """
    Orchestrates one organizing run:
    1. Build metadata resolver, path resolver and action handler from params
    2. Forward counter updates to the progress callback
    3. Run the organizer and return its report

    Usage:
        params = OrganizerParams(source_dir="~/card", destination_dir="~/photos")
        report = OrganizeCommand().execute(params, progress_callback=cli_progress_printer)
    """

    def __init__(self):
        self.organizer: Optional[Organizer] = None

    def execute(
            self,
            params: OrganizerParams,
            progress_callback: Optional[ProgressCallback] = None,
            prompt: Optional[Prompt] = None,
            confirm: Optional[Confirm] = None,
            date_source: Optional[DateSource] = None,
    ) -> RunReport:
        """
        Execute an organizing run with given parameters.

        Args:
            params: Validated organizer parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            prompt: Answers collision questions in interactive mode
            confirm: Answers yes/no questions (e.g. unusable destination snapshot)
            date_source: Embedded timestamp reader; defaults to build_date_source(params)

        Raises:
            ValueError: If a snapshot is invalid and the run can't continue
            OSError: If a directory in either tree can't be read
        """
        counters = RunCounters()
        if progress_callback:
            counters.add_listener(
                lambda stage, snapshot: progress_callback(stage, *stage_progress(stage, snapshot))
            )

        resolver = MetadataResolverImpl(
            date_source=date_source or build_date_source(params),
            use_filesystem_date=params.use_filesystem_date,
            timeout=params.metadata_timeout,
            workers=params.workers,
        )
        path_resolver = PathResolverImpl(
            params.destination_dir,
            date_format=params.date_format,
            interactive=params.interactive,
            dry_run=params.dry_run,
            prompt=prompt,
        )
        action_handler = FileActionHandler(dry_run=params.dry_run, use_trash=params.use_trash)

        with resolver:
            self.organizer = Organizer(
                params,
                resolver=resolver,
                path_resolver=path_resolver,
                action_handler=action_handler,
                counters=counters,
                snapshots=SnapshotService(params.output_dir),
                confirm=confirm,
            )
            return self.organizer.run()

    def get_organizer(self) -> Organizer:
        """Get the organizer of the last run (for inspecting its indexes)."""
        if not self.organizer:
            raise RuntimeError("Command not executed yet")
        return self.organizer
