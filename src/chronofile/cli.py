#!/usr/bin/env python3
"""
chronofile CLI: sorts files into a date-based folder tree.
Runs the same engine as the library API with console-based interaction.
Nothing outside the source and destination trees is ever touched.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from pathlib import Path
from typing import Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import send2trash
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

try:
    import PIL
except ImportError:
    _MISSING_DEPS.append("Pillow")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    print("\nOr install the package with its dependencies:", file=sys.stderr)
    print("   pip install chronofile", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from chronofile.core.models import Action, OperationMode, OrganizerParams, RunReport, is_nested
from chronofile.commands import OrganizeCommand
from chronofile.core.date_sources import ExifToolDateSource
from chronofile.aliases import (
    MODE_ALIASES, MODE_CHOICES, MODE_HELP_TEXT, DATE_FORMAT_HELP_TEXT, EPILOG_TEXT
)

# Summary order on the console
SUMMARY_ACTIONS = [
    Action.COPIED, Action.MOVED, Action.LINKED,
    Action.SKIPPED_DUPLICATE, Action.DELETED_DUPLICATE,
    Action.SKIPPED_EXISTING, Action.DELETED_EXISTING,
    Action.SKIPPED, Action.ERROR,
]


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.assume_yes: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        sys.stdout.reconfigure(encoding='utf-8')
        sys.stderr.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="chronofile",
            description="chronofile: organize files into folders by creation date",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument("source", type=str, help="Source directory to organize")
        parser.add_argument("destination", type=str, help="Destination root of the date-based tree")

        parser.add_argument(
            "--date-format", "-d",
            default="YYYY/MM/DD",
            type=str,
            metavar='',
            help=DATE_FORMAT_HELP_TEXT
        )

        # Mode options
        mode_group = parser.add_mutually_exclusive_group()
        mode_group.add_argument(
            "--move",
            action="store_const", const="move", dest="mode",
            help="Move files instead of copying them"
        )
        mode_group.add_argument(
            "--link",
            action="store_const", const="link", dest="mode",
            help="Hard link files instead of copying them"
        )
        mode_group.add_argument(
            "--mode",
            choices=MODE_CHOICES,
            dest="mode",
            type=str,
            help=MODE_HELP_TEXT
        )
        parser.set_defaults(mode="copy")

        # Behaviour options
        parser.add_argument(
            "--dry-run", "-n",
            action="store_true",
            help="Decide everything but write nothing"
        )
        parser.add_argument(
            "--interactive", "-i",
            action="store_true",
            help="Ask what to do when a destination file name is taken"
        )
        parser.add_argument(
            "--delete-duplicates",
            action="store_true",
            help="With --move: delete source files whose content was already placed this run"
        )
        parser.add_argument(
            "--delete-existing",
            action="store_true",
            help="With --move: delete source files whose content already exists at the destination"
        )
        parser.add_argument(
            "--fs-date",
            action="store_true",
            dest="fs_date",
            help="Use the filesystem creation time instead of embedded (EXIF) dates"
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            help="Deleted files go to the system trash instead of being removed"
        )
        parser.add_argument(
            "--no-sidecars",
            action="store_true",
            dest="no_sidecars",
            help="Do not keep .pp3/.xcf sidecars in the folder of their image"
        )
        parser.add_argument(
            "--copy-only-tracking",
            action="store_true",
            dest="copy_only_tracking",
            help="Only copied files count as already placed for duplicate detection"
        )

        parser.add_argument(
            "--exiftool",
            action="store_true",
            help="Read embedded dates with the exiftool program instead of Pillow (falls back to Pillow if not installed)"
        )

        # Performance options
        parser.add_argument(
            "--workers", "-w",
            default=8,
            type=int,
            metavar='',
            help="Number of concurrent directory reads and file hashes. Default: 8"
        )
        parser.add_argument(
            "--timeout",
            default=5.0,
            type=float,
            metavar='',
            help="Seconds to wait for an embedded date before using the filesystem date. Default: 5"
        )

        # Snapshot options
        parser.add_argument(
            "--src-checksums",
            default=None,
            type=str,
            metavar='',
            dest="src_checksums",
            help="Source checksum snapshot from an earlier run"
        )
        parser.add_argument(
            "--dest-checksums",
            default=None,
            type=str,
            metavar='',
            dest="dest_checksums",
            help="Destination checksum snapshot from an earlier run"
        )
        parser.add_argument(
            "--save",
            action="store_true",
            help="Save the list of operations as JSON"
        )
        parser.add_argument(
            "--save-snapshots",
            action="store_true",
            dest="save_snapshots",
            help="Save source and destination checksum snapshots as JSON"
        )
        parser.add_argument(
            "--output-dir",
            default=None,
            type=str,
            metavar='',
            dest="output_dir",
            help="Directory for saved JSON files. Default: current directory"
        )

        # Output options
        parser.add_argument(
            "--yes", "-y",
            action="store_true",
            help="Answer yes to confirmation questions (for automation/scripts)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and every file operation"
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        source_path = Path(args.source).resolve()
        if not source_path.exists():
            self.error_exit(f"Directory not found: {args.source}")
        if not source_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.source}")

        destination_path = Path(args.destination).resolve()
        if destination_path.exists() and not destination_path.is_dir():
            self.error_exit(f"Destination is not a directory: {args.destination}")
        if destination_path == source_path:
            self.error_exit("Source and destination must be different directories")
        if is_nested(str(source_path), str(destination_path)) or is_nested(str(destination_path), str(source_path)):
            self.error_exit("Source and destination must not be inside each other")

        if args.mode not in MODE_ALIASES:
            self.error_exit(
                f"Invalid mode: '{args.mode}'.\n"
                f"Valid options: {', '.join(MODE_CHOICES)}"
            )

        if (args.delete_duplicates or args.delete_existing) and args.mode != "move":
            self.warning("--delete-duplicates/--delete-existing only take effect with --move")

        # Prevent interactive questions in non-TTY environments
        if args.interactive and not args.dry_run and not sys.stdin.isatty():
            self.error_exit(
                "Cannot ask collision questions in non-interactive session.\n"
                "Run without --interactive to rename colliding files automatically."
            )

        for snapshot in (args.src_checksums, args.dest_checksums):
            if snapshot and not Path(snapshot).is_file():
                self.error_exit(f"Snapshot file not found: {snapshot}")

        if args.exiftool and not ExifToolDateSource.is_available():
            self.warning("exiftool not found in PATH, reading embedded dates with Pillow")

        if args.workers < 1:
            self.error_exit("Worker count must be at least 1")
        if args.timeout <= 0:
            self.error_exit("Timeout must be positive")

    def create_params(self, args: argparse.Namespace) -> OrganizerParams:
        """Create OrganizerParams from CLI arguments."""
        try:
            return OrganizerParams(
                source_dir=str(Path(args.source).resolve()),
                destination_dir=str(Path(args.destination).resolve()),
                date_format=args.date_format,
                mode=MODE_ALIASES.get(args.mode, OperationMode.COPY),
                dry_run=args.dry_run,
                interactive=args.interactive,
                delete_duplicates=args.delete_duplicates,
                delete_existing=args.delete_existing,
                use_filesystem_date=args.fs_date,
                use_exiftool=args.exiftool,
                workers=args.workers,
                src_checksums_path=args.src_checksums,
                dest_checksums_path=args.dest_checksums,
                save_snapshots=args.save_snapshots,
                save_operations=args.save,
                output_dir=str(Path(args.output_dir).resolve()) if args.output_dir else None,
                use_trash=args.trash,
                follow_sidecars=not args.no_sidecars,
                track_copy_only=args.copy_only_tracking,
                metadata_timeout=args.timeout,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
            sys.stderr.flush()
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
            sys.stderr.flush()

    @staticmethod
    def ask(question: str) -> str:
        """Free-text answer for collision questions."""
        return input(question)

    def confirm(self, message: str) -> bool:
        """Yes/no question; --yes answers yes, a non-interactive session answers no."""
        if self.assume_yes:
            return True
        if not sys.stdin.isatty():
            self.warning(f"{message} -> no (non-interactive session, use --yes)")
            return False
        response = input(f"{message} [y/N]: ")
        return response.strip().lower() in ("y", "yes")

    def run_organizer(self, params: OrganizerParams) -> RunReport:
        """Execute the organizing workflow."""
        command = OrganizeCommand()
        try:
            report = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                prompt=self.ask,
                confirm=self.confirm,
            )
        except (OSError, ValueError) as e:
            self.error_exit(f"Organizing failed: {e}")

        if self.verbose:
            sys.stderr.write("\n")
        return report

    def output_results(self, report: RunReport, params: OrganizerParams) -> None:
        """Print the per-file operations (verbose) and the run summary."""
        if self.quiet:
            return

        if self.verbose:
            print("\nOperations:")
            for op in report.operations:
                target = f" -> {op.new_path}" if op.new_path else ""
                reason = f" ({op.error})" if op.error else ""
                print(f"  {op.action.value:<18} {op.path}{target}{reason}")

        counters = report.counters
        header = "Dry run summary" if params.dry_run else "Summary"
        print(f"\n{header} ({params.mode.display_name}):")
        print(f"  Files found       : {counters.files_found} in {counters.folders_found + 1} folder(s)")
        print(f"  Duplicates found  : {counters.duplicates_found}")
        print(f"  Destination files : {counters.dest_files_found}")

        totals = report.summary()
        for action in SUMMARY_ACTIONS:
            if totals.get(action.value):
                print(f"  {action.value:<18}: {totals[action.value]}")

        for artifact in report.artifacts:
            print(f"Saved: {artifact}")

        if counters.operations_error_count:
            print(f"\n⚠️  {counters.operations_error_count} file(s) failed, run with -v for details.")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args()
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.assume_yes = args.yes
        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet:
            prefix = "[dry run] " if params.dry_run else ""
            print(f"{prefix}{params.mode.display_name}: {params.source_dir} -> {params.destination_dir}")

        report = self.run_organizer(params)
        self.output_results(report, params)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
