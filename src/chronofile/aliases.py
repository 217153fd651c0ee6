from chronofile.core.models import OperationMode

MODE_ALIASES = {
    "copy": OperationMode.COPY,
    "move": OperationMode.MOVE,
    "link": OperationMode.LINK,
}

MODE_CHOICES = list(MODE_ALIASES.keys())

MODE_HELP_TEXT = (
    "How files reach the destination:\n"
    "  copy : Copy files, source stays untouched (default)\n"
    "  move : Move files out of the source tree\n"
    "  link : Hard link files (source and destination on one filesystem)\n"
)

DATE_FORMAT_HELP_TEXT = (
    "Destination folder layout built from the creation date.\n"
    "  Tokens : YYYY YY MMMM MMM MM M DD D dddd ddd HH mm ss\n"
    "  [text] is copied literally, ':' and spaces become '-'\n"
    "Default: YYYY/MM/DD\n"
    "Example: %(prog)s ~/card ~/photos -d 'YYYY/MM MMMM'\n"
)

EPILOG_TEXT = """
Examples:
  Copy photos from a memory card into ~/photos/YYYY/MM/DD
  %(prog)s /media/card ~/photos

  Preview what a move would do, without touching anything
  %(prog)s /media/card ~/photos --move --dry-run -v

  Move and drop files that are already in the library or repeated on the card
  %(prog)s /media/card ~/photos --move --delete-duplicates --delete-existing

  Read dates from RAW and video files with exiftool
  %(prog)s /media/card ~/photos --exiftool

  Save checksum snapshots, then reuse them on the next run
  %(prog)s /media/card ~/photos --save-snapshots --output-dir ~/.chronofile
  %(prog)s /media/card ~/photos --src-checksums ~/.chronofile/chronofile-src-checksums-<stamp>.json
"""
