"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/date_sources.py
Metadata sources that extract an embedded capture timestamp from a file.

Both sources return an ISO-8601 string or None and may raise on unreadable or
corrupt files; the metadata resolver turns any failure into a filesystem-date
fallback.
"""

import logging
import re
import shutil
import subprocess
from datetime import datetime
from typing import Optional, Sequence

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
EXIF_IFD_POINTER = 0x8769

# Tag ids in order of preference
TAG_DATETIME_DIGITIZED = 36868  # "CreateDate" in exiftool naming
TAG_DATETIME_ORIGINAL = 36867
TAG_DATETIME = 306

_EXIF_DATE_PATTERN = re.compile(r"(\d{4}):(\d{2}):(\d{2})[ T](\d{2}):(\d{2}):(\d{2})")


def parse_exif_date(value) -> Optional[str]:
    """
    Convert an EXIF date value ("YYYY:MM:DD HH:MM:SS") to ISO-8601.
    Returns None for empty, zeroed or malformed values.
    """
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    match = _EXIF_DATE_PATTERN.search(value.strip("\x00 "))
    if not match:
        return None
    try:
        return datetime.strptime(
            "{}:{}:{} {}:{}:{}".format(*match.groups()), EXIF_DATE_FORMAT
        ).isoformat()
    except ValueError:
        # e.g. "0000:00:00 00:00:00" written by some cameras
        return None


class PillowExifDateSource:
    """
    Reads the capture date of images through Pillow's EXIF support.
    Non-image files yield None.
    """

    def read(self, path: str) -> Optional[str]:
        try:
            with Image.open(path) as img:
                exif = img.getexif()
        except UnidentifiedImageError:
            return None

        if not exif:
            return None

        sub_ifd = exif.get_ifd(EXIF_IFD_POINTER)
        candidates = (
            sub_ifd.get(TAG_DATETIME_DIGITIZED),
            sub_ifd.get(TAG_DATETIME_ORIGINAL),
            exif.get(TAG_DATETIME),
        )
        for value in candidates:
            parsed = parse_exif_date(value)
            if parsed:
                return parsed
        return None


class ExifToolDateSource:
    """
    Reads CreateDate by calling the `exiftool` binary.
    Covers formats Pillow does not understand (RAW, video containers).
    """

    def __init__(self, executable: str = "exiftool", tags: Sequence[str] = ("-CreateDate", "-DateTimeOriginal"),
                 timeout: float = 5.0):
        self.executable = executable
        self.tags = list(tags)
        self.timeout = timeout

    @staticmethod
    def is_available(executable: str = "exiftool") -> bool:
        return shutil.which(executable) is not None

    def read(self, path: str) -> Optional[str]:
        result = subprocess.run(
            [self.executable, "-s3", *self.tags, path],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=self.timeout,
        )
        if result.returncode != 0:
            logger.debug(f"exiftool failed for {path}: {result.stderr.strip()}")
            return None
        for line in result.stdout.splitlines():
            parsed = parse_exif_date(line)
            if parsed:
                return parsed
        return None
