"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sidecars.py
Keeps edit sidecars (RawTherapee .pp3 / .out.pp3, GIMP .xcf) next to their image.
A sidecar adopts the creation date of its image so both land in the same folder.
"""

import logging
import os
from typing import Dict, List, Optional

from chronofile.core.models import FileOperation

logger = logging.getLogger(__name__)

# Longest suffix first: 'x.out.pp3' must not be read as 'x.out' + '.pp3'
SIDECAR_SUFFIXES = (".out.pp3", ".pp3", ".xcf")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def sidecar_base(name: str) -> Optional[str]:
    """Name with the sidecar suffix stripped, or None if name is not a sidecar."""
    lower = name.lower()
    for suffix in SIDECAR_SUFFIXES:
        if lower.endswith(suffix) and len(name) > len(suffix):
            return name[:-len(suffix)]
    return None


def _find_image(base: str, names: Dict[str, FileOperation]) -> Optional[FileOperation]:
    # 'IMG_1.jpg.pp3' -> 'IMG_1.jpg'
    if os.path.splitext(base)[1].lower() in IMAGE_EXTENSIONS and base.lower() in names:
        return names[base.lower()]
    # 'IMG_1.pp3' -> 'IMG_1.jpg' / 'IMG_1.JPEG' / ...
    for ext in IMAGE_EXTENSIONS:
        match = names.get((base + ext).lower())
        if match is not None:
            return match
    return None


def align_sidecars(operations: List[FileOperation]) -> int:
    """
    Give each sidecar the creation date of the image it belongs to.
    Returns the number of sidecars aligned.
    """
    by_folder: Dict[str, Dict[str, FileOperation]] = {}
    for op in operations:
        by_folder.setdefault(op.folder_path, {})[op.name.lower()] = op

    aligned = 0
    for op in operations:
        base = sidecar_base(op.name)
        if base is None:
            continue
        image = _find_image(base, by_folder[op.folder_path])
        if image is None or image is op or not image.creation_date:
            continue
        if op.creation_date != image.creation_date:
            logger.debug(f"Sidecar {op.name} follows {image.name} ({image.creation_date})")
            op.creation_date = image.creation_date
        aligned += 1
    return aligned
