"""Reference classes collected from user samples."""

from colorreco.library.reference import (
    ReferenceLibrary,
    add_sample,
    threshold_from_percent,
)
from colorreco.library.palette import PALETTE, class_color, palette_for

__all__ = [
    "ReferenceLibrary",
    "add_sample",
    "threshold_from_percent",
    "PALETTE",
    "class_color",
    "palette_for",
]
