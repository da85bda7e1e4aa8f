"""Display and file helpers."""

from colorreco.utils.display import (
    blend_with_frame,
    draw_sampling_rect,
    load_frame,
    save_debug_image,
)

__all__ = [
    "blend_with_frame",
    "draw_sampling_rect",
    "load_frame",
    "save_debug_image",
]
