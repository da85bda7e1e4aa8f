"""Display and debug output helpers for BGR uint8 frames."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from colorreco.histogram.distribution import Point

logger = logging.getLogger(__name__)


def blend_with_frame(raster: np.ndarray, frame: np.ndarray, alpha: float = 0.5) -> np.ndarray:
    """Overlay a classified raster on a grey-scaled copy of the frame.

    Args:
        raster: Classified image, uint8 BGR, same shape as ``frame``
        frame: Original image, uint8 BGR
        alpha: Weight of the raster in [0, 1]

    Returns:
        ``alpha * raster + (1 - alpha) * gray(frame)`` as uint8 BGR
    """
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must be in [0, 1], got {alpha}")
    if raster.shape != frame.shape:
        raise ValueError(f"Raster shape {raster.shape} does not match frame shape {frame.shape}")

    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    gray_bgr = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
    return cv2.addWeighted(raster, alpha, gray_bgr, 1.0 - alpha, 0.0)


def draw_sampling_rect(
    frame: np.ndarray,
    pt1: Point,
    pt2: Point,
    color: Tuple[int, int, int] = (255, 255, 255),
    thickness: int = 1,
) -> np.ndarray:
    """Return a copy of the frame with the sampling rectangle outlined."""
    img_viz = frame.copy()
    cv2.rectangle(img_viz, pt1, pt2, color, thickness)
    return img_viz


def save_debug_image(
    image: np.ndarray,
    output_path: Union[str, Path],
    description: Optional[str] = None,
) -> None:
    """Write a BGR uint8 image, creating the parent directory if needed.

    Args:
        image: Image array, uint8 BGR or grayscale
        output_path: Destination; the format follows the file extension
        description: Optional description to log
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")

    if not cv2.imwrite(str(output_path), image):
        raise IOError(f"Could not write image: {output_path}")

    if description:
        logger.debug(f"Saved debug image: {output_path} - {description}")
    else:
        logger.debug(f"Saved debug image: {output_path}")


def load_frame(path: Union[str, Path]) -> np.ndarray:
    """Read an image file as a BGR uint8 frame."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    frame = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if frame is None:
        raise ValueError(f"Unsupported or corrupt image file: {path}")

    logger.debug(f"Loaded {path.name}: {frame.shape[1]}x{frame.shape[0]}")
    return frame
