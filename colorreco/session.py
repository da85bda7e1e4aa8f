"""Recognition session: training commands and per-frame recognition."""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from colorreco.errors import ColorRecoError
from colorreco.histogram.distribution import (
    ColorDistribution,
    Point,
    color_distribution_from_region,
)
from colorreco.library.palette import Color, palette_for
from colorreco.library.reference import (
    ReferenceLibrary,
    add_sample,
    threshold_from_percent,
)
from colorreco.recognition.classifier import Aggregate, classify_blocks
from colorreco.recognition.smoother import majority_vote_smooth
from colorreco.utils.display import blend_with_frame, draw_sampling_rect

logger = logging.getLogger(__name__)


def _clamp_percent(percent: int) -> int:
    return min(max(int(percent), 0), 100)


@dataclass
class SessionConfig:
    """All tunable parameters in one place."""

    # Recognition
    block_size: int = 8
    aggregate: Aggregate = "mean"
    smooth: bool = True

    # Training
    threshold_percent: int = 5  # dedup threshold, 0-100

    # Frame geometry
    frame_width: int = 640
    frame_height: int = 480
    roi_size: int = 50  # side of the on-screen guide square

    # Display
    blend_alpha: float = 0.5

    # Capture
    camera_index: int = 0
    frame_delay_ms: int = 50  # ~20 frames/s

    def __post_init__(self) -> None:
        clamped = _clamp_percent(self.threshold_percent)
        if clamped != self.threshold_percent:
            logger.warning(f"threshold_percent {self.threshold_percent} out of range, using {clamped}")
        self.threshold_percent = clamped

    @property
    def threshold(self) -> float:
        return threshold_from_percent(self.threshold_percent)


class RecognitionSession:
    """State of one interactive session.

    Holds the class being taught, the library of closed classes and the
    display modes. Training commands run between frames; ``recognize``
    works on a snapshot of the library so a pass always sees one consistent
    set of classes.
    """

    def __init__(self, config: Optional[SessionConfig] = None) -> None:
        self.config = config or SessionConfig()
        self.library = ReferenceLibrary()
        self.current_samples: List[ColorDistribution] = []
        self.colors: List[Color] = []
        self.recognizing = False
        self.frozen = False
        self.last_recognition_time: Optional[float] = None

    # --- Regions ---

    def _frame_halves(self, frame: np.ndarray) -> Tuple[Tuple[Point, Point], Tuple[Point, Point]]:
        h, w = frame.shape[:2]
        left = ((0, 0), (w // 2, h))
        right = ((w // 2, 0), (w, h))
        return left, right

    def guide_rect(self, frame: np.ndarray) -> Tuple[Point, Point]:
        """Centred square drawn on screen while not recognizing."""
        h, w = frame.shape[:2]
        half = self.config.roi_size // 2
        return (w // 2 - half, h // 2 - half), (w // 2 + half, h // 2 + half)

    def sample_region(self, frame: np.ndarray) -> Tuple[Point, Point]:
        """Region captured by ``capture_sample``: the left half of the frame."""
        left, _ = self._frame_halves(frame)
        return left

    # --- Commands ---

    def set_threshold_percent(self, percent: int) -> int:
        self.config.threshold_percent = _clamp_percent(percent)
        return self.config.threshold_percent

    def capture_sample(self, frame: np.ndarray) -> Optional[int]:
        """Add the sample region of ``frame`` to the class being taught.

        Returns:
            Number of near-duplicate samples replaced, or None if the capture was skipped
        """
        pt1, pt2 = self.sample_region(frame)
        try:
            cd = color_distribution_from_region(frame, pt1, pt2)
            removed = add_sample(cd, self.current_samples, self.config.threshold)
        except (ColorRecoError, ValueError) as e:
            logger.warning(f"Sample capture skipped: {e}")
            return None

        logger.info(
            f"Captured sample {len(self.current_samples)} for class {len(self.library)}"
            + (f" (replaced {removed})" if removed else "")
        )
        return removed

    def close_class(self) -> int:
        """Move the samples being taught into the library as a new class.

        Returns:
            Index of the new class
        """
        self.current_samples = self.library.close_class(self.current_samples)
        if self.recognizing:
            self.colors = palette_for(len(self.library))
        return len(self.library) - 1

    def toggle_recognition(self) -> bool:
        """Switch recognition mode, refreshing the class colours when turning it on."""
        if self.recognizing:
            self.recognizing = False
            logger.info("Recognition off")
            return False

        if not self.library.has_samples():
            logger.warning("Recognition not started: no class with samples in the library")
            return False

        self.colors = palette_for(len(self.library))
        self.recognizing = True
        logger.info(f"Recognition on ({len(self.library)} classes)")
        return True

    def toggle_freeze(self) -> bool:
        self.frozen = not self.frozen
        logger.info(f"Freeze {'on' if self.frozen else 'off'}")
        return self.frozen

    def compare_regions(self, frame: np.ndarray) -> Optional[float]:
        """Distance between the left and right halves of the frame."""
        (l1, l2), (r1, r2) = self._frame_halves(frame)
        try:
            left = color_distribution_from_region(frame, l1, l2)
            right = color_distribution_from_region(frame, r1, r2)
        except (ColorRecoError, ValueError) as e:
            logger.warning(f"Region comparison skipped: {e}")
            return None

        distance = left.distance(right)
        logger.info(f"Distance: {distance:.4f}")
        return distance

    # --- Per frame ---

    def recognize(self, frame: np.ndarray) -> np.ndarray:
        """Classify ``frame`` block by block and smooth the result.

        Raises:
            EmptyLibraryError: If the library holds no sample
        """
        start = time.time()
        classes = self.library.snapshot()
        colors = self.colors if len(self.colors) >= len(classes) else palette_for(len(classes))

        result = classify_blocks(
            frame,
            classes,
            colors,
            self.config.block_size,
            aggregate=self.config.aggregate,
        )
        raster = result.raster
        if self.config.smooth:
            raster = majority_vote_smooth(raster, self.config.block_size)

        self.last_recognition_time = time.time() - start
        logger.debug(f"Recognition time: {self.last_recognition_time:.3f}s")
        return raster

    def render(self, frame: np.ndarray) -> np.ndarray:
        """Image to display for ``frame`` in the current mode."""
        if self.recognizing:
            try:
                raster = self.recognize(frame)
            except ColorRecoError as e:
                logger.warning(f"Recognition skipped for this frame: {e}")
                return frame
            return blend_with_frame(raster, frame, self.config.blend_alpha)

        pt1, pt2 = self.guide_rect(frame)
        return draw_sampling_rect(frame, pt1, pt2)
