"""Quantized 3-channel colour histograms and their chi-square distance.

Each channel of an 8-bit sample is quantized to 8 levels by integer division
by 32, giving an 8x8x8 histogram (512 bins). The flat bin of a quantized
triple (c0, c1, c2) is ``c0 * 64 + c1 * 8 + c2``; distances are computed over
that flat layout, so the formula must not change.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from colorreco.errors import DegenerateDistributionError, FinalizedDistributionError

logger = logging.getLogger(__name__)

LEVELS = 8
QUANT_STEP = 256 // LEVELS  # 32
NUM_BINS = LEVELS ** 3  # 512

Point = Tuple[int, int]  # (x, y)


def bin_index(c0: int, c1: int, c2: int) -> int:
    """Flat bin index of a raw 8-bit sample (c0, c1, c2).

    Args:
        c0, c1, c2: Channel values in [0, 255], in frame channel order

    Returns:
        ``(c0 // 32) * 64 + (c1 // 32) * 8 + (c2 // 32)``, in [0, 511]
    """
    return (c0 // QUANT_STEP) * LEVELS * LEVELS + (c1 // QUANT_STEP) * LEVELS + (c2 // QUANT_STEP)


def pixel_bin_indices(pixels: np.ndarray) -> np.ndarray:
    """Vectorised ``bin_index`` over an array of shape (..., 3)."""
    q = pixels.reshape(-1, 3).astype(np.intp) // QUANT_STEP
    return q[:, 0] * LEVELS * LEVELS + q[:, 1] * LEVELS + q[:, 2]


def chi_square_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Sum over bins with ``a + b > 0`` of ``(a - b)^2 / (a + b)``.

    Bins where both histograms are empty contribute nothing. The result is
    symmetric in its arguments and zero only for identical histograms.
    """
    total = a + b
    diff = a - b
    occupied = total > 0
    return float(np.sum(diff[occupied] * diff[occupied] / total[occupied]))


class ColorDistribution:
    """Colour histogram of a set of samples.

    Lifecycle: empty -> ``add`` any number of times -> ``finished`` once ->
    ``distance`` queries only. After ``finished`` the bins hold proportions
    summing to 1.0 and ``count`` keeps the number of samples used.
    """

    def __init__(self) -> None:
        self.data = np.zeros((LEVELS, LEVELS, LEVELS), dtype=np.float64)
        self.count = 0
        self.finalized = False

    def reset(self) -> None:
        """Zero all bins and the sample count, returning to the empty state."""
        self.data.fill(0.0)
        self.count = 0
        self.finalized = False

    @property
    def flat(self) -> np.ndarray:
        """The 512 bins in flat ``i*64 + j*8 + k`` order (a view)."""
        return self.data.reshape(NUM_BINS)

    def at(self, i: int, j: int, k: int) -> float:
        return float(self.data[i, j, k])

    def add(self, sample: Sequence[int]) -> None:
        """Count one 3-channel sample with channel values in [0, 255]."""
        if self.finalized:
            raise FinalizedDistributionError("Cannot add samples to a finalized distribution")
        c0, c1, c2 = (int(c) for c in sample[:3])
        self.data[c0 // QUANT_STEP, c1 // QUANT_STEP, c2 // QUANT_STEP] += 1
        self.count += 1

    def add_pixels(self, pixels: np.ndarray) -> None:
        """Count every pixel of an array of shape (..., 3).

        Equivalent to calling ``add`` on each pixel.
        """
        if self.finalized:
            raise FinalizedDistributionError("Cannot add samples to a finalized distribution")
        if pixels.ndim < 1 or pixels.shape[-1] != 3:
            raise ValueError(f"Expected pixels of shape (..., 3), got {pixels.shape}")
        if pixels.size == 0:
            return
        indices = pixel_bin_indices(pixels)
        self.flat[:] += np.bincount(indices, minlength=NUM_BINS)
        self.count += int(indices.shape[0])

    def finished(self) -> None:
        """Normalize counts into proportions. Must be called exactly once."""
        if self.finalized:
            raise FinalizedDistributionError("Distribution is already finalized")
        if self.count == 0:
            raise DegenerateDistributionError("Cannot finalize a distribution with no samples")
        self.data /= self.count
        self.finalized = True

    def distance(self, other: "ColorDistribution") -> float:
        """Chi-square style dissimilarity to another finalized distribution."""
        if not (self.finalized and other.finalized):
            raise FinalizedDistributionError("Distance requires two finalized distributions")
        return chi_square_distance(self.flat, other.flat)

    def __repr__(self) -> str:
        state = "finalized" if self.finalized else "open"
        return f"ColorDistribution(count={self.count}, {state})"


def clamp_region(frame: np.ndarray, pt1: Point, pt2: Point) -> Tuple[Point, Point]:
    """Clamp the rectangle ``[pt1, pt2)`` to the frame bounds.

    Raises:
        ValueError: If the rectangle has a negative width or height
    """
    (x1, y1), (x2, y2) = pt1, pt2
    if x2 < x1 or y2 < y1:
        raise ValueError(f"Invalid sampling region {pt1} -> {pt2}: negative width or height")

    h, w = frame.shape[:2]
    x1, x2 = min(max(x1, 0), w), min(max(x2, 0), w)
    y1, y2 = min(max(y1, 0), h), min(max(y2, 0), h)
    return (x1, y1), (x2, y2)


def color_distribution_from_region(frame: np.ndarray, pt1: Point, pt2: Point) -> ColorDistribution:
    """Build a finalized distribution from the half-open rectangle ``[pt1, pt2)``.

    Args:
        frame: Image, uint8, shape (H, W, 3)
        pt1: Top-left corner (x, y), inclusive
        pt2: Bottom-right corner (x, y), exclusive

    Returns:
        Finalized ColorDistribution of the in-bounds pixels of the rectangle

    Raises:
        ValueError: If the frame is not 3-channel or the rectangle has a negative size
        DegenerateDistributionError: If no pixel of the rectangle lies in the frame
    """
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(f"Expected a 3-channel frame of shape (H, W, 3), got {frame.shape}")

    (x1, y1), (x2, y2) = clamp_region(frame, pt1, pt2)
    if (x1, y1, x2, y2) != (pt1[0], pt1[1], pt2[0], pt2[1]):
        logger.debug(f"Clamped region {pt1} -> {pt2} to {(x1, y1)} -> {(x2, y2)}")

    cd = ColorDistribution()
    cd.add_pixels(frame[y1:y2, x1:x2])
    cd.finished()
    return cd
