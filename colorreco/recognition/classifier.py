"""Per-block nearest-class recognition.

The frame is cut into a grid of ``block_size`` x ``block_size`` blocks, row
major from the top-left corner. Each block's colour distribution is compared
to every reference class and the block is painted with the colour of the
class whose score is lowest. The score of a class is, by default, the mean
distance to all of its samples.
"""

import logging
from dataclasses import dataclass
from typing import List, Literal, Sequence, Tuple

import numpy as np

from colorreco.errors import EmptyLibraryError, FinalizedDistributionError
from colorreco.histogram.distribution import ColorDistribution, color_distribution_from_region
from colorreco.library.palette import Color

logger = logging.getLogger(__name__)

Aggregate = Literal["mean", "min"]


@dataclass
class BlockClassification:
    """Result of classifying one frame."""

    raster: np.ndarray  # uint8 (H, W, 3), every block filled with its class colour
    labels: np.ndarray  # int (rows, cols), winning class index per block
    scores: np.ndarray  # float64 (rows, cols), winning class score per block
    block_size: int


def _stack_samples(samples: Sequence[ColorDistribution]) -> np.ndarray:
    """Stack finalized samples into an (n_samples, 512) array."""
    if not all(s.finalized for s in samples):
        raise FinalizedDistributionError("Reference samples must be finalized")
    return np.stack([s.flat for s in samples])


def _class_score(hist: np.ndarray, samples: np.ndarray, aggregate: Aggregate) -> float:
    """Aggregate chi-square distance from one histogram to a stack of samples."""
    total = samples + hist
    diff = samples - hist
    terms = np.divide(diff * diff, total, out=np.zeros_like(total), where=total > 0)
    distances = terms.sum(axis=1)
    if aggregate == "min":
        return float(distances.min())
    return float(distances.mean())


def _score_samples(
    cd: ColorDistribution,
    samples: Sequence[ColorDistribution],
    aggregate: Aggregate,
) -> float:
    if not samples:
        raise EmptyLibraryError("Cannot score against an empty sample list")
    if not cd.finalized:
        raise FinalizedDistributionError("Distance requires a finalized distribution")
    return _class_score(cd.flat, _stack_samples(samples), aggregate)


def mean_distance(cd: ColorDistribution, samples: Sequence[ColorDistribution]) -> float:
    """Arithmetic mean of the distances from ``cd`` to each sample.

    Same computation ``classify_blocks`` uses for the "mean" class score.
    """
    return _score_samples(cd, samples, "mean")


def min_distance(cd: ColorDistribution, samples: Sequence[ColorDistribution]) -> float:
    """Distance from ``cd`` to its nearest sample (the "min" class score)."""
    return _score_samples(cd, samples, "min")


def _sample_matrices(
    classes: Sequence[Sequence[ColorDistribution]],
) -> List[Tuple[int, np.ndarray]]:
    """Stack each non-empty class's samples into an (n_samples, 512) array."""
    matrices = []
    for index, samples in enumerate(classes):
        if not samples:
            logger.debug(f"Skipping class {index}: no samples")
            continue
        matrices.append((index, _stack_samples(samples)))
    return matrices


def classify_blocks(
    frame: np.ndarray,
    classes: Sequence[Sequence[ColorDistribution]],
    colors: Sequence[Color],
    block_size: int,
    aggregate: Aggregate = "mean",
) -> BlockClassification:
    """Assign every block of the frame to its closest reference class.

    Args:
        frame: Input image, uint8, shape (H, W, 3)
        classes: Finalized reference samples per class; empty classes are skipped
        colors: Display colour per class index
        block_size: Block edge in pixels; trailing partial blocks are used as-is
        aggregate: "mean" (default) or "min" distance over a class's samples

    Returns:
        BlockClassification with the painted raster, labels and scores

    Raises:
        ValueError: On a non-positive block size, unknown aggregate, or missing colours
        EmptyLibraryError: If no class has any sample
    """
    if block_size < 1:
        raise ValueError(f"block_size must be positive, got {block_size}")
    if aggregate not in ("mean", "min"):
        raise ValueError(f"Unknown aggregate: {aggregate}")
    if len(colors) < len(classes):
        raise ValueError(f"Got {len(colors)} colours for {len(classes)} classes")

    references = _sample_matrices(classes)
    if not references:
        raise EmptyLibraryError("Reference library has no class with samples")

    h, w = frame.shape[:2]
    rows = -(-h // block_size)
    cols = -(-w // block_size)

    raster = frame.copy()
    labels = np.zeros((rows, cols), dtype=np.int64)
    scores = np.zeros((rows, cols), dtype=np.float64)

    for r, y in enumerate(range(0, h, block_size)):
        for c, x in enumerate(range(0, w, block_size)):
            cd = color_distribution_from_region(frame, (x, y), (x + block_size, y + block_size))
            hist = cd.flat

            best_index, best_score = references[0][0], _class_score(hist, references[0][1], aggregate)
            for index, samples in references[1:]:
                score = _class_score(hist, samples, aggregate)
                if score < best_score:
                    best_index, best_score = index, score

            labels[r, c] = best_index
            scores[r, c] = best_score
            raster[y:y + block_size, x:x + block_size] = colors[best_index]

    logger.debug(
        f"Classified {rows}x{cols} blocks of {block_size}px against "
        f"{len(references)} classes ({aggregate})"
    )

    return BlockClassification(raster=raster, labels=labels, scores=scores, block_size=block_size)
