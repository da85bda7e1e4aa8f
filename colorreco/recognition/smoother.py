"""Majority-vote (mode) filter over the block grid of a classified raster."""

import logging
from typing import List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

_OFFSETS = (-1, 0, 1)


def _vote(votes: List[Tuple[int, ...]]) -> Tuple[int, ...]:
    """Most frequent colour; ties go to the colour seen first."""
    seen: List[Tuple[int, ...]] = []
    counts: List[int] = []
    for color in votes:
        if color in seen:
            counts[seen.index(color)] += 1
        else:
            seen.append(color)
            counts.append(1)

    best = 0
    for i in range(1, len(counts)):
        if counts[i] > counts[best]:
            best = i
    return seen[best]


def majority_vote_smooth(raster: np.ndarray, block_size: int) -> np.ndarray:
    """Repaint each interior block with the most common colour of its 3x3 block neighbourhood.

    Votes are read from ``raster``, which is left untouched, and written to a
    copy. A block at (col, row) takes part only if the blocks on all sides of
    it exist, i.e. ``row >= block_size`` and ``row + block_size < height``
    (same for columns). Each vote is the pixel at
    ``(row + dy * block_size, col + dx * block_size)`` for dx, dy in -1, 0, 1,
    scanned column by column. Border blocks keep their colour.

    Votes are taken on the classifier's own block grid (block corners), not
    on a grid shifted by half a block, so each repainted rectangle is exactly
    one classifier block.

    Args:
        raster: Classified image, uint8, shape (H, W, 3)
        block_size: Block edge in pixels used to produce ``raster``

    Returns:
        Smoothed copy of ``raster``
    """
    if block_size < 1:
        raise ValueError(f"block_size must be positive, got {block_size}")

    h, w = raster.shape[:2]
    output = raster.copy()
    repainted = 0

    for row in range(block_size, h - block_size, block_size):
        for col in range(block_size, w - block_size, block_size):
            votes = [
                tuple(int(v) for v in raster[row + dy * block_size, col + dx * block_size])
                for dx in _OFFSETS
                for dy in _OFFSETS
            ]
            winner = _vote(votes)
            if winner != votes[4]:
                repainted += 1
            output[row:row + block_size, col:col + block_size] = winner

    logger.debug(f"Majority vote repainted {repainted} blocks")
    return output
