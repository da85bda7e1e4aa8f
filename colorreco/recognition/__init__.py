"""Block classification and majority-vote smoothing."""

from colorreco.recognition.classifier import (
    BlockClassification,
    classify_blocks,
    mean_distance,
    min_distance,
)
from colorreco.recognition.smoother import majority_vote_smooth

__all__ = [
    "BlockClassification",
    "classify_blocks",
    "mean_distance",
    "min_distance",
    "majority_vote_smooth",
]
