"""Reference classes taught by the user, one list of samples per class."""

import logging
from typing import Iterator, List, Sequence, Tuple

from colorreco.histogram.distribution import ColorDistribution

logger = logging.getLogger(__name__)

ClassSamples = List[ColorDistribution]
LibrarySnapshot = Tuple[Tuple[ColorDistribution, ...], ...]


def threshold_from_percent(percent: int) -> float:
    """Convert the 0-100 threshold control value into a [0, 1] fraction."""
    return percent / 100.0


def add_sample(cd: ColorDistribution, samples: ClassSamples, threshold: float) -> int:
    """Add a finalized sample to the in-progress class, dropping near duplicates.

    Every existing sample whose distance to ``cd`` is strictly below
    ``threshold`` is removed before ``cd`` is appended.

    Args:
        cd: Finalized distribution to add
        samples: Samples of the class being built, modified in place
        threshold: Dissimilarity threshold in [0, 1]

    Returns:
        Number of existing samples removed
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be in [0, 1], got {threshold}")

    kept = [s for s in samples if s.distance(cd) >= threshold]
    removed = len(samples) - len(kept)
    kept.append(cd)
    samples[:] = kept

    logger.debug(
        f"Added sample (removed {removed} near duplicates, class now has {len(samples)} samples)"
    )
    return removed


class ReferenceLibrary:
    """Ordered collection of classes; a class is identified by its index."""

    def __init__(self) -> None:
        self._classes: List[ClassSamples] = []

    def __len__(self) -> int:
        return len(self._classes)

    def __getitem__(self, index: int) -> Sequence[ColorDistribution]:
        return tuple(self._classes[index])

    def close_class(self, samples: ClassSamples) -> ClassSamples:
        """Store ``samples`` as a new class and return an empty list for the next one.

        An empty class is accepted; it is skipped at classification time.
        """
        self._classes.append(list(samples))
        index = len(self._classes) - 1
        if samples:
            logger.info(f"Closed class {index} with {len(samples)} samples")
        else:
            logger.warning(f"Closed class {index} with no samples; it will never be matched")
        return []

    def non_empty_classes(self) -> Iterator[Tuple[int, ClassSamples]]:
        for index, samples in enumerate(self._classes):
            if samples:
                yield index, samples

    def has_samples(self) -> bool:
        return any(self._classes)

    def snapshot(self) -> LibrarySnapshot:
        """Immutable copy of the current classes for one classification pass."""
        return tuple(tuple(samples) for samples in self._classes)
