"""Colour histogram model and distance."""

from colorreco.histogram.distribution import (
    ColorDistribution,
    NUM_BINS,
    bin_index,
    chi_square_distance,
    clamp_region,
    color_distribution_from_region,
    pixel_bin_indices,
)

__all__ = [
    "ColorDistribution",
    "NUM_BINS",
    "bin_index",
    "chi_square_distance",
    "clamp_region",
    "color_distribution_from_region",
    "pixel_bin_indices",
]
