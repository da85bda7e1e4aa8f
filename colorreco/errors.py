"""Error types raised by the recognition core."""


class ColorRecoError(Exception):
    """Base class for recoverable recognition errors."""


class DegenerateDistributionError(ColorRecoError, ValueError):
    """A distribution was finalized without any samples."""


class FinalizedDistributionError(ColorRecoError, RuntimeError):
    """A distribution was used in the wrong lifecycle state."""


class EmptyLibraryError(ColorRecoError, ValueError):
    """No usable reference samples are available for classification."""
