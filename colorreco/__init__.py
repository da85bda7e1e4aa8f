"""Block-wise colour-histogram region recognition for live video frames."""

__version__ = "0.1.0"
