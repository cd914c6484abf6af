"""FlagMatch package.

This package provides a small CLI that identifies unknown images by finding
the same-sized reference image (a "flag") with the most similar colour
histogram, scored by histogram intersection.
"""

__all__ = ["cli", "imaging", "matching", "reporting", "scoring", "signature"]
__version__ = "0.1.0"
