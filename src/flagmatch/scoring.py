"""Histogram-intersection scoring for FlagMatch.

The score of two signatures is the number of pixels they have "in common":
for every colour, the smaller of the two counts, summed over all colours.
Identical histograms score their full pixel count; histograms with no colour
in common score 0.
"""

from __future__ import annotations

from typing import Mapping

from .signature import ColorKey


class DimensionMismatch(ValueError):
    """Raised when two signatures cover a different number of pixels."""

    def __init__(self, total_a: int, total_b: int) -> None:
        super().__init__(f"pixel counts differ: {total_a} != {total_b}")
        self.total_a = total_a
        self.total_b = total_b


def intersection_score(sig_a: Mapping[ColorKey, int], sig_b: Mapping[ColorKey, int]) -> int:
    """Compute the histogram intersection of two signatures.

    Parameters
    ----------
    sig_a, sig_b:
        Colour signatures (any mapping from colour to count works).

    Returns
    -------
    int
        Sum over the colours of *sig_a* of ``min(count_a, count_b)``.

    Raises
    ------
    DimensionMismatch
        If the two signatures were built from a different number of pixels.
        Callers are expected to compare same-sized images only.
    """

    total_a = 0
    in_common = 0
    for color, count_a in sig_a.items():
        count_b = sig_b.get(color, 0)
        in_common += count_a if count_a < count_b else count_b
        total_a += count_a

    total_b = sum(sig_b.values())
    if total_a != total_b:
        raise DimensionMismatch(total_a, total_b)
    return in_common
