"""Matching logic for FlagMatch.

Given:
- a decoded mystery image, and
- the flag (reference) images, in listing order

We find the flag with the highest histogram-intersection score among the flags
that have exactly the same width and height as the mystery image.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from .imaging import DecodedImage, DecodeResult, try_decode
from .scoring import intersection_score

logger = logging.getLogger(__name__)

# Called with (candidate name, error message) for every flag that fails to decode.
ErrorCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class MatchResult:
    """Result of matching one mystery image against the flag set."""

    mystery_name: str
    best_name: Optional[str]  # None if no flag was acceptable
    best_score: int

    @property
    def matched(self) -> bool:
        return self.best_name is not None

    @property
    def status(self) -> str:
        return "matched" if self.matched else "no_match"


def iter_candidates(
    paths: Iterable[Path], names: Optional[Iterable[str]] = None
) -> Iterator[DecodeResult]:
    """Decode flag files one at a time, as the matcher asks for them.

    Flags are named by file name unless *names* (parallel to *paths*) is given.
    """
    if names is None:
        for p in paths:
            yield try_decode(p)
        return
    for p, name in zip(paths, names):
        yield try_decode(p, name)


def find_best_match(
    mystery: DecodedImage,
    candidates: Iterable[DecodeResult],
    on_error: Optional[ErrorCallback] = None,
) -> MatchResult:
    """Find the flag that best matches a mystery image.

    Parameters
    ----------
    mystery:
        The decoded mystery image.
    candidates:
        Decode results for the flags, in listing order. Failed decodes are
        reported and skipped.
    on_error:
        Optional callback receiving ``(name, error)`` for every failed decode.

    Returns
    -------
    MatchResult
        The best flag and its score. Only a strictly higher score replaces the
        current best, so the earliest flag wins a tie and a score of 0 never
        counts as a match.

    Raises
    ------
    DimensionMismatch
        If a same-sized flag somehow covers a different number of pixels.
    """

    target_size = mystery.size
    target_sig = mystery.signature

    best_score = 0
    best_name: Optional[str] = None

    for cand in candidates:
        if not cand.ok:
            logger.warning("an error occurred decoding %s: %s skipping...", cand.name, cand.error)
            if on_error is not None:
                on_error(cand.name, cand.error or "")
            continue

        image = cand.image
        if image.size != target_size:
            logger.debug(
                "skipping %s: %dx%d does not match %dx%d",
                cand.name, image.width, image.height, *target_size,
            )
            continue

        score = intersection_score(target_sig, image.signature)
        logger.debug("%s vs %s: score %d", mystery.name, cand.name, score)
        if score > best_score:
            best_score = score
            best_name = cand.name

    return MatchResult(mystery_name=mystery.name, best_name=best_name, best_score=best_score)
