"""Colour signatures for FlagMatch.

A signature is the colour histogram of one image: a mapping from a quantised
RGB colour to the number of pixels of that colour. Pixel positions are thrown
away, so two images with the same colours in a different arrangement have the
same signature.

Quantisation
------------
Channel samples are treated as 16-bit values and reduced to 8 bits by dropping
the low byte (``sample >> 8``). 8-bit sources are widened first
(``v * 0x101``), so an 8-bit channel value maps to itself and an 8-bit and a
16-bit rendition of the same picture produce the same signature.

Alpha is ignored.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Iterator, Mapping, NamedTuple, Tuple, Union

from PIL import Image


# Pillow modes whose samples are wider than 8 bits (single channel).
SIXTEEN_BIT_MODES = ("I;16", "I;16B", "I;16L", "I;16N", "I")

_MAX_SAMPLE = 0xFFFF


def widen_sample(value: int) -> int:
    """Scale an 8-bit channel value to the 16-bit range (0xAB -> 0xABAB)."""
    return value * 0x101


def quantize_sample(sample: int) -> int:
    """Reduce a 16-bit channel sample to 8 bits by discarding the low byte.

    Samples outside ``[0, 0xFFFF]`` (possible with 32-bit ``I`` images) are
    clamped first.
    """
    if sample < 0:
        sample = 0
    elif sample > _MAX_SAMPLE:
        sample = _MAX_SAMPLE
    return int(sample) >> 8


class ColorKey(NamedTuple):
    """A quantised colour with 8-bit red, green and blue components."""

    r: int
    g: int
    b: int

    @classmethod
    def from_rgb16(cls, r: int, g: int, b: int) -> "ColorKey":
        return cls(quantize_sample(r), quantize_sample(g), quantize_sample(b))

    @classmethod
    def from_rgb8(cls, r: int, g: int, b: int) -> "ColorKey":
        return cls.from_rgb16(widen_sample(r), widen_sample(g), widen_sample(b))

    def __str__(self) -> str:
        return f"{{R:{self.r} G:{self.g} B:{self.b}}}"


class Signature(Mapping[ColorKey, int]):
    """Read-only colour histogram of a single image.

    Behaves like a ``dict`` for lookups and iteration but cannot be changed
    after construction. Keys with a zero count are not stored.
    """

    __slots__ = ("_counts", "_total")

    def __init__(self, counts: Union[Mapping[ColorKey, int], Iterable[Tuple[ColorKey, int]]] = ()) -> None:
        items = counts.items() if isinstance(counts, Mapping) else counts
        stored = {}
        for key, count in items:
            if count < 0:
                raise ValueError(f"negative count for {key}: {count}")
            if count:
                stored[ColorKey(*key)] = int(count)
        self._counts = stored
        self._total = sum(stored.values())

    @property
    def total(self) -> int:
        """Number of pixels the signature was built from."""
        return self._total

    def __getitem__(self, key: ColorKey) -> int:
        return self._counts[key]

    def __iter__(self) -> Iterator[ColorKey]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"Signature(colors={len(self._counts)}, total={self._total})"


def build_signature(img: Image.Image) -> Signature:
    """Count the quantised colours of every pixel in *img*.

    Parameters
    ----------
    img:
        A decoded Pillow image. 16-bit greyscale images are quantised per
        sample; every other mode is read as 8-bit RGB.

    Returns
    -------
    Signature
        A fresh signature whose ``total`` equals ``width * height``.
    """

    width, height = img.size
    if width == 0 or height == 0:
        return Signature()

    if img.mode in SIXTEEN_BIT_MODES:
        px = img.load()
        counts: Counter = Counter()
        for x in range(width):
            for y in range(height):
                v = quantize_sample(px[x, y])
                counts[(v, v, v)] += 1
        return Signature(counts)

    rgb = img if img.mode == "RGB" else img.convert("RGB")
    # getcolors() returns None only when there are more colours than
    # maxcolors, which cannot happen with one slot per pixel.
    colors = rgb.getcolors(maxcolors=width * height)
    return Signature((ColorKey.from_rgb8(*color), count) for count, color in colors)
