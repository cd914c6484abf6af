"""Image discovery and decoding for FlagMatch.

This module is the boundary between the file system and the matcher:
- listing image files in the flag and mystery folders
- decoding a file into a Pillow image with a uniform pixel layout
- wrapping the outcome of a decode in a value the matcher can inspect
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from PIL import Image

from .signature import SIXTEEN_BIT_MODES, Signature, build_signature

logger = logging.getLogger(__name__)


# Formats the flag sets usually come in. Add more if you need.
DEFAULT_EXTS = {
    ".png",
    ".gif",
    ".jpg",
    ".jpeg",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
}


class DecodeFailure(Exception):
    """A file could not be read as an image or converted to RGB."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"an error occurred decoding {Path(path).name}: {reason}")
        self.path = Path(path)
        self.reason = reason


def iter_images(
    root: Path,
    exts: Sequence[str] = tuple(DEFAULT_EXTS),
    recursive: bool = False,
) -> Iterator[Path]:
    """Yield image file paths under *root* in a stable, sorted order.

    Parameters
    ----------
    root:
        Folder to scan.
    exts:
        File extensions to include. Compared case-insensitively.
    recursive:
        Also descend into subfolders.

    Yields
    ------
    Path
        Paths to image files.
    """

    root = root.expanduser().resolve()
    exts_lc = {e.lower() for e in exts}

    found: List[Path] = []
    if recursive:
        for folder, _, files in os.walk(root):
            for name in files:
                if Path(name).suffix.lower() in exts_lc:
                    found.append(Path(folder) / name)
    else:
        with os.scandir(root) as it:
            for entry in it:
                if entry.is_file() and Path(entry.name).suffix.lower() in exts_lc:
                    found.append(Path(entry.path))

    yield from sorted(found)


def open_image(path: Path) -> Image.Image:
    """Fully decode *path* and return an in-memory image.

    16-bit greyscale images keep their mode so no precision is lost before
    quantisation; everything else is converted to RGB.

    Raises
    ------
    DecodeFailure
        If Pillow cannot open, decode or convert the file.
    """

    try:
        with Image.open(path) as img:
            img.load()
            if img.mode == "RGB" or img.mode in SIXTEEN_BIT_MODES:
                return img.copy()
            return img.convert("RGB")
    except Exception as exc:
        raise DecodeFailure(path, str(exc) or exc.__class__.__name__) from exc


class DecodedImage:
    """A decoded image whose signature is built on first use.

    Once the signature exists the pixel data is released, so a decoded image
    can be kept around (and pickled) cheaply.
    """

    def __init__(self, name: str, img: Image.Image) -> None:
        self.name = name
        self.width, self.height = img.size
        self._img: Optional[Image.Image] = img
        self._signature: Optional[Signature] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def signature(self) -> Signature:
        if self._signature is None:
            self._signature = build_signature(self._img)
            self._img = None
        return self._signature

    def __repr__(self) -> str:
        return f"DecodedImage(name={self.name!r}, size={self.width}x{self.height})"


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one file: either an image or an error message."""

    name: str
    image: Optional[DecodedImage] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image is not None


def decode_image(path: Path, name: Optional[str] = None) -> DecodedImage:
    """Decode *path* into a :class:`DecodedImage` named *name* (default: file name).

    Raises
    ------
    DecodeFailure
        If the file is not a readable image.
    """

    path = Path(path)
    return DecodedImage(name or path.name, open_image(path))


def try_decode(path: Path, name: Optional[str] = None) -> DecodeResult:
    """Like :func:`decode_image`, but report failure as a value."""

    path = Path(path)
    name = name or path.name
    try:
        return DecodeResult(name=name, image=decode_image(path, name))
    except DecodeFailure as exc:
        logger.debug("decode failed for %s: %s", path, exc.reason)
        return DecodeResult(name=name, error=exc.reason)
