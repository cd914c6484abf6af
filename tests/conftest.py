"""Shared test fixtures for flagmatch tests."""

from pathlib import Path

import pytest
from PIL import Image

RED = (255, 0, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def make_image(width, height, pixels=None, mode="RGB", fill=WHITE):
    """Build a small image; `pixels` lists colours row by row."""
    img = Image.new(mode, (width, height), fill)
    if pixels is not None:
        assert len(pixels) == width * height
        for i, color in enumerate(pixels):
            img.putpixel((i % width, i // width), color)
    return img


def save_image(folder: Path, name, img):
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / name
    img.save(path)
    return path


@pytest.fixture
def red_pair():
    """2x1 image: [red, red]."""
    return make_image(2, 1, [RED, RED])


@pytest.fixture
def red_blue():
    """2x1 image: [red, blue]."""
    return make_image(2, 1, [RED, BLUE])


@pytest.fixture
def flag_dirs(tmp_path, red_pair, red_blue):
    """A flags folder and a mystery folder holding the classic example.

    flags/:   a.png [red, blue], b.png [red, red], c.png 3x1
    mystery/: m.png [red, red]
    """
    flags = tmp_path / "flags"
    mystery = tmp_path / "mystery"
    save_image(flags, "a.png", red_blue)
    save_image(flags, "b.png", red_pair)
    save_image(flags, "c.png", make_image(3, 1, [RED, RED, RED]))
    save_image(mystery, "m.png", red_pair)
    return flags, mystery
