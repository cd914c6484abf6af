"""Tests for image listing and decoding."""

import pickle

import pytest

from flagmatch.imaging import (
    DecodeFailure,
    DecodedImage,
    decode_image,
    iter_images,
    open_image,
    try_decode,
)

from conftest import RED, make_image, save_image


class TestIterImages:
    """Tests for folder listing."""

    def test_sorted_and_filtered(self, tmp_path):
        save_image(tmp_path, "b.png", make_image(1, 1))
        save_image(tmp_path, "a.GIF", make_image(1, 1))
        (tmp_path / "notes.txt").write_text("not an image")
        names = [p.name for p in iter_images(tmp_path)]
        assert names == ["a.GIF", "b.png"]

    def test_not_recursive_by_default(self, tmp_path):
        save_image(tmp_path, "top.png", make_image(1, 1))
        save_image(tmp_path / "sub", "deep.png", make_image(1, 1))
        assert [p.name for p in iter_images(tmp_path)] == ["top.png"]
        assert sorted(p.name for p in iter_images(tmp_path, recursive=True)) == ["deep.png", "top.png"]

    def test_custom_extensions(self, tmp_path):
        save_image(tmp_path, "x.png", make_image(1, 1))
        save_image(tmp_path, "y.bmp", make_image(1, 1))
        assert [p.name for p in iter_images(tmp_path, exts=[".bmp"])] == ["y.bmp"]


class TestDecode:
    """Tests for decoding files into images."""

    def test_png_round_trip(self, tmp_path, red_blue):
        path = save_image(tmp_path, "rb.png", red_blue)
        img = open_image(path)
        assert img.mode == "RGB"
        assert img.size == (2, 1)
        assert img.getpixel((0, 0)) == RED

    def test_palette_converted_to_rgb(self, tmp_path, red_blue):
        path = save_image(tmp_path, "rb.gif", red_blue)
        assert open_image(path).mode == "RGB"

    def test_garbage_raises(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"definitely not a png")
        with pytest.raises(DecodeFailure) as info:
            open_image(path)
        assert info.value.path == path
        assert "broken.png" in str(info.value)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(DecodeFailure):
            decode_image(tmp_path / "nope.png")

    def test_decode_image_names_by_file(self, tmp_path, red_pair):
        path = save_image(tmp_path, "flag.png", red_pair)
        assert decode_image(path).name == "flag.png"
        assert decode_image(path, "custom").name == "custom"

    def test_try_decode_reports_failure_as_value(self, tmp_path):
        path = tmp_path / "broken.gif"
        path.write_bytes(b"GIF89a garbage")
        res = try_decode(path)
        assert not res.ok
        assert res.name == "broken.gif"
        assert res.error

    def test_try_decode_success(self, tmp_path, red_pair):
        res = try_decode(save_image(tmp_path, "ok.png", red_pair))
        assert res.ok
        assert res.error is None
        assert res.image.size == (2, 1)


class TestDecodedImage:
    """Tests for the lazily signed image wrapper."""

    def test_signature_is_lazy_and_cached(self, red_pair):
        img = DecodedImage("x", red_pair)
        assert img._signature is None
        sig = img.signature
        assert sig.total == 2
        assert img.signature is sig
        assert img._img is None

    def test_picklable_after_signing(self, red_blue):
        img = DecodedImage("x", red_blue)
        img.signature
        clone = pickle.loads(pickle.dumps(img))
        assert clone.size == (2, 1)
        assert clone.signature == img.signature
