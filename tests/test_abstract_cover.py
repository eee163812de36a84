from __future__ import annotations

from PIL import Image

from storypress.abstract_cover import generate_abstract_cover, vertical_gradient


def test_gradient_endpoints():
    img = vertical_gradient((4, 50), (0, 0, 0), (200, 100, 50))
    assert img.getpixel((0, 0)) == (0, 0, 0)
    assert img.getpixel((3, 49)) == (200, 100, 50)


def test_generated_cover(tmp_path):
    out = generate_abstract_cover("A Long Title For Wrapping Tests", "Ada Lane", tmp_path / "c.jpg",
                                  seed=7, size=(320, 512))
    with Image.open(out) as img:
        assert img.format == "JPEG"
        assert img.size == (320, 512)


def test_seed_is_deterministic(tmp_path):
    a = generate_abstract_cover("T", "A", tmp_path / "a.jpg", seed=3, size=(160, 256))
    b = generate_abstract_cover("T", "A", tmp_path / "b.jpg", seed=3, size=(160, 256))
    assert a.read_bytes() == b.read_bytes()
