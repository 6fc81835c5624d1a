import numpy as np
import pytest

pyvips = pytest.importorskip("pyvips")
Image = pytest.importorskip("PIL.Image")

from huaga.errors import DecodeError, ScaleError
from huaga.image_engine.decoder import decode_image, rescale
from huaga.image_engine.types import Bitmap, MultiFrame, SingleFrame


def _write_png(path, size=(40, 30), color=(255, 0, 0), mode="RGB"):
    if mode == "RGBA":
        color = (*color, 128)
    Image.new(mode, size, color).save(path)
    return path


def _write_gif(path, colors, durations, loop=0):
    frames = [Image.new("RGB", (16, 12), c) for c in colors]
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=durations, loop=loop)
    return path


def test_png_decodes_to_single_rgb_frame(tmp_path):
    path = _write_png(tmp_path / "red.png")
    decoded = decode_image(path)

    assert isinstance(decoded, SingleFrame)
    bitmap = decoded.bitmap
    assert (bitmap.width, bitmap.height) == (40, 30)
    assert bitmap.reference_dimension == 30
    assert bitmap.pixels.dtype == np.uint8
    assert tuple(bitmap.pixels[0, 0]) == (255, 0, 0)


def test_alpha_is_flattened(tmp_path):
    path = _write_png(tmp_path / "alpha.png", mode="RGBA")
    bitmap = decode_image(path).bitmap
    assert bitmap.pixels.shape == (30, 40, 3)


def test_animated_gif_decodes_to_frames(tmp_path):
    path = _write_gif(tmp_path / "anim.gif", [(255, 0, 0), (0, 0, 255)], [100, 200])
    decoded = decode_image(str(path))

    assert isinstance(decoded, MultiFrame)
    anim = decoded.animation
    assert len(anim) == 2
    assert (anim.width, anim.height) == (16, 12)
    assert [f.delay_ms for f in anim.frames] == [100, 200]
    assert anim.loop == 0
    first, second = (f.bitmap.pixels[0, 0] for f in anim.frames)
    assert first[0] > 200 and first[2] < 50
    assert second[2] > 200 and second[0] < 50


def test_single_frame_gif_is_still(tmp_path):
    path = tmp_path / "still.gif"
    Image.new("RGB", (8, 8), (0, 255, 0)).save(path)
    assert isinstance(decode_image(path), SingleFrame)


@pytest.mark.parametrize("kind", ["none", "missing", "directory", "garbage"])
def test_bad_inputs_raise_decode_error(tmp_path, kind):
    if kind == "none":
        target = None
    elif kind == "missing":
        target = tmp_path / "nope.png"
    elif kind == "directory":
        target = tmp_path
    else:
        target = tmp_path / "junk.png"
        target.write_bytes(b"definitely not an image")
    with pytest.raises(DecodeError):
        decode_image(target)


def test_rescale_to_target_size():
    src = Bitmap(np.full((30, 40, 3), 90, dtype=np.uint8))
    out = rescale(src, 80, 60)
    assert (out.width, out.height) == (80, 60)
    assert int(out.pixels[30, 40, 0]) == 90

    down = rescale(src, 20, 15)
    assert (down.width, down.height) == (20, 15)


def test_rescale_same_size_is_identity():
    src = Bitmap(np.zeros((10, 10, 3), dtype=np.uint8))
    assert rescale(src, 10, 10) is src


@pytest.mark.parametrize("size", [(0, 10), (10, -1)])
def test_rescale_rejects_non_positive_size(size):
    src = Bitmap(np.zeros((10, 10, 3), dtype=np.uint8))
    with pytest.raises(ScaleError):
        rescale(src, *size)
