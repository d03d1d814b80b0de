import io

import numpy as np
from PIL import Image

from viz.export import array_to_npy_bytes, array_to_png_bytes, noise_to_gray


def test_noise_to_gray_rounds_to_nearest_level():
    v = np.array([-1.0, 0.0, 1.0, 2.0, -3.0, np.nan])
    assert noise_to_gray(v).tolist() == [0, 128, 255, 255, 0, 0]


def test_array_to_png_bytes_roundtrip():
    z = np.arange(12, dtype=np.float64).reshape(3, 4)
    data = array_to_png_bytes(z)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"

    img = Image.open(io.BytesIO(data))
    assert img.size == (4, 3)
    assert img.mode == "L"


def test_array_to_png_bytes_raw_noise_mapping():
    z = np.array([[-1.0, 0.0], [0.5, 1.0]])
    img = Image.open(io.BytesIO(array_to_png_bytes(z, normalize=False)))
    assert np.array(img).tolist() == [[0, 128], [191, 255]]


def test_array_to_png_bytes_constant_map():
    z = np.full((5, 6), 7.0, dtype=np.float64)
    data = array_to_png_bytes(z)
    img = Image.open(io.BytesIO(data))
    arr = np.array(img)
    assert arr.min() == 0
    assert arr.max() == 0


def test_array_to_npy_bytes_roundtrip():
    z = np.arange(6, dtype=np.int32).reshape(2, 3)
    data = array_to_npy_bytes(z)
    out = np.load(io.BytesIO(data))
    assert np.array_equal(out, z)
