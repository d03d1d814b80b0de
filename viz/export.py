from __future__ import annotations

import io

import numpy as np
from PIL import Image


def noise_to_gray(values: np.ndarray) -> np.ndarray:
    """Map noise in [-1, 1] to 8-bit gray, rounding to the nearest level.

    Values outside the nominal range are clipped; NaN becomes 0.
    """

    v = np.asarray(values, dtype=np.float64)
    g = np.floor((v * 0.5 + 0.5) * 255.0 + 0.5)
    g = np.nan_to_num(g, nan=0.0)
    return np.clip(g, 0.0, 255.0).astype(np.uint8)


def array_to_png_bytes(z: np.ndarray, *, normalize: bool = True) -> bytes:
    """Convert a 2D array to an 8-bit grayscale PNG.

    With `normalize` values are min/max scaled to [0, 255] and constant
    arrays become all zeros. Otherwise values are treated as raw noise and
    mapped with `noise_to_gray`.
    """

    z = np.asarray(z, dtype=np.float64)
    if z.ndim != 2:
        raise ValueError("expected a 2D array")

    if not normalize:
        img = noise_to_gray(z)
    else:
        zmin = float(np.min(z))
        zmax = float(np.max(z))
        if zmax == zmin:
            img = np.zeros(z.shape, dtype=np.uint8)
        else:
            zn = (z - zmin) / (zmax - zmin)
            img = np.clip(zn * 255.0, 0.0, 255.0).astype(np.uint8)

    out = io.BytesIO()
    Image.fromarray(img).save(out, format="PNG")
    return out.getvalue()


def array_to_npy_bytes(z: np.ndarray) -> bytes:
    z = np.asarray(z)
    out = io.BytesIO()
    np.save(out, z)
    return out.getvalue()
