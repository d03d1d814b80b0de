from __future__ import annotations

from functools import partial

import numpy as np

from .core import PermutationTable
from .lattice import (
    Band,
    Contribution,
    Lattice,
    contributions,
    evaluate,
    evaluate_array,
    outer_band_extras,
    outer_band_extras_array,
)

STRETCH_2D = -0.211324865405187  # (1 / sqrt(2 + 1) - 1) / 2
SQUISH_2D = 0.366025403784439  # (sqrt(2 + 1) - 1) / 2
NORM_2D = 47.0

LATTICE_2D = Lattice(
    dim=2,
    stretch=STRETCH_2D,
    squish=SQUISH_2D,
    norm=NORM_2D,
    bands=(
        # Triangle at (0, 0). The x/y scores are compared y-first.
        Band(
            masks=(0b01, 0b10, 0b00),
            extras=partial(outer_band_extras, dim=2, near=True, order=(1, 0)),
            extras_array=partial(outer_band_extras_array, dim=2, near=True, order=(1, 0)),
        ),
        # Triangle at (1, 1).
        Band(
            masks=(0b01, 0b10, 0b11),
            extras=partial(outer_band_extras, dim=2, near=False),
            extras_array=partial(outer_band_extras_array, dim=2, near=False),
        ),
    ),
)


def eval2(table: PermutationTable, x: float, y: float) -> float:
    return evaluate(LATTICE_2D, table, (x, y))


def noise2(table: PermutationTable, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return evaluate_array(LATTICE_2D, table, x, y)


def contributions2(table: PermutationTable, x: float, y: float) -> list[Contribution]:
    return contributions(LATTICE_2D, table, (float(x), float(y)))
