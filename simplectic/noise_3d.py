from __future__ import annotations

from functools import partial
from typing import Sequence

import numpy as np

from .core import PermutationTable
from .lattice import (
    Band,
    Candidate,
    Contribution,
    Lattice,
    Vertex,
    choose,
    contributions,
    evaluate,
    evaluate_array,
    lowered,
    lowered_array,
    outer_band_extras,
    outer_band_extras_array,
    promote,
    promote_array,
    raised,
    raised_array,
    select_by_pairing,
    stack_vertices,
    vertex,
    vertex_array,
)

STRETCH_3D = -1.0 / 6.0  # (1 / sqrt(3 + 1) - 1) / 3
SQUISH_3D = 1.0 / 3.0  # (sqrt(3 + 1) - 1) / 3
NORM_3D = 103.0


def _octahedron_extras(ins: Sequence[float], in_sum: float) -> list[Vertex]:
    """Extras for the octahedron between the two tetrahedra.

    Each opposite pair of octahedron vertices, e.g. (1, 0, 0) and (0, 1, 1),
    contributes whichever member is closer; the two best of the three pairs
    decide the extra vertices. A "pair" candidate is the two-axis vertex.
    """

    xins, yins, zins = ins

    p1 = xins + yins
    if p1 > 1.0:
        a = Candidate(p1 - 1.0, 0b011)
    else:
        a = Candidate(1.0 - p1, 0b100, pair=False)

    p2 = xins + zins
    if p2 > 1.0:
        b = Candidate(p2 - 1.0, 0b101)
    else:
        b = Candidate(1.0 - p2, 0b010, pair=False)

    p3 = yins + zins
    if p3 > 1.0:
        c = Candidate(p3 - 1.0, 0b110)
    else:
        c = Candidate(1.0 - p3, 0b001, pair=False)

    a, b = promote(a, b, c, ties_to_b=False)

    if a.pair == b.pair:
        if a.pair:
            c = a.mask | b.mask
            return [vertex(c, 3)] + lowered(c, 3) + raised(a.mask & b.mask, 3)
        return [vertex(0, 3)] + lowered(a.mask | b.mask, 3)

    # One vertex on each side: a permutation of (1, 1, -1) and of (2, 0, 0).
    c1, c2 = (a, b) if a.pair else (b, a)
    return lowered(c1.mask, 3) + raised(c2.mask, 3)


def _closer_side(p: np.ndarray, pair_mask: int, single_mask: int) -> Candidate:
    return choose(
        p > 1.0,
        Candidate(p - 1.0, pair_mask, True),
        Candidate(1.0 - p, single_mask, False),
    )


def _octahedron_extras_array(ins: np.ndarray, in_sum: np.ndarray) -> np.ndarray:
    xins, yins, zins = ins[:, 0], ins[:, 1], ins[:, 2]
    a = _closer_side(xins + yins, 0b011, 0b100)
    b = _closer_side(xins + zins, 0b101, 0b010)
    c = _closer_side(yins + zins, 0b110, 0b001)
    a, b = promote_array(a, b, c, ties_to_b=False)

    either = a.mask | b.mask
    # Two pairs always join to (1, 1, 1), which has no lowered neighbours.
    pairs = stack_vertices(vertex_array(either, 3), raised_array(a.mask & b.mask, 3, 1))
    neither = stack_vertices(
        vertex_array(np.zeros(len(in_sum), dtype=np.int64), 3),
        lowered_array(either, 3, 1),
    )
    c1 = np.where(a.pair, a.mask, b.mask)
    c2 = np.where(a.pair, b.mask, a.mask)
    mixed = stack_vertices(lowered_array(c1, 3, 1), raised_array(c2, 3, 1))
    return select_by_pairing(a, b, pairs, neither, mixed)


LATTICE_3D = Lattice(
    dim=3,
    stretch=STRETCH_3D,
    squish=SQUISH_3D,
    norm=NORM_3D,
    bands=(
        # Tetrahedron at (0, 0, 0).
        Band(
            masks=(0b000, 0b001, 0b010, 0b100),
            extras=partial(outer_band_extras, dim=3, near=True),
            extras_array=partial(outer_band_extras_array, dim=3, near=True),
        ),
        # Octahedron in between.
        Band(
            masks=(0b001, 0b010, 0b100, 0b011, 0b101, 0b110),
            extras=_octahedron_extras,
            extras_array=_octahedron_extras_array,
        ),
        # Tetrahedron at (1, 1, 1).
        Band(
            masks=(0b011, 0b101, 0b110, 0b111),
            extras=partial(outer_band_extras, dim=3, near=False),
            extras_array=partial(outer_band_extras_array, dim=3, near=False),
        ),
    ),
)


def eval3(table: PermutationTable, x: float, y: float, z: float) -> float:
    return evaluate(LATTICE_3D, table, (x, y, z))


def noise3(
    table: PermutationTable, x: np.ndarray, y: np.ndarray, z: np.ndarray
) -> np.ndarray:
    return evaluate_array(LATTICE_3D, table, x, y, z)


def contributions3(
    table: PermutationTable, x: float, y: float, z: float
) -> list[Contribution]:
    return contributions(LATTICE_3D, table, (float(x), float(y), float(z)))
