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

STRETCH_4D = -0.138196601125011  # (1 / sqrt(4 + 1) - 1) / 4
SQUISH_4D = 0.309016994374947  # (sqrt(4 + 1) - 1) / 4
NORM_4D = 30.0

_ONES = 0b1111


def _lower_dispentachoron_extras(ins: Sequence[float], in_sum: float) -> list[Vertex]:
    """Extras for the first dispentachoron (1 < in_sum <= 2).

    Candidates are the closer of each opposite two-axis pair, then the four
    single-axis vertices scored against the (0, 0, 0, 0) side.
    """

    xins, yins, zins, wins = ins

    if xins + yins > zins + wins:
        a = Candidate(xins + yins, 0b0011)
    else:
        a = Candidate(zins + wins, 0b1100)

    if xins + zins > yins + wins:
        b = Candidate(xins + zins, 0b0101)
    else:
        b = Candidate(yins + wins, 0b1010)

    if xins + wins > yins + zins:
        c = Candidate(xins + wins, 0b1001)
    else:
        c = Candidate(yins + zins, 0b0110)
    a, b = promote(a, b, c, ties_to_b=True)

    for i in range(4):
        single = Candidate(2.0 - in_sum + ins[i], 1 << i, pair=False)
        a, b = promote(a, b, single, ties_to_b=True)

    if a.pair == b.pair:
        if a.pair:
            c = a.mask | b.mask
            return [vertex(c, 4)] + lowered(c, 4) + raised(a.mask & b.mask, 4)
        return lowered(a.mask | b.mask, 4) + [vertex(0, 4)]

    c1, c2 = (a, b) if a.pair else (b, a)
    return lowered(c1.mask, 4) + raised(c2.mask, 4)


def _upper_dispentachoron_extras(ins: Sequence[float], in_sum: float) -> list[Vertex]:
    """Extras for the second dispentachoron (2 < in_sum < 3).

    Mirror of the lower case: scores are negated so that "closest to the
    (1, 1, 1, 1) side" ranks highest, and the non-pair candidates are the
    three-axis vertices.
    """

    xins, yins, zins, wins = ins

    if xins + yins < zins + wins:
        a = Candidate(-(xins + yins), 0b1100)
    else:
        a = Candidate(-(zins + wins), 0b0011)

    if xins + zins < yins + wins:
        b = Candidate(-(xins + zins), 0b1010)
    else:
        b = Candidate(-(yins + wins), 0b0101)

    if xins + wins < yins + zins:
        c = Candidate(-(xins + wins), 0b0110)
    else:
        c = Candidate(-(yins + zins), 0b1001)
    a, b = promote(a, b, c, ties_to_b=True)

    for i in range(4):
        triple = Candidate(-(3.0 - in_sum + ins[i]), _ONES ^ (1 << i), pair=False)
        a, b = promote(a, b, triple, ties_to_b=True)

    if a.pair == b.pair:
        if a.pair:
            c = a.mask & b.mask
            return [vertex(c, 4)] + raised(c, 4) + lowered(a.mask | b.mask, 4)
        return raised(a.mask & b.mask, 4) + [vertex(_ONES, 4)]

    c1, c2 = (a, b) if a.pair else (b, a)
    return raised(c1.mask, 4) + lowered(c2.mask, 4)


def _pair_candidates(ins: np.ndarray, *, upper: bool) -> tuple[Candidate, Candidate, Candidate]:
    xins, yins, zins, wins = ins[:, 0], ins[:, 1], ins[:, 2], ins[:, 3]
    out = []
    for first, second, mask in (
        (xins + yins, zins + wins, 0b0011),
        (xins + zins, yins + wins, 0b0101),
        (xins + wins, yins + zins, 0b1001),
    ):
        if upper:
            cand = choose(first < second, Candidate(-first, _ONES ^ mask), Candidate(-second, mask))
        else:
            cand = choose(first > second, Candidate(first, mask), Candidate(second, _ONES ^ mask))
        out.append(cand)
    return out[0], out[1], out[2]


def _lower_dispentachoron_extras_array(ins: np.ndarray, in_sum: np.ndarray) -> np.ndarray:
    a, b, c = _pair_candidates(ins, upper=False)
    a, b = promote_array(a, b, c, ties_to_b=True)
    for i in range(4):
        single = Candidate(2.0 - in_sum + ins[:, i], 1 << i, False)
        a, b = promote_array(a, b, single, ties_to_b=True)

    either = a.mask | b.mask
    pairs = stack_vertices(
        vertex_array(either, 4),
        lowered_array(either, 4, 1),
        raised_array(a.mask & b.mask, 4, 1),
    )
    neither = stack_vertices(
        lowered_array(either, 4, 2),
        vertex_array(np.zeros(len(in_sum), dtype=np.int64), 4),
    )
    c1 = np.where(a.pair, a.mask, b.mask)
    c2 = np.where(a.pair, b.mask, a.mask)
    mixed = stack_vertices(lowered_array(c1, 4, 2), raised_array(c2, 4, 1))
    return select_by_pairing(a, b, pairs, neither, mixed)


def _upper_dispentachoron_extras_array(ins: np.ndarray, in_sum: np.ndarray) -> np.ndarray:
    a, b, c = _pair_candidates(ins, upper=True)
    a, b = promote_array(a, b, c, ties_to_b=True)
    for i in range(4):
        triple = Candidate(-(3.0 - in_sum + ins[:, i]), _ONES ^ (1 << i), False)
        a, b = promote_array(a, b, triple, ties_to_b=True)

    both = a.mask & b.mask
    pairs = stack_vertices(
        vertex_array(both, 4),
        raised_array(both, 4, 1),
        lowered_array(a.mask | b.mask, 4, 1),
    )
    neither = stack_vertices(
        raised_array(both, 4, 2),
        vertex_array(np.full(len(in_sum), _ONES), 4),
    )
    c1 = np.where(a.pair, a.mask, b.mask)
    c2 = np.where(a.pair, b.mask, a.mask)
    mixed = stack_vertices(raised_array(c1, 4, 2), lowered_array(c2, 4, 1))
    return select_by_pairing(a, b, pairs, neither, mixed)


LATTICE_4D = Lattice(
    dim=4,
    stretch=STRETCH_4D,
    squish=SQUISH_4D,
    norm=NORM_4D,
    bands=(
        # Pentachoron at (0, 0, 0, 0).
        Band(
            masks=(0b0000, 0b0001, 0b0010, 0b0100, 0b1000),
            extras=partial(outer_band_extras, dim=4, near=True),
            extras_array=partial(outer_band_extras_array, dim=4, near=True),
        ),
        Band(
            masks=(0b0001, 0b0010, 0b0100, 0b1000, 0b0011, 0b0101, 0b1001, 0b0110, 0b1010, 0b1100),
            extras=_lower_dispentachoron_extras,
            extras_array=_lower_dispentachoron_extras_array,
        ),
        Band(
            masks=(0b0111, 0b1011, 0b1101, 0b1110, 0b0011, 0b0101, 0b1001, 0b0110, 0b1010, 0b1100),
            extras=_upper_dispentachoron_extras,
            extras_array=_upper_dispentachoron_extras_array,
        ),
        # Pentachoron at (1, 1, 1, 1).
        Band(
            masks=(0b0111, 0b1011, 0b1101, 0b1110, 0b1111),
            extras=partial(outer_band_extras, dim=4, near=False),
            extras_array=partial(outer_band_extras_array, dim=4, near=False),
        ),
    ),
)


def eval4(table: PermutationTable, x: float, y: float, z: float, w: float) -> float:
    return evaluate(LATTICE_4D, table, (x, y, z, w))


def noise4(
    table: PermutationTable,
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    w: np.ndarray,
) -> np.ndarray:
    return evaluate_array(LATTICE_4D, table, x, y, z, w)


def contributions4(
    table: PermutationTable, x: float, y: float, z: float, w: float
) -> list[Contribution]:
    return contributions(LATTICE_4D, table, (float(x), float(y), float(z), float(w)))
