"""Generic simplectic lattice evaluation shared by the 2D, 3D and 4D noise.

A point is stretched onto the skewed integer lattice, floored to the origin
of its hypercube cell and classified into a band by the sum of its fractional
coordinates. Each band lists the bit masks of its main simplex vertices plus
a rule deriving the extra vertices that can still reach the point. Vertices
are written as integer offsets from the cell origin; bit i of a mask sets
axis i to 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, NamedTuple, Sequence

import numpy as np

from .core import PermutationTable, extrapolate, extrapolate_array

Vertex = tuple[int, ...]
ExtrasRule = Callable[[Sequence[float], float], list[Vertex]]
# (n, dim) fractional coordinates and (n,) sums in, (n, count, dim) vertices out.
ArrayExtrasRule = Callable[[np.ndarray, np.ndarray], np.ndarray]

# Past this magnitude a cell origin no longer fits int64 hashing arithmetic.
_INT_LIMIT = 2.0**60


class Candidate(NamedTuple):
    score: float
    mask: int
    pair: bool = True


@dataclass(frozen=True)
class Band:
    masks: tuple[int, ...]
    extras: ExtrasRule
    extras_array: ArrayExtrasRule


@dataclass(frozen=True)
class Lattice:
    dim: int
    stretch: float
    squish: float
    norm: float
    bands: tuple[Band, ...]


@dataclass(frozen=True)
class Cell:
    origin: tuple[int, ...]
    ins: tuple[float, ...]
    in_sum: float
    offset: tuple[float, ...]


@dataclass(frozen=True)
class Contribution:
    vertex: Vertex
    lattice: tuple[int, ...]
    offset: tuple[float, ...]
    attn: float
    weight: float
    dot: float
    value: float


def vertex(mask: int, dim: int) -> Vertex:
    return tuple((mask >> i) & 1 for i in range(dim))


def lowered(mask: int, dim: int) -> list[Vertex]:
    """`vertex(mask)` with one unset axis moved to -1, for each unset axis."""
    out = []
    for i in range(dim):
        if not mask & (1 << i):
            v = list(vertex(mask, dim))
            v[i] = -1
            out.append(tuple(v))
    return out


def raised(mask: int, dim: int) -> list[Vertex]:
    """`vertex(mask)` with one set axis moved to 2, for each set axis."""
    out = []
    for i in range(dim):
        if mask & (1 << i):
            v = list(vertex(mask, dim))
            v[i] = 2
            out.append(tuple(v))
    return out


def promote(
    a: Candidate, b: Candidate, candidate: Candidate, *, ties_to_b: bool
) -> tuple[Candidate, Candidate]:
    """Keep the two best-scored candidates.

    The newcomer may only replace the weaker of `a` and `b`. When their
    scores are equal, `ties_to_b` decides which one counts as weaker.
    """

    b_is_weaker = a.score >= b.score if ties_to_b else a.score > b.score
    if b_is_weaker:
        if candidate.score > b.score:
            b = candidate
    elif candidate.score > a.score:
        a = candidate
    return a, b


def outer_band_extras(
    ins: Sequence[float],
    in_sum: float,
    *,
    dim: int,
    near: bool,
    order: tuple[int, int] = (0, 1),
) -> list[Vertex]:
    """Extra vertices for the simplex at the origin (`near`) or far corner.

    The two vertices of the simplex closest to the point, besides the home
    corner, are found by score. If the home corner beats either of them only
    the closer one drives the extras.
    """

    full = (1 << dim) - 1
    if near:
        a = Candidate(ins[order[0]], 1 << order[0])
        b = Candidate(ins[order[1]], 1 << order[1])
        home = 1.0 - in_sum
    else:
        a = Candidate(-ins[0], full ^ 1)
        b = Candidate(-ins[1], full ^ 2)
        home = -(dim - in_sum)

    for i in range(2, dim):
        if near:
            c = Candidate(ins[i], 1 << i)
        else:
            c = Candidate(-ins[i], full ^ (1 << i))
        a, b = promote(a, b, c, ties_to_b=True)

    if home > a.score or home > b.score:
        closest = b.mask if b.score > a.score else a.mask
        return lowered(closest, dim) if near else raised(closest, dim)
    if near:
        c = a.mask | b.mask
        return [vertex(c, dim)] + lowered(c, dim)
    c = a.mask & b.mask
    return [vertex(c, dim)] + raised(c, dim)


def vertex_array(mask: np.ndarray, dim: int) -> np.ndarray:
    return (mask[:, None] >> np.arange(dim)) & 1


def _moved_axes(mask: np.ndarray, dim: int, count: int, *, unset: bool, to: int) -> np.ndarray:
    base = vertex_array(mask, dim)
    out = np.repeat(base[:, None, :], count, axis=1)
    if count == 0:
        return out
    # A stable sort keeps the chosen axes in ascending order.
    axes = np.argsort(base if unset else 1 - base, axis=1, kind="stable")[:, :count]
    np.put_along_axis(out, axes[:, :, None], to, axis=2)
    return out


def lowered_array(mask: np.ndarray, dim: int, count: int) -> np.ndarray:
    """Row-wise `lowered` for masks that all have `count` unset axes."""
    return _moved_axes(mask, dim, count, unset=True, to=-1)


def raised_array(mask: np.ndarray, dim: int, count: int) -> np.ndarray:
    """Row-wise `raised` for masks that all have `count` set axes."""
    return _moved_axes(mask, dim, count, unset=False, to=2)


def stack_vertices(*parts: np.ndarray) -> np.ndarray:
    """Join (n, dim) single vertices and (n, k, dim) vertex lists in order."""
    return np.concatenate([p[:, None] if p.ndim == 2 else p for p in parts], axis=1)


def select_by_pairing(
    a: Candidate, b: Candidate, pairs: np.ndarray, neither: np.ndarray, mixed: np.ndarray
) -> np.ndarray:
    """Pick the extras for both, neither or one of `a` and `b` being a pair."""
    same = a.pair == b.pair
    return np.where(
        (same & a.pair)[:, None, None],
        pairs,
        np.where(same[:, None, None], neither, mixed),
    )


def choose(cond: np.ndarray, x: Candidate, y: Candidate) -> Candidate:
    return Candidate(*(np.where(cond, xf, yf) for xf, yf in zip(x, y)))


def promote_array(
    a: Candidate, b: Candidate, candidate: Candidate, *, ties_to_b: bool
) -> tuple[Candidate, Candidate]:
    """`promote` over candidates whose fields are arrays."""
    b_is_weaker = a.score >= b.score if ties_to_b else a.score > b.score
    new_b = choose(b_is_weaker & (candidate.score > b.score), candidate, b)
    new_a = choose(~b_is_weaker & (candidate.score > a.score), candidate, a)
    return new_a, new_b


def outer_band_extras_array(
    ins: np.ndarray,
    in_sum: np.ndarray,
    *,
    dim: int,
    near: bool,
    order: tuple[int, int] = (0, 1),
) -> np.ndarray:
    n = len(in_sum)
    full = (1 << dim) - 1
    if near:
        a = Candidate(ins[:, order[0]], np.full(n, 1 << order[0]))
        b = Candidate(ins[:, order[1]], np.full(n, 1 << order[1]))
        home = 1.0 - in_sum
    else:
        a = Candidate(-ins[:, 0], np.full(n, full ^ 1))
        b = Candidate(-ins[:, 1], np.full(n, full ^ 2))
        home = -(dim - in_sum)

    for i in range(2, dim):
        if near:
            c = Candidate(ins[:, i], 1 << i)
        else:
            c = Candidate(-ins[:, i], full ^ (1 << i))
        a, b = promote_array(a, b, c, ties_to_b=True)

    closest = np.where(b.score > a.score, b.mask, a.mask)
    if near:
        c = a.mask | b.mask
        one = lowered_array(closest, dim, dim - 1)
        two = stack_vertices(vertex_array(c, dim), lowered_array(c, dim, dim - 2))
    else:
        c = a.mask & b.mask
        one = raised_array(closest, dim, dim - 1)
        two = stack_vertices(vertex_array(c, dim), raised_array(c, dim, dim - 2))
    home_wins = (home > a.score) | (home > b.score)
    return np.where(home_wins[:, None, None], one, two)


def band_index(in_sum: float, dim: int) -> int:
    if in_sum <= 1.0:
        return 0
    if in_sum >= dim - 1:
        return dim - 1
    if in_sum <= 2.0:
        return 1
    return 2


def skew(lattice: Lattice, coords: Sequence[float]) -> Cell | None:
    """Locate the cell holding `coords`, or None when it has no cell.

    Non-finite input has no cell, and neither has finite input whose
    stretched coordinates overflow.
    """

    total = coords[0]
    for c in coords[1:]:
        total += c
    stretch_offset = total * lattice.stretch
    stretched = [c + stretch_offset for c in coords]
    if not all(math.isfinite(s) for s in stretched):
        return None

    origin = tuple(math.floor(s) for s in stretched)

    origin_sum = origin[0]
    for o in origin[1:]:
        origin_sum += o
    squish_offset = origin_sum * lattice.squish

    ins = tuple(s - o for s, o in zip(stretched, origin))
    in_sum = ins[0]
    for v in ins[1:]:
        in_sum += v
    offset = tuple(c - (o + squish_offset) for c, o in zip(coords, origin))
    return Cell(origin=origin, ins=ins, in_sum=in_sum, offset=offset)


def candidate_vertices(lattice: Lattice, cell: Cell) -> tuple[int, list[Vertex]]:
    band_no = band_index(cell.in_sum, lattice.dim)
    band = lattice.bands[band_no]
    main = [vertex(m, lattice.dim) for m in band.masks]
    return band_no, main + band.extras(cell.ins, cell.in_sum)


def _vertex_offset(lattice: Lattice, cell: Cell, v: Vertex) -> tuple[float, ...]:
    s = sum(v)
    return tuple(d - vi - s * lattice.squish for d, vi in zip(cell.offset, v))


def evaluate(lattice: Lattice, table: PermutationTable, coords: Sequence[float]) -> float:
    cell = skew(lattice, coords)
    if cell is None:
        return math.nan

    _, vertices = candidate_vertices(lattice, cell)
    value = 0.0
    for v in vertices:
        d = _vertex_offset(lattice, cell, v)
        attn = 2.0
        for di in d:
            attn -= di * di
        if attn > 0:
            attn *= attn
            lat = tuple(o + vi for o, vi in zip(cell.origin, v))
            value += attn * attn * extrapolate(table, lat, d)
    return value / lattice.norm


def contributions(
    lattice: Lattice, table: PermutationTable, coords: Sequence[float]
) -> list[Contribution]:
    """Per-vertex breakdown of `evaluate`, including out-of-range vertices.

    `value` is already divided by the normalisation constant, so the values
    sum to the evaluated noise.
    """

    cell = skew(lattice, coords)
    if cell is None:
        return []

    _, vertices = candidate_vertices(lattice, cell)
    out = []
    for v in vertices:
        d = _vertex_offset(lattice, cell, v)
        attn = 2.0
        for di in d:
            attn -= di * di
        lat = tuple(o + vi for o, vi in zip(cell.origin, v))
        dot = extrapolate(table, lat, d)
        if attn > 0:
            squared = attn * attn
            weight = squared * squared
        else:
            weight = 0.0
        out.append(
            Contribution(
                vertex=v,
                lattice=lat,
                offset=d,
                attn=attn,
                weight=weight,
                dot=dot,
                value=weight * dot / lattice.norm,
            )
        )
    return out


def _band_index_array(in_sum: np.ndarray, dim: int) -> np.ndarray:
    return np.select([in_sum <= 1.0, in_sum >= dim - 1, in_sum <= 2.0], [0, dim - 1, 1], default=2)


def _evaluate_rows(
    lattice: Lattice,
    table: PermutationTable,
    coords: np.ndarray,
    stretched: np.ndarray,
) -> np.ndarray:
    """Vectorised `evaluate` for (n, dim) points with finite, int64-sized cells.

    Operations run in the same order as the scalar path, so results are
    bit-identical to it.
    """

    dim = lattice.dim
    floored = np.floor(stretched)
    origin = floored.astype(np.int64)

    origin_sum = origin[:, 0]
    for i in range(1, dim):
        origin_sum = origin_sum + origin[:, i]
    squish_offset = origin_sum * lattice.squish

    ins = stretched - floored
    in_sum = ins[:, 0]
    for i in range(1, dim):
        in_sum = in_sum + ins[:, i]
    offset = coords - (floored + squish_offset[:, None])

    out = np.empty(len(coords), dtype=np.float64)
    band_no = _band_index_array(in_sum, dim)
    for b, band in enumerate(lattice.bands):
        rows = np.flatnonzero(band_no == b)
        if rows.size == 0:
            continue
        main = np.array([vertex(m, dim) for m in band.masks], dtype=np.int64)
        main = np.broadcast_to(main, (rows.size,) + main.shape)
        vertices = np.concatenate([main, band.extras_array(ins[rows], in_sum[rows])], axis=1)

        value = np.zeros(rows.size, dtype=np.float64)
        for k in range(vertices.shape[1]):
            v = vertices[:, k]
            s = v.sum(axis=1)
            d = offset[rows] - v - (s * lattice.squish)[:, None]
            attn = np.full(rows.size, 2.0)
            for i in range(dim):
                attn = attn - d[:, i] * d[:, i]
            dot = extrapolate_array(table, origin[rows] + v, d)
            squared = attn * attn
            value = value + np.where(attn > 0, squared * squared * dot, 0.0)
        out[rows] = value / lattice.norm
    return out


def evaluate_array(lattice: Lattice, table: PermutationTable, *coords) -> np.ndarray:
    """Element-wise `evaluate` over broadcast coordinate arrays.

    Points are grouped by band and evaluated with numpy. The rare points too
    far out for int64 cell arithmetic go through the scalar path.
    """

    arrays = np.broadcast_arrays(*(np.asarray(c, dtype=np.float64) for c in coords))
    shape = arrays[0].shape
    points = np.stack([a.ravel() for a in arrays], axis=1)
    out = np.full(points.shape[0], np.nan)

    with np.errstate(over="ignore", invalid="ignore"):
        total = points[:, 0]
        for i in range(1, lattice.dim):
            total = total + points[:, i]
        stretch_offset = total * lattice.stretch
        stretched = points + stretch_offset[:, None]
        finite = np.isfinite(stretched).all(axis=1)
        fast = finite & (np.abs(stretched).max(axis=1) < _INT_LIMIT)

    rows = np.flatnonzero(fast)
    if rows.size:
        out[rows] = _evaluate_rows(lattice, table, points[rows], stretched[rows])
    for i in np.flatnonzero(finite & ~fast):
        out[i] = evaluate(lattice, table, tuple(points[i].tolist()))
    return out.reshape(shape)
