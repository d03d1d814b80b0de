from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

TABLE_SIZE = 256

LCG_MULTIPLIER = 6364136223846793005
LCG_INCREMENT = 1442695040888963407
LCG_WARMUP = 3

_U64_MASK = (1 << 64) - 1

# Gradients are stored flat: gradient k of an N-dimensional set starts at k * N.
GRADIENTS_2D: tuple[int, ...] = (
    5, 2, 2, 5,
    -5, 2, -2, 5,
    5, -2, 2, -5,
    -5, -2, -2, -5,
)

GRADIENTS_3D: tuple[int, ...] = (
    -11, 4, 4, -4, 11, 4, -4, 4, 11,
    11, 4, 4, 4, 11, 4, 4, 4, 11,
    -11, -4, 4, -4, -11, 4, -4, -4, 11,
    11, -4, 4, 4, -11, 4, 4, -4, 11,
    -11, 4, -4, -4, 11, -4, -4, 4, -11,
    11, 4, -4, 4, 11, -4, 4, 4, -11,
    -11, -4, -4, -4, -11, -4, -4, -4, -11,
    11, -4, -4, 4, -11, -4, 4, -4, -11,
)

GRADIENTS_4D: tuple[int, ...] = (
    3, 1, 1, 1, 1, 3, 1, 1, 1, 1, 3, 1, 1, 1, 1, 3,
    -3, 1, 1, 1, -1, 3, 1, 1, -1, 1, 3, 1, -1, 1, 1, 3,
    3, -1, 1, 1, 1, -3, 1, 1, 1, -1, 3, 1, 1, -1, 1, 3,
    -3, -1, 1, 1, -1, -3, 1, 1, -1, -1, 3, 1, -1, -1, 1, 3,
    3, 1, -1, 1, 1, 3, -1, 1, 1, 1, -3, 1, 1, 1, -1, 3,
    -3, 1, -1, 1, -1, 3, -1, 1, -1, 1, -3, 1, -1, 1, -1, 3,
    3, -1, -1, 1, 1, -3, -1, 1, 1, -1, -3, 1, 1, -1, -1, 3,
    -3, -1, -1, 1, -1, -3, -1, 1, -1, -1, -3, 1, -1, -1, -1, 3,
    3, 1, 1, -1, 1, 3, 1, -1, 1, 1, 3, -1, 1, 1, 1, -3,
    -3, 1, 1, -1, -1, 3, 1, -1, -1, 1, 3, -1, -1, 1, 1, -3,
    3, -1, 1, -1, 1, -3, 1, -1, 1, -1, 3, -1, 1, -1, 1, -3,
    -3, -1, 1, -1, -1, -3, 1, -1, -1, -1, 3, -1, -1, -1, 1, -3,
    3, 1, -1, -1, 1, 3, -1, -1, 1, 1, -3, -1, 1, 1, -1, -3,
    -3, 1, -1, -1, -1, 3, -1, -1, -1, 1, -3, -1, -1, 1, -1, -3,
    3, -1, -1, -1, 1, -3, -1, -1, 1, -1, -3, -1, 1, -1, -1, -3,
    -3, -1, -1, -1, -1, -3, -1, -1, -1, -1, -3, -1, -1, -1, -1, -3,
)

GRADIENT_COUNT_3D = len(GRADIENTS_3D) // 3

_GRADIENTS = {2: GRADIENTS_2D, 3: GRADIENTS_3D, 4: GRADIENTS_4D}

# Ken Perlin's reference ordering from "Improved Noise".
PERLIN_PERMUTATION: tuple[int, ...] = (
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
    140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
    247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
    57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
    74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
    60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
    65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
    200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
    207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
    119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
    218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
    81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
    184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
    222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
)


def gradient_array(dim: int) -> np.ndarray:
    """Return the gradient set for `dim` as a read-only (count, dim) array."""
    if dim not in _GRADIENTS:
        raise ValueError(f"unsupported dimension: {dim}")
    g = np.array(_GRADIENTS[dim], dtype=np.int64).reshape(-1, dim)
    g.setflags(write=False)
    return g


def wrap_int64(value: int) -> int:
    value &= _U64_MASK
    if value >= 1 << 63:
        value -= 1 << 64
    return value


def lcg_next(state: int) -> int:
    """One step of the 64-bit LCG used to shuffle the permutation table."""
    return wrap_int64(state * LCG_MULTIPLIER + LCG_INCREMENT)


def make_permutation(seed: int) -> np.ndarray:
    """Deterministic Fisher-Yates shuffle of 0..255 driven by `lcg_next`.

    The seed is interpreted as a signed 64-bit integer, so seeds that agree
    modulo 2**64 give the same table.
    """

    state = wrap_int64(int(seed))
    for _ in range(LCG_WARMUP):
        state = lcg_next(state)

    source = list(range(TABLE_SIZE))
    perm = [0] * TABLE_SIZE
    for i in range(TABLE_SIZE - 1, -1, -1):
        state = lcg_next(state)
        r = wrap_int64(state + 31) % (i + 1)
        perm[i] = source[r]
        source[r] = source[i]
    return np.array(perm, dtype=np.int32)


def _grad_offsets_3d(values: Sequence[int]) -> tuple[int, ...]:
    return tuple((v % GRADIENT_COUNT_3D) * 3 for v in values)


@dataclass(frozen=True)
class PermutationTable:
    values: tuple[int, ...]
    grad_offsets_3d: tuple[int, ...]

    @classmethod
    def from_seed(cls, seed: int) -> PermutationTable:
        values = tuple(int(v) for v in make_permutation(seed))
        logger.debug("built permutation table from seed %d", int(seed))
        return cls(values=values, grad_offsets_3d=_grad_offsets_3d(values))

    @classmethod
    def from_values(
        cls, values: Sequence[int] | np.ndarray, *, strict: bool = False
    ) -> PermutationTable:
        """Copy a caller-supplied table.

        There must be exactly 256 integer entries. Every lookup masks its
        index to a byte, so any integer values are usable; whether they form
        a bijection on 0..255 is only checked when `strict` is set. Otherwise
        a malformed table is accepted and yields degraded noise.
        """

        arr = np.asarray(values)
        if arr.shape != (TABLE_SIZE,):
            raise ValueError(f"permutation table must have {TABLE_SIZE} entries")
        if not np.issubdtype(arr.dtype, np.integer):
            raise ValueError("permutation table entries must be integers")

        table_values = tuple(int(v) for v in arr)
        table = cls(values=table_values, grad_offsets_3d=_grad_offsets_3d(table_values))
        if not table.is_bijection():
            if strict:
                if min(table_values) < 0 or max(table_values) >= TABLE_SIZE:
                    raise ValueError("permutation table entries must be in 0..255")
                raise ValueError("permutation table is not a bijection on 0..255")
            logger.debug("accepting non-bijective permutation table")
        return table

    def is_bijection(self) -> bool:
        return sorted(self.values) == list(range(TABLE_SIZE))

    def as_array(self) -> np.ndarray:
        out = np.array(self.values, dtype=np.int64)
        out.setflags(write=False)
        return out


def extrapolate(
    table: PermutationTable, lattice: Sequence[int], offset: Sequence[float]
) -> float:
    """Dot product of the hashed lattice gradient with `offset`.

    The lattice coordinates are folded through the table left to right; the
    last fold selects a flat gradient offset (masked in 2D and 4D, looked up
    in 3D).
    """

    perm = table.values
    n = len(lattice)
    h = perm[lattice[0] & 0xFF]
    for c in lattice[1:-1]:
        h = perm[(h + c) & 0xFF]
    slot = (h + lattice[-1]) & 0xFF

    if n == 2:
        gi = perm[slot] & 0x0E
        grads = GRADIENTS_2D
    elif n == 3:
        gi = table.grad_offsets_3d[slot]
        grads = GRADIENTS_3D
    elif n == 4:
        gi = perm[slot] & 0xFC
        grads = GRADIENTS_4D
    else:
        raise ValueError(f"unsupported dimension: {n}")

    value = grads[gi] * offset[0]
    for i in range(1, n):
        value += grads[gi + i] * offset[i]
    return value


def extrapolate_array(
    table: PermutationTable, lattice: np.ndarray, offset: np.ndarray
) -> np.ndarray:
    """Row-wise `extrapolate` for (n, dim) lattice and offset arrays."""
    n = lattice.shape[1]
    # Every fold masks to a byte, so byte-masked entries hash identically.
    perm = np.fromiter((v & 0xFF for v in table.values), dtype=np.int64, count=TABLE_SIZE)
    h = np.take(perm, lattice[:, 0] & 0xFF)
    for i in range(1, n - 1):
        h = np.take(perm, (h + lattice[:, i]) & 0xFF)
    slot = (h + lattice[:, -1]) & 0xFF

    if n == 2:
        gi = np.take(perm, slot) & 0x0E
    elif n == 3:
        gi = np.take(np.asarray(table.grad_offsets_3d, dtype=np.int64), slot)
    elif n == 4:
        gi = np.take(perm, slot) & 0xFC
    else:
        raise ValueError(f"unsupported dimension: {n}")

    grads = np.asarray(_GRADIENTS[n], dtype=np.int64)
    value = np.take(grads, gi) * offset[:, 0]
    for i in range(1, n):
        value = value + np.take(grads, gi + i) * offset[:, i]
    return value
