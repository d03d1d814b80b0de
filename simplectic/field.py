from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from .core import PermutationTable
from .lattice import Lattice, candidate_vertices, contributions, skew
from .noise_2d import LATTICE_2D, eval2, noise2
from .noise_3d import LATTICE_3D, eval3, noise3
from .noise_4d import LATTICE_4D, eval4, noise4

logger = logging.getLogger(__name__)

TableSource = Union[int, Sequence[int], np.ndarray, PermutationTable]

_LATTICES = {2: LATTICE_2D, 3: LATTICE_3D, 4: LATTICE_4D}


class NoiseField:
    """OpenSimplex-style noise in 2, 3 and 4 dimensions over one permutation table.

    `seed_or_table` is either an integer seed (reproducible across machines)
    or a caller-supplied 256-entry table, copied as-is. Set `strict` to
    reject supplied tables that are not a bijection on 0..255.

    The table never changes after construction, so one instance can be
    shared by concurrent readers.
    """

    def __init__(self, seed_or_table: TableSource = 0, *, strict: bool = False):
        if isinstance(seed_or_table, PermutationTable):
            self.seed = None
            self.table = seed_or_table
        elif isinstance(seed_or_table, (int, np.integer)) and not isinstance(seed_or_table, bool):
            self.seed = int(seed_or_table)
            self.table = PermutationTable.from_seed(self.seed)
        else:
            self.seed = None
            self.table = PermutationTable.from_values(seed_or_table, strict=strict)
        logger.debug("noise field ready (seed=%s)", self.seed)

    def __repr__(self) -> str:
        if self.seed is None:
            return "NoiseField(<table>)"
        return f"NoiseField({self.seed})"

    def eval2(self, x: float, y: float) -> float:
        return eval2(self.table, x, y)

    def eval3(self, x: float, y: float, z: float) -> float:
        return eval3(self.table, x, y, z)

    def eval4(self, x: float, y: float, z: float, w: float) -> float:
        return eval4(self.table, x, y, z, w)

    def noise2(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        return noise2(self.table, x, y)

    def noise3(self, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        return noise3(self.table, x, y, z)

    def noise4(
        self, x: np.ndarray, y: np.ndarray, z: np.ndarray, w: np.ndarray
    ) -> np.ndarray:
        return noise4(self.table, x, y, z, w)

    def sampler(self, dim: int):
        """Array sampler for `dim`, e.g. for the fractal helpers."""
        samplers = {2: self.noise2, 3: self.noise3, 4: self.noise4}
        if dim not in samplers:
            raise ValueError(f"unsupported dimension: {dim}")
        return samplers[dim]

    def debug_point(self, *coords: float) -> dict:
        # Scalar breakdown for inspection.
        dim = len(coords)
        if dim not in _LATTICES:
            raise ValueError(f"expected 2, 3 or 4 coordinates, got {dim}")
        lattice: Lattice = _LATTICES[dim]
        point = tuple(float(c) for c in coords)

        cell = skew(lattice, point)
        if cell is None:
            return {"seed": self.seed, "input": list(point), "noise": float("nan")}

        band, _ = candidate_vertices(lattice, cell)
        parts = contributions(lattice, self.table, point)
        total = 0.0
        for part in parts:
            total += part.value
        return {
            "seed": self.seed,
            "input": list(point),
            "cell": {
                "origin": list(cell.origin),
                "ins": list(cell.ins),
                "in_sum": cell.in_sum,
                "band": band,
            },
            "contributions": [part.__dict__ for part in parts],
            "active": sum(1 for part in parts if part.weight > 0.0),
            "noise": total,
        }
