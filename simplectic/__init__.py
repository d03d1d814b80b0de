from .core import PERLIN_PERMUTATION, PermutationTable, make_permutation
from .field import NoiseField
from .fractal import fbm, ridged, turbulence
from .map2d import noise_map_2d

__all__ = [
    "NoiseField",
    "PERLIN_PERMUTATION",
    "PermutationTable",
    "fbm",
    "make_permutation",
    "noise_map_2d",
    "ridged",
    "turbulence",
]
