import itertools
import math

import numpy as np
import pytest

from simplectic.core import PERLIN_PERMUTATION, PermutationTable, extrapolate
from simplectic.lattice import Candidate, outer_band_extras, promote
from simplectic.noise_2d import LATTICE_2D, NORM_2D, SQUISH_2D, contributions2, eval2, noise2


@pytest.mark.parametrize(
    "table, x, y, expected",
    [
        (PermutationTable.from_seed(0), 0.37, 1.21, -0.25313734767904139),
        (PermutationTable.from_seed(0), 10.0, 10.0, 0.73205156957220863),
        (PermutationTable.from_seed(0), -3.5, 7.25, -0.24599819429647785),
        (PermutationTable.from_seed(42), 0.37, 1.21, -0.24907409939077321),
        (PermutationTable.from_seed(42), 10.0, 10.0, 0.40799062362595706),
        (PermutationTable.from_seed(42), -3.5, 7.25, -0.65106745740892280),
        (PermutationTable.from_values(PERLIN_PERMUTATION), 0.37, 1.21, -0.25213217611327660),
        (PermutationTable.from_values(PERLIN_PERMUTATION), 10.0, 10.0, -0.39843298051284265),
        (PermutationTable.from_values(PERLIN_PERMUTATION), -3.5, 7.25, 0.52619936255256949),
    ],
)
def test_eval2_reference_values(table, x, y, expected):
    assert math.isclose(eval2(table, x, y), expected, rel_tol=1e-12, abs_tol=1e-15)


def test_eval2_vanishes_at_lattice_points():
    t = PermutationTable.from_seed(0)
    for i, j in [(0, 0), (1, 0), (3, -2), (-5, 7)]:
        x = i + (i + j) * SQUISH_2D
        y = j + (i + j) * SQUISH_2D
        assert abs(eval2(t, x, y)) < 1e-12


def test_noise2_matches_scalar_and_broadcasts():
    t = PermutationTable.from_seed(5)
    x = np.linspace(-4.0, 4.0, 7)
    y = np.array([[0.5], [1.75], [-2.2]])
    out = noise2(t, x, y)
    assert out.shape == (3, 7)
    for j in range(3):
        for i in range(7):
            assert out[j, i] == eval2(t, float(x[i]), float(y[j, 0]))


def _brute_force_2d(table, x, y):
    # Every lattice vertex within reach of the containing rhombus.
    s = (x + y) * LATTICE_2D.stretch
    xsb = math.floor(x + s)
    ysb = math.floor(y + s)
    sq = (xsb + ysb) * SQUISH_2D
    dx0 = x - (xsb + sq)
    dy0 = y - (ysb + sq)
    value = 0.0
    for vx, vy in itertools.product(range(-1, 3), repeat=2):
        dx = dx0 - vx - (vx + vy) * SQUISH_2D
        dy = dy0 - vy - (vx + vy) * SQUISH_2D
        attn = 2.0 - dx * dx - dy * dy
        if attn > 0:
            value += attn**4 * extrapolate(table, (xsb + vx, ysb + vy), (dx, dy))
    return value / NORM_2D


def test_eval2_selection_covers_every_vertex_in_range():
    t = PermutationTable.from_seed(11)
    rng = np.random.default_rng(3)
    for x, y in rng.uniform(-50.0, 50.0, size=(400, 2)):
        assert math.isclose(eval2(t, x, y), _brute_force_2d(t, x, y), abs_tol=1e-12)


def test_contributions2_sum_to_eval_and_respect_support():
    t = PermutationTable.from_seed(0)
    for x, y in [(0.37, 1.21), (10.0, 10.0), (-3.5, 7.25), (0.9, 0.05)]:
        parts = contributions2(t, x, y)
        assert len(parts) == 4
        for part in parts:
            if part.attn <= 0.0:
                assert part.weight == 0.0
                assert part.value == 0.0
        total = sum(part.value for part in parts)
        assert math.isclose(total, eval2(t, x, y), rel_tol=1e-12, abs_tol=1e-15)


def test_outer_band_extras_2d_near_and_far():
    # (0, 0) closest of the near triangle, x ahead of y.
    assert outer_band_extras((0.3, 0.2), 0.5, dim=2, near=True, order=(1, 0)) == [(1, -1)]
    assert outer_band_extras((0.2, 0.3), 0.5, dim=2, near=True, order=(1, 0)) == [(-1, 1)]
    # Equal scores fall back to the y side.
    assert outer_band_extras((0.25, 0.25), 0.5, dim=2, near=True, order=(1, 0)) == [(-1, 1)]
    # (1, 0) and (0, 1) closest.
    assert outer_band_extras((0.6, 0.35), 0.95, dim=2, near=True, order=(1, 0)) == [(1, 1)]
    assert outer_band_extras((0.9, 0.8), 1.7, dim=2, near=False) == [(2, 0)]
    assert outer_band_extras((0.55, 0.5), 1.05, dim=2, near=False) == [(0, 0)]


def test_promote_tie_break_is_asymmetric():
    a = Candidate(0.5, 1)
    b = Candidate(0.5, 2)
    c = Candidate(0.6, 4)
    assert promote(a, b, c, ties_to_b=True) == (a, c)
    assert promote(a, b, c, ties_to_b=False) == (c, b)
    # A newcomer equal to the weaker score does not replace it.
    assert promote(Candidate(0.7, 1), b, Candidate(0.5, 4), ties_to_b=True) == (Candidate(0.7, 1), b)
