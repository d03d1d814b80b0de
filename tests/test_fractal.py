import numpy as np

from simplectic import NoiseField, fbm, ridged, turbulence


def _grid():
    xg, yg = np.meshgrid(np.linspace(0.0, 4.0, 12), np.linspace(0.0, 3.0, 9))
    return xg, yg


def test_single_octave_fbm_is_the_base_noise():
    field = NoiseField(0)
    xg, yg = _grid()
    assert np.allclose(fbm(field.noise2, xg, yg, octaves=1), field.noise2(xg, yg))


def test_fbm_is_amplitude_weighted_sum():
    field = NoiseField(3)
    xg, yg = _grid()
    z = np.full_like(xg, 0.25)
    expected = (field.noise3(xg, yg, z) + 0.5 * field.noise3(2 * xg, 2 * yg, 2 * z)) / 1.5
    assert np.allclose(fbm(field.noise3, xg, yg, z, octaves=2), expected)


def test_zero_octaves_treated_as_one():
    field = NoiseField(0)
    xg, yg = _grid()
    assert np.allclose(fbm(field.noise2, xg, yg, octaves=0), field.noise2(xg, yg))


def test_turbulence_and_ridged_ranges():
    field = NoiseField(1)
    xg, yg = _grid()
    t = turbulence(field.noise2, xg, yg, octaves=3)
    r = ridged(field.noise2, xg, yg, octaves=3)
    assert t.shape == xg.shape
    assert r.shape == xg.shape
    assert float(np.min(t)) >= 0.0
    assert float(np.min(r)) >= 0.0
    assert float(np.max(r)) <= 1.0


def test_fractals_accept_scalars_and_4d():
    field = NoiseField(0)
    out = fbm(field.noise4, 0.1, 0.2, 0.3, np.linspace(0.0, 1.0, 5), octaves=3)
    assert out.shape == (5,)
    assert np.isfinite(out).all()
