"""
Kinematics utilities and phase space.

Tests:
  - Four-vector algebra and invariant mass
  - Boost convention and round trips
  - CM momentum and Mandelstam variables
  - UrQMD transverse distance, including the zero relative momentum fallback
  - Raubold-Lynch N-body phase space
"""

import math

import numpy as np
import pytest

from hadronx.conservation import check_energy_momentum
from hadronx.errors import KinematicsError
from hadronx.kinematics import (
    FourVector, direction_about_axis, isotropic_direction, mandelstam_s, mandelstam_t,
    p_cm, p_cm_sqr, sum_four_vectors, transverse_distance_sqr, two_body_momenta,
)
from hadronx.phase_space import generate_n_body


# ----------------------------- Utility ------------------------------------
def _assert_close(a, b, tol=1e-9, msg=""):
    assert abs(a - b) < tol, msg or f"Values differ: {a} vs {b} (tol={tol})"


# ----------------------------- FourVector ---------------------------------
def test_invariant_mass_of_moving_particle():
    m, p = 0.938, 1.5
    v = FourVector(math.sqrt(m * m + p * p), 0.0, p, 0.0)
    _assert_close(v.mass, m)
    _assert_close(v.sqr(), m * m)


def test_boost_gives_object_velocity():
    rest = FourVector(1.0, 0.0, 0.0, 0.0)
    moving = rest.boost(np.array([0.0, 0.0, 0.6]))
    _assert_close(moving.pz / moving.E, 0.6)
    _assert_close(moving.E, 1.25)


@pytest.mark.parametrize("beta", [
    [0.3, 0.0, 0.0],
    [0.1, -0.4, 0.5],
    [0.0, 0.0, -0.95],
])
def test_boost_round_trip(beta):
    v = FourVector(3.0, 0.4, -1.2, 2.1)
    back = v.boost(np.array(beta)).boost(-np.array(beta))
    for x, y in zip(v.to_tuple(), back.to_tuple()):
        _assert_close(x, y, 1e-12)


def test_superluminal_boost_raises():
    with pytest.raises(KinematicsError):
        FourVector(1.0, 0.0, 0.0, 0.0).boost(np.array([0.8, 0.7, 0.0]))


def test_boost_to_cm_removes_total_momentum():
    a = FourVector(math.sqrt(0.938 ** 2 + 4.0), 0.0, 0.0, 2.0)
    b = FourVector(0.938, 0.0, 0.0, 0.0)
    to_cm = -(a + b).beta()
    total = a.boost(to_cm) + b.boost(to_cm)
    _assert_close(total.px, 0.0, 1e-12)
    _assert_close(total.pz, 0.0, 1e-12)
    _assert_close(total.E, (a + b).mass, 1e-12)


# ---------------------------- Invariants ----------------------------------
def test_p_cm_formula():
    sqrt_s, m1, m2 = 2.0, 0.938, 0.138
    expected = math.sqrt((sqrt_s ** 2 - (m1 + m2) ** 2) * (sqrt_s ** 2 - (m1 - m2) ** 2)) / (2 * sqrt_s)
    _assert_close(p_cm(sqrt_s, m1, m2), expected)
    _assert_close(p_cm_sqr(sqrt_s, m1, m2), expected ** 2)


def test_p_cm_below_threshold_is_zero():
    assert p_cm(1.0, 0.938, 0.138) == 0.0
    assert p_cm_sqr(1.0, 0.938, 0.138) < 0.0


def test_mandelstam_s_and_t():
    a = FourVector(2.0, 0.0, 0.0, 1.0)
    b = FourVector(2.0, 0.0, 0.0, -1.0)
    _assert_close(mandelstam_s(a, b), 16.0)
    c = FourVector(2.0, 1.0, 0.0, 0.0)
    _assert_close(mandelstam_t(a, c), -2.0)


# ------------------------- Transverse distance ----------------------------
def test_transverse_distance_head_on_with_offset():
    p = 1.0
    E = math.sqrt(0.938 ** 2 + p * p)
    p_a, p_b = FourVector(E, 0, 0, p), FourVector(E, 0, 0, -p)
    x_a, x_b = FourVector(0, 0.0, 0, -1.0), FourVector(0, 0.7, 0, 1.0)
    _assert_close(transverse_distance_sqr(p_a, p_b, x_a, x_b), 0.49, 1e-12)


def test_transverse_distance_zero_relative_momentum_falls_back():
    p = FourVector(0.938, 0, 0, 0)
    x_a, x_b = FourVector(0, 1.0, 0, 0), FourVector(0, -1.0, 0, 0)
    _assert_close(transverse_distance_sqr(p, p, x_a, x_b), 4.0)


# ----------------------------- Directions ---------------------------------
def test_isotropic_direction_unit_and_uncorrelated(rng):
    dirs = np.array([isotropic_direction(rng) for _ in range(4000)])
    assert np.allclose(np.linalg.norm(dirs, axis=1), 1.0)
    assert abs(dirs[:, 2].mean()) < 0.05


def test_direction_about_axis_angle():
    axis = np.array([0.0, 1.0, 1.0])
    d = direction_about_axis(axis, 0.5, 1.3)
    _assert_close(float(np.linalg.norm(d)), 1.0)
    _assert_close(float(np.dot(d, axis / np.linalg.norm(axis))), 0.5)


def test_two_body_momenta_back_to_back():
    mom = two_body_momenta(2.0, 0.938, 0.138, np.array([0.0, 0.0, 1.0]))
    total = sum_four_vectors(mom)
    _assert_close(total.E, 2.0)
    _assert_close(total.pz, 0.0)
    _assert_close(mom[0].mass, 0.938)
    _assert_close(mom[1].mass, 0.138)


def test_two_body_momenta_forbidden():
    with pytest.raises(KinematicsError):
        two_body_momenta(1.0, 0.938, 0.138, np.array([0.0, 0.0, 1.0]))


# ----------------------------- Phase space --------------------------------
@pytest.mark.parametrize("masses", [
    [0.938, 0.938, 0.138],
    [0.938, 0.938, 0.138, 0.138, 0.138],
    [0.138] * 6,
])
def test_n_body_conserves_and_keeps_masses(masses, rng):
    total = FourVector(5.0, 0.3, -0.2, 4.0)
    momenta, weight = generate_n_body(total, masses, rng)
    assert len(momenta) == len(masses)
    assert weight > 0
    diag = check_energy_momentum([total], momenta)
    assert diag["conserved"], diag
    for mom, m in zip(momenta, masses):
        _assert_close(mom.mass, m, 1e-6)


def test_n_body_forbidden(rng):
    with pytest.raises(KinematicsError):
        generate_n_body(FourVector(1.0, 0, 0, 0), [0.938, 0.138], rng)
