"""
Species table and particle properties.

Tests:
  - CSV import into SQLite, antiparticle generation, lookups
  - Isospin Clebsch-Gordan coefficients
  - Mass-dependent widths and the normalized spectral function
  - Mass sampling and the resonance detailed-balance factor
"""

import sqlite3

import numpy as np
import pytest
from scipy import integrate

from hadronx.constants import interaction_radius
from hadronx.kinematics import p_cm
from hadronx.particles import (
    ParticleData, ParticleTypeDatabase, blatt_weisskopf_sqr, clebsch_gordan_sqr,
    detailed_balance_factor_RR,
)


# ----------------------------- Utility ------------------------------------
def _assert_close(a, b, tol=1e-9, msg=""):
    assert abs(a - b) < tol, msg or f"Values differ: {a} vs {b} (tol={tol})"


# ------------------------------ Database ----------------------------------
def test_lookup_and_properties(species):
    proton = species.find(2212)
    assert proton.is_nucleon and proton.is_baryon and proton.is_stable
    assert proton.isospin3 == 0.5
    assert proton.antiparticle_sign == 1

    delta = species.find(2224)
    assert not delta.is_stable
    assert delta.charge == 2
    _assert_close(delta.min_mass, 0.938 + 0.138)


def test_antiparticles_are_generated(species):
    pbar = species.find(-2212)
    assert pbar.family == "Nbar"
    assert pbar.charge == -1 and pbar.baryon_number == -1
    assert pbar.is_nucleon
    assert pbar.antiparticle_sign == -1
    assert species.antiparticle(species.find(2212)) is pbar
    assert species.antiparticle(species.find(211)).pdgcode == -211
    # antibaryon resonances decay into antibaryons
    anti_delta = species.find(-2224)
    assert anti_delta.decay_modes[0].families in (("Nbar", "pi"), ("pi", "Nbar"))


def test_unknown_pdg_raises(species):
    assert 999999 not in species
    with pytest.raises(ValueError):
        species.find(999999)


def test_list_all_contains_generated_species(species):
    all_types = species.list_all()
    codes = {t.pdgcode for t in all_types}
    assert {111, 211, -211, 2212, -2212, 2224, -2224, 113, 10223} <= codes


def test_file_database(tmp_path):
    db_file = tmp_path / "species.db"
    conn = sqlite3.connect(db_file)
    ParticleTypeDatabase._import_csv(conn)
    conn.close()
    db = ParticleTypeDatabase(db_file)
    assert db.find(2214).name == "Δ+"


# ---------------------------- Clebsch-Gordan ------------------------------
@pytest.mark.parametrize("args,expected", [
    ((1, 1, 0.5, 0.5, 1.5, 1.5), 1.0),          # pi+ p -> Delta++
    ((1, 0, 0.5, 0.5, 1.5, 0.5), 2.0 / 3.0),    # pi0 p -> Delta+
    ((1, 1, 0.5, -0.5, 1.5, 0.5), 1.0 / 3.0),   # pi+ n -> Delta+
    ((1, -1, 0.5, 0.5, 1.5, -0.5), 1.0 / 3.0),  # pi- p -> Delta0
    ((0.5, 0.5, 0.5, -0.5, 1, 0), 0.5),
    ((0.5, 0.5, 0.5, 0.5, 0, 0), 0.0),          # M mismatch
])
def test_clebsch_gordan_values(args, expected):
    _assert_close(clebsch_gordan_sqr(*args), expected, 1e-12)


def test_clebsch_gordan_completeness():
    # sum over J of |<1 m1 1/2 m2|J M>|^2 is 1
    total = clebsch_gordan_sqr(1, 0, 0.5, 0.5, 1.5, 0.5) + clebsch_gordan_sqr(1, 0, 0.5, 0.5, 0.5, 0.5)
    _assert_close(total, 1.0, 1e-12)


def test_blatt_weisskopf():
    assert blatt_weisskopf_sqr(3.0, 0) == 1.0
    _assert_close(blatt_weisskopf_sqr(1.0, 1), 0.5)
    with pytest.raises(ValueError):
        blatt_weisskopf_sqr(1.0, 5)


# ------------------------ Widths and spectral function --------------------
def test_width_at_pole_equals_pole_width(species):
    delta = species.find(2214)
    _assert_close(delta.total_width(delta.mass), delta.width, 1e-12)
    n1440 = species.find(12212)
    _assert_close(n1440.total_width(n1440.mass), n1440.width, 1e-12)


def test_width_vanishes_below_threshold(species):
    delta = species.find(2214)
    assert delta.total_width(1.0) == 0.0
    assert delta.spectral_function(1.0) == 0.0


@pytest.mark.parametrize("pdg", [2224, 113, 10223])
def test_spectral_function_normalized(species, pdg):
    res = species.find(pdg)
    below, _ = integrate.quad(res.spectral_function, res.min_mass, res.mass, limit=200)
    above, _ = integrate.quad(res.spectral_function, res.mass, np.inf, limit=200)
    _assert_close(below + above, 1.0, 1e-4)


def test_partial_in_width_isospin_weights(species):
    delta_pp = species.find(2224)
    delta_p = species.find(2214)
    p = ParticleData.at_rest(species.find(2212))
    n = ParticleData.at_rest(species.find(2112))
    pip = ParticleData.at_rest(species.find(211))
    pi0 = ParticleData.at_rest(species.find(111))
    m = 1.232
    full = delta_pp.partial_in_width(m, pip, p)
    _assert_close(full, delta_pp.width, 1e-9)
    _assert_close(delta_p.partial_in_width(m, pi0, p), full * 2.0 / 3.0, 1e-9)
    _assert_close(delta_p.partial_in_width(m, pip, n), full / 3.0, 1e-9)
    # no mode connects Delta to pi pi
    assert delta_p.partial_in_width(m, pip, pi0) == 0.0


def test_rho_in_width_from_different_charge_states(species):
    rho0 = species.find(113)
    pip = ParticleData.at_rest(species.find(211))
    pim = ParticleData.at_rest(species.find(-211))
    pi0 = ParticleData.at_rest(species.find(111))
    # both orderings of pi+ pi- contribute, pi0 pi0 has a vanishing coefficient
    _assert_close(rho0.partial_in_width(rho0.mass, pip, pim), rho0.width, 1e-9)
    assert rho0.partial_in_width(rho0.mass, pi0, pi0) == 0.0


# ----------------------------- Mass sampling ------------------------------
def test_sample_mass_within_bounds(species, rng):
    delta = species.find(2214)
    masses = [delta.sample_mass(2.6, 0.938, rng) for _ in range(300)]
    assert min(masses) > delta.min_mass
    assert max(masses) < 2.6 - 0.938
    assert 1.15 < float(np.median(masses)) < 1.35


@pytest.mark.parametrize("sqrt_s", [3.0, 20.0])
def test_sampled_masses_follow_spectral_times_momentum(species, sqrt_s):
    delta = species.find(2214)
    m_max = sqrt_s - 0.938

    def target(m):
        return delta.spectral_function(m) * p_cm(sqrt_s, m, 0.938)

    total, _ = integrate.quad(target, delta.min_mass, m_max, points=[delta.mass], limit=400)
    peak, _ = integrate.quad(target, 1.20, 1.26, limit=200)
    expected = peak / total

    rng = np.random.default_rng(11)
    masses = np.array([delta.sample_mass(sqrt_s, 0.938, rng) for _ in range(20000)])
    sampled = float(np.mean((masses > 1.20) & (masses < 1.26)))
    # binomial error is about 0.003
    _assert_close(sampled, expected, 0.015)


def test_stable_mass_is_pole(species, rng):
    assert species.find(2212).sample_mass(3.0, 0.138, rng) == 0.938


def test_detailed_balance_factor_positive_above_threshold(species):
    rho0, h1, p, pbar = (species.find(c) for c in (113, 10223, 2212, -2212))
    assert detailed_balance_factor_RR(2.2, 0.6, rho0, h1, p, pbar) > 0.0
    assert detailed_balance_factor_RR(2.2, 0.0, rho0, h1, p, pbar) == 0.0


def test_width_follows_blatt_weisskopf_barrier(species):
    delta = species.find(2214)
    mode = delta.decay_modes[0]
    m = 1.35
    p = p_cm(m, *mode.pole_masses)
    p0 = p_cm(delta.mass, *mode.pole_masses)
    barrier = (blatt_weisskopf_sqr(p * interaction_radius, 1)
               / blatt_weisskopf_sqr(p0 * interaction_radius, 1))
    expected = delta.width * mode.branching_ratio * (delta.mass / m) * (p / p0) * barrier
    _assert_close(delta.partial_width(m, mode), expected, 1e-12)
    # near threshold the width rises as p^3 for a p-wave decay
    m_low = delta.min_mass + 1e-4
    m_lower = delta.min_mass + 0.5e-4
    ratio = delta.total_width(m_low) / delta.total_width(m_lower)
    p_ratio = p_cm(m_low, *mode.pole_masses) / p_cm(m_lower, *mode.pole_masses)
    assert ratio == pytest.approx(p_ratio ** 3, rel=1e-2)
