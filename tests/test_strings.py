"""
Phase-space string process: diffractive cross sections, soft attempts and
the hard pathway.
"""

import math

import numpy as np
import pytest

from conftest import make_pair
from hadronx.conservation import check_energy_momentum
from hadronx.kinematics import FourVector
from hadronx.strings import PhaseSpaceStringProcess


def _species_table(species):
    return {t.pdgcode: (t.mass, t.width) for t in species.list_all()}


# ------------------------ Diffractive cross sections ----------------------
def test_diffractive_cross_sections_grow_with_energy(phase_space_strings):
    low = phase_space_strings.cross_sections_diffractive(2212, 2212, 5.0)
    high = phase_space_strings.cross_sections_diffractive(2212, 2212, 50.0)
    assert low[0] == low[1]
    assert all(h > lo for h, lo in zip(high, low))
    log_s = math.log(100.0)
    assert phase_space_strings.cross_sections_diffractive(2212, 2212, 10.0) == pytest.approx(
        (1.0 + 0.5 * log_s, 1.0 + 0.5 * log_s, 0.5 * log_s))


def test_meson_baryon_diffraction_is_smaller(phase_space_strings):
    nn = phase_space_strings.cross_sections_diffractive(2212, 2212, 10.0)
    pin = phase_space_strings.cross_sections_diffractive(211, 2212, 10.0)
    assert pin == pytest.approx(tuple(x * 6.0 / 9.0 for x in nn))


# ---------------------------- Soft attempts -------------------------------
def test_single_diffractive_keeps_one_side_intact(species, phase_space_strings):
    incoming = make_pair(species, 2212, 2212, 10.0, beta=(0.0, 0.0, 0.4))
    phase_space_strings.init(incoming, 2.0, 1.5)
    assert phase_space_strings.next_sdiff(True)
    products = phase_space_strings.get_final_state()

    assert [p.pdgcode for p in products[:2]] == [2212, 2212]
    intact, excited = products[0], products[1]
    assert intact.formation_time == 2.0
    assert intact.cross_section_scaling_factor == 1.0
    assert excited.formation_time == pytest.approx(2.0 + 1.0 * 1.5)
    assert excited.cross_section_scaling_factor == pytest.approx(0.35)
    for cluster in products[2:]:
        assert cluster.cross_section_scaling_factor == 0.0

    # products are in the CM frame of the pair
    diag = check_energy_momentum([FourVector(10.0, 0.0, 0.0, 0.0)],
                                 [p.momentum for p in products])
    assert diag["conserved"], diag


def test_non_diffractive_adds_at_least_two_clusters(species, phase_space_strings):
    phase_space_strings.init(make_pair(species, 2212, 2212, 10.0), 0.0, 1.0)
    assert phase_space_strings.next_ndiff_soft()
    products = phase_space_strings.get_final_state()
    assert len(products) >= 4
    assert sum(p.type.charge for p in products) == 2
    assert all(p.formation_time == pytest.approx(1.0) for p in products)


def test_soft_attempt_fails_without_energy(species, phase_space_strings):
    phase_space_strings.init(make_pair(species, 2212, 2212, 1.95), 0.0, 1.0)
    assert not phase_space_strings.next_ndiff_soft()


def test_soft_attempt_before_init_raises(species):
    with pytest.raises(RuntimeError):
        PhaseSpaceStringProcess(species).next_ddiff()


def test_init_needs_two_particles(species, phase_space_strings):
    a, _ = make_pair(species, 2212, 2212, 10.0)
    with pytest.raises(ValueError):
        phase_space_strings.init([a], 0.0, 1.0)


# ----------------------------- Hard pathway -------------------------------
def test_hard_event_conserves_and_leads_with_beams(species, phase_space_strings):
    phase_space_strings.configure(2212, -2212, 12.0, 1234, _species_table(species))
    assert phase_space_strings.next()
    hadrons = phase_space_strings.final_hadrons()
    assert [code for code, _ in hadrons[:2]] == [2212, -2212]
    assert len(hadrons) >= 4
    diag = check_energy_momentum([FourVector(12.0, 0.0, 0.0, 0.0)], [m for _, m in hadrons])
    assert diag["conserved"], diag


def test_hard_generator_is_reproducible(species):
    table = _species_table(species)
    results = []
    for _ in range(2):
        generator = PhaseSpaceStringProcess(species, rng=np.random.default_rng())
        generator.configure(2212, 2212, 20.0, 777, table)
        generator.next()
        results.append([(c, m.to_tuple()) for c, m in generator.final_hadrons()])
    assert results[0] == results[1]


def test_neutral_kaon_codes_share_k0_mass(species, phase_space_strings):
    table = _species_table(species)
    phase_space_strings.configure(2212, 2212, 30.0, 5, table)
    assert phase_space_strings._species_table[310] == table[311]
    assert phase_space_strings._species_table[130] == table[311]


def test_hard_event_fails_below_threshold(species, phase_space_strings):
    phase_space_strings.configure(2212, 2212, 1.9, 1, _species_table(species))
    assert not phase_space_strings.next()


def test_hard_event_before_configure_raises(species):
    with pytest.raises(RuntimeError):
        PhaseSpaceStringProcess(species).next()


def test_hadron_missing_from_species_table_raises(phase_space_strings):
    phase_space_strings.configure(2212, 2212, 10.0, 1, {2212: (0.938, 0.0)})
    # the clusters are unknown to this table
    with pytest.raises(ValueError):
        phase_space_strings.next()
