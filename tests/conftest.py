"""Shared fixtures: species table, parametrization, seeded generator, string fakes."""

import numpy as np
import pytest

from hadronx.kinematics import FourVector, p_cm, sum_four_vectors, two_body_momenta
from hadronx.parametrizations import CrossSectionParametrization
from hadronx.particles import ParticleData, ParticleTypeDatabase
from hadronx.strings import HardStringGenerator, PhaseSpaceStringProcess, StringProcess


@pytest.fixture(scope="session")
def species():
    return ParticleTypeDatabase()


@pytest.fixture(scope="session")
def parametrization(species):
    return CrossSectionParametrization(species)


@pytest.fixture
def rng():
    return np.random.default_rng(20240517)


@pytest.fixture
def phase_space_strings(species, rng):
    return PhaseSpaceStringProcess(species, 1.0, rng)


def make_pair(species, pdg_a, pdg_b, sqrt_s, beta=None,
              positions=((0.0, 0.0, 0.0, -0.5), (0.0, 0.2, 0.0, 0.5))):
    """Two pole-mass particles along z with the given sqrt(s), optionally boosted by beta."""
    type_a, type_b = species.find(pdg_a), species.find(pdg_b)
    p = p_cm(sqrt_s, type_a.mass, type_b.mass)
    a = ParticleData(type_a, position=FourVector(*positions[0]))
    b = ParticleData(type_b, position=FourVector(*positions[1]))
    a.set_momentum(type_a.mass, (0.0, 0.0, p))
    b.set_momentum(type_b.mass, (0.0, 0.0, -p))
    if beta is not None:
        a.boost(np.asarray(beta, dtype=float))
        b.boost(np.asarray(beta, dtype=float))
    return a, b


@pytest.fixture
def pair(species):
    def _pair(pdg_a, pdg_b, sqrt_s, beta=None):
        return make_pair(species, pdg_a, pdg_b, sqrt_s, beta)
    return _pair


class ScriptedStringProcess(StringProcess):
    """
    Soft string fake: fixed diffractive shares, fails ``failures`` times, then
    returns the incoming species back to back in the CM frame with the given
    formation offset and scaling factors.
    """

    def __init__(self, diffractive=(1.0, 1.0, 0.5), failures=0,
                 formation_offset=1.0, scaling=(0.35, 1.0)):
        self.diffractive = diffractive
        self.failures = failures
        self.formation_offset = formation_offset
        self.scaling = scaling
        self.calls = []
        self._incoming = []
        self._time = 0.0
        self._final = []

    def cross_sections_diffractive(self, pdg_a, pdg_b, sqrt_s):
        self.calls.append(("diffractive", pdg_a, pdg_b))
        return self.diffractive

    def init(self, incoming, time, gamma_cm):
        self.calls.append(("init", time, gamma_cm))
        self._incoming = list(incoming)
        self._time = time

    def _attempt(self, name):
        self.calls.append((name,))
        if self.failures > 0:
            self.failures -= 1
            return False
        total = sum_four_vectors(p.momentum for p in self._incoming)
        sqrt_s = total.mass
        types = [p.type for p in self._incoming]
        momenta = two_body_momenta(sqrt_s, types[0].mass, types[1].mass, np.array([1.0, 0.0, 0.0]))
        self._final = []
        for ptype, mom, scale in zip(types, momenta, self.scaling):
            self._final.append(ParticleData(ptype, momentum=mom,
                                            formation_time=self._time + self.formation_offset,
                                            cross_section_scaling_factor=scale))
        return True

    def next_sdiff(self, is_AX):
        return self._attempt(f"sdiff_{'AX' if is_AX else 'XB'}")

    def next_ddiff(self):
        return self._attempt("ddiff")

    def next_ndiff_soft(self):
        return self._attempt("ndiff_soft")

    def get_final_state(self):
        return [p.copy() for p in self._final]


class ScriptedHardGenerator(HardStringGenerator):
    """Hard generator fake returning fixed (code, momentum) lists after some failures."""

    def __init__(self, hadrons, failures=0):
        self.hadrons = hadrons
        self.failures = failures
        self.configured = None
        self.next_calls = 0

    def configure(self, pdg_a, pdg_b, sqrt_s, seed, species):
        self.configured = (pdg_a, pdg_b, sqrt_s, seed, species)

    def next(self):
        self.next_calls += 1
        if self.failures > 0:
            self.failures -= 1
            return False
        return True

    def final_hadrons(self):
        return list(self.hadrons)


@pytest.fixture
def scripted_strings():
    return ScriptedStringProcess
