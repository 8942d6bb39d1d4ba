"""
String excitation interfaces and a phase-space reference generator.

``StringProcess`` handles the soft sub-processes (single diffractive on
either side, double diffractive, soft non-diffractive). It is stateful:
``init`` for one collision, then any number of ``next_*`` attempts, then
``get_final_state``. All momenta it produces are in the CM frame of the
incoming pair.

``HardStringGenerator`` is the hard (multi-parton) pathway. It is configured
per collision with the beams, the CM energy, the species masses/widths and a
seed, and retried with ``next()`` until it reports success. Its hadrons carry
generator-native codes, so K_S/K_L appear as 310/130.
"""

from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .constants import (
    PDG_K_LONG, PDG_K_SHORT, PDG_K_ZERO, PDG_PI_PLUS, PDG_PI_ZERO,
    string_suppression_factor,
)
from .errors import KinematicsError
from .kinematics import FourVector, sum_four_vectors
from .particles import ParticleData, ParticleType, ParticleTypeDatabase, default_database
from .phase_space import generate_n_body

logger = logging.getLogger(__name__)


class StringProcess(ABC):
    """Soft string excitation for one collision at a time."""

    @abstractmethod
    def cross_sections_diffractive(self, pdg_a: int, pdg_b: int,
                                   sqrt_s: float) -> Tuple[float, float, float]:
        """(single diffractive AB->AX, single diffractive AB->XB, double diffractive) in mb."""

    @abstractmethod
    def init(self, incoming: Sequence[ParticleData], time: float, gamma_cm: float) -> None:
        """Prepare the process for the given incoming pair."""

    @abstractmethod
    def next_sdiff(self, is_AX: bool) -> bool:
        """Single diffractive attempt; ``is_AX`` keeps A intact and excites B."""

    @abstractmethod
    def next_ddiff(self) -> bool:
        ...

    @abstractmethod
    def next_ndiff_soft(self) -> bool:
        ...

    @abstractmethod
    def get_final_state(self) -> List[ParticleData]:
        """Products of the last successful attempt, in the CM frame."""


class HardStringGenerator(ABC):
    """Hard string excitation (inelastic non-diffractive production)."""

    @abstractmethod
    def configure(self, pdg_a: int, pdg_b: int, sqrt_s: float, seed: int,
                  species: Dict[int, Tuple[float, float]]) -> None:
        """
        Set up one collision. ``species`` maps pdg code to (pole mass, width)
        so that generated hadrons agree with the transport species.
        """

    @abstractmethod
    def next(self) -> bool:
        """Generate one event; False if the attempt failed."""

    @abstractmethod
    def final_hadrons(self) -> List[Tuple[int, FourVector]]:
        """(generator code, CM four-momentum) of the final hadrons."""


# -----------------------------
# Reference implementation
# -----------------------------
def _quark_count(baryon_number: int) -> int:
    return 3 if baryon_number != 0 else 2


class PhaseSpaceStringProcess(StringProcess, HardStringGenerator):
    """
    String excitation by Raubold-Lynch N-body phase space.

    The phase-space weight of each event is discarded, so events are not
    distributed uniformly in phase space.

    Leading hadrons keep the incoming species. Neutral clusters (pi+ pi-
    pairs, single pi0, and for the hard pathway K_S K_L pairs) are added with a
    Poisson multiplicity growing with ln(s). An attempt fails when the sampled
    hadron masses do not fit into sqrt(s).
    """

    # single/double diffractive fit: sigma = c0 + c1 ln(s) mb for proton-proton
    sd_coefficients = (1.0, 0.5)
    dd_coefficients = (0.0, 0.5)
    soft_multiplicity_slope = 0.8
    hard_multiplicity_slope = 1.2
    kaon_pair_fraction = 0.1
    charged_pair_fraction = 0.6

    def __init__(self, species: Optional[ParticleTypeDatabase] = None,
                 string_formation_time: float = 1.0,
                 rng: Optional[np.random.Generator] = None):
        self.species = species or default_database()
        self.string_formation_time = string_formation_time
        self.rng = rng or np.random.default_rng()

        # soft state
        self._incoming: List[ParticleData] = []
        self._time = 0.0
        self._gamma_cm = 1.0
        self._sqrt_s = 0.0
        self._final_state: List[ParticleData] = []
        self._initialized = False

        # hard state
        self._beams: Tuple[int, int] = (0, 0)
        self._hard_sqrt_s = 0.0
        self._hard_rng: Optional[np.random.Generator] = None
        self._species_table: Dict[int, Tuple[float, float]] = {}
        self._hadrons: List[Tuple[int, FourVector]] = []

    # -------------------- Diffractive cross sections --------------------

    def cross_sections_diffractive(self, pdg_a, pdg_b, sqrt_s):
        log_s = math.log(max(sqrt_s * sqrt_s, 1.0))
        scale = (_quark_count(self._baryon_number(pdg_a))
                 * _quark_count(self._baryon_number(pdg_b))) / 9.0
        sd = scale * max(0.0, self.sd_coefficients[0] + self.sd_coefficients[1] * log_s)
        dd = scale * max(0.0, self.dd_coefficients[0] + self.dd_coefficients[1] * log_s)
        return sd, sd, dd

    @staticmethod
    def _baryon_number(pdg: int) -> int:
        # reference codes are +-2212 for (anti)baryons and 211 for mesons
        code = abs(pdg)
        if code > 1000:
            return 1 if pdg > 0 else -1
        return 0

    # -------------------- Soft sub-processes --------------------

    def init(self, incoming, time, gamma_cm):
        if len(incoming) != 2:
            raise ValueError(f"String process needs two incoming particles, got {len(incoming)}")
        total = sum_four_vectors(p.momentum for p in incoming)
        to_cm = -total.beta()
        self._incoming = []
        for p in incoming:
            q = p.copy()
            q.momentum = p.momentum.boost(to_cm)
            self._incoming.append(q)
        self._time = time
        self._gamma_cm = gamma_cm
        self._sqrt_s = total.mass
        self._final_state = []
        self._initialized = True
        logger.debug(f"String process initialized: {incoming[0].type.name} + "
                     f"{incoming[1].type.name} at sqrt(s)={self._sqrt_s:.4f} GeV")

    def next_sdiff(self, is_AX):
        # the intact side is formed immediately, the excited side carries the string
        return self._soft_attempt(excited=(not is_AX, is_AX), min_clusters=1)

    def next_ddiff(self):
        return self._soft_attempt(excited=(True, True), min_clusters=1)

    def next_ndiff_soft(self):
        return self._soft_attempt(excited=(True, True), min_clusters=2)

    def get_final_state(self):
        return [p.copy() for p in self._final_state]

    def _soft_attempt(self, excited: Tuple[bool, bool], min_clusters: int) -> bool:
        if not self._initialized:
            raise RuntimeError("String process used before init()")
        leading = [p.type for p in self._incoming]
        masses = [p.effective_mass for p in self._incoming]
        mean = self.soft_multiplicity_slope * self._log_excess(self._sqrt_s, sum(masses))
        clusters = self._sample_clusters(self.rng, mean, min_clusters, with_kaons=False)
        types = leading + [self.species.find(code) for code in clusters]
        masses += [t.mass for t in types[2:]]
        if sum(masses) >= self._sqrt_s:
            return False
        try:
            momenta, _ = generate_n_body(FourVector(self._sqrt_s, 0.0, 0.0, 0.0), masses, self.rng)
        except KinematicsError:
            return False

        t_form = self._time + self.string_formation_time * self._gamma_cm
        products = []
        for i, (ptype, mom) in enumerate(zip(types, momenta)):
            particle = ParticleData(ptype, momentum=mom)
            if i < 2 and not excited[i]:
                particle.formation_time = self._time
                particle.cross_section_scaling_factor = 1.0
            else:
                particle.formation_time = t_form
                particle.cross_section_scaling_factor = (
                    string_suppression_factor * 0.5 if i < 2 else 0.0
                )
            products.append(particle)
        self._final_state = products
        return True

    # -------------------- Hard process --------------------

    def configure(self, pdg_a, pdg_b, sqrt_s, seed, species):
        self._beams = (pdg_a, pdg_b)
        self._hard_sqrt_s = sqrt_s
        self._hard_rng = np.random.default_rng(seed)
        self._species_table = dict(species)
        # K_S and K_L share the neutral kaon mass
        if PDG_K_ZERO in self._species_table:
            self._species_table.setdefault(PDG_K_SHORT, self._species_table[PDG_K_ZERO])
            self._species_table.setdefault(PDG_K_LONG, self._species_table[PDG_K_ZERO])
        self._hadrons = []
        logger.debug(f"Hard string generator: beams {pdg_a} {pdg_b}, eCM={sqrt_s:.4f}, seed={seed}")

    def next(self):
        if self._hard_rng is None:
            raise RuntimeError("Hard string generator used before configure()")
        rng = self._hard_rng
        codes = list(self._beams)
        masses = [self._hadron_mass(code, rng) for code in codes]
        mean = self.hard_multiplicity_slope * self._log_excess(self._hard_sqrt_s, sum(masses))
        codes += self._sample_clusters(rng, mean, 2, with_kaons=True)
        masses += [self._hadron_mass(code, rng) for code in codes[2:]]
        if sum(masses) >= self._hard_sqrt_s:
            return False
        try:
            momenta, _ = generate_n_body(FourVector(self._hard_sqrt_s, 0.0, 0.0, 0.0), masses, rng)
        except KinematicsError:
            return False
        self._hadrons = list(zip(codes, momenta))
        return True

    def final_hadrons(self):
        return list(self._hadrons)

    def _hadron_mass(self, code: int, rng: np.random.Generator) -> float:
        try:
            mass, width = self._species_table[code]
        except KeyError:
            raise ValueError(f"Hadron {code} unknown to the hard string generator") from None
        if width <= 0.0:
            return mass
        # truncated Breit-Wigner around the pole
        while True:
            m = mass + 0.5 * width * rng.standard_cauchy()
            if abs(m - mass) < 2.0 * width and m > 0.0:
                return m

    # -------------------- Helpers --------------------

    @staticmethod
    def _log_excess(sqrt_s: float, mass_sum: float) -> float:
        if sqrt_s <= mass_sum:
            return 0.0
        return math.log(sqrt_s * sqrt_s / (mass_sum * mass_sum))

    def _sample_clusters(self, rng: np.random.Generator, mean: float, minimum: int,
                         with_kaons: bool) -> List[int]:
        """Codes of the neutral clusters added between the leading hadrons."""
        n = minimum + int(rng.poisson(max(mean, 0.0)))
        codes = []
        for _ in range(n):
            r = rng.random()
            if with_kaons and r < self.kaon_pair_fraction:
                codes += [PDG_K_SHORT, PDG_K_LONG]
            elif r < self.charged_pair_fraction:
                codes += [PDG_PI_PLUS, -PDG_PI_PLUS]
            else:
                codes.append(PDG_PI_ZERO)
        return codes
