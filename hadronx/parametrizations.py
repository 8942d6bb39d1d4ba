"""
Cross-section parametrizations consumed by the scatter-action catalog.

All functions return millibarn. The fits are coarse: piecewise forms in the
laboratory momentum for low energies and the PDG high-energy form

    sigma = Z + H ln^2(s/s0) + Y1 (s1/s)^eta1 -+ Y2 (s1/s)^eta2

above. Pairs without a dedicated fit are scaled by the additive quark model.
"""

from __future__ import annotations
import logging
import math
from typing import List, Optional, Tuple

from .config import IncludedReactions
from .constants import nucleon_mass, pion_mass
from .particles import ParticleType, ParticleTypeDatabase, clebsch_gordan_sqr, default_database

logger = logging.getLogger(__name__)

# PDG 2016 high-energy fit parameters
_PDG_M = 2.1206
_PDG_H = 0.2720
_PDG_ETA1 = 0.4473
_PDG_ETA2 = 0.5486
_PDG_PARAMS = {
    # (Z, Y1, Y2)
    "pp": (34.41, 13.07, 7.394),
    "pip": (18.75, 9.56, 1.767),
}


def plab_from_s(s: float, m_projectile: float = nucleon_mass, m_target: float = nucleon_mass) -> float:
    """Projectile momentum in the rest frame of the target."""
    e_lab = (s - m_projectile ** 2 - m_target ** 2) / (2.0 * m_target)
    return math.sqrt(max(e_lab * e_lab - m_projectile ** 2, 0.0))


def _quark_count(ptype: ParticleType) -> int:
    return 3 if ptype.is_baryon else 2


def pdg_high_energy(s: float, m_a: float, m_b: float, key: str, sign: int) -> float:
    """PDG total cross section; ``sign`` is -1 for particle-particle, +1 for particle-antiparticle."""
    Z, Y1, Y2 = _PDG_PARAMS[key]
    s0 = (m_a + m_b + _PDG_M) ** 2
    return (Z + _PDG_H * math.log(s / s0) ** 2
            + Y1 * (1.0 / s) ** _PDG_ETA1 + sign * Y2 * (1.0 / s) ** _PDG_ETA2)


# -----------------------------
# Elastic fits
# -----------------------------
def pp_elastic(s: float) -> float:
    p_lab = plab_from_s(s)
    if p_lab < 0.435:
        return 5.12 * nucleon_mass / (s - 4 * nucleon_mass ** 2) + 1.67
    if p_lab < 0.8:
        return 23.5 + 1000.0 * (p_lab - 0.7) ** 4
    if p_lab < 2.0:
        return 1250.0 / (p_lab + 50.0) - 4.0 * (p_lab - 1.3) ** 2
    if p_lab < 6.0:
        return 77.0 / (p_lab + 1.5)
    logp = math.log(p_lab)
    return 11.9 + 26.9 * p_lab ** -1.21 + 0.169 * logp ** 2 - 1.85 * logp


def pin_elastic(s: float, m_pion: float = pion_mass) -> float:
    p_lab = max(plab_from_s(s, m_pion, nucleon_mass), 0.05)
    logp = math.log(p_lab)
    return 1.76 + 11.2 * p_lab ** -0.64 + 0.043 * logp ** 2


def ppbar_total(s: float) -> float:
    p_lab = plab_from_s(s)
    if p_lab < 0.3:
        return 271.6 * math.exp(-1.1 * p_lab ** 2)
    if p_lab < 5.0:
        return 75.0 + 43.1 / p_lab + 2.6 / p_lab ** 2 - 3.9 * p_lab
    return pdg_high_energy(s, nucleon_mass, nucleon_mass, "pp", +1)


def ppbar_elastic(s: float) -> float:
    p_lab = plab_from_s(s)
    if p_lab < 0.3:
        return 78.6
    if p_lab < 5.0:
        return 31.6 + 18.3 / p_lab - 1.1 / p_lab ** 2 - 3.8 * p_lab
    logp = math.log(p_lab)
    return 10.2 + 52.7 * p_lab ** -1.16 + 0.125 * logp ** 2 - 1.28 * logp


class CrossSectionParametrization:
    """
    Default cross-section service. Subclass and override single methods to
    plug in other fits; the scatter action only calls the public methods.
    """

    # N N -> N Delta(1232), isospin-1 cross section saturation value (mb)
    nn_to_ndelta_max = 24.0
    meson_meson_elastic = 5.0
    meson_baryon_elastic = 10.0

    def __init__(self, species: Optional[ParticleTypeDatabase] = None):
        self.species = species or default_database()

    def elastic(self, type_a: ParticleType, type_b: ParticleType, sqrt_s: float) -> float:
        s = sqrt_s * sqrt_s
        if type_a.is_baryon and type_b.is_baryon:
            if type_a.antiparticle_sign * type_b.antiparticle_sign < 0:
                return ppbar_elastic(s)
            return pp_elastic(s)
        if type_a.is_baryon != type_b.is_baryon:
            meson = type_b if type_a.is_baryon else type_a
            if meson.is_pion:
                return pin_elastic(s)
            return self.meson_baryon_elastic
        return self.meson_meson_elastic

    def high_energy(self, type_a: ParticleType, type_b: ParticleType, sqrt_s: float) -> float:
        """Total cross section at high energies, used for string excitation."""
        s = sqrt_s * sqrt_s
        m_a, m_b = type_a.mass, type_b.mass
        if type_a.is_baryon and type_b.is_baryon:
            sign = -1 if type_a.antiparticle_sign * type_b.antiparticle_sign > 0 else +1
            return pdg_high_energy(s, m_a, m_b, "pp", sign)
        if type_a.is_baryon != type_b.is_baryon:
            baryon, meson = (type_a, type_b) if type_a.is_baryon else (type_b, type_a)
            # pi+ p and pi- n follow the particle-particle sign, pi- p and pi+ n the other
            orientation = meson.charge * baryon.isospin3 if meson.is_pion else 0.0
            if orientation > 0:
                return pdg_high_energy(s, m_a, m_b, "pip", -1)
            if orientation < 0:
                return pdg_high_energy(s, m_a, m_b, "pip", +1)
            plus = pdg_high_energy(s, m_a, m_b, "pip", -1)
            minus = pdg_high_energy(s, m_a, m_b, "pip", +1)
            return 0.5 * (plus + minus)
        pp = pdg_high_energy(s, m_a, m_b, "pp", -1)
        return pp * _quark_count(type_a) * _quark_count(type_b) / 9.0

    def total(self, type_a: ParticleType, type_b: ParticleType, sqrt_s: float) -> float:
        if (type_a.is_nucleon and type_b.is_nucleon
                and type_a.antiparticle_sign != type_b.antiparticle_sign):
            return ppbar_total(sqrt_s * sqrt_s)
        return self.high_energy(type_a, type_b, sqrt_s)

    def ppbar_total(self, sqrt_s: float) -> float:
        return ppbar_total(sqrt_s * sqrt_s)

    def ppbar_elastic(self, sqrt_s: float) -> float:
        return ppbar_elastic(sqrt_s * sqrt_s)

    def string_hard(self, type_a: ParticleType, type_b: ParticleType, sqrt_s: float) -> float:
        """Hard (multi-parton) cross section, growing as ln(s)^3."""
        log_s = math.log(sqrt_s * sqrt_s)
        if log_s <= 0.0:
            return 0.0
        scale = _quark_count(type_a) * _quark_count(type_b) / 9.0
        return 0.04 * scale * log_s ** 3

    # -----------------------------
    # Inelastic 2 -> 2
    # -----------------------------
    def two_to_two(self, type_a: ParticleType, type_b: ParticleType, sqrt_s: float,
                   included: IncludedReactions) -> List[Tuple[Tuple[ParticleType, ParticleType], float]]:
        """Inelastic two-body channels ((type_c, type_d), sigma) for the pair."""
        channels = []
        if IncludedReactions.NN_TO_NR in included:
            channels.extend(self._nn_to_ndelta(type_a, type_b, sqrt_s))
        return channels

    def _nn_to_ndelta(self, type_a, type_b, sqrt_s):
        if not (type_a.is_nucleon and type_b.is_nucleon):
            return []
        if type_a.antiparticle_sign != type_b.antiparticle_sign:
            return []
        sign = type_a.antiparticle_sign
        nucleons = [t for t in self.species.list_all() if t.is_nucleon and t.antiparticle_sign == sign]
        deltas = [t for t in self.species.list_all()
                  if t.family == ("Delta" if sign > 0 else "Deltabar")]
        if not deltas:
            return []
        threshold = nucleon_mass + deltas[0].min_mass
        if sqrt_s <= threshold:
            return []
        q2 = (sqrt_s - threshold) ** 2
        sigma_i1 = self.nn_to_ndelta_max * q2 / (q2 + 0.02)

        i3_in = type_a.isospin3 + type_b.isospin3
        weight_in = clebsch_gordan_sqr(type_a.isospin, type_a.isospin3,
                                       type_b.isospin, type_b.isospin3, 1.0, i3_in)
        channels = []
        for nucleon in nucleons:
            for delta in deltas:
                if nucleon.charge + delta.charge != type_a.charge + type_b.charge:
                    continue
                weight_out = clebsch_gordan_sqr(nucleon.isospin, nucleon.isospin3,
                                                delta.isospin, delta.isospin3, 1.0, i3_in)
                xs = sigma_i1 * weight_in * weight_out
                if xs > 0.0:
                    channels.append(((nucleon, delta), xs))
        logger.debug(f"{type_a.name} {type_b.name} -> N Delta channels: {len(channels)}")
        return channels
