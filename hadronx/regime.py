"""
Choice between resonance/2->2 physics and string excitation.

Inside a transition window around a pair-dependent center energy the string
probability rises smoothly from 0 to 1; below the window resonance physics is
used, above it strings.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from .particles import ParticleType

logger = logging.getLogger(__name__)

# (center, half width) of the transition windows in GeV
NN_WINDOW = (4.5, 0.5)
PIN_WINDOW = (2.05, 0.15)


def string_probability(sqrt_s: float, center: float, half_width: float) -> float:
    if sqrt_s >= center + half_width:
        return 1.0
    if sqrt_s <= center - half_width:
        return 0.0
    return 0.5 + 0.5 * math.sin(0.5 * math.pi * (sqrt_s - center) / half_width)


def mixed_regime_window(type_a: ParticleType, type_b: ParticleType) -> Optional[Tuple[float, float]]:
    """Transition window of the pair, or None if the pair never forms strings."""
    if type_a.is_nucleon and type_b.is_nucleon:
        return NN_WINDOW
    if (type_a.is_nucleon and type_b.is_pion) or (type_a.is_pion and type_b.is_nucleon):
        return PIN_WINDOW
    return None


def decide_string_regime(type_a: ParticleType, type_b: ParticleType, sqrt_s: float,
                         strings_enabled: bool,
                         rng: Optional[np.random.Generator] = None) -> bool:
    """
    True if the collision is treated by string excitation.

    Only nucleon-nucleon and pion-nucleon pairs may use strings. Inside the
    window a single uniform draw decides.
    """
    if not strings_enabled:
        return False
    window = mixed_regime_window(type_a, type_b)
    if window is None:
        return False
    center, half_width = window
    probability = string_probability(sqrt_s, center, half_width)
    if probability >= 1.0:
        return True
    if probability <= 0.0:
        return False
    rng = rng or np.random.default_rng()
    use_strings = rng.uniform(0.0, 1.0) < probability
    logger.debug(f"Mixed regime at sqrt(s)={sqrt_s:.4f} GeV: P(string)={probability:.4f}, "
                 f"strings={use_strings}")
    return use_strings


def reject_nn_elastic(type_a: ParticleType, type_b: ParticleType, sqrt_s: float,
                      low_snn_cut: float) -> bool:
    """Elastic NN (not NNbar) collisions below ``low_snn_cut`` are dropped."""
    return (type_a.is_nucleon and type_b.is_nucleon
            and type_a.antiparticle_sign == type_b.antiparticle_sign
            and sqrt_s < low_snn_cut)
