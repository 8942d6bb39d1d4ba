"""
Kinematics helpers for HadronX.

Units: GeV and fm (natural units c = 1).

Boost convention: ``v.boost(beta)`` gives the vector of an object that picks
up the velocity ``beta``, i.e. it is the transformation from the rest frame of
a system moving with ``beta`` back to the frame in which it moves. Going from
the computational frame into the CM frame therefore uses ``boost(-beta_cm)``.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Tuple, List, Optional
import numpy as np

from .constants import really_small, twopi
from .errors import KinematicsError

# -----------------------------
# FourVector
# -----------------------------
@dataclass
class FourVector:
    """Four-vector (x0, x1, x2, x3); used for momenta and for positions."""

    E: float
    px: float
    py: float
    pz: float

    @property
    def p(self) -> np.ndarray:
        return np.array([self.px, self.py, self.pz], dtype=float)

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.p))

    def sqr(self) -> float:
        """Minkowski square with (+,-,-,-) signature."""
        return self.E * self.E - float(np.dot(self.p, self.p))

    @property
    def mass(self) -> float:
        return math.sqrt(max(self.sqr(), 0.0))

    def beta(self) -> np.ndarray:
        if self.E == 0.0:
            return np.zeros(3, dtype=float)
        return self.p / self.E

    def gamma(self) -> float:
        return gamma_factor(self.beta())

    def boost(self, beta: np.ndarray) -> "FourVector":
        p4 = np.array([self.E, self.px, self.py, self.pz], dtype=float)
        b = np.asarray(beta, dtype=float)
        boosted = lorentz_boost_array(p4, b)
        return FourVector(float(boosted[0]), float(boosted[1]), float(boosted[2]), float(boosted[3]))

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.E, self.px, self.py, self.pz)

    def __add__(self, other: "FourVector") -> "FourVector":
        return FourVector(self.E + other.E, self.px + other.px, self.py + other.py, self.pz + other.pz)

    def __sub__(self, other: "FourVector") -> "FourVector":
        return FourVector(self.E - other.E, self.px - other.px, self.py - other.py, self.pz - other.pz)

    def __mul__(self, factor: float) -> "FourVector":
        return FourVector(self.E * factor, self.px * factor, self.py * factor, self.pz * factor)

    __rmul__ = __mul__

    def __repr__(self) -> str:
        return f"FourVector(E={self.E:.6f}, px={self.px:.6f}, py={self.py:.6f}, pz={self.pz:.6f})"


def sum_four_vectors(vectors) -> FourVector:
    return sum(vectors, FourVector(0.0, 0.0, 0.0, 0.0))


# -----------------------------
# Lorentz boost
# -----------------------------
def lorentz_boost_array(p4: np.ndarray, beta: np.ndarray) -> np.ndarray:
    beta = np.asarray(beta, dtype=float)
    p4 = np.asarray(p4, dtype=float)
    beta2 = float(np.dot(beta, beta))
    if beta2 >= 1.0:
        raise KinematicsError("beta^2 < 1 required.")
    if beta2 <= 1e-18:
        return p4.copy()
    gamma = 1.0 / math.sqrt(1.0 - beta2)
    bp = float(np.dot(beta, p4[1:]))
    Eprime = gamma * (p4[0] + bp)
    factor = ((gamma - 1.0) * bp / beta2) + gamma * p4[0]
    pprime = p4[1:] + factor * beta
    return np.array([Eprime, pprime[0], pprime[1], pprime[2]], dtype=float)


def gamma_factor(beta: np.ndarray) -> float:
    beta2 = float(np.dot(beta, beta))
    if beta2 >= 1.0:
        raise KinematicsError("beta^2 < 1 required.")
    return 1.0 / math.sqrt(1.0 - beta2)


# -----------------------------
# Invariants
# -----------------------------
def mandelstam_s(p_a: FourVector, p_b: FourVector) -> float:
    return (p_a + p_b).sqr()


def mandelstam_t(p_a: FourVector, p_c: FourVector) -> float:
    """Squared four-momentum transfer between an incoming and an outgoing particle."""
    return (p_a - p_c).sqr()


def p_cm_sqr(sqrt_s: float, m1: float, m2: float) -> float:
    """Squared momentum of either particle in the CM frame of a two-body system."""
    s = sqrt_s * sqrt_s
    m_sum = m1 + m2
    m_diff = m1 - m2
    return (s - m_sum * m_sum) * (s - m_diff * m_diff) / (4.0 * s)


def p_cm(sqrt_s: float, m1: float, m2: float) -> float:
    psqr = p_cm_sqr(sqrt_s, m1, m2)
    return math.sqrt(psqr) if psqr > 0.0 else 0.0


def transverse_distance_sqr(p_a: FourVector, p_b: FourVector,
                            x_a: FourVector, x_b: FourVector) -> float:
    """
    UrQMD squared distance criterion (Bass et al. 1998, eq. 3.27), in the CM frame:

        d^2 = (x_a - x_b)^2 - ((x_a - x_b).(p_a - p_b))^2 / (p_a - p_b)^2

    Zero relative momentum means the pair never approaches; the plain
    squared separation is returned then.
    """
    to_cm = -(p_a + p_b).beta()
    mom_diff = p_a.boost(to_cm).p - p_b.boost(to_cm).p
    pos_diff = x_a.boost(to_cm).p - x_b.boost(to_cm).p
    dp2 = float(np.dot(mom_diff, mom_diff))
    dr2 = float(np.dot(pos_diff, pos_diff))
    if dp2 < really_small:
        return dr2
    dpdr = float(np.dot(pos_diff, mom_diff))
    return dr2 - dpdr * dpdr / dp2


# -----------------------------
# Directions
# -----------------------------
def isotropic_direction(rng: Optional[np.random.Generator] = None) -> np.ndarray:
    rng = rng or np.random.default_rng()
    u = rng.uniform(-1.0, 1.0)
    phi = rng.uniform(0.0, twopi)
    sint = math.sqrt(max(0.0, 1.0 - u * u))
    return np.array([sint * math.cos(phi), sint * math.sin(phi), u], dtype=float)


def direction_about_axis(axis: np.ndarray, cos_theta: float, phi: float) -> np.ndarray:
    """Unit vector at polar angle acos(cos_theta) and azimuth phi around ``axis``."""
    axis = np.asarray(axis, dtype=float)
    norm = float(np.linalg.norm(axis))
    if norm < really_small:
        axis = np.array([0.0, 0.0, 1.0])
    else:
        axis = axis / norm
    # any vector not parallel to the axis spans the transverse plane
    helper = np.array([1.0, 0.0, 0.0]) if abs(axis[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    e1 = np.cross(axis, helper)
    e1 /= np.linalg.norm(e1)
    e2 = np.cross(axis, e1)
    sint = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
    return cos_theta * axis + sint * (math.cos(phi) * e1 + math.sin(phi) * e2)


# -----------------------------
# Two-body final state
# -----------------------------
def two_body_momenta(sqrt_s: float, m1: float, m2: float,
                     direction: np.ndarray) -> List[FourVector]:
    """Back-to-back momenta of a two-body final state in its CM frame."""
    if sqrt_s + 1e-12 < m1 + m2:
        raise KinematicsError(
            f"Two-body final state kinematically forbidden: {m1:.4f} + {m2:.4f} > {sqrt_s:.4f}"
        )
    p_mag = p_cm(sqrt_s, m1, m2)
    p1 = p_mag * np.asarray(direction, dtype=float)
    E1 = math.sqrt(m1 * m1 + p_mag * p_mag)
    E2 = math.sqrt(m2 * m2 + p_mag * p_mag)
    return [
        FourVector(E1, float(p1[0]), float(p1[1]), float(p1[2])),
        FourVector(E2, float(-p1[0]), float(-p1[1]), float(-p1[2])),
    ]
