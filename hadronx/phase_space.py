"""
Lorentz-invariant N-body phase space using the Raubold-Lynch algorithm.

Used by the reference string process to distribute hadron momenta at fixed
CM energy.

Units: GeV, c = 1
"""

from __future__ import annotations
import math
import numpy as np
from typing import List, Optional, Sequence, Tuple
from .kinematics import FourVector, isotropic_direction, p_cm
from .errors import KinematicsError


def generate_n_body(
    total_p4: FourVector,
    masses: Sequence[float],
    rng: Optional[np.random.Generator] = None,
) -> Tuple[List[FourVector], float]:
    """
    Split ``total_p4`` into len(masses) on-shell four-momenta.

    Parameters
    ----------
    total_p4 : FourVector
        Total four-momentum of the system (any frame)
    masses : sequence of float
        Final-state masses (GeV)
    rng : numpy Generator, optional

    Returns
    -------
    (momenta, weight)
        momenta: list of FourVector in the frame of ``total_p4``
        weight: Raubold-Lynch phase-space weight
    """
    rng = rng or np.random.default_rng()
    n = len(masses)

    if n < 2:
        raise KinematicsError("Need at least two final-state particles.")
    if any(m < 0 for m in masses):
        raise KinematicsError("All masses must be non-negative.")

    beta_total = total_p4.beta()
    M = total_p4.mass
    if M <= 0:
        raise KinematicsError("Invariant mass must be positive.")
    if sum(masses) + 1e-9 > M:
        raise KinematicsError(f"Kinematically forbidden: sum m={sum(masses):.4f} > M={M:.4f}")

    # Intermediate invariant masses M = M_0 > M_1 > ... > M_{n-1} = m_{n-1}
    virtual_masses = [M]
    remaining = float(sum(masses))
    for i in range(n - 2):
        remaining -= masses[i]
        m_max = virtual_masses[-1] - masses[i]
        m_min = remaining
        if m_min > m_max:
            raise KinematicsError(f"Phase space violation at step {i}")
        s = m_min ** 2 + rng.random() * (m_max ** 2 - m_min ** 2)
        virtual_masses.append(math.sqrt(s))
    virtual_masses.append(masses[-1])

    # Sequential two-body splittings, all expressed in the rest frame of total_p4
    momenta = []
    current = FourVector(M, 0.0, 0.0, 0.0)
    weight = 1.0
    for i in range(n - 1):
        m_parent = virtual_masses[i]
        m1 = masses[i]
        m2 = virtual_masses[i + 1]

        p_mag = p_cm(m_parent, m1, m2)
        weight *= p_mag / m_parent

        p_vec = p_mag * isotropic_direction(rng)
        E1 = math.sqrt(m1 ** 2 + p_mag ** 2)
        E2 = math.sqrt(m2 ** 2 + p_mag ** 2)

        beta = current.beta()
        momenta.append(FourVector(E1, p_vec[0], p_vec[1], p_vec[2]).boost(beta))
        current = FourVector(E2, -p_vec[0], -p_vec[1], -p_vec[2]).boost(beta)
    momenta.append(current)

    return [p.boost(beta_total) for p in momenta], weight
