# conservation.py
# Conservation diagnostics for scatter actions: four-momentum and the
# additive quantum numbers (charge, baryon number, strangeness).
from typing import Dict, Sequence

from .kinematics import FourVector, sum_four_vectors
from .particles import ParticleData


def check_energy_momentum(initial_vectors: Sequence[FourVector],
                          final_vectors: Sequence[FourVector], tol: float = 1e-6) -> Dict:
    """Return diagnostic dict for full 4-momentum conservation.

    Returns dict with deltas for energy and momentum components and a
    boolean 'conserved' key summarizing result within tolerance.

    Examples
    --------
    >>> p_in = [FourVector(6, 3, 0, 0), FourVector(6, -3, 0, 0)]
    >>> p_out = [FourVector(6, 0, 3, 0), FourVector(6, 0, -3, 0)]
    >>> check_energy_momentum(p_in, p_out)['conserved']
    True
    """
    total_in = sum_four_vectors(initial_vectors)
    total_out = sum_four_vectors(final_vectors)
    delta = total_in - total_out
    conserved = all(abs(d) < tol for d in delta.to_tuple())
    return {
        'conserved': conserved,
        'deltaE': delta.E,
        'deltaPx': delta.px,
        'deltaPy': delta.py,
        'deltaPz': delta.pz,
        'E_initial': total_in.E,
        'E_final': total_out.E,
    }


def check_conservation(initial_vectors, final_vectors, tol=1e-6) -> bool:
    """True if every component of the total four-momentum is conserved within tol."""
    return check_energy_momentum(initial_vectors, final_vectors, tol)['conserved']


def check_charge_baryon(incoming: Sequence[ParticleData], outgoing: Sequence[ParticleData]) -> Dict:
    """
    Differences of the summed charge, baryon number and strangeness.

    Strangeness is reported but not part of 'conserved': the neutral kaon
    recombination of hard strings may change it.
    """
    def totals(particles):
        return (sum(p.type.charge for p in particles),
                sum(p.type.baryon_number for p in particles),
                sum(p.type.strangeness for p in particles))

    q_in, b_in, s_in = totals(incoming)
    q_out, b_out, s_out = totals(outgoing)
    return {
        'conserved': q_in == q_out and b_in == b_out,
        'deltaQ': q_in - q_out,
        'deltaB': b_in - b_out,
        'deltaS': s_in - s_out,
    }


def check_scatter(incoming: Sequence[ParticleData], outgoing: Sequence[ParticleData],
                  tol: float = 1e-6) -> Dict:
    """Combined four-momentum and quantum-number diagnostics of one collision."""
    momentum = check_energy_momentum([p.momentum for p in incoming],
                                     [p.momentum for p in outgoing], tol)
    numbers = check_charge_baryon(incoming, outgoing)
    result = {**momentum, **numbers}
    result['conserved'] = momentum['conserved'] and numbers['conserved']
    return result
