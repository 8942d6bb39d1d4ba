import argparse

import numpy as np
import matplotlib.pyplot as plt

from hadronx.config import CollisionConfig
from hadronx.kinematics import FourVector
from hadronx.parametrizations import CrossSectionParametrization
from hadronx.particles import ParticleData, ParticleTypeDatabase
from hadronx.scatter_action import ScatterAction
from hadronx.strings import PhaseSpaceStringProcess


def channel_cross_sections(pdg_a, pdg_b, energies, config):
    """Cross section per process kind (mb) on a grid of sqrt(s)."""
    species = ParticleTypeDatabase()
    parametrization = CrossSectionParametrization(species)
    strings = PhaseSpaceStringProcess(species)
    rng = np.random.default_rng(1)
    type_a, type_b = species.find(pdg_a), species.find(pdg_b)

    curves = {}
    for i, sqrt_s in enumerate(energies):
        # pair at rest in the CM frame, only the invariants matter here
        e_a = (sqrt_s ** 2 + type_a.mass ** 2 - type_b.mass ** 2) / (2 * sqrt_s)
        p = np.sqrt(max(e_a ** 2 - type_a.mass ** 2, 0.0))
        a = ParticleData(type_a, momentum=FourVector(e_a, 0.0, 0.0, p))
        b = ParticleData(type_b, momentum=FourVector(sqrt_s - e_a, 0.0, 0.0, -p))
        action = ScatterAction(a, b, 0.0, species=species, parametrization=parametrization,
                               rng=rng, string_process=strings, hard_generator=strings)
        action.add_all_processes(config)
        for branch in action.collision_channels:
            key = str(branch.process_type)
            curves.setdefault(key, np.zeros(len(energies)))[i] += branch.weight
    return curves


def main():
    parser = argparse.ArgumentParser(description="Channel cross sections versus sqrt(s)")
    parser.add_argument("--a", type=int, default=211)
    parser.add_argument("--b", type=int, default=2212)
    parser.add_argument("--min", type=float, default=1.1)
    parser.add_argument("--max", type=float, default=3.0)
    parser.add_argument("--points", type=int, default=120)
    args = parser.parse_args()

    energies = np.linspace(args.min, args.max, args.points)
    curves = channel_cross_sections(args.a, args.b, energies, CollisionConfig())

    plt.figure(figsize=(7, 5))
    total = np.zeros(len(energies))
    for kind, xs in sorted(curves.items()):
        plt.plot(energies, xs, label=kind)
        total += xs
    plt.plot(energies, total, 'k--', label='total')

    plt.xlabel(r'$\sqrt{s}$ [GeV]')
    plt.ylabel(r'$\sigma$ [mb]')
    plt.title(f'Channel cross sections: {args.a} + {args.b}')
    plt.grid(alpha=0.3)
    plt.legend()
    plt.tight_layout()
    plt.show()

if __name__ == "__main__":
    main()
