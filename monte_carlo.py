#!/usr/bin/env python3
"""
Monte Carlo driver script for HadronX

Performs repeated binary collisions of one species pair at fixed sqrt(s) and
reports how often each process kind and channel was chosen, together with a
conservation summary.

Examples:
    python monte_carlo.py --a 211 --b 2212 --sqrts 1.232 --events 1000
    python monte_carlo.py --a 2212 --b 2212 --sqrts 10 --events 200 --seed 42 --output pp.csv
"""

import argparse
import csv
import logging
import math
from collections import Counter
from typing import Optional

import numpy as np

from hadronx.config import CollisionConfig, NNbarTreatment
from hadronx.conservation import check_scatter
from hadronx.errors import (
    ChannelSelectionError, ConfigurationError, InvalidScatterAction, KinematicsError,
    StringRetryExhausted, UninitializedStringProcess,
)
from hadronx.kinematics import FourVector, p_cm
from hadronx.parametrizations import CrossSectionParametrization
from hadronx.particles import ParticleData, ParticleTypeDatabase
from hadronx.scatter_action import ScatterAction
from hadronx.strings import PhaseSpaceStringProcess

logger = logging.getLogger("hadronx.monte_carlo")

EVENT_ERRORS = (InvalidScatterAction, UninitializedStringProcess, StringRetryExhausted,
                ChannelSelectionError, KinematicsError)


def make_incoming(species: ParticleTypeDatabase, pdg_a: int, pdg_b: int, sqrt_s: float,
                  frame: str = "cm"):
    """Pole-mass pair colliding head-on along z with the requested sqrt(s)."""
    type_a, type_b = species.find(pdg_a), species.find(pdg_b)
    if sqrt_s <= type_a.mass + type_b.mass:
        raise KinematicsError(
            f"sqrt(s)={sqrt_s} GeV is below the pair threshold {type_a.mass + type_b.mass:.4f} GeV"
        )
    p = p_cm(sqrt_s, type_a.mass, type_b.mass)
    a = ParticleData(type_a, position=FourVector(0.0, 0.0, 0.0, -0.5))
    b = ParticleData(type_b, position=FourVector(0.0, 0.3, 0.0, 0.5))
    a.set_momentum(type_a.mass, (0.0, 0.0, p))
    b.set_momentum(type_b.mass, (0.0, 0.0, -p))
    if frame == "fixed-target":
        # b at rest
        beta = np.array([0.0, 0.0, p / b.momentum.E])
        a.boost(beta)
        b.boost(beta)
    return a, b


def simulate_collisions(pdg_a: int, pdg_b: int, sqrt_s: float, n_events: int,
                        config: Optional[CollisionConfig] = None, seed: Optional[int] = None,
                        frame: str = "cm", verbose: bool = False) -> dict:
    """
    Run ``n_events`` independent scatter actions.

    Returns:
        Dict with keys: processes, channels, success, failed, total,
        violations, mean_cross_section, rows
    """
    config = config or CollisionConfig()
    rng = np.random.default_rng(seed)
    species = ParticleTypeDatabase()
    parametrization = CrossSectionParametrization(species)
    strings = PhaseSpaceStringProcess(species, config.string_formation_time, rng)

    processes = Counter()
    channels = Counter()
    violations = 0
    failed = 0
    cross_sections = []
    rows = []

    for i in range(n_events):
        incoming = make_incoming(species, pdg_a, pdg_b, sqrt_s, frame)
        action = ScatterAction.from_config(
            *incoming, 0.0, config,
            species=species, parametrization=parametrization, rng=rng,
            string_process=strings, hard_generator=strings,
        )
        try:
            action.add_all_processes(config)
            cross_sections.append(action.cross_section())
            outgoing = action.generate_final_state()
        except EVENT_ERRORS as e:
            logger.warning(f"Event {i + 1}/{n_events} failed: {e}")
            failed += 1
            continue

        processes[str(action.process_type)] += 1
        channels[" ".join(sorted(p.type.name for p in outgoing))] += 1
        diag = check_scatter(action.incoming_particles, outgoing)
        if not diag["conserved"]:
            violations += 1
            logger.warning(f"Event {i + 1}: conservation violated {diag}")
        for p in outgoing:
            rows.append((i, str(action.process_type), p.pdgcode, *p.momentum.to_tuple(),
                         p.formation_time, p.cross_section_scaling_factor))

        if verbose and (i + 1) % max(1, n_events // 10) == 0:
            logger.info(f"{i + 1}/{n_events} processed ({failed} failed)")

    success = n_events - failed
    return {
        "processes": processes,
        "channels": channels,
        "success": success,
        "failed": failed,
        "total": n_events,
        "violations": violations,
        "mean_cross_section": float(np.mean(cross_sections)) if cross_sections else math.nan,
        "rows": rows,
    }


def export_particles_to_csv(rows, filename):
    """Export outgoing particles to CSV."""
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["event", "process", "pdg", "E", "px", "py", "pz",
                         "formation_time", "xs_scaling"])
        writer.writerows(rows)
    print(f"📄 Exported {len(rows)} particles to {filename}")


def build_parser():
    parser = argparse.ArgumentParser(
        description="HadronX binary collision Monte Carlo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  python monte_carlo.py --a 211 --b 2212 --sqrts 1.232 --events 1000
  python monte_carlo.py --a 2212 --b -2212 --sqrts 2.5 --nnbar resonances
  python monte_carlo.py --a 2212 --b 2212 --sqrts 10 --config collision.yaml --output pp.csv"""
    )
    parser.add_argument("--a", type=int, required=True, help="PDG code of the first particle")
    parser.add_argument("--b", type=int, required=True, help="PDG code of the second particle")
    parser.add_argument("--sqrts", type=float, required=True, help="CM energy in GeV")
    parser.add_argument("--events", type=int, default=100, help="Number of collisions (default 100)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (optional)")
    parser.add_argument("--frame", choices=["cm", "fixed-target"], default="cm",
                        help="Computational frame of the incoming pair")
    parser.add_argument("--config", type=str, help="YAML file with a Collision_Term section")
    parser.add_argument("--no-strings", action="store_true", help="Disable string excitation")
    parser.add_argument("--isotropic", action="store_true", help="Isotropic elastic angles")
    parser.add_argument("--nnbar", choices=[t.value for t in NNbarTreatment],
                        help="NNbar annihilation treatment")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--output", type=str, help="Export outgoing particles to CSV file")
    return parser


def config_from_args(args) -> CollisionConfig:
    config = CollisionConfig.from_yaml(args.config) if args.config else CollisionConfig()
    if args.no_strings:
        config.strings = False
    if args.isotropic:
        config.isotropic = True
    if args.nnbar:
        config.nnbar_treatment = NNbarTreatment(args.nnbar)
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        print(f"❌ Invalid configuration: {e}")
        return 2

    print("\n" + "=" * 60)
    print("🔥 HadronX Binary Collision Monte Carlo")
    print("=" * 60)
    print(f"Incoming pair    : {args.a} + {args.b}")
    print(f"sqrt(s)          : {args.sqrts} GeV")
    print(f"Number of Events : {args.events}")
    print(f"Random Seed      : {args.seed if args.seed is not None else 'None'}")
    print(f"Frame            : {args.frame}")
    if args.output:
        print(f"CSV Output       : {args.output}")
    print("=" * 60 + "\n")

    try:
        results = simulate_collisions(args.a, args.b, args.sqrts, args.events, config,
                                      seed=args.seed, frame=args.frame, verbose=args.verbose)
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    print("\n" + "=" * 60)
    print("✅ Generation Complete")
    print("=" * 60)
    print(f"Successful events : {results['success']}/{results['total']}")
    print(f"Failed events     : {results['failed']}")
    print(f"Total xs (mean)   : {results['mean_cross_section']:.4f} mb")
    print("\nProcess kinds:")
    for kind, count in results["processes"].most_common():
        print(f"  • {kind:12s}: {count:6d} ({count / max(results['success'], 1):.2%})")
    print("\nTop final states:")
    for channel, count in results["channels"].most_common(10):
        print(f"  • {channel:40s}: {count:6d}")
    print("\nConservation (4-momentum 1e-6, charge, baryon number):")
    print(f"  Violations: {results['violations']}/{results['success']}")
    print("=" * 60 + "\n")

    if args.output:
        export_particles_to_csv(results["rows"], args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
