"""
Binary scatter action: channel catalog, channel choice and final state.

A ``ScatterAction`` holds two incoming particles at a collision time. The
catalog methods fill its channel list with cross sections (mb), the final
state generator draws one channel and produces the outgoing particles in the
CM frame of the pair, then stamps production points and boosts them back to
the computational frame.

Units: GeV, fm, mb (c = 1)
"""

from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Tuple

import numpy as np

from .channels import ChannelFilter, ChannelList, CollisionBranch, ProcessType, choose_channel
from .config import CollisionConfig, IncludedReactions, NNbarTreatment
from .constants import (
    PDG_H1, PDG_K_LONG, PDG_K_SHORT, PDG_K_ZERO, PDG_NEUTRON, PDG_PROTON, PDG_RHO_ZERO,
    fm2_mb, hbarc, max_generator_seed, really_small, soft_string_max_tries,
    string_suppression_factor, twopi,
)
from .errors import (
    InvalidResonanceFormation, InvalidScatterAction, StringRetryExhausted,
    UninitializedStringProcess,
)
from .kinematics import (
    FourVector, direction_about_axis, gamma_factor, isotropic_direction, p_cm, p_cm_sqr,
    sum_four_vectors, transverse_distance_sqr, two_body_momenta,
)
from .parametrizations import CrossSectionParametrization, plab_from_s
from .particles import (
    ParticleData, ParticleType, ParticleTypeDatabase, default_database,
    detailed_balance_factor_RR,
)
from .regime import decide_string_regime, reject_nn_elastic
from .strings import HardStringGenerator, StringProcess

logger = logging.getLogger(__name__)


class ScatterAction:
    """
    Collision of two particles.

    Collaborators are passed explicitly: the species table, the cross-section
    parametrization, the random generator, the soft string process, the hard
    string generator and an optional channel filter. String collaborators are
    stateful and must not be shared between concurrently evaluated actions.
    """

    def __init__(
        self,
        incoming_a: ParticleData,
        incoming_b: ParticleData,
        time: float,
        isotropic: bool = False,
        string_formation_time: float = 1.0,
        species: Optional[ParticleTypeDatabase] = None,
        parametrization: Optional[CrossSectionParametrization] = None,
        rng: Optional[np.random.Generator] = None,
        string_process: Optional[StringProcess] = None,
        hard_generator: Optional[HardStringGenerator] = None,
        channel_filter: Optional[ChannelFilter] = None,
    ):
        self.incoming_particles: List[ParticleData] = [incoming_a, incoming_b]
        self.time_of_execution = time
        self.isotropic = isotropic
        self.string_formation_time = string_formation_time

        self.species = species or default_database()
        self.parametrization = parametrization or CrossSectionParametrization(self.species)
        self.rng = rng or np.random.default_rng()
        self.string_process = string_process
        self.hard_generator = hard_generator
        self.channel_filter = channel_filter

        self.collision_channels = ChannelList()
        self.outgoing_particles: List[ParticleData] = []
        self.process_type = ProcessType.NONE
        self.partial_cross_section = 0.0
        # cumulative [0, SD-AX, +SD-XB, +DD, +ND-soft, +ND-hard]
        self.string_sub_cross_sections_sum = np.zeros(6, dtype=float)

    @classmethod
    def from_config(cls, incoming_a: ParticleData, incoming_b: ParticleData, time: float,
                    config: CollisionConfig, **collaborators) -> "ScatterAction":
        return cls(incoming_a, incoming_b, time,
                   isotropic=config.isotropic,
                   string_formation_time=config.string_formation_time,
                   **collaborators)

    # -----------------------------
    # Channel bookkeeping
    # -----------------------------
    def add_collision(self, branch: Optional[CollisionBranch]) -> None:
        self.collision_channels.add(branch)

    def add_collisions(self, branches) -> None:
        self.collision_channels.extend(branches)

    def cross_section(self) -> float:
        """Sum of the cross sections of all channels added so far (mb)."""
        return self.collision_channels.total_weight

    def partial_weight(self) -> float:
        """Cross section of the chosen channel."""
        return self.partial_cross_section

    # -----------------------------
    # Kinematics of the pair
    # -----------------------------
    @property
    def type_a(self) -> ParticleType:
        return self.incoming_particles[0].type

    @property
    def type_b(self) -> ParticleType:
        return self.incoming_particles[1].type

    def total_momentum(self) -> FourVector:
        return sum_four_vectors(p.momentum for p in self.incoming_particles)

    def beta_cm(self) -> np.ndarray:
        return self.total_momentum().beta()

    def gamma_cm(self) -> float:
        return gamma_factor(self.beta_cm())

    def mandelstam_s(self) -> float:
        return self.total_momentum().sqr()

    def sqrt_s(self) -> float:
        return math.sqrt(max(self.mandelstam_s(), 0.0))

    def cm_momentum(self) -> float:
        a, b = self.incoming_particles
        return p_cm(self.sqrt_s(), a.effective_mass, b.effective_mass)

    def cm_momentum_sqr(self) -> float:
        a, b = self.incoming_particles
        return p_cm_sqr(self.sqrt_s(), a.effective_mass, b.effective_mass)

    def transverse_distance_sqr(self) -> float:
        a, b = self.incoming_particles
        d2 = transverse_distance_sqr(a.momentum, b.momentum, a.position, b.position)
        logger.debug(f"Transverse distance^2 of {a.type.name} {b.type.name}: {d2:.6f} fm^2")
        return d2

    def get_interaction_point(self) -> FourVector:
        a, b = self.incoming_particles
        return (a.position + b.position) * 0.5

    # -----------------------------
    # Parametrized cross sections
    # -----------------------------
    def elastic_parametrization(self) -> float:
        return self.parametrization.elastic(self.type_a, self.type_b, self.sqrt_s())

    def high_energy_cross_section(self) -> float:
        return self.parametrization.high_energy(self.type_a, self.type_b, self.sqrt_s())

    def total_cross_section(self) -> float:
        """Parametrized total cross section of the pair."""
        return self.parametrization.total(self.type_a, self.type_b, self.sqrt_s())

    def string_hard_cross_section(self) -> float:
        return self.parametrization.string_hard(self.type_a, self.type_b, self.sqrt_s())

    # -----------------------------
    # Channel catalog
    # -----------------------------
    def elastic_cross_section(self, elastic_parameter: float) -> CollisionBranch:
        if elastic_parameter >= 0.0:
            xs = elastic_parameter
        else:
            xs = self.elastic_parametrization()
        logger.debug(f"Elastic {self.type_a.name} {self.type_b.name}: {xs:.6g} mb")
        return CollisionBranch((self.type_a, self.type_b), xs, ProcessType.ELASTIC)

    def two_to_one_formation(self, type_resonance: ParticleType, sqrt_s: float,
                             cm_momentum_sqr: float) -> float:
        """Breit-Wigner cross section for a + b -> R."""
        type_a, type_b = self.type_a, self.type_b
        if type_resonance.charge != type_a.charge + type_b.charge:
            return 0.0
        if type_resonance.baryon_number != type_a.baryon_number + type_b.baryon_number:
            return 0.0
        if cm_momentum_sqr <= 0.0:
            return 0.0
        partial_width = type_resonance.partial_in_width(sqrt_s, *self.incoming_particles)
        if partial_width <= 0.0:
            return 0.0
        spin_factor = (2 * type_resonance.spin + 1) / ((2 * type_a.spin + 1) * (2 * type_b.spin + 1))
        sym_factor = 2 if type_a.pdgcode == type_b.pdgcode else 1
        return (spin_factor * sym_factor * 2.0 * math.pi * math.pi / cm_momentum_sqr
                * type_resonance.spectral_function(sqrt_s) * partial_width
                * hbarc * hbarc / fm2_mb)

    def resonance_cross_sections(self) -> List[CollisionBranch]:
        type_a, type_b = self.type_a, self.type_b
        sqrt_s = self.sqrt_s()
        pcm_sqr = self.cm_momentum_sqr()
        channels = []
        for type_resonance in self.species.list_all():
            if type_resonance.is_stable:
                continue
            # an unstable incoming species does not re-form itself
            if ((not type_a.is_stable and type_resonance.pdgcode == type_a.pdgcode)
                    or (not type_b.is_stable and type_resonance.pdgcode == type_b.pdgcode)):
                continue
            xs = self.two_to_one_formation(type_resonance, sqrt_s, pcm_sqr)
            if xs > really_small:
                channels.append(CollisionBranch((type_resonance,), xs, ProcessType.TWO_TO_ONE))
                logger.debug(f"{type_a.name} {type_b.name} -> {type_resonance.name} at "
                             f"sqrt(s)={sqrt_s:.4f} GeV with xs={xs:.6g} mb")
        return channels

    def two_to_two_cross_sections(self, included: IncludedReactions) -> List[CollisionBranch]:
        channels = []
        for (type_c, type_d), xs in self.parametrization.two_to_two(
                self.type_a, self.type_b, self.sqrt_s(), included):
            channels.append(CollisionBranch((type_c, type_d), xs, ProcessType.TWO_TO_TWO))
            logger.debug(f"{self.type_a.name} {self.type_b.name} -> {type_c.name} {type_d.name}: "
                         f"{xs:.6g} mb")
        return channels

    def nnbar_annihilation_cross_section(self) -> CollisionBranch:
        """N Nbar -> h1(1170) rho0; the remainder of the parametrized total."""
        xs = max(0.0, self.total_cross_section() - self.cross_section())
        logger.debug(f"NNbar annihilation cross section: {xs:.6g} mb")
        return CollisionBranch((self.species.find(PDG_H1), self.species.find(PDG_RHO_ZERO)),
                               xs, ProcessType.TWO_TO_TWO)

    def nnbar_creation_cross_section(self) -> List[CollisionBranch]:
        """rho0 h1(1170) -> N Nbar through detailed balance."""
        sqrt_s = self.sqrt_s()
        type_p = self.species.find(PDG_PROTON)
        type_pbar = self.species.find(-PDG_PROTON)
        if sqrt_s - 2.0 * type_p.mass < 0.0:
            return []
        xs = (detailed_balance_factor_RR(sqrt_s, self.cm_momentum(), self.type_a, self.type_b,
                                         type_p, type_pbar)
              * max(0.0, self.parametrization.ppbar_total(sqrt_s)
                    - self.parametrization.ppbar_elastic(sqrt_s)))
        logger.debug(f"NNbar creation cross section: {xs:.6g} mb")
        return [
            CollisionBranch((type_p, type_pbar), xs, ProcessType.TWO_TO_TWO),
            CollisionBranch((self.species.find(PDG_NEUTRON), self.species.find(-PDG_NEUTRON)),
                            xs, ProcessType.TWO_TO_TWO),
        ]

    def string_excitation_cross_sections(self) -> List[CollisionBranch]:
        """
        Soft and hard string channels. The string cross section is split into
        single diffractive (AX, XB), double diffractive and non-diffractive
        parts; the non-diffractive part is split again into soft and hard.
        """
        sig_string_all = max(0.0, self.high_energy_cross_section() - self.elastic_parametrization())
        logger.debug(f"String cross section: {sig_string_all:.6g} mb")
        channels: List[CollisionBranch] = []
        if sig_string_all <= 0.0:
            return channels
        if self.string_process is None:
            raise UninitializedStringProcess("String excitation requested without a string process")

        pdg_a = self.type_a.ground_state_code()
        pdg_b = self.type_b.ground_state_code()
        sd_ax, sd_xb, dd = self.string_process.cross_sections_diffractive(pdg_a, pdg_b, self.sqrt_s())
        single_diffr = sd_ax + sd_xb
        diffractive = single_diffr + dd
        nondiffractive_all = max(0.0, sig_string_all - diffractive)
        diffractive = sig_string_all - nondiffractive_all
        dd = max(0.0, diffractive - single_diffr)
        scale = (diffractive - dd) / single_diffr if single_diffr > 0.0 else 0.0
        sd_ax *= scale
        sd_xb *= scale
        assert abs(sd_ax + sd_xb + dd + nondiffractive_all - sig_string_all) < 1e-6

        hard_xsec = self.string_hard_cross_section()
        if nondiffractive_all > 0.0:
            nondiffractive_soft = nondiffractive_all * math.exp(-hard_xsec / nondiffractive_all)
        else:
            nondiffractive_soft = 0.0
        nondiffractive_hard = nondiffractive_all - nondiffractive_soft
        logger.debug(f"String sub cross sections [mb]: SD AX {sd_ax:.6g}, SD XB {sd_xb:.6g}, "
                     f"DD {dd:.6g}, ND soft {nondiffractive_soft:.6g}, "
                     f"ND hard {nondiffractive_hard:.6g}")

        sub = [sd_ax, sd_xb, dd, nondiffractive_soft, nondiffractive_hard]
        self.string_sub_cross_sections_sum = np.concatenate(([0.0], np.cumsum(sub)))

        sig_string_soft = sig_string_all - nondiffractive_hard
        if sig_string_soft > 0.0:
            channels.append(CollisionBranch.string(sig_string_soft, ProcessType.STRING_SOFT))
        if nondiffractive_hard > 0.0:
            channels.append(CollisionBranch.string(nondiffractive_hard, ProcessType.STRING_HARD))
        return channels

    def add_all_processes(self, config: Optional[CollisionConfig] = None) -> None:
        """Fill the channel list for this pair according to ``config``."""
        config = config or CollisionConfig()
        type_a, type_b = self.type_a, self.type_b
        sqrt_s = self.sqrt_s()

        use_strings = decide_string_regime(type_a, type_b, sqrt_s, config.strings, self.rng)
        if (IncludedReactions.ELASTIC in config.included_2to2
                and not reject_nn_elastic(type_a, type_b, sqrt_s, config.low_snn_cut)):
            self.add_collision(self.elastic_cross_section(config.elastic_parameter))
        if use_strings:
            self.add_collisions(self.string_excitation_cross_sections())
        else:
            if config.two_to_one:
                self.add_collisions(self.resonance_cross_sections())
            if config.included_2to2:
                self.add_collisions(self.two_to_two_cross_sections(config.included_2to2))

        # N Nbar <-> h1(1170) rho0, which ends in five pions
        if config.nnbar_treatment == NNbarTreatment.RESONANCES:
            if type_a.is_nucleon and type_b.pdgcode == -type_a.pdgcode:
                self.add_collision(self.nnbar_annihilation_cross_section())
            if {type_a.pdgcode, type_b.pdgcode} == {PDG_RHO_ZERO, PDG_H1}:
                self.add_collisions(self.nnbar_creation_cross_section())

        logger.debug(f"{len(self.collision_channels)} channels for {type_a.name} {type_b.name}, "
                     f"total {self.cross_section():.6g} mb")

    # -----------------------------
    # Final state
    # -----------------------------
    def generate_final_state(self) -> List[ParticleData]:
        logger.debug(f"Incoming particles: {self.incoming_particles}")
        if self.channel_filter is not None:
            self.collision_channels = self.channel_filter(self.collision_channels, self.sqrt_s())

        branch = choose_channel(self.collision_channels, self.rng)
        self.process_type = branch.process_type
        self.partial_cross_section = branch.weight
        self.outgoing_particles = [ParticleData(t) for t in branch.particle_types]
        logger.debug(f"Chosen channel: {branch}")

        middle_point = self.get_interaction_point()

        try:
            if self.process_type == ProcessType.ELASTIC:
                self.elastic_scattering()
            elif self.process_type == ProcessType.TWO_TO_ONE:
                self.resonance_formation()
            elif self.process_type == ProcessType.TWO_TO_TWO:
                self.inelastic_scattering()
            elif self.process_type == ProcessType.STRING_SOFT:
                self.string_excitation_soft()
            elif self.process_type == ProcessType.STRING_HARD:
                self.string_excitation_hard()
            else:
                raise InvalidScatterAction(
                    f"Invalid process type {self.process_type} was requested "
                    f"(PDGcode1={self.type_a.pdgcode}, PDGcode2={self.type_b.pdgcode})"
                )
        except Exception:
            # a failed final state leaves no half-built products behind
            self.outgoing_particles = []
            raise

        beta = self.beta_cm()
        for particle in self.outgoing_particles:
            if self.process_type != ProcessType.ELASTIC:
                particle.position = middle_point
            particle.boost_momentum(beta)
        return self.outgoing_particles

    def elastic_scattering(self) -> None:
        self.outgoing_particles = [p.copy() for p in self.incoming_particles]
        self.sample_angles((self.outgoing_particles[0].effective_mass,
                            self.outgoing_particles[1].effective_mass))

    def inelastic_scattering(self) -> None:
        self.sample_2body_phasespace()
        self._inherit_formation()

    def resonance_formation(self) -> None:
        if len(self.outgoing_particles) != 1:
            raise InvalidResonanceFormation(
                f"resonance_formation: Incorrect number of particles in final state: "
                f"{len(self.outgoing_particles)} ({self.type_a.pdgcode} + {self.type_b.pdgcode})"
            )
        # the CM frame of the pair is the rest frame of the resonance
        self.outgoing_particles[0].momentum = FourVector(self.sqrt_s(), 0.0, 0.0, 0.0)
        self._inherit_formation()
        logger.debug(f"Momentum of the new particle: {self.outgoing_particles[0].momentum}")

    def _inherit_formation(self) -> None:
        """
        Outgoing particles of 2->1 and 2->2 processes form at the later of the
        incoming formation times if that lies after the collision, and carry
        that particle's scaling factor; otherwise they form at the collision.
        """
        t0 = self.incoming_particles[0].formation_time
        t1 = self.incoming_particles[1].formation_time
        later = self.incoming_particles[0 if t0 > t1 else 1]
        if t0 > self.time_of_execution or t1 > self.time_of_execution:
            for particle in self.outgoing_particles:
                particle.formation_time = max(t0, t1)
                particle.cross_section_scaling_factor = later.cross_section_scaling_factor
        else:
            for particle in self.outgoing_particles:
                particle.formation_time = self.time_of_execution

    def _reconcile_unformed_incoming(self) -> None:
        """Carry the state of a not yet formed incoming particle into string products."""
        t0 = self.incoming_particles[0].formation_time
        t1 = self.incoming_particles[1].formation_time
        tform_in = max(t0, t1)
        if tform_in <= self.time_of_execution:
            return
        fin = self.incoming_particles[0 if t0 > t1 else 1].cross_section_scaling_factor
        for particle in self.outgoing_particles:
            particle.cross_section_scaling_factor *= fin
            if tform_in > particle.formation_time:
                particle.formation_time = tform_in

    # -------------------- Two-body kinematics --------------------

    def sample_angles(self, masses: Tuple[float, float]) -> None:
        """Back-to-back CM momenta for the two outgoing particles at fixed sqrt(s)."""
        sqrt_s = self.sqrt_s()
        m_a, m_b = masses
        pcm = p_cm(sqrt_s, m_a, m_b)
        a, b = self.outgoing_particles
        if (not self.isotropic and self.process_type == ProcessType.ELASTIC
                and a.type.is_nucleon and b.type.is_nucleon and pcm > 0.0):
            axis = self.incoming_particles[0].momentum.boost(-self.beta_cm()).p
            cos_theta = self._anisotropic_cos_theta(pcm, m_a, m_b)
            direction = direction_about_axis(axis, cos_theta, self.rng.uniform(0.0, twopi))
        else:
            direction = isotropic_direction(self.rng)
        mom_a, mom_b = two_body_momenta(sqrt_s, m_a, m_b, direction)
        a.momentum = mom_a
        b.momentum = mom_b
        logger.debug(f"Sampled CM momenta: {mom_a}, {mom_b}")

    def _anisotropic_cos_theta(self, pcm: float, m_a: float, m_b: float) -> float:
        """Cugnon parametrization, t sampled from exp(b t) on [-4 p^2, 0]."""
        p_lab = plab_from_s(self.mandelstam_s(), m_a, m_b)
        if p_lab < 2.0:
            p8 = p_lab ** 8
            b = 5.5 * p8 / (7.7 + p8)
        else:
            b = 5.334 + 0.67 * (p_lab - 2.0)
        t_min = -4.0 * pcm * pcm
        if b * abs(t_min) < really_small:
            return self.rng.uniform(-1.0, 1.0)
        lower = math.exp(b * t_min)
        t = math.log(lower + self.rng.uniform(0.0, 1.0) * (1.0 - lower)) / b
        return max(-1.0, min(1.0, 1.0 + t / (2.0 * pcm * pcm)))

    def sample_2body_phasespace(self) -> None:
        sqrt_s = self.sqrt_s()
        type_c, type_d = (p.type for p in self.outgoing_particles)
        m_c, m_d = self._sample_masses(type_c, type_d, sqrt_s)
        mom_c, mom_d = two_body_momenta(sqrt_s, m_c, m_d, isotropic_direction(self.rng))
        self.outgoing_particles[0].momentum = mom_c
        self.outgoing_particles[1].momentum = mom_d
        logger.debug(f"{type_c.name} {type_d.name} with masses {m_c:.4f} {m_d:.4f} GeV")

    def _sample_masses(self, type_c: ParticleType, type_d: ParticleType,
                       sqrt_s: float) -> Tuple[float, float]:
        if type_c.is_stable and type_d.is_stable:
            return type_c.mass, type_d.mass
        if type_d.is_stable:
            return type_c.sample_mass(sqrt_s, type_d.mass, self.rng), type_d.mass
        if type_c.is_stable:
            return type_c.mass, type_d.sample_mass(sqrt_s, type_c.mass, self.rng)
        m_c = type_c.sample_mass(sqrt_s, type_d.min_mass, self.rng)
        return m_c, type_d.sample_mass(sqrt_s, m_c, self.rng)

    # -------------------- Strings --------------------

    def string_excitation_soft(self) -> None:
        if self.string_process is None:
            raise UninitializedStringProcess("Soft string excitation without a string process")
        process = self.string_process
        process.init(self.incoming_particles, self.time_of_execution, self.gamma_cm())

        sums = self.string_sub_cross_sections_sum
        r = sums[4] * self.rng.uniform(0.0, 1.0)
        iproc = None
        for i in range(4):
            if sums[i] <= r < sums[i + 1]:
                iproc = i
                break
        if iproc is None:
            raise StringRetryExhausted("Soft string sub-process is not specified")

        attempts = {
            0: lambda: process.next_sdiff(True),
            1: lambda: process.next_sdiff(False),
            2: process.next_ddiff,
            3: process.next_ndiff_soft,
        }
        attempt = attempts[iproc]
        for _ in range(soft_string_max_tries):
            if attempt():
                break
        else:
            raise StringRetryExhausted(
                f"Too many tries in soft string excitation "
                f"({self.type_a.pdgcode} + {self.type_b.pdgcode}, sub-process {iproc})"
            )
        self.outgoing_particles = process.get_final_state()
        self._reconcile_unformed_incoming()
        self._log_string_momenta()

    def string_excitation_hard(self) -> None:
        if self.hard_generator is None:
            raise UninitializedStringProcess("Hard string excitation without a hard generator")
        generator = self.hard_generator
        sqrt_s = self.sqrt_s()
        seed = int(self.rng.integers(0, max_generator_seed))
        species_table: Dict[int, Tuple[float, float]] = {
            t.pdgcode: (t.mass, t.width) for t in self.species.list_all()
        }
        generator.configure(self.type_a.pdgcode, self.type_b.pdgcode, sqrt_s, seed, species_table)
        while not generator.next():
            pass

        produced = []
        for code, momentum in generator.final_hadrons():
            if code in (PDG_K_SHORT, PDG_K_LONG):
                code = PDG_K_ZERO if self.rng.uniform(0.0, 1.0) <= 0.5 else -PDG_K_ZERO
            produced.append(ParticleData(self.species.find(code), momentum=momentum))
        produced.sort(key=lambda p: abs(p.momentum.pz), reverse=True)

        # leading hadrons by |pz| keep part of the valence quark content
        if self.type_a.is_baryon or self.type_b.is_baryon:
            leading = (0.66, 0.34)
        else:
            leading = (0.5, 0.5)
        beta = self.beta_cm()
        for rank, particle in enumerate(produced):
            fraction = leading[rank] if rank < len(leading) else 0.0
            particle.cross_section_scaling_factor = string_suppression_factor * fraction
            gamma = particle.momentum.boost(beta).gamma()
            particle.formation_time = self.string_formation_time * gamma + self.time_of_execution
        self.outgoing_particles = produced
        self._reconcile_unformed_incoming()
        self._log_string_momenta()

    def _log_string_momenta(self) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            out = sum_four_vectors(p.momentum for p in self.outgoing_particles)
            logger.debug(f"Incoming momenta string: {self.total_momentum()}")
            logger.debug(f"Outgoing momenta string (CM): {out}")

    # -----------------------------
    # Representation
    # -----------------------------
    def __str__(self):
        incoming = ", ".join(p.type.name for p in self.incoming_particles)
        if not self.outgoing_particles:
            return f"Scatter of [{incoming}] (not performed)"
        outgoing = ", ".join(p.type.name for p in self.outgoing_particles)
        return f"Scatter of [{incoming}] to [{outgoing}]"
