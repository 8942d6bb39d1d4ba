"""
Particle species and particle instances for HadronX.

Species properties are imported from the CSV tables in ``hadronx/data`` into
an SQLite database (in memory unless a file is given) and read back into
immutable ``ParticleType`` objects, cached by PDG code.

Units: GeV, fm (c = 1).
"""

from __future__ import annotations
import copy
import csv
import logging
import math
import sqlite3
from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import integrate

from .constants import interaction_radius, really_small
from .errors import KinematicsError
from .kinematics import FourVector, p_cm, p_cm_sqr

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
PARTICLES_CSV = DATA_DIR / "particles.csv"
DECAYMODES_CSV = DATA_DIR / "decaymodes.csv"


# -------------------- Isospin --------------------

def _half_int(x2: int) -> int:
    """Return x for an integer 2x that is known to be even."""
    if x2 % 2:
        raise ValueError("angular momentum combination is not integral")
    return x2 // 2


def clebsch_gordan_sqr(j1: float, m1: float, j2: float, m2: float, J: float, M: float) -> float:
    """Squared Clebsch-Gordan coefficient <j1 m1 j2 m2 | J M> (Racah formula)."""
    tj1, tm1, tj2, tm2, tJ, tM = (int(round(2 * v)) for v in (j1, m1, j2, m2, J, M))
    if tm1 + tm2 != tM:
        return 0.0
    if tJ < abs(tj1 - tj2) or tJ > tj1 + tj2:
        return 0.0
    if abs(tm1) > tj1 or abs(tm2) > tj2 or abs(tM) > tJ:
        return 0.0
    f = math.factorial
    try:
        a = _half_int(tJ + tj1 - tj2)
        b = _half_int(tJ - tj1 + tj2)
        c = _half_int(tj1 + tj2 - tJ)
        d = _half_int(tj1 + tj2 + tJ) + 1
        jm = [_half_int(tJ + tM), _half_int(tJ - tM),
              _half_int(tj1 - tm1), _half_int(tj1 + tm1),
              _half_int(tj2 - tm2), _half_int(tj2 + tm2)]
        e1 = _half_int(tj1 - tm1)
        e2 = _half_int(tj2 + tm2)
        e3 = _half_int(tJ - tj2 + tm1)
        e4 = _half_int(tJ - tj1 - tm2)
    except ValueError:
        return 0.0

    prefactor = (tJ + 1) * f(a) * f(b) * f(c) / f(d)
    for x in jm:
        prefactor *= f(x)

    total = 0.0
    for k in range(0, c + 1):
        args = (k, c - k, e1 - k, e2 - k, e3 + k, e4 + k)
        if min(args) < 0:
            continue
        denom = 1
        for x in args:
            denom *= f(x)
        total += (-1) ** k / denom
    return prefactor * total * total


def blatt_weisskopf_sqr(x: float, L: int) -> float:
    """Squared Blatt-Weisskopf barrier factor for x = p * R."""
    x2 = x * x
    if L == 0:
        return 1.0
    if L == 1:
        return x2 / (1.0 + x2)
    if L == 2:
        x4 = x2 * x2
        return x4 / (9.0 + 3.0 * x2 + x4)
    raise ValueError(f"Blatt-Weisskopf factor not tabulated for L={L}")


# -------------------- Species --------------------

@dataclass(frozen=True)
class DecayMode:
    """Two-body decay mode of an isospin multiplet into two multiplets."""

    branching_ratio: float
    angular_momentum: int
    families: Tuple[str, str]
    pole_masses: Tuple[float, float]
    threshold: float

    def matches(self, family_a: str, family_b: str) -> bool:
        return sorted(self.families) == sorted((family_a, family_b))


@dataclass(frozen=True, eq=False)
class ParticleType:
    """Static properties of one particle species."""

    pdgcode: int
    name: str
    mass: float
    width: float
    spin: float
    isospin: float
    charge: int
    baryon_number: int
    strangeness: int
    family: str
    has_antiparticle: bool
    decay_modes: Tuple[DecayMode, ...] = ()
    min_mass: float = 0.0

    # -------------------- Classification --------------------

    @property
    def is_stable(self) -> bool:
        return self.width < really_small

    @property
    def is_nucleon(self) -> bool:
        return self.family in ("N", "Nbar")

    @property
    def is_pion(self) -> bool:
        return self.family == "pi"

    @property
    def is_baryon(self) -> bool:
        return self.baryon_number != 0

    @property
    def antiparticle_sign(self) -> int:
        if not self.has_antiparticle:
            return 1
        return 1 if self.pdgcode > 0 else -1

    @property
    def isospin3(self) -> float:
        """Third isospin component from Gell-Mann-Nishijima, Q = I3 + (B + S)/2."""
        return self.charge - 0.5 * (self.baryon_number + self.strangeness)

    def ground_state_code(self) -> int:
        """PDG code of the (anti)proton for baryons and of pi+ for mesons."""
        if self.baryon_number > 0:
            return 2212
        if self.baryon_number < 0:
            return -2212
        return 211

    # -------------------- Widths --------------------

    def partial_width(self, m: float, mode: DecayMode,
                      masses: Optional[Tuple[float, float]] = None) -> float:
        """Mass-dependent width of ``mode`` at resonance mass m."""
        m_a, m_b = masses if masses is not None else mode.pole_masses
        if m <= m_a + m_b or m <= mode.threshold:
            return 0.0
        p0 = p_cm(self.mass, *mode.pole_masses)
        if p0 <= 0.0:
            return 0.0
        p = p_cm(m, m_a, m_b)
        L = mode.angular_momentum
        barrier = 1.0
        if L > 0:
            barrier = (blatt_weisskopf_sqr(p * interaction_radius, L)
                       / blatt_weisskopf_sqr(p0 * interaction_radius, L))
        return self.width * mode.branching_ratio * (self.mass / m) * (p / p0) * barrier

    def total_width(self, m: float) -> float:
        if self.is_stable:
            return 0.0
        return sum(self.partial_width(m, mode) for mode in self.decay_modes)

    def partial_in_width(self, m: float, particle_a: "ParticleData",
                         particle_b: "ParticleData") -> float:
        """
        Width for the formation of this resonance from the given pair, including
        the isospin Clebsch-Gordan weight of the charge states involved.
        """
        type_a, type_b = particle_a.type, particle_b.type
        for mode in self.decay_modes:
            if not mode.matches(type_a.family, type_b.family):
                continue
            cg = clebsch_gordan_sqr(type_a.isospin, type_a.isospin3,
                                    type_b.isospin, type_b.isospin3,
                                    self.isospin, self.isospin3)
            if type_a.family == type_b.family and type_a.pdgcode != type_b.pdgcode:
                cg += clebsch_gordan_sqr(type_b.isospin, type_b.isospin3,
                                         type_a.isospin, type_a.isospin3,
                                         self.isospin, self.isospin3)
            if cg <= 0.0:
                return 0.0
            masses = (particle_a.effective_mass, particle_b.effective_mass)
            return cg * self.partial_width(m, mode, masses)
        return 0.0

    # -------------------- Spectral function --------------------

    def _breit_wigner(self, m: float) -> float:
        gamma = self.total_width(m)
        if gamma <= 0.0:
            return 0.0
        m2 = m * m
        return (2.0 / math.pi) * m2 * gamma / ((m2 - self.mass ** 2) ** 2 + m2 * gamma * gamma)

    @cached_property
    def spectral_norm(self) -> float:
        """Integral of the unnormalized Breit-Wigner above the minimal mass."""
        if self.is_stable:
            return 1.0
        # split at the pole so quad resolves the peak
        below, _ = integrate.quad(self._breit_wigner, self.min_mass, self.mass, limit=200)
        above, _ = integrate.quad(self._breit_wigner, self.mass, np.inf, limit=200)
        norm = below + above
        logger.debug(f"Spectral function norm of {self.name}: {norm:.6f}")
        return norm

    def spectral_function(self, m: float) -> float:
        """Normalized relativistic Breit-Wigner with mass-dependent width."""
        if self.is_stable or m <= self.min_mass:
            return 0.0
        return self._breit_wigner(m) / self.spectral_norm

    def sample_mass(self, sqrt_s: float, other_mass: float,
                    rng: Optional[np.random.Generator] = None) -> float:
        """
        Sample a mass from A(m) * p_cm(sqrt_s, m, other_mass), i.e. the spectral
        function weighted by two-body phase space next to a partner of mass
        ``other_mass``.
        """
        if self.is_stable:
            return self.mass
        rng = rng or np.random.default_rng()
        m_max = sqrt_s - other_mass
        if m_max <= self.min_mass:
            raise KinematicsError(
                f"Not enough energy to produce {self.name}: "
                f"sqrt(s)={sqrt_s:.4f}, partner mass={other_mass:.4f}"
            )

        # Proposals follow a Breit-Wigner with constant width, drawn through
        # its inverse CDF on [min_mass, m_max]. The acceptance ratio is the
        # target over that density.
        half_width = 0.5 * self.width
        u_min = math.atan((self.min_mass - self.mass) / half_width)
        u_max = math.atan((m_max - self.mass) / half_width)

        def proposal(u):
            return self.mass + half_width * math.tan(u)

        def ratio(m):
            target = self.spectral_function(m) * p_cm(sqrt_s, m, other_mass)
            return target * ((m - self.mass) ** 2 + half_width ** 2)

        envelope = 1.2 * max(ratio(proposal(u)) for u in np.linspace(u_min, u_max, 64))
        if envelope <= 0.0:
            raise KinematicsError(f"Vanishing spectral weight for {self.name} below {m_max:.4f}")
        while True:
            m = proposal(rng.uniform(u_min, u_max))
            value = ratio(m)
            if value > envelope:
                logger.warning(f"Mass sampling envelope of {self.name} exceeded at m={m:.4f}, "
                               f"sqrt(s)={sqrt_s:.4f}; raising it")
                envelope = 1.2 * value
            if rng.uniform(0.0, envelope) < value:
                return float(m)

    # -------------------- Representation --------------------

    def __repr__(self):
        return (f"ParticleType(name={self.name}, pdg={self.pdgcode}, mass={self.mass:.3f} GeV, "
                f"width={self.width:.3f} GeV, charge={self.charge:+d}, B={self.baryon_number:+d})")


def resonance_pair_momentum_integral(type_a: ParticleType, type_b: ParticleType,
                                     sqrt_s: float) -> float:
    """
    CM momentum averaged over the spectral functions of both species,
    integral A_a(m1) A_b(m2) p_cm(sqrt_s, m1, m2) dm1 dm2.
    """
    if type_a.is_stable and type_b.is_stable:
        return p_cm(sqrt_s, type_a.mass, type_b.mass)
    if type_b.is_stable:
        type_a, type_b = type_b, type_a
    if type_a.is_stable:
        upper = sqrt_s - type_a.mass
        if upper <= type_b.min_mass:
            return 0.0
        value, _ = integrate.quad(
            lambda m: type_b.spectral_function(m) * p_cm(sqrt_s, type_a.mass, m),
            type_b.min_mass, upper, limit=200,
        )
        return value
    upper_a = sqrt_s - type_b.min_mass
    if upper_a <= type_a.min_mass:
        return 0.0
    value, _ = integrate.dblquad(
        lambda m2, m1: (type_a.spectral_function(m1) * type_b.spectral_function(m2)
                        * p_cm(sqrt_s, m1, m2)),
        type_a.min_mass, upper_a,
        lambda m1: type_b.min_mass,
        lambda m1: sqrt_s - m1,
    )
    return value


def detailed_balance_factor_RR(sqrt_s: float, pcm: float,
                               type_a: ParticleType, type_b: ParticleType,
                               type_c: ParticleType, type_d: ParticleType) -> float:
    """
    Detailed-balance factor for a + b -> c + d where a and b may be resonances:
    spin and symmetry factors times p_cd^2 / (p_ab <p_ab>), with <p_ab> the
    spectral-function averaged momentum of the incoming pair.
    """
    spin_factor = ((2 * type_c.spin + 1) * (2 * type_d.spin + 1)
                   / ((2 * type_a.spin + 1) * (2 * type_b.spin + 1)))
    symmetry_factor = ((1 + (type_a.pdgcode == type_b.pdgcode))
                       / (1 + (type_c.pdgcode == type_d.pdgcode)))
    integral = resonance_pair_momentum_integral(type_a, type_b, sqrt_s)
    if pcm <= 0.0 or integral <= 0.0:
        return 0.0
    momentum_factor = p_cm_sqr(sqrt_s, type_c.mass, type_d.mass) / (pcm * integral)
    return spin_factor * symmetry_factor * momentum_factor


# -------------------- Database --------------------

class ParticleTypeDatabase:
    """
    Species table backed by SQLite, with in-memory caching of the built types.

    Without ``db_path`` the shipped CSV tables are imported into an in-memory
    database. A file database must provide ``particles`` and ``decaymodes``
    tables with the CSV columns.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path
        self._cache: Dict[int, ParticleType] = {}
        self._load()

    # -------------------- Loading --------------------

    @staticmethod
    def _import_csv(conn: sqlite3.Connection) -> None:
        cur = conn.cursor()
        cur.execute("""
            CREATE TABLE particles (
                pdg INTEGER PRIMARY KEY,
                name TEXT,
                mass REAL,
                width REAL,
                spin REAL,
                isospin REAL,
                charge INTEGER,
                baryon_number INTEGER,
                strangeness INTEGER,
                family TEXT,
                has_antiparticle INTEGER
            )
        """)
        cur.execute("""
            CREATE TABLE decaymodes (
                family TEXT,
                branching_ratio REAL,
                angular_momentum INTEGER,
                product_a TEXT,
                product_b TEXT
            )
        """)
        with open(PARTICLES_CSV, newline="", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                cur.execute(
                    "INSERT INTO particles VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (int(row["pdg"]), row["name"], float(row["mass"]), float(row["width"]),
                     float(row["spin"]), float(row["isospin"]), int(row["charge"]),
                     int(row["baryon_number"]), int(row["strangeness"]), row["family"],
                     int(row["has_antiparticle"])),
                )
        with open(DECAYMODES_CSV, newline="", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                cur.execute(
                    "INSERT INTO decaymodes VALUES (?, ?, ?, ?, ?)",
                    (row["family"], float(row["branching_ratio"]), int(row["angular_momentum"]),
                     row["product_a"], row["product_b"]),
                )
        conn.commit()

    def _load(self) -> None:
        if self.db_path is None:
            conn = sqlite3.connect(":memory:")
            self._import_csv(conn)
        else:
            conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM particles ORDER BY mass")
            particle_rows = [dict(r) for r in cur.fetchall()]
            cur.execute("SELECT * FROM decaymodes")
            mode_rows = [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()

        # Conjugate states of every species flagged with an antiparticle
        rows = []
        for r in particle_rows:
            rows.append(r)
            if r["has_antiparticle"]:
                anti = dict(r)
                anti["pdg"] = -r["pdg"]
                anti["name"] = f"anti-{r['name']}"
                anti["charge"] = -r["charge"]
                anti["baryon_number"] = -r["baryon_number"]
                anti["strangeness"] = -r["strangeness"]
                anti["family"] = r["family"] + "bar"
                rows.append(anti)

        self_conjugate = {r["family"] for r in particle_rows if not r["has_antiparticle"]}

        def conjugate(family: str) -> str:
            return family if family in self_conjugate else family + "bar"

        modes_by_family: Dict[str, List[dict]] = {}
        for m in mode_rows:
            modes_by_family.setdefault(m["family"], []).append(m)
            conj = conjugate(m["family"])
            if conj != m["family"]:
                anti = dict(m)
                anti["family"] = conj
                anti["product_a"] = conjugate(m["product_a"])
                anti["product_b"] = conjugate(m["product_b"])
                modes_by_family.setdefault(conj, []).append(anti)

        # Rows are sorted by mass, so decay products are built before their parents
        pole_mass: Dict[str, float] = {}
        min_mass: Dict[str, float] = {}
        for r in rows:
            modes = []
            for m in modes_by_family.get(r["family"], []) if r["width"] > 0 else []:
                fa, fb = m["product_a"], m["product_b"]
                if fa not in pole_mass or fb not in pole_mass:
                    raise ValueError(f"Decay products {fa}, {fb} of {r['name']} are unknown or heavier")
                modes.append(DecayMode(
                    branching_ratio=m["branching_ratio"],
                    angular_momentum=m["angular_momentum"],
                    families=(fa, fb),
                    pole_masses=(pole_mass[fa], pole_mass[fb]),
                    threshold=min_mass[fa] + min_mass[fb],
                ))
            lowest = min((mode.threshold for mode in modes), default=r["mass"])
            ptype = ParticleType(
                pdgcode=int(r["pdg"]),
                name=r["name"],
                mass=float(r["mass"]),
                width=float(r["width"]),
                spin=float(r["spin"]),
                isospin=float(r["isospin"]),
                charge=int(r["charge"]),
                baryon_number=int(r["baryon_number"]),
                strangeness=int(r["strangeness"]),
                family=r["family"],
                has_antiparticle=bool(r["has_antiparticle"]),
                decay_modes=tuple(modes),
                min_mass=lowest,
            )
            self._cache[ptype.pdgcode] = ptype
            pole_mass.setdefault(ptype.family, ptype.mass)
            min_mass.setdefault(ptype.family, lowest)

        logger.debug(f"Loaded {len(self._cache)} particle species")

    # -------------------- Lookup --------------------

    def find(self, pdgcode: int) -> ParticleType:
        try:
            return self._cache[pdgcode]
        except KeyError:
            raise ValueError(f"Particle with PDG code {pdgcode} not found in species table") from None

    def __contains__(self, pdgcode: int) -> bool:
        return pdgcode in self._cache

    def list_all(self) -> List[ParticleType]:
        return list(self._cache.values())

    def antiparticle(self, ptype: ParticleType) -> ParticleType:
        if not ptype.has_antiparticle:
            # self-conjugate multiplets: pi+ <-> pi-, rho+ <-> rho-
            for other in self._cache.values():
                if (other.family == ptype.family and other.charge == -ptype.charge):
                    return other
        return self.find(-ptype.pdgcode)


@lru_cache(maxsize=1)
def default_database() -> ParticleTypeDatabase:
    return ParticleTypeDatabase()


# -------------------- Particle instances --------------------

@dataclass
class ParticleData:
    """One particle: species, kinematics and formation state."""

    type: ParticleType
    momentum: FourVector = field(default_factory=lambda: FourVector(0.0, 0.0, 0.0, 0.0))
    position: FourVector = field(default_factory=lambda: FourVector(0.0, 0.0, 0.0, 0.0))
    formation_time: float = 0.0
    cross_section_scaling_factor: float = 1.0

    @classmethod
    def at_rest(cls, ptype: ParticleType, mass: Optional[float] = None) -> "ParticleData":
        m = ptype.mass if mass is None else mass
        return cls(ptype, momentum=FourVector(m, 0.0, 0.0, 0.0))

    @property
    def pdgcode(self) -> int:
        return self.type.pdgcode

    @property
    def is_baryon(self) -> bool:
        return self.type.is_baryon

    @property
    def effective_mass(self) -> float:
        return self.momentum.mass

    def set_momentum(self, mass: float, p: Sequence[float]) -> None:
        """Set an on-shell momentum from mass and three-momentum."""
        px, py, pz = (float(x) for x in p)
        E = math.sqrt(mass * mass + px * px + py * py + pz * pz)
        self.momentum = FourVector(E, px, py, pz)

    def boost_momentum(self, beta: np.ndarray) -> None:
        self.momentum = self.momentum.boost(beta)

    def boost(self, beta: np.ndarray) -> None:
        """Boost momentum and position together."""
        self.momentum = self.momentum.boost(beta)
        self.position = self.position.boost(beta)

    def copy(self) -> "ParticleData":
        return copy.copy(self)

    def __repr__(self):
        return (f"ParticleData({self.type.name}, p={self.momentum}, x={self.position}, "
                f"t_form={self.formation_time:.3f}, xs_scale={self.cross_section_scaling_factor:.3f})")
