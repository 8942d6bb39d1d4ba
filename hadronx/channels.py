"""
Collision channels and weighted channel selection.

A channel (``CollisionBranch``) is a list of outgoing species, a cross section
used as sampling weight, and the process kind that generates its final state.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .errors import ChannelSelectionError
from .particles import ParticleType

logger = logging.getLogger(__name__)


class ProcessType(Enum):
    """Microscopic process kind of a collision channel."""

    NONE = 0
    ELASTIC = 1
    TWO_TO_ONE = 2
    TWO_TO_TWO = 3
    STRING_SOFT = 41
    STRING_HARD = 42

    def __str__(self):
        return self.name


@dataclass
class CollisionBranch:
    """One outgoing channel: species, weight (mb) and process kind."""

    particle_types: Tuple[ParticleType, ...]
    weight: float
    process_type: ProcessType

    @classmethod
    def string(cls, weight: float, process_type: ProcessType) -> "CollisionBranch":
        """String channels have no fixed list of outgoing species."""
        return cls((), weight, process_type)

    def __repr__(self):
        names = " ".join(t.name for t in self.particle_types) or "string"
        return f"CollisionBranch({self.process_type}: {names}, {self.weight:.6g} mb)"


@dataclass
class ChannelList:
    """
    Channels with a running total of their weights.

    Channels are only added through ``add``/``extend`` so that ``total_weight``
    always equals the sum of the held weights. Non-positive weights are dropped.
    """

    branches: List[CollisionBranch] = field(default_factory=list)
    total_weight: float = 0.0

    def add(self, branch: Optional[CollisionBranch]) -> None:
        if branch is None or not branch.weight > 0.0:
            return
        self.branches.append(branch)
        self.total_weight += branch.weight

    def extend(self, branches: Iterable[CollisionBranch]) -> None:
        for branch in branches:
            self.add(branch)

    def __iter__(self) -> Iterator[CollisionBranch]:
        return iter(self.branches)

    def __len__(self) -> int:
        return len(self.branches)

    def weights(self) -> np.ndarray:
        return np.array([b.weight for b in self.branches], dtype=float)


ChannelFilter = Callable[[ChannelList, float], ChannelList]


def choose_channel(channels: ChannelList, rng: Optional[np.random.Generator] = None) -> CollisionBranch:
    """
    Draw one channel with probability weight / total_weight.

    The draw r is uniform in [0, total); the first channel whose cumulative
    upper bound strictly exceeds r is returned.
    """
    rng = rng or np.random.default_rng()
    total = channels.total_weight
    if len(channels) == 0 or total <= 0.0:
        raise ChannelSelectionError(
            f"Cannot choose a channel from {len(channels)} channels with total weight {total}"
        )
    r = rng.uniform(0.0, total)
    cumulative = 0.0
    for branch in channels:
        cumulative += branch.weight
        if r < cumulative:
            return branch
    # only reachable through rounding when the total was not accumulated in order
    logger.warning(f"Channel draw {r} beyond cumulative weight {cumulative}; using last channel")
    return channels.branches[-1]


# -----------------------------
# Potential-based channel filter
# -----------------------------
def threshold_filter(potential: Callable[[ParticleType], float],
                     incoming: Tuple[ParticleType, ParticleType]) -> ChannelFilter:
    """
    Build a filter that drops channels which cannot be reached once each
    species is shifted by ``potential(type)`` (GeV). The available energy is
    sqrt(s) plus the incoming shifts minus the outgoing shifts; it must exceed
    the sum of the outgoing minimal masses. String channels pass unchanged.
    """
    shift_in = sum(potential(t) for t in incoming)

    def _filter(channels: ChannelList, sqrt_s: float) -> ChannelList:
        kept = ChannelList()
        for branch in channels:
            if not branch.particle_types:
                kept.add(branch)
                continue
            available = sqrt_s + shift_in - sum(potential(t) for t in branch.particle_types)
            needed = sum(t.min_mass for t in branch.particle_types)
            if available > needed:
                kept.add(branch)
            else:
                logger.debug(f"Channel {branch} removed by potential threshold "
                             f"({available:.4f} <= {needed:.4f} GeV)")
        return kept

    return _filter
