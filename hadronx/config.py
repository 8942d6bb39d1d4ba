"""Configuration of the collision term."""

from dataclasses import dataclass, fields
from enum import Enum, Flag
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml

from .errors import ConfigurationError


class IncludedReactions(Flag):
    """Families of 2->2 reactions that may enter the channel catalog."""

    NONE = 0
    ELASTIC = 1
    NN_TO_NR = 2
    ALL = 3

    @classmethod
    def parse(cls, value: Union[str, list, "IncludedReactions"]) -> "IncludedReactions":
        """Accept a flag, a name ("All", "NN_to_NR") or a list of names."""
        if isinstance(value, cls):
            return value
        names = [value] if isinstance(value, str) else list(value)
        result = cls.NONE
        for name in names:
            key = str(name).strip().upper()
            try:
                result |= cls[key]
            except KeyError:
                raise ConfigurationError(f"Unknown reaction family '{name}'") from None
        return result


class NNbarTreatment(Enum):
    """How nucleon-antinucleon annihilation is handled."""

    NO_ANNIHILATION = "no annihilation"
    RESONANCES = "resonances"
    STRINGS = "strings"


@dataclass
class CollisionConfig:
    """Switches and parameters of the binary collision term.

    Attributes:
        elastic_parameter: Constant elastic cross section in mb; a negative
            value selects the parametrized elastic cross section.
        two_to_one: Include resonance formation (2->1).
        included_2to2: Reaction families allowed in 2->2 channels.
        low_snn_cut: Elastic NN collisions below this sqrt(s) (GeV) are rejected.
        strings: Enable string excitation for NN and piN pairs.
        nnbar_treatment: Treatment of NNbar annihilation.
        isotropic: Sample elastic angles isotropically; otherwise NN elastic
            scattering uses the Cugnon angular distribution.
        string_formation_time: Formation time of string fragments in their
            rest frame (fm/c).
    """
    elastic_parameter: float = -1.0
    two_to_one: bool = True
    included_2to2: IncludedReactions = IncludedReactions.ALL
    low_snn_cut: float = 1.98
    strings: bool = True
    nnbar_treatment: NNbarTreatment = NNbarTreatment.NO_ANNIHILATION
    isotropic: bool = False
    string_formation_time: float = 1.0

    def __post_init__(self):
        self.included_2to2 = IncludedReactions.parse(self.included_2to2)
        if not isinstance(self.nnbar_treatment, NNbarTreatment):
            try:
                self.nnbar_treatment = NNbarTreatment(str(self.nnbar_treatment).lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown NNbar treatment '{self.nnbar_treatment}'"
                ) from None
        self._validate()

    def _validate(self) -> None:
        if self.low_snn_cut < 0:
            raise ConfigurationError(f"low_snn_cut must be non-negative, got {self.low_snn_cut}")
        if self.string_formation_time < 0:
            raise ConfigurationError(
                f"string_formation_time must be non-negative, got {self.string_formation_time}"
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "CollisionConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown collision configuration keys: {sorted(unknown)}")
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path], section: Optional[str] = "Collision_Term") -> "CollisionConfig":
        """Load from a YAML file, optionally from a named top-level section."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if section is not None and section in data:
            data = data[section]
        return cls.from_dict(data)
