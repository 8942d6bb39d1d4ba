"""HadronX: binary scatter actions for hadronic transport."""

from .channels import ChannelList, CollisionBranch, ProcessType, choose_channel, threshold_filter
from .config import CollisionConfig, IncludedReactions, NNbarTreatment
from .errors import (
    ChannelSelectionError,
    ConfigurationError,
    InvalidResonanceFormation,
    InvalidScatterAction,
    KinematicsError,
    StringRetryExhausted,
    UninitializedStringProcess,
)
from .kinematics import FourVector
from .parametrizations import CrossSectionParametrization
from .particles import ParticleData, ParticleType, ParticleTypeDatabase, default_database
from .scatter_action import ScatterAction
from .strings import HardStringGenerator, PhaseSpaceStringProcess, StringProcess

__version__ = "0.1.0"
