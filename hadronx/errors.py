"""Exceptions raised by scatter actions and their collaborators."""


class InvalidScatterAction(RuntimeError):
    """A final state was requested for a process kind that cannot produce one."""


class InvalidResonanceFormation(InvalidScatterAction):
    """A 2->1 channel was chosen with other than one outgoing particle."""


class UninitializedStringProcess(RuntimeError):
    """String excitation is needed but no string process was provided."""


class StringRetryExhausted(RuntimeError):
    """The soft string sub-process did not succeed within its retry budget."""


class ChannelSelectionError(ZeroDivisionError):
    """A channel was drawn from an empty list or from zero total weight."""


class KinematicsError(ValueError):
    """Kinematically forbidden request (below threshold, superluminal boost)."""


class ConfigurationError(ValueError):
    """Invalid collision configuration."""
