"""
Exception hierarchy for the shade-evo optimization engine.
"""


class OptimizationError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(OptimizationError, ValueError):
    """
    Invalid parameter specs, objectives, constraints or optimizer settings.

    Raised at construction time; a run never starts with a bad configuration.
    """


class EvaluationError(OptimizationError):
    """The external fitness function failed for one design."""

    def __init__(self, message: str, design=None):
        super().__init__(message)
        self.design = design


class CancellationError(OptimizationError):
    """Raised by a fitness function to request a clean stop of the run."""


class CheckpointError(OptimizationError):
    """A checkpoint is structurally invalid or does not match the live configuration."""
