"""Custom exception hierarchy for loan-recon."""


class ReconError(Exception):
    """Base exception for all loan-recon errors."""


class ContractViolation(ReconError, ValueError):
    """Raised when a caller breaks an operation contract.

    Out-of-range row indices, unknown fields and values of the wrong type
    land here. These indicate a bug upstream and are never recovered.
    """


class ExternalComputationFailure(ReconError):
    """Raised when the amortization engine call fails or times out."""


class PersistenceFailure(ReconError):
    """Raised when a snapshot write to the persistence collaborator fails."""


class StageTransitionError(ReconError):
    """Raised when navigating to a stage that has not been reached yet."""


class ConfigurationError(ReconError):
    """Raised when configuration is invalid or missing."""


class SinkError(ReconError):
    """Raised when a sink operation fails."""
