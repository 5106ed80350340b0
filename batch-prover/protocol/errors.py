"""Error taxonomy for the batch prover.

Every error aborts the whole batch. Nothing here is retried or downgraded to a
per-round failure.
"""

from typing import Optional


class ProverError(Exception):
    """Base class for all job-aborting failures."""


class ShapeError(ProverError, ValueError):
    """Transcript or batch does not have the fixed shape the circuit expects."""


class DecodeError(ProverError, ValueError):
    """Wire bytes do not parse as the expected ABI layout."""


class ProvingError(ProverError):
    """The proving capability failed for a round."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class VerificationMismatch(ProverError):
    """A freshly produced proof did not verify against its public inputs."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class TransportError(ProverError):
    """Fetching the job or delivering the result failed."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class KeyMaterialError(ProverError):
    """Proving key material could not be read."""
