"""Exception hierarchy shared by the pipeline, storage and CLI layers.

Two failure classes matter at run level:
- recoverable per sensor (``LengthMismatch``): the sensor is skipped
- fatal for the run (``AcquisitionFailure``, ``PersistenceFailure``,
  ``ConfigurationError``): nothing is committed and the CLI exits non-zero
"""

from __future__ import annotations

from typing import Optional


class LodprepError(Exception):
    """Base class for every error raised by lodprep."""


class ConfigurationError(LodprepError, ValueError):
    """Invalid or conflicting configuration, rejected before any processing."""


class LengthMismatch(LodprepError, ValueError):
    """A sample sequence cannot be split into whole blocks."""

    def __init__(self, sample_count: int, block_size: int):
        self.sample_count = int(sample_count)
        self.block_size = int(block_size)
        super().__init__(
            f"Count of samples has to be a multiple of {self.block_size}. Got: {self.sample_count}"
        )


class CollaboratorFailure(LodprepError):
    """Storage-side failure tagged with the operation that raised it."""

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        self.detail = detail
        message = operation if not detail else f"{operation}: {detail}"
        super().__init__(message)


class AcquisitionFailure(CollaboratorFailure):
    """Raw samples could not be read."""


class PersistenceFailure(CollaboratorFailure):
    """Feature rows could not be made durable."""
