"""Error taxonomy for the reconciliation core.

Probe failures are not exceptions: they travel as ``ProbeResult`` values so a
single bad lookup never aborts a run.
"""

from __future__ import annotations


class DomainSheetError(Exception):
    """Base class for all domainsheet errors."""


class MalformedInputError(DomainSheetError):
    """The input table has no trackable extension columns or no usable shape."""


class InvariantViolation(DomainSheetError):
    """An attempt was made to overwrite a cell that already holds a status."""


class PersistenceError(DomainSheetError):
    """Writing the reconciled grid failed after every allowed attempt."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
