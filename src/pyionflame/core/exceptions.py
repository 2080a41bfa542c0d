"""
Custom exceptions for PyIonFlame.

Chemistry and stage 1 solver failures abort a run; a stage 2 solver failure
is recorded as a NaN gap voltage instead.
"""
from typing import Any, Dict, Optional


class FlameError(Exception):
    """Base exception for all PyIonFlame errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {detail_str})"
        return self.message


class ChemistryError(FlameError):
    """Composition, state or equilibrium evaluation failed."""

    def __init__(self, operation: str, reason: str, **details):
        super().__init__(
            f"Chemistry engine failed during {operation}: {reason}",
            {"operation": operation, **details}
        )
        self.operation = operation
        self.reason = reason


class SolverError(FlameError):
    """The boundary value solver did not converge."""

    def __init__(self, stage: str, reason: str, **details):
        super().__init__(
            f"Flame solve failed in {stage}: {reason}",
            {"stage": stage, **details}
        )
        self.stage = stage
        self.reason = reason


class ContractViolation(FlameError):
    """Malformed construction or call order; indicates a caller bug."""
    pass
