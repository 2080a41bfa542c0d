"""
Solve stages and controller states with their allowed transitions.
"""
from enum import Enum

from .exceptions import ContractViolation


class SolveStage(Enum):
    """Equation set active in the flow domain.

    The value is the solving-stage marker handed to the flow domain.
    """
    CREATED = 0
    ENERGY_ONLY = 1
    FIELD_COUPLED = 2


class ControllerState(Enum):
    CREATED = "created"
    ANCHORED = "anchored"
    STAGE1_CONVERGED = "stage1_converged"
    STAGE2_CONVERGED = "stage2_converged"
    STAGE2_FAILED = "stage2_failed"
    EXTRACTED = "extracted"


STAGE_TRANSITIONS = {
    SolveStage.CREATED: {SolveStage.ENERGY_ONLY},
    SolveStage.ENERGY_ONLY: {SolveStage.FIELD_COUPLED},
    SolveStage.FIELD_COUPLED: {SolveStage.FIELD_COUPLED},
}

STATE_TRANSITIONS = {
    ControllerState.CREATED: {ControllerState.ANCHORED},
    ControllerState.ANCHORED: {ControllerState.STAGE1_CONVERGED},
    ControllerState.STAGE1_CONVERGED: {ControllerState.STAGE2_CONVERGED,
                                       ControllerState.STAGE2_FAILED},
    ControllerState.STAGE2_CONVERGED: {ControllerState.EXTRACTED},
    ControllerState.STAGE2_FAILED: {ControllerState.EXTRACTED},
    ControllerState.EXTRACTED: set(),
}


def advance(current, target, table):
    """Return ``target`` if the table allows moving there from ``current``."""
    if target not in table[current]:
        raise ContractViolation(
            f"Illegal transition {current.name} -> {target.name}",
            {"from": current.name, "to": target.name}
        )
    return target
