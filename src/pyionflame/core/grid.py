import numpy as np
from dataclasses import dataclass

from .exceptions import ContractViolation


@dataclass
class RefineCriteria:
    """Refinement thresholds for the flow domain"""
    ratio: float = 10.0  # Max ratio of adjacent grid spacings
    slope: float = 0.08  # Max solution change between points, relative to range
    curve: float = 0.1  # Max slope change between intervals, relative to range
    prune: float = 0.0  # Point removal threshold (0 disables pruning)

    def validate(self):
        if self.ratio < 2.0:
            raise ContractViolation(f"Refine ratio must be >= 2, got {self.ratio}")
        if not (0.0 < self.slope <= 1.0 and 0.0 < self.curve <= 1.0):
            raise ContractViolation(
                f"Refine slope and curve must lie in (0, 1], got "
                f"slope={self.slope}, curve={self.curve}"
            )
        if self.prune < 0.0 or self.prune >= min(self.slope, self.curve):
            raise ContractViolation(
                f"Prune must be >= 0 and below slope and curve, got {self.prune}"
            )


class OneDimGrid:
    """
    One-dimensional grid shared by the inlet, flow and outlet domains.
    """
    def __init__(self, x):
        x = np.asarray(x, dtype=float)
        self._check(x)
        self.x = x
        self.setSize(len(x))
        self.updateValues()

    @staticmethod
    def _check(x: np.ndarray):
        if x.ndim != 1 or len(x) < 2:
            raise ContractViolation(f"Grid needs at least 2 points, got shape {x.shape}")
        if not np.all(np.diff(x) > 0):
            raise ContractViolation("Grid coordinates must be strictly increasing")

    def setSize(self, new_nPoints: int):
        """Set grid size"""
        self.nPoints = new_nPoints
        self.jj = new_nPoints - 1

    def updateValues(self):
        """Update grid spacing"""
        self.hh = np.diff(self.x)

    @property
    def width(self) -> float:
        return float(self.x[-1] - self.x[0])

    def normalized(self) -> np.ndarray:
        """Coordinates mapped onto [0, 1]"""
        return (self.x - self.x[0]) / self.width

    def check_refinement(self, new_x) -> None:
        """
        Verify that ``new_x`` only inserts points into this grid.

        Refinement may add points but must keep the bounds and monotonicity.
        """
        new_x = np.asarray(new_x, dtype=float)
        self._check(new_x)
        if not (np.isclose(new_x[0], self.x[0]) and np.isclose(new_x[-1], self.x[-1])):
            raise ContractViolation(
                "Refined grid changed the domain bounds",
                {"old": (self.x[0], self.x[-1]), "new": (new_x[0], new_x[-1])}
            )
        if len(new_x) < self.nPoints:
            raise ContractViolation(
                f"Refined grid lost points: {self.nPoints} -> {len(new_x)}"
            )

    def update(self, new_x) -> bool:
        """Adopt the refined coordinates; returns True if points were added"""
        self.check_refinement(new_x)
        added = len(new_x) > self.nPoints
        self.x = np.asarray(new_x, dtype=float).copy()
        self.setSize(len(self.x))
        self.updateValues()
        return added
