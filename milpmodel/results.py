"""
Solution class for MILP solver output
"""
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np


class SolveStatus(Enum):
    """Outcome reported by a solver"""
    OPTIMAL = 'optimal'
    INFEASIBLE = 'infeasible'
    UNBOUNDED = 'unbounded'
    TIME_LIMIT = 'time_limit'
    ERROR = 'error'


class Solution:
    """
    Raw output of a MILP solver.

    Attributes
    ----------
    status : SolveStatus
        Solver outcome
    x : np.ndarray or None
        Flat solution vector, one value per slot; read-only
    objective_value : float or None
        Objective value in the model's own sense, constant included
    mip_gap : float or None
        Final relative gap reported by branch-and-bound
    node_count : int
        Branch-and-bound nodes explored
    time : float
        Wall-clock solve time in seconds
    message : str
        Backend message

    Methods
    -------
    is_optimal()
        Check if solution is optimal
    to_dict()
        Convert solution to dictionary
    """

    def __init__(self, status: SolveStatus, x: Optional[np.ndarray] = None,
                 objective_value: Optional[float] = None,
                 mip_gap: Optional[float] = None, node_count: int = 0,
                 time: float = 0.0, message: str = ''):
        self.status = SolveStatus(status)
        if x is not None:
            x = np.array(x, dtype=np.float64)
            x.flags.writeable = False
        self.x: Optional[np.ndarray] = x
        self.objective_value = objective_value
        self.mip_gap = mip_gap
        self.node_count = node_count
        self.time = time
        self.message = message

    def is_optimal(self) -> bool:
        """Check if solution is optimal"""
        return self.status is SolveStatus.OPTIMAL

    def has_values(self) -> bool:
        """Check if the solver returned a value vector"""
        return self.x is not None

    def __repr__(self):
        n_vars = len(self.x) if self.x is not None else 0
        return (f"Solution(status='{self.status.value}', "
                f"objective={self.objective_value}, "
                f"time={self.time:.3f}s, "
                f"n_vars={n_vars})")

    def __str__(self):
        lines = [
            "MILP Solution",
            "=" * 50,
            f"Status:          {self.status.value}",
        ]
        if self.objective_value is not None:
            lines.append(f"Objective:       {self.objective_value:.6e}")
        if self.mip_gap is not None:
            lines.append(f"MIP gap:         {self.mip_gap:.6e}")
        lines.append(f"Nodes:           {self.node_count}")
        lines.append(f"Time:            {self.time:.3f} seconds")
        if self.x is not None:
            lines.append(f"Variables:       {len(self.x)}")
        if self.message:
            lines.append(f"Message:         {self.message}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert solution to dictionary"""
        return {
            'status': self.status.value,
            'x': self.x.tolist() if self.x is not None else None,
            'objective_value': self.objective_value,
            'mip_gap': self.mip_gap,
            'node_count': self.node_count,
            'time': self.time,
            'message': self.message,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Solution':
        """Create Solution from dictionary"""
        return cls(
            status=SolveStatus(d['status']),
            x=d.get('x'),
            objective_value=d.get('objective_value'),
            mip_gap=d.get('mip_gap'),
            node_count=d.get('node_count', 0),
            time=d.get('time', 0.0),
            message=d.get('message', ''),
        )
