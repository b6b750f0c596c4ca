"""
CanonicalProblem: the compiled, solver-ready form of a model
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

import numpy as np
from scipy import sparse

from .constraints import Relation
from .index_sets import IndexTuple


class Sense(Enum):
    """Optimization sense"""
    MINIMIZE = 'minimize'
    MAXIMIZE = 'maximize'


@dataclass(frozen=True, eq=False)
class CanonicalProblem:
    """
    Compiled MILP in canonical form.

    The problem represented is::

        min or max  c'x + objective_constant
        subject to  A[k] x  <relations[k]>  rhs[k]   for every row k
                    lower <= x <= upper
                    x[s] integer where integrality[s]

    Instances are produced by :func:`milpmodel.assembler.compile_model`
    and never change afterwards: every vector is read-only.

    Attributes
    ----------
    c : np.ndarray
        Objective coefficients (length n)
    objective_constant : float
        Constant term of the objective
    sense : Sense
        Optimization sense
    A : scipy.sparse.csr_matrix
        Constraint matrix (m x n)
    relations : tuple of Relation
        Relation of each row (length m)
    rhs : np.ndarray
        Right-hand sides (length m)
    lower, upper : np.ndarray
        Variable bounds (length n)
    integrality : np.ndarray
        Boolean integrality mask (length n)
    variables : tuple
        (name, index) owning each slot, in slot order
    row_labels : tuple
        (constraint set name, index) of each row, in row order
    """

    c: np.ndarray
    objective_constant: float
    sense: Sense
    A: sparse.csr_matrix
    relations: Tuple[Relation, ...]
    rhs: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    integrality: np.ndarray
    variables: Tuple[Tuple[str, IndexTuple], ...]
    row_labels: Tuple[Tuple[str, IndexTuple], ...]

    def __post_init__(self):
        n = len(self.c)
        m = len(self.rhs)
        if self.A.shape != (m, n):
            raise ValueError(f"A must have shape ({m}, {n}), got {self.A.shape}")
        if len(self.relations) != m or len(self.row_labels) != m:
            raise ValueError(f"relations and row_labels must have length {m} (number of constraints)")
        if len(self.lower) != n or len(self.upper) != n or len(self.integrality) != n:
            raise ValueError(f"lower, upper and integrality must have length {n} (number of variables)")
        if len(self.variables) != n:
            raise ValueError(f"variables must have length {n}")
        for arr in (self.c, self.rhs, self.lower, self.upper, self.integrality):
            arr.flags.writeable = False

    @property
    def m(self) -> int:
        """Number of constraints"""
        return len(self.rhs)

    @property
    def n(self) -> int:
        """Number of variables"""
        return len(self.c)

    @property
    def nnz(self) -> int:
        """Number of nonzero constraint coefficients"""
        return self.A.nnz

    @property
    def num_integer(self) -> int:
        """Number of integral slots, binaries included"""
        return int(np.count_nonzero(self.integrality))

    @property
    def num_binary(self) -> int:
        """Number of integral slots with bounds exactly [0, 1]"""
        return int(np.count_nonzero(self.integrality & (self.lower == 0.0) & (self.upper == 1.0)))

    def row_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Convert rows to two-sided form ``AL <= A*x <= AU``.

        Returns
        -------
        AL : np.ndarray
            Lower bounds for constraints (length m)
        AU : np.ndarray
            Upper bounds for constraints (length m)
        """
        AL = np.full(self.m, -np.inf)
        AU = np.full(self.m, np.inf)
        for k, relation in enumerate(self.relations):
            if relation is Relation.LE:
                AU[k] = self.rhs[k]
            elif relation is Relation.GE:
                AL[k] = self.rhs[k]
            else:
                AL[k] = self.rhs[k]
                AU[k] = self.rhs[k]
        return AL, AU

    def describe_row(self, k: int) -> str:
        """Human-readable form of constraint #k, e.g. for diagnostics"""
        if not 0 <= k < self.m:
            raise IndexError(f"Constraint #{k} out of range [0, {self.m})")
        name, index = self.row_labels[k]
        start, end = self.A.indptr[k], self.A.indptr[k + 1]
        terms = []
        for slot, coef in zip(self.A.indices[start:end], self.A.data[start:end]):
            var_name, var_index = self.variables[slot]
            suffix = list(var_index) if var_index else ""
            terms.append(f"{coef:g}*{var_name}{suffix}")
        lhs = " + ".join(terms) if terms else "0"
        label = f"{name}{list(index)}" if index else name
        return f"#{k} {label}: {lhs} {self.relations[k].value} {self.rhs[k]:g}"

    def to_dict(self) -> Dict[str, Any]:
        """Summary of problem dimensions"""
        return {
            'sense': self.sense.value,
            'm': self.m,
            'n': self.n,
            'nnz': self.nnz,
            'num_integer': self.num_integer,
            'num_binary': self.num_binary,
        }

    def __repr__(self):
        return (f"<CanonicalProblem {self.sense.value} m={self.m} n={self.n} "
                f"nnz={self.nnz} integer={self.num_integer}>")
