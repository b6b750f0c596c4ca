"""
Model assembler: compiles declarations into a CanonicalProblem

Compilation is a single pass over the objective and every constraint row.
It either returns a complete CanonicalProblem or raises a ModelingError;
no partially built problem ever reaches a solver.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
from scipy import sparse

from .canonical import CanonicalProblem, Sense
from .constraints import ConstraintSet
from .exceptions import EmptyObjective, ModelingError, UnknownVariable, UnresolvedVariableReference
from .expressions import LinearExpression, add
from .variables import VariableRegistry

logger = logging.getLogger(__name__)


class Objective:
    """
    Objective function: an expression and an optimization sense.

    Parameters
    ----------
    expression : LinearExpression or float
        Expression to optimize
    sense : str or Sense, optional
        'minimize' (default) or 'maximize'
    """

    __slots__ = ('expression', 'sense')

    def __init__(self, expression, sense: Union[str, Sense] = Sense.MINIMIZE):
        if not isinstance(expression, LinearExpression):
            expression = add(expression)
        if isinstance(sense, str):
            sense = Sense(sense.lower())
        self.expression = expression
        self.sense = sense

    def __repr__(self):
        return f"Objective({self.sense.value} {self.expression!r})"


def _check_slot_layout(registry: VariableRegistry) -> None:
    expected = 0
    for family in registry.families:
        if family.offset != expected:
            raise ModelingError(
                f"Variable family '{family.name}' starts at slot {family.offset}, "
                f"expected {expected}: slot ranges overlap or leave gaps"
            )
        expected += family.size
    if expected != registry.num_slots:
        raise ModelingError(
            f"Variable families cover {expected} slots but the registry allocated {registry.num_slots}"
        )


def _resolve(registry: VariableRegistry, expression: LinearExpression,
             location: str) -> Dict[int, float]:
    row: Dict[int, float] = {}
    for (name, index), coef in expression.items():
        try:
            slot = registry.slot_of(name, index)
        except UnknownVariable:
            raise UnresolvedVariableReference(name, index, location) from None
        if coef != 0.0:
            row[slot] = row.get(slot, 0.0) + coef
    return row


def _row_location(cs: ConstraintSet, k: int, index) -> str:
    if index:
        return f"Constraint '{cs.name}' row {k} (index {list(index)})"
    return f"Constraint '{cs.name}' row {k}"


def compile_model(registry: VariableRegistry,
                  constraint_sets: Iterable[ConstraintSet],
                  objective: Optional[Objective]) -> CanonicalProblem:
    """
    Compile declared variables, constraints and objective.

    Rows are stacked in constraint set order and, within a set, in index
    enumeration order. Constant terms of constraint expressions are moved
    to the right-hand side.

    Parameters
    ----------
    registry : VariableRegistry
        Registry owning every referenced variable
    constraint_sets : iterable of ConstraintSet
        Constraint sets in declaration order
    objective : Objective, LinearExpression, float or None
        Objective function; a bare expression or number is minimized

    Returns
    -------
    CanonicalProblem
        Immutable compiled problem

    Raises
    ------
    EmptyObjective
        If ``objective`` is None
    UnresolvedVariableReference
        If any term references an undeclared (name, index) pair
    ModelingError
        If the registry's slot ranges are inconsistent
    """
    if objective is None:
        raise EmptyObjective("Model has no objective function")
    if not isinstance(objective, Objective):
        objective = Objective(objective)

    _check_slot_layout(registry)
    n = registry.num_slots

    c = np.zeros(n)
    for slot, coef in _resolve(registry, objective.expression, "Objective").items():
        c[slot] = coef

    # Build sparse matrix in COO format
    rows: List[int] = []
    cols: List[int] = []
    data: List[float] = []
    relations = []
    rhs = []
    row_labels = []

    constraint_sets: Sequence[ConstraintSet] = list(constraint_sets)
    for cs in constraint_sets:
        for k, row in enumerate(cs):
            resolved = _resolve(registry, row.expression, _row_location(cs, k, row.index))
            i = len(rhs)
            for slot, coef in resolved.items():
                rows.append(i)
                cols.append(slot)
                data.append(coef)
            relations.append(row.relation)
            rhs.append(row.rhs - row.expression.constant)
            row_labels.append((cs.name, row.index))

    m = len(rhs)
    if m == 0:
        # No constraints - create empty sparse matrix
        A = sparse.csr_matrix((0, n))
    else:
        A = sparse.coo_matrix((data, (rows, cols)), shape=(m, n)).tocsr()
        A.sort_indices()

    lower = np.empty(n)
    upper = np.empty(n)
    integrality = np.zeros(n, dtype=bool)
    for family in registry.families:
        block = family.slot_range
        lower[block.start:block.stop] = family.lower_bounds
        upper[block.start:block.stop] = family.upper_bounds
        integrality[block.start:block.stop] = family.is_integral

    problem = CanonicalProblem(
        c=c,
        objective_constant=objective.expression.constant,
        sense=objective.sense,
        A=A,
        relations=tuple(relations),
        rhs=np.array(rhs, dtype=np.float64),
        lower=lower,
        upper=upper,
        integrality=integrality,
        variables=tuple(registry.refs()),
        row_labels=tuple(row_labels),
    )
    logger.info(
        "Compiled model: %d variables (%d integer), %d constraints in %d sets, %d nonzeros",
        problem.n, problem.num_integer, problem.m, len(constraint_sets), problem.nnz,
    )
    return problem
