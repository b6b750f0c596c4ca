"""
Solution mapper: reads a flat solution vector back by (name, index)
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .canonical import CanonicalProblem
from .exceptions import NoSolutionAvailable, UnknownVariable
from .expressions import LinearExpression
from .index_sets import IndexTuple, normalize_index
from .results import Solution, SolveStatus

logger = logging.getLogger(__name__)


class QueryableSolution:
    """
    Indexed view of a solver Solution.

    Created by :func:`decode`. Values can only be read from optimal
    solutions; any read on a non-optimal one raises NoSolutionAvailable.

    Examples
    --------
    >>> result = decode(problem, solution)
    >>> result.value_of('x', (1, 2))
    1.0
    >>> result.filter('x', lambda v: v > 0.5)
    [((1, 2), 1.0), ((2, 4), 1.0), ...]
    """

    def __init__(self, problem: CanonicalProblem, solution: Solution):
        self.problem = problem
        self.solution = solution

        # Reverse of the slot assignment, built once
        self._slots: Dict[str, Dict[IndexTuple, int]] = {}
        for slot, (name, index) in enumerate(problem.variables):
            self._slots.setdefault(name, {})[index] = slot

    @property
    def status(self) -> SolveStatus:
        return self.solution.status

    @property
    def objective_value(self) -> Optional[float]:
        return self.solution.objective_value

    def is_optimal(self) -> bool:
        return self.solution.is_optimal()

    def _values(self) -> np.ndarray:
        if not self.solution.is_optimal() or self.solution.x is None:
            raise NoSolutionAvailable(self.solution.status)
        return self.solution.x

    def _family(self, name: str) -> Dict[IndexTuple, int]:
        try:
            return self._slots[name]
        except (KeyError, TypeError):
            raise UnknownVariable(name, (), "family not declared") from None

    def slot_of(self, name: str, index=None) -> int:
        index = normalize_index(index)
        try:
            return self._family(name)[index]
        except (KeyError, TypeError):
            raise UnknownVariable(name, index, "index outside the declared index set") from None

    def value_of(self, name: str, index=None) -> float:
        """
        Value of ``name[index]``.

        Raises
        ------
        UnknownVariable
            If the pair was never declared
        NoSolutionAvailable
            If the solver did not report an optimal solution
        """
        slot = self.slot_of(name, index)
        return float(self._values()[slot])

    def filter(self, name: str, predicate: Callable[[float], bool]) -> List[Tuple[IndexTuple, float]]:
        """
        Members of family ``name`` whose value satisfies ``predicate``.

        Returns
        -------
        list of (index, value)
            In slot order, i.e. the family's index enumeration order
        """
        slots = self._family(name)
        x = self._values()
        return [(index, float(x[slot])) for index, slot in slots.items() if predicate(float(x[slot]))]

    def values(self, name: str) -> Dict[IndexTuple, float]:
        """All values of family ``name`` keyed by index"""
        slots = self._family(name)
        x = self._values()
        return {index: float(x[slot]) for index, slot in slots.items()}

    def evaluate(self, expression: LinearExpression) -> float:
        """Value of ``expression`` at this solution"""
        return expression.evaluate(self.value_of)

    def __repr__(self):
        return (f"QueryableSolution(status='{self.status.value}', "
                f"objective={self.objective_value}, n={self.problem.n})")


def decode(problem: CanonicalProblem, solution: Solution) -> QueryableSolution:
    """
    Map a solver solution back onto the model's indexed variables.

    Parameters
    ----------
    problem : CanonicalProblem
        The problem that was solved
    solution : Solution
        Solver output for ``problem``

    Returns
    -------
    QueryableSolution
        Queryable view; never mutates ``solution``

    Raises
    ------
    ValueError
        If the solution vector length differs from the number of slots
    """
    if solution.x is not None and len(solution.x) != problem.n:
        raise ValueError(
            f"Solution has {len(solution.x)} values but the problem has {problem.n} variables"
        )
    if not solution.is_optimal():
        logger.warning("Decoding a solution with status '%s'; values are unavailable",
                       solution.status.value)
    return QueryableSolution(problem, solution)
