"""
Modeling interface for indexed MILP models

A Model owns one VariableRegistry together with the constraint sets and
objective declared against it. Every declaration goes through the model
object; there is no ambient global model.

Example
-------
>>> from milpmodel import Model, expand, term, sum_over
>>>
>>> customers, sites = range(3), range(2)
>>> cost = [[4, 1], [2, 3], [5, 2]]
>>> model = Model(name='assignment')
>>> model.declare('x', expand(customers, sites), 'binary')
>>>
>>> model.for_each('assign', expand(customers),
...                lambda i: (sum_over(expand(sites), lambda j: term(1, 'x', (i, j))), '==', 1))
>>> model.minimize(sum_over(expand(customers, sites), lambda i, j: term(cost[i][j], 'x', (i, j))))
>>>
>>> result = model.solve()
>>> result.filter('x', lambda v: v > 0.9)
"""

import logging
from typing import Callable, Iterable, List, Optional, Union

import numpy as np

from .assembler import Objective, compile_model
from .canonical import CanonicalProblem, Sense
from .constraints import ConstraintSet, for_each
from .exceptions import ModelingError
from .index_sets import IndexSet
from .parameters import Parameters
from .solution import QueryableSolution, decode
from .solver import HighsSolver, MILPSolver
from .variables import Bound, VariableFamily, VariableRegistry, VarType

logger = logging.getLogger(__name__)


class Model:
    """
    An indexed MILP model under construction.

    A model is not safe for concurrent mutation; distinct models share no
    state and may be built in parallel.

    Parameters
    ----------
    name : str, optional
        Name of the model
    sense : str or Sense, optional
        Default optimization sense used by :meth:`set_objective`
        (default: 'minimize')
    """

    def __init__(self, name: Optional[str] = None, sense: Union[str, Sense] = 'minimize'):
        if isinstance(sense, str):
            sense = Sense(sense.lower())
        self.name = name or "MILP_Model"
        self.sense = sense

        self.registry = VariableRegistry()
        self.constraint_sets: List[ConstraintSet] = []
        self.objective: Optional[Objective] = None

    # Variables
    def declare(self, name: str, index_set: Optional[IndexSet] = None,
                vtype: Union[str, VarType] = VarType.CONTINUOUS,
                lower: Bound = 0.0, upper: Bound = np.inf) -> VariableFamily:
        """Declare a variable family; see :meth:`VariableRegistry.declare`"""
        return self.registry.declare(name, index_set, vtype, lower, upper)

    def slot_of(self, name: str, index=None) -> int:
        return self.registry.slot_of(name, index)

    # Constraints
    def add_constraint_set(self, constraint_set: ConstraintSet) -> ConstraintSet:
        """
        Add a constraint set.

        Raises
        ------
        ModelingError
            If a constraint set with the same name was already added
        """
        if not isinstance(constraint_set, ConstraintSet):
            raise TypeError("Must provide a ConstraintSet (use for_each)")
        if any(cs.name == constraint_set.name for cs in self.constraint_sets):
            raise ModelingError(f"Constraint set '{constraint_set.name}' is already defined")
        self.constraint_sets.append(constraint_set)
        logger.debug("Added constraint set '%s' with %d rows", constraint_set.name, len(constraint_set))
        return constraint_set

    def for_each(self, name: str, index_set: Iterable, fn: Callable[..., tuple]) -> ConstraintSet:
        """Generate a constraint per index tuple and add the set to the model"""
        return self.add_constraint_set(for_each(index_set, fn, name=name))

    def add_constraint(self, name: str, expression, relation, rhs: float) -> ConstraintSet:
        """Add a single un-indexed constraint"""
        return self.add_constraint_set(ConstraintSet.single(name, expression, relation, rhs))

    # Objective
    def set_objective(self, expression, sense: Union[str, Sense, None] = None) -> Objective:
        """
        Set the objective function, replacing any previous one.

        Parameters
        ----------
        expression : LinearExpression or float
            Objective expression
        sense : str or Sense, optional
            Overrides the model's default sense
        """
        self.objective = Objective(expression, sense if sense is not None else self.sense)
        return self.objective

    def minimize(self, expression) -> Objective:
        return self.set_objective(expression, Sense.MINIMIZE)

    def maximize(self, expression) -> Objective:
        return self.set_objective(expression, Sense.MAXIMIZE)

    # Compilation and solving
    def compile(self) -> CanonicalProblem:
        """Compile the model; see :func:`milpmodel.assembler.compile_model`"""
        return compile_model(self.registry, self.constraint_sets, self.objective)

    def solve(self, param: Optional[Parameters] = None,
              solver: Optional[MILPSolver] = None) -> QueryableSolution:
        """
        Compile, solve and decode the model.

        Structural errors are raised by compilation, before the solver is
        invoked.

        Parameters
        ----------
        param : Parameters, optional
            Solver parameters
        solver : MILPSolver, optional
            Backend to use (default: HighsSolver)

        Returns
        -------
        QueryableSolution
            Solution queryable by (name, index)
        """
        problem = self.compile()
        if solver is None:
            solver = HighsSolver()
        solution = solver.solve(problem, param)
        return decode(problem, solution)

    def __repr__(self):
        rows = sum(len(cs) for cs in self.constraint_sets)
        sense = self.objective.sense if self.objective is not None else self.sense
        return (f"Model(name='{self.name}', sense={sense.value}, "
                f"variables={self.registry.num_slots}, constraints={rows})")
