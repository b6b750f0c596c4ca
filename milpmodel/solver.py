"""
Solver interface and the HiGHS backend

Any object implementing :class:`MILPSolver` can solve a CanonicalProblem.
The bundled :class:`HighsSolver` delegates to ``scipy.optimize.milp``,
which runs the HiGHS branch-and-bound MILP solver.
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
from scipy import optimize

from .canonical import CanonicalProblem, Sense
from .parameters import Parameters
from .results import Solution, SolveStatus

logger = logging.getLogger(__name__)

# scipy.optimize.milp status codes
_STATUS = {
    0: SolveStatus.OPTIMAL,
    1: SolveStatus.TIME_LIMIT,
    2: SolveStatus.INFEASIBLE,
    3: SolveStatus.UNBOUNDED,
}


def _classify(status: int, message: str) -> Optional[SolveStatus]:
    """
    Map a scipy status code to a SolveStatus.

    scipy reports every HiGHS model status it does not name as code 4
    with the HiGHS text in ``message``. Node and solution limits become
    TIME_LIMIT. Returns None for "unbounded or infeasible", which only
    the LP relaxation can settle.
    """
    if status in _STATUS:
        return _STATUS[status]
    text = (message or '').lower()
    if 'unbounded or infeasible' in text or 'infeasible or unbounded' in text:
        return None
    if 'limit' in text:
        return SolveStatus.TIME_LIMIT
    if 'infeasible' in text:
        return SolveStatus.INFEASIBLE
    if 'unbounded' in text:
        return SolveStatus.UNBOUNDED
    return SolveStatus.ERROR


def _writable_float64(arr):
    """Contiguous float64 copy; the problem's own arrays are read-only"""
    return np.array(arr, dtype=np.float64, order='C', copy=True)


class MILPSolver(ABC):
    """
    Abstract MILP solver.

    Implementations receive an immutable CanonicalProblem and return a
    Solution whose ``x`` has one value per slot and whose
    ``objective_value`` is expressed in the problem's own sense.
    Infeasible, unbounded and limit outcomes are reported through
    ``Solution.status``, not raised.

    Parameters
    ----------
    param : Parameters, optional
        Solver parameters. If None, default parameters are used.
    """

    def __init__(self, param: Optional[Parameters] = None):
        self.param = param if param is not None else Parameters()

    @abstractmethod
    def solve(self, problem: CanonicalProblem, param: Optional[Parameters] = None) -> Solution:
        """Solve ``problem`` and return the raw solution"""


class HighsSolver(MILPSolver):
    """
    MILP solver backed by ``scipy.optimize.milp`` (HiGHS).

    Examples
    --------
    >>> from milpmodel import HighsSolver, Parameters
    >>>
    >>> param = Parameters()
    >>> param.time_limit = 10.0
    >>> solver = HighsSolver(param)
    >>> solution = solver.solve(problem)
    >>> print(f"Status: {solution.status}")
    """

    def solve(self, problem: CanonicalProblem, param: Optional[Parameters] = None) -> Solution:
        """
        Solve a compiled problem.

        Parameters
        ----------
        problem : CanonicalProblem
            Problem to solve
        param : Parameters, optional
            Solver parameters. If None, uses solver's default parameters.

        Returns
        -------
        Solution
            Solver output with status, values and objective value
        """
        if param is None:
            param = self.param

        # milp minimizes; a maximization objective is negated here and the
        # objective value is negated back below
        c = _writable_float64(problem.c)
        if problem.sense is Sense.MAXIMIZE:
            c = -c

        constraints = None
        if problem.m > 0:
            AL, AU = problem.row_bounds()
            constraints = optimize.LinearConstraint(problem.A, AL, AU)

        bounds = optimize.Bounds(
            _writable_float64(problem.lower),
            _writable_float64(problem.upper),
        )
        integrality = problem.integrality.astype(np.int32)

        logger.info("Solving %r with HiGHS (time_limit=%s)", problem, param.time_limit)
        start = time.perf_counter()
        try:
            res = optimize.milp(
                c,
                integrality=integrality,
                bounds=bounds,
                constraints=constraints,
                options=param.to_solver_options(),
            )
        except ValueError as err:
            logger.error("HiGHS rejected the problem: %s", err)
            return Solution(SolveStatus.ERROR, message=str(err),
                            time=time.perf_counter() - start)

        status = _classify(res.status, res.message)
        if status is None:
            status = self._settle_with_relaxation(c, bounds, constraints, param)
        elapsed = time.perf_counter() - start

        objective_value = None
        if res.x is not None and res.fun is not None:
            objective_value = float(res.fun)
            if problem.sense is Sense.MAXIMIZE:
                objective_value = -objective_value
            objective_value += problem.objective_constant

        solution = Solution(
            status=status,
            x=res.x,
            objective_value=objective_value,
            mip_gap=getattr(res, 'mip_gap', None),
            node_count=int(getattr(res, 'mip_node_count', 0) or 0),
            time=elapsed,
            message=res.message,
        )
        if status is SolveStatus.OPTIMAL:
            logger.info("HiGHS finished: optimal objective %.6g in %.3fs", objective_value, elapsed)
        else:
            logger.warning("HiGHS finished with status '%s': %s", status.value, res.message)
        return solution

    @staticmethod
    def _settle_with_relaxation(c, bounds, constraints, param: Parameters) -> SolveStatus:
        """
        Resolve HiGHS's "unbounded or infeasible" verdict for a MIP.

        A bounded LP relaxation means the MIP cannot be unbounded, so it is
        infeasible. An unbounded relaxation is reported as UNBOUNDED.
        """
        # presolve can return the same ambiguous verdict; simplex decides it
        options = dict(param.to_solver_options(), presolve=False)
        relaxed = optimize.milp(c, bounds=bounds, constraints=constraints, options=options)
        if relaxed.status in (0, 2):
            return SolveStatus.INFEASIBLE
        if relaxed.status == 3:
            return SolveStatus.UNBOUNDED
        logger.warning("LP relaxation did not settle the status: %s", relaxed.message)
        return SolveStatus.ERROR


def solve(problem: CanonicalProblem, param: Optional[Parameters] = None,
          solver: Optional[MILPSolver] = None) -> Solution:
    """
    Convenience function to solve a compiled problem without creating a solver object.

    Parameters
    ----------
    problem : CanonicalProblem
        Problem to solve
    param : Parameters, optional
        Solver parameters. If None, the solver's parameters are used.
    solver : MILPSolver, optional
        Backend to use (default: HighsSolver)

    Returns
    -------
    Solution
        Solver output
    """
    if solver is None:
        solver = HighsSolver()
    return solver.solve(problem, param)
