"""
Tests for the HiGHS backend and solver-facing classes.
"""
import numpy as np
import pytest
from scipy import optimize

import milpmodel.solver as solver_module
from conftest import build_tsp
from milpmodel import (
    HighsSolver, MILPSolver, Model, Parameters, Solution, SolveStatus,
    add, expand, solve, sum_over, term,
)


def knapsack():
    values = [10.0, 13.0, 7.0, 8.0]
    weights = [3.0, 4.0, 2.0, 3.0]
    items = expand(range(4))
    model = Model(name='knapsack')
    model.declare('take', items, 'binary')
    model.add_constraint('capacity', sum_over(items, lambda i: term(weights[i], 'take', i)), '<=', 7)
    model.maximize(sum_over(items, lambda i: term(values[i], 'take', i)))
    return model


class TestHighsSolver:

    def test_continuous_lp(self):
        # minimize -3*x1 - 5*x2  s.t.  x1 + 2*x2 <= 10, 3*x1 + x2 <= 12
        model = Model()
        model.declare('x', expand([1, 2]))
        model.add_constraint('c1', add(term(1, 'x', 1), term(2, 'x', 2)), '<=', 10)
        model.add_constraint('c2', add(term(3, 'x', 1), term(1, 'x', 2)), '<=', 12)
        model.minimize(add(term(-3, 'x', 1), term(-5, 'x', 2)))
        result = model.solve()
        assert result.is_optimal()
        assert result.value_of('x', 1) == pytest.approx(2.8)
        assert result.value_of('x', 2) == pytest.approx(3.6)
        assert result.objective_value == pytest.approx(-26.4)

    def test_maximize_objective_sign(self):
        result = knapsack().solve()
        assert result.is_optimal()
        assert result.objective_value == pytest.approx(23.0)
        chosen = [i for (i,), _ in result.filter('take', lambda v: v > 0.5)]
        assert chosen == [0, 1]

    def test_objective_constant_added(self):
        model = Model()
        model.declare('x', expand(range(1)), 'integer', lower=2, upper=5)
        model.minimize(add(term(1, 'x', 0), 100.0))
        assert model.solve().objective_value == pytest.approx(102.0)

    def test_integrality_enforced(self):
        model = Model()
        model.declare('n', None, 'integer', upper=10)
        model.add_constraint('half', term(2, 'n'), '<=', 7)
        model.maximize(term(1, 'n'))
        assert model.solve().value_of('n') == pytest.approx(3.0)

    def test_infeasible(self):
        model = Model()
        model.declare('x', expand(range(2)), 'binary')
        model.add_constraint('too_many', add(term(1, 'x', 0), term(1, 'x', 1)), '>=', 3)
        model.minimize(term(1, 'x', 0))
        result = model.solve()
        assert result.status is SolveStatus.INFEASIBLE
        assert result.objective_value is None

    def test_unbounded(self):
        model = Model()
        model.declare('x', None, 'continuous', lower=0)
        model.declare('k', None, 'binary')
        model.maximize(add(term(1, 'x'), term(1, 'k')))
        result = model.solve()
        assert result.status is SolveStatus.UNBOUNDED
        assert not result.is_optimal()

    def test_unbounded_or_infeasible_settled_by_relaxation(self, monkeypatch):
        # 2*k == 1 has no integer solution but a bounded relaxation
        real_milp = optimize.milp
        calls = []

        def ambiguous_first(*args, **kwargs):
            calls.append(kwargs.get('integrality'))
            if len(calls) == 1:
                return optimize.OptimizeResult(
                    status=4, x=None, fun=None,
                    message="The problem is unbounded or infeasible. (HiGHS Status 9)")
            return real_milp(*args, **kwargs)

        monkeypatch.setattr(solver_module.optimize, 'milp', ambiguous_first)
        model = Model()
        model.declare('k', None, 'integer', upper=1)
        model.add_constraint('odd', term(2, 'k'), '==', 1)
        model.minimize(term(1, 'k'))
        result = model.solve()
        assert result.status is SolveStatus.INFEASIBLE
        assert len(calls) == 2
        assert calls[1] is None

    def test_node_limit_is_a_limit_status(self):
        rng = np.random.default_rng(3)
        coords = [tuple(p) for p in rng.uniform(0.0, 100.0, size=(12, 2))]
        param = Parameters()
        param.node_limit = 1
        result = build_tsp(coords).solve(param)
        assert result.status in (SolveStatus.OPTIMAL, SolveStatus.TIME_LIMIT)

    def test_no_constraints(self):
        model = Model()
        model.declare('x', expand(range(3)), 'integer', lower=-1, upper=4)
        model.minimize(sum_over(expand(range(3)), lambda i: term(1, 'x', i)))
        result = model.solve()
        assert result.objective_value == pytest.approx(-3.0)

    def test_parameters_passed_through(self):
        param = Parameters()
        param.time_limit = 5.0
        param.mip_rel_gap = 0.0
        solution = HighsSolver(param).solve(knapsack().compile())
        assert solution.status is SolveStatus.OPTIMAL
        assert solution.time >= 0.0
        assert len(solution.x) == 4

    def test_solve_function_defaults_to_highs(self):
        solution = solve(knapsack().compile())
        assert solution.is_optimal()
        assert solution.objective_value == pytest.approx(23.0)


class TestSolverInterface:

    def test_custom_backend(self):
        class Constant(MILPSolver):
            def solve(self, problem, param=None):
                return Solution(SolveStatus.OPTIMAL, np.ones(problem.n), float(problem.n))

        result = knapsack().solve(solver=Constant())
        assert result.values('take') == {(0,): 1.0, (1,): 1.0, (2,): 1.0, (3,): 1.0}

    def test_abstract_solver_not_instantiable(self):
        with pytest.raises(TypeError):
            MILPSolver()


class TestParameters:

    def test_defaults(self):
        param = Parameters()
        assert param.time_limit == 3600.0
        assert param.node_limit is None
        assert param.presolve is True

    def test_dict_round_trip(self):
        param = Parameters.from_dict({'time_limit': 2.0, 'node_limit': 50, 'unknown': 1})
        assert param.to_dict() == {
            'time_limit': 2.0, 'mip_rel_gap': 1e-4, 'node_limit': 50,
            'presolve': True, 'verbose': False,
        }
        assert not hasattr(param, 'unknown')

    def test_solver_options(self):
        param = Parameters()
        param.node_limit = 10
        options = param.to_solver_options()
        assert options == {
            'disp': False, 'presolve': True, 'mip_rel_gap': 1e-4,
            'time_limit': 3600.0, 'node_limit': 10,
        }


class TestSolution:

    def test_dict_round_trip(self):
        solution = Solution(SolveStatus.OPTIMAL, [1.0, 2.0], 3.0, mip_gap=0.0, node_count=4)
        restored = Solution.from_dict(solution.to_dict())
        assert restored.status is SolveStatus.OPTIMAL
        assert np.array_equal(restored.x, [1.0, 2.0])
        assert restored.objective_value == 3.0
        assert restored.node_count == 4

    def test_str_and_repr(self):
        solution = Solution(SolveStatus.INFEASIBLE, message='no feasible point')
        assert "infeasible" in str(solution)
        assert "n_vars=0" in repr(solution)
        assert not solution.has_values()


@pytest.mark.parametrize("status, message, expected", [
    (0, "Optimization terminated successfully.", SolveStatus.OPTIMAL),
    (1, "Time limit reached.", SolveStatus.TIME_LIMIT),
    (2, "The problem is infeasible.", SolveStatus.INFEASIBLE),
    (3, "The problem is unbounded.", SolveStatus.UNBOUNDED),
    (4, "HiGHS status code was not recognized. (HiGHS Status 16: Solution limit reached)",
     SolveStatus.TIME_LIMIT),
    (4, "Node limit reached", SolveStatus.TIME_LIMIT),
    (4, "The problem is unbounded or infeasible. (HiGHS Status 9)", None),
    (4, "Unknown HiGHS error", SolveStatus.ERROR),
])
def test_status_classification(status, message, expected):
    assert solver_module._classify(status, message) is expected
