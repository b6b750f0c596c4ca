"""
Tests for the Model facade.
"""
import logging

import pytest

from milpmodel import (
    ConstraintSet, DuplicateVariable, ModelingError, Model, Sense, expand, term,
)


class TestModel:

    def test_declarations_go_to_own_registry(self):
        a = Model(name='a')
        b = Model(name='b')
        a.declare('x', expand(range(3)))
        b.declare('x', expand(range(5)))
        assert a.registry.num_slots == 3
        assert b.registry.num_slots == 5
        assert a.slot_of('x', 2) == 2

    def test_duplicate_variable(self):
        model = Model()
        model.declare('x', expand(range(3)))
        with pytest.raises(DuplicateVariable):
            model.declare('x', expand(range(3)))

    def test_duplicate_constraint_set_name(self):
        model = Model()
        model.declare('x', expand(range(2)))
        model.add_constraint('cap', term(1, 'x', 0), '<=', 1)
        with pytest.raises(ModelingError):
            model.add_constraint('cap', term(1, 'x', 1), '<=', 1)

    def test_add_constraint_set_type_checked(self):
        with pytest.raises(TypeError):
            Model().add_constraint_set([term(1, 'x', 0)])

    def test_add_prebuilt_constraint_set(self):
        model = Model()
        cs = model.add_constraint_set(ConstraintSet('empty'))
        assert model.constraint_sets == [cs]

    def test_objective_replaced(self):
        model = Model()
        model.declare('x', expand(range(2)))
        model.minimize(term(1, 'x', 0))
        model.maximize(term(1, 'x', 1))
        problem = model.compile()
        assert problem.sense is Sense.MAXIMIZE
        assert list(problem.c) == [0.0, 1.0]

    def test_default_sense_used_by_set_objective(self):
        model = Model(sense='maximize')
        model.declare('x', expand(range(1)))
        model.set_objective(term(1, 'x', 0))
        assert model.compile().sense is Sense.MAXIMIZE

    def test_maximize_keeps_default_sense(self):
        model = Model()
        model.declare('x', expand(range(1)))
        model.maximize(term(1, 'x', 0))
        model.set_objective(term(2, 'x', 0))
        assert model.sense is Sense.MINIMIZE
        assert model.compile().sense is Sense.MINIMIZE

    def test_repr(self):
        model = Model(name='demo')
        model.declare('x', expand(range(2)))
        model.for_each('ub', expand(range(2)), lambda i: (term(1, 'x', i), '<=', 1))
        assert repr(model) == "Model(name='demo', sense=minimize, variables=2, constraints=2)"


def test_compile_logs_summary(caplog):
    model = Model()
    model.declare('x', expand(range(2)), 'binary')
    model.minimize(term(1, 'x', 0))
    with caplog.at_level(logging.INFO, logger='milpmodel'):
        model.compile()
    assert any("Compiled model: 2 variables (2 integer)" in r.getMessage() for r in caplog.records)
