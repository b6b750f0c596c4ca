"""
Tests for the variable registry and slot assignment.
"""
import numpy as np
import pytest

from milpmodel import (
    DuplicateVariable, UnknownVariable, VariableRegistry, VarType, expand,
)


@pytest.fixture
def registry():
    reg = VariableRegistry()
    reg.declare('x', expand(range(1, 4), range(1, 4), where=lambda i, j: i != j), 'binary')
    reg.declare('u', expand(range(2, 4)), 'integer', lower=1, upper=3)
    reg.declare('z')
    return reg


class TestSlotAssignment:

    def test_contiguous_blocks_in_declaration_order(self, registry):
        x, u, z = registry.families
        assert (x.offset, x.size) == (0, 6)
        assert (u.offset, u.size) == (6, 2)
        assert (z.offset, z.size) == (8, 1)
        assert registry.num_slots == 9

    def test_slots_follow_index_order(self, registry):
        order = [(1, 2), (1, 3), (2, 1), (2, 3), (3, 1), (3, 2)]
        assert [registry.slot_of('x', idx) for idx in order] == list(range(6))

    def test_slot_assignment_is_a_bijection(self, registry):
        refs = registry.refs()
        slots = [registry.slot_of(name, idx) for name, idx in refs]
        assert slots == list(range(registry.num_slots))
        assert len(set(refs)) == len(refs)
        for slot in range(registry.num_slots):
            name, idx = registry.ref_of(slot)
            assert registry.slot_of(name, idx) == slot

    def test_scalar_variable_index(self, registry):
        assert registry.slot_of('z') == 8
        assert registry.slot_of('z', ()) == 8

    def test_one_dimensional_index_accepts_scalar(self, registry):
        assert registry.slot_of('u', 3) == registry.slot_of('u', (3,)) == 7


class TestLookupErrors:

    def test_undeclared_name(self, registry):
        with pytest.raises(UnknownVariable) as excinfo:
            registry.slot_of('w', (1,))
        assert excinfo.value.name == 'w'

    def test_index_outside_set(self, registry):
        with pytest.raises(UnknownVariable):
            registry.slot_of('x', (2, 2))
        with pytest.raises(UnknownVariable):
            registry.slot_of('u', 1)

    def test_unknown_variable_is_lookup_error(self, registry):
        with pytest.raises(LookupError):
            registry.slot_of('x', (9, 9))

    def test_ref_of_out_of_range(self, registry):
        with pytest.raises(IndexError):
            registry.ref_of(registry.num_slots)


class TestDeclare:

    def test_duplicate_name_rejected(self, registry):
        with pytest.raises(DuplicateVariable):
            registry.declare('x', expand(range(2)))

    def test_binary_bounds_forced(self):
        reg = VariableRegistry()
        fam = reg.declare('b', expand(range(3)), VarType.BINARY, lower=-5, upper=7)
        assert np.array_equal(fam.lower_bounds, np.zeros(3))
        assert np.array_equal(fam.upper_bounds, np.ones(3))
        assert fam.is_integral

    def test_integer_keeps_caller_bounds(self, registry):
        u = registry.family('u')
        assert u.is_integral
        assert np.array_equal(u.lower_bounds, [1.0, 1.0])
        assert np.array_equal(u.upper_bounds, [3.0, 3.0])

    def test_continuous_defaults(self):
        reg = VariableRegistry()
        fam = reg.declare('f', expand(range(2)))
        assert not fam.is_integral
        assert np.array_equal(fam.lower_bounds, [0.0, 0.0])
        assert np.all(np.isinf(fam.upper_bounds))

    def test_index_dependent_bounds(self):
        reg = VariableRegistry()
        fam = reg.declare('flow', expand(range(3), range(2)), 'continuous',
                          upper=lambda i, j: 10 * i + j)
        assert list(fam.upper_bounds) == [0.0, 1.0, 10.0, 11.0, 20.0, 21.0]

    def test_inverted_bounds_rejected(self):
        reg = VariableRegistry()
        with pytest.raises(ValueError):
            reg.declare('bad', expand(range(2)), 'integer', lower=5, upper=lambda i: i)

    def test_string_type_is_case_insensitive(self):
        reg = VariableRegistry()
        assert reg.declare('a', expand(range(1)), 'Binary').vtype is VarType.BINARY

    def test_unknown_type_rejected(self):
        reg = VariableRegistry()
        with pytest.raises(ValueError):
            reg.declare('a', expand(range(1)), 'semicontinuous')

    def test_empty_index_set_allocates_nothing(self):
        reg = VariableRegistry()
        fam = reg.declare('e', expand(range(3), where=lambda i: False))
        assert fam.size == 0
        assert reg.num_slots == 0

    def test_bounds_are_read_only(self, registry):
        with pytest.raises(ValueError):
            registry.family('u').lower_bounds[0] = 0.0


class TestFamilyTerm:

    def test_term_for_declared_member(self, registry):
        expr = registry.family('x').term((1, 2), 3.0)
        assert expr.coefficient('x', (1, 2)) == 3.0

    def test_term_outside_index_set(self, registry):
        with pytest.raises(UnknownVariable):
            registry.family('x').term((1, 1))


def test_registries_are_independent():
    a = VariableRegistry()
    b = VariableRegistry()
    a.declare('x', expand(range(5)))
    b.declare('x', expand(range(2)))
    assert a.num_slots == 5
    assert b.num_slots == 2
