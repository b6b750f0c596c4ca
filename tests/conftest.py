"""
Shared fixtures for the milpmodel test suite.
"""
import math

import numpy as np
import pytest

import milpmodel
from milpmodel import Model, expand, sum_over, term


@pytest.fixture
def square_coords():
    """Four cities on the corners of a unit square, listed along the perimeter."""
    return [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


def build_tsp(coords):
    """MTZ model over cities 1..n."""
    n = len(coords)
    cities = range(1, n + 1)
    model = Model(name='tsp')
    arcs = expand(cities, cities, where=lambda i, j: i != j)
    model.declare('x', arcs, 'binary')
    model.declare('u', expand(range(2, n + 1)), 'integer', lower=1, upper=n - 1)

    model.for_each('leave', expand(cities), lambda i: (
        sum_over(expand(cities, where=lambda j: j != i), lambda j: term(1, 'x', (i, j))),
        '==', 1))
    model.for_each('enter', expand(cities), lambda j: (
        sum_over(expand(cities, where=lambda i: i != j), lambda i: term(1, 'x', (i, j))),
        '==', 1))
    model.for_each(
        'subtour',
        expand(range(2, n + 1), range(2, n + 1), where=lambda i, j: i != j),
        lambda i, j: (
            milpmodel.add(term(1, 'u', i), term(-1, 'u', j), term(n, 'x', (i, j))),
            '<=', n - 1))
    model.minimize(sum_over(
        arcs, lambda i, j: term(math.dist(coords[i - 1], coords[j - 1]), 'x', (i, j))))
    return model


@pytest.fixture
def tsp_model(square_coords):
    return build_tsp(square_coords)


@pytest.fixture
def facility_data():
    """
    Four customers, three candidate warehouses.

    Customers 0 and 1 sit next to warehouse 0, customers 2 and 3 next to
    warehouse 2; warehouse 1 is expensive to open and far from everyone.
    """
    cost = np.array([
        [1.0, 6.0, 9.0],
        [2.0, 5.0, 8.0],
        [8.0, 5.0, 2.0],
        [9.0, 6.0, 1.0],
    ])
    fixed_cost = np.array([3.0, 10.0, 3.0])
    return cost, fixed_cost


def build_facility(cost, fixed_cost):
    customers = range(cost.shape[0])
    warehouses = range(cost.shape[1])
    model = Model(name='facility')
    pairs = expand(customers, warehouses)
    model.declare('x', pairs, 'binary')
    model.declare('y', expand(warehouses), 'binary')

    model.for_each('assign', expand(customers), lambda n: (
        sum_over(expand(warehouses), lambda m: term(1, 'x', (n, m))), '==', 1))
    model.for_each('link', pairs, lambda n, m: (
        milpmodel.add(term(1, 'x', (n, m)), term(-1, 'y', m)), '<=', 0))
    model.minimize(milpmodel.add(
        sum_over(pairs, lambda n, m: term(cost[n, m], 'x', (n, m))),
        sum_over(expand(warehouses), lambda m: term(fixed_cost[m], 'y', m)),
    ))
    return model


@pytest.fixture
def facility_model(facility_data):
    return build_facility(*facility_data)
