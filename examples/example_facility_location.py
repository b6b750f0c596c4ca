"""
Example: Warehouse location with single assignment

This example demonstrates building a facility-location model from
in-memory cost data and reading the assignment back with a value filter.

Problem (customers N, candidate warehouses M):
    minimize    sum_{n,m} d[n][m] * x[n,m] + sum_m f[m] * y[m]
    subject to  sum_m x[n,m] == 1                  for every customer n
                x[n,m] <= y[m]                     for every n, m
                x, y binary
"""

import sys

import numpy as np
import milpmodel
from milpmodel import expand, sum_over, term


def build_facility_model(cost, fixed_cost):
    """
    Build the warehouse-location model.

    Parameters
    ----------
    cost : array_like
        Assignment cost, shape (customers, warehouses)
    fixed_cost : array_like
        Opening cost per warehouse
    """
    cost = np.asarray(cost, dtype=np.float64)
    customers = range(cost.shape[0])
    warehouses = range(cost.shape[1])

    model = milpmodel.Model(name='warehouse_location')
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


def main():
    print()
    print("=" * 70)
    print("milpmodel Example: Warehouse Location")
    print("=" * 70)
    print()

    rng = np.random.default_rng(7)
    customers = rng.uniform(0.0, 10.0, size=(12, 2))
    sites = rng.uniform(0.0, 10.0, size=(4, 2))
    cost = np.linalg.norm(customers[:, None, :] - sites[None, :, :], axis=2)
    fixed_cost = np.full(len(sites), 8.0)

    model = build_facility_model(cost, fixed_cost)
    result = model.solve()

    print("=" * 70)
    print("Solution Summary")
    print("=" * 70)
    print(f"Status: {result.status.value}")
    if result.is_optimal():
        print(f"Total cost: {result.objective_value:.4f}")
        opened = [m for (m,), _ in result.filter('y', lambda v: v > 0.9)]
        print(f"Open warehouses: {opened}")
        for (n, m), _ in result.filter('x', lambda v: v > 0.9):
            print(f"  customer {n:2d} -> warehouse {m}")
    print("=" * 70)
    print()


if __name__ == "__main__":
    try:
        main()
    except ImportError as e:
        print(f"Error: {e}")
        print("\nPlease install milpmodel first:")
        print("  python -m pip install .")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
