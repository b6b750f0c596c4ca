"""
Example: Traveling salesman tour with the Miller-Tucker-Zemlin formulation

This example demonstrates how to declare indexed variables and quantified
constraints with milpmodel, solve the model and read the tour back.

Problem (cities 1..n, distances d[i][j]):
    minimize    sum_{i != j} d[i][j] * x[i,j]
    subject to  sum_{j != i} x[i,j] == 1                 for every i
                sum_{i != j} x[i,j] == 1                 for every j
                u[i] - u[j] + n * x[i,j] <= n - 1        for i != j, i, j >= 2
                x[i,j] binary, 1 <= u[i] <= n - 1 integer
"""

import math
import sys

import numpy as np
import milpmodel
from milpmodel import expand, sum_over, term


def build_tsp_model(coords):
    """Build the MTZ model for cities 1..n located at ``coords``"""
    n = len(coords)
    cities = range(1, n + 1)
    dist = {
        (i, j): math.dist(coords[i - 1], coords[j - 1])
        for i in cities for j in cities
    }

    model = milpmodel.Model(name='tsp_mtz')
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

    model.minimize(sum_over(arcs, lambda i, j: term(dist[i, j], 'x', (i, j))))
    return model


def extract_tour(result, start=1):
    """Follow the selected arcs from ``start`` back to ``start``"""
    successor = {i: j for (i, j), _ in result.filter('x', lambda v: v > 0.5)}
    tour = [start]
    while successor[tour[-1]] != start:
        tour.append(successor[tour[-1]])
    return tour


def main():
    print()
    print("=" * 70)
    print("milpmodel Example: TSP (MTZ formulation)")
    print("=" * 70)
    print()

    rng = np.random.default_rng(42)
    coords = [tuple(p) for p in rng.uniform(0.0, 100.0, size=(8, 2))]

    # Step 1: Build the model
    model = build_tsp_model(coords)
    problem = model.compile()
    print(f"Model compiled: {problem.m} constraints, {problem.n} variables "
          f"({problem.num_binary} binary, {problem.num_integer - problem.num_binary} integer)")
    print()

    # Step 2: Set solver parameters
    param = milpmodel.Parameters()
    param.time_limit = 60.0

    # Step 3: Solve the model
    result = milpmodel.decode(problem, milpmodel.HighsSolver(param).solve(problem))

    # Step 4: Display results
    print("=" * 70)
    print("Solution Summary")
    print("=" * 70)
    print(f"Status: {result.status.value}")
    if result.is_optimal():
        print(f"Tour length: {result.objective_value:.4f}")
        print(f"Tour: {' -> '.join(str(c) for c in extract_tour(result) + [1])}")
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
