"""
milpmodel Python Package

Indexed algebraic modeling layer for mixed-integer linear programs:
declare indexed variables and quantified constraints, compile them to a
canonical sparse problem, solve, and read results back by index.
"""

from .assembler import Objective, compile_model
from .canonical import CanonicalProblem, Sense
from .constraints import ConstraintRow, ConstraintSet, Relation, for_each
from .exceptions import (
    DuplicateVariable, EmptyObjective, ModelingError, NoSolutionAvailable,
    UnknownVariable, UnresolvedVariableReference,
)
from .expressions import LinearExpression, add, constant, scale, sum_over, term
from .index_sets import IndexSet, expand, normalize_index
from .modeling import Model
from .parameters import Parameters
from .results import Solution, SolveStatus
from .solution import QueryableSolution, decode
from .solver import HighsSolver, MILPSolver, solve
from .variables import VariableFamily, VariableRegistry, VarType

__version__ = "0.1.0"

__all__ = [
    'Model',
    'Parameters',
    'Solution',
    'SolveStatus',
    'MILPSolver',
    'HighsSolver',
    'solve',
    '__version__',
    # Index sets
    'IndexSet',
    'expand',
    'normalize_index',
    # Variables
    'VariableRegistry',
    'VariableFamily',
    'VarType',
    # Expressions
    'LinearExpression',
    'term',
    'constant',
    'sum_over',
    'add',
    'scale',
    # Constraints
    'Relation',
    'ConstraintRow',
    'ConstraintSet',
    'for_each',
    # Compilation and decoding
    'Objective',
    'Sense',
    'CanonicalProblem',
    'compile_model',
    'QueryableSolution',
    'decode',
    # Errors
    'ModelingError',
    'UnknownVariable',
    'DuplicateVariable',
    'UnresolvedVariableReference',
    'EmptyObjective',
    'NoSolutionAvailable',
]
