"""
Linear expression builder

A LinearExpression is an immutable affine combination of variable
references plus a constant. Variables are referenced symbolically by
(name, index tuple); they are resolved to slots when the model is
compiled, so an expression can be built before or after its variables
are declared.

Building is additive: every builder sums coefficients of repeated
references instead of replacing them.

Example
-------
>>> from milpmodel.expressions import term, sum_over, add, scale
>>> from milpmodel.index_sets import expand
>>> out_degree = sum_over(expand(range(1, 4)), lambda j: term(1.0, 'x', (1, j)))
>>> shifted = add(out_degree, term(-1.0, 'x', (1, 1)), 2.0)
>>> shifted.coefficient('x', (1, 1))
0.0
"""

import numbers
from typing import Callable, Dict, Iterable, Iterator, Tuple, Union

from .index_sets import IndexTuple, normalize_index

VariableRef = Tuple[str, IndexTuple]
ExpressionLike = Union['LinearExpression', int, float]


def _check_scalar(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"{what} must be a real number, got {type(value).__name__}")
    return float(value)


class LinearExpression:
    """
    Represents ``sum(coefficient * variable) + constant``.

    Instances are never mutated after construction; all builders return
    new expressions.

    Parameters
    ----------
    terms : dict, optional
        Mapping from (name, index tuple) to coefficient
    constant : float, optional
        Constant term (default: 0)

    Examples
    --------
    >>> e = LinearExpression({('x', (1, 2)): 3.0}, 5.0)
    >>> e.scale(2).coefficient('x', (1, 2))
    6.0
    """

    __slots__ = ('_terms', '_constant')

    def __init__(self, terms: Dict[VariableRef, float] = None, constant: float = 0.0):
        self._terms: Dict[VariableRef, float] = {}
        if terms:
            for (name, index), coef in terms.items():
                key = (name, normalize_index(index))
                self._terms[key] = self._terms.get(key, 0.0) + _check_scalar(coef, "Coefficient")
        self._constant = _check_scalar(constant, "Constant")

    @classmethod
    def _from_dict(cls, terms: Dict[VariableRef, float], constant: float) -> 'LinearExpression':
        # Caller hands over ownership of an already normalized dict
        expr = cls.__new__(cls)
        expr._terms = terms
        expr._constant = constant
        return expr

    @property
    def constant(self) -> float:
        return self._constant

    def coefficient(self, name: str, index=None) -> float:
        """Coefficient of ``name[index]`` (0 when absent)"""
        return self._terms.get((name, normalize_index(index)), 0.0)

    def items(self) -> Iterator[Tuple[VariableRef, float]]:
        """(reference, coefficient) pairs in first-insertion order"""
        return iter(self._terms.items())

    def references(self) -> Tuple[VariableRef, ...]:
        return tuple(self._terms)

    def nonzero_terms(self) -> Dict[VariableRef, float]:
        """Copy of the terms with zero coefficients removed"""
        return {ref: coef for ref, coef in self._terms.items() if coef != 0.0}

    def __len__(self):
        return len(self._terms)

    def add(self, *others: ExpressionLike) -> 'LinearExpression':
        """Sum of this expression and ``others``"""
        return add(self, *others)

    def scale(self, k: float) -> 'LinearExpression':
        """This expression multiplied by the scalar ``k``"""
        return scale(self, k)

    def evaluate(self, value_of: Callable[[str, IndexTuple], float]) -> float:
        """
        Evaluate the expression.

        Parameters
        ----------
        value_of : callable
            Function ``(name, index) -> value`` supplying variable values
        """
        total = self._constant
        for (name, index), coef in self._terms.items():
            total += coef * value_of(name, index)
        return total

    def __eq__(self, other):
        if not isinstance(other, LinearExpression):
            return NotImplemented
        return (self._constant == other._constant
                and self.nonzero_terms() == other.nonzero_terms())

    def __hash__(self):
        return hash((self._constant, frozenset(self.nonzero_terms().items())))

    def __repr__(self):
        terms = []
        for (name, index), coef in self._terms.items():
            label = f"{name}{list(index)}" if index else name
            if coef == 1.0:
                terms.append(label)
            elif coef == -1.0:
                terms.append(f"-{label}")
            else:
                terms.append(f"{coef}*{label}")
        if self._constant != 0.0 or not terms:
            terms.append(f"{self._constant}")

        result = terms[0]
        for t in terms[1:]:
            if t.startswith('-'):
                result += f" - {t[1:]}"
            else:
                result += f" + {t}"
        return f"LinearExpression({result})"


def _accumulate(terms: Dict[VariableRef, float], constant: float,
                item: ExpressionLike, k: float = 1.0) -> float:
    # Sums item's coefficients into ``terms`` in place and returns the new constant
    if isinstance(item, LinearExpression):
        for ref, coef in item._terms.items():
            terms[ref] = terms.get(ref, 0.0) + k * coef
        return constant + k * item._constant
    return constant + k * _check_scalar(item, "Expression operand")


def term(coefficient: float, name: str, index=None) -> LinearExpression:
    """
    Single-term expression ``coefficient * name[index]``.

    Examples
    --------
    >>> term(2.5, 'x', (1, 3))
    LinearExpression(2.5*x[1, 3])
    """
    if not isinstance(name, str):
        raise TypeError("Variable name must be a string")
    coef = _check_scalar(coefficient, "Coefficient")
    return LinearExpression._from_dict({(name, normalize_index(index)): coef}, 0.0)


def constant(value: float) -> LinearExpression:
    """Expression with no variables"""
    return LinearExpression._from_dict({}, _check_scalar(value, "Constant"))


def add(*operands: ExpressionLike) -> LinearExpression:
    """
    Sum of expressions and scalars.

    Coefficients of references that occur in several operands are added.
    """
    terms: Dict[VariableRef, float] = {}
    total = 0.0
    for operand in operands:
        total = _accumulate(terms, total, operand)
    return LinearExpression._from_dict(terms, total)


def scale(expr: ExpressionLike, k: float) -> LinearExpression:
    """Expression ``k * expr``; ``k`` must be a scalar"""
    k = _check_scalar(k, "Scale factor")
    terms: Dict[VariableRef, float] = {}
    total = _accumulate(terms, 0.0, expr, k)
    return LinearExpression._from_dict(terms, total)


def sum_over(index_set: Iterable, fn: Callable[..., ExpressionLike]) -> LinearExpression:
    """
    Sum ``fn(*index)`` over every tuple of ``index_set``.

    Parameters
    ----------
    index_set : IndexSet or iterable of tuples
        Tuples to sum over, in enumeration order
    fn : callable
        Receives the tuple components and returns a LinearExpression or
        a scalar

    Returns
    -------
    LinearExpression
        The aggregated expression; repeated references are summed

    Examples
    --------
    >>> from milpmodel.index_sets import expand
    >>> cost = [3.0, 1.0, 2.0]
    >>> sum_over(expand(range(3)), lambda j: term(cost[j], 'y', j))
    LinearExpression(3.0*y[0] + y[1] + 2.0*y[2])
    """
    terms: Dict[VariableRef, float] = {}
    total = 0.0
    for index in index_set:
        total = _accumulate(terms, total, fn(*normalize_index(index)))
    return LinearExpression._from_dict(terms, total)
