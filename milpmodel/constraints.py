"""
Constraint set builder

A ConstraintSet is an ordered family of rows generated from one template
over one index set: ``for_each(I, fn)`` produces one ConstraintRow per
tuple of ``I`` in enumeration order.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .expressions import LinearExpression, add
from .index_sets import IndexTuple, normalize_index

logger = logging.getLogger(__name__)


class Relation(Enum):
    """Constraint relation"""
    LE = '<='  # Less than or equal
    GE = '>='  # Greater than or equal
    EQ = '=='  # Equal

    @classmethod
    def parse(cls, value: Union[str, 'Relation']) -> 'Relation':
        """Accept a Relation or one of '<=', '>=', '==', '='"""
        if isinstance(value, Relation):
            return value
        if value == '=':
            return cls.EQ
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown constraint relation: {value!r}") from None


class ConstraintRow:
    """
    One linear constraint ``expression <relation> rhs``.

    Parameters
    ----------
    expression : LinearExpression
        Left-hand side; may carry a constant term
    relation : Relation or str
        '<=', '>=' or '=='
    rhs : float
        Right-hand side scalar
    index : tuple, optional
        Index tuple that generated the row, kept for diagnostics
    """

    __slots__ = ('expression', 'relation', 'rhs', 'index')

    def __init__(self, expression, relation, rhs: float, index: IndexTuple = ()):
        if not isinstance(expression, LinearExpression):
            expression = add(expression)
        self.expression = expression
        self.relation = Relation.parse(relation)
        self.rhs = float(rhs)
        self.index = normalize_index(index)

    def normalized(self) -> 'ConstraintRow':
        """Equivalent row whose expression has no constant term"""
        expr = self.expression
        if expr.constant == 0.0:
            return self
        shifted = LinearExpression._from_dict(dict(expr.items()), 0.0)
        return ConstraintRow(shifted, self.relation, self.rhs - expr.constant, self.index)

    def __repr__(self):
        return f"ConstraintRow({self.expression!r} {self.relation.value} {self.rhs})"


class ConstraintSet:
    """
    Ordered sequence of constraint rows sharing one name.

    Parameters
    ----------
    name : str
        Name used in diagnostics
    rows : iterable of ConstraintRow
        Rows in generation order
    """

    def __init__(self, name: str, rows: Iterable[ConstraintRow] = ()):
        self.name = name
        self._rows: Tuple[ConstraintRow, ...] = tuple(rows)

    @classmethod
    def single(cls, name: str, expression, relation, rhs: float) -> 'ConstraintSet':
        """Constraint set holding one un-indexed row"""
        return cls(name, [ConstraintRow(expression, relation, rhs)])

    @property
    def rows(self) -> Tuple[ConstraintRow, ...]:
        return self._rows

    def __iter__(self):
        return iter(self._rows)

    def __len__(self):
        return len(self._rows)

    def __getitem__(self, k: int) -> ConstraintRow:
        return self._rows[k]

    def __repr__(self):
        return f"ConstraintSet(name='{self.name}', rows={len(self._rows)})"


def for_each(index_set: Iterable, fn: Callable[..., tuple],
             name: Optional[str] = None) -> ConstraintSet:
    """
    Generate one constraint per index tuple.

    Parameters
    ----------
    index_set : IndexSet or iterable of tuples
        Tuples to quantify over; filtered sets contribute only their
        surviving tuples
    fn : callable
        Receives the tuple components and returns
        ``(expression, relation, rhs)``
    name : str, optional
        Name of the resulting set (default: 'c')

    Returns
    -------
    ConstraintSet
        Rows in index enumeration order; empty if the index set is empty

    Examples
    --------
    >>> leave_once = for_each(
    ...     expand(cities),
    ...     lambda i: (sum_over(expand(cities, where=lambda j: j != i),
    ...                         lambda j: term(1, 'x', (i, j))), '==', 1),
    ...     name='leave_once')
    """
    name = name or 'c'
    rows: List[ConstraintRow] = []
    for index in index_set:
        index = normalize_index(index)
        result = fn(*index)
        if not isinstance(result, tuple) or len(result) != 3:
            raise TypeError(
                f"Constraint template '{name}' must return (expression, relation, rhs), "
                f"got {type(result).__name__} for index {list(index)}"
            )
        expression, relation, rhs = result
        rows.append(ConstraintRow(expression, relation, rhs, index))

    if not rows:
        logger.debug("Constraint set '%s' is empty", name)
    return ConstraintSet(name, rows)
