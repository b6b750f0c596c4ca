"""
Variable registry for indexed decision variables

Each declared VariableFamily owns a contiguous block of slots, one per
index tuple of its IndexSet, in the set's enumeration order. Families are
laid out in declaration order, so the slot space of a registry is always
``[0, num_slots)`` without gaps or overlaps.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from .exceptions import DuplicateVariable, UnknownVariable
from .expressions import LinearExpression, VariableRef, term
from .index_sets import IndexSet, IndexTuple, normalize_index

logger = logging.getLogger(__name__)

Bound = Union[float, int, Callable[..., float]]


class VarType(Enum):
    """Decision variable type"""
    CONTINUOUS = 'continuous'
    INTEGER = 'integer'
    BINARY = 'binary'


def _evaluate_bound(bound: Bound, index: IndexTuple) -> float:
    if callable(bound):
        return float(bound(*index))
    return float(bound)


class VariableFamily:
    """
    A named family of decision variables over an index set.

    Families are created by :meth:`VariableRegistry.declare`; they are not
    meant to be constructed directly.

    Attributes
    ----------
    name : str
        Family name, unique within its registry
    index_set : IndexSet
        Domain of the family
    vtype : VarType
        Variable type shared by every member
    offset : int
        Slot of the first member
    size : int
        Number of members (and slots)
    lower_bounds, upper_bounds : np.ndarray
        Per-member bounds in slot order
    """

    def __init__(self, name: str, index_set: IndexSet, vtype: VarType,
                 offset: int, indices: List[IndexTuple],
                 lower_bounds: np.ndarray, upper_bounds: np.ndarray):
        self.name = name
        self.index_set = index_set
        self.vtype = vtype
        self.offset = offset
        self.indices = tuple(indices)
        self.lower_bounds = lower_bounds
        self.upper_bounds = upper_bounds
        self._position = {index: k for k, index in enumerate(self.indices)}

    @property
    def size(self) -> int:
        return len(self.indices)

    @property
    def slot_range(self) -> range:
        """Slots owned by this family"""
        return range(self.offset, self.offset + self.size)

    @property
    def is_integral(self) -> bool:
        return self.vtype is not VarType.CONTINUOUS

    def slot_of(self, index) -> int:
        """
        Global slot of one member.

        Raises
        ------
        UnknownVariable
            If ``index`` is not in the family's index set
        """
        index = normalize_index(index)
        try:
            return self.offset + self._position[index]
        except (KeyError, TypeError):
            raise UnknownVariable(self.name, index, "index outside the declared index set") from None

    def __contains__(self, index) -> bool:
        try:
            return normalize_index(index) in self._position
        except TypeError:
            return False

    def term(self, index=None, coefficient: float = 1.0) -> LinearExpression:
        """Expression ``coefficient * name[index]``"""
        index = normalize_index(index)
        if index not in self:
            raise UnknownVariable(self.name, index, "index outside the declared index set")
        return term(coefficient, self.name, index)

    def __repr__(self):
        return (f"VariableFamily(name='{self.name}', vtype={self.vtype.value}, "
                f"size={self.size}, slots={self.offset}..{self.offset + self.size - 1})")


class VariableRegistry:
    """
    Registry of variable families and their slot assignment.

    The registry is the single owner of the slot space of one model.
    Distinct registries share no state.

    Examples
    --------
    >>> registry = VariableRegistry()
    >>> x = registry.declare('x', expand(range(3), range(2)), 'binary')
    >>> registry.slot_of('x', (1, 0))
    2
    >>> registry.num_slots
    6
    """

    def __init__(self):
        self._families: Dict[str, VariableFamily] = {}
        self._order: List[VariableFamily] = []
        self._num_slots = 0

    @property
    def num_slots(self) -> int:
        """Total number of allocated slots"""
        return self._num_slots

    @property
    def families(self) -> Tuple[VariableFamily, ...]:
        """Declared families in declaration (slot) order"""
        return tuple(self._order)

    def declare(self, name: str, index_set: Optional[IndexSet] = None,
                vtype: Union[str, VarType] = VarType.CONTINUOUS,
                lower: Bound = 0.0, upper: Bound = np.inf) -> VariableFamily:
        """
        Declare a family of variables.

        Parameters
        ----------
        name : str
            Family name, unique within this registry
        index_set : IndexSet, optional
            Domain of the family; ``None`` declares a single scalar
            variable with index ``()``
        vtype : str or VarType, optional
            'continuous' (default), 'integer' or 'binary'
        lower : float or callable, optional
            Lower bound, constant or a function of the index components
            (default: 0)
        upper : float or callable, optional
            Upper bound, constant or a function of the index components
            (default: inf)

        Returns
        -------
        VariableFamily
            The declared family

        Raises
        ------
        DuplicateVariable
            If ``name`` is already declared
        ValueError
            If a lower bound exceeds its upper bound

        Notes
        -----
        Binary families always get bounds [0, 1]; the ``lower`` and
        ``upper`` arguments are ignored for them.
        """
        if not isinstance(name, str) or not name:
            raise TypeError("Variable family name must be a non-empty string")
        if name in self._families:
            raise DuplicateVariable(f"Variable family '{name}' is already declared")
        if isinstance(vtype, str):
            vtype = VarType(vtype.lower())
        if index_set is None:
            index_set = IndexSet()

        indices = [normalize_index(index) for index in index_set]
        if len(set(indices)) != len(indices):
            raise ValueError(f"Index set of '{name}' contains duplicate tuples")
        if vtype is VarType.BINARY:
            lower_bounds = np.zeros(len(indices))
            upper_bounds = np.ones(len(indices))
        else:
            lower_bounds = np.array([_evaluate_bound(lower, idx) for idx in indices], dtype=np.float64)
            upper_bounds = np.array([_evaluate_bound(upper, idx) for idx in indices], dtype=np.float64)
            bad = np.flatnonzero(lower_bounds > upper_bounds)
            if bad.size:
                k = int(bad[0])
                raise ValueError(
                    f"Lower bound ({lower_bounds[k]}) exceeds upper bound ({upper_bounds[k]}) "
                    f"for {name}{list(indices[k])}"
                )
        lower_bounds.flags.writeable = False
        upper_bounds.flags.writeable = False

        family = VariableFamily(name, index_set, vtype, self._num_slots, indices,
                                lower_bounds, upper_bounds)
        self._families[name] = family
        self._order.append(family)
        self._num_slots += family.size

        logger.debug("Declared %r", family)
        return family

    def family(self, name: str) -> VariableFamily:
        """Look up a family by name"""
        try:
            return self._families[name]
        except (KeyError, TypeError):
            raise UnknownVariable(name, (), "family not declared") from None

    def __contains__(self, name) -> bool:
        return name in self._families

    def slot_of(self, name: str, index=None) -> int:
        """
        Global slot of ``name[index]``.

        Raises
        ------
        UnknownVariable
            If the family was never declared or the index lies outside its
            index set
        """
        family = self._families.get(name)
        if family is None:
            raise UnknownVariable(name, normalize_index(index), "family not declared")
        return family.slot_of(index)

    def ref_of(self, slot: int) -> VariableRef:
        """Reverse lookup: the (name, index) pair that owns ``slot``"""
        if not 0 <= slot < self._num_slots:
            raise IndexError(f"Slot {slot} out of range [0, {self._num_slots})")
        for family in self._order:
            if slot < family.offset + family.size:
                return family.name, family.indices[slot - family.offset]
        raise IndexError(f"Slot {slot} is not allocated")

    def refs(self) -> List[VariableRef]:
        """All (name, index) pairs in slot order"""
        return [(family.name, index) for family in self._order for index in family.indices]

    def __len__(self):
        return len(self._order)

    def __repr__(self):
        return f"VariableRegistry(families={len(self._order)}, slots={self._num_slots})"
