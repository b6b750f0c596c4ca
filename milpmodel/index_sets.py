"""
Index set algebra

An IndexSet is the Cartesian product of one or more finite domains,
enumerated lazily in row-major order (last index varies fastest). Every
iteration restarts from the first tuple, so the same set can drive
variable declaration, expression sums and constraint generation and
always produce the same order.

Example
-------
>>> from milpmodel.index_sets import expand
>>> arcs = expand(range(1, 4), range(1, 4), where=lambda i, j: i != j)
>>> list(arcs)[:3]
[(1, 2), (1, 3), (2, 1)]
>>> len(arcs)
6
"""

import itertools
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

IndexTuple = Tuple[Any, ...]


def normalize_index(index) -> IndexTuple:
    """
    Normalize a caller-supplied index to an IndexTuple.

    ``None`` is the index of a scalar variable and becomes ``()``; a
    tuple or list is converted to a tuple; any other value is a
    one-dimensional index and becomes a 1-tuple.
    """
    if index is None:
        return ()
    if isinstance(index, tuple):
        return index
    if isinstance(index, list):
        return tuple(index)
    return (index,)


def _as_domain(domain) -> Iterable:
    if isinstance(domain, range):
        return domain
    if isinstance(domain, (str, bytes)) or not isinstance(domain, Iterable):
        raise TypeError(
            f"Index domain must be a range or a finite iterable, got {type(domain).__name__}"
        )
    if isinstance(domain, (set, frozenset)):
        # iteration order of a set depends on hashing; enumerate sorted
        try:
            values = tuple(sorted(domain))
        except TypeError:
            raise TypeError(
                "Unordered index domain must hold mutually comparable values; "
                "pass a list or tuple to fix the order"
            ) from None
        return values
    values = tuple(domain)
    if len(set(values)) != len(values):
        raise ValueError(f"Index domain contains duplicate values: {values}")
    return values


class IndexSet:
    """
    Ordered, lazily enumerated set of index tuples.

    Parameters
    ----------
    *domains : range or iterable
        Domains combined by Cartesian product, in order
        (a set or frozenset is enumerated in sorted order)
    where : callable, optional
        Predicate receiving the tuple components as positional arguments;
        tuples for which it returns False are skipped during enumeration

    Examples
    --------
    >>> cities = IndexSet(range(1, 5))
    >>> pairs = IndexSet(range(1, 5), range(1, 5), where=lambda i, j: i != j)
    >>> (1, 2) in pairs, (2, 2) in pairs
    (True, False)
    """

    def __init__(self, *domains, where: Optional[Callable[..., bool]] = None):
        self._domains = tuple(_as_domain(d) for d in domains)
        self._tuples: Optional[Tuple[IndexTuple, ...]] = None
        self._where = where
        self._size: Optional[int] = None

    @classmethod
    def from_tuples(cls, tuples: Iterable, where: Optional[Callable[..., bool]] = None) -> 'IndexSet':
        """
        Create a sparse index set from explicitly listed tuples.

        The listed order is the enumeration order. All tuples must have
        the same length and be distinct.
        """
        listed = tuple(normalize_index(t) for t in tuples)
        if len(set(listed)) != len(listed):
            raise ValueError("Index tuples must be distinct")
        if len({len(t) for t in listed}) > 1:
            raise ValueError("Index tuples must all have the same dimension")
        instance = cls(where=where)
        instance._tuples = listed
        return instance

    @property
    def dimension(self) -> int:
        """Number of components in each index tuple"""
        if self._tuples is not None:
            return len(self._tuples[0]) if self._tuples else 0
        return len(self._domains)

    def filter(self, predicate: Callable[..., bool]) -> 'IndexSet':
        """Return a new index set that additionally requires ``predicate``"""
        previous = self._where
        if previous is None:
            combined = predicate
        else:
            def combined(*index):
                return previous(*index) and predicate(*index)

        result = IndexSet.__new__(IndexSet)
        result._domains = self._domains
        result._tuples = self._tuples
        result._where = combined
        result._size = None
        return result

    def __iter__(self) -> Iterator[IndexTuple]:
        if self._tuples is not None:
            source = iter(self._tuples)
        else:
            source = itertools.product(*self._domains)
        if self._where is None:
            return source
        where = self._where
        return (index for index in source if where(*index))

    def __len__(self) -> int:
        if self._size is None:
            if self._where is not None:
                self._size = sum(1 for _ in self)
            elif self._tuples is not None:
                self._size = len(self._tuples)
            else:
                size = 1
                for domain in self._domains:
                    size *= len(domain)
                self._size = size
        return self._size

    def __contains__(self, index) -> bool:
        index = normalize_index(index)
        if self._tuples is not None:
            if index not in self._tuples:
                return False
        else:
            if len(index) != len(self._domains):
                return False
            try:
                if not all(value in domain for value, domain in zip(index, self._domains)):
                    return False
            except TypeError:
                return False
        return self._where is None or bool(self._where(*index))

    def to_list(self):
        """Materialize the enumeration as a list of tuples"""
        return list(self)

    def __repr__(self):
        if self._tuples is not None:
            source = f"{len(self._tuples)} listed tuples"
        else:
            source = " x ".join(
                f"range({d.start}, {d.stop})" if isinstance(d, range) and d.step == 1
                else repr(d)
                for d in self._domains
            )
        filtered = ", filtered" if self._where is not None else ""
        return f"IndexSet({source}{filtered})"


def expand(*domains, where: Optional[Callable[..., bool]] = None) -> IndexSet:
    """
    Expand one or more domains into an ordered index set.

    Given k domains of sizes n1..nk the result enumerates exactly
    n1*...*nk tuples in lexicographic order, last index fastest. With
    ``where`` the predicate is applied during enumeration.

    Parameters
    ----------
    *domains : range or iterable
        Domains to combine
    where : callable, optional
        Filter predicate on the unpacked tuple components

    Returns
    -------
    IndexSet
        Lazy, restartable index set

    Examples
    --------
    >>> list(expand([1, 2], [1, 2, 3]))
    [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]
    """
    return IndexSet(*domains, where=where)
