import cython  # type: ignore
import threading
from typing import Any, Dict, Tuple

from .errors import InvalidArgument, OutOfRange
from .codonvar_types import NAPos


@cython.cclass
class Interval:
    """A reference span; `size()` is `end - start`."""

    start: NAPos = cython.declare(cython.long, visibility="public")
    end: NAPos = cython.declare(cython.long, visibility="public")

    def __init__(self: 'Interval', start: NAPos, end: NAPos):
        self.start = start
        self.end = end

    def size(self: 'Interval') -> int:
        return self.end - self.start

    def __hash__(self: 'Interval') -> int:
        return hash((self.start, self.end))

    def __eq__(self: 'Interval', other: Any) -> bool:
        if not isinstance(other, Interval):
            return False
        return (self.start, self.end) == (other.start, other.end)

    def __repr__(self: 'Interval') -> str:
        return f"Interval({self.start!r}, {self.end!r})"


@cython.cclass
class IntervalCounter:
    """Counts the registered intervals that span a queried interval.

    The structure is a Fenwick tree indexed by interval start whose nodes
    are Fenwick trees indexed by the mirrored interval end
    (`max_size - end`), so that both predicates of a spanner
    (`start <= s` and `end >= e`) become prefix conditions. Both levels are
    stored sparsely in dicts; insertion and query cost O(log^2 max_size).
    """

    max_size: int = cython.declare(cython.long, visibility="readonly")
    _tree: Dict[int, Dict[int, int]] = cython.declare(
        dict, visibility="private")
    _total: int = cython.declare(cython.long, visibility="private")
    _lock: Any = cython.declare(object, visibility="private")

    def __init__(self: 'IntervalCounter', max_size: int):
        if max_size <= 0:
            raise InvalidArgument(
                'Maximum interval coordinate must be positive: {}'
                .format(max_size))
        self.max_size = max_size
        self._tree = {}
        self._total = 0
        self._lock = threading.Lock()

    @cython.cfunc
    @cython.inline
    def _check_bounds(
        self: 'IntervalCounter',
        start: NAPos,
        end: NAPos
    ) -> None:
        if start < 0 or end > self.max_size or start > end:
            raise OutOfRange(
                'Interval [{}, {}] is out of range [0, {}]'
                .format(start, end, self.max_size))

    @cython.cfunc
    @cython.locals(i=cython.long, j=cython.long, size=cython.long)
    def _add(
        self: 'IntervalCounter',
        start: NAPos,
        end: NAPos,
        n: int
    ) -> None:
        size = self.max_size + 1
        i = start + 1
        while i <= size:
            node = self._tree.setdefault(i, {})
            j = self.max_size - end + 1
            while j <= size:
                node[j] = node.get(j, 0) + n
                j += j & -j
            i += i & -i
        self._total += n

    def add_count(
        self: 'IntervalCounter',
        start: NAPos,
        end: NAPos,
        n: int = 1
    ) -> None:
        """Register `n` copies of interval [start, end]."""
        if n < 1:
            raise InvalidArgument(
                'Interval count must be positive: {}'.format(n))
        self._check_bounds(start, end)
        with self._lock:
            self._add(start, end, n)

    @cython.ccall
    @cython.locals(i=cython.long, j=cython.long, count=cython.long)
    @cython.returns(cython.long)
    def count_spanners(
        self: 'IntervalCounter',
        start: NAPos,
        end: NAPos
    ) -> int:
        """Count registered intervals (a, b) with a <= start and b >= end."""
        self._check_bounds(start, end)
        count = 0
        with self._lock:
            i = start + 1
            while i > 0:
                node = self._tree.get(i)
                if node:
                    j = self.max_size - end + 1
                    while j > 0:
                        count += node.get(j, 0)
                        j -= j & -j
                i -= i & -i
        return count

    @property
    def total(self: 'IntervalCounter') -> int:
        return self._total

    def update(self: 'IntervalCounter', other: 'IntervalCounter') -> None:
        """Fold the intervals registered in `other` into this counter.

        Fenwick nodes are plain sums, so two trees of the same size merge
        node by node.
        """
        if other.max_size != self.max_size:
            raise InvalidArgument(
                'Cannot merge interval counters of different sizes: '
                '{} != {}'.format(self.max_size, other.max_size))
        with other._lock:
            snapshot = [
                (i, dict(node)) for i, node in other._tree.items()
            ]
            other_total = other._total
        with self._lock:
            for i, other_node in snapshot:
                node = self._tree.setdefault(i, {})
                for j, count in other_node.items():
                    node[j] = node.get(j, 0) + count
            self._total += other_total

    def __getstate__(self: 'IntervalCounter') -> Tuple[int, dict, int]:
        with self._lock:
            return (self.max_size, self._tree, self._total)

    def __setstate__(
        self: 'IntervalCounter',
        state: Tuple[int, dict, int]
    ) -> None:
        self.max_size, self._tree, self._total = state
        self._lock = threading.Lock()

    def __repr__(self: 'IntervalCounter') -> str:
        return 'IntervalCounter(max_size={!r}, total={!r})'.format(
            self.max_size, self._total)
