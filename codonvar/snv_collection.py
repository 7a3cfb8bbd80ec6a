import cython  # type: ignore
import threading
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .snv import SNV

SNVKeyTuple = Tuple[SNV, ...]


@cython.cclass
class SNVCollectionCount:
    """The SNVs observed together on one read, and how often they occur.

    Equality, ordering and hashing depend only on the SNV sequence (the key);
    the count and the reference coverage accumulator are bookkeeping that
    may change while the object sits in a dict or set.
    """

    _snvs: SNVKeyTuple = cython.declare(tuple, visibility="private")
    _count: int = cython.declare(cython.long, visibility="private")
    _total_coverage: float = cython.declare(
        cython.double, visibility="private")

    def __init__(
        self: 'SNVCollectionCount',
        snvs: Iterable[SNV],
        coverage: float
    ):
        self._snvs = tuple(snvs)
        self._count = 1
        self._total_coverage = coverage

    @property
    def snvs(self: 'SNVCollectionCount') -> SNVKeyTuple:
        return self._snvs

    @property
    def count(self: 'SNVCollectionCount') -> int:
        return self._count

    @property
    def mean_ref_coverage(self: 'SNVCollectionCount') -> float:
        return self._total_coverage / self._count

    def bump_count(self: 'SNVCollectionCount', coverage: float) -> None:
        self._count += 1
        self._total_coverage += coverage

    def update(
        self: 'SNVCollectionCount',
        other: 'SNVCollectionCount'
    ) -> None:
        """Fold the count and coverage of an equal collection into this one"""
        if other._snvs != self._snvs:
            raise ValueError(
                'Cannot merge SNV collections with different SNVs')
        self._count += other._count
        self._total_coverage += other._total_coverage

    def __hash__(self: 'SNVCollectionCount') -> int:
        return hash(self._snvs)

    def __eq__(self: 'SNVCollectionCount', other: Any) -> bool:
        if not isinstance(other, SNVCollectionCount):
            return False
        return self._snvs == other._snvs

    def __ne__(self: 'SNVCollectionCount', other: Any) -> bool:
        return not self == other

    def __lt__(self: 'SNVCollectionCount', other: Any) -> bool:
        if not isinstance(other, SNVCollectionCount):
            raise TypeError(
                "'<' not supported between instances of "
                "'SNVCollectionCount' and 'Any'")
        return self._snvs < other._snvs

    def __le__(self: 'SNVCollectionCount', other: Any) -> bool:
        if not isinstance(other, SNVCollectionCount):
            raise TypeError(
                "'<=' not supported between instances of "
                "'SNVCollectionCount' and 'Any'")
        return self._snvs <= other._snvs

    def __gt__(self: 'SNVCollectionCount', other: Any) -> bool:
        if not isinstance(other, SNVCollectionCount):
            raise TypeError(
                "'>' not supported between instances of "
                "'SNVCollectionCount' and 'Any'")
        return self._snvs > other._snvs

    def __ge__(self: 'SNVCollectionCount', other: Any) -> bool:
        if not isinstance(other, SNVCollectionCount):
            raise TypeError(
                "'>=' not supported between instances of "
                "'SNVCollectionCount' and 'Any'")
        return self._snvs >= other._snvs

    def __reduce__(self: 'SNVCollectionCount') -> Tuple[Any, ...]:
        return (
            _restore_collection,
            (self._snvs, self._count, self._total_coverage)
        )

    def __repr__(self: 'SNVCollectionCount') -> str:
        return 'SNVCollectionCount({!r}, count={!r})'.format(
            list(self._snvs), self._count)


def _restore_collection(
    snvs: SNVKeyTuple,
    count: int,
    total_coverage: float
) -> SNVCollectionCount:
    collection = SNVCollectionCount(snvs, total_coverage)
    collection._count = count
    return collection


@cython.cclass
class HaplotypeTable:
    """The shared table of distinct SNV collections seen across reads.

    A single lock guards the read-modify-write of an entry, so concurrent
    `record` calls for the same SNVs are never lost.
    """

    _collections: Dict[
        SNVKeyTuple,
        SNVCollectionCount
    ] = cython.declare(dict, visibility="private")
    _lock: Any = cython.declare(object, visibility="private")

    def __init__(self: 'HaplotypeTable'):
        self._collections = {}
        self._lock = threading.Lock()

    def record(
        self: 'HaplotypeTable',
        snvs: Iterable[SNV],
        coverage: float
    ) -> SNVCollectionCount:
        key: SNVKeyTuple = tuple(snvs)
        with self._lock:
            collection = self._collections.get(key)
            if collection is None:
                collection = SNVCollectionCount(key, coverage)
                self._collections[key] = collection
            else:
                collection.bump_count(coverage)
        return collection

    def update(
        self: 'HaplotypeTable',
        others: Iterable[SNVCollectionCount]
    ) -> None:
        """Merge collections counted elsewhere (e.g. by a worker process)"""
        others = list(others)
        with self._lock:
            for other in others:
                collection = self._collections.get(other.snvs)
                if collection is None:
                    self._collections[other.snvs] = _restore_collection(
                        other._snvs, other._count, other._total_coverage)
                else:
                    collection.update(other)

    def get(
        self: 'HaplotypeTable',
        snvs: Iterable[SNV]
    ) -> Optional[SNVCollectionCount]:
        with self._lock:
            return self._collections.get(tuple(snvs))

    @property
    def total_count(self: 'HaplotypeTable') -> int:
        with self._lock:
            return sum(c.count for c in self._collections.values())

    def collections(self: 'HaplotypeTable') -> List[SNVCollectionCount]:
        with self._lock:
            return sorted(self._collections.values())

    def __len__(self: 'HaplotypeTable') -> int:
        return len(self._collections)

    def __iter__(self: 'HaplotypeTable') -> Iterator[SNVCollectionCount]:
        return iter(self.collections())

    def __getstate__(self: 'HaplotypeTable') -> Dict[
        SNVKeyTuple, SNVCollectionCount
    ]:
        with self._lock:
            return dict(self._collections)

    def __setstate__(
        self: 'HaplotypeTable',
        state: Dict[SNVKeyTuple, SNVCollectionCount]
    ) -> None:
        self._collections = state
        self._lock = threading.Lock()
