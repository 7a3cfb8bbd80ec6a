import cython  # type: ignore
from typing import Any, Iterable, Tuple, Union

from .errors import InvalidArgument
from .codonutils import GAP
from .codonvar_types import NAPos, NAChar

SNVKey = Tuple[NAPos, NAChar, NAChar]


@cython.cfunc
@cython.inline
@cython.returns(cython.int)
def to_nachar(call: Union[NAChar, str, bytes]) -> NAChar:
    if isinstance(call, int):
        return call
    if len(call) != 1:
        raise InvalidArgument(
            'A call must be a single nucleotide: {!r}'.format(call))
    if isinstance(call, str):
        return ord(call)
    return call[0]


@cython.cclass
class SNV:
    """A single-position variant event relative to the reference.

    :var ref_pos: The 0-based reference offset of the event.
    :var ref_call: The reference nucleotide, or a gap ("-") for an insertion.
    :var alt_call: The read nucleotide, or a gap ("-") for a deletion.
    :var qual: The base quality of the call; never part of the identity.

    An insertion of N bases is represented by N insertion SNVs sharing the
    same `ref_pos`; the inserted bases precede the reference base at
    `ref_pos`.
    """

    _ref_pos: NAPos = cython.declare(cython.long, visibility="private")
    _ref_call: NAChar = cython.declare(cython.int, visibility="private")
    _alt_call: NAChar = cython.declare(cython.int, visibility="private")
    _qual: int = cython.declare(cython.int, visibility="private")

    def __init__(
        self: 'SNV',
        ref_pos: NAPos,
        ref_call: Union[NAChar, str, bytes],
        alt_call: Union[NAChar, str, bytes],
        qual: int = 0
    ):
        if ref_pos < 0:
            raise InvalidArgument(
                'SNV reference position must not be negative: {}'
                .format(ref_pos))
        self._ref_pos = ref_pos
        self._ref_call = to_nachar(ref_call)
        self._alt_call = to_nachar(alt_call)
        self._qual = qual

    @property
    def ref_pos(self: 'SNV') -> NAPos:
        return self._ref_pos

    @property
    def ref_call(self: 'SNV') -> NAChar:
        return self._ref_call

    @property
    def alt_call(self: 'SNV') -> NAChar:
        return self._alt_call

    @property
    def qual(self: 'SNV') -> int:
        return self._qual

    @property
    def key(self: 'SNV') -> SNVKey:
        return (self._ref_pos, self._ref_call, self._alt_call)

    @property
    def is_insertion(self: 'SNV') -> bool:
        return self._ref_call == GAP

    @property
    def is_deletion(self: 'SNV') -> bool:
        return self._alt_call == GAP

    @property
    def is_substitution(self: 'SNV') -> bool:
        return self._ref_call != GAP and self._alt_call != GAP

    def __hash__(self: 'SNV') -> int:
        return hash(self.key)

    def __lt__(self: 'SNV', other: Any) -> bool:
        if not isinstance(other, SNV):
            raise TypeError(
                "'<' not supported between instances of 'SNV' and 'Any'")
        return self.key < other.key

    def __le__(self: 'SNV', other: Any) -> bool:
        if not isinstance(other, SNV):
            raise TypeError(
                "'<=' not supported between instances of 'SNV' and 'Any'")
        return self.key <= other.key

    def __eq__(self: 'SNV', other: Any) -> bool:
        if not isinstance(other, SNV):
            return False
        return self.key == other.key

    def __ne__(self: 'SNV', other: Any) -> bool:
        if not isinstance(other, SNV):
            return True
        return self.key != other.key

    def __gt__(self: 'SNV', other: Any) -> bool:
        if not isinstance(other, SNV):
            raise TypeError(
                "'>' not supported between instances of 'SNV' and 'Any'")
        return self.key > other.key

    def __ge__(self: 'SNV', other: Any) -> bool:
        if not isinstance(other, SNV):
            raise TypeError(
                "'>=' not supported between instances of 'SNV' and 'Any'")
        return self.key >= other.key

    def __reduce__(self: 'SNV') -> Tuple[Any, ...]:
        return (SNV, (self._ref_pos, self._ref_call,
                      self._alt_call, self._qual))

    def __repr__(self: 'SNV') -> str:
        return 'SNV({!r}, {!r}, {!r}, {!r})'.format(
            self._ref_pos, chr(self._ref_call),
            chr(self._alt_call), self._qual)

    def __str__(self: 'SNV') -> str:
        return '{}:{}>{}'.format(
            self._ref_pos + 1, chr(self._ref_call), chr(self._alt_call))


def join_snvs(snvs: Iterable[SNV]) -> str:
    """Render SNVs with 1-based positions, e.g. "3:A>C,4:T>-" """
    return ','.join(str(snv) for snv in snvs)
