import cython  # type: ignore
from enum import Enum
from typing import Any, Iterable, Tuple

from .codonvar_types import CodonValue, CodonText
from .codonutils import INDETERMINATE, decode_codon, translate_codon


class CodonVariationType(Enum):
    MODIFICATION = 'M'
    INSERTION = 'I'
    DELETION = 'D'
    FRAMESHIFT = 'F'


@cython.cclass
class CodonVariation:
    """A codon-level call produced by CodonTracker.

    :var codon_index: The 0-based codon index within the ORF.
    :var value: The encoded codon (0-63), or -1 when indeterminate.
    :var type: The kind of variation.
    """

    _codon_index: int = cython.declare(cython.long, visibility="private")
    _value: CodonValue = cython.declare(cython.int, visibility="private")
    _type: CodonVariationType = cython.declare(
        object, visibility="private")

    def __init__(
        self: 'CodonVariation',
        codon_index: int,
        value: CodonValue,
        type: CodonVariationType
    ):
        self._codon_index = codon_index
        self._value = value
        self._type = type

    @property
    def codon_index(self: 'CodonVariation') -> int:
        return self._codon_index

    @property
    def value(self: 'CodonVariation') -> CodonValue:
        return self._value

    @property
    def type(self: 'CodonVariation') -> CodonVariationType:
        return self._type

    def is_modification(self: 'CodonVariation') -> bool:
        return self._type is CodonVariationType.MODIFICATION

    def is_insertion(self: 'CodonVariation') -> bool:
        return self._type is CodonVariationType.INSERTION

    def is_deletion(self: 'CodonVariation') -> bool:
        return self._type is CodonVariationType.DELETION

    def is_frameshift(self: 'CodonVariation') -> bool:
        return self._type is CodonVariationType.FRAMESHIFT

    @property
    def codon(self: 'CodonVariation') -> CodonText:
        """The variant codon, or b'' when the value is indeterminate"""
        if self._value == INDETERMINATE:
            return b''
        return decode_codon(self._value)

    def __hash__(self: 'CodonVariation') -> int:
        return hash((self._codon_index, self._value, self._type))

    def __eq__(self: 'CodonVariation', other: Any) -> bool:
        if not isinstance(other, CodonVariation):
            return False
        return (
            self._codon_index == other._codon_index and
            self._value == other._value and
            self._type is other._type
        )

    def __ne__(self: 'CodonVariation', other: Any) -> bool:
        return not self == other

    def __reduce__(self: 'CodonVariation') -> Tuple[Any, ...]:
        return (CodonVariation, (self._codon_index, self._value, self._type))

    def __repr__(self: 'CodonVariation') -> str:
        return 'CodonVariation({!r}, {!r}, {})'.format(
            self._codon_index, self._value, self._type.name)

    def __str__(self: 'CodonVariation') -> str:
        # 1-based codon number, e.g. "1:CTG", "2:DEL", "3:FS"
        if self._type is CodonVariationType.FRAMESHIFT:
            return '{}:FS'.format(self._codon_index + 1)
        if self._type is CodonVariationType.DELETION:
            return '{}:DEL'.format(self._codon_index + 1)
        codon = self.codon.decode('ASCII') or 'NNN'
        if self._type is CodonVariationType.INSERTION:
            return '{}:INS{}'.format(self._codon_index + 1, codon)
        return '{}:{}'.format(self._codon_index + 1, codon)


def join_codon_variations(variations: Iterable[CodonVariation]) -> str:
    return ','.join(str(var) for var in variations)


def describe_codon_variation(
    variation: CodonVariation,
    ref_codon: CodonText
) -> str:
    """Describe a codon variation as an amino-acid change, e.g. "M1L"

    :param variation: The codon variation to describe.
    :param ref_codon: The reference codon at `variation.codon_index`.
    """
    ref_aa: str = translate_codon(ref_codon).decode('ASCII')
    aapos: int = variation.codon_index + 1
    if variation.is_frameshift():
        return '{}{}fs'.format(ref_aa, aapos)
    if variation.is_deletion():
        return '{}{}del'.format(ref_aa, aapos)
    alt_aa: str = (
        translate_codon(variation.codon).decode('ASCII')
        if variation.value != INDETERMINATE else 'X'
    )
    if variation.is_insertion():
        return '{}{}ins{}'.format(ref_aa, aapos, alt_aa)
    return '{}{}{}'.format(ref_aa, aapos, alt_aa)
