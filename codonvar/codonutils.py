import cython  # type: ignore
from itertools import product
from typing import Dict, Iterable, Optional

from .codonvar_types import (
    CodonText,
    CodonValue,
    MultiAAText,
    NAChar
)

GAP: NAChar = ord(b'-')
UNKNOWN_AA: MultiAAText = b'X'

#: codon value sentinel for frame shifts, whole-codon deletions and
#: codons that can not be resolved
INDETERMINATE: CodonValue = -1

NA_VALUES: Dict[NAChar, int] = {
    ord(b'A'): 0,
    ord(b'C'): 1,
    ord(b'G'): 2,
    ord(b'T'): 3
}
VALUE_NAS: bytes = b'ACGT'

# standard genetic code, codons enumerated in TCAG order
_TCAG_AAS: bytes = (
    b'FFLLSSSSYY**CC*W'
    b'LLLLPPPPHHQQRRRR'
    b'IIIMTTTTNNKKSSRR'
    b'VVVVAAAADDEEGGGG'
)

CODON_TABLE: Dict[CodonText, MultiAAText] = {
    bytes(codon): _TCAG_AAS[idx:idx + 1]
    for idx, codon in enumerate(product(b'TCAG', repeat=3))
}

STOP_CODONS = frozenset(
    codon for codon, aa in CODON_TABLE.items() if aa == b'*'
)


def is_valid_na(na: Optional[NAChar]) -> bool:
    return na in NA_VALUES


@cython.ccall
@cython.returns(cython.int)
def encode_codon(nas: Iterable[NAChar]) -> CodonValue:
    """Encode three nucleotides as 16 * b0 + 4 * b1 + b2

    Returns INDETERMINATE when the codon is not exactly three A/C/G/T
    nucleotides.
    """
    value: int = 0
    size: int = 0
    for na in nas:
        if na not in NA_VALUES:
            return INDETERMINATE
        value = (value << 2) | NA_VALUES[na]
        size += 1
    if size != 3:
        return INDETERMINATE
    return value


def decode_codon(value: CodonValue) -> CodonText:
    if value < 0 or value > 63:
        raise ValueError('Codon value out of range: {}'.format(value))
    return bytes([
        VALUE_NAS[(value >> 4) & 3],
        VALUE_NAS[(value >> 2) & 3],
        VALUE_NAS[value & 3]
    ])


def translate_codon(nas: CodonText) -> MultiAAText:
    return CODON_TABLE.get(nas.upper()[:3], UNKNOWN_AA)
