import re
import cython  # type: ignore
from collections import defaultdict
from more_itertools import chunked, pairwise
from typing import (
    DefaultDict,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    Union
)

from .errors import InvalidArgument, OutOfRange
from .snv import SNV
from .codon_variation import CodonVariation, CodonVariationType
from .codonutils import INDETERMINATE, encode_codon, is_valid_na
from .codonvar_types import CodonText, CodonValue, NAPos, NAPosRange

ORF_RANGE_PATTERN = re.compile(r'^\s*(\d+)\s*-\s*(\d+)\s*$')

SNVsByPos = DefaultDict[NAPos, List[SNV]]


def parse_orf_coords(orf_coords: str) -> List[NAPosRange]:
    """Parse "3-6,8-12" into [(3, 6), (8, 12)]

    Ranges are 1-based and inclusive; they must be ascending and must not
    overlap.
    """
    refranges: List[NAPosRange] = []
    if not orf_coords or not orf_coords.strip():
        raise InvalidArgument('ORF coordinates are empty')
    for text in orf_coords.split(','):
        match = ORF_RANGE_PATTERN.match(text)
        if not match:
            raise InvalidArgument(
                'Malformed ORF range {!r} in {!r}'.format(text, orf_coords))
        start, end = int(match.group(1)), int(match.group(2))
        if start < 1 or start > end:
            raise InvalidArgument(
                'Invalid ORF range {!r} in {!r}'.format(text, orf_coords))
        refranges.append((start, end))
    for (_, prev_end), (start, _) in pairwise(refranges):
        if start <= prev_end:
            raise InvalidArgument(
                'ORF ranges must be ascending and non-overlapping: {!r}'
                .format(orf_coords))
    return refranges


@cython.cclass
class CodonTracker:
    """Translates reference-coordinate SNVs into codon variations of an ORF.

    The ORF may be spliced: the coding sequence is the concatenation of the
    ORF ranges, and reference offsets outside every range are ignored.
    """

    ref_seq: bytes = cython.declare(bytes, visibility="readonly")
    orf_ranges: List[NAPosRange] = cython.declare(
        list, visibility="readonly")
    _coding_offsets: List[NAPos] = cython.declare(
        list, visibility="private")
    _coding_index: Dict[NAPos, int] = cython.declare(
        dict, visibility="private")
    _ref_codon_values: List[CodonValue] = cython.declare(
        list, visibility="private")

    def __init__(
        self: 'CodonTracker',
        orf_coords: str,
        ref_seq: Union[bytes, str]
    ):
        if isinstance(ref_seq, str):
            ref_seq = ref_seq.encode('ASCII')
        self.ref_seq = bytes(ref_seq).upper()
        self.orf_ranges = parse_orf_coords(orf_coords)

        offsets: List[NAPos] = []
        for start, end in self.orf_ranges:
            if end > len(self.ref_seq):
                raise InvalidArgument(
                    'ORF range {}-{} extends past the end of the reference '
                    '(length {})'.format(start, end, len(self.ref_seq)))
            offsets.extend(range(start - 1, end))
        if len(offsets) % 3:
            raise InvalidArgument(
                'ORF length must be a multiple of 3: {}'.format(len(offsets)))
        for offset in offsets:
            if not is_valid_na(self.ref_seq[offset]):
                raise InvalidArgument(
                    'ORF contains an invalid reference base {!r} at {}'
                    .format(chr(self.ref_seq[offset]), offset + 1))

        self._coding_offsets = offsets
        self._coding_index = {
            offset: idx for idx, offset in enumerate(offsets)
        }
        self._ref_codon_values = [
            encode_codon(self.ref_seq[offset] for offset in codon_offsets)
            for codon_offsets in chunked(offsets, 3)
        ]

    @property
    def num_codons(self: 'CodonTracker') -> int:
        return len(self._ref_codon_values)

    def codon_index(self: 'CodonTracker', ref_pos: NAPos) -> Optional[int]:
        """The codon index of a 0-based reference offset, None if non-coding"""
        idx: Optional[int] = self._coding_index.get(ref_pos)
        if idx is None:
            return None
        return idx // 3

    def ref_codon_value(self: 'CodonTracker', codon_index: int) -> CodonValue:
        return self._ref_codon_values[codon_index]

    def ref_codon(self: 'CodonTracker', codon_index: int) -> CodonText:
        offsets = self._coding_offsets[codon_index * 3:codon_index * 3 + 3]
        return bytes(self.ref_seq[offset] for offset in offsets)

    @cython.cfunc
    @cython.locals(net=cython.int, num_indels=cython.int)
    @cython.returns(tuple)
    def _apply_snvs(
        self: 'CodonTracker',
        offset: NAPos,
        snvs_by_pos: SNVsByPos,
        nas: bytearray
    ) -> Tuple[int, int]:
        """Append the read's bases at a reference offset to `nas`

        Insertions precede the reference base; a deletion drops it and a
        substitution replaces it. Returns the net length change and the
        number of indel events at this offset.
        """
        net = 0
        num_indels = 0
        deleted: bool = False
        na: int = self.ref_seq[offset]
        for snv in snvs_by_pos.get(offset, ()):
            if snv.is_insertion:
                nas.append(snv.alt_call)
                net += 1
                num_indels += 1
            elif snv.is_deletion:
                deleted = True
            else:
                na = snv.alt_call
        if deleted:
            net -= 1
            num_indels += 1
        else:
            nas.append(na)
        return net, num_indels

    @cython.cfunc
    @cython.returns(list)
    def _read_codon_values(
        self: 'CodonTracker',
        nas: bytearray,
        num_codons: int
    ) -> List[CodonValue]:
        values: List[CodonValue] = []
        for codon in chunked(nas, 3):
            if len(values) == num_codons:
                break
            values.append(encode_codon(codon))
        while len(values) < num_codons:
            values.append(INDETERMINATE)
        return values

    @cython.cfunc
    @cython.returns(cython.long)
    def _encode_run(
        self: 'CodonTracker',
        first_codon: int,
        snvs_by_pos: SNVsByPos,
        variations: List[CodonVariation]
    ) -> int:
        """Encode codons from `first_codon` until the frame is in phase

        Returns the index of the last codon consumed.
        """
        nas: bytearray = bytearray()
        delta: int = 0
        shifted: bool = False
        codon_idx: int = first_codon
        last_codon: int = self.num_codons - 1
        net: int
        num_indels: int
        codon_net: int
        codon_indels: int

        while True:
            codon_net = 0
            codon_indels = 0
            for offset in self._coding_offsets[
                codon_idx * 3:codon_idx * 3 + 3
            ]:
                net, num_indels = self._apply_snvs(offset, snvs_by_pos, nas)
                codon_net += net
                codon_indels += num_indels
            if delta % 3 and not codon_indels:
                # an untouched codon is read out of frame
                shifted = True
            delta += codon_net
            if delta % 3 == 0:
                self._report_in_phase(
                    first_codon, codon_idx, nas, shifted, variations)
                return codon_idx
            if codon_idx == last_codon:
                self._report_out_of_phase(
                    first_codon, nas, snvs_by_pos, variations)
                return codon_idx
            codon_idx += 1

    @cython.cfunc
    def _report_in_phase(
        self: 'CodonTracker',
        first_codon: int,
        last_codon: int,
        nas: bytearray,
        shifted: bool,
        variations: List[CodonVariation]
    ) -> None:
        ref_values: List[CodonValue] = (
            self._ref_codon_values[first_codon:last_codon + 1])
        read_values: List[CodonValue] = self._read_codon_values(
            nas, len(nas) // 3)
        num_ref: int = len(ref_values)
        num_read: int = len(read_values)
        head: int = 0
        tail: int = 0
        idx: int

        if shifted:
            variations.append(CodonVariation(
                first_codon, INDETERMINATE, CodonVariationType.FRAMESHIFT))

        # codons unchanged at either end of the run are not variations
        while (
            head < num_ref and head < num_read and
            read_values[head] == ref_values[head]
        ):
            head += 1
        while (
            tail < num_ref - head and tail < num_read - head and
            read_values[num_read - tail - 1] == ref_values[num_ref - tail - 1]
        ):
            tail += 1

        num_ref -= head + tail
        num_read -= head + tail
        paired: int = min(num_ref, num_read)
        for idx in range(paired):
            if read_values[head + idx] != ref_values[head + idx]:
                variations.append(CodonVariation(
                    first_codon + head + idx,
                    read_values[head + idx],
                    CodonVariationType.MODIFICATION))
        for idx in range(paired, num_ref):
            variations.append(CodonVariation(
                first_codon + head + idx,
                INDETERMINATE,
                CodonVariationType.DELETION))
        ins_codon: int = min(first_codon + head + paired, last_codon)
        for idx in range(paired, num_read):
            variations.append(CodonVariation(
                ins_codon,
                read_values[head + idx],
                CodonVariationType.INSERTION))

    @cython.cfunc
    def _report_out_of_phase(
        self: 'CodonTracker',
        first_codon: int,
        nas: bytearray,
        snvs_by_pos: SNVsByPos,
        variations: List[CodonVariation]
    ) -> None:
        num_codons: int = self.num_codons - first_codon
        offset: NAPos = self._coding_offsets[-1] + 1
        idx: int

        variations.append(CodonVariation(
            first_codon, INDETERMINATE, CodonVariationType.FRAMESHIFT))

        # the last shifted codons are completed from the reference
        # downstream of the ORF
        while len(nas) < num_codons * 3 and offset < len(self.ref_seq):
            self._apply_snvs(offset, snvs_by_pos, nas)
            offset += 1

        read_values = self._read_codon_values(nas, num_codons)
        for idx in range(num_codons):
            if read_values[idx] != self._ref_codon_values[first_codon + idx]:
                variations.append(CodonVariation(
                    first_codon + idx,
                    read_values[idx],
                    CodonVariationType.MODIFICATION))

    def encode_snvs_as_codons(
        self: 'CodonTracker',
        snvs: Sequence[SNV]
    ) -> List[CodonVariation]:
        """Encode a read's SNVs as codon variations of the ORF

        SNVs outside of the ORF ranges never start a codon variation, but
        downstream of the ORF they still shape the codons completed after an
        unrecovered frame shift. Variations are ordered by codon index; a
        FRAMESHIFT record precedes the other records of its codon. An
        unrecovered shift is reported at the first codon of its run even
        when that codon reads back unchanged, in which case no other record
        shares its index.
        """
        variations: List[CodonVariation] = []
        snvs_by_pos: SNVsByPos = defaultdict(list)
        codon_indices: List[int] = []
        ref_size: int = len(self.ref_seq)
        last_codon: int = -1
        idx: Optional[int]

        for snv in snvs:
            if snv.ref_pos >= ref_size:
                raise OutOfRange(
                    'SNV {!r} lies beyond the end of the reference '
                    '(length {})'.format(snv, ref_size))
            snvs_by_pos[snv.ref_pos].append(snv)
            idx = self._coding_index.get(snv.ref_pos)
            if idx is not None:
                codon_indices.append(idx // 3)

        for codon_idx in sorted(set(codon_indices)):
            if codon_idx <= last_codon:
                continue
            last_codon = self._encode_run(codon_idx, snvs_by_pos, variations)
        return variations
