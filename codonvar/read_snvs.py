import pysam  # type: ignore
import cython  # type: ignore
from pysam import AlignedSegment  # type: ignore
from typing import List, Tuple, Optional, Generator, Sequence

from .snv import SNV
from .codonutils import GAP, is_valid_na
from .codonvar_types import NAPos, SeqText, Header, Span

ENCODING: str = 'UTF-8'


@cython.ccall
@cython.inline
@cython.returns(list)
def get_read_snvs(
    seq: SeqText,
    quals: Optional[Sequence[int]],
    aligned_pairs: List[Tuple[Optional[NAPos], Optional[NAPos]]],
    ref_seq: bytes
) -> List[SNV]:
    """Convert one aligned read into reference-ordered SNVs.

    :param seq: The query sequence of the read.
    :param quals: The base qualities of the query, or None.
    :param aligned_pairs: The 0-based (query, reference) pairs as returned
                          by `AlignedSegment.get_aligned_pairs(False)`.
    :param ref_seq: The reference sequence the read is aligned to.
    :return: A list of SNVs; inserted bases are attached to the next aligned
             reference position, and insertions outside of the aligned
             reference span (e.g. soft-clipped bases) are dropped.
    """
    seqpos0: Optional[NAPos]
    refpos0: Optional[NAPos]
    na: int
    refna: int
    qual: int
    seqchars: bytes = bytes(seq, ENCODING).upper()
    snvs: List[SNV] = []
    # (query position, base) of insertions waiting for the next ref base
    pending_ins: List[Tuple[NAPos, int]] = []
    prev_qual: int = 0
    seen_refpos: bool = False

    for seqpos0, refpos0 in aligned_pairs:

        if refpos0 is None:
            # insertion or clipped base
            if seqpos0 is not None and seen_refpos:
                pending_ins.append((seqpos0, seqchars[seqpos0]))
            continue

        refna = ref_seq[refpos0]
        for inspos0, na in pending_ins:
            if is_valid_na(na):
                qual = quals[inspos0] if quals is not None else 0
                snvs.append(SNV(refpos0, GAP, na, qual))
        pending_ins = []
        seen_refpos = True

        if seqpos0 is None:
            # deletion, qualified by the preceding query base
            snvs.append(SNV(refpos0, refna, GAP, prev_qual))
            continue

        na = seqchars[seqpos0]
        prev_qual = quals[seqpos0] if quals is not None else 0
        if na != refna and is_valid_na(na):
            snvs.append(SNV(refpos0, refna, na, prev_qual))

    return snvs


def get_read_span(read: AlignedSegment) -> Span:
    """0-based, half-open reference span of an aligned read"""
    return read.reference_start, read.reference_end


def iter_read_snvs(
    samfile: str,
    samfile_start: int,
    samfile_end: int,
    ref_seq: bytes,
    ref_name: Optional[str] = None
) -> Generator[Tuple[Optional[Header], Span, List[SNV]], None, None]:
    """Retrieve the SNVs of mapped reads between two BAM file offsets

    When `ref_name` is given, reads aligned to any other reference are
    skipped; otherwise every mapped read is compared against `ref_seq`.
    """

    read: AlignedSegment

    with pysam.AlignmentFile(samfile, 'rb') as samfp:
        samfp.seek(samfile_start)

        for read in samfp:
            if samfp.tell() > samfile_end:
                break

            if (
                read.is_unmapped or
                read.is_secondary or
                read.is_supplementary or
                not read.query_sequence or
                (ref_name is not None and read.reference_name != ref_name)
            ):
                continue

            yield read.query_name, get_read_span(read), get_read_snvs(
                read.query_sequence,
                read.query_qualities,
                read.get_aligned_pairs(False),
                ref_seq
            )
