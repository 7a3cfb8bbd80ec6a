import pysam  # type: ignore
import cython  # type: ignore
from more_itertools import pairwise
from typing import List, Optional, Tuple


@cython.ccall
@cython.returns(list)
def chunked_samfile(
    samfile: str,
    chunk_size: int = 25000
) -> List[Tuple[int, int]]:
    """Split a SAM/BAM file into (begin, end) offsets of chunk_size records

    The offsets are virtual file offsets as returned by `tell()`, suitable
    for `seek()` in a worker process.
    """
    idx: int
    offsets: List[int] = []

    if chunk_size < 1:
        raise ValueError('chunk_size must be at least 1')

    with pysam.AlignmentFile(samfile, 'rb') as samfp:
        offsets.append(samfp.tell())
        for idx, _ in enumerate(samfp, 1):
            if idx % chunk_size == 0:
                offsets.append(samfp.tell())
        end: int = samfp.tell()
        if end > offsets[-1]:
            offsets.append(end)

    return list(pairwise(offsets))


def count_mapped_reads(samfile: str, ref_name: Optional[str] = None) -> int:
    """Number of mapped reads, optionally of one reference only

    Requires an indexed BAM file.
    """
    with pysam.AlignmentFile(samfile, 'rb') as samfp:
        if ref_name is None:
            return samfp.mapped
        return sum(
            stat.mapped for stat in samfp.get_index_statistics()
            if stat.contig == ref_name
        )
