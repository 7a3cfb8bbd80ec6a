import cython  # type: ignore
from tqdm import tqdm  # type: ignore
from concurrent.futures import ProcessPoolExecutor
from typing import (
    Any,
    Iterable,
    List,
    Optional,
    Tuple,
    Union,
    Counter as tCounter
)
from collections import Counter

from .snv import SNV, join_snvs
from .snv_collection import HaplotypeTable, SNVCollectionCount
from .interval_counter import IntervalCounter
from .codon_tracker import CodonTracker
from .codon_variation import join_codon_variations, describe_codon_variation
from .codonvar_types import HaplotypeRow, Span
from .read_snvs import iter_read_snvs
from .samfile_helper import chunked_samfile, count_mapped_reads
from .json_progress import JsonProgress
from .profile import DEFAULT_CHUNK_SIZE

PartialResult = Tuple[List[SNVCollectionCount], tCounter[Span], int]


def count_haplotypes(
    reads: Iterable[Tuple[Span, List[SNV]]],
    table: HaplotypeTable,
    interval_counter: IntervalCounter
) -> int:
    """Fold (span, snvs) reads into the haplotype table and span counter

    The reference coverage folded into each haplotype is the length of the
    read's aligned span. Returns the number of reads processed.
    """
    start: int
    end: int
    num_reads: int = 0
    for (start, end), snvs in reads:
        interval_counter.add_count(start, end)
        table.record(snvs, end - start)
        num_reads += 1
    return num_reads


@cython.ccall
@cython.returns(tuple)
def sam2haplotypes_between(
    samfile: str,
    samfile_start: int,
    samfile_end: int,
    ref_seq: bytes,
    ref_name: Optional[str] = None
) -> PartialResult:
    """subprocess function to collect haplotypes from one BAM chunk

    Haplotypes and read spans are aggregated here so that only compact
    partial counts are sent back to the main process.
    """
    table: HaplotypeTable = HaplotypeTable()
    spans: tCounter[Span] = Counter()
    num_reads: int = 0

    for _, span, snvs in iter_read_snvs(
        samfile, samfile_start, samfile_end, ref_seq, ref_name
    ):
        table.record(snvs, span[1] - span[0])
        spans[span] += 1
        num_reads += 1

    return table.collections(), spans, num_reads


def sam2haplotypes(
    samfile: str,
    tracker: CodonTracker,
    workers: Optional[int] = None,
    log_format: str = 'text',
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    ref_name: Optional[str] = None,
    **extras: Any
) -> Tuple[HaplotypeTable, IntervalCounter]:
    """Count the haplotypes and read spans of an indexed BAM file

    :param samfile: str of the BAM file path
    :param tracker: the CodonTracker of the reference the reads align to
    :param workers: number of worker processes, default to CPU count
    :param log_format: 'json' or 'text', default to 'text'
    :param chunk_size: number of BAM records processed per worker task
    :param ref_name: only count reads aligned to this reference, default
                     to every mapped read
    :param **extras: any other variables to pass to the log method
    :return: the haplotype table and the read span counter
    """
    pbar: Optional[Union[JsonProgress, tqdm]] = None
    total: int = count_mapped_reads(samfile, ref_name)
    if log_format == 'json':
        pbar = JsonProgress(
            op='haplotypes', total=total, description=samfile, **extras)
    elif log_format == 'text':
        pbar = tqdm(total=total)
        pbar.set_description('Processing {}'.format(samfile))

    table: HaplotypeTable = HaplotypeTable()
    interval_counter: IntervalCounter = IntervalCounter(len(tracker.ref_seq))
    chunks: List[Tuple[int, int]] = chunked_samfile(samfile, chunk_size)

    with ProcessPoolExecutor(workers) as executor:

        for collections, spans, num_reads in executor.map(
            sam2haplotypes_between,
            [samfile] * len(chunks),
            [samfile_begin for samfile_begin, _ in chunks],
            [samfile_end for _, samfile_end in chunks],
            [tracker.ref_seq] * len(chunks),
            [ref_name] * len(chunks)
        ):
            table.update(collections)
            for (start, end), count in spans.items():
                interval_counter.add_count(start, end, count)
            if pbar:
                pbar.update(num_reads)
    if pbar:
        pbar.close()

    return table, interval_counter


@cython.ccall
@cython.returns(list)
def get_haplotype_rows(
    table: HaplotypeTable,
    interval_counter: IntervalCounter,
    tracker: CodonTracker
) -> List[HaplotypeRow]:
    """Report each distinct haplotype with its codon-level variations

    `spanners` is the number of reads whose span covers every SNV of the
    haplotype (all reads for the wild-type haplotype). Rows are ordered by
    descending count.
    """
    rows: List[HaplotypeRow] = []
    collection: SNVCollectionCount
    spanners: int
    for collection in table:
        snvs = collection.snvs
        if snvs:
            spanners = interval_counter.count_spanners(
                min(snv.ref_pos for snv in snvs),
                max(snv.ref_pos for snv in snvs) + 1)
        else:
            spanners = interval_counter.total
        variations = tracker.encode_snvs_as_codons(snvs)
        rows.append({
            'count': collection.count,
            'spanners': spanners,
            'mean_ref_coverage': round(collection.mean_ref_coverage, 2),
            'snvs': join_snvs(snvs),
            'codon_variations': join_codon_variations(variations),
            'aa_variations': ','.join(
                describe_codon_variation(
                    var, tracker.ref_codon(var.codon_index))
                for var in variations
            )
        })
    rows.sort(key=lambda row: -row['count'])
    return rows
