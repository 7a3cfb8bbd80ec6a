import os
import tempfile
import unittest
from typing import List, Tuple

import pysam  # type: ignore

from codonvar.snv import SNV
from codonvar.snv_collection import HaplotypeTable
from codonvar.interval_counter import IntervalCounter
from codonvar.codon_tracker import CodonTracker
from codonvar.samfile_helper import chunked_samfile, count_mapped_reads
from codonvar.read_snvs import iter_read_snvs
from codonvar.haplotypes import (
    count_haplotypes,
    get_haplotype_rows,
    sam2haplotypes
)

REF_SEQ = 'ACATGCGTCTAGTACGT'
ORF_COORDS = '3-6,8-12'

#         name     refstart  sequence      cigar
READS: List[Tuple[str, int, str, List[Tuple[int, int]]]] = [
    ('del', 1, 'CTGCGTCTAG', [(0, 1), (2, 1), (0, 9)]),
    ('wt', 2, 'ATGCGTCTAG', [(0, 10)]),
    ('sub', 2, 'CTGCGTCTAG', [(0, 10)]),
]


def write_bam(
    samfile: str,
    references: List[Tuple[str, int]],
    reads: List[Tuple[int, str, int, str, List[Tuple[int, int]]]]
) -> None:
    header = {
        'HD': {'VN': '1.0', 'SO': 'coordinate'},
        'SQ': [{'LN': length, 'SN': name} for name, length in references]
    }
    with pysam.AlignmentFile(samfile, 'wb', header=header) as fp:
        for refid, name, refstart, seq, cigar in reads:
            read = pysam.AlignedSegment(fp.header)
            read.query_name = name
            read.query_sequence = seq
            read.flag = 0
            read.reference_id = refid
            read.reference_start = refstart
            read.mapping_quality = 60
            read.cigartuples = cigar
            read.next_reference_id = -1
            read.next_reference_start = -1
            read.template_length = 0
            read.query_qualities = pysam.qualitystring_to_array(
                '?' * len(seq))
            fp.write(read)
    pysam.index(samfile)


class TestCountHaplotypes(unittest.TestCase):

    def setUp(self) -> None:
        self.tracker = CodonTracker(ORF_COORDS, REF_SEQ)
        self.table = HaplotypeTable()
        self.interval_counter = IntervalCounter(len(REF_SEQ))
        num_reads = count_haplotypes([
            ((1, 13), []),
            ((1, 13), []),
            ((1, 13), [SNV(2, 'A', 'C', 30)]),
            ((2, 12), [SNV(2, 'A', 'C', 20)]),
            ((0, 17), [SNV(2, 'A', '-', 30)]),
        ], self.table, self.interval_counter)
        self.assertEqual(num_reads, 5)

    def test_count_haplotypes(self) -> None:
        self.assertEqual(len(self.table), 3)
        self.assertEqual(self.table.total_count, 5)
        self.assertEqual(self.interval_counter.total, 5)
        self.assertEqual(self.interval_counter.count_spanners(1, 13), 4)
        collection = self.table.get([SNV(2, 'A', 'C')])
        assert collection is not None
        self.assertEqual(collection.count, 2)
        self.assertAlmostEqual(collection.mean_ref_coverage, 11.)

    def test_get_haplotype_rows(self) -> None:
        rows = get_haplotype_rows(
            self.table, self.interval_counter, self.tracker)
        self.assertEqual(rows, [{
            'count': 2,
            'spanners': 5,
            'mean_ref_coverage': 12.0,
            'snvs': '',
            'codon_variations': '',
            'aa_variations': ''
        }, {
            'count': 2,
            'spanners': 5,
            'mean_ref_coverage': 11.0,
            'snvs': '3:A>C',
            'codon_variations': '1:CTG',
            'aa_variations': 'M1L'
        }, {
            'count': 1,
            'spanners': 5,
            'mean_ref_coverage': 17.0,
            'snvs': '3:A>-',
            'codon_variations': '1:FS,1:TGC,2:TCT,3:AGT',
            'aa_variations': 'M1fs,M1C,L2S,*3S'
        }])


class TestSam2Haplotypes(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:
        cls.tmpdir = tempfile.TemporaryDirectory()
        cls.samfile = os.path.join(cls.tmpdir.name, 'reads.bam')
        write_bam(cls.samfile, [('ref', len(REF_SEQ))], [
            (0, name, refstart, seq, cigar)
            for name, refstart, seq, cigar in READS
        ])

    @classmethod
    def tearDownClass(cls) -> None:
        cls.tmpdir.cleanup()

    def test_chunked_samfile(self) -> None:
        chunks = chunked_samfile(self.samfile, 2)
        self.assertEqual(len(chunks), 2)
        self.assertEqual(chunks[0][1], chunks[1][0])

    def test_iter_read_snvs(self) -> None:
        chunks = chunked_samfile(self.samfile, 100)
        self.assertEqual(len(chunks), 1)
        self.assertEqual(count_mapped_reads(self.samfile), 3)
        result = list(iter_read_snvs(
            self.samfile, chunks[0][0], chunks[0][1], REF_SEQ.encode()))
        self.assertEqual(result, [
            ('del', (1, 12), [SNV(2, 'A', '-')]),
            ('wt', (2, 12), []),
            ('sub', (2, 12), [SNV(2, 'A', 'C')]),
        ])

    def test_sam2haplotypes(self) -> None:
        tracker = CodonTracker(ORF_COORDS, REF_SEQ)
        table, interval_counter = sam2haplotypes(
            self.samfile, tracker, workers=1,
            log_format='silent', chunk_size=2)
        self.assertEqual(table.total_count, 3)
        self.assertEqual(
            [list(collection.snvs) for collection in table],
            [[], [SNV(2, 'A', '-')], [SNV(2, 'A', 'C')]]
        )
        self.assertEqual(interval_counter.total, 3)
        self.assertEqual(interval_counter.count_spanners(2, 12), 3)
        self.assertEqual(interval_counter.count_spanners(1, 12), 1)
        deletion = table.get([SNV(2, 'A', '-')])
        assert deletion is not None
        self.assertAlmostEqual(deletion.mean_ref_coverage, 11.)

class TestMultiReferenceBAM(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:
        cls.tmpdir = tempfile.TemporaryDirectory()
        cls.samfile = os.path.join(cls.tmpdir.name, 'multi.bam')
        write_bam(
            cls.samfile,
            [('ref', len(REF_SEQ)), ('other', 40)],
            [
                (0, 'sub', 2, 'CTGCGTCTAG', [(0, 10)]),
                (1, 'elsewhere', 25, 'GGGGGGGGGG', [(0, 10)]),
            ])

    @classmethod
    def tearDownClass(cls) -> None:
        cls.tmpdir.cleanup()

    def test_count_mapped_reads(self) -> None:
        self.assertEqual(count_mapped_reads(self.samfile), 2)
        self.assertEqual(count_mapped_reads(self.samfile, 'ref'), 1)
        self.assertEqual(count_mapped_reads(self.samfile, 'other'), 1)

    def test_iter_read_snvs_of_reference(self) -> None:
        (begin, end), = chunked_samfile(self.samfile, 100)
        result = list(iter_read_snvs(
            self.samfile, begin, end, REF_SEQ.encode(), 'ref'))
        self.assertEqual(result, [
            ('sub', (2, 12), [SNV(2, 'A', 'C')]),
        ])

    def test_sam2haplotypes_of_reference(self) -> None:
        tracker = CodonTracker(ORF_COORDS, REF_SEQ)
        table, interval_counter = sam2haplotypes(
            self.samfile, tracker, workers=1,
            log_format='silent', ref_name='ref')
        self.assertEqual(table.total_count, 1)
        self.assertEqual(
            [list(collection.snvs) for collection in table],
            [[SNV(2, 'A', 'C')]])
        self.assertEqual(interval_counter.total, 1)



if __name__ == '__main__':
    unittest.main()
