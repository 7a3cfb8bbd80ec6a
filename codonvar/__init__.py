from .errors import InvalidArgument, OutOfRange
from .snv import SNV, join_snvs
from .interval_counter import Interval, IntervalCounter
from .snv_collection import SNVCollectionCount, HaplotypeTable
from .codon_variation import CodonVariation, CodonVariationType
from .codon_tracker import CodonTracker, parse_orf_coords

__all__ = [
    'InvalidArgument', 'OutOfRange',
    'SNV', 'join_snvs',
    'Interval', 'IntervalCounter',
    'SNVCollectionCount', 'HaplotypeTable',
    'CodonVariation', 'CodonVariationType',
    'CodonTracker', 'parse_orf_coords'
]
