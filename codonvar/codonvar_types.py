from typing import Optional, TypedDict, Tuple

Header = str
SeqText = str
NAPos = int
NAChar = int
MultiNAText = bytes
CodonText = MultiNAText
AAChar = int
MultiAAText = bytes
CodonValue = int

#              1-based, inclusive
#               v      v
NAPosRange = Tuple[NAPos, NAPos]

#        0-based, half-open
#          v      v
Span = Tuple[NAPos, NAPos]


class RunProfile(TypedDict, total=False):
    refName: Header
    refSequence: SeqText
    orfCoords: str
    chunkSize: int
    workers: Optional[int]


class HaplotypeRow(TypedDict):
    count: int
    spanners: int
    mean_ref_coverage: float
    snvs: str
    codon_variations: str
    aa_variations: str
