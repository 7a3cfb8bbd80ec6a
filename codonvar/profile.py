import json
import cython  # type: ignore
from typing import Any, Dict, TextIO

from .codonvar_types import RunProfile
from .codon_tracker import CodonTracker
from .codonutils import STOP_CODONS
from .json_progress import echo_warning

DEFAULT_CHUNK_SIZE: int = 25000
START_CODON: bytes = b'ATG'


@cython.ccall
@cython.returns(dict)
def get_run_profile(config: Dict[str, Any]) -> RunProfile:
    """Validate a raw profile dict and fill in defaults"""
    refname = config.get('refName')
    refseq = config.get('refSequence')
    orf_coords = config.get('orfCoords')
    chunk_size = config.get('chunkSize', DEFAULT_CHUNK_SIZE)
    workers = config.get('workers')

    if not isinstance(refname, str):
        raise TypeError('refName must be a string')
    if not isinstance(refseq, str):
        raise TypeError('refSequence must be a string')
    if not isinstance(orf_coords, str):
        raise TypeError('orfCoords must be a string')
    if not isinstance(chunk_size, int):
        raise TypeError('chunkSize must be an integer')
    if workers is not None and not isinstance(workers, int):
        raise TypeError('workers must be an integer')
    if not refseq:
        raise ValueError('refSequence must not be empty')
    if chunk_size < 1:
        raise ValueError('chunkSize must be at least 1')
    if workers is not None and workers < 1:
        raise ValueError('workers must be at least 1')

    return {
        'refName': refname,
        'refSequence': refseq,
        'orfCoords': orf_coords,
        'chunkSize': chunk_size,
        'workers': workers
    }


def load_profile(fp: TextIO) -> RunProfile:
    return get_run_profile(json.load(fp))


def build_codon_tracker(
    profile: RunProfile,
    log_format: str = 'text'
) -> CodonTracker:
    """Build the run's CodonTracker, warning about an unusual ORF"""
    tracker = CodonTracker(profile['orfCoords'], profile['refSequence'])
    first_codon: bytes = tracker.ref_codon(0)
    last_codon: bytes = tracker.ref_codon(tracker.num_codons - 1)
    if first_codon != START_CODON:
        echo_warning(
            'ORF of {} begins with {} rather than ATG'
            .format(profile['refName'], first_codon.decode('ASCII')),
            log_format,
            refName=profile['refName'])
    if last_codon not in STOP_CODONS:
        echo_warning(
            'ORF of {} ends with {} rather than a stop codon'
            .format(profile['refName'], last_codon.decode('ASCII')),
            log_format,
            refName=profile['refName'])
    return tracker
