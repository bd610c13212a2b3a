import pysam

from .constants import CIGAR, ORIENT
from .error import RecordIOError


def read_is_filtered(read, min_mapping_quality=0):
    """
    the filters shared by every alignment stream. Returns True if the read should be ignored
    """
    if read.is_unmapped or read.is_secondary or read.is_supplementary:
        return True
    if read.is_duplicate or read.is_qcfail:
        return True
    if read.mapping_quality < min_mapping_quality:
        return True
    if read.reference_end is None or read.reference_start == read.reference_end:
        return True
    return False


def filter_reads(reads, min_mapping_quality=0):
    """
    Args:
        reads (iterable of pysam.AlignedSegment): input alignments
        min_mapping_quality (int): alignments with a lower mapping quality are dropped

    Returns:
        generator of pysam.AlignedSegment: the alignments passing the shared filters
    """
    for read in reads:
        if not read_is_filtered(read, min_mapping_quality):
            yield read


def open_alignment_file(filename, resources=None):
    """
    open a SAM/BAM file for streaming, registering it with the resources of the current run
    """
    try:
        fh = pysam.AlignmentFile(filename, 'r', check_sq=False)
    except (OSError, ValueError) as err:
        raise RecordIOError('unable to open alignment file: {}'.format(err), filename)
    if resources is not None:
        resources.register(fh, name=filename)
    return fh


def iter_alignments(fh):
    """
    all records in file order. Does not require an index
    """
    return fh.fetch(until_eof=True)


def breakpoint_pos(read, orient=ORIENT.NS):
    """
    assumes the breakpoint is the position following softclipping on the side with more
    softclipping (unless and orientation has been specified)

    Args:
        read (:class:`~pysam.AlignedSegment`): the read object
        orient (ORIENT): the orientation

    Returns:
        tuple of ORIENT and int: the orientation and 0-based position of the breakpoint in the input read
    """
    typ, freq = read.cigartuples[0]
    end_typ, end_freq = read.cigartuples[-1]
    ORIENT.enforce(orient)

    if typ != CIGAR.S and end_typ != CIGAR.S:
        raise AttributeError('cannot compute breakpoint for a read without soft-clipping', read.cigarstring)

    if orient == ORIENT.NS:
        if (typ == CIGAR.S and end_typ == CIGAR.S and freq > end_freq) \
                or typ == CIGAR.S and end_typ != CIGAR.S:
            # soft clipped to the left
            orient = ORIENT.RIGHT
        else:
            # soft clipped to the right
            orient = ORIENT.LEFT

    if orient == ORIENT.RIGHT:
        if typ != CIGAR.S:
            raise AttributeError('soft clipping doesn\'t support input orientation for a breakpoint', orient, read.cigarstring)
        return orient, read.reference_start
    if end_typ != CIGAR.S:
        raise AttributeError('soft clipping doesn\'t support input orientation for a breakpoint', orient, read.cigarstring)
    return orient, read.reference_end - 1


def soft_clipped_length(read):
    """
    the longest soft clipped end of the read
    """
    if not read.cigartuples:
        return 0
    lengths = [v for s, v in [read.cigartuples[0], read.cigartuples[-1]] if s == CIGAR.S]
    return max(lengths) if lengths else 0


def is_discordant(read, max_fragment_size):
    """
    a paired read is discordant when its mate maps to another reference, too far away, or in an unexpected
    orientation (both mates on the same strand or the pair facing away from each other)
    """
    if not read.is_paired or read.mate_is_unmapped or read.is_unmapped:
        return False
    if read.reference_id != read.next_reference_id:
        return True
    if abs(read.template_length) > max_fragment_size:
        return True
    if read.is_reverse == read.mate_is_reverse:
        return True
    if read.reference_start < read.next_reference_start:
        return read.is_reverse
    if read.reference_start > read.next_reference_start:
        return not read.is_reverse
    return False
