"""
read depth lookups computed in a single forward pass over coordinate ordered alignments
"""
import heapq

from .bam import filter_reads, iter_alignments, open_alignment_file
from .merge import merge_sorted
from .sort import coordinate_key


class SequentialCoverageLookup:
    """
    answers read depth queries while streaming through the alignments. Only the alignments near the current
    position are held in memory so queries must be made in non-decreasing position order for each reference
    sequence. Queries up to window_size positions behind the furthest position queried are still exact,
    anything further behind is not
    """

    def __init__(self, reads, window_size=1024):
        """
        Args:
            reads (iterable of pysam.AlignedSegment): alignments ordered by reference id then start
            window_size (int): number of positions behind the cursor which remain queryable
        """
        self.reads = iter(reads)
        self.window_size = window_size
        self.cursor = (-1, -1)
        self._next_read = None
        self._reference_id = None
        self._active = []  # heap of (end, start) of the alignments still near the cursor

    def _peek(self):
        if self._next_read is None:
            self._next_read = next(self.reads, None)
        return self._next_read

    def _advance(self, reference_id, position):
        # position is 0-based here
        while True:
            read = self._peek()
            if read is None or (read.reference_id, read.reference_start) > (reference_id, position):
                break
            self._next_read = None
            if read.reference_id != self._reference_id:
                self._active = []
                self._reference_id = read.reference_id
            heapq.heappush(self._active, (read.reference_end, read.reference_start))
        if reference_id != self._reference_id:
            self._active = []
            self._reference_id = reference_id
        horizon = position - self.window_size
        while self._active and self._active[0][0] <= horizon:
            heapq.heappop(self._active)
        self.cursor = (reference_id, position)

    def reference_coverage(self, reference_id, position):
        """
        Args:
            reference_id (int): the reference sequence index
            position (int): 1-based genomic position

        Returns:
            int: the number of alignments overlapping the position
        """
        position -= 1
        if (reference_id, position) > self.cursor:
            self._advance(reference_id, position)
        if reference_id != self._reference_id:
            return 0
        return sum([1 for end, start in self._active if start <= position < end])

    def close(self):
        close = getattr(self.reads, 'close', None)
        if close is not None:
            close()
        self._active = []


def get_reference_lookup(alignment_files, resources, window_size=1024, key=coordinate_key, min_mapping_quality=0):
    """
    merge several alignment files into one stream and wrap it in a coverage lookup

    Args:
        alignment_files (list of str): coordinate sorted SAM/BAM files
        resources (ResourceSet): the resources of the current run. Every opened file is registered here
        window_size (int): see :class:`SequentialCoverageLookup`
        key (callable): the ordering of the merged stream. Must agree with the order of the input files
        min_mapping_quality (int): alignments with a lower mapping quality are not counted

    Returns:
        SequentialCoverageLookup: lookup over the merged alignments, registered with the resources
    """
    streams = []
    for filename in alignment_files:
        fh = open_alignment_file(filename, resources)
        streams.append(filter_reads(iter_alignments(fh), min_mapping_quality=min_mapping_quality))
    lookup = SequentialCoverageLookup(merge_sorted(streams, key=key), window_size=window_size)
    return resources.register(lookup, name='coverage lookup')
