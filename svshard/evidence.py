"""
directional evidence for structural variant breakends, and the sources it is read from
"""
from collections import namedtuple

from .bam import breakpoint_pos, filter_reads, is_discordant, iter_alignments, open_alignment_file, soft_clipped_length
from .breakpoint import Breakend, merge_key
from .constants import EVIDENCE_COLUMNS, ORIENT, SAMPLE
from .file_io import TabReader, TabWriter
from .resources import ResourceSet
from .shard import Shard
from .sort import external_sort
from .util import DEVNULL, LOG


class EvidenceRecord(namedtuple('EvidenceRecord', EVIDENCE_COLUMNS.values())):
    """
    a single observation suggesting a breakend. Read pair evidence also has a remote side, split/soft-clipped
    read evidence only has the local side. Positions are 1-based and inclusive
    """

    @property
    def key(self):
        return (self.reference_id, self.start)

    @property
    def is_tumour(self):
        return self.sample == SAMPLE.TUMOUR

    @property
    def has_remote(self):
        return self.remote_reference_id is not None

    @property
    def shard(self):
        """
        the unit of work this evidence belongs to
        """
        if not self.has_remote:
            return Shard(self.reference_id, self.reference_id)
        return Shard(*sorted((self.reference_id, self.remote_reference_id)))

    def sides(self):
        """
        the breakends of the evidence with the side at the lower (reference index, start) first. Both mates of a
        read pair give the same sides

        Returns:
            tuple of Breakend: the lower and upper sides. The upper side is None for single sided evidence
        """
        local = Breakend(self.reference_id, self.start, self.end, orient=self.orient)
        if not self.has_remote:
            return local, None
        remote = Breakend(self.remote_reference_id, self.remote_start, self.remote_end, orient=self.remote_orient)
        if (remote.reference_id, remote.start) < (local.reference_id, local.start):
            return remote, local
        return local, remote

    def flatten(self):
        return self._asdict()

    @classmethod
    def from_row(cls, row):
        def nullable_int(value):
            return int(value) if value not in ['', 'None'] else None

        return cls(
            evidence_id=row[EVIDENCE_COLUMNS.evidence_id],
            sample=SAMPLE.enforce(row[EVIDENCE_COLUMNS.sample]),
            reference_id=int(row[EVIDENCE_COLUMNS.reference_id]),
            start=int(row[EVIDENCE_COLUMNS.start]),
            end=int(row[EVIDENCE_COLUMNS.end]),
            orient=ORIENT.enforce(row[EVIDENCE_COLUMNS.orient]),
            remote_reference_id=nullable_int(row[EVIDENCE_COLUMNS.remote_reference_id]),
            remote_start=nullable_int(row[EVIDENCE_COLUMNS.remote_start]),
            remote_end=nullable_int(row[EVIDENCE_COLUMNS.remote_end]),
            remote_orient=row[EVIDENCE_COLUMNS.remote_orient] or ORIENT.NS,
            mapping_quality=nullable_int(row[EVIDENCE_COLUMNS.mapping_quality]),
        )


def oriented_key(record):
    """
    the (reference index, start) of the lower side of a piece of evidence. The evidence annotator consumes
    evidence in this order
    """
    lower, _ = record.sides()
    return (lower.reference_id, lower.start)


def evidence_writer(filename, log=DEVNULL):
    return TabWriter(filename, EVIDENCE_COLUMNS.values(), log=log)


def evidence_reader(filename):
    return TabReader(filename, EvidenceRecord.from_row)


class EvidenceSource:
    """
    evidence extracted from one alignment file of one sample. The tumour/normal tag is fixed when the source is
    created and applied to every record read from it
    """

    def __init__(self, evidence_file, alignment_file=None, sample=SAMPLE.NORMAL, name=None):
        """
        Args:
            evidence_file (str): tab-delimited evidence file, sorted by (reference index, start)
            alignment_file (str): the coordinate sorted SAM/BAM file the evidence was extracted from
            sample (SAMPLE): the sample the alignments were sequenced from
            name (str): label used in logging
        """
        self.evidence_file = evidence_file
        self.alignment_file = alignment_file
        self.sample = SAMPLE.enforce(sample)
        self.name = name if name else evidence_file

    @property
    def is_tumour(self):
        return self.sample == SAMPLE.TUMOUR

    def iter_evidence(self, shard=None):
        """
        Args:
            shard (Shard): restrict to the evidence belonging to this shard. All evidence is returned when not given

        Returns:
            generator of EvidenceRecord: evidence in file order
        """
        reader = evidence_reader(self.evidence_file)
        try:
            for evidence in reader:
                if shard is not None and not shard.contains(evidence.reference_id, evidence.remote_reference_id):
                    continue
                if evidence.sample != self.sample:
                    evidence = evidence._replace(sample=self.sample)
                yield evidence
        finally:
            reader.close()

    def __repr__(self):
        return '{}({}, sample={})'.format(self.__class__.__name__, self.name, self.sample)


def _read_pair_evidence(read, max_fragment_size):
    if read.is_reverse:
        orient = ORIENT.RIGHT
        end = read.reference_start + 1
        start = max(1, read.reference_end - max_fragment_size + 1)
    else:
        orient = ORIENT.LEFT
        start = read.reference_end
        end = max(start, read.reference_start + max_fragment_size)
    mate_length = read.query_length if read.query_length else read.reference_length
    if read.mate_is_reverse:
        remote_orient = ORIENT.RIGHT
        remote_end = read.next_reference_start + 1
        remote_start = max(1, read.next_reference_start + mate_length - max_fragment_size + 1)
    else:
        remote_orient = ORIENT.LEFT
        remote_start = read.next_reference_start + mate_length
        remote_end = max(remote_start, read.next_reference_start + max_fragment_size)
    return dict(
        reference_id=read.reference_id,
        start=min(start, end),
        end=max(start, end),
        orient=orient,
        remote_reference_id=read.next_reference_id,
        remote_start=min(remote_start, remote_end),
        remote_end=max(remote_start, remote_end),
        remote_orient=remote_orient,
    )


def iter_read_evidence(reads, sample, max_fragment_size=1000, min_soft_clip=5):
    """
    derive evidence from alignments: one record per discordant read and one per soft-clipped read

    Args:
        reads (iterable of pysam.AlignedSegment): filtered alignments
        sample (SAMPLE): the sample the alignments belong to
        max_fragment_size (int): the largest expected fragment size for a concordant pair
        min_soft_clip (int): minimum soft clipped length for a read to be used as split read evidence
    """
    for read in reads:
        if is_discordant(read, max_fragment_size):
            yield EvidenceRecord(
                evidence_id=read.query_name,
                sample=sample,
                mapping_quality=read.mapping_quality,
                **_read_pair_evidence(read, max_fragment_size)
            )
        if min_soft_clip and soft_clipped_length(read) >= min_soft_clip:
            orient, pos = breakpoint_pos(read)
            yield EvidenceRecord(
                evidence_id='{}:{}'.format(read.query_name, 2 if read.is_read2 else 1),
                sample=sample,
                reference_id=read.reference_id,
                start=pos + 1,
                end=pos + 1,
                orient=orient,
                remote_reference_id=None,
                remote_start=None,
                remote_end=None,
                remote_orient=ORIENT.NS,
                mapping_quality=read.mapping_quality,
            )


def extract_evidence(
    alignment_file,
    output,
    sample=SAMPLE.NORMAL,
    min_mapping_quality=0,
    max_fragment_size=1000,
    min_soft_clip=5,
    max_records_in_memory=500000,
    temp_dir=None,
    log=LOG,
):
    """
    write the evidence found in an alignment file, sorted by (reference index, start)

    Returns:
        EvidenceSource: a source for the written evidence
    """
    SAMPLE.enforce(sample)
    log('extracting evidence from', alignment_file, time_stamp=True)
    with ResourceSet(log) as resources:
        fh = open_alignment_file(alignment_file, resources)
        reads = filter_reads(iter_alignments(fh), min_mapping_quality=min_mapping_quality)
        evidence = iter_read_evidence(reads, sample, max_fragment_size=max_fragment_size, min_soft_clip=min_soft_clip)
        with evidence_writer(output, log=log.indent()) as writer:
            for record in external_sort(
                evidence, key=merge_key, max_records_in_memory=max_records_in_memory, temp_dir=temp_dir, log=log
            ):
                writer.write(record)
    return EvidenceSource(output, alignment_file=alignment_file, sample=sample)
