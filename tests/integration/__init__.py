import pysam


ARGUMENT_ERROR = 2

REFERENCES = [('chr1', 10000), ('chr2', 10000), ('chr3', 10000)]

FLAG_PAIRED = 0x1
FLAG_REVERSE = 0x10
FLAG_MATE_REVERSE = 0x20
FLAG_READ1 = 0x40
FLAG_READ2 = 0x80


def read_spec(query_name, reference_id, reference_start, cigar='100M', flag=0, next_reference_id=-1, next_reference_start=-1, template_length=0):
    return dict(
        query_name=query_name,
        reference_id=reference_id,
        reference_start=reference_start,
        cigar=cigar,
        flag=flag,
        next_reference_id=next_reference_id,
        next_reference_start=next_reference_start,
        template_length=template_length,
    )


def read_pair(query_name, reference_id, reference_start, mate_reference_id, mate_reference_start, reverse=False, mate_reverse=True):
    """
    both records of a read pair with 100bp reads
    """
    flag1 = FLAG_PAIRED | FLAG_READ1 | (FLAG_REVERSE if reverse else 0) | (FLAG_MATE_REVERSE if mate_reverse else 0)
    flag2 = FLAG_PAIRED | FLAG_READ2 | (FLAG_REVERSE if mate_reverse else 0) | (FLAG_MATE_REVERSE if reverse else 0)
    template_length = 0
    if reference_id == mate_reference_id:
        template_length = mate_reference_start + 100 - reference_start
    return [
        read_spec(query_name, reference_id, reference_start, flag=flag1, next_reference_id=mate_reference_id,
                  next_reference_start=mate_reference_start, template_length=template_length),
        read_spec(query_name, mate_reference_id, mate_reference_start, flag=flag2, next_reference_id=reference_id,
                  next_reference_start=reference_start, template_length=-1 * template_length),
    ]


def write_alignments(filename, reads, references=REFERENCES, sort=True):
    """
    write the reads to a BAM (or SAM if the name ends with .sam) file. Reads are written in coordinate order
    unless sort is False
    """
    header = {
        'HD': {'VN': '1.6', 'SO': 'coordinate' if sort else 'unsorted'},
        'SQ': [{'SN': name, 'LN': length} for name, length in references],
    }
    if sort:
        reads = sorted(reads, key=lambda r: (r['reference_id'], r['reference_start'], r['query_name']))
    with pysam.AlignmentFile(filename, 'w' if filename.endswith('.sam') else 'wb', header=header) as fh:
        for spec in reads:
            read = pysam.AlignedSegment(fh.header)
            read.query_name = spec['query_name']
            read.query_sequence = 'A' * 100
            read.flag = spec['flag']
            read.reference_id = spec['reference_id']
            read.reference_start = spec['reference_start']
            read.mapping_quality = 60
            read.cigarstring = spec['cigar']
            read.next_reference_id = spec['next_reference_id']
            read.next_reference_start = spec['next_reference_start']
            read.template_length = spec['template_length']
            read.query_qualities = pysam.qualitystring_to_array('<' * 100)
            fh.write(read)
    return filename


def normal_reads():
    """
    concordant pairs covering chr1:951-1050 and chr1:1201-1300
    """
    reads = []
    for i in range(4):
        reads.extend(read_pair('n{}'.format(i), 0, 950, 0, 1200))
    return reads


def tumour_reads():
    """
    - a translocation supported by 3 discordant pairs between chr1:~1000 and chr3:~5000
    - a breakend at chr2:3000 supported by 2 soft clipped reads
    - a single soft clipped read at chr2:8000
    """
    reads = []
    for i in range(3):
        reads.extend(read_pair('t{}'.format(i), 0, 900 + i * 10, 2, 5000 + i * 10))
    reads.append(read_spec('s1', 1, 2940, cigar='60M40S'))
    reads.append(read_spec('s2', 1, 2950, cigar='50M50S'))
    reads.append(read_spec('x1', 1, 7950, cigar='50M50S'))
    return reads
