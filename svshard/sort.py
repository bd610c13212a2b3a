"""
external (disk spilling) sorting for record streams which may not fit in memory.

Records are buffered up to a fixed count, each full buffer is sorted and spilled to a temporary file, and the
spilled runs are combined with a k-way merge. Temporary files are removed when the merge completes, fails or is
abandoned
"""
from functools import cmp_to_key
import heapq
import os
import pickle
import tempfile

import pysam
from shortuuid import uuid

from .constants import SORT_ORDER
from .error import ConfigurationError, RecordIOError
from .util import DEVNULL, LOG


class PickleCodec:
    """
    serializes any picklable record to the spill files
    """

    def write(self, fh, record):
        pickle.dump(record, fh, protocol=pickle.HIGHEST_PROTOCOL)

    def read(self, fh):
        while True:
            try:
                yield pickle.load(fh)
            except EOFError:
                return


class AlignmentCodec:
    """
    serializes pysam alignments as SAM text lines

    Args:
        header (pysam.AlignmentHeader): header used to rebuild the alignments
    """

    def __init__(self, header):
        self.header = header

    def write(self, fh, read):
        fh.write((read.to_string() + '\n').encode('utf8'))

    def read(self, fh):
        for line in fh:
            yield pysam.AlignedSegment.fromstring(line.decode('utf8').rstrip('\n'), self.header)


def _spill(run, codec, temp_dir, prefix):
    fd, path = tempfile.mkstemp(prefix=prefix, suffix='.run', dir=temp_dir)
    try:
        with os.fdopen(fd, 'wb') as fh:
            for record in run:
                codec.write(fh, record)
    except OSError as err:
        os.remove(path)
        raise RecordIOError('error spilling sorted records to a temporary file: {}'.format(err), path)
    except Exception:
        os.remove(path)
        raise
    return path


def _read_run(path, codec):
    try:
        with open(path, 'rb') as fh:
            for record in codec.read(fh):
                yield record
    except OSError as err:
        raise RecordIOError('error reading a sorted run back from a temporary file: {}'.format(err), path)


def _external_sort(records, key, max_records_in_memory, temp_dir, codec, log):
    # names are unique per call so concurrent sorts can share a temp directory
    prefix = 'svshard-sort-{}-'.format(uuid())
    runs = []
    streams = []
    try:
        buffer = []
        for record in records:
            buffer.append(record)
            if len(buffer) >= max_records_in_memory:
                buffer.sort(key=key)
                runs.append(_spill(buffer, codec, temp_dir, prefix))
                buffer = []
        buffer.sort(key=key)
        if runs:
            log('merging', len(runs), 'sorted runs from', temp_dir if temp_dir else tempfile.gettempdir())
        streams = [_read_run(path, codec) for path in runs]
        for record in heapq.merge(*(streams + [iter(buffer)]), key=key):
            yield record
    finally:
        for stream in streams:
            stream.close()
        for path in runs:
            try:
                os.remove(path)
            except OSError as err:
                log.error('unable to remove temporary file', path, repr(err))


def external_sort(records, key=None, max_records_in_memory=500000, temp_dir=None, codec=None, log=DEVNULL):
    """
    sort a stream of records using bounded memory

    Args:
        records (iterable): the records to sort, in any order
        key (callable): function giving the sort key for a record. The natural ordering is used when not given
        max_records_in_memory (int): the maximum number of records held in memory before spilling a sorted run
        temp_dir (str): directory for the spilled runs. The system default is used when not given
        codec: object with write(fh, record) and read(fh) methods used for the spilled runs

    Returns:
        generator: the records in sorted order. Ties may be returned in either relative order

    Raises:
        ConfigurationError: the memory bound is not a positive integer
    """
    if max_records_in_memory is None or int(max_records_in_memory) < 1:
        raise ConfigurationError('max_records_in_memory must be at least 1', max_records_in_memory)
    if temp_dir is not None and not os.path.isdir(temp_dir):
        raise ConfigurationError('temporary directory does not exist', temp_dir)
    return _external_sort(
        records, key, int(max_records_in_memory), temp_dir, codec if codec is not None else PickleCodec(), log
    )


class SortTask:
    """
    the configuration for a single sort: ordering, memory bound, temporary directory and spill codec
    """

    def __init__(
        self, key=None, max_records_in_memory=500000, temp_dir=None, codec=None, comparator=None, log=DEVNULL
    ):
        """
        Args:
            key (callable): sort key function
            comparator (callable): old style comparison function, an alternative to key
        """
        if key is not None and comparator is not None:
            raise ConfigurationError('only one of key or comparator may be given')
        if comparator is not None:
            key = cmp_to_key(comparator)
        self.key = key
        self.max_records_in_memory = max_records_in_memory
        self.temp_dir = temp_dir
        self.codec = codec
        self.log = log

    def sort(self, records):
        return external_sort(
            records,
            key=self.key,
            max_records_in_memory=self.max_records_in_memory,
            temp_dir=self.temp_dir,
            codec=self.codec,
            log=self.log,
        )

    def run(self, records, sink):
        """
        sort the records and pass each to the sink in order

        Args:
            records (iterable): input records
            sink (callable): called once per record, for example the write method of a writer

        Returns:
            int: the number of records written to the sink
        """
        count = 0
        for record in self.sort(records):
            sink(record)
            count += 1
        return count


def coordinate_key(read):
    """
    sort key for alignments by position, unmapped reads last
    """
    return (read.reference_id < 0, read.reference_id, read.reference_start)


def queryname_key(read):
    """
    sort key for alignments by read name, read 1 before read 2
    """
    return (read.query_name, read.is_read2, read.is_secondary, read.is_supplementary)


ALIGNMENT_SORT_KEYS = {SORT_ORDER.COORDINATE: coordinate_key, SORT_ORDER.QUERYNAME: queryname_key}


def sort_alignments(
    unsorted, output, sort_order=SORT_ORDER.COORDINATE, key=None, max_records_in_memory=500000, temp_dir=None, log=LOG
):
    """
    sorts the records in a SAM/BAM file by coordinate, read name, or a custom sort key

    Args:
        unsorted (str): path to the input SAM/BAM file
        output (str): path to the sorted output. Written as BAM unless the name ends with .sam
        sort_order (SORT_ORDER): the order to sort by. Recorded in the output header
        key (callable): custom sort key. The output header is marked unsorted in this case

    Raises:
        ConfigurationError: neither a known sort order nor a key was given
    """
    if key is None:
        if sort_order not in ALIGNMENT_SORT_KEYS:
            raise ConfigurationError('Sort order not specified', sort_order)
        key = ALIGNMENT_SORT_KEYS[sort_order]
    else:
        sort_order = SORT_ORDER.UNSORTED
    SORT_ORDER.enforce(sort_order)

    log('sorting', unsorted, 'by', sort_order, time_stamp=True)
    temp_output = '{}.tmp-{}'.format(output, uuid())
    mode = 'w' if output.endswith('.sam') else 'wb'
    try:
        with pysam.AlignmentFile(unsorted, 'r', check_sq=False) as reader:
            header = reader.header.to_dict()
            header.setdefault('HD', {'VN': '1.6'})['SO'] = sort_order
            codec = AlignmentCodec(reader.header)
            count = 0
            with pysam.AlignmentFile(temp_output, mode, header=header) as writer:
                for read in external_sort(
                    reader.fetch(until_eof=True),
                    key=key,
                    max_records_in_memory=max_records_in_memory,
                    temp_dir=temp_dir,
                    codec=codec,
                    log=log,
                ):
                    writer.write(read)
                    count += 1
        os.replace(temp_output, output)
    except OSError as err:
        raise RecordIOError('error sorting alignments: {}'.format(err), unsorted)
    finally:
        if os.path.exists(temp_output):
            os.remove(temp_output)
    log('wrote', count, 'sorted alignments to', output)
    return output
