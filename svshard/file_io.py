"""
tab-delimited record files. The first line is the header, prefixed with '#'. Files are written to a temporary
sibling and only moved to their final name once the writer is committed, so a failed run never leaves a
truncated file under the expected name
"""
import os

from shortuuid import uuid

from .breakpoint import variant_from_row
from .constants import COLUMNS
from .error import RecordIOError
from .util import DEVNULL


def _format_value(value):
    if value is None:
        return ''
    return str(value)


class TabWriter:

    def __init__(self, filename, columns, log=DEVNULL):
        """
        Args:
            filename (str): the final path of the file
            columns (list of str): the column names in output order
        """
        self.filename = filename
        self.columns = list(columns)
        self.temp_filename = '{}.tmp-{}'.format(filename, uuid())
        self.committed = False
        self.count = 0
        self.log = log
        try:
            self.fh = open(self.temp_filename, 'w')
            self.fh.write('#' + '\t'.join(self.columns) + '\n')
        except OSError as err:
            raise RecordIOError('unable to open the file for writing: {}'.format(err), filename)

    def write(self, row):
        """
        Args:
            row (dict): mapping of column name to value. Objects with a flatten method are flattened first
        """
        if not isinstance(row, dict):
            row = row.flatten()
        try:
            self.fh.write('\t'.join([_format_value(row.get(c, None)) for c in self.columns]) + '\n')
        except (OSError, ValueError) as err:
            raise RecordIOError('error writing record: {}'.format(err), self.filename)
        self.count += 1

    def __call__(self, row):
        self.write(row)

    def commit(self):
        """
        finish writing and move the file into its final location
        """
        if self.committed:
            return self.filename
        try:
            self.fh.close()
            os.replace(self.temp_filename, self.filename)
        except OSError as err:
            raise RecordIOError('unable to complete the file: {}'.format(err), self.filename)
        self.committed = True
        self.log('wrote', self.count, 'records to', self.filename)
        return self.filename

    def close(self):
        """
        release the file. If the writer has not been committed the partial output is removed
        """
        if self.committed:
            return
        if not self.fh.closed:
            self.fh.close()
        if os.path.exists(self.temp_filename):
            os.remove(self.temp_filename)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.commit()
        else:
            self.close()


class TabReader:
    """
    lazy single pass reader. The file is not opened until the first record is requested
    """

    def __init__(self, filename, parse_row=None):
        """
        Args:
            filename (str): path to the file
            parse_row (callable): converts a dict of column name to string value into a record
        """
        self.filename = filename
        self.parse_row = parse_row if parse_row is not None else (lambda row: row)
        self.fh = None
        self.header = None
        self.line_no = 0
        self.closed = False

    def _open(self):
        try:
            self.fh = open(self.filename, 'r')
        except OSError as err:
            raise RecordIOError('unable to open the file for reading: {}'.format(err), self.filename)
        line = self.fh.readline()
        self.line_no += 1
        if not line.startswith('#'):
            raise RecordIOError('missing header line', self.filename)
        self.header = line[1:].rstrip('\n').split('\t')

    def __iter__(self):
        return self

    def __next__(self):
        if self.closed:
            raise StopIteration
        if self.fh is None:
            self._open()
        while True:
            line = self.fh.readline()
            if not line:
                self.close()
                raise StopIteration
            self.line_no += 1
            line = line.rstrip('\n')
            if line:
                break
        values = line.split('\t')
        if len(values) != len(self.header):
            raise RecordIOError(
                'line {} has {} columns but the header has {}'.format(self.line_no, len(values), len(self.header)),
                self.filename)
        try:
            return self.parse_row(dict(zip(self.header, values)))
        except (KeyError, ValueError, TypeError) as err:
            raise RecordIOError('unable to parse line {}: {}'.format(self.line_no, repr(err)), self.filename)

    def close(self):
        self.closed = True
        if self.fh is not None and not self.fh.closed:
            self.fh.close()


def variant_writer(filename, log=DEVNULL):
    return TabWriter(filename, COLUMNS.values(), log=log)


def variant_reader(filename):
    return TabReader(filename, variant_from_row)

