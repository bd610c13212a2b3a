from copy import copy as _copy

from .constants import COLUMNS, ORIENT, cast_boolean
from .interval import Interval


class Breakend(Interval):
    """
    class for storing information about one side of a structural variant.
    coordinates are given as 1-indexed
    """

    @property
    def key(self):
        return (self.reference_id, self.start, self.end, self.orient)

    def __init__(self, reference_id, start, end=None, orient=ORIENT.NS, chr=None):
        """
        Args:
            reference_id (int): index of the reference sequence in the reference dictionary
            start (int): the genomic position of the breakend
            end (int): if the breakend is uncertain (a range) then specify the end of the range here
            orient (ORIENT): the orientation (which side is retained at the break)
            chr (str): the reference sequence name, used for reporting only

        Examples:
            >>> Breakend(0, 1, 2)
            >>> Breakend(0, 1, orient='R', chr='chr1')
        """
        Interval.__init__(self, start, end)
        self.reference_id = int(reference_id)
        self.orient = ORIENT.enforce(orient)
        self.chr = chr if chr is not None else str(reference_id)

    def __repr__(self):
        orient = '' if self.orient == ORIENT.NS else self.orient
        return 'Breakend({0}:{1}{2}{3})'.format(
            self.chr,
            self.start,
            '-' + str(self.end) if self.end != self.start else '',
            orient
        )

    def __eq__(self, other):
        if not hasattr(other, 'key'):
            return False
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)


ANNOTATION_DELIMITERS = [';', '=', '\t', '\n', '\r']


def _format_annotations(data):
    """
    encode the annotation mapping as KEY=value pairs joined with ';'. Values are written with str and read back
    as int, then float, then str, so a string value which looks like a number is read back as a number

    Raises:
        ValueError: a key or value contains one of the delimiters of the encoding
    """
    items = []
    for key in sorted(data):
        value = str(data[key])
        for delimiter in ANNOTATION_DELIMITERS:
            if delimiter in str(key) or delimiter in value:
                raise ValueError('annotations cannot contain the delimiter {}'.format(repr(delimiter)), key, value)
        items.append('{}={}'.format(key, value))
    return ';'.join(items)


class VariantRecord:
    """
    a called (or raw) structural variant. Either a single breakend or a pair of breakends.

    Records are treated as values: annotation produces a new record rather than changing this one
    """

    def __init__(self, break1, break2=None, valid=True, variant_id=None, data=None):
        """
        Args:
            break1 (Breakend): the first breakend, the one with the lower merge key for a pair
            break2 (Breakend): the partner breakend, None for a single breakend call
            valid (bool): flag indicating the record is a valid call which should be reported
            variant_id (str): identifier for the call
            data (dict): annotation mapping
        """
        if break2 is not None and (break2.reference_id, break2.start) < (break1.reference_id, break1.start):
            break1, break2 = break2, break1
        self.break1 = break1
        self.break2 = break2
        self.valid = bool(valid)
        self.variant_id = variant_id
        self.data = {} if data is None else dict(data)

    @property
    def key(self):
        """
        the merge key. Every variant stream in the package is ordered by this
        """
        return (self.break1.reference_id, self.break1.start)

    def annotate(self, **kwargs):
        """
        Returns:
            VariantRecord: a copy of this record with the given annotations added
        """
        result = _copy(self)
        result.data = dict(self.data)
        result.data.update(kwargs)
        return result

    def __eq__(self, other):
        for attr in ['break1', 'break2', 'valid', 'variant_id', 'data']:
            if not hasattr(other, attr):
                return False
            elif getattr(self, attr) != getattr(other, attr):
                return False
        return True

    def __hash__(self):
        return hash((self.break1, self.break2, self.valid, self.variant_id))

    def __lt__(self, other):
        return self.key < other.key

    def __repr__(self):
        return '{}({}, {}{}{})'.format(
            self.__class__.__name__,
            self.break1,
            self.break2,
            ', id={}'.format(self.variant_id) if self.variant_id else '',
            '' if self.valid else ', invalid'
        )

    def flatten(self):
        """
        returns the key-value mapping for the breakends to be output to a tab-delimited file
        """
        row = {
            COLUMNS.variant_id: self.variant_id,
            COLUMNS.valid: self.valid,
            COLUMNS.break1_reference_id: self.break1.reference_id,
            COLUMNS.break1_chromosome: self.break1.chr,
            COLUMNS.break1_position_start: self.break1.start,
            COLUMNS.break1_position_end: self.break1.end,
            COLUMNS.break1_orientation: self.break1.orient,
            COLUMNS.annotations: _format_annotations(self.data),
        }
        if self.break2 is not None:
            row.update({
                COLUMNS.break2_reference_id: self.break2.reference_id,
                COLUMNS.break2_chromosome: self.break2.chr,
                COLUMNS.break2_position_start: self.break2.start,
                COLUMNS.break2_position_end: self.break2.end,
                COLUMNS.break2_orientation: self.break2.orient,
            })
        return row


def merge_key(record):
    """
    the (reference index, start) ordering key shared by variant and evidence records
    """
    return record.key


def _cast_annotation(value):
    for cast_type in [int, float]:
        try:
            return cast_type(value)
        except ValueError:
            pass
    return value


def variant_from_row(row):
    """
    convert a row read from a tab-delimited variant file into a variant record
    """
    break1 = Breakend(
        int(row[COLUMNS.break1_reference_id]),
        int(row[COLUMNS.break1_position_start]),
        int(row[COLUMNS.break1_position_end]),
        orient=row[COLUMNS.break1_orientation],
        chr=row[COLUMNS.break1_chromosome],
    )
    break2 = None
    if row.get(COLUMNS.break2_reference_id, ''):
        break2 = Breakend(
            int(row[COLUMNS.break2_reference_id]),
            int(row[COLUMNS.break2_position_start]),
            int(row[COLUMNS.break2_position_end]),
            orient=row[COLUMNS.break2_orientation],
            chr=row[COLUMNS.break2_chromosome],
        )
    data = {}
    for item in row.get(COLUMNS.annotations, '').split(';'):
        if not item:
            continue
        key, value = item.split('=', 1)
        data[key] = _cast_annotation(value)
    return VariantRecord(
        break1,
        break2,
        valid=cast_boolean(row[COLUMNS.valid]),
        variant_id=row.get(COLUMNS.variant_id, '') or None,
        data=data,
    )
