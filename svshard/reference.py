import pysam

from .error import RecordIOError


class ReferenceDictionary:
    """
    ordered list of the reference sequences. The index of a sequence in this list is the reference id
    used by every record in the package
    """

    def __init__(self, names, lengths=None):
        """
        Args:
            names (list of str): reference sequence names in order
            lengths (list of int): reference sequence lengths (optional)
        """
        self.names = [str(n) for n in names]
        self.lengths = list(lengths) if lengths is not None else [None for n in self.names]
        if len(self.lengths) != len(self.names):
            raise ValueError('expected one length per reference sequence', len(self.names), len(self.lengths))
        if len(set(self.names)) != len(self.names):
            raise ValueError('reference sequence names must be unique', self.names)

    def __len__(self):
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    def name(self, reference_id):
        """
        Args:
            reference_id (int): the reference id
        Returns:
            str: the name of the reference sequence
        """
        return self.names[reference_id]

    @classmethod
    def from_alignment_file(cls, filename):
        """
        read the sequence dictionary from the header of a SAM/BAM file
        """
        try:
            with pysam.AlignmentFile(filename, 'r', check_sq=False) as fh:
                return cls(fh.references, fh.lengths)
        except (OSError, ValueError) as err:
            raise RecordIOError('unable to read the reference sequences from the alignment header: {}'.format(err), filename)

    @classmethod
    def from_index_file(cls, filename):
        """
        read a samtools faidx index (name and length as the first two tab-delimited columns)
        """
        names = []
        lengths = []
        try:
            with open(filename, 'r') as fh:
                for line in fh:
                    line = line.rstrip('\n')
                    if not line or line.startswith('#'):
                        continue
                    cols = line.split('\t')
                    names.append(cols[0])
                    lengths.append(int(cols[1]) if len(cols) > 1 else None)
        except OSError as err:
            raise RecordIOError('unable to read the reference index: {}'.format(err), filename)
        return cls(names, lengths)

    def __getstate__(self):
        return {'names': self.names, 'lengths': self.lengths}

    def __setstate__(self, state):
        self.__init__(state['names'], state['lengths'])

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, ', '.join(self.names))
