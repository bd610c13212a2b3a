"""
decomposition of the evidence into independent units of work
"""
from collections import namedtuple
import os


class Shard(namedtuple('Shard', ['first', 'second'])):
    """
    a pair of reference sequence indices (first <= second). All evidence with one breakend on each of
    the two reference sequences (or both on the same sequence when first == second) belongs to the shard
    """

    def __new__(cls, first, second=None):
        if second is None:
            second = first
        if first is not None and (first < 0 or second < first):
            raise ValueError('shard reference indices must satisfy 0 <= first <= second', first, second)
        return super(Shard, cls).__new__(cls, first, second)

    @property
    def is_whole_collection(self):
        return self.first is None

    def contains(self, reference_id, remote_reference_id=None):
        """
        check if evidence on the given reference indices belongs to this shard
        """
        if self.is_whole_collection:
            return True
        if remote_reference_id is None:
            remote_reference_id = reference_id
        low, high = sorted((reference_id, remote_reference_id))
        return (low, high) == (self.first, self.second)

    def describe(self, reference):
        """
        Args:
            reference (ReferenceDictionary): used to translate the indices to reference names
        Returns:
            str: human readable identity of the shard
        """
        if self.is_whole_collection:
            return 'all reference sequences'
        return '{} and {}'.format(reference.name(self.first), reference.name(self.second))


WHOLE_COLLECTION = Shard(None, None)
""":class:`Shard`: the single shard used when processing is not split by reference sequence"""


def plan_shards(reference_count, by_chromosome=True):
    """
    enumerate the units of work

    Args:
        reference_count (int): the number of reference sequences
        by_chromosome (bool): split the work by pairs of reference sequences

    Returns:
        list of Shard: shards in row-major order (first ascending, then second ascending from first)

    Example:
        >>> plan_shards(3)
        [Shard(first=0, second=0), Shard(first=0, second=1), ..., Shard(first=2, second=2)]
        >>> plan_shards(3, by_chromosome=False)
        [Shard(first=None, second=None)]
    """
    if not by_chromosome:
        return [WHOLE_COLLECTION]
    if reference_count < 0:
        raise ValueError('reference count cannot be negative', reference_count)
    shards = []
    for i in range(0, reference_count):
        for j in range(i, reference_count):
            shards.append(Shard(i, j))
    return shards


def shard_filename(output, shard, reference, suffix='breakpoint.tab'):
    """
    the path a shard output is written to and read back from. Embeds the reference indices, which keep the
    name unique, and the reference names so the file can be identified by an operator

    Args:
        output (str): the final output file. Shard files are written next to it
        shard (Shard): the unit of work
        reference (ReferenceDictionary): maps reference indices to names
        suffix (str): file suffix

    Example:
        >>> shard_filename('/out/calls.tab', Shard(0, 1), reference)
        '/out/calls.tab.0_chr1-1_chr2.breakpoint.tab'
        >>> shard_filename('/out/calls.tab', WHOLE_COLLECTION, reference)
        '/out/calls.tab.breakpoint.tab'
    """
    if shard.is_whole_collection:
        return '{}.{}'.format(output, suffix)
    name = '{}_{}-{}_{}'.format(shard.first, reference.name(shard.first), shard.second, reference.name(shard.second))
    name = name.replace(os.sep, '_')
    return '{}.{}.{}'.format(output, name, suffix)
