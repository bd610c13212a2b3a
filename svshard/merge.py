"""
combine independently sorted record streams into a single ordered stream
"""
import heapq

from .breakpoint import merge_key
from .file_io import variant_reader


def merge_sorted(streams, key=merge_key):
    """
    k-way merge of streams which are each already sorted by key. The result is lazy and single pass.
    The input ordering is not checked

    Args:
        streams (list of iterable): the sorted input streams
        key (callable): the ordering key every input is sorted by

    Returns:
        iterator: the merged records
    """
    return heapq.merge(*streams, key=key)


def read_called_variants(shards, filename_for, resources):
    """
    present the per-shard breakpoint files as a single stream ordered by (reference index, start)

    Args:
        shards (list of Shard): the shards, in planning order
        filename_for (callable): the naming function used when the shard files were written
        resources (ResourceSet): every opened reader is registered here

    Returns:
        iterator of VariantRecord: the merged records
    """
    readers = []
    for shard in shards:
        filename = filename_for(shard)
        readers.append(resources.register(variant_reader(filename), name=filename))
    return merge_sorted(readers, key=merge_key)
