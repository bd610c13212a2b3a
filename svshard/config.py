import argparse
import os

from .constants import WeakSvNamespace, cast_boolean
from .error import ConfigurationError
from .shard import plan_shards, shard_filename
from .util import LOG, filepath

DEFAULTS = WeakSvNamespace(__name__='svshard.config.DEFAULTS')
"""
- by_chromosome
- cluster_radius
- concurrency_limit
- coverage_window
- max_records_in_memory
- min_mapping_quality
- min_support
- temp_dir
"""
DEFAULTS.add(
    'by_chromosome',
    True,
    defn='split breakpoint identification into one unit of work per pair of reference sequences',
)
DEFAULTS.add(
    'max_records_in_memory',
    500000,
    defn='the maximum number of records to hold in memory before sorted runs are spilled to temporary files',
)
DEFAULTS.add(
    'temp_dir',
    None,
    cast_type=str,
    nullable=True,
    defn='directory for temporary files. Defaults to the working directory',
)
DEFAULTS.add(
    'coverage_window',
    1024,
    defn='number of positions behind the coverage cursor for which read depth can still be queried',
)
DEFAULTS.add(
    'min_mapping_quality', 0, defn='alignments with a lower mapping quality are ignored'
)
DEFAULTS.add(
    'cluster_radius',
    200,
    defn='maximum distance between breakends of two pieces of evidence for them to be clustered together',
)
DEFAULTS.add(
    'min_support',
    2,
    defn='minimum number of distinct pieces of evidence for a cluster to be reported as a valid call',
)
DEFAULTS.add(
    'concurrency_limit',
    0,
    defn='number of worker processes used to identify breakpoints. 0 uses one less than the number of cpus',
)


def positive_int(value):
    value = int(value)
    if value < 1:
        raise argparse.ArgumentTypeError('Must be a positive integer')
    return value


class ProcessingContext:
    """
    the settings shared by every component of a single run
    """

    def __init__(self, reference, working_dir, log=LOG, **options):
        """
        Args:
            reference (ReferenceDictionary): the reference sequences
            working_dir (str): directory intermediate (shard) files are written to
            log (Log): logger for the run
            options (**dict): override default options specified by DEFAULTS
        """
        self.reference = reference
        self.working_dir = working_dir
        self.log = log

        for option in options:
            if option not in DEFAULTS:
                raise ConfigurationError('unexpected option: {}'.format(option))
        # inputs to the function call should override the default values
        for option, value in DEFAULTS.items():
            value = options.get(option, value)
            if value is not None:
                value = DEFAULTS.type(option)(value)
            elif not DEFAULTS.is_nullable(option):
                raise ConfigurationError('option {} cannot be None'.format(option))
            setattr(self, option, value)

        if self.max_records_in_memory < 1:
            raise ConfigurationError(
                'max_records_in_memory must be at least 1', self.max_records_in_memory)
        if self.coverage_window < 0:
            raise ConfigurationError('coverage_window cannot be negative', self.coverage_window)
        if self.cluster_radius < 0:
            raise ConfigurationError('cluster_radius cannot be negative', self.cluster_radius)
        if self.min_support < 1:
            raise ConfigurationError('min_support must be at least 1', self.min_support)
        if self.concurrency_limit < 0:
            raise ConfigurationError('concurrency_limit cannot be negative', self.concurrency_limit)

    @property
    def temporary_directory(self):
        return self.temp_dir if self.temp_dir else self.working_dir

    def shards(self):
        return plan_shards(len(self.reference), by_chromosome=self.by_chromosome)

    def breakpoint_file(self, output, shard):
        """
        the intermediate file for a given shard of the final output
        """
        return shard_filename(os.path.join(self.working_dir, os.path.basename(output)), shard, self.reference)

    def options(self):
        return {option: getattr(self, option) for option in DEFAULTS.keys()}


def get_metavar(arg_type):
    """
    For a given argument type, returns the string to be used for the metavar argument in add_argument

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    if arg_type in [bool, cast_boolean]:
        return '{True,False}'
    elif arg_type == float:
        return 'FLOAT'
    elif arg_type in [int, positive_int]:
        return 'INT'
    elif arg_type == filepath:
        return 'FILEPATH'
    return None


def augment_parser(arguments, parser):
    """
    Adds options for the named defaults to an argument parser (or argument group)

    Args:
        arguments (list of str): names of members of DEFAULTS
        parser (argparse.ArgumentParser): the parser to add the options to
    """
    for arg in arguments:
        if arg not in DEFAULTS:
            raise KeyError('invalid argument', arg)
        cast_type = DEFAULTS.type(arg)
        parser.add_argument(
            '--{}'.format(arg),
            default=DEFAULTS[arg],
            type=cast_type,
            metavar=get_metavar(cast_type),
            help=DEFAULTS.define(arg, None),
        )
