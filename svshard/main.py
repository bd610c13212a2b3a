#!python
import argparse
import logging
import os
import platform
import sys
import time

from . import __version__
from .caller import VariantCaller
from .config import DEFAULTS, ProcessingContext, augment_parser, positive_int
from .constants import EXIT_OK, PROGNAME, SAMPLE, SORT_ORDER, SUBCOMMAND
from .evidence import EvidenceSource, extract_evidence
from .reference import ReferenceDictionary
from .sort import sort_alignments
from .util import LOG, filepath, log_arguments


def load_reference(filename):
    """
    read the reference sequence dictionary from a samtools index or the header of an alignment file
    """
    if filename.endswith('.fai'):
        return ReferenceDictionary.from_index_file(filename)
    return ReferenceDictionary.from_alignment_file(filename)


def parse_evidence_args(evidence, parser):
    """
    convert the --evidence option values into evidence sources
    """
    sources = []
    for values in evidence:
        if len(values) < 2 or len(values) > 3:
            parser.error('argument --evidence: expected FILEPATH {{{}}} [ALIGNMENT]'.format(','.join(SAMPLE.values())))
        evidence_file, sample = values[:2]
        alignment_file = values[2] if len(values) > 2 else None
        if sample not in SAMPLE.values():
            parser.error('argument --evidence: invalid sample {}. Must be one of {}'.format(repr(sample), SAMPLE.values()))
        for name in [evidence_file, alignment_file]:
            if name is not None and not os.path.exists(name):
                parser.error('argument --evidence: the file does not exist: {}'.format(name))
        sources.append(EvidenceSource(evidence_file, alignment_file=alignment_file, sample=sample))
    return sources


def extract_main(alignment_file, output, sample, max_records_in_memory, temp_dir, **kwargs):
    extract_evidence(
        alignment_file, output, sample=sample, max_records_in_memory=max_records_in_memory, temp_dir=temp_dir, log=LOG, **kwargs
    )
    return EXIT_OK


def call_main(output, evidence, reference, working_dir, parallel, **options):
    if working_dir is None:
        working_dir = os.path.dirname(os.path.abspath(output))
    context = ProcessingContext(reference, working_dir, log=LOG, **options)
    caller = VariantCaller(context, output, evidence)
    caller.process(parallel=parallel)
    return EXIT_OK


def sort_main(input, output, sort_order, max_records_in_memory, temp_dir):
    sort_alignments(
        input, output, sort_order=sort_order, max_records_in_memory=max_records_in_memory, temp_dir=temp_dir, log=LOG
    )
    return EXIT_OK


def main(argv=None):
    """
    sets up the parser and checks the validity of command line args
    then redirects into the subcommand main functions

    Args:
        argv (list): List of arguments, defaults to command line arguments
    """
    if argv is None:  # need to do at run time or patching will not behave as expected
        argv = sys.argv[1:]
    start_time = int(time.time())

    parser = argparse.ArgumentParser(prog=PROGNAME)
    parser.add_argument('-v', '--version', action='version', version='%(prog)s version {}'.format(__version__))
    subp = parser.add_subparsers(dest='command', help='specifies which subprogram to use')
    subp.required = True
    required = {}  # hold required argument group by subparser command name
    optional = {}  # hold optional argument group by subparser command name
    for command in SUBCOMMAND.values():
        subparser = subp.add_parser(command)
        required[command] = subparser.add_argument_group('required arguments')
        optional[command] = subparser.add_argument_group('optional arguments')
        optional[command].add_argument('--log', help='redirect stdout to a log file', default=None)
        optional[command].add_argument(
            '--log_level', help='level of logging to output', choices=['INFO', 'DEBUG'], default='INFO')
        optional[command].add_argument(
            '--max_records_in_memory', type=positive_int, default=DEFAULTS.max_records_in_memory, metavar='INT',
            help=DEFAULTS.define('max_records_in_memory'))
        optional[command].add_argument(
            '--temp_dir', default=DEFAULTS.temp_dir, metavar='DIRPATH', help=DEFAULTS.define('temp_dir'))

    # extract
    required[SUBCOMMAND.EXTRACT].add_argument(
        '--alignment_file', type=filepath, required=True, metavar='FILEPATH', help='path to the input SAM/BAM file')
    required[SUBCOMMAND.EXTRACT].add_argument(
        '-o', '--output', required=True, metavar='FILEPATH', help='path to the evidence file to write')
    optional[SUBCOMMAND.EXTRACT].add_argument(
        '--sample', choices=SAMPLE.values(), default=SAMPLE.NORMAL, help='the sample the alignments belong to')
    optional[SUBCOMMAND.EXTRACT].add_argument(
        '--max_fragment_size', type=positive_int, default=1000, metavar='INT',
        help='pairs with a larger fragment size are treated as discordant')
    optional[SUBCOMMAND.EXTRACT].add_argument(
        '--min_soft_clip', type=int, default=5, metavar='INT',
        help='minimum soft clipped length for a read to be used as split read evidence. 0 disables split read evidence')
    augment_parser(['min_mapping_quality'], optional[SUBCOMMAND.EXTRACT])

    # call
    required[SUBCOMMAND.CALL].add_argument(
        '-o', '--output', required=True, metavar='FILEPATH', help='path to the annotated variant file to write')
    required[SUBCOMMAND.CALL].add_argument(
        '--evidence', nargs='+', action='append', required=True,
        metavar='FILEPATH {{{}}} [ALIGNMENT]'.format(','.join(SAMPLE.values())),
        help='evidence file followed by its sample and, optionally, the alignment file it was extracted from')
    optional[SUBCOMMAND.CALL].add_argument(
        '--reference', type=filepath, metavar='FILEPATH',
        help='samtools index (.fai) or alignment file giving the reference sequences. Defaults to the header of the '
        'first alignment file given')
    optional[SUBCOMMAND.CALL].add_argument(
        '--working_dir', metavar='DIRPATH', help='directory for the shard files. Defaults to the output directory')
    optional[SUBCOMMAND.CALL].add_argument(
        '--parallel', action='store_true', default=False, help='identify breakpoints for the shards concurrently')
    augment_parser(
        ['by_chromosome', 'coverage_window', 'min_mapping_quality', 'cluster_radius', 'min_support', 'concurrency_limit'],
        optional[SUBCOMMAND.CALL],
    )

    # sort
    required[SUBCOMMAND.SORT].add_argument(
        '-n', '--input', type=filepath, required=True, metavar='FILEPATH', help='path to the SAM/BAM file to sort')
    required[SUBCOMMAND.SORT].add_argument(
        '-o', '--output', required=True, metavar='FILEPATH', help='path to the sorted output. BAM unless it ends with .sam')
    optional[SUBCOMMAND.SORT].add_argument(
        '--sort_order', choices=[SORT_ORDER.COORDINATE, SORT_ORDER.QUERYNAME], default=SORT_ORDER.COORDINATE,
        help='the order to sort the alignments by')

    args = parser.parse_args(argv).__dict__

    if args['temp_dir'] is not None and not os.path.isdir(args['temp_dir']):
        parser.error('--temp_dir the directory does not exist: {}'.format(args['temp_dir']))

    if args['command'] == SUBCOMMAND.CALL:
        args['evidence'] = parse_evidence_args(args['evidence'], parser)
        reference = args['reference']
        if reference is None:
            alignments = [s.alignment_file for s in args['evidence'] if s.alignment_file]
            if not alignments:
                parser.error('--reference is required when no alignment files are given with the evidence')
            reference = alignments[0]
        args['reference'] = load_reference(reference)

    log_conf = {'format': '{message}', 'style': '{', 'level': args['log_level']}

    original_logging_handlers = logging.root.handlers[:]
    for handler in logging.root.handlers:
        logging.root.removeHandler(handler)
    if args['log']:  # redirect stdout AND stderr to a log file
        log_conf['filename'] = args['log']
    logging.basicConfig(**log_conf)

    LOG('{}: {}'.format(PROGNAME, __version__))
    LOG('hostname:', platform.node(), time_stamp=False)
    log_arguments(args)

    command = args['command']
    log_to_file = args['log']
    # discard any arguments needed for redirect/setup only
    for init_arg in ['command', 'log', 'log_level']:
        del args[init_arg]

    try:
        if command == SUBCOMMAND.EXTRACT:
            ret_val = extract_main(**args)
        elif command == SUBCOMMAND.CALL:
            ret_val = call_main(**args)
        else:
            ret_val = sort_main(**args)

        duration = int(time.time()) - start_time
        LOG('run time (s): {}'.format(duration), time_stamp=False)
        return ret_val
    except Exception as err:
        if log_to_file:
            logging.exception(err)  # capture the error in the logging output file
        raise err
    finally:
        for handler in logging.root.handlers:
            logging.root.removeHandler(handler)
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)


if __name__ == '__main__':
    sys.exit(main())
