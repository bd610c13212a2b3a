"""
the breakpoint calling run: per-shard clustering, merging of the shard outputs and annotation of the merged
calls
"""
from functools import partial
import time
import traceback

from .annotate import AnnotationPipeline, CoverageAnnotator, EvidenceAnnotator
from .breakpoint import merge_key
from .cluster import EvidenceClusterProcessor
from .coverage import get_reference_lookup
from .error import ShardError
from .evidence import oriented_key
from .file_io import variant_writer
from .merge import merge_sorted, read_called_variants
from .resources import ResourceSet
from .schedule import LocalPool, ShardResult, run_shard_tasks
from .sort import SortTask
from .util import generate_complete_stamp, mkdirp


class ShardWorker:
    """
    identifies the breakpoints for a single shard and writes them, sorted, to the shard file. Instances are
    picklable so they can be run on a process pool
    """

    def __init__(self, context, output, evidence_sources, shard, clusterer_factory=EvidenceClusterProcessor.from_context):
        """
        Args:
            context (ProcessingContext): settings for the run
            output (str): the final output of the run. The shard file name is derived from it
            evidence_sources (list of EvidenceSource): all sources. Each is filtered down to the shard
            shard (Shard): the unit of work
            clusterer_factory (callable): builds a fresh clustering collaborator from the context
        """
        self.context = context
        self.output = output
        self.evidence_sources = evidence_sources
        self.shard = shard
        self.clusterer_factory = clusterer_factory
        self.filename = context.breakpoint_file(output, shard)

    def _process(self, log):
        with ResourceSet(log) as resources:
            clusterer = self.clusterer_factory(self.context)
            count = 0
            for source in self.evidence_sources:
                for evidence in resources.register(source.iter_evidence(self.shard), name=source.name):
                    clusterer.add_evidence(evidence)
                    count += 1
            log('read', count, 'evidence records')
            sorter = SortTask(
                key=merge_key,
                max_records_in_memory=self.context.max_records_in_memory,
                temp_dir=self.context.temporary_directory,
                log=log,
            )
            with variant_writer(self.filename, log=log) as writer:
                sorter.run(clusterer, writer.write)

    def __call__(self):
        """
        Returns:
            ShardResult: the shard file or, when processing failed, the error
        """
        log = self.context.log
        description = self.shard.describe(self.context.reference)
        log('Start identifying breakpoints between', description, time_stamp=True)
        try:
            self._process(log.indent())
        except Exception as err:
            error = ShardError(
                'error identifying breakpoints between {}: {}'.format(description, repr(err)),
                shard=description,
                path=self.filename,
                detail=traceback.format_exc(),
            )
            return ShardResult(self.shard, self.filename, error)
        log('Finished identifying breakpoints between', description, time_stamp=True)
        return ShardResult(self.shard, self.filename)

    def __repr__(self):
        return '{}({}, {})'.format(self.__class__.__name__, self.shard, self.filename)


def _unique(items):
    result = []
    for item in items:
        if item and item not in result:
            result.append(item)
    return result


class VariantCaller:
    """
    coordinates a breakpoint calling run over a set of evidence sources
    """

    def __init__(self, context, output, evidence_sources, clusterer_factory=EvidenceClusterProcessor.from_context, log=None):
        """
        Args:
            context (ProcessingContext): settings for the run
            output (str): path to the final, annotated, variant file
            evidence_sources (list of EvidenceSource): the tagged evidence sources
            clusterer_factory (callable): builds the clustering collaborator for each shard. Must be picklable to
                be used with a process pool
            log (Log): the logger. Defaults to the context logger
        """
        self.context = context
        self.output = output
        self.evidence_sources = list(evidence_sources)
        self.clusterer_factory = clusterer_factory
        self.log = log if log is not None else context.log

    def workers(self):
        return [
            ShardWorker(self.context, self.output, self.evidence_sources, shard, self.clusterer_factory)
            for shard in self.context.shards()
        ]

    def call_breakends(self, pool=None, parallel=False):
        """
        run the shard workers

        Args:
            pool (concurrent.futures.Executor): pool to run the workers on. Not closed by this call
            parallel (bool): create a local process pool for this call when no pool is given

        Returns:
            list of ShardResult: one result per shard, in planning order
        """
        workers = self.workers()
        self.log('identifying breakpoints in', len(workers), 'shards', time_stamp=True)
        with ResourceSet(self.log) as resources:
            if pool is None and parallel:
                pool = resources.register(LocalPool(self.context.concurrency_limit), name='local process pool')
            return run_shard_tasks(workers, pool=pool, log=self.log.indent())

    def get_all_called_variants(self, resources):
        """
        Returns:
            iterator of VariantRecord: the calls of every shard as one stream in merge key order
        """
        return read_called_variants(self.context.shards(), partial(self.context.breakpoint_file, self.output), resources)

    def _sources(self, tumour):
        return [s for s in self.evidence_sources if s.is_tumour == tumour]

    def annotate_breakpoints(self, annotator=None):
        """
        annotate the valid merged calls and write them to the final output

        Args:
            annotator (callable): an additional stage applied after the built-in annotators
        """
        self.log('annotating breakpoints', time_stamp=True)
        with ResourceSet(self.log) as resources:
            lookups = []
            for tumour in [False, True]:
                lookups.append(get_reference_lookup(
                    _unique([s.alignment_file for s in self._sources(tumour)]),
                    resources,
                    window_size=self.context.coverage_window,
                    min_mapping_quality=self.context.min_mapping_quality,
                ))
            # the annotator matches calls against the lower side of each piece of evidence
            evidence = SortTask(
                key=oriented_key,
                max_records_in_memory=self.context.max_records_in_memory,
                temp_dir=self.context.temporary_directory,
                log=self.log.indent(),
            ).sort(merge_sorted(
                [resources.register(s.iter_evidence(), name=s.name) for s in self.evidence_sources], key=merge_key
            ))
            resources.register(evidence, name='evidence sort')
            pipeline = AnnotationPipeline(
                [CoverageAnnotator(*lookups), EvidenceAnnotator(evidence, log=self.log), annotator],
                log=self.log.indent(),
            )
            with variant_writer(self.output, log=self.log.indent()) as writer:
                for variant in pipeline.annotate(self.get_all_called_variants(resources)):
                    writer.write(variant)
        return self.output

    def process(self, pool=None, parallel=False, annotator=None):
        """
        the full run: identify the breakpoints, annotate them and mark the working directory complete
        """
        start_time = int(time.time())
        mkdirp(self.context.working_dir, log=self.log)
        self.call_breakends(pool=pool, parallel=parallel)
        self.annotate_breakpoints(annotator=annotator)
        generate_complete_stamp(self.context.working_dir, log=self.log, start_time=start_time)
        return self.output
