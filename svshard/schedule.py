"""
runs the shard tasks, either one after another in the current process or concurrently on a pool
"""
from collections import namedtuple
from concurrent import futures
import multiprocessing

from .error import ShardExecutionError
from .util import LOG


class ShardResult(namedtuple('ShardResult', ['shard', 'filename', 'error'])):
    """
    the outcome of processing one shard. Failures are returned rather than raised so they cross the process
    boundary as values
    """

    def __new__(cls, shard, filename, error=None):
        return super(ShardResult, cls).__new__(cls, shard, filename, error)

    @property
    def ok(self):
        return self.error is None


def _check(result, log):
    if not result.ok:
        log.error('error processing shard:', result.error)
        if result.error.detail:
            log.error(result.error.detail)
        raise result.error
    return result


def _run_sequential(tasks, log):
    results = []
    for task in tasks:
        # the first failure stops the run before the remaining tasks are started
        results.append(_check(task(), log))
    return results


def _run_parallel(tasks, pool, log):
    submitted = [pool.submit(task) for task in tasks]
    log('submitted', len(submitted), 'tasks')
    results = []
    try:
        for response in submitted:
            try:
                result = response.result()
            except futures.CancelledError:
                raise ShardExecutionError('shard processing was cancelled before it completed')
            results.append(_check(result, log))
    finally:
        cancelled = 0
        for response in submitted:
            if response.cancel():
                cancelled += 1
        if cancelled:
            log('cancelled', cancelled, 'tasks which had not started')
    return results


def run_shard_tasks(tasks, pool=None, log=LOG):
    """
    run every task and collect its result

    Args:
        tasks (list of callable): picklable callables returning a :class:`ShardResult`
        pool (concurrent.futures.Executor): run the tasks concurrently on this pool. Tasks are run in the
            current process, in order, when not given
        log (Log): the logger

    Returns:
        list of ShardResult: results in task order

    Raises:
        ShardError: the first failed result, in task order
        ShardExecutionError: waiting on a task was interrupted by cancellation
    """
    if pool is None:
        return _run_sequential(tasks, log)
    return _run_parallel(tasks, pool, log)


class LocalPool:
    """
    process pool for running the shard tasks on the local machine
    """

    def __init__(self, concurrency_limit=None):
        """
        Args:
            concurrency_limit (int): the maximum number of worker processes. Defaults to one less than the number
                of cpus (and at least one)
        """
        self.concurrency_limit = max(1, multiprocessing.cpu_count() - 1) if not concurrency_limit else concurrency_limit
        self.pool = None  # created at the first submission

    def submit(self, func, *pos, **kwargs):
        if self.pool is None:
            self.pool = futures.ProcessPoolExecutor(max_workers=self.concurrency_limit)
        return self.pool.submit(func, *pos, **kwargs)

    def close(self, wait=True):
        if self.pool is not None:
            self.pool.shutdown(wait)
            self.pool = None

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()
