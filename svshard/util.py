from datetime import datetime
import errno
from glob import glob
import logging
import os
import time

from braceexpand import braceexpand

from .constants import COMPLETE_STAMP


class Log:
    """
    wrapper around the builtin logging to make it more readable. Each component is handed a Log
    instance explicitly rather than writing to a module level logger
    """

    def __init__(self, indent_str='  ', indent_level=0, level=logging.INFO, logger='svshard'):
        self.indent_str = indent_str
        self.indent_level = indent_level
        self.level = level
        self.logger = logger if isinstance(logger, logging.Logger) else logging.getLogger(logger)

    def __call__(self, *pos, time_stamp=False, level=None, indent_level=0, **kwargs):
        if level is None and self.level is None:
            return
        elif level is None:
            level = self.level

        stamp = datetime.now().strftime('[%Y-%m-%d %H:%M:%S]') if time_stamp else ' ' * 21
        indent_prefix = self.indent_str * (self.indent_level + indent_level)
        message = '{} {}{}'.format(stamp, indent_prefix, ' '.join([str(p) for p in pos]))
        self.logger.log(level, message, **kwargs)

    def error(self, *pos, **kwargs):
        if self.level is None:
            return
        self(*pos, level=logging.ERROR, **kwargs)

    def indent(self):
        return Log(self.indent_str, self.indent_level + 1, self.level, self.logger)

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        pass

    def __getstate__(self):
        # loggers are looked up again by name in worker processes
        state = dict(self.__dict__)
        state['logger'] = self.logger.name
        return state

    def __setstate__(self, state):
        state['logger'] = logging.getLogger(state['logger'])
        self.__dict__.update(state)


LOG = Log()
DEVNULL = Log(level=None)


def bash_expands(*expressions):
    """
    expand a file glob expression, allowing bash-style brackets.

    Returns:
        list: a list of files

    Example:
        >>> bash_expands('./{test,doc}/*py')
        [...]
    """
    result = []
    for expression in expressions:
        eresult = []
        for name in braceexpand(expression):
            for fname in glob(name):
                eresult.append(fname)
        if not eresult:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(eresult)
    return [os.path.abspath(f) for f in result]


def filepath(path):
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise TypeError('File does not exist', path)
    if len(file_list) > 1:
        raise TypeError('File pattern match multiple files and expected only one', path)
    return file_list[0]


def mkdirp(dirname, log=DEVNULL):
    """
    Make a directory or path of directories. Suppresses the error that is normally raised when the directory already exists
    """
    log("creating output directory: '{}'".format(dirname))
    try:
        os.makedirs(dirname)
    except OSError as exc:
        if exc.errno == errno.EEXIST and os.path.isdir(dirname):
            pass
        else:
            raise exc
    return dirname


def generate_complete_stamp(output_dir, log=DEVNULL, start_time=None):
    """
    writes a complete stamp, optionally including the run time if start_time is given

    Args:
        output_dir (str): path to the output dir the stamp should be written in
        log (Log): function to print logging messages to
        start_time (int): the start time

    Return:
        str: path to the complete stamp

    Example:
        >>> generate_complete_stamp('some_output_dir')
        'some_output_dir/SVSHARD.COMPLETE'
    """
    stamp = os.path.join(output_dir, COMPLETE_STAMP)
    log('complete:', stamp)
    with open(stamp, 'w') as fh:
        if start_time is not None:
            duration = int(time.time()) - start_time
            hours = duration - duration % 3600
            minutes = duration - hours - (duration - hours) % 60
            seconds = duration - hours - minutes
            fh.write('run time (hh/mm/ss): {}:{:02d}:{:02d}\n'.format(hours // 3600, minutes // 60, seconds))
            fh.write('run time (s): {}\n'.format(duration))
    return stamp


def log_arguments(args, log=LOG):
    """
    output the arguments to the console

    Args:
        args (dict): the arguments to print
    """
    log('arguments', time_stamp=True)
    with log.indent() as log:
        for arg, val in sorted(args.items()):
            if isinstance(val, list):
                if len(val) <= 1:
                    log(arg, '= {}'.format(val))
                    continue
                log(arg, '= [')
                for v in val:
                    log(repr(v), indent_level=1)
                log(']')
            elif any([isinstance(val, typ) for typ in [str, int, float, bool, tuple]]) or val is None:
                log(arg, '=', repr(val))
            else:
                log(arg, '=', object.__repr__(val))
