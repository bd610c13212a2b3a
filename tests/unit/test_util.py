import logging
import os
import pickle
from unittest import mock

import pytest
from svshard.constants import COMPLETE_STAMP
from svshard.util import (
    DEVNULL,
    Log,
    bash_expands,
    filepath,
    generate_complete_stamp,
    log_arguments,
    mkdirp,
)


class TestLog:
    def test_message_and_indent(self):
        logger = mock.Mock(spec=logging.Logger)
        log = Log(logger=logger)
        log('hello', 1)
        logger.log.assert_called_once()
        level, message = logger.log.call_args[0]
        assert level == logging.INFO
        assert message.endswith(' hello 1')
        log.indent()('nested', level=logging.DEBUG)
        level, message = logger.log.call_args[0]
        assert level == logging.DEBUG
        assert message.endswith('  nested')

    def test_error_level(self):
        logger = mock.Mock(spec=logging.Logger)
        Log(logger=logger).error('bad')
        assert logger.log.call_args[0][0] == logging.ERROR

    def test_devnull_is_silent(self):
        with mock.patch.object(DEVNULL, 'logger') as logger:
            DEVNULL('nothing')
            DEVNULL.error('nothing')
            logger.log.assert_not_called()

    def test_pickle(self):
        log = Log(indent_level=2, logger='svshard.test')
        result = pickle.loads(pickle.dumps(log))
        assert result.logger is logging.getLogger('svshard.test')
        assert result.indent_level == 2


class TestFiles:
    def test_bash_expands(self, tmp_path):
        for name in ['a.txt', 'b.txt', 'c.log']:
            (tmp_path / name).write_text('')
        result = bash_expands(str(tmp_path / '{a,b}.txt'))
        assert sorted([os.path.basename(f) for f in result]) == ['a.txt', 'b.txt']
        with pytest.raises(FileNotFoundError):
            bash_expands(str(tmp_path / '*.bam'))

    def test_filepath(self, tmp_path):
        (tmp_path / 'a.txt').write_text('')
        (tmp_path / 'b.txt').write_text('')
        assert filepath(str(tmp_path / 'a.txt')) == str(tmp_path / 'a.txt')
        with pytest.raises(TypeError):
            filepath(str(tmp_path / '*.txt'))
        with pytest.raises(TypeError):
            filepath(str(tmp_path / 'c.txt'))

    def test_mkdirp_existing(self, tmp_path):
        dirname = str(tmp_path / 'a' / 'b')
        assert mkdirp(dirname) == dirname
        assert mkdirp(dirname) == dirname
        assert os.path.isdir(dirname)

    def test_complete_stamp(self, tmp_path):
        stamp = generate_complete_stamp(str(tmp_path), start_time=0)
        assert stamp == os.path.join(str(tmp_path), COMPLETE_STAMP)
        with open(stamp, 'r') as fh:
            assert 'run time' in fh.read()


def test_log_arguments():
    log = mock.MagicMock()
    log.indent.return_value.__enter__.return_value = log
    log_arguments({'b': [1, 2], 'a': 'x', 'c': object()}, log=log)
    assert log.call_count >= 5
