class SvShardError(Exception):
    """
    base class for all errors raised by the svshard package
    """
    pass


class ConfigurationError(SvShardError):
    """
    raised when an invalid combination of inputs is given, for example a sort request with no ordering
    """
    pass


class RecordIOError(SvShardError):
    """
    raised when opening, reading or writing a record file fails
    """

    def __init__(self, message, path=None):
        SvShardError.__init__(self, message, path)
        self.message = message
        self.path = path

    def __str__(self):
        if self.path is None:
            return str(self.message)
        return '{} ({})'.format(self.message, self.path)


class ShardError(SvShardError):
    """
    raised when processing a single shard fails. Carries the shard identity so the error can be
    reported after crossing a process boundary

    Attributes:
        shard (str): human readable identity of the shard (reference names)
        path (str): the output file for the shard
        detail (str): the formatted traceback of the original failure
    """

    def __init__(self, message, shard=None, path=None, detail=None):
        SvShardError.__init__(self, message, shard, path, detail)
        self.message = message
        self.shard = shard
        self.path = path
        self.detail = detail

    def __str__(self):
        return self.message


class ShardExecutionError(SvShardError):
    """
    raised when waiting on parallel shard processing is interrupted
    """
    pass
