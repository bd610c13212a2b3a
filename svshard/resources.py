from .util import DEVNULL


class ResourceSet:
    """
    the open streams and files owned by a single run. Every component which opens a resource registers it
    here and the run releases all of them when it ends, whether it succeeded or not

    Example:
        >>> with ResourceSet(log) as resources:
        ...     fh = resources.register(open(filename))
    """

    def __init__(self, log=DEVNULL):
        self.log = log
        self._resources = []

    def register(self, resource, name=None):
        """
        Args:
            resource: any object with a close method
            name (str): used to identify the resource when closing it fails

        Returns:
            the input resource
        """
        if resource is None:
            return resource
        if not any([resource is r for r, _ in self._resources]):
            self._resources.append((resource, name))
        return resource

    def __len__(self):
        return len(self._resources)

    def close(self):
        """
        close every registered resource, most recently registered first. A failure closing one resource is
        logged and does not stop the others from being closed. Calling close again has no effect on resources
        already released
        """
        failures = 0
        while self._resources:
            resource, name = self._resources.pop()
            try:
                resource.close()
            except Exception as err:
                failures += 1
                self.log.error('error closing', name if name else repr(resource), repr(err))
        return failures

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()
