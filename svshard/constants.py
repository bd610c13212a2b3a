"""
module responsible for the constants and controlled vocabulary used throughout the svshard package
"""
import os


PROGNAME = 'svshard'
EXIT_OK = 0


def cast_boolean(input_value):
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


class SvNamespace:
    """
    Namespace to hold module constants

    Example:
        >>> nspace = SvNamespace(thing=1, otherthing=2)
        >>> nspace.thing
        1
        >>> nspace.otherthing
        2
    """

    def __init__(self, *pos, **kwargs):
        object.__setattr__(self, '_defns', {})
        object.__setattr__(self, '_types', {})
        object.__setattr__(self, '_members', {})
        object.__setattr__(self, '_nullable', set())
        object.__setattr__(self, '_env_overwritable', set())
        object.__setattr__(self, '_env_prefix', 'SVSHARD')
        if '__name__' in kwargs:  # for building auto documentation
            object.__setattr__(self, '__name__', kwargs.pop('__name__'))

        for k in pos:
            if k in self._members:
                raise AttributeError('Cannot respecify existing attribute', k, self._members[k])
            self[k] = k

        for attr, val in kwargs.items():
            if attr in self._members:
                raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
            self[attr] = val

        for attr, value in self._members.items():
            self._set_type(attr, type(value))

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__name__, ', '.join(sorted(['{}={}'.format(k, repr(v)) for k, v in self.items()])))

    def get_env_name(self, attr):
        """
        Get the name of the corresponding environment variable

        Example:
            >>> nspace = SvNamespace(a=1)
            >>> nspace.get_env_name('a')
            'SVSHARD_A'
        """
        if self._env_prefix:
            return '{}_{}'.format(self._env_prefix, attr).upper()
        return attr.upper()

    def get_env_var(self, attr):
        """
        retrieve the environment variable definition of a given attribute
        """
        env_name = self.get_env_name(attr)
        env = os.environ[env_name].strip()
        attr_type = self._types.get(attr, str)

        if attr in self._nullable and env.lower() == 'none':
            return None
        return attr_type(env)

    def is_env_overwritable(self, attr):
        return attr in self._env_overwritable

    def is_nullable(self, attr):
        return attr in self._nullable

    def __getattribute__(self, attr):
        try:
            return object.__getattribute__(self, attr)
        except AttributeError as err:
            variables = object.__getattribute__(self, '_members')
            if attr not in variables:
                raise err
            if self.is_env_overwritable(attr):
                try:
                    return self.get_env_var(attr)
                except KeyError:
                    pass
            return variables[attr]

    def items(self):
        return [(k, self[k]) for k in self.keys()]

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, val):
        self.__setattr__(key, val)

    def __setattr__(self, attr, val):
        if attr.startswith('_'):
            raise ValueError('cannot set private', attr)
        object.__getattribute__(self, '_members')[attr] = val

    def __contains__(self, attr):
        return attr in self._members

    def keys(self):
        return [k for k in self._members]

    def values(self):
        return [self[k] for k in self._members]

    def __iter__(self):
        return iter(self.keys())

    def enforce(self, value):
        """
        checks that the current namespace has a given value

        Returns:
            the input value

        Raises:
            KeyError: the value did not exist

        Example:
            >>> nspace = SvNamespace(thing=1, otherthing=2)
            >>> nspace.enforce(1)
            1
        """
        if value not in self.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), self.values())
        return value

    def _set_type(self, attr, cast_type):
        if cast_type == bool:
            self._types[attr] = cast_boolean
        else:
            self._types[attr] = cast_type

    def type(self, attr, *pos):
        if len(pos) > 1:
            raise TypeError('too many arguments. type takes a single \'default\' value argument')
        try:
            return self._types[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def define(self, attr, *pos):
        """
        Get the definition of a given attribute or return a default (when given) if the attribute does not exist

        Raises:
            KeyError: the attribute does not exist and a default was not given
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. define takes a single \'default\' value argument')
        try:
            return self._defns[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def add(self, attr, value, defn=None, cast_type=None, nullable=False, env_overwritable=False):
        """
        Add an attribute to the name space

        Args:
            attr (str): name of the attribute being added
            value: the value of the attribute
            defn (str): the definition, used in generating help menus
            cast_type (callable): the function to use in casting the value
            nullable (bool): True if this attribute can have a None value
            env_overwritable (bool): True if this attribute will be overriden by its environment variable equivalent
        """
        if cast_type:
            self._set_type(attr, cast_type)
        else:
            self._set_type(attr, type(value))
        if defn:
            self._defns[attr] = defn

        if nullable:
            self._nullable.add(attr)
        if env_overwritable:
            self._env_overwritable.add(attr)
        self[attr] = value


class WeakSvNamespace(SvNamespace):
    """
    namespace where every member can be overridden by its environment variable equivalent
    """

    def is_env_overwritable(self, attr):
        return True


COMPLETE_STAMP = 'SVSHARD.COMPLETE'
""":class:`str`: Filename for the complete stamp written at the end of a successful run"""

ORIENT = SvNamespace(LEFT='L', RIGHT='R', NS='?', __name__='svshard.constants.ORIENT')
""":class:`SvNamespace`: holds controlled vocabulary for allowed orientation values

- ``LEFT``: the retained sequence lies to the left of the break wrt the positive/forward strand
- ``RIGHT``: the retained sequence lies to the right of the break wrt the positive/forward strand
- ``NS``: orientation is not specified
"""

SAMPLE = SvNamespace(TUMOUR='tumour', NORMAL='normal', __name__='svshard.constants.SAMPLE')
""":class:`SvNamespace`: the sample an evidence source was sequenced from"""

SORT_ORDER = SvNamespace(
    COORDINATE='coordinate', QUERYNAME='queryname', UNSORTED='unsorted', __name__='svshard.constants.SORT_ORDER'
)
""":class:`SvNamespace`: sort orders understood by the alignment sorter (mirrors the SAM header SO tag)"""

SUBCOMMAND = SvNamespace(EXTRACT='extract', CALL='call', SORT='sort', __name__='svshard.constants.SUBCOMMAND')

CIGAR = SvNamespace(M=0, I=1, D=2, N=3, S=4, H=5, P=6, X=8, EQ=7)  # noqa
""":class:`SvNamespace`: Enum-like. For readable cigar values"""

COLUMNS = SvNamespace(
    variant_id='variant_id',
    valid='valid',
    break1_reference_id='break1_reference_id',
    break1_chromosome='break1_chromosome',
    break1_position_start='break1_position_start',
    break1_position_end='break1_position_end',
    break1_orientation='break1_orientation',
    break2_reference_id='break2_reference_id',
    break2_chromosome='break2_chromosome',
    break2_position_start='break2_position_start',
    break2_position_end='break2_position_end',
    break2_orientation='break2_orientation',
    annotations='annotations',
    __name__='svshard.constants.COLUMNS',
)
""":class:`SvNamespace`: column names of the tab-delimited variant files, in output order"""

EVIDENCE_COLUMNS = SvNamespace(
    evidence_id='evidence_id',
    sample='sample',
    reference_id='reference_id',
    start='start',
    end='end',
    orient='orient',
    remote_reference_id='remote_reference_id',
    remote_start='remote_start',
    remote_end='remote_end',
    remote_orient='remote_orient',
    mapping_quality='mapping_quality',
    __name__='svshard.constants.EVIDENCE_COLUMNS',
)
""":class:`SvNamespace`: column names of the tab-delimited evidence files, in output order"""

ANNOTATION = SvNamespace(
    REF_NORMAL='REF_NORMAL',
    REF_TUMOUR='REF_TUMOUR',
    SUPPORT='SUPPORT',
    SUPPORT_NORMAL='SUPPORT_NORMAL',
    SUPPORT_TUMOUR='SUPPORT_TUMOUR',
    __name__='svshard.constants.ANNOTATION',
)
""":class:`SvNamespace`: keys added to the variant annotation mapping by the built-in annotators

- ``REF_NORMAL``: read depth of the normal alignments at the first breakend
- ``REF_TUMOUR``: read depth of the tumour alignments at the first breakend
- ``SUPPORT``: number of distinct evidence ids supporting the call
- ``SUPPORT_NORMAL``: supporting evidence ids from normal sources
- ``SUPPORT_TUMOUR``: supporting evidence ids from tumour sources
"""
