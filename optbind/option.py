import copy

from optbind.coerce import get_type_default, is_enum_type
from optbind.utils import process_keys, format_nonexp_repr


class Option(object):
    """The Option object represents all there is to know about a value
    that can be parsed from argv or a parameter file and stored on an
    instance of the class it is declared on. Options are declared as
    class attributes and behave like plain instance attributes::

        class ProgramOptions(object):
            start = Option('start', 's', parse_as=int, required=True,
                           doc='First ID to process')
            end = Option('end', parse_as=int, default=2 ** 31 - 1,
                         doc='Last ID to process')

    Args:
       keys (str): One or more argument names, e.g., ``'input', 'i'``
          matches ``-input``, ``/I``, and ``-i:file.txt``. A single
          string may also hold several names separated by ``|``. The
          first name is canonical. Prefix a name with ``+`` to use it
          in generated parameter files instead of the first name.
       parse_as: How to interpret the argument's text. One of ``str``
          (the default), ``int``, ``float``, ``bool``, an Enum
          subclass, or any callable which accepts a single string. Wrap
          the type in a list (e.g., ``[int]``) to accept the argument
          multiple times, collecting all values.
       default: The value before anything is parsed. Defaults to the
          "zero" value of *parse_as*, an empty string for ``str``, and
          an empty list for array options.
       required (bool): Record a missing-argument error if the option
          is not passed and still holds its default value.
       position (int): Also bind the Nth (1-based) positional argument
          to this option. Defaults to 0, not positional.
       min: Lowest allowed value, converted to *parse_as* for comparison.
       max: Highest allowed value, converted to *parse_as* for comparison.
       doc (str): A summary of the option's behavior, used in help
          output and as the comment in generated parameter files.
       hidden (bool): Pass True to leave the option out of help output
          and example parameter files. Useful for obsolete arguments.
       exists_flag (str): Name of a boolean attribute on the same class
          which is set to True whenever this option's argument is
          passed, even without a value.
       is_input_path (bool): Marks a file or directory path. Surrounding
          quotes are removed, and relative paths read from a parameter
          file are also looked for next to that parameter file.
       secondary (bool): Comment the option out in example parameter
          files.
       help_shows_default (bool): Append the default value (and min/max)
          to the help text. Defaults to True.
       default_format (str): Custom format for the default value in
          help text, using ``{0}`` for the default, ``{1}`` for min, and
          ``{2}`` for max.
       list_enum_values (bool): List an Enum's members in the help
          text. Defaults to True.
    """
    def __init__(self, *keys, **kw):
        self.keys, self.output_key = process_keys(keys)

        parse_as = kw.pop('parse_as', str)
        self.is_array = isinstance(parse_as, (list, tuple))
        if self.is_array:
            if len(parse_as) != 1:
                raise ValueError('expected array parse_as with exactly one'
                                 ' item type, not: %r' % (parse_as,))
            parse_as = parse_as[0]
        if not callable(parse_as):
            raise TypeError('expected callable for parse_as, not: %r' % (parse_as,))
        self.parse_as = parse_as

        if 'default' in kw:
            self.default = kw.pop('default')
        elif self.is_array:
            self.default = []
        elif parse_as is str:
            self.default = ''
        else:
            self.default = get_type_default(parse_as)

        self.required = kw.pop('required', False)
        self.position = int(kw.pop('position', 0) or 0)
        if self.position < 0:
            raise ValueError('expected position >= 0, not: %r' % self.position)
        self.min = kw.pop('min', None)
        self.max = kw.pop('max', None)
        self.doc = kw.pop('doc', None) or ''
        self.hidden = kw.pop('hidden', False)
        self.exists_flag = kw.pop('exists_flag', None)
        self.is_input_path = kw.pop('is_input_path', False)
        self.secondary = kw.pop('secondary', False)
        self.help_shows_default = kw.pop('help_shows_default', True)
        self.default_format = kw.pop('default_format', None)
        self.list_enum_values = kw.pop('list_enum_values', True)

        if kw:
            raise TypeError('unexpected keyword arguments: %r' % sorted(kw.keys()))

        self.name = None  # set by __set_name__

    @property
    def key(self):
        return self.keys[0]

    @property
    def is_switch(self):
        return self.parse_as is bool and not self.is_array

    @property
    def is_enum(self):
        return is_enum_type(self.parse_as)

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        try:
            return obj.__dict__[self.name]
        except KeyError:
            # copied so list defaults are not shared across instances
            ret = obj.__dict__[self.name] = copy.copy(self.default)
            return ret

    def __set__(self, obj, value):
        obj.__dict__[self.name] = value

    def __repr__(self):
        return format_nonexp_repr(self, ['name', 'keys'],
                                  ['parse_as', 'required', 'position'],
                                  opt_key=lambda v: not v or v is str)


def get_options(target_type):
    """Returns the Options declared on *target_type*, in declaration
    order, base classes first. An Option overridden in a subclass keeps
    its base class position.
    """
    if not isinstance(target_type, type):
        raise TypeError('expected a class with Option attributes, not: %r' % (target_type,))
    ret = {}
    for cls in reversed(target_type.__mro__):
        for attr_name, val in vars(cls).items():
            if isinstance(val, Option):
                ret[attr_name] = val
            elif attr_name in ret:
                # shadowed by a plain attribute in a subclass
                del ret[attr_name]
    return list(ret.values())
