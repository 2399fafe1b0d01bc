import os
import sys

from boltons.dictutils import OrderedMultiDict as OMD
from boltons.iterutils import unique

from optbind.coerce import (convert_to_type,
                            format_value,
                            get_type_default,
                            is_null_text)
from optbind.errors import (ArgumentParseError,
                            AmbiguousArgument,
                            UnknownArgument,
                            InvalidArgumentValue,
                            ArgumentOutOfRange,
                            MissingRequiredArgument,
                            DuplicateParameter,
                            ParseNote,
                            SchemaError)
from optbind.helpers import HelpFormatter
from optbind.option import get_options
from optbind.paramfile import (read_param_file_lines,
                               get_param_file_args,
                               get_param_file_contents,
                               write_param_file)
from optbind.registry import build_registry, get_positional_key
from optbind.utils import is_blank, strip_quotes, get_type_name, format_nonexp_repr


DEFAULT_PARAM_CHARS = ('-', '/')
DEFAULT_SEPARATOR_CHARS = (' ', ':', '=')
DEFAULT_HELP_KEYS = ('?', 'help')
DEFAULT_PARAM_FILE_KEYS = ('ParamFile',)
DEFAULT_CREATE_PARAM_FILE_KEYS = ('CreateParamFile',)

EXAMPLE_START_BANNER = '##### Example parameter file contents: #####'
EXAMPLE_END_BANNER = '##### End Example parameter file contents: #####'


def default_print_error(msg):
    return sys.stderr.write(msg + '\n')


def _rstrip_control(text):
    "Trim trailing whitespace and control characters, e.g., from pasted argument lists"
    end = len(text)
    while end and (text[end - 1].isspace() or ord(text[end - 1]) < 32):
        end -= 1
    return text[:end]


def _looks_numeric(text):
    try:
        float(text)
    except ValueError:
        return False
    return True


def _find_separator(text, separator_chars):
    indexes = [text.find(c) for c in separator_chars]
    indexes = [i for i in indexes if i >= 0]
    return min(indexes) if indexes else -1


def _split_key_value(text, separator_chars):
    "Only split off the first separator, since others may be part of drive specifiers"
    idx = _find_separator(text, separator_chars)
    if idx < 0:
        return text, None
    return text[:idx], text[idx + 1:]


def is_rooted_path(arg, registry, separator_chars=DEFAULT_SEPARATOR_CHARS):
    """Whether *arg* looks like an absolute Unix-style path rather than
    a ``/``-prefixed argument, allowing paths like ``/home/user/in.txt``
    to be used as positional arguments and argument values.

    Only applies when ``/`` is a flag character and the text after it
    is not a known argument name. The path must then either contain
    another ``/``, or exist on disk. A single-segment path that does not
    exist yet (e.g., ``/newfile``) is still treated as an argument.
    """
    if '/' not in registry.param_chars or len(arg) < 2 or arg[0] != '/':
        return False
    key, _ = _split_key_value(arg[1:], separator_chars)
    if key in registry:
        return False
    return '/' in arg[1:] or os.path.exists(arg)


def is_flag_arg(arg, registry, separator_chars=DEFAULT_SEPARATOR_CHARS):
    if not arg or arg[0] not in registry.param_chars:
        return False
    return not is_rooted_path(arg, registry, separator_chars)


def _takes_next_arg(next_arg, registry, separator_chars):
    "Whether the argument after a flag without an inline value is that flag's value"
    if not is_flag_arg(next_arg, registry, separator_chars):
        return True
    if next_arg[0] == '-' and _looks_numeric(next_arg):
        # negative numbers are values, unless the program has a numeric key like -1
        return next_arg.lstrip('-') not in registry
    return False


def preprocess(args, registry, separator_chars=DEFAULT_SEPARATOR_CHARS, from_file=False):
    """Convert a list of argument strings into an OrderedMultiDict
    mapping resolved argument names to the string values supplied for
    them, in order. An argument passed without a value maps to an
    empty string.

    Arguments can be passed in several forms::

      -i InputFile.txt
      -i:InputFile.txt
      -i=InputFile.txt
      /d
      --dir

    Arguments which do not start with a flag character are positional,
    and are stored under a synthetic key for their position, but only if
    an Option claims that position.

    With *from_file*, *args* are the lines of a parameter file (as
    returned by :func:`~optbind.paramfile.get_param_file_args`), which
    are always flags, split on ``=`` when present, and never take the
    following line as their value.

    Raises :class:`~optbind.errors.AmbiguousArgument` if a
    case-sensitive argument name is only matched ignoring case.
    """
    param_chars = ''.join(registry.param_chars)
    ret = OMD()
    position = 0

    args = list(args)
    i = 0
    while i < len(args):
        arg = _rstrip_control(args[i])
        i += 1
        if not arg.strip():
            continue

        if not from_file and not is_flag_arg(arg, registry, separator_chars):
            position += 1
            if registry.has_position(position):
                ret.add(get_positional_key(position), arg)
            continue

        key_text = arg.lstrip(param_chars)
        if from_file and '=' in key_text:
            key, _, value = key_text.partition('=')
        else:
            key, value = _split_key_value(key_text, separator_chars)

        if from_file:
            key, value = key.strip(), (value or '').strip()
        elif value is None:
            value = ''
            if i < len(args) and _takes_next_arg(args[i], registry, separator_chars):
                value = args[i]
                i += 1

        info = registry.get(key)
        if info is not None:
            resolved = info.resolve(key)
            if resolved is None:
                raise AmbiguousArgument.from_parse(key)
            key = resolved

        # each value is kept; arrays use them all, otherwise the last one wins
        ret.add(key, value.strip('\r\n'))

    return ret


def get_unknown_args(arg_map, registry):
    return [key for key in arg_map.keys() if not registry.is_known(key)]


def get_duplicate_params(options, file_arg_map, lines=(), registry=None):
    """Returns a DuplicateParameter error for each non-array Option
    which was given more than one value in a parameter file, counting
    all of its keys.
    """
    ret = []
    for opt in options:
        if opt.is_array:
            continue
        values = []
        for key in opt.keys:
            values.extend([v for v in file_arg_map.getlist(key) if not is_blank(v)])
        if len(values) < 2:
            continue
        line_numbers = []
        for line in lines:
            if not line.has_parameter:
                continue
            name = line.name
            info = registry.get(name) if registry is not None else None
            if info is not None:
                name = info.resolve(name) or name
            if name in opt.keys:
                line_numbers.append(line.line_number)
        ret.append(DuplicateParameter.from_parse(opt.key, values, line_numbers))
    return ret


def _get_values(arg_map, keys):
    """Returns the last of *keys* found in *arg_map*, and the non-blank
    values for any of *keys*, in argument order.
    """
    key_given, values = '', []
    for key, value in arg_map.items(multi=True):
        if key not in keys:
            continue
        key_given = key
        if not is_blank(value):
            values.append(value)
    return key_given, values


def is_at_default(opt, value):
    "Strings compare by emptiness, everything else to the type's zero value"
    if opt.is_array or opt.parse_as is str:
        return not value
    return value == get_type_default(opt.parse_as)


def resolve_input_path(path, param_file_dir):
    """Paths read from a parameter file which do not exist relative to
    the working directory are looked for in the parameter file's
    directory. Returns the absolute alternate path if found there,
    otherwise *path* unchanged.
    """
    if not path or not param_file_dir or os.path.isabs(path):
        return path
    if os.path.exists(path):
        return path
    for candidate in unique([os.path.join(param_file_dir, path),
                             os.path.join(param_file_dir, os.path.basename(path))]):
        if os.path.exists(candidate):
            return os.path.abspath(candidate)
    return path


class ParseResult(object):
    """The result of :meth:`Parser.parse`.

    Args:
       options: The target object, populated with the parsed arguments.

    Attributes:
       success (bool): False if parsing failed, or if the help or an
          example parameter file was requested (see *exit_requested*).
       errors (tuple): The :class:`~optbind.errors.ArgumentParseError`
          instances recorded while parsing, in order.
       param_file_path (str): The parameter file path as given on the
          command line, or an empty string.
       exit_requested (bool): True when the help or an example
          parameter file was requested. Not an error, but the program
          should exit without doing its work.
    """
    def __init__(self, options):
        self.options = options
        self.param_file_path = ''
        self.exit_requested = False
        self._success = True
        self._errors = []

    @property
    def success(self):
        return self._success

    @property
    def errors(self):
        return tuple(self._errors)

    def _fail(self):
        self._success = False

    def _add_error(self, error, fail=True):
        self._errors.append(error)
        if fail:
            self._success = False

    def output_errors(self, skip_missing_required=False, print_error=None):
        """Print the recorded errors, one per line.

        Args:
           skip_missing_required (bool): Do not print errors about
              missing required arguments.
           print_error (callable): Called with each message. Defaults to
              writing to stderr.
        """
        print_error = print_error or default_print_error
        for error in self._errors:
            if skip_missing_required and error.is_missing_required:
                continue
            print_error(str(error))
        return

    def __repr__(self):
        return format_nonexp_repr(self, ['success', 'options'],
                                  ['param_file_path', 'exit_requested', 'errors'],
                                  opt_key=lambda v: not v)


class Parser(object):
    """The Parser binds command-line arguments, and optionally a
    parameter file, to the :class:`~optbind.Option` attributes of a
    class.

    Args:
       target_type (type): A class with Option attributes. It must be
          instantiable without arguments; a fresh instance holds the
          defaults.
       name (str): The program name shown in help output. Defaults to
          the basename of ``sys.argv[0]``.
       version (str): Version text shown in help output.
       doc (str): A description of the program, shown at the start of
          help output.
       contact_info (str): Shown at the end of help output.
       usage_examples (list): Example command lines for help output.
       param_chars (str): Characters which start an argument name.
          Defaults to ``-`` and ``/``.
       separator_chars (str): Characters which separate an argument
          name from its value. Defaults to space, ``:``, and ``=``.
       help_keys (tuple): Builtin argument names which show help.
       param_file_keys (tuple): Builtin argument names which load a
          parameter file. More can be added with
          :meth:`add_param_file_key`.
       create_param_file_keys (tuple): Builtin argument names which
          write an example parameter file.
       help_formatter (HelpFormatter): Customizes help output.

    Builtin argument names are only active when the target type does
    not claim the same name for one of its own Options.

    Once initialized, parsing is performed by calling
    :meth:`Parser.parse()` with ``sys.argv[1:]`` or any other list of
    strings.
    """
    def __init__(self, target_type, name=None, version=None, doc=None, **kw):
        self.target_type = target_type
        self.name = name
        self.version = version or ''
        self.program_info = doc or ''
        self.contact_info = kw.pop('contact_info', '')
        self.usage_examples = list(kw.pop('usage_examples', None) or [])

        self.param_chars = _ensure_chars(kw.pop('param_chars', DEFAULT_PARAM_CHARS), 'param_chars')
        self.separator_chars = _ensure_chars(kw.pop('separator_chars', DEFAULT_SEPARATOR_CHARS),
                                             'separator_chars')
        self.help_keys = tuple(kw.pop('help_keys', DEFAULT_HELP_KEYS))
        self.param_file_keys = tuple(kw.pop('param_file_keys', DEFAULT_PARAM_FILE_KEYS))
        self.create_param_file_keys = tuple(kw.pop('create_param_file_keys',
                                                   DEFAULT_CREATE_PARAM_FILE_KEYS))
        self.hide_long_keys = kw.pop('hide_long_keys', True)
        self.keys_width = kw.pop('keys_width', 18)
        self.desc_width = kw.pop('desc_width', None)
        help_formatter = kw.pop('help_formatter', None)
        self.help_formatter = help_formatter if help_formatter is not None else HelpFormatter()
        if kw:
            raise TypeError('unexpected keyword arguments: %r' % sorted(kw.keys()))

        self.options = get_options(target_type)
        self.param_file_path = ''
        self._build_registry()

    def _build_registry(self):
        self.registry, self.schema_error = None, None
        try:
            self.registry = build_registry(self.options, self.target_type,
                                           param_chars=self.param_chars,
                                           separator_chars=self.separator_chars,
                                           help_keys=self.help_keys,
                                           param_file_keys=self.param_file_keys,
                                           create_param_file_keys=self.create_param_file_keys)
        except SchemaError as se:
            self.schema_error = se
        return

    @property
    def param_char(self):
        "The flag character used when displaying argument names"
        return self.param_chars[0]

    def add_param_file_key(self, key):
        """Add another argument name for loading a parameter file, for
        example, ``Conf``. Names already present (ignoring case) are
        skipped.
        """
        if not key or not key.strip():
            return
        if key.lower() in [k.lower() for k in self.param_file_keys]:
            return
        self.param_file_keys += (key,)
        self._build_registry()

    def update_help_text(self, attr_name, text=None, find=None, replace=''):
        """Change the help text of the Option stored as *attr_name*, either
        replacing it with *text*, or replacing occurrences of *find*.

        Note that Options belong to the class, so this affects every
        Parser of the same target type.
        """
        for opt in self.options:
            if opt.name != attr_name:
                continue
            if text is not None:
                opt.doc = text
            if find:
                opt.doc = opt.doc.replace(find, replace)
        return

    def get_help_text(self, result=None):
        return self.help_formatter.get_help_text(self)

    def print_help(self, result=None, print_error=None):
        """Print the help text, preceded by any errors on *result*.
        """
        if result is not None:
            result.output_errors(print_error=print_error)
        print(self.get_help_text())

    def create_param_file(self, path, options=None, print_error=None):
        """Write the values of *options* (defaults to a fresh instance of
        the target type) as a parameter file at *path*. Returns True on
        success.
        """
        if not path or not path.strip():
            return False
        if options is None:
            options = self.target_type()
        return self._write_param_file(path, options, print_error=print_error)

    def _write_param_file(self, path, options, print_error=None):
        print_error = print_error or default_print_error
        lines = get_param_file_contents(self.options, options)
        if not path or not path.strip():
            print()
            print(EXAMPLE_START_BANNER)
            print()
            for line in lines:
                print(line)
            print()
            print(EXAMPLE_END_BANNER)
            print()
            return True
        try:
            write_param_file(path, lines)
        except (UnicodeError, EnvironmentError) as ee:
            print_error('Error writing parameters to file "%s": %r' % (path, ee))
            return False
        return True

    def parse(self, argv=None, options=None, on_error_help=True, output_errors=True,
              print_error=None):
        """This method takes a list of strings and binds them to a new (or
        the given) instance of the target type, returning a
        :class:`ParseResult`.

        Args:
           argv (list): The arguments, not including the program
              name. Pass ``None`` to use ``sys.argv[1:]``.
           options: An existing target instance to update, for instance
              with defaults changed at runtime.
           on_error_help (bool): Print the help text (preceded by the
              errors) when parsing fails. Defaults to True.
           output_errors (bool): When *on_error_help* is False, print
              just the errors when parsing fails. Defaults to True.
           print_error (callable): Called with each error message.
              Defaults to writing to stderr.

        Invalid input does not raise. Check :attr:`ParseResult.success`
        and :attr:`ParseResult.errors` instead.
        """
        if argv is None:
            argv = sys.argv[1:]
        argv = list(argv)
        print_error = print_error or default_print_error
        if options is None:
            options = self.target_type()
        result = ParseResult(options)

        def _fail():
            result._fail()
            if on_error_help:
                self.print_help(result, print_error=print_error)
            elif output_errors:
                result.output_errors(print_error=print_error)
            return result

        if self.schema_error is not None:
            # always reported, the target type needs fixing
            result._add_error(self.schema_error)
            if on_error_help:
                self.print_help(result, print_error=print_error)
            else:
                result.output_errors(print_error=print_error)
            return result

        if not argv:
            # no arguments at all, show help
            return _fail()

        create_example, example_path = False, ''
        try:
            registry = self.registry
            arg_map = preprocess(argv, registry, self.separator_chars)

            for key in registry.get_active_builtins(self.help_keys):
                if registry.get(key).canonical in arg_map:
                    result.exit_requested = True
                    result._fail()
                    self.print_help(result, print_error=print_error)
                    return result

            unknown_args = get_unknown_args(arg_map, registry)
            if unknown_args:
                for key in unknown_args:
                    result._add_error(UnknownArgument.from_parse(key))
                if output_errors:
                    result.output_errors(print_error=print_error)
                return result

            file_arg_map, param_file_dir = self._load_param_file(arg_map, result)

            for key in registry.get_active_builtins(self.create_param_file_keys):
                canonical = registry.get(key).canonical
                if canonical in arg_map:
                    create_example = True
                    example_path = arg_map.getlist(canonical)[-1]

            self._bind(arg_map, file_arg_map, result, param_file_dir)
        except ArgumentParseError as ape:
            result._add_error(ape)
            return _fail()
        except Exception as e:
            result._add_error(ArgumentParseError('Error in Parser.parse: %r' % e))
            print_error('Command line arguments:')
            for arg in argv:
                print_error(arg)

        if create_example:
            if self._write_param_file(example_path, result.options, print_error=print_error) \
               and example_path.strip():
                result._add_error(ParseNote('Created example parameter file at "%s"'
                                            % example_path), fail=False)
            key = registry.get_active_builtins(self.create_param_file_keys)[0]
            result._add_error(ParseNote('%s%s provided. Exiting program.' % (self.param_char, key)),
                              fail=False)
            if output_errors:
                result.output_errors(skip_missing_required=True, print_error=print_error)
            result.exit_requested = True
            result._fail()
            return result

        if result.success:
            return result
        return _fail()

    def _load_param_file(self, arg_map, result):
        """Reads and preprocesses the parameter file, if one was passed.

        Raises an ArgumentParseError (after recording any extras on
        *result*) if more than one was passed, the file can't be read, or
        it defines a parameter more than once.
        """
        registry = self.registry
        pf_keys = [registry.get(k).canonical
                   for k in registry.get_active_builtins(registry.param_file_keys)]
        pf_keys = [k for k in unique(pf_keys) if k in arg_map]
        if not pf_keys:
            return OMD(), None

        paths = []
        for key in pf_keys:
            paths.extend(arg_map.getlist(key))
        if len(paths) > 1:
            # merging several parameter files predictably is not supported
            raise ArgumentParseError('Error: Only one parameter file argument allowed: %s%s'
                                     % (self.param_char, pf_keys[-1]))

        path = paths[0]
        result.param_file_path = path
        if path and path.strip():
            self.param_file_path = os.path.abspath(path)
        lines = read_param_file_lines(path)
        file_args = get_param_file_args(lines, self.param_chars)
        file_arg_map = preprocess(file_args, registry, self.separator_chars, from_file=True)

        dupe_errors = get_duplicate_params(self.options, file_arg_map, lines, registry)
        if dupe_errors:
            for dupe_error in dupe_errors[:-1]:
                result._add_error(dupe_error)
            raise dupe_errors[-1]

        return file_arg_map, os.path.dirname(os.path.abspath(path))

    def _bind(self, arg_map, file_arg_map, result, param_file_dir=None):
        """Set each Option on the target from the parameter file and
        command-line values. Command-line values come last, so they win
        for non-array Options. Errors are recorded per Option; every
        Option is processed regardless.
        """
        target = result.options
        for opt in self.options:
            values, key_given, specified, from_file = [], '', False, False

            file_key, file_values = _get_values(file_arg_map, opt.keys)
            if file_values:
                # blank parameter file values do not replace defaults
                key_given, specified, from_file = file_key, True, True
                values.extend(file_values)

            cli_key, cli_values = _get_values(arg_map, opt.keys)
            if cli_key:
                key_given, specified = cli_key, True
                if opt.is_switch and not cli_values:
                    # a bare switch on the command line beats the parameter file
                    values = []
                if cli_values:
                    from_file = False
                values.extend(cli_values)

            pos_key = get_positional_key(opt.position)
            if opt.position > 0 and pos_key in arg_map:
                key_given, specified, from_file = 'arg#%s' % opt.position, True, False
                values.extend([v for v in arg_map.getlist(pos_key) if not is_blank(v)])

            if opt.required and (not specified or not values) \
               and is_at_default(opt, getattr(target, opt.name)):
                result._add_error(MissingRequiredArgument.from_parse(self.param_char, opt.key))

            if not specified:
                continue

            if opt.is_switch and not values:
                setattr(target, opt.name, True)
                continue

            if opt.exists_flag:
                setattr(target, opt.exists_flag, True)
                if not values:
                    continue

            if not values:
                values = ['']

            last_value = values[-1]
            try:
                if opt.is_array:
                    cast_value = []
                    for value in values:
                        last_value = value
                        cast_value.append(self._parse_value(opt, key_given, value, result))
                else:
                    cast_value = self._parse_value(opt, key_given, last_value, result)
            except Exception as e:
                result._add_error(InvalidArgumentValue.from_parse(
                    key_given, last_value, get_type_name(opt.parse_as), e))
                continue
            setattr(target, opt.name, cast_value)

            if not opt.is_input_path or not isinstance(cast_value, str):
                continue
            path = strip_quotes(cast_value)
            if from_file:
                path = resolve_input_path(path, param_file_dir)
            setattr(target, opt.name, path)
        return

    def _parse_value(self, opt, key, text, result):
        # a quoted "null" is literal text
        if is_null_text(text):
            return get_type_default(opt.parse_as)
        text = strip_quotes(text)
        value = convert_to_type(text, opt.parse_as)
        self._check_range(opt, key, value, result)
        return value

    def _check_range(self, opt, key, value, result):
        for bound, is_min in ((opt.min, True), (opt.max, False)):
            if bound is None:
                continue
            try:
                cast_bound = convert_to_type(format_value(bound), opt.parse_as)
                if (value < cast_bound) if is_min else (value > cast_bound):
                    result._add_error(ArgumentOutOfRange.from_parse(key, format_value(value),
                                                                    format_value(cast_bound),
                                                                    is_min))
            except Exception as e:
                result._add_error(InvalidArgumentValue.from_bound(
                    key, get_type_name(opt.parse_as), e))
        return


def _ensure_chars(chars, arg_name):
    ret = tuple(unique(chars))
    if not ret or not all([isinstance(c, str) and len(c) == 1 for c in ret]):
        raise ValueError('expected one or more single characters for %s, not: %r'
                         % (arg_name, chars))
    return ret


def parse_args(target_type, argv=None, options=None, on_error_help=True,
               output_errors=True, print_error=None, **kw):
    """Convenience function which creates a :class:`Parser` for
    *target_type* (passing along any extra keyword arguments) and
    parses *argv*. Returns a :class:`ParseResult`.
    """
    parser = Parser(target_type, **kw)
    return parser.parse(argv, options=options, on_error_help=on_error_help,
                        output_errors=output_errors, print_error=print_error)
