from boltons.iterutils import unique


class OptbindException(Exception):
    """The basest base exception optbind has. Rarely directly
    instantiated if ever, but useful for catching.
    """
    is_missing_required = False

    @property
    def message(self):
        return self.args[0] if self.args else ''

    def __str__(self):
        return self.message


class SchemaError(OptbindException):
    """Raised when the Options declared on a target type cannot be turned
    into a valid set of argument keys: bad characters, duplicate keys,
    conflicting positions, or broken companion attributes.

    The Parser records these instead of raising them out of
    :meth:`Parser.parse`, since nothing can be parsed until the
    declarations are fixed.
    """
    pass


class ArgumentParseError(OptbindException):
    """A base exception used for all errors recorded during argument
    parsing.

    Many subtypes have a ".from_parse()" classmethod that creates an
    exception message from the values available during the parse
    process. Instances are collected on
    :attr:`ParseResult.errors`.
    """
    pass


class ParseNote(ArgumentParseError):
    """Informational entry in the error list, e.g., the location of a
    newly-created example parameter file.
    """
    pass


class AmbiguousArgument(ArgumentParseError):
    """Raised when an argument only matches a case-sensitive key when
    compared case-insensitively, e.g., ``-aB`` when only ``-ab`` and
    ``-AB`` exist.
    """
    @classmethod
    def from_parse(cls, key):
        return cls('Error: Arg %s does not match valid argument' % key)


class UnknownArgument(ArgumentParseError):
    """
    Raised when an unrecognized argument name is passed.
    """
    @classmethod
    def from_parse(cls, key):
        return cls('Error: Unrecognized argument name: %s' % key)


class InvalidArgumentValue(ArgumentParseError):
    """Raised when the value passed to an argument fails to convert to
    the option's type.
    """
    @classmethod
    def from_parse(cls, key, value, type_name, exc=None):
        msg = ('Error: argument %s, cannot cast "%s" to type "%s"'
               % (key, value, type_name))
        if isinstance(exc, OverflowError):
            msg += ' (out of range)'
        return cls(msg)

    @classmethod
    def from_bound(cls, key, type_name, exc=None):
        msg = 'Error: argument %s, cannot cast min or max to type "%s"' % (key, type_name)
        if isinstance(exc, OverflowError):
            msg += ' (out of range)'
        return cls(msg)


class ArgumentOutOfRange(ArgumentParseError):
    """
    Raised when a converted value falls outside of an option's min/max.
    """
    @classmethod
    def from_parse(cls, key, value, bound, is_min):
        if is_min:
            tmpl = 'Error: argument %s, value of %s is less than minimum of %s'
        else:
            tmpl = 'Error: argument %s, value of %s is greater than maximum of %s'
        return cls(tmpl % (key, value, bound))


class MissingRequiredArgument(ArgumentParseError):
    """Raised when a required option is neither passed nor changed from
    its default. Flagged so that callers can choose not to display it.
    """
    is_missing_required = True

    @classmethod
    def from_parse(cls, param_char, key):
        return cls('Error: Required argument missing: %s%s' % (param_char, key))


class DuplicateParameter(ArgumentParseError):
    """Raised when a parameter file sets the same non-array option more
    than once. Unlike the command line, parameter files do not allow the
    last value to silently win.
    """
    @classmethod
    def from_parse(cls, key, values, line_numbers=None):
        val_text = ', '.join([repr(v) for v in values])
        msg = ('Error: parameter "%s" is defined more than once in the'
               ' parameter file: %s' % (key, val_text))
        if line_numbers:
            msg += ' (see lines %s)' % ', '.join([str(n) for n in unique(line_numbers)])
        return cls(msg)


class ParamFileError(ArgumentParseError):
    """Raised when the parameter file is missing or cannot be read.
    """
    @classmethod
    def from_parse(cls, path, exc=None):
        if exc is None:
            return cls('Error: Specified parameter file was not found: %s' % path)
        return cls('Error: Exception while reading the parameter file "%s": %r' % (path, exc))
