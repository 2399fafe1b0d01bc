"""Conversion of argument text to option values.

Everything here raises on failure (ValueError, TypeError,
OverflowError); the binder catches these per option and records them
as :class:`~optbind.errors.InvalidArgumentValue`.
"""

import enum
import functools
import operator


NULL_VALUE = 'null'

_TRUE_WORDS = ('y', 'yes', 'true')
_FALSE_WORDS = ('n', 'no', 'false')

_TYPE_DEFAULTS = {int: 0, float: 0.0, bool: False}


def is_enum_type(parse_as):
    return isinstance(parse_as, type) and issubclass(parse_as, enum.Enum)


def is_flag_enum(parse_as):
    "True for bit-flag enums, where combined and undefined bits are allowed"
    return isinstance(parse_as, type) and issubclass(parse_as, enum.Flag)


def is_null_text(text):
    return text.strip().lower() == NULL_VALUE


def get_type_default(parse_as):
    """The "zero" value for a type, used when an argument is passed as
    ``null``, and to tell whether a required option still holds its
    initial value.
    """
    return _TYPE_DEFAULTS.get(parse_as)


def parse_bool(text):
    """Lenient boolean parsing. Accepts true/false, y/yes/n/no (all
    case-insensitive), and integers, where any non-zero value is True.
    """
    lower_text = text.strip().lower()
    try:
        return int(lower_text) != 0
    except ValueError:
        pass
    if lower_text in _TRUE_WORDS:
        return True
    if lower_text in _FALSE_WORDS:
        return False
    raise ValueError('expected true/false, yes/no, y/n, or an integer, not: %r' % text)


def _find_member(enum_type, name):
    lower_name = name.strip().lower()
    for member_name, member in enum_type.__members__.items():
        if member_name.lower() == lower_name:
            return member
    for member in enum_type:
        if str(member.value).lower() == lower_name:
            return member
    raise ValueError('%r is not a valid %s member name' % (name, enum_type.__name__))


def _make_flag_value(enum_type, int_val):
    """Build a bit-flag value which includes bits with no defined member,
    as enums with the KEEP boundary do. Strict flag enums raise instead.
    """
    member_type = enum_type._member_type_
    if member_type is object:
        ret = object.__new__(enum_type)
    else:
        ret = member_type.__new__(enum_type, int_val)
    ret._value_ = int_val
    ret._name_ = None
    return ret


def parse_enum(text, enum_type):
    """Parse member names case-insensitively, or a member's integer
    value. Bit-flag enums also accept several names separated by commas
    or pipes, and any integer combination of their bits.

    Raises ValueError for values which are not defined members of a
    regular (non-flag) enum.
    """
    text = text.strip()
    try:
        int_val = int(text)
    except ValueError:
        int_val = None
    if int_val is not None:
        try:
            return enum_type(int_val)
        except ValueError:
            if is_flag_enum(enum_type) and int_val >= 0:
                return _make_flag_value(enum_type, int_val)
            raise ValueError('%s is not a defined %s value' % (int_val, enum_type.__name__))

    if is_flag_enum(enum_type):
        names = [n for n in text.replace('|', ',').split(',') if n.strip()]
        if not names:
            raise ValueError('expected at least one %s member name' % enum_type.__name__)
        members = [_find_member(enum_type, n) for n in names]
        return functools.reduce(operator.or_, members)
    return _find_member(enum_type, text)


def convert_to_type(text, parse_as):
    """Convert a single string to *parse_as*, which can be one of the
    builtin scalar types, an Enum subclass, or any callable accepting
    a single string.
    """
    if is_enum_type(parse_as):
        return parse_enum(text, parse_as)
    if parse_as is bool:
        return parse_bool(text)
    if parse_as is str:
        return text
    return parse_as(text)


def format_value(value):
    "Render a bound value as parameter file or help text"
    if value is None:
        return ''
    if isinstance(value, enum.Enum):
        if value.name:
            return value.name
        return str(value.value)
    return str(value)
