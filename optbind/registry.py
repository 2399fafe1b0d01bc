"""The registry of every argument name a Parser accepts.

Built once from a target type's Options (plus the builtin help,
parameter file, and example-file arguments) and then treated as
read-only. Keys are lowercased spellings; two Options whose keys
differ only in case make that spelling case-sensitive.
"""

from collections import OrderedDict
from types import MappingProxyType

from optbind.errors import SchemaError


POSITIONAL_KEY_TMPL = '##%s##'


def get_positional_key(position):
    "The synthetic key used to track the Nth positional argument"
    return POSITIONAL_KEY_TMPL % position


class ArgKeyInfo(object):
    """Data about a single spelling of an argument name (``name`` and
    ``NAME`` share the same instance).

    Args:
       canonical (str): The first spelling registered.
       spellings (tuple): All spellings sharing this lowercase form.
       case_sensitive (bool): True when more than one Option uses this
          spelling in different cases, so input must match exactly.
       can_be_switch (bool): True if one of the Options using this
          spelling is a boolean.
       is_builtin (bool): True for internally-defined arguments like
          ``?``, ``help``, ``ParamFile``, and ``CreateParamFile``.
    """
    def __init__(self, canonical, spellings=(), case_sensitive=False,
                 can_be_switch=False, is_builtin=False):
        self.canonical = canonical
        self.spellings = tuple(spellings or (canonical,))
        self.case_sensitive = case_sensitive
        self.can_be_switch = can_be_switch
        self.is_builtin = is_builtin

    def resolve(self, key):
        """Returns the key to store for the user-supplied *key*, or None
        if a case-sensitive spelling was only matched ignoring case.
        """
        if not self.case_sensitive:
            return self.canonical
        if key in self.spellings:
            return key
        return None

    def __repr__(self):
        cn = self.__class__.__name__
        return ('%s(%r, spellings=%r, case_sensitive=%r, can_be_switch=%r, is_builtin=%r)'
                % (cn, self.canonical, self.spellings, self.case_sensitive,
                   self.can_be_switch, self.is_builtin))


class Registry(object):
    """Read-only mapping of lowercased argument names (and positional
    slot keys) to :class:`ArgKeyInfo`. Use :func:`build_registry` to
    create one.
    """
    def __init__(self, arg_map, help_keys=(), param_file_keys=(),
                 create_param_file_keys=(), param_chars=('-', '/')):
        self._arg_map = MappingProxyType(OrderedDict(arg_map))
        self.help_keys = tuple(help_keys)
        self.param_file_keys = tuple(param_file_keys)
        self.create_param_file_keys = tuple(create_param_file_keys)
        self.param_chars = tuple(param_chars)

    def __contains__(self, key):
        return key.lower() in self._arg_map

    def __iter__(self):
        return iter(self._arg_map)

    def __len__(self):
        return len(self._arg_map)

    def get(self, key, default=None):
        return self._arg_map.get(key.lower(), default)

    def items(self):
        return self._arg_map.items()

    def is_builtin(self, key):
        info = self.get(key)
        return info is not None and info.is_builtin

    def get_active_builtins(self, keys):
        "Returns those of *keys* which were not claimed by an Option"
        return [k for k in keys if self.is_builtin(k)]

    def has_position(self, position):
        return get_positional_key(position) in self._arg_map

    def is_known(self, key):
        info = self.get(key)
        if info is None:
            return False
        return info.resolve(key) is not None


def build_registry(options, target_type=None, param_chars=('-', '/'),
                   separator_chars=(' ', ':', '='), help_keys=('?', 'help'),
                   param_file_keys=('ParamFile',),
                   create_param_file_keys=('CreateParamFile',)):
    """Validate the keys and positions of *options* and build a
    :class:`Registry` of every accepted spelling.

    *target_type* is used to check ``exists_flag`` companion attributes
    and to improve error messages.

    Raises :class:`SchemaError` on the first problem found; no partial
    registry is ever returned.
    """
    type_name = getattr(target_type, '__name__', 'options')
    default_obj = target_type() if target_type is not None else None

    pending = OrderedDict()  # lowercase key -> dict of ArgKeyInfo kwargs
    for opt in options:
        if opt.exists_flag is not None:
            _check_exists_flag(opt, default_obj, type_name)

        if opt.is_input_path and (opt.parse_as is not str or opt.is_array):
            raise SchemaError('Error: Option "%s" has is_input_path=True; the option must'
                              ' parse as str, but parses as %s'
                              % (opt.name, getattr(opt.parse_as, '__name__', opt.parse_as)))

        for key in opt.keys:
            for char in param_chars:
                if key.startswith(char):
                    raise SchemaError('Error: bad character in argument key "%s" in %s;'
                                      ' key cannot start with char "%s"' % (key, type_name, char))
            for char in separator_chars:
                if char in key:
                    raise SchemaError('Error: bad character in argument key "%s" in %s;'
                                      ' key contains invalid char "%s"' % (key, type_name, char))

            lower = key.lower()
            if lower not in pending:
                pending[lower] = {'canonical': key, 'spellings': [],
                                  'case_sensitive': False, 'can_be_switch': False}
            else:
                pending[lower]['case_sensitive'] = True
            info_kw = pending[lower]
            info_kw['can_be_switch'] = info_kw['can_be_switch'] or opt.is_switch

            if key in info_kw['spellings']:
                raise SchemaError('Error: Duplicate option keys specified in class %s;'
                                  ' key is "%s"' % (type_name, key))
            info_kw['spellings'].append(key)

        if opt.position <= 0:
            continue
        pos_key = get_positional_key(opt.position)
        if pos_key in pending:
            raise SchemaError('Error: Multiple options in class %s specify position %s;'
                              ' conflict involves "%s"' % (type_name, opt.position, opt.name))
        pending[pos_key] = {'canonical': pos_key}

    arg_map = OrderedDict([(k, ArgKeyInfo(**kw)) for k, kw in pending.items()])

    builtins = ((help_keys, True), (param_file_keys, False), (create_param_file_keys, True))
    for keys, can_be_switch in builtins:
        for key in keys:
            if key.lower() in arg_map:
                continue  # claimed by the target type
            arg_map[key.lower()] = ArgKeyInfo(key, can_be_switch=can_be_switch,
                                              is_builtin=True)

    return Registry(arg_map, help_keys=help_keys, param_file_keys=param_file_keys,
                    create_param_file_keys=create_param_file_keys,
                    param_chars=param_chars)


def _check_exists_flag(opt, default_obj, type_name):
    flag_name = opt.exists_flag
    if not isinstance(flag_name, str) or not flag_name.strip():
        raise SchemaError('Error: exists_flag must be either None, or a boolean attribute'
                          ' name; class %s, option %s, current value is "%s"'
                          % (type_name, opt.name, flag_name))
    if default_obj is None or not isinstance(getattr(default_obj, flag_name, None), bool):
        raise SchemaError('Error: exists_flag does not exist or is not a boolean attribute'
                          ' name; class %s, option %s, current value is "%s"'
                          % (type_name, opt.name, flag_name))
