import os
import sys
import array
import textwrap

from optbind.coerce import format_value, is_flag_enum


# placeholder for spaces which should not be wrapped on
_NO_BREAK = '\a'


def _get_termios_winsize():
    # TLPI, 62.9 (p. 1319)
    import fcntl
    import termios

    winsize = array.array('H', [0, 0, 0, 0])

    assert not fcntl.ioctl(sys.stdout, termios.TIOCGWINSZ, winsize)

    ws_row, ws_col, _, _ = winsize

    return ws_row, ws_col


def _get_environ_winsize():
    # ROWS/COLUMNS are special shell variables
    try:
        rows, columns = int(os.environ['ROWS']), int(os.environ['COLUMNS'])
    except (KeyError, ValueError):
        rows, columns = None, None
    return rows, columns


def get_winsize():
    rows, cols = None, None
    try:
        rows, cols = _get_termios_winsize()
    except Exception:
        try:
            rows, cols = _get_environ_winsize()
        except Exception:
            pass
    return rows, cols


def wrap_paragraph(text, width=80):
    """Wrap each line of *text* to *width*, keeping the indentation of
    indented lines and never splitting on ``\\a``, which is rendered as
    a regular space.
    """
    ret = []
    for line in text.replace('\r\n', '\n').split('\n'):
        if not line.strip():
            ret.append('')
            continue
        indent = line[:len(line) - len(line.lstrip())]
        wrapped = textwrap.wrap(line, width, subsequent_indent=indent, break_long_words=False,
                                break_on_hyphens=False) or ['']
        ret.extend([w.replace(_NO_BREAK, ' ') for w in wrapped])
    return ret


def _wrap_pair(indent, label, sep, doc, label_width, doc_width):
    "Wrap both columns and join them line by line"
    label_lines = textwrap.wrap(label, label_width, break_long_words=False,
                                break_on_hyphens=False) or ['']
    doc_lines = wrap_paragraph(doc, doc_width) if doc else []
    ret = []
    for i in range(max(len(label_lines), len(doc_lines))):
        lhs = label_lines[i] if i < len(label_lines) else ''
        rhs = doc_lines[i] if i < len(doc_lines) else ''
        ret.append((indent + lhs.ljust(label_width) + sep + rhs).rstrip())
    return ret


def get_default_text(opt, default_value):
    "The default value as shown in help: null for None, quotes for blanks"
    if default_value is None:
        return 'null'
    if opt.is_array:
        text = ', '.join([format_value(v) for v in default_value])
    else:
        text = format_value(default_value)
    if not text.strip():
        return '"%s"' % text
    if opt.is_enum and not opt.is_array:
        text += '%s(or%s%s)' % (_NO_BREAK, _NO_BREAK, default_value.value)
    return text


def get_option_doc(opt, default_value):
    """Build the help text for an Option, including the "Required." prefix,
    the default (and min/max) value, and the list of enum members.
    """
    ret = 'Required. ' if opt.required else ''
    ret += opt.doc

    if opt.default_format:
        fmt = opt.default_format
        if not fmt[0].isspace():
            ret += ' '
        ret += fmt.format(get_default_text(opt, default_value), opt.min, opt.max)
    elif opt.help_shows_default:
        ret += ' (Default:%s%s' % (_NO_BREAK, get_default_text(opt, default_value))
        if opt.min is not None:
            ret += ', Min:%s%s' % (_NO_BREAK, format_value(opt.min))
        if opt.max is not None:
            ret += ', Max:%s%s' % (_NO_BREAK, format_value(opt.max))
        ret += ')'

    if opt.is_enum and opt.list_enum_values:
        ret += '\nPossible values are: '
        if is_flag_enum(opt.parse_as):
            ret += '(Bit flags)'
        for member in opt.parse_as:
            ret += "\n  %s or '%s'" % (member.value, member.name)
    return ret.strip()


def get_key_labels(keys, param_char, max_len=None):
    """Prefix each key with *param_char*. Keys longer than *max_len* are
    left out, unless every key is that long, in which case only the
    shortest is kept.
    """
    labels = [param_char + k for k in keys]
    if not max_len:
        return labels
    short_labels = [label for label in labels if len(label) <= max_len]
    if short_labels:
        return short_labels
    return [min(labels, key=len)] if labels else []


class HelpFormatter(object):
    """Renders help text for a :class:`~optbind.Parser`. All of the
    strings and widths in ``default_context`` can be overridden with
    keyword arguments.
    """
    default_context = {
        'usage_label': 'Usage:',
        'help_doc': 'Show this help screen',
        'param_file_doc': ('Path to a file containing program parameters. Additional'
                           ' arguments on the command line can supplement or override'
                           ' the arguments in the param file. Lines starting with'
                           ' \'#\' or \';\' will be treated as comments; blank lines'
                           ' are ignored. Lines that start with text that does not'
                           ' match a parameter will also be ignored.'),
        'create_param_file_doc': ('Create an example parameter file. Can supply a path;'
                                  ' if path is not supplied, the example parameter file'
                                  ' content will output to the console.'),
        'positional_label': 'NOTE:',
        'positional_doc': ('arg#1, arg#2, etc. refer to positional arguments, used like'
                           ' "%s [arg#1] [arg#2] [other args]".'),
        'examples_heading': 'Examples:',
        'section_indent': '  ',
        'doc_separator': '  ',
        'paragraph_width': 80,
        'max_width': 120,
        'min_doc_width': 40,
    }

    def __init__(self, **kwargs):
        ctx = {}
        for key, val in self.default_context.items():
            ctx[key] = kwargs.pop(key, val)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r' % list(kwargs.keys()))
        self.ctx = ctx

    def get_program_name(self, parser):
        return parser.name or os.path.basename(sys.argv[0]) or 'program'

    def get_doc_width(self, parser):
        if parser.desc_width:
            return parser.desc_width
        ctx = self.ctx
        _, width = get_winsize()
        if not width:
            width = 80
        width = min(width, ctx['max_width']) - 2
        width -= len(ctx['section_indent']) + parser.keys_width + len(ctx['doc_separator'])
        return max(width, ctx['min_doc_width'])

    def get_help_rows(self, parser):
        """Returns a list of (label, doc) pairs, one for each displayed
        argument, including the builtins.
        """
        ctx = self.ctx
        registry = parser.registry
        if registry is None:
            return [('ERROR!!!', 'Cannot determine arguments. Fix errors in code!')]
        param_char = parser.param_char
        max_key_len = parser.keys_width - 2 if parser.hide_long_keys else None

        ret = []
        if any([opt.position > 0 for opt in parser.options]):
            ret.append((ctx['positional_label'],
                        ctx['positional_doc'] % self.get_program_name(parser)))

        help_keys = registry.get_active_builtins(registry.help_keys)
        if help_keys:
            ret.append((', '.join([param_char + k for k in help_keys]), ctx['help_doc']))

        defaults = parser.target_type()
        for opt in parser.options:
            if opt.hidden:
                continue
            labels = get_key_labels(opt.keys, param_char, max_key_len)
            if opt.position > 0:
                labels.append('arg#%s' % opt.position)
            ret.append((', '.join(labels), get_option_doc(opt, getattr(defaults, opt.name))))

        builtin_rows = ((registry.param_file_keys, ctx['param_file_doc']),
                        (registry.create_param_file_keys, ctx['create_param_file_doc']))
        for keys, doc in builtin_rows:
            keys = registry.get_active_builtins(keys)
            if keys:
                ret.append((', '.join(get_key_labels(keys, param_char, max_key_len)), doc))
        return ret

    def get_usage_line(self, parser):
        ctx = self.ctx
        parts = [ctx['usage_label']] if ctx['usage_label'] else []
        parts.append(self.get_program_name(parser))
        return ' '.join(parts)

    def get_help_text(self, parser):
        ctx = self.ctx
        para_width = ctx['paragraph_width']
        ret = []
        append = ret.append

        if parser.program_info and parser.program_info.strip():
            append('')
            ret.extend(wrap_paragraph(parser.program_info, para_width))

        append('')
        if parser.version:
            append('%s %s' % (self.get_program_name(parser), parser.version))
        append(self.get_usage_line(parser))

        doc_width = self.get_doc_width(parser)
        for label, doc in self.get_help_rows(parser):
            append('')
            ret.extend(_wrap_pair(indent=ctx['section_indent'],
                                  label=label,
                                  sep=ctx['doc_separator'],
                                  doc=doc,
                                  label_width=parser.keys_width,
                                  doc_width=doc_width))
        append('')

        if parser.usage_examples:
            append(ctx['examples_heading'])
            append('')
            for example in parser.usage_examples:
                append(example)
                append('')

        if parser.contact_info and parser.contact_info.strip():
            append('')
            ret.extend(wrap_paragraph(parser.contact_info, para_width))

        return '\n'.join(ret)
