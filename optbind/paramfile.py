"""Reading and writing parameter files.

A parameter file holds one setting per line, as ``Key=Value``, in
the same syntax as a command-line argument (the leading ``-`` is
optional). Lines starting with ``#`` or ``;`` are comments, and blank
lines are ignored::

  # Required: First ID to process
  start=5

  # Input file path
  input="My Input File.txt"
"""

import os
import codecs

from optbind.coerce import format_value, is_null_text
from optbind.errors import ParamFileError


COMMENT_CHARS = ('#', ';')

SECONDARY_NOTE_LINES = ['# Secondary arguments are shown above with their default value,'
                        ' but commented out using #',
                        '# Enable and customize them by removing # from the start of'
                        ' the Key=Value line']


class ParamFileLine(object):
    """A single line of a parameter file.

    Args:
       line_number (int): 1-based line number in the file.
       text (str): The line's text, without the line ending.
       parse (bool): Pass True to split a ``Key=Value  # comment``
          line into its name, value, and comment.
    """
    def __init__(self, line_number, text, parse=False):
        self.line_number = line_number
        self.text = text
        self.name = ''
        self.value = ''
        self.comment = ''
        if parse:
            name, value, comment = parse_setting(text)
            self.store_parameter(name, value, comment)

    @property
    def has_parameter(self):
        return bool(self.name.strip())

    @property
    def is_comment(self):
        stripped = self.text.strip()
        return bool(stripped) and stripped[0] in COMMENT_CHARS

    def store_parameter(self, name, value, comment='', update_text=False):
        self.name = name or ''
        self.value = value or ''
        self.comment = _format_comment(comment)
        if update_text:
            self.text = '%s=%s' % (self.name, self.value)
            if self.comment:
                self.text += '    ' + self.comment

    def __str__(self):
        return self.text

    def __repr__(self):
        cn = self.__class__.__name__
        return '%s(%r, %r)' % (cn, self.line_number, self.text)


def _format_comment(comment):
    comment = (comment or '').strip()
    if not comment or comment.startswith('#'):
        return comment
    return '# ' + comment


def parse_setting(text, param_chars=('-', '/')):
    """Split a ``Key=Value`` line into a (name, value, comment)
    tuple. The value keeps any trailing ``#`` comment, which is also
    returned separately. Comment lines and lines without ``=`` yield
    empty strings.
    """
    text = (text or '').strip()
    if not text or text[0] in COMMENT_CHARS or '=' not in text:
        return '', '', ''
    name, _, value = text.partition('=')
    name = name.strip().lstrip(''.join(param_chars))
    if not name:
        return '', '', ''
    value = value.strip()
    comment = ''
    if '#' in value:
        comment = value[value.index('#'):].strip()
    return name, value, comment


def read_param_file_lines(path):
    """Read a parameter file into a list of :class:`ParamFileLine`.

    Raises :class:`~optbind.errors.ParamFileError` if *path* is empty,
    the file does not exist, or it cannot be read.
    """
    if not path or not path.strip():
        raise ParamFileError('Error: empty parameter file path')
    if not os.path.isfile(path):
        exc = ParamFileError.from_parse(path)
        exc.args = (exc.args[0] + '\n  ... Full path: %s' % os.path.abspath(path),)
        raise exc
    try:
        with codecs.open(path, 'r', 'utf-8') as f:
            text = f.read()
    except (UnicodeError, EnvironmentError) as ee:
        raise ParamFileError.from_parse(os.path.abspath(path), ee)

    return [ParamFileLine(lineno, line, parse=True)
            for lineno, line in enumerate(text.splitlines(), 1)]


def get_param_file_args(lines, param_chars=('-', '/')):
    """Turn parameter file lines into argument strings, skipping blank
    and comment lines, and adding a leading ``-`` where the line does not
    already start with one of *param_chars*.
    """
    ret = []
    for line in lines:
        text = str(line).strip()
        if not text or text[0] in COMMENT_CHARS:
            continue
        if text[0] not in param_chars:
            text = param_chars[0] + text
        ret.append(text)
    return ret


def _format_file_value(value):
    text = format_value(value)
    if text != text.strip() or is_null_text(text):
        return '"%s"' % text
    return text


def get_param_file_contents(options, target):
    """Render the current values of *target* as the lines of an example
    parameter file. Required options come first and hidden options are
    skipped. Each setting is preceded by its help text as a comment, and
    secondary options are commented out.
    """
    lines = []
    comments_processed = 0
    secondary_count = 0

    ordered = [o for o in options if o.required] + [o for o in options if not o.required]
    for opt in ordered:
        if opt.hidden:
            continue
        if comments_processed:
            lines.append('')
        help_lines = opt.doc.replace('\r\n', '\n').split('\n')
        lines.append('# %s%s' % ('Required: ' if opt.required else '', help_lines[0]))
        lines.extend(['# ' + hl for hl in help_lines[1:]])

        prefix = ''
        if opt.secondary:
            prefix = '# '
            secondary_count += 1

        value = getattr(target, opt.name)
        values = list(value or []) if opt.is_array else [value]
        for val in values:
            lines.append('%s%s=%s' % (prefix, opt.output_key, _format_file_value(val)))

        comments_processed += 1

    if secondary_count:
        lines.append('')
        lines.extend(SECONDARY_NOTE_LINES)
    return lines


def write_param_file(path, lines):
    with codecs.open(path, 'w', 'utf-8') as f:
        for line in lines:
            f.write(line + '\n')
    return
