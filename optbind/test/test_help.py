import enum

import pytest

from optbind import Option, Parser, HelpFormatter
from optbind.helpers import get_key_labels, get_option_doc, wrap_paragraph


class Mode(enum.Enum):
    Fast = 1
    Slow = 2


class Perm(enum.Flag):
    Read = 1
    Write = 2


class HelpOptions(object):
    start = Option('start', 's', parse_as=int, required=True, doc='First ID to process')
    end = Option('end', parse_as=int, default=100, min=0, max=1000, doc='Last ID to process')
    name = Option('name', doc='Name of the run')
    mode = Option('mode', parse_as=Mode, default=Mode.Fast, doc='Processing mode')
    perms = Option('perms', parse_as=Perm, default=Perm.Read, doc='Permissions')
    level = Option('level', parse_as=int, default=2, default_format='[level {0}]')
    quiet = Option('quiet', parse_as=bool, help_shows_default=False, doc='No output')
    secret = Option('secret', hidden=True, doc='Not for users')
    long_key = Option('averyveryverylongkeyname', 'lk', doc='Has a long key')
    input_path = Option('input', 'i', position=1, doc='Input file path')


def _get_parser(**kw):
    kw.setdefault('name', 'prog')
    kw.setdefault('desc_width', 200)
    return Parser(HelpOptions, **kw)


def test_help_text():
    text = _get_parser().get_help_text()

    assert 'Usage: prog' in text
    assert '-?, -help' in text
    assert 'Show this help screen' in text
    assert '-start, -s' in text
    assert 'Required. First ID to process (Default: 0)' in text
    assert 'Last ID to process (Default: 100, Min: 0, Max: 1000)' in text
    assert 'Name of the run (Default: "")' in text
    assert 'Processing mode (Default: Fast (or 1))' in text
    assert "  1 or 'Fast'" in text
    assert "  2 or 'Slow'" in text
    assert 'Possible values are: (Bit flags)' in text
    assert '[level 2]' in text
    assert 'No output' in text
    assert 'No output (Default' not in text
    assert 'Not for users' not in text
    assert '-lk' in text
    assert 'averyveryverylongkeyname' not in text
    assert '-input, -i, arg#1' in text
    assert 'NOTE:' in text
    assert '"prog [arg#1] [arg#2] [other args]"' in text
    assert '-ParamFile' in text
    assert '-CreateParamFile' in text


def test_help_extras():
    parser = _get_parser(version='v1.2.3',
                         doc='Processes a range of IDs.',
                         contact_info='Written by the optbind team.',
                         usage_examples=['prog -s 5 -end 10', 'prog -ParamFile params.txt'])
    text = parser.get_help_text()
    lines = text.splitlines()
    assert 'Processes a range of IDs.' in lines
    assert 'prog v1.2.3' in lines
    assert 'Examples:' in lines
    assert 'prog -s 5 -end 10' in lines
    assert lines[-1] == 'Written by the optbind team.'
    assert lines.index('Processes a range of IDs.') < lines.index('Usage: prog')


def test_show_long_keys():
    text = _get_parser(hide_long_keys=False).get_help_text()
    assert '-averyveryverylongkeyname' in text


def test_help_key(capsys):
    res = _get_parser().parse(['-?'])
    assert res.exit_requested
    assert not res.success
    assert res.errors == ()

    out, err = capsys.readouterr()
    assert 'Usage: prog' in out
    assert not err

    res = _get_parser().parse(['/HELP'])
    assert res.exit_requested


def test_no_args_prints_help(capsys):
    res = _get_parser().parse([])
    assert not res.success
    assert not res.exit_requested

    out, _ = capsys.readouterr()
    assert 'Usage: prog' in out


def test_error_prints_help(capsys):
    res = _get_parser().parse(['-s', 'abc'])
    assert not res.success

    out, err = capsys.readouterr()
    assert 'cannot cast "abc" to type "int"' in err
    assert 'Usage: prog' in out


def test_error_without_help(capsys):
    _get_parser().parse(['-s', 'abc'], on_error_help=False)
    out, err = capsys.readouterr()
    assert 'cannot cast' in err
    assert not out

    _get_parser().parse(['-s', 'abc'], on_error_help=False, output_errors=False)
    out, err = capsys.readouterr()
    assert not out
    assert not err


def test_update_help_text():
    class DocOptions(object):
        count = Option('count', parse_as=int, doc='Number of items')

    parser = Parser(DocOptions, desc_width=200)
    parser.update_help_text('count', find='items', replace='widgets')
    assert 'Number of widgets' in parser.get_help_text()

    parser.update_help_text('count', 'How many to make')
    assert 'How many to make' in parser.get_help_text()


def test_help_formatter_context():
    formatter = HelpFormatter(usage_label='USAGE:', help_doc='Print help')
    text = _get_parser(help_formatter=formatter).get_help_text()
    assert 'USAGE: prog' in text
    assert 'Print help' in text

    with pytest.raises(TypeError, match='unexpected keyword'):
        HelpFormatter(bogus=1)


def test_get_key_labels():
    assert get_key_labels(('start', 's'), '-') == ['-start', '-s']
    assert get_key_labels(('start', 'averylongkey'), '-', 8) == ['-start']
    assert get_key_labels(('averylongkey', 'anotherlongkey'), '/', 8) == ['/averylongkey']


def test_option_doc():
    opt = Option('count', parse_as=int, default=5, min=1, doc='How many')
    assert get_option_doc(opt, 5) == 'How many (Default:\a5, Min:\a1)'
    assert get_option_doc(Option('x', parse_as=int), None) == '(Default:\anull)'


def test_wrap_paragraph():
    lines = wrap_paragraph('one two three four\n  indented line here', 10)
    assert lines == ['one two', 'three four', '  indented', '  line', '  here']
    assert wrap_paragraph('keep\atogether now', 6) == ['keep together', 'now']
