import enum

import pytest

from optbind import (Option,
                     Parser,
                     parse_args,
                     preprocess,
                     build_registry,
                     get_options,
                     AmbiguousArgument,
                     UnknownArgument,
                     InvalidArgumentValue,
                     ArgumentOutOfRange,
                     MissingRequiredArgument)


class Color(enum.Enum):
    Red = 1
    Green = 2
    Blue = 3


class Perm(enum.Flag):
    Read = 1
    Write = 2
    Exec = 4


class ProgOptions(object):
    start = Option('start', 's', parse_as=int, required=True, doc='First ID to process')
    end = Option('end', 'e', parse_as=int, default=100, min=0, max=1000, doc='Last ID to process')
    ratio = Option('ratio', parse_as=float, default=0.5)
    name = Option('name', 'n', doc='Name of the run')
    verbose = Option('verbose', 'v', parse_as=bool, doc='Verbose output')
    color = Option('color', parse_as=Color, default=Color.Red)
    perms = Option('perms', parse_as=Perm, default=Perm.Read)
    tags = Option('tag', parse_as=[str], doc='Tags to apply')
    nums = Option('num', parse_as=[int], max=10)
    input_path = Option('input', 'i', position=1, is_input_path=True, doc='Input file path')
    output_path = Option('output', position=2, doc='Output file path')


def _parse(argv, target_type=ProgOptions, **kw):
    errs = []
    res = Parser(target_type).parse(argv, on_error_help=False, print_error=errs.append, **kw)
    return res, errs


def _get_reg(target_type=ProgOptions):
    return build_registry(get_options(target_type), target_type)


def test_arg_forms():
    res, errs = _parse(['-start', '5', '-end:50', '/name=bob', '--verbose', '-ratio', '1.5'])
    assert res.success, errs
    opts = res.options
    assert opts.start == 5
    assert opts.end == 50
    assert opts.name == 'bob'
    assert opts.verbose is True
    assert opts.ratio == 1.5
    assert res.errors == ()
    assert not res.exit_requested


def test_case_insensitive_keys():
    res, _ = _parse(['-START', '5', '-Name', 'x', '-S', '6'])
    assert res.success
    assert res.options.start == 6
    assert res.options.name == 'x'


def test_preprocess_case_normalization():
    reg = _get_reg()
    first = preprocess(['-START', '5', '-Verbose'], reg)
    second = preprocess(['-start', '5', '-verbose'], reg)
    assert list(first.items(multi=True)) == list(second.items(multi=True))
    assert first.getlist('start') == ['5']
    assert first.getlist('verbose') == ['']


def test_preprocess_positional():
    reg = _get_reg()
    arg_map = preprocess(['in.txt', '-s', '1', 'out.txt', 'extra.txt'], reg)
    assert arg_map.getlist('##1##') == ['in.txt']
    assert arg_map.getlist('##2##') == ['out.txt']
    assert '##3##' not in arg_map


def test_preprocess_from_file():
    reg = _get_reg()
    arg_map = preprocess(['-start = 5', '-name=a=b', '-tag:x'], reg, from_file=True)
    assert arg_map.getlist('start') == ['5']
    assert arg_map.getlist('name') == ['a=b']
    assert arg_map.getlist('tag') == ['x']


def test_negative_number_values():
    res, _ = _parse(['-start', '-5', '-ratio', '-0.25'])
    assert res.success
    assert res.options.start == -5
    assert res.options.ratio == -0.25


def test_numeric_key_not_a_value():
    class NumKeyOptions(object):
        value = Option('value', parse_as=int)
        one = Option('1', parse_as=bool)

    res, _ = _parse(['-value', '-1'], NumKeyOptions)
    assert not res.success
    assert res.options.one is True
    assert any([isinstance(e, InvalidArgumentValue) for e in res.errors])


def test_positional():
    res, _ = _parse(['-s', '1', 'in.txt', 'out.txt', 'ignored.txt'])
    assert res.success
    assert res.options.input_path == 'in.txt'
    assert res.options.output_path == 'out.txt'


def test_cli_last_wins():
    res, _ = _parse(['-s', '1', '-name', 'a', '-n', 'b', '-name', 'c'])
    assert res.success
    assert res.options.name == 'c'


def test_array_values():
    res, _ = _parse(['-s', '1', '-tag', 'a', '-tag', 'b', '-num', '3', '-num', '4'])
    assert res.success
    assert res.options.tags == ['a', 'b']
    assert res.options.nums == [3, 4]


def test_missing_required():
    res, errs = _parse(['-name', 'x'])
    assert not res.success
    assert len(res.errors) == 1
    err = res.errors[0]
    assert isinstance(err, MissingRequiredArgument)
    assert err.is_missing_required
    assert str(err) == 'Error: Required argument missing: -start'
    assert errs == [str(err)]
    # other options are still bound
    assert res.options.name == 'x'


def test_required_satisfied_by_preset():
    options = ProgOptions()
    options.start = 3
    res, _ = _parse(['-name', 'x'], options=options)
    assert res.success
    assert res.options is options
    assert options.start == 3


@pytest.mark.parametrize(
    "argv, message",
    [(['-end', '2000'], 'value of 2000 is greater than maximum of 1000'),
     (['-end', '-1'], 'value of -1 is less than minimum of 0'),
     (['-num', '5', '-num', '11'], 'value of 11 is greater than maximum of 10')])
def test_range_errors(argv, message):
    res, errs = _parse(['-s', '1'] + argv)
    assert not res.success
    assert isinstance(res.errors[0], ArgumentOutOfRange)
    assert message in errs[0]


def test_bad_bound():
    class BoundOptions(object):
        count = Option('count', parse_as=int, min=1.5)

    res, errs = _parse(['-count', '3'], BoundOptions)
    assert not res.success
    assert 'cannot cast min or max to type "int"' in errs[0]


def test_invalid_value():
    res, errs = _parse(['-s', 'abc', '-name', 'x'])
    assert not res.success
    assert len(res.errors) == 1
    assert isinstance(res.errors[0], InvalidArgumentValue)
    assert 'cannot cast "abc" to type "int"' in errs[0]
    assert res.options.start == 0
    assert res.options.name == 'x'


def test_infinity_not_an_int():
    class CountOptions(object):
        count = Option('count', parse_as=int)

    res, errs = _parse(["-count", "inf"], CountOptions)
    assert not res.success
    assert 'cannot cast "inf"' in errs[0]


def test_unknown_args_stop_binding():
    res, errs = _parse(['-s', '1', '-bogus', '3', '-other'])
    assert not res.success
    assert [type(e) for e in res.errors] == [UnknownArgument, UnknownArgument]
    assert errs[0] == 'Error: Unrecognized argument name: bogus'
    assert res.options.start == 0


@pytest.mark.parametrize(
    "text, expected",
    [('true', True), ('N', False), ('yes', True), ('0', False), ('2', True), ('False', False)])
def test_bool_values(text, expected):
    res, _ = _parse(['-s', '1', '-verbose', text])
    assert res.success
    assert res.options.verbose is expected


def test_bool_invalid():
    res, errs = _parse(['-s', '1', '-verbose:maybe'])
    assert not res.success
    assert 'cannot cast "maybe" to type "bool"' in errs[0]


@pytest.mark.parametrize(
    "argv, attr, expected",
    [(['-color', 'green'], 'color', Color.Green),
     (['-color', 'BLUE'], 'color', Color.Blue),
     (['-color', '3'], 'color', Color.Blue),
     (['-perms', 'read,write'], 'perms', Perm.Read | Perm.Write),
     (['-perms', 'Read|Exec'], 'perms', Perm.Read | Perm.Exec),
     (['-perms', '6'], 'perms', Perm.Write | Perm.Exec)])
def test_enum_values(argv, attr, expected):
    res, _ = _parse(['-s', '1'] + argv)
    assert res.success
    assert getattr(res.options, attr) == expected


@pytest.mark.parametrize("text, value", [('8', 8), ('13', 13)])
def test_flag_enum_undefined_bits(text, value):
    res, errs = _parse(['-s', '1', '-perms', text])
    assert res.success, errs
    assert isinstance(res.options.perms, Perm)
    assert res.options.perms.value == value


@pytest.mark.parametrize("text", ['7', 'purple', 'red,green'])
def test_enum_invalid(text):
    res, errs = _parse(['-s', '1', '-color', text])
    assert not res.success
    assert 'to type "Color"' in errs[0]


def test_null_sets_type_default():
    res, _ = _parse(['-s', '1', '-ratio', 'null', '-end', 'NULL'])
    assert res.success
    assert res.options.ratio == 0.0
    assert res.options.end == 0


def test_quoted_null_is_literal():
    res, _ = _parse(['-s', '1', '-name', '"null"', '-tag', "'NULL'"])
    assert res.success
    assert res.options.name == 'null'
    assert res.options.tags == ['NULL']


def test_quote_stripping():
    res, _ = _parse(['-s', '1', '-name', '"a b"', '-tag', "'x'", '-tag', '"y\''])
    assert res.success
    assert res.options.name == 'a b'
    assert res.options.tags == ['x', '"y\'']


def test_trailing_control_chars():
    res, _ = _parse(['', '  ', '-s', '7\r\n', '-name\t', 'x'])
    assert res.success
    assert res.options.start == 7
    assert res.options.name == 'x'


class LogOptions(object):
    log_path = Option('log', exists_flag='log_enabled', doc='Log file path')
    log_enabled = False
    level = Option('level', parse_as=int)


def test_exists_flag():
    res, _ = _parse(['-log'], LogOptions)
    assert res.success
    assert res.options.log_enabled is True
    assert res.options.log_path == ''

    res, _ = _parse(['-log', 'run.log'], LogOptions)
    assert res.options.log_enabled is True
    assert res.options.log_path == 'run.log'

    res, _ = _parse(['-level', '2'], LogOptions)
    assert res.options.log_enabled is False


class CaseOptions(object):
    lower = Option('ab', parse_as=int)
    upper = Option('AB', parse_as=int)


def test_case_sensitive_keys():
    res, _ = _parse(['-ab', '1', '-AB', '2'], CaseOptions)
    assert res.success
    assert res.options.lower == 1
    assert res.options.upper == 2

    res, errs = _parse(['-aB', '1'], CaseOptions)
    assert not res.success
    assert isinstance(res.errors[0], AmbiguousArgument)
    assert errs == ['Error: Arg aB does not match valid argument']

    with pytest.raises(AmbiguousArgument):
        preprocess(['-Ab', '3'], _get_reg(CaseOptions))


def test_rooted_paths():
    res, _ = _parse(['-s', '1', '/home/user/in.txt', '-name', '/opt/x/y'])
    assert res.success
    assert res.options.input_path == '/home/user/in.txt'
    assert res.options.name == '/opt/x/y'

    res, _ = _parse(['/s', '5', '/verbose'])
    assert res.success
    assert res.options.start == 5
    assert res.options.verbose is True


def test_rooted_path_ambiguity():
    # a single-segment path which does not exist yet looks like an argument
    res, errs = _parse(['-s', '1', '/optbind_missing_output_file'])
    assert not res.success
    assert errs == ['Error: Unrecognized argument name: optbind_missing_output_file']


def test_custom_param_chars():
    parser = Parser(ProgOptions, param_chars='-')
    res = parser.parse(['-s', '1', '/in.txt'], on_error_help=False)
    assert res.success
    assert res.options.input_path == '/in.txt'


def test_parse_args():
    res = parse_args(ProgOptions, ['-s', '9'], name='prog')
    assert res.success
    assert res.options.start == 9
    assert 'success=True' in repr(res)


def test_unexpected_error_reported_once():
    errs = []
    res = Parser(ProgOptions).parse(['-s', '1'], options=object(),
                                    on_error_help=False, print_error=errs.append)
    assert not res.success
    assert errs[:3] == ['Command line arguments:', '-s', '1']
    assert len([e for e in errs if e.startswith('Error in Parser.parse')]) == 1
    assert str(res.errors[0]).startswith('Error in Parser.parse: AttributeError')
