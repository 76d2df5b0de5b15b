## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import random
import datetime
from types import SimpleNamespace

import pytest

from sixbasic.types import Kind, Value
from sixbasic.builtins import load_builtins, get_basic_name, make_wrapper, parse_val
from sixbasic.errors import BasicIllegalFunctionCall, BasicTypeMismatch


FUNCTIONS = load_builtins()

def call(name, *args, ctx=None):
    values = [a if isinstance(a, Value) else
              Value(Kind.STRING, a) if isinstance(a, str) else
              Value(Kind.INTEGER, a) if isinstance(a, int) else Value(Kind.SINGLE, a) for a in args]
    return FUNCTIONS[name](ctx, values)


def test_basic_names_from_python_names():
    assert get_basic_name('fn_left_s') == 'LEFT$'
    assert get_basic_name('fn_abs') == 'ABS'
    with pytest.raises(ValueError):
        get_basic_name('left')


def test_int_floors_and_fix_truncates():
    assert call('INT', -3.7) == Value(Kind.SINGLE, -4.0)
    assert call('INT', 3.7) == Value(Kind.SINGLE, 3.0)
    assert call('FIX', -3.7) == Value(Kind.SINGLE, -3.0)
    assert call('INT', 5) == Value(Kind.INTEGER, 5)


def test_mid_edge_cases():
    assert call('MID$', "HELLO", 2, 3).data == "ELL"
    assert call('MID$', "HELLO", 4).data == "LO"
    assert call('MID$', "HELLO", 9, 2).data == ""
    assert call('MID$', "HELLO", 1, 0).data == ""
    assert call('MID$', "HELLO", 3, 99).data == "LLO"
    with pytest.raises(BasicIllegalFunctionCall):
        call('MID$', "HELLO", 0, 1)


def test_left_right_beyond_length():
    assert call('LEFT$', "ABC", 5).data == "ABC"
    assert call('RIGHT$', "ABC", 2).data == "BC"
    assert call('RIGHT$', "ABC", 9).data == "ABC"


def test_val_takes_the_numeric_prefix():
    assert call('VAL', "12abc").data == 12
    assert call('VAL', "abc").data == 0
    assert call('VAL', "3.14").data == pytest.approx(3.14)
    assert call('VAL', "  -2.5E2x").data == -250
    assert parse_val("1D2") == 100


def test_str_has_leading_space_for_positive_numbers():
    assert call('STR$', 42).data == " 42"
    assert call('STR$', -7).data == "-7"
    assert call('STR$', 0.5).data == " .5"


@pytest.mark.parametrize("n", [0, 42, -17, 3.25, -0.5, 1234567])
def test_val_of_str_round_trips(n):
    assert call('VAL', call('STR$', n)).data == pytest.approx(n)


def test_instr_with_and_without_start():
    assert call('INSTR', "HELLO", "L").data == 3
    assert call('INSTR', 4, "HELLO", "L").data == 4
    assert call('INSTR', "HELLO", "Z").data == 0
    assert call('INSTR', 9, "HELLO", "L").data == 0


def test_character_functions():
    assert call('CHR$', 65).data == "A"
    assert call('ASC', "a").data == 97
    assert call('STRING$', 3, "xy").data == "xxx"
    assert call('STRING$', 2, 42).data == "**"
    assert call('UCASE$', "mixed").data == "MIXED"
    assert call('LTRIM$', "  a ").data == "a "
    with pytest.raises(BasicIllegalFunctionCall):
        call('CHR$', 300)


def test_math_domain_errors_are_illegal_function_calls():
    with pytest.raises(BasicIllegalFunctionCall):
        call('SQR', -1.0)
    with pytest.raises(BasicIllegalFunctionCall):
        call('LOG', 0)


def test_arguments_are_type_checked():
    with pytest.raises(BasicTypeMismatch):
        call('LEN', 5)
    with pytest.raises(BasicTypeMismatch):
        call('SQR', "4")


def test_signature_metadata():
    assert (FUNCTIONS['MID$'].__basic_meta__['min'], FUNCTIONS['MID$'].__basic_meta__['max']) == (2, 3)
    assert (FUNCTIONS['RND'].__basic_meta__['min'], FUNCTIONS['RND'].__basic_meta__['max']) == (0, 1)
    assert FUNCTIONS['LEN'].__basic_meta__['returns'] is int


def test_rnd_repeats_last_value_for_zero():
    ctx = SimpleNamespace(rng=random.Random(5), last_random=0.0)
    first = call('RND', ctx=ctx).data
    assert 0 <= first < 1
    assert call('RND', 0, ctx=ctx).data == first
    assert call('RND', ctx=ctx).data != first


def test_clock_functions_use_the_context():
    now = datetime.datetime(2026, 3, 4, 5, 6, 7)
    ctx = SimpleNamespace(now=lambda: now, timer=lambda: 18367.0)
    assert call('DATE$', ctx=ctx).data == "03-04-2026"
    assert call('TIME$', ctx=ctx).data == "05:06:07"
    assert call('TIMER', ctx=ctx).data == 18367.0


def test_make_wrapper_from_annotations():
    def clamp(x: float, lo: float, hi: float) -> float: return max(lo, min(hi, x))
    wrapped = make_wrapper(clamp, 'CLAMP')
    assert wrapped(None, [Value(Kind.INTEGER, 12), Value(Kind.INTEGER, 0), Value(Kind.DOUBLE, 10.0)]) == Value(Kind.DOUBLE, 10.0)
    assert wrapped.__basic_meta__['min'] == 3
