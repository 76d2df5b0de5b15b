## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io

import pytest

from sixbasic.runtime import Runtime
from sixbasic.interpreter import State
from sixbasic.errors import BasicParseError, BasicTypeMismatch


def test_register_function_and_call_it():
    rt = Runtime(graphics=False, ansi=False)
    def twice(x: float) -> float: return x * 2
    rt.register_function('twice', twice)
    out = io.StringIO()
    rt.run('PRINT TWICE(21)', output=out)
    assert out.getvalue() == " 42 \n"
    assert rt.get_signature('TWICE')['min'] == 1


def test_registered_function_arity_is_checked_at_parse_time():
    rt = Runtime(graphics=False, ansi=False)
    rt.register_function('pair', lambda a, b: a)
    with pytest.raises(BasicParseError):
        rt.parse('PRINT PAIR(1)')


def test_registered_function_argument_types():
    rt = Runtime(graphics=False, ansi=False)
    def shout(text: str) -> str: return text.upper() + "!"
    rt.register_function('SHOUT$', shout)
    out = io.StringIO()
    rt.run('PRINT SHOUT$("hey")', output=out)
    assert out.getvalue() == "HEY!\n"
    with pytest.raises(BasicTypeMismatch):
        rt.run('PRINT SHOUT$(1)', output=io.StringIO())


def test_default_output_stream():
    out = io.StringIO()
    rt = Runtime(graphics=False, ansi=False, output=out)
    rt.run('PRINT "default"')
    assert out.getvalue() == "default\n"


def test_canvas_matches_terminal_cells():
    rt = Runtime(columns=40, rows=12, cell=(10, 20), graphics=False)
    interp = rt.create_interpreter(rt.parse('END'), output=io.StringIO())
    assert (interp.canvas.width, interp.canvas.height) == (400, 240)
    assert interp.canvas.tiles == (5, 4)


def test_inputs_are_consumed_in_order():
    rt = Runtime(graphics=False, ansi=False)
    source = 'INPUT A\nINPUT B\nPRINT A - B'
    out = io.StringIO()
    interp = rt.run(source, inputs=iter(["10", "4"]), output=out)
    assert out.getvalue().endswith(" 6 \n")
    assert interp.state is State.HALTED


def test_resize_follows_text_mode_only():
    rt = Runtime(columns=80, rows=25, graphics=False)
    interp = rt.create_interpreter(rt.parse('END'), output=io.StringIO())
    interp.resize(100, 30)
    assert (interp.canvas.width, interp.canvas.height) == (800, 480)
    interp.canvas.set_mode(13, (800, 480))
    interp.resize(40, 10)
    assert (interp.canvas.width, interp.canvas.height) == (320, 200)
    assert (interp.console.columns, interp.console.rows) == (40, 10)


def test_tile_sizes_are_checked_against_the_cell():
    with pytest.raises(ValueError):
        Runtime(cell=(8, 16), tile=(64, 6))
    assert Runtime(cell=(8, 16), tile=(32, 96)).tile == (32, 96)
