## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io

from sixbasic.runtime import Runtime
from sixbasic.interpreter import State
from sixbasic.terminal import cell_size, supports_sixel, host_loop, DEFAULT_CELL


def test_cell_size_from_environment():
    assert cell_size({'SIXBASIC_CELL': '10x20'}) == (10, 20)
    assert cell_size({'SIXBASIC_CELL': 'huge'}) == DEFAULT_CELL
    assert cell_size({'SIXBASIC_CELL': '0x16'}) == DEFAULT_CELL
    assert cell_size({}) == DEFAULT_CELL


def test_sixel_detection_by_terminal_name():
    assert supports_sixel({'TERM': 'xterm-256color'})
    assert supports_sixel({'TERM': 'foot'})
    assert not supports_sixel({'TERM': 'linux'})
    assert not supports_sixel({})


def _interpreter(source: str):
    rt = Runtime(graphics=False, ansi=False)
    out = io.StringIO()
    return rt.create_interpreter(rt.parse(source), output=out), out


def test_host_loop_feeds_input_lines_and_echoes_them():
    interp, out = _interpreter('INPUT "N"; N: PRINT N * 3')
    assert host_loop(interp, stdin=io.StringIO("14\n")) is State.HALTED
    assert out.getvalue() == "N14\n 42 \n"


def test_host_loop_halts_at_end_of_input():
    interp, out = _interpreter('INPUT A\nPRINT "unreachable"')
    assert host_loop(interp, stdin=io.StringIO("")) is State.HALTED
    assert "unreachable" not in out.getvalue()


def test_host_loop_runs_long_programs_in_slices():
    interp, out = _interpreter('FOR I = 1 TO 1000: X = X + I: NEXT: PRINT X')
    host_loop(interp, stdin=io.StringIO(""))
    assert out.getvalue() == " 500500 \n"
    assert interp.steps > 1000
