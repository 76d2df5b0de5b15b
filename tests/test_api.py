## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io

import pytest

import sixbasic.api as B


def test_parse_and_run_string():
    out = io.StringIO()
    interp = B.Runtime(graphics=False, ansi=False).run('PRINT 2 + 3', output=out)
    assert out.getvalue() == " 5 \n"
    assert interp.state is B.State.HALTED


def test_module_level_parse_uses_default_runtime():
    program = B.parse('10 PRINT "x"\n20 GOTO 10')
    assert isinstance(program, B.Program)
    assert len(program) == 2
    assert dict(program.labels) == {10: 0, 20: 1}


def test_introspection_helpers():
    assert B.get_signature('mid$')['min'] == 2
    assert 'LEFT$' in B.list_functions()


def test_errors_are_exported():
    with pytest.raises(B.BasicParseError):
        B.parse('PRINT 1 +')
    assert issubclass(B.BasicDivisionByZero, B.BasicRuntimeError)
    assert issubclass(B.BasicDivisionByZero, ZeroDivisionError)
