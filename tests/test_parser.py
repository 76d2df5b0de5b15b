## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from sixbasic import parser
from sixbasic.types import Kind, Value, Literal, Var, ArrayRef, Call, Unary, Binary
from sixbasic.builtins import load_builtins
from sixbasic.errors import BasicParseError, BasicOverflow


FUNCTIONS = load_builtins()

def _parse(source: str):
    statements, labels = parser.parse(source, filename="<test>", functions=FUNCTIONS)
    return statements, labels

def _kinds(source: str) -> list[str]:
    return [s.kind for s in _parse(source)[0]]

def _expr(source: str):
    [stmt], _ = _parse(f"X = {source}")
    return stmt.args['expr']

def _int(n): return Literal(Value(Kind.INTEGER, n))


def test_parse_number_kinds():
    assert parser.parse_number("12") == Value(Kind.INTEGER, 12)
    assert parser.parse_number("40000") == Value(Kind.LONG, 40000)
    assert parser.parse_number("3.5") == Value(Kind.SINGLE, 3.5)
    assert parser.parse_number("3.5#") == Value(Kind.DOUBLE, 3.5)
    assert parser.parse_number("1D3") == Value(Kind.DOUBLE, 1000.0)
    assert parser.parse_number("1E3") == Value(Kind.SINGLE, 1000.0)
    assert parser.parse_number("5%") == Value(Kind.INTEGER, 5)
    assert parser.parse_number("12345678.9").kind is Kind.DOUBLE


def test_parse_number_overflowing_suffix():
    with pytest.raises(BasicOverflow):
        parser.parse_number("70000%")
    with pytest.raises(BasicParseError):
        _parse("X = 70000%")


def test_multiplication_binds_tighter_than_addition():
    assert _expr("1 + 2 * 3") == Binary('+', _int(1), Binary('*', _int(2), _int(3)))


def test_power_is_right_associative():
    assert _expr("2 ^ 3 ^ 2") == Binary('^', _int(2), Binary('^', _int(3), _int(2)))


def test_unary_minus_applies_after_power():
    assert _expr("-2 ^ 2") == Unary('-', Binary('^', _int(2), _int(2)))
    assert _expr("2 ^ -1") == Binary('^', _int(2), Unary('-', _int(1)))


def test_not_is_below_comparison():
    assert _expr("NOT A = B") == Unary('NOT', Binary('=', Var('A'), Var('B')))


def test_logical_operator_precedence():
    assert _expr("A OR B AND C") == Binary('OR', Var('A'), Binary('AND', Var('B'), Var('C')))


def test_calls_and_array_references():
    assert _expr("LEN(A$) + B(1, 2)") == Binary('+', Call('LEN', (Var('A$'),)), ArrayRef('B', (_int(1), _int(2))))
    assert _expr("RND") == Call('RND', ())


def test_wrong_argument_count_is_a_parse_error():
    with pytest.raises(BasicParseError) as exc:
        _parse('X = MID$("A")')
    assert "MID$" in str(exc.value)
    with pytest.raises(BasicParseError):
        _parse('X = LEN("A", 2)')


def test_missing_operand_is_a_parse_error():
    with pytest.raises(BasicParseError) as exc:
        _parse("PRINT 1 +")
    assert exc.value.line == 1


def test_labels_map_to_next_statement():
    statements, labels = _parse("10 PRINT 1\nstart: PRINT 2: PRINT 3\n20 END")
    assert labels == {10: 0, 'START': 1, 20: 3}
    assert statements[2].label == 'START'


def test_duplicate_label_is_rejected():
    with pytest.raises(BasicParseError):
        _parse("10 PRINT 1\n10 PRINT 2")


def test_single_line_if_is_closed_by_synthesized_endif():
    assert _kinds("IF X THEN PRINT 1: PRINT 2 ELSE PRINT 3") == ['IF', 'PRINT', 'PRINT', 'ELSE', 'PRINT', 'ENDIF']


def test_if_then_line_number_is_a_goto():
    statements, _ = _parse("IF X THEN 100 ELSE 200\n100 END\n200 END")
    assert [s.kind for s in statements[:5]] == ['IF', 'GOTO', 'ELSE', 'GOTO', 'ENDIF']
    assert statements[1].args['target'] == 100 and statements[3].args['target'] == 200


def test_block_if_and_end_if_spelling():
    assert _kinds("IF X THEN\nPRINT 1\nELSEIF Y THEN\nELSE\nEND IF\nIF Z THEN\nENDIF") == \
        ['IF', 'PRINT', 'ELSEIF', 'ELSE', 'ENDIF', 'IF', 'ENDIF']


def test_next_with_several_counters_expands():
    statements, _ = _parse("NEXT J, I")
    assert [(s.kind, s.args['var']) for s in statements] == [('NEXT', 'J'), ('NEXT', 'I')]


def test_print_items_and_trailing_separator():
    [stmt], _ = _parse('PRINT "A"; B, TAB(5); SPC(2);')
    assert [kind for kind, _ in stmt.args['items']] == ['expr', 'semi', 'expr', 'comma', 'tab', 'semi', 'spc', 'semi']
    assert stmt.args['newline'] is False


def test_input_prompt_separators():
    [a, b, c], _ = _parse('INPUT "Name"; N$\nINPUT "Age", A\nINPUT X, Y')
    assert (a.args['prompt'], a.args['question']) == ("Name", False)
    assert (b.args['prompt'], b.args['question']) == ("Age", True)
    assert (c.args['prompt'], c.args['question']) == (None, True)
    assert c.args['targets'] == (Var('X'), Var('Y'))


def test_line_input():
    [stmt], _ = _parse('LINE INPUT "> "; L$')
    assert stmt.kind == 'LINE_INPUT' and stmt.args['target'] == Var('L$')


def test_data_items_keep_literal_text():
    [stmt], _ = _parse('DATA 1, "two", three four, -2.5,')
    assert stmt.args['values'] == (Value(Kind.INTEGER, 1), Value(Kind.STRING, "two"),
                                   Value(Kind.STRING, "three four"), Value(Kind.SINGLE, -2.5), Value(Kind.STRING, ""))


def test_dim_with_types():
    [stmt], _ = _parse("DIM A(10), N AS INTEGER, G(2, 3) AS DOUBLE")
    assert [(name, kind) for name, _, kind in stmt.args['decls']] == [('A', None), ('N', Kind.INTEGER), ('G', Kind.DOUBLE)]
    assert stmt.args['decls'][2][1] == (_int(2), _int(3))


def test_dim_suffix_conflict():
    with pytest.raises(BasicParseError):
        _parse("DIM A$ AS INTEGER")


def test_line_variants():
    [full, box, rel], _ = _parse("LINE (0, 0)-(10, 10), 4, BF\nLINE (1, 1)-(9, 9), , B\nLINE -(5, 5)")
    assert (full.args['box'], full.args['color']) == ('BF', _int(4))
    assert (box.args['box'], box.args['color']) == ('B', None)
    assert rel.args['start'] is None and rel.args['box'] is None


def test_circle_optional_arguments():
    [stmt], _ = _parse("CIRCLE (50, 50), 20, , , , 0.5")
    assert stmt.args['color'] is None and stmt.args['start'] is None and stmt.args['end'] is None
    assert stmt.args['aspect'] == Literal(Value(Kind.SINGLE, 0.5))


def test_bezier_takes_three_points():
    [stmt], _ = _parse("BEZIER (0, 0)-(10, 20)-(20, 0), 4, 3")
    assert len(stmt.args['points']) == 3
    assert stmt.args['thickness'] == _int(3)


def test_sound_takes_frequency_and_duration():
    [stmt], _ = _parse("SOUND 440, 18")
    assert stmt.kind == 'SOUND'
    assert (stmt.args['frequency'], stmt.args['duration']) == (_int(440), _int(18))
    with pytest.raises(BasicParseError):
        _parse("SOUND 440")


def test_unknown_statement_start():
    with pytest.raises(BasicParseError) as exc:
        _parse("THEN 10")
    assert exc.value.token == "THEN"


def test_format_parse_error_context_highlights_token():
    text = parser.format_parse_error_context("<test>", 2, 7, "FOO", source="PRINT 1\nPRINT FOO\nPRINT 3\n")
    assert 'File "<test>", line 2' in text
    assert "FOO" in text and "    2 |" in text
