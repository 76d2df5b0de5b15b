## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re

from .types import Kind, Value, Literal, Var, ArrayRef, Call, Unary, Binary, Statement


def format_number(value: Value) -> str:
    """Render a number the way PRINT does, without the sign padding."""
    if value.kind.is_integral:
        return str(value.data)
    data = value.data if value.data != 0 else 0.0
    text = ('%.16g' if value.kind is Kind.DOUBLE else '%.7g') % data
    mantissa, _, exponent = text.partition('e')
    if exponent:
        text = f"{mantissa}{'D' if value.kind is Kind.DOUBLE else 'E'}{exponent[0]}{exponent[1:].zfill(2)}"
    if text.startswith('0.'): text = text[1:]
    if text.startswith('-0.'): text = '-' + text[2:]
    return text

def str_number(value: Value) -> str:
    """STR$ gives non-negative numbers a leading space where the sign would go."""
    text = format_number(value)
    return text if text.startswith('-') else ' ' + text

def print_number(value: Value) -> str:
    return str_number(value) + ' '


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*[mHJK]|\0337|\0338|\033P[^\033]*\033\\')
    return lambda text: write_fn(ansi_re.sub('', text))


def format_expression(expr) -> str:
    match expr:
        case Literal(value):
            return f'"{value.data}"' if value.kind is Kind.STRING else format_number(value)
        case Var(name):
            return name
        case ArrayRef(name, indices) | Call(name, indices) if indices:
            return f"{name}({', '.join(format_expression(i) for i in indices)})"
        case Call(name, _):
            return name
        case Unary(op, operand):
            return f"{op}{' ' if op.isalpha() else ''}{format_expression(operand)}"
        case Binary(op, left, right):
            return f"({format_expression(left)} {op} {format_expression(right)})"
    return '?'

def format_statement(stmt: Statement, width: int = 60) -> str:
    parts = []
    for key, arg in stmt.args.items():
        if arg is None or key in ('inline', 'until', 'question', 'newline'): continue
        if isinstance(arg, (Literal, Var, ArrayRef, Call, Unary, Binary)):
            parts.append(format_expression(arg))
        elif key in ('point', 'center', 'seed', 'start', 'end') and isinstance(arg, tuple):
            parts.append(f"({', '.join(format_expression(a) for a in arg)})")
        else:
            parts.append(str(arg))
    text = ' '.join([stmt.kind.replace('_', ' ')] + parts)
    return text if len(text) <= width else text[:width-2] + ' …'

def show_step(step: int, index: int, stmt: Statement, file=None) -> None:
    print(f"\033[90m{step:>3} :\033[0m  \033[36m{index:>4}\033[0m  {format_statement(stmt)}", file=file)
