## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import math
import inspect
from typing import Any, Callable

from .types import Kind, Value, number, boolean, coerce
from .errors import BasicError, BasicTypeMismatch, BasicIllegalFunctionCall, BasicOverflow
from .operators import to_int
from .formatting import str_number


_VAL_PREFIX = re.compile(r'\s*[+-]?(\d+\.?\d*|\.\d+)([ed][+-]?\d+)?', re.IGNORECASE)


def _numeric(x: Value) -> Value:
    if x.kind is Kind.STRING:
        raise BasicTypeMismatch("Type mismatch: expected a number, got a string.")
    return x

def _string(x: Value) -> str:
    if x.kind is not Kind.STRING:
        raise BasicTypeMismatch("Type mismatch: expected a string, got a number.")
    return x.data

def _count(n: int, what: str) -> int:
    if n < 0:
        raise BasicIllegalFunctionCall(f"Illegal function call: negative {what}.")
    return n

def parse_val(text: str) -> float:
    """Longest numeric prefix of `text`, or 0 if there is none."""
    if (match := _VAL_PREFIX.match(text)) is None:
        return 0.0
    return float(match.group(0).strip().lower().replace('d', 'e'))


## ARITHMETIC
def fn_abs(x: Value) -> Value: return number(_numeric(x).kind, abs(x.data))
def fn_int(x: Value) -> Value: return number(_numeric(x).kind, math.floor(x.data))
def fn_fix(x: Value) -> Value: return number(_numeric(x).kind, math.trunc(x.data))
def fn_sgn(x: float) -> int: return (x > 0) - (x < 0)
def fn_sqr(x: float) -> float: return math.sqrt(x)
def fn_sin(x: float) -> float: return math.sin(x)
def fn_cos(x: float) -> float: return math.cos(x)
def fn_tan(x: float) -> float: return math.tan(x)
def fn_atn(x: float) -> float: return math.atan(x)
def fn_log(x: float) -> float: return math.log(x)
def fn_exp(x: float) -> float: return math.exp(x)
## CONVERSION
def fn_cint(x: float) -> Value: return coerce(Value(Kind.DOUBLE, x), Kind.INTEGER)
def fn_clng(x: float) -> Value: return coerce(Value(Kind.DOUBLE, x), Kind.LONG)
def fn_csng(x: float) -> Value: return number(Kind.SINGLE, x)
def fn_cdbl(x: float) -> Value: return number(Kind.DOUBLE, x)
def fn_str_s(x: Value) -> str: return str_number(_numeric(x))
def fn_val(s: str) -> Value: return Value(Kind.DOUBLE, parse_val(s))
def fn_asc(s: str) -> int:
    if not s:
        raise BasicIllegalFunctionCall("Illegal function call: ASC of an empty string.")
    return ord(s[0])
def fn_chr_s(n: int) -> str:
    if not 0 <= n <= 255:
        raise BasicIllegalFunctionCall(f"Illegal function call: CHR$({n}).")
    return chr(n)
## STRINGS
def fn_len(s: str) -> int: return len(s)
def fn_left_s(s: str, n: int) -> str: return s[:_count(n, 'length')]
def fn_right_s(s: str, n: int) -> str: return s[len(s) - min(_count(n, 'length'), len(s)):]
def fn_ucase_s(s: str) -> str: return s.upper()
def fn_lcase_s(s: str) -> str: return s.lower()
def fn_ltrim_s(s: str) -> str: return s.lstrip(' ')
def fn_rtrim_s(s: str) -> str: return s.rstrip(' ')
def fn_space_s(n: int) -> str: return ' ' * _count(n, 'length')

def fn_mid_s(s: str, start: int, length: int = None) -> str:
    if start < 1:
        raise BasicIllegalFunctionCall(f"Illegal function call: MID$ start {start}.")
    if length is None:
        return s[start-1:]
    return s[start-1:start-1+_count(length, 'length')]

def fn_string_s(n: int, fill: Value) -> str:
    if fill.kind is Kind.STRING:
        if not fill.data:
            raise BasicIllegalFunctionCall("Illegal function call: STRING$ of an empty string.")
        return fill.data[0] * _count(n, 'count')
    return fn_chr_s(to_int(fill)) * _count(n, 'count')

def fn_instr(first: Value, second: Value, third: Value = None) -> int:
    start, text, pattern = (1, first, second) if third is None else (to_int(_numeric(first)), second, third)
    text, pattern = _string(text), _string(pattern)
    if start < 1:
        raise BasicIllegalFunctionCall(f"Illegal function call: INSTR start {start}.")
    if start > len(text):
        return 0
    return text.find(pattern, start - 1) + 1
## RANDOM & TIME
def fn_rnd(ctx, n: float = 1.0) -> float:
    if n == 0:
        return ctx.last_random
    if n < 0:
        ctx.rng.seed(n)
    ctx.last_random = ctx.rng.random()
    return ctx.last_random

def fn_timer(ctx) -> float: return ctx.timer()
def fn_date_s(ctx) -> str: return ctx.now().strftime('%m-%d-%Y')
def fn_time_s(ctx) -> str: return ctx.now().strftime('%H:%M:%S')
## CONSOLE & SCREEN
def fn_inkey_s(ctx) -> str: return ctx.inkey()
def fn_pos(ctx, _: Value = None) -> int: return ctx.console.col
def fn_csrlin(ctx) -> int: return ctx.console.row
def fn_point(ctx, x: int, y: int) -> int: return ctx.canvas.point(x, y)
def fn_screenwidth(ctx) -> int: return ctx.canvas.width
def fn_screenheight(ctx) -> int: return ctx.canvas.height


def get_basic_name(py_name: str) -> str:
    if not py_name.startswith("fn_"):
        raise ValueError(f"Built-in function `{py_name}` requires prefix `fn_` by convention.")
    name = py_name[3:]
    return (name[:-2] + '$' if name.endswith('_s') else name).upper()


def _unwrap(arg: Value, expected: Any, name: str, position: int):
    if expected is Value:
        return arg
    if expected is str:
        if arg.kind is not Kind.STRING:
            raise BasicTypeMismatch(f"Type mismatch: `{name}` expects a string at argument {position}.")
        return arg.data
    if arg.kind is Kind.STRING:
        raise BasicTypeMismatch(f"Type mismatch: `{name}` expects a number at argument {position}.")
    return to_int(arg) if expected is int else float(arg.data)

def _wrap(result, returns: Any, args: list[Value]) -> Value:
    if returns is str: return Value(Kind.STRING, result)
    if returns is int: return number(Kind.INTEGER, result)
    if returns is float: return number(Kind.DOUBLE if any(a.kind is Kind.DOUBLE for a in args) else Kind.SINGLE, result)
    match result:
        case Value(): return result
        case str(): return Value(Kind.STRING, result)
        case bool(): return boolean(result)
        case int(): return number(Kind.INTEGER, result)
    return number(Kind.SINGLE, result)


def make_wrapper(fn: Callable[..., Any], name: str) -> Callable[..., Value]:
    """Adapt a Python function into a BASIC built-in, driven by its signature annotations."""
    sig = inspect.signature(fn)
    params = list(sig.parameters.values())
    needs_context = bool(params) and params[0].name == 'ctx'
    if needs_context:
        params = params[1:]
    inputs = [p.annotation for p in params]
    returns = sig.return_annotation

    def wrapper(ctx, args: list[Value]) -> Value:
        values = [_unwrap(arg, tp, name, i+1) for i, (arg, tp) in enumerate(zip(args, inputs))]
        try:
            result = fn(ctx, *values) if needs_context else fn(*values)
        except BasicError:
            raise
        except (ValueError, ZeroDivisionError) as exc:
            raise BasicIllegalFunctionCall(f"Illegal function call in `{name}`: {exc}.") from None
        except OverflowError:
            raise BasicOverflow(f"Overflow in `{name}`.") from None
        return _wrap(result, returns, args)

    wrapper.__name__ = fn.__name__
    wrapper.__basic_meta__ = {
        'name': name,
        'min': sum(1 for p in params if p.default is inspect.Parameter.empty),
        'max': len(params),
        'inputs': inputs,
        'returns': returns,
    }
    return wrapper


def load_builtins() -> dict[str, Callable[..., Value]]:
    functions = {}
    for k, fn in sorted(globals().items()):
        if not k.startswith('fn_'): continue
        name = get_basic_name(k)
        functions[name] = make_wrapper(fn, name)
    return functions
