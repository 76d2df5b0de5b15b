## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math

from .types import Kind, Value, number, boolean
from .errors import BasicTypeMismatch, BasicDivisionByZero, BasicIllegalFunctionCall, BasicOverflow


def _numeric(a: Value, b: Value, op: str) -> Kind:
    if a.kind is Kind.STRING or b.kind is Kind.STRING:
        raise BasicTypeMismatch(f"Type mismatch: `{op}` between {a.kind.name} and {b.kind.name}.")
    return max(a.kind, b.kind)

def _float_kind(a: Value, b: Value) -> Kind:
    return Kind.DOUBLE if Kind.DOUBLE in (a.kind, b.kind) else Kind.SINGLE

def _integer_kind(a: Value, b: Value) -> Kind:
    return Kind.LONG if Kind.LONG in (a.kind, b.kind) else Kind.INTEGER

def to_int(x: Value) -> int:
    if x.kind is Kind.STRING:
        raise BasicTypeMismatch("Type mismatch: expected a number, got a string.")
    return x.data if isinstance(x.data, int) else round(x.data)

def _logical(a: Value, b: Value, op: str, fn) -> Value:
    kind = _numeric(a, b, op)
    return number(Kind.LONG if kind is not Kind.INTEGER else Kind.INTEGER, fn(to_int(a), to_int(b)))


## ARITHMETIC
def op_add(a: Value, b: Value) -> Value:
    if a.kind is Kind.STRING and b.kind is Kind.STRING:
        return Value(Kind.STRING, a.data + b.data)
    return number(_numeric(a, b, '+'), a.data + b.data)

def op_sub(a: Value, b: Value) -> Value: return number(_numeric(a, b, '-'), a.data - b.data)
def op_mul(a: Value, b: Value) -> Value: return number(_numeric(a, b, '*'), a.data * b.data)

def op_div(a: Value, b: Value) -> Value:
    _numeric(a, b, '/')
    if b.data == 0:
        raise BasicDivisionByZero("Division by zero.")
    return number(_float_kind(a, b), a.data / b.data)

def op_idiv(a: Value, b: Value) -> Value:
    _numeric(a, b, '\\')
    x, y = to_int(a), to_int(b)
    if y == 0:
        raise BasicDivisionByZero("Division by zero.")
    quotient = abs(x) // abs(y)
    return number(_integer_kind(a, b), quotient if (x < 0) == (y < 0) else -quotient)

def op_mod(a: Value, b: Value) -> Value:
    _numeric(a, b, 'MOD')
    x, y = to_int(a), to_int(b)
    if y == 0:
        raise BasicDivisionByZero("Division by zero.")
    return number(_integer_kind(a, b), x % y)

def op_pow(a: Value, b: Value) -> Value:
    _numeric(a, b, '^')
    if a.data == 0 and b.data < 0:
        raise BasicDivisionByZero("Division by zero.")
    if a.data < 0 and b.data != int(b.data):
        raise BasicIllegalFunctionCall("Illegal function call: fractional power of a negative number.")
    try:
        return number(_float_kind(a, b), math.pow(a.data, b.data))
    except OverflowError:
        raise BasicOverflow("Overflow in `^`.") from None

def op_neg(x: Value) -> Value:
    if x.kind is Kind.STRING:
        raise BasicTypeMismatch("Type mismatch: cannot negate a string.")
    return number(x.kind, -x.data)

## COMPARISON
def _compare(a: Value, b: Value, op: str) -> int:
    if (a.kind is Kind.STRING) != (b.kind is Kind.STRING):
        raise BasicTypeMismatch(f"Type mismatch: `{op}` between {a.kind.name} and {b.kind.name}.")
    return (a.data > b.data) - (a.data < b.data)

def op_eq(a: Value, b: Value) -> Value: return boolean(_compare(a, b, '=') == 0)
def op_ne(a: Value, b: Value) -> Value: return boolean(_compare(a, b, '<>') != 0)
def op_lt(a: Value, b: Value) -> Value: return boolean(_compare(a, b, '<') < 0)
def op_gt(a: Value, b: Value) -> Value: return boolean(_compare(a, b, '>') > 0)
def op_le(a: Value, b: Value) -> Value: return boolean(_compare(a, b, '<=') <= 0)
def op_ge(a: Value, b: Value) -> Value: return boolean(_compare(a, b, '>=') >= 0)

## BITWISE LOGIC
def op_and(a: Value, b: Value) -> Value: return _logical(a, b, 'AND', lambda x, y: x & y)
def op_or(a: Value, b: Value) -> Value: return _logical(a, b, 'OR', lambda x, y: x | y)
def op_xor(a: Value, b: Value) -> Value: return _logical(a, b, 'XOR', lambda x, y: x ^ y)
def op_eqv(a: Value, b: Value) -> Value: return _logical(a, b, 'EQV', lambda x, y: ~(x ^ y))
def op_imp(a: Value, b: Value) -> Value: return _logical(a, b, 'IMP', lambda x, y: ~x | y)

def op_not(x: Value) -> Value:
    if x.kind is Kind.STRING:
        raise BasicTypeMismatch("Type mismatch: NOT of a string.")
    return number(Kind.INTEGER if x.kind is Kind.INTEGER else Kind.LONG, ~to_int(x))


ALIASES = {
    '+': 'add', '-': 'sub', '*': 'mul', '/': 'div', '\\': 'idiv', 'MOD': 'mod', '^': 'pow',
    '=': 'eq', '<>': 'ne', '<': 'lt', '>': 'gt', '<=': 'le', '>=': 'ge',
    'AND': 'and', 'OR': 'or', 'XOR': 'xor', 'EQV': 'eqv', 'IMP': 'imp',
}

BINARY = {symbol: globals()[f"op_{name}"] for symbol, name in ALIASES.items()}
UNARY = {'-': op_neg, 'NOT': op_not}
