## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .types import Value, Literal, Var, ArrayRef, Call, Unary, Binary
from .operators import BINARY, UNARY, to_int
from .environment import Environment


class Evaluator:
    """Reduce expression trees to values against one environment and one set of functions."""

    def __init__(self, env: Environment, functions: dict, context=None):
        self.env = env
        self.functions = functions
        self.context = context

    def evaluate(self, expr) -> Value:
        match expr:
            case Literal(value):
                return value
            case Var(name):
                return self.env.get(name)
            case ArrayRef(name, indices):
                return self.env.array(name, len(indices)).get(self.subscripts(indices))
            case Call(name, args):
                return self.functions[name](self.context, [self.evaluate(a) for a in args])
            case Unary(op, operand):
                return UNARY[op](self.evaluate(operand))
            case Binary(op, left, right):
                return BINARY[op](self.evaluate(left), self.evaluate(right))
        raise TypeError(f"Unknown expression node {expr!r}.")

    def subscripts(self, indices) -> tuple:
        return tuple(to_int(self.evaluate(i)) for i in indices)

    def assign(self, target, value: Value) -> None:
        match target:
            case Var(name):
                self.env.set(name, value)
            case ArrayRef(name, indices):
                self.env.array(name, len(indices)).set(self.subscripts(indices), value)

    def kind_of(self, target):
        match target:
            case Var(name):
                return self.env.kind_of(name)
            case ArrayRef(name, indices):
                return self.env.array(name, len(indices)).kind
