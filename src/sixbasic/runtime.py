## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
import logging
from typing import Any, Callable, Iterable

from .types import Program
from .parser import Parser
from .linker import link_program
from .builtins import load_builtins, make_wrapper
from .console import Console
from .canvas import Canvas
from .sixel import DifferentialRenderer, default_tile, check_tile
from .interpreter import Interpreter, State


log = logging.getLogger(__name__)


class Runtime:
    """Minimal runtime facade focused on embedding and extension."""

    def __init__(self, columns: int = 80, rows: int = 25, cell: tuple[int, int] = (8, 16),
                 tile: tuple[int, int] | None = None, output=None, graphics: bool = True, ansi: bool = True,
                 seed=None, clock=None, sleep=None, verbosity: int = 0):
        self.functions = load_builtins()
        self.columns, self.rows = columns, rows
        self.cell = cell
        self.tile = check_tile(tile or default_tile(cell), cell)
        self.output = output
        self.graphics, self.ansi = graphics, ansi
        self.seed, self.clock, self.sleep = seed, clock, sleep
        self.verbosity = verbosity

    # Loading ─────────────────────────────────────────────────────────────────────────────────
    def parse(self, source: str, filename: str | None = None) -> Program:
        statements, labels = Parser(source, filename=filename, functions=self.functions).parse()
        return link_program(statements, labels, source=source, filename=filename)

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def create_interpreter(self, program: Program, output=None) -> Interpreter:
        stream = next((s for s in (output, self.output) if s is not None), sys.stdout)
        console = Console(stream, columns=self.columns, rows=self.rows, ansi=self.ansi)
        canvas = Canvas(self.columns * self.cell[0], self.rows * self.cell[1], *self.tile)
        renderer = DifferentialRenderer(canvas, stream, cell=self.cell, enabled=self.graphics)
        return Interpreter(program, console=console, canvas=canvas, renderer=renderer, functions=self.functions,
                           seed=self.seed, clock=self.clock, sleep=self.sleep, cell=self.cell, verbosity=self.verbosity)

    def run(self, source: str, filename: str | None = None, inputs: Iterable[str] = (),
            keys: Iterable[str] = (), output=None) -> Interpreter:
        """Run a program to completion, answering INPUT from `inputs` and INKEY$ from `keys`."""
        interp = self.create_interpreter(self.parse(source, filename), output=output)
        for key in keys:
            interp.feed_key(key)
        lines = iter(inputs)
        while interp.run() is State.AWAITING_INPUT:
            if (line := next(lines, None)) is None:
                log.info("No more input lines, stopping at statement %d.", interp.pc)
                interp.halt()
                break
            interp.resume(line)
        return interp

    # Registration ────────────────────────────────────────────────────────────────────────────
    def register_function(self, name: str, func: Callable[..., Any]) -> None:
        """Expose a Python function to BASIC programs, typed by its annotations."""
        self.functions[name.upper()] = make_wrapper(func, name.upper())

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def get_signature(self, name: str) -> dict:
        return self.functions[name.upper()].__basic_meta__

    def list_functions(self) -> dict[str, dict]:
        return {n: fn.__basic_meta__ for n, fn in self.functions.items()}
