## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import time
import contextlib
import random
import logging
import datetime
import itertools
from enum import Enum
from collections import deque

from .types import Kind, Value, Program, Statement, GosubFrame, ForFrame, default_value
from .errors import (BasicError, BasicRuntimeError, BasicZeroStepForLoop, BasicNextWithoutFor, BasicReturnWithoutGosub,
                     BasicOutOfData, BasicTypeMismatch)
from .operators import op_add, to_int
from .builtins import load_builtins, parse_val
from .environment import Environment
from .evaluator import Evaluator
from .formatting import print_number, format_number, show_step
from .console import Console
from .canvas import Canvas


log = logging.getLogger(__name__)

# SOUND durations count PC timer ticks; there is no audio output.
TICKS_PER_SECOND = 18.2


class State(Enum):
    RUNNING = 1
    AWAITING_INPUT = 2
    HALTED = 3


class Interpreter:
    """Statement executor for one linked program; the host drives it with `run`, `resume` and `feed_key`."""

    def __init__(self, program: Program, *, console: Console, canvas: Canvas, renderer=None,
                 functions: dict | None = None, env: Environment | None = None, seed=None,
                 clock=None, sleep=None, cell: tuple[int, int] = (8, 16), verbosity: int = 0):
        self.program = program
        self.console, self.canvas, self.renderer = console, canvas, renderer
        self.env = env if env is not None else Environment()
        self.functions = functions if functions is not None else load_builtins()
        self.evaluator = Evaluator(self.env, self.functions, context=self)
        self.rng = random.Random(seed)
        self.last_random = 0.0
        self.clock = clock or datetime.datetime.now
        self.sleep = sleep or time.sleep
        self.cell = cell
        self.verbosity = verbosity

        self.pc = 0
        self.frames: list[GosubFrame | ForFrame] = []
        self.keys: deque[str] = deque()
        self.data_pointer = 0
        self.awaiting: Statement | None = None
        self.break_requested = False
        self.state = State.RUNNING
        self.steps = 0

    # Host interface ──────────────────────────────────────────────────────────────────────────
    def run(self, steps: int | None = None) -> State:
        """Execute until halted, awaiting input, or `steps` statements have run."""
        budget = itertools.repeat(None) if steps is None else range(steps)
        for _ in budget:
            if self.state is not State.RUNNING: break
            self.step()
        return self.state

    def step(self) -> None:
        if self.break_requested or self.pc >= len(self.program):
            return self.halt()
        stmt = self.program.statements[self.pc]
        if self.verbosity > 1:
            show_step(self.steps, self.pc, stmt)
        self.steps += 1
        with self._reporting(stmt):
            self.execute(stmt)

    def resume(self, line: str, echo: bool = True) -> State:
        """Deliver a typed line to the pending INPUT; the host calls `run` again to continue."""
        if self.state is not State.AWAITING_INPUT:
            raise BasicRuntimeError("Interpreter is not waiting for input.")
        stmt, self.awaiting = self.awaiting, None
        if echo:
            self.console.write(line)
        self.console.newline(write=echo)
        self.state = State.RUNNING
        with self._reporting(stmt):
            self._assign_input(stmt, line)
        return self.state

    def feed_key(self, key: str) -> None:
        self.keys.append(key)

    def request_break(self) -> None:
        self.break_requested = True

    def halt(self) -> None:
        if self.state is not State.HALTED:
            log.debug("Halted after %d step(s) at statement %d.", self.steps, self.pc)
        self.state = State.HALTED
        self.flush()

    def flush(self) -> None:
        if self.renderer is not None:
            self.renderer.flush()
        self.console.flush()

    def resize(self, columns: int, rows: int) -> None:
        self.console.resize(columns, rows)
        if self.canvas.mode == 0:
            self.canvas.resize(columns * self.cell[0], rows * self.cell[1])

    # Context for built-ins ───────────────────────────────────────────────────────────────────
    def now(self) -> datetime.datetime:
        return self.clock()

    def timer(self) -> float:
        self.flush()
        now = self.clock()
        return (now.hour * 3600 + now.minute * 60 + now.second + now.microsecond / 1e6) % 86400

    def inkey(self) -> str:
        self.flush()
        return self.keys.popleft() if self.keys else ""

    # Execution ───────────────────────────────────────────────────────────────────────────────
    @contextlib.contextmanager
    def _reporting(self, stmt: Statement):
        """Attach the failing statement to any BASIC error and stop the program."""
        try:
            yield
        except BasicError as exc:
            exc.statement = stmt
            exc.line, exc.column, exc.label = stmt.line, stmt.column, stmt.label
            log.debug("Error at statement %d: %s", self.pc - 1, exc)
            self.halt()
            raise

    def evaluate(self, expr) -> Value:
        return self.evaluator.evaluate(expr)

    def _int(self, expr, default=None):
        return default if expr is None else to_int(self.evaluate(expr))

    def _float(self, expr, default=None):
        if expr is None: return default
        if (value := self.evaluate(expr)).kind is Kind.STRING:
            raise BasicTypeMismatch("Type mismatch: expected a number, got a string.")
        return float(value.data)

    def _point(self, point) -> tuple[int, int]:
        return self._int(point[0]), self._int(point[1])

    def execute(self, stmt: Statement) -> None:
        args = stmt.args
        self.pc += 1
        match stmt.kind:
            case 'LET':
                self.evaluator.assign(args['target'], self.evaluate(args['expr']))
            case 'PRINT':
                self._print(args)
            case 'INPUT' | 'LINE_INPUT':
                self._request_input(stmt)
            case 'IF':
                if not self.evaluate(args['cond']).truthy:
                    self._enter_next_clause(stmt)
            case 'ELSEIF' | 'ELSE':
                self.pc = stmt.link + 1
            case 'ENDIF' | 'DATA':
                pass
            case 'FOR':
                self._for(stmt)
            case 'NEXT':
                self._next(stmt)
            case 'WHILE':
                if not self.evaluate(args['cond']).truthy:
                    self.pc = stmt.jump + 1
            case 'WEND':
                self.pc = stmt.link
            case 'DO':
                if args['cond'] is not None and not self._loop_test(args):
                    self.pc = stmt.jump + 1
            case 'LOOP':
                if args['cond'] is None or self._loop_test(args):
                    self.pc = stmt.link
            case 'EXIT_FOR':
                self._drop_for_frame(stmt.link, inclusive=True)
                self.pc = stmt.jump
            case 'EXIT_DO':
                self.pc = stmt.jump
            case 'GOTO':
                self.pc = stmt.jump
            case 'GOSUB':
                self.frames.append(GosubFrame(self.pc))
                self.pc = stmt.jump
            case 'RETURN':
                self._return()
            case 'DIM':
                for name, extents, kind in args['decls']:
                    if extents is None and kind is not None:
                        self.env.declare(name, kind)
                    elif extents is not None:
                        self.env.dim(name, tuple(self._int(e) for e in extents), kind)
            case 'SWAP':
                self._swap(args)
            case 'READ':
                self._read(args)
            case 'RESTORE':
                self.data_pointer = stmt.jump
            case 'RANDOMIZE':
                seed = self.evaluate(args['seed']).data if args['seed'] is not None else self.timer()
                self.rng.seed(seed)
            case 'SLEEP':
                self.flush()
                if (seconds := self._float(args['seconds'], 0.0)) > 0:
                    self.sleep(seconds)
            case 'BEEP':
                self.console.bell()
            case 'SOUND':
                self._float(args['frequency'])
                self.flush()
                if (ticks := self._float(args['duration'])) > 0:
                    self.sleep(ticks / TICKS_PER_SECOND)
            case 'END' | 'STOP':
                self.halt()
            case 'CLS':
                self.console.cls()
                self.canvas.clear()
                self.flush()
            case 'SCREEN':
                self.console.cls()
                self.canvas.set_mode(self._int(args['mode']), (self.console.columns * self.cell[0], self.console.rows * self.cell[1]))
                self.flush()
            case 'COLOR':
                fg, bg = self._int(args['fg']), self._int(args['bg'])
                self.console.set_color(fg, bg)
                if fg is not None: self.canvas.foreground = fg & 0x0F
                if bg is not None: self.canvas.background = bg & 0x0F
            case 'LOCATE':
                self.console.locate(self._int(args['row']), self._int(args['col']))
            case 'PSET':
                self.canvas.pset(*self._point(args['point']), self._int(args['color']))
            case 'PRESET':
                self.canvas.pset(*self._point(args['point']), self._int(args['color'], self.canvas.background))
            case 'LINE':
                self._line(args)
            case 'CIRCLE':
                self.canvas.circle(*self._point(args['center']), self._int(args['radius']), self._int(args['color']),
                                   self._float(args['start']), self._float(args['end']), self._float(args['aspect']))
            case 'PAINT':
                self.canvas.paint(*self._point(args['seed']), self._int(args['color']), self._int(args['border']))
            case 'BEZIER':
                self.canvas.bezier(*(self._point(p) for p in args['points']), color=self._int(args['color']),
                                   thickness=self._int(args['thickness'], 1))
            case _:
                raise NotImplementedError(stmt.kind)

    def _enter_next_clause(self, stmt: Statement) -> None:
        index = stmt.jump
        while (clause := self.program.statements[index]).kind == 'ELSEIF':
            if self.evaluate(clause.args['cond']).truthy: break
            index = clause.jump
        self.pc = index + 1

    def _return(self) -> None:
        """Pop back to the innermost GOSUB, dropping FOR loops left open inside the subroutine."""
        while self.frames and isinstance(self.frames[-1], ForFrame):
            self.frames.pop()
        if not self.frames:
            raise BasicReturnWithoutGosub("RETURN without GOSUB.")
        self.pc = self.frames.pop().return_index

    def _loop_test(self, args: dict) -> bool:
        return self.evaluate(args['cond']).truthy != args['until']

    # FOR loops ───────────────────────────────────────────────────────────────────────────────
    @staticmethod
    def _continues(value: Value, limit: Value, step: Value) -> bool:
        return value.data <= limit.data if step.data > 0 else value.data >= limit.data

    def _drop_for_frame(self, loop: int, inclusive: bool) -> ForFrame | None:
        """Discard frames above the FOR frame of `loop`, and that frame too when `inclusive`."""
        for depth in range(len(self.frames) - 1, -1, -1):
            if isinstance(frame := self.frames[depth], ForFrame) and frame.loop == loop:
                del self.frames[depth + (0 if inclusive else 1):]
                return frame
        return None

    def _for(self, stmt: Statement) -> None:
        args, index = stmt.args, self.pc - 1
        start, limit = self.evaluate(args['start']), self.evaluate(args['end'])
        step = self.evaluate(args['step']) if args['step'] is not None else Value(Kind.INTEGER, 1)
        if Kind.STRING in (start.kind, limit.kind, step.kind):
            raise BasicTypeMismatch("Type mismatch: FOR needs numeric bounds.")
        if step.data == 0:
            raise BasicZeroStepForLoop("FOR loop with a zero STEP.")
        self._drop_for_frame(index, inclusive=True)
        value = self.env.set(args['var'], start)
        if not self._continues(value, limit, step):
            self.pc = stmt.jump + 1
            return
        self.frames.append(ForFrame(args['var'], limit, step, body=self.pc, loop=index))

    def _next(self, stmt: Statement) -> None:
        if (frame := self._drop_for_frame(stmt.link, inclusive=False)) is None:
            raise BasicNextWithoutFor(f"NEXT without FOR{' ' + stmt.args['var'] if stmt.args['var'] else ''}.")
        value = self.env.set(frame.var, op_add(self.env.get(frame.var), frame.step))
        if self._continues(value, frame.limit, frame.step):
            self.pc = frame.body
        else:
            self.frames.pop()

    # Console ─────────────────────────────────────────────────────────────────────────────────
    def _print(self, args: dict) -> None:
        for kind, expr in args['items']:
            match kind:
                case 'expr':
                    value = self.evaluate(expr)
                    self.console.write(value.data if value.kind is Kind.STRING else print_number(value))
                case 'comma':
                    self.console.next_zone()
                case 'tab':
                    self.console.tab(self._int(expr))
                case 'spc':
                    self.console.write(' ' * max(0, self._int(expr)))
        if args['newline']:
            self.console.newline()

    def _request_input(self, stmt: Statement) -> None:
        prompt = stmt.args['prompt'] or ''
        if stmt.kind == 'INPUT' and stmt.args['question']:
            prompt += '? '
        self.console.write(prompt)
        self.flush()
        self.awaiting = stmt
        self.state = State.AWAITING_INPUT

    def _assign_input(self, stmt: Statement, line: str) -> None:
        if stmt.kind == 'LINE_INPUT':
            return self.evaluator.assign(stmt.args['target'], Value(Kind.STRING, line))
        fields = line.split(',')
        for target, text in itertools.zip_longest(stmt.args['targets'], fields[:len(stmt.args['targets'])]):
            kind = self.evaluator.kind_of(target)
            if text is None:
                value = default_value(kind)
            elif kind is Kind.STRING:
                value = Value(Kind.STRING, text.strip().strip('"'))
            else:
                value = Value(Kind.DOUBLE, parse_val(text))
            self.evaluator.assign(target, value)

    # Data & variables ────────────────────────────────────────────────────────────────────────
    def _read(self, args: dict) -> None:
        for target in args['targets']:
            if self.data_pointer >= len(self.program.data):
                raise BasicOutOfData("Out of DATA.")
            value = self.program.data[self.data_pointer]
            self.data_pointer += 1
            if self.evaluator.kind_of(target) is Kind.STRING and value.kind is not Kind.STRING:
                value = Value(Kind.STRING, format_number(value))
            self.evaluator.assign(target, value)

    def _swap(self, args: dict) -> None:
        first, second = args['first'], args['second']
        if (self.evaluator.kind_of(first) is Kind.STRING) != (self.evaluator.kind_of(second) is Kind.STRING):
            raise BasicTypeMismatch("Type mismatch: SWAP between a string and a number.")
        a, b = self.evaluate(first), self.evaluate(second)
        self.evaluator.assign(first, b)
        self.evaluator.assign(second, a)

    def _line(self, args: dict) -> None:
        x0, y0 = self._point(args['start']) if args['start'] is not None else self.canvas.last_point
        x1, y1 = self._point(args['end'])
        color = self._int(args['color'])
        match args['box']:
            case 'B': self.canvas.box(x0, y0, x1, y1, color)
            case 'BF': self.canvas.fill_box(x0, y0, x1, y1, color)
            case _: self.canvas.line(x0, y0, x1, y1, color)
