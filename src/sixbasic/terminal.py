## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import os
import sys
import signal
import select
import shutil
import logging
import contextlib

from .interpreter import Interpreter, State


log = logging.getLogger(__name__)

DEFAULT_CELL = (8, 16)
STEP_SLICE = 256
SIXEL_TERMINALS = ('xterm', 'mlterm', 'yaft', 'foot', 'contour', 'wezterm', 'mintty')


def terminal_size(fallback: tuple[int, int] = (80, 25)) -> tuple[int, int]:
    size = shutil.get_terminal_size(fallback)
    return size.columns, size.lines

def cell_size(environ=None) -> tuple[int, int]:
    """Character cell in pixels, from `SIXBASIC_CELL` such as `10x20`."""
    text = (environ if environ is not None else os.environ).get('SIXBASIC_CELL', '')
    try:
        width, height = (int(v) for v in text.lower().split('x'))
    except ValueError:
        if text: log.warning("Ignoring malformed SIXBASIC_CELL=%r, expected WIDTHxHEIGHT.", text)
        return DEFAULT_CELL
    return (width, height) if width > 0 and height > 0 else DEFAULT_CELL

def supports_sixel(environ=None) -> bool:
    term = (environ if environ is not None else os.environ).get('TERM', '')
    return any(name in term for name in SIXEL_TERMINALS)


class KeyReader:
    """Non-blocking single-key reader for INKEY$, with stdin in cbreak mode while active."""

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdin
        self.saved = None

    @property
    def interactive(self) -> bool:
        return self.stream.isatty()

    def __enter__(self):
        if self.interactive:
            import termios, tty
            self.saved = termios.tcgetattr(self.stream)
            tty.setcbreak(self.stream.fileno())
        return self

    def __exit__(self, *exc):
        self._restore()
        return False

    def _restore(self) -> None:
        if self.saved is not None:
            import termios
            termios.tcsetattr(self.stream, termios.TCSADRAIN, self.saved)

    @contextlib.contextmanager
    def cooked(self):
        """Back to line mode with echo, for reading an INPUT line."""
        self._restore()
        try:
            yield
        finally:
            if self.saved is not None:
                import tty
                tty.setcbreak(self.stream.fileno())

    def poll(self) -> list[str]:
        if not self.interactive: return []
        keys, fd = [], self.stream.fileno()
        while select.select([fd], [], [], 0)[0]:
            if not (data := os.read(fd, 64)): break
            keys.extend(data.decode(errors='ignore'))
        return keys


@contextlib.contextmanager
def break_on_interrupt(interp: Interpreter):
    """Turn Ctrl+C into a request to stop between statements."""
    def handler(signum, frame):
        interp.request_break()
    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def host_loop(interp: Interpreter, stdin=None, track_size: bool = False) -> State:
    """Drive an interpreter from a terminal: keys, INPUT lines, break and resize."""
    stdin = stdin if stdin is not None else sys.stdin
    size = terminal_size() if track_size else None
    with KeyReader(stdin) as keys, break_on_interrupt(interp):
        while True:
            for key in keys.poll():
                interp.feed_key(key)
            if track_size and (current := terminal_size()) != size:
                log.debug("Terminal resized from %s to %s.", size, current)
                size = current
                interp.resize(*current)
            match interp.run(steps=STEP_SLICE):
                case State.HALTED:
                    return interp.state
                case State.AWAITING_INPUT:
                    with keys.cooked():
                        line = stdin.readline()
                    if not line:
                        log.info("End of input, stopping at statement %d.", interp.pc)
                        interp.halt()
                        return interp.state
                    interp.resume(line.rstrip('\r\n'), echo=not keys.interactive)
