## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# sixbasic — A classic BASIC interpreter that draws its graphics with differential sixels.
#

import re
import sys
import time
import logging
from dataclasses import dataclass

import click

from .errors import BasicError, BasicLexError, BasicParseError
from .parser import format_parse_error_context
from .formatting import write_without_ansi
from .runtime import Runtime
from .sixel import default_tile, check_tile
from .terminal import terminal_size, cell_size, supports_sixel, host_loop


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    plain: bool
    graphics: bool
    stats: bool
    seed: int | None
    tile: tuple[int, int] | None


class BasicRunner:
    def __init__(self, config: RuntimeConfig):
        self.config = config
        if config.plain:
            writer = write_without_ansi(sys.stdout.write)
            sys.stdout.write, sys.stderr.write = writer, writer

        logging.basicConfig(level=(logging.WARNING, logging.INFO, logging.DEBUG)[min(config.verbose, 2)],
                            format="%(levelname)s: %(name)s: %(message)s")

        interactive = sys.stdout.isatty()
        graphics = config.graphics
        if graphics and interactive and not supports_sixel():
            logging.getLogger(__name__).warning("Terminal does not advertise sixel support, graphics disabled.")
            graphics = False

        cell = cell_size()
        columns, rows = terminal_size() if interactive else (80, 25)
        self.interactive = interactive
        self.runtime = Runtime(columns=columns, rows=rows, cell=cell, tile=config.tile or default_tile(cell),
                               graphics=graphics, ansi=not config.plain, seed=config.seed, verbosity=config.verbose)
        self.stats = {'steps': 0, 'start': time.time()}
        self.renderers = []

    def _fatal_error(self, message: str, detail: str, exc_type: str, context: str = '') -> int:
        header = f"{detail} (Exception: \033[33m{exc_type}\033[0m)"
        print(f'\033[30;43m {message} \033[0m {header}\n{context}', file=sys.stderr)
        return 1

    def _handle_exception(self, exc: BasicError, filename: str, source: str) -> int:
        if isinstance(exc, (BasicLexError, BasicParseError)):
            context = format_parse_error_context(filename, exc.line, exc.column, exc.token, source=source)
            context += f"\n\033[90m{str(exc).replace(chr(10), ' ')}\033[0m\n"
            return self._fatal_error("SYNTAX ERROR.", f"Parsing `\033[97m{filename}\033[0m` caused a problem!", type(exc).__name__, context)

        label = f" at line \033[1;97m{exc.label}\033[0m" if exc.label is not None else ""
        detail = f"{exc}{label} in `\033[97m{filename}\033[0m`."
        context = ''
        if exc.line is not None:
            context = format_parse_error_context(filename, exc.line, exc.column, _word_at(source, exc.line, exc.column), source=source)
        return self._fatal_error("RUNTIME ERROR.", detail, type(exc).__name__, context)

    def check(self, source: str, filename: str) -> int:
        try:
            program = self.runtime.parse(source, filename=filename)
        except BasicError as exc:
            return self._handle_exception(exc, filename, source)
        print(f"\033[97m{filename}\033[0m: {len(program)} statement(s), {len(program.labels)} label(s), {len(program.data)} DATA item(s).")
        return 0

    def execute(self, source: str, filename: str) -> int:
        try:
            program = self.runtime.parse(source, filename=filename)
            interp = self.runtime.create_interpreter(program)
            self.renderers.append(interp.renderer)
            try:
                host_loop(interp, track_size=self.interactive)
            finally:
                self.stats['steps'] += interp.steps
                interp.console.reset()
                interp.console.flush()
        except BasicError as exc:
            return self._handle_exception(exc, filename, source)
        return 0

    def finalize(self, status: int) -> int:
        if self.config.stats:
            elapsed_time = time.time() - self.stats['start']
            print(f"\n\033[97m\033[48;5;30m STATISTICS. \033[0m")
            print(f"step\t\033[97m{self.stats['steps']:,}\033[0m")
            print(f"time\t\033[97m{elapsed_time:.3f}s\033[0m")
            for key in ('flushes', 'tiles', 'bytes'):
                print(f"{key}\t\033[97m{sum(r.stats[key] for r in self.renderers):,}\033[0m")
        return status


def _word_at(source: str, line: int, column: int | None) -> str:
    lines = source.splitlines()
    if not column or not 0 < line <= len(lines): return ''
    match = re.match(r'\w+\$?', lines[line - 1][column - 1:])
    return match.group(0) if match else ''


def _parse_tile(ctx, param, value):
    if value is None: return None
    try:
        width, height = (int(v) for v in value.lower().split('x'))
    except ValueError:
        raise click.BadParameter(f"Expected WIDTHxHEIGHT, got `{value}`.") from None
    try:
        return check_tile((width, height), cell_size())
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from None


@click.group(context_settings={'ignore_unknown_options': True})
@click.option('--verbose', '-v', default=0, count=True, help='Log more details; twice also traces every statement.')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes and sixel output.')
@click.option('--no-graphics', 'no_graphics', is_flag=True, help='Keep the canvas but never emit sixel images.')
@click.option('--stats', is_flag=True, help='Display execution statistics (steps, time, tiles).')
@click.option('--seed', type=int, default=None, help='Seed for RND, for reproducible runs.')
@click.option('--tile', callback=_parse_tile, default=None, metavar='WxH', help='Size in pixels of a refresh tile.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, plain: bool, no_graphics: bool, stats: bool, seed: int | None, tile) -> None:
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, plain=plain, graphics=not no_graphics,
                                      stats=stats, seed=seed, tile=tile)


@cli.command('run')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = BasicRunner(ctx.obj['config'])
    status = runner.execute(script.read(), script.name or '<STDIN>')
    ctx.exit(runner.finalize(status))


@cli.command('check')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def check_file(ctx: click.Context, script) -> None:
    runner = BasicRunner(ctx.obj['config'])
    ctx.exit(runner.check(script.read(), script.name or '<STDIN>'))


def main(argv: list[str] | None = None) -> None:
    a = list(sys.argv[1:] if argv is None else argv)
    g, r, i = [], [], 0
    while i < len(a):
        t = a[i]
        if t in ('--seed', '--tile') and i + 1 < len(a):
            g += [t, a[i+1]]; i += 2; continue
        (g if t.startswith('-') and t != '-' else r).append(t)
        i += 1

    if r and r[0] in cli.commands:
        cmd, tail = r[0], r[1:]
    else:
        cmd, tail = 'run', r

    cli.main(args=[*g, cmd, *tail], prog_name='sixbasic')


if __name__ == "__main__":
    main()
