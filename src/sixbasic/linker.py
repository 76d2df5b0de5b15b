## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import logging
from types import MappingProxyType

from .types import Program, Statement
from .errors import BasicParseError


log = logging.getLogger(__name__)

OPENERS = {'IF': 'END IF', 'FOR': 'NEXT', 'WHILE': 'WEND', 'DO': 'LOOP'}


def _link_error(message: str, stmt: Statement, filename: str | None) -> BasicParseError:
    return BasicParseError(message, filename=filename, line=stmt.line, column=stmt.column, token=stmt.kind.split('_')[0])


def _innermost(blocks: list, kind: str) -> int | None:
    """Position in `blocks` of the innermost open block of `kind`, or None."""
    for depth in range(len(blocks) - 1, -1, -1):
        if blocks[depth][0] == kind:
            return depth
    return None


def link_blocks(statements: list[Statement], filename=None) -> None:
    """Pair block openers with closers, storing forward jumps in `jump` and back-links in `link`."""
    blocks: list[tuple[str, int, list]] = []

    def close(kind: str, stmt: Statement) -> tuple[str, int, list]:
        if not blocks or blocks[-1][0] != kind:
            if blocks:
                opener = statements[blocks[-1][1]]
                raise _link_error(f"`{stmt.kind}` found while `{opener.kind}` from line {opener.line} is still open.", stmt, filename)
            raise _link_error(f"`{stmt.kind}` without a matching `{kind}`.", stmt, filename)
        return blocks.pop()

    for index, stmt in enumerate(statements):
        match stmt.kind:
            case 'IF':
                blocks.append(('IF', index, [index]))
            case 'ELSEIF' | 'ELSE':
                if not blocks or blocks[-1][0] != 'IF':
                    raise _link_error(f"`{stmt.kind}` without a matching `IF`.", stmt, filename)
                clauses = blocks[-1][2]
                if statements[clauses[-1]].kind == 'ELSE':
                    raise _link_error(f"`{stmt.kind}` after `ELSE` in the same `IF` block.", stmt, filename)
                clauses.append(index)
            case 'ENDIF':
                _, _, clauses = close('IF', stmt)
                for clause, following in zip(clauses, clauses[1:] + [index]):
                    statements[clause].jump = following
                    statements[clause].link = index
            case 'FOR' | 'WHILE' | 'DO':
                blocks.append((stmt.kind, index, []))
            case 'NEXT':
                _, opener, exits = close('FOR', stmt)
                if stmt.args['var'] is not None and stmt.args['var'] != statements[opener].args['var']:
                    raise _link_error(f"`NEXT {stmt.args['var']}` does not match `FOR {statements[opener].args['var']}`.", stmt, filename)
                _pair(statements, opener, index, exits)
            case 'WEND':
                _, opener, exits = close('WHILE', stmt)
                _pair(statements, opener, index, exits)
            case 'LOOP':
                _, opener, exits = close('DO', stmt)
                _pair(statements, opener, index, exits)
            case 'EXIT_FOR' | 'EXIT_DO':
                kind = stmt.kind.split('_')[1]
                if (depth := _innermost(blocks, kind)) is None:
                    raise _link_error(f"`EXIT {kind}` outside of a `{kind}` loop.", stmt, filename)
                blocks[depth][2].append(index)

    if blocks:
        kind, opener, _ = blocks[-1]
        raise _link_error(f"`{kind}` is never closed by a matching `{OPENERS[kind]}`.", statements[opener], filename)


def _pair(statements: list[Statement], opener: int, closer: int, exits: list[int]) -> None:
    statements[opener].jump = closer
    statements[closer].link = opener
    for index in exits:
        statements[index].jump = closer + 1
        statements[index].link = opener


def resolve_jumps(statements: list[Statement], labels: dict, data_labels: dict, filename=None) -> None:
    for stmt in statements:
        if stmt.kind in ('GOTO', 'GOSUB'):
            if (target := stmt.args['target']) not in labels:
                raise _link_error(f"Label `{target}` is not defined.", stmt, filename)
            stmt.jump = labels[target]
        elif stmt.kind == 'RESTORE':
            if (target := stmt.args['target']) is None:
                stmt.jump = 0
            elif target not in data_labels:
                raise _link_error(f"Label `{target}` is not defined.", stmt, filename)
            else:
                stmt.jump = data_labels[target]


def collect_data(statements: list[Statement], labels: dict) -> tuple[tuple, dict]:
    """Gather every DATA constant in program order, and the pool position of each label."""
    pool, positions = [], []
    for stmt in statements:
        positions.append(len(pool))
        if stmt.kind == 'DATA':
            pool.extend(stmt.args['values'])
    positions.append(len(pool))
    return tuple(pool), {label: positions[index] for label, index in labels.items()}


def link_program(statements: list[Statement], labels: dict, source: str = "", filename=None) -> Program:
    link_blocks(statements, filename=filename)
    data, data_labels = collect_data(statements, labels)
    resolve_jumps(statements, labels, data_labels, filename=filename)
    log.debug("Linked %d statement(s) with %d DATA item(s).", len(statements), len(data))
    return Program(statements=tuple(statements), labels=MappingProxyType(dict(labels)),
                   data=data, data_labels=MappingProxyType(data_labels), source=source, filename=filename)
