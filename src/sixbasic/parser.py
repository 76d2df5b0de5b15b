## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import logging

import lark

from .lexer import tokenize
from .types import Kind, Value, Literal, Var, ArrayRef, Call, Unary, Binary, Statement, SUFFIX_KINDS, TYPE_NAME_KINDS, number, coerce
from .errors import BasicParseError, BasicOverflow


log = logging.getLogger(__name__)

OPERATOR_TOKENS = {
    'IMP': 'IMP', 'EQV': 'EQV', 'XOR': 'XOR', 'OR': 'OR', 'AND': 'AND', 'MOD': 'MOD',
    'EQ': '=', 'NE': '<>', 'LT': '<', 'GT': '>', 'LE': '<=', 'GE': '>=',
    'PLUS': '+', 'MINUS': '-', 'STAR': '*', 'SLASH': '/', 'BACKSLASH': '\\', 'CARET': '^',
}

# Tokens that finish a statement; ELSE is included so single-line IF branches stop there.
STATEMENT_END = ('NEWLINE', 'EOF', 'COLON', 'ELSE')


def parse_number(text: str) -> Value:
    """Convert a numeric literal to a value, choosing its kind from suffix and digits."""
    suffix = text[-1] if text[-1] in '#!%&' else ''
    body = (text[:-1] if suffix else text).lower()
    if suffix in ('%', '&'):
        return coerce(Value(Kind.DOUBLE, float(body.replace('d', 'e'))), SUFFIX_KINDS[suffix])
    if suffix == '#' or 'd' in body:
        return Value(Kind.DOUBLE, float(body.replace('d', 'e')))
    if suffix == '!':
        return Value(Kind.SINGLE, float(body))
    if body.isdigit():
        return number(Kind.INTEGER, int(body))
    mantissa = body.split('e')[0]
    digits = len(mantissa.replace('.', '').lstrip('0'))
    return Value(Kind.DOUBLE if digits > 7 else Kind.SINGLE, float(body))


class Parser:
    """Recursive descent over lark tokens, producing a flat statement list and a label table."""

    def __init__(self, source: str, filename=None, functions=None):
        self.source = source
        self.filename = filename
        self.functions = functions or {}
        self.tokens = list(tokenize(source, filename=filename))
        last = self.tokens[-1] if self.tokens else None
        self.tokens.append(lark.Token('EOF', '', start_pos=len(source),
                                      line=(last.line if last else 1), column=(last.end_column if last else 1)))
        self.pos = 0
        self.statements: list[Statement] = []
        self.labels: dict = {}
        self.current_label = None

    # Token stream ────────────────────────────────────────────────────────────────────────────
    def peek(self, offset: int = 0) -> lark.Token:
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

    def at(self, *types) -> bool:
        return self.peek().type in types

    def advance(self) -> lark.Token:
        tok = self.peek()
        self.pos = min(self.pos + 1, len(self.tokens) - 1)
        return tok

    def accept(self, *types) -> lark.Token | None:
        return self.advance() if self.at(*types) else None

    def expect(self, *types, what: str | None = None) -> lark.Token:
        if self.at(*types):
            return self.advance()
        tok = self.peek()
        found = 'end of line' if tok.type in ('NEWLINE', 'EOF') else f"`{tok.value}`"
        raise self.error(f"Expected {what or ' or '.join(types)}, found {found}.", tok)

    def error(self, message: str, tok: lark.Token) -> BasicParseError:
        return BasicParseError(message, filename=self.filename, line=tok.line, column=tok.column,
                               token=tok.value if tok.type not in ('NEWLINE', 'EOF') else '')

    def emit(self, kind: str, tok: lark.Token, **args) -> Statement:
        stmt = Statement(kind, args, line=tok.line, column=tok.column, label=self.current_label)
        self.statements.append(stmt)
        return stmt

    # Program structure ───────────────────────────────────────────────────────────────────────
    def parse(self):
        while not self.at('EOF'):
            if self.accept('NEWLINE'): continue
            self._parse_label()
            self.parse_statements()
            if not self.at('EOF'):
                self.expect('NEWLINE', what='end of statement')
        log.debug("Parsed %d statement(s) and %d label(s) from %s.", len(self.statements), len(self.labels), self.filename)
        return self.statements, self.labels

    def _parse_label(self) -> None:
        tok = self.peek()
        if tok.type == 'NUMBER' and tok.value.isdigit():
            self.advance()
            self._define_label(int(tok.value), tok)
        elif tok.type == 'NAME' and self.peek(1).type == 'COLON':
            self.advance(); self.advance()
            self._define_label(tok.value.upper(), tok)

    def _define_label(self, label, tok: lark.Token) -> None:
        if label in self.labels:
            raise self.error(f"Duplicate label `{label}`.", tok)
        self.labels[label] = len(self.statements)
        self.current_label = label

    def parse_statements(self, stop=()) -> None:
        while not self.at('NEWLINE', 'EOF', *stop):
            if self.accept('COLON'): continue
            self.parse_statement()
            if not self.at('COLON', 'NEWLINE', 'EOF', *stop):
                tok = self.peek()
                raise self.error(f"Expected end of statement, found `{tok.value}`.", tok)

    def parse_statement(self) -> None:
        tok = self.peek()
        if tok.type == 'NAME':
            return self._assignment(tok)
        if (handler := getattr(self, f"_stmt_{tok.type.lower()}", None)) is None:
            raise self.error(f"Unexpected `{tok.value}` at start of statement.", tok)
        handler(self.advance())

    # Statements ──────────────────────────────────────────────────────────────────────────────
    def _assignment(self, tok):
        target = self.parse_target()
        self.expect('EQ', what='`=`')
        self.emit('LET', tok, target=target, expr=self.parse_expression())

    def _stmt_let(self, tok):
        self._assignment(tok)

    def _stmt_print(self, tok):
        items = []
        while not self.at(*STATEMENT_END):
            if self.accept('COMMA'):
                items.append(('comma', None))
            elif self.accept('SEMICOLON'):
                items.append(('semi', None))
            elif self.at('NAME') and self.peek().value.upper() in ('TAB', 'SPC') and self.peek(1).type == 'LPAR':
                kind = self.advance().value.lower(); self.advance()
                items.append((kind, self.parse_expression()))
                self.expect('RPAR', what='`)`')
            else:
                items.append(('expr', self.parse_expression()))
        newline = not items or items[-1][0] not in ('comma', 'semi')
        self.emit('PRINT', tok, items=tuple(items), newline=newline)

    def _parse_prompt(self):
        if self.at('TEXT') and self.peek(1).type in ('SEMICOLON', 'COMMA'):
            prompt = self.advance().value[1:-1]
            return prompt, self.advance().type == 'COMMA'
        return None, True

    def _stmt_input(self, tok):
        prompt, question = self._parse_prompt()
        targets = [self.parse_target()]
        while self.accept('COMMA'):
            targets.append(self.parse_target())
        self.emit('INPUT', tok, prompt=prompt, question=question, targets=tuple(targets))

    def _stmt_if(self, tok):
        cond = self.parse_expression()
        if self.at('GOTO'):
            self.emit('IF', tok, cond=cond, inline=True)
            self._stmt_goto(self.advance())
        else:
            self.expect('THEN', what='`THEN`')
            if self.at('NEWLINE', 'EOF'):
                self.emit('IF', tok, cond=cond, inline=False)
                return
            self.emit('IF', tok, cond=cond, inline=True)
            self._inline_branch(tok)
        if (else_tok := self.accept('ELSE')):
            self.emit('ELSE', else_tok)
            self._inline_branch(else_tok)
        self.emit('ENDIF', tok)

    def _inline_branch(self, tok):
        if self.at('NUMBER'):
            self.emit('GOTO', tok, target=self._label_ref())
        else:
            self.parse_statements(stop=('ELSE',))

    def _stmt_elseif(self, tok):
        cond = self.parse_expression()
        self.expect('THEN', what='`THEN`')
        self.emit('ELSEIF', tok, cond=cond)

    def _stmt_else(self, tok):
        self.emit('ELSE', tok)

    def _stmt_endif(self, tok):
        self.emit('ENDIF', tok)

    def _stmt_end(self, tok):
        if self.accept('IF'):
            self.emit('ENDIF', tok)
        else:
            self.emit('END', tok)

    def _stmt_for(self, tok):
        var = self.expect('NAME', what='loop variable').value.upper()
        self.expect('EQ', what='`=`')
        start = self.parse_expression()
        self.expect('TO', what='`TO`')
        end = self.parse_expression()
        step = self.parse_expression() if self.accept('STEP') else None
        self.emit('FOR', tok, var=var, start=start, end=end, step=step)

    def _stmt_next(self, tok):
        if not self.at('NAME'):
            self.emit('NEXT', tok, var=None)
            return
        self.emit('NEXT', tok, var=self.advance().value.upper())
        while self.accept('COMMA'):
            self.emit('NEXT', tok, var=self.expect('NAME', what='loop variable').value.upper())

    def _stmt_while(self, tok):
        self.emit('WHILE', tok, cond=self.parse_expression())

    def _stmt_wend(self, tok):
        self.emit('WEND', tok)

    def _loop_condition(self):
        if (tok := self.accept('WHILE', 'UNTIL')):
            return self.parse_expression(), tok.type == 'UNTIL'
        return None, False

    def _stmt_do(self, tok):
        cond, until = self._loop_condition()
        self.emit('DO', tok, cond=cond, until=until)

    def _stmt_loop(self, tok):
        cond, until = self._loop_condition()
        self.emit('LOOP', tok, cond=cond, until=until)

    def _stmt_exit(self, tok):
        which = self.expect('FOR', 'DO', what='`FOR` or `DO`')
        self.emit(f"EXIT_{which.type}", tok)

    def _label_ref(self):
        tok = self.expect('NUMBER', 'NAME', what='line number or label')
        if tok.type == 'NUMBER':
            if not tok.value.isdigit():
                raise self.error(f"Invalid line number `{tok.value}`.", tok)
            return int(tok.value)
        return tok.value.upper()

    def _stmt_goto(self, tok):
        self.emit('GOTO', tok, target=self._label_ref())

    def _stmt_gosub(self, tok):
        self.emit('GOSUB', tok, target=self._label_ref())

    def _stmt_return(self, tok):
        self.emit('RETURN', tok)

    def _stmt_dim(self, tok):
        decls = []
        while True:
            name = self.expect('NAME', what='variable name').value.upper()
            extents = None
            if self.accept('LPAR'):
                extents = self.parse_expression_list()
                self.expect('RPAR', what='`)`')
            kind = None
            if self.accept('AS'):
                type_tok = self.expect(*TYPE_NAME_KINDS, what='type name')
                kind = TYPE_NAME_KINDS[type_tok.type]
                if name[-1] in SUFFIX_KINDS and SUFFIX_KINDS[name[-1]] != kind:
                    raise self.error(f"Type suffix of `{name}` conflicts with `AS {type_tok.type}`.", type_tok)
            decls.append((name, extents, kind))
            if not self.accept('COMMA'): break
        self.emit('DIM', tok, decls=tuple(decls))

    def _stmt_swap(self, tok):
        first = self.parse_target()
        self.expect('COMMA', what='`,`')
        self.emit('SWAP', tok, first=first, second=self.parse_target())

    def _stmt_data(self, tok):
        values = []
        while True:
            start = self.pos
            while not self.at('COMMA', 'NEWLINE', 'EOF', 'COLON'):
                self.advance()
            values.append(self._data_item(self.tokens[start:self.pos]))
            if not self.accept('COMMA'): break
        self.emit('DATA', tok, values=tuple(values))

    def _data_item(self, toks) -> Value:
        if not toks:
            return Value(Kind.STRING, "")
        if len(toks) == 1 and toks[0].type == 'TEXT':
            return Value(Kind.STRING, toks[0].value[1:-1])
        sign = -1 if toks[0].type == 'MINUS' else 1
        body = toks[1:] if toks[0].type in ('MINUS', 'PLUS') else toks
        if len(body) == 1 and body[0].type == 'NUMBER':
            value = parse_number(body[0].value)
            return Value(value.kind, sign * value.data)
        return Value(Kind.STRING, self.source[toks[0].start_pos:toks[-1].end_pos].strip())

    def _stmt_read(self, tok):
        targets = [self.parse_target()]
        while self.accept('COMMA'):
            targets.append(self.parse_target())
        self.emit('READ', tok, targets=tuple(targets))

    def _stmt_restore(self, tok):
        target = None if self.at(*STATEMENT_END) else self._label_ref()
        self.emit('RESTORE', tok, target=target)

    def _stmt_randomize(self, tok):
        self.emit('RANDOMIZE', tok, seed=None if self.at(*STATEMENT_END) else self.parse_expression())

    def _stmt_sleep(self, tok):
        self.emit('SLEEP', tok, seconds=None if self.at(*STATEMENT_END) else self.parse_expression())

    def _stmt_beep(self, tok):
        self.emit('BEEP', tok)

    def _stmt_sound(self, tok):
        frequency = self.parse_expression()
        self.expect('COMMA', what='`,`')
        self.emit('SOUND', tok, frequency=frequency, duration=self.parse_expression())

    def _stmt_stop(self, tok):
        self.emit('STOP', tok)

    def _stmt_cls(self, tok):
        self.emit('CLS', tok)

    def _stmt_screen(self, tok):
        self.emit('SCREEN', tok, mode=self.parse_expression())

    def _stmt_color(self, tok):
        fg = None if self.at('COMMA', *STATEMENT_END) else self.parse_expression()
        bg, = self._optional_args(1)
        self.emit('COLOR', tok, fg=fg, bg=bg)

    def _stmt_locate(self, tok):
        row = None if self.at('COMMA', *STATEMENT_END) else self.parse_expression()
        col, = self._optional_args(1)
        self.emit('LOCATE', tok, row=row, col=col)

    # Graphics ────────────────────────────────────────────────────────────────────────────────
    def parse_point(self):
        self.expect('LPAR', what='`(`')
        x = self.parse_expression()
        self.expect('COMMA', what='`,`')
        y = self.parse_expression()
        self.expect('RPAR', what='`)`')
        return x, y

    def _optional_args(self, count: int) -> list:
        """Parse up to `count` comma-prefixed arguments, any of which may be left empty."""
        values = [None] * count
        for i in range(count):
            if not self.accept('COMMA'): break
            if not self.at('COMMA', *STATEMENT_END):
                values[i] = self.parse_expression()
        return values

    def _stmt_pset(self, tok):
        point = self.parse_point()
        color, = self._optional_args(1)
        self.emit('PSET', tok, point=point, color=color)

    def _stmt_preset(self, tok):
        point = self.parse_point()
        color, = self._optional_args(1)
        self.emit('PRESET', tok, point=point, color=color)

    def _stmt_line(self, tok):
        if self.accept('INPUT'):
            prompt, _ = self._parse_prompt()
            self.emit('LINE_INPUT', tok, prompt=prompt, target=self.parse_target())
            return
        start = self.parse_point() if self.at('LPAR') else None
        self.expect('MINUS', what='`-`')
        end = self.parse_point()
        color, box = None, None
        if self.accept('COMMA'):
            if not self.at('COMMA', *STATEMENT_END):
                color = self.parse_expression()
            if self.accept('COMMA'):
                shape = self.expect('NAME', what='`B` or `BF`')
                if (box := shape.value.upper()) not in ('B', 'BF'):
                    raise self.error(f"Expected `B` or `BF`, found `{shape.value}`.", shape)
        self.emit('LINE', tok, start=start, end=end, color=color, box=box)

    def _stmt_circle(self, tok):
        center = self.parse_point()
        self.expect('COMMA', what='`,`')
        radius = self.parse_expression()
        color, start, end, aspect = self._optional_args(4)
        self.emit('CIRCLE', tok, center=center, radius=radius, color=color, start=start, end=end, aspect=aspect)

    def _stmt_paint(self, tok):
        seed = self.parse_point()
        color, border = self._optional_args(2)
        self.emit('PAINT', tok, seed=seed, color=color, border=border)

    def _stmt_bezier(self, tok):
        points = [self.parse_point()]
        for _ in range(2):
            self.expect('MINUS', what='`-`')
            points.append(self.parse_point())
        color, thickness = self._optional_args(2)
        self.emit('BEZIER', tok, points=tuple(points), color=color, thickness=thickness)

    # Expressions ─────────────────────────────────────────────────────────────────────────────
    def parse_target(self):
        name = self.expect('NAME', what='variable name').value.upper()
        if self.accept('LPAR'):
            indices = self.parse_expression_list()
            self.expect('RPAR', what='`)`')
            return ArrayRef(name, indices)
        return Var(name)

    def parse_expression_list(self) -> tuple:
        items = [self.parse_expression()]
        while self.accept('COMMA'):
            items.append(self.parse_expression())
        return tuple(items)

    def parse_expression(self):
        return self._binary(('IMP',), self._eqv)

    def _binary(self, types, operand):
        left = operand()
        while (tok := self.accept(*types)):
            left = Binary(OPERATOR_TOKENS[tok.type], left, operand())
        return left

    def _eqv(self): return self._binary(('EQV',), self._xor)
    def _xor(self): return self._binary(('XOR',), self._or)
    def _or(self): return self._binary(('OR',), self._and)
    def _and(self): return self._binary(('AND',), self._not)
    def _comparison(self): return self._binary(('EQ', 'NE', 'LT', 'GT', 'LE', 'GE'), self._additive)
    def _additive(self): return self._binary(('PLUS', 'MINUS'), self._multiplicative)
    def _multiplicative(self): return self._binary(('STAR', 'SLASH', 'BACKSLASH', 'MOD'), self._unary)

    def _not(self):
        if self.accept('NOT'):
            return Unary('NOT', self._not())
        return self._comparison()

    def _unary(self):
        if self.accept('MINUS'):
            return Unary('-', self._unary())
        if self.accept('PLUS'):
            return self._unary()
        return self._power()

    def _power(self):
        base = self._primary()
        if self.accept('CARET'):
            return Binary('^', base, self._unary())
        return base

    def _primary(self):
        tok = self.peek()
        match tok.type:
            case 'NUMBER':
                self.advance()
                try:
                    return Literal(parse_number(tok.value))
                except BasicOverflow as exc:
                    raise self.error(str(exc), tok) from None
            case 'TEXT':
                self.advance()
                return Literal(Value(Kind.STRING, tok.value[1:-1]))
            case 'LPAR':
                self.advance()
                expr = self.parse_expression()
                self.expect('RPAR', what='`)`')
                return expr
            case 'NAME':
                self.advance()
                name = tok.value.upper()
                if name in self.functions:
                    return self._call(name, tok)
                if self.accept('LPAR'):
                    indices = self.parse_expression_list()
                    self.expect('RPAR', what='`)`')
                    return ArrayRef(name, indices)
                return Var(name)
        found = 'end of line' if tok.type in ('NEWLINE', 'EOF') else f"`{tok.value}`"
        raise self.error(f"Expected expression, found {found}.", tok)

    def _call(self, name: str, tok: lark.Token) -> Call:
        args = ()
        if self.accept('LPAR'):
            args = () if self.at('RPAR') else self.parse_expression_list()
            self.expect('RPAR', what='`)`')
        meta = self.functions[name].__basic_meta__
        if not meta['min'] <= len(args) <= meta['max']:
            expected = str(meta['min']) if meta['min'] == meta['max'] else f"{meta['min']} to {meta['max']}"
            raise self.error(f"Function `{name}` expects {expected} argument(s), got {len(args)}.", tok)
        return Call(name, args)


def parse(source: str, filename=None, functions=None):
    return Parser(source, filename=filename, functions=functions).parse()


def format_parse_error_context(filename, line, column, token_value, source=None):
    lines = source.splitlines(keepends=True) if source is not None else open(filename, 'r').readlines()
    line = max(1, min(line or 1, len(lines) or 1))
    start_line, end_line = max(0, line - 3), min(len(lines), line + 2)
    result = [f"\033[97m  File \"{filename}\", line {line}\033[0m"]

    for i in range(start_line, end_line):
        line_content = lines[i].rstrip('\n')
        line_color = '\033[90m'
        if i+1 == line:
            line_color = '\033[97m'
            if column and 0 < column <= len(line_content) and token_value:
                line_content = (
                    line_content[:column-1] +
                    f"\033[48;5;30m\033[1;97m{line_content[column-1:column+len(token_value)-1]}\033[0m" +
                    line_content[column+len(token_value)-1:]
                )
        result.append(f"{line_color}{i+1:>5} |\033[0m {line_content}")
    return '\n' + '\n'.join(result) + '\n'
