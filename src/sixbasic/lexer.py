## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import functools

import lark

from .errors import BasicLexError


KEYWORDS = (
    'PRINT', 'INPUT', 'LET', 'IF', 'THEN', 'ELSE', 'ELSEIF', 'END', 'ENDIF',
    'FOR', 'TO', 'STEP', 'NEXT', 'WHILE', 'WEND', 'DO', 'LOOP', 'UNTIL', 'EXIT',
    'GOTO', 'GOSUB', 'RETURN', 'DIM', 'AS', 'STOP', 'SWAP',
    'DATA', 'READ', 'RESTORE', 'RANDOMIZE', 'SLEEP', 'BEEP', 'SOUND',
    'CLS', 'SCREEN', 'COLOR', 'LOCATE', 'PSET', 'PRESET', 'LINE', 'CIRCLE', 'PAINT', 'BEZIER',
    'MOD', 'AND', 'OR', 'NOT', 'XOR', 'EQV', 'IMP',
    'INTEGER', 'LONG', 'SINGLE', 'DOUBLE', 'STRING',
)

SYMBOLS = {
    'NE': '<>', 'LE': '<=', 'GE': '>=', 'LT': '<', 'GT': '>', 'EQ': '=',
    'PLUS': '+', 'MINUS': '-', 'STAR': '*', 'SLASH': '/', 'BACKSLASH': '\\\\', 'CARET': '^',
    'LPAR': '(', 'RPAR': ')', 'COMMA': ',', 'SEMICOLON': ';', 'COLON': ':',
}

# Keywords share NAME's priority and flags, so lark retypes a NAME that spells a keyword
# as a whole; `PRINTER` stays a NAME.
GRAMMAR = "\n".join([
    "start: (" + " | ".join(('NAME', 'NUMBER', 'TEXT', 'NEWLINE') + KEYWORDS + tuple(SYMBOLS)) + ")*",
    "",
    "// COMMENTS",
    r"COMMENT.3: /(REM\b|')[^\n]*/i",
    "",
    "// TOKENS",
    r"NUMBER.2: /(\d+\.?\d*|\.\d+)([ed][+-]?\d+)?[#!%&]?/i",
    r'TEXT: /"[^"\n]*"/',
    r"NAME: /[a-z_][a-z0-9_]*[$%&!#]?/i",
    r"NEWLINE: /\n/",
    *(f'{kw}: "{kw}"i' for kw in KEYWORDS),
    *(f'{name}: "{text}"' for name, text in SYMBOLS.items()),
    "",
    "// WHITESPACE",
    r"WS: /[ \t\f\r]+/",
    "%ignore WS",
    "%ignore COMMENT",
])


@functools.cache
def _build_lexer() -> lark.Lark:
    return lark.Lark(GRAMMAR, parser="lalr", lexer="basic")


def tokenize(source: str, filename=None):
    """Lazily scan `source` into lark tokens; each call starts a fresh scan."""
    try:
        yield from _build_lexer().lex(source)
    except lark.exceptions.UnexpectedCharacters as exc:
        message = "Unterminated string literal." if exc.char == '"' else f"Unexpected character `{exc.char}`."
        raise BasicLexError(message, filename=filename, line=exc.line, column=exc.column, char=exc.char) from None
