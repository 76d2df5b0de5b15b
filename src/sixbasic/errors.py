## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘


class BasicError(Exception):
    def __init__(self, message: str = "", *, line=None, column=None, label=None, statement=None):
        """Base class for all BASIC-raised errors."""
        super().__init__(message)
        self.line: int = line
        self.column: int = column
        self.label: object = label
        self.statement: object = statement

class BasicLexError(BasicError):
    def __init__(self, message, *, filename=None, line=None, column=None, char=None):
        super().__init__(message, line=line, column=column)
        self.filename = filename
        self.char = char
        self.token = char or ''

class BasicParseError(BasicError):
    def __init__(self, message, *, filename=None, line=None, column=None, token=None):
        super().__init__(message, line=line, column=column)
        self.filename = filename
        self.token = token or ''


class BasicRuntimeError(BasicError, RuntimeError):
    """Errors raised while a program executes, reported with the failing statement."""
    pass

class BasicTypeMismatch(BasicRuntimeError, TypeError):
    pass

class BasicDivisionByZero(BasicRuntimeError, ZeroDivisionError):
    pass

class BasicZeroStepForLoop(BasicRuntimeError, ValueError):
    pass

class BasicSubscriptOutOfRange(BasicRuntimeError, IndexError):
    pass

class BasicArrayRedeclared(BasicRuntimeError):
    pass

class BasicReturnWithoutGosub(BasicRuntimeError):
    pass

class BasicNextWithoutFor(BasicRuntimeError):
    pass

class BasicOverflow(BasicRuntimeError, OverflowError):
    pass

class BasicIllegalFunctionCall(BasicRuntimeError, ValueError):
    pass

class BasicOutOfData(BasicRuntimeError):
    pass
