## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .types import Kind, Value, Program
from .errors import *
from .runtime import Runtime
from .interpreter import Interpreter, State

_RUNTIME = Runtime()

def __getattr__(name):
    return getattr(_RUNTIME, name)
