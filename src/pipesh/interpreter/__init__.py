"""Interpreter module for pipesh."""

from .environment import PATH_VARIABLE, Environment
from .expansion import expand_word
from .interpreter import Interpreter
from .types import InterpreterContext, InterpreterState

__all__ = [
    "Environment",
    "Interpreter",
    "InterpreterContext",
    "InterpreterState",
    "PATH_VARIABLE",
    "expand_word",
]
