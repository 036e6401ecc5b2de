"""
Defines the core data types for the dentaku calculator.

This module provides the expression tree variants produced by the parser,
the Environment the evaluator runs against, and the error types raised
while reading, evaluating and printing a line.
"""

from abc import ABC
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple
import collections.abc


class UndefinedFunction(Exception):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class UnsupportedOperator(Exception):
    def __init__(self, op: str):
        super().__init__(op)
        self.op = op


class ConfigurationError(Exception):
    """Raised when a session setting (e.g. `.printBase`) holds an unusable value."""
    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


# =================================================================
# Expression Tree
# =================================================================

class Expression(ABC):
    """Abstract base class for every node of a parsed line.

    Nodes are immutable; evaluation always builds new nodes or returns
    existing ones.
    """

    def __str__(self) -> str:
        from dentaku.dentaku_printer import default_printer
        return default_printer.pformat(self)


@dataclass(frozen=True)
class Number(Expression):
    value: int


@dataclass(frozen=True)
class Symbol(Expression):
    """An identifier. Unbound symbols evaluate to themselves (free variables)."""
    name: str


@dataclass(frozen=True)
class UnaryOp(Expression):
    op: str
    operand: Expression


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Assignment(Expression):
    """`target = value`; the environment keeps `value` unevaluated."""
    target: Symbol
    value: Expression


@dataclass(frozen=True)
class FunctionCall(Expression):
    name: Symbol
    argument: Expression


# =================================================================
# Environment
# =================================================================

NativeProcedure = Callable[[Expression, 'Environment'], Expression]

PRINT_BASE = ".printBase"


class Environment:
    """The variable and function bindings of one calculator session.

    `variables` maps names to stored (unevaluated) expressions and always
    holds `.printBase` once constructed. `functions` maps names to native
    procedures supplied by the host; they are the only extension point.
    """
    def __init__(self, print_base: int = 10):
        self.variables: Dict[str, Expression] = {}
        self.functions: Dict[str, NativeProcedure] = {}
        self.set(PRINT_BASE, print_base)

    def set(self, name: str, n: int):
        self.variables[name] = Number(n)

    def set_expr(self, name: str, expr: Expression):
        self.variables[name] = expr

    def set_func(self, name: str, proc: NativeProcedure):
        if not callable(proc):
            raise TypeError(f"function binding for {name!r} is not callable")
        self.functions[name] = proc

    def unset(self, name: str):
        self.variables.pop(name, None)

    def lookup(self, name: str) -> Optional[Expression]:
        """Returns the stored binding for name, or None when unbound."""
        return self.variables.get(name)

    def function(self, name: str) -> Optional[NativeProcedure]:
        return self.functions.get(name)

    def value(self, name: str) -> Tuple[int, bool]:
        """Returns (n, True) when name is bound to a Number, else (0, False)."""
        v = self.variables.get(name)
        if isinstance(v, Number):
            return v.value, True
        return 0, False

    def defined(self, name: str) -> bool:
        n, found = self.value(name)
        return found and n != 0

    @contextmanager
    def shadowed(self, name: str) -> Iterator[Optional[Expression]]:
        """Temporarily binds name to 0, yielding the saved binding.

        The saved binding is put back on every exit path, so a failure
        raised inside the block cannot leave the name stuck at zero.
        """
        saved = self.variables.get(name)
        self.variables[name] = Number(0)
        try:
            yield saved
        finally:
            if saved is None:
                self.variables.pop(name, None)
            else:
                self.variables[name] = saved

    def names(self) -> collections.abc.KeysView:
        return self.variables.keys()

    def __contains__(self, name: object) -> bool:
        return name in self.variables

    def __repr__(self) -> str:
        keys = ', '.join(self.variables.keys())
        funcs = ', '.join(self.functions.keys())
        return f"<Environment variables=[{keys}] functions=[{funcs}]>"
