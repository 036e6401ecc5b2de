"""
The dentaku tree-walking Evaluator.
"""
from typing import Optional

from dentaku.dentaku_datatypes import (
    Environment, Expression, Number, Symbol, UnaryOp, BinaryOp,
    Assignment, FunctionCall, UndefinedFunction, UnsupportedOperator
)

# Assigning this bare symbol removes the target binding.
UNDEF = "undef"
# Holds the most recently evaluated input expression.
LAST_INPUT = "_"


def _trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero; b == 0 raises ZeroDivisionError."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class Evaluator:
    """The dentaku execution engine."""

    def eval(self, node: Expression, env: Environment) -> Expression:
        match node:
            case Number():
                return node

            case Symbol(name=name):
                if env.lookup(name) is None:
                    # Free variable
                    return node
                # Inside its own definition the symbol reads as 0, which
                # stops self-referential bindings like `a = a + 1` recursing.
                with env.shadowed(name) as stored:
                    return self.eval(stored, env)

            case UnaryOp(op='-', operand=operand):
                v = self.eval(operand, env)
                if isinstance(v, Number):
                    return Number(-v.value)
                # NOTE: the sign is dropped when the operand stays symbolic.
                return v

            case UnaryOp(op=op):
                raise UnsupportedOperator(op)

            case BinaryOp(op=op, left=left, right=right):
                lv = self.eval(left, env)
                rv = self.eval(right, env)
                if isinstance(lv, Number) and isinstance(rv, Number):
                    return Number(self._arith(op, lv.value, rv.value))
                return BinaryOp(op, lv, rv)

            case Assignment(target=target, value=value):
                result = self.eval(value, env)
                if isinstance(value, Symbol) and value.name == UNDEF:
                    env.unset(target.name)
                else:
                    env.set_expr(target.name, value)
                return result

            case FunctionCall(name=name, argument=argument):
                proc = env.function(name.name)
                if proc is None:
                    raise UndefinedFunction(name.name)
                return proc(argument, env)

            case _:
                raise TypeError(f"Cannot evaluate {type(node).__name__}: {node!r}")

    def _arith(self, op: str, a: int, b: int) -> int:
        match op:
            case '+':
                return a + b
            case '-':
                return a - b
            case '*':
                return a * b
            case '/':
                return _trunc_div(a, b)
        raise UnsupportedOperator(op)


def evaluate(ast: Expression, env: Environment, evaluator: Optional[Evaluator] = None) -> Expression:
    """Evaluates a parsed statement and records it under `_`."""
    v = (evaluator or Evaluator()).eval(ast, env)
    if ast != Symbol(LAST_INPUT):
        env.set_expr(LAST_INPUT, ast)
    return v
