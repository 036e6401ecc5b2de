"""
A printer for dentaku expressions and results.
"""
from dentaku.dentaku_datatypes import (
    Environment, Number, Symbol, UnaryOp, BinaryOp, Assignment, FunctionCall,
    ConfigurationError, PRINT_BASE
)

# .printBase value -> (prefix, format spec)
RADIX_FORMATS = {
    2: ("0b", "b"),
    8: ("0", "o"),
    10: ("", "d"),
    16: ("0x", "x"),
}


class Printer:
    """Formats dentaku expressions back into source-like text."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format an expression."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            # Default to Python's repr for unknown types
            return repr(obj)
        return handler(obj)

    def format_result(self, value, env: Environment) -> str:
        """Formats an evaluation result, printing Numbers in the `.printBase` radix."""
        if not isinstance(value, Number):
            return self.pformat(value)
        base, found = env.value(PRINT_BASE)
        fmt = RADIX_FORMATS.get(base) if found else None
        if fmt is None:
            stored = env.lookup(PRINT_BASE)
            raise ConfigurationError(f"bad .printBase: {self.pformat(stored)}", stored)
        prefix, spec = fmt
        return f"{prefix}{format(value.value, spec)}"

    def _create_handlers(self):
        return {
            Number: self._pformat_number,
            Symbol: self._pformat_symbol,
            UnaryOp: self._pformat_unary_op,
            BinaryOp: self._pformat_binary_op,
            Assignment: self._pformat_assignment,
            FunctionCall: self._pformat_function_call,
        }

    def _pformat_number(self, obj):
        return str(obj.value)

    def _pformat_symbol(self, obj):
        return obj.name

    def _pformat_unary_op(self, obj):
        return f"{obj.op}{self.pformat(obj.operand)}"

    def _pformat_binary_op(self, obj):
        return f"({self.pformat(obj.left)} {obj.op} {self.pformat(obj.right)})"

    def _pformat_assignment(self, obj):
        return f"{self.pformat(obj.target)} = {self.pformat(obj.value)}"

    def _pformat_function_call(self, obj):
        return f"{self.pformat(obj.name)}({self.pformat(obj.argument)})"


# Shared instance behind Expression.__str__
default_printer = Printer()
