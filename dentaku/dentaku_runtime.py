import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from dentaku.dentaku_config import DentakuConfig
from dentaku.dentaku_datatypes import (
    Environment, Expression, Symbol, NativeProcedure,
    UndefinedFunction, UnsupportedOperator, ConfigurationError
)
from dentaku.dentaku_interpreter import Evaluator, evaluate
from dentaku.dentaku_parser import read
from dentaku.dentaku_printer import Printer

logger = logging.getLogger("dentaku.runtime")

# ===================================================================
# 1. Built-in Functions
# ===================================================================


def _binding_or_self(arg: Expression, env: Environment) -> Expression:
    if isinstance(arg, Symbol):
        stored = env.lookup(arg.name)
        if stored is not None:
            return stored
    return arg


class StdLib:
    """Host-provided functions. Each receives its argument unevaluated."""

    def _dump(self, arg: Expression, env: Environment) -> Expression:
        """Shows the stored tree of a variable (or of the argument) with its node types."""
        return Symbol(repr(_binding_or_self(arg, env)))

    def _print(self, arg: Expression, env: Environment) -> Expression:
        """Shows the unevaluated text of a variable (or of the argument)."""
        return Symbol(str(_binding_or_self(arg, env)))


# ===================================================================
# 2. Line Execution
# ===================================================================

Token = Dict[str, Any]


@dataclass
class ExecutionResult:
    """The structured result of running one line."""
    status: Literal['success', 'error']
    value: Optional[Expression] = None
    text: Optional[str] = None
    error_message: Optional[str] = None
    error_token: Optional[Token] = None
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        """Formats an error message with the column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.error_token and self.error_token.get('col') is not None:
            col = self.error_token['col']
            if not msg.startswith("Error at col "):
                return f"Error at col {col}: {msg}"
        return msg


class LineRunner:
    """Reads, evaluates, and prints dentaku lines against one Environment."""

    def __init__(self, config: Optional[DentakuConfig] = None, env: Optional[Environment] = None):
        self.config = config if config is not None else DentakuConfig()
        self.env = env if env is not None else Environment(print_base=self.config.print_base)
        self.evaluator = Evaluator()
        self.printer = Printer()

        # Load stdlib
        stdlib = StdLib()
        for name, member in inspect.getmembers(stdlib):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                self.env.set_func(name[1:], member)

        for line in self.config.prelude:
            result = self.handle_line(line)
            if result.status == 'error':
                raise ConfigurationError(f"prelude line failed: {line!r}\n{result.format_error()}", line)

    def register(self, name: str, proc: NativeProcedure):
        """Binds a host function; it is called with (argument, environment)."""
        self.env.set_func(name, proc)

    def _format_error(self, e: Exception, line: str) -> tuple[str, Optional[Token]]:
        token = None
        match e:
            case SyntaxError():
                msg = f"SyntaxError: {e.msg}"
                if e.offset is not None:
                    token = {'line': 1, 'col': e.offset}
                    msg = f"{msg}\n{self._source_context(line, e.offset)}"
            case UndefinedFunction() as uf:
                msg = f"UndefinedFunction: no such function: {uf.name}"
            case UnsupportedOperator() as uo:
                msg = f"UnsupportedOperator: {uo.op}"
            case ZeroDivisionError():
                msg = "ArithmeticError: integer division by zero"
            case ArithmeticError():
                msg = f"ArithmeticError: {e}"
            case ConfigurationError():
                msg = f"ConfigurationError: {e}"
            case RecursionError():
                msg = "RecursionError: expression nested too deeply"
            case _:
                msg = f"InternalError: {e}"
        return msg, token

    def _source_context(self, line: str, col: int) -> str:
        content = line.rstrip("\n")
        caret = " " * max(col - 1, 0)
        return f"> {content}\n  {caret}^"

    def handle_line(self, line: str) -> ExecutionResult:
        """The main entry point to run one line."""
        side_effects: List[Dict] = []
        logger.debug("line: %r", line)
        try:
            ast, rest = read(line)
            logger.debug("parsed: %r (unparsed %r)", ast, rest)
            value = evaluate(ast, self.env, self.evaluator)
            text = self.printer.format_result(value, self.env)
        except Exception as e:
            err_msg, err_token = self._format_error(e, line)
            logger.info("line failed: %s", err_msg.splitlines()[0])
            side_effects.append({'topics': ['stderr'], 'message': err_msg})
            return ExecutionResult(
                status='error',
                error_message=err_msg,
                error_token=err_token,
                side_effects=side_effects
            )

        if rest.strip() and self.config.warn_unparsed:
            side_effects.append({'topics': ['stderr'], 'message': f"warning: unparsed: {rest.strip()}"})

        return ExecutionResult(
            status='success',
            value=value,
            text=text,
            side_effects=side_effects
        )

    def handle_script(self, source_code: str) -> List[ExecutionResult]:
        """Runs each non-blank line in order, stopping after the first error."""
        results: List[ExecutionResult] = []
        for line in source_code.splitlines():
            if not line.strip():
                continue
            result = self.handle_line(line)
            results.append(result)
            if result.status == 'error':
                break
        return results
