from dentaku.dentaku_datatypes import (
    Expression, Number, Symbol, UnaryOp, BinaryOp, Assignment, FunctionCall,
    Environment, UndefinedFunction, UnsupportedOperator, ConfigurationError
)
from dentaku.dentaku_parser import read
from dentaku.dentaku_interpreter import Evaluator, evaluate
from dentaku.dentaku_printer import Printer
from dentaku.dentaku_config import DentakuConfig, load_config
from dentaku.dentaku_runtime import LineRunner, ExecutionResult, StdLib
