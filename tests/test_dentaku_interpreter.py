import pytest

from dentaku.dentaku_interpreter import Evaluator, evaluate, _trunc_div
from dentaku.dentaku_parser import read
from dentaku.dentaku_datatypes import (
    Environment, Number, Symbol, UnaryOp, BinaryOp, Assignment, FunctionCall,
    UndefinedFunction, UnsupportedOperator
)


@pytest.fixture
def env():
    return Environment()


def run(text, env):
    ast, _ = read(text)
    return evaluate(ast, env)


ARITH_CASES = [
    ("2 + 3 * 4", 14),
    ("(2 + 3) * 4", 20),
    ("10 - 4 - 3", 3),
    ("7 / 2", 3),
    ("-7 / 2", -3),
    ("0b101 + 0x5 + 005 + 5", 20),
    ("-(2 + 3)", -5),
    ("+4", 4),
]


@pytest.mark.parametrize("text, expected", ARITH_CASES)
def test_arithmetic(env, text, expected):
    assert run(text, env) == Number(expected)


def test_base_prefixed_literals_evaluate_equal(env):
    values = [run(t, env) for t in ("0b101", "0x5", "005", "5")]
    assert values == [Number(5)] * 4


def test_trunc_div_rounds_toward_zero():
    assert _trunc_div(7, 2) == 3
    assert _trunc_div(-7, 2) == -3
    assert _trunc_div(7, -2) == -3
    assert _trunc_div(-7, -2) == 3


def test_division_by_zero_raises(env):
    with pytest.raises(ZeroDivisionError):
        run("1 / 0", env)
    assert isinstance(ZeroDivisionError(), ArithmeticError)


def test_free_variable_partial_evaluation(env):
    assert run("x + 1", env) == BinaryOp("+", Symbol("x"), Number(1))
    assert run("x * (2 + 3)", env) == BinaryOp("*", Symbol("x"), Number(5))


def test_partial_evaluation_builds_new_nodes(env):
    env.set("y", 2)
    ast, _ = read("x + y")
    result = Evaluator().eval(ast, env)
    assert result == BinaryOp("+", Symbol("x"), Number(2))
    assert ast == BinaryOp("+", Symbol("x"), Symbol("y"))


def test_unary_minus_on_free_variable_drops_sign(env):
    # Documented quirk: the negation is lost when the operand stays symbolic.
    assert run("-x", env) == Symbol("x")


def test_unsupported_operators_raise(env):
    ev = Evaluator()
    with pytest.raises(UnsupportedOperator):
        ev.eval(UnaryOp("!", Number(1)), env)
    with pytest.raises(UnsupportedOperator):
        ev.eval(BinaryOp("%", Number(1), Number(2)), env)


def test_assignment_returns_value_and_stores_expression(env):
    assert run("a = 1", env) == Number(1)
    assert run("a = a + 1", env) == Number(2)
    assert env.lookup("a") == BinaryOp("+", Symbol("a"), Number(1))


def test_self_reference_guard_evaluates_to_one(env):
    run("a = 1", env)
    run("a = a + 1", env)
    assert run("a", env) == Number(1)
    # Repeated evaluation does not accumulate.
    assert run("a", env) == Number(1)
    assert env.lookup("a") == BinaryOp("+", Symbol("a"), Number(1))


def test_lazy_binding_tracks_later_changes(env):
    run("b = 2", env)
    run("c = b * 10", env)
    assert run("c", env) == Number(20)
    run("b = 3", env)
    assert run("c", env) == Number(30)


def test_mutual_reference_terminates(env):
    run("p = q + 1", env)
    run("q = p + 1", env)
    # p -> q + 1 -> (p + 1) + 1 with the inner p zeroed
    assert run("p", env) == Number(2)


def test_guard_restores_binding_after_failure(env):
    # With d unbound the right side only partially evaluates, so no error yet.
    assert run("d = d / 0", env) == BinaryOp("/", Symbol("d"), Number(0))
    with pytest.raises(ZeroDivisionError):
        run("d", env)
    assert env.lookup("d") == BinaryOp("/", Symbol("d"), Number(0))


def test_undef_deletes_binding(env):
    run("x = 5", env)
    assert run("x = undef", env) == Symbol("undef")
    assert "x" not in env
    assert run("x", env) == Symbol("x")


def test_undef_on_unbound_name_is_harmless(env):
    assert run("never = undef", env) == Symbol("undef")
    assert "never" not in env


def test_print_base_assignable_with_ordinary_syntax(env):
    run(".printBase = 16", env)
    assert env.value(".printBase") == (16, True)


def test_underscore_records_last_input(env):
    run("1 + 2", env)
    assert env.lookup("_") == BinaryOp("+", Number(1), Number(2))
    assert run("_", env) == Number(3)
    # Evaluating `_` itself does not overwrite it.
    assert env.lookup("_") == BinaryOp("+", Number(1), Number(2))


def test_underscore_records_input_not_value(env):
    run("x = 4", env)
    run("x * 2", env)
    run("x = 5", env)
    assert run("_", env) == Number(5)
    assert env.lookup("_") == Assignment(Symbol("x"), Number(5))


def test_function_call_receives_unevaluated_argument(env):
    seen = []

    def capture(arg, e):
        seen.append(arg)
        return Evaluator().eval(arg, e)

    env.set_func("capture", capture)
    env.set("k", 3)
    assert run("capture(k * 2)", env) == Number(6)
    assert seen == [BinaryOp("*", Symbol("k"), Number(2))]


def test_undefined_function_raises(env):
    with pytest.raises(UndefinedFunction) as exc:
        run("foo(1)", env)
    assert exc.value.name == "foo"


def test_nested_function_call_result_used_in_arithmetic(env):
    env.set_func("double", lambda arg, e: Number(Evaluator().eval(arg, e).value * 2))
    assert run("double(3) + 1", env) == Number(7)
    assert Evaluator().eval(FunctionCall(Symbol("double"), Number(4)), env) == Number(8)
