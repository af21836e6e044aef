import io
import sys

import pytest

from pyhina.env import empty_env
from pyhina.errors import ErrorCodes, HinaError
from pyhina.evaluator import EvalOptions, Evaluator, evaluate, evaluate_program
from pyhina.types import (
    ClosureVal,
    Location,
    bool_val,
    int_val,
    str_val,
    tuple_val,
)

from builders import (
    Bin, Bool, Call, First, Fn, If, Int, Let, Print, Second, Str, Tup, Var,
    factorial, fibonacci, program, summation,
)


def run(node, **options):
    """Evaluate a node in a fresh environment, capturing Print output"""
    out = io.StringIO()
    value = evaluate(node, options=EvalOptions(output=out, **options))
    return value, out.getvalue()


def raises(node, code, **options):
    with pytest.raises(HinaError) as exc:
        run(node, **options)
    assert exc.value.code == code
    return exc.value


class TestLiteralsAndOperators:
    def test_literals_evaluate_to_themselves(self):
        assert run(Int(3))[0] == int_val(3)
        assert run(Str("s"))[0] == str_val("s")
        assert run(Bool(True))[0] == bool_val(True)

    @pytest.mark.parametrize("a, b", [(1, 2), (-10, 4), (0, 0)])
    def test_add_integers(self, a, b):
        assert run(Bin("Add", Int(a), Int(b)))[0] == int_val(a + b)

    def test_add_string_and_integer(self):
        assert run(Bin("Add", Str("x"), Int(5)))[0] == str_val("x5")

    def test_divide_by_zero(self):
        raises(Bin("Div", Int(1), Int(0)), ErrorCodes.DIVISION_BY_ZERO)

    def test_eq_on_identical_and_different_variants(self):
        assert run(Bin("Eq", Tup(Int(1), Str("a")), Tup(Int(1), Str("a"))))[0] == bool_val(True)
        assert run(Bin("Eq", Int(1), Bool(True)))[0] == bool_val(False)

    def test_unknown_operator_after_operands(self):
        out = io.StringIO()
        with pytest.raises(HinaError) as exc:
            evaluate(Bin("Pow", Print(Int(1)), Int(2)), options=EvalOptions(output=out))
        assert exc.value.code == ErrorCodes.UNKNOWN_OPERATOR
        assert out.getvalue() == "1\n"

    def test_operands_evaluate_left_to_right(self):
        value, out = run(Bin("Add", Print(Int(1)), Print(Int(2))))
        assert value == int_val(3)
        assert out == "1\n2\n"

    def test_logical_operators_do_not_short_circuit(self):
        value, out = run(Bin("Or", Bool(True), Print(Bool(False))))
        assert value == bool_val(True)
        assert out == "false\n"


class TestLetAndVar:
    def test_let_then_var(self):
        assert run(Let("x", Int(5), Var("x")))[0] == int_val(5)

    def test_rebinding_overwrites(self):
        assert run(Let("x", Int(1), Let("x", Int(2), Var("x"))))[0] == int_val(2)

    def test_undeclared_variable(self):
        err = raises(Var("nope"), ErrorCodes.UNDECLARED_VARIABLE)
        assert "nope" in str(err)

    def test_let_binds_the_expression_not_its_value(self):
        value, out = run(Let("x", Print(Int(1)), Bin("Add", Var("x"), Var("x"))))
        assert value == int_val(2)
        assert out == "1\n1\n"

    def test_unused_binding_is_never_evaluated(self):
        value, out = run(Let("x", Print(Int(1)), Int(0)))
        assert value == int_val(0)
        assert out == ""

    def test_binding_is_re_evaluated_in_the_current_environment(self):
        node = Let("y", Int(1), Let("x", Bin("Add", Var("y"), Int(10)), Let("y", Int(5), Var("x"))))
        assert run(node)[0] == int_val(15)

    def test_bindings_outlive_their_let(self):
        # flat environment: nothing is restored once the inner Let finishes
        node = Tup(Let("x", Int(1), Var("x")), Var("x"))
        assert run(node)[0] == tuple_val(int_val(1), int_val(1))

    def test_let_returns_next_result_and_mutates_env(self):
        env = empty_env()
        assert evaluate(Let("k", Int(4), Str("done")), env) == str_val("done")
        assert env.get("k") == Int(4)

    def test_self_referential_binding_hits_the_depth_limit(self):
        node = Let("x", Int(1), Let("x", Bin("Add", Var("x"), Int(1)), Var("x")))
        raises(node, ErrorCodes.RECURSION_LIMIT, max_depth=50)


class TestTuplesAndIf:
    def test_projections(self):
        pair = Tup(Int(1), Int(2))
        assert run(First(pair))[0] == int_val(1)
        assert run(Second(pair))[0] == int_val(2)

    def test_projection_of_non_tuple(self):
        raises(First(Int(1)), ErrorCodes.TYPE_MISMATCH)
        raises(Second(Str("x")), ErrorCodes.TYPE_MISMATCH)

    def test_tuple_errors_propagate(self):
        raises(Tup(Int(1), Var("missing")), ErrorCodes.UNDECLARED_VARIABLE)
        raises(Tup(Bin("Div", Int(1), Int(0)), Int(1)), ErrorCodes.DIVISION_BY_ZERO)

    def test_tuple_components_evaluate_in_order(self):
        value, out = run(Tup(Print(Str("a")), Print(Str("b"))))
        assert value == tuple_val(str_val("a"), str_val("b"))
        assert out == "a\nb\n"

    def test_if_selects_branch(self):
        assert run(If(Bool(True), Int(1), Int(2)))[0] == int_val(1)
        assert run(If(Bool(False), Int(1), Int(2)))[0] == int_val(2)

    def test_if_condition_must_be_bool(self):
        raises(If(Int(1), Int(1), Int(2)), ErrorCodes.TYPE_MISMATCH)

    def test_only_the_selected_branch_is_evaluated_or_even_inspected(self):
        value, out = run(If(Bool(True), Int(1), {"kind": "Broken"}))
        assert value == int_val(1)
        value, out = run(If(Bool(False), Print(Int(1)), Int(2)))
        assert out == ""


class TestFunctions:
    def test_function_literal_is_a_closure_over_the_current_env(self):
        env = empty_env()
        value = evaluate(Fn(["a"], Var("a")), env)
        assert isinstance(value, ClosureVal)
        assert value.parameters == ("a",)
        assert value.env is env

    def test_call(self):
        node = Let("inc", Fn(["n"], Bin("Add", Var("n"), Int(1))), Call(Var("inc"), Int(41)))
        assert run(node)[0] == int_val(42)

    def test_calling_a_non_function(self):
        raises(Call(Int(1)), ErrorCodes.TYPE_MISMATCH)

    def test_arity_mismatch(self):
        node = Let("f", Fn(["a", "b"], Var("a")), Call(Var("f"), Int(1)))
        raises(node, ErrorCodes.ARITY_MISMATCH)

    def test_arity_is_checked_before_arguments_run(self):
        node = Let("f", Fn([], Int(0)), Call(Var("f"), Print(Int(1))))
        out = io.StringIO()
        with pytest.raises(HinaError):
            evaluate(node, options=EvalOptions(output=out))
        assert out.getvalue() == ""

    def test_duplicate_parameter(self):
        node = Let("f", Fn(["a", "a"], Var("a")), Call(Var("f"), Int(1), Int(2)))
        raises(node, ErrorCodes.DUPLICATE_PARAMETER)

    def test_arguments_are_evaluated_once_in_the_caller(self):
        node = Let("twice", Fn(["v"], Bin("Add", Var("v"), Var("v"))), Call(Var("twice"), Print(Int(3))))
        value, out = run(node)
        assert value == int_val(6)
        assert out == "3\n"

    def test_factorial(self):
        assert run(factorial(5))[0] == int_val(120)

    def test_fibonacci(self):
        assert run(fibonacci(10))[0] == int_val(55)

    def test_closure_keeps_captured_bindings(self):
        add = Fn(["x"], Fn(["y"], Bin("Add", Var("x"), Var("y"))))
        node = Let("add", add, Call(Call(Var("add"), Int(5)), Int(3)))
        assert run(node)[0] == int_val(8)

    def test_captured_bindings_shadow_the_callers(self):
        node = Let(
            "mk", Fn(["x"], Fn([], Var("x"))),
            Let(
                "h", Fn(["f", "x"], Call(Var("f"))),
                Call(Var("h"), Call(Var("mk"), Int(1)), Int(2)),
            ),
        )
        assert run(node)[0] == int_val(1)

    def test_caller_bindings_leak_into_the_callee(self):
        # the closure made by mk() never saw y; it is found in h's activation
        node = Let(
            "mk", Fn([], Fn([], Var("y"))),
            Let(
                "h", Fn(["k", "y"], Call(Var("k"))),
                Call(Var("h"), Call(Var("mk")), Int(9)),
            ),
        )
        assert run(node)[0] == int_val(9)

    def test_parameters_do_not_escape_the_call(self):
        node = Let("f", Fn(["p"], Var("p")), Tup(Call(Var("f"), Int(1)), Var("p")))
        raises(node, ErrorCodes.UNDECLARED_VARIABLE)

    def test_same_closure_can_be_called_repeatedly(self):
        node = Let(
            "apply2", Fn(["g"], Tup(Call(Var("g"), Int(1)), Call(Var("g"), Int(2)))),
            Call(Var("apply2"), Fn(["n"], Bin("Mul", Var("n"), Int(10)))),
        )
        assert run(node)[0] == tuple_val(int_val(10), int_val(20))

    def test_closure_value_equals_itself(self):
        node = Let("same", Fn(["g"], Bin("Eq", Var("g"), Var("g"))), Call(Var("same"), Fn([], Int(1))))
        assert run(node)[0] == bool_val(True)

    def test_print_returns_its_value(self):
        value, out = run(Print(Tup(Int(1), Fn([], Int(0)))))
        assert isinstance(value.second, ClosureVal)
        assert out == "(1, <#closure>)\n"


class TestLimits:
    def test_unbounded_recursion_is_reported(self):
        loop = Let("loop", Fn(["n"], Call(Var("loop"), Var("n"))), Call(Var("loop"), Int(1)))
        err = raises(loop, ErrorCodes.RECURSION_LIMIT, max_depth=60)
        assert "60" in err.message

    def test_step_budget(self):
        raises(factorial(5), ErrorCodes.NON_TERMINATION, max_steps=10)

    def test_limits_reset_between_evaluations(self):
        evaluator = Evaluator(EvalOptions(max_steps=500, output=io.StringIO()))
        for _ in range(3):
            assert evaluator.evaluate(factorial(5), empty_env()) == int_val(120)

    @pytest.mark.parametrize("n", [100, 1000])
    def test_deep_linear_recursion_with_default_options(self, n):
        assert evaluate_program(program(summation(n))) == int_val(n * (n + 1) // 2)

    def test_long_running_program_has_no_default_step_budget(self):
        assert evaluate_program(program(fibonacci(20))) == int_val(6765)

    def test_unbounded_recursion_with_default_options(self):
        loop = Let("loop", Fn(["n"], Call(Var("loop"), Var("n"))), Call(Var("loop"), Int(1)))
        err = raises(loop, ErrorCodes.RECURSION_LIMIT)
        assert str(EvalOptions().max_depth) in err.message

    def test_depth_limit_above_the_interpreter_default(self):
        previous = sys.getrecursionlimit()
        node = summation(2000)
        value = evaluate(node, options=EvalOptions(max_depth=previous * 10))
        assert value == int_val(2001000)
        assert sys.getrecursionlimit() == previous


class TestProgramEntry:
    def test_program_runs_and_prints(self, capsys):
        value = evaluate_program(program(Print(Bin("Add", Str("fact = "), factorial(5)))))
        assert value == str_val("fact = 120")
        assert capsys.readouterr().out == "fact = 120\n"

    @pytest.mark.parametrize("tree", [{}, {"expression": {}}, {"expression": "x"}, None, []])
    def test_empty_program(self, tree):
        with pytest.raises(HinaError) as exc:
            evaluate_program(tree)
        assert exc.value.code == ErrorCodes.EMPTY_PROGRAM

    def test_first_error_wins_and_output_is_kept(self):
        out = io.StringIO()
        tree = program(Tup(Print(Int(1)), Tup(Var("missing"), Print(Int(2)))))
        with pytest.raises(HinaError) as exc:
            evaluate_program(tree, EvalOptions(output=out))
        assert exc.value.code == ErrorCodes.UNDECLARED_VARIABLE
        assert out.getvalue() == "1\n"

    def test_errors_carry_the_innermost_location(self):
        var = Var("missing")
        var["location"] = {"start": 10, "end": 17, "filename": "prog.rinha"}
        outer = Bin("Add", Int(1), var)
        outer["location"] = {"start": 0, "end": 17, "filename": "prog.rinha"}
        with pytest.raises(HinaError) as exc:
            evaluate_program(program(outer))
        assert exc.value.location == Location(10, 17, "prog.rinha")
        assert str(exc.value).endswith("at prog.rinha:10-17")
        assert exc.value.to_dict()["code"] == "UndeclaredVariable"

    def test_malformed_nodes_surface_at_evaluation(self):
        with pytest.raises(HinaError) as exc:
            evaluate_program(program(Bin("Add", Int(1), {"kind": "Int"})))
        assert exc.value.code == ErrorCodes.MISSING_FIELD
