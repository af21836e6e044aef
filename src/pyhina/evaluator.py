"""
Hina Evaluator
Implements big-step evaluation: rho |- e ⇓ v

Programs are trees of raw JSON nodes. The evaluator inspects each node only
when it reaches it, dispatches on the resulting term and recurses into the
raw sub-nodes. Let bindings are stored unevaluated and re-evaluated on every
access (call-by-name); call arguments are evaluated once in the caller's
environment (call-by-value).
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any, Optional, TextIO, Union

from pyhina.env import Environment, copy_merge, empty_env
from pyhina.errors import HinaError
from pyhina.operators import apply_operator
from pyhina.types import (
    BinaryExpr,
    Bound,
    CallExpr,
    FunctionExpr,
    IfExpr,
    LetExpr,
    Node,
    PrintExpr,
    ProjectionExpr,
    TupleExpr,
    Value,
    VarExpr,
    closure_val,
    format_value,
    is_bool,
    is_closure,
    is_tuple,
    is_value,
    tuple_val,
)
from pyhina.validator import inspect_node

logger = logging.getLogger(__name__)

# Interpreter frames used per level of evaluation depth (_eval, the _eval_*
# handler and the argument comprehension of a call)
FRAMES_PER_LEVEL = 3


#==============================================================================
# Evaluation Options
#==============================================================================

@dataclass
class EvalOptions:
    """Options for expression evaluation"""
    max_depth: int = 10_000
    max_steps: Optional[int] = None
    trace: bool = False
    output: Optional[TextIO] = None


#==============================================================================
# Evaluation Context
#==============================================================================

@dataclass
class EvalContext:
    """Internal evaluation state for tracking depth, steps and configuration"""
    steps: int = 0
    depth: int = 0
    max_steps: Optional[int] = None
    max_depth: int = 10_000
    trace: bool = False
    output: Optional[TextIO] = None


#==============================================================================
# Evaluator Class
#==============================================================================

class Evaluator:
    """
    Recursive evaluator for Hina expression trees.

    The evaluator implements the following rules:
    - E-Lit:   rho |- lit(v) ⇓ v
    - E-Let:   rho[x:e1] |- e2 ⇓ v  ⇒  rho |- let(x, e1, e2) ⇓ v
    - E-Var:   rho(x) = e, rho |- e ⇓ v  ⇒  rho |- var(x) ⇓ v
    - E-Fn:    rho |- fn(params, body) ⇓ ⟨params, body, rho⟩
    - E-Call:  rho |- f ⇓ ⟨params, body, rho'⟩, rho |- args[i] ⇓ vi,
               [params:vi] ∪ rho' ∪ rho |- body ⇓ v  ⇒  rho |- f(args) ⇓ v

    Environments are flat and mutable (see pyhina.env): a Let inside a branch
    stays visible after the branch, and a call sees the caller's bindings for
    any name that is neither a parameter nor captured.
    """

    def __init__(self, options: Optional[EvalOptions] = None):
        """
        Initialize the evaluator.

        Args:
            options: Default evaluation options (max_depth, max_steps, trace, output)
        """
        self._options = options or EvalOptions()

    @property
    def options(self) -> EvalOptions:
        """Get the default evaluation options"""
        return self._options

    #---------------------------------------------------------------------------
    # Public Evaluation API
    #---------------------------------------------------------------------------

    def evaluate(
        self,
        node: Union[Node, Value],
        env: Environment,
        options: Optional[EvalOptions] = None
    ) -> Value:
        """
        Evaluate a node: rho |- e ⇓ v

        Args:
            node: Raw node (or an already-evaluated value) to evaluate
            env: Environment for variable lookups; mutated by Let
            options: Overrides the evaluator's default options

        Returns:
            Result value

        Raises:
            HinaError: On the first validation or evaluation error
        """
        opts = options or self._options
        state = EvalContext(
            max_steps=opts.max_steps,
            max_depth=opts.max_depth,
            trace=opts.trace,
            output=opts.output,
        )
        previous_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(previous_limit, opts.max_depth * FRAMES_PER_LEVEL + 1000))
        try:
            return self._eval(node, env, state)
        except RecursionError:
            raise HinaError.stack_exhausted(state.max_depth) from None
        finally:
            sys.setrecursionlimit(previous_limit)

    def evaluate_program(
        self,
        tree: Any,
        env: Optional[Environment] = None,
        options: Optional[EvalOptions] = None
    ) -> Value:
        """
        Evaluate a whole program tree once.

        Args:
            tree: Root container holding the program under "expression"
            env: Root environment (a fresh one is created if omitted)
            options: Overrides the evaluator's default options

        Returns:
            Final value of the program expression

        Raises:
            HinaError: EmptyProgram, or any evaluation error
        """
        expression = tree.get("expression") if isinstance(tree, dict) else None
        if not isinstance(expression, dict) or not expression:
            raise HinaError.empty_program()

        if env is None:
            env = empty_env()
        if isinstance(tree, dict) and tree.get("name"):
            logger.debug(f"Evaluating program {tree['name']}")
        return self.evaluate(expression, env, options)

    #---------------------------------------------------------------------------
    # Dispatch
    #---------------------------------------------------------------------------

    def _eval(self, item: Bound, env: Environment, state: EvalContext) -> Value:
        """
        Main dispatch based on term kind.

        Values evaluate to themselves; raw nodes are inspected first.
        """
        self._check_steps(state)

        state.depth += 1
        try:
            if state.depth > state.max_depth:
                raise HinaError.recursion_limit(state.max_depth)

            if is_value(item):
                return item

            term = inspect_node(item)
            if is_value(term):
                return term

            if state.trace:
                logger.debug(f"{'  ' * (state.depth - 1)}eval {term.kind}")

            try:
                if isinstance(term, BinaryExpr):
                    return self._eval_binary(term, env, state)
                elif isinstance(term, VarExpr):
                    return self._eval_var(term, env, state)
                elif isinstance(term, LetExpr):
                    return self._eval_let(term, env, state)
                elif isinstance(term, IfExpr):
                    return self._eval_if(term, env, state)
                elif isinstance(term, CallExpr):
                    return self._eval_call(term, env, state)
                elif isinstance(term, FunctionExpr):
                    return closure_val(term.parameters, term.body, env)
                elif isinstance(term, TupleExpr):
                    return self._eval_tuple(term, env, state)
                elif isinstance(term, ProjectionExpr):
                    return self._eval_projection(term, env, state)
                elif isinstance(term, PrintExpr):
                    return self._eval_print(term, env, state)
                raise AssertionError(f"Unexpected term: {term!r}")
            except HinaError as e:
                raise e.with_location(term.location)
        finally:
            state.depth -= 1

    #---------------------------------------------------------------------------
    # Expression Evaluation
    #---------------------------------------------------------------------------

    def _eval_print(self, expr: PrintExpr, env: Environment, state: EvalContext) -> Value:
        """Write the textual form of the value and pass the value through"""
        value = self._eval(expr.value, env, state)
        print(format_value(value), file=state.output or sys.stdout)
        return value

    def _eval_binary(self, expr: BinaryExpr, env: Environment, state: EvalContext) -> Value:
        """Both operands are evaluated, left first, before the operator is applied"""
        lhs = self._eval(expr.lhs, env, state)
        rhs = self._eval(expr.rhs, env, state)
        return apply_operator(expr.op, lhs, rhs)

    def _eval_let(self, expr: LetExpr, env: Environment, state: EvalContext) -> Value:
        """
        E-Let: the raw value node is bound, not its result.

        Any earlier binding of the same name is overwritten and is not
        restored afterwards.
        """
        env.set(expr.name, expr.value)
        return self._eval(expr.next, env, state)

    def _eval_var(self, expr: VarExpr, env: Environment, state: EvalContext) -> Value:
        """E-Var: re-evaluate whatever is bound, in the current environment"""
        bound = env.get(expr.name)
        if bound is None:
            raise HinaError.undeclared_variable(expr.name)
        return self._eval(bound, env, state)

    def _eval_tuple(self, expr: TupleExpr, env: Environment, state: EvalContext) -> Value:
        first = self._eval(expr.first, env, state)
        second = self._eval(expr.second, env, state)
        return tuple_val(first, second)

    def _eval_projection(self, expr: ProjectionExpr, env: Environment, state: EvalContext) -> Value:
        value = self._eval(expr.value, env, state)
        if not is_tuple(value):
            raise HinaError.type_mismatch(expr.kind, "Tuple", value.kind)
        return value.first if expr.kind == "First" else value.second

    def _eval_if(self, expr: IfExpr, env: Environment, state: EvalContext) -> Value:
        """
        E-IfTrue / E-IfFalse: only the selected branch is evaluated.
        """
        cond = self._eval(expr.condition, env, state)
        if not is_bool(cond):
            raise HinaError.type_mismatch("If condition", "Bool", cond.kind)
        branch = expr.then if cond.value else expr.otherwise
        return self._eval(branch, env, state)

    def _eval_call(self, expr: CallExpr, env: Environment, state: EvalContext) -> Value:
        """
        E-Call: each call gets its own activation environment.

        Parameters are bound first, then the captured environment and then the
        caller's environment are merged in without overwriting, so parameters
        shadow both and captured bindings shadow the caller's.
        """
        callee = self._eval(expr.callee, env, state)
        if not is_closure(callee):
            raise HinaError.type_mismatch("Call", "Function", callee.kind)

        if len(callee.parameters) != len(expr.arguments):
            raise HinaError.arity_mismatch(len(callee.parameters), len(expr.arguments))

        args = [self._eval(arg, env, state) for arg in expr.arguments]

        if state.trace:
            params = ", ".join(callee.parameters)
            logger.debug(f"{'  ' * state.depth}call ({params}) with {len(args)} arguments")

        activation = empty_env()
        for name, value in zip(callee.parameters, args):
            if name in activation:
                raise HinaError.duplicate_parameter(name)
            activation.set(name, value)
        copy_merge(callee.env, activation)
        copy_merge(env, activation)

        return self._eval(callee.body, activation, state)

    #---------------------------------------------------------------------------
    # Limits
    #---------------------------------------------------------------------------

    def _check_steps(self, state: EvalContext) -> None:
        """
        Check if step limit has been exceeded.

        Args:
            state: Evaluation context

        Raises:
            HinaError: If a step budget is set and exceeded
        """
        state.steps += 1
        if state.max_steps is not None and state.steps > state.max_steps:
            raise HinaError.non_termination(state.max_steps)


#==============================================================================
# Module-Level Convenience Functions
#==============================================================================

def evaluate(
    node: Union[Node, Value],
    env: Optional[Environment] = None,
    options: Optional[EvalOptions] = None
) -> Value:
    """Evaluate a single node in `env` (a fresh environment if omitted)"""
    return Evaluator(options).evaluate(node, env if env is not None else empty_env())


def evaluate_program(
    tree: Any,
    options: Optional[EvalOptions] = None,
    env: Optional[Environment] = None
) -> Value:
    """Evaluate a program tree with a fresh root environment"""
    return Evaluator(options).evaluate_program(tree, env)
