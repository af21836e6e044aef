"""
Hina Python Implementation

A tree-walking evaluator for the Hina expression language. Programs arrive
as JSON trees of kind-tagged nodes and are evaluated directly, inspecting
each node only when evaluation reaches it.
"""

from __future__ import annotations

#==============================================================================
# Terms
#==============================================================================

from pyhina.types import (
    Node,
    Location,
    # Values
    Value,
    StrVal,
    IntVal,
    BoolVal,
    TupleVal,
    ClosureVal,
    # Expressions
    Expr,
    Term,
    PrintExpr,
    BinaryExpr,
    LetExpr,
    VarExpr,
    IfExpr,
    CallExpr,
    ProjectionExpr,
    TupleExpr,
    FunctionExpr,
    # Constructors and helpers
    str_val,
    int_val,
    bool_val,
    tuple_val,
    closure_val,
    format_value,
    values_equal,
)

#==============================================================================
# Environment
#==============================================================================

from pyhina.env import (
    Environment,
    copy_merge,
    empty_env,
)

#==============================================================================
# Errors
#==============================================================================

from pyhina.errors import (
    ErrorCodes,
    HinaError,
    ValidationError,
    ValidationResult,
)

#==============================================================================
# Validation and Evaluation
#==============================================================================

from pyhina.validator import (
    inspect_node,
    validate_tree,
)

from pyhina.evaluator import (
    EvalOptions,
    Evaluator,
    evaluate,
    evaluate_program,
)

__version__ = "0.1.0"

__all__ = [
    "Node", "Location",
    "Value", "StrVal", "IntVal", "BoolVal", "TupleVal", "ClosureVal",
    "Expr", "Term", "PrintExpr", "BinaryExpr", "LetExpr", "VarExpr", "IfExpr",
    "CallExpr", "ProjectionExpr", "TupleExpr", "FunctionExpr",
    "str_val", "int_val", "bool_val", "tuple_val", "closure_val",
    "format_value", "values_equal",
    "Environment", "copy_merge", "empty_env",
    "ErrorCodes", "HinaError", "ValidationError", "ValidationResult",
    "inspect_node", "validate_tree",
    "EvalOptions", "Evaluator", "evaluate", "evaluate_program",
]
