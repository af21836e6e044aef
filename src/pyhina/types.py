"""
Hina Term Definitions for Python
Implements the Value and Expression domains of the Hina evaluator

This module provides frozen dataclasses for immutable term representations,
using Union types with Literal 'kind' fields for pattern matching.

Value terms hold already-evaluated payloads. Expression terms hold the raw,
unevaluated JSON sub-nodes they were inspected from; those sub-nodes are only
turned into terms when the evaluator descends into them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    Literal,
    Optional,
    Tuple,
    TypeAlias,
    Union,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from pyhina.env import Environment


# Raw JSON node as produced by the upstream parser
Node: TypeAlias = Dict[str, Any]


#==============================================================================
# Source Locations
#==============================================================================

@dataclass(frozen=True)
class Location:
    """Source span attached to a raw node"""
    start: int
    end: int
    filename: str

    def __str__(self) -> str:
        return f"{self.filename}:{self.start}-{self.end}"


#==============================================================================
# Value Domain (v - evaluated terms)
#==============================================================================

@dataclass(frozen=True)
class StrVal:
    """String value"""
    kind: Literal["Str"]
    value: str


@dataclass(frozen=True)
class IntVal:
    """Integer value"""
    kind: Literal["Int"]
    value: int


@dataclass(frozen=True)
class BoolVal:
    """Boolean value"""
    kind: Literal["Bool"]
    value: bool


@dataclass(frozen=True)
class TupleVal:
    """Evaluated pair"""
    kind: Literal["Tuple"]
    first: Value
    second: Value


@dataclass(frozen=True, eq=False)
class ClosureVal:
    """
    Function value.

    The body stays a raw node. `env` is a reference to the environment that
    was active when the function literal was evaluated, not a copy of it.
    Closures compare equal only to themselves.
    """
    kind: Literal["Function"]
    parameters: Tuple[str, ...]
    body: Node
    env: "Environment"

    def __repr__(self) -> str:
        params = ", ".join(self.parameters)
        return f"ClosureVal(({params}))"


Value: TypeAlias = Union[
    StrVal,
    IntVal,
    BoolVal,
    TupleVal,
    ClosureVal,
]


#==============================================================================
# Expression Domain (e - unevaluated terms)
#==============================================================================

@dataclass(frozen=True)
class PrintExpr:
    """Print the value of a sub-expression and pass it through"""
    kind: Literal["Print"]
    value: Node
    location: Optional[Location] = None


@dataclass(frozen=True)
class BinaryExpr:
    """Binary operation; `op` is the operator tag, e.g. "Add" or "Lte" """
    kind: Literal["Binary"]
    op: str
    lhs: Node
    rhs: Node
    location: Optional[Location] = None


@dataclass(frozen=True)
class LetExpr:
    """Bind `name` to the raw `value` node, then evaluate `next`"""
    kind: Literal["Let"]
    name: str
    value: Node
    next: Node
    location: Optional[Location] = None


@dataclass(frozen=True)
class VarExpr:
    """Variable reference"""
    kind: Literal["Var"]
    name: str
    location: Optional[Location] = None


@dataclass(frozen=True)
class IfExpr:
    """Conditional; only the selected branch is evaluated"""
    kind: Literal["If"]
    condition: Node
    then: Node
    otherwise: Node
    location: Optional[Location] = None


@dataclass(frozen=True)
class CallExpr:
    """Function application"""
    kind: Literal["Call"]
    callee: Node
    arguments: Tuple[Node, ...]
    location: Optional[Location] = None


@dataclass(frozen=True)
class ProjectionExpr:
    """First/Second projection of a tuple"""
    kind: Literal["First", "Second"]
    value: Node
    location: Optional[Location] = None


@dataclass(frozen=True)
class TupleExpr:
    """Tuple construction before its components are evaluated"""
    kind: Literal["Tuple"]
    first: Node
    second: Node
    location: Optional[Location] = None


@dataclass(frozen=True)
class FunctionExpr:
    """Function literal before it is closed over an environment"""
    kind: Literal["Function"]
    parameters: Tuple[str, ...]
    body: Node
    location: Optional[Location] = None


Expr: TypeAlias = Union[
    PrintExpr,
    BinaryExpr,
    LetExpr,
    VarExpr,
    IfExpr,
    CallExpr,
    ProjectionExpr,
    TupleExpr,
    FunctionExpr,
]

Term: TypeAlias = Union[Value, Expr]

# What an environment slot can hold: a raw node bound by Let, or a value
# bound as a call argument
Bound: TypeAlias = Union[Node, Value]


#==============================================================================
# Value Constructors
#==============================================================================

def str_val(value: str) -> StrVal:
    """Create a string value"""
    return StrVal(kind="Str", value=value)


def int_val(value: int) -> IntVal:
    """Create an integer value"""
    return IntVal(kind="Int", value=value)


def bool_val(value: bool) -> BoolVal:
    """Create a boolean value"""
    return BoolVal(kind="Bool", value=value)


def tuple_val(first: Value, second: Value) -> TupleVal:
    """Create a tuple value"""
    return TupleVal(kind="Tuple", first=first, second=second)


def closure_val(parameters: Tuple[str, ...], body: Node, env: "Environment") -> ClosureVal:
    """Create a closure value"""
    return ClosureVal(kind="Function", parameters=tuple(parameters), body=body, env=env)


#==============================================================================
# Type Guards and Utility Functions
#==============================================================================

VALUE_TYPES = (StrVal, IntVal, BoolVal, TupleVal, ClosureVal)


def is_value(term: Any) -> bool:
    """Check if a term is already evaluated"""
    return isinstance(term, VALUE_TYPES)


def is_str(v: Value) -> bool:
    """Check if value is a string"""
    return isinstance(v, StrVal)


def is_int(v: Value) -> bool:
    """Check if value is an integer"""
    return isinstance(v, IntVal)


def is_bool(v: Value) -> bool:
    """Check if value is a boolean"""
    return isinstance(v, BoolVal)


def is_tuple(v: Value) -> bool:
    """Check if value is a tuple"""
    return isinstance(v, TupleVal)


def is_closure(v: Value) -> bool:
    """Check if value is a closure"""
    return isinstance(v, ClosureVal)


def values_equal(a: Value, b: Value) -> bool:
    """
    Structural equality: same variant and same payload.

    Dataclass equality already refuses to compare instances of different
    classes, so Int(1) and Bool(True) are never equal.
    """
    return a == b


def format_value(v: Value) -> str:
    """Textual form of a value, as written by Print and used by string Add"""
    if isinstance(v, StrVal):
        return v.value
    if isinstance(v, BoolVal):
        return "true" if v.value else "false"
    if isinstance(v, IntVal):
        return str(v.value)
    if isinstance(v, TupleVal):
        return f"({format_value(v.first)}, {format_value(v.second)})"
    if isinstance(v, ClosureVal):
        return "<#closure>"
    raise AssertionError(f"Unexpected value: {v!r}")
