# Hina Node Validator
# Structural inspection of raw JSON nodes into typed terms

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from pyhina.errors import (
    ErrorCodes,
    HinaError,
    ValidationError,
    ValidationResult,
    invalid_result,
    valid_result,
)
from pyhina.operators import OPERATORS
from pyhina.types import (
    BinaryExpr,
    CallExpr,
    FunctionExpr,
    IfExpr,
    LetExpr,
    Location,
    Node,
    PrintExpr,
    ProjectionExpr,
    Term,
    TupleExpr,
    VarExpr,
    bool_val,
    int_val,
    str_val,
)


#==============================================================================
# Primitive Validators
#==============================================================================

def validate_string(value: Any) -> bool:
    """Check if value is a string"""
    return isinstance(value, str)


def validate_int(value: Any) -> bool:
    """Check if value is an integer (JSON booleans excluded)"""
    return isinstance(value, int) and not isinstance(value, bool)


def validate_array(value: Any) -> bool:
    """Check if value is a list"""
    return isinstance(value, list)


def validate_object(value: Any) -> bool:
    """Check if value is a dict (object)"""
    return isinstance(value, dict)


#==============================================================================
# Field Access
#==============================================================================

def read_location(node: Node) -> Optional[Location]:
    """Read the optional source span of a node; malformed spans are ignored"""
    loc = node.get("location")
    if not validate_object(loc):
        return None
    start, end, filename = loc.get("start"), loc.get("end"), loc.get("filename")
    if validate_int(start) and validate_int(end) and validate_string(filename):
        return Location(start=start, end=end, filename=filename)
    return None


def _field(node: Node, kind: str, name: str) -> Any:
    if name not in node:
        raise HinaError.missing_field(kind, name)
    return node[name]


def _node_field(node: Node, kind: str, name: str) -> Node:
    value = _field(node, kind, name)
    if not validate_object(value):
        raise HinaError.malformed_node(kind, f"field '{name}' must be a node")
    return value


def _identifier(value: Any, kind: str, what: str) -> str:
    """Identifiers arrive wrapped as {"text": "..."}"""
    if not validate_object(value) or not validate_string(value.get("text")):
        raise HinaError.malformed_node(kind, f"{what} must be an object with a 'text' string")
    return value["text"]


#==============================================================================
# Per-Kind Inspectors
#==============================================================================

def _inspect_str(node: Node, loc: Optional[Location]) -> Term:
    value = _field(node, "Str", "value")
    if not validate_string(value):
        raise HinaError.malformed_node("Str", "value must be a string")
    return str_val(value)


def _inspect_int(node: Node, loc: Optional[Location]) -> Term:
    value = _field(node, "Int", "value")
    if not validate_int(value):
        raise HinaError.malformed_node("Int", "value must be an integer")
    return int_val(value)


def _inspect_bool(node: Node, loc: Optional[Location]) -> Term:
    value = _field(node, "Bool", "value")
    if not isinstance(value, bool):
        raise HinaError.malformed_node("Bool", "value must be a boolean")
    return bool_val(value)


def _inspect_print(node: Node, loc: Optional[Location]) -> Term:
    return PrintExpr(kind="Print", value=_node_field(node, "Print", "value"), location=loc)


def _inspect_binary(node: Node, loc: Optional[Location]) -> Term:
    op = _field(node, "Binary", "op")
    if not validate_string(op):
        raise HinaError.malformed_node("Binary", "op must be a string")
    return BinaryExpr(
        kind="Binary",
        op=op,
        lhs=_node_field(node, "Binary", "lhs"),
        rhs=_node_field(node, "Binary", "rhs"),
        location=loc,
    )


def _inspect_let(node: Node, loc: Optional[Location]) -> Term:
    return LetExpr(
        kind="Let",
        name=_identifier(_field(node, "Let", "name"), "Let", "name"),
        value=_node_field(node, "Let", "value"),
        next=_node_field(node, "Let", "next"),
        location=loc,
    )


def _inspect_var(node: Node, loc: Optional[Location]) -> Term:
    text = _field(node, "Var", "text")
    if not validate_string(text):
        raise HinaError.malformed_node("Var", "text must be a string")
    return VarExpr(kind="Var", name=text, location=loc)


def _inspect_tuple(node: Node, loc: Optional[Location]) -> Term:
    return TupleExpr(
        kind="Tuple",
        first=_node_field(node, "Tuple", "first"),
        second=_node_field(node, "Tuple", "second"),
        location=loc,
    )


def _inspect_projection(node: Node, loc: Optional[Location]) -> Term:
    kind = node["kind"]
    return ProjectionExpr(kind=kind, value=_node_field(node, kind, "value"), location=loc)


def _inspect_if(node: Node, loc: Optional[Location]) -> Term:
    return IfExpr(
        kind="If",
        condition=_node_field(node, "If", "condition"),
        then=_node_field(node, "If", "then"),
        otherwise=_node_field(node, "If", "otherwise"),
        location=loc,
    )


def _inspect_function(node: Node, loc: Optional[Location]) -> Term:
    params = _field(node, "Function", "parameters")
    if not validate_array(params):
        raise HinaError.malformed_node("Function", "parameters must be an array")
    names = tuple(
        _identifier(p, "Function", f"parameter {i}") for i, p in enumerate(params)
    )
    return FunctionExpr(
        kind="Function",
        parameters=names,
        body=_node_field(node, "Function", "value"),
        location=loc,
    )


def _inspect_call(node: Node, loc: Optional[Location]) -> Term:
    args = _field(node, "Call", "arguments")
    if not validate_array(args):
        raise HinaError.malformed_node("Call", "arguments must be an array")
    for i, arg in enumerate(args):
        if not validate_object(arg):
            raise HinaError.malformed_node("Call", f"argument {i} must be a node")
    return CallExpr(
        kind="Call",
        callee=_node_field(node, "Call", "callee"),
        arguments=tuple(args),
        location=loc,
    )


INSPECTORS: Dict[str, Callable[[Node, Optional[Location]], Term]] = {
    "Str": _inspect_str,
    "Int": _inspect_int,
    "Bool": _inspect_bool,
    "Print": _inspect_print,
    "Binary": _inspect_binary,
    "Let": _inspect_let,
    "Var": _inspect_var,
    "Tuple": _inspect_tuple,
    "First": _inspect_projection,
    "Second": _inspect_projection,
    "If": _inspect_if,
    "Function": _inspect_function,
    "Call": _inspect_call,
}


def inspect_node(node: Any) -> Term:
    """
    Turn one raw node into its typed term.

    Only the node itself is checked; its sub-nodes are kept raw and are
    inspected when (and if) the evaluator reaches them.

    Raises:
        HinaError: UnknownKind, MissingField or MalformedNode
    """
    if not validate_object(node):
        raise HinaError(ErrorCodes.MALFORMED_NODE, f"Node must be an object, got {type(node).__name__}")

    loc = read_location(node)
    kind = node.get("kind")
    inspector = INSPECTORS.get(kind) if validate_string(kind) else None
    if inspector is None:
        raise HinaError.unknown_kind(kind).with_location(loc)
    try:
        return inspector(node, loc)
    except HinaError as e:
        raise e.with_location(loc)


#==============================================================================
# Whole-Tree Validation
#==============================================================================

class ValidationState:
    """State tracking during validation"""

    def __init__(self) -> None:
        self.errors: list[ValidationError] = []
        self.path: list[str] = []

    def push_path(self, segment: str) -> None:
        """Push a path segment onto the validation path"""
        self.path.append(segment)

    def pop_path(self) -> None:
        """Pop the last path segment from the validation path"""
        self.path.pop()

    def current_path(self) -> str:
        """Get the current validation path as a dot-separated string"""
        return ".".join(self.path) if self.path else "$"

    def add_error(self, code: ErrorCodes, message: str) -> None:
        """Add a validation error to the state"""
        self.errors.append(ValidationError(
            path=self.current_path(),
            code=code,
            message=message,
        ))


def _children(term: Term) -> List[Tuple[str, Node]]:
    """Raw sub-nodes of an inspected term, labelled with their field names"""
    if isinstance(term, PrintExpr):
        return [("value", term.value)]
    if isinstance(term, BinaryExpr):
        return [("lhs", term.lhs), ("rhs", term.rhs)]
    if isinstance(term, LetExpr):
        return [("value", term.value), ("next", term.next)]
    if isinstance(term, IfExpr):
        return [("condition", term.condition), ("then", term.then), ("otherwise", term.otherwise)]
    if isinstance(term, CallExpr):
        return [("callee", term.callee)] + [
            (f"arguments[{i}]", arg) for i, arg in enumerate(term.arguments)
        ]
    if isinstance(term, ProjectionExpr):
        return [("value", term.value)]
    if isinstance(term, TupleExpr):
        return [("first", term.first), ("second", term.second)]
    if isinstance(term, FunctionExpr):
        return [("value", term.body)]
    return []


def validate_node(state: ValidationState, node: Any) -> bool:
    """Validate a node and, recursively, everything below it"""
    try:
        term = inspect_node(node)
    except HinaError as e:
        state.add_error(e.code, str(e))
        return False

    ok = True
    if isinstance(term, BinaryExpr) and term.op not in OPERATORS:
        state.add_error(ErrorCodes.UNKNOWN_OPERATOR, f"Unknown binary operator: {term.op!r}")
        ok = False

    for name, child in _children(term):
        state.push_path(name)
        ok = validate_node(state, child) and ok
        state.pop_path()
    return ok


def validate_tree(tree: Any) -> ValidationResult:
    """
    Validate a whole program tree.

    Evaluation never needs this pass; it exists so a program can be checked
    without running it. All errors are collected, each with the JSON path of
    the offending node.
    """
    state = ValidationState()

    expression = tree.get("expression") if validate_object(tree) else None
    if not validate_object(expression) or not expression:
        state.add_error(ErrorCodes.EMPTY_PROGRAM, "Tree has no expression")
        return invalid_result(state.errors)

    state.push_path("expression")
    validate_node(state, expression)
    state.pop_path()

    if state.errors:
        return invalid_result(state.errors)
    return valid_result(tree)
