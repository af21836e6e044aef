"""
Hina Binary Operators
Arithmetic, comparison, equality and boolean operators

Every operator receives two already-evaluated operands. Apart from Add,
which concatenates as soon as one side is a string, operators require both
operands to have the expected type.
"""

from __future__ import annotations

from typing import Callable, Dict

from pyhina.errors import HinaError
from pyhina.types import (
    Value,
    bool_val,
    format_value,
    int_val,
    is_bool,
    is_int,
    is_str,
    str_val,
    values_equal,
)


OperatorImpl = Callable[[Value, Value], Value]


#==============================================================================
# Helper Functions
#==============================================================================

def expect_ints(op: str, a: Value, b: Value) -> tuple[int, int]:
    """Extract both int payloads or raise TypeMismatch"""
    if is_int(a) and is_int(b):
        return a.value, b.value
    raise HinaError.type_mismatch(op, "Int and Int", f"{a.kind} and {b.kind}")


def expect_bools(op: str, a: Value, b: Value) -> tuple[bool, bool]:
    """Extract both bool payloads or raise TypeMismatch"""
    if is_bool(a) and is_bool(b):
        return a.value, b.value
    raise HinaError.type_mismatch(op, "Bool and Bool", f"{a.kind} and {b.kind}")


def truncated_divmod(a: int, b: int) -> tuple[int, int]:
    """
    Integer division rounding toward zero; the remainder takes the sign of
    the dividend. Python's // and % floor instead, so they differ whenever
    the operands have opposite signs.
    """
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - b * q


#==============================================================================
# Arithmetic Operators
#==============================================================================

def _add_impl(a: Value, b: Value) -> Value:
    """Addition: string concatenation if either side is a string"""
    if is_str(a) or is_str(b):
        return str_val(format_value(a) + format_value(b))
    if is_int(a) and is_int(b):
        return int_val(a.value + b.value)
    raise HinaError.type_mismatch("Add", "Int and Int, or a Str", f"{a.kind} and {b.kind}")


def _sub_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Sub", a, b)
    return int_val(x - y)


def _mul_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Mul", a, b)
    return int_val(x * y)


def _div_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Div", a, b)
    if y == 0:
        raise HinaError.division_by_zero("Div")
    return int_val(truncated_divmod(x, y)[0])


def _rem_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Rem", a, b)
    if y == 0:
        raise HinaError.division_by_zero("Rem")
    return int_val(truncated_divmod(x, y)[1])


#==============================================================================
# Equality and Comparison Operators
#==============================================================================

def _eq_impl(a: Value, b: Value) -> Value:
    return bool_val(values_equal(a, b))


def _neq_impl(a: Value, b: Value) -> Value:
    return bool_val(not values_equal(a, b))


def _lt_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Lt", a, b)
    return bool_val(x < y)


def _gt_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Gt", a, b)
    return bool_val(x > y)


def _lte_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Lte", a, b)
    return bool_val(x <= y)


def _gte_impl(a: Value, b: Value) -> Value:
    x, y = expect_ints("Gte", a, b)
    return bool_val(x >= y)


#==============================================================================
# Boolean Operators
#==============================================================================

def _and_impl(a: Value, b: Value) -> Value:
    x, y = expect_bools("And", a, b)
    return bool_val(x and y)


def _or_impl(a: Value, b: Value) -> Value:
    x, y = expect_bools("Or", a, b)
    return bool_val(x or y)


#==============================================================================
# Operator Table
#==============================================================================

OPERATORS: Dict[str, OperatorImpl] = {
    "Add": _add_impl,
    "Sub": _sub_impl,
    "Mul": _mul_impl,
    "Div": _div_impl,
    "Rem": _rem_impl,
    "Eq": _eq_impl,
    "Neq": _neq_impl,
    "Lt": _lt_impl,
    "Gt": _gt_impl,
    "Lte": _lte_impl,
    "Gte": _gte_impl,
    "And": _and_impl,
    "Or": _or_impl,
}


def apply_operator(op: str, lhs: Value, rhs: Value) -> Value:
    """
    Apply a binary operator to two evaluated operands.

    Raises:
        HinaError: UnknownOperator, TypeMismatch or DivisionByZero
    """
    impl = OPERATORS.get(op)
    if impl is None:
        raise HinaError.unknown_operator(op)
    return impl(lhs, rhs)
