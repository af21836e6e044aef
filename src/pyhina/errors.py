# Hina Error Types
# Error domain for node validation and evaluation errors

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pyhina.types import Location


#==============================================================================
# Error Codes
#==============================================================================

class ErrorCodes(str, Enum):
    """Error code constants for Hina errors"""

    # Node validation errors
    UNKNOWN_KIND = "UnknownKind"
    MISSING_FIELD = "MissingField"
    MALFORMED_NODE = "MalformedNode"

    # Evaluation errors
    TYPE_MISMATCH = "TypeMismatch"
    UNDECLARED_VARIABLE = "UndeclaredVariable"
    ARITY_MISMATCH = "ArityMismatch"
    DUPLICATE_PARAMETER = "DuplicateParameter"
    UNKNOWN_OPERATOR = "UnknownOperator"
    DIVISION_BY_ZERO = "DivisionByZero"

    # Program entry errors
    EMPTY_PROGRAM = "EmptyProgram"

    # Termination errors
    RECURSION_LIMIT = "RecursionLimit"
    NON_TERMINATION = "NonTermination"


#==============================================================================
# Hina Error Class
#==============================================================================

class HinaError(Exception):
    """Base exception class for all Hina errors"""

    def __init__(self, code: ErrorCodes, message: str, location: Optional[Location] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is not None:
            return f"{self.message} at {self.location}"
        return self.message

    def with_location(self, location: Optional[Location]) -> "HinaError":
        """Attach a location unless one is already set"""
        if self.location is None and location is not None:
            self.location = location
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly representation"""
        result: dict[str, Any] = {
            "kind": "error",
            "code": self.code.value,
            "message": self.message,
        }
        if self.location is not None:
            result["location"] = {
                "start": self.location.start,
                "end": self.location.end,
                "filename": self.location.filename,
            }
        return result

    #---------------------------------------------------------------------------
    # Static factory methods for common errors
    #---------------------------------------------------------------------------

    @staticmethod
    def unknown_kind(kind: Any) -> "HinaError":
        """Create an UnknownKind error"""
        return HinaError(ErrorCodes.UNKNOWN_KIND, f"Unknown term: {kind!r}")

    @staticmethod
    def missing_field(kind: str, field: str) -> "HinaError":
        """Create a MissingField error"""
        return HinaError(
            ErrorCodes.MISSING_FIELD,
            f"'{kind}' node is missing required field '{field}'",
        )

    @staticmethod
    def malformed_node(kind: str, message: str) -> "HinaError":
        """Create a MalformedNode error"""
        return HinaError(ErrorCodes.MALFORMED_NODE, f"Malformed '{kind}' node: {message}")

    @staticmethod
    def type_mismatch(context: str, expected: str, got: str) -> "HinaError":
        """Create a TypeMismatch error"""
        return HinaError(
            ErrorCodes.TYPE_MISMATCH,
            f"Type mismatch ({context}): expected {expected}, got {got}",
        )

    @staticmethod
    def undeclared_variable(name: str) -> "HinaError":
        """Create an UndeclaredVariable error"""
        return HinaError(
            ErrorCodes.UNDECLARED_VARIABLE,
            f"Calling an undeclared variable: {name}",
        )

    @staticmethod
    def arity_mismatch(expected: int, got: int) -> "HinaError":
        """Create an ArityMismatch error"""
        return HinaError(
            ErrorCodes.ARITY_MISMATCH,
            f"Arity mismatch: expected {expected} arguments, received {got}",
        )

    @staticmethod
    def duplicate_parameter(name: str) -> "HinaError":
        """Create a DuplicateParameter error"""
        return HinaError(ErrorCodes.DUPLICATE_PARAMETER, f"Duplicate parameter: {name}")

    @staticmethod
    def unknown_operator(op: Any) -> "HinaError":
        """Create an UnknownOperator error"""
        return HinaError(ErrorCodes.UNKNOWN_OPERATOR, f"Unknown binary operator: {op!r}")

    @staticmethod
    def division_by_zero(op: str) -> "HinaError":
        """Create a DivisionByZero error"""
        return HinaError(ErrorCodes.DIVISION_BY_ZERO, f"Division by zero in '{op}'")

    @staticmethod
    def empty_program() -> "HinaError":
        """Create an EmptyProgram error"""
        return HinaError(ErrorCodes.EMPTY_PROGRAM, "Tree has no expression")

    @staticmethod
    def recursion_limit(max_depth: int) -> "HinaError":
        """Create a RecursionLimit error"""
        return HinaError(
            ErrorCodes.RECURSION_LIMIT,
            f"Maximum evaluation depth of {max_depth} exceeded",
        )

    @staticmethod
    def stack_exhausted(max_depth: int) -> "HinaError":
        """Create a RecursionLimit error for an interpreter stack overflow"""
        return HinaError(
            ErrorCodes.RECURSION_LIMIT,
            f"Interpreter stack exhausted before the evaluation depth limit of {max_depth}",
        )

    @staticmethod
    def non_termination(max_steps: int) -> "HinaError":
        """Create a NonTermination error"""
        return HinaError(
            ErrorCodes.NON_TERMINATION,
            f"Expression evaluation did not terminate within {max_steps} steps",
        )


#==============================================================================
# Validation Error Types
#==============================================================================

class ValidationError:
    """A single validation error"""

    def __init__(self, path: str, code: ErrorCodes, message: str):
        self.path = path
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"ValidationError({self.path!r}, {self.code.value}, {self.message!r})"


class ValidationResult:
    """Result of a validation operation"""

    def __init__(self, valid: bool, errors: list[ValidationError], value: Any | None = None):
        self.valid = valid
        self.errors = errors
        self.value = value


def valid_result(value: Any) -> ValidationResult:
    """Create a successful validation result"""
    return ValidationResult(valid=True, errors=[], value=value)


def invalid_result(errors: list[ValidationError]) -> ValidationResult:
    """Create a failed validation result"""
    return ValidationResult(valid=False, errors=errors)
