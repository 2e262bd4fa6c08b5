import sys
from enum import Enum


class DiagnosticKind(Enum):
    DUPLICATE_DECLARATION = "DuplicateDeclaration"
    INVALID_TYPE = "InvalidType"
    UNDEFINED_SYMBOL = "UndefinedSymbol"
    TYPE_MISMATCH = "TypeMismatch"
    NOT_ASSIGNABLE = "NotAssignable"
    ARITY_MISMATCH = "ArityMismatch"
    SIGNATURE_VIOLATION = "SignatureViolation"
    RETURN_OUTSIDE_FUNCTION = "ReturnOutsideFunction"
    MISSING_RETURN_VALUE = "MissingReturnValue"
    VOID_RETURN_WITH_VALUE = "VoidReturnWithValue"


class Diagnostic:
    def __init__(self, kind, message, lineno=None):
        self.kind = kind
        self.message = message
        self.lineno = lineno

    def format(self, filename=None):
        location = f"Type checking error in file {filename or '<unit>'}"
        if self.lineno is not None:
            location += f" line {self.lineno}"
        return f"{location}: {self.message}"

    def __eq__(self, other):
        if not isinstance(other, Diagnostic):
            return NotImplemented
        return (self.kind, self.message, self.lineno) == (other.kind, other.message, other.lineno)

    def __hash__(self):
        return hash((self.kind, self.message, self.lineno))

    def __repr__(self):
        return f"Diagnostic({self.kind.value}, {self.message!r}, line={self.lineno})"


class Diagnostics:
    """Collects semantic errors and mirrors each one to stderr as it is recorded."""

    def __init__(self, filename=None, stream=None):
        self.filename = filename
        self.stream = stream
        self.items = []

    def add(self, kind, message, lineno=None):
        diag = Diagnostic(kind, message, lineno)
        self.items.append(diag)
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(f"{diag.format(self.filename)}\n")
        return diag

    def of_kind(self, kind):
        return [d for d in self.items if d.kind is kind]

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __bool__(self):
        return bool(self.items)
