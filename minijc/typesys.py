# --- Type System Definitions ---

class Type:
    """Base class for MiniJ types. Equality is structural."""

    def __eq__(self, other):
        return type(self) is type(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(type(self).__name__)

    def __repr__(self):
        return f"{type(self).__name__}()"


class VoidType(Type):
    def __str__(self):
        return "void"


class IntegerType(Type):
    def __str__(self):
        return "int"


class BooleanType(Type):
    def __str__(self):
        return "boolean"


class StringType(Type):
    def __str__(self):
        return "string"


class ArrayType(Type):
    def __init__(self, element_type):
        self.element_type = element_type

    def __eq__(self, other):
        return isinstance(other, ArrayType) and self.element_type == other.element_type

    def __hash__(self):
        return hash(("array", self.element_type))

    def __repr__(self):
        return f"ArrayType({self.element_type!r})"

    def __str__(self):
        return f"{self.element_type}[]"


class RecordType(Type):
    def __init__(self, name):
        self.name = name

    def __eq__(self, other):
        return isinstance(other, RecordType) and self.name == other.name

    def __hash__(self):
        return hash(("record", self.name))

    def __repr__(self):
        return f"RecordType({self.name!r})"

    def __str__(self):
        return self.name


T_VOID = VoidType()
T_INT = IntegerType()
T_BOOL = BooleanType()
T_STRING = StringType()

PRIMITIVE_TYPES = {
    'void': T_VOID,
    'int': T_INT,
    'boolean': T_BOOL,
    'string': T_STRING,
}

# --- Operator Rules ---

ARITHMETIC_OPS = {'+', '-', '*', '/', '%'}
RELATIONAL_OPS = {'==', '!=', '<', '<=', '>', '>='}
EQUALITY_OPS = {'==', '!='}
LOGICAL_OPS = {'&&', '||'}

# Operands must already have the same type; the table maps (type, op) to the result.
BINARY_OP_RULES = {}
for _op in ARITHMETIC_OPS:
    BINARY_OP_RULES[(T_INT, _op)] = T_INT
for _op in RELATIONAL_OPS:
    BINARY_OP_RULES[(T_INT, _op)] = T_BOOL
    BINARY_OP_RULES[(T_STRING, _op)] = T_BOOL
for _op in LOGICAL_OPS | EQUALITY_OPS:
    BINARY_OP_RULES[(T_BOOL, _op)] = T_BOOL
BINARY_OP_RULES[(T_STRING, '+')] = T_STRING
del _op


def binary_result_type(operand_type, op):
    """Result type of `operand_type op operand_type`, or None if the operator does not apply."""
    return BINARY_OP_RULES.get((operand_type, op))


def types_are_compatible(expected, actual):
    """Two types are compatible when they are equal and neither is void.

    Void marks an expression that already failed to type, so it must never
    satisfy a requirement, not even another void.
    """
    if isinstance(expected, VoidType) or isinstance(actual, VoidType):
        return False
    return expected == actual
