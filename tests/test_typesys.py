from minijc.typesys import (
    ArrayType, BooleanType, IntegerType, RecordType, StringType, VoidType,
    T_BOOL, T_INT, T_STRING, T_VOID, binary_result_type, types_are_compatible,
)


def test_structural_equality():
    assert IntegerType() == T_INT
    assert ArrayType(ArrayType(T_INT)) == ArrayType(ArrayType(IntegerType()))
    assert ArrayType(T_INT) != ArrayType(T_BOOL)
    assert RecordType("Point") == RecordType("Point")
    assert RecordType("Point") != RecordType("Line")
    assert T_INT != T_BOOL
    assert ArrayType(T_INT) != T_INT
    assert RecordType("int") != T_INT


def test_types_are_hashable():
    seen = {ArrayType(T_INT), ArrayType(IntegerType()), RecordType("P"), RecordType("P"), VoidType()}
    assert len(seen) == 3


def test_str_uses_source_syntax():
    assert str(T_VOID) == "void"
    assert str(BooleanType()) == "boolean"
    assert str(StringType()) == "string"
    assert str(ArrayType(ArrayType(RecordType("Point")))) == "Point[][]"


def test_void_is_never_compatible():
    assert types_are_compatible(T_INT, T_INT)
    assert types_are_compatible(ArrayType(T_STRING), ArrayType(T_STRING))
    assert not types_are_compatible(T_VOID, T_VOID)
    assert not types_are_compatible(T_INT, T_VOID)
    assert not types_are_compatible(T_VOID, T_INT)
    assert not types_are_compatible(T_INT, T_STRING)


def test_operator_table():
    assert binary_result_type(T_INT, "/") == T_INT
    assert binary_result_type(T_INT, ">=") == T_BOOL
    assert binary_result_type(T_BOOL, "||") == T_BOOL
    assert binary_result_type(T_BOOL, "<") is None
    assert binary_result_type(T_STRING, "+") == T_STRING
    assert binary_result_type(T_STRING, "*") is None
    assert binary_result_type(T_VOID, "==") is None
    assert binary_result_type(ArrayType(T_INT), "==") is None
