import os
import sys
from collections import namedtuple

from .diagnostics import Diagnostics, DiagnosticKind as Kind
from .nodes import is_lvalue
from .symbols import SymbolTable
from .typesys import (
    ArrayType, RecordType, VoidType, T_BOOL, T_INT, T_STRING, T_VOID,
    binary_result_type, types_are_compatible,
)

AnalysisResult = namedtuple("AnalysisResult", ["is_valid", "unit", "diagnostics"])


class TypeChecker:
    """Walks a Unit once, annotating every expression with its type.

    Errors never stop the walk: each one is recorded in ``self.diagnostics``
    and the offending expression is typed as void so that analysis can go on.
    """

    def __init__(self, filename=None, stream=None):
        self.filename = filename
        self.symbols = SymbolTable()
        self.diagnostics = Diagnostics(filename, stream)
        self.current_function = None
        self.type_log = []

    # --- Bookkeeping ---

    def add_error(self, kind, node, message):
        self.diagnostics.add(kind, message, getattr(node, "lineno", None))

    def log_type(self, lineno, kind, name, type, label="type"):
        self.type_log.append(f"File {self.filename} Line {lineno}: {kind} {name} has {label} {type}")

    @property
    def errors(self):
        return self.diagnostics.items

    def analyze(self, unit):
        self.visit(unit)
        return not self.diagnostics

    def visit(self, node):
        method_name = f'visit_{node.__class__.__name__}'
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node):
        raise TypeError(f"No visitor for node type {node.__class__.__name__}")

    def set_type(self, node, type):
        node.type = type
        return type

    def check_declared_type(self, decl, kind):
        """Report an InvalidType error for a declaration and return False if its type is unusable."""
        if self.symbols.is_valid_type(decl.type):
            return True
        if isinstance(decl.type, VoidType):
            self.add_error(Kind.INVALID_TYPE, decl,
                           f"{kind.capitalize()} '{decl.identifier}' cannot be of type 'void'")
        else:
            self.add_error(Kind.INVALID_TYPE, decl,
                           f"Unknown type '{decl.type}' for {kind} '{decl.identifier}'")
        return False

    # --- Driver ---

    def visit_Unit(self, node):
        for struct in node.structs:
            if not self.symbols.declare_struct(struct):
                self.add_error(Kind.DUPLICATE_DECLARATION, struct,
                               f"Re-definition of struct '{struct.identifier}'")
        # Field types are checked once every struct name is known, so
        # structs may refer to each other (or themselves) in any order.
        for struct in self.symbols.structs.values():
            self.visit_Struct(struct)

        for decl in node.globals:
            self.visit_Declaration(decl)

        for function in node.functions:
            self.register_function(function)
        for function in node.functions:
            self.visit_Function(function)

        return not self.diagnostics

    def visit_Struct(self, node):
        field_names = set()
        for field in node.fields:
            name = field.identifier
            if name in field_names:
                self.add_error(Kind.DUPLICATE_DECLARATION, field,
                               f"Duplicate member '{name}' in struct '{node.identifier}'")
                continue
            field_names.add(name)
            self.check_declared_type(field, "member")

    def visit_Declaration(self, node):
        is_local = self.symbols.in_local_scope
        kind = "local variable" if is_local else "global variable"
        name = node.identifier

        scope = self.symbols.scopes[-1] if is_local else self.symbols.globals
        if name in scope:
            self.add_error(Kind.DUPLICATE_DECLARATION, node,
                           f"'{name}' is already defined in this scope (as a {kind})")
            return
        if not self.check_declared_type(node, kind):
            return

        if is_local:
            self.symbols.declare_local(name, node)
        else:
            self.symbols.declare_global(node)
        self.log_type(node.lineno, kind, name, node.type)

    def register_function(self, node):
        name = node.identifier
        if not self.symbols.is_valid_type(node.return_type, allow_void=True):
            self.add_error(Kind.INVALID_TYPE, node,
                           f"Unknown return type '{node.return_type}' for function '{name}'")

        if not self.symbols.declare_function(node):
            self.add_error(Kind.DUPLICATE_DECLARATION, node,
                           f"Duplicate definition for function '{name}'")
            return

        if name == "main":
            if node.parameters:
                self.add_error(Kind.SIGNATURE_VIOLATION, node,
                               "Function 'main' must not have parameters")
            if node.return_type != T_INT:
                self.add_error(Kind.SIGNATURE_VIOLATION, node,
                               f"Function 'main' must return 'int', not '{node.return_type}'")

        self.log_type(node.lineno, "function", name, node.return_type, label="return type")

    def visit_Function(self, node):
        self.current_function = node
        self.symbols.push_scope()

        for param in node.parameters:
            self.visit_Parameter(param, node)

        for stmt in node.statements:
            self.visit(stmt)

        self.symbols.pop_scope()
        self.current_function = None

    def visit_Parameter(self, node, function):
        name = node.identifier
        if name in self.symbols.scopes[-1]:
            self.add_error(Kind.DUPLICATE_DECLARATION, node,
                           f"Duplicate parameter name '{name}' in function '{function.identifier}'")
            return
        if not self.check_declared_type(node, "parameter"):
            return
        self.symbols.declare_local(name, node)
        self.log_type(node.lineno, "parameter", name, node.type)

    # --- Statements ---

    def visit_DeclarationStatement(self, node):
        self.visit_Declaration(node.declaration)

    def visit_AssignmentStatement(self, node):
        left_type = self.visit(node.left)
        right_type = self.visit(node.right)

        if not is_lvalue(node.left):
            self.add_error(Kind.NOT_ASSIGNABLE, node,
                           "Left-hand side of assignment must be a variable, field access, or array access")
            return

        if not types_are_compatible(left_type, right_type):
            self.add_error(Kind.TYPE_MISMATCH, node,
                           f"Type mismatch: Cannot assign type '{right_type}' to '{left_type}'")

    def visit_ExpressionStatement(self, node):
        expr_type = self.visit(node.expression)
        self.type_log.append(f"File {self.filename} Line {node.lineno}: expression has type {expr_type}")

    def visit_Block(self, node):
        self.symbols.push_scope()
        for stmt in node.statements:
            self.visit(stmt)
        self.symbols.pop_scope()

    def check_condition(self, node, statement):
        cond_type = self.visit(node.condition)
        if cond_type != T_BOOL:
            self.add_error(Kind.TYPE_MISMATCH, node.condition,
                           f"Type mismatch: Condition of '{statement}' must be of type 'boolean', not '{cond_type}'")

    def visit_IfStatement(self, node):
        self.check_condition(node, "if")
        self.visit(node.then_block)
        if node.else_block is not None:
            self.visit(node.else_block)

    def visit_WhileStatement(self, node):
        self.check_condition(node, "while")
        self.visit(node.body)

    def visit_ReturnStatement(self, node):
        function = self.current_function
        if function is None:
            if node.expression is not None:
                self.visit(node.expression)
            self.add_error(Kind.RETURN_OUTSIDE_FUNCTION, node, "Return statement outside of a function")
            return

        target_type = function.return_type
        name = function.identifier

        if node.expression is not None:
            expr_type = self.visit(node.expression)
            if isinstance(target_type, VoidType):
                self.add_error(Kind.VOID_RETURN_WITH_VALUE, node,
                               f"Function '{name}' is 'void' and should not return a value")
            elif not types_are_compatible(target_type, expr_type):
                self.add_error(Kind.TYPE_MISMATCH, node,
                               f"Type mismatch: Function '{name}' must return '{target_type}', not '{expr_type}'")
        elif not isinstance(target_type, VoidType):
            self.add_error(Kind.MISSING_RETURN_VALUE, node,
                           f"Function '{name}' must return a value of type '{target_type}'")

    # --- Expressions ---

    def visit_IntegerConstant(self, node):
        return self.set_type(node, T_INT)

    def visit_StringConstant(self, node):
        return self.set_type(node, T_STRING)

    def visit_BooleanConstant(self, node):
        return self.set_type(node, T_BOOL)

    def visit_VariableAccess(self, node):
        decl = self.symbols.lookup(node.identifier)
        if decl is None:
            self.add_error(Kind.UNDEFINED_SYMBOL, node, f"Undeclared identifier '{node.identifier}'")
            return self.set_type(node, T_VOID)
        return self.set_type(node, decl.type)

    def visit_CallExpression(self, node):
        func_name = node.identifier
        function = self.symbols.lookup_function(func_name)

        arg_types = [self.visit(arg) for arg in node.arguments]

        if function is None:
            self.add_error(Kind.UNDEFINED_SYMBOL, node, f"Call to undeclared function '{func_name}'")
            return self.set_type(node, T_VOID)

        params = function.parameters
        if len(arg_types) != len(params):
            self.add_error(Kind.ARITY_MISMATCH, node,
                           f"Wrong number of arguments for function '{func_name}': "
                           f"expected {len(params)}, received {len(arg_types)}")

        for i, (arg, arg_type, param) in enumerate(zip(node.arguments, arg_types, params)):
            if not types_are_compatible(param.type, arg_type):
                self.add_error(Kind.TYPE_MISMATCH, arg if arg.lineno is not None else node,
                               f"Type mismatch for parameter {i + 1} in call to '{func_name}': "
                               f"expected '{param.type}', got '{arg_type}'")

        return self.set_type(node, function.return_type)

    def visit_UnaryExpression(self, node):
        op = node.op
        expr_type = self.visit(node.expression)

        if op == '!':
            if expr_type != T_BOOL:
                self.add_error(Kind.TYPE_MISMATCH, node,
                               f"Invalid operand: Cannot apply logical NOT '!' to type '{expr_type}'")
                return self.set_type(node, T_VOID)
            return self.set_type(node, T_BOOL)

        if op == '-':
            if expr_type != T_INT:
                self.add_error(Kind.TYPE_MISMATCH, node,
                               f"Invalid operand: Cannot apply unary '-' to type '{expr_type}'")
                return self.set_type(node, T_VOID)
            return self.set_type(node, T_INT)

        if op == '++' or op == '--':
            if expr_type != T_INT:
                self.add_error(Kind.TYPE_MISMATCH, node,
                               f"Invalid operand: Cannot apply '{op}' to type '{expr_type}'")
                return self.set_type(node, T_VOID)
            if not is_lvalue(node.expression):
                self.add_error(Kind.TYPE_MISMATCH, node,
                               f"Invalid operand: '{op}' requires a variable, field access, or array access")
                return self.set_type(node, T_VOID)
            return self.set_type(node, T_INT)

        raise TypeError(f"Unknown unary operator '{op}'")

    def visit_BinaryExpression(self, node):
        left_type = self.visit(node.left)
        right_type = self.visit(node.right)
        op = node.op

        result_type = None
        if left_type == right_type:
            result_type = binary_result_type(left_type, op)

        if result_type is None:
            self.add_error(Kind.TYPE_MISMATCH, node,
                           f"Invalid operands: Cannot apply operator '{op}' to types '{left_type}' and '{right_type}'")
            return self.set_type(node, T_VOID)

        return self.set_type(node, result_type)

    def visit_FieldAccess(self, node):
        base_type = self.visit(node.base)

        if not isinstance(base_type, RecordType):
            self.add_error(Kind.TYPE_MISMATCH, node,
                           f"Cannot access member '{node.field}' of non-struct type '{base_type}'")
            return self.set_type(node, T_VOID)

        struct = self.symbols.lookup_struct(base_type.name)
        if struct is None:
            self.add_error(Kind.UNDEFINED_SYMBOL, node, f"Using unknown struct type '{base_type.name}'")
            return self.set_type(node, T_VOID)

        field = struct.find_field(node.field)
        if field is None:
            self.add_error(Kind.UNDEFINED_SYMBOL, node,
                           f"Struct '{struct.identifier}' has no member named '{node.field}'")
            return self.set_type(node, T_VOID)

        return self.set_type(node, field.type)

    def visit_ArrayAccess(self, node):
        array_type = self.visit(node.base)
        index_type = self.visit(node.index)
        valid = True

        if not isinstance(array_type, ArrayType):
            self.add_error(Kind.TYPE_MISMATCH, node,
                           f"Cannot apply array index to non-array type '{array_type}'")
            valid = False

        if index_type != T_INT:
            self.add_error(Kind.TYPE_MISMATCH, node.index if node.index.lineno is not None else node,
                           f"Array index must be an integer, not '{index_type}'")
            valid = False

        if not valid:
            return self.set_type(node, T_VOID)
        return self.set_type(node, array_type.element_type)


def analyze(unit, filename=None, stream=None):
    """Type-check ``unit`` with a fresh checker and return an AnalysisResult."""
    if filename is None:
        filename = getattr(unit, "filename", None)
    checker = TypeChecker(filename, stream)
    is_valid = checker.analyze(unit)
    return AnalysisResult(is_valid, unit, list(checker.diagnostics))


def run_type_checker(filename, ast):
    checker = TypeChecker(filename)

    if not checker.analyze(ast):
        print("Type checking failed due to errors.", file=sys.stderr)
        return False

    output_filename = os.path.splitext(filename)[0] + ".types"
    try:
        with open(output_filename, 'w', encoding='utf-8') as f:
            f.write("\n".join(checker.type_log))
            f.write("\n")
        print(f"Successfully generated type file at: {output_filename}")
        return True
    except IOError:
        sys.stderr.write(f"Error: Could not write to output file '{output_filename}'.\n")
        return False
